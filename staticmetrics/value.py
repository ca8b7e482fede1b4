"""Metric data model and the simple counter/gauge value."""

from __future__ import annotations

import enum
import re
import threading
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence


class MetricsError(Exception):
    """Base error for all metric operations."""


class InconsistentCardinalityError(MetricsError):
    """Raised when the number of label values does not match the labels."""

    def __init__(self, expect: int, got: int) -> None:
        self.expect = expect
        self.got = got
        super().__init__(
            f"inconsistent label cardinality, expect {expect} label values, but got {got}"
        )


class MetricType(enum.IntEnum):
    """Kinds of metric families in the exposition model."""

    COUNTER = 0
    GAUGE = 1
    SUMMARY = 2
    UNTYPED = 3
    HISTOGRAM = 4


@dataclass(frozen=True, order=True)
class LabelPair:
    """A label name with its value; ordered by name, then value."""

    name: str
    value: str = ""


@dataclass
class Metric:
    """One sample of a metric family."""

    labels: list[LabelPair] = field(default_factory=list)
    counter: float | None = None
    gauge: float | None = None
    timestamp_ms: int = 0


@dataclass
class MetricFamily:
    """All samples sharing one name."""

    name: str
    help: str = ""
    metric_type: MetricType = MetricType.UNTYPED
    metrics: list[Metric] = field(default_factory=list)


_METRIC_NAME = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
_LABEL_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK64 = (1 << 64) - 1


def _fnv64a(parts: Iterable[str]) -> int:
    h = _FNV_OFFSET
    for part in parts:
        for byte in part.encode() + b"\xff":
            h ^= byte
            h = (h * _FNV_PRIME) & _MASK64
    return h


@dataclass
class Desc:
    """Descriptor of a metric: name, help, and its constant and variable labels.

    ``id`` identifies the name with its constant label values; ``dim_hash``
    identifies the help string with the full set of label names.
    """

    fq_name: str
    help: str
    variable_labels: Sequence[str] = ()
    const_labels: Mapping[str, str] = field(default_factory=dict)
    const_label_pairs: list[LabelPair] = field(init=False)
    id: int = field(init=False)
    dim_hash: int = field(init=False)

    def __post_init__(self) -> None:
        self.variable_labels = tuple(self.variable_labels)
        self.const_labels = dict(self.const_labels)
        if not self.fq_name:
            raise MetricsError("empty metric name")
        if not _METRIC_NAME.match(self.fq_name):
            raise MetricsError(f"'{self.fq_name}' is not a valid metric name")
        if not self.help:
            raise MetricsError("empty help string")

        seen: set[str] = set()
        for name in [*self.const_labels, *self.variable_labels]:
            if not _LABEL_NAME.match(name):
                raise MetricsError(f"'{name}' is not a valid label name")
            if name in seen:
                raise MetricsError(f"duplicate label names in metric '{self.fq_name}': {name}")
            seen.add(name)

        self.const_label_pairs = sorted(
            LabelPair(name, value) for name, value in self.const_labels.items()
        )
        self.id = _fnv64a([self.fq_name, *(lp.value for lp in self.const_label_pairs)])
        self.dim_hash = _fnv64a([self.help, *sorted(seen)])


class ValueType(enum.Enum):
    """The simple metric kinds backed by :class:`Value`."""

    COUNTER = "counter"
    GAUGE = "gauge"

    def metric_type(self) -> MetricType:
        """Return the matching metric family type."""
        return MetricType.COUNTER if self is ValueType.COUNTER else MetricType.GAUGE


def make_label_pairs(desc: Desc, label_values: Sequence[str]) -> list[LabelPair]:
    """Combine ``label_values`` with the descriptor's labels, sorted by name."""
    label_values = list(label_values)
    if len(desc.variable_labels) != len(label_values):
        raise InconsistentCardinalityError(len(desc.variable_labels), len(label_values))
    if not desc.variable_labels:
        return list(desc.const_label_pairs)
    pairs = [LabelPair(name, value) for name, value in zip(desc.variable_labels, label_values)]
    pairs.extend(desc.const_label_pairs)
    return sorted(pairs)


class Value:
    """A thread-safe number exported as a counter or a gauge."""

    def __init__(
        self,
        desc: Desc,
        val_type: ValueType,
        val: float | int = 0.0,
        label_values: Sequence[str] = (),
    ) -> None:
        self.desc = desc
        self.val_type = ValueType(val_type)
        self.label_pairs = make_label_pairs(desc, label_values)
        self._val = val
        self._lock = threading.Lock()

    def get(self) -> float | int:
        with self._lock:
            return self._val

    def set(self, val: float | int) -> None:
        with self._lock:
            self._val = val

    def inc_by(self, val: float | int) -> None:
        with self._lock:
            self._val += val

    def inc(self) -> None:
        self.inc_by(1)

    def dec(self) -> None:
        self.dec_by(1)

    def dec_by(self, val: float | int) -> None:
        with self._lock:
            self._val -= val

    def metric(self) -> Metric:
        """Return the current sample with its labels."""
        val = float(self.get())
        if self.val_type is ValueType.COUNTER:
            return Metric(labels=list(self.label_pairs), counter=val)
        return Metric(labels=list(self.label_pairs), gauge=val)

    def collect(self) -> MetricFamily:
        """Return a family holding this single sample."""
        return MetricFamily(
            name=self.desc.fq_name,
            help=self.desc.help,
            metric_type=self.val_type.metric_type(),
            metrics=[self.metric()],
        )