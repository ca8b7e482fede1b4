"""A collector of same-named metrics that differ in their label values."""

from __future__ import annotations

import threading
from typing import Callable, Generic, Mapping, Sequence, TypeVar

from .value import Desc, InconsistentCardinalityError, MetricFamily, MetricsError, MetricType

M = TypeVar("M")


class MetricVec(Generic[M]):
    """Bundles child metrics keyed by their variable label values.

    ``new_metric(desc, label_values)`` builds a child the first time a
    combination of label values is used. Children must provide ``metric()``.
    """

    def __init__(
        self,
        desc: Desc,
        metric_type: MetricType,
        new_metric: Callable[[Desc, Sequence[str]], M],
    ) -> None:
        self.desc = desc
        self.metric_type = MetricType(metric_type)
        self._new_metric = new_metric
        self._children: dict[tuple[str, ...], M] = {}
        self._lock = threading.Lock()

    def _key_from_values(self, vals: Sequence[str]) -> tuple[str, ...]:
        key = tuple(vals)
        if len(key) != len(self.desc.variable_labels):
            raise InconsistentCardinalityError(len(self.desc.variable_labels), len(key))
        return key

    def _key_from_labels(self, labels: Mapping[str, str]) -> tuple[str, ...]:
        if len(labels) != len(self.desc.variable_labels):
            raise InconsistentCardinalityError(len(self.desc.variable_labels), len(labels))
        values = []
        for name in self.desc.variable_labels:
            try:
                values.append(labels[name])
            except KeyError:
                raise MetricsError(f"label name {name} missing in label map") from None
        return tuple(values)

    def _get_or_create(self, key: tuple[str, ...]) -> M:
        with self._lock:
            metric = self._children.get(key)
            if metric is None:
                metric = self._new_metric(self.desc, key)
                self._children[key] = metric
            return metric

    def get_metric_with_label_values(self, vals: Sequence[str]) -> M:
        """Return the child for ``vals`` (in variable label order), creating it if needed."""
        return self._get_or_create(self._key_from_values(vals))

    def get_metric_with(self, labels: Mapping[str, str]) -> M:
        """Return the child for a label-name to value mapping, creating it if needed."""
        return self._get_or_create(self._key_from_labels(labels))

    def with_label_values(self, vals: Sequence[str]) -> M:
        """Same as :meth:`get_metric_with_label_values`."""
        return self.get_metric_with_label_values(vals)

    def with_(self, labels: Mapping[str, str]) -> M:
        """Same as :meth:`get_metric_with`."""
        return self.get_metric_with(labels)

    def remove_label_values(self, vals: Sequence[str]) -> None:
        """Delete the child for ``vals``; raise if there is none."""
        key = self._key_from_values(vals)
        with self._lock:
            if self._children.pop(key, None) is None:
                raise MetricsError(f"missing label values {list(vals)!r}")

    def remove(self, labels: Mapping[str, str]) -> None:
        """Delete the child for a label mapping; raise if there is none."""
        key = self._key_from_labels(labels)
        with self._lock:
            if self._children.pop(key, None) is None:
                raise MetricsError(f"missing labels {dict(labels)!r}")

    def reset(self) -> None:
        """Delete all children."""
        with self._lock:
            self._children.clear()

    def desc(self) -> list[Desc]:
        return [self.desc]

    def collect(self) -> list[MetricFamily]:
        with self._lock:
            children = list(self._children.values())
        return [
            MetricFamily(
                name=self.desc.fq_name,
                help=self.desc.help,
                metric_type=self.metric_type,
                metrics=[child.metric() for child in children],
            )
        ]