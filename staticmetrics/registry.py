"""Registration of collectors and gathering of their metric families."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Iterable, Mapping, Protocol

from .value import Desc, LabelPair, Metric, MetricFamily, MetricsError

_MASK64 = (1 << 64) - 1


class AlreadyRegisteredError(MetricsError):
    """Raised when an equal collector or descriptor is already registered."""

    def __init__(self) -> None:
        super().__init__("duplicate metrics collector registration attempted")


class Collector(Protocol):
    """Anything that describes its metrics and can collect them."""

    def collect(self) -> list[MetricFamily]: ...


def _descs_of(collector: object) -> list[Desc]:
    described = getattr(collector, "desc")
    if isinstance(described, Desc):
        return [described]
    if callable(described):
        described = described()
    if isinstance(described, Desc):
        return [described]
    return list(described)


def _sort_key(metric: Metric) -> tuple[int, list[str], int]:
    # Label counts first (inconsistent metrics), then label values, then timestamp.
    return (len(metric.labels), [lp.value for lp in metric.labels], metric.timestamp_ms)


class Registry:
    """Holds collectors and gathers their metrics into sorted families.

    An optional ``prefix`` is prepended (with ``_``) to every family name and
    optional common ``labels`` are appended to every metric on gathering.
    """

    def __init__(
        self,
        prefix: str | None = None,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        if prefix is not None and not prefix:
            raise MetricsError("empty prefix namespace")
        self.prefix = prefix
        self.labels = dict(labels) if labels is not None else None
        self._collectors_by_id: dict[int, object] = {}
        self._dim_hashes_by_name: dict[str, int] = {}
        self._desc_ids: set[int] = set()
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"Registry ({len(self._collectors_by_id)} collectors)"

    def register(self, collector: object) -> None:
        """Add ``collector``; raise if its descriptors clash with registered ones."""
        with self._lock:
            desc_id_set: set[int] = set()
            collector_id = 0
            for desc in _descs_of(collector):
                if desc.id in self._desc_ids:
                    raise AlreadyRegisteredError()
                known = self._dim_hashes_by_name.get(desc.fq_name)
                if known is not None and known != desc.dim_hash:
                    raise MetricsError(
                        "a previously registered descriptor with the same "
                        f"fully-qualified name as {desc!r} has different label "
                        "names or a different help string"
                    )
                self._dim_hashes_by_name[desc.fq_name] = desc.dim_hash
                if desc.id in desc_id_set:
                    raise MetricsError(
                        "a duplicate descriptor within the same collector the same "
                        f"fully-qualified name: {desc.fq_name!r}"
                    )
                desc_id_set.add(desc.id)
                collector_id = (collector_id + desc.id) & _MASK64

            if collector_id in self._collectors_by_id:
                raise AlreadyRegisteredError()
            self._desc_ids.update(desc_id_set)
            self._collectors_by_id[collector_id] = collector

    def unregister(self, collector: object) -> None:
        """Remove the collector whose descriptors equal those of ``collector``."""
        with self._lock:
            descs = _descs_of(collector)
            ids: list[int] = []
            collector_id = 0
            for desc in descs:
                if desc.id not in ids:
                    ids.append(desc.id)
                    collector_id = (collector_id + desc.id) & _MASK64
            if self._collectors_by_id.pop(collector_id, None) is None:
                raise MetricsError(f"collector {descs!r} is not registered")
            self._desc_ids.difference_update(ids)

    def gather(self) -> list[MetricFamily]:
        """Collect from every collector; return families sorted by name."""
        with self._lock:
            collectors = list(self._collectors_by_id.values())

        by_name: dict[str, MetricFamily] = {}
        for collector in collectors:
            for mf in collector.collect():
                if not mf.metrics:
                    continue
                existing = by_name.get(mf.name)
                if existing is None:
                    by_name[mf.name] = replace(mf, metrics=list(mf.metrics))
                else:
                    existing.metrics.extend(mf.metrics)

        common = (
            [LabelPair(name, value) for name, value in self.labels.items()]
            if self.labels is not None
            else None
        )

        families = []
        for name in sorted(by_name):
            mf = by_name[name]
            mf.metrics.sort(key=_sort_key)
            if self.prefix is not None:
                mf.name = f"{self.prefix}_{mf.name}"
            if common is not None:
                mf.metrics = [replace(m, labels=[*m.labels, *common]) for m in mf.metrics]
            families.append(mf)
        return families


_DEFAULT_REGISTRY = Registry()


def default_registry() -> Registry:
    """Return the process-wide registry."""
    return _DEFAULT_REGISTRY


def register(collector: Iterable | object) -> None:
    """Register ``collector`` with the default registry."""
    _DEFAULT_REGISTRY.register(collector)


def unregister(collector: object) -> None:
    """Unregister ``collector`` from the default registry."""
    _DEFAULT_REGISTRY.unregister(collector)


def gather() -> list[MetricFamily]:
    """Gather all families of the default registry."""
    return _DEFAULT_REGISTRY.gather()