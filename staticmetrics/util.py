"""Naming helpers shared by the static metric builders."""

from __future__ import annotations

_LOCAL_PREFIX = "Local"


def is_local_metric(metric_type: str) -> bool:
    """Return True when ``metric_type`` names a thread-local metric type."""
    return metric_type.startswith(_LOCAL_PREFIX)


def to_non_local_metric_type(metric_type: str) -> str:
    """Strip a leading ``Local`` from ``metric_type``, if present."""
    if metric_type.startswith(_LOCAL_PREFIX):
        return metric_type[len(_LOCAL_PREFIX):]
    return metric_type


def get_metric_vec_type(metric_type: str) -> str:
    """Return the name of the vector type that holds ``metric_type`` children."""
    return f"{metric_type}Vec"


def get_label_struct_name(struct_name: str, label_index: int) -> str:
    """Return the name of the node for the label at ``label_index``.

    The first label uses the struct name itself; later ones append their
    one-based position.
    """
    if label_index < 0:
        raise ValueError(f"negative label index: {label_index}")
    if label_index > 0:
        return f"{struct_name}{label_index + 1}"
    return struct_name