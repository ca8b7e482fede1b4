import pytest

from staticmetrics.util import (
    get_label_struct_name,
    get_metric_vec_type,
    is_local_metric,
    to_non_local_metric_type,
)


@pytest.mark.parametrize(
    "name, expected",
    [("LocalIntCounter", True), ("LocalHistogram", True), ("IntCounter", False), ("Counter", False)],
)
def test_is_local_metric(name, expected):
    assert is_local_metric(name) is expected


def test_to_non_local_strips_prefix():
    assert to_non_local_metric_type("LocalIntCounter") == "IntCounter"
    assert to_non_local_metric_type("LocalHistogram") == "Histogram"


def test_to_non_local_keeps_plain_type():
    assert to_non_local_metric_type("Counter") == "Counter"


def test_non_local_result_is_never_local():
    for name in ["LocalIntCounter", "LocalHistogram", "Gauge"]:
        assert not is_local_metric(to_non_local_metric_type(name))


def test_metric_vec_type():
    assert get_metric_vec_type("IntCounter") == "IntCounterVec"
    assert get_metric_vec_type("Histogram") == "HistogramVec"


def test_vec_type_of_local_metric():
    assert get_metric_vec_type(to_non_local_metric_type("LocalHistogram")) == "HistogramVec"


def test_label_struct_name_first_label_is_struct_name():
    assert get_label_struct_name("Lhrs", 0) == "Lhrs"


def test_label_struct_name_later_labels():
    assert get_label_struct_name("Lhrs", 1) == "Lhrs2"
    assert get_label_struct_name("Lhrs", 2) == "Lhrs3"


def test_label_struct_names_are_distinct():
    names = {get_label_struct_name("Lhrs", i) for i in range(10)}
    assert len(names) == 10


def test_label_struct_name_negative_index():
    with pytest.raises(ValueError):
        get_label_struct_name("Lhrs", -1)