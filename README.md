# staticmetrics

Prometheus-style metrics for Python: counters and gauges, vectors of them keyed
by label values, a registry that gathers everything into sorted metric
families, and a parser for a small language that declares label enums and
metric label structures.

## Installation

```
pip install staticmetrics
```

To run the tests:

```
pip install "staticmetrics[test]"
pytest
```

## Modules

- `staticmetrics.timer` — a coarse millisecond clock. `now_millis()` returns
  milliseconds since a fixed anchor and never goes backwards;
  `recent_millis()` returns the last value it produced; `duration_to_millis()`
  converts a `timedelta` or a number of seconds to whole milliseconds;
  `ensure_updater()` starts, once, a daemon thread that refreshes the clock
  every 200 ms.
- `staticmetrics.value` — the data model (`LabelPair`, `Metric`,
  `MetricFamily`, `MetricType`, `Desc`), the thread-safe single value `Value`
  exported as a counter or a gauge (`ValueType`), and `make_label_pairs`.
  `Desc` validates metric and label names and rejects an empty help string.
  Errors are `MetricsError` and its subclass `InconsistentCardinalityError`.
- `staticmetrics.vec` — `MetricVec`, which creates child metrics on first use
  of a combination of label values: `with_label_values`, `with_`,
  `get_metric_with_label_values`, `get_metric_with`, `remove_label_values`,
  `remove`, `reset` and `collect`.
- `staticmetrics.registry` — `Registry` with `register`, `unregister` and
  `gather`, an optional name `prefix` and optional common `labels`; a
  process-wide `default_registry()` with module-level `register`,
  `unregister` and `gather`. Registering an equal collector twice raises
  `AlreadyRegisteredError`.
- `staticmetrics.parser` — `parse_macro_body` for the definition language;
  malformed input raises `ParseError`.
- `staticmetrics.util` — naming helpers: `is_local_metric`,
  `to_non_local_metric_type`, `get_metric_vec_type`, `get_label_struct_name`.

## Example

```python
from staticmetrics.registry import Registry
from staticmetrics.value import Desc, MetricType, Value, ValueType
from staticmetrics.vec import MetricVec


def new_counter(desc, label_values):
    return Value(desc, ValueType.COUNTER, 0.0, label_values)


requests = MetricVec(
    Desc("http_requests_total", "Number of HTTP requests.", ["method", "product"]),
    MetricType.COUNTER,
    new_counter,
)
requests.with_label_values(["post", "foo"]).inc()
requests.with_({"method": "get", "product": "bar"}).inc_by(4)

registry = Registry(prefix="app", labels={"region": "eu"})
registry.register(requests)
for family in registry.gather():
    for metric in family.metrics:
        print(family.name, metric.labels, metric.counter)
```

`gather()` drops families without metrics, returns families sorted by name and
sorts the metrics of each family by their label values.

## Definition language

```python
from staticmetrics.parser import parse_macro_body

body = parse_macro_body("""
    pub label_enum Methods {
        post,
        get: "get_name",
    }

    pub struct HttpRequests: Counter {
        "method" => Methods,
        "product" => {
            foo,
            bar: "bar_name",
        },
    }
""")
```

`body.items` holds `MetricEnumDef` and `MetricDef` objects in source order. A
label of a `MetricDef` is a `MetricLabelDef`; `enum_name()` gives the
referenced enum, if any, and `value_def_list(enum_definitions)` gives its
values, raising `ParseError` for an undefined enum.

## What this package does not do

It parses static metric definitions but does not turn them into label trees of
ready-made child metrics, and it has no thread-local or auto-flushing metrics.
It has no histogram type, no text or binary exposition encoder, and no HTTP
endpoint or push client: gathered `MetricFamily` objects are plain data for
the caller to export.