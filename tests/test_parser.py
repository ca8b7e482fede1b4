import pytest

from staticmetrics.parser import (
    MetricDef,
    MetricEnumDef,
    MetricLabelDef,
    MetricValueDef,
    MetricValueDefList,
    ParseError,
    parse_macro_body,
)

SOURCE = """
    pub label_enum Methods {
        post,
        get,
        put,
        delete,
    }

    pub label_enum MethodsWithName {
        post: "post_name",
        get: "get_name",
        put,
        delete,
    }

    pub struct SimpleCounterVec: Counter {
        "method" => Methods,
        "product" => {
            foo,
            bar,
        },
    }

    pub struct ComplexCounterVec: Counter {
        "method" => MethodsWithName,
        "product" => {
            foo,
            bar: "bar_name",
        },
    }

    struct NonPubCounterVec: Counter {
        "method" => Methods,
    }
"""


@pytest.fixture
def body():
    return parse_macro_body(SOURCE)


@pytest.fixture
def enums(body):
    return {item.enum_name: item for item in body.items if isinstance(item, MetricEnumDef)}


def test_items_in_order(body):
    kinds = [type(item) for item in body.items]
    assert kinds == [MetricEnumDef, MetricEnumDef, MetricDef, MetricDef, MetricDef]


def test_short_value_defs_use_name_as_value(enums):
    methods = enums["Methods"].definitions
    assert methods.names() == ["post", "get", "put", "delete"]
    assert methods.values() == methods.names()


def test_full_value_defs(enums):
    defs = enums["MethodsWithName"].definitions
    assert defs.names() == ["post", "get", "put", "delete"]
    assert defs.values() == ["post_name", "get_name", "put", "delete"]


def test_metric_struct(body):
    metric = body.items[3]
    assert metric.struct_name == "ComplexCounterVec"
    assert metric.metric_type == "Counter"
    assert [label.label_key for label in metric.labels] == ["method", "product"]
    assert metric.labels[1].values.values() == ["foo", "bar_name"]


def test_visibility(body, enums):
    assert enums["Methods"].is_public
    assert body.items[2].is_public
    assert body.items[4].visibility == ""
    assert not body.items[4].is_public


def test_restricted_visibility_is_not_public():
    body = parse_macro_body("pub(crate) label_enum E { a }")
    assert body.items[0].visibility == "pub(crate)"
    assert not body.items[0].is_public


def test_enum_reference_resolution(body, enums):
    label = body.items[2].labels[0]
    assert label.enum_name() == "Methods"
    assert label.value_def_list(enums) == enums["Methods"].definitions


def test_inline_label_has_no_enum(body, enums):
    label = body.items[2].labels[1]
    assert label.enum_name() is None
    assert label.value_def_list(enums).names() == ["foo", "bar"]


def test_undefined_enum_reference():
    body = parse_macro_body('struct S: Counter { "m" => Missing }')
    with pytest.raises(ParseError, match="Missing"):
        body.items[0].labels[0].value_def_list({})


def test_value_def_list_iteration():
    defs = MetricValueDefList((MetricValueDef("a", "x"), MetricValueDef("b", "b")))
    assert len(defs) == 2
    assert [d.value for d in defs] == defs.values()


def test_label_def_requires_exactly_one_arm():
    with pytest.raises(ValueError):
        MetricLabelDef("m")


def test_empty_input():
    assert parse_macro_body("  // nothing here\n").items == ()


def test_comments_are_ignored():
    body = parse_macro_body('/* block */ label_enum E { a, // one\n b }')
    assert body.items[0].definitions.names() == ["a", "b"]


def test_string_escapes():
    body = parse_macro_body(r'label_enum E { a: "x\"y\\z\n" }')
    assert body.items[0].definitions.values() == ['x"y\\z\n']


def test_missing_label_enum_keyword():
    with pytest.raises(ParseError, match="Expected `label_enum`"):
        parse_macro_body("pub enum Foo { a }")


def test_unterminated_string():
    with pytest.raises(ParseError):
        parse_macro_body('struct S: Counter { "method => { a } }')


def test_missing_comma_between_values():
    with pytest.raises(ParseError):
        parse_macro_body("label_enum E { a b }")


def test_keyword_not_allowed_as_name():
    with pytest.raises(ParseError):
        parse_macro_body("label_enum E { type }")


def test_missing_metric_type():
    with pytest.raises(ParseError):
        parse_macro_body('struct S { "m" => { a } }')


def test_truncated_input():
    with pytest.raises(ParseError):
        parse_macro_body('struct S: Counter { "m" => { a }')


def test_error_reports_position():
    with pytest.raises(ParseError) as info:
        parse_macro_body("label_enum E {\n  a b }")
    assert info.value.line == 2