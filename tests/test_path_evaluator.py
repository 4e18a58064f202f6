"""
Tests for path evaluation over extracted structured data.
"""

from pricepatrol_parser.layers.path_evaluator import evaluate_path, stringify_value


TEST_DATA = {
    "simple": "value",
    "nested": {"property": "nested value"},
    "array": ["item1", "item2", "item3"],
    "complex": {
        "items": [
            {"name": "item1", "price": 10},
            {"name": "item2", "price": 20},
        ]
    },
    "property:with:colons": "special value",
}


class TestEvaluatePath:
    """Path lookups against nested data."""

    def test_simple_property(self):
        assert evaluate_path(TEST_DATA, "simple") == "value"

    def test_nested_property(self):
        assert evaluate_path(TEST_DATA, "nested.property") == "nested value"

    def test_array_items(self):
        assert evaluate_path(TEST_DATA, "array[0]") == "item1"
        assert evaluate_path(TEST_DATA, "array[2]") == "item3"

    def test_complex_nested_array_items(self):
        assert evaluate_path(TEST_DATA, "complex.items[0].name") == "item1"
        # numeric leaves come back as strings
        assert evaluate_path(TEST_DATA, "complex.items[1].price") == "20"

    def test_multiple_array_indices(self):
        data = [[[{"value": "deep"}]]]
        assert evaluate_path(data, "[0][0][0].value") == "deep"

    def test_property_with_colons(self):
        assert evaluate_path(TEST_DATA, "property:with:colons") == "special value"

    def test_dotted_numeric_index(self):
        """JSON-LD and data layer recipes index lists with plain segments."""
        data = {"dataLayer": [{"product": {"name": "TCL 65 Inch TV"}}]}
        assert evaluate_path(data, "dataLayer.0.product.name") == "TCL 65 Inch TV"
        assert evaluate_path([{"name": "first"}], "0.name") == "first"

    def test_non_canonical_index_misses(self):
        assert evaluate_path(["a", "b"], "01") is None

    def test_missing_paths(self):
        assert evaluate_path(TEST_DATA, "nonexistent") is None
        assert evaluate_path(TEST_DATA, "nested.missing") is None
        assert evaluate_path(TEST_DATA, "array[10]") is None
        assert evaluate_path(TEST_DATA, "simple.deeper") is None

    def test_index_into_non_sequence(self):
        assert evaluate_path(TEST_DATA, "nested[0]") is None
        assert evaluate_path(TEST_DATA, "simple[0]") is None

    def test_bracket_without_numeric_index(self):
        assert evaluate_path(TEST_DATA, "array[x]") is None

    def test_invalid_input(self):
        assert evaluate_path(None, "path") is None
        assert evaluate_path(TEST_DATA, "") is None
        assert evaluate_path(TEST_DATA, None) is None

    def test_internal_errors_become_none(self):
        class Exploding(dict):
            def get(self, *args, **kwargs):
                raise RuntimeError("boom")

        assert evaluate_path(Exploding(a=1), "a") is None

    def test_null_leaf(self):
        assert evaluate_path({"a": None}, "a") is None
        assert evaluate_path({"a": [None]}, "a[0]") is None


class TestStringifyValue:
    """String forms of leaf values."""

    def test_integral_float_drops_fraction(self):
        assert stringify_value(1399.0) == "1399"

    def test_fractional_float(self):
        assert stringify_value(19.99) == "19.99"

    def test_booleans_are_lowercase(self):
        assert stringify_value(True) == "true"
        assert stringify_value(False) == "false"

    def test_containers(self):
        assert stringify_value({"b": 1}) == '{"b":1}'
        assert stringify_value(["a", "b"]) == "a,b"

    def test_lists_flatten_with_empty_nulls(self):
        assert stringify_value([["a", None], "b", 2.0]) == "a,,b,2"

    def test_list_leaf_via_path(self):
        assert evaluate_path({"image": ["a.jpg", "b.jpg"]}, "image") == "a.jpg,b.jpg"

    def test_large_and_small_floats_use_exponent_form(self):
        assert stringify_value(1e21) == "1e+21"
        assert stringify_value(1e20) == "100000000000000000000"
        assert stringify_value(1.5e-7) == "1.5e-7"
        assert stringify_value(0.00001) == "0.00001"

    def test_negative_and_zero(self):
        assert stringify_value(-2.5) == "-2.5"
        assert stringify_value(-0.0) == "0"

    def test_via_path(self):
        assert evaluate_path({"inStock": True}, "inStock") == "true"
