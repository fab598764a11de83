"""Tests for condition tree evaluation."""

import copy

import pytest

from workflow.conditions import (
    MISSING,
    Composite,
    Leaf,
    MalformedConditionError,
    evaluate,
    parse_condition,
    resolve_field,
)


def leaf(field, operator, value):
    return {"field": field, "operator": operator, "value": value}


@pytest.mark.unit
class TestResolveField:
    def test_top_level_key(self):
        assert resolve_field({"amount": 5}, "amount") == 5

    def test_nested_path(self):
        assert resolve_field({"customer": {"region": "US"}}, "customer.region") == "US"

    def test_list_index(self):
        assert resolve_field({"items": [{"sku": "A"}, {"sku": "B"}]}, "items.1.sku") == "B"

    def test_missing_key(self):
        assert resolve_field({"a": 1}, "b") is MISSING

    def test_path_through_scalar(self):
        assert resolve_field({"a": 1}, "a.b") is MISSING

    def test_index_out_of_range(self):
        assert resolve_field({"items": []}, "items.0") is MISSING

    def test_non_ascii_digit_segment_is_missing(self):
        assert resolve_field({"items": ["a", "b"]}, "items.²") is MISSING
        assert evaluate(leaf("items.²", "equals", "a"), {"items": ["a"]}) is False

    def test_explicit_none_is_not_missing(self):
        assert resolve_field({"a": None}, "a") is None


@pytest.mark.unit
class TestLeafOperators:
    def test_equals(self):
        assert evaluate(leaf("status", "equals", "paid"), {"status": "paid"}) is True
        assert evaluate(leaf("status", "equals", "paid"), {"status": "open"}) is False

    def test_equals_no_type_coercion(self):
        assert evaluate(leaf("count", "equals", "5"), {"count": 5}) is False

    def test_equals_keeps_booleans_apart_from_numbers(self):
        assert evaluate(leaf("flag", "equals", True), {"flag": 1}) is False
        assert evaluate(leaf("flag", "equals", 0), {"flag": False}) is False
        assert evaluate(leaf("flag", "not_equals", True), {"flag": 1}) is True
        assert evaluate(leaf("flag", "equals", True), {"flag": True}) is True

    def test_contains_renders_booleans_and_null_as_json_words(self):
        assert evaluate(leaf("flag", "contains", "true"), {"flag": True}) is True
        assert evaluate(leaf("flag", "contains", "True"), {"flag": True}) is False
        assert evaluate(leaf("note", "contains", "null"), {"note": None}) is True

    def test_not_equals(self):
        assert evaluate(leaf("status", "not_equals", "paid"), {"status": "open"}) is True

    def test_greater_than(self):
        assert evaluate(leaf("amount", "greater_than", 100), {"amount": 150}) is True
        assert evaluate(leaf("amount", "greater_than", 100), {"amount": 100}) is False

    def test_less_than(self):
        assert evaluate(leaf("amount", "less_than", 100), {"amount": 50}) is True
        assert evaluate(leaf("amount", "less_than", 100), {"amount": 150}) is False

    def test_ordering_with_incomparable_types_is_false(self):
        assert evaluate(leaf("amount", "greater_than", 100), {"amount": "lots"}) is False
        assert evaluate(leaf("amount", "less_than", 100), {"amount": None}) is False

    def test_contains_substring(self):
        assert evaluate(leaf("message", "contains", "error"), {"message": "fatal error here"}) is True

    def test_contains_list_member(self):
        assert evaluate(leaf("tags", "contains", "urgent"), {"tags": ["urgent", "billing"]}) is True
        assert evaluate(leaf("tags", "contains", "low"), {"tags": ["urgent"]}) is False

    def test_contains_unhashable_in_dict_is_false(self):
        assert evaluate(leaf("meta", "contains", ["x"]), {"meta": {"x": 1}}) is False

    def test_not_contains(self):
        assert evaluate(leaf("message", "not_contains", "error"), {"message": "all good"}) is True
        assert evaluate(leaf("message", "not_contains", "error"), {"message": "an error"}) is False


@pytest.mark.unit
class TestMissingFields:
    def test_equals_missing_is_false(self):
        assert evaluate(leaf("absent", "equals", "x"), {}) is False

    def test_not_equals_missing_is_true(self):
        assert evaluate(leaf("absent", "not_equals", "x"), {}) is True

    def test_greater_than_missing_is_false(self):
        assert evaluate(leaf("absent", "greater_than", 1), {}) is False

    def test_less_than_missing_is_false(self):
        assert evaluate(leaf("absent", "less_than", 1), {}) is False

    def test_contains_missing_is_false(self):
        assert evaluate(leaf("absent", "contains", "x"), {}) is False

    def test_not_contains_missing_is_true(self):
        assert evaluate(leaf("absent", "not_contains", "x"), {}) is True

    def test_non_dict_payload(self):
        assert evaluate(leaf("amount", "greater_than", 1), "not a dict") is False


@pytest.mark.unit
class TestComposites:
    def test_and_requires_all(self):
        tree = {
            "operator": "AND",
            "rules": [
                leaf("amount", "greater_than", 100),
                leaf("region", "equals", "US"),
            ],
        }
        assert evaluate(tree, {"amount": 150, "region": "US"}) is True
        assert evaluate(tree, {"amount": 150, "region": "EU"}) is False

    def test_or_requires_any(self):
        tree = {
            "operator": "OR",
            "rules": [
                leaf("priority", "equals", "high"),
                leaf("amount", "greater_than", 1000),
            ],
        }
        assert evaluate(tree, {"priority": "low", "amount": 5000}) is True
        assert evaluate(tree, {"priority": "low", "amount": 10}) is False

    def test_nested(self):
        tree = {
            "operator": "AND",
            "rules": [
                leaf("environment", "equals", "production"),
                {
                    "operator": "OR",
                    "rules": [
                        leaf("errors", "greater_than", 10),
                        leaf("message", "contains", "fatal"),
                    ],
                },
            ],
        }
        assert evaluate(tree, {"environment": "production", "errors": 0, "message": "fatal crash"}) is True
        assert evaluate(tree, {"environment": "staging", "errors": 50}) is False

    def test_empty_and_is_true(self):
        assert evaluate({"operator": "AND", "rules": []}, {}) is True

    def test_empty_or_is_false(self):
        assert evaluate({"operator": "OR", "rules": []}, {}) is False

    def test_composite_without_rules_key(self):
        assert evaluate({"operator": "AND"}, {}) is True


@pytest.mark.unit
class TestMalformedTrees:
    @pytest.mark.parametrize("tree", [
        "not a tree",
        {"operator": "AND", "rules": "nope"},
        {"operator": "equals", "value": 1},
        {"field": "a", "operator": "matches", "value": 1},
        {"operator": "OR", "rules": [{"field": "", "operator": "equals", "value": 1}]},
    ])
    def test_malformed_evaluates_false(self, tree):
        assert evaluate(tree, {"a": 1}) is False

    def test_parse_raises(self):
        with pytest.raises(MalformedConditionError):
            parse_condition({"operator": "XOR", "rules": []})

    def test_parse_builds_typed_tree(self):
        node = parse_condition({"operator": "OR", "rules": [leaf("a", "equals", 1)]})
        assert isinstance(node, Composite)
        assert isinstance(node.rules[0], Leaf)
        assert node.rules[0].field == "a"


@pytest.mark.unit
class TestPurity:
    def test_inputs_not_mutated(self):
        tree = {"operator": "AND", "rules": [leaf("items.0.qty", "greater_than", 1)]}
        data = {"items": [{"qty": 3}]}
        tree_before, data_before = copy.deepcopy(tree), copy.deepcopy(data)

        evaluate(tree, data)

        assert tree == tree_before
        assert data == data_before

    def test_deterministic(self):
        tree = leaf("message", "contains", "x")
        data = {"message": "xyz"}
        assert {evaluate(tree, data) for _ in range(5)} == {True}
