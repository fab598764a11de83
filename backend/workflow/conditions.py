"""Condition tree evaluation against a trigger payload.

A condition tree is either a leaf comparison or an AND/OR composite:

    {"operator": "AND", "rules": [
        {"field": "amount", "operator": "greater_than", "value": 100},
        {"field": "customer.region", "operator": "equals", "value": "US"},
    ]}

Leaf operators: equals, not_equals, greater_than, less_than,
contains, not_contains.

Fields are dot paths into the payload ("items.0.sku" indexes lists).
A path that cannot be resolved yields MISSING rather than an error:
equals/not_equals compare it like any other value, while
greater_than/less_than/contains are false and not_contains is true.

Empty composites follow all()/any(): AND of no rules is true,
OR of no rules is false. A structurally malformed tree evaluates
to false as a whole.
"""

from dataclasses import dataclass, field
from typing import Any, Union

import structlog

from core.constants import ComparisonOperator, LogicalOperator

logger = structlog.get_logger(__name__)


class _Missing:
    """Sentinel for an unresolvable field path or an absent leaf value."""

    def __repr__(self):
        return "MISSING"

    def __bool__(self):
        return False


MISSING = _Missing()


class MalformedConditionError(ValueError):
    """Raised when a condition tree does not match the Leaf/Composite shape."""


@dataclass(frozen=True)
class Leaf:
    field: str
    operator: ComparisonOperator
    value: Any = MISSING


@dataclass(frozen=True)
class Composite:
    operator: LogicalOperator
    rules: tuple = field(default_factory=tuple)


Condition = Union[Leaf, Composite]


def parse_condition(raw: Any) -> Condition:
    """Build a typed condition tree from its JSON form.

    Raises:
        MalformedConditionError: If any node is not a valid leaf or composite
    """
    if isinstance(raw, (Leaf, Composite)):
        return raw
    if not isinstance(raw, dict):
        raise MalformedConditionError(f"Condition node must be an object, got {type(raw).__name__}")

    operator = raw.get("operator")
    if operator in (LogicalOperator.AND.value, LogicalOperator.OR.value):
        rules = raw.get("rules", [])
        if not isinstance(rules, list):
            raise MalformedConditionError("Composite 'rules' must be a list")
        return Composite(
            operator=LogicalOperator(operator),
            rules=tuple(parse_condition(rule) for rule in rules),
        )

    path = raw.get("field")
    if not isinstance(path, str) or not path:
        raise MalformedConditionError("Leaf condition requires a non-empty 'field'")
    try:
        comparison = ComparisonOperator(operator)
    except ValueError:
        raise MalformedConditionError(f"Unsupported condition operator: {operator!r}")
    return Leaf(field=path, operator=comparison, value=raw.get("value", MISSING))


def resolve_field(data: Any, path: str) -> Any:
    """Walk ``data`` along a dot path; MISSING when a segment does not resolve."""
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdecimal():
            index = int(part)
            if index >= len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current


def _same_value(actual: Any, target: Any) -> bool:
    # Booleans only ever equal booleans, so 1 does not match true
    if isinstance(actual, bool) != isinstance(target, bool):
        return False
    return actual == target


def _as_text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _contains(actual: Any, target: Any) -> bool:
    if actual is MISSING or target is MISSING:
        return False
    if isinstance(actual, (list, tuple, set, dict)):
        try:
            return target in actual
        except TypeError:
            return False
    return _as_text(target) in _as_text(actual)


def _compare(leaf: Leaf, actual: Any) -> bool:
    op = leaf.operator
    target = leaf.value

    if op is ComparisonOperator.EQUALS:
        return _same_value(actual, target)
    if op is ComparisonOperator.NOT_EQUALS:
        return not _same_value(actual, target)
    if op is ComparisonOperator.CONTAINS:
        return _contains(actual, target)
    if op is ComparisonOperator.NOT_CONTAINS:
        return not _contains(actual, target)

    if actual is MISSING or target is MISSING or actual is None or target is None:
        return False
    try:
        if op is ComparisonOperator.GREATER_THAN:
            return actual > target
        return actual < target
    except TypeError:
        return False


def _evaluate(node: Condition, data: Any) -> bool:
    if isinstance(node, Composite):
        results = (_evaluate(rule, data) for rule in node.rules)
        if node.operator is LogicalOperator.AND:
            return all(results)
        return any(results)
    return _compare(node, resolve_field(data, node.field))


def evaluate(tree: Any, data: Any) -> bool:
    """Evaluate a condition tree against a payload.

    Pure and deterministic. Malformed trees resolve to False.
    """
    try:
        node = parse_condition(tree)
    except MalformedConditionError as e:
        logger.warning("Malformed condition tree", error=str(e))
        return False
    return _evaluate(node, data)
