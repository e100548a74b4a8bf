"""
Evaluator of boolean conditions.

Walks a condition tree and computes its value against the current render
scope.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Tuple, cast

from ..values import UNBOUND, lookup
from .model import (
    BinaryCondition,
    ComparisonCondition,
    ComparisonOperator,
    Condition,
    ConditionType,
    GroupCondition,
    LiteralCondition,
    NotCondition,
    ReferenceCondition,
)

_TRUE_STRINGS = {"true", "yes"}
_FALSE_STRINGS = {"false", "no", ""}


class EvaluationError(Exception):
    """Internal error while evaluating a condition (unknown node type)."""
    pass


def to_number(value: Any) -> Optional[float]:
    """Returns the numeric value of numbers and numeric strings, None otherwise."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def truthy(value: Any) -> bool:
    """
    Boolean value of a template value.

    Rules:
    - bool as is; None and unbound are false
    - numbers are true when non-zero
    - strings "true"/"yes" are true, "false"/"no"/"" are false,
      numeric strings are true when non-zero, any other string is true
    - containers are true when non-empty
    """
    if value is None or value is UNBOUND:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        number = to_number(lowered)
        if number is not None:
            return number != 0
        return True
    return bool(value)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ConditionEvaluator:
    """
    Evaluator of conditions.

    Takes a condition tree and the render scope, returns a boolean.
    """

    def __init__(self, scope: Mapping):
        """
        Args:
            scope: Variables visible to the condition
        """
        self.scope = scope

    def evaluate(self, condition: Condition) -> bool:
        """
        Computes the boolean value of a condition.

        Raises:
            EvaluationError: On an unknown condition type
        """
        condition_type = condition.get_type()

        if condition_type == ConditionType.AND:
            return self._evaluate_and(cast(BinaryCondition, condition))
        elif condition_type == ConditionType.OR:
            return self._evaluate_or(cast(BinaryCondition, condition))
        elif condition_type == ConditionType.NOT:
            return not self.evaluate(cast(NotCondition, condition).condition)
        elif condition_type == ConditionType.GROUP:
            return self.evaluate(cast(GroupCondition, condition).condition)
        elif condition_type == ConditionType.COMPARISON:
            return self._evaluate_comparison(cast(ComparisonCondition, condition))
        elif condition_type in (ConditionType.LITERAL, ConditionType.REFERENCE):
            return truthy(self.value(condition))
        else:
            raise EvaluationError(f"Unknown condition type: {condition_type}")

    def value(self, condition: Condition) -> Any:
        """
        Computes the operand value of a condition node.

        Literals yield their value, references the looked-up variable (None when
        unbound), everything else its boolean value.
        """
        condition_type = condition.get_type()
        if condition_type == ConditionType.LITERAL:
            return cast(LiteralCondition, condition).value
        if condition_type == ConditionType.REFERENCE:
            resolved = lookup(self.scope, cast(ReferenceCondition, condition).path)
            return None if resolved is UNBOUND else resolved
        if condition_type == ConditionType.GROUP:
            return self.value(cast(GroupCondition, condition).condition)
        return self.evaluate(condition)

    def _evaluate_and(self, condition: BinaryCondition) -> bool:
        # Short-circuit evaluation
        if not self.evaluate(condition.left):
            return False
        return self.evaluate(condition.right)

    def _evaluate_or(self, condition: BinaryCondition) -> bool:
        if self.evaluate(condition.left):
            return True
        return self.evaluate(condition.right)

    def _evaluate_comparison(self, condition: ComparisonCondition) -> bool:
        """
        Compares numerically when both sides are numbers (or numeric strings),
        otherwise as case-insensitive strings.
        """
        left = self.value(condition.left)
        right = self.value(condition.right)
        operator = condition.operator

        if operator == ComparisonOperator.CONTAINS:
            return _as_text(right).lower() in _as_text(left).lower()

        left_key, right_key = _comparable(left, right)

        if operator == ComparisonOperator.EQ:
            return left_key == right_key
        if operator == ComparisonOperator.NEQ:
            return left_key != right_key
        if operator == ComparisonOperator.GT:
            return left_key > right_key
        if operator == ComparisonOperator.GTE:
            return left_key >= right_key
        if operator == ComparisonOperator.LT:
            return left_key < right_key
        if operator == ComparisonOperator.LTE:
            return left_key <= right_key
        raise EvaluationError(f"Unknown comparison operator: {operator}")


def _comparable(left: Any, right: Any) -> Tuple[Any, Any]:
    left_number = to_number(left)
    right_number = to_number(right)
    if left_number is not None and right_number is not None:
        return left_number, right_number
    return _as_text(left).lower(), _as_text(right).lower()


def evaluate_condition_string(condition_str: str, scope: Mapping) -> bool:
    """
    Convenience function evaluating a condition string.

    Args:
        condition_str: Condition text
        scope: Variables visible to the condition

    Returns:
        Result of the condition

    Raises:
        ConditionSyntaxError: On a syntax error
    """
    from .parser import parse_condition

    return ConditionEvaluator(scope).evaluate(parse_condition(condition_str))
