"""
Data model of boolean conditions.

Conditions are the expressions accepted by cfif, cfelseif and the condition
form of cfloop: comparisons of variables and literals joined with
AND / OR / NOT.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ConditionType(Enum):
    """Kinds of condition nodes."""
    LITERAL = "literal"
    REFERENCE = "reference"
    COMPARISON = "comparison"
    AND = "and"
    OR = "or"
    NOT = "not"
    GROUP = "group"  # explicit parentheses


class ComparisonOperator(Enum):
    """Normalised comparison operators."""
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    CONTAINS = "CONTAINS"


@dataclass(frozen=True)
class Condition(ABC):
    """Base class of all condition nodes."""

    @abstractmethod
    def get_type(self) -> ConditionType:
        """Returns the condition type."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class LiteralCondition(Condition):
    """
    String, number or boolean literal.
    """
    value: Any

    def get_type(self) -> ConditionType:
        return ConditionType.LITERAL

    def _to_string(self) -> str:
        if isinstance(self.value, str):
            return '"' + self.value.replace('"', '""') + '"'
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


@dataclass(frozen=True)
class ReferenceCondition(Condition):
    """
    Variable reference: user.name

    Evaluates to the variable's value; unbound references evaluate to None.
    """
    path: str

    def get_type(self) -> ConditionType:
        return ConditionType.REFERENCE

    def _to_string(self) -> str:
        return self.path


@dataclass(frozen=True)
class ComparisonCondition(Condition):
    """
    Comparison: left OP right
    """
    left: Condition
    operator: ComparisonOperator
    right: Condition

    def get_type(self) -> ConditionType:
        return ConditionType.COMPARISON

    def _to_string(self) -> str:
        return f"{self.left} {self.operator.value} {self.right}"


@dataclass(frozen=True)
class GroupCondition(Condition):
    """
    Condition in parentheses: (condition)
    """
    condition: Condition

    def get_type(self) -> ConditionType:
        return ConditionType.GROUP

    def _to_string(self) -> str:
        return f"({self.condition})"


@dataclass(frozen=True)
class NotCondition(Condition):
    """
    Negation: NOT condition
    """
    condition: Condition

    def get_type(self) -> ConditionType:
        return ConditionType.NOT

    def _to_string(self) -> str:
        return f"NOT {self.condition}"


@dataclass(frozen=True)
class BinaryCondition(Condition):
    """
    Binary logical operation: left AND right, left OR right
    """
    left: Condition
    right: Condition
    operator: ConditionType  # AND or OR

    def get_type(self) -> ConditionType:
        return self.operator

    def _to_string(self) -> str:
        op_str = "AND" if self.operator == ConditionType.AND else "OR"
        return f"{self.left} {op_str} {self.right}"
