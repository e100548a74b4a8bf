"""
Boolean conditions for cfif, cfelseif and cfloop.
"""

from __future__ import annotations

from .evaluator import ConditionEvaluator, EvaluationError, evaluate_condition_string, truthy
from .lexer import ConditionLexer
from .model import Condition, ConditionType, ComparisonOperator
from .parser import ConditionParser, parse_condition

__all__ = [
    "Condition",
    "ConditionType",
    "ComparisonOperator",
    "ConditionLexer",
    "ConditionParser",
    "ConditionEvaluator",
    "EvaluationError",
    "evaluate_condition_string",
    "parse_condition",
    "truthy",
]
