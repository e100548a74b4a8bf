"""
Recursive descent parser for boolean conditions.

Builds a condition tree from the token sequence, honouring operator
precedence and parentheses.

Grammar:
expression → or_expression
or_expression  → and_expression (("OR" | "||") and_expression)*
and_expression → not_expression (("AND" | "&&") not_expression)*
not_expression → ("NOT" | "!") not_expression | comparison
comparison     → operand (operator operand)?
operator       → EQ | IS | IS NOT | NEQ | GT | GTE | GE | LT | LTE | LE | CONTAINS
               | "==" | "!=" | "<>" | ">" | ">=" | "<" | "<="
operand        → STRING | NUMBER | TRUE | FALSE | YES | NO | reference | "(" expression ")"
"""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Optional

from ..errors import ConditionSyntaxError
from .lexer import ConditionLexer, Token
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

_KEYWORD_OPERATORS: Dict[str, ComparisonOperator] = {
    "EQ": ComparisonOperator.EQ,
    "IS": ComparisonOperator.EQ,
    "NEQ": ComparisonOperator.NEQ,
    "GT": ComparisonOperator.GT,
    "GTE": ComparisonOperator.GTE,
    "GE": ComparisonOperator.GTE,
    "LT": ComparisonOperator.LT,
    "LTE": ComparisonOperator.LTE,
    "LE": ComparisonOperator.LTE,
    "CONTAINS": ComparisonOperator.CONTAINS,
}

_SYMBOL_OPERATORS: Dict[str, ComparisonOperator] = {
    "==": ComparisonOperator.EQ,
    "!=": ComparisonOperator.NEQ,
    "<>": ComparisonOperator.NEQ,
    ">": ComparisonOperator.GT,
    ">=": ComparisonOperator.GTE,
    "<": ComparisonOperator.LT,
    "<=": ComparisonOperator.LTE,
}

_BOOLEAN_KEYWORDS = {"TRUE": True, "YES": True, "FALSE": False, "NO": False}


class ConditionParser:
    """
    Recursive descent parser for conditions.
    """

    def __init__(self):
        self.lexer = ConditionLexer()
        self._tokens: List[Token] = []
        self._position = 0

    def parse(self, condition_str: str) -> Condition:
        """
        Parses a condition string into a condition tree.

        Args:
            condition_str: Condition text

        Returns:
            Root of the condition tree

        Raises:
            ConditionSyntaxError: On a syntax error
        """
        self._tokens = self.lexer.tokenize(condition_str)
        self._position = 0

        if len(self._tokens) == 1:
            raise ConditionSyntaxError("Empty condition", 0)

        result = self._parse_expression()

        if not self._is_at_end():
            current = self._current_token()
            raise ConditionSyntaxError(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_expression(self) -> Condition:
        return self._parse_or_expression()

    def _parse_or_expression(self) -> Condition:
        """OR has the lowest precedence."""
        left = self._parse_and_expression()

        while self._match_keyword("OR") or self._match_operator("||"):
            right = self._parse_and_expression()
            left = BinaryCondition(left=left, right=right, operator=ConditionType.OR)

        return left

    def _parse_and_expression(self) -> Condition:
        left = self._parse_not_expression()

        while self._match_keyword("AND") or self._match_operator("&&"):
            right = self._parse_not_expression()
            left = BinaryCondition(left=left, right=right, operator=ConditionType.AND)

        return left

    def _parse_not_expression(self) -> Condition:
        if self._match_keyword("NOT") or self._match_operator("!"):
            condition = self._parse_not_expression()  # right-associative
            return NotCondition(condition=condition)

        return self._parse_comparison()

    def _parse_comparison(self) -> Condition:
        left = self._parse_operand()

        operator = self._match_comparison_operator()
        if operator is None:
            return left

        right = self._parse_operand()
        return ComparisonCondition(left=left, operator=operator, right=right)

    def _match_comparison_operator(self) -> Optional[ComparisonOperator]:
        current = self._current_token()

        if current.type == 'KEYWORD' and current.value in _KEYWORD_OPERATORS:
            self._advance()
            operator = _KEYWORD_OPERATORS[current.value]
            # "IS NOT" is inequality
            if current.value == "IS" and self._match_keyword("NOT"):
                return ComparisonOperator.NEQ
            return operator

        if current.type == 'OPERATOR' and current.value in _SYMBOL_OPERATORS:
            self._advance()
            return _SYMBOL_OPERATORS[current.value]

        return None

    def _parse_operand(self) -> Condition:
        """Parses literals, references and parenthesised groups."""
        if self._match_symbol("("):
            expr = self._parse_expression()
            if not self._match_symbol(")"):
                raise ConditionSyntaxError("Expected ')' after grouped expression", self._current_position())
            return GroupCondition(condition=expr)

        current = self._current_token()

        if current.type == 'STRING':
            self._advance()
            return LiteralCondition(value=current.value)

        if current.type == 'NUMBER':
            self._advance()
            number = float(current.value) if "." in current.value else int(current.value)
            return LiteralCondition(value=number)

        if current.type == 'KEYWORD' and current.value in _BOOLEAN_KEYWORDS:
            self._advance()
            return LiteralCondition(value=_BOOLEAN_KEYWORDS[current.value])

        if current.type in ('IDENTIFIER', 'REFERENCE'):
            self._advance()
            return ReferenceCondition(path=current.value)

        if current.type == 'EOF':
            raise ConditionSyntaxError("Unexpected end of expression", current.position)
        raise ConditionSyntaxError(f"Unexpected token '{current.value}'", current.position)

    # Token helpers

    def _current_token(self) -> Token:
        if self._position >= len(self._tokens):
            return Token(type='EOF', value='', position=len(self._tokens))
        return self._tokens[self._position]

    def _current_position(self) -> int:
        return self._current_token().position

    def _is_at_end(self) -> bool:
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        current = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return current

    def _match_keyword(self, keyword: str) -> bool:
        current = self._current_token()
        if current.type == 'KEYWORD' and current.value == keyword:
            self._advance()
            return True
        return False

    def _match_operator(self, operator: str) -> bool:
        current = self._current_token()
        if current.type == 'OPERATOR' and current.value == operator:
            self._advance()
            return True
        return False

    def _match_symbol(self, symbol: str) -> bool:
        current = self._current_token()
        if current.type == 'SYMBOL' and current.value == symbol:
            self._advance()
            return True
        return False


@lru_cache(maxsize=512)
def parse_condition(condition_str: str) -> Condition:
    """
    Parses a condition with memoisation.

    Condition trees are immutable, so templates rendered many times reuse them.
    """
    return ConditionParser().parse(condition_str)
