"""
Lexer for boolean conditions.

Splits a condition string into meaningful elements:
- Keywords (AND, OR, NOT, EQ, IS, NEQ, GT, GTE, LT, LTE, CONTAINS, TRUE, FALSE, YES, NO)
- Operators (==, !=, <>, >=, <=, >, <, &&, ||, !)
- String and number literals
- Variable references (user.name, items[0], #user.name#)
- Parentheses
- Whitespace (ignored)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

from ..errors import ConditionSyntaxError


@dataclass
class Token:
    """
    Token of a condition.

    Attributes:
        type: Token type (KEYWORD, IDENTIFIER, STRING, NUMBER, OPERATOR, SYMBOL, EOF)
        value: Token value (strings without quotes, references without '#')
        position: Position in the source string
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


class ConditionLexer:
    """
    Lexer splitting a condition string into tokens.
    """

    # Token specification: (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS = [
        (r'\s+', 'WHITESPACE', True),

        # Literals
        (r'"(?:[^"]|"")*"', 'STRING', False),
        (r"'(?:[^']|'')*'", 'STRING', False),
        (r'\d+(?:\.\d+)?', 'NUMBER', False),

        # Operators (longest first)
        (r'==|!=|<>|>=|<=|&&|\|\||[<>!]', 'OPERATOR', False),
        (r'[()]', 'SYMBOL', False),

        # References, optionally wrapped in '#'
        (r'#[A-Za-z_]\w*(?:\.[A-Za-z_]\w*|\[\d+\])*#', 'REFERENCE', False),
        (r'[A-Za-z_]\w*(?:\.[A-Za-z_]\w*|\[\d+\])*', 'IDENTIFIER', False),

        # Unknown character (error)
        (r'.', 'UNKNOWN', False),
    ]

    KEYWORDS = {
        'AND', 'OR', 'NOT',
        'EQ', 'IS', 'NEQ', 'GT', 'GTE', 'GE', 'LT', 'LTE', 'LE', 'CONTAINS',
        'TRUE', 'FALSE', 'YES', 'NO',
    }

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Splits a string into tokens.

        Args:
            text: Condition string

        Returns:
            List of tokens ending with EOF

        Raises:
            ConditionSyntaxError: On an unexpected character
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                value = match.group(0)
                if not ignore:
                    if token_type == 'UNKNOWN':
                        raise ConditionSyntaxError(f"Unexpected character '{value}'", position)
                    tokens.append(self._make_token(token_type, value, position))

                position = match.end()
                break

        tokens.append(Token(type='EOF', value='', position=position))
        return tokens

    def _make_token(self, token_type: str, value: str, position: int) -> Token:
        if token_type == 'STRING':
            quote = value[0]
            value = value[1:-1].replace(quote * 2, quote)
        elif token_type == 'REFERENCE':
            value = value[1:-1]
        elif token_type == 'IDENTIFIER' and value.upper() in self.KEYWORDS:
            token_type = 'KEYWORD'
            value = value.upper()
        return Token(type=token_type, value=value, position=position)
