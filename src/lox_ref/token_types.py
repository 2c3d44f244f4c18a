"""
Token Types for the Lox scanner and parser

Shared between lexer and parser to avoid circular dependencies.
"""

from typing import Any
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, auto


class TT(Enum):
    """Token Types - names match the `tokenize` output format"""

    # Punctuation
    LEFT_PAREN = auto()
    RIGHT_PAREN = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    COMMA = auto()
    DOT = auto()
    MINUS = auto()
    PLUS = auto()
    SEMICOLON = auto()
    SLASH = auto()
    STAR = auto()

    # One or two character operators
    BANG = auto()
    BANG_EQUAL = auto()
    EQUAL = auto()
    EQUAL_EQUAL = auto()
    GREATER = auto()
    GREATER_EQUAL = auto()
    LESS = auto()
    LESS_EQUAL = auto()

    # Literals
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # Special
    EOF = auto()


KEYWORDS = {
    'and': TT.AND,
    'class': TT.CLASS,
    'else': TT.ELSE,
    'false': TT.FALSE,
    'for': TT.FOR,
    'fun': TT.FUN,
    'if': TT.IF,
    'nil': TT.NIL,
    'or': TT.OR,
    'print': TT.PRINT,
    'return': TT.RETURN,
    'super': TT.SUPER,
    'this': TT.THIS,
    'true': TT.TRUE,
    'var': TT.VAR,
    'while': TT.WHILE,
}


def format_number_literal(value: float) -> str:
    """Literal column of `tokenize`: always carries a fractional part."""
    text = format(Decimal(repr(value)), "f")
    return text if "." in text else text + ".0"


@dataclass
class Tok:
    """Token with position info"""

    type: TT
    lexeme: str
    literal: Any = None
    line: int = 0
    column: int = 0

    def describe(self) -> str:
        if self.type == TT.NUMBER:
            literal = format_number_literal(self.literal)
        elif self.type == TT.STRING:
            literal = self.literal
        else:
            literal = "null"
        return f"{self.type.name} {self.lexeme} {literal}"

    def display(self) -> str:
        """Human-facing name used in parse error messages."""
        if self.type == TT.EOF:
            return "end"
        return f"'{self.lexeme}'"

    def __repr__(self):
        return f"Tok({self.type.name}, {self.lexeme!r}, {self.line}:{self.column})"


def eof_token(line: int = 0, column: int = 0) -> Tok:
    return Tok(TT.EOF, "", None, line, column)
