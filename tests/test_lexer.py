from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import pytest

from lox_ref.lexer import LexError, Lexer, tokenize
from lox_ref.token_types import TT, Tok


@dataclass(frozen=True)
class Case:
    """Unified lexer case payload."""

    name: str
    source: str
    expected: Optional[Tuple[Tuple[TT, object], ...]] = None
    expected_types: Optional[Tuple[TT, ...]] = None
    expected_lines: Optional[Tuple[Tuple[str, int], ...]] = None
    exc: Optional[type[Exception]] = None
    msg: Optional[str] = None
    err_line: Optional[int] = None


BASIC_TOKEN_CASES: List[Case] = [
    Case("number-int", "123", expected=((TT.NUMBER, 123.0),)),
    Case("number-float", "3.14", expected=((TT.NUMBER, 3.14),)),
    Case("ident-single", "x", expected=((TT.IDENTIFIER, None),)),
    Case("ident-snake", "foo_bar", expected=((TT.IDENTIFIER, None),)),
    Case("ident-keyword-prefix", "orchid", expected=((TT.IDENTIFIER, None),)),
    Case("string-double", '"hello"', expected=((TT.STRING, "hello"),)),
    Case("string-empty", '""', expected=((TT.STRING, ""),)),
    Case("bool-true", "true", expected=((TT.TRUE, None),)),
    Case("bool-false", "false", expected=((TT.FALSE, None),)),
    Case("nil-literal", "nil", expected=((TT.NIL, None),)),
]

OPERATOR_CASES: List[Case] = [
    Case("plus", "+", expected_types=(TT.PLUS,)),
    Case("minus", "-", expected_types=(TT.MINUS,)),
    Case("star", "*", expected_types=(TT.STAR,)),
    Case("slash", "/", expected_types=(TT.SLASH,)),
    Case("eq", "==", expected_types=(TT.EQUAL_EQUAL,)),
    Case("neq", "!=", expected_types=(TT.BANG_EQUAL,)),
    Case("lte", "<=", expected_types=(TT.LESS_EQUAL,)),
    Case("gte", ">=", expected_types=(TT.GREATER_EQUAL,)),
    Case("lt", "<", expected_types=(TT.LESS,)),
    Case("gt", ">", expected_types=(TT.GREATER,)),
    Case("bang", "!", expected_types=(TT.BANG,)),
    Case("assign", "=", expected_types=(TT.EQUAL,)),
    Case("eq-then-assign", "===", expected_types=(TT.EQUAL_EQUAL, TT.EQUAL)),
    Case(
        "punctuation",
        "(){},.;",
        expected_types=(
            TT.LEFT_PAREN,
            TT.RIGHT_PAREN,
            TT.LEFT_BRACE,
            TT.RIGHT_BRACE,
            TT.COMMA,
            TT.DOT,
            TT.SEMICOLON,
        ),
    ),
    Case("trailing-dot", "1.", expected_types=(TT.NUMBER, TT.DOT)),
]

KEYWORD_CASES: List[Case] = [
    Case(
        "all-keywords",
        "and class else false for fun if nil or print return super this true var while",
        expected_types=(
            TT.AND,
            TT.CLASS,
            TT.ELSE,
            TT.FALSE,
            TT.FOR,
            TT.FUN,
            TT.IF,
            TT.NIL,
            TT.OR,
            TT.PRINT,
            TT.RETURN,
            TT.SUPER,
            TT.THIS,
            TT.TRUE,
            TT.VAR,
            TT.WHILE,
        ),
    ),
]

LINE_CASES: List[Case] = [
    Case(
        "lines-with-blank",
        "a\nb\n\nc",
        expected_lines=(("a", 1), ("b", 2), ("c", 4)),
    ),
    Case(
        "comment-skipped",
        "1 // note ( )\n2",
        expected_lines=(("1", 1), ("2", 2)),
    ),
    Case(
        "multiline-string",
        '"a\nb"\nx',
        expected_lines=(('"a\nb"', 1), ("x", 3)),
    ),
]

ERROR_CASES: List[Case] = [
    Case("unexpected-char", "1 @", exc=LexError, msg="Unexpected character: @", err_line=1),
    Case("unexpected-char-line", "a\n\n#", exc=LexError, msg="Unexpected character: #", err_line=3),
    Case("unterminated-string", '"abc', exc=LexError, msg="Unterminated string.", err_line=1),
    Case("unterminated-multiline", 'x = "abc\n\n', exc=LexError, msg="Unterminated string.", err_line=3),
]


def _significant(tokens: List[Tok]) -> List[Tok]:
    assert tokens[-1].type == TT.EOF
    return tokens[:-1]


@pytest.mark.parametrize("case", BASIC_TOKEN_CASES, ids=lambda case: case.name)
def test_basic_tokens(case: Case) -> None:
    tokens = _significant(tokenize(case.source))
    assert tuple((tok.type, tok.literal) for tok in tokens) == case.expected


@pytest.mark.parametrize(
    "case", OPERATOR_CASES + KEYWORD_CASES, ids=lambda case: case.name
)
def test_token_types(case: Case) -> None:
    tokens = _significant(tokenize(case.source))
    assert tuple(tok.type for tok in tokens) == case.expected_types


@pytest.mark.parametrize("case", LINE_CASES, ids=lambda case: case.name)
def test_token_lines(case: Case) -> None:
    tokens = _significant(tokenize(case.source))
    assert tuple((tok.lexeme, tok.line) for tok in tokens) == case.expected_lines


@pytest.mark.parametrize("case", ERROR_CASES, ids=lambda case: case.name)
def test_lex_errors(case: Case) -> None:
    with pytest.raises(case.exc) as exc_info:
        tokenize(case.source)

    err = exc_info.value
    assert err.message == case.msg
    assert err.line == case.err_line
    assert str(err) == f"[line {case.err_line}] Error: {case.msg}"


def test_eof_token_is_single_and_last() -> None:
    tokens = tokenize("var a = 1;\n")
    assert [tok.type for tok in tokens].count(TT.EOF) == 1
    assert tokens[-1].type == TT.EOF
    assert tokens[-1].line == 2


def test_tokens_are_lazy() -> None:
    stream = Lexer("1 @").tokens()
    first = next(stream)
    assert first.type == TT.NUMBER

    with pytest.raises(LexError):
        next(stream)


def test_scan_resumes_after_bad_character() -> None:
    items = list(Lexer(",.$(#").scan())

    kinds = [
        item.message if isinstance(item, LexError) else item.type
        for item in items
    ]
    assert kinds == [
        TT.COMMA,
        TT.DOT,
        "Unexpected character: $",
        TT.LEFT_PAREN,
        "Unexpected character: #",
        TT.EOF,
    ]


def test_scan_keeps_columns_after_error() -> None:
    items = list(Lexer("a @ b").scan())
    b_tok = items[2]
    assert isinstance(b_tok, Tok)
    assert b_tok.lexeme == "b"
    assert b_tok.column == 5


@pytest.mark.parametrize(
    "source, expected",
    [
        pytest.param("(", ["LEFT_PAREN ( null", "EOF  null"], id="paren"),
        pytest.param("42", ["NUMBER 42 42.0", "EOF  null"], id="int"),
        pytest.param("3.50", ["NUMBER 3.50 3.5", "EOF  null"], id="float"),
        pytest.param("0.0000001", ["NUMBER 0.0000001 0.0000001", "EOF  null"], id="small-float"),
        pytest.param(
            "100000000000000000000000",
            ["NUMBER 100000000000000000000000 100000000000000000000000.0", "EOF  null"],
            id="large-int",
        ),
        pytest.param('"hi"', ['STRING "hi" hi', "EOF  null"], id="string"),
        pytest.param("while", ["WHILE while null", "EOF  null"], id="keyword"),
        pytest.param("", ["EOF  null"], id="empty"),
    ],
)
def test_describe_format(source: str, expected: List[str]) -> None:
    assert [tok.describe() for tok in tokenize(source)] == expected
