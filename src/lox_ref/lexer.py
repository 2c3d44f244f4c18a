"""
Lexer for Lox

Tokenizes Lox source code into a lazy stream of tokens.

Features:
- Terminal set compiled by lark's basic lexer (longest operator wins)
- Keywords resolved from identifiers
- Position tracking (line, column)
- `//` line comments and whitespace skipped
"""

from typing import Iterator, List, Optional, Union

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters

from .token_types import KEYWORDS, TT, Tok, eof_token

# Terminal names double as TT member names.
LOX_TERMINALS = r"""
start: _token*

_token: LEFT_PAREN | RIGHT_PAREN | LEFT_BRACE | RIGHT_BRACE
      | COMMA | DOT | MINUS | PLUS | SEMICOLON | SLASH | STAR
      | BANG_EQUAL | BANG | EQUAL_EQUAL | EQUAL
      | GREATER_EQUAL | GREATER | LESS_EQUAL | LESS
      | IDENTIFIER | STRING | NUMBER

LEFT_PAREN: "("
RIGHT_PAREN: ")"
LEFT_BRACE: "{"
RIGHT_BRACE: "}"
COMMA: ","
DOT: "."
MINUS: "-"
PLUS: "+"
SEMICOLON: ";"
SLASH: "/"
STAR: "*"
BANG_EQUAL: "!="
BANG: "!"
EQUAL_EQUAL: "=="
EQUAL: "="
GREATER_EQUAL: ">="
GREATER: ">"
LESS_EQUAL: "<="
LESS: "<"

IDENTIFIER: /[A-Za-z_][A-Za-z0-9_]*/
STRING: /"[^"]*"/
NUMBER: /[0-9]+(\.[0-9]+)?/

COMMENT: /\/\/[^\n]*/
WS: /[ \t\r\n]+/

%ignore COMMENT
%ignore WS
"""

_TERMINALS: Optional[Lark] = None


def _terminals() -> Lark:
    global _TERMINALS

    if _TERMINALS is None:
        _TERMINALS = Lark(LOX_TERMINALS, parser="lalr", lexer="basic")

    return _TERMINALS


class LexError(Exception):
    """Lexical analysis error"""
    def __init__(self, message: str, line: int, column: int = 0):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"[line {line}] Error: {message}")


class Lexer:
    """
    Lox lexer.

    `tokens()` is lazy: a lexical error is raised when the consumer pulls the
    offending position, never earlier. `scan()` reports errors in-stream and
    resumes after the offending character.
    """

    KEYWORDS = KEYWORDS

    def __init__(self, source: str):
        self.source = source

    def tokens(self) -> Iterator[Tok]:
        """Yield tokens up to and including a single EOF token"""
        for item in self.scan():
            if isinstance(item, LexError):
                raise item
            yield item

    def scan(self) -> Iterator[Union[Tok, LexError]]:
        """Yield tokens and lexical errors; always ends with EOF"""
        offset = 0
        line_base = 0
        col_base = 0

        while offset <= len(self.source):
            stream = _terminals().lex(self.source[offset:])

            try:
                for raw in stream:
                    yield self._convert(raw, line_base, col_base)
                break
            except UnexpectedCharacters as exc:
                line = exc.line + line_base
                column = exc.column + (col_base if exc.line == 1 else 0)

                if exc.char == '"':
                    # An unterminated string swallows the rest of the source
                    yield LexError("Unterminated string.", self._last_line(), column)
                    break

                yield LexError(f"Unexpected character: {exc.char}", line, column)

                line_base = line - 1
                col_base = column
                offset += exc.pos_in_stream + 1

        yield eof_token(self._last_line(), len(self.source) - self.source.rfind('\n'))

    def _last_line(self) -> int:
        return self.source.count('\n') + 1

    def _convert(self, raw: Token, line_base: int = 0, col_base: int = 0) -> Tok:
        kind = raw.type
        text = str(raw)
        line = raw.line + line_base
        column = raw.column + (col_base if raw.line == 1 else 0)

        if kind == 'IDENTIFIER':
            return Tok(self.KEYWORDS.get(text, TT.IDENTIFIER), text, None, line, column)

        if kind == 'NUMBER':
            return Tok(TT.NUMBER, text, float(text), line, column)

        if kind == 'STRING':
            return Tok(TT.STRING, text, text[1:-1], line, column)

        return Tok(TT[kind], text, None, line, column)


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    return list(Lexer(source).tokens())
