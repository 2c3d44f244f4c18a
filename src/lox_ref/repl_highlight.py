"""Live syntax colouring for the REPL.

Each buffer line is scanned on its own with `Lexer.scan()`, so a bad
character or an unterminated string is painted as an error instead of
breaking the whole line.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Union

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer as PromptLexer

from .lexer import LexError, Lexer
from .token_types import KEYWORDS, TT, Tok

ScanItem = Union[Tok, LexError]

STYLES: Dict[str, str] = {
    "keyword": "bold ansiblue",
    "literal": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "callable": "bold ansiyellow",
    "comment": "italic ansibrightblack",
    "error": "bold ansired",
}

_LITERAL_KEYWORDS = {TT.TRUE, TT.FALSE, TT.NIL}


def _token_class(items: List[ScanItem], idx: int) -> str:
    """Style class for one scanned token; plain text has no class."""
    tok = items[idx]
    assert isinstance(tok, Tok)

    if tok.type in _LITERAL_KEYWORDS:
        return "literal"
    if tok.type in KEYWORDS.values():
        return "keyword"
    if tok.type == TT.NUMBER:
        return "number"
    if tok.type == TT.STRING:
        return "string"
    if tok.type == TT.IDENTIFIER and _names_callable(items, idx):
        return "callable"
    return ""


def _names_callable(items: List[ScanItem], idx: int) -> bool:
    """Identifier being declared by `fun`, or called right after."""
    before = items[idx - 1] if idx > 0 else None
    after = items[idx + 1] if idx + 1 < len(items) else None

    return (
        (isinstance(before, Tok) and before.type == TT.FUN)
        or (isinstance(after, Tok) and after.type == TT.LEFT_PAREN)
    )


def _plain(text: str) -> StyleAndTextTuples:
    """Text the scanner skipped; only a `//` comment needs colour there."""
    cut = text.find("//")
    if cut < 0:
        return [("", text)]

    return [("", text[:cut]), (STYLES["comment"], text[cut:])]


def highlight_line(text: str) -> StyleAndTextTuples:
    items: List[ScanItem] = [
        item for item in Lexer(text).scan()
        if isinstance(item, LexError) or item.type != TT.EOF
    ]

    fragments: StyleAndTextTuples = []
    cursor = 0

    for idx, item in enumerate(items):
        start = max(item.column - 1, cursor)
        fragments.extend(_plain(text[cursor:start]))

        if isinstance(item, LexError):
            # An open string runs to the end of the line
            stop = len(text) if item.message == "Unterminated string." else start + 1
            fragments.append((STYLES["error"], text[start:stop]))
        else:
            stop = start + len(item.lexeme)
            fragments.append((STYLES.get(_token_class(items, idx), ""), text[start:stop]))

        cursor = stop

    fragments.extend(_plain(text[cursor:]))
    return [frag for frag in fragments if frag[1]] or [("", "")]


class LoxLexer(PromptLexer):
    """prompt_toolkit lexer; each line is highlighted once per document."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines
        done: Dict[int, StyleAndTextTuples] = {}

        def line_fragments(lineno: int) -> StyleAndTextTuples:
            if lineno >= len(lines):
                return [("", "")]
            if lineno not in done:
                done[lineno] = highlight_line(lines[lineno])
            return done[lineno]

        return line_fragments
