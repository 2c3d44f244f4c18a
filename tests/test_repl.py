from __future__ import annotations

import pytest
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from lox_ref.repl import (
    ReplState,
    SessionCommandCompleter,
    _evaluate_input,
    _normalize,
    open_depth,
    run_session_command,
)
from lox_ref.repl_highlight import STYLES, LoxLexer, highlight_line
from lox_ref.runner import repl_eval
from lox_ref.utils import debug_py_trace_enabled


@pytest.mark.parametrize(
    "text, depth",
    [
        pytest.param("print 1;", 0, id="flat"),
        pytest.param("fun f() {", 1, id="open-brace"),
        pytest.param("fun f() {\n  if (x) {", 2, id="nested"),
        pytest.param("f(1,", 1, id="open-paren"),
        pytest.param("{ }", 0, id="closed"),
        pytest.param('print "{";', 0, id="brace-in-string"),
        pytest.param("// {\n", 0, id="brace-in-comment"),
        pytest.param("{ @", 1, id="lex-error-ignored"),
    ],
)
def test_open_depth(text: str, depth: int) -> None:
    assert open_depth(text) == depth


def test_normalize_strips_invisible_characters() -> None:
    assert _normalize("print\u200b 1;\r") == "print 1;"


def test_reset_command_drops_globals(capsys: pytest.CaptureFixture[str]) -> None:
    state = ReplState()
    repl_eval("var kept = 1;", state.env)

    assert run_session_command("/reset", state)
    assert not state.env.is_declared("kept")
    assert state.env.is_declared("clock")
    assert capsys.readouterr().out == "globals cleared\n"


def test_py_traceback_command_toggles(capsys: pytest.CaptureFixture[str]) -> None:
    state = ReplState()

    run_session_command("/py-traceback on", state)
    assert debug_py_trace_enabled()
    run_session_command("/py-traceback", state)
    assert not debug_py_trace_enabled()

    assert capsys.readouterr().out == "python tracebacks enabled\npython tracebacks disabled\n"


def test_unknown_command_and_plain_source(capsys: pytest.CaptureFixture[str]) -> None:
    state = ReplState()

    assert run_session_command("/nope", state)
    assert "no such command /nope" in capsys.readouterr().err
    assert not run_session_command("print 1;", state)


def test_evaluate_input_echoes_expressions(capsys: pytest.CaptureFixture[str]) -> None:
    state = ReplState()

    _evaluate_input("var n = 2;", state)
    _evaluate_input("n * 3", state)
    _evaluate_input("nil", state)

    assert capsys.readouterr().out == "6\n"


def test_evaluate_input_reports_errors(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    state = ReplState()

    _evaluate_input("print -nil;", state)
    assert capsys.readouterr().err == "Error: Operand must be a number.\n[line 1]\n"

    monkeypatch.setenv("LOX_DEBUG_PY_TRACE", "1")
    _evaluate_input("print missing;", state)
    err = capsys.readouterr().err
    assert err.startswith("Undefined variable 'missing'.")
    assert "Traceback" in err


def test_completer_offers_matching_commands() -> None:
    completions = list(SessionCommandCompleter().get_completions(Document("/r"), CompleteEvent()))
    assert [c.text for c in completions] == ["/reset"]


def test_highlight_classes() -> None:
    assert highlight_line('var x = "s";') == [
        (STYLES["keyword"], "var"),
        ("", " "),
        ("", "x"),
        ("", " "),
        ("", "="),
        ("", " "),
        (STYLES["string"], '"s"'),
        ("", ";"),
    ]


def test_highlight_literals_and_numbers() -> None:
    fragments = highlight_line("nil or 2.5")
    assert fragments[0] == (STYLES["literal"], "nil")
    assert fragments[-1] == (STYLES["number"], "2.5")


def test_highlight_callables() -> None:
    fragments = highlight_line("fun add(a) {} add(1)")
    assert [frag for style, frag in fragments if style == STYLES["callable"]] == ["add", "add"]


def test_highlight_comment_and_errors() -> None:
    fragments = highlight_line("1 @ 2 // done")
    assert (STYLES["error"], "@") in fragments
    assert fragments[-1] == (STYLES["comment"], "// done")
    assert "".join(frag for _, frag in fragments) == "1 @ 2 // done"


def test_highlight_unterminated_string() -> None:
    assert highlight_line('print "open')[-1] == (STYLES["error"], '"open')


def test_highlight_empty_line() -> None:
    assert highlight_line("") == [("", "")]


def test_lexer_highlights_each_document_line() -> None:
    get_line = LoxLexer().lex_document(Document("print 1;\n// note"))

    assert get_line(0)[0] == (STYLES["keyword"], "print")
    assert get_line(1) == [(STYLES["comment"], "// note")]
    assert get_line(5) == [("", "")]
