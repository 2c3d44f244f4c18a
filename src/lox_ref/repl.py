"""Interactive Lox session on top of prompt_toolkit.

Input is read until every `(` and `{` is closed, then handed to
`runner.repl_eval` against one long-lived global environment. Lines starting
with `/` are session commands rather than Lox.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from typing import Callable, Dict, Iterator

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.shortcuts import clear

from .lexer import LexError, Lexer
from .parser_rd import ParseError
from .repl_highlight import LoxLexer
from .runtime import Environment, LoxNil, LoxRuntimeError, global_environment
from .runner import repl_eval, report_error
from .token_types import TT
from .utils import debug_py_trace_enabled, set_debug_py_trace, stringify

PROMPT = "lox> "
CONTINUATION = "...  "
INDENT = "  "

# Pasted text often carries zero-width spaces, BOMs, NBSPs and CRs.
_STRAY_CHARS = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_OPENERS = {TT.LEFT_PAREN, TT.LEFT_BRACE}
_CLOSERS = {TT.RIGHT_PAREN, TT.RIGHT_BRACE}

_TRUTHY_ARGS = {"on", "1", "true", "yes"}
_FALSY_ARGS = {"off", "0", "false", "no"}


def open_depth(text: str) -> int:
    """Net count of unclosed parens and braces; lexical errors are ignored."""
    depth = 0

    for item in Lexer(text).scan():
        if isinstance(item, LexError):
            continue
        if item.type in _OPENERS:
            depth += 1
        elif item.type in _CLOSERS:
            depth -= 1

    return depth


def _normalize(text: str) -> str:
    return _STRAY_CHARS.sub("", text)


class ReplState:
    """Globals shared by every input of one session."""

    def __init__(self) -> None:
        self.env: Environment = global_environment(sys.stdout)

    def reset(self) -> None:
        self.env = global_environment(sys.stdout)


# ---------------- Session commands ----------------

@dataclass(frozen=True)
class SessionCommand:
    summary: str
    usage: str
    run: Callable[[ReplState, str], None]


def _cmd_clear(state: ReplState, arg: str) -> None:
    clear()


def _cmd_py_traceback(state: ReplState, arg: str) -> None:
    choice = arg.lower()

    if choice in _TRUTHY_ARGS:
        set_debug_py_trace(True)
    elif choice in _FALSY_ARGS:
        set_debug_py_trace(False)
    elif choice == "":
        set_debug_py_trace(not debug_py_trace_enabled())
    else:
        print("usage: /py-traceback [on|off]", file=sys.stderr)
        return

    print("python tracebacks " + ("enabled" if debug_py_trace_enabled() else "disabled"))


def _cmd_reset(state: ReplState, arg: str) -> None:
    state.reset()
    print("globals cleared")


SESSION_COMMANDS: Dict[str, SessionCommand] = {
    "/clear": SessionCommand("clear the screen", "", _cmd_clear),
    "/py-traceback": SessionCommand("show Python tracebacks for errors", "[on|off]", _cmd_py_traceback),
    "/reset": SessionCommand("drop every global defined so far", "", _cmd_reset),
}


def run_session_command(line: str, state: ReplState) -> bool:
    """Run `line` if it is a session command; False means it is Lox source."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    name, _, arg = stripped.partition(" ")
    command = SESSION_COMMANDS.get(name)

    if command is None:
        print(f"no such command {name}; try one of {', '.join(SESSION_COMMANDS)}", file=sys.stderr)
        return True

    command.run(state, arg.strip())
    return True


class SessionCommandCompleter(Completer):
    """Offers session commands while the buffer starts with `/`."""

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        typed = document.text_before_cursor
        if not typed.startswith("/"):
            return

        for name, command in SESSION_COMMANDS.items():
            if name.startswith(typed):
                meta = f"{command.usage}  {command.summary}" if command.usage else command.summary
                yield Completion(name, start_position=-len(typed), display_meta=meta)


# ---------------- Loop ----------------

def _key_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add("enter")
    def _submit_or_continue(event: KeyPressEvent) -> None:
        buf = event.app.current_buffer
        depth = 0 if buf.text.startswith("/") else open_depth(buf.text)

        if depth > 0:
            buf.insert_text("\n" + INDENT * depth)
        else:
            buf.validate_and_handle()

    @bindings.add("backspace")
    def _erase(event: KeyPressEvent) -> None:
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        # Reopen the command menu after erasing part of a command name
        if buf.text.startswith("/"):
            buf.start_completion()

    return bindings


def _evaluate_input(text: str, state: ReplState) -> None:
    try:
        value, is_stmt = repl_eval(text, state.env)
    except (LexError, ParseError, LoxRuntimeError) as exc:
        report_error(exc)
        return

    if not is_stmt and not isinstance(value, LoxNil):
        print(stringify(value))


def repl() -> None:
    """Read Lox from the terminal until EOF (Ctrl-D)."""
    state = ReplState()
    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=LoxLexer(),
        completer=SessionCommandCompleter(),
        complete_while_typing=True,
        key_bindings=_key_bindings(),
        multiline=True,
        prompt_continuation=CONTINUATION,
    )

    print("lox repl (Ctrl-D to exit, / for commands)")

    while True:
        try:
            text = session.prompt(PROMPT)
        except EOFError:
            print()
            return
        except KeyboardInterrupt:
            # Ctrl-C discards the pending input only
            continue

        text = _normalize(text)
        if not text.strip() or run_session_command(text, state):
            continue

        _evaluate_input(text, state)
