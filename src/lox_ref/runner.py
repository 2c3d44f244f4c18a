from __future__ import annotations

import sys
import traceback
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .lexer import LexError, Lexer, tokenize
from .parser_rd import ParseError, parse_expr_fragment, parse_source
from .evaluator import evaluate_expression, evaluate_program
from .runtime import Environment, LoxRuntimeError, LoxValue, OutputSink, global_environment
from .tree import sexpr
from .utils import debug_py_trace_enabled, stringify

EXIT_OK = 0
EXIT_USAGE = 64
EXIT_SYNTAX = 65
EXIT_NOINPUT = 66
EXIT_RUNTIME = 70

USAGE = "Usage: lox-ref [tokenize|parse|evaluate|run|repl] <filename|->"

# Each Lox call nests about ten Python frames
RECURSION_LIMIT = 10_000

def _allow_deep_calls() -> None:
    if sys.getrecursionlimit() < RECURSION_LIMIT:
        sys.setrecursionlimit(RECURSION_LIMIT)

def run(src: str, out: Optional[OutputSink]=None) -> Environment:
    """Scan, parse and execute a program; returns the global environment."""
    _allow_deep_calls()
    stmts = parse_source(src)
    globals_env = global_environment(out if out is not None else sys.stdout)
    evaluate_program(stmts, globals_env)
    return globals_env

def evaluate(src: str, out: Optional[OutputSink]=None) -> LoxValue:
    """Parse a single expression and evaluate it in fresh globals."""
    _allow_deep_calls()
    expr = parse_expr_fragment(src)
    env = global_environment(out if out is not None else sys.stdout)
    return evaluate_expression(expr, env)

def repl_eval(src: str, env: Environment) -> Tuple[Optional[LoxValue], bool]:
    """
    Evaluate REPL input against persistent globals.
    Returns (value, is_stmt); a bare expression without `;` yields its value.
    """
    _allow_deep_calls()

    try:
        expr = parse_expr_fragment(src)
    except ParseError:
        # Not a lone expression; statement errors are reported by this parse
        stmts = parse_source(src)
        evaluate_program(stmts, env)
        return None, True

    return evaluate_expression(expr, env), False

def exit_code_for(exc: BaseException) -> int:
    if isinstance(exc, (LexError, ParseError)):
        return EXIT_SYNTAX

    if isinstance(exc, LoxRuntimeError):
        return EXIT_RUNTIME

    raise TypeError(f"No exit code for {type(exc).__name__}")

def report_error(exc: BaseException) -> None:
    print(exc, file=sys.stderr)

    if debug_py_trace_enabled():
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)

def _load_source(arg: str) -> str:
    """
    Resolve CLI input into source text.
    - "-" => read stdin.
    - Otherwise a UTF-8 file path; OSError and UnicodeDecodeError propagate.
    """

    if arg == "-":
        return sys.stdin.read()

    return Path(arg).read_text(encoding="utf-8")

# ---------------- Commands ----------------

def _cmd_tokenize(source: str) -> int:
    code = EXIT_OK

    for item in Lexer(source).scan():
        if isinstance(item, LexError):
            print(item, file=sys.stderr)
            code = EXIT_SYNTAX
            continue
        print(item.describe())

    return code

def _cmd_parse(source: str) -> int:
    print(sexpr(parse_expr_fragment(source)))
    return EXIT_OK

def _cmd_evaluate(source: str) -> int:
    print(stringify(evaluate(source)))
    return EXIT_OK

def _cmd_run(source: str) -> int:
    run(source)
    return EXIT_OK

_COMMANDS: Dict[str, Callable[[str], int]] = {
    "tokenize": _cmd_tokenize,
    "parse": _cmd_parse,
    "evaluate": _cmd_evaluate,
    "run": _cmd_run,
}

def main(argv: Optional[List[str]]=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or args == ["repl"]:
        from .repl import repl  # prompt_toolkit only loads for interactive use
        repl()
        return EXIT_OK

    command, *rest = args
    handler = _COMMANDS.get(command)

    if handler is None or len(rest) > 1:
        print(USAGE, file=sys.stderr)
        return EXIT_USAGE

    path = rest[0] if rest else "-"

    try:
        source = _load_source(path)
    except (OSError, UnicodeDecodeError):
        print(f"Failed to read file {path}", file=sys.stderr)
        return EXIT_NOINPUT

    try:
        return handler(source)
    except (LexError, ParseError, LoxRuntimeError) as exc:
        sys.stdout.flush()
        report_error(exc)
        return exit_code_for(exc)

__all__ = [
    "EXIT_OK", "EXIT_SYNTAX", "EXIT_RUNTIME", "EXIT_NOINPUT", "EXIT_USAGE",
    "run", "evaluate", "tokenize", "repl_eval", "exit_code_for", "report_error", "main",
]

if __name__ == "__main__":
    sys.exit(main())
