from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..runtime import Environment, LoxRuntimeError, ReturnSignal
from ..tree import Block, Stmt

ExecFunc = Callable[[Stmt, Environment], Optional[ReturnSignal]]

def exec_statements(stmts: Iterable[Stmt], env: Environment, exec_func: ExecFunc) -> Optional[ReturnSignal]:
    """Run statements in order, stopping at the first return signal."""
    for stmt in stmts:
        signal = exec_func(stmt, env)
        if signal is not None:
            return signal

    return None

def eval_block(node: Block, env: Environment, exec_func: ExecFunc) -> Optional[ReturnSignal]:
    return exec_statements(node.stmts, Environment(parent=env), exec_func)

def eval_program(stmts: Iterable[Stmt], env: Environment, exec_func: ExecFunc) -> None:
    """Top-level statement list; a return signal reaching here is an error."""
    signal = exec_statements(stmts, env, exec_func)

    if signal is not None:
        raise LoxRuntimeError("Can't return from top-level code.", signal.line)
