from __future__ import annotations

from typing import Callable, Optional

from ..runtime import Environment, LoxValue, ReturnSignal
from ..tree import Expr, IfStmt, Stmt, WhileStmt
from .helpers import is_truthy

EvalFunc = Callable[[Expr, Environment], LoxValue]
ExecFunc = Callable[[Stmt, Environment], Optional[ReturnSignal]]

def eval_if_stmt(node: IfStmt, env: Environment, eval_func: EvalFunc, exec_func: ExecFunc) -> Optional[ReturnSignal]:
    if is_truthy(eval_func(node.cond, env)):
        return exec_func(node.then_branch, env)

    if node.else_branch is not None:
        return exec_func(node.else_branch, env)

    return None

def eval_while_stmt(node: WhileStmt, env: Environment, eval_func: EvalFunc, exec_func: ExecFunc) -> Optional[ReturnSignal]:
    # A missing condition (desugared `for(;;)`) loops forever.
    while node.cond is None or is_truthy(eval_func(node.cond, env)):
        signal = exec_func(node.body, env)
        if signal is not None:
            return signal

    return None
