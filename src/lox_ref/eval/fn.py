from __future__ import annotations

from typing import Callable, List

from ..runtime import Environment, LoxFn, LoxValue, call_value, check_call_arity
from ..tree import Call, Expr, FunctionLiteral

EvalFunc = Callable[[Expr, Environment], LoxValue]

def eval_function_literal(node: FunctionLiteral, env: Environment) -> LoxFn:
    """Capture the current environment; a named literal also binds itself there."""
    fn_value = LoxFn(decl=node, closure=env)

    if node.name is not None:
        env.define(node.name, fn_value)

    return fn_value

def eval_call(node: Call, env: Environment, eval_func: EvalFunc) -> LoxValue:
    callee = check_call_arity(eval_func(node.callee, env), node.arg_count, node.line)

    args: List[LoxValue] = [eval_func(arg, env) for arg in node.args or ()]

    return call_value(callee, args, node.line)
