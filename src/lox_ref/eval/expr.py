from __future__ import annotations

import math
from typing import Callable, Optional

from ..runtime import (
    Environment,
    LoxBool,
    LoxNumber,
    LoxString,
    LoxTypeError,
    LoxRuntimeError,
    LoxValue,
)
from ..token_types import TT
from ..tree import Expr, Ident, Infix, Prefix
from ..utils import lox_equals
from .helpers import is_truthy, require_number, require_numbers

EvalFunc = Callable[[Expr, Environment], LoxValue]

def eval_unary(node: Prefix, env: Environment, eval_func: EvalFunc) -> LoxValue:
    rhs = eval_func(node.operand, env)

    match node.op:
        case TT.MINUS:
            return LoxNumber(-require_number(rhs, node.line))
        case TT.BANG:
            return LoxBool(not is_truthy(rhs))
        case _:
            raise LoxRuntimeError(f"Unsupported unary op {node.op.name}", node.line)

def eval_infix(node: Infix, env: Environment, eval_func: EvalFunc) -> LoxValue:
    match node.op:
        case TT.AND | TT.OR:
            return eval_logical(node, env, eval_func)
        case TT.EQUAL:
            return eval_assign(node, env, eval_func)

    lhs = eval_func(node.left, env)
    rhs = eval_func(node.right, env)

    return apply_binary_operator(node.op, lhs, rhs, node.line)

def eval_logical(node: Infix, env: Environment, eval_func: EvalFunc) -> LoxValue:
    """Short-circuit: the right operand runs only when the left does not decide."""
    lhs = eval_func(node.left, env)

    if node.op == TT.OR:
        if is_truthy(lhs):
            return lhs
    elif not is_truthy(lhs):
        return lhs

    return eval_func(node.right, env)

def eval_assign(node: Infix, env: Environment, eval_func: EvalFunc) -> LoxValue:
    target = node.left
    if not isinstance(target, Ident):
        raise LoxRuntimeError("Invalid assignment target.", node.line)

    value = eval_func(node.right, env)
    env.assign(target.name, value, target.line)
    return value

def apply_binary_operator(op: TT, lhs: LoxValue, rhs: LoxValue, line: Optional[int]=None) -> LoxValue:
    match op:
        case TT.EQUAL_EQUAL:
            return LoxBool(lox_equals(lhs, rhs))
        case TT.BANG_EQUAL:
            return LoxBool(not lox_equals(lhs, rhs))
        case TT.PLUS:
            return _add(lhs, rhs, line)

    a, b = require_numbers(lhs, rhs, line)

    match op:
        case TT.MINUS:
            return LoxNumber(a - b)
        case TT.STAR:
            return LoxNumber(a * b)
        case TT.SLASH:
            return LoxNumber(_divide(a, b))
        case TT.LESS:
            return LoxBool(a < b)
        case TT.LESS_EQUAL:
            return LoxBool(a <= b)
        case TT.GREATER:
            return LoxBool(a > b)
        case TT.GREATER_EQUAL:
            return LoxBool(a >= b)
        case _:
            raise LoxRuntimeError(f"Unknown operator {op.name}", line)

def _add(lhs: LoxValue, rhs: LoxValue, line: Optional[int]) -> LoxValue:
    match (lhs, rhs):
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return LoxNumber(a + b)
        case (LoxString(value=a), LoxString(value=b)):
            return LoxString(a + b)
        case _:
            raise LoxTypeError("Operands must be two numbers or two strings.", line)

def _divide(a: float, b: float) -> float:
    """IEEE-754 division; Python raises on a zero divisor."""
    if b != 0.0:
        return a / b

    if a == 0.0 or math.isnan(a):
        return math.nan

    return math.copysign(math.inf, a) * math.copysign(1.0, b)
