from __future__ import annotations

from typing import Callable, Iterable, Optional

from .runtime import (
    Environment,
    LoxBool,
    LoxNil,
    LoxNumber,
    LoxString,
    LoxRuntimeError,
    LoxValue,
    ReturnSignal,
)

from .tree import (
    Block,
    BoolLiteral,
    Call,
    Expr,
    ExprStmt,
    FunctionLiteral,
    Grouping,
    Ident,
    IfStmt,
    Infix,
    NilLiteral,
    NumberLiteral,
    Prefix,
    PrintExpr,
    PrintStmt,
    ReturnStmt,
    Stmt,
    StringLiteral,
    VarDecl,
    WhileStmt,
)
from .utils import stringify

from .eval.blocks import eval_block, eval_program
from .eval.expr import eval_infix, eval_unary
from .eval.fn import eval_call, eval_function_literal
from .eval.loops import eval_if_stmt, eval_while_stmt

# ---------------- Public API ----------------

def evaluate_program(stmts: Iterable[Stmt], globals: Environment) -> None:
    """Execute top-level statements in order; the first error aborts the run."""
    eval_program(stmts, globals, exec_stmt)

def evaluate_expression(expr: Expr, env: Environment) -> LoxValue:
    return eval_node(expr, env)

# ---------------- Core evaluator ----------------

def eval_node(n: Expr, env: Environment) -> LoxValue:
    handler = _NODE_DISPATCH.get(type(n))
    if handler is None:
        raise LoxRuntimeError(f"Unknown node: {type(n).__name__}")

    return handler(n, env)

def exec_stmt(s: Stmt, env: Environment) -> Optional[ReturnSignal]:
    """Run one statement; a non-None result is a return unwinding upward."""
    match s:
        case ExprStmt(expr=expr):
            eval_node(expr, env)
            return None
        case PrintStmt(expr=expr):
            _write_value(eval_node(expr, env), env)
            return None
        case VarDecl(name=name, initializer=init):
            value = LoxNil() if init is None else eval_node(init, env)
            env.define(name, value)
            return None
        case Block():
            return eval_block(s, env, exec_stmt)
        case IfStmt():
            return eval_if_stmt(s, env, eval_node, exec_stmt)
        case WhileStmt():
            return eval_while_stmt(s, env, eval_node, exec_stmt)
        case ReturnStmt(expr=expr, line=line):
            return ReturnSignal(eval_node(expr, env), line)
        case _:
            raise LoxRuntimeError(f"Unknown statement: {type(s).__name__}")

# ---------------- Output ----------------

def _write_value(value: LoxValue, env: Environment) -> None:
    env.write(stringify(value) + "\n")

def _eval_print_expr(n: PrintExpr, env: Environment) -> LoxValue:
    _write_value(eval_node(n.expr, env), env)
    return LoxNil()

# ---------------- Dispatch ----------------

_NODE_DISPATCH: dict[type, Callable[..., LoxValue]] = {
    NilLiteral: lambda _, __: LoxNil(),
    BoolLiteral: lambda n, _: LoxBool(n.value),
    NumberLiteral: lambda n, _: LoxNumber(n.value),
    StringLiteral: lambda n, _: LoxString(n.value),
    Ident: lambda n, env: env.get(n.name, n.line),
    Grouping: lambda n, env: eval_node(n.expr, env),
    Prefix: lambda n, env: eval_unary(n, env, eval_node),
    Infix: lambda n, env: eval_infix(n, env, eval_node),
    FunctionLiteral: eval_function_literal,
    Call: lambda n, env: eval_call(n, env, eval_node),
    PrintExpr: _eval_print_expr,
}
