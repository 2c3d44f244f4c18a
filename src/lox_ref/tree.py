"""Immutable AST node classes produced by the parser.

Expressions and statements are closed sets of frozen dataclasses; the
evaluator matches over them exhaustively. `sexpr` renders any node in the
parenthesized form printed by the `parse` command.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple
from typing_extensions import TypeAlias

from .token_types import TT, format_number_literal


# ---------- Expressions ----------

@dataclass(frozen=True)
class NilLiteral:
    pass

@dataclass(frozen=True)
class BoolLiteral:
    value: bool

@dataclass(frozen=True)
class NumberLiteral:
    value: float

@dataclass(frozen=True)
class StringLiteral:
    value: str

@dataclass(frozen=True)
class Ident:
    name: str
    line: int = 0

@dataclass(frozen=True)
class Grouping:
    expr: Expr

@dataclass(frozen=True)
class Prefix:
    op: TT
    operand: Expr
    line: int = 0

@dataclass(frozen=True)
class Infix:
    """Binary operator; also carries `=`, `and` and `or`."""
    op: TT
    left: Expr
    right: Expr
    line: int = 0

@dataclass(frozen=True)
class FunctionLiteral:
    name: Optional[str]
    params: Tuple[str, ...]
    body: Tuple[Stmt, ...]
    line: int = 0

@dataclass(frozen=True)
class Call:
    callee: Expr
    args: Optional[Tuple[Expr, ...]]
    line: int = 0

    @property
    def arg_count(self) -> int:
        return len(self.args) if self.args else 0

@dataclass(frozen=True)
class PrintExpr:
    expr: Expr


Expr: TypeAlias = (
    NilLiteral
    | BoolLiteral
    | NumberLiteral
    | StringLiteral
    | Ident
    | Grouping
    | Prefix
    | Infix
    | FunctionLiteral
    | Call
    | PrintExpr
)


# ---------- Statements ----------

@dataclass(frozen=True)
class ExprStmt:
    expr: Expr

@dataclass(frozen=True)
class PrintStmt:
    expr: Expr

@dataclass(frozen=True)
class VarDecl:
    name: str
    initializer: Optional[Expr] = None

@dataclass(frozen=True)
class Block:
    stmts: Tuple[Stmt, ...]

@dataclass(frozen=True)
class IfStmt:
    cond: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None

@dataclass(frozen=True)
class WhileStmt:
    cond: Optional[Expr]
    body: Stmt

@dataclass(frozen=True)
class ReturnStmt:
    expr: Expr
    line: int = 0


Stmt: TypeAlias = ExprStmt | PrintStmt | VarDecl | Block | IfStmt | WhileStmt | ReturnStmt

Node: TypeAlias = Expr | Stmt


# ---------- Rendering ----------

OP_SYMBOLS = {
    TT.PLUS: "+",
    TT.MINUS: "-",
    TT.STAR: "*",
    TT.SLASH: "/",
    TT.BANG: "!",
    TT.EQUAL: "=",
    TT.EQUAL_EQUAL: "==",
    TT.BANG_EQUAL: "!=",
    TT.LESS: "<",
    TT.LESS_EQUAL: "<=",
    TT.GREATER: ">",
    TT.GREATER_EQUAL: ">=",
    TT.AND: "and",
    TT.OR: "or",
}


def _paren(head: str, *parts: str) -> str:
    return "(" + " ".join((head,) + parts) + ")"


def sexpr(node: Node) -> str:
    match node:
        case NilLiteral():
            return "nil"
        case BoolLiteral(value=b):
            return "true" if b else "false"
        case NumberLiteral(value=v):
            return format_number_literal(v)
        case StringLiteral(value=s):
            return s
        case Ident(name=name):
            return name
        case Grouping(expr=inner):
            return _paren("group", sexpr(inner))
        case Prefix(op=op, operand=operand):
            return _paren(OP_SYMBOLS[op], sexpr(operand))
        case Infix(op=op, left=left, right=right):
            return _paren(OP_SYMBOLS[op], sexpr(left), sexpr(right))
        case FunctionLiteral(name=name, params=params, body=body):
            head = f"fun {name}" if name else "fun"
            return _paren(head, "(" + " ".join(params) + ")", *(sexpr(s) for s in body))
        case Call(callee=callee, args=args):
            return _paren("call", sexpr(callee), *(sexpr(a) for a in args or ()))
        case PrintExpr(expr=inner) | PrintStmt(expr=inner):
            return _paren("print", sexpr(inner))
        case ExprStmt(expr=inner):
            return _paren(";", sexpr(inner))
        case VarDecl(name=name, initializer=init):
            if init is None:
                return _paren("var", name)
            return _paren("var", name, sexpr(init))
        case Block(stmts=stmts):
            return _paren("block", *(sexpr(s) for s in stmts))
        case IfStmt(cond=cond, then_branch=then, else_branch=other):
            parts = [sexpr(cond), sexpr(then)]
            if other is not None:
                parts.append(sexpr(other))
            return _paren("if", *parts)
        case WhileStmt(cond=cond, body=body):
            return _paren("while", "true" if cond is None else sexpr(cond), sexpr(body))
        case ReturnStmt(expr=inner):
            return _paren("return", sexpr(inner))
        case _:
            raise TypeError(f"Unknown AST node {type(node).__name__}")
