from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
from typing_extensions import Protocol, TypeAlias, TypeGuard
from .tree import FunctionLiteral

# ---------- Value Model ----------

@dataclass
class LoxNil:
    def __repr__(self) -> str:
        return "nil"

@dataclass
class LoxNumber:
    value: float
    def __repr__(self) -> str:
        v = self.value
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class LoxString:
    value: str
    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class LoxBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class LoxFn:
    decl: FunctionLiteral          # AST node, shared with the tree
    closure: 'Environment'         # Captured by reference
    def __repr__(self) -> str:
        return f"<fn {self.decl.name}>" if self.decl.name else "<fn>"

    @property
    def arity(self) -> int:
        return len(self.decl.params)

NativeImpl = Callable[[List['LoxValue']], 'LoxValue']

@dataclass(eq=False)
class LoxNativeFn:
    name: str
    arity: int
    fn: NativeImpl
    def __repr__(self) -> str:
        return "<native fn>"

LoxValue: TypeAlias = (
    LoxNil
    | LoxNumber
    | LoxString
    | LoxBool
    | LoxFn
    | LoxNativeFn
)

class OutputSink(Protocol):
    def write(self, text: str) -> object: ...

class Environment:
    def __init__(self, parent: Optional['Environment']=None, out: Optional[OutputSink]=None):
        self.parent = parent
        self.vars: Dict[str, LoxValue] = {}
        self.out: Optional[OutputSink]

        if out is not None:
            self.out = out
        elif parent is not None:
            self.out = parent.out
        else:
            self.out = None

    def define(self, name: str, val: LoxValue) -> None:
        self.vars[name] = val

    def get(self, name: str, line: Optional[int]=None) -> LoxValue:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                return env.vars[name]
            env = env.parent

        raise LoxNameError(name, line)

    def assign(self, name: str, val: LoxValue, line: Optional[int]=None) -> None:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                env.vars[name] = val
                return
            env = env.parent

        raise LoxNameError(name, line)

    def is_declared(self, name: str) -> bool:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                return True
            env = env.parent

        return False

    def write(self, text: str) -> None:
        if self.out is None:
            raise LoxRuntimeError("No output sink attached")
        self.out.write(text)

# ---------- Control signal ----------

@dataclass
class ReturnSignal:
    """Statement result that unwinds to the nearest function call."""
    value: LoxValue = field(default_factory=LoxNil)
    line: Optional[int] = None

# ---------- Exceptions ----------

class LoxRuntimeError(Exception):
    def __init__(self, message: str, line: Optional[int]=None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message}\n[line {self.line}]"

class LoxNameError(LoxRuntimeError):
    def __init__(self, name: str, line: Optional[int]=None):
        super().__init__(f"Undefined variable '{name}'.", line)
        self.name = name

class LoxTypeError(LoxRuntimeError):
    pass

class LoxArityError(LoxRuntimeError):
    def __init__(self, expected: int, got: int, line: Optional[int]=None):
        super().__init__(f"Expected {expected} arguments but got {got}.", line)
        self.expected = expected
        self.got = got

_LOX_VALUE_TYPES: Tuple[type, ...] = (
    LoxNil,
    LoxNumber,
    LoxString,
    LoxBool,
    LoxFn,
    LoxNativeFn,
)

def is_lox_value(value: object) -> TypeGuard[LoxValue]:
    return isinstance(value, _LOX_VALUE_TYPES)

class Natives:
    functions: Dict[str, LoxNativeFn] = {}
