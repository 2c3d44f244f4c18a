from __future__ import annotations

import importlib
from typing import List, Mapping, Optional
from .types import (
    LoxNil, LoxNumber, LoxString, LoxBool, LoxFn, LoxNativeFn,
    LoxValue, NativeImpl, OutputSink, Environment, ReturnSignal,
    LoxRuntimeError, LoxNameError, LoxTypeError, LoxArityError,
    Natives, is_lox_value,
)

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load the stdlib module (idempotent) so register_native hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("lox_ref.stdlib")
    _STDLIB_INITIALIZED = True

def register_native(name: str, arity: int = 0):
    def dec(fn: NativeImpl):
        Natives.functions[name] = LoxNativeFn(name=name, arity=arity, fn=fn)
        return fn

    return dec

def global_environment(out: Optional[OutputSink]=None, natives: Optional[Mapping[str, LoxNativeFn]]=None) -> Environment:
    """Fresh global scope seeded with native bindings."""
    init_stdlib()
    env = Environment(out=out)
    bindings = Natives.functions if natives is None else natives

    for name, native in bindings.items():
        env.define(name, native)

    return env

def check_call_arity(callee: LoxValue, arg_count: int, line: Optional[int]=None) -> LoxFn | LoxNativeFn:
    """Validate callee kind and argument count before any argument runs."""
    match callee:
        case LoxFn() | LoxNativeFn():
            if arg_count != callee.arity:
                raise LoxArityError(callee.arity, arg_count, line)
            return callee
        case _:
            raise LoxTypeError("Callee must be a function.", line)

def call_value(callee: LoxFn | LoxNativeFn, args: List[LoxValue], line: Optional[int]=None) -> LoxValue:
    match callee:
        case LoxFn():
            return call_loxfn(callee, args, line)
        case LoxNativeFn():
            return call_native(callee, args, line)

def call_loxfn(fn: LoxFn, args: List[LoxValue], line: Optional[int]=None) -> LoxValue:
    """
    Call semantics:
    - new environment parented to the closure, not the caller
    - parameters bound positionally; body runs in that same environment
    - the first return signal supplies the result, falling off the end gives nil
    - running out of Python stack is a Lox runtime error at the call line
    """
    from .evaluator import exec_stmt  # local import to avoid cycle
    from .eval.blocks import exec_statements

    callee_env = Environment(parent=fn.closure)

    for name, val in zip(fn.decl.params, args):
        callee_env.define(name, val)

    try:
        signal = exec_statements(fn.decl.body, callee_env, exec_stmt)
    except RecursionError:
        raise LoxRuntimeError("Stack overflow.", line) from None

    if signal is None:
        return LoxNil()

    return signal.value

def call_native(native: LoxNativeFn, args: List[LoxValue], line: Optional[int]=None) -> LoxValue:
    result = native.fn(args)

    if not is_lox_value(result):
        raise LoxTypeError(f"Native '{native.name}' returned a non-Lox value {type(result).__name__}", line)

    return result

__all__ = [
    "LoxNil", "LoxNumber", "LoxString", "LoxBool", "LoxFn", "LoxNativeFn",
    "LoxValue", "OutputSink", "Environment", "ReturnSignal",
    "LoxRuntimeError", "LoxNameError", "LoxTypeError", "LoxArityError",
    "init_stdlib", "register_native", "global_environment",
    "check_call_arity", "call_value", "call_loxfn", "call_native",
]
