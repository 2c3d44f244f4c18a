from __future__ import annotations

import io
import time
from typing import List

import pytest

from tests.support.harness import (
    LoxNativeFn,
    LoxNumber,
    LoxString,
    LoxTypeError,
    LoxNameError,
)
from lox_ref.evaluator import evaluate_program
from lox_ref.parser_rd import parse_source
from lox_ref.runtime import LoxValue, Natives, global_environment, init_stdlib, register_native


def _run_with(source: str, natives: dict) -> str:
    out = io.StringIO()
    env = global_environment(out, natives=natives)
    evaluate_program(parse_source(source), env)
    return out.getvalue()


def test_clock_is_registered() -> None:
    init_stdlib()
    init_stdlib()

    clock = Natives.functions["clock"]
    assert isinstance(clock, LoxNativeFn)
    assert clock.arity == 0
    assert repr(clock) == "<native fn>"


def test_clock_returns_wall_seconds() -> None:
    env = global_environment(io.StringIO())
    before = time.time()
    value = Natives.functions["clock"].fn([])
    after = time.time()

    assert env.get("clock") is Natives.functions["clock"]
    assert isinstance(value, LoxNumber)
    assert before <= value.value <= after


def test_custom_natives_replace_registry() -> None:
    def shout(args: List[LoxValue]) -> LoxValue:
        (arg,) = args
        assert isinstance(arg, LoxString)
        return LoxString(arg.value.upper())

    natives = {"shout": LoxNativeFn("shout", 1, shout)}

    assert _run_with('print shout("hey");', natives) == "HEY\n"

    with pytest.raises(LoxNameError):
        _run_with("clock();", natives)


def test_native_must_return_lox_value() -> None:
    natives = {"bad": LoxNativeFn("bad", 0, lambda _args: 42)}

    with pytest.raises(LoxTypeError):
        _run_with("bad();", natives)


def test_register_native_decorator() -> None:
    saved = dict(Natives.functions)
    try:
        @register_native("twice", arity=1)
        def twice(args: List[LoxValue]) -> LoxValue:
            (arg,) = args
            assert isinstance(arg, LoxNumber)
            return LoxNumber(arg.value * 2)

        native = Natives.functions["twice"]
        assert native.arity == 1
        assert native.fn is twice

        out = io.StringIO()
        env = global_environment(out)
        evaluate_program(parse_source("print twice(21);"), env)
        assert out.getvalue() == "42\n"
    finally:
        Natives.functions.clear()
        Natives.functions.update(saved)


def test_globals_are_independent() -> None:
    first = global_environment(io.StringIO())
    second = global_environment(io.StringIO())

    evaluate_program(parse_source("var only = 1;"), first)

    assert first.is_declared("only")
    assert not second.is_declared("only")
