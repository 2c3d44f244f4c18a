from __future__ import annotations

import math
import os as _os
from decimal import Decimal
from typing import Optional

from .types import (
    LoxValue,
    LoxNil,
    LoxNumber,
    LoxString,
    LoxBool,
    LoxFn,
    LoxNativeFn,
)

DEBUG_PY_TRACE_ENV = "LOX_DEBUG_PY_TRACE"


def debug_py_trace_enabled() -> bool:
    """Whether internal errors should also print their Python traceback."""
    return _os.environ.get(DEBUG_PY_TRACE_ENV, "").lower() in {"1", "true", "yes", "on"}


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        _os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        _os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def lox_equals(lhs: LoxValue, rhs: LoxValue) -> bool:
    match (lhs, rhs):
        case (LoxNil(), LoxNil()):
            return True
        case (LoxNumber(value=a), LoxNumber(value=b)):
            return a == b
        case (LoxString(value=a), LoxString(value=b)):
            return a == b
        case (LoxBool(value=a), LoxBool(value=b)):
            return a == b
        case (LoxFn(), LoxFn()) | (LoxNativeFn(), LoxNativeFn()):
            return lhs is rhs
        case _:
            return False


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"

    if math.isinf(value):
        return "inf" if value > 0 else "-inf"

    # repr is the shortest round-tripping form; Decimal drops the exponent
    shortest = Decimal(repr(value))

    if value.is_integer():
        # keeps the sign of -0
        shortest = shortest.to_integral_value()

    return format(shortest, "f")


def stringify(value: Optional[LoxValue]) -> str:
    if isinstance(value, LoxString):
        return value.value

    if isinstance(value, LoxNumber):
        return format_number(value.value)

    if isinstance(value, LoxBool):
        return "true" if value.value else "false"

    if isinstance(value, LoxNil) or value is None:
        return "nil"

    return repr(value)
