from __future__ import annotations

from typing import Optional

from ..runtime import LoxBool, LoxNil, LoxNumber, LoxTypeError, LoxValue

def is_truthy(val: LoxValue) -> bool:
    match val:
        case LoxBool(value=b):
            return b
        case LoxNil():
            return False
        case _:
            return True

def require_number(val: LoxValue, line: Optional[int]=None) -> float:
    """Operand of unary minus."""
    if isinstance(val, LoxNumber):
        return val.value

    raise LoxTypeError("Error: Operand must be a number.", line)

def require_numbers(lhs: LoxValue, rhs: LoxValue, line: Optional[int]=None) -> tuple[float, float]:
    """Operands of arithmetic and ordering operators."""
    if isinstance(lhs, LoxNumber) and isinstance(rhs, LoxNumber):
        return lhs.value, rhs.value

    raise LoxTypeError("Error: Operands must be numbers.", line)
