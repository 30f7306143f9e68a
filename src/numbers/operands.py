"""
Operands — Приведение операндов смешанных операций к значениям движка

Допустимые операнды:
- Integer → mpz
- native int → mpz через разложение на знак/модуль (INT64_MIN → 2**63)
- Rational → mpq (только там, где это явно разрешено)

bool не считается числом.
"""

from typing import Any, Optional

import gmpy2

from src.core.native.container import NativeValue
from src.core.native.handle import StructKind
from src.core.native.native_int import is_native_int, to_engine_int


def is_value_of_kind(value: Any, kind: StructKind) -> bool:
    return isinstance(value, NativeValue) and value._KIND is kind


def integer_operand(value: Any) -> Optional[gmpy2.mpz]:
    """Integer или native int → mpz; иначе None."""
    if is_value_of_kind(value, StructKind.INTEGER):
        return gmpy2.mpz(value._struct.value)
    if is_native_int(value):
        return to_engine_int(value)
    return None


def require_integer_operand(value: Any, name: str = "operand") -> gmpy2.mpz:
    """
    Raises:
        TypeError: Если value не Integer и не int
    """
    operand = integer_operand(value)
    if operand is None:
        raise TypeError(f"{name} must be an Integer or int, got {type(value).__name__}")
    return operand


def rational_operand(value: Any) -> Optional[gmpy2.mpq]:
    """Rational, Integer или native int → mpq; иначе None."""
    if is_value_of_kind(value, StructKind.RATIONAL):
        return value._struct.as_mpq()
    operand = integer_operand(value)
    if operand is None:
        return None
    return gmpy2.mpq(operand, 1)


def require_exponent(value: Any, name: str = "exponent") -> int:
    """
    Raises:
        TypeError: Если value не целое
    """
    if isinstance(value, bool) or not is_native_int(value):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return int(value)
