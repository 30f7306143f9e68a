"""
Native Int — Правила диапазонов native integer

Смешанные операции value/native-int раскладывают native int на
(знак, модуль). Самое отрицательное 64-битное значение (-2**63) не имеет
представимого модуля в int64, поэтому сразу переводится в беззнаковый
модуль 2**63.

Python int вне 64-битного диапазона продвигается в целое движка (mpz).
"""

from typing import Final, NamedTuple

import gmpy2

from src.core.errors import NativeIntOverflowError

# =============================================================================
# ГРАНИЦЫ
# =============================================================================

INT16_MIN: Final[int] = -(2**15)
INT16_MAX: Final[int] = 2**15 - 1
UINT16_MAX: Final[int] = 2**16 - 1
INT32_MIN: Final[int] = -(2**31)
INT32_MAX: Final[int] = 2**31 - 1
UINT32_MAX: Final[int] = 2**32 - 1
INT64_MIN: Final[int] = -(2**63)
INT64_MAX: Final[int] = 2**63 - 1
UINT64_MAX: Final[int] = 2**64 - 1

NATIVE_RANGES: Final[dict[str, tuple[int, int]]] = {
    "int16": (INT16_MIN, INT16_MAX),
    "uint16": (0, UINT16_MAX),
    "int32": (INT32_MIN, INT32_MAX),
    "uint32": (0, UINT32_MAX),
    "int64": (INT64_MIN, INT64_MAX),
    "uint64": (0, UINT64_MAX),
}


class SplitInt(NamedTuple):
    """Native int, разложенный на знак и беззнаковый модуль."""

    negative: bool
    magnitude: int


# =============================================================================
# ФУНКЦИИ
# =============================================================================


def is_native_int(value: object) -> bool:
    """True для Python int (bool исключён) и целых движка."""
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or isinstance(value, (type(gmpy2.mpz(0)), type(gmpy2.xmpz(0))))


def split_native_int(value: int) -> SplitInt:
    """
    Разложение int64 на (знак, модуль).

    Args:
        value: Значение в диапазоне int64

    Returns:
        SplitInt; для INT64_MIN модуль равен 2**63

    Raises:
        NativeIntOverflowError: Если value вне int64

    Examples:
        >>> split_native_int(-5)
        SplitInt(negative=True, magnitude=5)
        >>> split_native_int(INT64_MIN).magnitude == 2**63
        True
    """
    value = int(value)
    if not INT64_MIN <= value <= INT64_MAX:
        raise NativeIntOverflowError(f"{value} is outside the signed 64-bit range")
    if value == INT64_MIN:
        return SplitInt(True, 2**63)
    if value < 0:
        return SplitInt(True, -value)
    return SplitInt(False, value)


def to_engine_int(value: int) -> gmpy2.mpz:
    """
    Native int → целое движка.

    Значения в int64 проходят через split_native_int, остальные
    продвигаются напрямую.
    """
    value = int(value)
    if INT64_MIN <= value <= INT64_MAX:
        negative, magnitude = split_native_int(value)
        engine = gmpy2.mpz(magnitude)
        return -engine if negative else engine
    return gmpy2.mpz(value)


def fits_native(value: int, kind: str) -> bool:
    """
    Проверка диапазона для native-типа.

    Args:
        value: Целое значение
        kind: Имя типа ("int16", "uint16", "int32", "uint32", "int64", "uint64")

    Raises:
        KeyError: Если kind неизвестен
    """
    low, high = NATIVE_RANGES[kind]
    return low <= value <= high


def require_native(value: int, kind: str) -> int:
    """
    Конверсия в native-тип с проверкой диапазона.

    Raises:
        NativeIntOverflowError: Если value не помещается в kind
    """
    value = int(value)
    if not fits_native(value, kind):
        raise NativeIntOverflowError(f"{value} does not fit in {kind}")
    return value


def require_unsigned(value: int, name: str = "value") -> int:
    """
    Проверка неотрицательного native-аргумента (аналог unsigned long).

    Raises:
        ValueError: Если value < 0 или больше UINT64_MAX
    """
    value = int(value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    if value > UINT64_MAX:
        raise ValueError(f"{name} exceeds the unsigned 64-bit range: {value}")
    return value
