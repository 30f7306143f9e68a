"""
Rounding Modes — Режимы округления и ternary-результат

Режим округления передаётся явно в КАЖДЫЙ вызов RoundedFloat, значение
не хранит состояние округления.

Ternary-код:
-  0: результат точный
- >0: результат округлён вверх относительно точного значения
- <0: результат округлён вниз относительно точного значения
"""

from enum import Enum
from typing import Any, NamedTuple

import gmpy2


# =============================================================================
# ENUMS
# =============================================================================


class RoundingMode(str, Enum):
    """Режим округления MPFR."""

    NEAREST = "nearest"
    TOWARD_ZERO = "toward_zero"
    UP = "up"
    DOWN = "down"
    AWAY_FROM_ZERO = "away_from_zero"

    @property
    def engine_value(self) -> int:
        """Константа округления gmpy2 для этого режима."""
        return _ENGINE_ROUNDING[self]

    @classmethod
    def from_engine(cls, value: int) -> "RoundingMode":
        """Обратное отображение константы gmpy2 в RoundingMode."""
        for mode, engine in _ENGINE_ROUNDING.items():
            if engine == value:
                return mode
        raise ValueError(f"Unknown engine rounding mode: {value!r}")


_ENGINE_ROUNDING: dict[RoundingMode, int] = {
    RoundingMode.NEAREST: gmpy2.RoundToNearest,
    RoundingMode.TOWARD_ZERO: gmpy2.RoundToZero,
    RoundingMode.UP: gmpy2.RoundUp,
    RoundingMode.DOWN: gmpy2.RoundDown,
    RoundingMode.AWAY_FROM_ZERO: gmpy2.RoundAwayZero,
}


# =============================================================================
# TERNARY
# =============================================================================


class Ternary:
    """Именованные значения ternary-кода."""

    EXACT = 0
    ROUNDED_UP = 1
    ROUNDED_DOWN = -1

    @staticmethod
    def normalize(value: int) -> int:
        """Сведение произвольного знакового кода к -1/0/1."""
        if value > 0:
            return Ternary.ROUNDED_UP
        if value < 0:
            return Ternary.ROUNDED_DOWN
        return Ternary.EXACT


class RoundedResult(NamedTuple):
    """
    Результат операции с явным округлением.

    Поддерживает распаковку: ``value, ternary = x.adding(y)``.
    """

    value: Any
    ternary: int
