"""
Sticky Flags — Процессный регистр sticky-флагов исключений float

Регистр накапливает флаги, поднятые КАЖДОЙ float-операцией любого
экземпляра RoundedFloat / FixedFloat. Флаг остаётся поднятым, пока его
явно не сбросят.

Флаги:
- UNDERFLOW: результат слишком мал по модулю
- OVERFLOW: результат слишком велик по модулю
- NAN: невалидная операция (результат NaN)
- INEXACT: результат округлён
- ERANGE: ошибка диапазона (например, сравнение с NaN)
- DIVIDE_BY_ZERO: точная бесконечность из конечных операндов

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Регистр глобален для процесса, не per-value
2. Отдельные raise/clear/snapshot атомарны (threading.Lock)
3. Окно clear → run → inspect НЕ сериализовано: параллельные операции
   из разных потоков портят наблюдения друг друга
"""

import threading
from enum import Flag, auto
from typing import Any, Final


# =============================================================================
# FLAGS
# =============================================================================


class ExceptionFlags(Flag):
    """Набор sticky-флагов исключений float."""

    NONE = 0
    UNDERFLOW = auto()
    OVERFLOW = auto()
    NAN = auto()
    INEXACT = auto()
    ERANGE = auto()
    DIVIDE_BY_ZERO = auto()


ALL_FLAGS: Final[ExceptionFlags] = (
    ExceptionFlags.UNDERFLOW
    | ExceptionFlags.OVERFLOW
    | ExceptionFlags.NAN
    | ExceptionFlags.INEXACT
    | ExceptionFlags.ERANGE
    | ExceptionFlags.DIVIDE_BY_ZERO
)

# Всё, кроме INEXACT: флаги, которые проверяют checked-операции
EXCEPTION_FLAGS: Final[ExceptionFlags] = ALL_FLAGS & ~ExceptionFlags.INEXACT

# Атрибут контекста gmpy2 → флаг
_CONTEXT_FLAG_ATTRS: Final[tuple[tuple[str, ExceptionFlags], ...]] = (
    ("underflow", ExceptionFlags.UNDERFLOW),
    ("overflow", ExceptionFlags.OVERFLOW),
    ("invalid", ExceptionFlags.NAN),
    ("inexact", ExceptionFlags.INEXACT),
    ("erange", ExceptionFlags.ERANGE),
    ("divzero", ExceptionFlags.DIVIDE_BY_ZERO),
)


def flags_from_context(ctx: Any) -> ExceptionFlags:
    """Флаги, поднятые в контексте gmpy2."""
    flags = ExceptionFlags.NONE
    for attr, flag in _CONTEXT_FLAG_ATTRS:
        if getattr(ctx, attr):
            flags |= flag
    return flags


# =============================================================================
# REGISTER
# =============================================================================


class StickyFlagRegister:
    """
    Процессный регистр sticky-флагов.

    Example:
        >>> register = StickyFlagRegister()
        >>> register.raise_flags(ExceptionFlags.OVERFLOW)
        >>> register.test(ExceptionFlags.OVERFLOW)
        True
        >>> register.clear(ExceptionFlags.OVERFLOW)
        >>> register.snapshot()
        <ExceptionFlags.NONE: 0>
    """

    def __init__(self) -> None:
        self._flags = ExceptionFlags.NONE
        self._lock = threading.Lock()

    def raise_flags(self, flags: ExceptionFlags) -> None:
        """Поднять флаги (OR с текущим состоянием)."""
        if not flags:
            return
        with self._lock:
            self._flags |= flags

    def clear(self, flags: ExceptionFlags = ALL_FLAGS) -> None:
        """Сбросить флаги (по умолчанию все)."""
        with self._lock:
            self._flags &= ~flags

    def test(self, flags: ExceptionFlags) -> bool:
        """True если поднят хотя бы один из flags."""
        with self._lock:
            return bool(self._flags & flags)

    def snapshot(self) -> ExceptionFlags:
        """Текущее состояние регистра."""
        with self._lock:
            return self._flags

    # -------------------------------------------------------------------------
    # Именованные проверки
    # -------------------------------------------------------------------------

    @property
    def underflow(self) -> bool:
        return self.test(ExceptionFlags.UNDERFLOW)

    @property
    def overflow(self) -> bool:
        return self.test(ExceptionFlags.OVERFLOW)

    @property
    def nan(self) -> bool:
        return self.test(ExceptionFlags.NAN)

    @property
    def inexact(self) -> bool:
        return self.test(ExceptionFlags.INEXACT)

    @property
    def erange(self) -> bool:
        return self.test(ExceptionFlags.ERANGE)

    @property
    def divide_by_zero(self) -> bool:
        return self.test(ExceptionFlags.DIVIDE_BY_ZERO)

    def __repr__(self) -> str:
        return f"StickyFlagRegister({self.snapshot()!r})"


STICKY_FLAGS: Final[StickyFlagRegister] = StickyFlagRegister()
