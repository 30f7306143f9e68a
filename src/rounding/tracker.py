"""
RoundingExceptionTracker — Оркестрация округления и sticky-флагов

Каждая float-операция выполняется в свежем контексте gmpy2 с заданной
точностью и режимом округления. После операции:
- флаги контекста переносятся (OR) в процессный регистр STICKY_FLAGS
- вычисляется ternary-код результата

Ternary:
- флаг inexact не поднят → 0
- DOWN → -1, UP → +1 (направление задано режимом)
- иначе операция повторяется в scratch-контексте с округлением DOWN
  (без записи флагов): совпадение результатов → -1, иначе → +1

Checked-операции (exp, log*, гиперболическое семейство):
    clear(EXCEPTION_FLAGS) → run → inspect → FloatingPointFlagsError

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Контекст вызывающего кода восстанавливается всегда (finally)
2. Флаги операции попадают в регистр даже при исключении внутри операции
3. Scratch-пересчёт ternary не трогает регистр
4. Окно clear → run → inspect не защищено от параллельных потоков
"""

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import gmpy2

from src.core.errors import FloatingPointFlagsError
from src.rounding.flags import (
    EXCEPTION_FLAGS,
    STICKY_FLAGS,
    ExceptionFlags,
    StickyFlagRegister,
    flags_from_context,
)
from src.rounding.modes import RoundedResult, RoundingMode, Ternary

_logger = logging.getLogger(__name__)

EngineOperation = Callable[[], Any]


# =============================================================================
# ENGINE CONTEXT
# =============================================================================


@contextmanager
def engine_context(
    precision: int,
    rounding: RoundingMode = RoundingMode.NEAREST,
    register: Optional[StickyFlagRegister] = STICKY_FLAGS,
) -> Iterator[Any]:
    """
    Активный контекст gmpy2 с заданной точностью и округлением.

    Args:
        precision: Точность результата (бит)
        rounding: Режим округления
        register: Регистр для переноса флагов (None → флаги отбрасываются)

    Yields:
        Активный контекст gmpy2 (флаги читаются из него)
    """
    previous = gmpy2.get_context()
    gmpy2.set_context(gmpy2.context(precision=precision, round=rounding.engine_value))
    active = gmpy2.get_context()
    try:
        yield active
    finally:
        raised = flags_from_context(active)
        gmpy2.set_context(previous)
        if register is not None:
            register.raise_flags(raised)


# =============================================================================
# TRACKER
# =============================================================================


class RoundingExceptionTracker:
    """
    Исполнитель float-операций с ternary-кодом и учётом sticky-флагов.

    Операция — функция без аргументов, вызывающая gmpy2 в активном
    контексте; она может быть вызвана повторно для вычисления ternary,
    поэтому не должна иметь побочных эффектов.
    """

    def __init__(self, register: StickyFlagRegister = STICKY_FLAGS):
        self._register = register

    @property
    def register(self) -> StickyFlagRegister:
        return self._register

    def run(
        self,
        operation: EngineOperation,
        precision: int,
        rounding: RoundingMode = RoundingMode.NEAREST,
    ) -> RoundedResult:
        """
        Выполнение операции с записью флагов в регистр.

        Args:
            operation: Вычисление результата в активном контексте
            precision: Точность результата
            rounding: Режим округления

        Returns:
            RoundedResult(engine value, ternary)
        """
        with engine_context(precision, rounding, self._register) as ctx:
            value = operation()
            inexact = bool(ctx.inexact)

        return RoundedResult(value, self._ternary(operation, value, inexact, precision, rounding))

    def compute(self, operation: EngineOperation, precision: int, rounding: RoundingMode) -> Any:
        """Только значение результата (без ternary)."""
        with engine_context(precision, rounding, self._register):
            return operation()

    def checked(
        self,
        name: str,
        operation: EngineOperation,
        precision: int,
        rounding: RoundingMode = RoundingMode.NEAREST,
    ) -> RoundedResult:
        """
        Операция со строгой проверкой флагов.

        Сбрасывает все флаги исключений (кроме INEXACT) непосредственно
        перед операцией и проверяет регистр сразу после.

        Raises:
            FloatingPointFlagsError: Если сработал любой флаг исключения
        """
        self._register.clear(EXCEPTION_FLAGS)
        result = self.run(operation, precision, rounding)
        fired = self._register.snapshot() & EXCEPTION_FLAGS
        _logger.debug("%s flag bracket: %s", name, fired)
        if fired != ExceptionFlags.NONE:
            _logger.warning("%s raised floating-point flags %s", name, fired)
            raise FloatingPointFlagsError(fired, name)
        return result

    # -------------------------------------------------------------------------
    # Ternary
    # -------------------------------------------------------------------------

    def _ternary(
        self,
        operation: EngineOperation,
        value: Any,
        inexact: bool,
        precision: int,
        rounding: RoundingMode,
    ) -> int:
        if not inexact or gmpy2.is_nan(value):
            return Ternary.EXACT
        if rounding is RoundingMode.DOWN:
            return Ternary.ROUNDED_DOWN
        if rounding is RoundingMode.UP:
            return Ternary.ROUNDED_UP

        with engine_context(precision, RoundingMode.DOWN, register=None):
            lower = operation()
        return Ternary.ROUNDED_DOWN if value == lower else Ternary.ROUNDED_UP


TRACKER = RoundingExceptionTracker()


def round_to_precision(
    value: Any, precision: int, rounding: RoundingMode = RoundingMode.NEAREST
) -> RoundedResult:
    """Округление значения движка к точности precision."""
    return TRACKER.run(lambda: gmpy2.mpfr(value, precision), precision, rounding)
