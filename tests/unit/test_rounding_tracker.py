"""
Тесты для режимов округления, sticky-регистра и RoundingExceptionTracker

Проверяемые инварианты:
1. RoundingMode ↔ константы движка взаимно однозначны
2. Регистр накапливает флаги до явного сброса
3. engine_context всегда восстанавливает контекст вызывающего кода
4. Флаги переносятся в регистр даже при исключении внутри операции
5. Checked-операция сбрасывает флаги исключений перед вызовом
"""

import gmpy2
import pytest

from src.core.errors import FloatingPointFlagsError
from src.rounding.flags import (
    ALL_FLAGS,
    EXCEPTION_FLAGS,
    STICKY_FLAGS,
    ExceptionFlags,
    StickyFlagRegister,
    flags_from_context,
)
from src.rounding.modes import RoundedResult, RoundingMode, Ternary
from src.rounding.tracker import (
    TRACKER,
    RoundingExceptionTracker,
    engine_context,
    round_to_precision,
)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def register():
    """Изолированный регистр."""
    return StickyFlagRegister()


@pytest.fixture
def tracker(register):
    """Трекер над изолированным регистром."""
    return RoundingExceptionTracker(register)


# =============================================================================
# ТЕСТЫ: RoundingMode и Ternary
# =============================================================================


class TestRoundingMode:
    """Тесты отображения режимов."""

    def test_engine_round_trip(self):
        for mode in RoundingMode:
            assert RoundingMode.from_engine(mode.engine_value) is mode

    def test_known_constants(self):
        assert RoundingMode.NEAREST.engine_value == gmpy2.RoundToNearest
        assert RoundingMode.DOWN.engine_value == gmpy2.RoundDown

    def test_unknown_engine_value(self):
        with pytest.raises(ValueError, match="Unknown engine rounding mode"):
            RoundingMode.from_engine(-99)

    def test_string_values(self):
        assert RoundingMode("toward_zero") is RoundingMode.TOWARD_ZERO

    def test_ternary_normalize(self):
        assert Ternary.normalize(17) == Ternary.ROUNDED_UP
        assert Ternary.normalize(-3) == Ternary.ROUNDED_DOWN
        assert Ternary.normalize(0) == Ternary.EXACT

    def test_rounded_result_unpacks(self):
        value, ternary = RoundedResult("x", 1)
        assert (value, ternary) == ("x", 1)


# =============================================================================
# ТЕСТЫ: StickyFlagRegister
# =============================================================================


class TestStickyFlagRegister:
    """Тесты регистра флагов."""

    def test_starts_empty(self, register):
        assert register.snapshot() == ExceptionFlags.NONE
        assert not register.overflow

    def test_raise_accumulates(self, register):
        register.raise_flags(ExceptionFlags.OVERFLOW)
        register.raise_flags(ExceptionFlags.INEXACT)
        assert register.overflow
        assert register.inexact
        assert not register.underflow

    def test_clear_selected(self, register):
        register.raise_flags(ExceptionFlags.NAN | ExceptionFlags.ERANGE)
        register.clear(ExceptionFlags.NAN)
        assert not register.nan
        assert register.erange

    def test_clear_all(self, register):
        register.raise_flags(ALL_FLAGS)
        register.clear()
        assert register.snapshot() == ExceptionFlags.NONE

    def test_exception_flags_exclude_inexact(self):
        assert not EXCEPTION_FLAGS & ExceptionFlags.INEXACT
        assert EXCEPTION_FLAGS & ExceptionFlags.DIVIDE_BY_ZERO

    def test_test_any_of(self, register):
        register.raise_flags(ExceptionFlags.UNDERFLOW)
        assert register.test(ExceptionFlags.UNDERFLOW | ExceptionFlags.OVERFLOW)
        assert not register.test(ExceptionFlags.DIVIDE_BY_ZERO)

    def test_flags_from_context(self):
        ctx = gmpy2.context()
        ctx.overflow = True
        ctx.divzero = True
        assert flags_from_context(ctx) == ExceptionFlags.OVERFLOW | ExceptionFlags.DIVIDE_BY_ZERO


# =============================================================================
# ТЕСТЫ: engine_context
# =============================================================================


class TestEngineContext:
    """Тесты активного контекста движка."""

    def test_sets_precision_and_rounding(self, register):
        with engine_context(77, RoundingMode.UP, register) as ctx:
            assert ctx.precision == 77
            assert ctx.round == gmpy2.RoundUp

    def test_restores_caller_context(self, register):
        before = gmpy2.get_context().precision
        with engine_context(200, RoundingMode.DOWN, register):
            pass
        assert gmpy2.get_context().precision == before

    def test_restores_on_exception(self, register):
        before = gmpy2.get_context().precision
        with pytest.raises(RuntimeError):
            with engine_context(300, register=register):
                raise RuntimeError("boom")
        assert gmpy2.get_context().precision == before

    def test_flags_transferred_on_exception(self, register):
        with pytest.raises(RuntimeError):
            with engine_context(53, register=register):
                gmpy2.mpfr(1) / 0
                raise RuntimeError("after division")
        assert register.divide_by_zero

    def test_no_register_discards_flags(self):
        STICKY_FLAGS.clear()
        with engine_context(53, register=None):
            gmpy2.mpfr(1) / 0
        assert not STICKY_FLAGS.divide_by_zero


# =============================================================================
# ТЕСТЫ: RoundingExceptionTracker
# =============================================================================


class TestTracker:
    """Тесты исполнения операций."""

    def test_exact_operation(self, tracker, register):
        value, ternary = tracker.run(lambda: gmpy2.mpfr(1) + 1, 53)
        assert value == 2
        assert ternary == Ternary.EXACT
        assert not register.inexact

    def test_inexact_operation(self, tracker, register):
        _, ternary = tracker.run(lambda: gmpy2.mpfr(1) / 3, 53, RoundingMode.UP)
        assert ternary == Ternary.ROUNDED_UP
        assert register.inexact

    def test_ternary_by_recompute(self, tracker):
        """NEAREST: направление определяется пересчётом с DOWN."""
        _, up = tracker.run(lambda: gmpy2.mpfr(1) / 10, 53, RoundingMode.NEAREST)
        _, down = tracker.run(lambda: gmpy2.mpfr(1) / 3, 53, RoundingMode.NEAREST)
        assert up == Ternary.ROUNDED_UP
        assert down == Ternary.ROUNDED_DOWN

    def test_recompute_does_not_touch_register(self, tracker, register):
        tracker.run(lambda: gmpy2.mpfr(1) / 3, 53, RoundingMode.NEAREST)
        register.clear()
        tracker.run(lambda: gmpy2.mpfr(1) + 1, 53, RoundingMode.NEAREST)
        assert register.snapshot() == ExceptionFlags.NONE

    def test_compute_returns_value_only(self, tracker, register):
        value = tracker.compute(lambda: gmpy2.mpfr(1) / 0, 53, RoundingMode.NEAREST)
        assert gmpy2.is_infinite(value)
        assert register.divide_by_zero

    def test_checked_raises_with_all_flags(self, tracker):
        with pytest.raises(FloatingPointFlagsError) as exc_info:
            tracker.checked("log", lambda: gmpy2.log(gmpy2.mpfr(0)), 53)
        assert exc_info.value.flags & ExceptionFlags.DIVIDE_BY_ZERO
        assert exc_info.value.operation == "log"

    def test_checked_ignores_inexact(self, tracker):
        value, ternary = tracker.checked("log", lambda: gmpy2.log(gmpy2.mpfr(3)), 53)
        assert ternary != Ternary.EXACT
        assert value > 1

    def test_checked_clears_stale_flags(self, tracker, register):
        register.raise_flags(ExceptionFlags.NAN)
        tracker.checked("exp", lambda: gmpy2.exp(gmpy2.mpfr(0)), 53)
        assert not register.nan

    def test_round_to_precision(self):
        value, ternary = round_to_precision(gmpy2.mpq(1, 3), 10, RoundingMode.DOWN)
        assert ternary == Ternary.ROUNDED_DOWN
        assert value.precision == 10

    def test_global_tracker_uses_global_register(self):
        assert TRACKER.register is STICKY_FLAGS
