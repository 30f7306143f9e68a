"""
Тесты для RoundedFloat

Проверяемые инварианты:
1. Каждая операция возвращает (value, ternary); знак ternary совпадает
   с направлением округления
2. Режим округления передаётся в вызов; None → режим по умолчанию
3. Деление на ноль → ±Inf/NaN и sticky-флаг, без исключения
4. Отрицательный аргумент square_root → NegativeSquareRootError
5. Checked-семейство (exp, log*, гиперболические) поднимает
   FloatingPointFlagsError при любом флаге исключения
6. √2 на 100 битах в пределах 1 ulp
"""

import math

import pytest

from src.core.errors import (
    FloatingPointFlagsError,
    InvalidExponentError,
    NegativeSquareRootError,
)
from src.core.config import reset_config
from src.entropy.random_state import RandomState
from src.numbers.fixed_float import FixedFloat
from src.numbers.integer import Integer
from src.numbers.rational import Rational
from src.numbers.rounded_float import RoundedFloat, resolve_rounding
from src.rounding.flags import STICKY_FLAGS, ExceptionFlags
from src.rounding.modes import RoundingMode, Ternary


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_state():
    """Чистая конфигурация и пустой sticky-регистр для каждого теста."""
    reset_config()
    STICKY_FLAGS.clear()
    yield
    reset_config()
    STICKY_FLAGS.clear()


@pytest.fixture
def one():
    return RoundedFloat(1, precision=53)


@pytest.fixture
def two_100():
    """2 с точностью 100 бит."""
    return RoundedFloat(2, precision=100)


# =============================================================================
# ТЕСТЫ: Конструирование и настройки
# =============================================================================


class TestRoundedFloatConstruction:
    """Тесты конструкторов и настроек по умолчанию."""

    def test_default_precision(self):
        assert RoundedFloat().precision == 53
        assert RoundedFloat.default_precision() == 53

    def test_set_default_precision(self):
        RoundedFloat.set_default_precision(80)
        assert RoundedFloat(1).precision == 80

    def test_default_rounding(self):
        assert RoundedFloat.default_rounding() is RoundingMode.NEAREST
        RoundedFloat.set_default_rounding(RoundingMode.UP)
        assert resolve_rounding(None) is RoundingMode.UP

    def test_resolve_rounding_accepts_names(self):
        assert resolve_rounding("down") is RoundingMode.DOWN
        assert resolve_rounding(RoundingMode.TOWARD_ZERO) is RoundingMode.TOWARD_ZERO

    def test_rounded_from_reports_ternary(self):
        value, ternary = RoundedFloat.rounded_from(Rational(1, 3), 53, RoundingMode.UP)
        assert ternary == Ternary.ROUNDED_UP
        assert value.to_rational() > Rational(1, 3)

        exact, ternary = RoundedFloat.rounded_from(Integer(5), 53)
        assert ternary == Ternary.EXACT
        assert exact == 5

    def test_conversion_rounding(self):
        down = RoundedFloat(Rational(1, 3), precision=8, rounding=RoundingMode.DOWN)
        up = RoundedFloat(Rational(1, 3), precision=8, rounding=RoundingMode.UP)
        assert down < up
        assert down.next_up() == up

    def test_from_fixed_float(self):
        assert RoundedFloat(FixedFloat(2.5)) == 2.5

    def test_set_precision_returns_ternary(self, one):
        third = one.divided(3).value
        ternary = third.set_precision(8, RoundingMode.UP)
        assert ternary == Ternary.ROUNDED_UP
        assert third.precision == 8

    def test_set_returns_ternary(self):
        x = RoundedFloat(0, precision=53)
        assert x.set(7) == Ternary.EXACT
        assert x.set(Rational(1, 3), RoundingMode.DOWN) == Ternary.ROUNDED_DOWN
        assert x.precision == 53


# =============================================================================
# ТЕСТЫ: Ternary
# =============================================================================


class TestTernary:
    """Тесты знака ternary-кода."""

    def test_exact_result(self, one):
        value, ternary = one.adding(1)
        assert value == 2
        assert ternary == Ternary.EXACT

    def test_directed_modes(self, one):
        _, down = one.divided(3, RoundingMode.DOWN)
        _, up = one.divided(3, RoundingMode.UP)
        assert down == Ternary.ROUNDED_DOWN
        assert up == Ternary.ROUNDED_UP

    def test_nearest_mode(self, one):
        """1/3 в double округляется вниз."""
        value, ternary = one.divided(3, RoundingMode.NEAREST)
        assert ternary == Ternary.ROUNDED_DOWN
        assert value.to_float() == 1 / 3

    def test_toward_zero_on_negative(self):
        value, ternary = RoundedFloat(-1, precision=53).divided(3, RoundingMode.TOWARD_ZERO)
        assert ternary == Ternary.ROUNDED_UP
        assert value.to_rational() > Rational(-1, 3)

    def test_away_from_zero(self, one):
        value, ternary = one.divided(3, RoundingMode.AWAY_FROM_ZERO)
        assert ternary == Ternary.ROUNDED_UP
        assert value.to_rational() > Rational(1, 3)

    def test_default_rounding_applies(self, one):
        RoundedFloat.set_default_rounding(RoundingMode.UP)
        _, ternary = one.divided(3)
        assert ternary == Ternary.ROUNDED_UP

    def test_directed_results_bracket_exact(self, one):
        low = one.divided(3, RoundingMode.DOWN).value
        high = one.divided(3, RoundingMode.UP).value
        assert low.to_rational() < Rational(1, 3) < high.to_rational()
        assert low.next_up() == high


# =============================================================================
# ТЕСТЫ: Арифметика
# =============================================================================


class TestRoundedFloatArithmetic:
    """Тесты арифметики."""

    def test_operators_use_default_rounding(self, one):
        assert one + 1 == 2
        assert one - Integer(3) == -2
        assert one * 4 == 4
        assert (one / 3).to_float() == 1 / 3
        assert -one == -1
        assert abs(RoundedFloat(-2)) == 2
        assert one**5 == 1

    def test_reflected_operators(self, one):
        assert 3 - one == 2
        assert 4 / RoundedFloat(8) == 0.5
        assert 2 * one == 2

    def test_reverse_forms_use_other_precision(self):
        other = RoundedFloat(3, precision=100)
        value, ternary = RoundedFloat.quotient(1, other, RoundingMode.DOWN)
        assert value.precision == 100
        assert ternary == Ternary.ROUNDED_DOWN

        difference, ternary = RoundedFloat.difference(10, other)
        assert difference == 7
        assert ternary == Ternary.EXACT

    def test_powers(self):
        x = RoundedFloat(3, precision=53)
        assert x.raised_to_power(4).value == 81
        assert x.raised_to_power(Integer(2)).value == 9
        assert RoundedFloat(4).raised_to_power(RoundedFloat(0.5)).value == 2
        assert RoundedFloat.power(2, 10).value == 1024

    def test_power_type_check(self):
        with pytest.raises(TypeError):
            RoundedFloat(2).raised_to_power(0.5)

    def test_power_of_2_scaling(self):
        x = RoundedFloat(3)
        assert x.multiplied_by_power_of_2(3).value == 24
        assert x.multiplied_by_power_of_2(-1).value == 1.5
        assert x.divided_by_power_of_2(2).value == 0.75

    def test_divided_by_negative_power_of_2(self):
        with pytest.raises(InvalidExponentError):
            RoundedFloat(3).divided_by_power_of_2(-1)

    def test_relative_difference(self):
        value, ternary = RoundedFloat(4).relative_difference(RoundedFloat(3))
        assert value == 0.25
        assert ternary == Ternary.EXACT

    def test_next_up_and_down(self, one):
        above = one.next_up()
        below = one.next_down()
        assert below < one < above
        assert above.next_down() == one
        assert above.precision == one.precision

    def test_minimum_and_maximum(self):
        a = RoundedFloat(2)
        b = RoundedFloat(5)
        assert a.minimum(b).value == 2
        assert a.maximum(b).value == 5

    def test_minimum_ignores_nan(self):
        nan = RoundedFloat(0) / 0
        assert RoundedFloat(3).minimum(nan).value == 3


# =============================================================================
# ТЕСТЫ: Квадратный корень
# =============================================================================


class TestSquareRoot:
    """Тесты квадратного корня."""

    def test_negative_raises(self):
        value = RoundedFloat(-2, precision=100)
        with pytest.raises(NegativeSquareRootError):
            value.square_root()
        with pytest.raises(NegativeSquareRootError):
            value.square_root_in_place()
        assert value == -2

    def test_sqrt2_within_one_ulp(self, two_100):
        """√2 на 100 битах отличается от точного не более чем на 1 ulp."""
        root, ternary = two_100.square_root()
        assert root.precision == 100
        assert ternary != Ternary.EXACT

        # root ∈ [1, 2): ulp = 2**-99, root × 2**99 целое
        scaled = root.multiplied_by_power_of_2(99).value.to_integer()
        exact_floor = Integer(2).multiplied_by_power_of_2(198).square_root()
        assert abs(scaled - exact_floor) <= 1

    def test_sqrt2_directed_bracket(self, two_100):
        low, _ = two_100.square_root(RoundingMode.DOWN)
        high, _ = two_100.square_root(RoundingMode.UP)
        nearest, _ = two_100.square_root(RoundingMode.NEAREST)
        assert low.next_up() == high
        assert nearest == low or nearest == high

    def test_square_root_of_native(self):
        value, ternary = RoundedFloat.square_root_of(16, precision=64)
        assert value == 4
        assert ternary == Ternary.EXACT

    def test_square_root_in_place_returns_ternary(self):
        x = RoundedFloat(2, precision=53)
        assert x.square_root_in_place(RoundingMode.UP) == Ternary.ROUNDED_UP
        assert x > 1.41421356


# =============================================================================
# ТЕСТЫ: Исключительные результаты и флаги
# =============================================================================


class TestExceptionalResults:
    """Тесты деления на ноль и sticky-флагов."""

    def test_division_by_zero(self, one):
        value, _ = one.divided(0)
        assert value.is_infinite
        assert value.is_positive
        assert STICKY_FLAGS.divide_by_zero

    def test_zero_over_zero(self):
        value, ternary = RoundedFloat(0).divided(RoundedFloat(0))
        assert value.is_nan
        assert ternary == Ternary.EXACT
        assert STICKY_FLAGS.nan

    def test_flags_are_sticky(self, one):
        one.divided(0)
        one.adding(1)
        assert STICKY_FLAGS.divide_by_zero

    def test_inexact_flag(self, one):
        one.adding(1)
        assert not STICKY_FLAGS.inexact
        one.divided(3)
        assert STICKY_FLAGS.inexact

    def test_nan_comparison_raises_erange(self):
        nan = RoundedFloat(0) / 0
        STICKY_FLAGS.clear()

        assert not nan == 1
        assert not nan > 1
        assert nan.compare(RoundedFloat(1)) is None
        assert STICKY_FLAGS.erange
        assert nan.sign == 0


# =============================================================================
# ТЕСТЫ: Checked-семейство
# =============================================================================


class TestCheckedFunctions:
    """Тесты операций со строгой проверкой флагов."""

    def test_log_of_zero(self):
        with pytest.raises(FloatingPointFlagsError) as exc_info:
            RoundedFloat(0).log()
        assert exc_info.value.flags & ExceptionFlags.DIVIDE_BY_ZERO
        assert exc_info.value.operation == "log"

    def test_log_of_negative(self):
        with pytest.raises(FloatingPointFlagsError) as exc_info:
            RoundedFloat(-1).log10()
        assert exc_info.value.flags & ExceptionFlags.NAN

    def test_exp_overflow(self):
        with pytest.raises(FloatingPointFlagsError, match="exp"):
            RoundedFloat(1e10).exp()
        assert STICKY_FLAGS.overflow

    def test_checked_clears_stale_flags(self):
        """Ранее поднятые флаги не влияют на checked-операцию."""
        STICKY_FLAGS.raise_flags(ExceptionFlags.OVERFLOW | ExceptionFlags.NAN)
        value, _ = RoundedFloat(1).exp()
        assert value.to_float() == pytest.approx(math.e)

    def test_inexact_does_not_raise(self):
        value, ternary = RoundedFloat(2).log2()
        assert value == 1
        assert ternary == Ternary.EXACT

        value, ternary = RoundedFloat(3).log()
        assert ternary != Ternary.EXACT

    def test_hyperbolic(self):
        sinh, cosh = RoundedFloat(0).sinh_cosh()
        assert sinh.value == 0
        assert cosh.value == 1
        assert RoundedFloat(0).tanh().value == 0
        assert RoundedFloat(0).asinh().value == 0
        assert RoundedFloat(1).acosh().value == 0

    def test_hyperbolic_domain_errors(self):
        with pytest.raises(FloatingPointFlagsError):
            RoundedFloat(0.5).acosh()
        with pytest.raises(FloatingPointFlagsError):
            RoundedFloat(1).atanh()

    def test_hyperbolic_overflow(self):
        with pytest.raises(FloatingPointFlagsError):
            RoundedFloat(1e10).cosh()


# =============================================================================
# ТЕСТЫ: Тригонометрия, округление к целому, константы
# =============================================================================


class TestRoundedMath:
    """Тесты функций и констант."""

    def test_trigonometry(self):
        assert RoundedFloat(0).sin().value == 0
        assert RoundedFloat(0).cos().value == 1
        sin, cos = RoundedFloat(0.5).sin_cos()
        assert sin.value.to_float() == pytest.approx(math.sin(0.5))
        assert cos.value.to_float() == pytest.approx(math.cos(0.5))
        assert RoundedFloat(1).tan().value.to_float() == pytest.approx(math.tan(1))

    def test_inverse_trigonometry(self):
        assert RoundedFloat(1).asin().value.to_float() == pytest.approx(math.pi / 2)
        assert RoundedFloat(1).acos().value == 0
        assert RoundedFloat(1).atan().value.to_float() == pytest.approx(math.pi / 4)
        assert RoundedFloat(1).atan2(RoundedFloat(1)).value.to_float() == pytest.approx(math.pi / 4)

    def test_asin_out_of_domain_is_nan(self):
        value, _ = RoundedFloat(2).asin()
        assert value.is_nan
        assert STICKY_FLAGS.nan

    def test_integer_rounding(self):
        x = RoundedFloat(-2.5)
        assert x.floor().value == -3
        assert x.ceil().value == -2
        assert x.trunc().value == -2
        assert x.round().value == -3
        assert x.rint(RoundingMode.NEAREST).value == -2
        assert x.rint(RoundingMode.UP).value == -2

    def test_constants(self):
        pi, _ = RoundedFloat.pi(precision=53)
        assert pi.to_float() == math.pi
        assert RoundedFloat.euler().value.to_float() == pytest.approx(0.5772156649015329)
        assert RoundedFloat.catalan().value.to_float() == pytest.approx(0.915965594177219)
        assert RoundedFloat.log2_constant().value.to_float() == pytest.approx(math.log(2))

    def test_constant_directed_rounding(self):
        low, down = RoundedFloat.pi(precision=100, rounding=RoundingMode.DOWN)
        high, up = RoundedFloat.pi(precision=100, rounding=RoundingMode.UP)
        assert (down, up) == (Ternary.ROUNDED_DOWN, Ternary.ROUNDED_UP)
        assert low.next_up() == high


# =============================================================================
# ТЕСТЫ: Мутации
# =============================================================================


class TestRoundedFloatInPlace:
    """Тесты in-place форм (возвращают ternary)."""

    def test_in_place_chain(self):
        x = RoundedFloat(1, precision=53)
        assert x.add_in_place(RoundedFloat(3)) == Ternary.EXACT
        assert x.multiply_in_place(2) == Ternary.EXACT
        assert x.subtract_in_place(Integer(2)) == Ternary.EXACT
        assert x.divide_in_place(3, RoundingMode.DOWN) == Ternary.EXACT
        assert x == 2
        assert x.divide_in_place(RoundedFloat(3), RoundingMode.DOWN) == Ternary.ROUNDED_DOWN

    def test_unary_in_place(self):
        x = RoundedFloat(-4)
        assert x.negate_in_place() == Ternary.EXACT
        assert x == 4
        x.set(-4)
        x.make_absolute()
        x.multiply_by_power_of_2_in_place(2)
        assert x == 16
        x.divide_by_power_of_2_in_place(4)
        assert x == 1

    def test_self_aliasing_with_rounding(self):
        a = RoundedFloat(Rational(1, 3), precision=20)
        b = RoundedFloat(a)
        a.multiply_in_place(a, RoundingMode.DOWN)
        b.multiply_in_place(b.copy(), RoundingMode.DOWN)
        assert a == b


# =============================================================================
# ТЕСТЫ: Конверсия
# =============================================================================


class TestRoundedFloatConversion:
    """Тесты конверсии."""

    def test_to_float_with_rounding(self):
        third = RoundedFloat(Rational(1, 3), precision=200)
        low = third.to_float(RoundingMode.DOWN)
        high = third.to_float(RoundingMode.UP)
        assert low < high
        assert math.nextafter(low, 1) == high

    def test_to_float_2exp(self):
        assert RoundedFloat(-12).to_float_2exp() == (-0.75, 4)

    def test_wide_integer_conversion_is_exact(self):
        value = RoundedFloat(2**80 + 1, precision=100)
        assert value.to_integer() == 2**80 + 1
        assert int(-value) == -(2**80) - 1

    def test_fits(self):
        assert RoundedFloat(100).fits_int16()
        assert not RoundedFloat(70000).fits_int16()
        assert RoundedFloat(65535).fits_uint16()
        assert not RoundedFloat(0.5).fits_uint16()

    def test_string_round_trip(self):
        value = RoundedFloat(Rational(1, 3), precision=100)
        parsed = RoundedFloat.from_string(value.to_string(16), 16, precision=100)
        assert parsed == value

    def test_random(self):
        state = RandomState(21)
        value = RoundedFloat.random(state, precision=80)
        assert value.precision == 80
        assert 0 <= value < 1
