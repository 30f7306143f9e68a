"""
Тесты для Rational и Canonicalizer

Проверяемые инварианты:
1. Каноническая форма: den > 0, gcd = 1, ноль = 0/1
2. Деление на ноль / инверсия нуля → DivisionByZeroError, receiver не изменён
3. set_denominator(0) отклоняется до мутации
4. Прямые сеттеры нарушают каноничность до canonicalize()
5. Радикс-форма "num/den" и обратный разбор
"""

import io

import pytest

from src.core.errors import DivisionByZeroError, InvalidExponentError
from src.numbers.canonical import Canonicalizer, canonical_pair, is_canonical
from src.numbers.fixed_float import FixedFloat
from src.numbers.integer import Integer
from src.numbers.rational import Rational


# =============================================================================
# ТЕСТЫ: Canonicalizer
# =============================================================================


class TestCanonicalPair:
    """Тесты нормализации пары."""

    def test_reduces_by_gcd(self):
        assert canonical_pair(6, 8) == (3, 4)

    def test_moves_sign_to_numerator(self):
        assert canonical_pair(3, -6) == (-1, 2)
        assert canonical_pair(-3, -6) == (1, 2)

    def test_zero_is_zero_over_one(self):
        assert canonical_pair(0, -5) == (0, 1)

    def test_zero_denominator(self):
        with pytest.raises(DivisionByZeroError, match="denominator is zero"):
            canonical_pair(1, 0)

    def test_is_canonical(self):
        assert is_canonical(3, 4)
        assert not is_canonical(6, 8)
        assert not is_canonical(1, -2)
        assert not is_canonical(0, 3)
        assert is_canonical(0, 1)

    def test_canonicalizer_leaves_struct_on_error(self):
        """Структура не изменяется при нулевом знаменателе."""
        from src.core.native.structs import RationalStruct
        import gmpy2

        struct = RationalStruct()
        struct.num = gmpy2.xmpz(4)
        struct.den = gmpy2.xmpz(0)

        with pytest.raises(DivisionByZeroError):
            Canonicalizer.canonicalize(struct)
        assert struct.num == 4
        assert struct.den == 0


# =============================================================================
# ТЕСТЫ: Конструирование
# =============================================================================


class TestRationalConstruction:
    """Тесты конструкторов."""

    def test_pair_is_canonicalized(self):
        """(6, 8) → 3/4."""
        value = Rational(6, 8)
        assert value.numerator == 3
        assert value.denominator == 4
        assert value.is_canonical

    def test_negative_denominator(self):
        value = Rational(1, -3)
        assert value.numerator == -1
        assert value.denominator == 3

    def test_zero_denominator_rejected(self):
        with pytest.raises(DivisionByZeroError):
            Rational(1, 0)

    def test_from_integer_and_int(self):
        assert Rational(Integer(5)) == 5
        assert Rational(-7).denominator == 1

    def test_from_float_is_exact(self):
        value = Rational(0.375)
        assert (value.numerator, value.denominator) == (Integer(3), Integer(8))

    def test_from_float_value(self):
        value = Rational(FixedFloat(2.5, precision=64))
        assert value == Rational(5, 2)

    def test_non_finite_float_rejected(self):
        with pytest.raises(ValueError):
            Rational(float("inf"))

    def test_unsupported_type_rejected(self):
        with pytest.raises(TypeError):
            Rational("1/2")

    def test_default_is_zero(self):
        value = Rational()
        assert value.is_zero
        assert value.denominator == 1

    def test_repr_and_str(self):
        assert repr(Rational(3, 4)) == "Rational(3/4)"
        assert str(Rational(-6, 3)) == "-2"

    def test_properties(self):
        assert Rational(-1, 2).is_negative
        assert Rational(1, 2).is_positive
        assert Rational(-1, 2).sign == -1
        assert Rational(4, 2).is_integer
        assert not Rational(1, 2).is_integer


# =============================================================================
# ТЕСТЫ: Прямые сеттеры
# =============================================================================


class TestRationalSetters:
    """Тесты прямой записи компонентов."""

    def test_set_numerator_is_raw(self):
        value = Rational(1, 4)
        value.set_numerator(2)
        assert not value.is_canonical

        value.canonicalize()
        assert value.is_canonical
        assert (value.numerator, value.denominator) == (Integer(1), Integer(2))

    def test_set_denominator_zero_rejected(self):
        value = Rational(3, 4)
        with pytest.raises(DivisionByZeroError):
            value.set_denominator(0)
        assert value == Rational(3, 4)

    def test_negative_denominator_then_canonicalize(self):
        value = Rational(3, 4)
        value.set_denominator(-4)
        value.canonicalize()
        assert value.numerator == -3
        assert value.denominator == 4

    def test_components_are_independent_values(self):
        """Компоненты не дают доступа к структуре Rational."""
        value = Rational(3, 4)
        numerator = value.numerator
        denominator = value.denominator

        numerator.add_in_place(10)
        denominator.set_bit(5)

        assert value == Rational(3, 4)
        assert value.is_canonical
        assert (numerator, denominator) == (Integer(13), Integer(36))

    def test_construction_from_integer_components_copies(self):
        numerator = Integer(5)
        value = Rational(numerator, 7)
        numerator.add_in_place(1)
        assert value == Rational(5, 7)

    def test_setter_on_shared_copy(self):
        original = Rational(1, 3)
        other = original.copy()
        other.set_numerator(2)
        assert original == Rational(1, 3)
        assert other == Rational(2, 3)

    def test_set_and_swap(self):
        a = Rational(1, 2)
        b = Rational(1, 3)
        a.swap(b)
        assert a == Rational(1, 3)
        assert b == Rational(1, 2)

        a.set(10, 4)
        assert a == Rational(5, 2)

    def test_set_failure_keeps_value(self):
        value = Rational(1, 2)
        with pytest.raises(DivisionByZeroError):
            value.set(1, 0)
        assert value == Rational(1, 2)


# =============================================================================
# ТЕСТЫ: Арифметика
# =============================================================================


class TestRationalArithmetic:
    """Тесты арифметики."""

    def test_sum_of_halves_and_thirds(self):
        """1/2 + 1/3 == 5/6."""
        result = Rational(1, 2) + Rational(1, 3)
        assert result == Rational(5, 6)
        assert result.is_canonical

    def test_operators(self):
        a = Rational(3, 4)
        assert a - Rational(1, 4) == Rational(1, 2)
        assert a * 4 == 3
        assert a / Rational(3, 2) == Rational(1, 2)
        assert -a == Rational(-3, 4)
        assert abs(Rational(-3, 4)) == a
        assert a**2 == Rational(9, 16)
        assert a**-1 == Rational(4, 3)

    def test_reflected_operators(self):
        assert 1 - Rational(1, 4) == Rational(3, 4)
        assert 1 / Rational(3, 4) == Rational(4, 3)
        assert 2 * Rational(1, 4) == Rational(1, 2)
        assert Integer(1) + Rational(1, 2) == Rational(3, 2)

    def test_inverted(self):
        assert Rational(3, 4).inverted() == Rational(4, 3)
        assert Rational(-2, 5).inverted() == Rational(-5, 2)

    def test_invert_zero(self):
        value = Rational(0, 1)
        with pytest.raises(DivisionByZeroError, match="Cannot invert zero"):
            value.inverted()
        with pytest.raises(DivisionByZeroError):
            value.invert_in_place()
        assert value.is_zero

    def test_division_by_zero_keeps_receiver(self):
        value = Rational(5, 7)
        with pytest.raises(DivisionByZeroError):
            value.divided(0)
        with pytest.raises(ZeroDivisionError):
            value.divide_in_place(Rational(0))
        assert value == Rational(5, 7)

    def test_zero_to_negative_power(self):
        with pytest.raises(DivisionByZeroError):
            Rational(0).raised_to_power(-2)

    def test_power_of_2_scaling(self):
        assert Rational(3, 4).multiplied_by_power_of_2(3) == 6
        assert Rational(3, 4).multiplied_by_power_of_2(-1) == Rational(3, 8)
        assert Rational(3).divided_by_power_of_2(2) == Rational(3, 4)

    def test_divided_by_negative_power_of_2(self):
        with pytest.raises(InvalidExponentError):
            Rational(1).divided_by_power_of_2(-1)

    def test_in_place_forms(self):
        value = Rational(1, 2)
        value.add_in_place(Rational(1, 3))
        assert value == Rational(5, 6)
        value.subtract_in_place(1)
        assert value == Rational(-1, 6)
        value.multiply_in_place(Integer(-3))
        assert value == Rational(1, 2)
        value.divide_in_place(Rational(1, 4))
        assert value == 2
        value.negate_in_place()
        assert value == -2
        value.make_absolute()
        value.invert_in_place()
        assert value == Rational(1, 2)
        value.multiply_by_power_of_2_in_place(2)
        assert value == 2
        value.divide_by_power_of_2_in_place(3)
        assert value == Rational(1, 4)

    def test_operands_unchanged(self):
        a = Rational(1, 2)
        b = Rational(1, 3)
        a.adding(b)
        assert a == Rational(1, 2)
        assert b == Rational(1, 3)

    def test_unsupported_operand(self):
        with pytest.raises(TypeError):
            Rational(1).adding("x")


# =============================================================================
# ТЕСТЫ: Сравнение и конверсия
# =============================================================================


class TestRationalComparison:
    """Тесты сравнения и конверсии."""

    def test_compare(self):
        assert Rational(1, 3).compare(Rational(1, 2)) == -1
        assert Rational(2, 4).compare(0.5) == 0
        assert Rational(3, 2).compare(1) == 1

    def test_compare_nan(self):
        with pytest.raises(ValueError):
            Rational(1).compare(float("nan"))

    def test_mixed_ordering(self):
        assert Rational(1, 3) < Rational(1, 2)
        assert Rational(5, 2) > 2
        assert Rational(1, 2) <= 0.5
        assert Rational(1, 2) == 0.5

    def test_hash_consistent_with_equality(self):
        assert hash(Rational(2, 4)) == hash(Rational(1, 2))

    def test_to_float_and_int(self):
        assert Rational(1, 4).to_float() == 0.25
        assert int(Rational(-7, 2)) == -3
        assert Rational(7, 2).to_integer() == 3
        assert not Rational(0)
        assert Rational(1, 5)


# =============================================================================
# ТЕСТЫ: Строки
# =============================================================================


class TestRationalStrings:
    """Тесты радикс-формы."""

    def test_hex_round_trip(self):
        """255/16 в основании 16 → "ff/10" и обратно."""
        value = Rational(255, 16)
        assert value.to_string(16) == "ff/10"

        parsed = Rational.from_string("ff/10", 16)
        assert parsed.numerator == 255
        assert parsed.denominator == 16

    def test_integer_form(self):
        assert Rational(8, 4).to_string() == "2"

    def test_from_string_canonicalizes(self):
        parsed = Rational.from_string("-6/8")
        assert parsed == Rational(-3, 4)
        assert parsed.is_canonical

    def test_signed_denominator_rejected(self):
        assert Rational.from_string("6/-8") is None

    def test_from_string_failures(self):
        assert Rational.from_string("1/0") is None
        assert Rational.from_string("1/") is None
        assert Rational.from_string("abc") is None

    def test_set_from_string(self):
        value = Rational(1, 2)
        assert value.set_from_string("bad") is False
        assert value == Rational(1, 2)
        assert value.set_from_string("10/4") is True
        assert value == Rational(5, 2)

    def test_write_and_read(self):
        stream = io.StringIO()
        Rational(-3, 4).write(stream, 2)
        assert stream.getvalue() == "-11/100\n"

        stream.seek(0)
        assert Rational.read(stream, 2) == Rational(-3, 4)
