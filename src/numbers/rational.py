"""
Rational — Рациональное число произвольной точности в канонической форме

Хранилище — сырая пара xmpz (RationalStruct). Инвариант канонической формы
(den > 0, gcd = 1, ноль = 0/1) поддерживается:
- конструктором из пары и разбором строки → Canonicalizer
- fused-арифметикой → каноничный mpq движка, без повторной нормализации
- прямыми сеттерами компонентов → НЕ поддерживается до canonicalize()

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль / инверсия нуля → DivisionByZeroError, receiver
   не изменяется
2. set_denominator(0) отклоняется ДО мутации
3. Операнды immutable-форм не изменяются
4. Бинарные мутации идут через immutable-форму (self-aliasing безопасен)
"""

import logging
import math
from typing import IO, Any, Optional

import gmpy2

from src.conversion import radix
from src.conversion.line_io import read_line, write_line
from src.core.errors import DivisionByZeroError, InvalidExponentError
from src.core.native.container import NativeValue
from src.core.native.handle import StructKind
from src.core.native.structs import owned_xmpz
from src.numbers.canonical import Canonicalizer, canonical_pair, is_canonical
from src.numbers.integer import Integer
from src.numbers.operands import (
    integer_operand,
    is_value_of_kind,
    rational_operand,
    require_exponent,
    require_integer_operand,
)
from src.rounding.modes import RoundingMode
from src.rounding.tracker import engine_context

_logger = logging.getLogger(__name__)

# Точность double для to_float
_DOUBLE_PRECISION = 53


def _require_rational_operand(value: Any, name: str = "operand") -> gmpy2.mpq:
    operand = rational_operand(value)
    if operand is None:
        raise TypeError(f"{name} must be a Rational, Integer or int, got {type(value).__name__}")
    return operand


class Rational(NativeValue):
    """
    Рациональное число.

    Example:
        >>> Rational(6, 8)
        Rational(3/4)
        >>> Rational(1, 2) + Rational(1, 3)
        Rational(5/6)
    """

    __slots__ = ()

    _KIND = StructKind.RATIONAL

    def __init__(self, value: Any = 0, denominator: Any = None):
        """
        Args:
            value: Rational (разделение хранилища), Integer, int, float
                (точная конверсия), FixedFloat/RoundedFloat (точная конверсия)
                или числитель пары
            denominator: Знаменатель пары (Integer или int)

        Raises:
            DivisionByZeroError: Если denominator == 0
            ValueError: Если float — NaN/Inf
            TypeError: Для прочих типов
        """
        if denominator is not None:
            num, den = canonical_pair(
                require_integer_operand(value, "numerator"),
                require_integer_operand(denominator, "denominator"),
            )
            self._init_allocated()
            self._store(gmpy2.mpq(num, den))
            return

        if isinstance(value, Rational):
            self._init_shared(value)
            return

        engine = self._engine_value_of(value)
        self._init_allocated()
        self._store(engine)

    @staticmethod
    def _engine_value_of(value: Any) -> gmpy2.mpq:
        operand = rational_operand(value)
        if operand is not None:
            return operand
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise ValueError(f"Cannot convert {value} to Rational")
            return gmpy2.mpq(value)
        if is_value_of_kind(value, StructKind.FLOAT):
            engine = value._struct.value
            if not gmpy2.is_finite(engine):
                raise ValueError(f"Cannot convert {engine} to Rational")
            return gmpy2.mpq(engine)
        raise TypeError(f"Cannot construct Rational from {type(value).__name__}")

    def _store(self, value: gmpy2.mpq) -> None:
        self._struct.load(value)

    @classmethod
    def _wrap(cls, value: gmpy2.mpq) -> "Rational":
        """Новый Rational из каноничного mpq движка."""
        instance = cls._allocate()
        instance._struct.load(value)
        return instance

    @property
    def _value(self) -> gmpy2.mpq:
        return self._struct.as_mpq()

    @classmethod
    def from_string(cls, text: str, base: int = 10) -> Optional["Rational"]:
        """
        Разбор "num/den" или "num".

        Returns:
            Каноничный Rational или None (ошибка разбора, нулевой знаменатель)

        Raises:
            InvalidRadixError: Если base невалидно

        Examples:
            >>> Rational.from_string("ff/10", 16)
            Rational(255/16)
        """
        parsed = radix.parse_rational(text, base)
        if parsed is None:
            return None
        return cls(parsed.numerator, parsed.denominator)

    # =========================================================================
    # КОМПОНЕНТЫ
    # =========================================================================

    @property
    def numerator(self) -> Integer:
        return Integer._wrap(self._struct.num)

    @property
    def denominator(self) -> Integer:
        return Integer._wrap(self._struct.den)

    def set_numerator(self, value: "Integer | int") -> None:
        """
        Прямая запись числителя без нормализации.

        После вызова значение может быть неканоничным; нужен canonicalize().
        """
        num = require_integer_operand(value, "numerator")
        self._mutable_struct().num = owned_xmpz(num)

    def set_denominator(self, value: "Integer | int") -> None:
        """
        Прямая запись знаменателя без нормализации.

        Raises:
            DivisionByZeroError: Если value == 0 (до мутации)
        """
        den = require_integer_operand(value, "denominator")
        if den == 0:
            raise DivisionByZeroError("Rational denominator is zero")
        self._mutable_struct().den = owned_xmpz(den)

    def canonicalize(self) -> None:
        """
        Приведение к канонической форме на месте.

        Raises:
            DivisionByZeroError: Если знаменатель равен 0 (значение не изменено)
        """
        if is_canonical(self._struct.num, self._struct.den):
            return
        Canonicalizer.canonicalize(self._mutable_struct())

    @property
    def is_canonical(self) -> bool:
        return is_canonical(self._struct.num, self._struct.den)

    # =========================================================================
    # СВОЙСТВА
    # =========================================================================

    @property
    def is_zero(self) -> bool:
        return self._struct.num == 0

    @property
    def is_negative(self) -> bool:
        return self._value < 0

    @property
    def is_positive(self) -> bool:
        return self._value > 0

    @property
    def sign(self) -> int:
        return int(gmpy2.sign(self._value))

    @property
    def is_integer(self) -> bool:
        return self._value.denominator == 1

    # =========================================================================
    # ПРИСВАИВАНИЕ
    # =========================================================================

    def set(self, value: Any, denominator: Any = None) -> None:
        """
        Присваивание значения (те же формы, что и у конструктора).

        Ошибка валидации не изменяет receiver.
        """
        self._steal(Rational(value, denominator))

    def set_from_string(self, text: str, base: int = 10) -> bool:
        """
        Returns:
            False при ошибке разбора (receiver не изменён)
        """
        parsed = Rational.from_string(text, base)
        if parsed is None:
            return False
        self._steal(parsed)
        return True

    def swap(self, other: "Rational") -> None:
        if not isinstance(other, Rational):
            raise TypeError(f"Cannot swap Rational with {type(other).__name__}")
        self._container, other._container = other._container, self._container

    # =========================================================================
    # КОНВЕРСИЯ
    # =========================================================================

    def to_float(self) -> float:
        """float с усечением к нулю."""
        with engine_context(_DOUBLE_PRECISION, RoundingMode.TOWARD_ZERO, register=None):
            return float(gmpy2.mpfr(self._value, _DOUBLE_PRECISION))

    def __float__(self) -> float:
        return self.to_float()

    def to_integer(self) -> Integer:
        """Целая часть с усечением к нулю."""
        value = self._value
        return Integer._wrap(gmpy2.t_div(value.numerator, value.denominator))

    def __int__(self) -> int:
        return int(self.to_integer())

    def __bool__(self) -> bool:
        return not self.is_zero

    def to_string(self, base: int = 10) -> str:
        """
        "num/den" или "num" (при den = 1).

        Raises:
            InvalidRadixError: Если base невалидно

        Examples:
            >>> Rational(255, 16).to_string(16)
            'ff/10'
        """
        value = self._value
        return radix.format_rational(value.numerator, value.denominator, base)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        value = self._value
        return f"Rational({value.numerator}/{value.denominator})"

    def write(self, stream: IO, base: int = 10) -> int:
        return write_line(stream, self.to_string(base))

    @classmethod
    def read(cls, stream: IO, base: int = 10) -> Optional["Rational"]:
        line = read_line(stream)
        if line is None:
            return None
        return cls.from_string(line, base)

    # =========================================================================
    # СРАВНЕНИЕ
    # =========================================================================

    def _comparable(self, other: Any) -> Any:
        operand = rational_operand(other)
        if operand is not None:
            return operand
        if isinstance(other, float):
            return other
        return None

    def compare(self, other: Any) -> int:
        """-1, 0 или 1."""
        rhs = self._comparable(other)
        if rhs is None:
            raise TypeError(f"Cannot compare Rational with {type(other).__name__}")
        if isinstance(rhs, float) and math.isnan(rhs):
            raise ValueError("Cannot compare with NaN")
        value = self._value
        return (value > rhs) - (value < rhs)

    def __eq__(self, other: object) -> bool:
        rhs = self._comparable(other)
        if rhs is None:
            return NotImplemented
        return self._value == rhs

    def __lt__(self, other: Any) -> bool:
        rhs = self._comparable(other)
        if rhs is None:
            return NotImplemented
        return self._value < rhs

    def __le__(self, other: Any) -> bool:
        rhs = self._comparable(other)
        if rhs is None:
            return NotImplemented
        return self._value <= rhs

    def __gt__(self, other: Any) -> bool:
        rhs = self._comparable(other)
        if rhs is None:
            return NotImplemented
        return self._value > rhs

    def __ge__(self, other: Any) -> bool:
        rhs = self._comparable(other)
        if rhs is None:
            return NotImplemented
        return self._value >= rhs

    def __hash__(self) -> int:
        return hash(self._value)

    # =========================================================================
    # АРИФМЕТИКА (IMMUTABLE)
    # =========================================================================

    def adding(self, other: Any) -> "Rational":
        return self._wrap(self._value + _require_rational_operand(other))

    def subtracting(self, other: Any) -> "Rational":
        return self._wrap(self._value - _require_rational_operand(other))

    def multiplied(self, by: Any) -> "Rational":
        return self._wrap(self._value * _require_rational_operand(by))

    def divided(self, by: Any) -> "Rational":
        """
        Raises:
            DivisionByZeroError: Если by == 0
        """
        divisor = _require_rational_operand(by, "divisor")
        if divisor == 0:
            raise DivisionByZeroError()
        return self._wrap(self._value / divisor)

    def negated(self) -> "Rational":
        return self._wrap(-self._value)

    def absolute_value(self) -> "Rational":
        return self._wrap(abs(self._value))

    def inverted(self) -> "Rational":
        """
        1 / self.

        Raises:
            DivisionByZeroError: Если self == 0
        """
        value = self._value
        if value == 0:
            raise DivisionByZeroError("Cannot invert zero")
        return self._wrap(1 / value)

    def multiplied_by_power_of_2(self, exponent: int) -> "Rational":
        """self × 2**exponent; отрицательная экспонента делит."""
        return self._wrap(_scale(self._value, require_exponent(exponent)))

    def divided_by_power_of_2(self, exponent: int) -> "Rational":
        """
        self / 2**exponent.

        Raises:
            InvalidExponentError: Если exponent < 0
        """
        e = require_exponent(exponent)
        if e < 0:
            raise InvalidExponentError(e)
        return self._wrap(_scale(self._value, -e))

    def raised_to_power(self, exponent: int) -> "Rational":
        """
        self**exponent; отрицательная экспонента через инверсию.

        Raises:
            DivisionByZeroError: Если self == 0 и exponent < 0
        """
        e = require_exponent(exponent)
        value = self._value
        if e < 0:
            if value == 0:
                raise DivisionByZeroError("Zero raised to a negative power")
            value, e = 1 / value, -e
        return self._wrap(gmpy2.mpq(value.numerator**e, value.denominator**e))

    # -------------------------------------------------------------------------
    # Операторы
    # -------------------------------------------------------------------------

    def __add__(self, other: Any) -> "Rational":
        operand = rational_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value + operand)

    __radd__ = __add__

    def __sub__(self, other: Any) -> "Rational":
        operand = rational_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value - operand)

    def __rsub__(self, other: Any) -> "Rational":
        operand = rational_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(operand - self._value)

    def __mul__(self, other: Any) -> "Rational":
        operand = rational_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value * operand)

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> "Rational":
        if rational_operand(other) is None:
            return NotImplemented
        return self.divided(other)

    def __rtruediv__(self, other: Any) -> "Rational":
        operand = rational_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(operand).divided(self)

    def __pow__(self, exponent: Any) -> "Rational":
        if integer_operand(exponent) is None:
            return NotImplemented
        return self.raised_to_power(int(exponent))

    def __neg__(self) -> "Rational":
        return self.negated()

    def __pos__(self) -> "Rational":
        return self.copy()

    def __abs__(self) -> "Rational":
        return self.absolute_value()

    # =========================================================================
    # АРИФМЕТИКА (IN PLACE)
    # =========================================================================

    def add_in_place(self, other: Any) -> None:
        self._steal(self.adding(other))

    def subtract_in_place(self, other: Any) -> None:
        self._steal(self.subtracting(other))

    def multiply_in_place(self, by: Any) -> None:
        self._steal(self.multiplied(by))

    def divide_in_place(self, by: Any) -> None:
        self._steal(self.divided(by))

    def negate_in_place(self) -> None:
        struct = self._mutable_struct()
        struct.num = gmpy2.xmpz(-gmpy2.mpz(struct.num))

    def make_absolute(self) -> None:
        struct = self._mutable_struct()
        struct.num = gmpy2.xmpz(abs(gmpy2.mpz(struct.num)))

    def invert_in_place(self) -> None:
        """
        Raises:
            DivisionByZeroError: Если self == 0 (значение не изменено)
        """
        self._steal(self.inverted())

    def multiply_by_power_of_2_in_place(self, exponent: int) -> None:
        self._steal(self.multiplied_by_power_of_2(exponent))

    def divide_by_power_of_2_in_place(self, exponent: int) -> None:
        self._steal(self.divided_by_power_of_2(exponent))


def _scale(value: gmpy2.mpq, exponent: int) -> gmpy2.mpq:
    if exponent >= 0:
        return gmpy2.mpq(value.numerator << exponent, value.denominator)
    return gmpy2.mpq(value.numerator, value.denominator << -exponent)
