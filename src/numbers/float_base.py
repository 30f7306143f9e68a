"""
Float Base — Общая часть FixedFloat и RoundedFloat

Хранилище — FloatStruct (mpfr + точность). Общие для обоих float-типов:
- точность и классификация (zero / nan / inf / regular / integer)
- конверсии в native int, Integer, Rational, float
- fits-проверки (is_integer И проверка диапазона)
- строки в радикс-форме и строковый I/O
- сравнения с семантикой NaN (NaN не равен ничему, порядок ложен)

Сравнения выполняются в контексте движка, поэтому сравнение с NaN
поднимает sticky-флаг ERANGE в процессном регистре.
"""

import math
import operator
from typing import IO, Any, Callable, Optional

import gmpy2

from src.conversion import radix
from src.conversion.line_io import read_line, write_line
from src.core.config import validate_precision
from src.core.errors import NativeIntOverflowError
from src.core.native.container import NativeValue
from src.core.native.handle import StructKind
from src.core.native.native_int import fits_native, require_native
from src.numbers.integer import Integer
from src.numbers.operands import integer_operand, is_value_of_kind, rational_operand
from src.numbers.rational import Rational
from src.rounding.modes import RoundingMode
from src.rounding.tracker import TRACKER, engine_context

# Точность double
DOUBLE_PRECISION = 53


def _truncated(value: gmpy2.mpfr) -> gmpy2.mpz:
    """Точное усечение к нулю конечного mpfr любой точности."""
    exact = gmpy2.mpq(value)
    return gmpy2.t_div(exact.numerator, exact.denominator)


class FloatValue(NativeValue):
    """
    Базовый float-тип над FloatStruct.

    Подклассы определяют _default_precision() и режим округления
    конверсий (_conversion_rounding).
    """

    __slots__ = ()

    _KIND = StructKind.FLOAT

    # Округление при конверсии входных значений
    _conversion_rounding: RoundingMode = RoundingMode.NEAREST

    @classmethod
    def _default_precision(cls) -> int:
        raise NotImplementedError

    # =========================================================================
    # СОЗДАНИЕ
    # =========================================================================

    @classmethod
    def _wrap(cls, value: gmpy2.mpfr, precision: int) -> Any:
        """Новый экземпляр из значения движка, уже имеющего точность precision."""
        instance = cls._allocate(precision)
        instance._struct.value = value
        return instance

    @staticmethod
    def _engine_input(value: Any) -> Any:
        """
        Значение для конверсии в mpfr.

        Raises:
            TypeError: Для неподдерживаемых типов
        """
        if is_value_of_kind(value, StructKind.FLOAT):
            return value._struct.value
        operand = integer_operand(value)
        if operand is not None:
            return operand
        if is_value_of_kind(value, StructKind.RATIONAL):
            return rational_operand(value)
        if isinstance(value, float):
            return value
        raise TypeError(f"Cannot convert {type(value).__name__} to a float value")

    @classmethod
    def _converted(cls, value: Any, precision: int, rounding: RoundingMode) -> Any:
        """RoundedResult конверсии value к точности precision."""
        source = cls._engine_input(value)
        return TRACKER.run(lambda: gmpy2.mpfr(source, precision), precision, rounding)

    @classmethod
    def _parse(cls, text: str, base: int, precision: Optional[int]) -> Optional[Any]:
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        with engine_context(target, RoundingMode.NEAREST):
            parsed = radix.parse_float(text, base, target)
        if parsed is None:
            return None
        return cls._wrap(parsed, target)

    @classmethod
    def from_string(cls, text: str, base: int = 10, precision: Optional[int] = None) -> Optional[Any]:
        """
        Разбор радикс-формы (а также "nan", "inf", "-inf").

        Args:
            text: Строка
            base: 0 (автоопределение) или 2..62
            precision: Точность результата (по умолчанию — из конфигурации)

        Returns:
            Значение (округление к ближайшему) или None при ошибке разбора

        Raises:
            InvalidRadixError: Если base невалидно
            InvalidPrecisionError: Если precision невалидна
        """
        return cls._parse(text, base, precision)

    @property
    def _value(self) -> gmpy2.mpfr:
        return self._struct.value

    # =========================================================================
    # СВОЙСТВА
    # =========================================================================

    @property
    def precision(self) -> int:
        """Точность в битах."""
        return self._struct.precision

    @property
    def is_zero(self) -> bool:
        return bool(gmpy2.is_zero(self._value))

    @property
    def is_negative(self) -> bool:
        return self._value < 0

    @property
    def is_positive(self) -> bool:
        return self._value > 0

    @property
    def sign(self) -> int:
        """-1, 0 или 1 (0 для нуля и NaN)."""
        value = self._value
        if gmpy2.is_nan(value):
            return 0
        return (value > 0) - (value < 0)

    @property
    def is_nan(self) -> bool:
        return bool(gmpy2.is_nan(self._value))

    @property
    def is_infinite(self) -> bool:
        return bool(gmpy2.is_infinite(self._value))

    @property
    def is_finite(self) -> bool:
        return bool(gmpy2.is_finite(self._value))

    @property
    def is_regular(self) -> bool:
        """Конечное ненулевое значение."""
        return bool(gmpy2.is_regular(self._value))

    @property
    def is_integer(self) -> bool:
        return bool(gmpy2.is_integer(self._value))

    # =========================================================================
    # КОНВЕРСИЯ
    # =========================================================================

    def _require_finite(self) -> gmpy2.mpfr:
        value = self._value
        if not gmpy2.is_finite(value):
            raise ValueError(f"Cannot convert {radix.format_float(value)} to an integer")
        return value

    def to_integer(self) -> Integer:
        """
        Целая часть с усечением к нулю.

        Raises:
            ValueError: Если значение NaN или бесконечно
        """
        return Integer._wrap(_truncated(self._require_finite()))

    def to_int(self) -> int:
        return int(self.to_integer())

    def __int__(self) -> int:
        return self.to_int()

    def to_rational(self) -> Rational:
        """
        Точное значение как Rational.

        Raises:
            ValueError: Если значение NaN или бесконечно
        """
        return Rational._wrap(gmpy2.mpq(self._require_finite()))

    def _to_float(self, rounding: RoundingMode) -> float:
        value = self._value
        with engine_context(DOUBLE_PRECISION, rounding, register=None):
            return float(gmpy2.mpfr(value, DOUBLE_PRECISION))

    def _to_float_2exp(self, rounding: RoundingMode) -> tuple[float, int]:
        value = self._value
        if not gmpy2.is_regular(value):
            return self._to_float(rounding), 0
        exponent, mantissa = gmpy2.frexp(value)
        with engine_context(DOUBLE_PRECISION, rounding, register=None):
            scaled = float(gmpy2.mpfr(mantissa, DOUBLE_PRECISION))
        return scaled, int(exponent)

    def __bool__(self) -> bool:
        return not self.is_zero

    def fits_in(self, kind: str) -> bool:
        """Целое значение в диапазоне native-типа kind."""
        value = self._value
        if not gmpy2.is_integer(value):
            return False
        return fits_native(int(_truncated(value)), kind)

    def fits_int64(self) -> bool:
        return self.fits_in("int64")

    def fits_uint64(self) -> bool:
        return self.fits_in("uint64")

    def fits_int32(self) -> bool:
        return self.fits_in("int32")

    def fits_uint32(self) -> bool:
        return self.fits_in("uint32")

    def to_native(self, kind: str = "int64") -> int:
        """
        Усечённое значение как native int.

        Raises:
            NativeIntOverflowError: Если значение NaN, бесконечно или
                не помещается в kind
        """
        value = self._value
        if not gmpy2.is_finite(value):
            raise NativeIntOverflowError(f"{radix.format_float(value)} does not fit in {kind}")
        return require_native(int(_truncated(value)), kind)

    # =========================================================================
    # СТРОКИ И I/O
    # =========================================================================

    def to_string(self, base: int = 10, digits: int = 0) -> str:
        """
        Радикс-форма значения.

        Args:
            base: [2, 62] или [-36, -2]
            digits: Число значащих цифр (0 → все)

        Raises:
            InvalidRadixError: Если base невалидно
            InvalidDigitsError: Если digits < 0
        """
        return radix.format_float(self._value, base, digits)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self.to_string()}', precision={self.precision})"

    def set_from_string(self, text: str, base: int = 10) -> bool:
        """
        Присваивание из строки с сохранением точности.

        Returns:
            False при ошибке разбора (receiver не изменён)
        """
        parsed = self._parse(text, base, self.precision)
        if parsed is None:
            return False
        self._steal(parsed)
        return True

    def write(self, stream: IO, base: int = 10, digits: int = 0) -> int:
        return write_line(stream, self.to_string(base, digits))

    @classmethod
    def read(cls, stream: IO, base: int = 10, precision: Optional[int] = None) -> Optional[Any]:
        line = read_line(stream)
        if line is None:
            return None
        return cls.from_string(line, base, precision)

    # =========================================================================
    # СРАВНЕНИЕ
    # =========================================================================

    def _comparable(self, other: Any) -> Any:
        if isinstance(other, type(self)):
            return other._value
        operand = integer_operand(other)
        if operand is not None:
            return operand
        if is_value_of_kind(other, StructKind.RATIONAL):
            return rational_operand(other)
        if isinstance(other, float):
            return other
        return None

    def _ordered(self, op: Callable[[Any, Any], bool], other: Any) -> bool:
        rhs = self._comparable(other)
        if rhs is None:
            return NotImplemented
        lhs = self._value
        with engine_context(self.precision):
            return bool(op(lhs, rhs))

    def compare(self, other: Any) -> Optional[int]:
        """
        Сравнение: -1, 0, 1 или None, если значения неупорядочены (NaN).
        """
        rhs = self._comparable(other)
        if rhs is None:
            raise TypeError(f"Cannot compare {type(self).__name__} with {type(other).__name__}")
        lhs = self._value
        with engine_context(self.precision):
            if gmpy2.is_nan(lhs) or (isinstance(rhs, (float, type(lhs))) and math.isnan(rhs)):
                gmpy2.get_context().erange = True
                return None
            return (lhs > rhs) - (lhs < rhs)

    def __eq__(self, other: object) -> bool:
        return self._ordered(operator.eq, other)

    def __ne__(self, other: object) -> bool:
        result = self._ordered(operator.eq, other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other: Any) -> bool:
        return self._ordered(operator.lt, other)

    def __le__(self, other: Any) -> bool:
        return self._ordered(operator.le, other)

    def __gt__(self, other: Any) -> bool:
        return self._ordered(operator.gt, other)

    def __ge__(self, other: Any) -> bool:
        return self._ordered(operator.ge, other)

    def __hash__(self) -> int:
        return hash(self._value)

    def is_equal_to_bits(self, other: Any, bits: int) -> bool:
        """
        Совпадают ли первые bits бит мантисс (и знаки).

        Raises:
            ValueError: Если bits ≤ 0
        """
        if bits <= 0:
            raise ValueError(f"bits must be positive, got {bits}")
        if not isinstance(other, type(self)):
            raise TypeError(f"Expected {type(self).__name__}, got {type(other).__name__}")
        lhs, rhs = self._value, other._value
        if gmpy2.is_nan(lhs) or gmpy2.is_nan(rhs):
            return False
        if gmpy2.is_zero(lhs) or gmpy2.is_zero(rhs):
            return bool(gmpy2.is_zero(lhs) and gmpy2.is_zero(rhs))
        if (lhs < 0) != (rhs < 0):
            return False
        with engine_context(bits, RoundingMode.TOWARD_ZERO, register=None):
            return gmpy2.mpfr(lhs, bits) == gmpy2.mpfr(rhs, bits)

    def swap(self, other: Any) -> None:
        if not isinstance(other, type(self)):
            raise TypeError(f"Cannot swap {type(self).__name__} with {type(other).__name__}")
        self._container, other._container = other._container, self._container
