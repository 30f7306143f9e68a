"""
Integer — Целое произвольной точности с value-семантикой

Обёртка над xmpz в NativeHandle с протоколом copy-on-write.

Формы операций:
- Immutable: adding / subtracting / multiplied / ... и операторы Python
  (+, -, *, //, %, <<, >>, &, |, ^, **, ~, abs, унарный -)
- Мутирующие: *_in_place, negate_in_place, make_absolute, set, swap, ...

Aliasing:
- Бинарная мутация с value-операндом (a.add_in_place(a)) вычисляется
  через immutable-форму и забирает контейнер результата
- Мутация против константы (native int, степень двойки, индекс бита)
  изменяет уникальную структуру на месте через одну ссылку

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Операнды immutable-форм не изменяются
2. Деление на ноль → DivisionByZeroError, receiver не изменяется
3. Расширенное присваивание (+=) перепривязывает имя, а не мутирует
4. INT64_MIN в смешанных операциях используется как модуль 2**63
"""

import logging
import math
from typing import IO, Any, Optional, SupportsInt

import gmpy2

from src.conversion import radix
from src.conversion.line_io import read_line, write_line
from src.core.errors import InvalidExponentError, InvalidRadixError, InvalidRandomStateError
from src.core.native.container import NativeValue
from src.core.native.handle import StructKind
from src.core.native.native_int import fits_native, require_native, require_unsigned
from src.core.native.structs import owned_xmpz
from src.entropy.random_state import RandomState
from src.numbers.integer_bitwise import IntegerBitwiseMixin
from src.numbers.integer_division import IntegerDivisionMixin
from src.numbers.integer_number_theory import IntegerNumberTheoryMixin
from src.numbers.operands import integer_operand, require_integer_operand

_logger = logging.getLogger(__name__)


class Integer(IntegerDivisionMixin, IntegerBitwiseMixin, IntegerNumberTheoryMixin, NativeValue):
    """
    Целое произвольной точности.

    Example:
        >>> a = Integer(12)
        >>> b = a.copy()
        >>> b.add_in_place(1)
        >>> (a, b)
        (Integer(12), Integer(13))
    """

    __slots__ = ()

    _KIND = StructKind.INTEGER

    def __init__(
        self,
        value: "Integer | int | float" = 0,
        *,
        preallocated_bits: Optional[int] = None,
    ):
        """
        Args:
            value: Integer (разделение хранилища), int или float
                (усечение к нулю)
            preallocated_bits: Подсказка размера (не влияет на значение)

        Raises:
            ValueError: Если float — NaN/Inf или preallocated_bits < 0
            TypeError: Для прочих типов
        """
        if preallocated_bits is not None:
            require_unsigned(preallocated_bits, "preallocated_bits")

        if isinstance(value, Integer):
            self._init_shared(value)
            return

        engine = self._engine_value_of(value)
        self._init_allocated()
        self._struct.value = owned_xmpz(engine)

    @staticmethod
    def _engine_value_of(value: Any) -> gmpy2.mpz:
        operand = integer_operand(value)
        if operand is not None:
            return operand
        if isinstance(value, float):
            if math.isnan(value) or math.isinf(value):
                raise ValueError(f"Cannot convert {value} to Integer")
            return gmpy2.mpz(math.trunc(value))
        raise TypeError(f"Cannot construct Integer from {type(value).__name__}")

    @classmethod
    def _wrap(cls, value: Any) -> "Integer":
        """Новый Integer с собственной структурой из значения движка."""
        instance = cls._allocate()
        instance._struct.value = owned_xmpz(value)
        return instance

    @property
    def _value(self) -> gmpy2.mpz:
        return gmpy2.mpz(self._struct.value)

    @classmethod
    def from_string(cls, text: str, base: int = 10) -> Optional["Integer"]:
        """
        Разбор строки.

        Args:
            text: Необязательный знак, затем цифры
            base: 0 (автоопределение по префиксу) или 2..62

        Returns:
            Integer или None, если строка не разбирается

        Raises:
            InvalidRadixError: Если base невалидно
        """
        parsed = radix.parse_integer(text, base)
        if parsed is None:
            return None
        return cls._wrap(parsed)

    # =========================================================================
    # СВОЙСТВА
    # =========================================================================

    @property
    def is_zero(self) -> bool:
        return self._struct.value == 0

    @property
    def is_negative(self) -> bool:
        return self._struct.value < 0

    @property
    def is_positive(self) -> bool:
        return self._struct.value > 0

    @property
    def sign(self) -> int:
        """-1, 0 или 1."""
        return int(gmpy2.sign(self._value))

    @property
    def is_even(self) -> bool:
        return bool(gmpy2.is_even(self._value))

    @property
    def is_odd(self) -> bool:
        return bool(gmpy2.is_odd(self._value))

    @property
    def bit_count(self) -> int:
        """Число бит модуля (для нуля — 1, как sizeinbase(2))."""
        return self.size_in_base(2)

    def size_in_base(self, base: int) -> int:
        """
        Число цифр модуля в основании base (2..62).

        Может превышать точное значение на 1 для оснований, не являющихся
        степенью двойки.
        """
        if not radix.MIN_BASE <= base <= radix.MAX_BASE:
            raise InvalidRadixError(base)
        return int(gmpy2.num_digits(self._value, base))

    def reallocate(self, bits: int) -> None:
        """
        Подсказка размера хранилища в битах.

        Если текущее значение не помещается в bits бит, оно становится 0.
        """
        require_unsigned(bits, "bits")
        if self._value.bit_length() > bits:
            self._mutable_struct().value = gmpy2.xmpz(0)

    # =========================================================================
    # КОНВЕРСИЯ
    # =========================================================================

    def to_int(self) -> int:
        return int(self._value)

    def __int__(self) -> int:
        return self.to_int()

    def __index__(self) -> int:
        return self.to_int()

    def __bool__(self) -> bool:
        return not self.is_zero

    def to_float(self) -> float:
        """
        float с усечением к нулю; ±inf при переполнении.
        """
        value = self._value
        excess = value.bit_length() - 53
        if excess <= 0:
            return float(value)
        mantissa = float(gmpy2.t_div_2exp(value, excess))
        try:
            return math.ldexp(mantissa, excess)
        except OverflowError:
            return math.copysign(math.inf, mantissa)

    def __float__(self) -> float:
        return self.to_float()

    def to_float_2exp(self) -> tuple[float, int]:
        """
        Разложение value = d × 2**exp, 0.5 ≤ |d| < 1 (d усечено к нулю).

        Для нуля → (0.0, 0).
        """
        value = self._value
        if value == 0:
            return 0.0, 0
        exponent = value.bit_length()
        shift = max(exponent - 53, 0)
        mantissa = float(gmpy2.t_div_2exp(value, shift))
        return math.ldexp(mantissa, shift - exponent), exponent

    def fits_in(self, kind: str) -> bool:
        """Помещается ли значение в native-тип kind (int16 ... uint64)."""
        return fits_native(int(self._value), kind)

    def fits_int16(self) -> bool:
        return self.fits_in("int16")

    def fits_uint16(self) -> bool:
        return self.fits_in("uint16")

    def fits_int32(self) -> bool:
        return self.fits_in("int32")

    def fits_uint32(self) -> bool:
        return self.fits_in("uint32")

    def fits_int64(self) -> bool:
        return self.fits_in("int64")

    def fits_uint64(self) -> bool:
        return self.fits_in("uint64")

    def to_native(self, kind: str = "int64") -> int:
        """
        Raises:
            NativeIntOverflowError: Если значение не помещается в kind
        """
        return require_native(int(self._value), kind)

    # =========================================================================
    # СТРОКИ И I/O
    # =========================================================================

    def to_string(self, base: int = 10) -> str:
        """
        Строка в основании base ([2, 62] или [-36, -2]).

        Raises:
            InvalidRadixError: Если base невалидно
        """
        return radix.format_integer(self._value, base)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Integer({self.to_string()})"

    def __format__(self, spec: str) -> str:
        return format(int(self._value), spec)

    def set_from_string(self, text: str, base: int = 10) -> bool:
        """
        Присваивание из строки.

        Returns:
            False при ошибке разбора (receiver не изменён)
        """
        parsed = radix.parse_integer(text, base)
        if parsed is None:
            return False
        self._mutable_struct().value = owned_xmpz(parsed)
        return True

    def write(self, stream: IO, base: int = 10) -> int:
        """Запись строки значения с переводом строки; возвращает объём записи."""
        return write_line(stream, self.to_string(base))

    @classmethod
    def read(cls, stream: IO, base: int = 10) -> Optional["Integer"]:
        """Чтение одной строки и разбор; None при пустом или некорректном вводе."""
        line = read_line(stream)
        if line is None:
            return None
        return cls.from_string(line, base)

    # =========================================================================
    # СРАВНЕНИЕ
    # =========================================================================

    def compare(self, other: "Integer | int | float") -> int:
        """
        Сравнение: -1, 0 или 1.

        Raises:
            ValueError: Если other — NaN
        """
        if isinstance(other, float) and math.isnan(other):
            raise ValueError("Cannot compare with NaN")
        operand = integer_operand(other)
        rhs = operand if operand is not None else other
        value = self._value
        return (value > rhs) - (value < rhs)

    def compare_absolute_value(self, other: "Integer | int | float") -> int:
        operand = integer_operand(other)
        rhs = abs(operand) if operand is not None else abs(other)
        value = abs(self._value)
        return (value > rhs) - (value < rhs)

    def _comparable(self, other: Any) -> Any:
        operand = integer_operand(other)
        if operand is not None:
            return operand
        if isinstance(other, float):
            return other
        return None

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

    def adding(self, other: "Integer | int") -> "Integer":
        return self._wrap(self._value + require_integer_operand(other))

    def subtracting(self, other: "Integer | int") -> "Integer":
        return self._wrap(self._value - require_integer_operand(other))

    @classmethod
    def difference(cls, value: "Integer | int", other: "Integer | int") -> "Integer":
        """value - other, где value может быть native int."""
        return cls._wrap(require_integer_operand(value) - require_integer_operand(other))

    def multiplied(self, by: "Integer | int") -> "Integer":
        return self._wrap(self._value * require_integer_operand(by))

    def negated(self) -> "Integer":
        return self._wrap(-self._value)

    def absolute_value(self) -> "Integer":
        return self._wrap(abs(self._value))

    def multiplied_by_power_of_2(self, exponent: int) -> "Integer":
        """
        value × 2**exponent.

        Отрицательная экспонента — деление на 2**|exponent| с округлением
        к +∞ (ceiling).
        """
        return self._wrap(_scale_by_power_of_2(self._value, int(exponent)))

    def raised_to_power(self, exponent: int) -> "Integer":
        """
        Raises:
            InvalidExponentError: Если exponent < 0
        """
        if exponent < 0:
            raise InvalidExponentError(exponent)
        return self._wrap(self._value ** int(exponent))

    @classmethod
    def power(cls, base: int, exponent: int) -> "Integer":
        """base**exponent для native base ≥ 0 и exponent ≥ 0."""
        if exponent < 0:
            raise InvalidExponentError(exponent)
        require_unsigned(base, "base")
        return cls._wrap(gmpy2.mpz(base) ** int(exponent))

    # -------------------------------------------------------------------------
    # Операторы
    # -------------------------------------------------------------------------

    def __add__(self, other: Any) -> "Integer":
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value + operand)

    __radd__ = __add__

    def __sub__(self, other: Any) -> "Integer":
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value - operand)

    def __rsub__(self, other: Any) -> "Integer":
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(operand - self._value)

    def __mul__(self, other: Any) -> "Integer":
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value * operand)

    __rmul__ = __mul__

    def __floordiv__(self, other: Any) -> "Integer":
        if integer_operand(other) is None:
            return NotImplemented
        return self.floor_divided(other)

    def __rfloordiv__(self, other: Any) -> "Integer":
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return Integer._wrap(operand).floor_divided(self)

    def __mod__(self, other: Any) -> "Integer":
        if integer_operand(other) is None:
            return NotImplemented
        return self.floor_remainder(other)

    def __rmod__(self, other: Any) -> "Integer":
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return Integer._wrap(operand).floor_remainder(self)

    def __divmod__(self, other: Any) -> tuple["Integer", "Integer"]:
        if integer_operand(other) is None:
            return NotImplemented
        return self.floor_quotient_and_remainder(other)

    def __pow__(self, exponent: Any, modulus: Any = None) -> "Integer":
        if integer_operand(exponent) is None:
            return NotImplemented
        if modulus is not None:
            return self.raised_to_power_mod(exponent, modulus)
        return self.raised_to_power(int(exponent))

    def __neg__(self) -> "Integer":
        return self.negated()

    def __pos__(self) -> "Integer":
        return self.copy()

    def __abs__(self) -> "Integer":
        return self.absolute_value()

    # =========================================================================
    # АРИФМЕТИКА (IN PLACE)
    # =========================================================================

    def set(self, value: "Integer | int") -> None:
        """Присваивание значения (Integer или int)."""
        operand = require_integer_operand(value, "value")
        self._mutable_struct().value = owned_xmpz(operand)

    def swap(self, other: "Integer") -> None:
        """Обмен значениями (обмен контейнерами, без копирования)."""
        if not isinstance(other, Integer):
            raise TypeError(f"Cannot swap Integer with {type(other).__name__}")
        self._container, other._container = other._container, self._container

    def add_in_place(self, other: "Integer | int") -> None:
        if isinstance(other, Integer):
            self._steal(self.adding(other))
            return
        operand = require_integer_operand(other)
        self._mutable_struct().value += operand

    def subtract_in_place(self, other: "Integer | int") -> None:
        if isinstance(other, Integer):
            self._steal(self.subtracting(other))
            return
        operand = require_integer_operand(other)
        self._mutable_struct().value -= operand

    def multiply_in_place(self, by: "Integer | int") -> None:
        if isinstance(by, Integer):
            self._steal(self.multiplied(by))
            return
        operand = require_integer_operand(by)
        self._mutable_struct().value *= operand

    def add_product(self, multiplicand: "Integer", multiplier: "Integer | int") -> None:
        """self += multiplicand × multiplier."""
        self._steal(self.adding(Integer(multiplicand).multiplied(multiplier)))

    def subtract_product(self, multiplicand: "Integer", multiplier: "Integer | int") -> None:
        """self -= multiplicand × multiplier."""
        self._steal(self.subtracting(Integer(multiplicand).multiplied(multiplier)))

    def negate_in_place(self) -> None:
        struct = self._mutable_struct()
        struct.value = gmpy2.xmpz(-gmpy2.mpz(struct.value))

    def make_absolute(self) -> None:
        struct = self._mutable_struct()
        struct.value = gmpy2.xmpz(abs(gmpy2.mpz(struct.value)))

    def multiply_by_power_of_2_in_place(self, exponent: int) -> None:
        struct = self._mutable_struct()
        struct.value = gmpy2.xmpz(_scale_by_power_of_2(gmpy2.mpz(struct.value), int(exponent)))

    # =========================================================================
    # СЛУЧАЙНЫЕ ЗНАЧЕНИЯ
    # =========================================================================

    @classmethod
    def random_bits(cls, bits: int, state: RandomState) -> "Integer":
        """Равномерное целое в [0, 2**bits)."""
        require_unsigned(bits, "bits")
        return cls._wrap(state.draw_integer_bits(bits))

    @classmethod
    def random_below(cls, bound: "Integer | int", state: RandomState) -> "Integer":
        """
        Равномерное целое в [0, bound).

        Raises:
            InvalidRandomStateError: Если bound ≤ 0
        """
        upper = require_integer_operand(bound, "bound")
        if upper <= 0:
            raise InvalidRandomStateError(f"bound must be positive, got {upper}")
        return cls._wrap(state.draw_integer_below(upper))

    @classmethod
    def random_long(cls, bits: int, state: RandomState) -> "Integer":
        """Целое с длинными сериями единиц и нулей, ровно до bits бит."""
        require_unsigned(bits, "bits")
        return cls._wrap(state.draw_integer_long(bits))


def _scale_by_power_of_2(value: gmpy2.mpz, exponent: int) -> gmpy2.mpz:
    if exponent >= 0:
        return value << exponent
    return gmpy2.c_div_2exp(value, -exponent)


def coerce_integer(value: "Integer | SupportsInt") -> Integer:
    """Integer как есть, иначе новый Integer из int."""
    if isinstance(value, Integer):
        return value
    return Integer(value)


__all__ = ["Integer", "coerce_integer"]
