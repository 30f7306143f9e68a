"""
FixedFloat — Float произвольной точности с усечением к нулю

Аналог mpf: точность задаётся при создании (по умолчанию — из
NumericsConfig.fixed_float_precision), все результаты арифметики
усекаются к нулю (TOWARD_ZERO) до точности receiver'а.

Правила:
- Бинарные операции считаются с точностью receiver'а
- Статические обратные формы (difference, quotient) — с точностью other
- Деление на ноль не является ошибкой: ±Inf / NaN и sticky-флаг
  DIVIDE_BY_ZERO / NAN в процессном регистре
- Разбор строк — округление к ближайшему

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Операнды immutable-форм не изменяются
2. Бинарные мутации идут через immutable-форму (self-aliasing безопасен)
3. divided_by_power_of_2 отклоняет отрицательную экспоненту
4. Отрицательный аргумент square_root → NegativeSquareRootError
"""

import logging
from typing import Any, Optional

import gmpy2

from src.core.config import configure, get_config, validate_precision
from src.core.errors import InvalidExponentError, NegativeSquareRootError
from src.core.native.native_int import require_unsigned
from src.entropy.random_state import RandomState
from src.numbers.float_base import FloatValue
from src.numbers.operands import integer_operand, require_exponent
from src.rounding.modes import RoundingMode
from src.rounding.tracker import TRACKER

_logger = logging.getLogger(__name__)

_ROUNDING = RoundingMode.TOWARD_ZERO


def _compute(operation: Any, precision: int) -> gmpy2.mpfr:
    return TRACKER.compute(operation, precision, _ROUNDING)


class FixedFloat(FloatValue):
    """
    Float с фиксированной точностью и усечением к нулю.

    Example:
        >>> x = FixedFloat(1, precision=64)
        >>> (x / 3).precision
        64
    """

    __slots__ = ()

    _conversion_rounding = _ROUNDING

    def __init__(self, value: Any = 0, precision: Optional[int] = None):
        """
        Args:
            value: FixedFloat (разделение хранилища, если precision не задана),
                RoundedFloat, Integer, Rational, int или float
            precision: Точность в битах (по умолчанию — default_precision())

        Raises:
            InvalidPrecisionError: Если precision невалидна
            TypeError: Для неподдерживаемых типов
        """
        if isinstance(value, FixedFloat) and precision is None:
            self._init_shared(value)
            return

        target = validate_precision(precision) if precision is not None else self._default_precision()
        source = self._engine_input(value)
        converted = _compute(lambda: gmpy2.mpfr(source, target), target)
        self._init_allocated(target)
        self._struct.value = converted

    @classmethod
    def _default_precision(cls) -> int:
        return get_config().fixed_float_precision

    @classmethod
    def default_precision(cls) -> int:
        """Точность по умолчанию для новых значений."""
        return cls._default_precision()

    @classmethod
    def set_default_precision(cls, precision: int) -> None:
        """
        Raises:
            InvalidPrecisionError: Если precision невалидна
        """
        configure(fixed_float_precision=validate_precision(precision))

    def set_precision(self, precision: int) -> None:
        """
        Смена точности: рост сохраняет значение точно, уменьшение усекает.
        """
        target = validate_precision(precision)
        current = self._value
        converted = _compute(lambda: gmpy2.mpfr(current, target), target)
        struct = self._mutable_struct()
        struct.value = converted
        struct.precision = target

    # =========================================================================
    # ОПЕРАНДЫ
    # =========================================================================

    @staticmethod
    def _operand(value: Any) -> Any:
        if isinstance(value, FixedFloat):
            return value._value
        return integer_operand(value)

    @classmethod
    def _require_operand(cls, value: Any, name: str = "operand") -> Any:
        operand = cls._operand(value)
        if operand is None:
            raise TypeError(f"{name} must be a FixedFloat, Integer or int, got {type(value).__name__}")
        return operand

    def _binary(self, operation: Any, other: Any) -> "FixedFloat":
        lhs = self._value
        rhs = self._require_operand(other)
        precision = self.precision
        return self._wrap(_compute(lambda: operation(lhs, rhs), precision), precision)

    # =========================================================================
    # АРИФМЕТИКА (IMMUTABLE)
    # =========================================================================

    def adding(self, other: Any) -> "FixedFloat":
        return self._binary(lambda a, b: a + b, other)

    def subtracting(self, other: Any) -> "FixedFloat":
        return self._binary(lambda a, b: a - b, other)

    def multiplied(self, by: Any) -> "FixedFloat":
        return self._binary(lambda a, b: a * b, by)

    def divided(self, by: Any) -> "FixedFloat":
        """Деление; делитель 0 даёт ±Inf/NaN и поднимает sticky-флаг."""
        return self._binary(lambda a, b: a / b, by)

    @classmethod
    def difference(cls, value: Any, other: "FixedFloat") -> "FixedFloat":
        """value - other с точностью other (value может быть native int)."""
        lhs = cls._require_operand(value, "value")
        rhs = other._value
        precision = other.precision
        return cls._wrap(_compute(lambda: lhs - rhs, precision), precision)

    @classmethod
    def quotient(cls, value: Any, other: "FixedFloat") -> "FixedFloat":
        """value / other с точностью other (value может быть native int)."""
        lhs = cls._require_operand(value, "value")
        rhs = other._value
        precision = other.precision
        return cls._wrap(_compute(lambda: lhs / rhs, precision), precision)

    def negated(self) -> "FixedFloat":
        value = self._value
        return self._wrap(_compute(lambda: -value, self.precision), self.precision)

    def absolute_value(self) -> "FixedFloat":
        value = self._value
        return self._wrap(_compute(lambda: abs(value), self.precision), self.precision)

    def multiplied_by_power_of_2(self, exponent: int) -> "FixedFloat":
        """value × 2**exponent; отрицательная экспонента делит."""
        e = require_exponent(exponent)
        value = self._value
        scaled = _compute(
            lambda: gmpy2.mul_2exp(value, e) if e >= 0 else gmpy2.div_2exp(value, -e),
            self.precision,
        )
        return self._wrap(scaled, self.precision)

    def divided_by_power_of_2(self, exponent: int) -> "FixedFloat":
        """
        value / 2**exponent.

        Raises:
            InvalidExponentError: Если exponent < 0
        """
        e = require_exponent(exponent)
        if e < 0:
            raise InvalidExponentError(e)
        value = self._value
        return self._wrap(_compute(lambda: gmpy2.div_2exp(value, e), self.precision), self.precision)

    def raised_to_power(self, exponent: int) -> "FixedFloat":
        """
        Raises:
            InvalidExponentError: Если exponent < 0
        """
        e = require_exponent(exponent)
        if e < 0:
            raise InvalidExponentError(e)
        value = self._value
        return self._wrap(_compute(lambda: value**e, self.precision), self.precision)

    def square_root(self) -> "FixedFloat":
        """
        Raises:
            NegativeSquareRootError: Если value < 0
        """
        value = self._value
        if value < 0:
            raise NegativeSquareRootError()
        return self._wrap(_compute(lambda: gmpy2.sqrt(value), self.precision), self.precision)

    @classmethod
    def square_root_of(cls, n: int, precision: Optional[int] = None) -> "FixedFloat":
        """√n для native unsigned n."""
        radicand = gmpy2.mpz(require_unsigned(n, "n"))
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        return cls._wrap(_compute(lambda: gmpy2.sqrt(radicand), target), target)

    def floor(self) -> "FixedFloat":
        value = self._value
        return self._wrap(_compute(lambda: gmpy2.floor(value), self.precision), self.precision)

    def ceiling(self) -> "FixedFloat":
        value = self._value
        return self._wrap(_compute(lambda: gmpy2.ceil(value), self.precision), self.precision)

    def truncated(self) -> "FixedFloat":
        value = self._value
        return self._wrap(_compute(lambda: gmpy2.trunc(value), self.precision), self.precision)

    def relative_difference(self, other: "FixedFloat") -> "FixedFloat":
        """|self - other| / |self| с точностью receiver'а."""
        lhs = self._value
        rhs = self._require_operand(other)
        return self._wrap(
            _compute(lambda: abs(lhs - rhs) / abs(lhs), self.precision), self.precision
        )

    # -------------------------------------------------------------------------
    # Операторы
    # -------------------------------------------------------------------------

    def __add__(self, other: Any) -> "FixedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.adding(other)

    __radd__ = __add__

    def __sub__(self, other: Any) -> "FixedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.subtracting(other)

    def __rsub__(self, other: Any) -> "FixedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return FixedFloat.difference(other, self)

    def __mul__(self, other: Any) -> "FixedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.multiplied(other)

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> "FixedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.divided(other)

    def __rtruediv__(self, other: Any) -> "FixedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return FixedFloat.quotient(other, self)

    def __pow__(self, exponent: Any) -> "FixedFloat":
        if integer_operand(exponent) is None:
            return NotImplemented
        return self.raised_to_power(int(exponent))

    def __neg__(self) -> "FixedFloat":
        return self.negated()

    def __pos__(self) -> "FixedFloat":
        return self.copy()

    def __abs__(self) -> "FixedFloat":
        return self.absolute_value()

    # =========================================================================
    # АРИФМЕТИКА (IN PLACE)
    # =========================================================================

    def set(self, value: Any) -> None:
        """Присваивание с сохранением точности receiver'а."""
        source = self._engine_input(value)
        precision = self.precision
        converted = _compute(lambda: gmpy2.mpfr(source, precision), precision)
        self._mutable_struct().value = converted

    def _apply_constant(self, operation: Any, operand: Any) -> None:
        struct = self._mutable_struct()
        current = struct.value
        struct.value = _compute(lambda: operation(current, operand), struct.precision)

    def add_in_place(self, other: Any) -> None:
        if isinstance(other, FixedFloat):
            self._steal(self.adding(other))
            return
        self._apply_constant(lambda a, b: a + b, self._require_operand(other))

    def subtract_in_place(self, other: Any) -> None:
        if isinstance(other, FixedFloat):
            self._steal(self.subtracting(other))
            return
        self._apply_constant(lambda a, b: a - b, self._require_operand(other))

    def multiply_in_place(self, by: Any) -> None:
        if isinstance(by, FixedFloat):
            self._steal(self.multiplied(by))
            return
        self._apply_constant(lambda a, b: a * b, self._require_operand(by))

    def divide_in_place(self, by: Any) -> None:
        if isinstance(by, FixedFloat):
            self._steal(self.divided(by))
            return
        self._apply_constant(lambda a, b: a / b, self._require_operand(by))

    def negate_in_place(self) -> None:
        self._apply_constant(lambda a, _: -a, None)

    def make_absolute(self) -> None:
        self._apply_constant(lambda a, _: abs(a), None)

    def multiply_by_power_of_2_in_place(self, exponent: int) -> None:
        self._steal(self.multiplied_by_power_of_2(exponent))

    def divide_by_power_of_2_in_place(self, exponent: int) -> None:
        self._steal(self.divided_by_power_of_2(exponent))

    def square_root_in_place(self) -> None:
        self._steal(self.square_root())

    # =========================================================================
    # КОНВЕРСИЯ И СЛУЧАЙНЫЕ ЗНАЧЕНИЯ
    # =========================================================================

    def to_float(self) -> float:
        """float с усечением к нулю."""
        return self._to_float(_ROUNDING)

    def __float__(self) -> float:
        return self.to_float()

    def to_float_2exp(self) -> tuple[float, int]:
        """(d, exp), value = d × 2**exp, 0.5 ≤ |d| < 1; d усечено."""
        return self._to_float_2exp(_ROUNDING)

    @classmethod
    def random(cls, bits: int, state: RandomState) -> "FixedFloat":
        """Равномерное значение в [0, 1) с bits значащими битами."""
        precision = validate_precision(bits)
        return cls._wrap(state.draw_float(precision), precision)


__all__ = ["FixedFloat"]
