"""
RoundedFloat — Float произвольной точности с явным режимом округления

Аналог mpfr: значение хранит только mpfr и точность. Режим округления
передаётся в КАЖДЫЙ вызов (None → NumericsConfig.default_rounding).

Формы операций:
- Immutable: adding / subtracting / ... → RoundedResult(value, ternary)
- Мутирующие: *_in_place → ternary (int)
- Операторы Python (+, -, *, /, **, унарный -, abs) → только значение,
  округление по умолчанию

Каждая операция выполняется через RoundingExceptionTracker: флаги
операции попадают в процессный sticky-регистр STICKY_FLAGS.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль не является ошибкой: ±Inf / NaN + sticky-флаг
2. Отрицательный аргумент square_root → NegativeSquareRootError
   (receiver не изменяется)
3. Бинарные мутации идут через immutable-форму (self-aliasing безопасен)
4. Статические обратные формы считаются с точностью other
"""

import logging
from typing import Any, Callable, Optional

import gmpy2

from src.core.config import configure, get_config, validate_precision
from src.core.errors import InvalidExponentError, NegativeSquareRootError
from src.core.native.native_int import require_unsigned
from src.entropy.random_state import RandomState
from src.numbers.float_base import FloatValue
from src.numbers.operands import integer_operand, require_exponent
from src.numbers.rounded_math import RoundedMathMixin
from src.rounding.modes import RoundedResult, RoundingMode, Ternary
from src.rounding.tracker import TRACKER

_logger = logging.getLogger(__name__)


def resolve_rounding(rounding: Optional[RoundingMode]) -> RoundingMode:
    """Явный режим или режим по умолчанию из конфигурации."""
    if rounding is None:
        return get_config().default_rounding
    return RoundingMode(rounding)


class RoundedFloat(RoundedMathMixin, FloatValue):
    """
    Float с явным округлением и ternary-результатом.

    Example:
        >>> two = RoundedFloat(2, precision=100)
        >>> root, ternary = two.square_root(RoundingMode.NEAREST)
        >>> root.precision, ternary != 0
        (100, True)
    """

    __slots__ = ()

    def __init__(
        self,
        value: Any = 0,
        precision: Optional[int] = None,
        rounding: Optional[RoundingMode] = None,
    ):
        """
        Args:
            value: RoundedFloat (разделение хранилища, если precision
                не задана), FixedFloat, Integer, Rational, int или float
            precision: Точность в битах (по умолчанию — default_precision())
            rounding: Округление конверсии

        Raises:
            InvalidPrecisionError: Если precision невалидна
            TypeError: Для неподдерживаемых типов
        """
        if isinstance(value, RoundedFloat) and precision is None:
            self._init_shared(value)
            return

        target = validate_precision(precision) if precision is not None else self._default_precision()
        converted, _ = self._converted(value, target, resolve_rounding(rounding))
        self._init_allocated(target)
        self._struct.value = converted

    @classmethod
    def rounded_from(
        cls,
        value: Any,
        precision: Optional[int] = None,
        rounding: Optional[RoundingMode] = None,
    ) -> RoundedResult:
        """Конверсия с ternary-кодом."""
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        converted, ternary = cls._converted(value, target, resolve_rounding(rounding))
        return RoundedResult(cls._wrap(converted, target), ternary)

    # =========================================================================
    # НАСТРОЙКИ ПО УМОЛЧАНИЮ
    # =========================================================================

    @classmethod
    def _default_precision(cls) -> int:
        return get_config().rounded_float_precision

    @classmethod
    def default_precision(cls) -> int:
        return cls._default_precision()

    @classmethod
    def set_default_precision(cls, precision: int) -> None:
        """
        Raises:
            InvalidPrecisionError: Если precision невалидна
        """
        configure(rounded_float_precision=validate_precision(precision))

    @classmethod
    def default_rounding(cls) -> RoundingMode:
        return get_config().default_rounding

    @classmethod
    def set_default_rounding(cls, rounding: RoundingMode) -> None:
        configure(default_rounding=RoundingMode(rounding))

    # =========================================================================
    # ИСПОЛНЕНИЕ
    # =========================================================================

    @classmethod
    def _run(
        cls,
        operation: Callable[[], Any],
        precision: int,
        rounding: Optional[RoundingMode],
    ) -> RoundedResult:
        value, ternary = TRACKER.run(operation, precision, resolve_rounding(rounding))
        return RoundedResult(cls._wrap(value, precision), ternary)

    @classmethod
    def _run_checked(
        cls,
        name: str,
        operation: Callable[[], Any],
        precision: int,
        rounding: Optional[RoundingMode],
    ) -> RoundedResult:
        value, ternary = TRACKER.checked(name, operation, precision, resolve_rounding(rounding))
        return RoundedResult(cls._wrap(value, precision), ternary)

    def _unary(self, function: Callable[[Any], Any], rounding: Optional[RoundingMode]) -> RoundedResult:
        value = self._value
        return self._run(lambda: function(value), self.precision, rounding)

    def _apply(self, result: RoundedResult) -> int:
        """Забрать хранилище результата; вернуть ternary."""
        self._steal(result.value)
        return result.ternary

    @staticmethod
    def _operand(value: Any) -> Any:
        if isinstance(value, RoundedFloat):
            return value._value
        return integer_operand(value)

    @classmethod
    def _require_operand(cls, value: Any, name: str = "operand") -> Any:
        operand = cls._operand(value)
        if operand is None:
            raise TypeError(
                f"{name} must be a RoundedFloat, Integer or int, got {type(value).__name__}"
            )
        return operand

    def _binary(
        self,
        function: Callable[[Any, Any], Any],
        other: Any,
        rounding: Optional[RoundingMode],
    ) -> RoundedResult:
        lhs = self._value
        rhs = self._require_operand(other)
        return self._run(lambda: function(lhs, rhs), self.precision, rounding)

    # =========================================================================
    # ТОЧНОСТЬ И ПРИСВАИВАНИЕ
    # =========================================================================

    def set_precision(self, precision: int, rounding: Optional[RoundingMode] = None) -> int:
        """
        Смена точности: рост сохраняет значение точно, уменьшение округляет.

        Returns:
            ternary
        """
        target = validate_precision(precision)
        converted, ternary = self._converted(self, target, resolve_rounding(rounding))
        struct = self._mutable_struct()
        struct.value = converted
        struct.precision = target
        return ternary

    def set(self, value: Any, rounding: Optional[RoundingMode] = None) -> int:
        """Присваивание с сохранением точности receiver'а; возвращает ternary."""
        converted, ternary = self._converted(value, self.precision, resolve_rounding(rounding))
        self._mutable_struct().value = converted
        return ternary

    # =========================================================================
    # АРИФМЕТИКА (IMMUTABLE)
    # =========================================================================

    def adding(self, other: Any, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._binary(lambda a, b: a + b, other, rounding)

    def subtracting(self, other: Any, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._binary(lambda a, b: a - b, other, rounding)

    def multiplied(self, by: Any, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._binary(lambda a, b: a * b, by, rounding)

    def divided(self, by: Any, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """
        Деление. Делитель 0 даёт ±Inf (флаг DIVIDE_BY_ZERO) или NaN
        для 0/0 (флаг NAN), ошибкой не является.
        """
        return self._binary(lambda a, b: a / b, by, rounding)

    @classmethod
    def difference(
        cls, value: Any, other: "RoundedFloat", rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        """value - other с точностью other (value может быть native int)."""
        lhs = cls._require_operand(value, "value")
        rhs = other._value
        return cls._run(lambda: lhs - rhs, other.precision, rounding)

    @classmethod
    def quotient(
        cls, value: Any, other: "RoundedFloat", rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        """value / other с точностью other (value может быть native int)."""
        lhs = cls._require_operand(value, "value")
        rhs = other._value
        return cls._run(lambda: lhs / rhs, other.precision, rounding)

    def negated(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(lambda a: -a, rounding)

    def absolute_value(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(abs, rounding)

    def multiplied_by_power_of_2(
        self, exponent: int, rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        """value × 2**exponent; отрицательная экспонента делит."""
        e = require_exponent(exponent)
        return self._unary(
            lambda a: gmpy2.mul_2exp(a, e) if e >= 0 else gmpy2.div_2exp(a, -e), rounding
        )

    def divided_by_power_of_2(
        self, exponent: int, rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        """
        value / 2**exponent.

        Raises:
            InvalidExponentError: Если exponent < 0
        """
        e = require_exponent(exponent)
        if e < 0:
            raise InvalidExponentError(e)
        return self._unary(lambda a: gmpy2.div_2exp(a, e), rounding)

    def square_root(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """
        Raises:
            NegativeSquareRootError: Если value < 0
        """
        if self._value < 0:
            raise NegativeSquareRootError()
        return self._unary(gmpy2.sqrt, rounding)

    @classmethod
    def square_root_of(
        cls,
        n: int,
        precision: Optional[int] = None,
        rounding: Optional[RoundingMode] = None,
    ) -> RoundedResult:
        """√n для native unsigned n."""
        radicand = gmpy2.mpz(require_unsigned(n, "n"))
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        return cls._run(lambda: gmpy2.sqrt(radicand), target, rounding)

    def relative_difference(
        self, other: "RoundedFloat", rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        """|self - other| / |self|; ternary не вычисляется (всегда 0)."""
        lhs = self._value
        rhs = self._require_operand(other)
        precision = self.precision
        value = TRACKER.compute(
            lambda: abs(lhs - rhs) / abs(lhs), precision, resolve_rounding(rounding)
        )
        return RoundedResult(self._wrap(value, precision), Ternary.EXACT)

    def next_up(self) -> "RoundedFloat":
        """Следующее представимое значение в сторону +∞ (точно)."""
        value = self._value
        precision = self.precision
        return self._wrap(
            TRACKER.compute(lambda: gmpy2.next_above(value), precision, RoundingMode.NEAREST),
            precision,
        )

    def next_down(self) -> "RoundedFloat":
        """Следующее представимое значение в сторону -∞ (точно)."""
        value = self._value
        precision = self.precision
        return self._wrap(
            TRACKER.compute(lambda: gmpy2.next_below(value), precision, RoundingMode.NEAREST),
            precision,
        )

    def minimum(self, other: "RoundedFloat", rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Меньшее из значений; NaN-операнд игнорируется."""
        return self._binary(gmpy2.minnum, other, rounding)

    def maximum(self, other: "RoundedFloat", rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Большее из значений; NaN-операнд игнорируется."""
        return self._binary(gmpy2.maxnum, other, rounding)

    # -------------------------------------------------------------------------
    # Операторы (округление по умолчанию)
    # -------------------------------------------------------------------------

    def __add__(self, other: Any) -> "RoundedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.adding(other).value

    __radd__ = __add__

    def __sub__(self, other: Any) -> "RoundedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.subtracting(other).value

    def __rsub__(self, other: Any) -> "RoundedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return RoundedFloat.difference(other, self).value

    def __mul__(self, other: Any) -> "RoundedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.multiplied(other).value

    __rmul__ = __mul__

    def __truediv__(self, other: Any) -> "RoundedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return self.divided(other).value

    def __rtruediv__(self, other: Any) -> "RoundedFloat":
        if self._operand(other) is None:
            return NotImplemented
        return RoundedFloat.quotient(other, self).value

    def __pow__(self, exponent: Any) -> "RoundedFloat":
        if self._operand(exponent) is None:
            return NotImplemented
        return self.raised_to_power(exponent).value

    def __neg__(self) -> "RoundedFloat":
        return self.negated().value

    def __pos__(self) -> "RoundedFloat":
        return self.copy()

    def __abs__(self) -> "RoundedFloat":
        return self.absolute_value().value

    # =========================================================================
    # АРИФМЕТИКА (IN PLACE)
    # =========================================================================

    def _apply_constant(
        self,
        function: Callable[[Any], Any],
        rounding: Optional[RoundingMode],
    ) -> int:
        struct = self._mutable_struct()
        current = struct.value
        value, ternary = TRACKER.run(
            lambda: function(current), struct.precision, resolve_rounding(rounding)
        )
        struct.value = value
        return ternary

    def add_in_place(self, other: Any, rounding: Optional[RoundingMode] = None) -> int:
        if isinstance(other, RoundedFloat):
            return self._apply(self.adding(other, rounding))
        operand = self._require_operand(other)
        return self._apply_constant(lambda a: a + operand, rounding)

    def subtract_in_place(self, other: Any, rounding: Optional[RoundingMode] = None) -> int:
        if isinstance(other, RoundedFloat):
            return self._apply(self.subtracting(other, rounding))
        operand = self._require_operand(other)
        return self._apply_constant(lambda a: a - operand, rounding)

    def multiply_in_place(self, by: Any, rounding: Optional[RoundingMode] = None) -> int:
        if isinstance(by, RoundedFloat):
            return self._apply(self.multiplied(by, rounding))
        operand = self._require_operand(by)
        return self._apply_constant(lambda a: a * operand, rounding)

    def divide_in_place(self, by: Any, rounding: Optional[RoundingMode] = None) -> int:
        if isinstance(by, RoundedFloat):
            return self._apply(self.divided(by, rounding))
        operand = self._require_operand(by)
        return self._apply_constant(lambda a: a / operand, rounding)

    def negate_in_place(self, rounding: Optional[RoundingMode] = None) -> int:
        return self._apply_constant(lambda a: -a, rounding)

    def make_absolute(self, rounding: Optional[RoundingMode] = None) -> int:
        return self._apply_constant(abs, rounding)

    def multiply_by_power_of_2_in_place(
        self, exponent: int, rounding: Optional[RoundingMode] = None
    ) -> int:
        return self._apply(self.multiplied_by_power_of_2(exponent, rounding))

    def divide_by_power_of_2_in_place(
        self, exponent: int, rounding: Optional[RoundingMode] = None
    ) -> int:
        return self._apply(self.divided_by_power_of_2(exponent, rounding))

    def square_root_in_place(self, rounding: Optional[RoundingMode] = None) -> int:
        return self._apply(self.square_root(rounding))

    # =========================================================================
    # КОНВЕРСИЯ И СЛУЧАЙНЫЕ ЗНАЧЕНИЯ
    # =========================================================================

    def to_float(self, rounding: Optional[RoundingMode] = None) -> float:
        return self._to_float(resolve_rounding(rounding))

    def __float__(self) -> float:
        return self.to_float()

    def to_float_2exp(self, rounding: Optional[RoundingMode] = None) -> tuple[float, int]:
        """(d, exp), value = d × 2**exp, 0.5 ≤ |d| < 1."""
        return self._to_float_2exp(resolve_rounding(rounding))

    def fits_int16(self) -> bool:
        return self.fits_in("int16")

    def fits_uint16(self) -> bool:
        return self.fits_in("uint16")

    @classmethod
    def random(cls, state: RandomState, precision: Optional[int] = None) -> "RoundedFloat":
        """Равномерное значение в [0, 1)."""
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        return cls._wrap(state.draw_float(target), target)


__all__ = ["RoundedFloat", "resolve_rounding"]
