"""
Rounded Math — Степени, трансцендентные функции и константы RoundedFloat

- Степени: native int / Integer / RoundedFloat экспонента, power(ui, ui)
- Тригонометрия: sin, cos, tan, sin_cos, asin, acos, atan, atan2
- Checked-семейство: exp, log, log2, log10, sinh, cosh, tanh, asinh,
  acosh, atanh, sinh_cosh
- Округление к целому: floor, ceil, trunc, round, rint
- Константы: pi, euler, catalan, log2_constant

Checked-операции сбрасывают флаги исключений непосредственно перед
вызовом и проверяют регистр сразу после: любой сработавший флаг
(кроме INEXACT) → FloatingPointFlagsError. Остальные операции только
пополняют sticky-регистр.
"""

from typing import Any, Callable, Optional

import gmpy2

from src.core.config import validate_precision
from src.core.native.native_int import require_unsigned
from src.numbers.operands import integer_operand
from src.rounding.modes import RoundedResult, RoundingMode


class RoundedMathMixin:
    """Функции RoundedFloat. Требует _value, _unary, _binary, _run и _run_checked."""

    __slots__ = ()

    # =========================================================================
    # СТЕПЕНИ
    # =========================================================================

    def raised_to_power(self, exponent: Any, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """
        value**exponent.

        Args:
            exponent: int, Integer или RoundedFloat
        """
        if isinstance(exponent, type(self)):
            power = exponent._value
        else:
            power = integer_operand(exponent)
            if power is None:
                raise TypeError(
                    f"exponent must be a {type(self).__name__}, Integer or int, "
                    f"got {type(exponent).__name__}"
                )
        return self._unary(lambda a: a**power, rounding)

    @classmethod
    def power(
        cls,
        base: int,
        exponent: int,
        precision: Optional[int] = None,
        rounding: Optional[RoundingMode] = None,
    ) -> RoundedResult:
        """base**exponent для native unsigned base и exponent."""
        b = gmpy2.mpz(require_unsigned(base, "base"))
        e = require_unsigned(exponent, "exponent")
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        return cls._run(lambda: gmpy2.mpfr(b**e, target), target, rounding)

    # =========================================================================
    # ТРИГОНОМЕТРИЯ
    # =========================================================================

    def sin(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.sin, rounding)

    def cos(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.cos, rounding)

    def tan(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.tan, rounding)

    def sin_cos(
        self, rounding: Optional[RoundingMode] = None
    ) -> tuple[RoundedResult, RoundedResult]:
        """(sin, cos), каждый со своим ternary."""
        return self.sin(rounding), self.cos(rounding)

    def asin(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """arcsin; вне [-1, 1] → NaN и флаг NAN."""
        return self._unary(gmpy2.asin, rounding)

    def acos(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.acos, rounding)

    def atan(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.atan, rounding)

    def atan2(self, x: Any, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Угол точки (x, self), self — ордината."""
        return self._binary(gmpy2.atan2, x, rounding)

    # =========================================================================
    # CHECKED: ЭКСПОНЕНТА, ЛОГАРИФМЫ, ГИПЕРБОЛИЧЕСКИЕ
    # =========================================================================

    def _checked_unary(
        self,
        name: str,
        function: Callable[[Any], Any],
        rounding: Optional[RoundingMode],
    ) -> RoundedResult:
        value = self._value
        return self._run_checked(name, lambda: function(value), self.precision, rounding)

    def exp(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """
        e**value.

        Raises:
            FloatingPointFlagsError: При переполнении/антипереполнении и т.п.
        """
        return self._checked_unary("exp", gmpy2.exp, rounding)

    def log(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """
        Натуральный логарифм.

        Raises:
            FloatingPointFlagsError: Для нуля (DIVIDE_BY_ZERO) и
                отрицательных значений (NAN)
        """
        return self._checked_unary("log", gmpy2.log, rounding)

    def log2(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._checked_unary("log2", gmpy2.log2, rounding)

    def log10(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._checked_unary("log10", gmpy2.log10, rounding)

    def sinh(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._checked_unary("sinh", gmpy2.sinh, rounding)

    def cosh(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._checked_unary("cosh", gmpy2.cosh, rounding)

    def tanh(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._checked_unary("tanh", gmpy2.tanh, rounding)

    def asinh(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._checked_unary("asinh", gmpy2.asinh, rounding)

    def acosh(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Raises FloatingPointFlagsError для value < 1."""
        return self._checked_unary("acosh", gmpy2.acosh, rounding)

    def atanh(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Raises FloatingPointFlagsError для |value| ≥ 1."""
        return self._checked_unary("atanh", gmpy2.atanh, rounding)

    def sinh_cosh(
        self, rounding: Optional[RoundingMode] = None
    ) -> tuple[RoundedResult, RoundedResult]:
        return self.sinh(rounding), self.cosh(rounding)

    # =========================================================================
    # ОКРУГЛЕНИЕ К ЦЕЛОМУ
    # =========================================================================

    def floor(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Наибольшее целое ≤ value, округлённое к точности receiver'а."""
        return self._unary(gmpy2.rint_floor, rounding)

    def ceil(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.rint_ceil, rounding)

    def trunc(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return self._unary(gmpy2.rint_trunc, rounding)

    def round(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Ближайшее целое, половины — от нуля."""
        return self._unary(gmpy2.rint_round, rounding)

    def rint(self, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Целое по самому режиму rounding."""
        return self._unary(gmpy2.rint, rounding)

    # =========================================================================
    # КОНСТАНТЫ
    # =========================================================================

    @classmethod
    def _constant(
        cls,
        function: Callable[[], Any],
        precision: Optional[int],
        rounding: Optional[RoundingMode],
    ) -> RoundedResult:
        target = validate_precision(precision) if precision is not None else cls._default_precision()
        return cls._run(function, target, rounding)

    @classmethod
    def pi(cls, precision: Optional[int] = None, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        return cls._constant(gmpy2.const_pi, precision, rounding)

    @classmethod
    def euler(cls, precision: Optional[int] = None, rounding: Optional[RoundingMode] = None) -> RoundedResult:
        """Постоянная Эйлера-Маскерони γ."""
        return cls._constant(gmpy2.const_euler, precision, rounding)

    @classmethod
    def catalan(
        cls, precision: Optional[int] = None, rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        return cls._constant(gmpy2.const_catalan, precision, rounding)

    @classmethod
    def log2_constant(
        cls, precision: Optional[int] = None, rounding: Optional[RoundingMode] = None
    ) -> RoundedResult:
        """ln 2."""
        return cls._constant(gmpy2.const_log2, precision, rounding)
