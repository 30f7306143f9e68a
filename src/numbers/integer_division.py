"""
Integer Division — Семейства целочисленного деления

Три семейства округления частного:
- floor: к -∞ (остаток имеет знак делителя)
- ceiling: к +∞ (остаток имеет знак, противоположный делителю)
- truncated: к нулю (остаток имеет знак делимого)

Для каждого семейства: частное, остаток, пара (частное, остаток), деление
на 2**bits и остаток от деления на 2**bits.

Мутирующие формы divide_in_place / remainder_in_place используют усечение.

Дополнительно: точное деление, modulo (неотрицательный остаток),
делимость и сравнимость по модулю.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Делитель 0 → DivisionByZeroError ДО любого вычисления
2. Отрицательное число бит → InvalidExponentError
3. q × d + r == n для всех семейств
"""

from typing import Any, Callable

import gmpy2

from src.core.errors import ArithmeticDomainError, DivisionByZeroError, InvalidExponentError
from src.numbers.operands import require_integer_operand


def _divisor(value: Any) -> gmpy2.mpz:
    divisor = require_integer_operand(value, "divisor")
    if divisor == 0:
        raise DivisionByZeroError()
    return divisor


def _bits(value: int) -> int:
    bits = int(value)
    if bits < 0:
        raise InvalidExponentError(bits)
    return bits


class IntegerDivisionMixin:
    """Деление для Integer. Требует _value и _wrap у хост-класса."""

    __slots__ = ()

    # -------------------------------------------------------------------------
    # Общая реализация
    # -------------------------------------------------------------------------

    def _quotient(self, function: Callable, divisor: Any) -> Any:
        return self._wrap(function(self._value, _divisor(divisor)))

    def _quotient_pair(self, function: Callable, divisor: Any) -> tuple[Any, Any]:
        quotient, remainder = function(self._value, _divisor(divisor))
        return self._wrap(quotient), self._wrap(remainder)

    # -------------------------------------------------------------------------
    # Floor
    # -------------------------------------------------------------------------

    def floor_divided(self, by: Any) -> Any:
        """Частное с округлением к -∞."""
        return self._quotient(gmpy2.f_div, by)

    def floor_remainder(self, by: Any) -> Any:
        return self._quotient(gmpy2.f_mod, by)

    def floor_quotient_and_remainder(self, by: Any) -> tuple[Any, Any]:
        return self._quotient_pair(gmpy2.f_divmod, by)

    def floor_divided_by_power_of_2(self, bits: int) -> Any:
        return self._wrap(gmpy2.f_div_2exp(self._value, _bits(bits)))

    def floor_remainder_dividing_by_power_of_2(self, bits: int) -> Any:
        return self._wrap(gmpy2.f_mod_2exp(self._value, _bits(bits)))

    # -------------------------------------------------------------------------
    # Ceiling
    # -------------------------------------------------------------------------

    def ceiling_divided(self, by: Any) -> Any:
        """Частное с округлением к +∞."""
        return self._quotient(gmpy2.c_div, by)

    def ceiling_remainder(self, by: Any) -> Any:
        return self._quotient(gmpy2.c_mod, by)

    def ceiling_quotient_and_remainder(self, by: Any) -> tuple[Any, Any]:
        return self._quotient_pair(gmpy2.c_divmod, by)

    def ceiling_divided_by_power_of_2(self, bits: int) -> Any:
        return self._wrap(gmpy2.c_div_2exp(self._value, _bits(bits)))

    def ceiling_remainder_dividing_by_power_of_2(self, bits: int) -> Any:
        return self._wrap(gmpy2.c_mod_2exp(self._value, _bits(bits)))

    # -------------------------------------------------------------------------
    # Truncated
    # -------------------------------------------------------------------------

    def truncated_divided(self, by: Any) -> Any:
        """Частное с округлением к нулю."""
        return self._quotient(gmpy2.t_div, by)

    def truncated_remainder(self, by: Any) -> Any:
        return self._quotient(gmpy2.t_mod, by)

    def truncated_quotient_and_remainder(self, by: Any) -> tuple[Any, Any]:
        return self._quotient_pair(gmpy2.t_divmod, by)

    def truncated_divided_by_power_of_2(self, bits: int) -> Any:
        return self._wrap(gmpy2.t_div_2exp(self._value, _bits(bits)))

    def truncated_remainder_dividing_by_power_of_2(self, bits: int) -> Any:
        return self._wrap(gmpy2.t_mod_2exp(self._value, _bits(bits)))

    def divide_in_place(self, by: Any) -> None:
        """
        self ← частное с округлением к нулю.

        Raises:
            DivisionByZeroError: Если by == 0 (receiver не изменяется)
        """
        self._steal(self.truncated_divided(by))

    def remainder_in_place(self, by: Any) -> None:
        """self ← остаток с округлением частного к нулю (знак делимого)."""
        self._steal(self.truncated_remainder(by))

    # -------------------------------------------------------------------------
    # Прочее
    # -------------------------------------------------------------------------

    def exactly_divided(self, by: Any) -> Any:
        """
        Точное деление (делимость обязательна).

        Raises:
            DivisionByZeroError: Если by == 0
            ArithmeticDomainError: Если self не делится на by
        """
        divisor = _divisor(by)
        value = self._value
        if not gmpy2.is_divisible(value, divisor):
            raise ArithmeticDomainError(f"{value} is not exactly divisible by {divisor}")
        return self._wrap(gmpy2.divexact(value, divisor))

    def modulo(self, modulus: Any) -> Any:
        """Неотрицательный остаток по модулю |modulus|."""
        divisor = abs(_divisor(modulus))
        return self._wrap(gmpy2.f_mod(self._value, divisor))

    def is_divisible(self, by: Any) -> bool:
        """
        Делится ли self на by. Ноль делится только на ноль.
        """
        divisor = require_integer_operand(by, "divisor")
        if divisor == 0:
            return self._value == 0
        return bool(gmpy2.is_divisible(self._value, divisor))

    def is_divisible_by_power_of_2(self, bits: int) -> bool:
        return gmpy2.f_mod_2exp(self._value, _bits(bits)) == 0

    def is_congruent(self, to: Any, modulo: Any) -> bool:
        """
        self ≡ to (mod modulo). При modulo == 0 — точное равенство.
        """
        other = require_integer_operand(to, "to")
        modulus = require_integer_operand(modulo, "modulo")
        if modulus == 0:
            return self._value == other
        return bool(gmpy2.is_congruent(self._value, other, abs(modulus)))

    def is_congruent_modulo_power_of_2(self, to: Any, bits: int) -> bool:
        other = require_integer_operand(to, "to")
        mask_bits = _bits(bits)
        return gmpy2.f_mod_2exp(self._value - other, mask_bits) == 0
