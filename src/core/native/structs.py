"""
Native Structs — Раскладка native-структур поверх gmpy2

Каждая структура — мутабельный контейнер значения движка:
- IntegerStruct: один xmpz (аналог mpz_t)
- RationalStruct: сырая пара числитель/знаменатель xmpz (аналог mpq_t,
  может быть временно неканонической после прямых сеттеров)
- FloatStruct: значение mpfr + точность в битах (аналог mpfr_t / mpf_t)

Структуры НЕ используются напрямую вне NativeHandle.
"""

import gmpy2

from src.core.config import validate_precision


def owned_xmpz(value) -> gmpy2.xmpz:
    """Новый xmpz с собственной памятью: xmpz(xmpz) возвращает тот же объект."""
    return gmpy2.xmpz(gmpy2.mpz(value))


# =============================================================================
# INTEGER
# =============================================================================


class IntegerStruct:
    """Native-структура целого числа."""

    __slots__ = ("value",)

    def __init__(self) -> None:
        self.value = gmpy2.xmpz(0)

    def copy(self) -> "IntegerStruct":
        clone = IntegerStruct()
        clone.value = owned_xmpz(self.value)
        return clone

    def clear(self) -> None:
        self.value = None


# =============================================================================
# RATIONAL
# =============================================================================


class RationalStruct:
    """
    Native-структура рационального числа.

    Инвариант после канонизации: den > 0, gcd(|num|, den) = 1, ноль = 0/1.
    Между прямым сеттером и канонизацией инвариант может нарушаться.
    """

    __slots__ = ("num", "den")

    def __init__(self) -> None:
        self.num = gmpy2.xmpz(0)
        self.den = gmpy2.xmpz(1)

    def copy(self) -> "RationalStruct":
        clone = RationalStruct()
        clone.num = owned_xmpz(self.num)
        clone.den = owned_xmpz(self.den)
        return clone

    def load(self, value: gmpy2.mpq) -> None:
        """Загрузка уже канонического mpq (результат fused-операции)."""
        self.num = owned_xmpz(value.numerator)
        self.den = owned_xmpz(value.denominator)

    def as_mpq(self) -> gmpy2.mpq:
        """mpq из пары. Вызывается только для канонической структуры."""
        return gmpy2.mpq(gmpy2.mpz(self.num), gmpy2.mpz(self.den))

    def clear(self) -> None:
        self.num = None
        self.den = None


# =============================================================================
# FLOAT
# =============================================================================


class FloatStruct:
    """Native-структура float с фиксированной точностью."""

    __slots__ = ("value", "precision")

    def __init__(self, precision: int) -> None:
        self.precision = validate_precision(precision)
        self.value = gmpy2.mpfr(0, self.precision)

    def copy(self) -> "FloatStruct":
        clone = FloatStruct(self.precision)
        # Та же точность: копирование точное
        clone.value = self.value
        return clone

    def clear(self) -> None:
        self.value = None
        self.precision = 0
