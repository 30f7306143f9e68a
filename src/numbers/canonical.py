"""
Canonicalizer — Нормализация рациональных чисел

Каноническая форма: den > 0, gcd(|num|, den) = 1, ноль = 0/1.

Алгоритм:
    g = gcd(|num|, |den|); num /= g; den /= g
    if den < 0: num, den = -num, -den
    if num == 0: den = 1

Запускается после прямых сеттеров компонентов, конструирования из пары
и разбора строки. Fused-арифметика получает от движка уже каноничные
mpq и нормализацию пропускает.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. den == 0 → DivisionByZeroError, структура НЕ изменяется
2. Результат всегда удовлетворяет is_canonical
"""

import logging
from typing import NamedTuple

import gmpy2

from src.core.errors import DivisionByZeroError
from src.core.native.structs import owned_xmpz

_logger = logging.getLogger(__name__)


class CanonicalPair(NamedTuple):
    """Каноническая пара числитель/знаменатель."""

    numerator: gmpy2.mpz
    denominator: gmpy2.mpz


def canonical_pair(numerator: int, denominator: int) -> CanonicalPair:
    """
    Приведение пары к канонической форме.

    Args:
        numerator: Числитель
        denominator: Знаменатель (≠ 0)

    Returns:
        CanonicalPair

    Raises:
        DivisionByZeroError: Если denominator == 0

    Examples:
        >>> canonical_pair(6, 8)
        CanonicalPair(numerator=mpz(3), denominator=mpz(4))
        >>> canonical_pair(3, -6)
        CanonicalPair(numerator=mpz(-1), denominator=mpz(2))
        >>> canonical_pair(0, -5)
        CanonicalPair(numerator=mpz(0), denominator=mpz(1))
    """
    num = gmpy2.mpz(numerator)
    den = gmpy2.mpz(denominator)
    if den == 0:
        raise DivisionByZeroError("Rational denominator is zero")

    if num == 0:
        return CanonicalPair(gmpy2.mpz(0), gmpy2.mpz(1))

    g = gmpy2.gcd(num, den)
    if g != 1:
        num = gmpy2.divexact(num, g)
        den = gmpy2.divexact(den, g)
    if den < 0:
        num, den = -num, -den
    return CanonicalPair(num, den)


def is_canonical(numerator: int, denominator: int) -> bool:
    """True если пара уже в канонической форме."""
    if denominator <= 0:
        return False
    if numerator == 0:
        return denominator == 1
    return gmpy2.gcd(numerator, denominator) == 1


class Canonicalizer:
    """
    Нормализация RationalStruct на месте.

    Структура изменяется только после успешного вычисления канонической
    пары.
    """

    @staticmethod
    def canonicalize(struct) -> None:
        """
        Raises:
            DivisionByZeroError: Если знаменатель структуры равен 0
        """
        num, den = canonical_pair(struct.num, struct.den)
        if num != struct.num or den != struct.den:
            _logger.debug("canonicalized %s/%s -> %s/%s", struct.num, struct.den, num, den)
        struct.num = owned_xmpz(num)
        struct.den = owned_xmpz(den)
