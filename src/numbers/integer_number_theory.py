"""
Integer Number Theory — Теоретико-числовые функции, корни и степени

- Простота: is_probable_prime, next_prime, previous_prime
- НОД / НОК / расширенный НОД, обратный по модулю
- Символы Якоби, Лежандра, Кронекера
- Удаление множителя (remove / removing)
- Факториалы, праймориал, биномиальные коэффициенты, Фибоначчи, Люка
- Корни: square_root, nth_root (+ остаток), is_perfect_square / power
- Модульное возведение в степень (обычное и с постоянным временем)

Статические функции (gcd, factorial, fibonacci, ...) — classmethod'ы
хост-класса Integer.
"""

from typing import Any, Optional

import gmpy2

from src.core.errors import (
    ArithmeticDomainError,
    DivisionByZeroError,
    InvalidExponentError,
    NegativeSquareRootError,
)
from src.core.native.native_int import require_unsigned
from src.numbers.operands import require_integer_operand

# Число раундов Миллера-Рабина по умолчанию
DEFAULT_PRIMALITY_REPS = 25


class IntegerNumberTheoryMixin:
    """Теория чисел для Integer. Требует _value, _wrap и _steal."""

    __slots__ = ()

    # =========================================================================
    # ПРОСТОТА
    # =========================================================================

    def is_probable_prime(self, reps: int = DEFAULT_PRIMALITY_REPS) -> bool:
        """
        Вероятностная проверка простоты (BPSW + reps раундов Миллера-Рабина).

        Args:
            reps: Число раундов (≥ 1)
        """
        if reps < 1:
            raise ValueError(f"reps must be positive, got {reps}")
        return bool(gmpy2.is_prime(self._value, reps))

    def next_prime(self) -> Any:
        """Наименьшее простое, строго большее self."""
        return self._wrap(gmpy2.next_prime(self._value))

    def previous_prime(self) -> Optional[Any]:
        """Наибольшее простое, строго меньшее self; None если его нет."""
        candidate = self._value - 1
        if candidate < 2:
            return None
        if candidate == 2:
            return self._wrap(candidate)
        if gmpy2.is_even(candidate):
            candidate -= 1
        while candidate > 2 and not gmpy2.is_prime(candidate):
            candidate -= 2
        return self._wrap(candidate)

    # =========================================================================
    # НОД / НОК / ОБРАТНЫЙ
    # =========================================================================

    @classmethod
    def gcd(cls, a: Any, b: Any) -> Any:
        """Неотрицательный НОД; gcd(0, 0) == 0."""
        return cls._wrap(gmpy2.gcd(require_integer_operand(a), require_integer_operand(b)))

    @classmethod
    def extended_gcd(cls, a: Any, b: Any) -> tuple[Any, Any, Any]:
        """(g, s, t) такие, что a·s + b·t == g."""
        g, s, t = gmpy2.gcdext(require_integer_operand(a), require_integer_operand(b))
        return cls._wrap(g), cls._wrap(s), cls._wrap(t)

    @classmethod
    def lcm(cls, a: Any, b: Any) -> Any:
        """Неотрицательный НОК; 0 если любой аргумент 0."""
        return cls._wrap(gmpy2.lcm(require_integer_operand(a), require_integer_operand(b)))

    def modular_inverse(self, modulus: Any) -> Optional[Any]:
        """
        x такое, что self·x ≡ 1 (mod |modulus|), 0 ≤ x < |modulus|.

        Returns:
            Integer или None, если обратного нет

        Raises:
            DivisionByZeroError: Если modulus == 0
        """
        m = abs(require_integer_operand(modulus, "modulus"))
        if m == 0:
            raise DivisionByZeroError("Modular inverse with zero modulus")
        if m == 1:
            return self._wrap(0)
        if gmpy2.gcd(self._value, m) != 1:
            return None
        return self._wrap(gmpy2.invert(self._value, m))

    # =========================================================================
    # СИМВОЛЫ
    # =========================================================================

    @classmethod
    def jacobi_symbol(cls, a: Any, b: Any) -> int:
        """
        Символ Якоби (a/b).

        Raises:
            ValueError: Если b не положительное нечётное
        """
        n = require_integer_operand(b, "b")
        if n <= 0 or gmpy2.is_even(n):
            raise ValueError(f"Jacobi symbol requires an odd positive b, got {n}")
        return int(gmpy2.jacobi(require_integer_operand(a, "a"), n))

    @classmethod
    def legendre_symbol(cls, a: Any, p: Any) -> int:
        """Символ Лежандра (a/p) для нечётного простого p."""
        prime = require_integer_operand(p, "p")
        if prime <= 2 or not gmpy2.is_prime(prime):
            raise ValueError(f"Legendre symbol requires an odd prime p, got {prime}")
        return int(gmpy2.legendre(require_integer_operand(a, "a"), prime))

    @classmethod
    def kronecker_symbol(cls, a: Any, b: Any) -> int:
        """Символ Кронекера (a/b) для любых a, b."""
        return int(gmpy2.kronecker(require_integer_operand(a, "a"), require_integer_operand(b, "b")))

    # =========================================================================
    # УДАЛЕНИЕ МНОЖИТЕЛЯ
    # =========================================================================

    def removing(self, factor: Any) -> tuple[Any, int]:
        """
        Удаление всех вхождений factor.

        Returns:
            (self / factor**k, k)

        Raises:
            DivisionByZeroError: Если factor == 0
        """
        f = require_integer_operand(factor, "factor")
        if f == 0:
            raise DivisionByZeroError("Cannot remove a zero factor")
        value = self._value
        if abs(f) == 1 or value == 0:
            return self._wrap(value), 0
        reduced, count = gmpy2.remove(value, f)
        return self._wrap(reduced), int(count)

    def remove(self, factor: Any) -> int:
        """In-place форма removing(); возвращает число удалённых множителей."""
        reduced, count = self.removing(factor)
        self._steal(reduced)
        return count

    # =========================================================================
    # КОМБИНАТОРИКА И ПОСЛЕДОВАТЕЛЬНОСТИ
    # =========================================================================

    @classmethod
    def factorial(cls, n: int) -> Any:
        return cls._wrap(gmpy2.fac(require_unsigned(n, "n")))

    @classmethod
    def double_factorial(cls, n: int) -> Any:
        return cls._wrap(gmpy2.double_fac(require_unsigned(n, "n")))

    @classmethod
    def multi_factorial(cls, n: int, m: int) -> Any:
        """n!^(m): произведение n·(n-m)·(n-2m)·..."""
        if m < 1:
            raise ValueError(f"m must be positive, got {m}")
        return cls._wrap(gmpy2.multi_fac(require_unsigned(n, "n"), m))

    @classmethod
    def primorial(cls, n: int) -> Any:
        """Произведение всех простых ≤ n."""
        return cls._wrap(gmpy2.primorial(require_unsigned(n, "n")))

    @classmethod
    def binomial(cls, n: Any, k: int) -> Any:
        """Биномиальный коэффициент C(n, k); n может быть отрицательным."""
        return cls._wrap(gmpy2.comb(require_integer_operand(n, "n"), require_unsigned(k, "k")))

    @classmethod
    def fibonacci(cls, n: int) -> Any:
        return cls._wrap(gmpy2.fib(require_unsigned(n, "n")))

    @classmethod
    def fibonacci2(cls, n: int) -> tuple[Any, Any]:
        """(F(n), F(n-1))."""
        current, previous = gmpy2.fib2(require_unsigned(n, "n"))
        return cls._wrap(current), cls._wrap(previous)

    @classmethod
    def lucas(cls, n: int) -> Any:
        return cls._wrap(gmpy2.lucas(require_unsigned(n, "n")))

    @classmethod
    def lucas2(cls, n: int) -> tuple[Any, Any]:
        """(L(n), L(n-1))."""
        current, previous = gmpy2.lucas2(require_unsigned(n, "n"))
        return cls._wrap(current), cls._wrap(previous)

    # =========================================================================
    # КОРНИ
    # =========================================================================

    def square_root(self) -> Any:
        """
        Целая часть квадратного корня.

        Raises:
            NegativeSquareRootError: Если self < 0
        """
        value = self._value
        if value < 0:
            raise NegativeSquareRootError()
        return self._wrap(gmpy2.isqrt(value))

    def square_root_with_remainder(self) -> tuple[Any, Any]:
        """(s, r) такие, что s² + r == self, 0 ≤ r ≤ 2s."""
        value = self._value
        if value < 0:
            raise NegativeSquareRootError()
        root, remainder = gmpy2.isqrt_rem(value)
        return self._wrap(root), self._wrap(remainder)

    def _check_root(self, n: int) -> int:
        degree = int(n)
        if degree < 1:
            raise InvalidExponentError(degree, f"Root degree must be positive, got {degree}")
        if self._value < 0 and degree % 2 == 0:
            raise ArithmeticDomainError(f"Even root (n={degree}) of a negative value")
        return degree

    def nth_root(self, n: int) -> tuple[Any, bool]:
        """
        Целая часть корня n-й степени (усечение к нулю).

        Returns:
            (root, exact)
        """
        degree = self._check_root(n)
        value = self._value
        root, exact = gmpy2.iroot(abs(value), degree)
        return self._wrap(-root if value < 0 else root), bool(exact)

    def nth_root_with_remainder(self, n: int) -> tuple[Any, Any]:
        """(root, remainder) такие, что root**n + remainder == self."""
        degree = self._check_root(n)
        value = self._value
        root, _ = gmpy2.iroot(abs(value), degree)
        if value < 0:
            root = -root
        return self._wrap(root), self._wrap(value - root**degree)

    @property
    def is_perfect_square(self) -> bool:
        return bool(gmpy2.is_square(self._value))

    @property
    def is_perfect_power(self) -> bool:
        """Представимо ли как a**b, b > 1 (0 и 1 — да)."""
        return bool(gmpy2.is_power(self._value))

    # =========================================================================
    # МОДУЛЬНОЕ ВОЗВЕДЕНИЕ В СТЕПЕНЬ
    # =========================================================================

    def raised_to_power_mod(self, exponent: Any, modulus: Any) -> Any:
        """
        self**exponent mod |modulus|, результат в [0, |modulus|).

        Отрицательная экспонента использует обратный элемент.

        Raises:
            DivisionByZeroError: Если modulus == 0
            ArithmeticDomainError: Если exponent < 0 и обратного нет
        """
        e = require_integer_operand(exponent, "exponent")
        m = abs(require_integer_operand(modulus, "modulus"))
        if m == 0:
            raise DivisionByZeroError("Modular exponentiation with zero modulus")
        base = self._value
        if e < 0:
            if m != 1 and gmpy2.gcd(base, m) != 1:
                raise ArithmeticDomainError(f"{base} has no inverse modulo {m}")
        return self._wrap(gmpy2.powmod(base, e, m))

    def raised_to_power_mod_secure(self, exponent: Any, modulus: Any) -> Any:
        """
        Модульное возведение в степень с постоянным временем.

        Raises:
            InvalidExponentError: Если exponent ≤ 0
            ValueError: Если modulus не положительное нечётное
        """
        e = require_integer_operand(exponent, "exponent")
        m = require_integer_operand(modulus, "modulus")
        if e <= 0:
            raise InvalidExponentError(int(e), "Secure modular exponent must be positive")
        if m <= 0 or gmpy2.is_even(m):
            raise ValueError(f"Secure modular exponentiation requires an odd positive modulus, got {m}")
        return self._wrap(gmpy2.powmod_sec(self._value, e, m))
