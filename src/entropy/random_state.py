"""
RandomState — Быстрый детерминированный генератор (НЕ для секретов)

Обёртка над gmpy2.random_state (Mersenne Twister GMP).

Семантика:
- RandomState() — состояние по умолчанию, seed == 0
- RandomState(seed) / reseed(seed) — seed int или объект с __int__ (Integer);
  самое отрицательное int64 сидируется своим модулем 2**63
- copy() — независимый клон: seed + повтор всех выполненных выборок
  (история хранится сериями одинаковых выборок: память растёт с числом
  серий, время copy() — с общим числом выборок)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Одинаковый seed → одинаковая последовательность
2. Клон продолжает последовательность с той же точки, что и оригинал
3. Выборки клона не влияют на оригинал
"""

import logging
from typing import Any, Callable, Final, SupportsInt

import gmpy2

from src.core.errors import InvalidRandomStateError
from src.core.native.native_int import INT64_MIN
from src.rounding.tracker import engine_context

_logger = logging.getLogger(__name__)

MAX_NATIVE_BITS: Final[int] = 64


class RandomState:
    """
    Seedable генератор псевдослучайных чисел.

    Example:
        >>> a = RandomState(42)
        >>> b = RandomState(42)
        >>> a.random_below(1000) == b.random_below(1000)
        True
    """

    def __init__(self, seed: SupportsInt | None = None):
        self._seed = 0 if seed is None else int(seed)
        self._explicit = seed is not None
        self._draws: list[list[Any]] = []
        self._draw_count = 0
        self._state = self._fresh_engine_state()

    def _fresh_engine_state(self) -> Any:
        if not self._explicit:
            return gmpy2.random_state()
        return gmpy2.random_state(self._seed_magnitude(self._seed))

    @staticmethod
    def _seed_magnitude(seed: SupportsInt) -> int:
        value = int(seed)
        if value == INT64_MIN:
            return 2**63
        return abs(value)

    # -------------------------------------------------------------------------
    # Seed
    # -------------------------------------------------------------------------

    @property
    def seed(self) -> int:
        """Последний явно заданный seed (0 для состояния по умолчанию)."""
        return self._seed

    def reseed(self, seed: SupportsInt) -> None:
        """Пересидирование: последовательность начинается заново."""
        self._seed = int(seed)
        self._explicit = True
        self._state = self._fresh_engine_state()
        self._draws.clear()
        self._draw_count = 0

    # -------------------------------------------------------------------------
    # Выборки native
    # -------------------------------------------------------------------------

    def random_below(self, upper_bound: int) -> int:
        """
        Равномерное целое в [0, upper_bound).

        Raises:
            InvalidRandomStateError: Если upper_bound ≤ 0
        """
        if upper_bound <= 0:
            raise InvalidRandomStateError(f"upper_bound must be positive, got {upper_bound}")
        return int(self._draw(gmpy2.mpz_random, gmpy2.mpz(upper_bound)))

    def random_bits(self, bits: int) -> int:
        """
        Равномерное целое из bits случайных бит (0 ≤ bits ≤ 64).

        Raises:
            InvalidRandomStateError: Если bits вне [0, 64]
        """
        if not 0 <= bits <= MAX_NATIVE_BITS:
            raise InvalidRandomStateError(f"bits must be in [0, {MAX_NATIVE_BITS}], got {bits}")
        if bits == 0:
            return 0
        return int(self._draw(gmpy2.mpz_urandomb, bits))

    # -------------------------------------------------------------------------
    # Выборки движка (для value-типов)
    # -------------------------------------------------------------------------

    def draw_integer_bits(self, bits: int) -> gmpy2.mpz:
        """Равномерное mpz в [0, 2**bits)."""
        return self._draw(gmpy2.mpz_urandomb, bits)

    def draw_integer_below(self, bound: gmpy2.mpz) -> gmpy2.mpz:
        """Равномерное mpz в [0, bound)."""
        return self._draw(gmpy2.mpz_random, bound)

    def draw_integer_long(self, bits: int) -> gmpy2.mpz:
        """mpz с длинными сериями единиц и нулей (для тестов граничных случаев)."""
        return self._draw(gmpy2.mpz_rrandomb, bits)

    def draw_float(self, precision: int) -> gmpy2.mpfr:
        """Равномерное mpfr в [0, 1) с precision значащими битами."""
        return self._draw(_uniform_float, precision)

    def _draw(self, function: Callable[..., Any], *args: Any) -> Any:
        value = function(self._state, *args)
        self._record(function, args)
        return value

    def _record(self, function: Callable[..., Any], args: tuple[Any, ...]) -> None:
        # Серии одинаковых выборок хранятся как [function, args, count]
        if self._draws:
            last = self._draws[-1]
            if last[0] is function and last[1] == args:
                last[2] += 1
                self._draw_count += 1
                return
        self._draws.append([function, args, 1])
        self._draw_count += 1

    # -------------------------------------------------------------------------
    # Копирование
    # -------------------------------------------------------------------------

    def copy(self) -> "RandomState":
        """Независимый клон в той же точке последовательности."""
        clone = RandomState.__new__(RandomState)
        clone._seed = self._seed
        clone._explicit = self._explicit
        clone._state = clone._fresh_engine_state()
        clone._draws = [list(run) for run in self._draws]
        clone._draw_count = self._draw_count
        for function, args, count in self._draws:
            for _ in range(count):
                function(clone._state, *args)
        _logger.debug(
            "random state cloned by replaying %d draws (%d runs)", self._draw_count, len(self._draws)
        )
        return clone

    def __copy__(self) -> "RandomState":
        return self.copy()

    def __deepcopy__(self, memo: dict) -> "RandomState":
        clone = self.copy()
        memo[id(self)] = clone
        return clone

    @property
    def draw_count(self) -> int:
        return self._draw_count

    def __repr__(self) -> str:
        return f"RandomState(seed={self._seed}, draws={self._draw_count})"


def _uniform_float(state: Any, precision: int) -> gmpy2.mpfr:
    with engine_context(precision, register=None):
        return gmpy2.mpfr_random(state)
