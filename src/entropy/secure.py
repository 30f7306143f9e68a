"""
Secure Random — Криптографически стойкие случайные значения

Источник энтропии — модуль secrets (системный CSPRNG).

secure_random_float(bits):
    1. ⌈bits/8⌉ случайных байт
    2. байты → целое (big-endian)
    3. маска до ровно bits бит
    4. деление на 2**bits с рабочей точностью bits + guard
    5. ОДНО округление к нулю до точности bits

Результат в [0, 1). Широкое вычисление и единственное округление
исключают смещение двойного округления.
"""

import logging
import secrets

import gmpy2

from src.core.config import get_config, validate_precision
from src.core.errors import InvalidRandomStateError
from src.core.native.native_int import require_unsigned
from src.numbers.fixed_float import FixedFloat
from src.numbers.integer import Integer
from src.numbers.operands import require_integer_operand
from src.rounding.modes import RoundingMode
from src.rounding.tracker import TRACKER

_logger = logging.getLogger(__name__)


def secure_random_bytes(count: int) -> bytes:
    """count байт из системного CSPRNG."""
    return secrets.token_bytes(require_unsigned(count, "count"))


def _secure_bits(bits: int) -> gmpy2.mpz:
    raw = secure_random_bytes((bits + 7) // 8)
    return gmpy2.mpz(int.from_bytes(raw, "big")) & ((gmpy2.mpz(1) << bits) - 1)


def secure_random_integer(bits: int) -> Integer:
    """
    Случайное целое ровно из bits бит (старший бит установлен).

    Raises:
        InvalidRandomStateError: Если bits < 1
    """
    if bits < 1:
        raise InvalidRandomStateError(f"bits must be positive, got {bits}")
    value = _secure_bits(bits)
    value |= gmpy2.mpz(1) << (bits - 1)
    return Integer._wrap(value)


def secure_random_below(bound: "Integer | int") -> Integer:
    """
    Равномерное целое в [0, bound) (отбор с отклонением).

    Raises:
        InvalidRandomStateError: Если bound ≤ 0
    """
    upper = require_integer_operand(bound, "bound")
    if upper <= 0:
        raise InvalidRandomStateError(f"bound must be positive, got {upper}")
    bits = max(int(upper - 1).bit_length(), 1)
    rejected = 0
    while True:
        candidate = _secure_bits(bits)
        if candidate < upper:
            if rejected:
                _logger.debug("secure_random_below: %d candidates rejected", rejected)
            return Integer._wrap(candidate)
        rejected += 1


def secure_random_float(bits: int) -> FixedFloat:
    """
    Равномерное значение в [0, 1) с точностью ровно bits бит.

    Raises:
        InvalidPrecisionError: Если bits невалидно как точность
    """
    precision = validate_precision(bits)
    working = precision + get_config().secure_float_guard_bits
    numerator = _secure_bits(precision)

    wide = TRACKER.compute(
        lambda: gmpy2.div_2exp(gmpy2.mpfr(numerator, working), precision),
        working,
        RoundingMode.TOWARD_ZERO,
    )
    value = TRACKER.compute(
        lambda: gmpy2.mpfr(wide, precision), precision, RoundingMode.TOWARD_ZERO
    )
    return FixedFloat._wrap(value, precision)
