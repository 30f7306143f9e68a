"""
Numbers — Value-типы произвольной точности.

- Integer: целое (xmpz)
- Rational: рациональное в канонической форме (пара xmpz)
- FixedFloat: float с усечением к нулю (аналог mpf)
- RoundedFloat: float с явным округлением и ternary (аналог mpfr)
"""

from src.numbers.fixed_float import FixedFloat
from src.numbers.integer import Integer, coerce_integer
from src.numbers.rational import Rational
from src.numbers.rounded_float import RoundedFloat, resolve_rounding

__all__ = [
    "Integer",
    "Rational",
    "FixedFloat",
    "RoundedFloat",
    "coerce_integer",
    "resolve_rounding",
]
