"""
Radix — Кодирование и разбор чисел в системах счисления 2..62

Движок возвращает для float голую строку цифр и отдельную экспоненту
(значение = 0.d1d2d3... × base^exponent). Размещение точки выполняет
чистая функция place_radix_point, не зависящая от движка.

Основания:
- Вывод: [2, 62] или [-36, -2] (отрицательное основание → верхний регистр)
- Ввод: 0 (автоопределение по префиксу 0x / 0b / 0o / 0) или [2, 62]

Алфавит цифр (как в GMP):
- base ≤ 36: 0-9, a-z (регистр при вводе не важен)
- base > 36: 0-9, A-Z, a-z (регистр значим)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ошибка разбора → None, никогда исключение
2. Невалидное основание → InvalidRadixError до любой работы
3. Дробные хвостовые нули отбрасываются; строка из одних нулей → "0"
"""

import string
from typing import Final, NamedTuple, Optional

import gmpy2

from src.core.errors import InvalidDigitsError, InvalidRadixError

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

MIN_BASE: Final[int] = 2
MAX_BASE: Final[int] = 62
MAX_UPPERCASE_BASE: Final[int] = 36

_LOWER_ALPHABET: Final[str] = string.digits + string.ascii_lowercase
_WIDE_ALPHABET: Final[str] = string.digits + string.ascii_uppercase + string.ascii_lowercase

_PREFIX_BASES: Final[dict[str, int]] = {"0x": 16, "0b": 2, "0o": 8}


class ParsedRational(NamedTuple):
    """Сырая пара числитель/знаменатель до канонизации."""

    numerator: gmpy2.mpz
    denominator: gmpy2.mpz


# =============================================================================
# ВАЛИДАЦИЯ ОСНОВАНИЙ
# =============================================================================


def validate_output_base(base: int) -> int:
    """
    Валидация основания для вывода.

    Raises:
        InvalidRadixError: Если base вне [2, 62] ∪ [-36, -2]
    """
    if isinstance(base, bool) or not isinstance(base, int):
        raise InvalidRadixError(base)
    if MIN_BASE <= base <= MAX_BASE or -MAX_UPPERCASE_BASE <= base <= -MIN_BASE:
        return base
    raise InvalidRadixError(base, f"Invalid output radix: {base} (expected 2..62 or -36..-2)")


def validate_input_base(base: int) -> int:
    """
    Валидация основания для разбора.

    Raises:
        InvalidRadixError: Если base не 0 и вне [2, 62]
    """
    if isinstance(base, bool) or not isinstance(base, int):
        raise InvalidRadixError(base)
    if base == 0 or MIN_BASE <= base <= MAX_BASE:
        return base
    raise InvalidRadixError(base, f"Invalid input radix: {base} (expected 0 or 2..62)")


def validate_digits(digits: int) -> int:
    """
    Raises:
        InvalidDigitsError: Если digits < 0
    """
    if isinstance(digits, bool) or not isinstance(digits, int) or digits < 0:
        raise InvalidDigitsError(digits)
    return digits


# =============================================================================
# РАЗМЕЩЕНИЕ ТОЧКИ
# =============================================================================


def place_radix_point(digits: str, exponent: int, negative: bool = False) -> str:
    """
    Сборка строки с точкой из строки цифр и экспоненты.

    Значение строки: 0.<digits> × base^exponent, т.е. exponent — число
    цифр перед точкой.

    Args:
        digits: Строка цифр без знака и точки
        exponent: Позиция точки относительно начала digits
        negative: Добавить ли знак "-"

    Returns:
        Строка в радикс-форме без хвостовых дробных нулей

    Examples:
        >>> place_radix_point("15", 1)
        '1.5'
        >>> place_radix_point("12", 4)
        '1200'
        >>> place_radix_point("5", -2)
        '0.005'
        >>> place_radix_point("25", 0, negative=True)
        '-0.25'
        >>> place_radix_point("000", 3)
        '0'
    """
    if not digits or digits.strip("0") == "":
        return "0"

    if exponent <= 0:
        integer_part = "0"
        fraction_part = "0" * (-exponent) + digits
    elif exponent >= len(digits):
        integer_part = digits + "0" * (exponent - len(digits))
        fraction_part = ""
    else:
        integer_part = digits[:exponent]
        fraction_part = digits[exponent:]

    fraction_part = fraction_part.rstrip("0")
    text = integer_part if not fraction_part else f"{integer_part}.{fraction_part}"
    return f"-{text}" if negative else text


# =============================================================================
# ЦЕЛЫЕ
# =============================================================================


def _alphabet(base: int) -> str:
    return _LOWER_ALPHABET[:base] if base <= MAX_UPPERCASE_BASE else _WIDE_ALPHABET[:base]


def _strip_engine_prefix(text: str) -> str:
    for prefix in _PREFIX_BASES:
        if text.startswith(prefix):
            return text[len(prefix):]
    return text


def format_integer(value: gmpy2.mpz, base: int = 10) -> str:
    """
    Целое → строка: необязательный "-", затем цифры в основании base.

    Raises:
        InvalidRadixError: Если base невалидно для вывода
    """
    validate_output_base(base)
    magnitude = abs(gmpy2.mpz(value))
    digits = _strip_engine_prefix(magnitude.digits(abs(base)))
    if base < 0:
        digits = digits.upper()
    return f"-{digits}" if value < 0 else digits


def _detect_base(body: str) -> tuple[str, int]:
    lowered = body[:2].lower()
    if lowered in _PREFIX_BASES:
        return body[2:], _PREFIX_BASES[lowered]
    if len(body) > 1 and body.startswith("0"):
        return body[1:], 8
    return body, 10


def _is_valid_digits(body: str, base: int) -> bool:
    if not body:
        return False
    alphabet = _alphabet(base)
    if base <= MAX_UPPERCASE_BASE:
        body = body.lower()
    return all(ch in alphabet for ch in body)


def parse_integer(text: str, base: int = 10) -> Optional[gmpy2.mpz]:
    """
    Разбор целого: необязательный знак, затем цифры.

    Args:
        text: Входная строка (окружающие пробелы игнорируются)
        base: 0 (автоопределение) или 2..62

    Returns:
        mpz или None при ошибке разбора

    Raises:
        InvalidRadixError: Если base невалидно для ввода
    """
    validate_input_base(base)
    if not isinstance(text, str):
        return None

    body = text.strip()
    negative = False
    if body[:1] in ("-", "+"):
        negative = body[0] == "-"
        body = body[1:]

    if base == 0:
        body, base = _detect_base(body)

    if not _is_valid_digits(body, base):
        return None

    try:
        magnitude = gmpy2.mpz(body, base)
    except ValueError:
        return None
    return -magnitude if negative else magnitude


# =============================================================================
# РАЦИОНАЛЬНЫЕ
# =============================================================================


def format_rational(numerator: gmpy2.mpz, denominator: gmpy2.mpz, base: int = 10) -> str:
    """
    Рациональное → "num/den" или "num" при den = 1.

    Пара должна быть канонической.
    """
    text = format_integer(numerator, base)
    if denominator == 1:
        return text
    return f"{text}/{format_integer(denominator, base)}"


def parse_rational(text: str, base: int = 10) -> Optional[ParsedRational]:
    """
    Разбор "num/den" или "num" в сырую пару.

    Returns:
        ParsedRational (не канонизированная) или None, если строка не
        разбирается или знаменатель равен нулю

    Raises:
        InvalidRadixError: Если base невалидно для ввода
    """
    validate_input_base(base)
    if not isinstance(text, str):
        return None

    parts = text.strip().split("/")
    if len(parts) > 2:
        return None

    numerator = parse_integer(parts[0], base)
    if numerator is None:
        return None

    if len(parts) == 1:
        return ParsedRational(numerator, gmpy2.mpz(1))

    if parts[1].strip()[:1] in ("-", "+"):
        return None
    denominator = parse_integer(parts[1], base)
    if denominator is None or denominator == 0:
        return None
    return ParsedRational(numerator, denominator)


# =============================================================================
# FLOAT
# =============================================================================


def format_float(value: gmpy2.mpfr, base: int = 10, digits: int = 0) -> str:
    """
    Float → радикс-форма.

    Args:
        value: Значение движка
        base: Основание вывода
        digits: Число значащих цифр (0 → все значащие)

    Returns:
        Строка; NaN/Inf → "nan", "inf", "-inf"

    Raises:
        InvalidRadixError: Если base невалидно для вывода
        InvalidDigitsError: Если digits < 0
    """
    validate_output_base(base)
    validate_digits(digits)

    if gmpy2.is_nan(value):
        return "nan"
    if gmpy2.is_infinite(value):
        return "-inf" if value < 0 else "inf"
    if gmpy2.is_zero(value):
        return "0"

    mantissa, exponent, _ = value.digits(abs(base), digits)
    negative = mantissa.startswith("-")
    mantissa = mantissa.lstrip("-")
    if base < 0:
        mantissa = mantissa.upper()
    return place_radix_point(mantissa, int(exponent), negative)


def parse_float(text: str, base: int, precision: int) -> Optional[gmpy2.mpfr]:
    """
    Разбор float в активном контексте gmpy2 (округление берётся из него).

    Returns:
        mpfr точности precision или None при ошибке разбора

    Raises:
        InvalidRadixError: Если base невалидно для ввода
    """
    validate_input_base(base)
    if not isinstance(text, str):
        return None

    body = text.strip()
    if not body:
        return None

    try:
        return gmpy2.mpfr(body, precision, base)
    except ValueError:
        return None
