"""
Errors — Таксономия ошибок числовых типов

Иерархия исключений для всех value-типов (Integer, Rational, FixedFloat,
RoundedFloat) и их инфраструктуры (NativeHandle, конвертеры, генераторы).

Категории:
- Ошибки валидации: отклоняются ДО выполнения операции
  (precision, radix, exponent, digits, random state)
- Ошибки арифметической области: деление на ноль для точных типов,
  корень из отрицательного числа
- Исключительные результаты float: только для операций со строгой проверкой
  флагов (FloatingPointFlagsError)
- Ошибки конверсии в native int
- Ошибки жизненного цикла native-структуры

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ошибка сообщается в точке обнаружения
2. При ошибке receiver остаётся без изменений (нет частичных мутаций)
3. Ошибки парсинга — не исключения, а отсутствующий результат (None)
"""

from typing import Any


# =============================================================================
# BASE
# =============================================================================


class NumericError(Exception):
    """Базовое исключение для всех ошибок числовых типов."""

    pass


# =============================================================================
# ОШИБКИ ВАЛИДАЦИИ
# =============================================================================


class NumericValidationError(NumericError, ValueError):
    """Невалидный входной параметр, отклонён до выполнения операции."""

    pass


class InvalidPrecisionError(NumericValidationError):
    """
    Невалидная точность float (≤ 0 или больше максимума движка).

    Attributes:
        precision: Отклонённое значение точности (в битах)
    """

    def __init__(self, precision: Any, message: str | None = None):
        self.precision = precision
        super().__init__(message or f"Invalid precision: {precision!r} (must be positive)")


class InvalidRadixError(NumericValidationError):
    """
    Невалидное основание системы счисления.

    Attributes:
        radix: Отклонённое основание
    """

    def __init__(self, radix: Any, message: str | None = None):
        self.radix = radix
        super().__init__(message or f"Invalid radix: {radix!r}")


class InvalidExponentError(NumericValidationError):
    """
    Невалидная экспонента (например, отрицательная там, где нужна ≥ 0).

    Attributes:
        exponent: Отклонённая экспонента
    """

    def __init__(self, exponent: Any, message: str | None = None):
        self.exponent = exponent
        super().__init__(message or f"Invalid exponent: {exponent!r} (must be non-negative)")


class InvalidDigitsError(NumericValidationError):
    """Невалидное количество значащих цифр для to_string (digits < 0)."""

    def __init__(self, digits: Any):
        self.digits = digits
        super().__init__(f"Invalid digits count: {digits!r} (must be non-negative)")


class InvalidRandomStateError(NumericValidationError):
    """Невалидные параметры генератора или недоступен источник энтропии."""

    pass


# =============================================================================
# ОШИБКИ АРИФМЕТИЧЕСКОЙ ОБЛАСТИ
# =============================================================================


class ArithmeticDomainError(NumericError, ArithmeticError):
    """Аргумент вне области определения операции точного типа."""

    pass


class DivisionByZeroError(ArithmeticDomainError, ZeroDivisionError):
    """
    Деление на ноль для Integer/Rational.

    Для float-типов деление на ноль НЕ является ошибкой вызова:
    результат ±Inf/NaN и sticky-флаг DIVIDE_BY_ZERO/NAN.
    """

    def __init__(self, message: str = "Division by zero"):
        super().__init__(message)


class NegativeSquareRootError(ArithmeticDomainError):
    """Квадратный корень из отрицательного значения."""

    def __init__(self, message: str = "Square root of a negative value"):
        super().__init__(message)


# =============================================================================
# ИСКЛЮЧИТЕЛЬНЫЕ РЕЗУЛЬТАТЫ FLOAT
# =============================================================================


class FloatingPointFlagsError(NumericError, ArithmeticError):
    """
    Комбинированная ошибка sticky-флагов.

    Поднимается только операциями со строгой проверкой флагов
    (exp, log*, гиперболическое семейство). Несёт ВСЕ флаги, которые
    сработали в окне наблюдения операции.

    Attributes:
        flags: ExceptionFlags (битовая маска сработавших флагов)
        operation: Имя операции
    """

    def __init__(self, flags: Any, operation: str = ""):
        self.flags = flags
        self.operation = operation
        where = f" in {operation}" if operation else ""
        super().__init__(f"Floating-point exception flags raised{where}: {flags!r}")


# =============================================================================
# КОНВЕРСИЯ И ЖИЗНЕННЫЙ ЦИКЛ
# =============================================================================


class NativeIntOverflowError(NumericError, OverflowError):
    """Значение не помещается в запрошенный native integer тип."""

    pass


class HandleReleasedError(NumericError, RuntimeError):
    """Обращение к native-структуре после её освобождения."""

    pass
