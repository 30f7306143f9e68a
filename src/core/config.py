"""
NumericsConfig — Процессная конфигурация числовых типов

Immutable Pydantic модель с параметрами по умолчанию:
- Точность FixedFloat (аналог mpf default precision, 64 бита)
- Точность RoundedFloat (аналог mpfr default precision, 53 бита)
- Режим округления по умолчанию для RoundedFloat
- Запас бит для secure_random_float (точность промежуточного деления)

Конфигурация глобальна для процесса, как и default precision в GMP/MPFR.
Изменение создаёт новый экземпляр (frozen=True), старые значения
не мутируются.
"""

import logging
import threading
from typing import Any

import gmpy2
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.core.errors import InvalidPrecisionError
from src.rounding.modes import RoundingMode

_logger = logging.getLogger(__name__)


# =============================================================================
# ВАЛИДАЦИЯ ТОЧНОСТИ
# =============================================================================


def max_precision() -> int:
    """Максимальная точность, поддерживаемая движком (бит)."""
    return int(gmpy2.get_max_precision())


def validate_precision(precision: Any) -> int:
    """
    Валидация точности float.

    Args:
        precision: Точность в битах

    Returns:
        precision как int

    Raises:
        InvalidPrecisionError: Если precision не int, ≤ 0 или больше максимума
    """
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise InvalidPrecisionError(precision, f"Precision must be an int, got {precision!r}")
    if precision <= 0:
        raise InvalidPrecisionError(precision)
    if precision > max_precision():
        raise InvalidPrecisionError(
            precision, f"Precision {precision} exceeds engine maximum {max_precision()}"
        )
    return precision


# =============================================================================
# CONFIG MODEL
# =============================================================================


class NumericsConfig(BaseModel):
    """
    Параметры по умолчанию для числовых типов.

    Immutable модель (frozen=True).
    """

    fixed_float_precision: int = Field(64, gt=0, description="Точность FixedFloat по умолчанию (бит)")
    rounded_float_precision: int = Field(
        53, gt=0, description="Точность RoundedFloat по умолчанию (бит)"
    )
    default_rounding: RoundingMode = Field(
        RoundingMode.NEAREST, description="Режим округления RoundedFloat по умолчанию"
    )
    secure_float_guard_bits: int = Field(
        10, ge=1, le=256, description="Запас точности промежуточного деления secure_random_float"
    )

    model_config = {"frozen": True}

    @field_validator("fixed_float_precision", "rounded_float_precision")
    @classmethod
    def validate_engine_precision(cls, v: int) -> int:
        """Точность не должна превышать максимум движка."""
        if v > max_precision():
            raise ValueError(f"precision {v} exceeds engine maximum {max_precision()}")
        return v


# =============================================================================
# ГЛОБАЛЬНОЕ СОСТОЯНИЕ
# =============================================================================

_CONFIG_LOCK = threading.Lock()
_CONFIG = NumericsConfig()


def get_config() -> NumericsConfig:
    """Текущая процессная конфигурация."""
    return _CONFIG


def configure(**changes: Any) -> NumericsConfig:
    """
    Замена процессной конфигурации с валидацией.

    Args:
        **changes: Поля NumericsConfig для изменения

    Returns:
        Новая активная конфигурация

    Raises:
        InvalidPrecisionError: Если одна из точностей невалидна
        ValueError: Для остальных невалидных полей
    """
    global _CONFIG

    for key in ("fixed_float_precision", "rounded_float_precision"):
        if key in changes:
            validate_precision(changes[key])

    with _CONFIG_LOCK:
        try:
            updated = NumericsConfig(**{**_CONFIG.model_dump(), **changes})
        except ValidationError as e:
            raise ValueError(f"Invalid numerics configuration: {e}") from e
        _CONFIG = updated

    _logger.debug("numerics config updated: %s", changes)
    return updated


def reset_config() -> NumericsConfig:
    """Восстановление конфигурации по умолчанию."""
    global _CONFIG
    with _CONFIG_LOCK:
        _CONFIG = NumericsConfig()
    return _CONFIG
