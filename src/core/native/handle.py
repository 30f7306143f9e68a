"""
NativeHandle — Владение одной native-структурой

Жизненный цикл:
    init(kind, precision) / copy()  →  [структура валидна]  →  release()

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Структура никогда не наблюдается неинициализированной
2. release() освобождает структуру ровно один раз
3. copy() создаёт полностью независимую структуру (значение + точность)
4. Доступ после release() → HandleReleasedError
"""

import logging
from enum import Enum
from typing import Optional, Union

from src.core.errors import HandleReleasedError, InvalidPrecisionError
from src.core.native.structs import FloatStruct, IntegerStruct, RationalStruct

_logger = logging.getLogger(__name__)

NativeStruct = Union[IntegerStruct, RationalStruct, FloatStruct]


class StructKind(str, Enum):
    """Тип native-структуры."""

    INTEGER = "integer"
    RATIONAL = "rational"
    FLOAT = "float"


class NativeHandle:
    """
    Владелец ровно одной native-структуры.

    Создаётся через init()/copy(), освобождается через release().
    Сырая структура доступна только через property ``struct``.
    """

    __slots__ = ("_kind", "_struct")

    def __init__(self, kind: StructKind, struct: NativeStruct):
        self._kind = kind
        self._struct: Optional[NativeStruct] = struct

    # -------------------------------------------------------------------------
    # Создание
    # -------------------------------------------------------------------------

    @classmethod
    def init(cls, kind: StructKind, precision: Optional[int] = None) -> "NativeHandle":
        """
        Аллокация и zero-инициализация структуры.

        Args:
            kind: Тип структуры
            precision: Точность в битах (только для FLOAT)

        Returns:
            Новый NativeHandle

        Raises:
            InvalidPrecisionError: Если precision невалидна для FLOAT
                или передана для INTEGER/RATIONAL
        """
        if kind is StructKind.FLOAT:
            if precision is None:
                raise InvalidPrecisionError(None, "Float struct requires a precision")
            return cls(kind, FloatStruct(precision))

        if precision is not None:
            raise InvalidPrecisionError(precision, f"{kind.value} struct takes no precision")

        if kind is StructKind.INTEGER:
            return cls(kind, IntegerStruct())
        return cls(kind, RationalStruct())

    def copy(self) -> "NativeHandle":
        """Глубокая копия: новая структура, то же значение и точность."""
        return NativeHandle(self._kind, self.struct.copy())

    # -------------------------------------------------------------------------
    # Доступ
    # -------------------------------------------------------------------------

    @property
    def kind(self) -> StructKind:
        return self._kind

    @property
    def struct(self) -> NativeStruct:
        """
        Сырая структура.

        Raises:
            HandleReleasedError: Если handle уже освобождён
        """
        if self._struct is None:
            raise HandleReleasedError(f"{self._kind.value} handle used after release")
        return self._struct

    @property
    def is_released(self) -> bool:
        return self._struct is None

    # -------------------------------------------------------------------------
    # Освобождение
    # -------------------------------------------------------------------------

    def release(self) -> None:
        """
        Детерминированное освобождение структуры.

        Повторный вызов — no-op (фиксируется в debug-логе).
        """
        if self._struct is None:
            _logger.debug("%s handle released twice; ignoring", self._kind.value)
            return
        self._struct.clear()
        self._struct = None

    def __repr__(self) -> str:
        state = "released" if self._struct is None else "live"
        return f"NativeHandle(kind={self._kind.value}, {state})"
