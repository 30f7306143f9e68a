"""
ValueContainer — Разделяемый владелец NativeHandle (copy-on-write)

ValueContainer держит ровно один NativeHandle и счётчик ссылок.
Несколько value-экземпляров разделяют один контейнер до первой мутации.

NativeValue — базовый класс value-типов (Integer, Rational, FixedFloat,
RoundedFloat), реализующий протокол copy-on-write:
- copy() / copy.copy() / конструктор от того же типа → разделение контейнера
- copy.deepcopy() → немедленное клонирование
- _ensure_unique() в начале КАЖДОГО мутирующего метода
- _steal(other) → перенос контейнера свежего результата в receiver
  (бинарные мутации с возможным self-aliasing идут через immutable-форму)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. retain/release и проверка уникальности атомарны (threading.Lock)
2. NativeHandle освобождается ровно один раз: при падении счётчика до 0
3. Content-equal экземпляры никогда не наблюдают мутации друг друга
4. Сырой handle не покидает value-тип
"""

import logging
import threading
from typing import Any, Optional, TypeVar

from src.core.native.handle import NativeHandle, NativeStruct, StructKind

_logger = logging.getLogger(__name__)

V = TypeVar("V", bound="NativeValue")


# =============================================================================
# VALUE CONTAINER
# =============================================================================


class ValueContainer:
    """
    Reference-counted holder одного NativeHandle.

    Новый контейнер создаётся со счётчиком 1 (владелец — создатель).
    """

    __slots__ = ("_handle", "_ref_count", "_lock")

    def __init__(self, handle: NativeHandle):
        self._handle = handle
        self._ref_count = 1
        self._lock = threading.Lock()

    @property
    def handle(self) -> NativeHandle:
        return self._handle

    @property
    def ref_count(self) -> int:
        with self._lock:
            return self._ref_count

    def retain(self) -> "ValueContainer":
        """Новая ссылка на контейнер."""
        with self._lock:
            if self._ref_count <= 0:
                raise RuntimeError("Cannot retain a container with no live references")
            self._ref_count += 1
        return self

    def release(self) -> None:
        """
        Снятие ссылки. Последняя ссылка освобождает NativeHandle.
        """
        with self._lock:
            if self._ref_count <= 0:
                _logger.warning("container released with no live references; ignoring")
                return
            self._ref_count -= 1
            last = self._ref_count == 0

        if last:
            self._handle.release()

    def is_unique(self) -> bool:
        """True если контейнер принадлежит ровно одному экземпляру."""
        with self._lock:
            return self._ref_count == 1

    def clone(self) -> "ValueContainer":
        """Независимый контейнер с глубокой копией handle."""
        return ValueContainer(self._handle.copy())


# =============================================================================
# COPY-ON-WRITE BASE
# =============================================================================


class NativeValue:
    """
    Базовый value-тип поверх ValueContainer.

    Подклассы задают _KIND и работают со структурой только через
    _struct (чтение) и _mutable_struct() (запись после _ensure_unique).
    """

    __slots__ = ("_container", "__weakref__")

    _KIND: StructKind

    # -------------------------------------------------------------------------
    # Создание
    # -------------------------------------------------------------------------

    @classmethod
    def _allocate(cls: type[V], precision: Optional[int] = None) -> V:
        """Новый экземпляр с собственной zero-инициализированной структурой."""
        instance = object.__new__(cls)
        instance._container = ValueContainer(NativeHandle.init(cls._KIND, precision))
        return instance

    @classmethod
    def _sharing(cls: type[V], source: "NativeValue") -> V:
        """Новый экземпляр, разделяющий контейнер source."""
        instance = object.__new__(cls)
        instance._container = source._container.retain()
        return instance

    def _init_shared(self, source: "NativeValue") -> None:
        """Конструктор от экземпляра того же типа: разделение контейнера."""
        self._container = source._container.retain()

    def _init_allocated(self, precision: Optional[int] = None) -> None:
        self._container = ValueContainer(NativeHandle.init(self._KIND, precision))

    # -------------------------------------------------------------------------
    # Доступ к структуре
    # -------------------------------------------------------------------------

    @property
    def _struct(self) -> Any:
        return self._container.handle.struct

    def _mutable_struct(self) -> Any:
        """Структура, пригодная для записи (после гарантии уникальности)."""
        self._ensure_unique()
        return self._container.handle.struct

    def _ensure_unique(self) -> None:
        """
        Клонирование контейнера, если он разделён с другими экземплярами.
        """
        container = self._container
        if container.is_unique():
            return
        clone = container.clone()
        container.release()
        self._container = clone
        _logger.debug("copy-on-write clone of %s container", self._KIND.value)

    def _steal(self, other: "NativeValue") -> None:
        """
        Перенос контейнера other в self.

        other должен быть свежим результатом, которым больше никто не
        пользуется; после вызова other недействителен.
        """
        if other is self:
            return
        previous = self._container
        self._container = other._container
        other._container = None
        previous.release()

    # -------------------------------------------------------------------------
    # Копирование
    # -------------------------------------------------------------------------

    def copy(self: V) -> V:
        """Копия со значением-семантикой (разделяет хранилище до мутации)."""
        return type(self)._sharing(self)

    def __copy__(self: V) -> V:
        return self.copy()

    def __deepcopy__(self: V, memo: dict) -> V:
        instance = object.__new__(type(self))
        instance._container = self._container.clone()
        memo[id(self)] = instance
        return instance

    def shares_storage_with(self, other: "NativeValue") -> bool:
        """True если self и other разделяют один контейнер."""
        return self._container is other._container

    @property
    def is_uniquely_referenced(self) -> bool:
        return self._container.is_unique()

    # -------------------------------------------------------------------------
    # Освобождение
    # -------------------------------------------------------------------------

    def __del__(self) -> None:
        container = getattr(self, "_container", None)
        if container is not None:
            self._container = None
            container.release()

    def __reduce__(self) -> Any:
        raise TypeError(f"{type(self).__name__} instances are not picklable; use to_record()")


__all__ = ["NativeValue", "ValueContainer", "NativeStruct"]
