"""
Integer Bitwise — Побитовые операции в дополнительном коде

Отрицательные числа трактуются как бесконечный дополнительный код
(как в GMP и в Python int).

- and / or / xor / not, immutable и in place
- сдвиги: left_shifted (×2**n), right_shifted (усечение к нулю)
- test / set / clear / complement бита по индексу
- population_count, hamming_distance, scan0 / scan1

Отрицательный индекс бита или счётчик сдвига → InvalidExponentError.
"""

from typing import Any, Optional

import gmpy2

from src.core.errors import InvalidExponentError
from src.numbers.operands import integer_operand, require_integer_operand


def _index(value: int, name: str = "index") -> int:
    index = int(value)
    if index < 0:
        raise InvalidExponentError(index, f"{name} must be non-negative, got {index}")
    return index


class IntegerBitwiseMixin:
    """Побитовые операции Integer. Требует _value, _wrap и _mutable_struct."""

    __slots__ = ()

    # -------------------------------------------------------------------------
    # Логические операции
    # -------------------------------------------------------------------------

    def bitwise_and(self, other: Any) -> Any:
        return self._wrap(self._value & require_integer_operand(other))

    def bitwise_or(self, other: Any) -> Any:
        return self._wrap(self._value | require_integer_operand(other))

    def bitwise_xor(self, other: Any) -> Any:
        return self._wrap(self._value ^ require_integer_operand(other))

    def bitwise_not(self) -> Any:
        """Дополнение: -value - 1."""
        return self._wrap(~self._value)

    def and_in_place(self, other: Any) -> None:
        self._steal(self.bitwise_and(other))

    def or_in_place(self, other: Any) -> None:
        self._steal(self.bitwise_or(other))

    def xor_in_place(self, other: Any) -> None:
        self._steal(self.bitwise_xor(other))

    def not_in_place(self) -> None:
        struct = self._mutable_struct()
        struct.value = gmpy2.xmpz(~gmpy2.mpz(struct.value))

    def __and__(self, other: Any) -> Any:
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value & operand)

    __rand__ = __and__

    def __or__(self, other: Any) -> Any:
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value | operand)

    __ror__ = __or__

    def __xor__(self, other: Any) -> Any:
        operand = integer_operand(other)
        if operand is None:
            return NotImplemented
        return self._wrap(self._value ^ operand)

    __rxor__ = __xor__

    def __invert__(self) -> Any:
        return self.bitwise_not()

    # -------------------------------------------------------------------------
    # Сдвиги
    # -------------------------------------------------------------------------

    def left_shifted(self, count: int) -> Any:
        return self._wrap(self._value << _index(count, "count"))

    def right_shifted(self, count: int) -> Any:
        """Сдвиг вправо с усечением к нулю (-5 >> 1 == -2)."""
        return self._wrap(gmpy2.t_div_2exp(self._value, _index(count, "count")))

    def left_shift_in_place(self, count: int) -> None:
        shift = _index(count, "count")
        struct = self._mutable_struct()
        struct.value = gmpy2.xmpz(gmpy2.mpz(struct.value) << shift)

    def right_shift_in_place(self, count: int) -> None:
        shift = _index(count, "count")
        struct = self._mutable_struct()
        struct.value = gmpy2.xmpz(gmpy2.t_div_2exp(gmpy2.mpz(struct.value), shift))

    def __lshift__(self, count: Any) -> Any:
        if integer_operand(count) is None:
            return NotImplemented
        return self.left_shifted(int(count))

    def __rshift__(self, count: Any) -> Any:
        if integer_operand(count) is None:
            return NotImplemented
        return self.right_shifted(int(count))

    # -------------------------------------------------------------------------
    # Отдельные биты
    # -------------------------------------------------------------------------

    def test_bit(self, index: int) -> bool:
        return bool(gmpy2.bit_test(self._value, _index(index)))

    def set_bit(self, index: int) -> None:
        position = _index(index)
        self._mutable_struct().value[position] = 1

    def clear_bit(self, index: int) -> None:
        position = _index(index)
        self._mutable_struct().value[position] = 0

    def complement_bit(self, index: int) -> None:
        position = _index(index)
        bits = self._mutable_struct().value
        bits[position] = 0 if bits[position] else 1

    # -------------------------------------------------------------------------
    # Подсчёт и поиск
    # -------------------------------------------------------------------------

    @property
    def population_count(self) -> Optional[int]:
        """Число единичных бит; None для отрицательных (бесконечно)."""
        value = self._value
        if value < 0:
            return None
        return int(gmpy2.popcount(value))

    def hamming_distance(self, other: Any) -> Optional[int]:
        """
        Число различающихся бит; None если знаки различны (бесконечно).
        """
        value = self._value
        operand = require_integer_operand(other)
        if (value < 0) != (operand < 0):
            return None
        return int(gmpy2.popcount(value ^ operand))

    def scan0(self, start: int = 0) -> Optional[int]:
        """Индекс первого нулевого бита с позиции start; None если таких нет."""
        found = gmpy2.bit_scan0(self._value, _index(start, "start"))
        return None if found is None else int(found)

    def scan1(self, start: int = 0) -> Optional[int]:
        """Индекс первого единичного бита с позиции start; None если таких нет."""
        found = gmpy2.bit_scan1(self._value, _index(start, "start"))
        return None if found is None else int(found)

    @property
    def first_set_bit(self) -> Optional[int]:
        return self.scan1(0)

    @property
    def last_set_bit(self) -> Optional[int]:
        """Индекс старшего единичного бита модуля; None для нуля."""
        value = self._value
        if value == 0:
            return None
        return int(abs(value).bit_length()) - 1
