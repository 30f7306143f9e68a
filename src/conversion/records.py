"""
Records — JSON-записи числовых значений

Формат (контракт numeric_value.json):
    {"kind": "integer" | "rational" | "fixed_float" | "rounded_float",
     "base": 2..62,
     "text": радикс-форма значения,
     "precision": int для float-типов, иначе null}

- to_record: значение → запись (валидируется перед возвратом)
- from_record: валидация → разбор; None, если text не разбирается

Нарушение схемы → jsonschema.ValidationError.
"""

from typing import Any, Dict, Final, Optional

from src.conversion import radix
from src.core.contracts import validate_numeric_value
from src.core.errors import InvalidRadixError
from src.numbers.fixed_float import FixedFloat
from src.numbers.integer import Integer
from src.numbers.rational import Rational
from src.numbers.rounded_float import RoundedFloat

KIND_TYPES: Final[Dict[str, type]] = {
    "integer": Integer,
    "rational": Rational,
    "fixed_float": FixedFloat,
    "rounded_float": RoundedFloat,
}

_TYPE_KINDS: Final[Dict[type, str]] = {cls: kind for kind, cls in KIND_TYPES.items()}


def _kind_of(value: Any) -> str:
    for cls, kind in _TYPE_KINDS.items():
        if isinstance(value, cls):
            return kind
    raise TypeError(f"No record kind for {type(value).__name__}")


def to_record(value: Any, base: int = 10) -> Dict[str, Any]:
    """
    Запись значения.

    Args:
        value: Integer, Rational, FixedFloat или RoundedFloat
        base: Основание 2..62

    Returns:
        Валидная запись numeric_value

    Raises:
        InvalidRadixError: Если base вне [2, 62]
        TypeError: Для прочих типов
    """
    if not radix.MIN_BASE <= base <= radix.MAX_BASE:
        raise InvalidRadixError(base)

    kind = _kind_of(value)
    record = {
        "kind": kind,
        "base": base,
        "text": value.to_string(base),
        "precision": value.precision if kind.endswith("_float") else None,
    }
    validate_numeric_value(record)
    return record


def from_record(record: Dict[str, Any]) -> Optional[Any]:
    """
    Значение из записи.

    Returns:
        Значение или None, если text не разбирается в base

    Raises:
        jsonschema.ValidationError: Если запись не соответствует схеме
    """
    validate_numeric_value(record)

    cls = KIND_TYPES[record["kind"]]
    if record["precision"] is None:
        return cls.from_string(record["text"], record["base"])
    return cls.from_string(record["text"], record["base"], record["precision"])
