"""
Contract Validation Module

Валидация JSON записей числовых значений.
"""

from .validators import (
    ContractValidator,
    NumericValueValidator,
    SchemaLoader,
    validate_numeric_value,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "NumericValueValidator",
    # Functions
    "validate_numeric_value",
]
