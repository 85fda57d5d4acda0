"""Утилиты для генератора"""

from .naming import (
    camel_case,
    is_identifier,
    property_key,
    to_safe_string,
    upper_first,
)

__all__ = [
    "camel_case",
    "is_identifier",
    "property_key",
    "to_safe_string",
    "upper_first",
]
