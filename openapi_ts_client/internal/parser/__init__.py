from .normalizer import fix_missing_ref, resolve_circular
from .openapi import OpenApiParser
from .resolver import JsonRefResolver
from .swagger2 import Swagger2Converter

__all__ = [
    "OpenApiParser",
    "JsonRefResolver",
    "Swagger2Converter",
    "fix_missing_ref",
    "resolve_circular",
]
