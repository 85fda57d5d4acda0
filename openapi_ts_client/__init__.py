from .generator import ApiClientGenerator, swagger_to_typescript
from .internal.types.options import FormatMapping, GeneratorOptions

__all__ = [
    "ApiClientGenerator",
    "FormatMapping",
    "GeneratorOptions",
    "swagger_to_typescript",
]
