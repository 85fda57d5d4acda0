from .client_generator import ClientGenerator, render_operation
from .formatter import BasicFormatter, PrettierFormatter
from .preprocess import preprocess_operation, process_schema_object
from .ts_compiler import JsonSchemaToTsCompiler

__all__ = [
    "ClientGenerator",
    "render_operation",
    "BasicFormatter",
    "PrettierFormatter",
    "preprocess_operation",
    "process_schema_object",
    "JsonSchemaToTsCompiler",
]
