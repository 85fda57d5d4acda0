import copy
import json
import logging
import re
from typing import Any, Dict, List, Optional

import toml

from ...exceptions import MissingOperationIdError
from ..parser.openapi import OpenApiParser
from ..types.models import CodeBlock, CodeFile, NormalizedOperation, Project
from ..types.options import FormatMapping, GeneratorOptions
from ..types.protocols import DocumentConverter, Formatter, ReferenceResolver, TypeCompiler
from ..utils import camel_case, property_key
from .formatter import BasicFormatter
from .preprocess import preprocess_operation
from .templates import templates
from .ts_compiler import JsonSchemaToTsCompiler

logger = logging.getLogger(__name__)

_EXPORT_RE = re.compile(r"(^|\s)export\s+(type|enum|interface)", re.MULTILINE)

_RESERVED_WORDS = {
    "break", "case", "catch", "class", "const", "continue", "debugger", "default",
    "delete", "do", "else", "enum", "export", "extends", "false", "finally", "for",
    "function", "if", "import", "in", "instanceof", "new", "null", "return", "super",
    "switch", "this", "throw", "true", "try", "typeof", "var", "void", "while", "with",
}


def _comment_text(value: Optional[str]) -> str:
    return (value or "").replace("*/", "*\\/").replace("\n", " ")


def _argument_name(name: str) -> str:
    arg = camel_case(name)
    if arg in _RESERVED_WORDS or not arg or arg[0].isdigit():
        return f"_{arg}"
    return arg


def render_operation(
    operation: NormalizedOperation,
    compiler: TypeCompiler = None,
    format_mapping: Optional[FormatMapping] = None,
) -> str:
    """Фабрика запроса для одной операции"""
    method, url = operation.extra.method, operation.extra.url
    if not operation.operation_id:
        raise MissingOperationIdError(method, url)

    compiler = compiler or JsonSchemaToTsCompiler()
    format_mapping = format_mapping or FormatMapping()
    request_line = operation.extra.request_line

    op = preprocess_operation(operation, format_mapping)

    omit_keys = ["method", "url"]
    if op.has_query:
        omit_keys.append("params")
    if op.data:
        omit_keys.append("data")

    config_type = " & ".join(
        filter(
            bool,
            [
                f"Omit<AxiosRequestConfig<any>, {' | '.join(json.dumps(el) for el in omit_keys)}>",
                (
                    (
                        "{ params: __BaseTypes__['Params'] }"
                        if op.has_required_query
                        else "{ params?: __BaseTypes__['Params'] }"
                    )
                    if op.has_query
                    else ""
                ),
                (
                    (
                        "{ data: __BaseTypes__['Body'] }"
                        if op.has_required_body
                        else "{ data?: __BaseTypes__['Body'] }"
                    )
                    if op.data
                    else ""
                ),
            ],
        )
    )

    path_params = [(el, _argument_name(el.name)) for el in (op.path.value if op.path else [])]

    fn_args = []
    if op.is_simple_path_params:
        for el, name in path_params:
            schema = el.schema or {}
            schema_format = schema.get("format")
            real_type = format_mapping.resolve(schema.get("type"), schema_format) or "string"
            # Пометка только там, где формат меняет тип аргумента
            changed = schema_format and real_type != (format_mapping.resolve(schema.get("type")) or "string")
            prefix = f"/** @format {schema_format} */ " if changed else ""
            fn_args.append(f"{prefix}{name}: {real_type}{'' if el.required else ' | undefined'}")
    elif op.has_path_params:
        fn_args.append('pathParams: __BaseTypes__["PathParams"]')

    if op.has_required_query or op.has_required_body:
        fn_args.append("__options: __Config")
    else:
        fn_args.append("__options?: __Config")

    if op.is_simple_path_params:
        # Ключи совпадают с плейсхолдерами URL, значения - аргументы в camelCase
        values = ", ".join(
            name if name == el.name else f"{property_key(el.name)}: {name}"
            for el, name in path_params
        )
        path_expr = f"interpolatePath(__url, {{ {values} }})"
    elif op.has_path_params:
        path_expr = "interpolatePath(__url, pathParams)"
    else:
        path_expr = "__url"

    data_expr = f"{'toFormData' if op.data and op.data.is_multipart else ''}(__options?.data)"

    request_fn = "\n".join(
        [
            f"({', '.join(fn_args)}) => ({{",
            "    ...__options,",
            f"    url: {path_expr},",
            f"    method: {json.dumps(method)},",
            f"    data: {data_expr}",
            "  })",
        ]
    )

    interface_code = _EXPORT_RE.sub(r"\1\2", compiler.compile(op.helper_schema, "__BaseTypes__"))
    interface_code = "\n".join(
        f"  {line}" if line else line for line in interface_code.rstrip("\n").split("\n")
    )

    return templates.operation.format(
        request_line=_comment_text(request_line),
        summary=_comment_text(operation.summary),
        operation_id=operation.operation_id,
        request_line_literal=json.dumps(request_line),
        method_offset=len(method) + 1,
        interface_code=interface_code,
        config_type=config_type,
        request_fn=request_fn,
    )


class ClientGenerator:
    """Генератор TypeScript клиента из OpenAPI"""

    def __init__(
        self,
        openapi_dict: Dict[str, Any],
        source_url: str = None,
        options: GeneratorOptions = None,
        resolver: ReferenceResolver = None,
        converter: DocumentConverter = None,
        compiler: TypeCompiler = None,
        formatter: Formatter = None,
        file_name: str = "api.ts",
        config: Dict[str, Any] = None,
    ):
        # Нормализация меняет документ на месте
        self.openapi_dict = copy.deepcopy(openapi_dict)
        self.source_url = source_url
        self.options = options or GeneratorOptions()
        self.parser = OpenApiParser(self.options, resolver=resolver, converter=converter)
        self.compiler = compiler or JsonSchemaToTsCompiler()
        self.formatter = formatter or BasicFormatter()
        self.file_name = file_name
        self.config = config
        self.project = Project(name="api")

    def generate(self) -> Project:
        """Основная генерация"""
        self.project = Project(name="api")
        self.parser.init(self.openapi_dict)
        operations = self.parser.get_processed_operation_objects()

        module = self._create_module(operations)
        self.project.add_file(self.file_name).add_code_block(
            CodeBlock(code=self.formatter.format(str(module)))
        )

        # Конфиг файл рядом с клиентом, по нему пакет потом перегенерируется
        if self.source_url:
            config_data = {"url": self.source_url, **(self.config or {})}
            self.project.add_file("openapi.toml").add_code_block(
                CodeBlock(code="# Configuration for API client\n" + toml.dumps(config_data))
            )

        return self.project

    def generate_code(self) -> str:
        project = self.generate()
        return str(project.get_file(self.file_name))

    def _create_module(self, operations: List[NormalizedOperation]) -> CodeFile:
        """Сборка модуля: хелперы, операции, общие типы"""
        module = CodeFile(file_name=self.file_name, imports=list(templates.imports))
        module.add_code_block(CodeBlock(code=templates.helpers, order=2))

        tasks = list(operations)
        while tasks:
            operation = tasks.pop()
            logger.debug("Генерация %s", operation.extra.request_line)
            module.add_code_block(
                CodeBlock(
                    code=render_operation(operation, self.compiler, self.options.format_mapping),
                    order=1,
                )
            )

        module.add_code_block(CodeBlock(code=templates.epilogue(operations), order=0))
        return module
