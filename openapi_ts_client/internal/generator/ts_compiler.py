"""Компиляция JSON Schema в объявления TypeScript"""

import json
import logging
from typing import Any, Dict, List, Optional, Set

from ...exceptions import SchemaCompileError
from ..types.models import SchemaKind
from ..utils import property_key, to_safe_string
from .formatter import BasicFormatter

logger = logging.getLogger(__name__)

_PRIMITIVES = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "null": "null",
}


class JsonSchemaToTsCompiler:
    """
    Компилятор схем в интерфейсы и алиасы TypeScript.

    Корневая схема и все вложенные схемы с title объявляются отдельно
    (`export interface` для объектов, `export type` для остального),
    схемы без title встраиваются на месте. `tsType` подставляется как есть.
    Без явного additionalProperties индексная сигнатура не добавляется,
    пока не включен additional_properties.
    """

    def __init__(
        self,
        additional_properties: bool = False,
        declare_externally_referenced: bool = True,
        indent: str = "  ",
        format: bool = False,
    ):
        self.additional_properties = additional_properties
        self.declare_externally_referenced = declare_externally_referenced
        self.indent = indent
        self.format = format

    def compile(self, schema: Dict[str, Any], name: str) -> str:
        if not isinstance(schema, dict):
            raise SchemaCompileError(
                f"Схема {name} должна быть объектом, получено {type(schema).__name__}"
            )

        self._declarations: List[Optional[str]] = []
        self._declared: Dict[int, str] = {}
        self._used_names: Set[str] = set()
        self._stack: Set[int] = set()

        self._declare(schema, to_safe_string(name))
        code = "\n\n".join(filter(None, self._declarations)) + "\n"
        return BasicFormatter().format(code) if self.format else code

    def _reserve_name(self, name: str) -> str:
        candidate, index = name, 1
        while candidate in self._used_names:
            candidate = f"{name}{index}"
            index += 1

        self._used_names.add(candidate)
        return candidate

    def _declare(self, schema: Dict[str, Any], name: str) -> str:
        name = self._reserve_name(name)
        self._declared[id(schema)] = name

        slot = len(self._declarations)
        self._declarations.append(None)

        self._stack.add(id(schema))
        if self._is_interface(schema):
            code = f"export interface {name} {self._object_type(schema, 0)}"
        else:
            code = f"export type {name} = {self._inline_type(schema, 0)};"
        self._stack.discard(id(schema))

        self._declarations[slot] = self._jsdoc(schema, 0) + code
        return name

    @staticmethod
    def _is_interface(schema: Dict[str, Any]) -> bool:
        return (
            SchemaKind.of(schema) == SchemaKind.OBJECT
            and "tsType" not in schema
            and not any(key in schema for key in ("oneOf", "anyOf", "allOf", "enum", "const"))
            and not schema.get("nullable")
        )

    def _type(self, schema: Any, level: int) -> str:
        if schema is None:
            return "any"
        if schema is True:
            return "unknown"
        if schema is False:
            return "never"
        if not isinstance(schema, dict):
            raise SchemaCompileError(f"Некорректная схема: {schema!r}")

        if id(schema) in self._declared:
            return self._declared[id(schema)]
        if id(schema) in self._stack:
            return "any"

        if self.declare_externally_referenced and schema.get("title"):
            return self._declare(schema, to_safe_string(str(schema["title"])))

        self._stack.add(id(schema))
        try:
            return self._inline_type(schema, level)
        finally:
            self._stack.discard(id(schema))

    def _inline_type(self, schema: Dict[str, Any], level: int) -> str:
        ts_type = self._base_type(schema, level)
        if schema.get("nullable") and ts_type not in ("any", "unknown", "null"):
            return f"{ts_type} | null"
        return ts_type

    def _base_type(self, schema: Dict[str, Any], level: int) -> str:
        if "tsType" in schema:
            return str(schema["tsType"])

        if "const" in schema:
            return self._literal(schema["const"])

        if isinstance(schema.get("enum"), list):
            return self._union([self._literal(value) for value in schema["enum"]])

        for key in ("oneOf", "anyOf"):
            if isinstance(schema.get(key), list):
                return self._union([self._type(member, level) for member in schema[key]])

        if isinstance(schema.get("allOf"), list):
            members = [self._wrap(self._type(member, level)) for member in schema["allOf"]]
            return " & ".join(members) if members else "unknown"

        if isinstance(schema.get("type"), list):
            return self._union(
                [self._base_type({**schema, "type": value}, level) for value in schema["type"]]
            )

        kind = SchemaKind.of(schema)
        if kind == SchemaKind.REFERENCE:
            logger.debug("Неразрешенная ссылка %s типизирована как unknown", schema["$ref"])
            return "unknown"

        if kind == SchemaKind.ARRAY:
            return self._array_type(schema, level)

        if kind == SchemaKind.OBJECT:
            return self._object_type(schema, level)

        schema_type = schema.get("type")
        if schema_type in _PRIMITIVES:
            return _PRIMITIVES[schema_type]

        if "additionalProperties" in schema:
            return self._object_type(schema, level)

        return "unknown"

    def _array_type(self, schema: Dict[str, Any], level: int) -> str:
        items = schema.get("items")
        if isinstance(items, list):
            return "[" + ", ".join(self._type(item, level) for item in items) + "]"
        if items is None:
            return "unknown[]"

        return f"{self._wrap(self._type(items, level))}[]"

    def _object_type(self, schema: Dict[str, Any], level: int) -> str:
        properties = schema.get("properties") or {}
        required = schema.get("required")
        required = set(required) if isinstance(required, list) else set()
        prefix = self.indent * (level + 1)

        lines = []
        for key, prop in properties.items():
            prop_type = self._type(prop, level + 1)
            declared = isinstance(prop, dict) and id(prop) in self._declared
            comment = "" if declared else self._jsdoc(prop, level + 1)
            optional = "" if key in required else "?"
            lines.append(f"{comment}{prefix}{property_key(key)}{optional}: {prop_type};")

        additional = schema.get("additionalProperties", self.additional_properties or None)
        if additional is True:
            lines.append(f"{prefix}[k: string]: unknown;")
        elif isinstance(additional, dict):
            lines.append(f"{prefix}[k: string]: {self._type(additional, level + 1)};")

        if not lines:
            return "{}"

        return "{\n" + "\n".join(lines) + "\n" + self.indent * level + "}"

    def _jsdoc(self, schema: Any, level: int) -> str:
        if not isinstance(schema, dict):
            return ""

        lines = []
        description = schema.get("description")
        if description:
            lines.extend(str(description).replace("*/", "*\\/").splitlines())
        if schema.get("deprecated"):
            lines.append("@deprecated")
        if not lines:
            return ""

        prefix = self.indent * level
        body = "\n".join(f"{prefix} * {line}".rstrip() for line in lines)
        return f"{prefix}/**\n{body}\n{prefix} */\n"

    @staticmethod
    def _literal(value: Any) -> str:
        return json.dumps(value, ensure_ascii=False)

    @staticmethod
    def _union(members: List[str]) -> str:
        ordered = []
        for member in members:
            if member not in ordered:
                ordered.append(member)
        if not ordered:
            return "never"
        return " | ".join(ordered)

    @staticmethod
    def _wrap(ts_type: str) -> str:
        if " | " in ts_type or " & " in ts_type:
            return f"({ts_type})"
        return ts_type
