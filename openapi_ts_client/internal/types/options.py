"""Настройки конвейера генерации"""

from typing import Any, Dict, Literal, Optional, Tuple

from pydantic import BaseModel

HTTP_METHODS: Tuple[str, ...] = (
    "get",
    "put",
    "post",
    "delete",
    "options",
    "head",
    "patch",
    "trace",
)


class FormatMapping(BaseModel):
    """Таблица соответствия (type, format) -> тип TypeScript"""

    boolean: Dict[str, str] = {"default": "boolean"}
    number: Dict[str, str] = {
        "default": "number",
        "float": "number",
        "double": "number",
    }
    # 64-битные целые не помещаются в number без потерь
    integer: Dict[str, str] = {
        "default": "number",
        "int32": "number",
        "int64": "string",
    }
    string: Dict[str, str] = {
        "default": "string",
        "date": "string",
        "date-time": "string",
        "password": "string",
        "binary": "File",
        "byte": "string",
    }

    def resolve(self, schema_type: Optional[str], schema_format: Optional[str] = None) -> Optional[str]:
        """Тип TypeScript для примитива, None для составных типов"""
        if schema_type not in ("boolean", "number", "integer", "string"):
            return None

        table = getattr(self, schema_type)
        if schema_format and schema_format in table:
            return table[schema_format]

        return table.get("default")

    def with_overrides(self, overrides: Optional[Dict[str, Dict[str, str]]]) -> "FormatMapping":
        """Копия таблицы с переопределенными форматами"""
        if not overrides:
            return self

        data = self.model_dump()
        for schema_type, formats in overrides.items():
            if schema_type not in data:
                raise ValueError(f"Неизвестный тип в format_mapping: {schema_type}")
            data[schema_type] = {**data[schema_type], **formats}

        return FormatMapping(**data)


class GeneratorOptions(BaseModel):
    """Параметры, передаваемые через все стадии генерации"""

    http_methods: Tuple[str, ...] = HTTP_METHODS
    format_mapping: FormatMapping = FormatMapping()
    resolve_mode: Literal["full", "lazy"] = "full"
    strict_refs: bool = False
    merge_path_parameters: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "GeneratorOptions":
        data = dict(data or {})
        overrides = data.pop("format_mapping", None)
        options = cls(**data)
        if overrides:
            options = options.model_copy(
                update={"format_mapping": options.format_mapping.with_overrides(overrides)}
            )
        return options
