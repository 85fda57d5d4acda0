"""Предобработка операции перед генерацией кода"""

from typing import Any, Dict, List, Optional

from ..types.models import (
    BodyShape,
    NormalizedOperation,
    OperationShape,
    ParameterObject,
    PathParamsShape,
    QueryShape,
    SchemaKind,
)
from ..types.options import FormatMapping
from ..utils import upper_first

HELPER_MEMBERS = ["Body", "Response", "Params", "PathParams"]

# Больше двух path параметров - один объект pathParams вместо аргументов
MAX_SIMPLE_PATH_PARAMS = 2


def preprocess_operation(
    operation: NormalizedOperation, format_mapping: Optional[FormatMapping] = None
) -> OperationShape:
    """Группы параметров, тело запроса и вспомогательная схема операции"""
    format_mapping = format_mapping or FormatMapping()

    request_body = operation.request_body
    response_data = operation.response_data
    path_params = operation.parameters.path_params
    query_params = operation.parameters.query_params

    has_path_params = len(path_params) > 0
    has_query = len(query_params) > 0
    has_request_body = bool(request_body and request_body.schema)
    has_required_query = has_query and any(el.required for el in query_params)

    body_required = (request_body.schema or {}).get("required") if request_body else None
    has_required_body = isinstance(body_required, list) and len(body_required) > 0

    is_simple_path_params = (
        0 < len(path_params) <= MAX_SIMPLE_PATH_PARAMS
        and all(el.required for el in path_params)
    )

    helper_schema = {
        "type": "object",
        "summary": operation.summary,
        "deprecated": operation.deprecated,
        "description": operation.description or operation.summary,
        "required": list(HELPER_MEMBERS),
        "properties": {
            "Body": (
                process_schema_object(request_body.schema, "Body", format_mapping)
                if has_request_body
                else None
            ),
            "Response": (
                process_schema_object(response_data.schema, "Response", format_mapping)
                if response_data and response_data.schema
                else None
            ),
            "Params": (
                _parameters_schema(query_params, "Params", format_mapping) if has_query else None
            ),
            "PathParams": (
                _parameters_schema(path_params, "PathParams", format_mapping)
                if has_path_params
                else None
            ),
        },
    }

    return OperationShape(
        path=(
            PathParamsShape(value=path_params, is_simple=is_simple_path_params)
            if has_path_params
            else None
        ),
        query=QueryShape(value=query_params, required=has_required_query) if has_query else None,
        data=(
            BodyShape(
                value=request_body,
                is_multipart=operation.is_multipart,
                required=has_required_body,
            )
            if request_body
            else None
        ),
        helper_schema=helper_schema,
    )


def _parameters_schema(
    params: List[ParameterObject], interface_name: str, format_mapping: FormatMapping
) -> Dict[str, Any]:
    properties = {}
    for el in params:
        schema = dict(el.schema or {})
        if el.description and not schema.get("description"):
            schema["description"] = el.description
        properties[el.name] = process_schema_object(
            schema, f"{interface_name}_{upper_first(el.name)}", format_mapping
        )

    result = {"type": "object", "properties": properties}
    required = [el.name for el in params if el.required]
    if required:
        result["required"] = required
    return result


def process_schema_object(
    schema: Any, interface_name: str, format_mapping: Optional[FormatMapping] = None
) -> Any:
    """
    Копия схемы с уникальными именами вложенных типов.

    Вложенные схемы с title получают имя от родителя: элементы массива
    `<Parent>Item$`, свойства объекта `<Parent>_<Key>`. Примитивы получают
    tsType по таблице форматов, int64 по умолчанию становится строкой.
    """
    if not schema:
        return None

    format_mapping = format_mapping or FormatMapping()
    kind = SchemaKind.of(schema)

    if kind == SchemaKind.OPAQUE and not isinstance(schema, dict):
        return schema

    result = dict(schema)
    _set_title(result, interface_name)

    if kind == SchemaKind.ARRAY:
        items = schema.get("items")
        if items:
            result["items"] = process_schema_object(items, f"{interface_name}Item$", format_mapping)
        return result

    if kind == SchemaKind.OBJECT:
        properties = schema.get("properties")
        if isinstance(properties, dict):
            result["properties"] = {
                key: process_schema_object(value, f"{interface_name}_{upper_first(key)}", format_mapping)
                for key, value in properties.items()
            }
        return result

    if kind == SchemaKind.OPAQUE:
        for key in ("oneOf", "anyOf", "allOf"):
            if isinstance(schema.get(key), list):
                result[key] = [
                    process_schema_object(member, f"{interface_name}{index}", format_mapping)
                    for index, member in enumerate(schema[key])
                ]

    schema_type = schema.get("type")
    schema_format = schema.get("format")
    ts_type = format_mapping.resolve(schema_type, schema_format)

    # int64 обрабатывается отдельно
    if schema_type == "integer" and schema_format == "int64" and ts_type == "string":
        result["type"] = "string"

    if ts_type and "enum" not in schema and "tsType" not in schema:
        result["tsType"] = ts_type

    result["description"] = "\n".join(
        [schema.get("description") or "", f"@format {schema_format}" if schema_format else ""]
    ).strip()

    return result


def _set_title(result: Dict[str, Any], interface_name: str) -> None:
    if result.get("title"):
        result["title"] = interface_name or result["title"]
    else:
        result.pop("title", None)
