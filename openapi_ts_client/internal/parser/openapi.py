import logging
from typing import Any, Dict, List, Optional

from ...exceptions import GenerationError, UnresolvedReferenceError
from ..types.models import (
    MediaTypeObject,
    NormalizedOperation,
    OperationExtra,
    OperationParameters,
    ParameterObject,
)
from ..types.options import GeneratorOptions
from ..types.protocols import DocumentConverter, ReferenceResolver
from .normalizer import expand_refs, fix_missing_ref, resolve_circular
from .resolver import JsonRefResolver
from .swagger2 import Swagger2Converter

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


class OpenApiParser:
    """Парсер OpenAPI спецификации"""

    def __init__(
        self,
        options: GeneratorOptions = None,
        resolver: ReferenceResolver = None,
        converter: DocumentConverter = None,
    ):
        self.options = options or GeneratorOptions()
        self.resolver = resolver or JsonRefResolver(lazy=self.options.resolve_mode == "lazy")
        self.converter = converter or Swagger2Converter()
        self.document: Optional[Dict[str, Any]] = None

    def init(self, openapi_dict: Dict[str, Any]) -> "OpenApiParser":
        """Нормализация документа: Swagger 2.0 -> OpenAPI 3, ссылки, циклы"""
        if str(openapi_dict.get("swagger", "")).startswith("2."):
            fix_missing_ref(openapi_dict)
            openapi_dict = self.converter.convert(openapi_dict)
        elif not str(openapi_dict.get("openapi", "")).startswith("3."):
            raise GenerationError("Документ не является Swagger 2.0 или OpenAPI 3")

        document = self.resolver.resolve(openapi_dict)
        self.document = resolve_circular(document)
        return self

    def get_processed_operation_objects(self) -> List[NormalizedOperation]:
        """Плоский список операций в порядке путей и HTTP методов"""
        if self.document is None:
            raise GenerationError("Парсер не инициализирован, вызовите init()")

        paths = self.document.get("paths") or {}
        operations = []

        for url, path_item in paths.items():
            if not path_item:
                continue

            for method in self.options.http_methods:
                item = path_item.get(method)
                if not item:
                    continue

                operations.append(
                    self.process_operation_object(
                        dict(item), url=url, method=method, path_item=path_item
                    )
                )

        logger.debug("Извлечено операций: %d", len(operations))
        return operations

    def process_operation_object(
        self,
        item: Dict[str, Any],
        url: str,
        method: str,
        path_item: Optional[Dict[str, Any]] = None,
    ) -> NormalizedOperation:
        """Нормализация одной операции"""
        shared_params = list((path_item or {}).get("parameters") or [])
        if not self.options.merge_path_parameters:
            shared_params = []

        if self.options.resolve_mode == "lazy":
            expanded = resolve_circular(
                expand_refs({"operation": item, "parameters": shared_params}, self.resolver)
            )
            item, shared_params = expanded["operation"], expanded["parameters"]

        request_body, is_multipart = self._process_request_body(item.get("requestBody"))

        parameters = self._process_parameters(
            self._merge_parameters(shared_params, item.get("parameters"))
        )
        # Стабильная сортировка: сначала обязательные
        path_params = sorted(
            [el for el in parameters if el.location == "path"],
            key=lambda el: not el.required,
        )
        query_params = [el for el in parameters if el.location == "query"]

        return NormalizedOperation(
            operation_id=item.get("operationId"),
            summary=item.get("summary"),
            description=item.get("description"),
            deprecated=bool(item.get("deprecated", False)),
            is_multipart=is_multipart,
            parameters=OperationParameters(path_params=path_params, query_params=query_params),
            response_data=self._process_response(item.get("responses")),
            request_body=request_body,
            extra=OperationExtra(url=url, method=method),
        )

    def _process_request_body(self, body: Any):
        req_body = self.resolve_simple_ref(body) if body else None
        content = (req_body or {}).get("content") or {}
        if not content:
            return None, False

        if JSON_CONTENT_TYPE in content:
            content_type = JSON_CONTENT_TYPE
        elif MULTIPART_CONTENT_TYPE in content:
            content_type = MULTIPART_CONTENT_TYPE
        else:
            content_type = next(iter(content))

        media = content[content_type] or {}
        media_object = MediaTypeObject(content_type=content_type, schema=media.get("schema"))

        if MULTIPART_CONTENT_TYPE in content:
            return media_object, True

        # Бывает, что тип не объявлен как multipart/form-data,
        # но одно из полей на деле binary
        schema = media_object.schema
        is_multipart = False
        if isinstance(schema, dict) and isinstance(schema.get("properties"), dict):
            is_multipart = any(
                isinstance(el, dict) and el.get("type") == "string" and el.get("format") == "binary"
                for el in schema["properties"].values()
            )

        return media_object, is_multipart

    def _process_response(self, responses: Any) -> Optional[MediaTypeObject]:
        responses = responses or {}
        # В YAML код ответа может прийти числом
        response = self.resolve_simple_ref(responses.get("200", responses.get(200)))
        content = (response or {}).get("content") or {}

        for content_type, media in content.items():
            return MediaTypeObject(content_type=content_type, schema=(media or {}).get("schema"))

        return None

    def _merge_parameters(self, path_params: List[Any], op_params: Any) -> List[Any]:
        """Параметры пути дополняются параметрами операции с приоритетом последних"""
        op_params = list(op_params or [])
        if not path_params:
            return op_params

        def key(param):
            resolved = self.resolve_simple_ref(param) or {}
            return resolved.get("name"), resolved.get("in")

        op_keys = {key(param) for param in op_params}
        return [param for param in path_params if key(param) not in op_keys] + op_params

    def _process_parameters(self, parameters: List[Any]) -> List[ParameterObject]:
        result = []
        for el in parameters:
            resolved = self.resolve_simple_ref(el)
            if not resolved:
                continue
            result.append(ParameterObject.from_dict(resolved))

        return sorted(result, key=lambda el: el.location)

    def resolve_simple_ref(self, obj: Any) -> Any:
        """
        Разрешение объекта-ссылки.

        Неразрешимая ссылка отбрасывается (None), в strict_refs режиме -
        UnresolvedReferenceError.
        """
        if isinstance(obj, dict) and "$ref" in obj:
            ref = obj["$ref"]
            if self.resolver.exists(ref):
                return self.resolver.get(ref)

            if self.options.strict_refs:
                raise UnresolvedReferenceError(ref)

            logger.debug("Пропущена неразрешимая ссылка %s", ref)
            return None

        return obj
