"""Конвертация Swagger 2.0 в OpenAPI 3.0"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

_PARAMETER_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "multipleOf",
)


class Swagger2Converter:
    """
    Конвертер документа Swagger 2.0 в OpenAPI 3.0.

    Висячие ссылки не переносит, поэтому перед вызовом их нужно удалить
    через `fix_missing_ref`.
    """

    def convert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        self.source = copy.deepcopy(document)
        self.consumes = self.source.get("consumes") or ["application/json"]
        self.produces = self.source.get("produces") or ["application/json"]
        self.body_parameters = {
            name
            for name, param in (self.source.get("parameters") or {}).items()
            if isinstance(param, dict) and param.get("in") == "body"
        }

        result: Dict[str, Any] = {
            "openapi": "3.0.0",
            "info": self.source.get("info") or {"title": "", "version": ""},
        }

        servers = self._convert_servers()
        if servers:
            result["servers"] = servers

        for key in ("tags", "security", "externalDocs"):
            if key in self.source:
                result[key] = self.source[key]

        result["paths"] = {
            url: self._convert_path_item(path_item)
            for url, path_item in (self.source.get("paths") or {}).items()
        }
        result["components"] = self._convert_components()

        logger.debug("Swagger 2.0 сконвертирован: %d путей", len(result["paths"]))
        return self._rewrite_refs(result)

    def _convert_servers(self) -> List[Dict[str, str]]:
        host = self.source.get("host")
        base_path = self.source.get("basePath") or ""
        if not host:
            return [{"url": base_path}] if base_path else []

        schemes = self.source.get("schemes") or ["https"]
        return [{"url": f"{scheme}://{host}{base_path}"} for scheme in schemes]

    def _convert_components(self) -> Dict[str, Any]:
        components: Dict[str, Any] = {}

        definitions = self.source.get("definitions") or {}
        if definitions:
            components["schemas"] = {
                name: self._convert_schema(schema) for name, schema in definitions.items()
            }

        parameters = {}
        request_bodies = {}
        for name, param in (self.source.get("parameters") or {}).items():
            if name in self.body_parameters:
                request_bodies[name] = self._body_to_request_body(param, self.consumes)
            else:
                parameters[name] = self._convert_parameter(param)
        if parameters:
            components["parameters"] = parameters
        if request_bodies:
            components["requestBodies"] = request_bodies

        responses = self.source.get("responses") or {}
        if responses:
            components["responses"] = {
                name: self._convert_response(response, self.produces)
                for name, response in responses.items()
            }

        security = self.source.get("securityDefinitions") or {}
        if security:
            components["securitySchemes"] = {
                name: self._convert_security_scheme(scheme) for name, scheme in security.items()
            }

        return components

    def _convert_path_item(self, path_item: Dict[str, Any]) -> Dict[str, Any]:
        result = {}
        for key, value in path_item.items():
            if key == "parameters":
                result[key] = [
                    self._convert_parameter(param)
                    for param in value
                    if self._parameter_location(param) not in ("body", "formData")
                ]
            elif isinstance(value, dict) and key in (
                "get",
                "put",
                "post",
                "delete",
                "options",
                "head",
                "patch",
            ):
                result[key] = self._convert_operation(value, path_item.get("parameters") or [])
            else:
                result[key] = value
        return result

    def _convert_operation(self, operation: Dict[str, Any], path_parameters: List[Any]) -> Dict[str, Any]:
        consumes = operation.get("consumes") or self.consumes
        produces = operation.get("produces") or self.produces

        result = {
            key: value
            for key, value in operation.items()
            if key not in ("parameters", "responses", "consumes", "produces", "schemes")
        }

        parameters = []
        body_params = []
        form_params = []
        # Параметры тела могут быть объявлены на уровне пути
        for param in list(path_parameters) + list(operation.get("parameters") or []):
            location = self._parameter_location(param)
            if location == "body":
                body_params.append(param)
            elif location == "formData":
                form_params.append(param)
            elif param in path_parameters:
                continue
            else:
                parameters.append(self._convert_parameter(param))

        if parameters:
            result["parameters"] = parameters

        if body_params:
            body = body_params[-1]
            if "$ref" in body:
                result["requestBody"] = {"$ref": body["$ref"]}
            else:
                result["requestBody"] = self._body_to_request_body(body, consumes)
        elif form_params:
            result["requestBody"] = self._form_to_request_body(form_params, consumes)

        result["responses"] = {
            code: self._convert_response(response, produces)
            for code, response in (operation.get("responses") or {}).items()
        }
        return result

    def _parameter_location(self, param: Any) -> Optional[str]:
        if not isinstance(param, dict):
            return None
        ref = param.get("$ref")
        if isinstance(ref, str) and ref.startswith("#/parameters/"):
            name = ref[len("#/parameters/"):]
            if name in self.body_parameters:
                return "body"
            shared = (self.source.get("parameters") or {}).get(name) or {}
            return shared.get("in")
        return param.get("in")

    def _convert_parameter(self, param: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(param, dict) or "$ref" in param or "in" not in param:
            return param

        result = {
            key: param[key]
            for key in ("name", "in", "description", "required", "deprecated", "allowEmptyValue")
            if key in param
        }
        if "x-example" in param:
            result["example"] = param["x-example"]

        schema = {key: param[key] for key in _PARAMETER_SCHEMA_KEYS if key in param}
        if "items" in schema:
            schema["items"] = self._convert_schema(schema["items"])
        result["schema"] = self._convert_schema(schema)

        collection_format = param.get("collectionFormat")
        if collection_format == "multi":
            result["style"], result["explode"] = "form", True
        elif collection_format in ("ssv", "pipes"):
            result["style"] = "spaceDelimited" if collection_format == "ssv" else "pipeDelimited"
        elif collection_format == "csv":
            result["explode"] = False

        return result

    def _body_to_request_body(self, param: Dict[str, Any], consumes: List[str]) -> Dict[str, Any]:
        schema = self._convert_schema(param.get("schema") or {})
        content_types = [ct for ct in consumes if "form" not in ct] or ["application/json"]

        result: Dict[str, Any] = {
            "content": {ct: {"schema": schema} for ct in content_types},
        }
        if param.get("description"):
            result["description"] = param["description"]
        if param.get("required"):
            result["required"] = True
        return result

    def _form_to_request_body(self, params: List[Dict[str, Any]], consumes: List[str]) -> Dict[str, Any]:
        properties = {}
        required = []
        has_file = False

        for param in params:
            param = self._convert_parameter(param)
            name = param.get("name", "")
            schema = dict(param.get("schema") or {})
            if schema.get("format") == "binary":
                has_file = True
            if param.get("description"):
                schema["description"] = param["description"]
            properties[name] = schema
            if param.get("required"):
                required.append(name)

        schema: Dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required

        form_types = [ct for ct in consumes if "form" in ct]
        if not form_types:
            form_types = ["multipart/form-data" if has_file else "application/x-www-form-urlencoded"]

        return {"content": {ct: {"schema": schema} for ct in form_types}}

    def _convert_response(self, response: Any, produces: List[str]) -> Any:
        if not isinstance(response, dict) or "$ref" in response:
            return response

        result = {"description": response.get("description", "")}
        if "schema" in response:
            schema = self._convert_schema(response["schema"])
            result["content"] = {ct: {"schema": schema} for ct in produces}
        if "headers" in response:
            result["headers"] = {
                name: {
                    "description": header.get("description", ""),
                    "schema": self._convert_schema(
                        {k: v for k, v in header.items() if k != "description"}
                    ),
                }
                for name, header in response["headers"].items()
            }
        return result

    def _convert_security_scheme(self, scheme: Dict[str, Any]) -> Dict[str, Any]:
        scheme_type = scheme.get("type")
        if scheme_type == "basic":
            return {"type": "http", "scheme": "basic", "description": scheme.get("description", "")}
        if scheme_type == "oauth2":
            flow_name = {
                "implicit": "implicit",
                "password": "password",
                "application": "clientCredentials",
                "accessCode": "authorizationCode",
            }.get(scheme.get("flow"), "implicit")
            flow = {"scopes": scheme.get("scopes") or {}}
            if "authorizationUrl" in scheme:
                flow["authorizationUrl"] = scheme["authorizationUrl"]
            if "tokenUrl" in scheme:
                flow["tokenUrl"] = scheme["tokenUrl"]
            return {"type": "oauth2", "flows": {flow_name: flow}}
        return scheme

    def _convert_schema(self, schema: Any) -> Any:
        if isinstance(schema, list):
            return [self._convert_schema(item) for item in schema]
        if not isinstance(schema, dict):
            return schema

        result = {}
        for key, value in schema.items():
            if key == "x-nullable":
                result["nullable"] = value
            elif key == "discriminator" and isinstance(value, str):
                result[key] = {"propertyName": value}
            elif key in ("properties", "definitions", "patternProperties") and isinstance(value, dict):
                result[key] = {name: self._convert_schema(sub) for name, sub in value.items()}
            elif key in ("items", "additionalProperties", "allOf", "oneOf", "anyOf", "not"):
                result[key] = self._convert_schema(value)
            else:
                result[key] = value

        if result.get("type") == "file":
            result["type"] = "string"
            result["format"] = "binary"
        return result

    def _rewrite_refs(self, obj: Any) -> Any:
        if isinstance(obj, list):
            return [self._rewrite_refs(item) for item in obj]
        if not isinstance(obj, dict):
            return obj

        result = {key: self._rewrite_refs(value) for key, value in obj.items()}
        ref = result.get("$ref")
        if isinstance(ref, str):
            result["$ref"] = self._rewrite_ref(ref)
        return result

    def _rewrite_ref(self, ref: str) -> str:
        prefix, _, pointer = ref.partition("#")
        for old, new in self._ref_prefixes(pointer):
            if pointer.startswith(old):
                return f"{prefix}#{new}{pointer[len(old):]}"
        return ref

    def _ref_prefixes(self, pointer: str) -> List[Tuple[str, str]]:
        name = pointer[len("/parameters/"):] if pointer.startswith("/parameters/") else None
        parameters_target = (
            "/components/requestBodies/" if name in self.body_parameters else "/components/parameters/"
        )
        return [
            ("/definitions/", "/components/schemas/"),
            ("/parameters/", parameters_target),
            ("/responses/", "/components/responses/"),
        ]
