from enum import Enum
from typing import Optional, Union, Any, Dict, List
from dataclasses import dataclass, field

from pydantic import BaseModel


class SchemaKind(str, Enum):
    """Варианты узла схемы"""

    OBJECT = "object"
    ARRAY = "array"
    PRIMITIVE = "primitive"
    REFERENCE = "reference"
    OPAQUE = "opaque"

    @classmethod
    def of(cls, schema: Any) -> "SchemaKind":
        if not isinstance(schema, dict):
            return cls.OPAQUE
        if "$ref" in schema:
            return cls.REFERENCE

        schema_type = schema.get("type")
        if schema_type == "array":
            return cls.ARRAY
        if schema_type == "object":
            return cls.OBJECT
        if schema_type in ("string", "number", "integer", "boolean"):
            return cls.PRIMITIVE
        if schema_type is None and isinstance(schema.get("properties"), dict):
            return cls.OBJECT
        if schema_type is None and isinstance(schema.get("items"), dict):
            return cls.ARRAY

        # Нет type: маркер рекурсии, композиция oneOf/allOf и т.п.
        return cls.OPAQUE


@dataclass
class ParameterObject:
    """Параметр операции после разрешения ссылок"""

    name: str
    location: str
    required: bool = False
    schema: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    deprecated: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParameterObject":
        return cls(
            name=data.get("name", ""),
            location=data.get("in", ""),
            required=bool(data.get("required", False)),
            schema=data.get("schema"),
            description=data.get("description"),
            deprecated=bool(data.get("deprecated", False)),
        )


@dataclass
class MediaTypeObject:
    """Выбранный media type тела запроса или ответа"""

    content_type: str
    schema: Optional[Dict[str, Any]] = None


@dataclass
class OperationParameters:
    path_params: List[ParameterObject] = field(default_factory=list)
    query_params: List[ParameterObject] = field(default_factory=list)


@dataclass
class OperationExtra:
    url: str
    method: str

    @property
    def request_line(self) -> str:
        return f"{self.method.upper()} {self.url}"


@dataclass
class NormalizedOperation:
    """Операция в нормализованном виде"""

    operation_id: Optional[str]
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    is_multipart: bool = False
    parameters: OperationParameters = field(default_factory=OperationParameters)
    response_data: Optional[MediaTypeObject] = None
    request_body: Optional[MediaTypeObject] = None
    extra: OperationExtra = None


@dataclass
class PathParamsShape:
    value: List[ParameterObject]
    is_simple: bool


@dataclass
class QueryShape:
    value: List[ParameterObject]
    required: bool


@dataclass
class BodyShape:
    value: MediaTypeObject
    is_multipart: bool
    required: bool


@dataclass
class OperationShape:
    """Результат предобработки операции"""

    path: Optional[PathParamsShape]
    query: Optional[QueryShape]
    data: Optional[BodyShape]
    helper_schema: Dict[str, Any]

    @property
    def has_path_params(self) -> bool:
        return self.path is not None

    @property
    def has_query(self) -> bool:
        return self.query is not None

    @property
    def has_request_body(self) -> bool:
        return self.data is not None and bool(self.data.value.schema)

    @property
    def is_simple_path_params(self) -> bool:
        return self.path is not None and self.path.is_simple

    @property
    def has_required_query(self) -> bool:
        return self.query is not None and self.query.required

    @property
    def has_required_body(self) -> bool:
        return self.data is not None and self.data.required


class CodeBlock(BaseModel):
    order: int = 0
    code: str = ""

    def __str__(self):
        return self.code.replace("\t", "  ")


class CodeFile(BaseModel):
    file_name: str

    imports: list[str] = []
    code_blocks: list["CodeBlock"] = []

    def __str__(self):
        return (
            "\n\n".join(
                filter(
                    bool,
                    [
                        ("\n".join(self.imports) if self.imports else ""),
                        (
                            "\n\n".join(
                                map(
                                    str,
                                    sorted(
                                        self.code_blocks,
                                        key=lambda x: x.order,
                                        reverse=True,
                                    ),
                                )
                            )
                        ),
                    ],
                )
            )
        ).replace("\t", "  ")

    def add_code_block(
        self, code_block: Union["CodeBlock", str], **kwargs
    ) -> "CodeFile":
        if isinstance(code_block, str):
            code_block = CodeBlock(code=code_block, **kwargs)

        self.code_blocks.append(code_block)
        return self


class Project(BaseModel):
    name: str
    files: list[CodeFile] = []

    def add_file(self, file_name: Union["CodeFile", str], **kwargs) -> "CodeFile":
        if isinstance(file_name, str):
            file_name = CodeFile(file_name=file_name, **kwargs)

        self.files.append(file_name)
        return file_name

    def get_file(self, file_name: str) -> Optional[CodeFile]:
        for code_file in self.files:
            if code_file.file_name == file_name:
                return code_file
        return None
