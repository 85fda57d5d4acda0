"""Интерфейсы внешних шагов конвейера

Разрешение ссылок, конвертация Swagger 2.0, компиляция схем в TypeScript и
форматирование подставляются снаружи; здесь описаны только их контракты.
"""

from typing import Any, Dict, Protocol


class ReferenceResolver(Protocol):
    def resolve(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Полностью или лениво разрешенная копия документа"""

    def exists(self, ref: str) -> bool:
        """Существует ли цель ссылки"""

    def get(self, ref: str) -> Any:
        """Объект по ссылке, UnresolvedReferenceError если его нет"""


class DocumentConverter(Protocol):
    def convert(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Swagger 2.0 -> OpenAPI 3"""


class TypeCompiler(Protocol):
    def compile(self, schema: Dict[str, Any], name: str) -> str:
        """Объявления TypeScript для схемы с корневым именем name"""


class Formatter(Protocol):
    def format(self, source: str) -> str:
        """Канонически отформатированный исходный код"""
