"""
Главный модуль генератора - чистый интерфейс
"""

from typing import Dict, Any

from .internal.generator.client_generator import ClientGenerator
from .internal.types.models import Project
from .internal.types.options import GeneratorOptions


class ApiClientGenerator:
    """Чистый интерфейс для генерации TypeScript клиентов"""

    def __init__(
        self,
        openapi_spec: Dict[str, Any],
        source_url: str = None,
        options: GeneratorOptions = None,
        file_name: str = "api.ts",
        config: Dict[str, Any] = None,
        **collaborators,
    ):
        self.generator = ClientGenerator(
            openapi_spec,
            source_url=source_url,
            options=options,
            file_name=file_name,
            config=config,
            **collaborators,
        )

    def generate(self) -> Project:
        """Генерация проекта клиента"""
        return self.generator.generate()

    def generate_code(self) -> str:
        """Текст модуля клиента"""
        return self.generator.generate_code()


def swagger_to_typescript(
    document: Dict[str, Any],
    options: GeneratorOptions = None,
    *,
    resolver=None,
    converter=None,
    compiler=None,
    formatter=None,
) -> str:
    """TypeScript модуль из документа Swagger 2.0 или OpenAPI 3"""
    return ApiClientGenerator(
        document,
        options=options,
        resolver=resolver,
        converter=converter,
        compiler=compiler,
        formatter=formatter,
    ).generate_code()
