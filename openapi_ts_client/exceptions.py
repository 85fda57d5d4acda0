"""
Исключения генератора
"""


class GenerationError(Exception):
    """Базовая ошибка генерации клиента"""


class DocumentResolveError(GenerationError):
    """Не удалось разрешить ссылки документа"""

    def __init__(self, message, ref=None):
        self.message = message
        self.ref = ref
        super().__init__(f"{ref}: {message}" if ref else message)


class UnresolvedReferenceError(GenerationError, KeyError):
    """Ссылка указывает на несуществующее место документа"""

    def __init__(self, ref):
        self.ref = ref
        super().__init__(f"Не удалось разрешить $ref: {ref}")

    def __str__(self):
        return self.args[0]


class MissingOperationIdError(GenerationError, ValueError):
    """У операции нет operationId"""

    def __init__(self, method, url):
        self.method = method
        self.url = url
        super().__init__(f"{method.upper()} {url}: не указан operationId")


class SchemaCompileError(GenerationError):
    """Схема не может быть преобразована в TypeScript"""


class FormatterError(GenerationError):
    """Ошибка форматирования итогового кода"""
