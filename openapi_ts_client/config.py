"""
Конфигурация для генерации API клиента
"""

import os
from typing import Dict, Any, Optional, Tuple
import toml
from dataclasses import dataclass, field

from .internal.types.options import GeneratorOptions

# Поля, которые можно задать флагами командной строки
ARG_FIELDS = ("url", "filename", "prettier", "resolve_mode", "strict_refs")


@dataclass
class OpenApiConfig:
    """Конфигурация генератора OpenAPI клиента"""

    url: Optional[str] = None
    dirname: Optional[str] = None
    filename: str = "api.ts"
    prettier: bool = False
    resolve_mode: str = "full"
    strict_refs: bool = False
    format_mapping: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_file(
        cls, config_path: str = "openapi.toml", search_dir: str = None
    ) -> Optional["OpenApiConfig"]:
        """Загрузка конфигурации из файла"""
        # Если указана директория для поиска, ищем конфиг там
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, "openapi.toml")
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except (OSError, toml.TomlDecodeError):
            return None

        return cls(
            url=config_data.get("url"),
            dirname=config_data.get("dirname", "api_client"),
            filename=config_data.get("filename", "api.ts"),
            prettier=bool(config_data.get("prettier", False)),
            resolve_mode=config_data.get("resolve_mode", "full"),
            strict_refs=bool(config_data.get("strict_refs", False)),
            format_mapping=config_data.get("format_mapping", {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Поля конфига в виде таблицы toml, пустые поля пропускаются"""
        config_data: Dict[str, Any] = {
            "url": self.url,
            "dirname": self.dirname,
            "filename": self.filename,
            "prettier": self.prettier,
            "resolve_mode": self.resolve_mode,
            "strict_refs": self.strict_refs,
        }
        if self.format_mapping:
            config_data["format_mapping"] = self.format_mapping

        return {key: value for key, value in config_data.items() if value is not None}

    def save_to_file(self, config_path: str = "openapi.toml") -> None:
        """Сохранение конфигурации в файл"""
        with open(config_path, "w") as f:
            toml.dump(self.to_dict(), f)

    def merge_with_args(self, args) -> "OpenApiConfig":
        """Объединение с аргументами командной строки"""
        return OpenApiConfig(
            url=getattr(args, "url", None) or self.url,
            dirname=getattr(args, "dirname", None) or self.dirname,
            filename=getattr(args, "filename", None) or self.filename,
            prettier=getattr(args, "prettier", False) or self.prettier,
            resolve_mode="lazy" if getattr(args, "lazy_refs", False) else self.resolve_mode,
            strict_refs=getattr(args, "strict_refs", False) or self.strict_refs,
            format_mapping=dict(self.format_mapping),
        )

    def diff_with_args(self, args) -> Dict[str, Tuple[Any, Any]]:
        """Поля, которые аргументы меняют: имя -> (из файла, из аргументов)"""
        merged = self.merge_with_args(args)
        return {
            name: (getattr(self, name), getattr(merged, name))
            for name in ARG_FIELDS
            if getattr(self, name) != getattr(merged, name)
        }

    def to_options(self) -> GeneratorOptions:
        """Параметры конвейера генерации"""
        return GeneratorOptions.from_dict(
            {
                "resolve_mode": self.resolve_mode,
                "strict_refs": self.strict_refs,
                "format_mapping": self.format_mapping,
            }
        )
