"""
Тесты для системы конфигурации
"""

import os
import tempfile

import pytest

from openapi_ts_client.config import OpenApiConfig
from openapi_ts_client.internal.types.options import FormatMapping, GeneratorOptions


class TestOpenApiConfig:
    """Тесты конфигурации OpenAPI"""

    def test_config_creation(self):
        """Тест создания конфигурации"""
        config = OpenApiConfig(url="http://localhost:8000", dirname="test_client")

        assert config.url == "http://localhost:8000"
        assert config.dirname == "test_client"

    def test_config_save_and_load(self):
        """Тест сохранения и загрузки конфигурации"""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, "test_openapi.toml")

            original_config = OpenApiConfig(
                url="http://api.example.com",
                dirname="example_client",
                prettier=True,
                resolve_mode="lazy",
                format_mapping={"integer": {"int64": "bigint"}},
            )
            original_config.save_to_file(config_path)

            loaded_config = OpenApiConfig.from_file(config_path)

            assert loaded_config is not None
            assert loaded_config.url == "http://api.example.com"
            assert loaded_config.dirname == "example_client"
            assert loaded_config.prettier is True
            assert loaded_config.resolve_mode == "lazy"
            assert loaded_config.format_mapping == {"integer": {"int64": "bigint"}}

    def test_config_file_not_exists(self):
        """Тест загрузки несуществующего конфига"""
        config = OpenApiConfig.from_file("nonexistent.toml")
        assert config is None

    def test_config_invalid_file(self, tmp_path):
        """Тест битого конфига"""
        config_path = tmp_path / "openapi.toml"
        config_path.write_text("url = \n[[[")

        assert OpenApiConfig.from_file(str(config_path)) is None

    def test_config_search_dir(self, tmp_path):
        """Тест поиска конфига в директории"""
        OpenApiConfig(url="http://dir.example.com", dirname="x").save_to_file(
            str(tmp_path / "openapi.toml")
        )

        config = OpenApiConfig.from_file(search_dir=str(tmp_path))

        assert config.url == "http://dir.example.com"

    def test_config_merge_with_args(self):
        """Тест объединения конфига с аргументами"""
        config = OpenApiConfig(url="http://localhost:8000", dirname="original_client")

        # Мокаем args
        class MockArgs:
            def __init__(self):
                self.url = "http://api.new.com"
                self.dirname = None
                self.lazy_refs = True

        merged = config.merge_with_args(MockArgs())

        assert merged.url == "http://api.new.com"  # Переписан из args
        assert merged.dirname == "original_client"  # Остался из config
        assert merged.filename == "api.ts"
        assert merged.resolve_mode == "lazy"
        assert merged.strict_refs is False

    def test_diff_with_args(self):
        """Тест расхождений конфига с аргументами"""
        config = OpenApiConfig(url="http://a", dirname="client", filename="api.ts")

        class MockArgs:
            url = "http://a"
            dirname = "other"
            filename = "client.ts"
            prettier = True
            lazy_refs = False
            strict_refs = False

        assert config.diff_with_args(MockArgs()) == {
            "filename": ("api.ts", "client.ts"),
            "prettier": (False, True),
        }

    def test_to_dict_skips_empty(self):
        """Тест: пустые поля не пишутся в toml"""
        data = OpenApiConfig(url="http://a").to_dict()

        assert "dirname" not in data
        assert "format_mapping" not in data
        assert data["filename"] == "api.ts"

    def test_default_values(self):
        """Тест значений по умолчанию"""
        config = OpenApiConfig()

        assert config.url is None
        assert config.dirname is None
        assert config.filename == "api.ts"
        assert config.prettier is False
        assert config.resolve_mode == "full"

    def test_to_options(self):
        """Тест параметров генерации из конфига"""
        config = OpenApiConfig(
            url="http://x", strict_refs=True, format_mapping={"string": {"uuid": "Uuid"}}
        )

        options = config.to_options()

        assert options.strict_refs is True
        assert options.resolve_mode == "full"
        assert options.format_mapping.resolve("string", "uuid") == "Uuid"
        assert options.format_mapping.resolve("integer", "int64") == "string"


class TestFormatMapping:
    """Тесты таблицы форматов"""

    @pytest.mark.parametrize(
        "schema_type, schema_format, expected",
        [
            ("boolean", None, "boolean"),
            ("number", "float", "number"),
            ("number", "double", "number"),
            ("integer", None, "number"),
            ("integer", "int32", "number"),
            ("integer", "int64", "string"),
            ("string", "date-time", "string"),
            ("string", "binary", "File"),
            ("string", "email", "string"),
            ("object", None, None),
            (None, None, None),
        ],
    )
    def test_defaults(self, schema_type, schema_format, expected):
        """Тест таблицы по умолчанию"""
        assert FormatMapping().resolve(schema_type, schema_format) == expected

    def test_overrides_do_not_modify_defaults(self):
        """Тест: переопределение возвращает новую таблицу"""
        base = FormatMapping()
        mapping = base.with_overrides({"integer": {"int64": "bigint"}})

        assert mapping.resolve("integer", "int64") == "bigint"
        assert mapping.resolve("integer", "int32") == "number"
        assert base.resolve("integer", "int64") == "string"

    def test_unknown_type(self):
        """Тест неизвестного типа в переопределениях"""
        with pytest.raises(ValueError):
            FormatMapping().with_overrides({"object": {"x": "y"}})

    def test_options_from_dict(self):
        """Тест параметров из словаря"""
        options = GeneratorOptions.from_dict({"resolve_mode": "lazy"})

        assert options.resolve_mode == "lazy"
        assert options.http_methods[0] == "get"
        assert options.merge_path_parameters is True
