"""
Тесты командной строки
"""

import json

import pytest

from openapi_ts_client import cli
from openapi_ts_client.config import OpenApiConfig


SPEC = {
    "openapi": "3.0.0",
    "info": {"title": "Test API", "version": "1.0.0"},
    "paths": {
        "/users/{id}": {
            "get": {
                "operationId": "getUser",
                "parameters": [{"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}],
                "responses": {
                    "200": {"content": {"application/json": {"schema": {"type": "object", "title": "User"}}}}
                },
            }
        }
    },
}

SPEC_YAML = """
openapi: 3.0.0
info:
  title: Test API
  version: 1.0.0
paths:
  /ping:
    get:
      operationId: ping
      responses:
        200:
          content:
            application/json:
              schema:
                type: boolean
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "spec.json").write_text(json.dumps(SPEC))
    return tmp_path


class TestLoadDocument:
    """Тесты загрузки документа"""

    def test_json_file(self, workdir):
        """Тест локального JSON файла"""
        document, base_uri = cli.load_document("spec.json")

        assert document == SPEC
        assert base_uri == (workdir / "spec.json").resolve().as_uri()

    def test_yaml_file(self, workdir):
        """Тест локального YAML файла"""
        (workdir / "spec.yaml").write_text(SPEC_YAML)

        document, _ = cli.load_document("spec.yaml")

        assert document["paths"]["/ping"]["get"]["operationId"] == "ping"
        assert 200 in document["paths"]["/ping"]["get"]["responses"]

    def test_missing_file(self, workdir):
        """Тест несуществующего файла"""
        with pytest.raises(ValueError):
            cli.load_document("missing.json")

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("http://api.example.com", "http://api.example.com/openapi.json"),
            ("http://api.example.com/", "http://api.example.com/openapi.json"),
            ("http://api.example.com/docs/spec.yaml", "http://api.example.com/docs/spec.yaml"),
        ],
    )
    def test_http(self, monkeypatch, url, expected):
        """Тест загрузки по HTTP"""
        requested = []

        class FakeResponse:
            text = json.dumps(SPEC)

            def raise_for_status(self):
                pass

        def fake_get(request_url, **kwargs):
            requested.append(request_url)
            return FakeResponse()

        monkeypatch.setattr(cli.httpx, "get", fake_get)

        document, base_uri = cli.load_document(url)

        assert requested == [expected]
        assert base_uri == expected
        assert document["info"]["title"] == "Test API"


class TestGenerateCommand:
    """Тесты команды генерации"""

    def test_generate_new_client(self, workdir):
        """Тест генерации клиента в новую директорию"""
        cli.generate(["--url", "spec.json", "--dirname", "client", "--force"])

        code = (workdir / "client" / "api.ts").read_text()
        assert "function getUser()" in code
        assert "(id: string, __options?: __Config) => ({" in code

        config = OpenApiConfig.from_file(str(workdir / "client" / "openapi.toml"))
        assert config.url == "spec.json"
        assert config.dirname == "client"

    def test_custom_filename_and_yaml(self, workdir):
        """Тест YAML документа и имени файла"""
        (workdir / "spec.yaml").write_text(SPEC_YAML)

        cli.generate(["--url", "spec.yaml", "--dirname", "client", "--filename", "ping.ts", "--force"])

        code = (workdir / "client" / "ping.ts").read_text()
        assert "function ping()" in code

    def test_regenerate_existing(self, workdir):
        """Тест повторной генерации в существующую директорию"""
        cli.generate(["--url", "spec.json", "--dirname", "client", "--lazy-refs", "--force"])
        cli.generate(["--dirname", "client", "--force"])

        config = OpenApiConfig.from_file(str(workdir / "client" / "openapi.toml"))
        assert config.dirname == "client"
        assert config.resolve_mode == "lazy"
        assert (workdir / "client" / "api.ts").exists()

    def test_init_config(self, workdir):
        """Тест создания конфига"""
        cli.generate(["--init-config", "--url", "http://api.example.com"])

        config = OpenApiConfig.from_file()
        assert config.url == "http://api.example.com"
        assert config.dirname == "api_client"

    def test_generation_error(self, workdir, capsys):
        """Тест ошибки генерации"""
        with pytest.raises(SystemExit) as exc_info:
            cli.generate(["--url", "missing.json", "--force"])

        assert exc_info.value.code == 1
        assert "Ошибка генерации" in capsys.readouterr().out

    def test_no_url(self, workdir):
        """Тест запуска без URL и конфига"""
        with pytest.raises(SystemExit):
            cli.generate(["--force"])

    def test_generated_config_keeps_settings(self, workdir, monkeypatch):
        """Тест: openapi.toml пакета хранит все настройки и без подтверждений"""

        def no_input(prompt):
            raise AssertionError(f"Неожиданный вопрос: {prompt}")

        monkeypatch.setattr("builtins.input", no_input)

        cli.generate(["--url", "spec.json", "--dirname", "out", "--filename", "client.ts", "--strict-refs"])

        config = OpenApiConfig.from_file(str(workdir / "out" / "openapi.toml"))
        assert config.filename == "client.ts"
        assert config.strict_refs is True

        (workdir / "out" / "client.ts").unlink()
        cli._generate_client_in_existing(config, str(workdir / "out"))

        assert (workdir / "out" / "client.ts").exists()
        assert not (workdir / "out" / "api.ts").exists()

    def test_flags_conflict_declined(self, workdir, monkeypatch):
        """Тест: при отказе флаги не перекрывают конфиг из файла"""
        cli.generate(["--url", "spec.json", "--dirname", "out", "--force"])

        prompts = []

        def answer(prompt):
            prompts.append(prompt)
            return "n"

        monkeypatch.setattr("builtins.input", answer)

        cli.generate(["--dirname", "out", "--lazy-refs", "--filename", "other.ts"])

        assert prompts == ["Применить аргументы поверх конфига? [Y/n]: "]
        config = OpenApiConfig.from_file(str(workdir / "out" / "openapi.toml"))
        assert config.resolve_mode == "full"
        assert config.filename == "api.ts"
        assert not (workdir / "out" / "other.ts").exists()

    def test_flags_conflict_accepted(self, workdir, monkeypatch, capsys):
        """Тест: принятые флаги попадают в конфиг пакета"""
        cli.generate(["--url", "spec.json", "--dirname", "out", "--force"])
        capsys.readouterr()
        monkeypatch.setattr("builtins.input", lambda _: "y")

        cli.generate(["--dirname", "out", "--lazy-refs", "--filename", "other.ts"])

        out = capsys.readouterr().out
        assert "resolve_mode: full -> lazy" in out
        assert "filename: api.ts -> other.ts" in out

        config = OpenApiConfig.from_file(str(workdir / "out" / "openapi.toml"))
        assert config.resolve_mode == "lazy"
        assert config.filename == "other.ts"
        assert "function getUser()" in (workdir / "out" / "other.ts").read_text()


class TestPackages:
    """Тесты поиска клиент-пакетов"""

    def test_find_client_packages(self, workdir):
        """Тест рекурсивного поиска openapi.toml"""
        (workdir / "a" / "b").mkdir(parents=True)
        OpenApiConfig(url="http://a", dirname="b").save_to_file(str(workdir / "a" / "b" / "openapi.toml"))

        packages = cli.find_client_packages()

        assert len(packages) == 1
        assert packages[0][0].replace("\\", "/") == "a/b"
        assert packages[0][1].url == "http://a"

    def test_find_skips_node_modules(self, workdir):
        """Тест: openapi.toml внутри node_modules не считается пакетом"""
        for parts in [("client",), ("node_modules", "lib"), (".cache", "x")]:
            directory = workdir.joinpath(*parts)
            directory.mkdir(parents=True)
            OpenApiConfig(url="http://" + parts[-1]).save_to_file(str(directory / "openapi.toml"))

        packages = cli.find_client_packages()

        assert [config.url for _, config in packages] == ["http://client"]

    def test_describe_config(self):
        """Тест описания настроек пакета"""
        config = OpenApiConfig(url="http://a", filename="client.ts", prettier=True, resolve_mode="lazy")

        lines = cli.describe_config(config)

        assert lines[:3] == ["URL: http://a", "Модуль: client.ts", "Разрешение $ref: lazy"]
        assert "Форматирование: prettier" in lines

    def test_confirm_choice(self, monkeypatch):
        """Тест подтверждения"""
        answers = iter(["maybe", "нет", ""])
        monkeypatch.setattr("builtins.input", lambda _: next(answers))

        assert cli.confirm_choice("Продолжить?") is False
        assert cli.confirm_choice("Продолжить?", default=False) is False

    def test_select_from_menu(self, monkeypatch):
        """Тест выбора пункта меню"""
        answers = iter(["x", "5", "2"])
        monkeypatch.setattr("builtins.input", lambda _: next(answers))

        assert cli.select_from_menu(["a", "b"], "Меню") == 1
