import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

from openapi_ts_client.internal.types.models import Project
from openapi_ts_client.internal.generator.formatter import PrettierFormatter
from openapi_ts_client.internal.parser.resolver import JsonRefResolver
from openapi_ts_client.generator import ApiClientGenerator
from openapi_ts_client.config import OpenApiConfig

import httpx
import yaml

DOCUMENT_SUFFIXES = (".json", ".yaml", ".yml")

# Каталоги, где openapi.toml может лежать только в чужих пакетах
SKIPPED_DIRS = {"node_modules", "dist", "build"}


def confirm_choice(message: str, default: bool = True) -> bool:
    """Запрос подтверждения, пустой ответ - значение по умолчанию"""
    hint = "Y/n" if default else "y/N"
    while True:
        choice = input(f"{message} [{hint}]: ").lower().strip()
        if not choice:
            return default
        if choice in ("y", "yes", "да"):
            return True
        if choice in ("n", "no", "нет"):
            return False
        print("Введите y/n")


def describe_config(config: OpenApiConfig) -> List[str]:
    """Строки с настройками пакета для вывода в консоль"""
    lines = [
        f"URL: {config.url}",
        f"Модуль: {config.filename}",
        f"Разрешение $ref: {config.resolve_mode}",
    ]
    if config.strict_refs:
        lines.append("Неразрешимые ссылки: ошибка")
    if config.prettier:
        lines.append("Форматирование: prettier")
    if config.format_mapping:
        lines.append(f"Переопределения форматов: {', '.join(sorted(config.format_mapping))}")
    return lines


def find_client_packages(root: str = ".") -> List[Tuple[str, OpenApiConfig]]:
    """Поиск клиент-пакетов по openapi.toml, в node_modules и скрытые каталоги не заходит"""
    packages = []

    for config_file in sorted(Path(root).rglob("openapi.toml")):
        parents = config_file.relative_to(root).parts[:-1]
        if any(part in SKIPPED_DIRS or part.startswith(".") for part in parents):
            continue

        config = OpenApiConfig.from_file(str(config_file))
        if config:
            packages.append((str(config_file.parent), config))

    return packages


def select_from_menu(options: List[str], title: str) -> int:
    """Выбор пункта из меню"""
    print(f"\n{title}")
    for i, option in enumerate(options, 1):
        print(f"[{i}] {option}")

    while True:
        try:
            choice = int(input("\nВыберите пункт: "))
        except ValueError:
            print("Введите корректное число")
            continue

        if 1 <= choice <= len(options):
            return choice - 1
        print(f"Введите число от 1 до {len(options)}")


def interactive_find_packages():
    """Интерактивный поиск и обновление клиент-пакетов"""
    print("🔍 Поиск клиент-пакетов...")
    packages = find_client_packages()

    if not packages:
        print("❌ Клиент-пакеты не найдены")
        return

    print(f"✅ Найдено {len(packages)} клиент-пакетов:")

    selected_idx = select_from_menu(
        [f"{config_dir} ({config.filename} <- {config.url})" for config_dir, config in packages],
        "📦 Найденные клиент-пакеты:",
    )
    selected_dir, selected_config = packages[selected_idx]

    print(f"\n📍 Выбран пакет: {selected_dir}")
    for line in describe_config(selected_config):
        print(f"   {line}")

    action = select_from_menu(
        [
            "Обновить генерацию",
            "Изменить ссылку и обновить",
            "Переключить режим разрешения $ref и обновить",
            "Переключить prettier и обновить",
        ],
        "\n⚙️ Что сделать с пакетом?",
    )

    if action == 1:
        new_url = input(f"\n🔗 Введите новый URL (текущий: {selected_config.url}): ").strip()
        if new_url:
            selected_config.url = new_url
    elif action == 2:
        selected_config.resolve_mode = "full" if selected_config.resolve_mode == "lazy" else "lazy"
        print(f"🔁 Режим разрешения $ref: {selected_config.resolve_mode}")
    elif action == 3:
        selected_config.prettier = not selected_config.prettier
        print(f"🔁 prettier: {'включен' if selected_config.prettier else 'выключен'}")

    _generate_client_in_existing(selected_config, selected_dir)


def interactive_create_package():
    """Интерактивное создание нового пакета"""
    print("\n📦 Создание нового клиент-пакета")

    dirname = input("📦 Введите название директории клиента [api_client]: ").strip() or "api_client"

    url = input("🔗 Введите URL или путь к OpenAPI спецификации: ").strip()
    if not url:
        print("❌ URL не указан")
        return

    filename = input("📄 Имя модуля клиента [api.ts]: ").strip() or "api.ts"
    prettier = confirm_choice("Форматировать через prettier?", default=False)

    config = OpenApiConfig(url=url, dirname=dirname, filename=filename, prettier=prettier)

    print("\n📋 Параметры создания:")
    print(f"   Директория клиента: {dirname}")
    for line in describe_config(config):
        print(f"   {line}")

    if not confirm_choice("Все правильно?"):
        return

    _generate_client(config, ".")


def load_document(source: str) -> Tuple[Dict[str, Any], str]:
    """Загрузка документа по URL или из файла, возвращает (документ, base_uri)"""
    if source.startswith(("http://", "https://")):
        url = source
        if not source.lower().endswith(DOCUMENT_SUFFIXES):
            url = source + ("" if source.endswith("/") else "/") + "openapi.json"

        response = httpx.get(url, follow_redirects=True)
        response.raise_for_status()
        return _parse_document(response.text, url), url

    if os.path.exists(source):
        path = Path(source).resolve()
        with open(path, "r", encoding="utf-8") as f:
            return _parse_document(f.read(), str(path)), path.as_uri()

    raise ValueError(
        f"Не удалось загрузить спецификацию из {source}. Проверьте URL или путь к файлу."
    )


def _parse_document(text: str, name: str) -> Dict[str, Any]:
    if name.lower().endswith((".yaml", ".yml")):
        return yaml.safe_load(text)

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return yaml.safe_load(text)


def _generate_client_core(config: OpenApiConfig) -> Project:
    """Загрузка документа и генерация проекта, openapi.toml проекта хранит весь конфиг"""
    if not config.url:
        raise ValueError("URL не указан в конфигурации")

    print(f"🚀 Генерация клиента из {config.url}")
    print("📥 Загрузка OpenAPI спецификации...")
    openapi_spec, base_uri = load_document(config.url)

    options = config.to_options()
    collaborators = {
        "resolver": JsonRefResolver(base_uri=base_uri, lazy=options.resolve_mode == "lazy"),
    }
    if config.prettier:
        collaborators["formatter"] = PrettierFormatter()

    print("⚙️ Генерация кода...")
    generator = ApiClientGenerator(
        openapi_spec,
        source_url=config.url,
        options=options,
        file_name=config.filename,
        config=config.to_dict(),
        **collaborators,
    )
    return generator.generate()


def _save_project_files(project: Project, target_path: str):
    """Сохранение файлов проекта"""
    print(f"💾 Сохранение {len(project.files)} файлов...")

    for code_model in project.files:
        path = os.path.join(target_path, code_model.file_name)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            f.write(str(code_model))

    print("✅ Генерация завершена успешно!")
    print(f"📦 Клиент создан в: {os.path.abspath(target_path)}")


def _generate_client(config: OpenApiConfig, work_dir: str):
    """Генерация клиента в новую директорию"""
    if not config.dirname:
        raise ValueError("Директория не указана в конфигурации")

    project = _generate_client_core(config)
    _save_project_files(project, os.path.join(work_dir, config.dirname))


def _generate_client_in_existing(config: OpenApiConfig, existing_package_dir: str):
    """Генерация клиента в существующую директорию пакета"""
    project = _generate_client_core(config)
    _save_project_files(project, existing_package_dir)


def _resolve_with_file_config(file_config: OpenApiConfig, args) -> OpenApiConfig:
    """Конфиг из файла с учетом флагов, при расхождении спрашивает, чему верить"""
    changes = file_config.diff_with_args(args)
    if not changes:
        print("📋 Используется конфиг из openapi.toml")
        for line in describe_config(file_config):
            print(f"   {line}")
        return file_config.merge_with_args(args)

    print("🔧 Аргументы расходятся с openapi.toml:")
    for name, (from_file, from_args) in changes.items():
        print(f"   {name}: {from_file} -> {from_args}")
    print()

    # С --force флаги командной строки главнее файла
    if args.force or confirm_choice("Применить аргументы поверх конфига?"):
        return file_config.merge_with_args(args)

    config = OpenApiConfig(**file_config.to_dict())
    config.dirname = args.dirname or file_config.dirname
    return config


def interactive_menu():
    """Главное интерактивное меню"""
    print("🎯 OpenAPI TypeScript Client Generator")

    choice = select_from_menu(["Рекурсивно найти клиент-пакеты", "Создать пакет"], "📋 Выберите действие:")

    if choice == 0:
        interactive_find_packages()
    elif choice == 1:
        interactive_create_package()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Генерация TypeScript клиента из OpenAPI")
    parser.add_argument("--url", type=str, help="URL или путь к OpenAPI спецификации")
    parser.add_argument("--dirname", type=str, help="Директория для генерации клиента")
    parser.add_argument("--filename", type=str, help="Имя файла модуля (по умолчанию api.ts)")
    parser.add_argument(
        "--init-config", action="store_true", help="Создать конфиг файл openapi.toml"
    )
    parser.add_argument(
        "--force", action="store_true", help="Генерировать без подтверждения"
    )
    parser.add_argument(
        "--prettier", action="store_true", help="Форматировать результат через prettier"
    )
    parser.add_argument(
        "--lazy-refs", action="store_true", help="Разрешать $ref по запросу"
    )
    parser.add_argument(
        "--strict-refs",
        action="store_true",
        help="Ошибка вместо пропуска неразрешимых ссылок параметров",
    )
    parser.add_argument("--verbose", action="store_true", help="Подробный лог")
    return parser


def generate(argv: List[str] = None):
    """Универсальная команда генерации TypeScript клиента"""
    args = build_parser().parse_args(argv)

    # Проверка на интерактивный режим (нет аргументов)
    if not any(vars(args).values()):
        interactive_menu()
        return

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.init_config:
        config = OpenApiConfig(dirname=args.dirname or "api_client").merge_with_args(args)
        config.save_to_file()
        print("✅ Создан конфиг файл openapi.toml")
        return

    file_config = OpenApiConfig.from_file(search_dir=args.dirname)

    if file_config:
        final_config = _resolve_with_file_config(file_config, args)
    elif args.url:
        final_config = OpenApiConfig(dirname=args.dirname or "api_client").merge_with_args(args)
    else:
        print("❌ Ошибка: Укажите URL или создайте конфиг с --init-config")
        sys.exit(1)

    if not final_config.url:
        print("❌ Ошибка: URL не указан ни в конфиге, ни в аргументах")
        sys.exit(1)

    try:
        if args.dirname and file_config:
            print(f"📁 Генерация в существующую папку: {args.dirname}")
            _generate_client_in_existing(final_config, args.dirname)
        else:
            print(f"📁 Создание новой папки: {final_config.dirname}")
            _generate_client(final_config, ".")
    except Exception as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)


if __name__ == "__main__":
    generate()
