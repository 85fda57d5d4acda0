"""Нормализация документа: разрыв циклов и удаление висячих ссылок"""

import logging
from typing import Any, Dict, Optional, Set
from urllib.parse import urldefrag, urljoin

from ...exceptions import UnresolvedReferenceError
from .resolver import get_by_pointer

logger = logging.getLogger(__name__)

RECURSIVE_TS_TYPE = "/** recursive */ any"


def recursive_marker() -> Dict[str, Any]:
    """Лист-заглушка на месте рекурсивной схемы"""
    return {"tsType": RECURSIVE_TS_TYPE}


def _children(obj: Any):
    if isinstance(obj, dict):
        return list(obj.items())
    if isinstance(obj, list):
        return list(enumerate(obj))
    return []


def resolve_circular(obj: Any, _stack: Optional[Set[int]] = None, _parent_key: Any = None) -> Any:
    """
    Разрывает циклы графа объектов на месте.

    Обход в глубину со стеком id() объектов текущей ветки. Если значение
    уже есть в стеке, ребро заменяется:

    * под ключом `items` - маркером рекурсии;
    * в карте `properties` - все свойства этого уровня маркерами;
    * в остальных случаях - пустым объектом.

    Сравнение только по идентичности: одинаковые по содержимому, но разные
    объекты циклом не считаются.
    """
    stack = _stack if _stack is not None else {id(obj)}

    for key, value in _children(obj):
        if not isinstance(value, (dict, list)):
            continue

        if id(value) in stack:
            logger.debug("Разорван цикл по ключу %r", key)

            if key == "items":
                obj[key] = recursive_marker()
            elif key == "properties" and isinstance(value, dict):
                obj[key] = {name: recursive_marker() for name in value}
            elif _parent_key == "properties" and isinstance(obj, dict):
                for name in obj:
                    obj[name] = recursive_marker()
                break
            else:
                obj[key] = {}
            continue

        stack.add(id(value))
        resolve_circular(value, stack, key)
        stack.discard(id(value))

    return obj


def fix_missing_ref(obj: Any, root: Any = None) -> Any:
    """
    Удаляет на месте внутренние $ref, которые никуда не указывают.

    Нужен для Swagger 2.0 перед конвертацией в OpenAPI 3: конвертер не
    переносит висячие ссылки. Внутрь узлов со ссылками обход не заходит.
    """
    root = obj if root is None else root

    for _, value in _children(obj):
        if isinstance(value, dict) and "$ref" in value:
            ref = value["$ref"]
            if isinstance(ref, str) and ref.startswith("#"):
                try:
                    target = get_by_pointer(root, ref)
                except UnresolvedReferenceError:
                    target = None

                if target is None:
                    logger.debug("Удалена висячая ссылка %s", ref)
                    del value["$ref"]
                    value.pop("originalRef", None)
        elif isinstance(value, (dict, list)):
            fix_missing_ref(value, root)

    return obj


def expand_refs(
    obj: Any,
    resolver,
    _cache: Optional[Dict[str, Any]] = None,
    _base: str = "",
) -> Any:
    """
    Разворачивает $ref через резолвер для ленивого режима.

    Одна и та же ссылка превращается в один и тот же объект, поэтому
    рекурсивные схемы дают цикл, который потом разрывает `resolve_circular`.
    Ссылки внутри внешнего файла считаются от этого файла.
    Неразрешимые ссылки остаются как есть.
    """
    cache = {} if _cache is None else _cache

    if isinstance(obj, list):
        return [expand_refs(item, resolver, cache, _base) for item in obj]

    if not isinstance(obj, dict):
        return obj

    ref = obj.get("$ref")
    if isinstance(ref, str):
        if _base:
            ref = urljoin(_base, ref)
        if ref in cache:
            return cache[ref]

        target: Dict[str, Any] = {}
        cache[ref] = target
        try:
            resolved = resolver.get(ref)
        except UnresolvedReferenceError:
            logger.debug("Ссылка %s не разрешена", ref)
            target.update(obj)
            target["$ref"] = ref
            return target

        base = _base
        if not ref.startswith("#"):
            base = urldefrag(urljoin(getattr(resolver, "base_uri", ""), ref))[0]

        expanded = expand_refs(resolved, resolver, cache, base)
        if isinstance(expanded, dict):
            target.update(expanded)
            return target
        cache[ref] = expanded
        return expanded

    return {key: expand_refs(value, resolver, cache, _base) for key, value in obj.items()}
