"""Разрешение $ref ссылок документа на базе jsonref"""

import logging
from typing import Any, Dict, Optional, Set
from urllib.parse import unquote, urldefrag, urljoin

import jsonref

from ...exceptions import DocumentResolveError, UnresolvedReferenceError

logger = logging.getLogger(__name__)

DANGLING_REF_KEY = "x-dangling-ref"


def get_by_pointer(document: Any, ref: str) -> Any:
    """
    Значение по внутренней ссылке вида `#/components/schemas/Pet`.

    Экранирование JSON Pointer (`~1` -> `/`, `~0` -> `~`) и %-кодирование URI учитываются.

    Raises:
        UnresolvedReferenceError: если какого-то сегмента нет в документе
    """
    pointer = unquote(ref[1:] if ref.startswith("#") else ref)
    current = document

    for segment in filter(None, pointer.split("/")):
        segment = segment.replace("~1", "/").replace("~0", "~")

        if isinstance(current, dict):
            if segment not in current:
                raise UnresolvedReferenceError(ref)
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                raise UnresolvedReferenceError(ref)
        else:
            raise UnresolvedReferenceError(ref)

    return current


def _is_dangling(document: Any, ref: str) -> bool:
    """Внутренняя ссылка, путь которой обрывается до первого $ref по дороге"""
    current = document
    for segment in filter(None, ref[1:].split("/")):
        if isinstance(current, dict) and "$ref" in current:
            return False
        try:
            current = get_by_pointer(current, segment)
        except UnresolvedReferenceError:
            return True
    return False


def hide_dangling_refs(obj: Any, root: Any = None) -> Any:
    """
    Прячет на месте висячие внутренние ссылки под ключ DANGLING_REF_KEY.

    jsonref падает на таких ссылках, а неразрешимые параметры должны
    отбрасываться при извлечении операций, а не ронять разрешение.
    """
    root = obj if root is None else root

    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str) and ref.startswith("#") and _is_dangling(root, ref):
            logger.debug("Висячая ссылка %s оставлена без разрешения", ref)
            obj[DANGLING_REF_KEY] = obj.pop("$ref")
        values = obj.values()
    elif isinstance(obj, list):
        values = obj
    else:
        return obj

    for value in values:
        hide_dangling_refs(value, root)
    return obj


def restore_dangling_refs(obj: Any, _seen: Optional[Set[int]] = None) -> Any:
    """Возвращает спрятанные ссылки на место, граф может содержать циклы"""
    seen = set() if _seen is None else _seen
    if id(obj) in seen or not isinstance(obj, (dict, list)):
        return obj
    seen.add(id(obj))

    if isinstance(obj, dict):
        if DANGLING_REF_KEY in obj:
            obj["$ref"] = obj.pop(DANGLING_REF_KEY)
        values = list(obj.values())
    else:
        values = obj

    for value in values:
        restore_dangling_refs(value, seen)
    return obj


class JsonRefResolver:
    """
    Резолвер ссылок документа.

    В полном режиме все ссылки заменяются объектами через
    `jsonref.replace_refs`, рекурсивные схемы становятся циклами объектов.
    В ленивом режиме документ остается со ссылками, они разрешаются
    по запросу через `exists`/`get`.
    """

    def __init__(self, base_uri: str = "", lazy: bool = False):
        self.base_uri = base_uri
        self.lazy = lazy
        self._root: Optional[Dict[str, Any]] = None
        self._remote: Dict[str, Any] = {}

    def resolve(self, document: Dict[str, Any]) -> Dict[str, Any]:
        if self.lazy:
            self._root = document
            return document

        hide_dangling_refs(document)
        try:
            resolved = jsonref.replace_refs(
                document,
                base_uri=self.base_uri,
                proxies=False,
                lazy_load=False,
            )
        except jsonref.JsonRefError as e:
            raise DocumentResolveError(
                getattr(e, "message", str(e)), getattr(e, "reference", None)
            ) from e
        finally:
            restore_dangling_refs(document)

        restore_dangling_refs(resolved)

        logger.debug("Документ полностью разрешен (base_uri=%r)", self.base_uri)
        self._root = resolved
        return resolved

    def exists(self, ref: str) -> bool:
        try:
            self.get(ref)
        except UnresolvedReferenceError:
            return False
        return True

    def get(self, ref: str) -> Any:
        if self._root is None:
            raise DocumentResolveError("Резолвер не инициализирован", ref)

        if ref.startswith("#"):
            return get_by_pointer(self._root, ref)

        url, fragment = urldefrag(urljoin(self.base_uri, ref))
        if url not in self._remote:
            try:
                self._remote[url] = jsonref.jsonloader(url)
            except (OSError, ValueError) as e:
                raise UnresolvedReferenceError(ref) from e

        return get_by_pointer(self._remote[url], fragment)
