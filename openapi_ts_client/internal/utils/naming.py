"""Утилиты для имен идентификаторов TypeScript"""

import re

_WORDS_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def upper_first(value: str) -> str:
    """
    Первая буква в верхнем регистре, остальное без изменений.

    Examples:
        >>> upper_first("user_id")
        'User_id'
    """
    return value[:1].upper() + value[1:]


def camel_case(value: str) -> str:
    """
    camelCase из произвольного имени параметра.

    Разбивает строку на слова по разделителям и смене регистра,
    первое слово в нижнем регистре, остальные с заглавной буквы.

    Examples:
        >>> camel_case("post_id")
        'postId'
        >>> camel_case("X-Request-ID")
        'xRequestId'
        >>> camel_case("userID")
        'userId'
    """
    words = _WORDS_RE.findall(value)
    if not words:
        return value

    return words[0].lower() + "".join(upper_first(w.lower()) for w in words[1:])


def to_safe_string(value: str) -> str:
    """
    Безопасное имя типа из title схемы.

    Повторяет правила json-schema-to-typescript: недопустимые символы
    становятся границами слов, `_x` превращается в `X`, первая буква
    заглавная.

    Examples:
        >>> to_safe_string("user profile")
        'UserProfile'
        >>> to_safe_string("Body_Items")
        'Body_Items'
        >>> to_safe_string("ResponseItem$")
        'ResponseItem$'
    """
    result = re.sub(r"(^\s*[^a-zA-Z_$])|([^a-zA-Z_$\d])", " ", value)
    result = re.sub(r"^_[a-z]", lambda m: m.group(0).upper(), result)
    result = re.sub(r"_[a-z]", lambda m: m.group(0)[1:].upper(), result)
    result = re.sub(r"([\d$]+[a-zA-Z])", lambda m: m.group(0).upper(), result)
    result = re.sub(r"\s+([a-zA-Z])", lambda m: m.group(0).upper().strip(), result)
    result = re.sub(r"\s", "", result)
    return upper_first(result)


def is_identifier(value: str) -> bool:
    return bool(_IDENTIFIER_RE.match(value))


def property_key(name: str) -> str:
    """Ключ свойства: как есть для идентификатора, иначе в кавычках"""
    if is_identifier(name):
        return name
    return "'" + name.replace("\\", "\\\\").replace("'", "\\'") + "'"
