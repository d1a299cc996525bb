"""Nested query-string encoding in the bracket style the API expects.

    {"and": {"category": ["Images", "Videos"]}, "page": 2}
    → and%5Bcategory%5D%5B%5D=Images&and%5Bcategory%5D%5B%5D=Videos&page=2

Pairs are sorted except inside arrays, ``None`` renders as an empty
value and booleans as ``true``/``false``. Empty mappings and lists are
left out.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote_plus


def to_query(params: Mapping[str, Any] | None, namespace: str | None = None) -> str:
    parts = []
    for key, value in (params or {}).items():
        if isinstance(value, (Mapping, list, tuple)) and not value:
            continue
        name = f"{namespace}[{key}]" if namespace else str(key)
        encoded = _encode_value(value, name)
        if encoded:
            parts.append(encoded)

    if namespace is None or "[]" not in namespace:
        parts.sort()
    return "&".join(parts)


def _encode_value(value: Any, name: str) -> str:
    if isinstance(value, Mapping):
        return to_query(value, name)
    if isinstance(value, (list, tuple)):
        prefix = f"{name}[]"
        if not value:
            return _encode_pair(prefix, None)
        return "&".join(part for part in (_encode_value(item, prefix) for item in value) if part)
    return _encode_pair(name, value)


def _encode_pair(name: str, value: Any) -> str:
    return f"{quote_plus(name)}={quote_plus(_to_param(value))}"


def _to_param(value: Any) -> str:
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)
