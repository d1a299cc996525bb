"""Small helpers shared by the filter codec, the search and the resources."""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any


def as_list(value: Any) -> list:
    """Return ``value`` as a list no matter what (None becomes [])."""
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if value is None:
        return []
    return [value]


def is_blank(value: Any) -> bool:
    """True for None, False, whitespace-only strings and empty collections."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def is_present(value: Any) -> bool:
    return not is_blank(value)


def to_int(value: Any, default: int = 0) -> int:
    """Lenient integer coercion: leading digits of strings, else ``default``."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        sign = 1
        if text[:1] in ("-", "+"):
            sign = -1 if text[0] == "-" else 1
            text = text[1:]
        digits = ""
        for char in text:
            if not char.isdigit():
                break
            digits += char
        return sign * int(digits) if digits else default
    return default


def parse_time(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp; None when it can't be parsed."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def stringify_keys(value: Any) -> dict[str, Any]:
    """Copy a mapping with every top-level key coerced to ``str``.

    Anything that is not a mapping becomes an empty dict.
    """
    if not isinstance(value, Mapping):
        return {}
    return {str(key): item for key, item in value.items()}


def deep_stringify_keys(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): deep_stringify_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [deep_stringify_keys(item) for item in value]
    return value


# ── Deep merge ──────────────────────────────────────────────────────


def deep_merge(left: Any, right: Any) -> dict[str, Any]:
    """Deep merge two mappings into a new dict.

    See ``_deep_merge_into`` for the rules.
    """
    return _deep_merge_into({}, stringify_keys(left), stringify_keys(right))


def deep_merge_in_place(left: dict[str, Any], right: Any) -> dict[str, Any]:
    """Deep merge ``right`` into ``left``, mutating and returning ``left``."""
    return _deep_merge_into(left, dict(left), stringify_keys(right))


def _deep_merge_into(
    destination: dict[str, Any],
    left: Mapping[str, Any],
    right: Mapping[str, Any],
) -> dict[str, Any]:
    """Merge ``left`` and ``right`` into ``destination``.

    For a given key:
      * only one side has a value, or both values are equal: use it;
      * either value is not a mapping: concatenate both as lists;
      * otherwise recurse.
    Keys that only ``right`` has are copied through unchanged.
    """
    for name, left_value in left.items():
        right_value = right.get(name)
        if right_value is None or left_value == right_value:
            destination[name] = left_value
        elif not isinstance(left_value, Mapping) or not isinstance(right_value, Mapping):
            destination[name] = as_list(left_value) + as_list(right_value)
        else:
            destination[name] = _deep_merge_into(
                {}, stringify_keys(left_value), stringify_keys(right_value)
            )

    for name, right_value in right.items():
        if name not in left:
            destination[name] = right_value
    return destination
