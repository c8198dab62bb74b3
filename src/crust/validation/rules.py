"""Field rules for request input.

A ``Field`` describes one input field; ``check`` returns an error
message for a value that breaks the rule, or ``None``::

    check("price", Field(type="number", min=50), {"price": 49})
    # 'The field "price" is invalid'

Type names follow JSON: ``string``, ``number``, ``boolean``, ``object``
and ``array``. Booleans are not numbers. ``min`` and ``max`` are
inclusive; they compare numbers by value and strings by length.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


@dataclass(frozen=True, slots=True)
class Field:
    """Rule set for one input field."""

    required: bool = False
    type: str | None = None
    match: str | re.Pattern[str] | None = None
    min: float | None = None
    max: float | None = None
    message: str | None = None


def _is_type(value: Any, type_name: str) -> bool:
    if type_name == "number" and isinstance(value, bool):
        return False
    expected = _JSON_TYPES.get(type_name)
    if expected is None:
        msg = f"Unknown field type {type_name!r}"
        raise ValueError(msg)
    return isinstance(value, expected)


def _measure(value: Any) -> float | None:
    """The quantity min/max compare: a number's value or a string's length."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return len(value)
    return None


def _matches(pattern: str | re.Pattern[str], value: Any) -> bool:
    if not isinstance(value, str):
        value = str(value)
    return re.search(pattern, value) is not None


def check(name: str, field: Field, data: Mapping[str, Any]) -> str | None:
    """Return the error message for field *name* in *data*, or None."""
    invalid = field.message or f'The field "{name}" is invalid'

    if name not in data:
        if field.required:
            return field.message or f'The field "{name}" is required'
        return None

    value = data[name]

    if field.type is not None and not _is_type(value, field.type):
        return invalid

    if field.match is not None and not _matches(field.match, value):
        return invalid

    if field.min is not None:
        size = _measure(value)
        if size is None or size < field.min:
            return invalid

    if field.max is not None:
        size = _measure(value)
        if size is None or size > field.max:
            return invalid

    return None
