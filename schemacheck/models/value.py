"""
The generic JSON value model the engine reads.

Values are plain Python data as produced by ``json.loads`` or a pydantic
JSON-mode dump: None, bool, int, float, str, list and str-keyed dict.
"""

from __future__ import annotations

import json
from typing import Any

from schemacheck.models.schema import InstanceType


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_instance_of(instance_type: InstanceType, value: Any) -> bool:
    """Return True when ``value`` has the runtime kind named by ``instance_type``."""
    if instance_type is InstanceType.NULL:
        return value is None
    if instance_type is InstanceType.BOOLEAN:
        return isinstance(value, bool)
    if instance_type is InstanceType.OBJECT:
        return isinstance(value, dict)
    if instance_type is InstanceType.ARRAY:
        return isinstance(value, list)
    if instance_type is InstanceType.NUMBER:
        return is_number(value)
    if instance_type is InstanceType.STRING:
        return isinstance(value, str)
    # integer: whole-number encodings only, floats are never integers
    return isinstance(value, int) and not isinstance(value, bool)


def values_equal(left: Any, right: Any) -> bool:
    """
    Structural equality over JSON values.

    Unlike ``==``, a bool never equals a number and an int never equals a
    float, so ``[1, True, 1.0]`` holds three distinct values.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, int) or isinstance(right, int):
        return isinstance(left, int) and isinstance(right, int) and left == right
    if isinstance(left, list):
        return (
            isinstance(right, list)
            and len(left) == len(right)
            and all(values_equal(a, b) for a, b in zip(left, right))
        )
    if isinstance(left, dict):
        return (
            isinstance(right, dict)
            and left.keys() == right.keys()
            and all(values_equal(item, right[key]) for key, item in left.items())
        )
    return type(left) is type(right) and left == right


def render_value(value: Any) -> str:
    """Compact JSON text for error messages."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
