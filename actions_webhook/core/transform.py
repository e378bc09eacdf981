"""Deep key renaming between snake_case (V1 wire) and camelCase (V2 wire)."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable

_UPPER = re.compile(r"[A-Z]")
_UNDERSCORE_LOWER = re.compile(r"_([a-z])")


def camel_to_snake(key: str) -> str:
    return _UPPER.sub(lambda m: "_" + m.group(0).lower(), key)


def snake_to_camel(key: str) -> str:
    return _UNDERSCORE_LOWER.sub(lambda m: m.group(1).upper(), key)


def transform_keys(value: Any, rename: Callable[[str], str]) -> Any:
    """Return a copy of *value* with every mapping key passed through *rename*.

    Lists and tuples are walked element by element; everything else (strings,
    numbers, ``None``, callables, model instances) is returned as-is. The input
    is never mutated.
    """
    if isinstance(value, Mapping):
        return {
            (rename(k) if isinstance(k, str) else k): transform_keys(v, rename)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [transform_keys(item, rename) for item in value]
    return value


def to_snake_case(value: Any) -> Any:
    return transform_keys(value, camel_to_snake)


def to_camel_case(value: Any) -> Any:
    return transform_keys(value, snake_to_camel)
