# src/omni_build/utils/utils_types.py


import inspect
from collections.abc import Mapping
from typing import Any, TypeVar, cast


T = TypeVar("T")


def cast_hint(_typ: type[T], value: Any) -> T:
    """Explicit cast that documents intent but is purely for type hinting.

    A drop-in replacement for `typing.cast`, meant for places where the
    narrowing is intentional. Performs *no runtime checks*.
    """
    return cast("T", value)


def to_array(value: Any, default: Any = None) -> list[Any]:
    """Wrap a scalar into a list; lists pass through, None becomes empty."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if value is None:
        return [default] if default else []
    return [value]


def is_plain_mapping(value: Any) -> bool:
    """True for dict-like key/value data (not strings, lists, or objects)."""
    return isinstance(value, Mapping)


async def maybe_await(value: Any) -> Any:
    """Await `value` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
