# src/omni_build/config/config_merge.py
"""Layered config merge.

Used for inline config over file config, and for per-task defaults under
explicit task options.
"""

from collections.abc import Mapping
from typing import Any

from omni_build.utils import is_plain_mapping, to_array


# keys that are replaced as a whole, never merged
REPLACE_IF_TRUTHY_KEYS = frozenset({"entry"})


def merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge `overrides` onto `base` and return a new dict.

    For each override key with a non-None value:
      - missing in base       → copied
      - ``entry``             → override if truthy, else base kept
      - either is a list      → base items then override items
      - both are mappings     → merged recursively
      - otherwise             → override replaces base

    None never overwrites an existing value. Neither input is mutated.
    """
    merged: dict[str, Any] = dict(base)

    for key, value in overrides.items():
        if value is None:
            continue

        existing = merged.get(key)
        if existing is None:
            merged[key] = value
            continue

        if key in REPLACE_IF_TRUTHY_KEYS:
            merged[key] = value or existing
            continue

        if isinstance(existing, (list, tuple)) or isinstance(value, (list, tuple)):
            merged[key] = [*to_array(existing), *to_array(value)]
            continue

        if is_plain_mapping(existing) and is_plain_mapping(value):
            merged[key] = merge(existing, value)
            continue

        merged[key] = value

    return merged
