# tests/utils/patch_everywhere.py

import sys
from collections.abc import Callable
from pathlib import Path
from types import ModuleType
from typing import Any

import pytest
from apathetic_logging import makeSafeTrace

import omni_build.meta as mod_meta
from omni_build.utils import shorten_path_for_display


TEST_TRACE = makeSafeTrace("🩹")

_PATCH_ROOT = Path(__file__).resolve().parents[2]


def _short_path(path: str | None) -> str:
    if not path:
        return "n/a"
    return shorten_path_for_display(Path(path), cwd=_PATCH_ROOT)


def patch_everywhere(
    mp: pytest.MonkeyPatch,
    mod_env: ModuleType | Any,
    func_name: str,
    replacement_func: Callable[..., object],
) -> None:
    """Replace a function everywhere it was imported.

    Walks sys.modules once and patches:
      • the defining module
      • any other package module that imported the same function object
    """
    # --- Sanity checks ---
    func = getattr(mod_env, func_name, None)
    if func is None:
        xmsg = f"Could not find {func_name!r} on {mod_env!r}"
        raise TypeError(xmsg)

    mod_name = getattr(mod_env, "__name__", type(mod_env).__name__)

    # Patch in the defining module
    mp.setattr(mod_env, func_name, replacement_func)
    TEST_TRACE(f"Patched {mod_name}.{func_name}")

    package_prefix = mod_meta.PROGRAM_PACKAGE
    for m in list(sys.modules.values()):
        if m is mod_env or not isinstance(m, ModuleType):
            continue

        # skip irrelevant stdlib or third-party modules for performance
        name = getattr(m, "__name__", "")
        if not name.startswith(package_prefix):
            continue

        did_patch = False
        for k, v in list(m.__dict__.items()):
            if v is func:
                mp.setattr(m, k, replacement_func)
                did_patch = True

        if did_patch:
            path = getattr(m, "__file__", "") or ""
            TEST_TRACE(f"  also patched {name} (path={_short_path(path)})")
