# tests/0_independant/test_public_exports.py
"""Every name a package re-exports must resolve on that package."""

import importlib

import pytest


@pytest.mark.parametrize(
    "package",
    ["omni_build", "omni_build.config", "omni_build.utils", "tests.utils"],
)
def test_all_names_resolve(package: str) -> None:
    mod = importlib.import_module(package)

    missing = [name for name in mod.__all__ if not hasattr(mod, name)]

    assert missing == []


def test_utils_reexports_loadable_suffixes() -> None:
    import omni_build.utils as mod_utils  # noqa: PLC0415
    import omni_build.utils.utils_files as mod_utils_files  # noqa: PLC0415

    assert mod_utils.LOADABLE_SUFFIXES is mod_utils_files.LOADABLE_SUFFIXES
    assert ".yml" in mod_utils.LOADABLE_SUFFIXES
