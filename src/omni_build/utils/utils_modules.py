# src/omni_build/utils/utils_modules.py
"""Locate installed node packages and their executables."""

import os
import shutil
from collections.abc import Iterator
from pathlib import Path

from omni_build.errors import DependencyMissingError


def _iter_node_modules(cwd: Path) -> Iterator[Path]:
    """Yield every ``node_modules`` directory from `cwd` up to the root."""
    current = Path(cwd).resolve()
    while True:
        candidate = current / "node_modules"
        if candidate.is_dir():
            yield candidate
        if current.parent == current:
            return
        current = current.parent


def find_node_package(name: str, cwd: Path) -> Path | None:
    """Return the directory of an installed node package, or None.

    A package counts as installed when ``node_modules/<name>/package.json``
    exists in `cwd` or any parent directory (node's own lookup order).
    """
    for node_modules in _iter_node_modules(cwd):
        pkg_dir = node_modules / name
        if (pkg_dir / "package.json").is_file():
            return pkg_dir
    return None


def find_node_bin(name: str, cwd: Path) -> str | None:
    """Return the executable for `name` from ``node_modules/.bin`` or PATH."""
    suffixes = (".cmd", ".exe", "") if os.name == "nt" else ("",)
    for node_modules in _iter_node_modules(cwd):
        for suffix in suffixes:
            candidate = node_modules / ".bin" / f"{name}{suffix}"
            if candidate.is_file():
                return str(candidate)
    return shutil.which(name)


def ensure_node_package(name: str, feature: str, cwd: Path) -> Path:
    """Return the package directory or raise DependencyMissingError."""
    pkg_dir = find_node_package(name, cwd)
    if pkg_dir is None:
        raise DependencyMissingError(name, feature)
    return pkg_dir
