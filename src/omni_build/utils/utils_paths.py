# src/omni_build/utils/utils_paths.py


import os
import posixpath
from pathlib import Path, PurePath


def resolve_path(path: str | Path, cwd: str | Path | None = None) -> Path:
    """Return `path` as an absolute path, anchoring relative paths at `cwd`."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    base = Path(cwd) if cwd is not None else Path.cwd()
    return Path(os.path.normpath(base / p))


def normalize_path(path: str | None) -> str | None:
    """Normalize a relative path to posix form (``a\\b/../c`` → ``a/c``)."""
    if not path:
        return path
    return posixpath.normpath(path.replace("\\", "/"))


def is_ancestor_or_equal(candidate: str | Path, target: str | Path) -> bool:
    """True when `target` is `candidate` itself or lives somewhere below it."""
    candidate_path = Path(os.path.normpath(candidate))
    target_path = Path(os.path.normpath(target))
    return target_path == candidate_path or target_path.is_relative_to(
        candidate_path
    )


def _split_components(path: str) -> list[str]:
    normalized = os.path.normpath(path.replace("\\", "/"))
    return [part for part in PurePath(normalized).parts if part not in ("", ".")]


def find_longest_common_prefix_path(paths: list[str]) -> tuple[str, int]:
    """Find the longest run of leading path components shared by all paths.

    Returns the joined prefix and the number of components in it. Fewer than
    two paths, or no shared first component, gives ``("", 0)``.

    Example:
        ["a/b/c.txt", "a/b/d.txt"] → ("a/b", 2)
    """
    if len(paths) <= 1:
        return "", 0

    components = [_split_components(p) for p in paths]
    first, others = components[0], components[1:]

    common: list[str] = []
    for i, part in enumerate(first):
        if all(i < len(other) and other[i] == part for other in others):
            common.append(part)
        else:
            break

    if not common:
        return "", 0
    return os.path.join(*common), len(common)


def remove_prefix_folders(relative_path: str, levels_to_remove: int) -> str:
    """Drop the first `levels_to_remove` components from a relative path.

    ``remove_prefix_folders("a/b/c.txt", 2)`` → ``"c.txt"``. Non-positive
    levels return the path unchanged.
    """
    if levels_to_remove <= 0:
        return relative_path

    remaining = _split_components(relative_path)[levels_to_remove:]
    if not remaining:
        return "."
    return os.path.join(*remaining)


def ensure_path_exists(target: str | Path, *, is_file: bool = False) -> Path:
    """Create the directory for `target` (its parent when `is_file`).

    Returns the directory that now exists.
    """
    target_path = Path(target)
    dir_to_create = target_path.parent if is_file else target_path
    if str(dir_to_create) in ("", "."):
        return dir_to_create

    dir_to_create.mkdir(parents=True, exist_ok=True)
    return dir_to_create


def shorten_path_for_display(path: Path | str, *, cwd: Path | None = None) -> str:
    """Return `path` relative to `cwd` when it lives below it, else absolute."""
    path_obj = Path(path).resolve()
    if cwd:
        try:
            rel = path_obj.relative_to(Path(cwd).resolve())
        except ValueError:
            return str(path_obj)
        return str(rel) or "."
    return str(path_obj)
