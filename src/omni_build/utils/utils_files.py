# src/omni_build/utils/utils_files.py


import json
import re
import sys
import traceback
from pathlib import Path
from typing import Any, cast

import yaml

from omni_build.logs import getAppLogger


JSON_SUFFIXES = (".json", ".jsonc")
YAML_SUFFIXES = (".yml", ".yaml")
PYTHON_SUFFIXES = (".py",)
LOADABLE_SUFFIXES = JSON_SUFFIXES + YAML_SUFFIXES + PYTHON_SUFFIXES

# variable a Python data file must define
PYTHON_EXPORT_NAME = "config"


def _strip_jsonc_comments(text: str) -> str:  # noqa: PLR0912
    """Strip comments from JSONC while preserving string contents.

    Handles //, #, and /* */ comments without modifying content inside strings.
    """
    result: list[str] = []
    in_string = False
    in_escape = False
    i = 0
    while i < len(text):
        ch = text[i]

        if in_escape:
            result.append(ch)
            in_escape = False
            i += 1
            continue

        if ch == "\\" and in_string:
            result.append(ch)
            in_escape = True
            i += 1
            continue

        if ch == '"':
            in_string = not in_string
            result.append(ch)
            i += 1
            continue

        if in_string:
            result.append(ch)
            i += 1
            continue

        # line comments: // or #
        if (ch == "/" and text[i + 1 : i + 2] == "/") or ch == "#":
            while i < len(text) and text[i] != "\n":
                i += 1
            continue

        # block comments
        if ch == "/" and text[i + 1 : i + 2] == "*":
            end = text.find("*/", i + 2)
            i = len(text) if end == -1 else end + 2
            continue

        result.append(ch)
        i += 1

    return "".join(result)


def load_jsonc(path: Path) -> dict[str, Any] | list[Any] | None:
    """Load JSONC (JSON with comments and trailing commas)."""
    logger = getAppLogger()
    logger.trace(f"[load_jsonc] Loading from {path}")

    if not path.exists():
        xmsg = f"JSONC file not found: {path}"
        raise FileNotFoundError(xmsg)

    if not path.is_file():
        xmsg = f"Expected a file: {path}"
        raise ValueError(xmsg)

    text = path.read_text(encoding="utf-8")
    text = _strip_jsonc_comments(text)

    # Remove trailing commas before } or ]
    text = re.sub(r",(?=\s*[}\]])", "", text)
    text = text.strip()

    if not text:
        # Empty or only comments → interpret as "no config"
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = (
            f"Invalid JSONC syntax in {path}:"
            f" {e.msg} (line {e.lineno}, column {e.colno})"
        )
        raise ValueError(xmsg) from e

    if not isinstance(data, (dict, list)):
        xmsg = f"Invalid JSONC root type: {type(data).__name__}"
        raise ValueError(xmsg)  # noqa: TRY004

    return cast("dict[str, Any] | list[Any]", data)


def load_yaml(path: Path) -> Any:
    """Load a YAML document (electron-builder.yml and friends)."""
    getAppLogger().trace(f"[load_yaml] Loading from {path}")
    try:
        with path.open(encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except yaml.YAMLError as e:
        xmsg = f"Invalid YAML syntax in {path}: {e}"
        raise ValueError(xmsg) from e


def load_python_export(path: Path, name: str = PYTHON_EXPORT_NAME) -> Any:
    """Execute a Python file and return the value bound to `name`.

    The value is returned untouched, so callables (config factories,
    hooks) survive.

    Raises:
        RuntimeError: the file raised while executing.
        ValueError: the file did not define `name`.
    """
    logger = getAppLogger()
    file_globals: dict[str, Any] = {"__file__": str(path), "__name__": path.stem}

    # Allow local imports in Python configs (e.g. from helpers import foo)
    parent_dir = str(path.parent)
    added_to_sys_path = parent_dir not in sys.path
    if added_to_sys_path:
        sys.path.insert(0, parent_dir)

    try:
        source = path.read_text(encoding="utf-8")
        exec(compile(source, str(path), "exec"), file_globals)  # noqa: S102
        logger.trace(f"[EXEC] globals after exec: {list(file_globals.keys())}")
    except Exception as e:
        tb = traceback.format_exc()
        xmsg = (
            f"Error while executing Python file: {path.name}\n"
            f"{type(e).__name__}: {e}\n{tb}"
        )
        raise RuntimeError(xmsg) from e
    finally:
        if added_to_sys_path and sys.path[0] == parent_dir:
            sys.path.pop(0)

    if name not in file_globals:
        xmsg = f"{path.name} did not define `{name}`"
        raise ValueError(xmsg)
    return file_globals[name]


def load_data_file(path: Path) -> Any:
    """Load a JSON/JSONC, YAML or Python data file by suffix."""
    suffix = path.suffix.lower()
    if suffix in PYTHON_SUFFIXES:
        return load_python_export(path)
    if suffix in YAML_SUFFIXES:
        return load_yaml(path)
    return load_jsonc(path)


def remove_path_in_error_message(inner_msg: str, path: Path) -> str:
    """Remove redundant file path mentions from error messages.

    Example:
        "Invalid JSONC syntax in /abs/path/config.jsonc: Expecting value"
        → "Invalid JSONC syntax: Expecting value"
    """
    clean_msg = inner_msg
    for pattern in (f"in {path}", f"in {path.name}", str(path), path.name):
        clean_msg = clean_msg.replace(pattern, "").strip(": ").strip()

    clean_msg = re.sub(r"\s{2,}", " ", clean_msg)
    return re.sub(r"\s*:\s*", ": ", clean_msg)


def plural(obj: Any) -> str:
    """Return 's' if obj represents a plural count."""
    count = obj if isinstance(obj, (int, float)) else len(obj)
    return "" if count == 1 else "s"
