# src/omni_build/config/config_loader.py


from collections.abc import Mapping
from pathlib import Path
from typing import Any

from omni_build.constants import MANIFEST_FILE
from omni_build.errors import ConfigError
from omni_build.logs import getAppLogger
from omni_build.meta import PROGRAM_CONFIG
from omni_build.utils import (
    load_jsonc,
    load_python_export,
    remove_path_in_error_message,
    resolve_path,
)

from .config_types import ConfigExport, FactoryExport, LoadedConfig, StaticExport


# preferred first when several exist in the same directory
CONFIG_CANDIDATES = (
    f"{PROGRAM_CONFIG}.py",
    f"{PROGRAM_CONFIG}.jsonc",
    f"{PROGRAM_CONFIG}.json",
)


def _walk_up(cwd: Path) -> list[Path]:
    current = Path(cwd).resolve()
    chain = [current]
    while current.parent != current:
        current = current.parent
        chain.append(current)
    return chain


def find_config(
    config_file: str | None,
    cwd: Path,
    *,
    missing_level: str = "debug",
) -> Path | None:
    """Locate a configuration file.

    Search order:
      1. Explicit path (``--config``), resolved against `cwd`
      2. Default candidates in `cwd`, then each parent directory:
         omni.build.py, omni.build.jsonc, omni.build.json

    Returns the first matching path, or None if no config was found.
    """
    logger = getAppLogger()

    # --- 1. Explicit config path ---
    if config_file:
        config = resolve_path(config_file, cwd)
        logger.trace(f"[find_config] Checking explicit path: {config}")
        if not config.exists():
            xmsg = f"Specified config file not found: {config}"
            raise ConfigError(xmsg)
        if config.is_dir():
            xmsg = f"Specified config path is a directory, not a file: {config}"
            raise ConfigError(xmsg)
        return config

    # --- 2. Default candidate files (closest to cwd wins) ---
    for directory in _walk_up(cwd):
        found = [directory / n for n in CONFIG_CANDIDATES if (directory / n).exists()]
        if not found:
            continue
        if len(found) > 1:
            names = ", ".join(p.name for p in found)
            logger.warning(
                "Multiple config files detected (%s); using %s.",
                names,
                found[0].name,
            )
        return found[0]

    logger.logDynamic(missing_level, f"No config file found in {cwd} or parents")
    return None


def _to_export(raw: Any, config_path: Path) -> ConfigExport:
    if callable(raw):
        return FactoryExport(raw)
    if raw is None:
        return StaticExport({})
    if not isinstance(raw, Mapping):
        xmsg = (
            f"config in {config_path.name} must be a dict or a function"
            f", not {type(raw).__name__}"
        )
        raise ConfigError(xmsg)
    return StaticExport(raw)


def load_config(config_path: Path) -> LoadedConfig:
    """Load configuration data from a file.

    Supports:
      - Python configs: .py files defining `config` as a dict or a factory
        taking the inline config (sync or async)
      - JSON/JSONC configs: .json, .jsonc files
    """
    logger = getAppLogger()
    logger.trace(f"[load_config] Loading from {config_path} ({config_path.suffix})")

    if config_path.suffix == ".py":
        try:
            raw = load_python_export(config_path)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        return LoadedConfig(export=_to_export(raw, config_path), source=config_path)

    try:
        raw = load_jsonc(config_path)
    except ValueError as e:
        clean_msg = remove_path_in_error_message(str(e), config_path)
        xmsg = (
            f"Error while loading configuration file '{config_path.name}': {clean_msg}"
        )
        raise ConfigError(xmsg) from e
    return LoadedConfig(export=_to_export(raw, config_path), source=config_path)


def find_and_load_config(
    config_file: str | bool | None,
    cwd: Path,
) -> LoadedConfig | None:
    """Find and load the project config unless loading is disabled (False)."""
    if config_file is False:
        getAppLogger().debug("Config file loading disabled.")
        return None

    explicit = config_file if isinstance(config_file, str) else None
    config_path = find_config(explicit, cwd)
    if config_path is None:
        return None
    return load_config(config_path)


# --------------------------------------------------------------------------- #
# Project manifest (package.json)
# --------------------------------------------------------------------------- #


def find_manifest(cwd: Path) -> Path | None:
    """Return the nearest package.json from `cwd` upward."""
    for directory in _walk_up(cwd):
        candidate = directory / MANIFEST_FILE
        if candidate.is_file():
            return candidate
    return None


def read_manifest(manifest_path: Path) -> dict[str, Any]:
    try:
        data = load_jsonc(manifest_path)
    except ValueError as e:
        xmsg = f"Could not parse {manifest_path}: {e}"
        raise ConfigError(xmsg) from e
    if not isinstance(data, dict):
        xmsg = f"{manifest_path} must contain a JSON object"
        raise ConfigError(xmsg)
    return data


def load_manifest(cwd: Path) -> tuple[Path, dict[str, Any]] | None:
    """Find and read the nearest package.json, or None when there is none."""
    manifest_path = find_manifest(cwd)
    if manifest_path is None:
        return None
    return manifest_path, read_manifest(manifest_path)
