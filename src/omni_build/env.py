# src/omni_build/env.py
"""Project the resolved config into the environment seen by built code
and by the launched application."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .config.config_types import DevArgs, ResolvedConfig, RunMode
from .constants import DEFAULT_RENDERER_ENTRY
from .meta import PROGRAM_ENV


def _set_env(env: dict[str, str], key: str, value: Any) -> None:
    # empty values are never projected
    if value is None or value == "" or value is False:
        return
    env[key] = str(value)


def _set_indexed(env: dict[str, str], key: str, values: Sequence[Any]) -> None:
    """``KEY``, ``KEY_2``, ``KEY_3``... plus ``KEY_COUNT``."""
    _set_env(env, f"{key}_COUNT", len(values))
    for i, value in enumerate(values):
        _set_env(env, key if i == 0 else f"{key}_{i + 1}", value)


def create_env(config: ResolvedConfig, mode: RunMode) -> dict[str, str]:
    """Return the flat environment for `mode` (production or development).

    Debug env overrides are applied last and win over computed values.
    """
    env: dict[str, str] = {
        f"{PROGRAM_ENV}_APP_TYPE": config.type,
        f"{PROGRAM_ENV}_MODE": mode,
        "NODE_ENV": mode,
        "DEBUG": "true" if config.debug_enabled else "false",
    }

    if config.is_electron:
        renderer: dict[str, Any] = dict(config.renderer or {})
        prefix = f"{PROGRAM_ENV}_RENDERER"

        _set_env(env, f"{prefix}_CWD", renderer.get("cwd"))
        _set_env(env, f"{prefix}_OUTDIR", renderer.get("out_dir"))
        _set_env(env, f"{prefix}_ENTRY", renderer.get("entry"))

        url = renderer.get("url")
        if isinstance(url, (list, tuple)):
            if url:
                _set_indexed(env, f"{prefix}_URL", url)
        else:
            _set_env(env, f"{prefix}_URL", url)

        if renderer.get("dev_url"):
            _set_env(env, f"{prefix}_DEV_URL", renderer["dev_url"])
        elif mode == "development":
            base = Path(renderer.get("cwd") or config.cwd)
            target = base / (renderer.get("entry") or DEFAULT_RENDERER_ENTRY)
            _set_env(env, f"{prefix}_DEV_URL", target.resolve().as_uri())

        assets = renderer.get("assets") or []
        if assets:
            _set_indexed(env, f"{prefix}_ASSETS", assets)

        if renderer.get("cwd") and renderer.get("out_dir") and renderer.get("entry"):
            _set_env(
                env,
                f"{prefix}_FILE",
                str(Path(renderer["out_dir"]) / renderer["entry"]),
            )

    if config.debug_enabled:
        for key, value in (config.debug_config.get("env") or {}).items():
            _set_env(env, key, value)

    return env


def _split_args(args: Any) -> DevArgs:
    if isinstance(args, (list, tuple)):
        return DevArgs(node=list(args), electron=list(args))
    args = args or {}
    return DevArgs(
        node=list(args.get("node") or []),
        electron=list(args.get("electron") or []),
    )


def create_args(config: ResolvedConfig) -> DevArgs:
    """Split launch arguments per runtime, appending debug args if enabled."""
    result = _split_args(config.args)

    debug_args = config.debug_config.get("args")
    if config.debug_enabled and debug_args:
        extra = _split_args(debug_args)
        result["node"].extend(extra["node"])
        result["electron"].extend(extra["electron"])

    return result
