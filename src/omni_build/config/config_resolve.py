# src/omni_build/config/config_resolve.py


import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from omni_build.constants import (
    DEFAULT_APP_TYPE,
    DEFAULT_OUT_DIR,
    DEFAULT_PACKAGER_OUT_DIR,
    DEFAULT_RENDERER_ENTRY,
    DEFAULT_RENDERER_OUT_DIR,
    DTS_EXTENSIONS,
    MAIN_FILE_EXTENSIONS,
    MANIFEST_FILE,
)
from omni_build.errors import ConfigError
from omni_build.logs import AppLogger, getAppLogger
from omni_build.utils import (
    LOADABLE_SUFFIXES,
    cast_hint,
    is_ancestor_or_equal,
    load_data_file,
    maybe_await,
    normalize_path,
    resolve_path,
    shorten_path_for_display,
    to_array,
)

from .config_loader import find_and_load_config, load_manifest, read_manifest
from .config_merge import merge
from .config_types import (
    AppType,
    BundlerTaskOptions,
    ConfigExport,
    DebugConfig,
    InlineConfig,
    PackagerConfig,
    PackagerUserConfig,
    RendererConfig,
    RendererUserConfig,
    ResolvedConfig,
    StaticExport,
)


APP_TYPES: frozenset[str] = frozenset({"node", "electron"})
MODULE_TYPES: frozenset[str] = frozenset({"commonjs", "module"})


# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


async def _evaluate_export(
    export: ConfigExport, inline: InlineConfig
) -> dict[str, Any]:
    """Turn a loaded export into a plain dict, calling factories once."""
    if isinstance(export, StaticExport):
        return dict(export.value)

    value = await maybe_await(export.factory(cast_hint(InlineConfig, dict(inline))))
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        xmsg = f"Config function must return a dict, not {type(value).__name__}"
        raise ConfigError(xmsg)
    return dict(value)


def get_main_file_and_check(
    cwd: Path,
    main: str | None,
    manifest: tuple[Path, dict[str, Any]] | None,
) -> Path:
    """Resolve the application's main file and validate its extension.

    An explicit `main` wins; otherwise the manifest's ``main`` field is used,
    resolved against `cwd`.
    """
    if main:
        main_file = resolve_path(main, cwd)
    else:
        if manifest is None:
            xmsg = f"Main file is not specified, and no {MANIFEST_FILE} found"
            raise ConfigError(xmsg)
        manifest_main = manifest[1].get("main")
        if not manifest_main or not isinstance(manifest_main, str):
            xmsg = (
                f"Main file is not specified, {MANIFEST_FILE} "
                "also missing main field"
            )
            raise ConfigError(xmsg)
        main_file = resolve_path(manifest_main, cwd)

    if main_file.suffix not in MAIN_FILE_EXTENSIONS:
        exts = ", ".join(MAIN_FILE_EXTENSIONS)
        xmsg = f"Main file must be one of {exts}: {main_file}"
        raise ConfigError(xmsg)

    return main_file


def get_pkg_type(manifest: tuple[Path, dict[str, Any]] | None) -> str | None:
    """Return the manifest's module type (commonjs/module), if recognised."""
    if manifest is None:
        return None
    pkg_type = manifest[1].get("type")
    return pkg_type if pkg_type in MODULE_TYPES else None


def infer_out_extensions(
    main_file: Path,
    cwd: Path,
    out_dir: str | None,
    entry: str,
) -> dict[str, str] | None:
    """Force the main file's extension when the bundle output *is* the main file.

    The main file (relative to `cwd`, minus its extension) is compared with
    `out_dir/<entry stem>`. On a match the bundler is told to emit the main
    file's literal extension plus the matching declaration extension.
    """
    main_rel = os.path.relpath(main_file, cwd)
    stem, ext = os.path.splitext(main_rel)
    output = os.path.normpath(stem)

    entry_stem = os.path.splitext(os.path.basename(entry))[0]
    expected = os.path.normpath(os.path.join(out_dir or DEFAULT_OUT_DIR, entry_stem))

    if output != expected:
        return None

    out_extensions = {"js": ext}
    if ext in DTS_EXTENSIONS:
        out_extensions["dts"] = DTS_EXTENSIONS[ext]
    return out_extensions


def expand_external(external: list[Any], cwd: Path) -> list[Any]:
    """Replace package.json references with that manifest's dependency names.

    Runtime and peer dependencies are included; literal entries are kept and
    the result is de-duplicated in order.
    """
    expanded: list[Any] = []
    for item in external:
        if not isinstance(item, str) or MANIFEST_FILE not in item:
            expanded.append(item)
            continue

        data = read_manifest(resolve_path(item, cwd))
        deps = {
            **(data.get("dependencies") or {}),
            **(data.get("peerDependencies") or {}),
        }
        expanded.extend(deps)

    seen: list[Any] = []
    for item in expanded:
        if item not in seen:
            seen.append(item)
    return seen


def _load_bundler_extra(
    bundler_config: Any,
    cwd: Path,
    logger: AppLogger,
) -> dict[str, Any] | None:
    if isinstance(bundler_config, str):
        path = resolve_path(bundler_config, cwd)
        if not path.is_file():
            logger.warning(
                "Bundler config file: %s not found, ignored.", bundler_config
            )
            return None
        loaded = load_data_file(path)
        if loaded is None:
            return None
        if not isinstance(loaded, Mapping):
            xmsg = f"Bundler config {path.name} must contain an object"
            raise ConfigError(xmsg)
        return dict(loaded)

    if isinstance(bundler_config, Mapping):
        return dict(bundler_config)

    return None


def merge_bundler_config(
    input_config: Mapping[str, Any],
    cwd: Path,
    defaults: Mapping[str, Any] | None = None,
    *,
    logger: AppLogger | None = None,
) -> BundlerTaskOptions:
    """Build one bundler task from user fields layered over `defaults`."""
    logger = logger or getAppLogger()

    extra = _load_bundler_extra(input_config.get("bundler_config"), cwd, logger)
    if extra is not None:
        # the task's own entry always wins
        extra.pop("entry", None)

    entry = input_config.get("entry")
    task = merge(
        defaults or {},
        {
            "entry": to_array(entry) if entry else None,
            "out_dir": input_config.get("out_dir"),
            "tsconfig": input_config.get("tsconfig"),
            "external": input_config.get("external"),
        },
    )

    if extra:
        task = {**task, **extra}

    external = task.get("external")
    if isinstance(external, list) and any(
        isinstance(e, str) and MANIFEST_FILE in e for e in external
    ):
        task["external"] = expand_external(external, cwd)

    return cast_hint(BundlerTaskOptions, task)


def resolve_packager_config(
    build_config: PackagerUserConfig,
    cwd: Path,
    *,
    logger: AppLogger | None = None,
) -> PackagerConfig:
    """Resolve the packager config and drop `files` entries that would
    re-ingest the packager's own output directory."""
    logger = logger or getAppLogger()
    raw = build_config.get("config")

    resolved_cfg = PackagerConfig(disabled=build_config.get("disabled") is True)
    if "cli_options" in build_config:
        resolved_cfg["cli_options"] = dict(build_config["cli_options"])
    if build_config.get("after_build") is not None:
        resolved_cfg["after_build"] = build_config["after_build"]

    config_obj: Mapping[str, Any] = {}
    if isinstance(raw, str):
        path = resolve_path(raw, cwd)
        if not path.is_file():
            xmsg = f"Packager config file not found: {path}"
            raise ConfigError(xmsg)
        if path.suffix.lower() not in LOADABLE_SUFFIXES:
            logger.debug(
                "Packager config %s is handed to the packager as-is.", path.name
            )
            resolved_cfg["config"] = str(path)
            return resolved_cfg
        loaded = load_data_file(path)
        if loaded is not None and not isinstance(loaded, Mapping):
            xmsg = f"Packager config {path.name} must contain an object"
            raise ConfigError(xmsg)
        config_obj = loaded or {}
    elif isinstance(raw, Mapping):
        config_obj = raw

    default_cfg = {"directories": {"output": str(cwd / DEFAULT_PACKAGER_OUT_DIR)}}
    config = merge(default_cfg, config_obj)

    if "files" in config:
        output = resolve_path(config["directories"]["output"], cwd)
        kept: list[Any] = []
        for element in to_array(config["files"]):
            if not element:
                continue
            if isinstance(element, str):
                if is_ancestor_or_equal(resolve_path(element, cwd), output):
                    logger.warning(
                        "Packager config: <files> - '%s' and "
                        "<directories.output> are in conflict, it will be filtered.",
                        element,
                    )
                    continue
            elif isinstance(element, Mapping):
                conflict = next(
                    (
                        side
                        for side in ("from", "to")
                        if element.get(side)
                        and is_ancestor_or_equal(
                            resolve_path(element[side], cwd), output
                        )
                    ),
                    None,
                )
                if conflict:
                    logger.warning(
                        "Packager config: <files.%s> - '%s' and "
                        "<directories.output> are in conflict, it will be filtered.",
                        conflict,
                        element[conflict],
                    )
                    continue
            kept.append(element)
        config["files"] = kept

    resolved_cfg["config"] = config
    return resolved_cfg


def resolve_renderer_config(
    renderer: RendererUserConfig,
    cwd: Path,
) -> RendererConfig:
    """Normalize renderer config; a url (server mode) beats out_dir/entry."""
    url = renderer.get("url") or None
    renderer_cwd = resolve_path(renderer["cwd"], cwd) if renderer.get("cwd") else cwd

    resolved: dict[str, Any] = {
        k: v
        for k, v in renderer.items()
        if v is not None and k not in ("url", "cwd", "out_dir", "entry")
    }
    resolved["cwd"] = str(renderer_cwd)

    if url:
        resolved["url"] = list(url) if isinstance(url, (list, tuple)) else url
    else:
        resolved["out_dir"] = normalize_path(
            renderer.get("out_dir") or DEFAULT_RENDERER_OUT_DIR
        )
        resolved["entry"] = normalize_path(
            renderer.get("entry") or DEFAULT_RENDERER_ENTRY
        )

    return cast_hint(RendererConfig, resolved)


def _apply_config_log_level(
    exported: Mapping[str, Any], inline: InlineConfig, logger: AppLogger
) -> None:
    # CLI (inline) log level was already applied by the caller
    config_level = exported.get("log_level")
    if isinstance(config_level, str) and config_level and not inline.get("log_level"):
        logger.setLevel(logger.determineLogLevel(root_log_level=config_level))


# --------------------------------------------------------------------------- #
# main entry
# --------------------------------------------------------------------------- #


async def resolve_config(  # noqa: PLR0912, PLR0915
    inline_config: InlineConfig | None = None,
    cwd: Path | str | None = None,
    *,
    logger: AppLogger | None = None,
) -> ResolvedConfig:
    """Load, merge and resolve the project configuration.

    `inline_config` (usually built from CLI flags) is layered over the config
    file. Raises ConfigError when the entry or main file cannot be resolved.
    """
    logger = logger or getAppLogger()
    inline = cast_hint(InlineConfig, dict(inline_config or {}))
    root = Path(cwd).resolve() if cwd is not None else Path.cwd().resolve()

    # --- Load config file ---
    exported: dict[str, Any] = {}
    loaded = find_and_load_config(inline.get("config_file"), root)
    if loaded is not None:
        logger.info(
            "🔧 Using config: %s", shorten_path_for_display(loaded.source, cwd=root)
        )
        exported = await _evaluate_export(loaded.export, inline)
        _apply_config_log_level(exported, inline, logger)

    exported = merge(exported, inline)

    # --- App type ---
    app_type = exported.get("type") or DEFAULT_APP_TYPE
    if app_type not in APP_TYPES:
        xmsg = f"Unknown application type {app_type!r} (expected node or electron)"
        raise ConfigError(xmsg)

    # --- Entry and main file ---
    entry = exported.get("entry")
    if not entry:
        xmsg = "entry file is required"
        raise ConfigError(xmsg)
    if not isinstance(entry, str):
        xmsg = f"entry must be a single file path, not {type(entry).__name__}"
        raise ConfigError(xmsg)

    manifest = load_manifest(root)
    main_file = get_main_file_and_check(root, exported.get("main"), manifest)
    logger.trace(f"[resolve_config] main file: {main_file}")

    # --- Primary bundler task ---
    pkg_type = get_pkg_type(manifest)
    defaults: dict[str, Any] = {"format": "es" if pkg_type == "module" else "cjs"}
    out_extensions = infer_out_extensions(
        main_file, root, exported.get("out_dir"), entry
    )
    if out_extensions:
        defaults["out_extensions"] = out_extensions

    tasks: list[BundlerTaskOptions] = [
        merge_bundler_config(exported, root, defaults, logger=logger)
    ]

    electron = exported.get("electron") or {}

    # --- Preload bundler task (entry must be given) ---
    if electron.get("preload") or inline.get("preload"):
        preload_cfg = dict(electron.get("preload") or {})
        if inline.get("preload"):
            preload_cfg["entry"] = inline["preload"]

        if preload_cfg.get("entry"):
            tasks.append(
                merge_bundler_config(preload_cfg, root, tasks[0], logger=logger)
            )
        else:
            logger.warning("Preload's entry is not specified, it will be ignored")

    # --- Packager ---
    packager = PackagerConfig(disabled=True)
    if electron.get("build") or inline.get("packager_config"):
        build_cfg = dict(electron.get("build") or {})
        if inline.get("packager_config"):
            build_cfg["config"] = inline["packager_config"]
        packager = resolve_packager_config(
            cast_hint(PackagerUserConfig, build_cfg), root, logger=logger
        )

    # --- Renderer (file config, CLI flags layered on top) ---
    renderer: RendererConfig | None = None
    renderer_user = merge(electron.get("renderer") or {}, inline.get("renderer") or {})
    if any(v not in (None, "", []) for v in renderer_user.values()):
        renderer = resolve_renderer_config(
            cast_hint(RendererUserConfig, renderer_user), root
        )

    # --- Debug ---
    debug_cfg = cast_hint(DebugConfig, dict(exported.get("debug_config") or {}))
    debug_cfg["enabled"] = bool(inline.get("debug") or debug_cfg.get("enabled"))
    if debug_cfg["enabled"]:
        sourcemap: bool | str = (
            True if debug_cfg.get("sourcemap_type") == "file" else "inline"
        )
        for task in tasks:
            task["sourcemap"] = cast("Any", sourcemap)

    # --- Hooks ---
    after_build = exported.get("after_build")
    if after_build is not None and not callable(after_build):
        logger.warning('"after_build" only supports a function, ignoring it.')
        after_build = None

    build_only = bool(
        inline.get("build_only")
        or exported.get("build_only")
        or debug_cfg.get("build_only")
    )
    run_only = bool(inline.get("run_only") or exported.get("run_only"))

    return ResolvedConfig(
        cwd=root,
        type=cast_hint(AppType, app_type),
        main=main_file,
        args=exported.get("args") or [],
        debug_config=debug_cfg,
        build_only=build_only,
        run_only=run_only,
        bundler_tasks=tuple(tasks),
        packager=packager,
        renderer=renderer,
        after_build=after_build,
        config_path=loaded.source if loaded is not None else None,
    )
