# src/omni_build/config/config_types.py


from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TypedDict, Union

from typing_extensions import NotRequired


AppType = Literal["node", "electron"]
RunMode = Literal["production", "development"]
OutputFormat = Literal["es", "cjs"]
SourcemapType = Literal["file", "inline"]

Hook = Callable[[], Union[Awaitable[Any], Any]]


class DevArgs(TypedDict, total=False):
    node: list[str]
    electron: list[str]


class DebugConfig(TypedDict, total=False):
    enabled: bool
    args: list[str] | DevArgs  # appended to the launch arguments
    env: dict[str, str]  # applied last, wins over computed values
    sourcemap_type: SourcemapType
    build_only: bool


class BundlerUserConfig(TypedDict, total=False):
    out_dir: str
    tsconfig: str
    external: list[str]
    # path to a bundler options file, or the options themselves
    # ("entry" inside it is ignored)
    bundler_config: str | dict[str, Any]


class PreloadConfig(BundlerUserConfig, total=False):
    entry: str | list[str]


class RendererUserConfig(TypedDict, total=False):
    # dev
    dev_url: str
    # server mode
    url: str | list[str]
    wait_timeout: float  # seconds
    wait_for_renderer: bool
    # common
    cwd: str
    assets: list[str]
    # static mode
    out_dir: str
    entry: str


class PackagerUserConfig(TypedDict, total=False):
    disabled: bool
    config: str | dict[str, Any]  # packager config or path to one
    cli_options: dict[str, Any]
    after_build: Hook


class ElectronConfig(TypedDict, total=False):
    build: PackagerUserConfig
    preload: PreloadConfig
    renderer: RendererUserConfig


class UserConfig(BundlerUserConfig, total=False):
    entry: str
    type: AppType
    main: str
    args: list[str] | DevArgs
    build_only: bool
    run_only: bool
    after_build: Hook
    debug_config: DebugConfig
    electron: ElectronConfig
    log_level: str


class InlineConfig(UserConfig, total=False):
    config_file: str | Literal[False]
    debug: bool
    preload: str  # preload entry
    packager_config: str  # packager config file
    renderer: RendererUserConfig


# --------------------------------------------------------------------------- #
# Resolved types
# --------------------------------------------------------------------------- #


class BundlerTaskOptions(TypedDict, total=False):
    entry: list[str]
    out_dir: str
    tsconfig: str
    external: list[str]
    format: OutputFormat
    out_extensions: dict[str, str]  # {"js": ".mjs", "dts": ".mts"}
    watch: bool
    sourcemap: bool | Literal["inline"]
    env: dict[str, str]
    on_success: Callable[[], Union[Awaitable[Any], Any]]


class RendererConfig(TypedDict):
    cwd: str
    url: NotRequired[str | list[str]]
    wait_timeout: NotRequired[float]
    wait_for_renderer: NotRequired[bool]
    dev_url: NotRequired[str]
    assets: NotRequired[list[str]]
    # static mode only
    out_dir: NotRequired[str]
    entry: NotRequired[str]


class PackagerConfig(TypedDict):
    disabled: bool
    config: NotRequired[str | dict[str, Any]]
    cli_options: NotRequired[dict[str, Any]]
    after_build: NotRequired[Hook]


# --------------------------------------------------------------------------- #
# Loaded config export (static value or factory)
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class StaticExport:
    value: Mapping[str, Any]


@dataclass(frozen=True)
class FactoryExport:
    factory: Callable[[InlineConfig], Any]


ConfigExport = Union[StaticExport, FactoryExport]


@dataclass(frozen=True)
class LoadedConfig:
    export: ConfigExport
    source: Path


@dataclass(frozen=True)
class ResolvedConfig:
    """Final configuration for one invocation; read-only once created."""

    cwd: Path
    type: AppType
    main: Path
    args: list[str] | DevArgs
    debug_config: DebugConfig
    build_only: bool
    run_only: bool
    bundler_tasks: tuple[BundlerTaskOptions, ...]
    packager: PackagerConfig = field(
        default_factory=lambda: PackagerConfig(disabled=True)
    )
    renderer: RendererConfig | None = None
    after_build: Hook | None = None
    config_path: Path | None = None

    @property
    def is_electron(self) -> bool:
        return self.type == "electron"

    @property
    def debug_enabled(self) -> bool:
        return bool(self.debug_config.get("enabled"))
