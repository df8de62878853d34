# src/omni_build/config/__init__.py

"""Configuration handling for omni-build.

This module provides config file discovery and loading, layered merging,
and resolution into a ResolvedConfig.
"""

from .config_loader import (
    find_and_load_config,
    find_config,
    find_manifest,
    load_config,
    load_manifest,
    read_manifest,
)
from .config_merge import merge
from .config_resolve import (
    expand_external,
    get_main_file_and_check,
    get_pkg_type,
    infer_out_extensions,
    merge_bundler_config,
    resolve_config,
    resolve_packager_config,
    resolve_renderer_config,
)
from .config_types import (
    AppType,
    BundlerTaskOptions,
    BundlerUserConfig,
    ConfigExport,
    DebugConfig,
    DevArgs,
    ElectronConfig,
    FactoryExport,
    Hook,
    InlineConfig,
    LoadedConfig,
    OutputFormat,
    PackagerConfig,
    PackagerUserConfig,
    PreloadConfig,
    RendererConfig,
    RendererUserConfig,
    ResolvedConfig,
    RunMode,
    SourcemapType,
    StaticExport,
    UserConfig,
)


__all__ = [  # noqa: RUF022
    # config_loader
    "find_and_load_config",
    "find_config",
    "find_manifest",
    "load_config",
    "load_manifest",
    "read_manifest",
    # config_merge
    "merge",
    # config_resolve
    "expand_external",
    "get_main_file_and_check",
    "get_pkg_type",
    "infer_out_extensions",
    "merge_bundler_config",
    "resolve_config",
    "resolve_packager_config",
    "resolve_renderer_config",
    # config_types
    "AppType",
    "BundlerTaskOptions",
    "BundlerUserConfig",
    "ConfigExport",
    "DebugConfig",
    "DevArgs",
    "ElectronConfig",
    "FactoryExport",
    "Hook",
    "InlineConfig",
    "LoadedConfig",
    "OutputFormat",
    "PackagerConfig",
    "PackagerUserConfig",
    "PreloadConfig",
    "RendererConfig",
    "RendererUserConfig",
    "ResolvedConfig",
    "RunMode",
    "SourcemapType",
    "StaticExport",
    "UserConfig",
]
