# src/omni_build/__init__.py

"""omni-build: build, run and package node and electron applications.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use or custom integrations.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()                  → CLI entrypoint
    - resolve_config()        → Merge inline options with the config file
    - Orchestrator            → Run dev / build for a resolved config
    - create_env()            → Environment projected into built code
    - stage_renderer_assets() → Copy renderer files into the output tree
    - wait_for_renderer()     → Wait for renderer urls to come up
"""

from .actions import get_metadata
from .assets import stage_renderer_assets
from .bundler import Bundler, CommandBundler
from .cli import main
from .config import (
    InlineConfig,
    ResolvedConfig,
    UserConfig,
    find_config,
    load_config,
    merge,
    resolve_config,
)
from .core import Orchestrator, State
from .env import create_args, create_env
from .errors import (
    BuildError,
    ConfigError,
    DependencyMissingError,
    ReadinessTimeoutError,
    RuntimeLaunchError,
)
from .lifecycle import ShutdownHooks
from .logs import getAppLogger
from .meta import (
    PROGRAM_CONFIG,
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .packager import ElectronBuilderPackager, Packager
from .readiness import wait_for_renderer


__all__ = [  # noqa: RUF022
    # actions
    "get_metadata",
    # assets
    "stage_renderer_assets",
    # bundler
    "Bundler",
    "CommandBundler",
    # cli
    "main",
    # config
    "find_config",
    "InlineConfig",
    "load_config",
    "merge",
    "resolve_config",
    "ResolvedConfig",
    "UserConfig",
    # core
    "Orchestrator",
    "State",
    # env
    "create_args",
    "create_env",
    # errors
    "BuildError",
    "ConfigError",
    "DependencyMissingError",
    "ReadinessTimeoutError",
    "RuntimeLaunchError",
    # lifecycle
    "ShutdownHooks",
    # logs
    "getAppLogger",
    # meta
    "Metadata",
    "PROGRAM_CONFIG",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    # packager
    "ElectronBuilderPackager",
    "Packager",
    # readiness
    "wait_for_renderer",
]
