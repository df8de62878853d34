# src/omni_build/constants.py
"""Central constants used across the project."""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"
DEFAULT_ENV_WATCH_INTERVAL: str = "WATCH_INTERVAL"

# --- program defaults ---
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_WATCH_INTERVAL: float = 1.0  # seconds

# --- config defaults ---
DEFAULT_APP_TYPE: str = "node"
DEFAULT_OUT_DIR: str = "dist"  # bundler's own default output directory
DEFAULT_PACKAGER_OUT_DIR: str = "release"
DEFAULT_RENDERER_OUT_DIR: str = "dist"
DEFAULT_RENDERER_ENTRY: str = "index.html"
DEFAULT_WAIT_TIMEOUT: float = 5.0  # seconds, per renderer url
DEFAULT_WAIT_POLL_INTERVAL: float = 0.25  # seconds

# main file must be a runnable script
MAIN_FILE_EXTENSIONS: tuple[str, ...] = (".js", ".cjs", ".mjs")

# script extension -> matching type declaration source extension
DTS_EXTENSIONS: dict[str, str] = {
    ".js": ".ts",
    ".cjs": ".cts",
    ".mjs": ".mts",
}

# --- external programs ---
MANIFEST_FILE: str = "package.json"
ELECTRON_PACKAGE: str = "electron"
PACKAGER_PACKAGE: str = "electron-builder"
DEFAULT_NODE_COMMAND: str = "node"
DEFAULT_BUNDLER_COMMAND: tuple[str, ...] = ("npx", "tsdown")
DEFAULT_PACKAGER_COMMAND: tuple[str, ...] = ("npx", "electron-builder")

# directories never scanned by the watch loop
WATCH_IGNORED_DIRS: frozenset[str] = frozenset(
    {"node_modules", ".git", "__pycache__"}
)
