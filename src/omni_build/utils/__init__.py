# src/omni_build/utils/__init__.py

from .utils_files import (
    LOADABLE_SUFFIXES,
    load_data_file,
    load_jsonc,
    load_python_export,
    load_yaml,
    plural,
    remove_path_in_error_message,
)
from .utils_modules import ensure_node_package, find_node_bin, find_node_package
from .utils_paths import (
    ensure_path_exists,
    find_longest_common_prefix_path,
    is_ancestor_or_equal,
    normalize_path,
    remove_prefix_folders,
    resolve_path,
    shorten_path_for_display,
)
from .utils_process import CommandResult, run_command
from .utils_types import cast_hint, is_plain_mapping, maybe_await, to_array


__all__ = [  # noqa: RUF022
    # utils_files
    "LOADABLE_SUFFIXES",
    "load_data_file",
    "load_jsonc",
    "load_python_export",
    "load_yaml",
    "plural",
    "remove_path_in_error_message",
    # utils_modules
    "ensure_node_package",
    "find_node_bin",
    "find_node_package",
    # utils_paths
    "ensure_path_exists",
    "find_longest_common_prefix_path",
    "is_ancestor_or_equal",
    "normalize_path",
    "remove_prefix_folders",
    "resolve_path",
    "shorten_path_for_display",
    # utils_process
    "CommandResult",
    "run_command",
    # utils_types
    "cast_hint",
    "is_plain_mapping",
    "maybe_await",
    "to_array",
]
