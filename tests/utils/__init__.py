# tests/utils/__init__.py

from .constants import DEFAULT_TEST_LOG_LEVEL
from .fakes import FakeBundler, FakeLauncher, FakePackager, FakeProcess
from .force_mtime_advance import force_mtime_advance
from .patch_everywhere import patch_everywhere
from .project import (
    install_node_package,
    make_project,
    make_resolved_config,
    write_config,
    write_package_json,
)


__all__ = [  # noqa: RUF022
    # constants
    "DEFAULT_TEST_LOG_LEVEL",
    # fakes
    "FakeBundler",
    "FakeLauncher",
    "FakePackager",
    "FakeProcess",
    # force_mtime_advance
    "force_mtime_advance",
    # patch_everywhere
    "patch_everywhere",
    # project
    "install_node_package",
    "make_project",
    "make_resolved_config",
    "write_config",
    "write_package_json",
]
