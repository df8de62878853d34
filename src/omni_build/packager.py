# src/omni_build/packager.py
"""External packager adapter (electron-builder)."""

import json
import shutil
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from .constants import DEFAULT_PACKAGER_COMMAND, PACKAGER_PACKAGE
from .errors import BuildError
from .logs import AppLogger, getAppLogger
from .meta import PROGRAM_SCRIPT
from .utils import ensure_node_package, run_command


PACKAGER_FEATURE = '"electron.build"'


class Packager(Protocol):
    async def package(
        self,
        config: str | Mapping[str, Any] | None,
        cli_options: Mapping[str, Any] | None = None,
    ) -> None: ...


def ensure_packager_installed(cwd: Path) -> Path:
    return ensure_node_package(PACKAGER_PACKAGE, PACKAGER_FEATURE, cwd)


def render_cli_options(options: Mapping[str, Any] | None) -> list[str]:
    """Render CLI-style options as command-line flags.

    ``{"win": ["nsis", "zip"], "publish": "never", "x64": True}``
    → ``--win nsis zip --publish never --x64``. False and None are skipped.
    """
    flags: list[str] = []
    for key, value in (options or {}).items():
        if value is None or value is False:
            continue
        flag = "--" + key.replace("_", "-")
        if value is True:
            flags.append(flag)
        elif isinstance(value, (list, tuple)):
            flags.extend([flag, *(str(v) for v in value)])
        else:
            flags.extend([flag, str(value)])
    return flags


class ElectronBuilderPackager:
    """Invoke ``electron-builder --config <file>`` and wait for it."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_PACKAGER_COMMAND,
        *,
        cwd: Path | None = None,
        logger: AppLogger | None = None,
    ) -> None:
        self.command = list(command)
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.logger = logger or getAppLogger()

    async def package(
        self,
        config: str | Mapping[str, Any] | None,
        cli_options: Mapping[str, Any] | None = None,
    ) -> None:
        tmp_dir: Path | None = None
        cmd = [*self.command]
        try:
            if isinstance(config, Mapping):
                tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-"))
                config_file = tmp_dir / "packager.json"
                config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
                cmd += ["--config", str(config_file)]
            elif config:
                cmd += ["--config", str(config)]
            cmd += render_cli_options(cli_options)

            self.logger.info("Start electron build...")
            result = await run_command(cmd, cwd=self.cwd, capture=False)
        finally:
            if tmp_dir is not None:
                shutil.rmtree(tmp_dir, ignore_errors=True)

        if result.returncode != 0:
            xmsg = f"Packager failed (exit {result.returncode})"
            raise BuildError(xmsg, output=result.output, code=result.returncode)
