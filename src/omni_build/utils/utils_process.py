# src/omni_build/utils/utils_process.py


import asyncio
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from omni_build.logs import getAppLogger


@dataclass
class CommandResult:
    returncode: int
    output: str


async def run_command(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    capture: bool = True,
) -> CommandResult:
    """Run `cmd` to completion without blocking the event loop.

    With `capture`, stdout and stderr are merged and returned; otherwise the
    child inherits the parent's streams and `output` is empty.
    """
    logger = getAppLogger()
    logger.trace(f"[run_command] {' '.join(cmd)} (cwd={cwd})")

    full_env = {**os.environ, **env} if env else None
    stdout = asyncio.subprocess.PIPE if capture else None
    stderr = asyncio.subprocess.STDOUT if capture else None

    proc = await asyncio.create_subprocess_exec(
        *cmd,
        cwd=cwd,
        env=full_env,
        stdout=stdout,
        stderr=stderr,
    )
    raw, _ = await proc.communicate()
    output = raw.decode(errors="replace") if raw else ""
    returncode = proc.returncode if proc.returncode is not None else -1
    logger.trace(f"[run_command] exited with {returncode}")
    return CommandResult(returncode=returncode, output=output)
