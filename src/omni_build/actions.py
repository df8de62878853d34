# src/omni_build/actions.py
import re
import subprocess
from contextlib import suppress
from importlib import metadata as importlib_metadata
from pathlib import Path

from .logs import getAppLogger
from .meta import PROGRAM_SCRIPT, Metadata


def get_metadata() -> Metadata:
    """Return (version, commit) tuple for this tool.

    - Installed → distribution metadata
    - Source checkout → read pyproject.toml + git
    """
    logger = getAppLogger()
    logger.trace(f"get_metadata ran from: {Path(__file__).resolve()}")

    version = "unknown"
    commit = "unknown"

    # Try pyproject.toml for version
    root = Path(__file__).resolve().parents[2]
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        logger.trace(f"trying to read metadata from {pyproject}")
        text = pyproject.read_text(encoding="utf-8")
        match = re.search(r'(?m)^\s*version\s*=\s*["\']([^"\']+)["\']', text)
        if match:
            version = match.group(1)
    else:
        with suppress(importlib_metadata.PackageNotFoundError):
            version = importlib_metadata.version(PROGRAM_SCRIPT)

    # Try git for commit
    with suppress(OSError, subprocess.CalledProcessError):
        logger.trace("trying to get commit from git")
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
        commit = result.stdout.strip()

    logger.trace(f"got package version {version} with commit {commit}")
    return Metadata(version, commit)
