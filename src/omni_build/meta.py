# src/omni_build/meta.py
"""Program identity shared by the CLI, logger and environment projection."""

from typing import NamedTuple


PROGRAM_PACKAGE = "omni_build"
PROGRAM_SCRIPT = "omni-build"
PROGRAM_DISPLAY = "omni-build"
PROGRAM_CONFIG = "omni.build"
PROGRAM_ENV = "OMNI"


class Metadata(NamedTuple):
    version: str
    commit: str

    def __str__(self) -> str:
        return f"{self.version} ({self.commit})"
