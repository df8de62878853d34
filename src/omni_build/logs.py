# src/omni_build/logs.py

import logging
from typing import cast

from apathetic_logging import (
    DualStreamHandler,
    Logger,
    registerDefaultLogLevel,
    registerLogger,
    registerLogLevelEnvVars,
)

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV, PROGRAM_PACKAGE


class AppLogger(Logger):
    """App-specific logger class."""

    def applyColor(self, enable_color: bool | None) -> None:  # noqa: N802
        """Set color on this logger and on every handler it writes through."""
        self.enable_color = (
            enable_color
            if enable_color is not None
            else type(self).determineColorEnabled()
        )
        # propagating loggers write through the root handler
        current: logging.Logger | None = self
        while current is not None:
            for handler in current.handlers:
                if isinstance(handler, DualStreamHandler):
                    handler.enable_color = self.enable_color
            current = current.parent if current.propagate else None


# --- Logger initialization ---------------------------------------------------

# Force the logging module to use the Logger class globally.
# This must happen *before* any loggers are created.
logging.setLoggerClass(AppLogger)

# Force registration of TRACE and SILENT levels
AppLogger.extendLoggingModule()

# Register log level environment variables and default
# This must happen before any loggers are created so they use the registered values
registerLogLevelEnvVars(
    [f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}", DEFAULT_ENV_LOG_LEVEL]
)
registerDefaultLogLevel(DEFAULT_LOG_LEVEL)

# Register the logger name so getLogger() can find it
registerLogger(PROGRAM_PACKAGE)

_APP_LOGGER = cast("AppLogger", logging.getLogger(PROGRAM_PACKAGE))


# --- Convenience utils ---------------------------------------------------------


def getAppLogger() -> AppLogger:  # noqa: N802
    """Return the configured app logger.

    The CLI fetches this once and hands it to the resolver and orchestrator;
    library callers may pass their own instance instead.
    """
    return _APP_LOGGER
