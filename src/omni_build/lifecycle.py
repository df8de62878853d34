# src/omni_build/lifecycle.py
"""Explicit shutdown hooks, run by the top-level command on every exit path."""

from collections.abc import Callable
from typing import Any

from .logs import AppLogger, getAppLogger


class ShutdownHooks:
    """Ordered list of cleanup callbacks; run once, newest first."""

    def __init__(self, *, logger: AppLogger | None = None) -> None:
        self.logger = logger or getAppLogger()
        self._hooks: list[Callable[[], Any]] = []

    def register(self, hook: Callable[[], Any]) -> Callable[[], Any]:
        self._hooks.append(hook)
        return hook

    def unregister(self, hook: Callable[[], Any]) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def __len__(self) -> int:
        return len(self._hooks)

    def run(self) -> None:
        """Run and clear all hooks; a failing hook does not stop the rest."""
        hooks, self._hooks = self._hooks, []
        for hook in reversed(hooks):
            try:
                hook()
            except Exception:  # noqa: BLE001
                self.logger.errorIfNotDebug("Shutdown hook failed: %r", hook)
