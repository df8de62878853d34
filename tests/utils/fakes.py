# tests/utils/fakes.py
"""Stand-ins for the external bundler, packager and application process."""

import asyncio
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

from omni_build.config.config_types import BundlerTaskOptions
from omni_build.errors import BuildError
from omni_build.utils import maybe_await


Event = tuple[Any, ...]


class FakeProcess:
    """Child process that only exits when told to (or when killed)."""

    def __init__(self, pid: int, cmd: Sequence[str], events: list[Event]) -> None:
        self.pid = pid
        self.cmd = list(cmd)
        self.returncode: int | None = None
        self.events = events
        self._exited = asyncio.Event()

    def kill(self) -> None:
        self.events.append(("kill", self.pid))
        self.finish(-9)

    def finish(self, code: int) -> None:
        if self.returncode is None:
            self.returncode = code
            self._exited.set()

    async def wait(self) -> int:
        await self._exited.wait()
        assert self.returncode is not None
        return self.returncode


class FakeLauncher:
    def __init__(self, events: list[Event] | None = None) -> None:
        self.events: list[Event] = events if events is not None else []
        self.processes: list[FakeProcess] = []
        self.calls: list[tuple[list[str], dict[str, str], Path]] = []

    async def __call__(
        self, cmd: Sequence[str], env: Mapping[str, str], cwd: Path
    ) -> FakeProcess:
        proc = FakeProcess(len(self.processes) + 1, cmd, self.events)
        self.processes.append(proc)
        self.calls.append((list(cmd), dict(env), cwd))
        self.events.append(("spawn", proc.pid))
        return proc


class FakeBundler:
    """Records builds; `wait()` replays `rebuilds` rebuild signals."""

    def __init__(
        self,
        *,
        rebuilds: int = 0,
        events: list[Event] | None = None,
        fail_on: int | None = None,
        after_wait: Callable[[], Any] | None = None,
    ) -> None:
        self.rebuilds = rebuilds
        self.events: list[Event] = events if events is not None else []
        self.fail_on = fail_on
        self.after_wait = after_wait
        self.calls: list[BundlerTaskOptions] = []
        self.closed = False
        self._callbacks: list[Callable[[], Any]] = []

    async def build(self, options: BundlerTaskOptions, *, silent: bool = True) -> None:
        index = len(self.calls)
        self.calls.append(options)
        self.events.append(("build", tuple(options.get("entry") or [])))
        if self.fail_on is not None and index == self.fail_on:
            xmsg = "Bundler failed"
            raise BuildError(xmsg, output="boom", code=1)

        on_success = options.get("on_success")
        if callable(on_success):
            await maybe_await(on_success())
            if options.get("watch"):
                self._callbacks.append(on_success)

    async def signal(self) -> None:
        """One rebuild of every watched task."""
        for callback in self._callbacks:
            await maybe_await(callback())

    async def wait(self) -> None:
        for _ in range(self.rebuilds):
            self.events.append(("rebuild",))
            await self.signal()
        if self.after_wait is not None:
            await maybe_await(self.after_wait())

    async def close(self) -> None:
        self.closed = True


class FakePackager:
    def __init__(self, events: list[Event] | None = None) -> None:
        self.events: list[Event] = events if events is not None else []
        self.calls: list[tuple[Any, Any]] = []

    async def package(self, config: Any, cli_options: Any = None) -> None:
        self.calls.append((config, cli_options))
        self.events.append(("package",))
