# src/omni_build/core.py
"""Build and dev lifecycle orchestration."""

import asyncio
import os
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from contextlib import suppress
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from apathetic_logging import ANSIColors

from .assets import stage_renderer_assets
from .bundler import Bundler, CommandBundler
from .config import InlineConfig, ResolvedConfig, resolve_config
from .config.config_types import BundlerTaskOptions, DevArgs
from .constants import DEFAULT_NODE_COMMAND, ELECTRON_PACKAGE
from .env import create_args, create_env
from .errors import RuntimeLaunchError
from .lifecycle import ShutdownHooks
from .logs import AppLogger, getAppLogger
from .packager import ElectronBuilderPackager, Packager, ensure_packager_installed
from .readiness import wait_for_renderer
from .utils import cast_hint, ensure_node_package, find_node_bin, maybe_await


ELECTRON_FEATURE = '"Application type: electron"'


class State(Enum):
    IDLE = "idle"
    PREBUILDING = "prebuilding"
    BUILD_ONLY = "build_only"
    RUNNING = "running"
    RESTARTING = "restarting"
    EXITED = "exited"


class ChildProcess(Protocol):
    returncode: int | None

    def kill(self) -> None: ...

    async def wait(self) -> int: ...


Launcher = Callable[[Sequence[str], Mapping[str, str], Path], Awaitable[ChildProcess]]
Waiter = Callable[..., Awaitable[None]]


async def spawn_process(
    cmd: Sequence[str], env: Mapping[str, str], cwd: Path
) -> ChildProcess:
    """Start the application with inherited stdio."""
    return await asyncio.create_subprocess_exec(*cmd, env=dict(env), cwd=cwd)


def resolve_electron_runtime(cwd: Path) -> str:
    """Return the electron executable, failing if electron is not installed."""
    ensure_node_package(ELECTRON_PACKAGE, ELECTRON_FEATURE, cwd)
    return find_node_bin(ELECTRON_PACKAGE, cwd) or ELECTRON_PACKAGE


def generated_dirs(config: ResolvedConfig) -> list[Path]:
    """Directories written by other steps, never watched as sources."""
    renderer = config.renderer
    if renderer and renderer.get("cwd") and renderer.get("out_dir"):
        return [Path(renderer["cwd"]) / renderer["out_dir"]]
    return []


class Orchestrator:
    """Drive bundler tasks, the packager and the supervised application.

    All collaborators are injectable; the defaults talk to the real
    external programs.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        *,
        bundler: Bundler | None = None,
        packager: Packager | None = None,
        launcher: Launcher | None = None,
        waiter: Waiter | None = None,
        shutdown: ShutdownHooks | None = None,
        logger: AppLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or getAppLogger()
        self.bundler: Bundler = bundler or CommandBundler(
            cwd=config.cwd, ignored=generated_dirs(config), logger=self.logger
        )
        self.packager: Packager = packager or ElectronBuilderPackager(
            cwd=config.cwd, logger=self.logger
        )
        self.launcher: Launcher = launcher or spawn_process
        self.waiter: Waiter = waiter or wait_for_renderer
        self.shutdown = shutdown or ShutdownHooks(logger=self.logger)

        self.state = State.IDLE
        self.child: ChildProcess | None = None
        self.spawn_count = 0
        # path to the desktop runtime; None runs the main file with node
        self.runtime: str | None = None

        self._env: dict[str, str] = {}
        self._args: DevArgs = DevArgs(node=[], electron=[])
        self._exit_watcher: asyncio.Future[None] | None = None
        self._exit_future: asyncio.Future[int] | None = None
        self._restart_lock: asyncio.Lock | None = None

    @classmethod
    async def create(
        cls,
        inline_config: InlineConfig | None = None,
        cwd: Path | str | None = None,
        **kwargs: Any,
    ) -> "Orchestrator":
        config = await resolve_config(inline_config, cwd, logger=kwargs.get("logger"))
        return cls(config, **kwargs)

    # --------------------------------------------------------------------- #
    # shared
    # --------------------------------------------------------------------- #

    def _log_header(self, mode: str) -> None:
        log = self.logger
        if mode == "dev":
            debug = (
                f"{log.colorize(' DEBUG ', ANSIColors.YELLOW)} "
                if self.config.debug_enabled
                else ""
            )
            development = log.colorize(" Development ", ANSIColors.CYAN)
            log.info("💻 Mode: %s%s", debug, development)
        else:
            log.info("📦 Mode: %s", log.colorize(" Production ", ANSIColors.CYAN))
        app_type = log.colorize(f" {self.config.type} ", ANSIColors.GREEN)
        log.info("💠 Application type: %s", app_type)

    @staticmethod
    def _task_options(
        task: BundlerTaskOptions, env: Mapping[str, str], **extra: Any
    ) -> BundlerTaskOptions:
        options: dict[str, Any] = dict(task)
        options["env"] = {**(task.get("env") or {}), **env}
        options.update(extra)
        return cast_hint(BundlerTaskOptions, options)

    # --------------------------------------------------------------------- #
    # build
    # --------------------------------------------------------------------- #

    async def build(
        self, auto_pack: bool = True
    ) -> Callable[[], Awaitable[None]] | None:
        """Production build: every task once, in order, then package.

        With `auto_pack` False the packaging step is returned instead of run.
        """
        cfg = self.config
        start = time.perf_counter()
        self._log_header("build")

        if cfg.is_electron:
            self.runtime = resolve_electron_runtime(cfg.cwd)

        env = create_env(cfg, "production")

        self.state = State.PREBUILDING
        for task in cfg.bundler_tasks:
            # later tasks may rely on an earlier task's output
            await self.bundler.build(
                self._task_options(task, env, watch=False), silent=True
            )
        elapsed = (time.perf_counter() - start) * 1000
        self.logger.info("✅ Prebuild succeeded! (%.2fms)", elapsed)

        if cfg.after_build is not None:
            await maybe_await(cfg.after_build())

        async def pack() -> None:
            packager_cfg = cfg.packager
            if cfg.is_electron and not packager_cfg.get("disabled"):
                await stage_renderer_assets(cfg.renderer, logger=self.logger)
                ensure_packager_installed(cfg.cwd)
                await self.packager.package(
                    packager_cfg.get("config"), packager_cfg.get("cli_options")
                )
                hook = packager_cfg.get("after_build")
                if callable(hook):
                    await maybe_await(hook())

            total = (time.perf_counter() - start) * 1000
            self.logger.info("✅ Build succeeded! (%.2fms)", total)
            self.state = State.EXITED

        if auto_pack:
            await pack()
            return None
        return pack

    # --------------------------------------------------------------------- #
    # dev
    # --------------------------------------------------------------------- #

    async def dev(self) -> int:
        """Development mode: build, watch and keep the application running.

        Returns the exit code the tool should end with: the application's
        own code when it exits by itself, or 0 in build-only mode once
        watching stops.
        """
        cfg = self.config
        start = time.perf_counter()
        self._exit_future = asyncio.get_running_loop().create_future()
        self._restart_lock = asyncio.Lock()
        self._log_header("dev")

        self._env = create_env(cfg, "development")
        self._args = create_args(cfg)
        if cfg.is_electron:
            self.runtime = resolve_electron_runtime(cfg.cwd)

        # no child outlives the tool
        self.shutdown.register(self.kill_child)

        if cfg.run_only:
            self.logger.info(
                "🚄 %s Prebuild will be skipped",
                self.logger.colorize(" RUN ONLY ", ANSIColors.GRAY),
            )
        else:
            self.state = State.PREBUILDING
            for task in cfg.bundler_tasks:
                await self._build_watched(task)
            elapsed = (time.perf_counter() - start) * 1000
            self.logger.info("✅ Prebuild succeeded! (%.2fms)", elapsed)

        if cfg.build_only:
            self.state = State.BUILD_ONLY
            self.logger.info(
                "🛠️ %s Application won't start",
                self.logger.colorize(" BUILD ONLY ", ANSIColors.YELLOW),
            )
            await self.bundler.wait()
            self.state = State.EXITED
            return 0

        if cfg.is_electron:
            await self._wait_for_renderer()

        await self.restart()
        return await self._supervise()

    async def _build_watched(self, task: BundlerTaskOptions) -> None:
        user_hook = task.get("on_success")
        watch = task.get("watch") is not False
        if not watch:
            self.logger.info("⚠️  Watch mode is disabled")
        if user_hook is not None and not callable(user_hook):
            self.logger.warning(
                '⚠️  "on_success" only supports a function, ignoring it.'
            )
            user_hook = None

        is_first_build = True

        async def on_success() -> None:
            nonlocal is_first_build
            if not watch:
                return

            if user_hook is not None:
                await maybe_await(user_hook())

            # the initial build is not a rebuild
            if is_first_build:
                is_first_build = False
                return

            self.logger.info("✅ Rebuild succeeded!")
            if self.config.build_only:
                return
            await self.restart()

        await self.bundler.build(
            self._task_options(task, self._env, watch=watch, on_success=on_success),
            silent=True,
        )

    async def _wait_for_renderer(self) -> None:
        renderer: Mapping[str, Any] = self.config.renderer or {}
        url = renderer.get("dev_url") or renderer.get("url")
        if not url or renderer.get("wait_for_renderer") is False:
            return
        await self.waiter(url, renderer.get("wait_timeout"), logger=self.logger)

    async def restart(self) -> ChildProcess:
        """Kill the current child (if any) and launch a fresh one."""
        lock = self._restart_lock or asyncio.Lock()
        async with lock:
            if self.child is not None:
                self.state = State.RESTARTING
                await self._stop_child()
            self.child = await self._launch()
            self.state = State.RUNNING
            return self.child

    async def _launch(self) -> ChildProcess:
        main = self.config.main
        if not main.exists():
            xmsg = f"Main file not found: {main}"
            raise RuntimeLaunchError(xmsg)

        dev_args = self._args["electron"] if self.runtime else self._args["node"]
        cmd = [self.runtime or DEFAULT_NODE_COMMAND, str(main), *dev_args]
        self.logger.info(
            "⚡️ Run main file: %s",
            self.logger.colorize(str(main), ANSIColors.GREEN),
        )
        self.logger.trace(f"[launch] {cmd}")

        child = await self.launcher(cmd, {**os.environ, **self._env}, self.config.cwd)
        self.spawn_count += 1
        self._exit_watcher = asyncio.ensure_future(self._watch_exit(child))
        return child

    async def _watch_exit(self, child: ChildProcess) -> None:
        code = await child.wait()
        # only reached for exits we did not cause
        self.logger.warning("Main process exit (code %s)", code)
        if self._exit_future is not None and not self._exit_future.done():
            self._exit_future.set_result(code)

    def _detach_exit_watcher(self) -> None:
        if self._exit_watcher is not None:
            self._exit_watcher.cancel()
            self._exit_watcher = None

    async def _stop_child(self) -> None:
        child = self.child
        if child is None:
            return
        self._detach_exit_watcher()
        if child.returncode is None:
            with suppress(ProcessLookupError):
                child.kill()
        await child.wait()
        self.child = None

    def kill_child(self) -> None:
        """Shutdown hook: detach and kill the current child, if any."""
        self._detach_exit_watcher()
        child = self.child
        if child is not None and child.returncode is None:
            with suppress(ProcessLookupError):
                child.kill()
        self.child = None
        self.state = State.EXITED

    async def _supervise(self) -> int:
        assert self._exit_future is not None  # noqa: S101
        watchers = asyncio.ensure_future(self.bundler.wait())
        try:
            done, _ = await asyncio.wait(
                {self._exit_future, watchers},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if watchers in done:
                # surfaces rebuild or relaunch failures
                watchers.result()
            code = await self._exit_future
        finally:
            if not watchers.done():
                watchers.cancel()
                await asyncio.gather(watchers, return_exceptions=True)

        self.state = State.EXITED
        return code

    async def close(self) -> None:
        self.kill_child()
        await self.bundler.close()
