# src/omni_build/bundler.py
"""External bundler adapter.

Each task is written to a JSON task file and handed to the bundler command
(``npx tsdown --config <file>`` by default). Watch mode is driven here by
polling source modification times, re-running the command on change.
"""

import asyncio
import json
import os
import shutil
import tempfile
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from .config.config_types import BundlerTaskOptions
from .constants import (
    DEFAULT_BUNDLER_COMMAND,
    DEFAULT_ENV_WATCH_INTERVAL,
    DEFAULT_OUT_DIR,
    DEFAULT_WATCH_INTERVAL,
    WATCH_IGNORED_DIRS,
)
from .errors import BuildError
from .logs import AppLogger, getAppLogger
from .meta import PROGRAM_ENV, PROGRAM_SCRIPT
from .utils import (
    maybe_await,
    plural,
    resolve_path,
    run_command,
    shorten_path_for_display,
)


class Bundler(Protocol):
    async def build(
        self, options: BundlerTaskOptions, *, silent: bool = True
    ) -> None: ...

    async def wait(self) -> None: ...

    async def close(self) -> None: ...


def determine_watch_interval() -> float:
    """Watch poll interval in seconds, overridable from the environment."""
    raw = os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_WATCH_INTERVAL}")
    if raw:
        try:
            value = float(raw)
        except ValueError:
            getAppLogger().warning("Ignoring invalid watch interval: %r", raw)
        else:
            if value > 0:
                return value
    return DEFAULT_WATCH_INTERVAL


def _to_camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def serialize_task(options: BundlerTaskOptions) -> dict[str, Any]:
    """Return the JSON-safe part of a task with bundler-style keys.

    Callables are dropped and watching is left to the adapter.
    """
    return {
        _to_camel(key): value
        for key, value in options.items()
        if not callable(value) and key not in ("watch", "on_success")
    }


def _is_ignored(path: Path, ignored: Iterable[Path]) -> bool:
    return any(path == p or path.is_relative_to(p) for p in ignored)


def _snapshot(roots: Sequence[Path], ignored: Iterable[Path]) -> dict[Path, float]:
    ignored = tuple(ignored)
    mtimes: dict[Path, float] = {}
    for root in roots:
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = [
                d
                for d in dirnames
                if d not in WATCH_IGNORED_DIRS
                and not _is_ignored(current / d, ignored)
            ]
            for name in filenames:
                f = current / name
                if _is_ignored(f, ignored):
                    continue
                try:
                    mtimes[f] = f.stat().st_mtime
                except FileNotFoundError:
                    continue
    return mtimes


def _changed_files(
    before: dict[Path, float], after: dict[Path, float], ignored: Iterable[Path]
) -> list[Path]:
    # outputs registered after `before` was taken are not changes
    ignored = tuple(ignored)
    changed = [f for f, m in after.items() if before.get(f) != m]
    changed += [f for f in before if f not in after and not _is_ignored(f, ignored)]
    return changed


def watch_roots(options: BundlerTaskOptions, cwd: Path) -> list[Path]:
    """Top-level source directories holding the task's entries.

    ``src/main/index.ts`` watches ``src``; an entry directly in `cwd`
    (or outside it) watches its own directory.
    """
    roots: list[Path] = []
    for entry in options.get("entry") or []:
        path = resolve_path(entry, cwd)
        try:
            parts = path.relative_to(cwd).parts
        except ValueError:
            root = path.parent
        else:
            root = cwd / parts[0] if len(parts) > 1 else cwd
        if root not in roots:
            roots.append(root)
    return roots or [cwd]


class CommandBundler:
    """Run a bundler command per task, optionally watching for changes."""

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_BUNDLER_COMMAND,
        *,
        cwd: Path | None = None,
        interval: float | None = None,
        ignored: Iterable[Path | str] = (),
        logger: AppLogger | None = None,
    ) -> None:
        self.command = list(command)
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.interval = interval if interval is not None else determine_watch_interval()
        self.logger = logger or getAppLogger()
        # every task's out dir joins this, so no watcher reacts to any build output
        self.ignored: list[Path] = [resolve_path(p, self.cwd) for p in ignored]
        self._watchers: list[asyncio.Task[None]] = []
        self._tmp_dir: Path | None = None
        self._task_count = 0

    def _write_task_file(self, options: BundlerTaskOptions) -> Path:
        if self._tmp_dir is None:
            self._tmp_dir = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-"))
        self._task_count += 1
        task_file = self._tmp_dir / f"task-{self._task_count}.json"
        task_file.write_text(
            json.dumps(serialize_task(options), indent=2), encoding="utf-8"
        )
        return task_file

    async def _run(
        self, task_file: Path, options: BundlerTaskOptions, *, silent: bool
    ) -> None:
        entry = ", ".join(options.get("entry") or [])
        result = await run_command(
            [*self.command, "--config", str(task_file)],
            cwd=self.cwd,
            capture=silent,
        )
        if result.returncode != 0:
            xmsg = f"Bundler failed for {entry or 'task'} (exit {result.returncode})"
            raise BuildError(xmsg, output=result.output, code=result.returncode)

    async def build(self, options: BundlerTaskOptions, *, silent: bool = True) -> None:
        """Build one task; resolves once the first build succeeds.

        With ``watch`` set, a background watcher keeps rebuilding and calls
        ``on_success`` after every successful rebuild.
        """
        on_success = options.get("on_success")
        out_dir = resolve_path(options.get("out_dir") or DEFAULT_OUT_DIR, self.cwd)
        if out_dir not in self.ignored:
            self.ignored.append(out_dir)
        task_file = self._write_task_file(options)
        self.logger.trace(f"[bundler] task file {task_file}")

        await self._run(task_file, options, silent=silent)
        if callable(on_success):
            await maybe_await(on_success())

        if options.get("watch"):
            watcher = asyncio.ensure_future(
                self._watch(task_file, options, on_success, silent=silent)
            )
            self._watchers.append(watcher)

    async def _watch(
        self,
        task_file: Path,
        options: BundlerTaskOptions,
        on_success: Callable[[], Any] | None,
        *,
        silent: bool,
    ) -> None:
        """Poll file modification times and rebuild when changes are detected.

        Only the task's source roots are scanned, and the output directory
        of every task built by this bundler is skipped.
        """
        roots = watch_roots(options, self.cwd)
        self.logger.info(
            "👀 Watching %s for changes (interval=%.2fs)...",
            ", ".join(shorten_path_for_display(r, cwd=self.cwd) for r in roots),
            self.interval,
        )

        mtimes = await asyncio.to_thread(_snapshot, roots, tuple(self.ignored))
        while True:
            await asyncio.sleep(self.interval)

            # re-scan every tick so new/removed files are tracked
            current = await asyncio.to_thread(_snapshot, roots, tuple(self.ignored))
            changed = _changed_files(mtimes, current, self.ignored)
            self.logger.trace(f"[watch] Checked {len(current)} files")
            if not changed:
                continue

            self.logger.info(
                "🔁 Detected %d modified file%s. Rebuilding...",
                len(changed),
                plural(changed),
            )
            try:
                await self._run(task_file, options, silent=silent)
            except BuildError as e:
                self.logger.error("Rebuild failed: %s", e)  # noqa: TRY400
            else:
                if callable(on_success):
                    await maybe_await(on_success())
            finally:
                # refresh timestamps after rebuild
                mtimes = await asyncio.to_thread(_snapshot, roots, tuple(self.ignored))

    async def wait(self) -> None:
        """Wait until every watcher stops (normally only on cancellation)."""
        if self._watchers:
            await asyncio.gather(*self._watchers)

    async def close(self) -> None:
        for watcher in self._watchers:
            watcher.cancel()
        if self._watchers:
            await asyncio.gather(*self._watchers, return_exceptions=True)
        self._watchers.clear()

        if self._tmp_dir is not None:
            shutil.rmtree(self._tmp_dir, ignore_errors=True)
            self._tmp_dir = None
