# tests/50_core/test_orchestrator_build.py
"""Production build: sequential tasks, hooks, then packaging."""

import asyncio
from pathlib import Path
from typing import Any

import pytest

from omni_build.config.config_types import BundlerTaskOptions, PackagerConfig
from omni_build.core import Orchestrator, State
from omni_build.errors import BuildError, DependencyMissingError
from tests.utils import (
    FakeBundler,
    FakeLauncher,
    FakePackager,
    install_node_package,
    make_project,
    make_resolved_config,
)


TASKS = (
    BundlerTaskOptions(entry=["src/main.ts"], format="cjs"),
    BundlerTaskOptions(entry=["src/preload.ts"], format="cjs"),
)


def _electron_project(root: Path) -> None:
    make_project(root)
    install_node_package(root, "electron")
    install_node_package(root, "electron-builder")


def _orchestrator(
    root: Path, events: list[Any], **overrides: Any
) -> tuple[Orchestrator, FakeBundler, FakePackager]:
    bundler = FakeBundler(events=events, fail_on=overrides.pop("fail_on", None))
    packager = FakePackager(events)
    orch = Orchestrator(
        make_resolved_config(root, **overrides),
        bundler=bundler,
        packager=packager,
        launcher=FakeLauncher(events),
    )
    return orch, bundler, packager


def test_tasks_build_in_order_without_watch(tmp_path: Path) -> None:
    # --- setup ---
    make_project(tmp_path)
    events: list[Any] = []
    orch, bundler, _ = _orchestrator(tmp_path, events, bundler_tasks=TASKS)

    # --- execute ---
    result = asyncio.run(orch.build())

    # --- verify ---
    assert result is None
    assert events == [
        ("build", ("src/main.ts",)),
        ("build", ("src/preload.ts",)),
    ]
    assert [c["watch"] for c in bundler.calls] == [False, False]
    assert bundler.calls[0]["env"]["NODE_ENV"] == "production"
    assert orch.state is State.EXITED


def test_after_build_runs_after_all_tasks(tmp_path: Path) -> None:
    make_project(tmp_path)
    events: list[Any] = []

    async def after_build() -> None:
        events.append(("after_build",))

    orch, _, _ = _orchestrator(
        tmp_path, events, bundler_tasks=TASKS, after_build=after_build
    )

    asyncio.run(orch.build())

    assert events[-1] == ("after_build",)
    assert len(events) == 3


def test_failed_task_stops_the_build(tmp_path: Path) -> None:
    # --- setup ---
    make_project(tmp_path)
    events: list[Any] = []
    hook_calls: list[int] = []
    orch, bundler, _ = _orchestrator(
        tmp_path,
        events,
        fail_on=0,
        bundler_tasks=TASKS,
        after_build=lambda: hook_calls.append(1),
    )

    # --- execute ---
    with pytest.raises(BuildError) as exc_info:
        asyncio.run(orch.build())

    # --- verify ---
    assert len(bundler.calls) == 1
    assert hook_calls == []
    assert exc_info.value.output == "boom"


def test_node_app_is_never_packaged(tmp_path: Path) -> None:
    make_project(tmp_path)
    events: list[Any] = []
    orch, _, packager = _orchestrator(
        tmp_path,
        events,
        packager=PackagerConfig(disabled=False, config={"appId": "x"}),
    )

    asyncio.run(orch.build())

    assert packager.calls == []


def test_electron_build_packages_after_staging(tmp_path: Path) -> None:
    # --- setup ---
    _electron_project(tmp_path)
    (tmp_path / "index.html").write_text("<html/>")
    events: list[Any] = []
    packager_hook: list[str] = []
    orch, _, packager = _orchestrator(
        tmp_path,
        events,
        type="electron",
        renderer={"cwd": str(tmp_path), "out_dir": "dist", "entry": "index.html"},
        packager=PackagerConfig(
            disabled=False,
            config={"appId": "x"},
            cli_options={"publish": "never"},
            after_build=lambda: packager_hook.append("done"),
        ),
    )

    # --- execute ---
    asyncio.run(orch.build())

    # --- verify ---
    assert events == [("build", ("src/main.ts",)), ("package",)]
    assert packager.calls == [({"appId": "x"}, {"publish": "never"})]
    assert (tmp_path / "dist" / "index.html").read_text() == "<html/>"
    assert packager_hook == ["done"]


def test_disabled_packager_is_skipped(tmp_path: Path) -> None:
    _electron_project(tmp_path)
    events: list[Any] = []
    orch, _, packager = _orchestrator(tmp_path, events, type="electron")

    asyncio.run(orch.build())

    assert packager.calls == []


def test_missing_packager_dependency(tmp_path: Path) -> None:
    make_project(tmp_path)
    install_node_package(tmp_path, "electron")
    orch, _, packager = _orchestrator(
        tmp_path,
        [],
        type="electron",
        packager=PackagerConfig(disabled=False, config={}),
    )

    with pytest.raises(DependencyMissingError, match="electron-builder"):
        asyncio.run(orch.build())

    assert packager.calls == []


def test_auto_pack_false_returns_pack_step(tmp_path: Path) -> None:
    # --- setup ---
    _electron_project(tmp_path)
    events: list[Any] = []
    orch, _, packager = _orchestrator(
        tmp_path,
        events,
        type="electron",
        packager=PackagerConfig(disabled=False, config={"appId": "x"}),
    )

    async def scenario() -> None:
        pack = await orch.build(auto_pack=False)
        assert pack is not None
        assert packager.calls == []
        await pack()

    # --- execute ---
    asyncio.run(scenario())

    # --- verify ---
    assert events[-1] == ("package",)
