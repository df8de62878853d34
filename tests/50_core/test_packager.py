# tests/50_core/test_packager.py

import asyncio
import json
import sys
from pathlib import Path

import pytest

import omni_build.packager as mod_packager
from omni_build.errors import BuildError, DependencyMissingError
from tests.utils import install_node_package


FAKE_PACKAGER = """\
import json
import sys

args = sys.argv[1:]
record = {{"args": args}}
if "--config" in args:
    path = args[args.index("--config") + 1]
    if path.endswith(".json"):
        with open(path, encoding="utf-8") as fh:
            record["config"] = json.load(fh)
with open({log!r}, "w", encoding="utf-8") as fh:
    json.dump(record, fh)
sys.exit({code})
"""


def _command(tmp_path: Path, code: int = 0) -> tuple[list[str], Path]:
    log = tmp_path / "packager.json.log"
    script = tmp_path / "fake_packager.py"
    script.write_text(FAKE_PACKAGER.format(log=str(log), code=code))
    return [sys.executable, str(script)], log


def test_mapping_config_is_written_to_a_file(tmp_path: Path) -> None:
    # --- setup ---
    command, log = _command(tmp_path)
    packager = mod_packager.ElectronBuilderPackager(command, cwd=tmp_path)

    # --- execute ---
    asyncio.run(
        packager.package({"appId": "com.example"}, {"publish": "never", "x64": True})
    )

    # --- verify ---
    record = json.loads(log.read_text())
    assert record["config"] == {"appId": "com.example"}
    assert record["args"][-3:] == ["--publish", "never", "--x64"]


def test_path_config_is_passed_through(tmp_path: Path) -> None:
    command, log = _command(tmp_path)
    packager = mod_packager.ElectronBuilderPackager(command, cwd=tmp_path)

    asyncio.run(packager.package("/proj/electron-builder.yml"))

    assert json.loads(log.read_text())["args"] == [
        "--config",
        "/proj/electron-builder.yml",
    ]


def test_failure_raises_build_error(tmp_path: Path) -> None:
    command, _ = _command(tmp_path, code=3)
    packager = mod_packager.ElectronBuilderPackager(command, cwd=tmp_path)

    with pytest.raises(BuildError, match=r"Packager failed \(exit 3\)"):
        asyncio.run(packager.package(None))


def test_ensure_packager_installed(tmp_path: Path) -> None:
    with pytest.raises(DependencyMissingError) as exc_info:
        mod_packager.ensure_packager_installed(tmp_path)
    assert exc_info.value.package == "electron-builder"
    assert '"electron.build" is powered by "electron-builder"' in str(exc_info.value)

    pkg_dir = install_node_package(tmp_path, "electron-builder")

    assert mod_packager.ensure_packager_installed(tmp_path) == pkg_dir.resolve()
