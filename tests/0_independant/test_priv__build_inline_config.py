# tests/0_independant/test_priv__build_inline_config.py
# we import `_` private for testing purposes only
# ruff: noqa: SLF001
# pyright: reportPrivateUsage=false

import omni_build.cli as mod_cli


def _parse(*argv: str) -> dict[str, object]:
    parser = mod_cli._setup_parser()
    args = parser.parse_args(mod_cli._normalize_command(list(argv)))
    return dict(mod_cli._build_inline_config(args))


def test_no_flags_give_empty_inline_config() -> None:
    """Unset flags must not override values from the config file."""
    assert _parse() == {}


def test_dev_flags_map_to_inline_keys() -> None:
    # --- execute ---
    inline = _parse(
        "-t",
        "electron",
        "-e",
        "src/main.ts",
        "-o",
        "dist-electron",
        "--external",
        "package.json,lodash",
        "-m",
        "dist-electron/main.js",
        "--build-only",
        "--debug",
    )

    # --- verify ---
    assert inline == {
        "type": "electron",
        "entry": "src/main.ts",
        "out_dir": "dist-electron",
        "external": ["package.json", "lodash"],
        "main": "dist-electron/main.js",
        "build_only": True,
        "debug": True,
    }


def test_renderer_flags_are_grouped() -> None:
    inline = _parse(
        "--renderer-url",
        "http://a,http://b",
        "--no-wait-for-renderer",
        "--wait-timeout",
        "2.5",
    )

    assert inline["renderer"] == {
        "url": ["http://a", "http://b"],
        "wait_for_renderer": False,
        "wait_timeout": 2.5,
    }


def test_disable_config_sets_false() -> None:
    assert _parse("--disable-config", "-c", "x.json")["config_file"] is False


def test_config_path_is_passed_through() -> None:
    assert _parse("-c", "custom.json")["config_file"] == "custom.json"


def test_build_command_takes_packager_config() -> None:
    inline = _parse("build", "--packager-config", "electron-builder.yml")

    assert inline == {"packager_config": "electron-builder.yml"}


def test_log_level_flag_is_forwarded() -> None:
    assert _parse("-q")["log_level"] == "warning"
