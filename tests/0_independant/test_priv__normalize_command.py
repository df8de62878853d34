# tests/0_independant/test_priv__normalize_command.py
# we import `_` private for testing purposes only
# ruff: noqa: SLF001
# pyright: reportPrivateUsage=false

import pytest

import omni_build.cli as mod_cli


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        ([], ["dev"]),
        (["-e", "src/main.ts"], ["dev", "-e", "src/main.ts"]),
        (["build", "-e", "a.ts"], ["build", "-e", "a.ts"]),
        (["dev"], ["dev"]),
        (["--help"], ["--help"]),
        (["--version"], ["--version"]),
    ],
)
def test_normalize_command(argv: list[str], expected: list[str]) -> None:
    assert mod_cli._normalize_command(argv) == expected


def test_comma_list_strips_and_drops_empty() -> None:
    assert mod_cli._comma_list(" a, b,,c ") == ["a", "b", "c"]
