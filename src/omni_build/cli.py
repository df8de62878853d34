# src/omni_build/cli.py

import argparse
import asyncio
import platform
import sys
from difflib import get_close_matches
from pathlib import Path
from typing import Any

from apathetic_logging import LEVEL_ORDER, safeLog

from .actions import get_metadata
from .config import InlineConfig
from .core import Orchestrator
from .lifecycle import ShutdownHooks
from .logs import AppLogger, getAppLogger
from .meta import PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .utils import cast_hint


COMMANDS = ("dev", "build")
DEFAULT_COMMAND = "dev"


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


class HintingArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        # Build known option strings: ["-v", "--verbose", "--log-level", ...]
        known_opts: list[str] = []
        for action in self._actions:
            known_opts.extend([s for s in action.option_strings if s])
            # extras are reported by the top-level parser, so include commands
            if isinstance(action, argparse._SubParsersAction):  # noqa: SLF001
                for sub in action.choices.values():
                    sub_actions = sub._actions  # noqa: SLF001
                    known_opts.extend(s for a in sub_actions for s in a.option_strings)

        hint_lines: list[str] = []
        # Argparse message for bad flags is typically
        # "unrecognized arguments: --entyr ..."
        if "unrecognized arguments:" in message:
            bad = message.split("unrecognized arguments:", 1)[1].strip()
            # Split conservatively on whitespace
            bad_args = [tok for tok in bad.split() if tok.startswith("-")]
            for arg in bad_args:
                close = get_close_matches(arg, known_opts, n=1, cutoff=0.6)
                if close:
                    hint_lines.append(f"Hint: did you mean {close[0]}?")

        # Print usage + the original error
        self.print_usage(sys.stderr)
        full = f"{self.prog}: error: {message}"
        if hint_lines:
            full += "\n" + "\n".join(hint_lines)
        self.exit(2, full + "\n")


def _comma_list(value: str) -> list[str]:
    """``"a, b,c"`` → ``["a", "b", "c"]``."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _common_parser() -> argparse.ArgumentParser:
    """Options shared by every command."""
    common = argparse.ArgumentParser(add_help=False)

    # --- Project ---
    common.add_argument(
        "-t",
        "--type",
        choices=("node", "electron"),
        default=None,
        help="Application type (default: config or node).",
    )
    common.add_argument("-c", "--config", help="Path to the config file.")
    common.add_argument(
        "--disable-config",
        action="store_true",
        default=None,
        help="Do not load any config file.",
    )

    # --- Bundler ---
    common.add_argument("-e", "--entry", help="Entry file of the application.")
    common.add_argument("-o", "--out", help="Output directory of the bundle.")
    common.add_argument("--tsconfig", help="Path to tsconfig.")
    common.add_argument(
        "--external",
        type=_comma_list,
        help="Comma separated modules to keep external (package.json expands).",
    )
    common.add_argument(
        "--bundler-config",
        help="Extra bundler options file (its entry is ignored).",
    )
    common.add_argument("--preload", help="Preload entry file (electron).")

    # --- Color ---
    color = common.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Verbosity ---
    log_level = common.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )
    return common


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT)
    parser.add_argument("--version", action="store_true", help="Show version info.")

    common = _common_parser()
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    # --- dev ---
    dev = commands.add_parser(
        "dev", parents=[common], help="Build, watch and run the application."
    )
    dev.add_argument("-m", "--main", help="Main file of the application.")
    dev.add_argument(
        "--renderer-url",
        type=_comma_list,
        help="Comma separated renderer url(s) to wait for.",
    )
    dev.add_argument(
        "--wait-for-renderer",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Wait for the renderer url(s) before starting (default: on).",
    )
    dev.add_argument(
        "--wait-timeout",
        type=float,
        metavar="SECONDS",
        help="Per-url renderer wait timeout in seconds (default: 5).",
    )
    dev.add_argument("--renderer-dev", help="Renderer dev url.")
    dev.add_argument("--renderer-cwd", help="Renderer working directory.")
    dev.add_argument(
        "--renderer-assets",
        type=_comma_list,
        help="Comma separated renderer asset paths.",
    )
    dev.add_argument("--renderer-out", help="Renderer output directory.")
    dev.add_argument("--renderer-entry", help="Renderer entry file.")
    dev.add_argument(
        "--build-only",
        action="store_true",
        default=None,
        help="Only build and watch, never start the application.",
    )
    dev.add_argument(
        "--run-only",
        action="store_true",
        default=None,
        help="Skip the prebuild and run the existing output.",
    )
    dev.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debug mode (debug args, env and sourcemaps).",
    )

    # --- build ---
    build = commands.add_parser(
        "build", parents=[common], help="Production build and packaging."
    )
    build.add_argument("--packager-config", help="Path to the packager config.")

    return parser


def _normalize_command(argv: list[str]) -> list[str]:
    """Insert the default command when none is given."""
    if argv and argv[0] in (*COMMANDS, "-h", "--help", "--version"):
        return argv
    return [DEFAULT_COMMAND, *argv]


def _build_inline_config(args: argparse.Namespace) -> InlineConfig:
    """Translate parsed arguments into an inline config (None = not given)."""
    inline: dict[str, Any] = {
        "type": args.type,
        "entry": args.entry,
        "out_dir": args.out,
        "tsconfig": args.tsconfig,
        "external": args.external,
        "bundler_config": args.bundler_config,
        "preload": args.preload,
        "log_level": args.log_level,
    }
    if args.disable_config:
        inline["config_file"] = False
    elif args.config:
        inline["config_file"] = args.config

    if args.command == "dev":
        inline.update(
            main=args.main,
            build_only=args.build_only,
            run_only=args.run_only,
            debug=args.debug,
        )
        renderer = {
            "url": args.renderer_url,
            "dev_url": args.renderer_dev,
            "wait_timeout": args.wait_timeout,
            "wait_for_renderer": args.wait_for_renderer,
            "cwd": args.renderer_cwd,
            "assets": args.renderer_assets,
            "out_dir": args.renderer_out,
            "entry": args.renderer_entry,
        }
        renderer = {k: v for k, v in renderer.items() if v is not None}
        if renderer:
            inline["renderer"] = renderer
    else:
        inline["packager_config"] = args.packager_config

    return cast_hint(InlineConfig, {k: v for k, v in inline.items() if v is not None})


def _initialize_logger(args: argparse.Namespace) -> None:
    """Initialize logger with CLI args, env vars, and defaults."""
    logger = getAppLogger()
    log_level = logger.determineLogLevel(args=args)
    logger.setLevel(log_level)

    logger.applyColor(getattr(args, "use_color", None))
    logger.trace("[BOOT] log-level initialized: %s", logger.levelName)

    logger.debug(
        "Runtime: Python %s (%s)\n    %s",
        platform.python_version(),
        platform.python_implementation(),
        sys.version.replace("\n", " "),
    )


def _handle_early_exits(args: argparse.Namespace) -> int | None:
    """Handle --version. Returns exit code if we should exit early."""
    logger = getAppLogger()

    if getattr(args, "version", None):
        meta = get_metadata()
        logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
        return 0

    return None


def _exit_code(code: int | None) -> int:
    # a child killed by signal N reports -N; shells use 128 + N
    if code is None:
        return 1
    return code if code >= 0 else 128 - code


async def _run_command(
    args: argparse.Namespace,
    logger: AppLogger,
    shutdown: ShutdownHooks,
) -> int:
    inline = _build_inline_config(args)
    logger.trace(f"[CLI] inline config: {inline}")

    orchestrator = await Orchestrator.create(
        inline, Path.cwd(), logger=logger, shutdown=shutdown
    )
    try:
        if args.command == "build":
            await orchestrator.build()
            return 0
        return _exit_code(await orchestrator.dev())
    finally:
        await orchestrator.close()


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def main(argv: list[str] | None = None) -> int:
    logger = getAppLogger()  # init (use env + defaults)
    shutdown = ShutdownHooks(logger=logger)

    try:
        parser = _setup_parser()
        args = parser.parse_args(
            _normalize_command(list(sys.argv[1:] if argv is None else argv))
        )

        # --- Early runtime init (use CLI + env + defaults) ---
        _initialize_logger(args)

        # --- Handle early exits (version) ---
        early_exit_code = _handle_early_exits(args)
        if early_exit_code is not None:
            return early_exit_code

        # --- Run the command; dangling tasks are cancelled on return ---
        return asyncio.run(_run_command(args, logger, shutdown))

    except KeyboardInterrupt:
        logger.info("\n🛑 Stopped.")
        return 130

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination
        try:
            logger.errorIfNotDebug(str(e))
        except Exception:  # noqa: BLE001
            safeLog(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    except Exception as e:  # noqa: BLE001
        # unexpected internal error
        try:
            logger.criticalIfNotDebug("Unexpected internal error: %s", e)
        except Exception:  # noqa: BLE001
            safeLog(f"[FATAL] Logging failed while reporting: {e}")
        return 1

    finally:
        shutdown.run()
