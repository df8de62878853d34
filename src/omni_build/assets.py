# src/omni_build/assets.py
"""Stage renderer assets and the entry file into the renderer output tree."""

import asyncio
import shutil
from pathlib import Path

from .config.config_types import RendererConfig
from .logs import AppLogger, getAppLogger
from .utils import (
    ensure_path_exists,
    find_longest_common_prefix_path,
    remove_prefix_folders,
)


def _copy_item(src: Path, dest: Path) -> None:
    """Copy a file or a whole directory to `dest`, overwriting."""
    if not src.exists():
        xmsg = f"Renderer asset not found: {src}"
        raise FileNotFoundError(xmsg)

    if src.is_dir():
        ensure_path_exists(dest)
        shutil.copytree(src, dest, dirs_exist_ok=True)
    else:
        ensure_path_exists(dest, is_file=True)
        shutil.copy2(src, dest)


async def stage_renderer_assets(
    renderer: RendererConfig | None,
    *,
    logger: AppLogger | None = None,
) -> list[Path]:
    """Copy static-mode renderer files into ``cwd/out_dir``.

    Assets and the entry share one common-prefix collapse, so
    ``src/assets/a.png`` with entry ``src/index.html`` lands at
    ``<out_dir>/assets/a.png``. Copies run one at a time in a worker thread.

    Returns the written destinations (empty when there is nothing to stage).
    """
    logger = logger or getAppLogger()
    if not renderer:
        return []

    cwd = renderer.get("cwd")
    out_dir = renderer.get("out_dir")
    entry = renderer.get("entry")
    if not (cwd and out_dir and entry):
        logger.trace("[stage_renderer_assets] not in static mode, skipping")
        return []

    root = Path(cwd)
    target_root = root / out_dir
    assets = list(renderer.get("assets") or [])

    _, prefix_count = find_longest_common_prefix_path([*assets, entry])
    logger.trace(f"[stage_renderer_assets] common prefix components: {prefix_count}")

    written: list[Path] = []
    for item in [*assets, entry]:
        dest = target_root / remove_prefix_folders(item, prefix_count)
        logger.debug("📁 Copy %s → %s", item, dest)
        await asyncio.to_thread(_copy_item, root / item, dest)
        written.append(dest)

    return written
