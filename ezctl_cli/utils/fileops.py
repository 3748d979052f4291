"""File copy helpers for snapshot capture and projection.

All copies are whole-file overwrites. ``sync_dir`` optionally prunes files on
the destination that have no counterpart on the source, which turns an
overwrite into an exact mirror.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def copy_file(src: Path, dst: Path) -> None:
    """Copy one file, creating parent directories and preserving metadata."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


def sync_dir(src: Path, dst: Path, *, prune: bool = False) -> list[Path]:
    """Copy every file under ``src`` to the same relative path under ``dst``.

    Args:
        src: Source directory (must exist)
        dst: Destination directory (created if missing)
        prune: Delete files under ``dst`` that do not exist under ``src``

    Returns:
        Relative paths of the files copied
    """
    copied: list[Path] = []
    dst.mkdir(parents=True, exist_ok=True)
    for path in sorted(src.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(src)
        copy_file(path, dst / relative)
        copied.append(relative)

    if prune:
        keep = set(copied)
        for path in sorted(dst.rglob("*"), reverse=True):
            relative = path.relative_to(dst)
            if path.is_file() and relative not in keep:
                logger.debug(f"Pruning stale file {path}")
                path.unlink()
            elif path.is_dir() and not any(path.iterdir()):
                path.rmdir()

    return copied


def atomic_write_text(path: Path, content: str) -> None:
    """Write text through a temp file in the same directory, then rename over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", dir=path.parent, prefix=f".{path.name}_", suffix=".tmp", delete=False, encoding="utf-8"
    ) as tmp_file:
        temp_path = Path(tmp_file.name)
        try:
            tmp_file.write(content)
            tmp_file.flush()
        except Exception:
            with contextlib.suppress(OSError):
                temp_path.unlink()
            raise
    try:
        temp_path.replace(path)
    except OSError:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise
