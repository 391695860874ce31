"""Lazy cache tree walking.

Cache directories can hold tens of thousands of entries, so the walk is a
generator: directory listings are read one directory at a time and never
accumulated for the whole tree. Symbolic links are reported as entries but
never followed.
"""

import logging
import os
import stat
from collections.abc import Iterator
from pathlib import Path

from cachectl.filesystem.models import ScanTask

logger = logging.getLogger(__name__)


def walk_tree(
    root: Path,
    *,
    max_depth: int | None = None,
    bottom_up: bool = False,
) -> Iterator[ScanTask]:
    """Walk a tree without following symbolic links.

    The root itself is yielded as well (depth 0). Missing roots yield
    nothing; unreadable directories are logged and skipped.

    Args:
        root: Directory (or file) to walk.
        max_depth: Deepest level to yield; None walks the whole tree.
        bottom_up: Yield children strictly before their parent directory.

    Yields:
        ScanTask for every entry.
    """
    try:
        mode = root.lstat().st_mode
    except FileNotFoundError:
        logger.debug("%s does not exist, nothing to walk", root)
        return
    except OSError as e:
        logger.warning("Cannot access %s: %s", root, e)
        return

    task = ScanTask(path=root, is_file=stat.S_ISREG(mode), is_dir=stat.S_ISDIR(mode))

    if not bottom_up:
        yield task
    if task.is_dir and (max_depth is None or max_depth > 0):
        yield from _walk_children(root, 1, max_depth, bottom_up)
    if bottom_up:
        yield task


def _walk_children(
    directory: Path,
    depth: int,
    max_depth: int | None,
    bottom_up: bool,
) -> Iterator[ScanTask]:
    """Yield the entries below one directory, recursing into subdirectories."""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except FileNotFoundError:
        return
    except OSError as e:
        logger.warning("Cannot list directory %s: %s", directory, e)
        return

    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            logger.warning("Cannot determine type of: %s", entry.path)
            continue

        task = ScanTask(path=Path(entry.path), is_file=is_file, is_dir=is_dir)

        if not bottom_up:
            yield task
        if is_dir and (max_depth is None or depth < max_depth):
            yield from _walk_children(task.path, depth + 1, max_depth, bottom_up)
        if bottom_up:
            yield task


def find_named(root: Path, name: str, *, max_depth: int) -> list[Path]:
    """Find entries with an exact name within ``max_depth`` levels of root.

    The result is materialized so callers can remove matches without
    disturbing the walk.
    """
    return [task.path for task in walk_tree(root, max_depth=max_depth) if task.path.name == name]


def find_with_suffix(root: Path, suffix: str, *, max_depth: int) -> list[Path]:
    """Find entries whose name ends with ``suffix`` within ``max_depth`` levels of root."""
    return [
        task.path
        for task in walk_tree(root, max_depth=max_depth)
        if task.path.name.endswith(suffix)
    ]
