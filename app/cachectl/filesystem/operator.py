"""Cache entry removal operator.

Handles best-effort deletion of single entries and whole subtrees with
dry-run support. Every removed entry is accounted to shared
RemovalCounters; failures are reported and never abort the run.
"""

import logging
import os
import stat
from pathlib import Path

from cachectl.filesystem.models import RemovalCounters, RemovalResult
from cachectl.filesystem.scanner import walk_tree
from cachectl.utils.formatting import print_error, print_plain

logger = logging.getLogger(__name__)


class RemovalOperator:
    """Removes cache files and directories.

    Symbolic links are removed as links; their targets are never touched
    or traversed.

    Attributes:
        _counters: Shared totals updated for every removed entry.
        _dry_run: If True, count and report removals without deleting.
    """

    def __init__(self, counters: RemovalCounters, *, dry_run: bool = False) -> None:
        """Initialize the RemovalOperator.

        Args:
            counters: Shared removal totals.
            dry_run: If True, report what would be removed without removing.
        """
        self._counters = counters
        self._dry_run = dry_run

    @property
    def counters(self) -> RemovalCounters:
        return self._counters

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def remove_file(self, path: Path, *, silent: bool = False) -> RemovalResult:
        """Remove a single entry.

        A file, a symbolic link or an empty directory is removed. A missing
        entry is a no-op logged at debug level.

        Args:
            path: Entry to remove.
            silent: Suppress the "Removed" line on success.

        Returns:
            RemovalResult describing what happened.
        """
        try:
            st = path.lstat()
        except FileNotFoundError:
            logger.debug("File %s does not exist, won't remove it", path)
            return RemovalResult(path=str(path), success=True, missing=True)
        except OSError as e:
            print_error(f"Unable to remove {path}: {e}")
            return RemovalResult(path=str(path), success=False, error=str(e))

        size = st.st_size
        self._counters.record(size)

        if self._dry_run:
            if not silent:
                print_plain(f"Removed {path}")
            return RemovalResult(path=str(path), success=True, size_bytes=size, dry_run=True)

        try:
            if stat.S_ISDIR(st.st_mode):
                os.rmdir(path)
            else:
                os.unlink(path)
        except FileNotFoundError:
            # Raced with an external deletion; the entry is gone either way
            logger.debug("File %s disappeared before removal", path)
        except OSError as e:
            print_error(f"Unable to remove {path}: {e}")
            return RemovalResult(path=str(path), success=False, size_bytes=size, error=str(e))

        if not silent:
            print_plain(f"Removed {path}")
        return RemovalResult(path=str(path), success=True, size_bytes=size)

    def remove_tree(self, root: Path, label: str, *, silent: bool = True) -> list[RemovalResult]:
        """Remove a file or a whole directory subtree.

        Entries are removed deepest first, so every directory is already
        empty when its own removal is attempted. A missing root is a no-op.

        Args:
            root: File or directory to remove.
            label: Human-readable description for the progress line.
            silent: Suppress the per-entry "Removed" lines.

        Returns:
            One RemovalResult per entry that was found.
        """
        if not os.path.lexists(root):
            logger.debug("%s does not exist, won't remove %s", root, label)
            return []

        print_plain(f"Removing {label}: {root}")
        results: list[RemovalResult] = []
        for task in walk_tree(root, bottom_up=True):
            result = self.remove_file(task.path, silent=silent)
            if not result.missing:
                results.append(result)

        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.debug("%d of %d entries under %s could not be removed", failed, len(results), root)
        return results

    def remove_files(self, paths: list[Path], *, silent: bool = False) -> list[RemovalResult]:
        """Remove several single entries, isolating failures per path."""
        return [self.remove_file(path, silent=silent) for path in paths]
