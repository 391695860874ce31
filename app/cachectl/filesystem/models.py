"""Filesystem domain models for cache pruning and verification.

This module defines the transient data structures produced while walking
and verifying a cache tree, plus the shared removal counters that every
deleting component reports into.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ScanTask:
    """A filesystem entry discovered during a tree walk.

    Attributes:
        path: Path of the entry.
        is_file: True for regular files (symbolic links are never regular files).
        is_dir: True for real directories (symbolic links to directories excluded).
    """

    path: Path
    is_file: bool
    is_dir: bool

    @property
    def is_symlink_or_special(self) -> bool:
        """Check if the entry is neither a regular file nor a directory."""
        return not (self.is_file or self.is_dir)


class VerificationOutcome(str, Enum):
    """Result of verifying a single file.

    Attributes:
        VERIFIED: Content hash equals the parent directory name.
        MISMATCH: Content hash differs; the file was removed unless
            ``reason`` says why it could not be.
        SKIPPED: Not a verification candidate.
        ERROR: The file could not be hashed; it was left untouched.
    """

    VERIFIED = "verified"
    MISMATCH = "mismatch"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of verifying one file.

    Attributes:
        path: File that was examined.
        outcome: Verification outcome.
        expected: Digest encoded in the parent directory name, if any.
        actual: Computed digest, if hashing succeeded.
        reason: Why the file was skipped or could not be verified, or why a
            mismatching file could not be removed.
    """

    path: str
    outcome: VerificationOutcome
    expected: str | None = None
    actual: str | None = None
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class RemovalResult:
    """Result of a single removal.

    Attributes:
        path: Path that was operated on.
        success: False only if the entry existed and could not be removed.
        size_bytes: Size accounted to the removal counters.
        missing: The entry did not exist; nothing was counted.
        error: Error message if the removal failed, None otherwise.
        dry_run: Whether this was a dry-run (no actual deletion).
    """

    path: str
    success: bool
    size_bytes: int = 0
    missing: bool = False
    error: str | None = None
    dry_run: bool = False


class RemovalCounters:
    """Process-wide totals of removed entries and bytes.

    Safe to update from many worker threads; both totals are updated
    under one lock so a snapshot never sees a half-applied removal.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files = 0
        self._bytes = 0

    def record(self, size_bytes: int) -> None:
        """Account one removed entry of the given size."""
        with self._lock:
            self._files += 1
            self._bytes += size_bytes

    @property
    def files_removed(self) -> int:
        with self._lock:
            return self._files

    @property
    def bytes_removed(self) -> int:
        with self._lock:
            return self._bytes

    def snapshot(self) -> tuple[int, int]:
        """Return ``(files_removed, bytes_removed)`` read atomically."""
        with self._lock:
            return self._files, self._bytes


@dataclass(frozen=True, slots=True)
class VerificationReport:
    """Aggregate result of one checksum verification pass.

    Attributes:
        root: Subtree that was verified.
        verified: Files whose content matched their directory name.
        mismatched: Files whose content did not match their directory name.
        unremoved: Mismatching files that could not be removed.
        skipped: Files that were not verification candidates.
        errors: Files that could not be hashed.
        pending: Tasks still outstanding when the wait timed out.
        enabled: False when verification was disabled by configuration.
    """

    root: str
    verified: int = 0
    mismatched: int = 0
    unremoved: int = 0
    skipped: int = 0
    errors: int = 0
    pending: int = 0
    enabled: bool = True

    @property
    def timed_out(self) -> bool:
        """Check if the pass returned with work still outstanding."""
        return self.pending > 0

    @property
    def total(self) -> int:
        """Number of files with a recorded outcome."""
        return self.verified + self.mismatched + self.skipped + self.errors
