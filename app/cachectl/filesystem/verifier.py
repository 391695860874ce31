"""Checksum verification of cached artifacts.

Artifacts in the module cache live at ``<group>/<module>/<version>/<sha1>/<file>``.
A truncated or corrupted download keeps its directory name but not its
content, and silently breaks later builds. The verification pass rehashes
every candidate file on a bounded thread pool and removes mismatches.

Files are handed to the pool through a bounded window, so memory stays
proportional to the pool size rather than to the tree. The pass is
best-effort: it stops waiting once the timeout has elapsed, reports how
much work is left and returns. Removals are idempotent, so the next run
picks up whatever was abandoned.
"""

import logging
import os
import time
from collections import Counter
from collections.abc import Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from pathlib import Path

from cachectl.filesystem.classifier import skip_reason
from cachectl.filesystem.hasher import FileHasher
from cachectl.filesystem.models import VerificationOutcome, VerificationReport, VerificationResult
from cachectl.filesystem.operator import RemovalOperator
from cachectl.filesystem.scanner import walk_tree
from cachectl.utils.formatting import print_error, print_plain, print_warning

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0

# Queued tasks per worker before submission waits for a slot
WINDOW_PER_WORKER = 4

# Tally key for mismatches whose removal failed
_UNREMOVED = "unremoved"


def default_worker_count() -> int:
    """Size the pool to the available parallelism."""
    return os.cpu_count() or 1


class ChecksumVerifier:
    """Verifies files against the checksum encoded in their directory name.

    Args:
        operator: Removal operator used for mismatching files.
        hasher: Content hasher; defaults to SHA-1.
        workers: Pool size; defaults to the CPU count.
        timeout: Seconds the whole pass may take before giving up.
        max_pending: Submitted but unfinished tasks allowed at once;
            defaults to four per worker.
    """

    def __init__(
        self,
        operator: RemovalOperator,
        *,
        hasher: FileHasher | None = None,
        workers: int | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_pending: int | None = None,
    ) -> None:
        self._operator = operator
        self._hasher = hasher or FileHasher()
        self._workers = workers or default_worker_count()
        self._timeout = timeout
        self._max_pending = max(max_pending or self._workers * WINDOW_PER_WORKER, 1)

    def verify_file(self, path: Path) -> VerificationResult:
        """Verify a single file and remove it on mismatch.

        Files that cannot be hashed are reported and left in place.

        Args:
            path: File to verify.

        Returns:
            VerificationResult for the file.
        """
        reason = skip_reason(path)
        if reason is not None:
            logger.debug("Skipping %s: %s", path, reason)
            return VerificationResult(
                path=str(path), outcome=VerificationOutcome.SKIPPED, reason=reason
            )

        expected = path.parent.name
        hashed = self._hasher.compute(path)
        if not hashed.success:
            print_error(f"Error while processing {path}: {hashed.error}")
            return VerificationResult(
                path=str(path),
                outcome=VerificationOutcome.ERROR,
                expected=expected,
                reason=hashed.error,
            )

        if hashed.digest == expected:
            return VerificationResult(
                path=str(path),
                outcome=VerificationOutcome.VERIFIED,
                expected=expected,
                actual=hashed.digest,
            )

        print_plain(f"Checksum mismatch for {path} (expected {expected}, actual: {hashed.digest})")
        removal = self._operator.remove_file(path)
        return VerificationResult(
            path=str(path),
            outcome=VerificationOutcome.MISMATCH,
            expected=expected,
            actual=hashed.digest,
            reason=removal.error,
        )

    def verify_subtree(self, root: Path) -> VerificationReport:
        """Verify every file below ``root`` in parallel.

        Args:
            root: Directory to verify.

        Returns:
            VerificationReport with per-outcome counts and the number of
            files still pending if the pass timed out.
        """
        if not root.is_dir():
            logger.debug("%s is not a directory, skipping checksum verification", root)
            return VerificationReport(root=str(root))

        print_plain(f"Verifying checksums in {root}")

        deadline = time.monotonic() + self._timeout
        files = (task.path for task in walk_tree(root) if not task.is_dir)
        tally: Counter[str] = Counter()
        in_flight: set[Future[VerificationResult]] = set()
        unsubmitted = 0

        executor = ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="verify")
        try:
            for path in files:
                if len(in_flight) >= self._max_pending:
                    done, in_flight = wait(
                        in_flight, timeout=_remaining(deadline), return_when=FIRST_COMPLETED
                    )
                    _collect(done, tally)
                    if not done:
                        unsubmitted = 1 + sum(1 for _ in files)
                        break
                in_flight.add(executor.submit(self.verify_file, path))

            done, in_flight = wait(in_flight, timeout=_remaining(deadline))
            _collect(done, tally)
        finally:
            # Queued work is dropped on timeout; running hashes finish on their own
            executor.shutdown(wait=False, cancel_futures=True)

        pending = len(in_flight) + unsubmitted
        if pending:
            print_warning(
                f"There are {pending} verification tasks still pending "
                f"after {self._timeout:g}s in {root}"
            )

        return VerificationReport(
            root=str(root),
            verified=tally[VerificationOutcome.VERIFIED.value],
            mismatched=tally[VerificationOutcome.MISMATCH.value],
            unremoved=tally[_UNREMOVED],
            skipped=tally[VerificationOutcome.SKIPPED.value],
            errors=tally[VerificationOutcome.ERROR.value],
            pending=pending,
        )


def _remaining(deadline: float) -> float:
    return max(deadline - time.monotonic(), 0.0)


def _collect(done: Iterable[Future[VerificationResult]], tally: Counter[str]) -> None:
    """Add finished tasks to the per-outcome tally."""
    for future in done:
        if future.cancelled():
            continue
        error = future.exception()
        if error is not None:
            logger.debug("Verification task failed", exc_info=error)
            print_error(f"Verification task failed: {error}")
            tally[VerificationOutcome.ERROR.value] += 1
            continue
        result = future.result()
        tally[result.outcome.value] += 1
        if result.outcome is VerificationOutcome.MISMATCH and result.reason is not None:
            tally[_UNREMOVED] += 1
