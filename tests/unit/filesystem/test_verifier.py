"""Tests for ChecksumVerifier."""

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import pytest
from cachectl.filesystem.hasher import FileHasher, HashResult
from cachectl.filesystem.models import RemovalCounters, VerificationOutcome
from cachectl.filesystem.operator import RemovalOperator
from cachectl.filesystem.verifier import ChecksumVerifier


def _verifier(
    counters: RemovalCounters | None = None,
    *,
    dry_run: bool = False,
    **kwargs: object,
) -> ChecksumVerifier:
    operator = RemovalOperator(counters or RemovalCounters(), dry_run=dry_run)
    return ChecksumVerifier(operator, **kwargs)  # type: ignore[arg-type]


class TestVerifyFile:
    """Tests for ChecksumVerifier.verify_file."""

    def test_matching_file_verified(self, make_artifact: Callable[..., Path]) -> None:
        """A file whose hash equals its directory name is left alone."""
        artifact = make_artifact(b"good content")
        counters = RemovalCounters()

        result = _verifier(counters).verify_file(artifact)

        assert result.outcome == VerificationOutcome.VERIFIED
        assert result.actual == result.expected
        assert artifact.exists()
        assert counters.snapshot() == (0, 0)

    def test_mismatching_file_removed(
        self, make_artifact: Callable[..., Path], checksum: Callable[[bytes], str]
    ) -> None:
        """A file whose hash differs from its directory name is removed and counted."""
        artifact = make_artifact(b"truncated", checksum="abc123")
        counters = RemovalCounters()

        result = _verifier(counters).verify_file(artifact)

        assert result.outcome == VerificationOutcome.MISMATCH
        assert result.expected == "abc123"
        assert result.actual == checksum(b"truncated")
        assert not artifact.exists()
        assert counters.snapshot() == (1, len(b"truncated"))

    def test_mismatch_logged(
        self, make_artifact: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Mismatches print the expected and actual digests."""
        artifact = make_artifact(b"x", checksum="abc123")

        _verifier().verify_file(artifact)

        out = capsys.readouterr().out
        assert "Checksum mismatch" in out
        assert "expected abc123" in out

    def test_mismatch_dry_run_keeps_file(self, make_artifact: Callable[..., Path]) -> None:
        """Dry-run counts the mismatch but keeps the file."""
        artifact = make_artifact(b"corrupt", checksum="abc123")
        counters = RemovalCounters()

        result = _verifier(counters, dry_run=True).verify_file(artifact)

        assert result.outcome == VerificationOutcome.MISMATCH
        assert artifact.exists()
        assert counters.snapshot() == (1, len(b"corrupt"))

    def test_mismatch_removal_failure_recorded(
        self, make_artifact: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A mismatching file that cannot be removed carries the removal error."""
        artifact = make_artifact(b"corrupt", checksum="abc123")

        with patch(
            "cachectl.filesystem.operator.os.unlink",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            result = _verifier().verify_file(artifact)

        assert result.outcome == VerificationOutcome.MISMATCH
        assert result.reason is not None
        assert "Permission denied" in result.reason
        assert artifact.exists()
        assert "Unable to remove" in capsys.readouterr().err

    def test_removed_mismatch_has_no_reason(self, make_artifact: Callable[..., Path]) -> None:
        """A removed mismatch carries no removal error."""
        artifact = make_artifact(b"corrupt", checksum="abc123")

        result = _verifier().verify_file(artifact)

        assert result.reason is None

    def test_non_hex_directory_skipped(self, files21: Path) -> None:
        """Files below non-hex directories are skipped whatever their content."""
        target = files21 / "org.example" / "lib" / "lib.pom"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"anything")
        counters = RemovalCounters()

        result = _verifier(counters).verify_file(target)

        assert result.outcome == VerificationOutcome.SKIPPED
        assert target.exists()
        assert counters.snapshot() == (0, 0)

    def test_unreadable_file_not_removed(
        self, make_artifact: Callable[..., Path], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A file that cannot be hashed is reported and never removed."""
        artifact = make_artifact(b"x", checksum="abc123")
        counters = RemovalCounters()
        failing = FileHasher()

        with patch.object(
            FileHasher,
            "compute",
            return_value=HashResult(path=str(artifact), error="Permission denied"),
        ):
            result = _verifier(counters, hasher=failing).verify_file(artifact)

        assert result.outcome == VerificationOutcome.ERROR
        assert result.reason == "Permission denied"
        assert artifact.exists()
        assert counters.snapshot() == (0, 0)
        assert "Error while processing" in capsys.readouterr().err


class TestVerifySubtree:
    """Tests for ChecksumVerifier.verify_subtree."""

    def test_mixed_tree(self, files21: Path, make_artifact: Callable[..., Path]) -> None:
        """Good files stay, bad files go, unrelated files are skipped."""
        good = make_artifact(b"good", coordinates="org.a/a/1.0")
        bad = make_artifact(b"bad", checksum="def456", coordinates="org.b/b/1.0")
        other = files21 / "org.c" / "README"
        other.parent.mkdir(parents=True)
        other.write_text("not an artifact")
        counters = RemovalCounters()

        report = _verifier(counters, workers=4).verify_subtree(files21)

        assert good.exists()
        assert not bad.exists()
        assert other.exists()
        assert report.verified == 1
        assert report.mismatched == 1
        assert report.skipped == 1
        assert report.errors == 0
        assert report.pending == 0
        assert counters.snapshot() == (1, len(b"bad"))

    def test_second_pass_removes_nothing(
        self, files21: Path, make_artifact: Callable[..., Path]
    ) -> None:
        """Running the pass twice removes nothing the second time."""
        make_artifact(b"good")
        make_artifact(b"bad", checksum="abc123", coordinates="org.b/b/1.0")
        verifier = _verifier()

        verifier.verify_subtree(files21)
        counters = RemovalCounters()
        second = _verifier(counters).verify_subtree(files21)

        assert second.mismatched == 0
        assert counters.snapshot() == (0, 0)

    def test_many_files(self, files21: Path, make_artifact: Callable[..., Path]) -> None:
        """Every file gets exactly one outcome."""
        for i in range(50):
            make_artifact(f"content {i}".encode(), coordinates=f"org.x/m{i}/1.0")

        report = _verifier(workers=8).verify_subtree(files21)

        assert report.verified == 50
        assert report.total == 50

    def test_missing_root(self, tmp_path: Path) -> None:
        """A missing root yields an empty report."""
        report = _verifier().verify_subtree(tmp_path / "missing")

        assert report.total == 0
        assert report.timed_out is False

    def test_timeout_reports_pending(
        self,
        files21: Path,
        make_artifact: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """When workers do not finish in time, the pass returns with pending work."""
        for i in range(3):
            make_artifact(f"content {i}".encode(), coordinates=f"org.x/m{i}/1.0")
        release = threading.Event()
        real_compute = FileHasher.compute

        def slow_compute(self: FileHasher, path: Path) -> HashResult:
            release.wait(5)
            return real_compute(self, path)

        try:
            with patch.object(FileHasher, "compute", slow_compute):
                report = _verifier(workers=1, timeout=0.2).verify_subtree(files21)
        finally:
            release.set()

        assert report.timed_out is True
        assert report.pending == 3
        assert "still pending" in capsys.readouterr().err

    def test_worker_exception_counted_as_error(
        self, files21: Path, make_artifact: Callable[..., Path]
    ) -> None:
        """An unexpected exception in one task does not stop the pass."""
        make_artifact(b"one", coordinates="org.x/a/1.0")
        make_artifact(b"two", coordinates="org.x/b/1.0")
        real_compute = FileHasher.compute

        def flaky_compute(self: FileHasher, path: Path) -> HashResult:
            if path.parent.parent.parent.name == "a":
                raise RuntimeError("boom")
            return real_compute(self, path)

        with patch.object(FileHasher, "compute", flaky_compute):
            report = _verifier().verify_subtree(files21)

        assert report.errors == 1
        assert report.verified == 1

    def test_unremoved_mismatches_counted(
        self, files21: Path, make_artifact: Callable[..., Path]
    ) -> None:
        """Mismatches whose removal failed are counted separately."""
        bad = make_artifact(b"bad", checksum="def456")

        with patch(
            "cachectl.filesystem.operator.os.unlink",
            side_effect=PermissionError(13, "Permission denied"),
        ):
            report = _verifier(workers=2).verify_subtree(files21)

        assert bad.exists()
        assert report.mismatched == 1
        assert report.unremoved == 1


class TestSubmissionWindow:
    """Tests for the bounded submission window."""

    def test_small_window_verifies_everything(
        self, files21: Path, make_artifact: Callable[..., Path]
    ) -> None:
        """A window smaller than the tree still gives every file an outcome."""
        for i in range(20):
            make_artifact(f"content {i}".encode(), coordinates=f"org.x/m{i}/1.0")

        report = _verifier(workers=2, max_pending=2).verify_subtree(files21)

        assert report.verified == 20
        assert report.pending == 0

    def test_in_flight_tasks_bounded(
        self, files21: Path, make_artifact: Callable[..., Path]
    ) -> None:
        """No more than the window is ever submitted and unfinished."""
        for i in range(12):
            make_artifact(f"content {i}".encode(), coordinates=f"org.x/m{i}/1.0")
        submitted: list[Future[object]] = []
        peak = 0
        real_submit = ThreadPoolExecutor.submit

        def tracked_submit(
            executor: ThreadPoolExecutor, fn: Callable[..., object], /, *args: object
        ) -> Future[object]:
            nonlocal peak
            unfinished = sum(1 for f in submitted if not f.done())
            peak = max(peak, unfinished + 1)
            future = real_submit(executor, fn, *args)
            submitted.append(future)
            return future

        with patch.object(ThreadPoolExecutor, "submit", tracked_submit):
            report = _verifier(workers=1, max_pending=3).verify_subtree(files21)

        assert report.verified == 12
        assert len(submitted) == 12
        assert peak <= 3

    def test_timeout_counts_unsubmitted_files(
        self,
        files21: Path,
        make_artifact: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Files never handed to the pool are reported as pending on timeout."""
        for i in range(5):
            make_artifact(f"content {i}".encode(), coordinates=f"org.x/m{i}/1.0")
        release = threading.Event()
        real_compute = FileHasher.compute

        def slow_compute(self: FileHasher, path: Path) -> HashResult:
            release.wait(5)
            return real_compute(self, path)

        try:
            with patch.object(FileHasher, "compute", slow_compute):
                report = _verifier(workers=1, max_pending=2, timeout=0.2).verify_subtree(files21)
        finally:
            release.set()

        assert report.pending == 5
        assert report.total == 0
        assert "There are 5 verification tasks still pending" in capsys.readouterr().err
