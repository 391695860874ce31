"""Cleanup orchestration.

Runs the cleanup steps in a fixed order against one cache home:

1. lock files
2. user identity files
3. unzipped distributions
4. version-dependent cleanup (wrapper distributions, per-version caches)
5. checksum verification

Each step has its own failure boundary: an unexpected error is reported
and the next step still runs. No state survives between runs.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from cachectl.core.paths import (
    UNZIPPED_DISTRIBUTION,
    get_caches_dir,
    get_lock_files,
    get_module_files_dir,
    get_transforms_dir,
    get_user_id_files,
    get_wrapper_dists_dir,
    get_wrapper_properties_path,
)
from cachectl.core.settings import RunConfiguration
from cachectl.core.wrapper import (
    WrapperDistribution,
    WrapperPropertiesError,
    load_wrapper_distribution,
)
from cachectl.filesystem.models import RemovalCounters, VerificationReport
from cachectl.filesystem.operator import RemovalOperator
from cachectl.filesystem.scanner import find_named, find_with_suffix
from cachectl.filesystem.verifier import ChecksumVerifier
from cachectl.utils.formatting import print_error, print_plain, print_warning

logger = logging.getLogger(__name__)

# Unzipped distributions and wrapper archives sit at most two levels deep
_SEARCH_DEPTH = 2


@dataclass(frozen=True, slots=True)
class CleanupSummary:
    """Totals reported at the end of a run.

    Attributes:
        files_removed: Entries removed (or that would be removed in dry-run).
        bytes_removed: Bytes accounted to those entries.
        failed_steps: Names of steps that ended with an unexpected error.
        verification: Report of the verification pass, None if the step failed.
        dry_run: Whether the run left the filesystem untouched.
    """

    files_removed: int
    bytes_removed: int
    failed_steps: tuple[str, ...] = field(default_factory=tuple)
    verification: VerificationReport | None = None
    dry_run: bool = False


class CacheCleanup:
    """Sequences the cleanup steps over a cache home.

    Args:
        config: Run configuration.
        gradle_home: Cache home root.
        project_dir: Directory holding the wrapper descriptor.
        counters: Shared removal totals; a fresh instance by default.
    """

    def __init__(
        self,
        config: RunConfiguration,
        gradle_home: Path,
        project_dir: Path,
        *,
        counters: RemovalCounters | None = None,
    ) -> None:
        self._config = config
        self._gradle_home = gradle_home
        self._project_dir = project_dir
        self._counters = counters or RemovalCounters()
        self._operator = RemovalOperator(self._counters, dry_run=config.dry_run)
        self._verifier = ChecksumVerifier(
            self._operator,
            workers=config.workers,
            timeout=float(config.verify_timeout_seconds),
        )
        self._verification: VerificationReport | None = None

    @property
    def counters(self) -> RemovalCounters:
        return self._counters

    def steps(self) -> list[tuple[str, Callable[[], None]]]:
        """Return the ordered, independent cleanup steps."""
        return [
            ("lock files", self.remove_lock_files),
            ("user id", self.remove_user_id),
            ("unzipped distributions", self.remove_unzipped_distributions),
            ("version-dependent cleanup", self.version_dependent_cleanup),
            ("checksum verification", self.verify_checksums),
        ]

    def run(self) -> CleanupSummary:
        """Run every step and return the aggregated totals."""
        failed: list[str] = []
        for name, step in self.steps():
            try:
                step()
            except Exception as e:
                logger.debug("Step %r failed", name, exc_info=True)
                print_error(f"Step '{name}' failed: {e}")
                failed.append(name)

        files, size = self._counters.snapshot()
        return CleanupSummary(
            files_removed=files,
            bytes_removed=size,
            failed_steps=tuple(failed),
            verification=self._verification,
            dry_run=self._config.dry_run,
        )

    def remove_lock_files(self) -> None:
        """Remove the journal and module cache lock files."""
        if self._config.keep_lock_files:
            logger.debug("Removal of journal-1.lock and modules-2.lock is disabled")
            return
        self._operator.remove_files(get_lock_files(self._gradle_home))

    def remove_user_id(self) -> None:
        """Remove user-id.txt and its lock."""
        if self._config.keep_user_id:
            logger.debug("Removal of caches/user-id.txt is disabled")
            return
        self._operator.remove_files(get_user_id_files(self._gradle_home))

    def remove_unzipped_distributions(self) -> None:
        """Remove unzipped-distribution directories left by artifact transforms."""
        if self._config.keep_unzipped_distributions:
            logger.debug("Removal of unzipped-distribution is disabled")
            return

        transforms = get_transforms_dir(self._gradle_home)
        if not transforms.is_dir():
            logger.debug(
                "%s is not a directory, so will skip unzipped-distribution removal", transforms
            )
            return

        for directory in find_named(transforms, UNZIPPED_DISTRIBUTION, max_depth=_SEARCH_DEPTH):
            self._operator.remove_tree(directory, "unzipped distribution")

    def version_dependent_cleanup(self) -> None:
        """Remove wrapper distributions and caches of other Gradle versions.

        The wrapper descriptor is read exactly once. Without a usable
        descriptor, archives are removed from every distribution under the
        default distributions directory and per-version caches are kept.
        """
        distribution = self._read_wrapper_distribution()

        if distribution is None:
            distributions_dir = get_wrapper_dists_dir(self._gradle_home)
            name = version = None
        else:
            distributions_dir = distribution.resolve_distributions_dir(
                self._gradle_home, self._project_dir
            )
            name = distribution.distribution_name
            version = distribution.distribution_version

        self.remove_stale_wrappers(distributions_dir, name)
        if not self._config.keep_old_versions and version is not None:
            self.remove_stale_caches(version)

    def _read_wrapper_distribution(self) -> WrapperDistribution | None:
        path = get_wrapper_properties_path(self._project_dir)
        try:
            return load_wrapper_distribution(path)
        except WrapperPropertiesError as e:
            print_warning(str(e))
            return None

    def remove_stale_wrappers(self, distributions: Path, distribution_name: str | None) -> None:
        """Remove distributions other than ``distribution_name`` and all archives.

        Args:
            distributions: Wrapper distributions directory.
            distribution_name: Distribution to keep; None keeps every
                distribution and only removes archives.
        """
        keep_all = self._config.keep_old_versions or distribution_name is None
        if keep_all:
            print_plain(f"Removing zip files from {distributions}")
        else:
            print_plain(
                f"Removing old Gradle distributions from {distributions} "
                f"(will keep {distribution_name})"
            )

        if not distributions.is_dir():
            logger.debug("%s is not a directory, nothing to remove", distributions)
            return

        for entry in sorted(distributions.iterdir()):
            if not keep_all and entry.name != distribution_name:
                self._operator.remove_tree(entry, "stale wrapper distribution")
                continue

            print_plain(f"Removing distribution zip from {entry}")
            archives = find_with_suffix(entry, ".zip", max_depth=_SEARCH_DEPTH)
            self._operator.remove_files(archives)

    def remove_stale_caches(self, distribution_version: str) -> None:
        """Remove version-named cache directories other than the current version."""
        caches = get_caches_dir(self._gradle_home)
        print_plain("Removing caches from the stale versions")
        if not caches.is_dir():
            logger.debug("%s does not exist, no stale caches to remove", caches)
            return

        for entry in sorted(caches.iterdir()):
            if entry.name[:1].isdigit() and entry.name != distribution_version:
                self._operator.remove_tree(entry, "cache from old Gradle version")

    def verify_checksums(self) -> None:
        """Run the checksum verification pass over the module cache."""
        files = get_module_files_dir(self._gradle_home)
        if not self._config.verify_checksums:
            logger.debug("Checksum verification is disabled")
            self._verification = VerificationReport(root=str(files), enabled=False)
            return
        self._verification = self._verifier.verify_subtree(files)
