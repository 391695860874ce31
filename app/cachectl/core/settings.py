"""Run configuration and settings file handling.

The run configuration is fixed at startup and read-only afterwards. Its
defaults can be changed with an optional TOML settings file stored in
~/.config/cachectl/config.toml; command-line flags are applied on top.

Example settings file::

    keep_old_versions = true
    verify_timeout_seconds = 300
    workers = 8
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cachectl.core.paths import get_settings_path

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_TIMEOUT = 120


class RunConfiguration(BaseModel):
    """Immutable set of options shared by every cleanup step.

    Attributes:
        dry_run: Report removals without touching the filesystem.
        keep_old_versions: Keep distributions and caches of other Gradle versions.
        verify_checksums: Run the checksum verification pass.
        keep_lock_files: Keep journal-1.lock and modules-2.lock.
        keep_user_id: Keep user-id.txt and its lock.
        keep_unzipped_distributions: Keep transforms-2 unzipped-distribution directories.
        verbose: Emit debug lines for skipped and no-op cases.
        verify_timeout_seconds: Bound on the wait for verification workers.
        workers: Verification pool size (None = CPU count).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    dry_run: bool = False
    keep_old_versions: bool = False
    verify_checksums: bool = True
    keep_lock_files: bool = False
    keep_user_id: bool = False
    keep_unzipped_distributions: bool = False
    verbose: bool = False
    verify_timeout_seconds: Annotated[
        int,
        Field(ge=1, le=3600, description="Timeout in seconds (1-3600)"),
    ] = DEFAULT_VERIFY_TIMEOUT
    workers: Annotated[
        int | None,
        Field(ge=1, description="Verification worker count (None = CPU count)"),
    ] = None

    def with_flags(
        self,
        *,
        dry_run: bool = False,
        keep_old_versions: bool = False,
        keep_lock_files: bool = False,
        keep_user_id: bool = False,
        keep_unzipped_distributions: bool = False,
        verbose: bool = False,
        verify_checksums: bool = True,
        verify_timeout_seconds: int | None = None,
        workers: int | None = None,
    ) -> "RunConfiguration":
        """Apply command-line flags on top of these settings.

        Boolean flags can only switch a setting on; ``verify_checksums=False``
        switches verification off. Numeric values replace the stored ones
        when given.

        Raises:
            SettingsError: If a numeric override is out of range.
        """
        data = self.model_dump()
        data.update(
            dry_run=self.dry_run or dry_run,
            keep_old_versions=self.keep_old_versions or keep_old_versions,
            keep_lock_files=self.keep_lock_files or keep_lock_files,
            keep_user_id=self.keep_user_id or keep_user_id,
            keep_unzipped_distributions=(
                self.keep_unzipped_distributions or keep_unzipped_distributions
            ),
            verbose=self.verbose or verbose,
            verify_checksums=self.verify_checksums and verify_checksums,
        )
        if verify_timeout_seconds is not None:
            data["verify_timeout_seconds"] = verify_timeout_seconds
        if workers is not None:
            data["workers"] = workers

        try:
            return RunConfiguration.model_validate(data)
        except ValidationError as e:
            raise SettingsError(f"Invalid option value: {e}") from e


class SettingsError(Exception):
    """Raised when the settings file or an option value is invalid."""


def load_settings(path: Path | None = None) -> RunConfiguration:
    """Load run configuration defaults from a TOML file.

    A missing file is not an error: the built-in defaults are returned.

    Args:
        path: Path to the settings file. If None, uses the default settings path.

    Returns:
        Validated RunConfiguration.

    Raises:
        SettingsError: If the file cannot be read, parsed or validated.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return RunConfiguration()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings file {settings_path}: {e}") from e

    try:
        return RunConfiguration.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e
