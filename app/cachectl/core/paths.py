"""Path management for cachectl.

Two kinds of paths live here:

- The tool's own configuration directory, following the XDG Base Directory
  Specification (~/.config/cachectl/).
- The well-known layout of a Gradle user home ("cache home"), relative to a
  configurable root (defaults to $GRADLE_USER_HOME or ~/.gradle).
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "cachectl"

# Environment variable Gradle itself uses to relocate the user home
GRADLE_USER_HOME_ENV = "GRADLE_USER_HOME"

# Wrapper descriptor location, relative to the project directory
WRAPPER_PROPERTIES = Path("gradle/wrapper/gradle-wrapper.properties")

# Layout of the cache home
LOCK_FILES: tuple[str, ...] = (
    "caches/journal-1/journal-1.lock",
    "caches/modules-2/modules-2.lock",
)
USER_ID_FILES: tuple[str, ...] = (
    "caches/user-id.txt",
    "caches/user-id.txt.lock",
)
TRANSFORMS_DIR = "caches/transforms-2/files-2.1"
MODULE_FILES_DIR = "caches/modules-2/files-2.1"
CACHES_DIR = "caches"
WRAPPER_DISTS_DIR = "wrapper/dists"

UNZIPPED_DISTRIBUTION = "unzipped-distribution"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/cachectl/ (or XDG_CONFIG_HOME/cachectl/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_settings_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/cachectl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_default_gradle_home() -> Path:
    """Get the cache home root.

    Respects GRADLE_USER_HOME the same way Gradle does; falls back to
    ~/.gradle.
    """
    base = os.environ.get(GRADLE_USER_HOME_ENV)
    if base:
        return Path(base).expanduser()
    return Path.home() / ".gradle"


def get_lock_files(gradle_home: Path) -> list[Path]:
    """Get the journal and module cache lock files."""
    return [gradle_home / rel for rel in LOCK_FILES]


def get_user_id_files(gradle_home: Path) -> list[Path]:
    """Get the user identity file and its lock."""
    return [gradle_home / rel for rel in USER_ID_FILES]


def get_transforms_dir(gradle_home: Path) -> Path:
    """Get the artifact transforms directory holding unzipped distributions."""
    return gradle_home / TRANSFORMS_DIR


def get_module_files_dir(gradle_home: Path) -> Path:
    """Get the module artifact store whose files live under checksum-named directories."""
    return gradle_home / MODULE_FILES_DIR


def get_caches_dir(gradle_home: Path) -> Path:
    """Get the caches root holding per-version cache directories."""
    return gradle_home / CACHES_DIR


def get_wrapper_dists_dir(gradle_home: Path) -> Path:
    """Get the default wrapper distributions directory."""
    return gradle_home / WRAPPER_DISTS_DIR


def get_wrapper_properties_path(project_dir: Path) -> Path:
    """Get the wrapper descriptor path for a project directory."""
    return project_dir / WRAPPER_PROPERTIES
