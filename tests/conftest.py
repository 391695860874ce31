"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import hashlib
import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest


def checksum_name(data: bytes) -> str:
    """Render the SHA-1 of ``data`` the way cache directories are named."""
    return format(int(hashlib.sha1(data).hexdigest(), 16), "x")


@pytest.fixture(autouse=True)
def _reset_cachectl_logger() -> Iterator[None]:
    """Undo configure_logging() so every test starts with default logging."""
    yield
    logger = logging.getLogger("cachectl")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user settings and GRADLE_USER_HOME out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.delenv("GRADLE_USER_HOME", raising=False)


@pytest.fixture
def gradle_home(tmp_path: Path) -> Path:
    """An empty Gradle user home."""
    home = tmp_path / "gradle-home"
    home.mkdir()
    return home


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """An empty project directory (no wrapper descriptor)."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def files21(gradle_home: Path) -> Path:
    """The module artifact store of the Gradle home."""
    path = gradle_home / "caches" / "modules-2" / "files-2.1"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def make_artifact(files21: Path) -> Callable[..., Path]:
    """Create an artifact under files-2.1.

    By default the checksum directory matches the content; pass
    ``checksum`` to create a corrupted artifact.
    """

    def _make(
        content: bytes = b"artifact",
        *,
        checksum: str | None = None,
        name: str = "lib.jar",
        coordinates: str = "org.example/lib/1.0",
    ) -> Path:
        directory = files21 / coordinates / (checksum or checksum_name(content))
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(content)
        return path

    return _make


def _write_wrapper_properties(project: Path, distribution_url: str, **extra: str) -> Path:
    """Write a gradle-wrapper.properties file the way Gradle generates it."""
    wrapper = project / "gradle" / "wrapper"
    wrapper.mkdir(parents=True, exist_ok=True)
    lines = [
        "distributionBase=" + extra.get("distributionBase", "GRADLE_USER_HOME"),
        "distributionPath=" + extra.get("distributionPath", "wrapper/dists"),
        "distributionUrl=" + distribution_url.replace(":", "\\:"),
        "zipStoreBase=GRADLE_USER_HOME",
        "zipStorePath=wrapper/dists",
    ]
    path = wrapper / "gradle-wrapper.properties"
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def checksum() -> Callable[[bytes], str]:
    """Compute the checksum directory name for some content."""
    return checksum_name


@pytest.fixture
def write_wrapper() -> Callable[..., Path]:
    """Write a wrapper descriptor: ``write_wrapper(project, url, **properties)``."""
    return _write_wrapper_properties
