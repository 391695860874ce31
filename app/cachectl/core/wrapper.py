"""Gradle wrapper descriptor reading.

The wrapper descriptor (gradle/wrapper/gradle-wrapper.properties) names the
distribution the project builds with. Version-dependent cleanup keeps that
distribution and removes everything else.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# distributionBase sentinels
GRADLE_USER_HOME_BASE = "GRADLE_USER_HOME"
PROJECT_BASE = "PROJECT"

DEFAULT_DISTRIBUTION_PATH = "wrapper/dists"

_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class WrapperPropertiesError(Exception):
    """Raised when the wrapper descriptor cannot be read or is malformed."""


class WrapperDistribution(BaseModel):
    """Distribution settings declared by a wrapper descriptor.

    Attributes:
        distribution_base: ``GRADLE_USER_HOME``, ``PROJECT`` or an explicit path.
        distribution_path: Path of the distributions directory below the base.
        distribution_url: Download URL of the distribution archive.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    distribution_base: str = GRADLE_USER_HOME_BASE
    distribution_path: str = DEFAULT_DISTRIBUTION_PATH
    distribution_url: str

    @property
    def distribution_name(self) -> str:
        """Archive name without its extension, e.g. ``gradle-7.4-bin``."""
        name = self.distribution_url.rsplit("/", 1)[-1]
        return name.removesuffix(".zip")

    @property
    def distribution_version(self) -> str:
        """Normalized version string, e.g. ``7.4``."""
        version = self.distribution_name.removeprefix("gradle-")
        for suffix in ("-bin", "-all"):
            if version.endswith(suffix):
                return version[: -len(suffix)]
        return version

    def resolve_distributions_dir(self, gradle_home: Path, project_dir: Path) -> Path:
        """Resolve the directory holding downloaded distributions.

        Args:
            gradle_home: Cache home root, used for the GRADLE_USER_HOME base.
            project_dir: Project directory, used for the PROJECT base.

        Returns:
            Absolute or project-relative distributions directory.
        """
        if self.distribution_base == GRADLE_USER_HOME_BASE:
            base = gradle_home
        elif self.distribution_base == PROJECT_BASE:
            base = project_dir
        else:
            base = Path(self.distribution_base)
        return base / self.distribution_path


def parse_properties(text: str) -> dict[str, str]:
    """Parse java-properties formatted text.

    Supports ``#``/``!`` comments, ``=``/``:``/whitespace separators,
    backslash escapes (including ``\\uXXXX``) and line continuations.

    Args:
        text: Raw file contents.

    Returns:
        Mapping of keys to unescaped values. Later keys win.
    """
    properties: dict[str, str] = {}

    for logical_line in _logical_lines(text):
        key, value = _split_key_value(logical_line)
        properties[_unescape(key)] = _unescape(value)

    return properties


def _logical_lines(text: str) -> list[str]:
    """Join continuation lines and drop blanks and comments."""
    lines: list[str] = []
    current: str | None = None

    for raw in text.splitlines():
        line = raw.lstrip(" \t\f")
        if current is None:
            if not line or line[0] in "#!":
                continue
            current = ""

        # An odd number of trailing backslashes continues the line
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            current += line[:-1]
            continue

        lines.append(current + line)
        current = None

    if current:
        lines.append(current)
    return lines


def _split_key_value(line: str) -> tuple[str, str]:
    """Split a logical line at the first unescaped separator."""
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in "=: \t\f":
            break
        index += 1

    key = line[:index]
    rest = line[index:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


def _unescape(value: str) -> str:
    """Resolve backslash escapes."""
    if "\\" not in value:
        return value

    chars: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\" or index + 1 == len(value):
            chars.append(char)
            index += 1
            continue

        escaped = value[index + 1]
        code = value[index + 2 : index + 6]
        if escaped == "u" and len(code) == 4 and all(c in _HEX_DIGITS for c in code):
            chars.append(chr(int(code, 16)))
            index += 6
            continue
        chars.append(_ESCAPES.get(escaped, escaped))
        index += 2

    return "".join(chars)


def load_wrapper_distribution(path: Path) -> WrapperDistribution:
    """Read a wrapper descriptor.

    Args:
        path: Path to gradle-wrapper.properties.

    Returns:
        Validated WrapperDistribution.

    Raises:
        WrapperPropertiesError: If the file is missing, unreadable or has no
            distributionUrl.
    """
    try:
        text = path.read_text(encoding="latin-1")
    except FileNotFoundError as e:
        raise WrapperPropertiesError(f"Gradle wrapper properties file is not found: {path}") from e
    except OSError as e:
        raise WrapperPropertiesError(f"Failed to read {path}: {e}") from e

    props = parse_properties(text)
    url = props.get("distributionUrl", "").strip()
    if not url:
        raise WrapperPropertiesError(f"distributionUrl is missing in {path}")

    distribution = WrapperDistribution(
        distribution_base=props.get("distributionBase") or GRADLE_USER_HOME_BASE,
        distribution_path=props.get("distributionPath") or DEFAULT_DISTRIBUTION_PATH,
        distribution_url=url,
    )
    logger.debug(
        "Wrapper descriptor %s: distribution %s (version %s)",
        path,
        distribution.distribution_name,
        distribution.distribution_version,
    )
    return distribution
