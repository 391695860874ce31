"""Console colours.

Colours come from the bundled ``data/theme.toml``. Any subset can be
overridden by a ``theme.toml`` next to the settings file; an invalid
override falls back to the built-in defaults.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError
from rich.theme import Theme

from cachectl.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")

# Styles rendered bold on top of their colour
_BOLD_STYLES = frozenset({"error", "mismatch"})


def _check_hex_color(value: str) -> str:
    color = value.strip()
    if not _HEX_COLOR.fullmatch(color):
        raise ValueError(f"invalid hex color {color!r}, expected #RGB or #RRGGBB")
    return color


HexColor = Annotated[str, AfterValidator(_check_hex_color)]


class ThemeColors(BaseModel):
    """One colour per console style. Unknown style names are rejected."""

    model_config = ConfigDict(extra="forbid")

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"

    removed: HexColor = "#f53263"
    verified: HexColor = "#03b971"
    mismatch: HexColor = "#d44ebc"
    skipped: HexColor = "#226666"


def get_user_theme_path() -> Path:
    return get_config_dir() / "theme.toml"


def get_bundled_theme_path() -> Path:
    return Path(str(resources.files("cachectl.data").joinpath("theme.toml")))


def read_theme_file(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    A missing file gives an empty mapping. Unreadable files and files
    without a usable ``[colors]`` table are logged and ignored. Non-string
    values are dropped.
    """
    try:
        with open(path, "rb") as f:
            colors = tomllib.load(f).get("colors", {})
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return {}

    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return {name: value for name, value in colors.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Merge the user theme over the bundled one and validate the result."""
    colors = read_theme_file(get_bundled_theme_path()) | read_theme_file(get_user_theme_path())
    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build a Rich theme, loading the configured colours when none are given."""
    colors = colors or load_theme()
    styles = {
        name: f"bold {color}" if name in _BOLD_STYLES else color
        for name, color in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["dim"] = colors.muted
    return Theme(styles)


@cache
def get_theme() -> Theme:
    """Rich theme shared by every console, built on first use."""
    return get_rich_theme()
