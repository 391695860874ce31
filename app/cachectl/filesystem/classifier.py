"""Verification candidate classification.

A cached artifact can only be verified when its immediate parent
directory is named after the artifact's content hash. The cache tree
also holds plenty of ordinary directories; files below those are
skipped, never treated as errors.
"""

import re
import stat
from pathlib import Path

CHECKSUM_DIR_PATTERN = re.compile(r"[0-9a-f]+")


def is_checksum_name(name: str) -> bool:
    """Check if a directory name looks like a lowercase hex digest."""
    return CHECKSUM_DIR_PATTERN.fullmatch(name) is not None


def skip_reason(path: Path) -> str | None:
    """Explain why a path is not a verification candidate.

    Args:
        path: Path to classify.

    Returns:
        None if the path can be verified, otherwise a short reason.
    """
    try:
        mode = path.lstat().st_mode
    except FileNotFoundError:
        return "file does not exist"
    except OSError as e:
        return f"cannot stat file: {e}"

    if not stat.S_ISREG(mode):
        return "not a regular file"

    if len(path.parts) < 2:
        return "path is too short"

    if not is_checksum_name(path.parent.name):
        return f"directory name does not look like a checksum: {path.parent.name}"

    return None


def is_verifiable(path: Path) -> bool:
    """Check if a path is a regular file inside a checksum-named directory."""
    return skip_reason(path) is None
