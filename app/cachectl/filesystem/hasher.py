"""Content hashing for cached artifacts.

Every call builds its own digest object, so a single FileHasher can be
shared by any number of worker threads.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "sha1"
DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class HashResult:
    """Result of hashing one file.

    Attributes:
        path: File that was hashed.
        digest: Lowercase hex digest, None on failure.
        error: Error message if the file could not be read.
    """

    path: str
    digest: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the file was hashed."""
        return self.digest is not None


def format_digest(raw: bytes) -> str:
    """Render a digest the way cache directory names are rendered.

    The digest is read as an unsigned big-endian integer and printed in
    base 16, so leading zeros are dropped.
    """
    return format(int.from_bytes(raw, "big"), "x")


class FileHasher:
    """Computes content digests of files.

    Args:
        algorithm: hashlib algorithm name.
        chunk_size: Read size in bytes.
    """

    def __init__(
        self,
        algorithm: str = DEFAULT_ALGORITHM,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        # Fail fast on unknown algorithms
        hashlib.new(algorithm)
        self._algorithm = algorithm
        self._chunk_size = chunk_size

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def compute(self, path: Path) -> HashResult:
        """Hash a file.

        Read failures (permission denied, file vanished, I/O error) are
        returned as an error result instead of raised.

        Args:
            path: File to hash.

        Returns:
            HashResult with either a digest or an error message.
        """
        digest = hashlib.new(self._algorithm)
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(self._chunk_size), b""):
                    digest.update(chunk)
        except OSError as e:
            logger.debug("Cannot hash %s", path, exc_info=True)
            return HashResult(path=str(path), error=str(e))

        return HashResult(path=str(path), digest=format_digest(digest.digest()))
