"""Filesystem primitives for cache pruning.

This module provides the lazy tree walk, verification candidate
classification, content hashing, best-effort removal and the parallel
checksum verification pass.
"""

from cachectl.filesystem.classifier import CHECKSUM_DIR_PATTERN, is_verifiable, skip_reason
from cachectl.filesystem.hasher import FileHasher, HashResult
from cachectl.filesystem.models import (
    RemovalCounters,
    RemovalResult,
    ScanTask,
    VerificationOutcome,
    VerificationReport,
    VerificationResult,
)
from cachectl.filesystem.operator import RemovalOperator
from cachectl.filesystem.scanner import walk_tree
from cachectl.filesystem.verifier import ChecksumVerifier

__all__ = [
    "CHECKSUM_DIR_PATTERN",
    "ChecksumVerifier",
    "FileHasher",
    "HashResult",
    "RemovalCounters",
    "RemovalOperator",
    "RemovalResult",
    "ScanTask",
    "VerificationOutcome",
    "VerificationReport",
    "VerificationResult",
    "is_verifiable",
    "skip_reason",
    "walk_tree",
]
