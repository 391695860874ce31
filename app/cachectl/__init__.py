"""cachectl - Gradle cache pruning and checksum verification.

Keeps CI cache uploads small by removing lock files, stale distributions
and stale per-version caches, and deletes cached artifacts whose content
no longer matches the checksum encoded in their directory name.
"""

__version__ = "0.1.0"
