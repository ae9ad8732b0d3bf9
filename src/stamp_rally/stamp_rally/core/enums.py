from __future__ import annotations

from enum import Enum


class ReadStatus(str, Enum):
    """Outcome of reading one object from the store."""

    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


class DenominatorPolicy(str, Enum):
    """How the unfiltered (all-time) statistics view counts its users.

    FILES: every listed user-record file counts, even without acquisitions.
    ACTIVE: only users with at least one acquisition count.
    """

    FILES = "files"
    ACTIVE = "active"


class RecordShape(str, Enum):
    """Shape a user stamp record was decoded from."""

    CURRENT = "CURRENT"
    LEGACY = "LEGACY"  # bare list of stamp ids, no timestamps
    NEW = "NEW"  # nothing stored yet
