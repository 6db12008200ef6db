"""Core mtool data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class Entry:
    """One snapshot record: the recorded mtime of a file at a known content hash."""

    identity: str
    content_hash: str
    mtime_ns: int


@dataclass(frozen=True, slots=True)
class ScanRecord:
    """One manifest line paired with the live mtime of the file it names."""

    line_no: int
    identity: str
    content_hash: str
    mtime_ns: int

    def to_entry(self) -> Entry:
        return Entry(identity=self.identity, content_hash=self.content_hash, mtime_ns=self.mtime_ns)


class Outcome(str, Enum):
    SKIP = "skip"
    MATCH = "match"
    MISMATCH = "mismatch"
    RESTORE = "restore"

    @property
    def eligible(self) -> bool:
        """True when the file is present in the snapshot with an unchanged hash."""
        return self is not Outcome.SKIP

    @property
    def mismatched(self) -> bool:
        return self in (Outcome.MISMATCH, Outcome.RESTORE)
