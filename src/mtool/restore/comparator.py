"""Decision logic for a single file."""

from __future__ import annotations

from mtool.models import Entry, Outcome, ScanRecord


def decide(entry: Entry | None, record: ScanRecord, verify_only: bool) -> Outcome:
    """Compare a snapshot entry against what the manifest scan observed.

    Files missing from the snapshot, or whose content hash changed since the
    snapshot was taken, are skipped: their recorded mtime no longer applies.
    Timestamps are compared exactly, at nanosecond resolution.
    """
    if entry is None or entry.content_hash != record.content_hash:
        return Outcome.SKIP
    if entry.mtime_ns == record.mtime_ns:
        return Outcome.MATCH
    return Outcome.MISMATCH if verify_only else Outcome.RESTORE
