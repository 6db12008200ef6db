"""Snapshot text parsing and the read-only snapshot store."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterable, Iterator

from mtool.errors import DuplicateIdentityError, InvalidTimestampError, MalformedRecordError
from mtool.models import Entry
from mtool.utils.files import numbered_lines

LOGGER = logging.getLogger(__name__)

FIELD_SEPARATOR = "\t"
SNAPSHOT_FIELDS = 3

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_mtime_ns(text: str, *, line_no: int | None = None) -> int:
    """Parse a base-10 signed 64-bit nanosecond timestamp."""
    if not _INT_PATTERN.fullmatch(text):
        raise InvalidTimestampError(f"invalid timestamp {text!r}", line_no=line_no)
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidTimestampError(f"timestamp {text!r} out of range", line_no=line_no)
    return value


def parse_snapshot_line(line: str, *, line_no: int | None = None) -> Entry:
    parts = line.strip().split(FIELD_SEPARATOR, SNAPSHOT_FIELDS - 1)
    if len(parts) != SNAPSHOT_FIELDS:
        raise MalformedRecordError(
            f"expected {SNAPSHOT_FIELDS} tab-separated fields for restore/verify, got {len(parts)}",
            line_no=line_no,
        )
    identity, content_hash, mtime_text = parts
    return Entry(
        identity=identity,
        content_hash=content_hash,
        mtime_ns=parse_mtime_ns(mtime_text, line_no=line_no),
    )


def format_snapshot_line(entry: Entry) -> str:
    return f"{entry.identity}\t{entry.content_hash}\t{entry.mtime_ns}\n"


class SnapshotStore(Mapping):
    """Immutable mapping of identity to :class:`Entry`.

    Built once before any worker starts and never modified afterwards, so it
    can be read from many threads without locking.
    """

    def __init__(self, entries: Mapping[str, Entry]) -> None:
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, identity: str) -> Entry:
        return self._entries[identity]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SnapshotStore({len(self)} entries)"


def load_snapshot(lines: Iterable[str]) -> SnapshotStore:
    """Build a :class:`SnapshotStore` from snapshot text lines.

    Any malformed line, bad timestamp or repeated identity aborts the load.
    """
    entries: dict[str, Entry] = {}
    for line_no, line in numbered_lines(lines):
        entry = parse_snapshot_line(line, line_no=line_no)
        if entry.identity in entries:
            raise DuplicateIdentityError(
                f"filename collision in mtool snapshot for {entry.identity!r}",
                line_no=line_no,
            )
        entries[entry.identity] = entry
    LOGGER.debug("Loaded %d snapshot entries", len(entries))
    return SnapshotStore(entries)
