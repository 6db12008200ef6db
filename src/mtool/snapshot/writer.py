"""Sequential snapshot serialization for create mode."""

from __future__ import annotations

from typing import TextIO

from mtool.models import ScanRecord
from mtool.snapshot.store import format_snapshot_line


class SnapshotWriter:
    """Writes scan records to ``sink`` in the order they are received."""

    def __init__(self, sink: TextIO) -> None:
        self.sink = sink
        self.written = 0

    def write(self, record: ScanRecord) -> None:
        self.sink.write(format_snapshot_line(record.to_entry()))
        self.written += 1
