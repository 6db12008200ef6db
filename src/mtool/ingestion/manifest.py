"""Manifest scanning.

Reads ``git ls-files --stage`` style lines (``<mode> <hash> <stage>\\t<path>``)
and pairs each listed path with its current modification time.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator

from mtool.errors import FileMissingError, MalformedRecordError, MtoolError, ScanAbortedError, StatError
from mtool.models import ScanRecord
from mtool.utils.files import FileSystem, LocalFileSystem, numbered_lines

LOGGER = logging.getLogger(__name__)

ScanCallback = Callable[[ScanRecord], None]


def _stat_mtime_ns(fs: FileSystem, path: str, line_no: int) -> int:
    try:
        return fs.stat_mtime_ns(path)
    except FileNotFoundError as exc:
        raise FileMissingError(str(exc), line_no=line_no) from exc
    except OSError as exc:
        raise StatError(str(exc), line_no=line_no) from exc


def parse_manifest_line(line: str, fs: FileSystem, *, line_no: int) -> ScanRecord:
    parts = line.strip().split("\t", 1)
    if len(parts) != 2:
        raise MalformedRecordError(
            "expected 2 tab-separated fields in 'git ls-files --stage' output",
            line_no=line_no,
        )
    metadata, path = parts
    mtime_ns = _stat_mtime_ns(fs, path, line_no)

    fields = metadata.split(" ", 2)
    if len(fields) != 3:
        raise MalformedRecordError("malformed first field", line_no=line_no)

    return ScanRecord(line_no=line_no, identity=path, content_hash=fields[1], mtime_ns=mtime_ns)


def iter_manifest(lines: Iterable[str], fs: FileSystem | None = None) -> Iterator[ScanRecord]:
    """Yield one :class:`ScanRecord` per manifest line, lazily."""
    fs = fs if fs is not None else LocalFileSystem()
    for line_no, line in numbered_lines(lines):
        yield parse_manifest_line(line, fs, line_no=line_no)


def scan_manifest(lines: Iterable[str], fn: ScanCallback, fs: FileSystem | None = None) -> int:
    """Invoke ``fn`` for every manifest record and return how many were seen.

    The scan stops at the first failure. Errors that are not already mtool
    errors are wrapped so the offending line number is reported.
    """
    count = 0
    for record in iter_manifest(lines, fs):
        try:
            fn(record)
        except MtoolError:
            raise
        except Exception as exc:
            raise ScanAbortedError(str(exc), line_no=record.line_no) from exc
        count += 1
    LOGGER.debug("Scanned %d manifest records", count)
    return count
