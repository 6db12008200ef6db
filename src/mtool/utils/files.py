"""Utility helpers for working with files and streams."""

from __future__ import annotations

import io
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Protocol, TextIO

from mtool.errors import StreamError

STDIO_NAME = "-"
ENCODING = "utf-8"
# Paths are not guaranteed to be valid UTF-8; keep the raw bytes round-trippable.
ENCODING_ERRORS = "surrogateescape"


class FileSystem(Protocol):
    def stat_mtime_ns(self, path: str) -> int: ...

    def set_mtime_ns(self, path: str, mtime_ns: int) -> None: ...


class LocalFileSystem:
    """Reads and sets modification times on the local disk.

    Relative paths are resolved against ``root`` when one is given.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = Path(root) if root is not None else None

    def resolve(self, path: str) -> Path:
        if self.root is None or Path(path).is_absolute():
            return Path(path)
        return self.root / path

    def stat_mtime_ns(self, path: str) -> int:
        return os.stat(self.resolve(path)).st_mtime_ns

    def set_mtime_ns(self, path: str, mtime_ns: int) -> None:
        # atime is not preserved
        os.utime(self.resolve(path), ns=(time.time_ns(), mtime_ns))


@contextmanager
def _stdio(stream: TextIO, **kwargs: str) -> Iterator[TextIO]:
    """Re-decode a standard stream with mtool's encoding, leaving it open afterwards."""
    buffer = getattr(stream, "buffer", None)
    if buffer is None:
        yield stream
        return
    stream.flush()
    wrapper = io.TextIOWrapper(buffer, encoding=ENCODING, errors=ENCODING_ERRORS, **kwargs)
    try:
        yield wrapper
    finally:
        wrapper.flush()
        wrapper.detach()


@contextmanager
def open_input(name: str) -> Iterator[TextIO]:
    """Open ``name`` for reading, or yield stdin for ``-``."""
    if name == STDIO_NAME:
        with _stdio(sys.stdin) as handle:
            yield handle
        return
    try:
        handle = open(name, "r", encoding=ENCODING, errors=ENCODING_ERRORS)
    except OSError as exc:
        raise StreamError(str(exc)) from exc
    with handle:
        yield handle


@contextmanager
def open_output(name: str, *, append: bool = False) -> Iterator[TextIO]:
    """Open ``name`` for writing (truncating unless ``append``), or yield stdout for ``-``."""
    if name == STDIO_NAME:
        with _stdio(sys.stdout, newline="") as handle:
            yield handle
        return
    try:
        handle = open(
            name,
            "a" if append else "w",
            encoding=ENCODING,
            errors=ENCODING_ERRORS,
            newline="",
        )
    except OSError as exc:
        raise StreamError(str(exc)) from exc
    with handle:
        yield handle


def numbered_lines(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Yield ``(line_no, line)`` pairs, numbering from 1.

    Read failures of the underlying stream are reported as :class:`StreamError`
    against the line that could not be read.
    """
    iterator = iter(lines)
    line_no = 0
    while True:
        line_no += 1
        try:
            line = next(iterator)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as exc:
            raise StreamError(f"cannot read input: {exc}", line_no=line_no) from exc
        yield line_no, line
