"""Error types raised by mtool and the exit codes they map to."""

from __future__ import annotations

EXIT_USAGE = 10
EXIT_IO = 15
EXIT_RESTORE = 20


class MtoolError(Exception):
    """Base class for fatal mtool errors.

    ``line_no`` is the 1-based line of the input that caused the failure, when
    one is known. The CLI turns ``exit_code`` into the process status.
    """

    exit_code = EXIT_USAGE

    def __init__(self, message: str, *, line_no: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line_no = line_no

    def __str__(self) -> str:
        if self.line_no is None:
            return self.message
        return f"line {self.line_no}: {self.message}"


class UsageError(MtoolError):
    """Invalid combination of options."""


class MalformedRecordError(MtoolError):
    """A snapshot or manifest line has the wrong number of fields."""


class DuplicateIdentityError(MtoolError):
    """The same file name appears twice in one snapshot."""


class InvalidTimestampError(MtoolError):
    """A snapshot mtime is not a signed 64-bit nanosecond count."""

    exit_code = EXIT_IO


class StreamError(MtoolError):
    """An input or output stream could not be opened or read."""

    exit_code = EXIT_IO


class StatError(MtoolError):
    """A file listed in the manifest could not be stat-ed."""

    exit_code = EXIT_IO


class FileMissingError(StatError):
    """A file listed in the manifest does not exist on disk."""


class MutationError(MtoolError):
    """Setting a file's modification time failed."""

    exit_code = EXIT_RESTORE


class ScanAbortedError(MtoolError):
    """A per-record callback failed while scanning the manifest."""

    exit_code = EXIT_RESTORE
