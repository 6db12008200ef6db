"""Tests for snapshot parsing and the snapshot store."""

from __future__ import annotations

from typing import Iterator

import pytest

from mtool.errors import (
    EXIT_IO,
    EXIT_USAGE,
    DuplicateIdentityError,
    InvalidTimestampError,
    MalformedRecordError,
    StreamError,
)
from mtool.models import Entry
from mtool.snapshot.store import (
    SnapshotStore,
    format_snapshot_line,
    load_snapshot,
    parse_mtime_ns,
    parse_snapshot_line,
)


class TestParseSnapshotLine:
    """Tests for parse_snapshot_line and format_snapshot_line."""

    def test_parse_valid_line(self) -> None:
        entry = parse_snapshot_line("a.txt\thash1\t1000000000\n")

        assert entry == Entry(identity="a.txt", content_hash="hash1", mtime_ns=1000000000)

    @pytest.mark.parametrize(
        "line",
        [
            "a.txt\thash1\t1000000000\n",
            "dir with spaces/file.c\t0123abcd\t1700000000123456789\n",
            "old.txt\tfeed\t-5000\n",
            "café.txt\te3b0c442\t0\n",
        ],
    )
    def test_round_trip(self, line: str) -> None:
        """Formatting a parsed line reproduces it exactly."""
        assert format_snapshot_line(parse_snapshot_line(line)) == line

    @pytest.mark.parametrize("line", ["a.txt\thash1", "a.txt", "", "a.txt hash1 100"])
    def test_wrong_field_count(self, line: str) -> None:
        with pytest.raises(MalformedRecordError) as excinfo:
            parse_snapshot_line(line, line_no=3)

        assert excinfo.value.line_no == 3
        assert excinfo.value.exit_code == EXIT_USAGE
        assert str(excinfo.value).startswith("line 3: ")

    def test_extra_tab_lands_in_timestamp(self) -> None:
        """A fourth field makes the timestamp unparsable."""
        with pytest.raises(InvalidTimestampError):
            parse_snapshot_line("a.txt\th\t100\textra")


class TestParseMtimeNs:
    """Tests for nanosecond timestamp parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("0", 0),
            ("1000000000", 1000000000),
            ("-1", -1),
            ("+15", 15),
            (str(2**63 - 1), 2**63 - 1),
            (str(-(2**63)), -(2**63)),
        ],
    )
    def test_valid(self, text: str, expected: int) -> None:
        assert parse_mtime_ns(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "1.5", "1_000", " 1", "0x10", str(2**63), "١"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(InvalidTimestampError) as excinfo:
            parse_mtime_ns(text, line_no=9)

        assert excinfo.value.line_no == 9
        assert excinfo.value.exit_code == EXIT_IO


class TestLoadSnapshot:
    """Tests for load_snapshot."""

    def test_load_builds_mapping(self) -> None:
        store = load_snapshot(["a.txt\th1\t1\n", "b.txt\th2\t2\n"])

        assert isinstance(store, SnapshotStore)
        assert len(store) == 2
        assert set(store) == {"a.txt", "b.txt"}
        assert store["b.txt"] == Entry("b.txt", "h2", 2)
        assert store.get("missing.txt") is None

    def test_empty_snapshot(self) -> None:
        assert len(load_snapshot([])) == 0

    def test_identity_is_case_sensitive(self) -> None:
        store = load_snapshot(["A.txt\th\t1\n", "a.txt\th\t1\n"])

        assert len(store) == 2

    @pytest.mark.parametrize(
        "duplicate",
        ["a.txt\th1\t1\n", "a.txt\tother\t99\n"],
    )
    def test_duplicate_identity(self, duplicate: str) -> None:
        """Duplicates are rejected whether or not hash and mtime agree."""
        with pytest.raises(DuplicateIdentityError) as excinfo:
            load_snapshot(["a.txt\th1\t1\n", "b.txt\th2\t2\n", duplicate])

        assert excinfo.value.line_no == 3
        assert "a.txt" in str(excinfo.value)

    def test_malformed_line_reports_line_number(self) -> None:
        with pytest.raises(MalformedRecordError) as excinfo:
            load_snapshot(["a.txt\th1\t1\n", "broken\n"])

        assert excinfo.value.line_no == 2

    def test_invalid_timestamp_reports_line_number(self) -> None:
        with pytest.raises(InvalidTimestampError) as excinfo:
            load_snapshot(["a.txt\th1\tnot-a-number\n"])

        assert excinfo.value.line_no == 1

    def test_read_failure_reports_line_number(self) -> None:
        def lines() -> Iterator[str]:
            yield "a.txt\th1\t1\n"
            raise OSError("Input/output error")

        with pytest.raises(StreamError) as excinfo:
            load_snapshot(lines())

        assert excinfo.value.line_no == 2
        assert excinfo.value.exit_code == EXIT_IO

    def test_store_is_read_only(self) -> None:
        store = load_snapshot(["a.txt\th1\t1\n"])

        with pytest.raises(TypeError):
            store["b.txt"] = Entry("b.txt", "h", 1)  # type: ignore[index]

    def test_store_copies_source_mapping(self) -> None:
        source = {"a.txt": Entry("a.txt", "h", 1)}
        store = SnapshotStore(source)
        source["b.txt"] = Entry("b.txt", "h", 2)

        assert "b.txt" not in store
