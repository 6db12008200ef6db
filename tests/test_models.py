"""Tests for core data models."""

from __future__ import annotations

import dataclasses

import pytest

from mtool.models import Entry, Outcome, ScanRecord


class TestEntry:
    """Test Entry dataclass."""

    def test_create_entry(self) -> None:
        """Should create Entry with all fields."""
        entry = Entry(identity="src/a.txt", content_hash="abc123", mtime_ns=1_000_000_000)

        assert entry.identity == "src/a.txt"
        assert entry.content_hash == "abc123"
        assert entry.mtime_ns == 1_000_000_000

    def test_entry_is_frozen(self) -> None:
        """Entries are shared between threads and must not be mutable."""
        entry = Entry(identity="a.txt", content_hash="h", mtime_ns=1)

        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.mtime_ns = 2  # type: ignore[misc]

    def test_entry_equality(self) -> None:
        """Should compare entries by value."""
        assert Entry("a.txt", "h", 1) == Entry("a.txt", "h", 1)
        assert Entry("a.txt", "h", 1) != Entry("a.txt", "h", 2)


class TestScanRecord:
    """Test ScanRecord dataclass."""

    def test_to_entry_drops_line_number(self) -> None:
        """Should convert to an Entry carrying the observed values."""
        record = ScanRecord(line_no=7, identity="b.txt", content_hash="beef", mtime_ns=42)

        assert record.to_entry() == Entry(identity="b.txt", content_hash="beef", mtime_ns=42)


class TestOutcome:
    """Test Outcome classification helpers."""

    @pytest.mark.parametrize(
        ("outcome", "eligible", "mismatched"),
        [
            (Outcome.SKIP, False, False),
            (Outcome.MATCH, True, False),
            (Outcome.MISMATCH, True, True),
            (Outcome.RESTORE, True, True),
        ],
    )
    def test_flags(self, outcome: Outcome, eligible: bool, mismatched: bool) -> None:
        assert outcome.eligible is eligible
        assert outcome.mismatched is mismatched
