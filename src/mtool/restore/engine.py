"""Bounded-concurrency verify/restore engine."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable

from mtool.errors import MutationError
from mtool.models import Entry, Outcome, ScanRecord
from mtool.restore.comparator import decide
from mtool.snapshot.store import SnapshotStore
from mtool.utils.files import FileSystem, LocalFileSystem

LOGGER = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 1024


@dataclass(slots=True)
class RestoreStats:
    """Counters shared by every worker of one engine run."""

    total_eligible: int = 0
    non_matching: int = 0
    restored: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def matched(self) -> int:
        return self.total_eligible - self.non_matching

    def increment(self, outcome: Outcome) -> None:
        if not outcome.eligible:
            return
        with self._lock:
            self.total_eligible += 1
            if outcome.mismatched:
                self.non_matching += 1

    def mark_restored(self) -> None:
        with self._lock:
            self.restored += 1


class RestoreEngine:
    """Checks scan records against a snapshot and optionally restores mtimes.

    At most ``concurrency`` records are in flight at once; the dispatcher
    blocks until a slot frees up. The first error stops dispatch, queued work
    is dropped, and the error is re-raised once running workers have finished.
    """

    def __init__(
        self,
        store: SnapshotStore,
        fs: FileSystem | None = None,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        verify_only: bool = False,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency should be 1 or more")
        self.store = store
        self.fs = fs if fs is not None else LocalFileSystem()
        self.concurrency = concurrency
        self.verify_only = verify_only

    def run(self, records: Iterable[ScanRecord]) -> RestoreStats:
        stats = RestoreStats()
        slots = threading.BoundedSemaphore(self.concurrency)
        abort = threading.Event()
        failures: list[Exception] = []
        failure_lock = threading.Lock()

        def fail(exc: Exception) -> None:
            with failure_lock:
                if not failures:
                    failures.append(exc)
            abort.set()

        def work(record: ScanRecord) -> None:
            try:
                if not abort.is_set():
                    self._process(record, stats)
            except Exception as exc:
                fail(exc)
            finally:
                slots.release()

        executor = ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="mtool-restore")
        try:
            for record in records:
                slots.acquire()
                if abort.is_set():
                    slots.release()
                    break
                executor.submit(work, record)
        except Exception as exc:
            fail(exc)
        finally:
            executor.shutdown(wait=True, cancel_futures=abort.is_set())

        if failures:
            raise failures[0]
        return stats

    def _process(self, record: ScanRecord, stats: RestoreStats) -> None:
        entry = self.store.get(record.identity)
        outcome = decide(entry, record, self.verify_only)
        stats.increment(outcome)
        if outcome is Outcome.MISMATCH:
            LOGGER.debug(
                "%s: modified time expected %d but found %d",
                record.identity,
                entry.mtime_ns,
                record.mtime_ns,
            )
        elif outcome is Outcome.RESTORE:
            self._restore(entry, record)
            stats.mark_restored()

    def _restore(self, entry: Entry, record: ScanRecord) -> None:
        try:
            self.fs.set_mtime_ns(record.identity, entry.mtime_ns)
        except OSError as exc:
            raise MutationError(str(exc), line_no=record.line_no) from exc
        LOGGER.debug(
            "%s: changed modified time from %d to %d",
            record.identity,
            record.mtime_ns,
            entry.mtime_ns,
        )
