"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mtool.errors import UsageError
from mtool.restore.engine import DEFAULT_CONCURRENCY
from mtool.utils.files import STDIO_NAME


@dataclass(slots=True)
class AppConfig:
    input_name: str = STDIO_NAME
    snapshot_name: str = STDIO_NAME
    root: Path | None = None
    concurrency: int = DEFAULT_CONCURRENCY
    append: bool = False
    verbose: bool = False

    def resolve_root(self, base_dir: Path | None = None) -> Path | None:
        """Directory that manifest paths are relative to, or None for the cwd."""
        if self.root is None:
            return base_dir
        if Path(self.root).is_absolute() or base_dir is None:
            return Path(self.root)
        return base_dir / self.root

    def validate(self, command: str) -> None:
        if self.concurrency < 1:
            raise UsageError("concurrency should be 1 or more")
        if command == "create":
            if self.append and self.snapshot_name == STDIO_NAME:
                raise UsageError("--append is only valid when the snapshot is a file")
        elif self.input_name == self.snapshot_name:
            raise UsageError(f"input and snapshot cannot be the same when running {command}")
