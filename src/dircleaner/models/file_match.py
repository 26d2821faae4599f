"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator

UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class FileMatch:
    """Single file whose name matched the scan target.

    ``creation_time`` is ``None`` when the filesystem does not report a
    birth time or its metadata could not be read; ``metadata_error`` then
    says why, if it was a read failure.
    """

    relative_path: Path
    path: Path
    creation_time: datetime | None = None
    modified_time: datetime | None = None
    size_bytes: int = 0
    metadata_error: str = ""

    @property
    def name(self) -> str:
        return self.relative_path.name

    @property
    def folder(self) -> Path:
        """Directory of the match, relative to the scan root."""
        return self.relative_path.parent

    def to_dict(self) -> dict[str, Any]:
        """Structured form handed to presentation layers."""
        return {
            "relative_path": self.relative_path.as_posix(),
            "creation_time": _iso_or_unknown(self.creation_time),
            "modified_time": _iso_or_unknown(self.modified_time),
            "size_bytes": self.size_bytes,
            "metadata_error": self.metadata_error,
        }


@dataclass(frozen=True, slots=True)
class ScanWarning:
    """An entry the scanner had to skip."""

    path: Path
    reason: str

    def __str__(self) -> str:
        return f"{self.path}: {self.reason}"


@dataclass(slots=True)
class ScanResult:
    """Ordered matches of one scan, in traversal order."""

    root: Path
    target_name: str
    matches: list[FileMatch] = field(default_factory=list)
    warnings: list[ScanWarning] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """False when part of the tree could not be read."""
        return not self.warnings

    @property
    def relative_paths(self) -> list[str]:
        return [m.relative_path.as_posix() for m in self.matches]

    def __iter__(self) -> Iterator[FileMatch]:
        return iter(self.matches)

    def __len__(self) -> int:
        return len(self.matches)

    def __getitem__(self, index: int) -> FileMatch:
        return self.matches[index]

    def __bool__(self) -> bool:
        return bool(self.matches)


def _iso_or_unknown(value: datetime | None) -> str:
    return value.isoformat() if value is not None else UNKNOWN
