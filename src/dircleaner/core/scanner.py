"""Recursive search for files sharing an exact name."""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path

from dircleaner.models.file_match import FileMatch, ScanResult, ScanWarning

log = logging.getLogger(__name__)

_SEPARATORS = frozenset(filter(None, ("/", os.sep, os.altsep)))


class ScanError(Exception):
    """Raised when a scan cannot start."""


class InvalidRootError(ScanError):
    """The scan root does not exist or is not a directory."""


class InvalidTargetError(ScanError):
    """The target name is empty or is not a bare file name."""


def validate_target_name(target_name: str) -> str:
    """Return *target_name* unchanged, or raise InvalidTargetError."""
    if not target_name:
        raise InvalidTargetError("File name must not be empty")
    if any(sep in target_name for sep in _SEPARATORS):
        raise InvalidTargetError(f"File name must not contain a path separator: {target_name!r}")
    if target_name in (".", ".."):
        raise InvalidTargetError(f"Not a file name: {target_name!r}")
    return target_name


def scan(root: Path | str, target_name: str) -> ScanResult:
    """Find every regular file named exactly *target_name* under *root*.

    The walk is depth-first and pre-order.  Inside each directory the
    entries are sorted by name; matching files of that directory come
    first, then its subdirectories are descended in order.  Symbolic
    links are neither followed nor matched, and a directory reached twice
    (e.g. through a bind mount) is only visited once.

    Unreadable directories and entries are skipped and reported in
    ``ScanResult.warnings``.  Never modifies the filesystem.

    Raises:
        InvalidTargetError: *target_name* is empty or contains a separator.
        InvalidRootError: *root* does not exist or is not a directory.
    """
    validate_target_name(target_name)
    root = Path(root)
    if not root.is_dir():
        if root.exists():
            raise InvalidRootError(f"Not a directory: {root}")
        raise InvalidRootError(f"Directory not found: {root}")

    result = ScanResult(root=root, target_name=target_name)
    _walk(root, result)

    log.info(
        "Found %d file(s) named %r under %s (%d warning(s))",
        len(result.matches),
        target_name,
        root,
        len(result.warnings),
    )
    return result


def _walk(root: Path, result: ScanResult) -> None:
    """Visit *root* and everything below it, depth-first and pre-order.

    Uses an explicit stack so tree depth is not bound by the recursion
    limit.  Subdirectories are pushed in reverse so they pop in name order.
    """
    visited: set[tuple[int, int]] = set()
    stack: list[tuple[Path, Path]] = [(root, Path())]
    while stack:
        directory, relative = stack.pop()
        try:
            st = directory.stat()
        except OSError as e:
            _warn(result, directory, e)
            continue
        identity = (st.st_dev, st.st_ino)
        if identity in visited:
            log.debug("Already visited, skipping: %s", directory)
            continue
        visited.add(identity)

        log.debug("Scanning %s", directory)
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            _warn(result, directory, e)
            continue

        subdirs: list[os.DirEntry] = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(entry)
                elif entry.name == result.target_name and entry.is_file(follow_symlinks=False):
                    result.matches.append(_build_match(entry, relative / entry.name))
            except OSError as e:
                _warn(result, Path(entry.path), e)

        for entry in reversed(subdirs):
            stack.append((Path(entry.path), relative / entry.name))


def _build_match(entry: os.DirEntry, relative_path: Path) -> FileMatch:
    """Read the metadata of a matching entry; failures are recorded, not raised."""
    path = Path(entry.path)
    try:
        st = entry.stat(follow_symlinks=False)
    except OSError as e:
        log.warning("Cannot read metadata of %s: %s", path, e)
        return FileMatch(
            relative_path=relative_path,
            path=path,
            metadata_error=_describe(e),
        )

    return FileMatch(
        relative_path=relative_path,
        path=path,
        creation_time=creation_time(st),
        modified_time=_to_datetime(st.st_mtime),
        size_bytes=st.st_size,
    )


def creation_time(st: os.stat_result) -> datetime | None:
    """Return the birth time recorded in *st*, or None if the platform has none.

    ``st_birthtime`` is reported on macOS and the BSDs (and on Windows
    from Python 3.12).  Older Windows builds keep the creation time in
    ``st_ctime``.  Linux ``stat`` exposes no birth time.
    """
    birth = getattr(st, "st_birthtime", None)
    if birth is None and sys.platform == "win32":
        birth = st.st_ctime
    if birth is None:
        return None
    return _to_datetime(birth)


def _to_datetime(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _warn(result: ScanResult, path: Path, error: OSError) -> None:
    reason = _describe(error)
    log.warning("Skipping %s: %s", path, reason)
    result.warnings.append(ScanWarning(path=path, reason=reason))


def _describe(error: OSError) -> str:
    if isinstance(error, PermissionError):
        return "permission denied"
    if isinstance(error, FileNotFoundError):
        return "not found"
    return error.strerror or str(error)
