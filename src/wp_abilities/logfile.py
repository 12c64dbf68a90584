"""Bounded tail reads and truncation for externally-managed log files.

The WordPress ``debug.log`` can grow to many megabytes while callers only
want the last few hundred lines, so reads scan backwards from end-of-file in
fixed-size chunks and stop once enough newlines have been seen.

Each call opens, reads and closes the file on its own.  No lock is taken:
the host web server may append concurrently, so a read is not a
point-in-time snapshot.  Failures propagate as ``LogFileError`` subclasses
(which are ``OSError``s) and are never retried here.

Dependencies: (none — leaf module)
Wired in: abilities/debug_log.py
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

_LOG = logging.getLogger(__name__)

CHUNK_SIZE = 4096
_NEWLINE = b"\n"


class LogFileError(OSError):
    """Base class for log file access failures."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class LogNotFoundError(LogFileError):
    """The log path does not exist."""


class LogNotReadableError(LogFileError):
    """The log path exists but cannot be read (or written, for truncation)."""


class LogOpenError(LogFileError):
    """Pre-checks passed but the open call itself failed."""


class LogReadError(LogFileError):
    """An I/O error occurred part-way through a read."""


@dataclass(frozen=True)
class TailResult:
    """Suffix of a log file plus the size observed when reading began."""

    content: str
    file_size_bytes: int
    lines_returned: int


def _check_readable(path: Path) -> None:
    if not path.exists():
        raise LogNotFoundError(path, f"File does not exist: {path}")
    if not path.is_file() or not os.access(path, os.R_OK):
        raise LogNotReadableError(path, f"File is not readable: {path}")


def _split_lines(data: bytes) -> list[bytes]:
    """Split on ``\\n`` only, keeping terminators; a non-empty tail is a line."""
    segments = data.split(_NEWLINE)
    trailing = segments.pop()
    lines = [segment + _NEWLINE for segment in segments]
    if trailing:
        lines.append(trailing)
    return lines


def count_lines(content: str) -> int:
    """Count lines the way the debug-log reader reports them.

    Newlines are counted as-is; content without a trailing newline gets one
    more for its unterminated last line.
    """
    if not content:
        return 0
    newlines = content.count("\n")
    if content.endswith("\n"):
        return newlines
    return newlines + 1


def tail_file(
    path: Path,
    max_lines: int,
    *,
    chunk_size: int = CHUNK_SIZE,
    logger: logging.Logger | None = None,
) -> TailResult:
    """Return the last *max_lines* lines of *path* without reading it whole.

    Clamping *max_lines* to a sane range is the caller's job; values below 1
    are rejected.
    """
    if max_lines < 1:
        raise ValueError("max_lines must be >= 1.")
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1.")
    log = logger or _LOG

    _check_readable(path)
    try:
        handle = path.open("rb")
    except OSError as exc:
        raise LogOpenError(path, f"Unable to open file: {path}: {exc.strerror or exc}") from exc

    chunks: list[bytes] = []
    with handle:
        try:
            handle.seek(0, os.SEEK_END)
            file_size = handle.tell()
            if file_size == 0:
                return TailResult(content="", file_size_bytes=0, lines_returned=0)

            position = file_size
            newlines_found = 0
            # One newline past max_lines marks where the first kept line starts.
            while newlines_found <= max_lines and position > 0:
                read_size = min(chunk_size, position)
                position -= read_size
                handle.seek(position, os.SEEK_SET)
                chunk = handle.read(read_size)
                chunks.append(chunk)
                newlines_found += chunk.count(_NEWLINE)
        except OSError as exc:
            raise LogReadError(path, f"Failed reading file: {path}: {exc.strerror or exc}") from exc

    log.debug(
        "Tail read %s: size=%d chunks=%d start_offset=%d",
        path,
        file_size,
        len(chunks),
        position,
    )
    lines = _split_lines(b"".join(reversed(chunks)))
    if len(lines) > max_lines:
        lines = lines[-max_lines:]
    content = b"".join(lines).decode("utf-8", errors="replace")
    return TailResult(
        content=content,
        file_size_bytes=file_size,
        lines_returned=count_lines(content),
    )


def truncate_file(path: Path, *, logger: logging.Logger | None = None) -> int:
    """Empty *path* in place and return its size before truncation."""
    log = logger or _LOG
    if not path.exists():
        raise LogNotFoundError(path, f"File does not exist: {path}")
    if not path.is_file() or not os.access(path, os.W_OK):
        raise LogNotReadableError(path, f"File is not writable: {path}")

    previous_size = path.stat().st_size
    try:
        with path.open("wb"):
            pass
    except OSError as exc:
        raise LogOpenError(path, f"Unable to truncate file: {path}: {exc.strerror or exc}") from exc
    log.debug("Truncated %s (was %d bytes)", path, previous_size)
    return previous_size
