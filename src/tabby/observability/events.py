"""Structured records of what a build or a live session did.

Every record is an immutable dataclass stamped with ``timestamp_ns``
(monotonic clock) plus the fields specific to its kind.  Records are
created on the watcher thread as well as on the event loop and are shared
freely between them.
"""

import time
from dataclasses import dataclass
from typing import TypeAlias


# ---------------------------------------------------------------------------
# Build pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileMinified:
    """A text asset was minified and written to the destination tree.

    Attributes:
        path: Source-relative path of the file.
        media_type: Media type handed to the minifier.
        source_bytes: Size of the source file.
        minified_bytes: Size of the written output.
        reduction: Per-file reduction percentage (may be negative).
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    media_type: str
    source_bytes: int
    minified_bytes: int
    reduction: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class FileCopied:
    """An opaque asset was copied byte-for-byte.

    Attributes:
        path: Source-relative path of the file.
        media_type: Guessed MIME type, or empty if unknown.
        source_bytes: Number of bytes copied.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    media_type: str
    source_bytes: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildSummary:
    """A build run finished (successfully or not).

    Attributes:
        total_files: Regular files seen by the walk.
        processed_files: Files that went through the minifier.
        reduction: Aggregate reduction percentage over processed files.
        failed: True if the build aborted with an error.
        duration_ms: Wall-clock time for the whole run.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    total_files: int
    processed_files: int
    reduction: float
    failed: bool
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Live-reload events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChangeDetected:
    """The watcher observed a filesystem change.

    Attributes:
        path: Absolute path reported by the watch backend.
        kind: ``added``, ``modified`` or ``deleted``.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    kind: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """A reload instruction was fanned out to live clients.

    Attributes:
        clients_notified: Clients whose send succeeded.
        clients_dropped: Clients pruned because their send failed.
        duration_ms: Time spent writing to all clients.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    clients_notified: int
    clients_dropped: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ClientConnected:
    """A browser opened the reload socket."""

    client_id: str
    remote: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ClientDisconnected:
    """A live client was unregistered."""

    client_id: str
    reason: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Any record
# ---------------------------------------------------------------------------

TabbyEvent: TypeAlias = (
    FileMinified
    | FileCopied
    | BuildSummary
    | ChangeDetected
    | ReloadBroadcast
    | ClientConnected
    | ClientDisconnected
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
