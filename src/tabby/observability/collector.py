"""Event collector: one ``record_*`` method per kind of event.

Components take an optional collector instead of touching an EventLog
directly.  Human-readable log lines are emitted by the components
themselves; the collector only stores structured records.
"""

from __future__ import annotations

from tabby.observability.events import (
    BuildSummary,
    ChangeDetected,
    ClientConnected,
    ClientDisconnected,
    FileCopied,
    FileMinified,
    ReloadBroadcast,
    now_ns,
)
from tabby.observability.log import EventLog


class EventCollector:
    """Records build and live-reload events into an EventLog.

    Args:
        log: Destination log; a fresh EventLog when omitted.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """Where recorded events end up."""
        return self._log

    # build

    def record_minified(
        self,
        path: str,
        media_type: str,
        *,
        source_bytes: int,
        minified_bytes: int,
        reduction: float,
    ) -> None:
        """Record a minified file."""
        self._log.append(
            FileMinified(
                path=path,
                media_type=media_type,
                source_bytes=source_bytes,
                minified_bytes=minified_bytes,
                reduction=reduction,
                timestamp_ns=now_ns(),
            )
        )

    def record_copied(self, path: str, media_type: str, *, source_bytes: int) -> None:
        """Record a verbatim copy."""
        self._log.append(
            FileCopied(
                path=path,
                media_type=media_type,
                source_bytes=source_bytes,
                timestamp_ns=now_ns(),
            )
        )

    def record_build_summary(
        self,
        *,
        total_files: int,
        processed_files: int,
        reduction: float,
        failed: bool = False,
        duration_ms: float = 0.0,
    ) -> None:
        """Record the end of a build run."""
        self._log.append(
            BuildSummary(
                total_files=total_files,
                processed_files=processed_files,
                reduction=reduction,
                failed=failed,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    # live reload

    def record_change(self, path: str, kind: str) -> None:
        """Record a filesystem change seen by the watcher."""
        self._log.append(ChangeDetected(path=path, kind=kind, timestamp_ns=now_ns()))

    def record_broadcast(
        self,
        *,
        clients_notified: int,
        clients_dropped: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record one reload fan-out."""
        self._log.append(
            ReloadBroadcast(
                clients_notified=clients_notified,
                clients_dropped=clients_dropped,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_connect(self, client_id: str, remote: str) -> None:
        """Record a new live client."""
        self._log.append(
            ClientConnected(client_id=client_id, remote=remote, timestamp_ns=now_ns())
        )

    def record_disconnect(self, client_id: str, reason: str) -> None:
        """Record a live client leaving the registry."""
        self._log.append(
            ClientDisconnected(client_id=client_id, reason=reason, timestamp_ns=now_ns())
        )
