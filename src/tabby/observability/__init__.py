"""Observability — structured records of builds and live reloads.

Aggregates events from:
- **Build pipeline**: per-file minify/copy records and the run summary
- **Watcher**: filesystem changes
- **Broadcaster**: client connects, disconnects and reload fan-outs

All events are frozen dataclasses with nanosecond timestamps, safe for
concurrent production from the watcher thread and the event loop.

Quick Start:
    >>> from tabby.observability import EventCollector, EventLog
    >>> log = EventLog()
    >>> collector = EventCollector(log)
    >>> # Pass collector to build() / LiveServer
    >>> log.recent(5)

"""

from tabby.observability.collector import EventCollector
from tabby.observability.events import (
    BuildSummary,
    ChangeDetected,
    ClientConnected,
    ClientDisconnected,
    FileCopied,
    FileMinified,
    ReloadBroadcast,
    TabbyEvent,
    now_ns,
)
from tabby.observability.log import EventLog

__all__ = [
    "BuildSummary",
    "ChangeDetected",
    "ClientConnected",
    "ClientDisconnected",
    "EventCollector",
    "EventLog",
    "FileCopied",
    "FileMinified",
    "ReloadBroadcast",
    "TabbyEvent",
    "now_ns",
]
