"""Broadcaster — pushes reload instructions to connected browsers.

Holds the set of live WebSocket clients.  On each change signal every
registered client is sent the fixed ``reload`` message; a client whose
send fails is treated as disconnected and pruned without affecting the
others.
"""

from __future__ import annotations

import asyncio
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from websockets.exceptions import ConnectionClosed

from tabby._errors import SendError
from tabby.live.inject import RELOAD_MESSAGE
from tabby.log import get_logger

if TYPE_CHECKING:
    from tabby._types import ClientID
    from tabby.observability.collector import EventCollector

logger = get_logger("live")

_client_ids = itertools.count(1)


class Connection(Protocol):
    """The slice of a WebSocket connection the broadcaster uses."""

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...


def next_client_id() -> ClientID:
    """Return a process-unique client identifier (``c1``, ``c2``, ...)."""
    return f"c{next(_client_ids)}"


@dataclass(frozen=True, slots=True, eq=False)
class LiveClient:
    """A connected reload receiver.

    Compared and hashed by identity.  The underlying connection is not
    safe for concurrent writers, so every send holds ``send_lock``.

    Attributes:
        connection: The WebSocket connection.
        client_id: Identifier used in logs and events.
        send_lock: Serialises sends to this client.

    """

    connection: Connection
    client_id: ClientID = field(default_factory=next_client_id)
    send_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def send(self, message: str) -> None:
        """Send *message* while holding this client's lock.

        Raises:
            SendError: The connection is closed or the write failed.

        """
        async with self.send_lock:
            try:
                await self.connection.send(message)
            except (ConnectionClosed, OSError) as exc:
                msg = f"send to {self.client_id} failed: {exc}"
                raise SendError(msg) from exc


class Broadcaster:
    """Registry of live clients with fan-out of reload instructions.

    Thread-safe: the client set is protected by a lock and always iterated
    as a snapshot, so clients may register or leave mid-broadcast.  A
    client registered during a broadcast may or may not receive it.

    Args:
        collector: Optional event collector for structured records.

    """

    def __init__(self, collector: EventCollector | None = None) -> None:
        self._clients: set[LiveClient] = set()
        self._lock = threading.Lock()
        self._collector = collector

    @property
    def client_count(self) -> int:
        """Number of registered clients."""
        with self._lock:
            return len(self._clients)

    def clients(self) -> frozenset[LiveClient]:
        """Snapshot of the registered clients (no lock held on return)."""
        with self._lock:
            return frozenset(self._clients)

    def is_registered(self, client: LiveClient) -> bool:
        """Whether *client* is currently registered."""
        with self._lock:
            return client in self._clients

    def register(self, client: LiveClient) -> None:
        """Add a client to the registry."""
        with self._lock:
            self._clients.add(client)

    def unregister(self, client: LiveClient, reason: str = "closed") -> bool:
        """Remove a client.  Returns False if it was not registered."""
        with self._lock:
            if client not in self._clients:
                return False
            self._clients.discard(client)
        if self._collector is not None:
            self._collector.record_disconnect(client.client_id, reason)
        return True

    async def broadcast(self, message: str = RELOAD_MESSAGE) -> int:
        """Send *message* to every registered client.

        Clients whose send fails are unregistered before this returns.
        Failures are logged at warning level and never propagate.

        Returns:
            Number of clients that received the message.

        """
        start = time.perf_counter()
        clients = self.clients()
        logger.info("Sending reload to %d client(s)", len(clients))

        notified = 0
        dropped = 0
        for client in clients:
            try:
                await client.send(message)
            except SendError as exc:
                logger.warning(
                    "WebSocket write failed (likely client disconnect): %s", exc,
                )
                if self.unregister(client, reason="send failed"):
                    dropped += 1
            else:
                notified += 1

        if self._collector is not None:
            self._collector.record_broadcast(
                clients_notified=notified,
                clients_dropped=dropped,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
        return notified

    async def close_all(self) -> None:
        """Close and unregister every client (graceful shutdown)."""
        for client in self.clients():
            self.unregister(client, reason="shutdown")
            async with client.send_lock:
                try:
                    await client.connection.close()
                except (ConnectionClosed, OSError) as exc:
                    logger.debug("Error closing client %s: %s", client.client_id, exc)
