"""Live server — static HTTP, the reload WebSocket, and the watcher.

One websockets server handles both halves of ``run`` mode:

- plain HTTP requests are answered from the source tree by the
  ``process_request`` hook (HTML gets the reload script appended)
- requests to :data:`~tabby.live.inject.RELOAD_ENDPOINT` are upgraded to
  WebSockets and registered with the broadcaster
- :data:`STATS_ENDPOINT` returns the event log summary as JSON when a
  collector is attached

Flow:
    file change -> SourceWatcher (thread) -> ReloadChannel -> whichever
    client handler takes the signal -> Broadcaster.broadcast() -> every client

The channel, broadcaster and watcher are created here and passed down
explicitly; nothing is process-global.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from http import HTTPStatus
from pathlib import Path
from typing import TYPE_CHECKING

from tabby.live.broadcaster import Broadcaster, LiveClient
from tabby.live.channel import ReloadChannel
from tabby.live.inject import RELOAD_ENDPOINT
from tabby.live.static import error_response, make_response, respond
from tabby.live.watcher import SourceWatcher
from tabby.log import get_logger

if TYPE_CHECKING:
    from websockets.asyncio.server import Server, ServerConnection
    from websockets.http11 import Request, Response

    from tabby.observability.collector import EventCollector

logger = get_logger("live")

STATS_ENDPOINT = "/__stats"

# Number of recent events included in the stats payload.
_RECENT_EVENTS = 20


class LiveServer:
    """Serves a source tree with live reload.

    Args:
        source: Directory to serve and watch.
        host: Bind address.
        port: Bind port (0 picks a free port).
        collector: Optional event collector for structured records.
        debounce_ms: Watcher batching window.

    """

    def __init__(
        self,
        source: Path,
        host: str = "0.0.0.0",
        port: int = 8080,
        *,
        collector: EventCollector | None = None,
        debounce_ms: int = 50,
    ) -> None:
        self._source = Path(source)
        self._host = host
        self._port = port
        self._collector = collector
        self._debounce_ms = debounce_ms
        self.channel = ReloadChannel()
        self.broadcaster = Broadcaster(collector)
        self._watcher: SourceWatcher | None = None
        self._server: Server | None = None
        self._ready = asyncio.Event()

    @property
    def port(self) -> int:
        """The bound port (resolved after startup when 0 was requested)."""
        if self._server is not None:
            for sock in self._server.sockets:
                return sock.getsockname()[1]
        return self._port

    async def wait_ready(self) -> None:
        """Wait until the server is listening."""
        await self._ready.wait()

    async def run(self) -> None:
        """Start the watcher and serve until cancelled.

        Raises:
            WatchSetupError: The source tree cannot be watched.
            OSError: The listener cannot bind.

        """
        from websockets.asyncio.server import serve

        self._watcher = SourceWatcher(
            self._source,
            self.channel,
            asyncio.get_running_loop(),
            collector=self._collector,
            debounce_ms=self._debounce_ms,
        )
        await asyncio.to_thread(self._watcher.start)

        try:
            async with serve(
                self._handle_client,
                self._host,
                self._port,
                process_request=self._process_request,
            ) as server:
                self._server = server
                self._ready.set()
                logger.info("Serving '%s' on http://localhost:%d...", self._source, self.port)
                await server.serve_forever()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Stop the watcher, close the channel and disconnect every client."""
        if self._watcher is not None:
            await asyncio.to_thread(self._watcher.stop)
            self._watcher = None
        self.channel.close()
        await self.broadcaster.close_all()

    def _process_request(
        self, connection: ServerConnection, request: Request,
    ) -> Response | None:
        """Answer plain HTTP requests; let the reload endpoint upgrade."""
        path = request.path.split("?", 1)[0]
        if path == RELOAD_ENDPOINT:
            return None
        if path == STATS_ENDPOINT:
            return self._stats_response()
        return respond(self._source, request.path)

    def _stats_response(self) -> Response:
        """JSON summary of the event log plus the most recent events."""
        if self._collector is None:
            return error_response(HTTPStatus.NOT_FOUND)

        log = self._collector.log
        payload = json.dumps(
            {
                "event_log": log.stats(),
                "recent": [
                    {"type": type(event).__name__, **asdict(event)}
                    for event in log.recent(_RECENT_EVENTS)
                ],
            },
            indent=2,
        )
        return make_response(
            HTTPStatus.OK,
            payload.encode("utf-8"),
            content_type="application/json",
        )

    async def _handle_client(self, connection: ServerConnection) -> None:
        """Register a live client and service the shared reload stream."""
        client = LiveClient(connection)
        self.broadcaster.register(client)
        remote = _format_remote(connection.remote_address)
        logger.info("WebSocket connected: %s", remote)
        if self._collector is not None:
            self._collector.record_connect(client.client_id, remote)

        try:
            await self._service(client, connection)
        finally:
            self.broadcaster.unregister(client)
            try:
                await connection.close()
            except OSError as exc:
                logger.error("Error closing WebSocket client: %s", exc)

    async def _service(self, client: LiveClient, connection: ServerConnection) -> None:
        """Wait for a change signal or the peer closing, whichever is first."""
        closed = asyncio.ensure_future(connection.wait_closed())
        try:
            while self.broadcaster.is_registered(client):
                signal = asyncio.ensure_future(self.channel.receive())
                done, _ = await asyncio.wait(
                    {signal, closed}, return_when=asyncio.FIRST_COMPLETED,
                )
                if signal not in done:
                    signal.cancel()
                    return
                if not signal.result():
                    return  # channel closed
                await self.broadcaster.broadcast()
                if closed in done:
                    return
        finally:
            closed.cancel()


def _format_remote(address: object) -> str:
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)
