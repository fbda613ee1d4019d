"""Reload channel — unbuffered hand-off from the watcher to the broadcaster.

A send completes only once some receiver has taken the signal, so a burst
of filesystem events applies back-pressure to the watcher instead of being
dropped.  Signals carry no payload.

All methods must be called on the event loop that owns the channel; the
watcher thread reaches it with ``asyncio.run_coroutine_threadsafe``.
"""

from __future__ import annotations

import asyncio
from typing import cast

from tabby._errors import ChannelClosedError

_CLOSED = object()


class ReloadChannel:
    """Rendezvous channel carrying payload-free change signals.

    Any number of receivers may wait concurrently; each signal is taken by
    exactly one of them.  Each pending send is a future in the queue that
    the receiving side resolves.

    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._closed

    async def send(self) -> None:
        """Deliver one signal, waiting until a receiver has taken it.

        Cancelling a pending send withdraws the signal.

        Raises:
            ChannelClosedError: The channel was closed.

        """
        if self._closed:
            msg = "send on closed reload channel"
            raise ChannelClosedError(msg)
        taken: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(taken)
        await taken

    async def receive(self) -> bool:
        """Wait for the next signal.

        Returns True for a signal, False once the channel is closed.
        Cancelling a pending receive does not lose a signal.

        """
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                # Leave the marker in place for the other receivers.
                self._queue.put_nowait(_CLOSED)
                return False
            taken = cast("asyncio.Future[None]", item)
            if taken.done():
                continue  # withdrawn by a cancelled sender
            taken.set_result(None)
            return True

    def close(self) -> None:
        """Close the channel.

        Signals already sent are still handed out in order; after them every
        receiver gets False.
        """
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
