"""Tests for tabby.live.channel — the unbuffered reload hand-off."""

from __future__ import annotations

import asyncio

import pytest

from tabby._errors import ChannelClosedError
from tabby.live.channel import ReloadChannel


class TestSendReceive:
    @pytest.mark.asyncio
    async def test_receive_takes_a_signal(self) -> None:
        channel = ReloadChannel()
        sender = asyncio.create_task(channel.send())
        assert await asyncio.wait_for(channel.receive(), timeout=1.0) is True
        await asyncio.wait_for(sender, timeout=1.0)

    @pytest.mark.asyncio
    async def test_send_blocks_until_received(self) -> None:
        channel = ReloadChannel()
        sender = asyncio.create_task(channel.send())
        await asyncio.sleep(0.05)
        assert not sender.done()

        assert await channel.receive() is True
        await asyncio.wait_for(sender, timeout=1.0)
        assert sender.done()

    @pytest.mark.asyncio
    async def test_receive_blocks_until_sent(self) -> None:
        channel = ReloadChannel()
        receiver = asyncio.create_task(channel.receive())
        await asyncio.sleep(0.05)
        assert not receiver.done()

        await asyncio.wait_for(channel.send(), timeout=1.0)
        assert await receiver is True

    @pytest.mark.asyncio
    async def test_each_signal_taken_once(self) -> None:
        channel = ReloadChannel()
        receivers = [asyncio.create_task(channel.receive()) for _ in range(3)]
        await asyncio.sleep(0)

        await asyncio.wait_for(channel.send(), timeout=1.0)
        await asyncio.sleep(0.05)
        assert sum(1 for r in receivers if r.done()) == 1

        channel.close()
        results = await asyncio.gather(*receivers)
        assert sorted(results) == [False, False, True]

    @pytest.mark.asyncio
    async def test_burst_is_not_coalesced(self) -> None:
        channel = ReloadChannel()
        senders = [asyncio.create_task(channel.send()) for _ in range(5)]
        await asyncio.sleep(0)

        taken = [await asyncio.wait_for(channel.receive(), timeout=1.0) for _ in range(5)]
        assert taken == [True] * 5
        await asyncio.wait_for(asyncio.gather(*senders), timeout=1.0)


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_send_is_withdrawn(self) -> None:
        channel = ReloadChannel()
        sender = asyncio.create_task(channel.send())
        await asyncio.sleep(0)
        sender.cancel()
        with pytest.raises(asyncio.CancelledError):
            await sender

        receiver = asyncio.create_task(channel.receive())
        await asyncio.sleep(0.05)
        assert not receiver.done()

        channel.close()
        assert await receiver is False

    @pytest.mark.asyncio
    async def test_cancelled_receive_loses_nothing(self) -> None:
        channel = ReloadChannel()
        receiver = asyncio.create_task(channel.receive())
        await asyncio.sleep(0)
        receiver.cancel()
        with pytest.raises(asyncio.CancelledError):
            await receiver

        sender = asyncio.create_task(channel.send())
        assert await asyncio.wait_for(channel.receive(), timeout=1.0) is True
        await asyncio.wait_for(sender, timeout=1.0)


class TestClose:
    @pytest.mark.asyncio
    async def test_send_after_close_raises(self) -> None:
        channel = ReloadChannel()
        channel.close()
        assert channel.closed
        with pytest.raises(ChannelClosedError):
            await channel.send()

    @pytest.mark.asyncio
    async def test_close_wakes_every_receiver(self) -> None:
        channel = ReloadChannel()
        receivers = [asyncio.create_task(channel.receive()) for _ in range(3)]
        await asyncio.sleep(0)

        channel.close()
        results = await asyncio.wait_for(asyncio.gather(*receivers), timeout=1.0)
        assert results == [False, False, False]

    @pytest.mark.asyncio
    async def test_pending_signals_delivered_before_close(self) -> None:
        channel = ReloadChannel()
        sender = asyncio.create_task(channel.send())
        await asyncio.sleep(0)
        channel.close()

        assert await channel.receive() is True
        assert await channel.receive() is False
        assert await channel.receive() is False
        await asyncio.wait_for(sender, timeout=1.0)

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        channel = ReloadChannel()
        channel.close()
        channel.close()
        assert await channel.receive() is False
