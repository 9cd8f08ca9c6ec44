"""Tests for session lifecycle, heartbeats and ordered delivery."""

import asyncio
import re
import time

import anyio
import pytest

from travel_planner.config import Settings
from travel_planner.errors import ChannelClosed, SessionNotFound
from travel_planner.mcp.channels import KEEPALIVE_FRAME, Channel, DirectChannel, StreamChannel
from travel_planner.mcp.session import SessionManager
from travel_planner.models import ChannelKind

pytestmark = pytest.mark.anyio


class RecordingChannel(Channel):
    """Collects delivered messages in write order."""

    kind = ChannelKind.DIRECT

    def __init__(self):
        super().__init__()
        self.messages = []

    async def _write(self, message):
        self.messages.append(message)


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    with anyio.fail_after(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


# ============ LIFECYCLE ============


async def test_session_ids_are_unique_hex():
    manager = SessionManager()
    ids = {manager.create_session(DirectChannel()).id for _ in range(50)}
    assert len(ids) == 50
    assert all(re.fullmatch(r"[0-9a-f]{32}", sid) for sid in ids)
    await manager.stop()
    assert len(manager) == 0


async def test_lookup_and_close():
    manager = SessionManager()
    session = manager.create_session(DirectChannel())
    assert manager.lookup(session.id) is session

    assert manager.close(session.id) is True
    assert session.channel.closed
    assert manager.close(session.id) is False
    assert manager.was_closed(session.id)

    with pytest.raises(SessionNotFound, match="Session closed"):
        manager.lookup(session.id)
    with pytest.raises(SessionNotFound, match="Session not found"):
        manager.lookup("0" * 32)


async def test_tombstones_are_bounded():
    manager = SessionManager(tombstone_limit=2)
    ids = [manager.create_session(DirectChannel()).id for _ in range(3)]
    for sid in ids:
        manager.close(sid)
    assert not manager.was_closed(ids[0])
    assert manager.was_closed(ids[1])
    assert manager.was_closed(ids[2])


async def test_send_to_closed_channel_raises():
    manager = SessionManager()
    session = manager.create_session(RecordingChannel())
    await manager.send(session.id, {"jsonrpc": "2.0", "id": 1, "result": {}})
    assert session.channel.messages_sent == 1

    session.channel.close()
    with pytest.raises(ChannelClosed):
        await session.channel.send({"jsonrpc": "2.0", "id": 2, "result": {}})


# ============ HEARTBEAT ============


async def test_heartbeat_sends_keepalive():
    manager = SessionManager(heartbeat_interval=0.01)
    session = manager.create_session(StreamChannel())
    frames = session.channel.frames()
    assert (await anext(frames)).startswith("event: session")

    with anyio.fail_after(2):
        assert await anext(frames) == KEEPALIVE_FRAME
    await manager.stop()


async def test_heartbeat_failure_closes_session():
    manager = SessionManager(heartbeat_interval=0.01)
    session = manager.create_session(StreamChannel())
    task = session.heartbeat_task

    # Transport went away without telling the manager
    session.channel.close()
    await _wait_until(lambda: session.id not in manager)
    assert manager.was_closed(session.id)
    await _wait_until(task.done)


async def test_close_cancels_heartbeat():
    manager = SessionManager(heartbeat_interval=60)
    session = manager.create_session(StreamChannel())
    task = session.heartbeat_task
    manager.close(session.id)
    await _wait_until(task.done)
    assert task.cancelled()


async def test_stream_ends_when_closed():
    manager = SessionManager()
    session = manager.create_session(StreamChannel())
    manager.close(session.id)
    frames = [frame async for frame in session.channel.frames()]
    assert frames == [f"event: session\ndata: {session.id}\n\n"]


# ============ IDLE EXPIRY ============


async def test_reap_idle():
    manager = SessionManager(idle_timeout=10)
    stale = manager.create_session(DirectChannel())
    fresh = manager.create_session(DirectChannel())
    fresh.last_activity = time.monotonic() + 5

    expired = manager.reap_idle(now=time.monotonic() + 11)
    assert expired == [stale.id]
    assert fresh.id in manager
    assert manager.was_closed(stale.id)


async def test_reap_disabled_by_default():
    manager = SessionManager()
    manager.create_session(DirectChannel())
    assert manager.reap_idle(now=time.monotonic() + 10_000) == []


async def test_reaper_task():
    manager = SessionManager(idle_timeout=0.05, reap_interval=0.02)
    await manager.start()
    session = manager.create_session(DirectChannel())
    await _wait_until(lambda: session.id not in manager)
    await manager.stop()


# ============ ORDERED DELIVERY ============


async def test_responses_follow_arrival_order():
    manager = SessionManager()
    session = manager.create_session(RecordingChannel())
    first = session.reserve()
    second = session.reserve()

    async def slow():
        await asyncio.sleep(0.05)
        await session.deliver(first, {"id": 1})

    async def fast():
        await session.deliver(second, {"id": 2})

    await asyncio.gather(slow(), fast())
    assert [m["id"] for m in session.channel.messages] == [1, 2]


async def test_notification_slot_does_not_block():
    manager = SessionManager()
    session = manager.create_session(RecordingChannel())
    first = session.reserve()
    second = session.reserve()

    await session.deliver(first, None)
    with anyio.fail_after(1):
        await session.deliver(second, {"id": 2})
    assert session.channel.messages == [{"id": 2}]


async def test_release_waits_for_earlier_slots():
    manager = SessionManager()
    session = manager.create_session(RecordingChannel())
    first = session.reserve()
    second = session.reserve()
    third = session.reserve()

    # Second request failed before writing; its slot is given up early
    session.release(second)
    assert not second.done.is_set()

    third_task = asyncio.create_task(session.deliver(third, {"id": 3}))
    await asyncio.sleep(0.02)
    assert session.channel.messages == []

    await session.deliver(first, {"id": 1})
    await third_task
    assert [m["id"] for m in session.channel.messages] == [1, 3]
    session.release(second)


async def test_direct_sessions_expire_by_default():
    manager = SessionManager.from_settings(Settings(_env_file=None))
    assert manager.idle_timeout is None
    assert manager.direct_idle_timeout == 1800

    direct = manager.create_session(DirectChannel())
    stream = manager.create_session(StreamChannel())
    assert manager.idle_limit(stream) is None

    expired = manager.reap_idle(now=time.monotonic() + 1801)
    assert expired == [direct.id]
    assert stream.id in manager
    await manager.stop()


async def test_stricter_idle_limit_applies_to_direct_sessions():
    manager = SessionManager(idle_timeout=60, direct_idle_timeout=600)
    direct = manager.create_session(DirectChannel())
    assert manager.idle_limit(direct) == 60


async def test_reaper_starts_for_direct_timeout_alone():
    manager = SessionManager(direct_idle_timeout=0.05, reap_interval=0.02)
    await manager.start()
    session = manager.create_session(DirectChannel())
    await _wait_until(lambda: session.id not in manager)
    await manager.stop()
