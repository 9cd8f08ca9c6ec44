"""Session management for MCP transport.

The SessionManager owns the table of open sessions, the only shared mutable
state of the server. It runs on the event loop thread, so the plain dict
needs no lock. Each session owns one delivery channel and, for streaming
channels, a heartbeat task that keeps intermediaries from timing out idle
connections.

Responses on a session are delivered in request arrival order through
delivery tickets: a ticket is reserved when a request arrives, and a
response is written only after every earlier ticket has been released.
Handlers run concurrently; only the final write is serialized.
"""

import asyncio
import logging
import secrets
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import ChannelClosed, SessionNotFound
from ..models import ChannelKind
from .channels import Channel

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

# 128 bits of randomness, hex encoded
SESSION_ID_BYTES = 16


def _short(session_id: str) -> str:
    return f"{session_id[:8]}..."


@dataclass
class DeliveryTicket:
    """A reserved slot in a session's delivery order."""

    seq: int
    previous: asyncio.Event | None
    done: asyncio.Event


class Session:
    """A server-tracked conversation bound to one delivery channel."""

    def __init__(self, session_id: str, channel: Channel):
        self.id = session_id
        self.channel = channel
        self.created_at = time.time()
        self.last_activity = time.monotonic()
        self.heartbeat_task: asyncio.Task | None = None
        self._seq = 0
        self._tail: asyncio.Event | None = None
        self._pending_releases: set[asyncio.Task] = set()

    @property
    def closed(self) -> bool:
        return self.channel.closed

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_seconds(self, now: float | None = None) -> float:
        return (now if now is not None else time.monotonic()) - self.last_activity

    # ============ ORDERED DELIVERY ============

    def reserve(self) -> DeliveryTicket:
        """Reserve the next delivery slot. Call in request arrival order."""
        ticket = DeliveryTicket(seq=self._seq, previous=self._tail, done=asyncio.Event())
        self._seq += 1
        self._tail = ticket.done
        return ticket

    async def deliver(self, ticket: DeliveryTicket, message: dict[str, Any] | None) -> None:
        """Write ``message`` once every earlier ticket has been released.

        A ``None`` message only releases the slot (notifications).

        Raises:
            ChannelClosed: the channel closed before the write
        """
        try:
            if ticket.previous is not None:
                await ticket.previous.wait()
            if message is not None:
                await self.channel.send(message)
                self.touch()
        finally:
            self.release(ticket)

    def release(self, ticket: DeliveryTicket) -> None:
        """Give up a slot without writing. Idempotent.

        If earlier slots are still outstanding, the release is deferred until
        they finish so later responses cannot overtake them.
        """
        if ticket.done.is_set():
            return
        if ticket.previous is None or ticket.previous.is_set():
            ticket.done.set()
            return

        async def _release_after_previous() -> None:
            await ticket.previous.wait()
            ticket.done.set()

        task = asyncio.get_running_loop().create_task(_release_after_previous())
        self._pending_releases.add(task)
        task.add_done_callback(self._pending_releases.discard)


class SessionManager:
    """Process-scoped table of open sessions.

    Created with the application and bound to its lifespan: ``start()``
    launches the idle reaper (when either idle limit is configured) and
    ``stop()`` drains every session.

    Args:
        heartbeat_interval: Seconds between keep-alives on streaming channels
        idle_timeout: Close sessions idle longer than this (None disables)
        direct_idle_timeout: Idle limit for direct sessions; the stricter of
            this and ``idle_timeout`` applies to them (None disables)
        reap_interval: Seconds between idle sweeps
        tombstone_limit: How many closed ids to remember for idempotent DELETE
    """

    def __init__(
        self,
        heartbeat_interval: float = 15.0,
        idle_timeout: float | None = None,
        direct_idle_timeout: float | None = None,
        reap_interval: float = 30.0,
        tombstone_limit: int = 10_000,
    ):
        self.heartbeat_interval = heartbeat_interval
        self.idle_timeout = idle_timeout
        self.direct_idle_timeout = direct_idle_timeout
        self.reap_interval = reap_interval
        self.tombstone_limit = tombstone_limit
        self._sessions: dict[str, Session] = {}
        self._closed_ids: OrderedDict[str, float] = OrderedDict()
        self._reaper: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SessionManager":
        return cls(
            heartbeat_interval=settings.heartbeat_interval,
            idle_timeout=settings.session_idle_timeout,
            direct_idle_timeout=settings.direct_session_idle_timeout,
            reap_interval=settings.session_reap_interval,
            tombstone_limit=settings.session_tombstone_limit,
        )

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    # ============ LIFECYCLE ============

    async def start(self) -> None:
        """Start background maintenance (idle reaper)."""
        if (self.idle_timeout or self.direct_idle_timeout) and self._reaper is None:
            self._reaper = asyncio.create_task(self._reap_loop(), name="mcp-session-reaper")
            logger.info(
                f"Session idle timeout enabled: {self.idle_timeout}s "
                f"(direct sessions: {self.direct_idle_timeout}s)"
            )

    async def stop(self) -> None:
        """Stop the reaper and close every open session."""
        if self._reaper is not None:
            self._reaper.cancel()
            try:
                await self._reaper
            except asyncio.CancelledError:
                pass
            self._reaper = None

        open_ids = list(self._sessions)
        for session_id in open_ids:
            self.close(session_id, reason="server shutdown")
        if open_ids:
            logger.info(f"Closed {len(open_ids)} sessions on shutdown")

    # ============ SESSION OPERATIONS ============

    def create_session(self, channel: Channel) -> Session:
        """Register a new session owning ``channel``.

        Starts a heartbeat task when the channel is a stream.
        """
        session_id = secrets.token_hex(SESSION_ID_BYTES)
        while session_id in self._sessions or session_id in self._closed_ids:
            session_id = secrets.token_hex(SESSION_ID_BYTES)

        session = Session(session_id, channel)
        channel.bind(session_id)
        self._sessions[session_id] = session

        if channel.streaming:
            session.heartbeat_task = asyncio.create_task(
                self._heartbeat(session), name=f"mcp-heartbeat-{_short(session_id)}"
            )

        logger.info(f"Created {channel.kind} session {_short(session_id)}")
        return session

    def lookup(self, session_id: str) -> Session:
        """Find an open session and mark it active.

        Raises:
            SessionNotFound: id is unknown or already closed
        """
        session = self._sessions.get(session_id)
        if session is None or session.closed:
            if session_id in self._closed_ids:
                raise SessionNotFound(f"Session closed: {session_id}")
            raise SessionNotFound(f"Session not found: {session_id}")
        session.touch()
        return session

    def was_closed(self, session_id: str) -> bool:
        """Whether ``session_id`` belonged to a session that has been closed."""
        return session_id in self._closed_ids

    async def send(self, session_id: str, message: dict[str, Any]) -> None:
        """Write a message to a session's channel, bypassing ordering.

        Raises:
            SessionNotFound: id is unknown or closed
            ChannelClosed: the channel went away
        """
        session = self.lookup(session_id)
        await session.channel.send(message)

    def close(self, session_id: str, reason: str = "closed") -> bool:
        """Tear down a session. Idempotent.

        Returns:
            True if this call closed the session, False if there was nothing
            open under that id
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False

        task = session.heartbeat_task
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
        session.heartbeat_task = None
        session.channel.close()

        self._closed_ids[session_id] = time.time()
        while len(self._closed_ids) > self.tombstone_limit:
            self._closed_ids.popitem(last=False)

        logger.info(f"Closed session {_short(session_id)} ({reason})")
        return True

    def idle_limit(self, session: Session) -> float | None:
        """Seconds of inactivity after which ``session`` is reaped (None: never)."""
        if session.channel.kind != ChannelKind.DIRECT:
            return self.idle_timeout
        limits = [t for t in (self.idle_timeout, self.direct_idle_timeout) if t]
        return min(limits) if limits else None

    def reap_idle(self, now: float | None = None) -> list[str]:
        """Close every session idle longer than its idle limit."""
        now = now if now is not None else time.monotonic()
        expired = []
        for session_id, session in self._sessions.items():
            limit = self.idle_limit(session)
            if limit and session.idle_seconds(now) > limit:
                expired.append(session_id)
        for session_id in expired:
            self.close(session_id, reason="idle timeout")
        return expired

    # ============ BACKGROUND TASKS ============

    async def _heartbeat(self, session: Session) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            try:
                await session.channel.ping()
            except ChannelClosed:
                logger.warning(f"Heartbeat failed for session {_short(session.id)}")
                self.close(session.id, reason="heartbeat failure")
                return

    async def _reap_loop(self) -> None:
        while True:
            await asyncio.sleep(self.reap_interval)
            expired = self.reap_idle()
            if expired:
                logger.info(f"Reaped {len(expired)} idle sessions")


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
