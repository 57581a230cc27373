"""Registry of open push streams, keyed by session id.

The registry is the sole owner of every Session. It is created once per
application and passed to the gateway and dispatcher; there is no
module-level instance.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field

from .heartbeat import Heartbeat
from .stream import PushStream

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One caller's push stream plus its correlation state."""

    session_id: str
    stream: PushStream | None
    initialized: bool = False
    heartbeat: Heartbeat | None = field(default=None, repr=False)


class StreamRegistry:
    """Concurrency-safe map of session id to Session.

    All mutations happen under a single asyncio.Lock.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    async def open(self, stream: PushStream) -> Session:
        """Register a stream under a fresh session id."""
        async with self._lock:
            session_id = str(uuid.uuid4())
            while session_id in self._sessions:
                session_id = str(uuid.uuid4())
            session = Session(session_id=session_id, stream=stream)
            self._sessions[session_id] = session
        logger.info(f"Created session {session_id}")
        return session

    async def lookup(self, session_id: str) -> Session | None:
        """Find a session, or None if it is not registered."""
        async with self._lock:
            return self._sessions.get(session_id)

    async def close(self, session_id: str) -> Session | None:
        """Remove a session and clear its stream reference.

        Closing an unknown or already-closed id is a no-op that returns None.
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        if session.stream is not None:
            session.stream.close()
            session.stream = None
        logger.info(f"Closed session {session_id}")
        return session

    async def mark_initialized(self, session_id: str) -> None:
        """Set the session's initialized flag. No-op if the session is absent."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                session.initialized = True

    async def session_ids(self) -> list[str]:
        async with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
