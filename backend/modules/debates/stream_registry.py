"""
Short-lived tickets for the two-step streaming handshake.

POST /stream/init validates a turn and registers a ticket; the SSE GET
consumes it. A ticket is single use and expires after its TTL, so a
replayed or stale GET cannot start a second provider call.
"""

import time
import uuid
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

STREAM_SESSION_TTL_SECONDS = 5 * 60
MIN_TTL_SECONDS = 1.0


@dataclass(frozen=True)
class StreamSessionEntry(Generic[T]):
    session_id: str
    task_id: str
    model_key: str
    payload: T
    created_at: float
    expires_at: float


class StreamSessionRegistry(Generic[T]):
    """In-process ticket store keyed by session id.

    ``clock`` returns wall-clock seconds; tests inject a fake one.
    """

    def __init__(
        self,
        ttl_seconds: float = STREAM_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, StreamSessionEntry[T]] = {}

    def create_session(
        self,
        task_id: str,
        model_key: str,
        payload: T,
        ttl_seconds: Optional[float] = None,
    ) -> StreamSessionEntry[T]:
        self.cleanup_expired()

        now = self._clock()
        ttl = max(ttl_seconds if ttl_seconds is not None else self.ttl_seconds, MIN_TTL_SECONDS)
        entry = StreamSessionEntry(
            session_id=str(uuid.uuid4()),
            task_id=task_id,
            model_key=model_key,
            payload=payload,
            created_at=now,
            expires_at=now + ttl,
        )
        self._sessions[entry.session_id] = entry
        return entry

    def consume_session(
        self,
        session_id: str,
        task_id: Optional[str] = None,
        model_key: Optional[str] = None,
    ) -> Optional[StreamSessionEntry[T]]:
        """
        Take a ticket out of the registry.

        Returns None when the ticket is unknown, expired, or does not match
        the given task id / model key. A mismatch leaves the ticket in place.
        """
        entry = self._sessions.get(session_id)
        if entry is None:
            return None

        if entry.expires_at <= self._clock():
            del self._sessions[session_id]
            return None

        if task_id is not None and entry.task_id != task_id:
            return None
        if model_key is not None and entry.model_key != model_key:
            return None

        del self._sessions[session_id]
        return entry

    def cleanup_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, entry in self._sessions.items() if entry.expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)

    def size(self) -> int:
        return len(self._sessions)
