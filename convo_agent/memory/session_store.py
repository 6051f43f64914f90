"""Session-scoped short-term conversation memory.

Purpose of this abstraction:
    Hold the ordered message history of every active conversation in process
    memory, bounded per session by a FIFO message cap and bounded globally by a
    retention window enforced through cooperative eviction.

Locking model:
    - `_map_lock` guards only the id -> session mapping and is held for dict
      operations, never while touching message lists.
    - Each session owns a `threading.Lock`; `append`, `recent`, `get`, and the
      per-session eviction decision all serialize on it.
    - Concurrent appends to different sessions never contend on a session lock.

Eviction race handling:
    `evict_stale` marks a removed session as closed while holding its lock. An
    `append` that fetched the session just before removal observes the closed
    flag after acquiring the lock and retries against a freshly created session,
    so the message is never written into an orphaned object.

Side effects:
    None beyond in-process state. Nothing is persisted to disk.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

from convo_agent.core.types import Message, Session, utc_now


logger = logging.getLogger(__name__)


DEFAULT_MESSAGE_CAP = 50
DEFAULT_RETENTION = timedelta(hours=24)


def _as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware timestamps."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass
class _SessionSlot:
    session: Session
    lock: threading.Lock = field(default_factory=threading.Lock)
    closed: bool = False


class SessionStore:
    """Thread-safe in-memory store of per-session message history."""

    def __init__(
        self,
        message_cap: int = DEFAULT_MESSAGE_CAP,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utc_now,
    ):
        if message_cap <= 0:
            raise ValueError("message_cap must be positive")

        self.message_cap = message_cap
        self.retention = retention
        self._clock = clock
        self._slots: dict[str, _SessionSlot] = {}
        self._map_lock = threading.Lock()

    # =========================================================
    # WRITE PATH
    # =========================================================

    def _slot_for_write(self, session_id: str) -> _SessionSlot:
        with self._map_lock:
            slot = self._slots.get(session_id)
            if slot is None:
                now = self._clock()
                slot = _SessionSlot(Session(id=session_id, created_at=now, last_activity=now))
                self._slots[session_id] = slot
                logger.debug("Created session %s", session_id)
            return slot

    def append(self, session_id: str, message: Message) -> None:
        """Append a message, creating the session lazily and enforcing the cap.

        Args:
            session_id: Conversation identifier.
            message: Immutable message to record.

        Important behavior:
            - Updates `last_activity` to the store clock.
            - Drops the oldest messages once the cap is exceeded.

        Edge cases:
            - Retries transparently when the session was evicted between lookup
              and lock acquisition.
        """
        while True:
            slot = self._slot_for_write(session_id)
            with slot.lock:
                if slot.closed:
                    continue

                session = slot.session
                session.messages.append(message)
                session.last_activity = self._clock()

                overflow = len(session.messages) - self.message_cap
                if overflow > 0:
                    del session.messages[:overflow]
                return

    # =========================================================
    # READ PATH
    # =========================================================

    def _slot(self, session_id: str) -> _SessionSlot | None:
        with self._map_lock:
            return self._slots.get(session_id)

    def recent(self, session_id: str, n: int) -> list[Message]:
        """Return up to `n` most recent messages, oldest first.

        Edge cases:
            - Unknown session or `n <= 0` returns `[]`.
        """
        if n <= 0:
            return []

        slot = self._slot(session_id)
        if slot is None:
            return []

        with slot.lock:
            if slot.closed:
                return []
            return list(slot.session.messages[-n:])

    def get(self, session_id: str) -> Session | None:
        """Return a snapshot copy of a session, or `None` when absent."""
        slot = self._slot(session_id)
        if slot is None:
            return None

        with slot.lock:
            if slot.closed:
                return None
            return replace(slot.session, messages=list(slot.session.messages))

    @property
    def session_count(self) -> int:
        with self._map_lock:
            return len(self._slots)

    # =========================================================
    # MAINTENANCE
    # =========================================================

    def clear(self, session_id: str) -> bool:
        """Delete a session. Returns whether one existed."""
        with self._map_lock:
            slot = self._slots.pop(session_id, None)
        if slot is None:
            return False

        with slot.lock:
            slot.closed = True
        return True

    def evict_stale(
        self,
        now: datetime | None = None,
        retention: timedelta | None = None,
    ) -> int:
        """Remove every session whose last activity predates `now - retention`.

        Args:
            now: Reference time, defaults to the store clock. Naive values are
                interpreted as UTC.
            retention: Inactivity window, defaults to the store retention.

        Returns:
            Number of sessions removed.

        Concurrency:
            Each candidate is re-checked under its own lock, so a session that
            received an append after the snapshot is kept.
        """
        now = now or self._clock()
        cutoff = _as_utc(now) - (retention if retention is not None else self.retention)

        with self._map_lock:
            candidates = list(self._slots.items())

        evicted = 0
        for session_id, slot in candidates:
            with slot.lock:
                if slot.closed or _as_utc(slot.session.last_activity) >= cutoff:
                    continue

                with self._map_lock:
                    if self._slots.get(session_id) is slot:
                        del self._slots[session_id]
                slot.closed = True
                evicted += 1

        if evicted:
            logger.info("Evicted %d stale session(s) older than %s", evicted, cutoff.isoformat())
        return evicted
