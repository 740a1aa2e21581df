"""
cadastro/services/session_service.py

Purpose: Session storage and per-user serialization

- Keeps one Session per user id
- One asyncio.Lock per user id so a user's events never interleave
- Handles idle expiry and reset logic
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Tuple

from cadastro.core.logging import get_logger
from cadastro.models.session import Session
from utils.time_utils import is_session_expired

logger = get_logger(__name__)


class SessionStore:
    """
    In-memory session map owned by the registration controller.

    Callers must hold `lock(user_id)` while reading or mutating that
    user's session; the store itself runs on a single event loop.
    """

    def __init__(self, timeout_minutes: int = 30):
        self.timeout_minutes = timeout_minutes
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        # Holders plus waiters per user; a lock is only dropped at zero
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()

        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]

    def is_busy(self, user_id: str) -> bool:
        """True while an event for this user is running or queued."""
        return user_id in self._lock_users

    def get(self, user_id: str) -> Optional[Session]:
        return self._sessions.get(user_id)

    def get_or_create(self, user_id: str) -> Tuple[Session, bool]:
        """
        Returns (session, expired).

        An idle session past the timeout is dropped and replaced by a new
        one; `expired` tells the caller so the user can be told.
        """
        session = self._sessions.get(user_id)
        expired = False

        if session is not None and is_session_expired(session.last_interaction, self.timeout_minutes):
            logger.info(f"Session expired after {self.timeout_minutes} minutes idle", extra={"user_id": user_id})
            expired = True
            session = None

        if session is None:
            session = Session(user_id=user_id)
            self._sessions[user_id] = session
            logger.debug("Session created", extra={"user_id": user_id})

        return session, expired

    def delete(self, user_id: str, reason: str = "manual") -> bool:
        removed = self._sessions.pop(user_id, None) is not None
        if removed:
            logger.info(f"Session reset ({reason})", extra={"user_id": user_id})
        return removed

    def purge_expired(self) -> int:
        """Drops idle sessions nobody is using. Returns how many were removed."""
        purged = 0
        for user_id, session in list(self._sessions.items()):
            if self.is_busy(user_id):
                continue
            if is_session_expired(session.last_interaction, self.timeout_minutes):
                del self._sessions[user_id]
                purged += 1

        # Locks of users with no session and nobody holding or waiting
        for user_id in list(self._locks):
            if user_id not in self._sessions and not self.is_busy(user_id):
                del self._locks[user_id]

        if purged:
            logger.info(f"Purged {purged} idle sessions")
        return purged

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
