"""
In-memory registry of logged-in admin sessions.
Sessions expire a fixed time after login; they are not persisted.
"""
import logging
import secrets
from datetime import timedelta
from typing import Dict, Optional

from bakery.models import AdminSession
from bakery.storage.snapshot import Clock, utc_now

logger = logging.getLogger(__name__)


class AdminSessionManager:
    def __init__(self, max_age: timedelta = timedelta(hours=2), clock: Clock = utc_now) -> None:
        self.max_age = max_age
        self.clock = clock
        self._sessions: Dict[str, AdminSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, username: str, ip: Optional[str] = None, user_agent: Optional[str] = None) -> str:
        """Start a session and return its opaque id."""
        session_id = secrets.token_urlsafe(32)
        self._sessions[session_id] = AdminSession(
            session_id=session_id,
            username=username,
            login_time=self.clock(),
            ip=ip,
            user_agent=user_agent,
        )
        logger.info(f"Admin session created for {username} from {ip or 'unknown'}")
        return session_id

    def _expired(self, session: AdminSession) -> bool:
        return self.clock() - session.login_time >= self.max_age

    def get(self, session_id: str) -> Optional[AdminSession]:
        session = self._sessions.get(session_id)
        if session is None or self._expired(session):
            return None
        return session

    def is_valid(self, session_id: Optional[str]) -> bool:
        if not session_id:
            return False
        return self.get(session_id) is not None

    def revoke(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def sweep(self) -> None:
        """Drop sessions older than max_age."""
        stale = [sid for sid, session in self._sessions.items() if self._expired(session)]
        for sid in stale:
            del self._sessions[sid]
        if stale:
            logger.info(f"Expired {len(stale)} admin session(s)")
