"""Registry of the live session in each guild."""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from game.session import Session

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks at most one active session per guild."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    async def register(self, session: Session):
        """Make a session the guild's active one, ending whatever was there before."""
        existing = self._sessions.get(session.guild_id)
        if existing is not None and existing is not session:
            logger.info(f"gid: {session.guild_id} | Replacing existing {existing.session_name()}")
            await existing.end_session()

        self._sessions[session.guild_id] = session

    def get(self, guild_id: str) -> Optional[Session]:
        return self._sessions.get(guild_id)

    def remove(self, guild_id: str, session: Session) -> bool:
        """Forget a guild's session, but only if it is still the registered one."""
        if self._sessions.get(guild_id) is not session:
            return False
        del self._sessions[guild_id]
        return True

    def get_all_sessions(self) -> List[Session]:
        return list(self._sessions.values())

    def get_inactive_sessions(self, now: datetime, idle_minutes: float) -> List[Session]:
        cutoff = now - timedelta(minutes=idle_minutes)
        return [session for session in self._sessions.values() if session.last_active < cutoff]

    async def end_all(self):
        for session in self.get_all_sessions():
            await session.end_session()

    def __len__(self) -> int:
        return len(self._sessions)


# Global session manager instance
session_manager = SessionManager()
