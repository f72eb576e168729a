"""Session history persistence service."""
import logging
from typing import Awaitable, Callable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy import select, desc
from sqlalchemy.orm import selectinload

from tutor.db.models import Companion, SessionHistory

logger = logging.getLogger(__name__)


class SessionHistoryService:
    """Service for persisting completed voice sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_to_session_history(
        self, companion_id: str, user_id: Optional[str] = None
    ) -> SessionHistory:
        """Record that a user finished a session with a companion."""
        entry = SessionHistory(companion_id=companion_id, user_id=user_id)
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def get_recent_sessions(self, limit: int = 10) -> List[Companion]:
        """Get companions of the most recent sessions, newest first, without duplicates."""
        return await self._session_companions(
            select(SessionHistory), limit
        )

    async def get_user_sessions(self, user_id: str, limit: int = 10) -> List[Companion]:
        """Get companions of a user's most recent sessions, newest first, without duplicates."""
        return await self._session_companions(
            select(SessionHistory).where(SessionHistory.user_id == user_id), limit
        )

    async def _session_companions(self, query, limit: int) -> List[Companion]:
        result = await self.db.execute(
            query.options(selectinload(SessionHistory.companion))
            .order_by(desc(SessionHistory.created_at), desc(SessionHistory.id))
            .limit(limit)
        )
        companions: List[Companion] = []
        seen = set()
        for entry in result.scalars().all():
            companion = entry.companion
            if companion is None or companion.id in seen:
                continue
            seen.add(companion.id)
            companions.append(companion)
        return companions


def session_recorder(
    session_factory: async_sessionmaker, user_id: Optional[str] = None
) -> Callable[[str], Awaitable[None]]:
    """
    Build the callable that records a finished session.

    It opens its own database session since it runs after the request
    that started the voice session has completed.
    """

    async def record(companion_id: str) -> None:
        async with session_factory() as db:
            entry = await SessionHistoryService(db).add_to_session_history(
                companion_id, user_id
            )
            logger.info(
                f"[SESSION HISTORY] Recorded session {entry.id} - "
                f"companion: {companion_id}, user: {user_id}"
            )

    return record
