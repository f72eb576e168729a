"""Companion persistence service."""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, desc

from tutor.db.models import Companion
from tutor.services.companions.models import CompanionCreate


class CompanionPersistenceService:
    """Service for persisting companion data."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_companion(self, data: CompanionCreate, author: str) -> Companion:
        """Create a new companion owned by author."""
        companion = Companion(**data.model_dump(), author=author)
        self.db.add(companion)
        await self.db.commit()
        await self.db.refresh(companion)
        return companion

    async def get_companion(self, companion_id: str) -> Optional[Companion]:
        """Get companion by ID."""
        result = await self.db.execute(
            select(Companion).where(Companion.id == companion_id)
        )
        return result.scalar_one_or_none()

    async def list_companions(
        self,
        limit: int = 10,
        page: int = 1,
        subject: Optional[str] = None,
        topic: Optional[str] = None,
    ) -> List[Companion]:
        """
        List companions, optionally filtered.

        Args:
            limit: Page size
            page: 1-based page number
            subject: Case-insensitive substring of the subject
            topic: Case-insensitive substring of the topic or the name

        Returns:
            Companions on the requested page, oldest first
        """
        query = select(Companion)

        if subject:
            query = query.where(Companion.subject.ilike(f"%{subject}%"))
        if topic:
            query = query.where(
                or_(
                    Companion.topic.ilike(f"%{topic}%"),
                    Companion.name.ilike(f"%{topic}%"),
                )
            )

        query = (
            query.order_by(Companion.created_at, Companion.id)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_user_companions(self, user_id: str) -> List[Companion]:
        """Get companions authored by a user."""
        result = await self.db.execute(
            select(Companion)
            .where(Companion.author == user_id)
            .order_by(desc(Companion.created_at))
        )
        return list(result.scalars().all())

    async def count_user_companions(self, user_id: str) -> int:
        """Count companions authored by a user."""
        result = await self.db.execute(
            select(func.count(Companion.id)).where(Companion.author == user_id)
        )
        return result.scalar() or 0

    async def can_create_companion(self, user_id: str, limit: Optional[int]) -> bool:
        """Check whether a user is still below their companion limit."""
        if limit is None:
            return True
        count = await self.count_user_companions(user_id)
        return count < limit
