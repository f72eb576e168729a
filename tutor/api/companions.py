"""Companion API endpoints."""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tutor.core.config import settings
from tutor.core.dependencies import require_user_id
from tutor.db.database import get_db
from tutor.db.models import Companion
from tutor.services.companions.constants import get_subject_color
from tutor.services.companions.models import CompanionCreate
from tutor.services.persistence.companions import CompanionPersistenceService


router = APIRouter()
logger = logging.getLogger(__name__)


class CompanionResponse(BaseModel):
    """Companion response model."""
    id: str
    name: str
    subject: str
    topic: str
    voice: str
    style: str
    duration: int
    author: str
    created_at: str
    color: str

    class Config:
        from_attributes = True


class PermissionsResponse(BaseModel):
    """Companion creation permission response."""
    can_create: bool
    limit: Optional[int] = None
    count: int


def to_companion_response(companion: Companion) -> CompanionResponse:
    """Convert a companion row to its response model."""
    return CompanionResponse(
        id=companion.id,
        name=companion.name,
        subject=companion.subject,
        topic=companion.topic,
        voice=companion.voice,
        style=companion.style,
        duration=companion.duration,
        author=companion.author,
        created_at=companion.created_at.isoformat() if companion.created_at else "",
        color=get_subject_color(companion.subject),
    )


@router.post("/api/companions", response_model=CompanionResponse, status_code=201)
async def create_companion(
    data: CompanionCreate,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Build a new companion for the current user."""
    logger.info(
        f"[COMPANIONS] Create requested - user: {user_id}, name: {data.name}, "
        f"subject: {data.subject}"
    )
    service = CompanionPersistenceService(db)

    if not await service.can_create_companion(user_id, settings.companion_limit):
        logger.info(f"[COMPANIONS] Companion limit reached - user: {user_id}")
        raise HTTPException(status_code=403, detail="Companion limit reached")

    try:
        companion = await service.create_companion(data, author=user_id)
    except Exception as e:
        logger.error(
            f"[COMPANIONS] Error creating companion - user: {user_id}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Failed to create a companion: {str(e)}")

    logger.info(f"[COMPANIONS] Companion created - id: {companion.id}")
    return to_companion_response(companion)


@router.get("/api/companions", response_model=List[CompanionResponse])
async def list_companions(
    request: Request,
    subject: Optional[str] = None,
    topic: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List companions filtered by subject and topic."""
    logger.info(
        f"[COMPANIONS] List requested - subject: {subject}, topic: {topic}, "
        f"page: {page}, limit: {limit}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    service = CompanionPersistenceService(db)
    companions = await service.list_companions(
        limit=limit, page=page, subject=subject, topic=topic
    )
    logger.debug(f"[COMPANIONS] Found {len(companions)} companions")
    return [to_companion_response(companion) for companion in companions]


@router.get("/api/companions/permissions", response_model=PermissionsResponse)
async def get_permissions(
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Check whether the current user may build another companion."""
    service = CompanionPersistenceService(db)
    count = await service.count_user_companions(user_id)
    limit = settings.companion_limit
    return PermissionsResponse(
        can_create=limit is None or count < limit,
        limit=limit,
        count=count,
    )


@router.get("/api/companions/{companion_id}", response_model=CompanionResponse)
async def get_companion(
    companion_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get one companion."""
    companion = await CompanionPersistenceService(db).get_companion(companion_id)
    if companion is None:
        logger.info(f"[COMPANIONS] Companion not found - id: {companion_id}")
        raise HTTPException(status_code=404, detail="Companion not found")
    return to_companion_response(companion)


@router.get("/api/users/me/companions", response_model=List[CompanionResponse])
async def get_my_companions(
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    """List the companions built by the current user."""
    companions = await CompanionPersistenceService(db).get_user_companions(user_id)
    return [to_companion_response(companion) for companion in companions]
