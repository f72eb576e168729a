"""Voice session and session history API endpoints."""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tutor.api.companions import CompanionResponse, to_companion_response
from tutor.core.config import settings
from tutor.core.dependencies import get_voice_session_manager, require_user_id
from tutor.db.database import get_db
from tutor.services.persistence.companions import CompanionPersistenceService
from tutor.services.persistence.session_history import SessionHistoryService
from tutor.services.voice_session.controller import SessionController
from tutor.services.voice_session.exceptions import (
    SessionAccessError,
    SessionNotFoundError,
    SessionStateError,
)
from tutor.services.voice_session.manager import VoiceSessionManager
from tutor.services.voice_session.models import (
    ClientCommand,
    SessionParameters,
    SessionSnapshot,
)


router = APIRouter()
logger = logging.getLogger(__name__)


class StartSessionRequest(BaseModel):
    """Start session request model."""
    companion_id: str
    user_name: Optional[str] = None
    user_image: Optional[str] = None


class StartSessionResponse(BaseModel):
    """Start session response model."""
    session: SessionSnapshot
    commands: List[ClientCommand] = []


class MuteResponse(BaseModel):
    """Mute toggle response model."""
    is_muted: bool


@router.get("/api/sessions/recent", response_model=List[CompanionResponse])
async def get_recent_sessions(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Companions of the most recently completed sessions."""
    limit = limit or settings.recent_sessions_limit
    companions = await SessionHistoryService(db).get_recent_sessions(limit)
    logger.debug(f"[SESSIONS] Recent sessions - {len(companions)} companions")
    return [to_companion_response(companion) for companion in companions]


@router.get("/api/users/me/sessions", response_model=List[CompanionResponse])
async def get_my_sessions(
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Companions of the current user's most recent sessions."""
    limit = limit or settings.recent_sessions_limit
    companions = await SessionHistoryService(db).get_user_sessions(user_id, limit)
    return [to_companion_response(companion) for companion in companions]


@router.post("/api/sessions", response_model=StartSessionResponse, status_code=201)
async def start_session(
    body: StartSessionRequest,
    user_id: str = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """Start a voice session with a companion."""
    logger.info(
        f"[SESSIONS] Start requested - companion: {body.companion_id}, user: {user_id}"
    )
    companion = await CompanionPersistenceService(db).get_companion(body.companion_id)
    if companion is None:
        raise HTTPException(status_code=404, detail="Companion not found")

    parameters = SessionParameters(
        companion_id=companion.id,
        subject=companion.subject,
        topic=companion.topic,
        name=companion.name,
        style=companion.style,
        voice=companion.voice,
        user_name=body.user_name,
        user_image=body.user_image,
    )

    try:
        controller = await manager.create_session(parameters, user_id=user_id)
        commands = await manager.drain_commands(controller.session_id, user_id=user_id)
    except Exception as e:
        logger.error(
            f"[SESSIONS] Error starting session - companion: {body.companion_id}, "
            f"Error: {type(e).__name__}: {str(e)}",
            exc_info=True
        )
        raise HTTPException(status_code=500, detail=f"Error starting session: {str(e)}")

    return StartSessionResponse(session=controller.snapshot(), commands=commands)


async def _get_owned_session(
    manager: VoiceSessionManager, session_id: str, user_id: str
) -> SessionController:
    try:
        return await manager.get_session(session_id, user_id=user_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.get("/api/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session(
    session_id: str,
    user_id: str = Depends(require_user_id),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """Current state of a live session."""
    controller = await _get_owned_session(manager, session_id, user_id)
    return controller.snapshot()


@router.post("/api/sessions/{session_id}/stop", response_model=SessionSnapshot)
async def stop_session(
    session_id: str,
    user_id: str = Depends(require_user_id),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """Disconnect an active session."""
    controller = await _get_owned_session(manager, session_id, user_id)
    if not controller.stop():
        raise HTTPException(
            status_code=409,
            detail=str(SessionStateError("stop", controller.status)),
        )
    return controller.snapshot()


@router.post("/api/sessions/{session_id}/mute", response_model=MuteResponse)
async def toggle_mute(
    session_id: str,
    user_id: str = Depends(require_user_id),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """Toggle the microphone of a session."""
    controller = await _get_owned_session(manager, session_id, user_id)
    return MuteResponse(is_muted=controller.toggle_mute())


@router.delete("/api/sessions/{session_id}")
async def close_session(
    session_id: str,
    user_id: str = Depends(require_user_id),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """Tear down a session when the page is left."""
    try:
        await manager.end_session(session_id, user_id=user_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    logger.info(f"[SESSIONS] Session closed - id: {session_id}")
    return {"success": True, "message": f"Session {session_id} closed"}
