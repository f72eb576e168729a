"""Voice client relay webhook endpoints."""
import logging
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from tutor.core.dependencies import get_voice_session_manager, require_user_id
from tutor.services.voice_session.exceptions import SessionAccessError, SessionNotFoundError
from tutor.services.voice_session.manager import VoiceSessionManager
from tutor.services.voice_session.models import ClientCommand, SessionSnapshot

router = APIRouter()
logger = logging.getLogger(__name__)


class VoiceEventRequest(BaseModel):
    """Voice SDK event relayed by the browser."""
    event: str
    payload: Optional[Any] = None


@router.post("/voice/{session_id}/events", response_model=SessionSnapshot)
async def handle_voice_event(
    session_id: str,
    body: VoiceEventRequest,
    request: Request,
    user_id: str = Depends(require_user_id),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """
    Apply an event from the browser's voice SDK.

    Responds once the event has been applied, with the updated session.
    After call-end the session is released and later requests get 404.
    """
    logger.info(
        f"[VOICE EVENT] Received '{body.event}' - session: {session_id}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        snapshot = await manager.relay_event(
            session_id, body.event, body.payload, user_id=user_id
        )
    except SessionNotFoundError as e:
        logger.warning(f"[VOICE EVENT] Unknown session - session: {session_id}")
        raise HTTPException(status_code=404, detail=str(e))
    except SessionAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))

    logger.debug(
        f"[VOICE EVENT] Applied '{body.event}' - session: {session_id}, "
        f"status: {snapshot.status.value}, transcript: {len(snapshot.transcript)}"
    )
    return snapshot


@router.get("/voice/{session_id}/commands", response_model=List[ClientCommand])
async def get_voice_commands(
    session_id: str,
    user_id: str = Depends(require_user_id),
    manager: VoiceSessionManager = Depends(get_voice_session_manager),
):
    """Commands waiting for the browser's voice SDK."""
    try:
        return await manager.drain_commands(session_id, user_id=user_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SessionAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
