"""FastAPI dependencies."""
from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import async_sessionmaker

from tutor.db.database import AsyncSessionLocal
from tutor.services.persistence.session_history import session_recorder
from tutor.services.voice_session.client import RelayVoiceClient
from tutor.services.voice_session.manager import VoiceSessionManager


def get_session_factory() -> async_sessionmaker:
    """Get the session factory used outside request scope."""
    return AsyncSessionLocal


def get_voice_session_manager(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> VoiceSessionManager:
    """Get voice session manager."""
    return VoiceSessionManager(
        client_factory=RelayVoiceClient,
        recorder_factory=lambda user_id: session_recorder(session_factory, user_id),
    )


async def get_optional_user_id(
    x_user_id: Optional[str] = Header(default=None),
) -> Optional[str]:
    """User id set by the authentication proxy, if any."""
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


async def require_user_id(
    user_id: Optional[str] = Depends(get_optional_user_id),
) -> str:
    """Dependency to require an authenticated user."""
    if user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id
