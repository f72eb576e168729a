"""Main FastAPI application."""
from fastapi import FastAPI
from contextlib import asynccontextmanager

from tutor.core.config import settings
from tutor.core.logging import setup_logging
from tutor.db.database import init_db, reset_db, dispose_db
from tutor.api import health, companions, sessions
from tutor.api.webhooks import voice as voice_webhooks
from tutor.services.voice_session.manager import close_all_sessions


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    if settings.reset_db_on_startup:
        await reset_db()
    yield
    # Shutdown
    await close_all_sessions()
    await dispose_db()


app = FastAPI(
    title="Tutor Companions",
    description="Voice tutoring sessions with companion personas",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(companions.router, tags=["companions"])
app.include_router(sessions.router, tags=["sessions"])
app.include_router(voice_webhooks.router, prefix="/webhooks", tags=["webhooks"])
