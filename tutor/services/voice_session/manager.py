"""Live voice session registry."""
import logging
from typing import Any, Callable, Dict, List, Optional

from tutor.services.voice_session.client import RelayVoiceClient
from tutor.services.voice_session.controller import SessionController
from tutor.services.voice_session.exceptions import SessionAccessError, SessionNotFoundError
from tutor.services.voice_session.models import (
    ClientCommand,
    SessionParameters,
    SessionSnapshot,
)
from tutor.services.voice_session.notifier import PersistenceNotifier, Recorder

logger = logging.getLogger(__name__)

# Module-level session storage (persists across requests)
# Sessions live in this process only; run a single worker
_sessions: Dict[str, SessionController] = {}


class VoiceSessionManager:
    """Creates, looks up and tears down live voice sessions."""

    def __init__(
        self,
        client_factory: Callable[[], RelayVoiceClient],
        recorder_factory: Callable[[Optional[str]], Recorder],
    ):
        self.client_factory = client_factory
        self.recorder_factory = recorder_factory

    async def create_session(
        self, parameters: SessionParameters, user_id: Optional[str] = None
    ) -> SessionController:
        """Create a controller, subscribe it to a fresh client and start it."""
        client = self.client_factory()
        notifier = PersistenceNotifier(self.recorder_factory(user_id))
        controller = SessionController(client, notifier, user_id=user_id)
        controller.activate()
        _sessions[controller.session_id] = controller

        try:
            controller.start(parameters)
        except Exception:
            _sessions.pop(controller.session_id, None)
            controller.close()
            raise

        logger.info(
            f"[SESSION MANAGER] Session created - id: {controller.session_id}, "
            f"user: {user_id}, live sessions: {len(_sessions)}"
        )
        return controller

    async def get_session(
        self, session_id: str, user_id: Optional[str] = None
    ) -> SessionController:
        """
        Get a live session.

        Args:
            session_id: Session id returned at start
            user_id: Caller; must own the session when the session has an owner

        Raises:
            SessionNotFoundError: If no session has this id
            SessionAccessError: If the session belongs to another user
        """
        controller = _sessions.get(session_id)
        if controller is None:
            raise SessionNotFoundError(session_id)
        if controller.user_id is not None and controller.user_id != user_id:
            logger.warning(
                f"[SESSION MANAGER] Access denied - id: {session_id}, user: {user_id}"
            )
            raise SessionAccessError(session_id, user_id)
        return controller

    async def relay_event(
        self,
        session_id: str,
        event: str,
        payload: Optional[Any] = None,
        user_id: Optional[str] = None,
    ) -> SessionSnapshot:
        """
        Emit an event posted by the browser and wait until it is applied.

        A session whose call has ended is torn down here, since the browser
        may never ask for it to be closed.

        Returns:
            The session as it was right after the event was applied
        """
        controller = await self.get_session(session_id, user_id)
        controller.client.emit(event, payload)
        await controller.settle()
        snapshot = controller.snapshot()

        if controller.call_ended:
            _sessions.pop(session_id, None)
            controller.close()
            logger.info(
                f"[SESSION MANAGER] Call ended, session released - id: {session_id}, "
                f"live sessions: {len(_sessions)}"
            )
        return snapshot

    async def drain_commands(
        self, session_id: str, user_id: Optional[str] = None
    ) -> List[ClientCommand]:
        """Collect the commands queued for the browser."""
        controller = await self.get_session(session_id, user_id)
        return controller.client.drain_commands()

    async def end_session(self, session_id: str, user_id: Optional[str] = None) -> None:
        """Tear down a session and forget it."""
        controller = await self.get_session(session_id, user_id)
        _sessions.pop(session_id, None)
        controller.close()


async def close_all_sessions() -> None:
    """Tear down every live session (application shutdown)."""
    for session_id in list(_sessions):
        controller = _sessions.pop(session_id)
        # Apply queued events first so a pending call-end is still recorded
        await controller.settle()
        controller.close()
    logger.info("[SESSION MANAGER] All live sessions closed")


def live_session_count() -> int:
    """Number of sessions currently held in this process."""
    return len(_sessions)
