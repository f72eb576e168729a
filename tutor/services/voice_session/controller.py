"""Session controller for a live voice session with a companion."""
import logging
import re
import uuid
from typing import Optional

from tutor.services.voice_session.assistant import (
    build_assistant_overrides,
    configure_assistant,
)
from tutor.services.voice_session.bridge import EventBridge
from tutor.services.voice_session.client import VoiceClient
from tutor.services.voice_session.exceptions import SessionStateError
from tutor.services.voice_session.models import (
    CallStatus,
    SessionParameters,
    SessionSnapshot,
    Speaker,
    TranscriptEntry,
)
from tutor.services.voice_session.notifier import PersistenceNotifier
from tutor.services.voice_session.state_machine import CallStateMachine
from tutor.services.voice_session.store import SessionStore

logger = logging.getLogger(__name__)


def speaker_label(entry: TranscriptEntry, companion_name: str, user_name: Optional[str]) -> str:
    """Label a transcript line with the companion's first name or the user's name."""
    if entry.role == Speaker.ASSISTANT:
        first_name = companion_name.split(" ")[0] if companion_name else "Companion"
        return re.sub(r"[.,]", "", first_name)
    return user_name or "User"


class SessionController:
    """
    Start, stop and mute one voice session.

    The controller issues requests to the voice client and returns at once.
    Everything that follows (call started, transcripts, call ended) arrives
    through the event bridge.
    """

    def __init__(
        self,
        client: VoiceClient,
        notifier: PersistenceNotifier,
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.user_id = user_id  # Owner; None when identity is not known
        self.client = client
        self.notifier = notifier
        self.parameters: Optional[SessionParameters] = None
        self.is_muted = False
        self.state_machine = CallStateMachine(self.session_id)
        self.store = SessionStore()
        self.bridge = EventBridge(
            client, self.state_machine, self.store, on_call_end=self._handle_call_end
        )

    @property
    def status(self) -> CallStatus:
        return self.state_machine.status

    @property
    def is_speaking(self) -> bool:
        return self.bridge.is_speaking

    @property
    def call_ended(self) -> bool:
        """Whether the client has reported the end of the call."""
        return self.bridge.call_ended

    def activate(self) -> None:
        """Subscribe to the voice client. Must run inside the event loop."""
        self.bridge.attach()

    def close(self) -> None:
        """Unsubscribe from the voice client and clear the transcript."""
        self.bridge.detach()
        self.store.clear()
        logger.info(f"[{self.session_id}] Session closed - status: {self.status.value}")

    async def __aenter__(self) -> "SessionController":
        self.activate()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def start(self, parameters: SessionParameters) -> None:
        """
        Begin connecting to the companion.

        Raises:
            SessionStateError: If the session is not idle
        """
        if self.status != CallStatus.IDLE:
            raise SessionStateError("start", self.status)

        self.parameters = parameters
        self.state_machine.transition_to(CallStatus.CONNECTING)

        assistant = configure_assistant(parameters.voice, parameters.style)
        overrides = build_assistant_overrides(parameters)
        logger.info(
            f"[{self.session_id}] Starting session - companion: {parameters.companion_id}, "
            f"subject: {parameters.subject}, voice: {parameters.voice}, style: {parameters.style}"
        )
        self.client.start(assistant, overrides)

    def stop(self) -> bool:
        """
        Disconnect an active session.

        Returns:
            True if the session was active and is now finished
        """
        if self.status != CallStatus.ACTIVE:
            logger.info(
                f"[{self.session_id}] Stop ignored - status: {self.status.value}"
            )
            return False

        self.state_machine.transition_to(CallStatus.FINISHED)
        self.client.stop()
        return True

    def toggle_mute(self) -> bool:
        """Invert the client's mute flag. Returns the new value."""
        muted = not self.client.is_muted()
        self.client.set_muted(muted)
        self.is_muted = muted
        return muted

    def _handle_call_end(self) -> None:
        # A call that never became active is not a completed session
        if self.parameters is None or not self.state_machine.was_active:
            logger.warning(
                f"[{self.session_id}] Connect aborted before the call started, nothing recorded"
            )
            return
        self.notifier.notify(self.parameters.companion_id)

    async def settle(self) -> None:
        """Wait for delivered events and completion notifications to be processed."""
        await self.bridge.drain()
        await self.notifier.flush()

    def snapshot(self) -> SessionSnapshot:
        entries = self.store.entries
        lines = []
        if self.parameters is not None:
            lines = [
                f"{speaker_label(entry, self.parameters.name, self.parameters.user_name)}: "
                f"{entry.content}"
                for entry in entries
            ]
        return SessionSnapshot(
            session_id=self.session_id,
            status=self.status,
            status_history=list(self.state_machine.history),
            is_speaking=self.is_speaking,
            is_muted=self.is_muted,
            companion_id=self.parameters.companion_id if self.parameters else None,
            transcript=entries,
            lines=lines,
        )
