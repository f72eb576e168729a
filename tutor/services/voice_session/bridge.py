"""Bridge from voice client events to session state."""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from tutor.services.voice_session.client import EventHandler, VoiceClient
from tutor.services.voice_session.models import (
    CallStatus,
    TranscriptEntry,
    VoiceEvent,
    VoiceMessage,
)
from tutor.services.voice_session.state_machine import CallStateMachine
from tutor.services.voice_session.store import SessionStore

logger = logging.getLogger(__name__)


class EventBridge:
    """
    Subscribes to the voice client and applies its events to the session.

    Client callbacks only enqueue. A single consumer task applies the
    events one at a time in the order they arrived.
    """

    EVENTS = tuple(VoiceEvent)

    def __init__(
        self,
        client: VoiceClient,
        state_machine: CallStateMachine,
        store: SessionStore,
        on_call_end: Callable[[], None],
    ):
        self.client = client
        self.state_machine = state_machine
        self.store = store
        self.on_call_end = on_call_end
        self.is_speaking = False
        self.call_ended = False
        self._queue: "asyncio.Queue[Tuple[VoiceEvent, Any]]" = asyncio.Queue()
        self._handlers: Dict[VoiceEvent, EventHandler] = {}
        self._consumer: Optional[asyncio.Task] = None

    @property
    def attached(self) -> bool:
        return bool(self._handlers)

    def attach(self) -> None:
        """Subscribe to all voice client events and start the consumer."""
        if self.attached:
            return
        for event in self.EVENTS:
            handler = self._make_handler(event)
            self._handlers[event] = handler
            self.client.on(event.value, handler)
        self._consumer = asyncio.get_running_loop().create_task(self._consume())
        logger.debug(f"[{self.state_machine.session_id}] Event bridge attached")

    def detach(self) -> None:
        """Unsubscribe every handler and drop undelivered events."""
        for event, handler in self._handlers.items():
            self.client.off(event.value, handler)
        self._handlers.clear()

        if self._consumer is not None:
            self._consumer.cancel()
            self._consumer = None

        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        logger.debug(f"[{self.state_machine.session_id}] Event bridge detached")

    async def drain(self) -> None:
        """Wait until every queued event has been applied."""
        if self._consumer is None:
            return
        await self._queue.join()

    def _make_handler(self, event: VoiceEvent) -> EventHandler:
        def handler(payload: Any = None) -> None:
            self._queue.put_nowait((event, payload))

        return handler

    async def _consume(self) -> None:
        while True:
            event, payload = await self._queue.get()
            try:
                self.dispatch(event, payload)
            except Exception as e:
                logger.error(
                    f"[{self.state_machine.session_id}] Error handling '{event.value}' - "
                    f"Error: {type(e).__name__}: {str(e)}",
                    exc_info=True,
                )
            finally:
                self._queue.task_done()

    def dispatch(self, event: VoiceEvent, payload: Any = None) -> None:
        """Apply one event to the session."""
        if event == VoiceEvent.CALL_START:
            self.state_machine.transition_to(CallStatus.ACTIVE)
        elif event == VoiceEvent.CALL_END:
            self._handle_call_end()
        elif event == VoiceEvent.MESSAGE:
            self._handle_message(payload)
        elif event == VoiceEvent.ERROR:
            # Transport errors never end the session by themselves
            logger.error(f"[{self.state_machine.session_id}] Voice client error: {payload}")
        elif event == VoiceEvent.SPEECH_START:
            self.is_speaking = True
        elif event == VoiceEvent.SPEECH_END:
            self.is_speaking = False

    def _handle_call_end(self) -> None:
        # Already finished when the user disconnected first; from connecting
        # this aborts a failed connect
        if not self.state_machine.is_finished:
            self.state_machine.transition_to(CallStatus.FINISHED)
        self.is_speaking = False
        self.call_ended = True
        self.on_call_end()

    def _handle_message(self, payload: Any) -> None:
        session_id = self.state_machine.session_id
        try:
            message = VoiceMessage.model_validate(payload)
        except ValidationError:
            logger.debug(f"[{session_id}] Ignoring malformed message: {payload!r}")
            return

        logger.debug(f"[{session_id}] Message: {message.type}/{message.transcript_type}")
        if not message.is_final_transcript:
            return

        try:
            entry = TranscriptEntry(role=message.role, content=message.transcript)
        except ValidationError:
            logger.warning(
                f"[{session_id}] Ignoring transcript with unexpected shape - "
                f"role: {message.role!r}"
            )
            return
        self.store.prepend(entry)
