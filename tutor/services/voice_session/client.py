"""Voice client protocol and the browser relay implementation."""
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol

from tutor.services.voice_session.models import ClientCommand

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class VoiceClient(Protocol):
    """Protocol for the external voice-call client."""

    def start(self, assistant: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """Request a call with the given assistant configuration."""
        ...

    def stop(self) -> None:
        """Request the current call to end."""
        ...

    def is_muted(self) -> bool:
        """Whether the microphone is muted."""
        ...

    def set_muted(self, muted: bool) -> None:
        """Mute or unmute the microphone."""
        ...

    def on(self, event: str, handler: EventHandler) -> None:
        """Subscribe handler to an event."""
        ...

    def off(self, event: str, handler: EventHandler) -> None:
        """Unsubscribe handler from an event."""
        ...


class RelayVoiceClient:
    """
    Voice client whose transport runs in the browser.

    The browser drives the real voice SDK. Commands issued here are queued
    until the browser collects them, and the SDK events the browser posts
    back are emitted to subscribers in arrival order.
    """

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._commands: List[ClientCommand] = []
        self._muted = False

    def start(self, assistant: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        self._commands.append(
            ClientCommand(action="start", assistant=assistant, overrides=overrides)
        )

    def stop(self) -> None:
        self._commands.append(ClientCommand(action="stop"))

    def is_muted(self) -> bool:
        return self._muted

    def set_muted(self, muted: bool) -> None:
        self._muted = muted
        self._commands.append(ClientCommand(action="set_muted", muted=muted))

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Optional[Any] = None) -> int:
        """
        Deliver an event to its subscribers.

        Returns:
            Number of handlers invoked
        """
        handlers = list(self._handlers.get(event, []))
        if not handlers:
            logger.debug(f"[VOICE CLIENT] No subscribers for event '{event}'")
        for handler in handlers:
            handler(payload)
        return len(handlers)

    def subscriber_count(self, event: Optional[str] = None) -> int:
        """Count subscribed handlers, for one event or all of them."""
        if event is not None:
            return len(self._handlers.get(event, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def drain_commands(self) -> List[ClientCommand]:
        """Return queued commands and clear the queue."""
        commands, self._commands = self._commands, []
        return commands
