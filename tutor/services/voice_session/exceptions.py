"""Voice session exceptions."""

from tutor.services.voice_session.models import CallStatus


class VoiceSessionError(Exception):
    """Base exception for voice session errors."""


class SessionStateError(VoiceSessionError):
    """Operation not allowed in the session's current status."""

    def __init__(self, operation: str, status: CallStatus):
        self.operation = operation
        self.status = status
        super().__init__(f"Cannot {operation} a session that is {status.value}")


class SessionNotFoundError(VoiceSessionError):
    """No live session with the given id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Voice session {session_id} not found")


class SessionAccessError(VoiceSessionError):
    """The session belongs to another user."""

    def __init__(self, session_id: str, user_id: str):
        self.session_id = session_id
        self.user_id = user_id
        super().__init__(f"Voice session {session_id} belongs to another user")
