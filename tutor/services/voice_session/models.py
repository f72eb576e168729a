"""Voice session models."""
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CallStatus(str, Enum):
    """Lifecycle of one voice session."""

    IDLE = "idle"  # Before the user starts the session
    CONNECTING = "connecting"  # Start requested, waiting for the client
    ACTIVE = "active"  # Client reported the call started
    FINISHED = "finished"  # Call ended or user disconnected

    def __str__(self) -> str:
        """Return the string value of the status."""
        return self.value


class Speaker(str, Enum):
    """Who said a transcript line."""

    ASSISTANT = "assistant"
    USER = "user"

    def __str__(self) -> str:
        return self.value


class VoiceEvent(str, Enum):
    """Event names emitted by the voice client."""

    CALL_START = "call-start"
    CALL_END = "call-end"
    MESSAGE = "message"
    ERROR = "error"
    SPEECH_START = "speech-start"
    SPEECH_END = "speech-end"

    def __str__(self) -> str:
        return self.value


class TranscriptEntry(BaseModel):
    """One finalized utterance."""

    model_config = ConfigDict(frozen=True)

    role: Speaker
    content: str


class SessionParameters(BaseModel):
    """Everything needed to start a session with a companion."""

    model_config = ConfigDict(frozen=True)

    companion_id: str
    subject: str
    topic: str
    name: str
    style: str
    voice: str
    user_name: Optional[str] = None
    user_image: Optional[str] = None


class VoiceMessage(BaseModel):
    """Payload of a "message" event. Only transcript messages are used."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    transcript_type: Optional[str] = Field(default=None, alias="transcriptType")
    role: Optional[str] = None
    transcript: Optional[str] = None

    @property
    def is_final_transcript(self) -> bool:
        return self.type == "transcript" and self.transcript_type == "final"


class SessionSnapshot(BaseModel):
    """Read-only view of a session for rendering."""

    session_id: str
    status: CallStatus
    status_history: List[CallStatus] = []
    is_speaking: bool = False
    is_muted: bool = False
    companion_id: Optional[str] = None
    transcript: List[TranscriptEntry] = []
    lines: List[str] = []  # Transcript with speaker labels, newest first


class ClientCommand(BaseModel):
    """A command queued for the browser-side voice client."""

    action: str  # start, stop, set_muted
    assistant: Optional[Dict[str, Any]] = None
    overrides: Optional[Dict[str, Any]] = None
    muted: Optional[bool] = None
