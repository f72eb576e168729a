"""Assistant configuration sent to the voice client."""
from typing import Any, Dict, Optional
from tutor.core.config import settings
from tutor.services.companions.constants import VOICES, DEFAULT_VOICE_ID
from tutor.services.voice_session.models import SessionParameters


FIRST_MESSAGE = (
    "Hello, let's start the session. Today we'll be talking about {{topic}}."
)


def get_system_prompt() -> str:
    """Generate the tutor system prompt.

    The {{ }} placeholders are filled by the voice client from the
    variable values sent with the start request.
    """
    return """You are a highly knowledgeable tutor teaching a real-time voice session with a student. Your goal is to teach the student about the topic and subject.

Tutor Guidelines:
- Stick to the given topic - {{ topic }} and subject - {{ subject }} and teach the student about it.
- Keep the conversation flowing smoothly while maintaining control.
- From time to time make sure that the student is following you and understands you.
- Break down the topic into smaller parts and teach the student one part at a time.
- Keep your style of conversation {{ style }}.
- Keep your responses short, like in a real voice conversation.
- Do not include any special characters in your response - this is a voice conversation.
"""


def get_voice_id(voice: Optional[str], style: Optional[str]) -> str:
    """Pick the voice id for a voice and style, falling back to the default."""
    styles = VOICES.get((voice or "").lower(), {})
    return styles.get((style or "").lower(), DEFAULT_VOICE_ID)


def configure_assistant(voice: Optional[str], style: Optional[str]) -> Dict[str, Any]:
    """Build the assistant configuration for a companion's voice and style."""
    return {
        "name": "Companion",
        "firstMessage": FIRST_MESSAGE,
        "transcriber": {
            "provider": "deepgram",
            "model": settings.transcriber_model,
            "language": "en",
        },
        "voice": {
            "provider": "11labs",
            "voiceId": get_voice_id(voice, style),
            "stability": 0.4,
            "similarityBoost": 0.8,
            "speed": 1,
            "style": 0.5,
            "useSpeakerBoost": True,
        },
        "model": {
            "provider": "openai",
            "model": settings.assistant_model,
            "messages": [
                {"role": "system", "content": get_system_prompt()},
            ],
        },
        "clientMessages": [],
        "serverMessages": [],
    }


def build_assistant_overrides(parameters: SessionParameters) -> Dict[str, Any]:
    """Variable bindings and message subscriptions for a session start."""
    return {
        "variableValues": {
            "subject": parameters.subject,
            "topic": parameters.topic,
            "style": parameters.style,
        },
        # Only final transcripts are consumed; server messages are not needed
        "clientMessages": ["transcript"],
        "serverMessages": [],
    }
