"""Constants for companion personas."""

SUBJECTS = [
    "maths",
    "language",
    "science",
    "history",
    "coding",
    "economics",
]

SUBJECT_COLORS = {
    "science": "#E5D0FF",
    "maths": "#FFDA6E",
    "language": "#BDE7FF",
    "coding": "#FFC8E4",
    "history": "#FFECC8",
    "economics": "#C8FFDF",
}

DEFAULT_SUBJECT_COLOR = "#E5E5E5"

# ElevenLabs voice ids by voice and conversation style
VOICES = {
    "male": {"casual": "2BJW5coyhAzSr8STdHbE", "formal": "c6SfcYrb2t09NHXiT80T"},
    "female": {"casual": "ZIlrSGI4jZqobxRKprJz", "formal": "sarah"},
}

DEFAULT_VOICE_ID = "sarah"

STYLES = ["formal", "casual"]

DEFAULT_DURATION_MINUTES = 15


def get_subject_color(subject: str) -> str:
    """Get the display color for a subject."""
    return SUBJECT_COLORS.get(subject.lower().strip(), DEFAULT_SUBJECT_COLOR)
