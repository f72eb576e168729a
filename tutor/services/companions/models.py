"""Companion input models."""
from pydantic import BaseModel, Field, field_validator

from tutor.services.companions.constants import (
    SUBJECTS,
    STYLES,
    VOICES,
    DEFAULT_DURATION_MINUTES,
)


class CompanionCreate(BaseModel):
    """Fields required to build a new companion."""

    name: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    voice: str = Field(min_length=1)
    style: str = Field(min_length=1)
    duration: int = Field(default=DEFAULT_DURATION_MINUTES, ge=1)

    @field_validator("name", "topic")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("subject")
    @classmethod
    def known_subject(cls, value: str) -> str:
        value = value.lower().strip()
        if value not in SUBJECTS:
            raise ValueError(f"unknown subject '{value}', expected one of {SUBJECTS}")
        return value

    @field_validator("voice")
    @classmethod
    def known_voice(cls, value: str) -> str:
        value = value.lower().strip()
        if value not in VOICES:
            raise ValueError(f"unknown voice '{value}', expected one of {list(VOICES)}")
        return value

    @field_validator("style")
    @classmethod
    def known_style(cls, value: str) -> str:
        value = value.lower().strip()
        if value not in STYLES:
            raise ValueError(f"unknown style '{value}', expected one of {STYLES}")
        return value
