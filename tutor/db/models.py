"""Database models."""
import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Companion(Base):
    """Tutoring companion persona."""

    __tablename__ = "companions"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    subject = Column(String, index=True, nullable=False)
    topic = Column(Text, nullable=False)
    voice = Column(String, nullable=False)  # male, female
    style = Column(String, nullable=False)  # formal, casual
    duration = Column(Integer, default=15, nullable=False)  # minutes
    author = Column(String, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    sessions = relationship("SessionHistory", back_populates="companion")


class SessionHistory(Base):
    """One completed voice session with a companion."""

    __tablename__ = "session_history"

    id = Column(Integer, primary_key=True, index=True)
    companion_id = Column(String(36), ForeignKey("companions.id"), nullable=False)
    user_id = Column(String, index=True, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    companion = relationship("Companion", back_populates="sessions")
