"""Transcript store for one session."""
from collections import deque
from typing import Deque, List

from tutor.services.voice_session.models import TranscriptEntry


class SessionStore:
    """Finalized transcript entries, newest first."""

    def __init__(self):
        self._entries: Deque[TranscriptEntry] = deque()

    def prepend(self, entry: TranscriptEntry) -> None:
        self._entries.appendleft(entry)

    @property
    def entries(self) -> List[TranscriptEntry]:
        return list(self._entries)

    @property
    def latest(self):
        return self._entries[0] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
