"""Call lifecycle state machine."""
import logging
from typing import Dict, List, Set

from tutor.services.voice_session.models import CallStatus

logger = logging.getLogger(__name__)


class CallStateMachine:
    """
    Tracks the status of one voice session.

    Transitions only move forward: idle -> connecting -> active -> finished.
    The one shortcut is connecting -> finished, taken when the client ends a
    call that never started (failed connect). Finished is terminal.
    """

    _TRANSITIONS: Dict[CallStatus, Set[CallStatus]] = {
        CallStatus.IDLE: {CallStatus.CONNECTING},
        # finished here means the connect was aborted
        CallStatus.CONNECTING: {CallStatus.ACTIVE, CallStatus.FINISHED},
        CallStatus.ACTIVE: {CallStatus.FINISHED},
        CallStatus.FINISHED: set(),
    }

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.status = CallStatus.IDLE
        self.history: List[CallStatus] = []  # Statuses entered, in order
        self.was_active = False

    def can_transition(self, new_status: CallStatus) -> bool:
        return new_status in self._TRANSITIONS[self.status]

    def transition_to(self, new_status: CallStatus) -> bool:
        """
        Move to a new status.

        Returns:
            True if the transition happened, False if it was rejected
        """
        if not self.can_transition(new_status):
            logger.warning(
                f"[{self.session_id}] Invalid transition: "
                f"{self.status.value} -> {new_status.value}"
            )
            return False

        old_status = self.status
        self.status = new_status
        self.history.append(new_status)
        if new_status == CallStatus.ACTIVE:
            self.was_active = True

        logger.info(
            f"[{self.session_id}] State transition: "
            f"{old_status.value} -> {new_status.value}"
        )
        return True

    @property
    def is_finished(self) -> bool:
        return self.status == CallStatus.FINISHED
