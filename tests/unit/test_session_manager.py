"""Unit tests for the live voice session registry."""
import pytest
from unittest.mock import AsyncMock

from tutor.services.voice_session import manager
from tutor.services.voice_session.client import RelayVoiceClient
from tutor.services.voice_session.exceptions import SessionAccessError, SessionNotFoundError
from tutor.services.voice_session.manager import VoiceSessionManager, close_all_sessions
from tutor.services.voice_session.models import CallStatus


@pytest.fixture
def recorder():
    return AsyncMock()


@pytest.fixture
async def session_manager(recorder):
    """Manager recording through a mock; registry emptied afterwards."""
    yield VoiceSessionManager(
        client_factory=RelayVoiceClient,
        recorder_factory=lambda user_id: recorder,
    )
    for controller in manager._sessions.values():
        controller.close()
    manager._sessions.clear()


class TestRelayEvent:
    """Test relaying events through the registry."""

    async def test_call_end_releases_session(self, session_manager, session_parameters, recorder):
        controller = await session_manager.create_session(session_parameters, user_id="u1")
        session_id = controller.session_id
        await session_manager.relay_event(session_id, "call-start", user_id="u1")

        snapshot = await session_manager.relay_event(session_id, "call-end", user_id="u1")

        assert snapshot.status == CallStatus.FINISHED
        assert session_id not in manager._sessions
        assert manager.live_session_count() == 0
        assert controller.client.subscriber_count() == 0
        recorder.assert_awaited_once_with("companion-1")
        with pytest.raises(SessionNotFoundError):
            await session_manager.get_session(session_id, user_id="u1")

    async def test_other_events_keep_session(self, session_manager, session_parameters):
        controller = await session_manager.create_session(session_parameters, user_id="u1")

        snapshot = await session_manager.relay_event(
            controller.session_id, "call-start", user_id="u1"
        )

        assert snapshot.status == CallStatus.ACTIVE
        assert controller.session_id in manager._sessions

    async def test_aborted_connect_releases_session(
        self, session_manager, session_parameters, recorder
    ):
        controller = await session_manager.create_session(session_parameters, user_id="u1")

        snapshot = await session_manager.relay_event(
            controller.session_id, "call-end", user_id="u1"
        )

        assert snapshot.status == CallStatus.FINISHED
        assert controller.session_id not in manager._sessions
        recorder.assert_not_awaited()


class TestOwnership:
    """Test that sessions are only reachable by their owner."""

    async def test_owner_is_stored(self, session_manager, session_parameters):
        controller = await session_manager.create_session(session_parameters, user_id="u1")

        assert controller.user_id == "u1"
        assert await session_manager.get_session(controller.session_id, user_id="u1") is controller

    async def test_other_user_is_rejected(self, session_manager, session_parameters):
        controller = await session_manager.create_session(session_parameters, user_id="u1")
        session_id = controller.session_id

        with pytest.raises(SessionAccessError):
            await session_manager.get_session(session_id, user_id="u2")
        with pytest.raises(SessionAccessError):
            await session_manager.relay_event(session_id, "call-start", user_id="u2")
        with pytest.raises(SessionAccessError):
            await session_manager.end_session(session_id)

        assert controller.status == CallStatus.CONNECTING
        assert session_id in manager._sessions

    async def test_session_without_owner_is_open(self, session_manager, session_parameters):
        controller = await session_manager.create_session(session_parameters)

        assert await session_manager.get_session(controller.session_id, user_id="u2") is controller


class TestCloseAllSessions:
    """Test teardown at application shutdown."""

    async def test_pending_call_end_is_recorded(
        self, session_manager, session_parameters, recorder
    ):
        controller = await session_manager.create_session(session_parameters, user_id="u1")
        # Delivered but not yet applied
        controller.client.emit("call-start")
        controller.client.emit("call-end")

        await close_all_sessions()

        recorder.assert_awaited_once_with("companion-1")
        assert controller.status == CallStatus.FINISHED
        assert manager._sessions == {}
        assert controller.client.subscriber_count() == 0
