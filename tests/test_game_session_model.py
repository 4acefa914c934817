from datetime import timedelta

from app.models import GameSession, SessionStatus
from app.utils.timeutils import utcnow


def _session(idle_minutes: float = 0, started_minutes_ago: float = 0, status: str = "active") -> GameSession:
    now = utcnow()
    return GameSession(
        game_profile_id=1,
        status=status,
        started_at=now - timedelta(minutes=started_minutes_ago),
        last_activity=now - timedelta(minutes=idle_minutes),
        is_valid=True,
        invalid_reason="",
        actions_count=0,
        duration=0,
        session_data={},
    )


def test_fresh_session_is_active_and_online():
    session = _session()

    assert session.is_active()
    assert not session.is_expired()
    assert session.can_perform_action()
    assert session.activity_status() == "online"


def test_activity_status_bands():
    assert _session(idle_minutes=3).activity_status() == "online"
    assert _session(idle_minutes=10).activity_status() == "away"
    assert _session(idle_minutes=20).activity_status() == "idle"


def test_expired_after_thirty_idle_minutes():
    session = _session(idle_minutes=31)

    assert session.is_expired()
    assert not session.can_perform_action()
    assert not session.is_expired(timedelta(hours=1))


def test_update_activity_counts_actions():
    session = _session(idle_minutes=10)

    session.update_activity()
    session.update_activity()

    assert session.actions_count == 2
    assert session.activity_status() == "online"


def test_end_records_duration():
    session = _session(started_minutes_ago=45)

    session.end()

    assert session.status == SessionStatus.INACTIVE
    assert session.ended_at is not None
    assert session.duration >= 45 * 60
    assert session.duration_minutes() == 45
    assert session.activity_status() == "offline"
    assert session.is_expired()


def test_terminate_invalidates_session():
    session = _session()

    session.terminate("duplicate login")

    assert session.status == SessionStatus.TERMINATED
    assert session.is_valid is False
    assert session.invalid_reason == "duplicate login"
    assert not session.can_perform_action()


def test_expire_marks_status():
    session = _session(idle_minutes=40)

    session.expire()

    assert session.status == SessionStatus.EXPIRED
    assert not session.is_active()


def test_session_data_bag():
    session = _session()

    session.set_session_data("map", "forest")
    assert session.get_session_data("map") == "forest"
    assert session.get_session_data("missing") is None
