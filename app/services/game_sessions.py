import logging
from datetime import timedelta

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.errors import ConflictError, NotFoundError
from app.models import GameSession, SessionStatus
from app.services.wallet import get_profile

settings = get_settings()
logger = logging.getLogger(__name__)


def _idle_timeout() -> timedelta:
    return timedelta(minutes=settings.session_idle_minutes)


def _active_sessions(db: Session, game_profile_id: int) -> list[GameSession]:
    return (
        db.query(GameSession)
        .filter(
            GameSession.game_profile_id == game_profile_id,
            GameSession.status == SessionStatus.ACTIVE.value,
            GameSession.not_deleted(),
        )
        .order_by(GameSession.started_at.desc(), GameSession.id.desc())
        .all()
    )


def start_session(
    db: Session,
    user_id: int,
    ip_address: str = "",
    user_agent: str = "",
    platform: str = "",
) -> GameSession:
    """Open a session for the user's profile, ending any session still marked active."""
    profile = get_profile(db, user_id)
    for previous in _active_sessions(db, profile.id):
        previous.end()

    session = GameSession(
        game_profile_id=profile.id,
        status=SessionStatus.ACTIVE.value,
        ip_address=(ip_address or "")[:64],
        user_agent=(user_agent or "")[:255],
        platform=(platform or "")[:32],
        session_data={},
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info("Started game session %s for profile %s", session.id, profile.id)
    return session


def list_active_sessions(db: Session, user_id: int) -> list[GameSession]:
    profile = get_profile(db, user_id)
    idle_timeout = _idle_timeout()
    sessions = _active_sessions(db, profile.id)

    live = []
    expired = 0
    for session in sessions:
        if session.is_expired(idle_timeout):
            session.expire()
            expired += 1
        else:
            live.append(session)
    if expired:
        db.commit()
        logger.info("Expired %s idle session(s) for profile %s", expired, profile.id)
    return live


def get_session(db: Session, user_id: int, session_id: int) -> GameSession:
    profile = get_profile(db, user_id)
    session = (
        db.query(GameSession)
        .filter(
            GameSession.id == session_id,
            GameSession.game_profile_id == profile.id,
            GameSession.not_deleted(),
        )
        .first()
    )
    if not session:
        raise NotFoundError("Game session not found")
    return session


def heartbeat(db: Session, user_id: int, session_id: int, data: dict | None = None) -> GameSession:
    session = get_session(db, user_id, session_id)
    idle_timeout = _idle_timeout()
    if not session.can_perform_action(idle_timeout):
        if session.is_active() and session.is_expired(idle_timeout):
            session.expire()
            db.commit()
        raise ConflictError("Game session is no longer active", status=session.status)

    session.update_activity()
    for key, value in (data or {}).items():
        session.set_session_data(key, value)
    db.commit()
    db.refresh(session)
    return session


def end_session(db: Session, user_id: int, session_id: int) -> GameSession:
    session = get_session(db, user_id, session_id)
    if not session.is_active():
        raise ConflictError("Game session is not active", status=session.status)
    session.end()
    db.commit()
    db.refresh(session)
    logger.info("Ended game session %s after %s minute(s)", session.id, session.duration_minutes())
    return session
