from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_current_user
from app.models import GameSession, User
from app.schemas.session import GameSessionOut, HeartbeatRequest, StartSessionRequest
from app.services import game_sessions

router = APIRouter()


def _session_out(session: GameSession) -> GameSessionOut:
    out = GameSessionOut.model_validate(session)
    out.activity_status = session.activity_status()
    return out


@router.post("", response_model=GameSessionOut, status_code=status.HTTP_201_CREATED)
def start_session(
    request: Request,
    payload: StartSessionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    session = game_sessions.start_session(
        db,
        user.id,
        ip_address=request.client.host if request.client else "",
        user_agent=request.headers.get("user-agent", ""),
        platform=payload.platform,
    )
    return _session_out(session)


@router.get("/active", response_model=list[GameSessionOut])
def list_active_sessions(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_session_out(session) for session in game_sessions.list_active_sessions(db, user.id)]


@router.post("/{session_id}/heartbeat", response_model=GameSessionOut)
def heartbeat(
    session_id: int,
    payload: HeartbeatRequest | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = payload.session_data if payload else None
    return _session_out(game_sessions.heartbeat(db, user.id, session_id, data))


@router.post("/{session_id}/end", response_model=GameSessionOut)
def end_session(session_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _session_out(game_sessions.end_session(db, user.id, session_id))
