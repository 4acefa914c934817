from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.game_profile import (
    AddXPRequest,
    AddXPResponse,
    GameProfileOut,
    GameProfileUpdate,
    LastLoginOut,
    LeaderboardResponse,
    ProfileStatsOut,
)
from app.services import game_profile as profiles
from app.services.wallet import get_profile
from app.utils.params import parse_int

router = APIRouter()


@router.post("/game-profile", response_model=GameProfileOut, status_code=status.HTTP_201_CREATED)
def create_game_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profiles.create_profile(db, user)


@router.get("/game-profile", response_model=GameProfileOut)
def get_game_profile(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_profile(db, user.id)


@router.put("/game-profile", response_model=GameProfileOut)
def update_game_profile(payload: GameProfileUpdate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profiles.update_settings(db, user.id, payload.settings)


@router.post("/game-profile/xp", response_model=AddXPResponse)
def add_xp(payload: AddXPRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profiles.grant_xp(db, user.id, payload.amount, payload.reason)


@router.get("/game-profile/stats", response_model=ProfileStatsOut)
def get_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return profiles.profile_stats(get_profile(db, user.id))


@router.put("/game-profile/last-login", response_model=LastLoginOut)
def update_last_login(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = profiles.record_login(db, user.id)
    return {"message": "Last login updated", "last_login": profile.last_login}


@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(limit: Optional[str] = None, db: Session = Depends(get_db)):
    entries = profiles.leaderboard(db, parse_int(limit, profiles.DEFAULT_LEADERBOARD_LIMIT))
    return {"leaderboard": entries, "total": len(entries)}
