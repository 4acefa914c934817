from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class GameProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    level: int
    xp: int
    is_active: bool
    last_login: Optional[datetime] = None
    stats: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GameProfileUpdate(BaseModel):
    settings: Optional[dict[str, Any]] = None


class AddXPRequest(BaseModel):
    amount: int = Field(..., ge=1)
    reason: Optional[str] = Field(default=None, max_length=255)


class AddXPResponse(BaseModel):
    old_level: int
    new_level: int
    old_xp: int
    new_xp: int
    xp_added: int
    level_up: bool
    next_level_xp: int
    progress: float
    reason: Optional[str] = None


class ProfileStatsOut(BaseModel):
    level: int
    xp: int
    next_level_xp: int
    progress: float
    is_active: bool
    last_login: Optional[datetime] = None
    custom_stats: dict[str, Any] = Field(default_factory=dict)


class LastLoginOut(BaseModel):
    message: str
    last_login: datetime


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    username: str
    level: int
    xp: int


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntry]
    total: int
