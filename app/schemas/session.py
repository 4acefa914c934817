from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class StartSessionRequest(BaseModel):
    platform: str = Field(default="", max_length=32)


class HeartbeatRequest(BaseModel):
    session_data: Optional[dict[str, Any]] = None


class GameSessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    game_profile_id: int
    status: str
    started_at: datetime
    last_activity: datetime
    ended_at: Optional[datetime] = None
    ip_address: str
    user_agent: str
    platform: str
    duration: int
    actions_count: int
    session_data: dict[str, Any] = Field(default_factory=dict)
    is_valid: bool
    invalid_reason: str
    activity_status: Optional[str] = None
