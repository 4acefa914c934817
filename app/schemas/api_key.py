from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class APIKeyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    expires_at: Optional[datetime] = None
    rate_limit: Optional[int] = Field(default=None, ge=1, le=10000)


class APIKeyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    expires_at: Optional[datetime] = None
    rate_limit: Optional[int] = Field(default=None, ge=1, le=10000)
    is_active: Optional[bool] = None


class APIKeyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    user_id: int
    expires_at: datetime
    last_used_at: Optional[datetime] = None
    rate_limit: int
    is_active: bool
    created_at: Optional[datetime] = None


class APIKeyCreated(APIKeyOut):
    # Only returned once, at creation.
    key: str
