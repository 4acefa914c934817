from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator

from app.models.user import UserRole
from app.schemas.auth import validate_display_name


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: str
    email: EmailStr
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None


class UpdateUserRequest(BaseModel):
    display_name: str
    email: EmailStr

    check_display_name = field_validator("display_name")(validate_display_name)
