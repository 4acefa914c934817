from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import generate_api_key
from app.dependencies import get_current_user
from app.models import APIKey, User
from app.schemas.api_key import APIKeyCreate, APIKeyCreated, APIKeyOut, APIKeyUpdate
from app.utils.timeutils import as_utc, utcnow

settings = get_settings()
router = APIRouter()


def _get_owned_key(db: Session, user: User, key_id: int) -> APIKey:
    api_key = (
        db.query(APIKey)
        .filter(APIKey.id == key_id, APIKey.user_id == user.id, APIKey.not_deleted())
        .first()
    )
    if not api_key:
        raise HTTPException(status_code=404, detail="API key not found")
    return api_key


def _check_expiry(value):
    if value is not None and as_utc(value) <= utcnow():
        raise HTTPException(status_code=400, detail="expires_at must be in the future")
    return value


@router.post("", response_model=APIKeyCreated, status_code=status.HTTP_201_CREATED)
def create_api_key(payload: APIKeyCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    expires_at = _check_expiry(payload.expires_at) or utcnow() + timedelta(days=settings.api_key_default_ttl_days)
    api_key = APIKey(
        name=payload.name.strip(),
        key=generate_api_key(),
        user_id=user.id,
        expires_at=expires_at,
        rate_limit=payload.rate_limit or settings.api_key_default_rate_limit,
        is_active=True,
    )
    db.add(api_key)
    db.commit()
    db.refresh(api_key)
    return api_key


@router.get("", response_model=list[APIKeyOut])
def list_api_keys(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(APIKey)
        .filter(APIKey.user_id == user.id, APIKey.not_deleted())
        .order_by(APIKey.id.asc())
        .all()
    )


@router.put("/{key_id}", response_model=APIKeyOut)
def update_api_key(
    key_id: int,
    payload: APIKeyUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    api_key = _get_owned_key(db, user, key_id)
    if payload.name is not None:
        api_key.name = payload.name.strip()
    if payload.expires_at is not None:
        api_key.expires_at = _check_expiry(payload.expires_at)
    if payload.rate_limit is not None:
        api_key.rate_limit = payload.rate_limit
    if payload.is_active is not None:
        api_key.is_active = payload.is_active
    db.commit()
    db.refresh(api_key)
    return api_key


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api_key(key_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    api_key = _get_owned_key(db, user, key_id)
    api_key.soft_delete()
    api_key.is_active = False
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
