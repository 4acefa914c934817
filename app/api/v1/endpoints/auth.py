from datetime import timedelta
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from jose import JWTError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.security import create_access_token, create_refresh_token, decode_token, hash_password, verify_password
from app.dependencies import get_current_user
from app.middlewares.rate_limit import limiter
from app.models import RefreshToken, User, UserRole
from app.schemas.auth import ChangePasswordRequest, LoginRequest, Message, RefreshRequest, RegisterRequest, TokenPair
from app.schemas.user import UserOut
from app.utils.timeutils import utcnow

settings = get_settings()
router = APIRouter()
logger = logging.getLogger(__name__)


def _issue_tokens(db: Session, user: User) -> TokenPair:
    refresh_token = create_refresh_token(str(user.id), user.role)
    db.add(
        RefreshToken(
            token=refresh_token,
            user_id=user.id,
            expires_at=utcnow() + timedelta(days=settings.refresh_token_expire_days),
        )
    )
    db.commit()
    return TokenPair(
        access_token=create_access_token(str(user.id), user.role),
        refresh_token=refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
def register(request: Request, payload: RegisterRequest, db: Session = Depends(get_db)):
    existing = (
        db.query(User)
        .filter(or_(User.username == payload.username, User.email == payload.email))
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="Username or email already registered")

    user = User(
        username=payload.username,
        display_name=payload.display_name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=UserRole.USER.value,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


@router.post("/login", response_model=TokenPair)
@limiter.limit(settings.auth_rate_limit)
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == payload.username, User.not_deleted()).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User is inactive")

    return _issue_tokens(db, user)


@router.post("/refresh", response_model=TokenPair)
@limiter.limit("30/minute")
def refresh(request: Request, payload: RefreshRequest, db: Session = Depends(get_db)):
    try:
        decoded = decode_token(payload.refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if decoded.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    stored = db.query(RefreshToken).filter(RefreshToken.token == payload.refresh_token).first()
    if not stored or not stored.is_usable():
        raise HTTPException(status_code=401, detail="Refresh token revoked or expired")

    user = db.query(User).filter(User.id == stored.user_id, User.not_deleted()).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    # The refresh token stays valid until it expires or is revoked by logout.
    return TokenPair(
        access_token=create_access_token(str(user.id), user.role),
        refresh_token=payload.refresh_token,
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post("/logout", response_model=Message)
def logout(payload: RefreshRequest, db: Session = Depends(get_db)):
    stored = db.query(RefreshToken).filter(RefreshToken.token == payload.refresh_token).first()
    if not stored:
        raise HTTPException(status_code=404, detail="Refresh token not found")

    stored.revoke()
    db.commit()
    return Message(message="Logged out")


@router.post("/change-password", response_model=Message)
@limiter.limit("5/minute")
def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    if not verify_password(payload.current_password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.hashed_password = hash_password(payload.new_password)
    # Sign out every other device.
    db.query(RefreshToken).filter(
        RefreshToken.user_id == user.id,
        RefreshToken.is_revoked.is_(False),
    ).update({RefreshToken.is_revoked: True}, synchronize_session=False)
    db.commit()
    return Message(message="Password updated successfully")
