from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models import User
from app.schemas.user import UpdateUserRequest, UserOut

router = APIRouter()


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id, User.not_deleted()).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _apply_update(db: Session, user: User, payload: UpdateUserRequest) -> User:
    if payload.email != user.email:
        taken = db.query(User).filter(User.email == payload.email, User.id != user.id).first()
        if taken:
            raise HTTPException(status_code=409, detail="Email already registered")

    user.display_name = payload.display_name
    user.email = payload.email
    db.commit()
    db.refresh(user)
    return user


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserOut)
def update_me(payload: UpdateUserRequest, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return _apply_update(db, user, payload)


@router.get("", response_model=list[UserOut])
def list_users(admin: User = Depends(require_admin), db: Session = Depends(get_db), limit: int = 100, offset: int = 0):
    if limit < 1 or limit > 500:
        raise HTTPException(status_code=400, detail="limit must be between 1 and 500")
    return (
        db.query(User)
        .filter(User.not_deleted())
        .order_by(User.id.asc())
        .offset(max(0, offset))
        .limit(limit)
        .all()
    )


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, current: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _get_user(db, user_id)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    payload: UpdateUserRequest,
    current: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if current.id != user_id and not current.is_admin:
        raise HTTPException(status_code=403, detail="Not allowed to update this user")
    return _apply_update(db, _get_user(db, user_id), payload)
