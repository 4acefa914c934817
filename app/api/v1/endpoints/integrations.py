from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_rate_limiter, require_api_key
from app.middlewares.rate_limit import SlidingWindowRateLimiter
from app.models import APIKey, User

router = APIRouter()


@router.get("/me")
def whoami(
    api_key: APIKey = Depends(require_api_key),
    rate_limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == api_key.user_id, User.not_deleted()).first()
    return {
        "user_id": api_key.user_id,
        "username": user.username if user else None,
        "api_key": {"id": api_key.id, "name": api_key.name, "rate_limit": api_key.rate_limit},
        "rate_limit_remaining": rate_limiter.remaining(api_key.key, api_key.rate_limit),
    }
