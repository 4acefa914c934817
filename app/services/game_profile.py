import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.models import GameProfile, User
from app.services.wallet import find_profile, get_profile
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_LIMIT = 10
MAX_LEADERBOARD_LIMIT = 100


def create_profile(db: Session, user: User) -> GameProfile:
    if find_profile(db, user.id):
        raise ConflictError("Game profile already exists")

    profile = GameProfile(user_id=user.id, level=1, xp=0, is_active=True, stats={}, settings={})
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Game profile already exists")
    db.refresh(profile)
    logger.info("Created game profile %s for user %s", profile.id, user.id)
    return profile


def update_settings(db: Session, user_id: int, settings: dict | None) -> GameProfile:
    # Only the settings bag is client-editable; progression moves through add_xp.
    profile = get_profile(db, user_id)
    if settings is not None:
        profile.settings = dict(settings)
    db.commit()
    db.refresh(profile)
    return profile


def _lock_profile(db: Session, user_id: int) -> GameProfile:
    profile = (
        db.query(GameProfile)
        .filter(GameProfile.user_id == user_id, GameProfile.not_deleted())
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not profile:
        raise NotFoundError("Game profile not found")
    return profile


def grant_xp(db: Session, user_id: int, amount: int, reason: str | None = None) -> dict:
    if amount <= 0:
        raise InvalidArgumentError("XP amount must be greater than zero")

    profile = _lock_profile(db, user_id)
    old_level = profile.level
    old_xp = profile.xp
    leveled_up = profile.add_xp(amount)
    db.commit()
    db.refresh(profile)

    if leveled_up:
        logger.info("Profile %s leveled up %s -> %s", profile.id, old_level, profile.level)

    result = {
        "old_level": old_level,
        "new_level": profile.level,
        "old_xp": old_xp,
        "new_xp": profile.xp,
        "xp_added": amount,
        "level_up": leveled_up,
        "next_level_xp": profile.xp_for_next_level(),
        "progress": profile.xp_progress(),
    }
    if reason:
        result["reason"] = reason
    return result


def profile_stats(profile: GameProfile) -> dict:
    return {
        "level": profile.level,
        "xp": profile.xp,
        "next_level_xp": profile.xp_for_next_level(),
        "progress": profile.xp_progress(),
        "is_active": profile.is_active,
        "last_login": profile.last_login,
        "custom_stats": dict(profile.stats or {}),
    }


def record_login(db: Session, user_id: int) -> GameProfile:
    profile = get_profile(db, user_id)
    profile.last_login = utcnow()
    db.commit()
    db.refresh(profile)
    return profile


def leaderboard(db: Session, limit: int | None = DEFAULT_LEADERBOARD_LIMIT) -> list[dict]:
    if limit is None or limit < 1 or limit > MAX_LEADERBOARD_LIMIT:
        limit = DEFAULT_LEADERBOARD_LIMIT

    rows = (
        db.query(GameProfile, User)
        .join(User, User.id == GameProfile.user_id)
        .filter(GameProfile.is_active.is_(True), GameProfile.not_deleted(), User.not_deleted())
        .order_by(GameProfile.level.desc(), GameProfile.xp.desc(), GameProfile.id.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "rank": index,
            "user_id": profile.user_id,
            "username": user.username,
            "level": profile.level,
            "xp": profile.xp,
        }
        for index, (profile, user) in enumerate(rows, start=1)
    ]
