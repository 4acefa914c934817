import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError
from app.models import GameProfile, Wallet

logger = logging.getLogger(__name__)


def find_profile(db: Session, user_id: int) -> GameProfile | None:
    return (
        db.query(GameProfile)
        .filter(GameProfile.user_id == user_id, GameProfile.not_deleted())
        .first()
    )


def get_profile(db: Session, user_id: int) -> GameProfile:
    profile = find_profile(db, user_id)
    if not profile:
        raise NotFoundError("Game profile not found")
    return profile


def find_wallet(db: Session, game_profile_id: int) -> Wallet | None:
    return (
        db.query(Wallet)
        .filter(Wallet.game_profile_id == game_profile_id, Wallet.not_deleted())
        .first()
    )


def find_wallet_for_user(db: Session, user_id: int) -> Wallet | None:
    profile = find_profile(db, user_id)
    if not profile:
        return None
    return find_wallet(db, profile.id)


def get_wallet_for_user(db: Session, user_id: int) -> Wallet:
    # Always User -> GameProfile -> Wallet.
    profile = get_profile(db, user_id)
    wallet = find_wallet(db, profile.id)
    if not wallet:
        raise NotFoundError("Wallet not found")
    return wallet


def create_wallet(db: Session, user_id: int) -> Wallet:
    profile = find_profile(db, user_id)
    if not profile:
        raise NotFoundError("Game profile not found. Create a profile first.")
    if find_wallet(db, profile.id):
        raise ConflictError("Wallet already exists")

    wallet = Wallet(game_profile_id=profile.id, coins_balance=0, gems_balance=0, tokens_balance=0)
    db.add(wallet)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent create for the same profile.
        db.rollback()
        raise ConflictError("Wallet already exists")
    db.refresh(wallet)
    logger.info("Created wallet %s for user %s", wallet.id, user_id)
    return wallet


def lock_wallet(db: Session, user_id: int, reason: str) -> Wallet:
    wallet = get_wallet_for_user(db, user_id)
    wallet.lock(reason)
    db.commit()
    db.refresh(wallet)
    logger.info("Wallet %s locked: %s", wallet.id, reason)
    return wallet


def unlock_wallet(db: Session, user_id: int) -> Wallet:
    wallet = get_wallet_for_user(db, user_id)
    wallet.unlock()
    db.commit()
    db.refresh(wallet)
    logger.info("Wallet %s unlocked", wallet.id)
    return wallet
