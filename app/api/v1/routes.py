from fastapi import APIRouter
from app.api.v1.endpoints import admin, api_keys, auth, game_profile, integrations, sessions, transactions, users, wallet

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(api_keys.router, prefix="/api-keys", tags=["api-keys"])
router.include_router(game_profile.router, tags=["game-profile"])
router.include_router(wallet.router, prefix="/wallet", tags=["wallet"])
router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
router.include_router(sessions.router, prefix="/game-sessions", tags=["game-sessions"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(integrations.router, prefix="/integrations", tags=["integrations"])
