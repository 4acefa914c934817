from app.models.user import User, UserRole
from app.models.api_key import APIKey
from app.models.refresh_token import RefreshToken
from app.models.game_profile import GameProfile
from app.models.game_session import GameSession, SessionStatus
from app.models.wallet import Wallet, CurrencyType
from app.models.transaction import Transaction, TransactionStatus, TransactionType

__all__ = [
    "User",
    "UserRole",
    "APIKey",
    "RefreshToken",
    "GameProfile",
    "GameSession",
    "SessionStatus",
    "Wallet",
    "CurrencyType",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
]
