from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WalletOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    game_profile_id: int
    coins_balance: int
    gems_balance: int
    tokens_balance: int
    is_locked: bool
    lock_reason: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BalanceOut(BaseModel):
    currency: str
    balance: int


class BalancesOut(BaseModel):
    coins: int
    gems: int
    tokens: int
    total_value: int
    is_locked: bool
    lock_reason: str


class LockWalletRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=255)


class WalletLockOut(BaseModel):
    message: str
    is_locked: bool
    lock_reason: str


class WalletStatusOut(BaseModel):
    wallet_id: int
    is_locked: bool
    lock_reason: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    balances: dict[str, int]
    total_value: int
