from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.transaction import TransactionOut


class ReverseTransactionRequest(BaseModel):
    reason: str = Field(default="", max_length=255)


class ReverseTransactionResponse(BaseModel):
    message: str
    reversals: list[TransactionOut]


class AdjustBalanceRequest(BaseModel):
    type: str
    currency: str
    amount: int
    description: str = Field(default="", max_length=255)


class AdjustBalanceResponse(BaseModel):
    message: str
    transaction: TransactionOut
    new_balance: int


class AdminLockRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=255)


class AdminWalletOut(BaseModel):
    user_id: int
    wallet_id: int
    is_locked: bool
    lock_reason: str
    note: Optional[str] = None
