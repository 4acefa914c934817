from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    wallet_id: int
    tx_type: str = Field(validation_alias=AliasChoices("tx_type", "type"), serialization_alias="type")
    status: str
    currency: str
    amount: int
    balance_before: int
    balance_after: int
    description: str
    category: str
    reference: str
    meta: Optional[dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )
    to_wallet_id: Optional[int] = None
    reversed_by_id: Optional[int] = None
    reverses_id: Optional[int] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class MoneyRequest(BaseModel):
    # Currency and amount are checked by the economy engine so that bad values
    # surface as invalid_argument errors rather than 422s.
    currency: str
    amount: int
    description: str = Field(default="", max_length=255)
    category: str = Field(default="", max_length=64)
    reference: str = Field(default="", max_length=128)
    metadata: Optional[dict[str, Any]] = None


class TransferRequest(BaseModel):
    to_user_id: int
    currency: str
    amount: int
    description: str = Field(default="", max_length=255)


class MoneyResponse(BaseModel):
    message: str
    transaction: TransactionOut
    new_balance: int


class TransferResponse(BaseModel):
    message: str
    transaction: TransactionOut
    amount: int
    currency: str
    to_user_id: int
    new_balance: int


class Pagination(BaseModel):
    limit: int
    offset: int
    total: int


class TransactionHistoryResponse(BaseModel):
    transactions: list[TransactionOut]
    pagination: Pagination
    filters: dict[str, Optional[str]]
