from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.transaction import (
    MoneyRequest,
    MoneyResponse,
    TransactionHistoryResponse,
    TransactionOut,
    TransferRequest,
    TransferResponse,
)
from app.services.economy import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT, EconomyEngine
from app.utils.params import parse_int

router = APIRouter()


def history_response(engine: EconomyEngine, user_id: int, limit, offset, tx_type, currency, status) -> dict:
    limit = parse_int(limit, DEFAULT_HISTORY_LIMIT)
    offset = parse_int(offset, 0)
    items, total = engine.get_transaction_history(
        user_id,
        limit=limit,
        offset=offset,
        tx_type=tx_type,
        currency=currency,
        status=status,
    )
    # Echo the effective paging, after out-of-range values fell back.
    effective_limit = limit if 1 <= limit <= MAX_HISTORY_LIMIT else DEFAULT_HISTORY_LIMIT
    return {
        "transactions": [TransactionOut.model_validate(item) for item in items],
        "pagination": {"limit": effective_limit, "offset": max(0, offset), "total": total},
        "filters": {"type": tx_type, "currency": currency, "status": status},
    }


@router.post("/add", response_model=MoneyResponse)
def add_money(payload: MoneyRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry, new_balance = EconomyEngine(db).add_money(
        user.id,
        payload.currency,
        payload.amount,
        description=payload.description,
        category=payload.category,
        reference=payload.reference,
        metadata=payload.metadata,
    )
    return {
        "message": "Money added",
        "transaction": TransactionOut.model_validate(entry),
        "new_balance": new_balance,
    }


@router.post("/spend", response_model=MoneyResponse)
def spend_money(payload: MoneyRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry, new_balance = EconomyEngine(db).spend_money(
        user.id,
        payload.currency,
        payload.amount,
        description=payload.description,
        category=payload.category,
        reference=payload.reference,
        metadata=payload.metadata,
    )
    return {
        "message": "Money spent",
        "transaction": TransactionOut.model_validate(entry),
        "new_balance": new_balance,
    }


@router.post("/transfer", response_model=TransferResponse)
def transfer_money(payload: TransferRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    entry, new_balance = EconomyEngine(db).transfer_money(
        user.id,
        payload.to_user_id,
        payload.currency,
        payload.amount,
        description=payload.description,
    )
    return {
        "message": "Transfer completed",
        "transaction": TransactionOut.model_validate(entry),
        "amount": payload.amount,
        "currency": entry.currency,
        "to_user_id": payload.to_user_id,
        "new_balance": new_balance,
    }


@router.get("/history", response_model=TransactionHistoryResponse)
def get_transaction_history(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    type: Optional[str] = None,
    currency: Optional[str] = None,
    status: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return history_response(EconomyEngine(db), user.id, limit, offset, type, currency, status)


@router.get("/{transaction_id}", response_model=TransactionOut)
def get_transaction(transaction_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return EconomyEngine(db).get_transaction(user.id, transaction_id)
