import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import require_admin
from app.models import User
from app.schemas.admin import (
    AdjustBalanceRequest,
    AdjustBalanceResponse,
    AdminLockRequest,
    AdminWalletOut,
    ReverseTransactionRequest,
    ReverseTransactionResponse,
)
from app.schemas.transaction import TransactionOut
from app.services.economy import EconomyEngine
from app.services.wallet import lock_wallet, unlock_wallet

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/transactions/{transaction_id}/reverse", response_model=ReverseTransactionResponse)
def reverse_transaction(
    transaction_id: int,
    payload: ReverseTransactionRequest | None = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    reason = payload.reason if payload else ""
    reversals = EconomyEngine(db).reverse_transaction(transaction_id, reason)
    logger.info("Admin %s reversed transaction %s", admin.id, transaction_id)
    return {
        "message": "Transaction reversed",
        "reversals": [TransactionOut.model_validate(entry) for entry in reversals],
    }


@router.post("/wallets/{user_id}/adjust", response_model=AdjustBalanceResponse)
def adjust_wallet(
    user_id: int,
    payload: AdjustBalanceRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    entry, new_balance = EconomyEngine(db).adjust_balance(
        user_id,
        payload.type,
        payload.currency,
        payload.amount,
        description=payload.description or f"Adjustment by admin {admin.id}",
    )
    return {
        "message": "Balance adjusted",
        "transaction": TransactionOut.model_validate(entry),
        "new_balance": new_balance,
    }


@router.post("/wallets/{user_id}/lock", response_model=AdminWalletOut)
def admin_lock_wallet(
    user_id: int,
    payload: AdminLockRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    wallet = lock_wallet(db, user_id, payload.reason)
    logger.info("Admin %s locked wallet of user %s", admin.id, user_id)
    return {"user_id": user_id, "wallet_id": wallet.id, "is_locked": wallet.is_locked, "lock_reason": wallet.lock_reason}


@router.post("/wallets/{user_id}/unlock", response_model=AdminWalletOut)
def admin_unlock_wallet(user_id: int, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    wallet = unlock_wallet(db, user_id)
    logger.info("Admin %s unlocked wallet of user %s", admin.id, user_id)
    return {"user_id": user_id, "wallet_id": wallet.id, "is_locked": wallet.is_locked, "lock_reason": wallet.lock_reason}
