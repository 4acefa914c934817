from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.dependencies import get_current_user
from app.models import User
from app.schemas.transaction import TransactionHistoryResponse
from app.schemas.wallet import BalanceOut, BalancesOut, LockWalletRequest, WalletLockOut, WalletOut, WalletStatusOut
from app.services.economy import EconomyEngine, parse_currency
from app.services.wallet import create_wallet, get_wallet_for_user, lock_wallet, unlock_wallet
from app.api.v1.endpoints.transactions import history_response

router = APIRouter()


@router.post("", response_model=WalletOut, status_code=status.HTTP_201_CREATED)
def create_my_wallet(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return create_wallet(db, user.id)


@router.get("", response_model=WalletOut)
def get_my_wallet(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_wallet_for_user(db, user.id)


@router.get("/balance/{currency}", response_model=BalanceOut)
def get_balance(currency: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    currency_type = parse_currency(currency)
    wallet = get_wallet_for_user(db, user.id)
    return {"currency": currency_type.value, "balance": wallet.get_balance(currency_type)}


@router.get("/balances", response_model=BalancesOut)
def get_balances(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    wallet = get_wallet_for_user(db, user.id)
    return {
        **wallet.balances(),
        "total_value": wallet.get_total_value(),
        "is_locked": wallet.is_locked,
        "lock_reason": wallet.lock_reason,
    }


@router.post("/lock", response_model=WalletLockOut)
def lock_my_wallet(payload: LockWalletRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    wallet = lock_wallet(db, user.id, payload.reason)
    return {"message": "Wallet locked", "is_locked": wallet.is_locked, "lock_reason": wallet.lock_reason}


@router.post("/unlock", response_model=WalletLockOut)
def unlock_my_wallet(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    wallet = unlock_wallet(db, user.id)
    return {"message": "Wallet unlocked", "is_locked": wallet.is_locked, "lock_reason": wallet.lock_reason}


@router.get("/status", response_model=WalletStatusOut)
def get_wallet_status(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    wallet = get_wallet_for_user(db, user.id)
    return {
        "wallet_id": wallet.id,
        "is_locked": wallet.is_locked,
        "lock_reason": wallet.lock_reason,
        "created_at": wallet.created_at,
        "updated_at": wallet.updated_at,
        "balances": wallet.balances(),
        "total_value": wallet.get_total_value(),
    }


@router.get("/history", response_model=TransactionHistoryResponse)
def get_wallet_history(
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    type: Optional[str] = None,
    currency: Optional[str] = None,
    status: Optional[str] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return history_response(EconomyEngine(db), user.id, limit, offset, type, currency, status)
