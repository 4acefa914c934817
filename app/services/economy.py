"""Atomic wallet mutations backed by the transaction ledger.

Every public mutation runs as one unit of work on the request's session:
the wallet rows involved are locked with ``SELECT ... FOR UPDATE`` and
re-read, pending ledger entries are written with before/after snapshots,
balances move, the entries complete, and the session commits. Any failure
rolls the whole unit back.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import (
    AppError,
    ConflictError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    wallet_locked_error,
)
from app.models import CurrencyType, Transaction, TransactionStatus, TransactionType, Wallet
from app.services.wallet import find_wallet_for_user, get_wallet_for_user

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 100
COUNTERPART_KEY = "counterpart_transaction_id"
ADJUSTMENT_TYPES = {TransactionType.REWARD, TransactionType.PENALTY, TransactionType.REFUND}


def parse_currency(value) -> CurrencyType:
    try:
        return CurrencyType(str(getattr(value, "value", value) or "").strip().lower())
    except ValueError:
        raise InvalidArgumentError(
            "Invalid currency type",
            allowed=[currency.value for currency in CurrencyType],
        )


def _coerce_filter(enum_cls, value, label: str):
    value = getattr(value, "value", value)
    if value is None or str(value).strip() == "":
        return None
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise InvalidArgumentError(
            f"Invalid {label}",
            allowed=[item.value for item in enum_cls],
        )


def _counterpart_id(entry: Transaction) -> Optional[int]:
    if entry.tx_type != TransactionType.TRANSFER:
        return None
    counterpart_id = entry.get_metadata(COUNTERPART_KEY)
    return int(counterpart_id) if counterpart_id is not None else None


def _validate_amount(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidArgumentError("Amount must be a positive integer")
    return amount


class EconomyEngine:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _unit_of_work(self):
        try:
            yield
            self.db.commit()
        except AppError:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Economy unit of work rolled back")
            raise InternalError("Failed to process transaction")

    def _lock_wallet(self, wallet_id: int) -> Wallet:
        wallet = (
            self.db.query(Wallet)
            .filter(Wallet.id == wallet_id, Wallet.not_deleted())
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not wallet:
            raise NotFoundError("Wallet not found")
        return wallet

    def _lock_wallets(self, *wallet_ids: int) -> dict[int, Wallet]:
        # Ascending id order so concurrent transfers cannot deadlock.
        return {wallet_id: self._lock_wallet(wallet_id) for wallet_id in sorted(set(wallet_ids))}

    def _post(
        self,
        wallet: Wallet,
        tx_type,
        currency,
        amount: int,
        description: str = "",
        category: str = "",
        reference: str = "",
        metadata: Optional[dict] = None,
        to_wallet: Optional[Wallet] = None,
        reverses: Optional[Transaction] = None,
    ) -> Transaction:
        """Write a pending entry and apply it to ``wallet``. The caller completes it."""
        entry = Transaction.open(
            wallet,
            tx_type,
            currency,
            amount,
            description=description,
            category=category,
            reference=reference,
            metadata=metadata,
            to_wallet=to_wallet,
            reverses=reverses,
        )
        self.db.add(entry)
        self.db.flush()

        new_balance = wallet.add_balance(currency, amount)
        if new_balance != entry.balance_after:
            logger.warning(
                "Wallet %s %s balance clamped to %s (entry %s expected %s)",
                wallet.id,
                entry.currency,
                new_balance,
                entry.id,
                entry.balance_after,
            )
        self.db.flush()
        return entry

    def _require_spendable(self, wallet: Wallet, currency, amount: int, locked_message: str = "Wallet is locked") -> None:
        if wallet.can_spend(currency, amount):
            return
        if wallet.is_locked:
            raise wallet_locked_error(wallet.lock_reason, locked_message)
        raise InvalidArgumentError(
            "Insufficient balance",
            currency=CurrencyType(currency).value,
            balance=wallet.get_balance(currency),
            requested=amount,
        )

    def execute_transaction(
        self,
        wallet: Wallet,
        tx_type,
        currency,
        amount: int,
        description: str = "",
        category: str = "",
        reference: str = "",
        metadata: Optional[dict] = None,
    ) -> Transaction:
        """Apply a signed ``amount`` to ``wallet`` with its ledger entry.

        Sufficiency is not re-checked here; callers guard debits themselves.
        """
        currency = parse_currency(currency)
        with self._unit_of_work():
            locked = self._lock_wallet(wallet.id)
            entry = self._post(locked, tx_type, currency, amount, description, category, reference, metadata)
            entry.complete()
            self.db.flush()
        return entry

    def transfer(
        self,
        from_wallet: Wallet,
        to_wallet: Wallet,
        currency,
        amount: int,
        description: str = "",
        incoming_description: Optional[str] = None,
    ) -> tuple[Transaction, Transaction]:
        """Move ``amount`` between two wallets. Returns ``(outgoing, incoming)`` legs."""
        if from_wallet.id == to_wallet.id:
            raise InvalidArgumentError("Cannot transfer to the same wallet")
        currency = parse_currency(currency)

        with self._unit_of_work():
            locked = self._lock_wallets(from_wallet.id, to_wallet.id)
            source = locked[from_wallet.id]
            destination = locked[to_wallet.id]

            self._require_spendable(source, currency, amount, "Source wallet is locked")
            if destination.is_locked:
                raise wallet_locked_error(destination.lock_reason, "Destination wallet is locked")

            reference = f"transfer_{source.id}_{destination.id}_{uuid.uuid4().hex[:12]}"
            outgoing = self._post(
                source,
                TransactionType.TRANSFER,
                currency,
                -amount,
                description=description,
                category="transfer_out",
                reference=reference,
                to_wallet=destination,
            )
            incoming = self._post(
                destination,
                TransactionType.TRANSFER,
                currency,
                amount,
                description=incoming_description if incoming_description is not None else description,
                category="transfer_in",
                reference=reference,
            )
            outgoing.set_metadata(COUNTERPART_KEY, incoming.id)
            incoming.set_metadata(COUNTERPART_KEY, outgoing.id)
            outgoing.complete()
            incoming.complete()
            self.db.flush()

        logger.info(
            "Transferred %s %s from wallet %s to wallet %s (ref=%s)",
            amount,
            outgoing.currency,
            outgoing.wallet_id,
            incoming.wallet_id,
            outgoing.reference,
        )
        return outgoing, incoming

    def add_money(
        self,
        user_id: int,
        currency,
        amount: int,
        description: str = "",
        category: str = "",
        reference: str = "",
        metadata: Optional[dict] = None,
    ) -> tuple[Transaction, int]:
        currency = parse_currency(currency)
        amount = _validate_amount(amount)
        wallet = get_wallet_for_user(self.db, user_id)

        with self._unit_of_work():
            wallet = self._lock_wallet(wallet.id)
            if wallet.is_locked:
                raise wallet_locked_error(wallet.lock_reason)
            entry = self._post(wallet, TransactionType.EARN, currency, amount, description, category, reference, metadata)
            entry.complete()
            self.db.flush()

        logger.info("Wallet %s earned %s %s (tx=%s)", wallet.id, amount, currency.value, entry.id)
        return entry, wallet.get_balance(currency)

    def spend_money(
        self,
        user_id: int,
        currency,
        amount: int,
        description: str = "",
        category: str = "",
        reference: str = "",
        metadata: Optional[dict] = None,
    ) -> tuple[Transaction, int]:
        currency = parse_currency(currency)
        amount = _validate_amount(amount)
        wallet = get_wallet_for_user(self.db, user_id)

        with self._unit_of_work():
            wallet = self._lock_wallet(wallet.id)
            self._require_spendable(wallet, currency, amount)
            entry = self._post(wallet, TransactionType.SPEND, currency, -amount, description, category, reference, metadata)
            entry.complete()
            self.db.flush()

        logger.info("Wallet %s spent %s %s (tx=%s)", wallet.id, amount, currency.value, entry.id)
        return entry, wallet.get_balance(currency)

    def transfer_money(
        self,
        from_user_id: int,
        to_user_id: int,
        currency,
        amount: int,
        description: str = "",
    ) -> tuple[Transaction, int]:
        if from_user_id == to_user_id:
            raise InvalidArgumentError("Cannot transfer to yourself")
        currency = parse_currency(currency)
        amount = _validate_amount(amount)

        source = find_wallet_for_user(self.db, from_user_id)
        if not source:
            raise NotFoundError("Source wallet not found")
        destination = find_wallet_for_user(self.db, to_user_id)
        if not destination:
            raise NotFoundError("Destination wallet not found")

        outgoing, _ = self.transfer(
            source,
            destination,
            currency,
            amount,
            description=description or f"Transfer to user {to_user_id}",
            incoming_description=description or f"Transfer from user {from_user_id}",
        )
        return outgoing, source.get_balance(currency)

    def get_transaction_history(
        self,
        user_id: int,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0,
        tx_type=None,
        currency=None,
        status=None,
    ) -> tuple[list[Transaction], int]:
        if limit is None or limit < 1 or limit > MAX_HISTORY_LIMIT:
            limit = DEFAULT_HISTORY_LIMIT
        if offset is None or offset < 0:
            offset = 0
        tx_type = _coerce_filter(TransactionType, tx_type, "transaction type")
        currency = _coerce_filter(CurrencyType, currency, "currency type")
        status = _coerce_filter(TransactionStatus, status, "transaction status")

        wallet = get_wallet_for_user(self.db, user_id)
        query = self.db.query(Transaction).filter(Transaction.wallet_id == wallet.id, Transaction.not_deleted())
        if tx_type:
            query = query.filter(Transaction.tx_type == tx_type.value)
        if currency:
            query = query.filter(Transaction.currency == currency.value)
        if status:
            query = query.filter(Transaction.status == status.value)

        total = query.count()
        items = (
            query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def get_transaction(self, user_id: int, transaction_id: int) -> Transaction:
        wallet = get_wallet_for_user(self.db, user_id)
        entry = (
            self.db.query(Transaction)
            .filter(
                Transaction.id == transaction_id,
                Transaction.wallet_id == wallet.id,
                Transaction.not_deleted(),
            )
            .first()
        )
        if not entry:
            raise NotFoundError("Transaction not found")
        return entry

    def _lock_entry(self, transaction_id) -> Optional[Transaction]:
        return (
            self.db.query(Transaction)
            .filter(Transaction.id == transaction_id, Transaction.not_deleted())
            .with_for_update()
            .populate_existing()
            .first()
        )

    def _lock_entries(self, *transaction_ids) -> dict[int, Transaction]:
        entries = {}
        for transaction_id in sorted({tid for tid in transaction_ids if tid is not None}):
            entry = self._lock_entry(transaction_id)
            if entry is not None:
                entries[transaction_id] = entry
        return entries

    def reverse_transaction(self, transaction_id: int, reason: str = "") -> list[Transaction]:
        """Undo a completed entry with an inverse entry. Transfers reverse both legs.

        Returns the new reversing entries, the requested entry's reversal first.
        """
        with self._unit_of_work():
            target = (
                self.db.query(Transaction)
                .filter(Transaction.id == transaction_id, Transaction.not_deleted())
                .first()
            )
            if not target:
                raise NotFoundError("Transaction not found")
            counterpart_id = _counterpart_id(target)

            # Both legs are locked in ascending id order, like wallets.
            entries = self._lock_entries(transaction_id, counterpart_id)
            original = entries.get(transaction_id)
            if not original:
                raise NotFoundError("Transaction not found")
            if original.reverses_id is not None:
                raise ConflictError("A reversal entry cannot itself be reversed")
            if not original.can_be_reversed():
                raise ConflictError("Transaction cannot be reversed", status=original.status)

            legs = [original]
            if counterpart_id is not None:
                counterpart = entries.get(counterpart_id)
                if counterpart is not None:
                    if not counterpart.can_be_reversed():
                        raise ConflictError("Transfer counterpart cannot be reversed", status=counterpart.status)
                    legs.append(counterpart)

            wallets = self._lock_wallets(*(leg.wallet_id for leg in legs))
            for leg in legs:
                wallet = wallets[leg.wallet_id]
                if leg.amount > 0 and not wallet.has_sufficient_balance(leg.currency, leg.amount):
                    raise InvalidArgumentError(
                        "Insufficient balance to reverse transaction",
                        transaction_id=leg.id,
                        balance=wallet.get_balance(leg.currency),
                        requested=leg.amount,
                    )

            reversals = []
            for leg in legs:
                description = f"Reversal of transaction {leg.id}"
                if reason:
                    description = f"{description}: {reason}"
                reversal = self._post(
                    wallets[leg.wallet_id],
                    leg.tx_type,
                    leg.currency,
                    -leg.amount,
                    description=description,
                    category="reversal",
                    reference=leg.reference,
                    metadata={"reason": reason} if reason else None,
                    reverses=leg,
                )
                reversal.complete()
                self.db.flush()
                leg.reverse(reversal)
                reversals.append(reversal)
            self.db.flush()

        logger.info(
            "Reversed transaction(s) %s with %s",
            [leg.id for leg in legs],
            [reversal.id for reversal in reversals],
        )
        return reversals

    def adjust_balance(
        self,
        user_id: int,
        tx_type,
        currency,
        amount: int,
        description: str = "",
    ) -> tuple[Transaction, int]:
        """Operator reward, penalty or refund. Penalties debit and may not overdraw."""
        adjustment = _coerce_filter(TransactionType, tx_type, "transaction type")
        if adjustment not in ADJUSTMENT_TYPES:
            raise InvalidArgumentError(
                "Adjustment type must be reward, penalty or refund",
                allowed=sorted(item.value for item in ADJUSTMENT_TYPES),
            )
        currency = parse_currency(currency)
        amount = _validate_amount(amount)
        wallet = get_wallet_for_user(self.db, user_id)

        signed_amount = -amount if adjustment == TransactionType.PENALTY else amount
        with self._unit_of_work():
            wallet = self._lock_wallet(wallet.id)
            if signed_amount < 0 and not wallet.has_sufficient_balance(currency, amount):
                raise InvalidArgumentError(
                    "Insufficient balance",
                    currency=currency.value,
                    balance=wallet.get_balance(currency),
                    requested=amount,
                )
            entry = self._post(
                wallet,
                adjustment,
                currency,
                signed_amount,
                description=description,
                category="adjustment",
            )
            entry.complete()
            self.db.flush()

        logger.info("Wallet %s adjusted by %s %s (%s)", wallet.id, signed_amount, currency.value, adjustment.value)
        return entry, wallet.get_balance(currency)
