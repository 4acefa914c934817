import enum
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, Integer, JSON, String
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.errors import ConflictError
from app.models.base import SoftDeleteMixin, TimestampMixin
from app.utils.timeutils import utcnow


class TransactionType(str, enum.Enum):
    EARN = "earn"
    SPEND = "spend"
    TRANSFER = "transfer"
    REWARD = "reward"
    PENALTY = "penalty"
    REFUND = "refund"


class TransactionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REVERSED = "reversed"


class Transaction(Base, TimestampMixin, SoftDeleteMixin):
    """
    One ledger entry. Immutable once written except for ``status``,
    ``processed_at`` and the reversal links.

    Type/status/currency are stored as plain short strings rather than
    database ENUMs; the str-based enums above compare equal to them.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    wallet_id = Column(Integer, ForeignKey("wallets.id"), nullable=False)
    tx_type = Column("type", String(16), nullable=False)
    status = Column(String(16), nullable=False, default=TransactionStatus.PENDING.value)
    currency = Column(String(16), nullable=False)
    amount = Column(BigInteger, nullable=False)  # signed, negative = debit

    balance_before = Column(BigInteger, nullable=False)
    balance_after = Column(BigInteger, nullable=False)

    description = Column(String(255), nullable=False, default="")
    category = Column(String(64), nullable=False, default="")
    reference = Column(String(128), nullable=False, default="", index=True)
    meta = Column("metadata", MutableDict.as_mutable(JSON), nullable=True)

    to_wallet_id = Column(Integer, ForeignKey("wallets.id"), nullable=True)
    reversed_by_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    reverses_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)

    processed_at = Column(DateTime(timezone=True), nullable=True)

    wallet = relationship("Wallet", back_populates="transactions", foreign_keys=[wallet_id])
    to_wallet = relationship("Wallet", foreign_keys=[to_wallet_id])
    reversed_by = relationship("Transaction", foreign_keys=[reversed_by_id], remote_side=[id], post_update=True)
    reverses = relationship("Transaction", foreign_keys=[reverses_id], remote_side=[id])

    @classmethod
    def open(
        cls,
        wallet,
        tx_type,
        currency,
        amount: int,
        description: str = "",
        category: str = "",
        reference: str = "",
        metadata=None,
        to_wallet=None,
        reverses=None,
    ) -> "Transaction":
        """Build a pending entry, snapshotting the wallet balance before it moves."""
        balance_before = wallet.get_balance(currency)
        return cls(
            wallet_id=wallet.id,
            tx_type=TransactionType(tx_type).value,
            status=TransactionStatus.PENDING.value,
            currency=str(getattr(currency, "value", currency)),
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_before + amount,
            description=description or "",
            category=category or "",
            reference=reference or "",
            meta=dict(metadata) if metadata else None,
            to_wallet_id=to_wallet.id if to_wallet is not None else None,
            reverses_id=reverses.id if reverses is not None else None,
        )

    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED

    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    def _finish(self, status: TransactionStatus) -> None:
        if not self.is_pending():
            raise ConflictError(f"Transaction cannot move from {self.status} to {status.value}")
        self.status = status.value
        self.processed_at = utcnow()

    def complete(self) -> None:
        self._finish(TransactionStatus.COMPLETED)

    def fail(self) -> None:
        self._finish(TransactionStatus.FAILED)

    def cancel(self) -> None:
        self._finish(TransactionStatus.CANCELLED)

    def can_be_reversed(self) -> bool:
        return self.is_completed() and self.reversed_by_id is None

    def reverse(self, reversing_entry: "Transaction") -> None:
        if not self.can_be_reversed():
            raise ConflictError("Transaction cannot be reversed")
        self.status = TransactionStatus.REVERSED.value
        self.reversed_by_id = reversing_entry.id

    def is_transfer(self) -> bool:
        return self.tx_type == TransactionType.TRANSFER and self.to_wallet_id is not None

    def absolute_amount(self) -> int:
        return abs(self.amount or 0)

    def get_metadata(self, key: str):
        if not self.meta:
            return None
        return self.meta.get(key)

    def set_metadata(self, key: str, value) -> None:
        if self.meta is None:
            self.meta = {}
        self.meta[key] = value


Index("ix_transactions_wallet_created", Transaction.wallet_id, Transaction.created_at)
Index("ix_transactions_wallet_type_status", Transaction.wallet_id, Transaction.tx_type, Transaction.status)
