import enum
from sqlalchemy import BigInteger, Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.models.base import SoftDeleteMixin, TimestampMixin


class CurrencyType(str, enum.Enum):
    COINS = "coins"  # main in-game currency
    GEMS = "gems"  # premium
    TOKENS = "tokens"  # event/special


# Column backing each currency's balance.
BALANCE_COLUMNS = {
    CurrencyType.COINS: "coins_balance",
    CurrencyType.GEMS: "gems_balance",
    CurrencyType.TOKENS: "tokens_balance",
}

# Reporting-only conversion into coins (1 gem = 100 coins, 1 token = 10 coins).
COIN_VALUE = {
    CurrencyType.COINS: 1,
    CurrencyType.GEMS: 100,
    CurrencyType.TOKENS: 10,
}


def _balance_column(currency):
    try:
        return BALANCE_COLUMNS[CurrencyType(currency)]
    except ValueError:
        return None


class Wallet(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "wallets"

    id = Column(Integer, primary_key=True, index=True)
    game_profile_id = Column(Integer, ForeignKey("game_profiles.id"), unique=True, nullable=False)
    coins_balance = Column(BigInteger, default=0, nullable=False)
    gems_balance = Column(BigInteger, default=0, nullable=False)
    tokens_balance = Column(BigInteger, default=0, nullable=False)
    is_locked = Column(Boolean, default=False, nullable=False)
    lock_reason = Column(String(255), default="", nullable=False)

    game_profile = relationship("GameProfile", back_populates="wallet")
    transactions = relationship(
        "Transaction",
        back_populates="wallet",
        foreign_keys="Transaction.wallet_id",
    )

    __table_args__ = (
        CheckConstraint("coins_balance >= 0", name="ck_wallets_coins_non_negative"),
        CheckConstraint("gems_balance >= 0", name="ck_wallets_gems_non_negative"),
        CheckConstraint("tokens_balance >= 0", name="ck_wallets_tokens_non_negative"),
    )

    def get_balance(self, currency) -> int:
        column = _balance_column(currency)
        if column is None:
            return 0
        return int(getattr(self, column) or 0)

    def set_balance(self, currency, amount: int) -> None:
        column = _balance_column(currency)
        if column is not None:
            setattr(self, column, amount)

    def add_balance(self, currency, delta: int) -> int:
        """Apply ``delta`` and return the new balance.

        The result is clamped at zero instead of refusing the write, so an
        overdraw is silently truncated. Callers must check ``can_spend`` first.
        """
        new_balance = self.get_balance(currency) + delta
        if new_balance < 0:
            new_balance = 0
        self.set_balance(currency, new_balance)
        return new_balance

    def has_sufficient_balance(self, currency, amount: int) -> bool:
        return self.get_balance(currency) >= amount

    def can_spend(self, currency, amount: int) -> bool:
        return not self.is_locked and self.has_sufficient_balance(currency, amount)

    def lock(self, reason: str) -> None:
        self.is_locked = True
        self.lock_reason = reason

    def unlock(self) -> None:
        self.is_locked = False
        self.lock_reason = ""

    def get_total_value(self) -> int:
        return sum(self.get_balance(currency) * rate for currency, rate in COIN_VALUE.items())

    def balances(self) -> dict[str, int]:
        return {currency.value: self.get_balance(currency) for currency in CurrencyType}


Index("ix_wallets_game_profile_id", Wallet.game_profile_id)
