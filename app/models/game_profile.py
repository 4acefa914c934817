from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import SoftDeleteMixin, TimestampMixin

XP_PER_LEVEL = 1000


class GameProfile(Base, TimestampMixin, SoftDeleteMixin):
    """Per-user progression record. Owns the wallet (User -> GameProfile -> Wallet)."""

    __tablename__ = "game_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    level = Column(Integer, nullable=False, default=1)
    xp = Column(BigInteger, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Open-schema bags: unknown keys are stored and returned untouched.
    stats = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)
    settings = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)

    user = relationship("User", back_populates="game_profile")
    wallet = relationship("Wallet", back_populates="game_profile", uselist=False)
    sessions = relationship("GameSession", back_populates="game_profile")

    def xp_for_next_level(self) -> int:
        return (self.level or 1) * XP_PER_LEVEL

    def xp_progress(self) -> float:
        """Percentage (0-100) of the current level band already earned."""
        level = self.level or 1
        xp = self.xp or 0
        if level == 1 and xp == 0:
            return 0.0

        band_start = (level - 1) * XP_PER_LEVEL
        band_end = self.xp_for_next_level()
        progress = xp - band_start
        if progress <= 0:
            return 0.0
        return min(100.0, progress / (band_end - band_start) * 100)

    def add_xp(self, amount: int) -> bool:
        """Add XP and climb as many levels as it covers. Returns True on level-up."""
        starting_level = self.level or 1
        self.level = starting_level
        self.xp = (self.xp or 0) + amount
        while self.xp >= self.xp_for_next_level():
            self.level += 1
        return self.level > starting_level

    def get_stat(self, key: str):
        return (self.stats or {}).get(key)

    def set_stat(self, key: str, value) -> None:
        if self.stats is None:
            self.stats = {}
        self.stats[key] = value

    def get_setting(self, key: str):
        return (self.settings or {}).get(key)

    def set_setting(self, key: str, value) -> None:
        if self.settings is None:
            self.settings = {}
        self.settings[key] = value


Index("ix_game_profiles_active_rank", GameProfile.is_active, GameProfile.level, GameProfile.xp)
