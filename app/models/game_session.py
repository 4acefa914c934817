import enum
from datetime import timedelta

from sqlalchemy import BigInteger, Boolean, Column, DateTime, ForeignKey, Index, Integer, JSON, String
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import SoftDeleteMixin, TimestampMixin
from app.utils.timeutils import as_utc, utcnow

IDLE_TIMEOUT = timedelta(minutes=30)
ONLINE_WINDOW = timedelta(minutes=5)
AWAY_WINDOW = timedelta(minutes=15)


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    TERMINATED = "terminated"


class GameSession(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "game_sessions"

    id = Column(Integer, primary_key=True, index=True)
    game_profile_id = Column(Integer, ForeignKey("game_profiles.id"), nullable=False)
    status = Column(String(16), nullable=False, default=SessionStatus.ACTIVE.value)
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_activity = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    ip_address = Column(String(64), nullable=False, default="")
    user_agent = Column(String(255), nullable=False, default="")
    platform = Column(String(32), nullable=False, default="")

    duration = Column(BigInteger, nullable=False, default=0)  # seconds
    actions_count = Column(Integer, nullable=False, default=0)
    session_data = Column(MutableDict.as_mutable(JSON), nullable=False, default=dict)

    is_valid = Column(Boolean, nullable=False, default=True)
    invalid_reason = Column(String(255), nullable=False, default="")

    game_profile = relationship("GameProfile", back_populates="sessions")

    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE and bool(self.is_valid)

    def is_expired(self, idle_timeout: timedelta = IDLE_TIMEOUT) -> bool:
        if self.status != SessionStatus.ACTIVE:
            return True
        return utcnow() - as_utc(self.last_activity) > idle_timeout

    def update_activity(self) -> None:
        self.last_activity = utcnow()
        self.actions_count = (self.actions_count or 0) + 1

    def _close(self, status: SessionStatus) -> None:
        now = utcnow()
        self.status = status.value
        self.ended_at = now
        self.duration = int((now - as_utc(self.started_at)).total_seconds())

    def end(self) -> None:
        self._close(SessionStatus.INACTIVE)

    def expire(self) -> None:
        self._close(SessionStatus.EXPIRED)

    def terminate(self, reason: str) -> None:
        self._close(SessionStatus.TERMINATED)
        self.is_valid = False
        self.invalid_reason = reason

    def duration_minutes(self) -> int:
        if self.ended_at is not None:
            return int((self.duration or 0) // 60)
        return int((utcnow() - as_utc(self.started_at)).total_seconds() // 60)

    def get_session_data(self, key: str):
        return (self.session_data or {}).get(key)

    def set_session_data(self, key: str, value) -> None:
        if self.session_data is None:
            self.session_data = {}
        self.session_data[key] = value

    def can_perform_action(self, idle_timeout: timedelta = IDLE_TIMEOUT) -> bool:
        return self.is_active() and not self.is_expired(idle_timeout)

    def activity_status(self) -> str:
        if not self.is_active():
            return "offline"
        idle = utcnow() - as_utc(self.last_activity)
        if idle < ONLINE_WINDOW:
            return "online"
        if idle < AWAY_WINDOW:
            return "away"
        return "idle"


Index("ix_game_sessions_profile_status", GameSession.game_profile_id, GameSession.status)
