from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import SoftDeleteMixin, TimestampMixin
from app.utils.timeutils import as_utc, utcnow


class APIKey(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    key = Column(String(128), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    rate_limit = Column(Integer, nullable=False, default=60)  # requests per minute
    is_active = Column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="api_keys")

    def is_expired(self, now=None) -> bool:
        return as_utc(self.expires_at) <= (now or utcnow())

    def touch(self) -> None:
        self.last_used_at = utcnow()


Index("ix_api_keys_user_active", APIKey.user_id, APIKey.is_active)
