from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import SoftDeleteMixin, TimestampMixin
from app.utils.timeutils import as_utc, utcnow


class RefreshToken(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(512), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    is_revoked = Column(Boolean, nullable=False, default=False)

    user = relationship("User", back_populates="refresh_tokens")

    def is_usable(self) -> bool:
        return not self.is_revoked and as_utc(self.expires_at) > utcnow()

    def revoke(self) -> None:
        self.is_revoked = True
