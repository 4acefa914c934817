from sqlalchemy import Column, DateTime, func

from app.utils.timeutils import utcnow


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


class SoftDeleteMixin:
    """Rows are never physically removed; reads must filter on ``not_deleted()``."""

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @classmethod
    def not_deleted(cls):
        return cls.deleted_at.is_(None)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()
