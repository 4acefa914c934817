"""Stable error kinds surfaced by the account and economy services.

Every error is an ``HTTPException`` whose ``detail`` is a dict carrying a
machine-readable ``code`` and a human-readable ``message``, so routers can
let them propagate untouched and clients can branch on ``detail.code``.
"""

from typing import Any, Optional

from fastapi import HTTPException


class AppError(HTTPException):
    code = "internal"
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        self.message = message
        detail = {"code": self.code, "message": message}
        detail.update(extra)
        super().__init__(status_code=type(self).status_code, detail=detail)


class NotFoundError(AppError):
    code = "not_found"
    status_code = 404


class ForbiddenError(AppError):
    code = "forbidden"
    status_code = 403


class InvalidArgumentError(AppError):
    code = "invalid_argument"
    status_code = 400


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


class InternalError(AppError):
    code = "internal"
    status_code = 500


def wallet_locked_error(lock_reason: Optional[str], message: str = "Wallet is locked") -> ForbiddenError:
    reason = lock_reason or ""
    text = f"{message}: {reason}" if reason else message
    return ForbiddenError(text, lock_reason=reason)
