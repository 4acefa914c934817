from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as SQLAlchemyTimeoutError
from app.api.v1.routes import router as api_router
from app.core.config import get_settings, parse_cors_origins, parse_csv
import logging
import time
from app.core.database import Base, engine, SessionLocal
from app.core.logging import configure_logging
from app.middlewares.rate_limit import SlidingWindowRateLimiter, limiter
from app.middlewares.request_logging import RequestLoggingMiddleware
from app.models import User, UserRole


settings = get_settings()

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.limiter = limiter
app.state.api_key_limiter = SlidingWindowRateLimiter(window_seconds=60)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
_started_at = time.time()


@app.exception_handler(SQLAlchemyTimeoutError)
async def sqlalchemy_timeout_handler(request, exc):
    logger.warning("Database pool timeout on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Service is busy. Please retry in a moment."},
    )


allow_origins = parse_cors_origins(settings.cors_origins or "")
logger.info("CORS allow_origins=%s", allow_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router, prefix=settings.api_v1_prefix)


def _bootstrap_admins() -> None:
    usernames = parse_csv(settings.bootstrap_admin_usernames)
    if not usernames:
        return

    db = SessionLocal()
    try:
        updated = 0
        missing: list[str] = []
        for username in usernames:
            user = db.query(User).filter(User.username.ilike(username)).first()
            if not user:
                missing.append(username)
                continue
            if user.role != UserRole.ADMIN.value:
                user.role = UserRole.ADMIN.value
                updated += 1
        if updated:
            db.commit()
            logger.info("Bootstrapped admin role for %s user(s).", updated)
        if missing:
            logger.warning("BOOTSTRAP_ADMIN_USERNAMES users not found: %s", ", ".join(missing))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Admin bootstrap failed: %s", exc)
    finally:
        db.close()


@app.on_event("startup")
def ensure_tables():
    if settings.auto_create_tables:
        # Optional local fallback for fresh environments.
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            logger.warning("DB unavailable on startup, skipping table creation: %s", exc)
    _bootstrap_admins()


def _liveness() -> dict:
    return {
        "status": "ok",
        "uptime_seconds": int(max(0, time.time() - _started_at)),
        "service": settings.app_name,
    }


def _readiness():
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "ready",
            "uptime_seconds": int(max(0, time.time() - _started_at)),
        }
    except SQLAlchemyError as exc:
        logger.warning("Readiness DB check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "detail": "database_unavailable"},
        )
    finally:
        db.close()


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/healthz")
def healthz():
    return _liveness()


@app.get("/live")
def live():
    return _liveness()


@app.get("/readyz")
def readyz():
    return _readiness()


@app.get("/ready")
def ready():
    return _readiness()


@app.get("/health")
def health():
    body = _liveness()
    readiness = _readiness()
    body["database"] = "unavailable" if isinstance(readiness, JSONResponse) else "ok"
    return body
