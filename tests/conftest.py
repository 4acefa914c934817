import os


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "Game Account Service Test",
        "ENVIRONMENT": "test",
        "SECRET_KEY": "test-secret",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "REFRESH_TOKEN_EXPIRE_DAYS": "7",
        "PASSWORD_BCRYPT_ROUNDS": "4",
        "AUTO_CREATE_TABLES": "false",
        "DATABASE_URL": "sqlite:///:memory:",
        "RATE_LIMIT_ENABLED": "false",
        "BOOTSTRAP_ADMIN_USERNAMES": "",
        "CORS_ORIGINS": "http://localhost:5173,http://localhost:3000",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.core.security import create_access_token, hash_password  # noqa: E402
from app.main import app  # noqa: E402
from app.models import GameProfile, User, Wallet  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.state.api_key_limiter.reset()
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_player(db_session):
    """Create a user with a game profile and (by default) a wallet, committed."""

    def _make(
        username: str = "player1",
        *,
        coins: int = 0,
        gems: int = 0,
        tokens: int = 0,
        role: str = "user",
        with_profile: bool = True,
        with_wallet: bool = True,
        lock_reason: str | None = None,
    ) -> User:
        user = User(
            username=username,
            display_name=username.title(),
            email=f"{username}@example.com",
            hashed_password=hash_password("Password123!"),
            role=role,
            is_active=True,
        )
        db_session.add(user)
        db_session.flush()

        if with_profile:
            profile = GameProfile(user_id=user.id, level=1, xp=0, is_active=True, stats={}, settings={})
            db_session.add(profile)
            db_session.flush()
            if with_wallet:
                db_session.add(
                    Wallet(
                        game_profile_id=profile.id,
                        coins_balance=coins,
                        gems_balance=gems,
                        tokens_balance=tokens,
                        is_locked=lock_reason is not None,
                        lock_reason=lock_reason or "",
                    )
                )
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token(str(user.id), user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers
