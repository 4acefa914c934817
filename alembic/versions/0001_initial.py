"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("display_name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role_active", "users", ["role", "is_active"])
    op.create_index("ix_users_deleted_at", "users", ["deleted_at"])

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("key", sa.String(128), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rate_limit", sa.Integer, nullable=False, server_default="60"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_api_keys_id", "api_keys", ["id"])
    op.create_index("ix_api_keys_key", "api_keys", ["key"], unique=True)
    op.create_index("ix_api_keys_user_id", "api_keys", ["user_id"])
    op.create_index("ix_api_keys_user_active", "api_keys", ["user_id", "is_active"])
    op.create_index("ix_api_keys_deleted_at", "api_keys", ["deleted_at"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("token", sa.String(512), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_revoked", sa.Boolean, nullable=False, server_default=sa.text("false")),
        *_timestamps(),
    )
    op.create_index("ix_refresh_tokens_id", "refresh_tokens", ["id"])
    op.create_index("ix_refresh_tokens_token", "refresh_tokens", ["token"], unique=True)
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])
    op.create_index("ix_refresh_tokens_deleted_at", "refresh_tokens", ["deleted_at"])

    op.create_table(
        "game_profiles",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("xp", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("stats", sa.JSON, nullable=False),
        sa.Column("settings", sa.JSON, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_game_profiles_id", "game_profiles", ["id"])
    op.create_index("ix_game_profiles_active_rank", "game_profiles", ["is_active", "level", "xp"])
    op.create_index("ix_game_profiles_deleted_at", "game_profiles", ["deleted_at"])

    op.create_table(
        "wallets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("game_profile_id", sa.Integer, sa.ForeignKey("game_profiles.id"), nullable=False, unique=True),
        sa.Column("coins_balance", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("gems_balance", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("tokens_balance", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("lock_reason", sa.String(255), nullable=False, server_default=""),
        *_timestamps(),
        sa.CheckConstraint("coins_balance >= 0", name="ck_wallets_coins_non_negative"),
        sa.CheckConstraint("gems_balance >= 0", name="ck_wallets_gems_non_negative"),
        sa.CheckConstraint("tokens_balance >= 0", name="ck_wallets_tokens_non_negative"),
    )
    op.create_index("ix_wallets_id", "wallets", ["id"])
    op.create_index("ix_wallets_game_profile_id", "wallets", ["game_profile_id"])
    op.create_index("ix_wallets_deleted_at", "wallets", ["deleted_at"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("wallet_id", sa.Integer, sa.ForeignKey("wallets.id"), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("currency", sa.String(16), nullable=False),
        sa.Column("amount", sa.BigInteger, nullable=False),
        sa.Column("balance_before", sa.BigInteger, nullable=False),
        sa.Column("balance_after", sa.BigInteger, nullable=False),
        sa.Column("description", sa.String(255), nullable=False, server_default=""),
        sa.Column("category", sa.String(64), nullable=False, server_default=""),
        sa.Column("reference", sa.String(128), nullable=False, server_default=""),
        sa.Column("metadata", sa.JSON, nullable=True),
        sa.Column("to_wallet_id", sa.Integer, sa.ForeignKey("wallets.id"), nullable=True),
        sa.Column("reversed_by_id", sa.Integer, sa.ForeignKey("transactions.id"), nullable=True),
        sa.Column("reverses_id", sa.Integer, sa.ForeignKey("transactions.id"), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_transactions_id", "transactions", ["id"])
    op.create_index("ix_transactions_reference", "transactions", ["reference"])
    op.create_index("ix_transactions_wallet_created", "transactions", ["wallet_id", "created_at"])
    op.create_index("ix_transactions_wallet_type_status", "transactions", ["wallet_id", "type", "status"])
    op.create_index("ix_transactions_deleted_at", "transactions", ["deleted_at"])

    op.create_table(
        "game_sessions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("game_profile_id", sa.Integer, sa.ForeignKey("game_profiles.id"), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=False, server_default=""),
        sa.Column("user_agent", sa.String(255), nullable=False, server_default=""),
        sa.Column("platform", sa.String(32), nullable=False, server_default=""),
        sa.Column("duration", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("actions_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("session_data", sa.JSON, nullable=False),
        sa.Column("is_valid", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("invalid_reason", sa.String(255), nullable=False, server_default=""),
        *_timestamps(),
    )
    op.create_index("ix_game_sessions_id", "game_sessions", ["id"])
    op.create_index("ix_game_sessions_profile_status", "game_sessions", ["game_profile_id", "status"])
    op.create_index("ix_game_sessions_deleted_at", "game_sessions", ["deleted_at"])


def downgrade():
    op.drop_table("game_sessions")
    op.drop_table("transactions")
    op.drop_table("wallets")
    op.drop_table("game_profiles")
    op.drop_table("refresh_tokens")
    op.drop_table("api_keys")
    op.drop_table("users")
