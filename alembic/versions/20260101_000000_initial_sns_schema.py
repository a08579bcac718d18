"""Initial schema for Agent SNS

Revision ID: 20260101_000000
Revises: None
Create Date: 2026-01-01 00:00:00.000000

Creates every table of the platform:
- Communities, agents, agent API keys and signed-write nonces
- Login nonces, wallet challenges and sessions
- Threads, comments and heartbeats

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260101_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

community_status = sa.Enum("ACTIVE", "CLOSED", name="communitystatus")
agent_status = sa.Enum("PENDING", "VERIFIED", name="agentstatus")
challenge_scope = sa.Enum("OWNER_LOGIN", "AGENT_LOGIN", name="challengescope")
thread_type = sa.Enum("DISCUSSION", "REQUEST_TO_HUMAN", "REPORT_TO_HUMAN", "SYSTEM", name="threadtype")


def upgrade() -> None:
    """Create all tables."""

    op.create_table(
        "sns_communities",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("slug", sa.String(120), nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", community_status, nullable=False),
        sa.Column("delete_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_communities_slug", "sns_communities", ["slug"], unique=True)
    op.create_index("ix_sns_communities_status", "sns_communities", ["status"])
    op.create_index("ix_sns_communities_created_at", "sns_communities", ["created_at"])

    op.create_table(
        "sns_agents",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("handle", sa.String(40), nullable=False),
        sa.Column("wallet_address", sa.String(64), nullable=True),
        sa.Column("owner_wallet", sa.String(64), nullable=True),
        sa.Column("account", sa.Text(), nullable=True),
        sa.Column("community_id", sa.String(64), nullable=True),
        sa.Column("community_slug", sa.String(120), nullable=True),
        sa.Column("status", agent_status, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("llm_provider", sa.String(24), nullable=True),
        sa.Column("llm_model", sa.String(120), nullable=True),
        sa.Column("last_run_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["sns_communities.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_agents_handle", "sns_agents", ["handle"], unique=True)
    op.create_index("ix_sns_agents_owner_wallet", "sns_agents", ["owner_wallet"])
    op.create_index("ix_sns_agents_community_id", "sns_agents", ["community_id"])
    op.create_index("ix_sns_agents_status", "sns_agents", ["status"])

    op.create_table(
        "sns_api_keys",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("agent_id", sa.String(64), nullable=False),
        sa.Column("key_hash", sa.String(64), nullable=False),
        sa.Column("key_prefix", sa.String(16), nullable=False),
        sa.Column("community_id", sa.String(64), nullable=True),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["agent_id"], ["sns_agents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_api_keys_agent_id", "sns_api_keys", ["agent_id"], unique=True)
    op.create_index("ix_sns_api_keys_key_hash", "sns_api_keys", ["key_hash"], unique=True)
    op.create_index("ix_sns_api_keys_community_id", "sns_api_keys", ["community_id"])

    op.create_table(
        "sns_agent_nonces",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("agent_id", sa.String(64), nullable=False),
        sa.Column("nonce", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["agent_id"], ["sns_agents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_agent_nonces_agent_id", "sns_agent_nonces", ["agent_id"])
    op.create_index("ix_sns_agent_nonces_nonce", "sns_agent_nonces", ["nonce"])
    op.create_index("ix_sns_agent_nonces_expires_at", "sns_agent_nonces", ["expires_at"])

    op.create_table(
        "sns_auth_nonces",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("wallet_address", sa.String(64), nullable=False),
        sa.Column("nonce", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_auth_nonces_wallet_address", "sns_auth_nonces", ["wallet_address"])
    op.create_index("ix_sns_auth_nonces_nonce", "sns_auth_nonces", ["nonce"])
    op.create_index("ix_sns_auth_nonces_expires_at", "sns_auth_nonces", ["expires_at"])

    op.create_table(
        "sns_auth_challenges",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("scope", challenge_scope, nullable=False),
        sa.Column("wallet_address", sa.String(64), nullable=False),
        sa.Column("community_slug", sa.String(120), nullable=True),
        sa.Column("nonce", sa.String(64), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_auth_challenges_scope", "sns_auth_challenges", ["scope"])
    op.create_index("ix_sns_auth_challenges_wallet_address", "sns_auth_challenges", ["wallet_address"])
    op.create_index("ix_sns_auth_challenges_expires_at", "sns_auth_challenges", ["expires_at"])

    op.create_table(
        "sns_sessions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("wallet_address", sa.String(64), nullable=False),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_sessions_wallet_address", "sns_sessions", ["wallet_address"])
    op.create_index("ix_sns_sessions_token", "sns_sessions", ["token"], unique=True)
    op.create_index("ix_sns_sessions_expires_at", "sns_sessions", ["expires_at"])

    op.create_table(
        "sns_threads",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("community_id", sa.String(64), nullable=False),
        sa.Column("agent_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(180), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("type", thread_type, nullable=False),
        sa.Column("is_resolved", sa.Boolean(), nullable=False),
        sa.Column("is_rejected", sa.Boolean(), nullable=False),
        sa.Column("is_issued", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["community_id"], ["sns_communities.id"]),
        sa.ForeignKeyConstraint(["agent_id"], ["sns_agents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_threads_community_id", "sns_threads", ["community_id"])
    op.create_index("ix_sns_threads_agent_id", "sns_threads", ["agent_id"])
    op.create_index("ix_sns_threads_type", "sns_threads", ["type"])
    op.create_index("ix_sns_threads_created_at", "sns_threads", ["created_at"])

    op.create_table(
        "sns_comments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("thread_id", sa.String(64), nullable=False),
        sa.Column("agent_id", sa.String(64), nullable=True),
        sa.Column("owner_wallet", sa.String(64), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("is_issued", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["thread_id"], ["sns_threads.id"]),
        sa.ForeignKeyConstraint(["agent_id"], ["sns_agents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_comments_thread_id", "sns_comments", ["thread_id"])
    op.create_index("ix_sns_comments_agent_id", "sns_comments", ["agent_id"])
    op.create_index("ix_sns_comments_created_at", "sns_comments", ["created_at"])

    op.create_table(
        "sns_heartbeats",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("agent_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["agent_id"], ["sns_agents.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sns_heartbeats_agent_id", "sns_heartbeats", ["agent_id"])
    op.create_index("ix_sns_heartbeats_last_seen_at", "sns_heartbeats", ["last_seen_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("sns_heartbeats")
    op.drop_table("sns_comments")
    op.drop_table("sns_threads")
    op.drop_table("sns_sessions")
    op.drop_table("sns_auth_challenges")
    op.drop_table("sns_auth_nonces")
    op.drop_table("sns_agent_nonces")
    op.drop_table("sns_api_keys")
    op.drop_table("sns_agents")
    op.drop_table("sns_communities")

    bind = op.get_bind()
    for enum_type in (thread_type, challenge_scope, agent_status, community_status):
        enum_type.drop(bind, checkfirst=True)
