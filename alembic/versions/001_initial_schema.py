"""Initial schema: vaults, credentials, subscriptions, tags, settings and AI tables.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _vault_fk() -> sa.Column:
    return sa.Column(
        "vault_id", sa.String(36),
        sa.ForeignKey("vaults.id", ondelete="CASCADE"), nullable=False,
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def upgrade() -> None:
    op.create_table(
        "vaults",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("key_hash", sa.String(64), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_vaults_key_hash", "vaults", ["key_hash"], unique=True)

    op.create_table(
        "credentials",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password", sa.Text, nullable=False, server_default=""),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_credentials_vault_id", "credentials", ["vault_id"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("cost", sa.Float, nullable=False),
        sa.Column("currency", sa.String(10), nullable=False, server_default="CNY"),
        sa.Column("frequency_amount", sa.Integer, nullable=False, server_default="1"),
        sa.Column("frequency_unit", sa.String(20), nullable=False, server_default="MONTHS"),
        sa.Column("renewal_date", sa.String(10), nullable=False, server_default=""),
        sa.Column("start_date", sa.String(10), nullable=False, server_default=""),
        sa.Column("category", sa.String(100), nullable=False, server_default="Lifestyle"),
        sa.Column("tag_ids", sa.String(2000), nullable=False, server_default=""),
        sa.Column("credential_id", sa.String(36), nullable=True),
        sa.Column("website", sa.String(500), nullable=False, server_default=""),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_subscriptions_vault_id", "subscriptions", ["vault_id"])

    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("color", sa.String(20), nullable=False, server_default="#3B82F6"),
        _timestamp("created_at"),
    )
    op.create_index("ix_tags_vault_id", "tags", ["vault_id"])

    op.create_table(
        "notification_settings",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("days_before_list", sa.String(100), nullable=False, server_default="1,3,7"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("vault_id"),
    )

    op.create_table(
        "ai_configs",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("base_url", sa.String(500), nullable=False, server_default=""),
        sa.Column("api_key", sa.Text, nullable=False, server_default=""),
        sa.Column("model", sa.String(200), nullable=False, server_default=""),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.UniqueConstraint("vault_id"),
    )

    op.create_table(
        "ai_chats",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        _timestamp("created_at"),
    )
    op.create_index("ix_ai_chats_vault_id", "ai_chats", ["vault_id"])
    op.create_index("ix_ai_chats_created_at", "ai_chats", ["created_at"])

    op.create_table(
        "ai_reports",
        sa.Column("id", sa.String(36), primary_key=True),
        _vault_fk(),
        sa.Column("total_monthly", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_yearly", sa.Float, nullable=False, server_default="0"),
        sa.Column("categories", sa.Text, nullable=False, server_default="[]"),
        sa.Column("insights", sa.Text, nullable=False, server_default="[]"),
        _timestamp("created_at"),
    )
    op.create_index("ix_ai_reports_vault_id", "ai_reports", ["vault_id"])
    op.create_index("ix_ai_reports_created_at", "ai_reports", ["created_at"])


def downgrade() -> None:
    op.drop_table("ai_reports")
    op.drop_table("ai_chats")
    op.drop_table("ai_configs")
    op.drop_table("notification_settings")
    op.drop_table("tags")
    op.drop_table("subscriptions")
    op.drop_table("credentials")
    op.drop_table("vaults")
