"""Initial schema — users, communities, prompts, credits, marketplace, ledger, notes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def _user_fk(name: str = "user_id", nullable: bool = False, ondelete: str | None = "CASCADE") -> sa.Column:
    return sa.Column(
        name, UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete=ondelete), nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), unique=True, nullable=True),
        sa.Column("username", sa.String(50), unique=True, nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("profile_image_url", sa.Text, nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("social_links", sa.JSON, nullable=False, server_default="{}"),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "communities",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(120), unique=True, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column(
            "parent_community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("level", sa.Integer, nullable=True, server_default="0"),
        sa.Column("path", sa.String(1000), nullable=True),
        _user_fk("created_by", nullable=True, ondelete=None),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _created_at(),
    )
    op.create_index("ix_communities_path", "communities", ["path"])

    op.create_table(
        "user_communities",
        _id(),
        _user_fk(),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _user_fk("invited_by", nullable=True, ondelete=None),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "community_id", name="uq_user_community"),
    )

    op.create_table(
        "community_admins",
        _id(),
        _user_fk(),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk("assigned_by", nullable=True, ondelete=None),
        sa.Column("permissions", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "community_id", name="uq_community_admin"),
    )

    op.create_table(
        "community_invites",
        _id(),
        sa.Column("code", sa.String(64), unique=True, nullable=False),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk("created_by", ondelete=None),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("max_uses", sa.Integer, nullable=False, server_default="1"),
        sa.Column("current_uses", sa.Integer, nullable=False, server_default="0"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _created_at(),
    )

    op.create_table(
        "collections",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        _user_fk(),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("type", sa.String(20), nullable=False, server_default="user"),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
    )

    op.create_table(
        "prompts",
        sa.Column("id", sa.String(10), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("prompt_content", sa.Text, nullable=False),
        sa.Column("negative_prompt", sa.Text, nullable=True),
        sa.Column("tags", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("prompt_type", sa.String(50), nullable=True),
        sa.Column("intended_generator", sa.String(100), nullable=True),
        sa.Column("recommended_models", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("example_images", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("is_public", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_nsfw", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("likes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("usage_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "fork_of", sa.String(10),
            sa.ForeignKey("prompts.id", ondelete="SET NULL"), nullable=True,
        ),
        _user_fk(),
        sa.Column(
            "collection_id", UUID(as_uuid=True),
            sa.ForeignKey("collections.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column(
            "community_id", UUID(as_uuid=True),
            sa.ForeignKey("communities.id", ondelete="SET NULL"), nullable=True,
        ),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_prompts_user_id", "prompts", ["user_id"])

    for table, constraint in (
        ("prompt_likes", "uq_prompt_like"), ("prompt_favorites", "uq_prompt_favorite"),
    ):
        op.create_table(
            table,
            _id(),
            _user_fk(),
            sa.Column(
                "prompt_id", sa.String(10),
                sa.ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False,
            ),
            _created_at(),
            sa.UniqueConstraint("user_id", "prompt_id", name=constraint),
        )

    op.create_table(
        "character_presets",
        _id(),
        _user_fk(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("gender", sa.String(30), nullable=True),
        sa.Column("role", sa.String(100), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("is_favorite", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
    )

    op.create_table(
        "achievements",
        _id(),
        sa.Column("code", sa.String(50), unique=True, nullable=False),
        sa.Column("trigger", sa.String(50), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(30), nullable=False, server_default="general"),
        sa.Column("icon", sa.String(50), nullable=True),
        sa.Column("credit_reward", sa.Integer, nullable=False, server_default="0"),
        sa.Column("required_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        _created_at(),
    )

    op.create_table(
        "user_achievements",
        _id(),
        _user_fk(),
        sa.Column(
            "achievement_id", UUID(as_uuid=True),
            sa.ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("progress", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("credits_claimed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    op.create_table(
        "user_credits",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False,
        ),
        sa.Column("balance", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lifetime_earned", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lifetime_spent", sa.Integer, nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "credit_transactions",
        _id(),
        _user_fk(),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("balance_before", sa.Integer, nullable=False),
        sa.Column("balance_after", sa.Integer, nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("reference_id", sa.String(64), nullable=True),
        sa.Column("reference_type", sa.String(30), nullable=True),
        _created_at(),
    )
    op.create_index("ix_credit_transactions_user_id", "credit_transactions", ["user_id"])

    op.create_table(
        "daily_rewards",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False,
        ),
        sa.Column("last_claim_date", sa.Date, nullable=True),
        sa.Column("current_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_claims", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "seller_profiles",
        _id(),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False,
        ),
        sa.Column("stripe_account_id", sa.String(100), nullable=True),
        sa.Column("onboarding_status", sa.String(20), nullable=False, server_default="not_started"),
        sa.Column("payout_method", sa.String(20), nullable=False, server_default="stripe"),
        sa.Column("paypal_email", sa.String(255), nullable=True),
        sa.Column("total_sales", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_revenue_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("commission_rate", sa.Integer, nullable=True),
        _created_at(),
    )

    op.create_table(
        "marketplace_listings",
        _id(),
        sa.Column(
            "prompt_id", sa.String(10),
            sa.ForeignKey("prompts.id", ondelete="CASCADE"), unique=True, nullable=False,
        ),
        _user_fk("seller_id"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price_cents", sa.Integer, nullable=True),
        sa.Column("credit_price", sa.Integer, nullable=True),
        sa.Column("accepts_money", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("accepts_credits", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("preview_percentage", sa.Integer, nullable=False, server_default="20"),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("sales_count", sa.Integer, nullable=False, server_default="0"),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "marketplace_orders",
        _id(),
        sa.Column("order_number", sa.String(40), unique=True, nullable=False),
        _user_fk("buyer_id", ondelete=None),
        _user_fk("seller_id", ondelete=None),
        sa.Column(
            "listing_id", UUID(as_uuid=True),
            sa.ForeignKey("marketplace_listings.id"), nullable=False,
        ),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("stripe_payment_intent_id", sa.String(100), nullable=True, index=True),
        sa.Column("amount_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("credit_amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("platform_fee_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("seller_payout_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "marketplace_disputes",
        _id(),
        sa.Column(
            "order_id", UUID(as_uuid=True),
            sa.ForeignKey("marketplace_orders.id", ondelete="CASCADE"),
            unique=True, nullable=False,
        ),
        sa.Column("initiated_by", sa.String(20), nullable=False, server_default="buyer"),
        _user_fk("initiator_id", ondelete=None),
        _user_fk("respondent_id", ondelete=None),
        sa.Column("status", sa.String(20), nullable=False, server_default="open"),
        sa.Column("reason", sa.String(40), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("resolution", sa.Text, nullable=True),
        sa.Column("refund_amount_cents", sa.Integer, nullable=True),
        sa.Column("credit_refund_amount", sa.Integer, nullable=True),
        _user_fk("resolved_by", nullable=True, ondelete=None),
        sa.Column("escalated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )

    op.create_table(
        "dispute_messages",
        _id(),
        sa.Column(
            "dispute_id", UUID(as_uuid=True),
            sa.ForeignKey("marketplace_disputes.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk("sender_id", ondelete=None),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("is_admin_message", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
    )

    op.create_table(
        "payout_batches",
        _id(),
        sa.Column("batch_number", sa.String(60), unique=True, nullable=False),
        sa.Column("payout_method", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="processing"),
        sa.Column("total_amount_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_payouts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("successful_payouts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("failed_payouts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("error_log", sa.JSON, nullable=False, server_default="[]"),
        _created_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "transaction_ledger",
        _id(),
        sa.Column(
            "order_id", UUID(as_uuid=True),
            sa.ForeignKey("marketplace_orders.id"), nullable=True, index=True,
        ),
        sa.Column("transaction_type", sa.String(20), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        _user_fk("from_user_id", nullable=True, ondelete=None),
        _user_fk("to_user_id", nullable=True, ondelete=None),
        sa.Column("amount_cents", sa.Integer, nullable=False),
        sa.Column("commission_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("net_amount_cents", sa.Integer, nullable=False, server_default="0"),
        sa.Column("payment_method", sa.String(20), nullable=True),
        sa.Column("stripe_payment_intent_id", sa.String(100), nullable=True),
        sa.Column("stripe_transfer_id", sa.String(100), nullable=True),
        sa.Column("stripe_payout_id", sa.String(100), nullable=True, index=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "payout_batch_id", UUID(as_uuid=True),
            sa.ForeignKey("payout_batches.id"), nullable=True, index=True,
        ),
        sa.Column("failure_reason", sa.Text, nullable=True),
        sa.Column("metadata", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )

    op.create_table(
        "platform_settings",
        sa.Column("key", sa.String(100), primary_key=True),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "notes",
        _id(),
        _user_fk(),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("type", sa.String(20), nullable=False, server_default="text"),
        sa.Column("folder", sa.String(255), nullable=False, server_default="Unsorted"),
        sa.Column("tags", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("color", sa.String(7), nullable=True),
        sa.Column("is_pinned", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_archived", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        _created_at(),
        sa.Column("last_modified", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notes_user_id", "notes", ["user_id"])


def downgrade() -> None:
    for table in (
        "notes", "platform_settings", "transaction_ledger", "payout_batches",
        "dispute_messages", "marketplace_disputes", "marketplace_orders",
        "marketplace_listings", "seller_profiles", "daily_rewards",
        "credit_transactions", "user_credits", "user_achievements", "achievements",
        "character_presets", "prompt_favorites", "prompt_likes", "prompts",
        "collections", "community_invites", "community_admins", "user_communities",
        "communities", "users",
    ):
        op.drop_table(table)
