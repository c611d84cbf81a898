"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create all initial tables."""

    # Agents table
    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("division", sa.String(100), nullable=True),
        sa.Column("cost_center", sa.String(50), nullable=True, comment="Workday cost center code"),
        *_timestamps(),
    )
    op.create_index("ix_agents_name", "agents", ["name"])
    op.create_index("ix_agents_cost_center", "agents", ["cost_center"])

    # Talent clients table
    op.create_table(
        "talent_clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("sport", sa.String(100), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("cost_center", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_talent_clients_name", "talent_clients", ["name"])
    op.create_index("ix_talent_clients_cost_center", "talent_clients", ["cost_center"])

    # Talent <-> agent links
    op.create_table(
        "talent_agents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("talent_client_id", sa.Integer(), sa.ForeignKey("talent_clients.id", ondelete="CASCADE"), nullable=False),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_primary", sa.Boolean(), default=False, nullable=False),
        sa.Column("role", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_talent_agents_talent_client_id", "talent_agents", ["talent_client_id"])
    op.create_index("ix_talent_agents_agent_id", "talent_agents", ["agent_id"])

    # Brands table
    op.create_table(
        "brands",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("legal_name", sa.String(255), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("status", sa.Enum("ACTIVE", "INACTIVE", "PROSPECT", name="brandstatus"), nullable=False),
        sa.Column("type", sa.Enum("BRAND", "AGENCY", name="brandtype"), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_brands_name", "brands", ["name"])

    # Deals table
    op.create_table(
        "deals",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("stage", sa.String(100), nullable=True),
        sa.Column("stage_last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("close_date", sa.Date(), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("split_percent", sa.Numeric(7, 2), nullable=True, comment="Deal-level commission percent"),
        sa.Column("talent_marketing_fee_percent", sa.Numeric(7, 2), nullable=True),
        sa.Column("division", sa.String(100), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("account_name", sa.String(255), nullable=True),
        sa.Column("owner_cost_center", sa.String(50), nullable=True, comment="Owner's Workday cost center"),
        sa.Column("company_reference", sa.String(100), nullable=True),
        sa.Column("licence_holder_name", sa.String(255), nullable=True),
        sa.Column("contract_start_date", sa.Date(), nullable=True),
        sa.Column("contract_end_date", sa.Date(), nullable=True),
        sa.Column("contract_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("clm_contract_number", sa.String(100), nullable=True),
        sa.Column("salesforce_id", sa.String(50), nullable=True),
        sa.Column("workday_project_id", sa.String(50), nullable=True),
        sa.Column("brand_id", sa.Integer(), sa.ForeignKey("brands.id"), nullable=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_deals_name", "deals", ["name"])
    op.create_index("ix_deals_stage", "deals", ["stage"])
    op.create_index("ix_deals_owner_cost_center", "deals", ["owner_cost_center"])
    op.create_index("ix_deals_brand_id", "deals", ["brand_id"])
    op.create_index("ix_deals_owner_id", "deals", ["owner_id"])

    # Deal <-> talent client links
    op.create_table(
        "deal_clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("talent_client_id", sa.Integer(), sa.ForeignKey("talent_clients.id"), nullable=False),
        sa.Column("split_percent", sa.Numeric(7, 2), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_deal_clients_deal_id", "deal_clients", ["deal_id"])
    op.create_index("ix_deal_clients_talent_client_id", "deal_clients", ["talent_client_id"])

    # Products table
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("product_code", sa.String(50), nullable=True, comment="Cost center code of the product"),
        sa.Column("unit_price", sa.Numeric(14, 2), nullable=True),
        sa.Column("total_price", sa.Numeric(14, 2), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("deliverables", sa.Text(), nullable=True),
        sa.Column("workday_project_id", sa.String(50), nullable=True),
        sa.Column("workday_project_name", sa.String(255), nullable=True),
        sa.Column("workday_project_status", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_products_deal_id", "products", ["deal_id"])

    # Schedules table
    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(50), nullable=True),
        sa.Column("schedule_date", sa.Date(), nullable=True),
        sa.Column("schedule_status", sa.String(50), nullable=False, server_default="DRAFT"),
        sa.Column("billable", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("revenue", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("split_percent", sa.Numeric(7, 2), nullable=False, server_default="0", comment="Share of revenue retained as commission"),
        sa.Column("talent_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("commission_amount", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("invoice_id", sa.String(50), nullable=True),
        sa.Column("invoice_reference_id", sa.String(50), nullable=True),
        sa.Column("payment_status_raw", sa.String(50), nullable=True, comment="Payment status as reported by Workday"),
        sa.Column("payment_term", sa.String(50), nullable=True),
        sa.Column("po_number", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_schedules_product_id", "schedules", ["product_id"])
    op.create_index("ix_schedules_deal_id", "schedules", ["deal_id"])

    # Commission splits table
    op.create_table(
        "commission_splits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("agent_id", sa.Integer(), sa.ForeignKey("agents.id", ondelete="SET NULL"), nullable=True),
        sa.Column("agent_name", sa.String(255), nullable=False, comment="Free-text recipient; need not match a known agent"),
        sa.Column("split_percent", sa.Numeric(7, 2), nullable=False),
        sa.Column("split_amount", sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_commission_splits_schedule_id", "commission_splits", ["schedule_id"])

    # Payments table
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("payment_number", sa.String(50), nullable=True),
        sa.Column("payment_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("payment_status", sa.String(50), nullable=True),
        sa.Column("payment_method", sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_payments_deal_id", "payments", ["deal_id"])

    # Remittances table
    op.create_table(
        "remittances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("payment_id", sa.Integer(), sa.ForeignKey("payments.id", ondelete="CASCADE"), nullable=False),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True),
        sa.Column("invoice_id", sa.String(50), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_remittances_payment_id", "remittances", ["payment_id"])
    op.create_index("ix_remittances_schedule_id", "remittances", ["schedule_id"])

    # Deal notes table
    op.create_table(
        "deal_notes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column(
            "category",
            sa.Enum("GENERAL", "BUSINESS", "PERSONAL", "FOLLOW_UP", "MEETING", "EMAIL", name="notecategory"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="OPEN"),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_deal_notes_deal_id", "deal_notes", ["deal_id"])

    # Attachments table
    op.create_table(
        "attachments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("data", sa.LargeBinary(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_attachments_deal_id", "attachments", ["deal_id"])

    # Activity feed table
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("deal_id", sa.Integer(), sa.ForeignKey("deals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("activity_type", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("activity_metadata", sa.JSON(), nullable=True),
        sa.Column("actor_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_activity_logs_deal_id", "activity_logs", ["deal_id"])
    op.create_index("ix_activity_logs_activity_type", "activity_logs", ["activity_type"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("activity_logs")
    op.drop_table("attachments")
    op.drop_table("deal_notes")
    op.drop_table("remittances")
    op.drop_table("payments")
    op.drop_table("commission_splits")
    op.drop_table("schedules")
    op.drop_table("products")
    op.drop_table("deal_clients")
    op.drop_table("deals")
    op.drop_table("brands")
    op.drop_table("talent_agents")
    op.drop_table("talent_clients")
    op.drop_table("agents")

    op.execute("DROP TYPE IF EXISTS notecategory")
    op.execute("DROP TYPE IF EXISTS brandtype")
    op.execute("DROP TYPE IF EXISTS brandstatus")
