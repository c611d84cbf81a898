"""
Schema checks: the ORM metadata creates every table the API relies on,
and the initial migration stays in step with it.
"""

import pathlib
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import inspect as sa_inspect

from dealdesk.models import ActivityLog, Base, Deal, Payment, Remittance, Schedule
from dealdesk.models.schedule import PaymentStatus

TABLES = [
    "agents",
    "talent_clients",
    "talent_agents",
    "brands",
    "deals",
    "deal_clients",
    "products",
    "schedules",
    "commission_splits",
    "payments",
    "remittances",
    "deal_notes",
    "attachments",
    "activity_logs",
]


@pytest_asyncio.fixture
async def inspector(db_engine):
    """Return a dict of {table_name: [column_names]}."""
    async with db_engine.connect() as conn:
        def _inspect(sync_conn):
            insp = sa_inspect(sync_conn)
            return {
                table: [c["name"] for c in insp.get_columns(table)]
                for table in insp.get_table_names()
            }
        return await conn.run_sync(_inspect)


class TestTables:
    def test_all_tables_created(self, inspector):
        assert set(TABLES) <= set(inspector)

    def test_schedule_amount_columns(self, inspector):
        for column in ("revenue", "split_percent", "talent_amount", "commission_amount"):
            assert column in inspector["schedules"]

    def test_schedule_payment_columns(self, inspector):
        assert "invoice_id" in inspector["schedules"]
        assert "payment_status_raw" in inspector["schedules"]

    def test_split_columns(self, inspector):
        assert {"schedule_id", "position", "agent_id", "agent_name", "split_percent", "split_amount"} <= set(
            inspector["commission_splits"]
        )

    def test_attachment_payload_column(self, inspector):
        assert "data" in inspector["attachments"]

    def test_activity_metadata_column(self, inspector):
        assert "activity_metadata" in inspector["activity_logs"]


class TestPaymentStatus:
    def test_paid_wins_over_invoice(self):
        schedule = Schedule(invoice_id="INV-1", payment_status_raw=" PAID ")
        assert schedule.payment_status is PaymentStatus.PAID
        assert schedule.is_paid

    def test_invoiced(self):
        assert Schedule(invoice_id="INV-1").payment_status is PaymentStatus.INVOICED

    def test_pending(self):
        assert Schedule(invoice_id="  ").payment_status is PaymentStatus.PENDING


class TestCascades:
    def test_deal_children_cascade(self):
        for name in ("clients", "products", "notes", "attachments", "payments", "activities"):
            assert "delete-orphan" in Deal.__mapper__.relationships[name].cascade

    def test_schedule_splits_cascade(self):
        assert "delete-orphan" in Schedule.__mapper__.relationships["splits"].cascade


class TestTimestamps:
    def test_activity_log_is_append_only(self, inspector):
        assert "created_at" in inspector["activity_logs"]
        assert "updated_at" not in inspector["activity_logs"]
        assert "updated_at" not in ActivityLog.__mapper__.columns

    def test_editable_tables_track_updates(self, inspector):
        for table in ("deals", "products", "schedules", "payments"):
            assert {"created_at", "updated_at"} <= set(inspector[table])


class TestPaymentAmounts:
    def test_applied_and_unapplied(self):
        payment = Payment(payment_amount=Decimal("500.00"))
        payment.remittances = [
            Remittance(amount=Decimal("120.00")),
            Remittance(amount=Decimal("80.50")),
        ]
        assert payment.applied_amount == Decimal("200.50")
        assert payment.unapplied_amount == Decimal("299.50")

    def test_no_remittances(self):
        payment = Payment(payment_amount=Decimal("75.00"))
        assert payment.applied_amount == Decimal("0")
        assert payment.unapplied_amount == Decimal("75.00")


# ── Migration script structural checks ─────────────────────

class TestInitialMigration:
    """Validate the initial migration against the model tables (source-level checks)."""

    @pytest.fixture
    def source(self):
        fpath = pathlib.Path(__file__).resolve().parent.parent / "alembic" / "versions" / "000_initial_schema.py"
        return fpath.read_text(encoding="utf-8")

    def test_revision_id(self, source):
        assert 'revision: str = "000_initial_schema"' in source

    def test_upgrade_covers_all_tables(self, source):
        upgrade = source[source.index("def upgrade()"):source.index("def downgrade()")]
        for table in TABLES:
            assert f'"{table}"' in upgrade, f"{table} missing from upgrade"

    def test_downgrade_drops_all_tables(self, source):
        downgrade = source[source.index("def downgrade()"):]
        for table in TABLES:
            assert f'op.drop_table("{table}")' in downgrade, f"{table} missing from downgrade"

    def test_migration_matches_model_tables(self, source):
        assert set(Base.metadata.tables) == set(TABLES)
