"""
Tests for the payment endpoints: per-deal listing and single payment
detail with remittances.
"""

from datetime import date
from decimal import Decimal

import pytest

from dealdesk.models import Payment


class TestDealPayments:
    @pytest.mark.asyncio
    async def test_list_with_remittances(self, http_client, seeded):
        response = await http_client.get(f"/api/deals/{seeded.deal_id}/payments")
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == 1
        payment = data[0]
        assert payment["paymentNumber"] == "PAY-1"
        assert payment["paymentAmount"] == 500.0
        assert payment["appliedAmount"] == 500.0
        assert payment["unappliedAmount"] == 0.0
        assert [(r["scheduleId"], r["invoiceId"], r["amount"]) for r in payment["remittances"]] == [
            (seeded.paid_id, "INV-001", 500.0)
        ]

    @pytest.mark.asyncio
    async def test_latest_first_undated_last(self, http_client, api_sessionmaker, seeded):
        async with api_sessionmaker() as db:
            db.add_all(
                [
                    Payment(
                        deal_id=seeded.deal_id,
                        payment_number="PAY-2",
                        payment_amount=Decimal("100.00"),
                        payment_date=date(2026, 2, 1),
                    ),
                    Payment(
                        deal_id=seeded.deal_id,
                        payment_number="PAY-3",
                        payment_amount=Decimal("50.00"),
                        payment_date=date(2026, 4, 1),
                    ),
                ]
            )
            await db.commit()

        data = (await http_client.get(f"/api/deals/{seeded.deal_id}/payments")).json()["data"]
        assert [p["paymentNumber"] for p in data] == ["PAY-3", "PAY-2", "PAY-1"]
        assert data[0]["remittances"] == []
        assert data[0]["unappliedAmount"] == 50.0

    @pytest.mark.asyncio
    async def test_unknown_deal(self, http_client, seeded):
        assert (await http_client.get("/api/deals/9999/payments")).status_code == 404


class TestGetPayment:
    @pytest.mark.asyncio
    async def test_get(self, http_client, seeded):
        body = (await http_client.get(f"/api/payments/{seeded.payment_id}")).json()
        assert body["success"] is True
        assert body["data"]["dealId"] == seeded.deal_id
        assert body["data"]["remittances"][0]["paymentId"] == seeded.payment_id

    @pytest.mark.asyncio
    async def test_missing(self, http_client, seeded):
        response = await http_client.get("/api/payments/9999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Payment not found"

    @pytest.mark.asyncio
    async def test_through_client(self, api_client, seeded):
        payments = await api_client.get_payments(seeded.deal_id)
        assert [p.id for p in payments] == [seeded.payment_id]

        payment = await api_client.get_payment(seeded.payment_id)
        assert payment.applied_amount == Decimal("500")
        assert payment.remittances[0].schedule_id == seeded.paid_id
