"""
Tests for DealDeskClient against the in-process app, and for the full
edit -> commit flow of the split editor through the real API.
"""

from decimal import Decimal

import httpx
import pytest

from dealdesk.client import DealDeskClient
from dealdesk.exceptions import ApiError, AttachmentTooLargeError
from dealdesk.models import PaymentStatus
from dealdesk.services.split_editor import SplitEditor
from dealdesk.services.splits import Split

D = Decimal


class TestClient:
    @pytest.mark.asyncio
    async def test_get_deal(self, api_client, seeded):
        deal = await api_client.get_deal(seeded.deal_id)
        assert deal.name == "Acme x Tara 2026"
        assert deal.owner.name == "Olivia Owner"
        assert {s.id for s in deal.schedules} == {seeded.pending_id, seeded.paid_id}
        paid = next(s for s in deal.schedules if s.id == seeded.paid_id)
        assert paid.payment_status is PaymentStatus.PAID
        assert paid.commission_amount == D("100")

    @pytest.mark.asyncio
    async def test_not_found_raises(self, api_client, seeded):
        with pytest.raises(ApiError) as exc_info:
            await api_client.get_deal(9999)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Deal not found"

    @pytest.mark.asyncio
    async def test_update_deal(self, api_client, seeded):
        deal = await api_client.update_deal(seeded.deal_id, industry="Sports", company_reference="REF-9")
        assert deal.industry == "Sports"
        assert deal.company_reference == "REF-9"

    @pytest.mark.asyncio
    async def test_replace_and_get_splits(self, api_client, seeded):
        saved = await api_client.replace_splits(
            seeded.pending_id,
            [Split("Alice Agent", D("60"), D("0"), seeded.alice_id), Split("Unassigned", D("40"), D("0"))],
        )
        assert saved == [
            Split("Alice Agent", D("60.0"), D("120.0"), seeded.alice_id),
            Split("Unassigned", D("40.0"), D("80.0"), None),
        ]
        assert await api_client.get_splits(seeded.pending_id) == saved

    @pytest.mark.asyncio
    async def test_schedules_by_deal(self, api_client, seeded):
        schedules = await api_client.get_schedules_by_deal(seeded.deal_id)
        assert [s.id for s in schedules] == [seeded.paid_id, seeded.pending_id]
        assert (await api_client.get_schedule(seeded.pending_id)).revenue == D("1000")

    @pytest.mark.asyncio
    async def test_activities_page(self, api_client, seeded):
        await api_client.update_deal(seeded.deal_id, stage="Won")
        page = await api_client.get_activities(seeded.deal_id, limit=10)
        assert page.total == 1
        assert page.has_more is False
        assert page.items[0].activity_type == "DEAL_UPDATED"

    @pytest.mark.asyncio
    async def test_export(self, api_client, seeded):
        export = await api_client.export_deal(seeded.deal_id, format="csv", sections={"deal_info": True})
        assert export.filename == "Acme_x_Tara_2026_export.csv"
        assert export.content.startswith(b"Deal Information")

    @pytest.mark.asyncio
    async def test_attachment_round_trip(self, api_client, seeded):
        meta = await api_client.upload_attachment(seeded.deal_id, "brief.txt", b"hello", file_type="text/plain")
        downloaded = await api_client.download_attachment(meta.id)
        assert downloaded.content == b"hello"
        assert downloaded.file_type == "text/plain"
        await api_client.delete_attachment(meta.id)
        with pytest.raises(ApiError):
            await api_client.download_attachment(meta.id)

    @pytest.mark.asyncio
    async def test_attachment_cap_checked_locally(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json={"success": True, "data": {}})

        async with DealDeskClient(
            base_url="http://test",
            transport=httpx.MockTransport(handler),
            max_attachment_bytes=4,
        ) as client:
            with pytest.raises(AttachmentTooLargeError):
                await client.upload_attachment(1, "big.bin", b"12345")
        assert calls == []

    @pytest.mark.asyncio
    async def test_search(self, api_client, seeded):
        results = await api_client.search("tara")
        assert {r.type for r in results} == {"talent", "deal"}

    @pytest.mark.asyncio
    async def test_delete_deal(self, api_client, seeded):
        await api_client.delete_deal(seeded.deal_id)
        with pytest.raises(ApiError):
            await api_client.get_deal(seeded.deal_id)

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with DealDeskClient(base_url="http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_deal(1)
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_error_body_not_an_object(self):
        def handler(request):
            return httpx.Response(502, json=["bad gateway"])

        async with DealDeskClient(base_url="http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_deal(1)
        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == '["bad gateway"]'

    @pytest.mark.asyncio
    async def test_error_body_plain_text(self):
        def handler(request):
            return httpx.Response(500, text="Internal Server Error")

        async with DealDeskClient(base_url="http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.delete_deal(1)
        assert exc_info.value.detail == "Internal Server Error"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", ["just a string", [1, 2, 3], 42])
    async def test_success_body_not_an_envelope(self, payload):
        def handler(request):
            return httpx.Response(200, json=payload)

        async with DealDeskClient(base_url="http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_schedule(1)
            assert exc_info.value.status_code == 200
            with pytest.raises(ApiError):
                await client.get_activities(1)

    @pytest.mark.asyncio
    async def test_success_body_not_json(self):
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        async with DealDeskClient(base_url="http://test", transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.search("x")
        assert exc_info.value.detail == "<html>maintenance</html>"

    @pytest.mark.asyncio
    async def test_base_url_gets_api_suffix(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json={"success": True, "data": []})

        async with DealDeskClient(base_url="http://crm.local/", transport=httpx.MockTransport(handler)) as client:
            await client.search("x")
        assert seen == ["http://crm.local/api/search?q=x"]


class TestEditorThroughApi:
    @pytest.mark.asyncio
    async def test_edit_save_persists_with_remainder(self, api_client, seeded):
        deal = await api_client.get_deal(seeded.deal_id)
        editor = SplitEditor(deal, api_client)

        # seeded from the talent's two agents
        assert [s.agent_name for s in editor.splits(seeded.pending_id)] == ["Alice Agent", "Bob Booker"]

        editor.begin_edit(seeded.pending_id, 1)
        editor.update(seeded.pending_id, 1, "splitPercent", 25)
        saved = await editor.save(seeded.pending_id)

        assert [(s.agent_name, s.split_percent, s.split_amount) for s in saved] == [
            ("Alice Agent", D("50.0"), D("100.0")),
            ("Bob Booker", D("25.0"), D("50.0")),
            ("Unassigned", D("25.0"), D("50.0")),
        ]
        persisted = await api_client.get_splits(seeded.pending_id)
        assert [s.agent_name for s in persisted] == ["Alice Agent", "Bob Booker", "Unassigned"]

    @pytest.mark.asyncio
    async def test_backend_lock_surfaces_as_failed_save(self, api_client, seeded):
        deal = await api_client.get_deal(seeded.deal_id)
        editor = SplitEditor(deal, api_client, enforce_paid_lock=False)

        editor.begin_edit(seeded.paid_id, 0)
        editor.update(seeded.paid_id, 0, "splitPercent", 50)
        assert await editor.save(seeded.paid_id) is None
        assert editor.last_error.status_code == 409
