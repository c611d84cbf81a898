"""
Tests for the deal endpoints: list, detail, partial update, cascade delete, notes.
"""

import pytest
from sqlalchemy import func, select

from dealdesk.models import (
    ActivityLog,
    CommissionSplit,
    Deal,
    DealNote,
    Payment,
    Product,
    Remittance,
    Schedule,
    TalentClient,
)


async def _count(api_sessionmaker, model):
    async with api_sessionmaker() as db:
        return await db.scalar(select(func.count()).select_from(model))


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, http_client):
        response = await http_client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["service"] == "dealdesk"

    @pytest.mark.asyncio
    async def test_live(self, http_client):
        response = await http_client.get("/api/health/live")
        assert response.json() == {"status": "alive"}


class TestListDeals:
    @pytest.mark.asyncio
    async def test_envelope_and_meta(self, http_client, seeded):
        body = (await http_client.get("/api/deals")).json()
        assert body["success"] is True
        assert body["meta"] == {"total": 1, "page": 1, "limit": 20, "pages": 1}
        assert body["data"][0]["name"] == "Acme x Tara 2026"
        assert body["data"][0]["brand"]["name"] == "Acme Sportswear"

    @pytest.mark.asyncio
    async def test_search_matches_brand(self, http_client, seeded):
        body = (await http_client.get("/api/deals", params={"search": "acme"})).json()
        assert body["meta"]["total"] == 1

    @pytest.mark.asyncio
    async def test_cost_center_group_is_prefix(self, http_client, seeded):
        hit = (await http_client.get("/api/deals", params={"costCenterGroup": "CC-100"})).json()
        miss = (await http_client.get("/api/deals", params={"costCenterGroup": "CC-200"})).json()
        assert hit["meta"]["total"] == 1
        assert miss["meta"]["total"] == 0

    @pytest.mark.asyncio
    async def test_stage_filter(self, http_client, seeded):
        body = (await http_client.get("/api/deals", params={"stage": "Closed Won"})).json()
        assert body["data"] == []

    @pytest.mark.asyncio
    async def test_status_and_division_filters(self, http_client, seeded):
        hit = (await http_client.get("/api/deals", params={"status": "Open"})).json()
        miss = (await http_client.get("/api/deals", params={"status": "Closed"})).json()
        assert hit["meta"]["total"] == 1
        assert miss["meta"]["total"] == 0

        body = (await http_client.get("/api/deals", params={"division": "Music"})).json()
        assert body["data"] == []


class TestCreateDeal:
    @pytest.mark.asyncio
    async def test_create_with_clients(self, http_client, api_sessionmaker, seeded):
        response = await http_client.post(
            "/api/deals",
            json={
                "name": "  Acme x Tara 2027  ",
                "brandId": seeded.brand_id,
                "ownerId": seeded.owner_id,
                "splitPercent": 25,
                "talentClientIds": [seeded.talent_id, seeded.talent_id],
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Acme x Tara 2027"
        assert data["brand"]["name"] == "Acme Sportswear"
        assert data["ownerCostCenter"] == "CC-100-ATH"
        assert data["splitPercent"] == 25.0
        assert [c["talentClientId"] for c in data["clients"]] == [seeded.talent_id]
        assert data["products"] == []

        feed = (await http_client.get(f"/api/deals/{data['id']}/activities")).json()["data"]
        assert feed[0]["activityType"] == "DEAL_CREATED"
        assert await _count(api_sessionmaker, Deal) == 2

    @pytest.mark.asyncio
    async def test_explicit_cost_center_kept(self, http_client, seeded):
        data = (
            await http_client.post(
                "/api/deals",
                json={"name": "Side deal", "ownerId": seeded.owner_id, "ownerCostCenter": "CC-900"},
            )
        ).json()["data"]
        assert data["ownerCostCenter"] == "CC-900"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "field, value",
        [("brandId", 9999), ("ownerId", 9999), ("talentClientIds", [9999])],
    )
    async def test_unknown_reference(self, http_client, api_sessionmaker, seeded, field, value):
        response = await http_client.post("/api/deals", json={"name": "Ghost", field: value})
        assert response.status_code == 404
        assert await _count(api_sessionmaker, Deal) == 1

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, http_client, seeded):
        response = await http_client.post("/api/deals", json={"name": "   "})
        assert response.status_code == 422


class TestGetDeal:
    @pytest.mark.asyncio
    async def test_full_graph(self, http_client, seeded):
        response = await http_client.get(f"/api/deals/{seeded.deal_id}")
        assert response.status_code == 200
        deal = response.json()["data"]

        assert deal["owner"]["name"] == "Olivia Owner"
        agents = deal["clients"][0]["talentClient"]["agents"]
        assert {a["agent"]["name"] for a in agents} == {"Alice Agent", "Bob Booker"}

        schedules = {s["id"]: s for s in deal["products"][0]["schedules"]}
        assert schedules[seeded.pending_id]["paymentStatus"] == "pending"
        assert schedules[seeded.pending_id]["commissionAmount"] == 200.0
        assert schedules[seeded.paid_id]["paymentStatus"] == "paid"
        assert schedules[seeded.paid_id]["splits"][0]["agentName"] == "Olivia Owner"
        assert deal["products"][0]["totalCommission"] == 300.0

    @pytest.mark.asyncio
    async def test_not_found(self, http_client, seeded):
        response = await http_client.get("/api/deals/9999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Deal not found"


class TestUpdateDeal:
    @pytest.mark.asyncio
    async def test_partial_update_records_activity(self, http_client, seeded):
        response = await http_client.put(
            f"/api/deals/{seeded.deal_id}",
            json={"stage": "Contracted", "clmContractNumber": "CLM-42", "contractEndDate": "2026-12-31"},
        )
        assert response.status_code == 200
        deal = response.json()["data"]
        assert deal["stage"] == "Contracted"
        assert deal["clmContractNumber"] == "CLM-42"
        assert deal["contractEndDate"] == "2026-12-31"
        assert deal["industry"] is None

        feed = (await http_client.get(f"/api/deals/{seeded.deal_id}/activities")).json()
        entry = feed["data"][0]
        assert entry["activityType"] == "DEAL_UPDATED"
        assert set(entry["metadata"]["changedFields"]) == {"stage", "clm_contract_number", "contract_end_date"}

    @pytest.mark.asyncio
    async def test_no_change_no_activity(self, http_client, seeded):
        await http_client.put(f"/api/deals/{seeded.deal_id}", json={"stage": "Negotiation"})
        feed = (await http_client.get(f"/api/deals/{seeded.deal_id}/activities")).json()
        assert feed["meta"]["total"] == 0

    @pytest.mark.asyncio
    async def test_unknown_deal(self, http_client, seeded):
        response = await http_client.put("/api/deals/9999", json={"stage": "X"})
        assert response.status_code == 404


class TestDeleteDeal:
    @pytest.mark.asyncio
    async def test_cascades(self, http_client, api_sessionmaker, seeded):
        await http_client.post(
            f"/api/deals/{seeded.deal_id}/notes", json={"title": "t", "content": "c"}
        )
        assert await _count(api_sessionmaker, ActivityLog) == 1

        response = await http_client.delete(f"/api/deals/{seeded.deal_id}")
        assert response.status_code == 200
        assert response.json()["data"] == {"id": seeded.deal_id}

        for model in (Deal, Product, Schedule, CommissionSplit, DealNote, Payment, Remittance, ActivityLog):
            assert await _count(api_sessionmaker, model) == 0, model.__name__
        # talent outlives the deal
        assert await _count(api_sessionmaker, TalentClient) == 1

        assert (await http_client.get(f"/api/deals/{seeded.deal_id}")).status_code == 404


class TestNotes:
    @pytest.mark.asyncio
    async def test_create_and_list(self, http_client, seeded):
        response = await http_client.post(
            f"/api/deals/{seeded.deal_id}/notes",
            json={"title": "  Follow up  ", "content": "Send deck", "category": "FOLLOW_UP"},
        )
        assert response.status_code == 201
        note = response.json()["data"]
        assert note["title"] == "Follow up"
        assert note["category"] == "FOLLOW_UP"
        assert note["status"] == "OPEN"

        notes = (await http_client.get(f"/api/deals/{seeded.deal_id}/notes")).json()["data"]
        assert {n["title"] for n in notes} == {"Kickoff", "Follow up"}

        feed = (await http_client.get(f"/api/deals/{seeded.deal_id}/activities")).json()
        assert feed["data"][0]["activityType"] == "NOTE_CREATED"
        assert feed["data"][0]["entityId"] == note["id"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"title": " ", "content": "x"}, {"title": "x", "content": ""}])
    async def test_blank_rejected(self, http_client, seeded, payload):
        response = await http_client.post(f"/api/deals/{seeded.deal_id}/notes", json=payload)
        assert response.status_code == 422
