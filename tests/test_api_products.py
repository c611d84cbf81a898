"""
Tests for the product endpoints: list filters, create, update, delete
and the per-product schedule listing.
"""

import pytest
from sqlalchemy import func, select

from dealdesk.models import CommissionSplit, Product, Schedule


async def _count(api_sessionmaker, model):
    async with api_sessionmaker() as db:
        return await db.scalar(select(func.count()).select_from(model))


class TestListProducts:
    @pytest.mark.asyncio
    async def test_filters(self, http_client, seeded):
        by_deal = (await http_client.get("/api/products", params={"dealId": seeded.deal_id})).json()
        assert [p["id"] for p in by_deal["data"]] == [seeded.product_id]
        assert by_deal["meta"] == {"total": 1, "page": 1, "limit": 20, "pages": 1}

        by_code = (await http_client.get("/api/products", params={"productCode": "PRD-001"})).json()
        assert by_code["meta"]["total"] == 1

        by_name = (await http_client.get("/api/products", params={"productName": "instagram"})).json()
        assert by_name["meta"]["total"] == 1

        miss = (await http_client.get("/api/products", params={"search": "podcast"})).json()
        assert miss["data"] == []

    @pytest.mark.asyncio
    async def test_commission_total(self, http_client, seeded):
        data = (await http_client.get("/api/products")).json()["data"]
        assert data[0]["totalCommission"] == 300.0


class TestCreateProduct:
    @pytest.mark.asyncio
    async def test_create(self, http_client, seeded):
        response = await http_client.post(
            "/api/products",
            json={"dealId": seeded.deal_id, "name": " Podcast read ", "productCode": "PRD-002", "unitPrice": 750},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Podcast read"
        assert data["unitPrice"] == 750.0
        assert data["schedules"] == []

        feed = (await http_client.get(f"/api/deals/{seeded.deal_id}/activities")).json()["data"]
        assert feed[0]["activityType"] == "PRODUCT_CREATED"
        assert feed[0]["entityId"] == data["id"]

        detail = (await http_client.get(f"/api/deals/{seeded.deal_id}")).json()["data"]
        assert [p["name"] for p in detail["products"]] == ["Instagram campaign", "Podcast read"]

    @pytest.mark.asyncio
    async def test_unknown_deal(self, http_client, seeded):
        response = await http_client.post("/api/products", json={"dealId": 9999, "name": "X"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_negative_price_rejected(self, http_client, seeded):
        response = await http_client.post(
            "/api/products", json={"dealId": seeded.deal_id, "name": "X", "unitPrice": -1}
        )
        assert response.status_code == 422


class TestUpdateProduct:
    @pytest.mark.asyncio
    async def test_update(self, http_client, seeded):
        data = (
            await http_client.put(f"/api/products/{seeded.product_id}", json={"name": "Reels"})
        ).json()["data"]
        assert data["name"] == "Reels"
        assert data["productCode"] == "PRD-001"


class TestDeleteProduct:
    @pytest.mark.asyncio
    async def test_with_paid_schedule_rejected(self, http_client, api_sessionmaker, seeded):
        response = await http_client.delete(f"/api/products/{seeded.product_id}")
        assert response.status_code == 409
        assert await _count(api_sessionmaker, Product) == 1

    @pytest.mark.asyncio
    async def test_cascades_schedules_and_splits(self, http_client, api_sessionmaker, seeded):
        product = (
            await http_client.post("/api/products", json={"dealId": seeded.deal_id, "name": "Podcast read"})
        ).json()["data"]
        await http_client.post("/api/schedules", json={"productId": product["id"], "revenue": 100})
        assert await _count(api_sessionmaker, Schedule) == 3
        assert await _count(api_sessionmaker, CommissionSplit) == 3

        response = await http_client.delete(f"/api/products/{product['id']}")
        assert response.status_code == 200
        assert response.json()["data"] == {"id": product["id"]}
        assert await _count(api_sessionmaker, Schedule) == 2
        assert await _count(api_sessionmaker, CommissionSplit) == 1

        feed = (await http_client.get(f"/api/deals/{seeded.deal_id}/activities")).json()["data"]
        assert feed[0]["activityType"] == "PRODUCT_DELETED"

    @pytest.mark.asyncio
    async def test_missing(self, http_client, seeded):
        assert (await http_client.delete("/api/products/9999")).status_code == 404


class TestProductSchedules:
    @pytest.mark.asyncio
    async def test_list(self, http_client, seeded):
        body = (await http_client.get(f"/api/products/{seeded.product_id}/schedules")).json()
        assert [s["id"] for s in body["data"]] == [seeded.paid_id, seeded.pending_id]
        assert body["meta"]["total"] == 2

    @pytest.mark.asyncio
    async def test_missing(self, http_client, seeded):
        assert (await http_client.get("/api/products/9999/schedules")).status_code == 404

    @pytest.mark.asyncio
    async def test_client_round_trip(self, api_client, seeded):
        product = await api_client.create_product(seeded.deal_id, "Podcast read", product_code="PRD-002")
        schedule = await api_client.create_schedule(product.id, revenue=1000, split_percent=10)
        assert schedule.commission_amount == 100
        assert len(schedule.splits) == 2

        assert [s.id for s in await api_client.get_product_schedules(product.id)] == [schedule.id]
        assert [s.id for s in await api_client.get_schedules_by_product(product.id)] == [schedule.id]

        await api_client.delete_schedule(schedule.id)
        assert await api_client.get_schedules_by_product(product.id) == []

        await api_client.delete_product(product.id)
        detail = await api_client.get_deal(seeded.deal_id)
        assert [p.id for p in detail.products] == [seeded.product_id]
