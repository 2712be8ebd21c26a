"""
Tests for the activity log written by quote and inventory actions.
"""

from decimal import Decimal

import pytest

from conftest import auth_headers, make_bend
from gutterworks.core.exceptions import InsufficientStockError
from gutterworks.schemas.activity import ActivityAction, ActivityEntity
from gutterworks.schemas.inventory import InventoryBatchCreate
from gutterworks.schemas.quote import DiscountApply, QuoteStatus, QuoteStatusUpdate, QuoteSubmit
from gutterworks.services.activity_service import activity_service
from gutterworks.services.inventory_service import inventory_service
from gutterworks.services.quote_service import quote_service

REFERENCE_BEND = [("E", "40"), ("S", "30")]


async def submit_reference(db, actor):
    data = QuoteSubmit(bends=[make_bend(REFERENCE_BEND, ["3.5"])])
    return await quote_service.submit(db, data, actor)


class TestQuoteActivity:
    """Tests for status changes and discounts in the activity log."""

    async def test_status_change_is_recorded(self, db, customer, admin, make_batch):
        """Quem mudou, de qual status para qual."""
        await make_batch()
        quote = await submit_reference(db, customer)
        await quote_service.change_status(
            db, quote.id, QuoteStatusUpdate(status=QuoteStatus.PAID, override_proof=True), admin
        )

        entries, total = await activity_service.get_all(
            db, action=ActivityAction.QUOTE_STATUS_CHANGE, entity_id=quote.id
        )

        assert total == 1
        entry = entries[0]
        assert entry.entity_type == ActivityEntity.QUOTE.value
        assert entry.actor_id == admin.id
        assert entry.actor_name == "Admin Loja"
        assert entry.details == {"from": "pending", "to": "paid"}
        assert entry.created_at is not None

    async def test_failed_transition_is_not_recorded(self, db, customer, admin, make_batch):
        """Sem estoque a transição falha antes de qualquer registro."""
        await make_batch(available_m2=Decimal("2"))
        quote = await submit_reference(db, customer)

        with pytest.raises(InsufficientStockError):
            await quote_service.change_status(
                db, quote.id, QuoteStatusUpdate(status=QuoteStatus.PAID, override_proof=True), admin
            )

        _, total = await activity_service.get_all(db, entity_id=quote.id)
        assert total == 0

    async def test_customer_cancellation_is_recorded(self, db, customer):
        quote = await submit_reference(db, customer)
        await quote_service.change_status(
            db, quote.id, QuoteStatusUpdate(status=QuoteStatus.CANCELLED), customer
        )

        entries, _ = await activity_service.get_all(db, actor_id=customer.id)
        assert [e.details["to"] for e in entries] == ["cancelled"]

    async def test_discount_is_recorded(self, db, customer, admin):
        quote = await submit_reference(db, customer)
        await quote_service.apply_discount(
            db, quote.id, DiscountApply(amount=Decimal("22.50"), reason="Cliente antigo"), admin
        )

        entries, total = await activity_service.get_all(db, action=ActivityAction.DISCOUNT_APPLIED)
        assert total == 1
        assert entries[0].details == {
            "discount_value": "22.50",
            "final_value": "100.00",
            "reason": "Cliente antigo",
        }


class TestInventoryActivity:
    """Tests for batch entries and deletions in the activity log."""

    async def test_each_new_batch_is_recorded(self, db, admin):
        batches = await inventory_service.add_batches(
            db, InventoryBatchCreate(width_m=Decimal("1"), length_m=Decimal("10"), quantity=2),
            actor_id=admin.id,
        )

        entries, total = await activity_service.get_all(db, action=ActivityAction.INVENTORY_ADD)

        assert total == 2
        assert {e.entity_id for e in entries} == {b.id for b in batches}
        assert all(e.entity_type == ActivityEntity.INVENTORY_BATCH.value for e in entries)
        assert all(e.details["capacity_m2"] == "10.0000" for e in entries)

    async def test_deletion_is_recorded(self, db, admin, make_batch):
        batch = await make_batch(available_m2=Decimal("4"))
        await inventory_service.delete(db, batch.id, actor_id=admin.id)

        entries, total = await activity_service.get_all(
            db, action=ActivityAction.INVENTORY_DELETE, entity_type=ActivityEntity.INVENTORY_BATCH
        )
        assert total == 1
        assert entries[0].entity_id == batch.id
        assert entries[0].actor_id == admin.id
        assert Decimal(entries[0].details["available_m2"]) == Decimal("4")

    async def test_pagination(self, db, admin):
        await inventory_service.add_batches(db, InventoryBatchCreate(quantity=3), actor_id=admin.id)
        entries, total = await activity_service.get_all(db, page=2, per_page=2)
        assert total == 3
        assert len(entries) == 1


class TestActivityApi:
    """Tests for GET /api/v1/activity."""

    async def test_admin_lists_activity(self, client, admin):
        headers = auth_headers(admin)
        created = await client.post(
            "/api/v1/inventory/", json={"width_m": "1", "length_m": "10"}, headers=headers
        )
        batch_id = created.json()[0]["id"]
        await client.delete(f"/api/v1/inventory/{batch_id}", headers=headers)

        response = await client.get(
            "/api/v1/activity/", params={"entity_id": batch_id}, headers=headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["total_pages"] == 1
        assert sorted(item["action"] for item in body["items"]) == [
            "inventory_add",
            "inventory_delete",
        ]

    async def test_customer_is_forbidden(self, client, customer):
        response = await client.get("/api/v1/activity/", headers=auth_headers(customer))
        assert response.status_code == 403

    async def test_unknown_action_filter(self, client, admin):
        response = await client.get(
            "/api/v1/activity/", params={"action": "nao-existe"}, headers=auth_headers(admin)
        )
        assert response.status_code == 422
