"""
Tests for the HTTP API: routing, auth, error payloads and commits.
"""

import uuid

from conftest import auth_headers
from gutterworks.core.security import create_access_token

REFERENCE_BEND = {
    "segments": [
        {"direction": "E", "size_cm": "40"},
        {"direction": "S", "size_cm": "30"},
    ],
    "lengths": ["3.5"],
}


class TestHealth:
    """Tests for /health."""

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuth:
    """Tests for bearer-token handling."""

    async def test_missing_token(self, client):
        response = await client.get("/api/v1/quotes/")
        assert response.status_code == 401

    async def test_invalid_token(self, client):
        response = await client.get(
            "/api/v1/quotes/", headers={"Authorization": "Bearer nao-e-um-jwt"}
        )
        assert response.status_code == 401

    async def test_token_with_bad_subject(self, client):
        token = create_access_token("nao-e-uuid", "customer")
        response = await client.get(
            "/api/v1/quotes/", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_customer_is_forbidden_on_admin_routes(self, client, customer):
        headers = auth_headers(customer)
        for path in ("/api/v1/inventory/", "/api/v1/financial/summary", "/api/v1/quotes/pending-count"):
            response = await client.get(path, headers=headers)
            assert response.status_code == 403, path


class TestBendPreview:
    """Tests for POST /api/v1/bends/preview."""

    async def test_reference_bend(self, client, customer):
        response = await client.post(
            "/api/v1/bends/preview", json=REFERENCE_BEND, headers=auth_headers(customer)
        )
        assert response.status_code == 200
        body = response.json()
        assert body["rounded_width_cm"] == 70
        assert float(body["area_m2"]) == 2.45
        assert body["is_billable"] is True
        assert body["turn_angles"] == [90]
        assert float(body["remaining_width_cm"]) == 50
        assert len(body["path_points"]) == 3

    async def test_reversal_error_payload(self, client, customer):
        payload = {"segments": [{"direction": "N", "size_cm": "10"}, {"direction": "S", "size_cm": "10"}]}
        response = await client.post(
            "/api/v1/bends/preview", json=payload, headers=auth_headers(customer)
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "REVERSAL_NOT_ALLOWED"

    async def test_width_error_payload(self, client, customer):
        payload = {"segments": [{"direction": "E", "size_cm": "100"}, {"direction": "S", "size_cm": "25"}]}
        response = await client.post(
            "/api/v1/bends/preview", json=payload, headers=auth_headers(customer)
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "WIDTH_EXCEEDED"
        assert body["extra"]["remaining_cm"] == "20"

    async def test_empty_bend_payload(self, client, customer):
        response = await client.post(
            "/api/v1/bends/preview", json={"segments": []}, headers=auth_headers(customer)
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "EMPTY_BEND_NOT_ALLOWED"

    async def test_huge_length_payload(self, client, customer):
        payload = {**REFERENCE_BEND, "lengths": ["1e30"]}
        response = await client.post(
            "/api/v1/bends/preview", json=payload, headers=auth_headers(customer)
        )
        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "INVALID_INPUT"
        assert body["extra"]["max_length_m"] == "1000"

    async def test_unknown_direction_is_schema_error(self, client, customer):
        payload = {"segments": [{"direction": "UP", "size_cm": "10"}]}
        response = await client.post(
            "/api/v1/bends/preview", json=payload, headers=auth_headers(customer)
        )
        assert response.status_code == 422
        assert "error_code" not in response.json()


class TestQuotesApi:
    """Tests for the quote endpoints."""

    async def test_submit_and_read(self, client, customer):
        headers = auth_headers(customer)
        response = await client.post(
            "/api/v1/quotes/", json={"bends": [REFERENCE_BEND]}, headers=headers
        )
        assert response.status_code == 201
        created = response.json()
        assert created["status"] == "pending"
        assert float(created["total_value"]) == 122.5
        assert created["bend_count"] == 1
        assert created["allowed_transitions"] == ["paid", "cancelled"]

        detail = await client.get(f"/api/v1/quotes/{created['id']}", headers=headers)
        assert detail.status_code == 200
        assert detail.json()["id"] == created["id"]

        bends = await client.get(f"/api/v1/quotes/{created['id']}/bends", headers=headers)
        assert bends.status_code == 200
        assert bends.json()[0]["rounded_width_cm"] == 70

        listing = await client.get("/api/v1/quotes/", headers=headers)
        assert listing.json()["total"] == 1
        assert listing.json()["total_pages"] == 1

    async def test_client_totals_are_ignored(self, client, customer):
        """Campos de total enviados pelo cliente não são usados."""
        response = await client.post(
            "/api/v1/quotes/",
            json={"bends": [REFERENCE_BEND], "total_value": "1.00", "price_per_m2": "0.01"},
            headers=auth_headers(customer),
        )
        assert response.status_code == 201
        assert float(response.json()["total_value"]) == 122.5

    async def test_other_customer_gets_403(self, client, customer, other_customer):
        created = await client.post(
            "/api/v1/quotes/", json={"bends": [REFERENCE_BEND]}, headers=auth_headers(customer)
        )
        response = await client.get(
            f"/api/v1/quotes/{created.json()['id']}", headers=auth_headers(other_customer)
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    async def test_unknown_quote_gets_404(self, client, admin):
        response = await client.get(f"/api/v1/quotes/{uuid.uuid4()}", headers=auth_headers(admin))
        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    async def test_full_payment_flow(self, client, customer, admin):
        """Entrada de bobina, envio, desconto, pagamento e resumo financeiro."""
        admin_headers = auth_headers(admin)
        batches = await client.post(
            "/api/v1/inventory/",
            json={"width_m": "1", "length_m": "10", "cost_per_unit": "100"},
            headers=admin_headers,
        )
        assert batches.status_code == 201
        batch_id = batches.json()[0]["id"]

        created = await client.post(
            "/api/v1/quotes/", json={"bends": [REFERENCE_BEND]}, headers=auth_headers(customer)
        )
        quote_id = created.json()["id"]

        discount = await client.post(
            f"/api/v1/quotes/{quote_id}/discount",
            json={"amount": "22.50", "reason": "Cliente antigo"},
            headers=admin_headers,
        )
        assert discount.status_code == 200
        assert float(discount.json()["final_value"]) == 100.0

        no_proof = await client.patch(
            f"/api/v1/quotes/{quote_id}/status", json={"status": "paid"}, headers=admin_headers
        )
        assert no_proof.status_code == 409
        assert no_proof.json()["error_code"] == "PAYMENT_PROOF_REQUIRED"

        proof = await client.post(
            f"/api/v1/quotes/{quote_id}/proof",
            json={"payment_proof_ref": "comprovantes/pix.png"},
            headers=auth_headers(customer),
        )
        assert proof.status_code == 200

        paid = await client.patch(
            f"/api/v1/quotes/{quote_id}/status", json={"status": "paid"}, headers=admin_headers
        )
        assert paid.status_code == 200
        assert paid.json()["status"] == "paid"

        batch = await client.get(f"/api/v1/inventory/{batch_id}", headers=admin_headers)
        assert float(batch.json()["available_m2"]) == 7.55

        summary = await client.get("/api/v1/financial/summary", headers=admin_headers)
        assert float(summary.json()["total"]) == 100.0
        assert summary.json()["total_count"] == 1

        movements = await client.get(
            "/api/v1/inventory/movements",
            params={"quote_id": quote_id},
            headers=admin_headers,
        )
        assert movements.json()["total"] == 1
        assert movements.json()["items"][0]["movement_type"] == "consumption"

    async def test_insufficient_stock_is_rolled_back(self, client, customer, admin):
        admin_headers = auth_headers(admin)
        batches = await client.post(
            "/api/v1/inventory/",
            json={"width_m": "1", "length_m": "2"},
            headers=admin_headers,
        )
        batch_id = batches.json()[0]["id"]
        created = await client.post(
            "/api/v1/quotes/", json={"bends": [REFERENCE_BEND]}, headers=auth_headers(customer)
        )
        quote_id = created.json()["id"]

        response = await client.patch(
            f"/api/v1/quotes/{quote_id}/status",
            json={"status": "paid", "override_proof": True},
            headers=admin_headers,
        )
        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "INSUFFICIENT_STOCK"
        assert body["extra"]["shortfall_m2"] == "0.4500"

        quote = await client.get(f"/api/v1/quotes/{quote_id}", headers=admin_headers)
        assert quote.json()["status"] == "pending"
        batch = await client.get(f"/api/v1/inventory/{batch_id}", headers=admin_headers)
        assert float(batch.json()["available_m2"]) == 2.0

    async def test_huge_length_is_rejected_on_submit(self, client, customer):
        """Comprimento fora do limite volta 422, nada é gravado."""
        headers = auth_headers(customer)
        response = await client.post(
            "/api/v1/quotes/",
            json={"bends": [{**REFERENCE_BEND, "lengths": ["1e30"]}]},
            headers=headers,
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_INPUT"

        listing = await client.get("/api/v1/quotes/", headers=headers)
        assert listing.json()["total"] == 0

    async def test_manual_total_above_column_limit(self, client, admin):
        response = await client.post(
            "/api/v1/quotes/manual",
            json={"client_name": "X", "total_value": "1e30"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 422

    async def test_huge_discount_is_invalid_input(self, client, customer, admin):
        created = await client.post(
            "/api/v1/quotes/", json={"bends": [REFERENCE_BEND]}, headers=auth_headers(customer)
        )
        response = await client.post(
            f"/api/v1/quotes/{created.json()['id']}/discount",
            json={"amount": "1e30", "reason": "Teste"},
            headers=auth_headers(admin),
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_INPUT"

    async def test_manual_quote_requires_admin(self, client, customer):
        response = await client.post(
            "/api/v1/quotes/manual",
            json={"client_name": "X", "total_value": "10"},
            headers=auth_headers(customer),
        )
        assert response.status_code == 403


class TestInventoryApi:
    """Tests for the inventory endpoints."""

    async def test_batch_lifecycle(self, client, admin):
        headers = auth_headers(admin)
        created = await client.post(
            "/api/v1/inventory/",
            json={"width_m": "1.2", "length_m": "33", "quantity": 2},
            headers=headers,
        )
        assert created.status_code == 201
        assert len(created.json()) == 2
        batch_id = created.json()[0]["id"]
        assert float(created.json()[0]["capacity_m2"]) == 39.6

        updated = await client.put(
            f"/api/v1/inventory/{batch_id}",
            json={"description": "Galvalume"},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["description"] == "Galvalume"

        deleted = await client.delete(f"/api/v1/inventory/{batch_id}", headers=headers)
        assert deleted.status_code == 204

        listing = await client.get("/api/v1/inventory/", headers=headers)
        ids = [b["id"] for b in listing.json()]
        assert len(ids) == 1
        assert batch_id not in ids

        summary = await client.get("/api/v1/inventory/summary", headers=headers)
        assert summary.json()["active_batches"] == 1

    async def test_available_area_cannot_be_edited(self, client, admin):
        headers = auth_headers(admin)
        created = await client.post("/api/v1/inventory/", json={}, headers=headers)
        batch_id = created.json()[0]["id"]
        response = await client.put(
            f"/api/v1/inventory/{batch_id}",
            json={"available_m2": "999"},
            headers=headers,
        )
        assert response.status_code == 422
