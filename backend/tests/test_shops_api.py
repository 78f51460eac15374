"""
Shop API tests: create, validate, update, status and search.
"""

import pytest

from rentdesk.extensions import db
from rentdesk.models import Shop
from rentdesk.services import shop_service


def _shop_payload(**overrides):
    payload = {
        "shop_number": "S-101",
        "name": "Corner Bakery",
        "location": "Ground floor, east wing",
        "rent_amount": 1500,
        "tenant_name": "Maria Lopez",
        "tenant_contact": "+1 555 0100",
        "lease_start_date": "2026-01-01",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def shop(client, admin_headers):
    resp = client.post("/api/shops", headers=admin_headers, json=_shop_payload())
    assert resp.status_code == 201
    return resp.get_json()["shop"]


class TestCreateShop:

    def test_create_with_defaults(self, client, admin, admin_headers):
        resp = client.post("/api/shops", headers=admin_headers, json=_shop_payload(
            security_deposit="3000.5",
            water_bill_share=25,
        ))
        assert resp.status_code == 201
        shop = resp.get_json()["shop"]
        assert shop["shop_number"] == "S-101"
        assert shop["rent_amount"] == "1500.00"
        assert shop["security_deposit"] == "3000.50"
        assert shop["lease_start_date"] == "2026-01-01"
        assert shop["lease_end_date"] is None
        assert shop["rent_due_day"] == 1
        assert shop["status"] == "occupied"
        assert shop["include_in_water_bill"] is False
        assert shop["water_bill_share"] == 25
        assert shop["created_by"] == admin.id
        assert shop["updated_by"] == admin.id

    def test_missing_required_fields(self, client, admin_headers):
        resp = client.post("/api/shops", headers=admin_headers, json={"shop_number": "S-1"})
        assert resp.status_code == 400
        assert resp.get_json()["error"].startswith("Missing required fields:")

    def test_duplicate_shop_number(self, client, admin_headers, shop):
        resp = client.post("/api/shops", headers=admin_headers, json=_shop_payload())
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Shop number S-101 already exists"
        assert db.session.query(Shop).count() == 1

    @pytest.mark.parametrize("overrides, message", [
        ({"rent_due_day": 32}, "rent_due_day must be between 1 and 31"),
        ({"rent_due_day": 0}, "rent_due_day must be between 1 and 31"),
        ({"water_bill_share": 101}, "water_bill_share must be between 0 and 100"),
        ({"rent_amount": -1}, "rent_amount must be >= 0"),
        ({"area": -5}, "area must be >= 0"),
        ({"status": "demolished"}, "Invalid status"),
        ({"lease_end_date": "2025-12-31"}, "lease_end_date cannot be before lease_start_date"),
        ({"lease_start_date": "01/01/2026"}, "lease_start_date must be an ISO-8601 date"),
        ({"rent_due_day": 1.5}, "rent_due_day must be an integer"),
        ({"include_in_water_bill": "maybe"}, "include_in_water_bill must be a boolean"),
        ({"owner": "me"}, "Field not allowed: owner"),
        ({"rent_amount": 1e30}, "rent_amount is out of range"),
        ({"area": "inf"}, "area must be a number"),
        ({"water_bill_share": "nan"}, "water_bill_share must be a number"),
    ])
    def test_invalid_fields(self, client, admin_headers, overrides, message):
        resp = client.post("/api/shops", headers=admin_headers, json=_shop_payload(**overrides))
        assert resp.status_code == 400
        assert resp.get_json()["error"].startswith(message)
        assert db.session.query(Shop).count() == 0

    def test_unique_constraint_race_is_a_conflict(self, client, admin_headers, shop, monkeypatch):
        # Another request inserted the same number after the uniqueness check
        monkeypatch.setattr(shop_service, "_ensure_unique_number", lambda shop_number, exclude_id=None: None)
        resp = client.post("/api/shops", headers=admin_headers, json=_shop_payload())
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Shop number S-101 already exists"
        assert db.session.query(Shop).count() == 1

    def test_requires_auth(self, client):
        resp = client.post("/api/shops", json=_shop_payload())
        assert resp.status_code == 401


class TestUpdateShop:

    def test_update_stamps_updated_by(self, client, alice, alice_headers, admin, shop):
        resp = client.put(f"/api/shops/{shop['id']}", headers=alice_headers, json={
            "tenant_name": "New Tenant",
            "rent_amount": "1750.25",
        })
        assert resp.status_code == 200
        updated = resp.get_json()["shop"]
        assert updated["tenant_name"] == "New Tenant"
        assert updated["rent_amount"] == "1750.25"
        assert updated["created_by"] == admin.id
        assert updated["updated_by"] == alice.id

    def test_update_lease_end_checked_against_stored_start(self, client, admin_headers, shop):
        resp = client.put(f"/api/shops/{shop['id']}", headers=admin_headers, json={
            "lease_end_date": "2025-06-30",
        })
        assert resp.status_code == 400

    def test_update_to_taken_number(self, client, admin_headers, shop):
        client.post("/api/shops", headers=admin_headers, json=_shop_payload(shop_number="S-102"))
        resp = client.put(f"/api/shops/{shop['id']}", headers=admin_headers, json={"shop_number": "S-102"})
        assert resp.status_code == 400

    def test_update_keeps_own_number(self, client, admin_headers, shop):
        resp = client.put(f"/api/shops/{shop['id']}", headers=admin_headers, json={"shop_number": "S-101"})
        assert resp.status_code == 200

    def test_update_unknown_shop(self, client, admin_headers):
        resp = client.put("/api/shops/999", headers=admin_headers, json={"name": "x"})
        assert resp.status_code == 404


class TestShopStatus:

    def test_set_status(self, client, admin_headers, shop):
        resp = client.patch(f"/api/shops/{shop['id']}/status", headers=admin_headers, json={"status": "vacant"})
        assert resp.status_code == 200
        assert resp.get_json()["shop"]["status"] == "vacant"

    def test_invalid_status(self, client, admin_headers, shop):
        resp = client.patch(f"/api/shops/{shop['id']}/status", headers=admin_headers, json={"status": "sold"})
        assert resp.status_code == 400


class TestListShops:

    def test_filter_and_search(self, client, admin_headers):
        client.post("/api/shops", headers=admin_headers, json=_shop_payload())
        client.post("/api/shops", headers=admin_headers, json=_shop_payload(
            shop_number="S-102", name="Shoe Repair", tenant_name="Ken Ito", status="vacant",
        ))

        resp = client.get("/api/shops", headers=admin_headers)
        assert resp.get_json()["count"] == 2

        resp = client.get("/api/shops?status=vacant", headers=admin_headers)
        assert [s["shop_number"] for s in resp.get_json()["items"]] == ["S-102"]

        resp = client.get("/api/shops?q=bakery", headers=admin_headers)
        assert [s["shop_number"] for s in resp.get_json()["items"]] == ["S-101"]

        resp = client.get("/api/shops?status=sold", headers=admin_headers)
        assert resp.status_code == 400

    def test_get_shop(self, client, alice_headers, shop):
        resp = client.get(f"/api/shops/{shop['id']}", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.get_json()["shop"]["name"] == "Corner Bakery"

        resp = client.get("/api/shops/999", headers=alice_headers)
        assert resp.status_code == 404
        assert resp.get_json()["error"] == "Shop not found"
