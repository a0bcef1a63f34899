"""
API tests through the FastAPI TestClient.

Tests cover the HTTP surface: camelCase payloads, the error envelope
({"detail", "code"}), and the scan -> earn -> redeem flow end to end.
"""

from decimal import Decimal

import pytest

API = "/api"


def register(client, email, user_type, name="Test User", pincode="400001"):
    response = client.post(f"{API}/auth/register", json={
        "email": email,
        "password": "password123",
        "name": name,
        "userType": user_type,
        "pincode": pincode,
    })
    assert response.status_code == 201, response.text
    return response.json()["user"]


def create_business(client, category="kirana", pincode="400001", rate="8.00", email=None):
    owner = register(client, email or f"{category}-{pincode}@shop.example.com", "business")
    response = client.post(f"{API}/businesses", json={
        "userId": owner["id"],
        "businessName": f"{category.title()} Store",
        "category": category,
        "pincode": pincode,
        "bCoinRate": rate,
    })
    return response


@pytest.fixture
def shop(client):
    response = create_business(client)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def customer(client):
    return register(client, "raj@example.com", "customer", name="Raj Sharma")


def scan(client, code, customer_id, bill, key=None):
    body = {"qrCode": code, "customerId": customer_id, "billAmount": bill}
    if key:
        body["idempotencyKey"] = key
    return client.post(f"{API}/scan-qr", json=body)


class TestHealth:

    def test_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestBusinesses:

    def test_create_returns_business_and_qr(self, shop):
        assert shop["business"]["category"] == "kirana"
        assert Decimal(shop["business"]["bCoinRate"]) == Decimal("8.00")
        assert shop["business"]["bundleId"]
        assert shop["qrCode"]["code"].startswith("BAARTAL-")

    def test_category_taken_is_409(self, client, shop):
        response = create_business(client, email="rival@shop.example.com")

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "CATEGORY_TAKEN"
        assert body["conflictingBusinessId"] == shop["business"]["id"]

    def test_rate_above_cap_rejected(self, client):
        response = create_business(client, rate="25.00")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_filter_by_category_and_pincode(self, client, shop):
        create_business(client, category="cafe", pincode="400002")

        kirana = client.get(f"{API}/businesses", params={"category": "kirana"}).json()
        in_400002 = client.get(f"{API}/businesses", params={"pincode": "400002"}).json()

        assert [b["id"] for b in kirana] == [shop["business"]["id"]]
        assert [b["category"] for b in in_400002] == ["cafe"]

    def test_lookup_by_owner(self, client, shop):
        owner_id = shop["business"]["ownerUserId"]
        response = client.get(f"{API}/businesses/user/{owner_id}")
        assert response.json()["id"] == shop["business"]["id"]

    def test_unknown_business_is_404(self, client):
        response = client.get(f"{API}/businesses/nope")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    @pytest.mark.parametrize("field", ["businessName", "category", "pincode", "bCoinRate", "isActive"])
    def test_update_with_null_is_400(self, client, shop, field):
        business_id = shop["business"]["id"]

        response = client.put(f"{API}/businesses/{business_id}", json={field: None})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert client.get(f"{API}/businesses/{business_id}").json()["isActive"] is True

    def test_update_rejects_ledger_fields(self, client, shop):
        response = client.put(
            f"{API}/businesses/{shop['business']['id']}",
            json={"totalBCoinsIssued": "1000"},
        )
        assert response.status_code == 400

    def test_categories_and_availability(self, client, shop):
        categories = client.get(f"{API}/business-categories").json()
        assert len(categories) == 10
        assert {"value": "kirana", "label": "Kirana / Grocery"} in categories

        taken = client.get(f"{API}/category-availability/400001/kirana").json()
        free = client.get(f"{API}/category-availability/400001/salon").json()
        assert taken["available"] is False
        assert taken["existingBusiness"]["id"] == shop["business"]["id"]
        assert free == {"available": True, "existingBusiness": None}

    def test_bundle_lists_members(self, client, shop):
        create_business(client, category="electronics")

        bundle = client.get(f"{API}/bundles/400001").json()

        assert bundle["pincode"] == "400001"
        assert {b["category"] for b in bundle["businesses"]} == {"kirana", "electronics"}
        assert len(client.get(f"{API}/bundles").json()) == 1
        assert client.get(f"{API}/bundles/999999").status_code == 404


class TestQRCodes:

    def test_resolve_and_deactivate(self, client, shop):
        code = shop["qrCode"]["code"]

        resolved = client.get(f"{API}/qr-codes/{code}").json()
        assert resolved["business"]["id"] == shop["business"]["id"]
        assert resolved["qrCode"]["code"] == code

        deactivated = client.post(f"{API}/qr-codes/{code}/deactivate").json()
        assert deactivated["isActive"] is False

        response = client.get(f"{API}/qr-codes/{code}")
        assert response.status_code == 404
        assert response.json()["code"] == "INVALID_QR_CODE"

    def test_mint_additional_counter(self, client, shop):
        business_id = shop["business"]["id"]
        response = client.post(f"{API}/qr-codes", json={
            "businessId": business_id,
            "description": "Counter 2",
        })
        assert response.status_code == 201

        codes = client.get(f"{API}/qr-codes/business/{business_id}").json()
        assert len(codes) == 2


class TestLedgerFlow:

    def test_scan_earns_coins(self, client, shop, customer):
        response = scan(client, shop["qrCode"]["code"], customer["id"], 500)

        assert response.status_code == 200, response.text
        body = response.json()
        assert Decimal(body["bCoinsEarned"]) == Decimal("40.00")
        assert Decimal(body["newBalance"]) == Decimal("40.00")
        assert body["businessName"] == "Kirana Store"
        assert body["replayed"] is False
        assert body["transaction"]["type"] == "earned"
        assert Decimal(body["transaction"]["billAmount"]) == Decimal("500")

        profile = client.get(f"{API}/customers/{customer['id']}/profile").json()
        assert Decimal(profile["bCoinBalance"]) == Decimal("40.00")
        assert Decimal(profile["totalBCoinsEarned"]) == Decimal("40.00")

    def test_scan_retry_with_key_is_replayed(self, client, shop, customer):
        code = shop["qrCode"]["code"]
        first = scan(client, code, customer["id"], 500, key="pos-42").json()
        second = scan(client, code, customer["id"], 500, key="pos-42").json()

        assert second["replayed"] is True
        assert second["transaction"]["id"] == first["transaction"]["id"]
        assert Decimal(second["newBalance"]) == Decimal("40.00")

    @pytest.mark.parametrize("bill", [0, -10, "lots"])
    def test_bad_bill_is_400(self, client, shop, customer, bill):
        response = scan(client, shop["qrCode"]["code"], customer["id"], bill)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_code_is_404(self, client, customer):
        response = scan(client, "BAARTAL-UNKNOWN", customer["id"], 100)
        assert response.status_code == 404
        assert response.json()["code"] == "INVALID_QR_CODE"

    def test_redeem(self, client, shop, customer):
        scan(client, shop["qrCode"]["code"], customer["id"], 500)

        response = client.post(f"{API}/redeem-bcoins", json={
            "customerId": customer["id"],
            "businessId": shop["business"]["id"],
            "amount": "15.50",
        })

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["transaction"]["type"] == "redeemed"
        assert Decimal(body["transaction"]["amount"]) == Decimal("15.50")
        assert Decimal(body["newBalance"]) == Decimal("24.50")

    def test_redeem_more_than_balance(self, client, shop, customer):
        scan(client, shop["qrCode"]["code"], customer["id"], 100)

        response = client.post(f"{API}/redeem-bcoins", json={
            "customerId": customer["id"],
            "businessId": shop["business"]["id"],
            "amount": "50",
        })

        assert response.status_code == 400
        assert response.json()["code"] == "INSUFFICIENT_BALANCE"
        profile = client.get(f"{API}/customers/{customer['id']}/profile").json()
        assert Decimal(profile["bCoinBalance"]) == Decimal("8.00")

    def test_direct_entries_and_history(self, client, shop, customer):
        base = {"customerId": customer["id"], "businessId": shop["business"]["id"]}
        earned = client.post(f"{API}/bcoin-transactions", json={
            **base, "type": "earned", "amount": "30", "description": "Festival bonus",
        })
        redeemed = client.post(f"{API}/bcoin-transactions", json={
            **base, "type": "redeemed", "amount": "12",
        })
        assert earned.status_code == 201
        assert redeemed.status_code == 201
        assert Decimal(redeemed.json()["newBalance"]) == Decimal("18.00")

        history = client.get(f"{API}/bcoin-transactions/user/{customer['id']}").json()
        assert history["total"] == 2
        assert [t["type"] for t in history["transactions"]] == ["redeemed", "earned"]
        assert all(Decimal(t["amount"]) > 0 for t in history["transactions"])
        assert history["transactions"][1]["source"] == "manual"

        business_history = client.get(
            f"{API}/bcoin-transactions/business/{shop['business']['id']}"
        ).json()
        assert business_history["total"] == 2

    def test_invalid_entry_type_rejected(self, client, shop, customer):
        response = client.post(f"{API}/bcoin-transactions", json={
            "customerId": customer["id"],
            "businessId": shop["business"]["id"],
            "type": "spent",
            "amount": "10",
        })
        assert response.status_code == 400


class TestRatingsAndAnalytics:

    def test_rating_awards_bonus(self, client, shop, customer):
        response = client.post(f"{API}/ratings", json={
            "customerId": customer["id"],
            "businessId": shop["business"]["id"],
            "rating": 5,
            "comment": "Great service",
        })

        assert response.status_code == 201, response.text
        body = response.json()
        assert Decimal(body["rating"]["bonusBCoins"]) == Decimal("10.00")
        assert body["transaction"]["source"] == "rating_bonus"
        assert Decimal(body["newBalance"]) == Decimal("10.00")

        ratings = client.get(f"{API}/ratings/business/{shop['business']['id']}").json()
        assert [r["rating"] for r in ratings] == [5]
        assert len(client.get(f"{API}/ratings/user/{customer['id']}").json()) == 1

    def test_rating_out_of_range(self, client, shop, customer):
        response = client.post(f"{API}/ratings", json={
            "customerId": customer["id"],
            "businessId": shop["business"]["id"],
            "rating": 7,
        })
        assert response.status_code == 400

    def test_business_analytics(self, client, shop, customer):
        code = shop["qrCode"]["code"]
        scan(client, code, customer["id"], 500)
        scan(client, code, customer["id"], 300)
        client.post(f"{API}/ratings", json={
            "customerId": customer["id"],
            "businessId": shop["business"]["id"],
            "rating": 4,
        })

        analytics = client.get(f"{API}/analytics/business/{shop['business']['id']}").json()

        assert Decimal(analytics["totalBCoinsIssued"]) == Decimal("74.00")
        assert analytics["totalCustomers"] == 1
        assert analytics["uniqueCustomers"] == 1
        assert analytics["totalTransactions"] == 3
        assert Decimal(analytics["averageBillAmount"]) == Decimal("400.00")
        assert analytics["averageRating"] == 4.0
        assert analytics["weeklyData"]["transactions"] == 3
        assert Decimal(analytics["weeklyData"]["revenue"]) == Decimal("800.00")


class TestCustomersAndNotifications:

    def test_profile_rejects_balance_writes(self, client, customer):
        response = client.put(
            f"{API}/customers/{customer['id']}/profile",
            json={"bCoinBalance": "1000000"},
        )
        assert response.status_code == 400

    def test_profile_preferences(self, client, shop, customer):
        business_id = shop["business"]["id"]
        response = client.put(f"{API}/customers/{customer['id']}/profile", json={
            "preferredPincode": "400002",
            "favoriteBusinesses": [business_id, business_id],
        })

        assert response.status_code == 200
        assert response.json()["preferredPincode"] == "400002"
        assert response.json()["favoriteBusinesses"] == [business_id]

    def test_notifications_read_flow(self, client, shop, customer):
        scan(client, shop["qrCode"]["code"], customer["id"], 100)

        notes = client.get(f"{API}/notifications/user/{customer['id']}").json()
        assert len(notes) == 1
        assert notes[0]["isRead"] is False

        marked = client.post(f"{API}/notifications/{notes[0]['id']}/read").json()
        assert marked["isRead"] is True

        owner_id = shop["business"]["ownerUserId"]
        result = client.post(f"{API}/notifications/user/{owner_id}/read-all").json()
        assert result == {"updated": 1}
