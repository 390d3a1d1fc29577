"""
Tests for split bills.

These tests verify:
  - A new bill has a zero total and no items or participants
  - Updating replaces items and participants wholesale and recomputes the
    total as the sum of price × quantity
  - Items and participants are both required, quantities start at 1
  - Bills are private to their creator; admins can see every bill
"""

from decimal import Decimal

from bizdesk.services.split_bill_service import bill_total


async def create_bill(client, title="Team dinner"):
    response = await client.post("/split-bills", json={"title": title})
    assert response.status_code == 201, response.text
    return response.json()


DINNER = {
    "title": "Team dinner",
    "items": [
        {"name": "Nasi goreng", "price": "35000.50", "quantity": 2},
        {"name": "Es teh", "price": "8000"},
    ],
    "participants": [
        {"name": "Ayu", "amount_owed": "39000.50"},
        {"name": "Budi", "amount_owed": "39000.50"},
    ],
}


class TestBillTotal:

    def test_price_times_quantity(self):
        assert bill_total([
            {"price": Decimal("35000.50"), "quantity": 2},
            {"price": Decimal("8000"), "quantity": 1},
        ]) == Decimal("78001.00")

    def test_quantity_defaults_to_one(self):
        assert bill_total([{"price": Decimal("10.25")}]) == Decimal("10.25")


class TestSplitBills:

    async def test_create_bill(self, authenticated_client):
        bill = await create_bill(authenticated_client)

        assert bill["title"] == "Team dinner"
        assert bill["user_id"] == authenticated_client.user_id
        assert Decimal(bill["total_amount"]) == Decimal("0")
        assert bill["items"] == []
        assert bill["participants"] == []

    async def test_update_recomputes_total(self, authenticated_client):
        bill = await create_bill(authenticated_client)

        response = await authenticated_client.put(f"/split-bills/{bill['id']}", json=DINNER)
        assert response.status_code == 200, response.text
        data = response.json()

        assert Decimal(data["total_amount"]) == Decimal("78001.00")
        assert sorted((i["name"], i["quantity"]) for i in data["items"]) == [
            ("Es teh", 1),
            ("Nasi goreng", 2),
        ]
        assert sorted(p["name"] for p in data["participants"]) == ["Ayu", "Budi"]

    async def test_update_replaces_previous_lists(self, authenticated_client):
        bill = await create_bill(authenticated_client)
        await authenticated_client.put(f"/split-bills/{bill['id']}", json=DINNER)

        response = await authenticated_client.put(
            f"/split-bills/{bill['id']}",
            json={
                "title": "Team lunch",
                "items": [{"name": "Soto", "price": "25000", "quantity": 3}],
                "participants": [{"name": "Citra", "amount_owed": "75000"}],
            },
        )
        assert response.status_code == 200, response.text

        reloaded = await authenticated_client.get(f"/split-bills/{bill['id']}")
        data = reloaded.json()
        assert data["title"] == "Team lunch"
        assert Decimal(data["total_amount"]) == Decimal("75000")
        assert [i["name"] for i in data["items"]] == ["Soto"]
        assert [p["name"] for p in data["participants"]] == ["Citra"]

    async def test_items_required(self, authenticated_client):
        bill = await create_bill(authenticated_client)
        response = await authenticated_client.put(
            f"/split-bills/{bill['id']}",
            json={**DINNER, "items": []},
        )
        assert response.status_code == 422

    async def test_participants_required(self, authenticated_client):
        bill = await create_bill(authenticated_client)
        response = await authenticated_client.put(
            f"/split-bills/{bill['id']}",
            json={**DINNER, "participants": []},
        )
        assert response.status_code == 422

    async def test_zero_quantity_rejected(self, authenticated_client):
        bill = await create_bill(authenticated_client)
        response = await authenticated_client.put(
            f"/split-bills/{bill['id']}",
            json={**DINNER, "items": [{"name": "Air", "price": "0", "quantity": 0}]},
        )
        assert response.status_code == 422

        unchanged = await authenticated_client.get(f"/split-bills/{bill['id']}")
        assert unchanged.json()["items"] == []

    async def test_list_is_scoped_to_creator(
        self, authenticated_client, second_authenticated_client, admin_client
    ):
        await create_bill(authenticated_client, "Mine")
        await create_bill(second_authenticated_client, "Theirs")

        own = await authenticated_client.get("/split-bills")
        assert [b["title"] for b in own.json()] == ["Mine"]

        everyone = await admin_client.get("/split-bills")
        assert sorted(b["title"] for b in everyone.json()) == ["Mine", "Theirs"]

    async def test_other_user_cannot_update(self, authenticated_client, second_authenticated_client):
        bill = await create_bill(authenticated_client)

        response = await second_authenticated_client.put(f"/split-bills/{bill['id']}", json=DINNER)
        assert response.status_code == 403
        assert response.json()["error_type"] == "forbidden"

    async def test_delete_bill(self, authenticated_client):
        bill = await create_bill(authenticated_client)
        await authenticated_client.put(f"/split-bills/{bill['id']}", json=DINNER)

        response = await authenticated_client.delete(f"/split-bills/{bill['id']}")
        assert response.status_code == 204

        gone = await authenticated_client.get(f"/split-bills/{bill['id']}")
        assert gone.status_code == 404

    async def test_unknown_bill(self, authenticated_client):
        response = await authenticated_client.get(
            "/split-bills/00000000-0000-0000-0000-000000000000"
        )
        assert response.status_code == 404
