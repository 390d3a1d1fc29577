"""
Tests for budget plans and their items.

These tests verify:
  - Users create, read, update and delete their own plans
  - end_date may equal but not precede start_date; budgets can't be negative
  - Other users get 403; admins can see and manage every plan
  - Items start as "planned", can move through in_progress/completed,
    and are removed together with their plan
"""

from datetime import date, timedelta
from decimal import Decimal


TODAY = date.today()


def plan_payload(**overrides):
    payload = {
        "name": "June groceries",
        "description": "Monthly shop",
        "start_date": TODAY.isoformat(),
        "end_date": (TODAY + timedelta(days=30)).isoformat(),
        "total_budget": "1500000.00",
    }
    payload.update(overrides)
    return payload


async def create_plan(client, **overrides):
    response = await client.post("/budget-plans", json=plan_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


async def add_item(client, plan_id, name="Rice", amount="250000"):
    response = await client.post(
        f"/budget-plans/{plan_id}/items", json={"name": name, "amount": amount}
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestBudgetPlans:

    async def test_create_plan(self, authenticated_client):
        plan = await create_plan(authenticated_client)

        assert plan["user_id"] == authenticated_client.user_id
        assert plan["name"] == "June groceries"
        assert Decimal(plan["total_budget"]) == Decimal("1500000.00")
        assert plan["items"] == []

    async def test_single_day_plan_allowed(self, authenticated_client):
        plan = await create_plan(authenticated_client, end_date=TODAY.isoformat())
        assert plan["start_date"] == plan["end_date"]

    async def test_end_before_start_rejected(self, authenticated_client):
        response = await authenticated_client.post(
            "/budget-plans",
            json=plan_payload(end_date=(TODAY - timedelta(days=1)).isoformat()),
        )
        assert response.status_code == 422

    async def test_negative_budget_rejected(self, authenticated_client):
        response = await authenticated_client.post(
            "/budget-plans", json=plan_payload(total_budget="-1")
        )
        assert response.status_code == 422

    async def test_list_is_scoped_to_owner(
        self, authenticated_client, second_authenticated_client, admin_client
    ):
        await create_plan(authenticated_client, name="Mine")
        await create_plan(second_authenticated_client, name="Theirs")

        own = await authenticated_client.get("/budget-plans")
        assert [p["name"] for p in own.json()] == ["Mine"]

        everyone = await admin_client.get("/budget-plans")
        assert sorted(p["name"] for p in everyone.json()) == ["Mine", "Theirs"]

    async def test_other_user_cannot_read(self, authenticated_client, second_authenticated_client):
        plan = await create_plan(authenticated_client)

        response = await second_authenticated_client.get(f"/budget-plans/{plan['id']}")
        assert response.status_code == 403
        assert response.json()["error_type"] == "forbidden"

    async def test_admin_can_read(self, authenticated_client, admin_client):
        plan = await create_plan(authenticated_client)
        response = await admin_client.get(f"/budget-plans/{plan['id']}")
        assert response.status_code == 200

    async def test_unknown_plan(self, authenticated_client):
        response = await authenticated_client.get(
            "/budget-plans/00000000-0000-0000-0000-000000000000"
        )
        assert response.status_code == 404

    async def test_update_plan(self, authenticated_client):
        plan = await create_plan(authenticated_client)

        response = await authenticated_client.put(
            f"/budget-plans/{plan['id']}",
            json=plan_payload(name="July groceries", total_budget="1750000", description=None),
        )
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["name"] == "July groceries"
        assert data["description"] is None
        assert Decimal(data["total_budget"]) == Decimal("1750000")

    async def test_other_user_cannot_update(self, authenticated_client, second_authenticated_client):
        plan = await create_plan(authenticated_client)
        response = await second_authenticated_client.put(
            f"/budget-plans/{plan['id']}", json=plan_payload(name="Hijacked")
        )
        assert response.status_code == 403

        unchanged = await authenticated_client.get(f"/budget-plans/{plan['id']}")
        assert unchanged.json()["name"] == "June groceries"

    async def test_delete_plan_with_items(self, authenticated_client):
        plan = await create_plan(authenticated_client)
        await add_item(authenticated_client, plan["id"])

        response = await authenticated_client.delete(f"/budget-plans/{plan['id']}")
        assert response.status_code == 204

        gone = await authenticated_client.get(f"/budget-plans/{plan['id']}")
        assert gone.status_code == 404


class TestBudgetItems:

    async def test_add_item_starts_planned(self, authenticated_client):
        plan = await create_plan(authenticated_client)

        item = await add_item(authenticated_client, plan["id"], name="Rice", amount="250000.50")
        assert item["status"] == "planned"
        assert item["budget_plan_id"] == plan["id"]
        assert Decimal(item["amount"]) == Decimal("250000.50")

        reloaded = await authenticated_client.get(f"/budget-plans/{plan['id']}")
        assert [i["name"] for i in reloaded.json()["items"]] == ["Rice"]

    async def test_update_item_status(self, authenticated_client):
        plan = await create_plan(authenticated_client)
        item = await add_item(authenticated_client, plan["id"])

        response = await authenticated_client.put(
            f"/budget-plans/{plan['id']}/items/{item['id']}",
            json={"name": "Rice 5kg", "amount": "300000", "status": "in_progress"},
        )
        assert response.status_code == 200, response.text
        assert response.json()["status"] == "in_progress"
        assert response.json()["name"] == "Rice 5kg"

    async def test_unknown_status_rejected(self, authenticated_client):
        plan = await create_plan(authenticated_client)
        item = await add_item(authenticated_client, plan["id"])

        response = await authenticated_client.put(
            f"/budget-plans/{plan['id']}/items/{item['id']}",
            json={"name": "Rice", "amount": "1", "status": "abandoned"},
        )
        assert response.status_code == 422

    async def test_delete_item(self, authenticated_client):
        plan = await create_plan(authenticated_client)
        rice = await add_item(authenticated_client, plan["id"], name="Rice")
        await add_item(authenticated_client, plan["id"], name="Oil")

        response = await authenticated_client.delete(
            f"/budget-plans/{plan['id']}/items/{rice['id']}"
        )
        assert response.status_code == 204

        reloaded = await authenticated_client.get(f"/budget-plans/{plan['id']}")
        assert [i["name"] for i in reloaded.json()["items"]] == ["Oil"]

    async def test_item_must_belong_to_plan(self, authenticated_client):
        first = await create_plan(authenticated_client, name="First")
        second = await create_plan(authenticated_client, name="Second")
        item = await add_item(authenticated_client, first["id"])

        response = await authenticated_client.delete(
            f"/budget-plans/{second['id']}/items/{item['id']}"
        )
        assert response.status_code == 404

    async def test_other_user_cannot_add_items(
        self, authenticated_client, second_authenticated_client
    ):
        plan = await create_plan(authenticated_client)
        response = await second_authenticated_client.post(
            f"/budget-plans/{plan['id']}/items", json={"name": "Sneaky", "amount": "1"}
        )
        assert response.status_code == 403
