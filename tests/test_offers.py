"""
Tests for the offer lifecycle.

These tests verify:
  - Sales users create offers; leads can't
  - Accepting opens exactly one subscription for the lead, pending approval,
    starting today and ending term_months later, billed one month out
  - Rejecting creates no subscription
  - An unexpected failure while accepting leaves the offer pending and
    no subscription behind (500 internal_error)
  - A decided offer can't be decided again (409 invalid_state)
  - Only the lead an offer was made to may decide it
  - Visibility: leads see their own offers, staff see all
"""

import re
from datetime import date

from sqlalchemy import func, select

from bizdesk.lifecycle import add_months
from bizdesk.models.subscription import Subscription
from bizdesk.services import offer_service


async def make_offer(sales_client, lead_client, price):
    response = await sales_client.post(
        "/offers",
        json={"user_id": lead_client.user_id, "product_price_id": price["id"]},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateOffer:

    async def test_sales_creates_pending_offer(self, sales_client, authenticated_client, price):
        offer = await make_offer(sales_client, authenticated_client, price)
        assert offer["status"] == "pending"
        assert offer["user_id"] == authenticated_client.user_id
        assert offer["created_by_id"] == sales_client.user_id
        assert re.fullmatch(r"OFR-[0-9A-F]{6}", offer["offer_number"])

    async def test_lead_cannot_create_offer(self, authenticated_client, second_authenticated_client, price):
        response = await authenticated_client.post(
            "/offers",
            json={"user_id": second_authenticated_client.user_id, "product_price_id": price["id"]},
        )
        assert response.status_code == 403

    async def test_offer_for_unknown_lead(self, sales_client, price):
        response = await sales_client.post(
            "/offers",
            json={"user_id": "00000000-0000-0000-0000-000000000000", "product_price_id": price["id"]},
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"

    async def test_offer_for_unknown_price(self, sales_client, authenticated_client):
        response = await sales_client.post(
            "/offers",
            json={
                "user_id": authenticated_client.user_id,
                "product_price_id": "00000000-0000-0000-0000-000000000000",
            },
        )
        assert response.status_code == 404

    async def test_offer_for_price_of_inactive_product(
        self, sales_client, authenticated_client, price, deactivate_product
    ):
        await deactivate_product(price["product_id"])

        response = await sales_client.post(
            "/offers",
            json={"user_id": authenticated_client.user_id, "product_price_id": price["id"]},
        )
        assert response.status_code == 404
        assert response.json()["error_type"] == "not_found"


class TestAcceptOffer:

    async def test_accept_creates_subscription(self, sales_client, authenticated_client, price):
        offer = await make_offer(sales_client, authenticated_client, price)

        response = await authenticated_client.post(f"/offers/{offer['id']}/accept")
        assert response.status_code == 200, response.text
        data = response.json()

        assert data["offer"]["status"] == "accepted"
        assert data["offer"]["accepted_at"] is not None

        subscription = data["subscription"]
        today = date.today()
        assert subscription["user_id"] == authenticated_client.user_id
        assert subscription["product_price_id"] == price["id"]
        assert subscription["status"] == "pending_approval"
        assert subscription["auto_renew"] is False
        assert subscription["approved_by_id"] is None
        assert subscription["start_date"] == today.isoformat()
        assert subscription["end_date"] == add_months(today, price["term_months"]).isoformat()
        assert subscription["next_billing_date"] == add_months(today, 1).isoformat()
        assert re.fullmatch(r"SUB-[0-9A-F]{13}", subscription["subscription_number"])

    async def test_accept_twice_fails_without_second_subscription(
        self, sales_client, authenticated_client, price
    ):
        offer = await make_offer(sales_client, authenticated_client, price)
        await authenticated_client.post(f"/offers/{offer['id']}/accept")

        response = await authenticated_client.post(f"/offers/{offer['id']}/accept")
        assert response.status_code == 409
        body = response.json()
        assert body["error_type"] == "invalid_state"
        assert body["current_status"] == "accepted"

        subscriptions = await authenticated_client.get("/subscriptions")
        assert len(subscriptions.json()) == 1

    async def test_accept_after_reject_fails(self, sales_client, authenticated_client, price):
        offer = await make_offer(sales_client, authenticated_client, price)
        await authenticated_client.post(f"/offers/{offer['id']}/reject")

        response = await authenticated_client.post(f"/offers/{offer['id']}/accept")
        assert response.status_code == 409
        assert response.json()["current_status"] == "rejected"

        subscriptions = await authenticated_client.get("/subscriptions")
        assert subscriptions.json() == []

    async def test_other_user_cannot_accept(
        self, sales_client, authenticated_client, second_authenticated_client, price
    ):
        offer = await make_offer(sales_client, authenticated_client, price)

        response = await second_authenticated_client.post(f"/offers/{offer['id']}/accept")
        assert response.status_code == 403
        assert response.json()["error_type"] == "forbidden"

        still_pending = await authenticated_client.get(f"/offers/{offer['id']}")
        assert still_pending.json()["status"] == "pending"

    async def test_sales_cannot_accept_on_behalf_of_lead(self, sales_client, authenticated_client, price):
        offer = await make_offer(sales_client, authenticated_client, price)
        response = await sales_client.post(f"/offers/{offer['id']}/accept")
        assert response.status_code == 403

    async def test_accept_unknown_offer(self, authenticated_client):
        response = await authenticated_client.post(
            "/offers/00000000-0000-0000-0000-000000000000/accept"
        )
        assert response.status_code == 404

    async def test_failure_while_opening_subscription_leaves_offer_pending(
        self, monkeypatch, client_factory, sales_client, price, db_session
    ):
        lead = await client_factory("lead@example.com", raise_app_exceptions=False)
        offer = await make_offer(sales_client, lead, price)

        async def numbering_fails(db):
            raise RuntimeError("disk full")

        monkeypatch.setattr(offer_service, "generate_subscription_number", numbering_fails)

        response = await lead.post(f"/offers/{offer['id']}/accept")
        assert response.status_code == 500
        assert response.json()["error_type"] == "internal_error"

        # The offer was already marked accepted in the session when this failed
        unchanged = await lead.get(f"/offers/{offer['id']}")
        assert unchanged.json()["status"] == "pending"
        assert unchanged.json()["accepted_at"] is None
        assert await db_session.scalar(select(func.count()).select_from(Subscription)) == 0


class TestRejectOffer:

    async def test_reject(self, sales_client, authenticated_client, price):
        offer = await make_offer(sales_client, authenticated_client, price)

        response = await authenticated_client.post(f"/offers/{offer['id']}/reject")
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert response.json()["accepted_at"] is None

        subscriptions = await authenticated_client.get("/subscriptions")
        assert subscriptions.json() == []

    async def test_reject_twice_fails(self, sales_client, authenticated_client, price):
        offer = await make_offer(sales_client, authenticated_client, price)
        await authenticated_client.post(f"/offers/{offer['id']}/reject")

        response = await authenticated_client.post(f"/offers/{offer['id']}/reject")
        assert response.status_code == 409


class TestOfferVisibility:

    async def test_leads_see_only_their_offers(
        self, sales_client, authenticated_client, second_authenticated_client, price
    ):
        mine = await make_offer(sales_client, authenticated_client, price)
        theirs = await make_offer(sales_client, second_authenticated_client, price)

        listed = await authenticated_client.get("/offers")
        assert [o["id"] for o in listed.json()] == [mine["id"]]

        response = await authenticated_client.get(f"/offers/{theirs['id']}")
        assert response.status_code == 403

    async def test_staff_see_all_offers(
        self, sales_client, authenticated_client, second_authenticated_client, price
    ):
        await make_offer(sales_client, authenticated_client, price)
        await make_offer(sales_client, second_authenticated_client, price)

        listed = await sales_client.get("/offers")
        assert len(listed.json()) == 2

    async def test_status_filter(self, sales_client, authenticated_client, price):
        first = await make_offer(sales_client, authenticated_client, price)
        await make_offer(sales_client, authenticated_client, price)
        await authenticated_client.post(f"/offers/{first['id']}/reject")

        pending = await authenticated_client.get("/offers", params={"status": "pending"})
        rejected = await authenticated_client.get("/offers", params={"status": "rejected"})
        assert len(pending.json()) == 1
        assert [o["id"] for o in rejected.json()] == [first["id"]]
