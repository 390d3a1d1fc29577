"""
Tests for wallet types and user wallets.

These tests verify:
  - Managers create wallet types; members can't
  - Opening a wallet by type id or by a new type name
  - One wallet per (user, wallet type)
  - Wallets are private to their owner (admins may read any)
  - The balance endpoint reports maintained and computed balance
"""

from decimal import Decimal


async def open_wallet(client, name="Cash", balance="0"):
    response = await client.post(
        "/user-wallets", json={"new_wallet_name": name, "balance": balance}
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestWalletTypes:

    async def test_manager_creates_wallet_type(self, manager_client):
        response = await manager_client.post(
            "/wallets", json={"name": "Bank BCA", "description": "Main bank account"}
        )
        assert response.status_code == 201
        assert response.json()["name"] == "Bank BCA"

    async def test_duplicate_wallet_type(self, manager_client):
        await manager_client.post("/wallets", json={"name": "Bank BCA"})
        response = await manager_client.post("/wallets", json={"name": "Bank BCA"})
        assert response.status_code == 409

    async def test_member_cannot_create_wallet_type(self, authenticated_client):
        response = await authenticated_client.post("/wallets", json={"name": "Bank BCA"})
        assert response.status_code == 403

    async def test_anyone_can_list_wallet_types(self, manager_client, authenticated_client):
        await manager_client.post("/wallets", json={"name": "Cash"})
        response = await authenticated_client.get("/wallets")
        assert [w["name"] for w in response.json()] == ["Cash"]


class TestUserWallets:

    async def test_open_with_new_wallet_name(self, authenticated_client):
        wallet = await open_wallet(authenticated_client, "Cash", "500000.00")
        assert wallet["wallet_name"] == "Cash"
        assert wallet["user_id"] == authenticated_client.user_id
        assert Decimal(wallet["balance"]) == Decimal("500000.00")
        assert Decimal(wallet["opening_balance"]) == Decimal("500000.00")

    async def test_open_with_existing_wallet_type(self, manager_client, authenticated_client):
        wallet_type = await manager_client.post("/wallets", json={"name": "E-Money"})
        response = await authenticated_client.post(
            "/user-wallets",
            json={"wallet_id": wallet_type.json()["id"], "balance": "1000"},
        )
        assert response.status_code == 201
        assert response.json()["wallet_id"] == wallet_type.json()["id"]

    async def test_new_wallet_name_reuses_existing_type(
        self, authenticated_client, second_authenticated_client
    ):
        first = await open_wallet(authenticated_client, "Cash")
        second = await open_wallet(second_authenticated_client, "Cash")
        assert first["wallet_id"] == second["wallet_id"]

    async def test_same_wallet_twice_is_rejected(self, authenticated_client):
        await open_wallet(authenticated_client, "Cash")
        response = await authenticated_client.post(
            "/user-wallets", json={"new_wallet_name": "Cash", "balance": "10"}
        )
        assert response.status_code == 409

    async def test_wallet_id_or_name_required(self, authenticated_client):
        response = await authenticated_client.post("/user-wallets", json={"balance": "10"})
        assert response.status_code == 422

    async def test_negative_opening_balance_rejected(self, authenticated_client):
        response = await authenticated_client.post(
            "/user-wallets", json={"new_wallet_name": "Cash", "balance": "-1"}
        )
        assert response.status_code == 422

    async def test_unknown_wallet_type(self, authenticated_client):
        response = await authenticated_client.post(
            "/user-wallets",
            json={"wallet_id": "00000000-0000-0000-0000-000000000000", "balance": "10"},
        )
        assert response.status_code == 404

    async def test_list_only_own_wallets(self, authenticated_client, second_authenticated_client):
        mine = await open_wallet(authenticated_client, "Cash")
        await open_wallet(second_authenticated_client, "Bank")

        response = await authenticated_client.get("/user-wallets")
        assert [w["id"] for w in response.json()] == [mine["id"]]

    async def test_other_user_cannot_read_wallet(
        self, authenticated_client, second_authenticated_client
    ):
        wallet = await open_wallet(authenticated_client)
        response = await second_authenticated_client.get(f"/user-wallets/{wallet['id']}")
        assert response.status_code == 403
        response = await second_authenticated_client.get(f"/user-wallets/{wallet['id']}/balance")
        assert response.status_code == 403

    async def test_admin_can_read_any_wallet(self, authenticated_client, admin_client):
        wallet = await open_wallet(authenticated_client)
        response = await admin_client.get(f"/user-wallets/{wallet['id']}")
        assert response.status_code == 200


class TestBalance:

    async def test_fresh_wallet_balance_matches(self, authenticated_client):
        wallet = await open_wallet(authenticated_client, "Cash", "250.50")

        response = await authenticated_client.get(f"/user-wallets/{wallet['id']}/balance")
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["balance"]) == Decimal("250.50")
        assert Decimal(data["computed_balance"]) == Decimal("250.50")
        assert data["match"] is True
