"""
Tests for decimal precision — no floating point drift in money.

Amounts are Decimal end to end (request parsing, balance arithmetic,
Numeric(15, 2) columns) and serialized as strings. Floating point
representations of money cause rounding errors (0.1 + 0.2 =
0.30000000000000004); these tests make sure none leak through.

Tests verify:
  - Monetary fields come back as exact decimal strings
  - Repeated small postings don't accumulate rounding errors
  - Large values keep their cents
"""

from datetime import date
from decimal import Decimal


TODAY = date.today().isoformat()


async def open_wallet(client, balance="0"):
    response = await client.post(
        "/user-wallets", json={"new_wallet_name": "Cash", "balance": balance}
    )
    return response.json()


async def credit(client, wallet_id, amount):
    return await client.post(
        "/transactions",
        json={"user_wallet_id": wallet_id, "type": "credit", "amount": amount, "date": TODAY},
    )


class TestDecimalPrecision:

    async def test_amounts_serialized_as_strings(self, authenticated_client):
        wallet = await open_wallet(authenticated_client)
        response = await credit(authenticated_client, wallet["id"], "10.50")
        data = response.json()
        assert isinstance(data["transaction"]["amount"], str)
        assert isinstance(data["wallet"]["balance"], str)

    async def test_tenths_do_not_drift(self, authenticated_client):
        """0.10 + 0.20 must be exactly 0.30."""
        wallet = await open_wallet(authenticated_client)
        await credit(authenticated_client, wallet["id"], "0.10")
        await credit(authenticated_client, wallet["id"], "0.20")

        check = await authenticated_client.get(f"/user-wallets/{wallet['id']}/balance")
        data = check.json()
        assert Decimal(data["balance"]) == Decimal("0.30")
        assert Decimal(data["computed_balance"]) == Decimal("0.30")
        assert data["match"] is True

    async def test_many_small_postings(self, authenticated_client):
        wallet = await open_wallet(authenticated_client)
        for _ in range(30):
            await credit(authenticated_client, wallet["id"], "0.01")

        response = await authenticated_client.get(f"/user-wallets/{wallet['id']}")
        assert Decimal(response.json()["balance"]) == Decimal("0.30")

    async def test_large_values_keep_cents(self, authenticated_client):
        wallet = await open_wallet(authenticated_client, "1000000000.00")
        response = await credit(authenticated_client, wallet["id"], "0.01")
        assert Decimal(response.json()["wallet"]["balance"]) == Decimal("1000000000.01")
