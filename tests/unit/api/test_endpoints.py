"""Unit tests for the pool HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from ammpool.api.endpoints import get_admin_token, get_pool
from ammpool.api.main import MAX_REQUEST_SIZE, app
from tests.helpers import ALICE, BOB, CAROL, STARTING_BALANCE, TOKEN_A, TOKEN_B

ADMIN_TOKEN = "s3cret-admin-token"
ADMIN_HEADERS = {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture
def client(pool):
    """Test client operating on the `pool` fixture."""
    app.dependency_overrides[get_pool] = lambda: pool
    app.dependency_overrides[get_admin_token] = lambda: ADMIN_TOKEN
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client):
    response = client.post("/pool/deposit", json={"provider": ALICE, "amounts": ["1000", "1000"]})
    assert response.status_code == 200
    return client


class TestQueries:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_empty_pool_state(self, client):
        response = client.get("/pool")
        assert response.status_code == 200
        assert response.json() == {
            "assets": [TOKEN_A, TOKEN_B],
            "reserves": ["0", "0"],
            "totalLiquidity": "0",
            "feeBps": 30,
            "paused": False,
        }

    def test_liquidity_balance(self, seeded_client):
        response = seeded_client.get(f"/pool/liquidity/{ALICE}")
        assert response.json() == {"holder": ALICE, "liquidity": "1000"}

    def test_required_amounts(self, seeded_client):
        response = seeded_client.get("/pool/required-amounts", params={"referenceAmount": 100})
        assert response.status_code == 200
        assert response.json() == {"liquidity": "100", "amounts": ["100", "100"], "bootstrap": False}

    def test_required_amounts_empty_pool(self, client):
        response = client.get("/pool/required-amounts", params={"referenceAmount": 100})
        assert response.status_code == 404
        assert response.json()["error"] == "EmptyPool"

    def test_quote(self, seeded_client):
        response = seeded_client.get(
            "/pool/quote", params={"assetIn": 0, "assetOut": 1, "amountIn": 500}
        )
        assert response.status_code == 200
        assert response.json()["amountOut"] == "332"

    def test_quote_amount_in(self, seeded_client):
        response = seeded_client.get(
            "/pool/quote-in", params={"assetIn": 0, "assetOut": 1, "amountOut": 332}
        )
        assert response.status_code == 200
        assert response.json() == {
            "assetIn": 0,
            "assetOut": 1,
            "amountIn": "500",
            "amountOut": "332",
        }

    def test_quote_amount_in_unreachable(self, seeded_client):
        response = seeded_client.get(
            "/pool/quote-in", params={"assetIn": 0, "assetOut": 1, "amountOut": 1000}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientLiquidity"

    def test_fee_surplus(self, seeded_client, custody):
        custody.donate(TOKEN_A, BOB, 12)
        response = seeded_client.get("/pool/fees")
        assert response.json() == {"surplus": {TOKEN_A: "12", TOKEN_B: "0"}}


class TestOperations:
    """Tests for the state-changing endpoints."""

    def test_deposit(self, client):
        response = client.post("/pool/deposit", json={"provider": ALICE, "amounts": ["1000", "1000"]})
        assert response.status_code == 200
        assert response.json() == {
            "liquidity": "1000",
            "amounts": ["1000", "1000"],
            "bootstrap": True,
        }

    def test_swap(self, seeded_client, pool):
        response = seeded_client.post(
            "/pool/swap",
            json={"user": BOB, "assetIn": 0, "assetOut": 1, "amountIn": "500", "minAmountOut": "1"},
        )
        assert response.status_code == 200
        assert response.json() == {
            "assetIn": 0,
            "assetOut": 1,
            "amountIn": "500",
            "amountOut": "332",
        }
        assert pool.reserves() == {TOKEN_A: 1500, TOKEN_B: 668}

    def test_redeem(self, seeded_client):
        response = seeded_client.post("/pool/redeem", json={"provider": ALICE, "liquidity": "250"})
        assert response.status_code == 200
        assert response.json() == {"liquidity": "250", "amounts": ["250", "250"]}

    def test_withdraw_fees(self, seeded_client, custody):
        custody.donate(TOKEN_B, BOB, 40)
        response = seeded_client.post(
            "/pool/fees/withdraw", json={"asset": TOKEN_B, "to": CAROL}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json() == {"asset": TOKEN_B, "to": CAROL, "amount": "40"}
        assert custody.account_balance(TOKEN_B, CAROL) == 40

    def test_fee_rate(self, client):
        response = client.post("/pool/fee-rate", json={"feeBps": 5}, headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["feeBps"] == 5

    def test_pause_and_unpause(self, client):
        assert client.post("/pool/pause", headers=ADMIN_HEADERS).json()["paused"] is True
        assert client.post("/pool/unpause", headers=ADMIN_HEADERS).json()["paused"] is False

    def test_fund(self, client, custody):
        response = client.post(
            "/custody/fund", json={"asset": TOKEN_A, "account": CAROL, "amount": "77"}
        )
        assert response.status_code == 200
        assert response.json() == {"asset": TOKEN_A, "account": CAROL, "balance": "77"}
        assert custody.account_balance(TOKEN_A, CAROL) == 77


class TestErrorMapping:
    """Pool errors map to JSON bodies with a status per error kind."""

    def test_slippage(self, seeded_client):
        response = seeded_client.post(
            "/pool/swap",
            json={"user": BOB, "assetIn": 0, "assetOut": 1, "amountIn": "500", "minAmountOut": "333"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "SlippageExceeded"

    def test_slippage_error_body(self, seeded_client):
        response = seeded_client.post(
            "/pool/swap",
            json={"user": BOB, "assetIn": 0, "assetOut": 1, "amountIn": "500", "minAmountOut": "333"},
        )
        assert response.json() == {
            "error": "SlippageExceeded",
            "detail": "Output 332 below minimum 333",
        }

    def test_unauthorized(self, client):
        response = client.post("/pool/pause")
        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized"

    def test_paused(self, seeded_client):
        seeded_client.post("/pool/pause", headers=ADMIN_HEADERS)
        response = seeded_client.post(
            "/pool/swap", json={"user": BOB, "assetIn": 0, "assetOut": 1, "amountIn": "500"}
        )
        assert response.status_code == 409
        assert response.json()["error"] == "PoolPaused"

    def test_transfer_failed(self, seeded_client, pool, custody):
        response = seeded_client.post(
            "/pool/swap", json={"user": CAROL, "assetIn": 0, "assetOut": 1, "amountIn": "500"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "TransferFailed"
        assert pool.reserves() == {TOKEN_A: 1000, TOKEN_B: 1000}

    def test_insufficient_balance(self, seeded_client, custody):
        response = seeded_client.post("/pool/redeem", json={"provider": BOB, "liquidity": "1"})
        assert response.status_code == 400
        assert response.json()["error"] == "InsufficientBalance"
        assert custody.account_balance(TOKEN_A, BOB) == STARTING_BALANCE


class TestRequestValidation:
    """Schema errors are rejected before reaching the pool."""

    @pytest.mark.parametrize("amount", ["-1", "abc", "1.5", str(2**256)])
    def test_invalid_uint256(self, client, amount):
        response = client.post("/pool/deposit", json={"provider": ALICE, "amounts": [amount, "1"]})
        assert response.status_code == 422

    def test_missing_field(self, client):
        response = client.post("/pool/swap", json={"user": BOB, "assetIn": 0, "assetOut": 1})
        assert response.status_code == 422

    def test_empty_account(self, client):
        response = client.post("/custody/fund", json={"asset": TOKEN_A, "account": "", "amount": "1"})
        assert response.status_code == 422

    def test_request_too_large(self, client):
        response = client.post(
            "/pool/deposit",
            content=b"x" * (MAX_REQUEST_SIZE + 1),
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 413


class TestAdminAuth:
    """Admin routes act as the pool admin only with a valid X-Admin-Token."""

    def test_caller_in_body_is_ignored(self, seeded_client, pool, custody):
        custody.donate(TOKEN_B, BOB, 40)
        response = seeded_client.post(
            "/pool/fees/withdraw", json={"caller": pool.admin, "asset": TOKEN_B, "to": CAROL}
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Unauthorized"
        assert custody.account_balance(TOKEN_B, CAROL) == 0
        assert pool.fee_surplus()[TOKEN_B] == 40

    def test_wrong_token(self, client, pool):
        response = client.post("/pool/pause", headers={"X-Admin-Token": "guess"})
        assert response.status_code == 403
        assert pool.paused is False

    def test_fee_rate_requires_token(self, client, pool):
        response = client.post("/pool/fee-rate", json={"caller": pool.admin, "feeBps": 5})
        assert response.status_code == 403
        assert pool.fee_bps == 30

    def test_disabled_without_configured_token(self, client, pool):
        app.dependency_overrides[get_admin_token] = lambda: None
        response = client.post("/pool/pause", headers={"X-Admin-Token": ""})
        assert response.status_code == 403
        assert "disabled" in response.json()["detail"]
        assert pool.paused is False

    def test_token_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("AMM_ADMIN_TOKEN", "from-env")
        assert get_admin_token() == "from-env"
        monkeypatch.setenv("AMM_ADMIN_TOKEN", "")
        assert get_admin_token() is None
