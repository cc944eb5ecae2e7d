"""Tests for the pydantic request and response models."""

import pytest
from pydantic import ValidationError

from ammpool.liquidity import DepositQuote
from ammpool.models import DepositRequest, DepositResponse, PoolState, SwapRequest
from ammpool.models.types import validate_uint256
from ammpool.safe_int import UINT256_MAX


class TestUint256:
    """Tests for uint256 validation."""

    def test_int_and_string(self):
        assert validate_uint256(42) == "42"
        assert validate_uint256("42") == "42"
        assert validate_uint256(str(UINT256_MAX)) == str(UINT256_MAX)

    @pytest.mark.parametrize("value", [-1, "-1", UINT256_MAX + 1, "1.5", "abc", True, 1.0, None])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            validate_uint256(value)


class TestRequests:
    def test_swap_request_aliases(self):
        request = SwapRequest.model_validate(
            {"user": "bob", "assetIn": 0, "assetOut": 1, "amountIn": 500}
        )
        assert request.asset_in == 0
        assert request.amount_in == "500"
        assert request.min_amount_out == "0"
        assert request.value == "0"

    def test_swap_request_by_field_name(self):
        request = SwapRequest(user="bob", asset_in=1, asset_out=0, amount_in="7")
        assert request.asset_out == 0

    def test_negative_index_rejected(self):
        with pytest.raises(ValidationError):
            SwapRequest.model_validate(
                {"user": "bob", "assetIn": -1, "assetOut": 1, "amountIn": "5"}
            )

    def test_deposit_amounts_normalized(self):
        request = DepositRequest.model_validate({"provider": "alice", "amounts": [1000, "0100"]})
        assert request.amounts == ["1000", "100"]


class TestResponses:
    def test_deposit_response_from_quote(self):
        response = DepositResponse.from_quote(DepositQuote(1414, (1000, 2000), True))
        assert response.model_dump() == {
            "liquidity": "1414",
            "amounts": ["1000", "2000"],
            "bootstrap": True,
        }

    def test_pool_state_serializes_camel_case(self):
        state = PoolState(
            assets=["a", "b"],
            reserves=["1", "2"],
            total_liquidity="1",
            fee_bps=30,
            paused=False,
        )
        dumped = state.model_dump(by_alias=True)
        assert dumped["totalLiquidity"] == "1"
        assert dumped["feeBps"] == 30
