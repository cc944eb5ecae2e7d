"""Shared type definitions for API models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from ammpool.safe_int import UINT256_MAX


def validate_uint256(value: Any) -> str:
    """Normalize an amount to a uint256 decimal string.

    Accepts ints and decimal strings. JSON booleans are rejected even though
    bool is an int subclass.

    Raises:
        ValueError: If the value is not an integer in [0, 2^256-1]
    """
    if isinstance(value, bool) or not isinstance(value, int | str):
        raise ValueError(f"Amount must be a decimal string or int, got {type(value).__name__}")

    try:
        parsed = int(value)
    except ValueError as err:
        raise ValueError(f"Amount is not a decimal integer: '{value}'") from err

    if not 0 <= parsed <= UINT256_MAX:
        raise ValueError(f"Amount outside uint256 range: {value}")
    return str(parsed)


# Token amount or liquidity as a decimal string
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Account or asset identifier
Account = Annotated[str, Field(min_length=1, max_length=128)]
