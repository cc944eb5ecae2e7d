"""Test helpers module for shared test utilities.

- constants: Asset identifiers, accounts and starting balances
- custody: Custody variants for failure and reentrancy tests
"""

from tests.helpers.constants import (
    ADMIN,
    ALICE,
    BOB,
    CAROL,
    STARTING_BALANCE,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
)
from tests.helpers.custody import FlakyCustody, ReentrantCustody, fund_accounts

__all__ = [
    # Constants
    "ADMIN",
    "ALICE",
    "BOB",
    "CAROL",
    "STARTING_BALANCE",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    # Custody
    "FlakyCustody",
    "ReentrantCustody",
    "fund_accounts",
]
