"""Test helpers: address constants, factories and fakes."""

from tests.helpers.constants import (
    ALICE,
    BOB,
    CAROL,
    INITIAL_BALANCE,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
)
from tests.helpers.factories import ManualClock, fund, make_dex

__all__ = [
    "ALICE",
    "BOB",
    "CAROL",
    "INITIAL_BALANCE",
    "TOKEN_A",
    "TOKEN_B",
    "TOKEN_C",
    "ManualClock",
    "fund",
    "make_dex",
]
