"""Pytest configuration and fixtures."""

import pytest

from simpledex import InMemoryAssetLedger, SimpleDex
from simpledex.models.events import DexEvent
from tests.helpers import ALICE, TOKEN_A, TOKEN_B, ManualClock, make_dex


@pytest.fixture
def clock() -> ManualClock:
    """Deterministic clock starting at 1_700_000_000."""
    return ManualClock()


@pytest.fixture
def dex_and_assets(clock: ManualClock) -> tuple[SimpleDex, InMemoryAssetLedger]:
    """Engine over a fresh ledger; ALICE, BOB and CAROL hold and approve every token."""
    return make_dex(clock=clock)


@pytest.fixture
def dex(dex_and_assets: tuple[SimpleDex, InMemoryAssetLedger]) -> SimpleDex:
    return dex_and_assets[0]


@pytest.fixture
def assets(dex_and_assets: tuple[SimpleDex, InMemoryAssetLedger]) -> InMemoryAssetLedger:
    return dex_and_assets[1]


@pytest.fixture
def events(dex: SimpleDex) -> list[DexEvent]:
    """Events delivered to a subscriber, in dispatch order."""
    received: list[DexEvent] = []
    dex.subscribe(received.append)
    return received


@pytest.fixture
def seeded_dex(dex: SimpleDex) -> SimpleDex:
    """Engine with an A/B pool holding 10_000 A and 20_000 B, funded by ALICE."""
    dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 10_000, 20_000)
    return dex
