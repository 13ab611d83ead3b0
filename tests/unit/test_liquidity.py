"""Tests for adding and removing liquidity."""

import pytest

from simpledex import InMemoryAssetLedger, SimpleDex
from simpledex.errors import (
    AssetTransferFailed,
    EmptyPool,
    IdenticalTokens,
    InsufficientLiquidity,
    InvalidAmount,
)
from simpledex.models.events import LiquidityAdded, LiquidityRemoved
from simpledex.safe_int import UINT256_MAX
from tests.helpers import ALICE, BOB, INITIAL_BALANCE, TOKEN_A, TOKEN_B, TOKEN_C, ManualClock


class TestAddLiquidity:
    """Tests for add_liquidity."""

    def test_creates_pool(self, dex: SimpleDex, assets: InMemoryAssetLedger):
        minted = dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)

        # isqrt(2_000_000) = 1414
        assert minted == 1414
        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 1414
        assert assets.balance_of(TOKEN_A, dex.address) == 1000
        assert assets.balance_of(TOKEN_B, dex.address) == 2000
        assert assets.balance_of(TOKEN_A, ALICE) == INITIAL_BALANCE - 1000

    def test_reversed_argument_order_maps_to_canonical_reserves(self, dex: SimpleDex):
        dex.add_liquidity(ALICE, TOKEN_B, TOKEN_A, 2000, 1000)

        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.token0, pool.token1) == (TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)

    def test_deposits_accumulate(self, dex: SimpleDex):
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)
        dex.add_liquidity(BOB, TOKEN_B, TOKEN_A, 400, 100)

        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (1100, 2400)
        # 1414 + isqrt(40_000)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 1414 + 200

    def test_emits_event_in_caller_order(self, dex: SimpleDex, events: list, clock: ManualClock):
        dex.add_liquidity(ALICE, TOKEN_B, TOKEN_A, 2000, 1000)

        assert events == [
            LiquidityAdded(
                token_a=TOKEN_B,
                token_b=TOKEN_A,
                amount_a=2000,
                amount_b=1000,
                timestamp=clock.now,
            )
        ]

    def test_identical_tokens(self, dex: SimpleDex):
        with pytest.raises(IdenticalTokens, match="Tokens must be different"):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_A, 1000, 1000)

    def test_identical_tokens_checked_before_amounts(self, dex: SimpleDex):
        with pytest.raises(IdenticalTokens):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_A, 0, 0)

    @pytest.mark.parametrize("amount_a,amount_b", [(0, 1000), (1000, 0), (0, 0)])
    def test_zero_amount(self, dex: SimpleDex, amount_a, amount_b):
        with pytest.raises(InvalidAmount, match="Amount must be greater than 0"):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, amount_a, amount_b)

    def test_amount_above_uint256(self, dex: SimpleDex):
        with pytest.raises(InvalidAmount):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, UINT256_MAX + 1, 1)

    def test_invalid_address(self, dex: SimpleDex):
        with pytest.raises(ValueError, match="Invalid address"):
            dex.add_liquidity(ALICE, "0x1234", TOKEN_B, 1, 1)

    def test_second_pull_failure_rolls_back_first(self, dex: SimpleDex, assets: InMemoryAssetLedger, events: list):
        """If token_b cannot be pulled, token_a's pull is undone too."""
        assets.approve(TOKEN_C, ALICE, dex.address, 0)

        with pytest.raises(AssetTransferFailed):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_C, 1000, 1000)

        assert assets.balance_of(TOKEN_A, ALICE) == INITIAL_BALANCE
        assert assets.balance_of(TOKEN_A, dex.address) == 0
        assert dex.get_pool(TOKEN_A, TOKEN_C).is_empty
        assert dex.get_liquidity(TOKEN_A, TOKEN_C) == 0
        assert events == []

    def test_insufficient_balance(self, dex: SimpleDex, assets: InMemoryAssetLedger):
        with pytest.raises(AssetTransferFailed):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, INITIAL_BALANCE + 1, 1)
        assert dex.get_pool(TOKEN_A, TOKEN_B).is_empty

    def test_reserve_overflow_rolls_back(self, dex: SimpleDex, assets: InMemoryAssetLedger):
        """A deposit pushing a reserve past uint256 fails with no state change."""
        assets.mint(TOKEN_A, ALICE, UINT256_MAX)
        assets.mint(TOKEN_B, ALICE, 10)
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, UINT256_MAX, 1)

        with pytest.raises(InvalidAmount, match="overflow"):
            dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1, 1)

        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (UINT256_MAX, 1)


class TestRemoveLiquidity:
    """Tests for remove_liquidity."""

    def test_full_withdrawal_empties_pool(self, dex: SimpleDex, assets: InMemoryAssetLedger):
        minted = dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)

        assert dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, minted) == (1000, 2000)

        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (0, 0)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 0
        assert assets.balance_of(TOKEN_A, ALICE) == INITIAL_BALANCE
        assert assets.balance_of(TOKEN_B, ALICE) == INITIAL_BALANCE

    def test_partial_withdrawal_is_pro_rata(self, dex: SimpleDex):
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)

        # 1000 * 707 // 1414, 2000 * 707 // 1414
        assert dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 707) == (500, 1000)

        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (500, 1000)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 707

    def test_reversed_order_returns_caller_order(self, dex: SimpleDex, events: list, clock: ManualClock):
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)
        clock.advance(60)

        assert dex.remove_liquidity(ALICE, TOKEN_B, TOKEN_A, 1414) == (2000, 1000)
        assert events[-1] == LiquidityRemoved(
            token_a=TOKEN_B,
            token_b=TOKEN_A,
            amount_a=2000,
            amount_b=1000,
            timestamp=clock.now,
        )

    def test_anyone_can_withdraw_pooled_liquidity(self, dex: SimpleDex, assets: InMemoryAssetLedger):
        """Liquidity is tracked per pair only, so any caller may burn it."""
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)
        dex.remove_liquidity(BOB, TOKEN_A, TOKEN_B, 1414)
        assert assets.balance_of(TOKEN_A, BOB) == INITIAL_BALANCE + 1000

    def test_zero_liquidity(self, dex: SimpleDex):
        with pytest.raises(InvalidAmount):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 0)

    def test_more_than_tracked(self, dex: SimpleDex):
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)
        with pytest.raises(InsufficientLiquidity):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 1415)

    def test_unknown_pool(self, dex: SimpleDex):
        with pytest.raises(InsufficientLiquidity):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 1)

    def test_identical_tokens(self, dex: SimpleDex):
        """Same-token pairs never hold liquidity, so the total check fails first."""
        with pytest.raises(InsufficientLiquidity):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_A, 1)

    def test_identical_tokens_with_tracked_liquidity(self, dex: SimpleDex):
        with dex.registry.mutate_pool(TOKEN_A, TOKEN_A) as pool:
            pool.reserve0, pool.reserve1, pool.total_liquidity = 10, 10, 10
        with pytest.raises(IdenticalTokens):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_A, 1)

    def test_empty_pool_with_tracked_liquidity(self, dex: SimpleDex):
        """Tracked units left over after reserves drained fail with EmptyPool."""
        with dex.registry.mutate_pool(TOKEN_A, TOKEN_B) as pool:
            pool.total_liquidity = 100
        with pytest.raises(EmptyPool):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 50)

    def test_share_rounding_to_zero(self, dex: SimpleDex):
        # isqrt(1_000_000) = 1000 units; burning 1 gives 1 * 1 // 1000 = 0 of token A
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1, 1_000_000)
        with pytest.raises(InvalidAmount):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 1)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 1000

    def test_tracked_and_geometric_totals_diverge(self, dex: SimpleDex):
        """Withdrawals split against sqrt(reserve0 * reserve1), not the tracked total."""
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1, 10_000)
        # tracked: 1414 + 100; geometric: isqrt(1001 * 12000) = 3465
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 1514

        amount_a, amount_b = dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 1514)

        assert (amount_a, amount_b) == (1001 * 1514 // 3465, 12000 * 1514 // 3465)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 0
        assert not dex.get_pool(TOKEN_A, TOKEN_B).is_empty

    def test_failed_payout_rolls_back(self, dex: SimpleDex, assets: InMemoryAssetLedger, events: list):
        """If the engine cannot pay out, reserves and totals are restored."""
        dex.add_liquidity(ALICE, TOKEN_A, TOKEN_B, 1000, 2000)
        # Drain the engine's TOKEN_B balance behind its back
        assets.transfer(TOKEN_B, dex.address, BOB, 2000)

        with pytest.raises(AssetTransferFailed):
            dex.remove_liquidity(ALICE, TOKEN_A, TOKEN_B, 1414)

        pool = dex.get_pool(TOKEN_A, TOKEN_B)
        assert (pool.reserve0, pool.reserve1) == (1000, 2000)
        assert dex.get_liquidity(TOKEN_A, TOKEN_B) == 1414
        assert assets.balance_of(TOKEN_A, dex.address) == 1000
        assert [type(e) for e in events] == [LiquidityAdded]
