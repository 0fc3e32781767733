"""
Strategy Entry Point Tests.

============================================================
PURPOSE
============================================================
End-to-end tests for strategy() against fake read clients.

TEST CATEGORIES:
- Score shape and casing
- Snapshot propagation
- Failure propagation
- Options handling

============================================================
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from dodi_lock import (
    ConfigurationError,
    ContractCallError,
    InvalidSnapshotError,
    StrategyOptions,
    SubgraphQueryError,
    author,
    strategy,
    version,
)
from dodi_lock.scoring import combine_scores, ordered_scores
from dodi_lock.models import BalanceAccumulator

from tests.dodi_lock.fakes import FakeProvider, FakeSubgraph


ALICE = "0xAAAaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
BOB = "0xBBBbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
CAROL = "0xCCCccccccccccccccccccccccccccccccccccccc"


@pytest.fixture
def subgraph():
    return FakeSubgraph(
        locks=[
            {"beneficiary": ALICE.lower(), "amount": "2500000"},
            {"beneficiary": CAROL.lower(), "amount": "1000000", "claimed": True},
        ],
        lazy_locks=[
            {"user": ALICE.lower(), "amount": "1000000"},
            {"user": CAROL.lower(), "amount": "4000000", "block": 200},
        ],
    )


async def _run(provider, options, subgraph, addresses, snapshot="latest"):
    with patch("dodi_lock.entrypoint.SubgraphClient", return_value=subgraph) as client_cls:
        scores = await strategy("doubledice.eth", "1", provider, addresses, options, snapshot)
    return scores, client_cls


# ============================================================
# SCORE TESTS
# ============================================================

class TestStrategyScores:
    """Tests for the returned score map."""

    def test_metadata(self):
        assert author == "dev@doubledice"
        assert version == "0.1.0"

    @pytest.mark.asyncio
    async def test_scores_every_address_in_original_casing(self, provider, options, subgraph):
        scores, client_cls = await _run(provider, options, subgraph, [ALICE, BOB, CAROL])

        assert list(scores) == [ALICE, BOB, CAROL]
        # 2.5 room * 3 + 1 lazy * 2
        assert scores[ALICE] == 9.5
        assert scores[BOB] == 0
        # claimed room lock ignored, lazy lock counted at head
        assert scores[CAROL] == 8.0
        client_cls.assert_called_once_with(options["subgraphEndpoint"])

    @pytest.mark.asyncio
    async def test_duplicate_addresses_collapse(self, provider, options, subgraph):
        scores, _ = await _run(provider, options, subgraph, [ALICE, BOB, ALICE])

        assert scores == {ALICE: 9.5, BOB: 0.0}

    @pytest.mark.asyncio
    async def test_empty_address_list(self, provider, options, subgraph):
        scores, _ = await _run(provider, options, subgraph, [])

        assert scores == {}
        assert subgraph.queries == []

    @pytest.mark.asyncio
    async def test_accepts_strategy_options(self, provider, options, subgraph):
        typed = StrategyOptions.from_dict(options)

        scores, _ = await _run(provider, typed, subgraph, [ALICE])

        assert scores == {ALICE: 9.5}


# ============================================================
# SNAPSHOT TESTS
# ============================================================

class TestStrategySnapshot:
    """Tests for snapshot propagation to every read."""

    @pytest.mark.asyncio
    async def test_latest_has_no_block_filter(self, provider, options, subgraph):
        await _run(provider, options, subgraph, [ALICE], "latest")

        assert [params[1] for _, params in provider.batches[0]] == ["latest", "latest"]
        for selection in subgraph.queries[0].values():
            assert "block" not in selection["__args"]

    @pytest.mark.asyncio
    async def test_block_height_on_every_read(self, provider, options, subgraph):
        await _run(provider, options, subgraph, [ALICE], 12345678)

        assert len(provider.batches) == 1
        assert [params[1] for _, params in provider.batches[0]] == [hex(12345678)] * 2
        for selection in subgraph.queries[0].values():
            assert selection["__args"]["block"] == {"number": 12345678}

    @pytest.mark.asyncio
    async def test_scores_at_past_block(self, provider, options, subgraph):
        scores, _ = await _run(provider, options, subgraph, [CAROL], 150)

        assert scores == {CAROL: 0.0}

    @pytest.mark.asyncio
    async def test_invalid_snapshot_raises(self, provider, options, subgraph):
        with pytest.raises(InvalidSnapshotError):
            await _run(provider, options, subgraph, [ALICE], "yesterday")
        assert provider.batches == []


# ============================================================
# FAILURE TESTS
# ============================================================

class TestStrategyFailures:
    """Tests for all-or-nothing failure behavior."""

    @pytest.mark.asyncio
    async def test_multiplier_revert_aborts(self, options, subgraph):
        provider = FakeProvider({0: 3, 1: 2}, revert_pools={1})

        with pytest.raises(ContractCallError):
            await _run(provider, options, subgraph, [ALICE])
        assert subgraph.queries == []

    @pytest.mark.asyncio
    async def test_subgraph_failure_aborts(self, provider, options):
        subgraph = FakeSubgraph(fail_for=BOB.lower())

        with pytest.raises(SubgraphQueryError):
            await _run(provider, options, subgraph, [ALICE, BOB])

    @pytest.mark.asyncio
    async def test_missing_contract_address(self, provider, options, subgraph):
        del options["votingPowerContractAddress"]

        with pytest.raises(ConfigurationError) as exc_info:
            await _run(provider, options, subgraph, [ALICE])
        assert exc_info.value.config_key == "votingPowerContractAddress"
        assert provider.batches == []

    @pytest.mark.asyncio
    async def test_missing_endpoint_surfaces_after_multipliers(self, provider, options, subgraph):
        del options["subgraphEndpoint"]

        with pytest.raises(ConfigurationError) as exc_info:
            await _run(provider, options, subgraph, [ALICE])
        assert exc_info.value.config_key == "subgraphEndpoint"
        assert len(provider.batches) == 1

    @pytest.mark.asyncio
    async def test_missing_decimals(self, provider, options, subgraph):
        options["decimals"] = None

        with pytest.raises(ConfigurationError, match="decimals"):
            await _run(provider, options, subgraph, [ALICE])


# ============================================================
# SCORE COMBINER TESTS
# ============================================================

class TestCombineScores:
    """Tests for the score combiner on its own."""

    def test_ordered_scores_default_zero(self):
        balances = BalanceAccumulator()
        balances.add("0xaa", Decimal(5))

        assert ordered_scores(balances, ["0xbb", "0xAA"]) == [0, 5]

    def test_mixed_casing_keeps_each_key(self):
        balances = BalanceAccumulator()
        balances.add("0xaa", Decimal(5))

        assert combine_scores(balances, ["0xAA", "0xaa"]) == {"0xAA": 5.0, "0xaa": 5.0}
