"""
dodi-lock - Voting power strategy for locked DoubleDice positions.

Scores addresses by their unclaimed locks in the room owners pool and the
lazy pool, each weighted by a multiplier read live from the voting power
contract at the snapshot block.

Quick Start:
    from dodi_lock import JsonRpcProvider, strategy

    async def get_scores():
        async with JsonRpcProvider("https://rpc.example.org") as provider:
            return await strategy(
                "doubledice.eth",
                "1",
                provider,
                ["0xAbC...", "0xdEf..."],
                {
                    "votingPowerContractAddress": "0x...",
                    "subgraphEndpoint": "https://api.thegraph.com/subgraphs/name/...",
                    "decimals": 18,
                },
                "latest",
            )

Pipeline:
- Multiplier Reader: getVotingPowerMultiplier(0|1), one batched round trip
- Position Aggregator: subgraph lock queries, 1000 addresses per batch
- Score Combiner: per-address sum, zero for addresses without locks
"""

from dodi_lock.clients import (
    BaseJsonClient,
    JsonRpcProvider,
    Multicaller,
    SubgraphClient,
    render_graphql,
)
from dodi_lock.config import ClientConfig, StrategyOptions, SUBGRAPH_LIMIT
from dodi_lock.exceptions import (
    ConfigurationError,
    ContractCallError,
    FetchError,
    InvalidSnapshotError,
    SchemaError,
    StrategyError,
    SubgraphQueryError,
)
from dodi_lock.models import (
    BalanceAccumulator,
    LATEST,
    LazyLockRecord,
    LockRecord,
    PoolKind,
    PoolMultipliers,
    resolve_block_number,
)
from dodi_lock.entrypoint import author, strategy, version
from dodi_lock.units import format_units


__version__ = version

__all__ = [
    # Entry point
    "strategy",
    "author",
    "version",

    # Models
    "BalanceAccumulator",
    "LATEST",
    "LazyLockRecord",
    "LockRecord",
    "PoolKind",
    "PoolMultipliers",
    "resolve_block_number",
    "format_units",

    # Config
    "ClientConfig",
    "StrategyOptions",
    "SUBGRAPH_LIMIT",

    # Exceptions
    "StrategyError",
    "ConfigurationError",
    "InvalidSnapshotError",
    "FetchError",
    "SubgraphQueryError",
    "ContractCallError",
    "SchemaError",

    # Clients
    "BaseJsonClient",
    "JsonRpcProvider",
    "Multicaller",
    "SubgraphClient",
    "render_graphql",
]
