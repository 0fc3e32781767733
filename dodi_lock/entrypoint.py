"""
dodi-lock Strategy - Voting power from unclaimed pool locks.

Voting power of an address is

    sum(room lock amounts) * room multiplier
  + sum(lazy lock amounts) * lazy multiplier

with amounts read from the staking subgraph and multipliers read from the
voting power contract, both at the snapshot block.
"""

import logging
from typing import Any, Sequence, Union

from dodi_lock.clients.multicall import JsonRpcProvider
from dodi_lock.clients.subgraph import SubgraphClient
from dodi_lock.config import StrategyOptions
from dodi_lock.models import resolve_block_number
from dodi_lock.multipliers import read_pool_multipliers
from dodi_lock.positions import aggregate_positions
from dodi_lock.scoring import combine_scores


logger = logging.getLogger(__name__)


author = "dev@doubledice"
version = "0.1.0"


async def strategy(
    space: str,
    network: str,
    provider: JsonRpcProvider,
    addresses: Sequence[str],
    options: Union[StrategyOptions, dict[str, Any]],
    snapshot: Union[int, str],
) -> dict[str, float]:
    """
    Compute voting power for each address.

    Args:
        space: Governance space id (unused, part of the host contract)
        network: Network id
        provider: Read provider for contract calls
        addresses: Addresses to score, any casing
        options: votingPowerContractAddress, subgraphEndpoint, decimals
        snapshot: "latest" or a block height

    Returns:
        Address (as given) -> score, 0 for addresses without locks

    Raises:
        StrategyError: Any failure; there are no partial results
    """
    if not isinstance(options, StrategyOptions):
        options = StrategyOptions.from_dict(options)
    block_number = resolve_block_number(snapshot)
    addresses = list(addresses)

    logger.info(
        f"[dodi-lock] space={space} network={network} "
        f"block={block_number if block_number is not None else 'latest'} "
        f"addresses={len(addresses)}"
    )

    multipliers = await read_pool_multipliers(
        network,
        provider,
        options.require("votingPowerContractAddress", "multipliers"),
        block_number,
    )

    endpoint = options.require("subgraphEndpoint", "positions")
    decimals = int(options.require("decimals", "positions"))

    async with SubgraphClient(endpoint) as client:
        balances = await aggregate_positions(
            client, addresses, block_number, decimals, multipliers
        )

    scores = combine_scores(balances, addresses)
    logger.info(
        f"[dodi-lock] scored {len(scores)} address(es), "
        f"{sum(1 for s in scores.values() if s > 0)} with voting power"
    )
    return scores
