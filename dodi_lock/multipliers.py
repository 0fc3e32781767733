"""
Multiplier Reader - Pool voting power multipliers from the contract.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from dodi_lock.clients.multicall import JsonRpcProvider, Multicaller
from dodi_lock.models import LATEST, PoolKind, PoolMultipliers


logger = logging.getLogger(__name__)


VOTING_POWER_ABI: list[dict[str, Any]] = [
    {
        "name": "getVotingPowerMultiplier",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "pool", "type": "uint8"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

CALL_KEYS = {
    PoolKind.ROOM: "roomOwnersPoolMultiplier",
    PoolKind.LAZY: "lazyPoolMultiplier",
}


async def read_pool_multipliers(
    network: str,
    provider: JsonRpcProvider,
    contract_address: str,
    block_number: Optional[int] = None,
) -> PoolMultipliers:
    """
    Read the room and lazy pool multipliers in one batched round trip.

    Args:
        network: Host network id
        provider: Read provider
        contract_address: Voting power multiplier contract
        block_number: Block height, or None for chain head

    Returns:
        PoolMultipliers with the raw uint256 values as Decimals

    Raises:
        ContractCallError: If either call reverts
        FetchError: If the provider is unreachable
    """
    block_tag = LATEST if block_number is None else block_number
    multi = Multicaller(network, provider, VOTING_POWER_ABI, block_tag=block_tag)

    for kind, key in CALL_KEYS.items():
        multi.call(key, contract_address, "getVotingPowerMultiplier", [int(kind)])

    result = await multi.execute()

    multipliers = PoolMultipliers(
        room=Decimal(result[CALL_KEYS[PoolKind.ROOM]]),
        lazy=Decimal(result[CALL_KEYS[PoolKind.LAZY]]),
    )
    logger.debug(f"[multipliers] block={block_tag} {multipliers.to_dict()}")
    return multipliers
