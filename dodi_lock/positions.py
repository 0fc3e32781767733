"""
Position Aggregator - Locked balances per address from the subgraph.

Addresses are queried in batches of SUBGRAPH_LIMIT. Every batch asks for
both lock collections in a single query, and all batches run
concurrently. One failed batch fails the whole aggregation.
"""

import asyncio
import logging
from typing import Any, Optional, Sequence

from dodi_lock.clients.subgraph import ARGS_KEY, SubgraphClient
from dodi_lock.config import SUBGRAPH_LIMIT
from dodi_lock.exceptions import SchemaError
from dodi_lock.models import (
    BalanceAccumulator,
    LazyLockRecord,
    LockRecord,
    PoolKind,
    PoolMultipliers,
)
from dodi_lock.units import format_units, weighted


logger = logging.getLogger(__name__)


LOCK_COLLECTION = "lockEntities"
LAZY_LOCK_COLLECTION = "lazyPoolUserLockInfoEntities"

# collection -> (owner field, record type, pool)
COLLECTIONS = {
    LOCK_COLLECTION: ("beneficiary", LockRecord, PoolKind.ROOM),
    LAZY_LOCK_COLLECTION: ("user", LazyLockRecord, PoolKind.LAZY),
}


def chunk_addresses(
    addresses: Sequence[str],
    size: int = SUBGRAPH_LIMIT,
) -> list[list[str]]:
    """Split addresses into consecutive chunks of at most size."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    return [list(addresses[i:i + size]) for i in range(0, len(addresses), size)]


def build_lock_query(
    addresses: Sequence[str],
    block_number: Optional[int] = None,
) -> dict[str, Any]:
    """
    Build the combined lock query for one address batch.

    The block argument is only attached when a height is given; without
    it the subgraph answers at chain head.
    """
    lowered = [address.lower() for address in addresses]
    query: dict[str, Any] = {}

    for collection, (owner_field, _, _) in COLLECTIONS.items():
        args: dict[str, Any] = {
            "first": SUBGRAPH_LIMIT,
            "where": {
                f"{owner_field}_in": lowered,
                "claimed": False,
            },
        }
        if block_number is not None:
            args["block"] = {"number": block_number}

        query[collection] = {
            ARGS_KEY: args,
            owner_field: True,
            "amount": True,
        }

    return query


def accumulate_locks(
    data: dict[str, Any],
    decimals: int,
    multipliers: PoolMultipliers,
) -> BalanceAccumulator:
    """
    Turn one query response into weighted balances.

    Raises:
        SchemaError: If a collection or record field is missing
    """
    balances = BalanceAccumulator()

    for collection, (_, record_type, pool) in COLLECTIONS.items():
        rows = data.get(collection)
        if not isinstance(rows, list):
            raise SchemaError(
                f"Response has no '{collection}' list",
                raw_data=data,
                field_name=collection,
            )

        multiplier = multipliers.for_pool(pool)
        for row in rows:
            record = record_type.from_dict(row)
            balances.add(
                record.owner,
                weighted(format_units(record.amount, decimals), multiplier),
            )

    return balances


async def query_positions(
    client: SubgraphClient,
    addresses: Sequence[str],
    block_number: Optional[int],
    decimals: int,
    multipliers: PoolMultipliers,
) -> BalanceAccumulator:
    """Query and accumulate one address batch (at most SUBGRAPH_LIMIT)."""
    query = build_lock_query(addresses, block_number)
    data = await client.request(query)
    balances = accumulate_locks(data, decimals, multipliers)

    logger.debug(
        f"[positions] batch of {len(addresses)} -> "
        f"{len(balances)} address(es) with locks"
    )
    return balances


async def aggregate_positions(
    client: SubgraphClient,
    addresses: Sequence[str],
    block_number: Optional[int],
    decimals: int,
    multipliers: PoolMultipliers,
) -> BalanceAccumulator:
    """
    Query every address batch concurrently and merge the results.

    The first failing batch raises immediately; the remaining batches are
    cancelled and no partial result is returned.
    """
    chunks = chunk_addresses(addresses)
    tasks = [
        asyncio.ensure_future(
            query_positions(client, chunk, block_number, decimals, multipliers)
        )
        for chunk in chunks
    ]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(f"[positions] batch failed, cancelled {len(pending)} pending batch(es)")
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    merged = BalanceAccumulator()
    for balances in results:
        merged.merge(balances)

    logger.debug(f"[positions] {len(chunks)} batch(es) merged, {len(merged)} holder(s)")
    return merged
