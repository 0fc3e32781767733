"""
Score Combiner - Map merged balances back onto the input addresses.
"""

from decimal import Decimal
from typing import Sequence

from dodi_lock.models import BalanceAccumulator


def ordered_scores(
    balances: BalanceAccumulator,
    addresses: Sequence[str],
) -> list[Decimal]:
    """One score per input address, in input order, zero when absent."""
    return [balances.get(address) for address in addresses]


def combine_scores(
    balances: BalanceAccumulator,
    addresses: Sequence[str],
) -> dict[str, float]:
    """
    Build the host score map.

    Keys keep the caller's address casing. A repeated address collapses
    to one key, last occurrence wins.
    """
    scores = ordered_scores(balances, addresses)
    return {address: float(score) for address, score in zip(addresses, scores)}
