"""
Strategy Data Models - Typed records for lock positions and scores.

All of these are request-scoped: built fresh per invocation and
discarded once the score map is returned.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import IntEnum
from typing import Any, Optional

from dodi_lock.exceptions import InvalidSnapshotError, SchemaError
from dodi_lock.units import AMOUNT_CONTEXT, ZERO


LATEST = "latest"


class PoolKind(IntEnum):
    """
    Staking pools known to the voting power contract.

    The integer value is the uint8 argument passed to
    getVotingPowerMultiplier and must not change.
    """
    ROOM = 0
    LAZY = 1


def resolve_block_number(snapshot: Any) -> Optional[int]:
    """
    Resolve a host snapshot selector to a block height.

    Returns None for "latest" (chain head). Accepts non-negative ints,
    whole non-negative floats and decimal digit strings.

    Raises:
        InvalidSnapshotError: For anything else
    """
    if snapshot == LATEST:
        return None
    if isinstance(snapshot, bool):
        raise InvalidSnapshotError("Snapshot must not be a boolean", snapshot=snapshot)
    if isinstance(snapshot, int):
        if snapshot < 0:
            raise InvalidSnapshotError(
                f"Block height must be non-negative, got {snapshot}",
                snapshot=snapshot,
            )
        return snapshot
    if isinstance(snapshot, float) and snapshot.is_integer() and snapshot >= 0:
        return int(snapshot)
    if isinstance(snapshot, str) and snapshot.isdecimal():
        return int(snapshot)
    raise InvalidSnapshotError(
        f"Snapshot must be 'latest' or a block height, got {snapshot!r}",
        snapshot=snapshot,
    )


def _parse_amount(raw: dict[str, Any]) -> int:
    value = raw.get("amount")
    if value is None or isinstance(value, bool):
        raise SchemaError("Lock record has no amount", raw_data=raw, field_name="amount")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SchemaError(
            f"Lock amount is not an integer: {value!r}",
            raw_data=raw,
            field_name="amount",
            original_error=e,
        ) from e


def _parse_address(raw: dict[str, Any], field_name: str) -> str:
    value = raw.get(field_name)
    if not isinstance(value, str) or not value:
        raise SchemaError(
            f"Lock record has no {field_name}",
            raw_data=raw,
            field_name=field_name,
        )
    return value.lower()


@dataclass(frozen=True)
class LockRecord:
    """Unclaimed direct pool lock (subgraph lockEntities)."""
    beneficiary: str
    amount: int

    @property
    def owner(self) -> str:
        return self.beneficiary

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LockRecord":
        """Create from a subgraph row."""
        return cls(
            beneficiary=_parse_address(data, "beneficiary"),
            amount=_parse_amount(data),
        )


@dataclass(frozen=True)
class LazyLockRecord:
    """Unclaimed lazy pool lock (subgraph lazyPoolUserLockInfoEntities)."""
    user: str
    amount: int

    @property
    def owner(self) -> str:
        return self.user

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LazyLockRecord":
        """Create from a subgraph row."""
        return cls(
            user=_parse_address(data, "user"),
            amount=_parse_amount(data),
        )


@dataclass(frozen=True)
class PoolMultipliers:
    """Voting power multipliers read from the contract at one block."""
    room: Decimal
    lazy: Decimal

    def for_pool(self, kind: PoolKind) -> Decimal:
        """Get the multiplier for a pool kind."""
        if kind is PoolKind.ROOM:
            return self.room
        return self.lazy

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "room": str(self.room),
            "lazy": str(self.lazy),
        }


@dataclass
class BalanceAccumulator:
    """
    Lowercase address -> accumulated voting power.

    Absent addresses read as zero; there is no missing-vs-zero distinction.
    """
    _balances: dict[str, Decimal] = field(default_factory=dict)

    def get(self, address: str) -> Decimal:
        """Get the balance for an address, zero if absent."""
        return self._balances.get(address.lower(), ZERO)

    def add(self, address: str, amount: Decimal) -> None:
        """Add an amount to an address balance."""
        key = address.lower()
        self._balances[key] = AMOUNT_CONTEXT.add(self._balances.get(key, ZERO), amount)

    def merge(self, other: "BalanceAccumulator") -> None:
        """
        Merge another accumulator into this one.

        Keys from other overwrite ours. Address batches are disjoint, so a
        collision only happens for an address repeated across batches, in
        which case both sides hold the same total.
        """
        self._balances.update(other._balances)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and address.lower() in self._balances

    def __len__(self) -> int:
        return len(self._balances)

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {address: str(balance) for address, balance in self._balances.items()}
