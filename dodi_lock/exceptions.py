"""
Strategy Exceptions - Custom exception hierarchy.

Every exception here is fatal to a single strategy invocation and is
raised straight to the host. Nothing is retried or swallowed.
"""

from datetime import datetime
from typing import Any, Optional


class StrategyError(Exception):
    """Base exception for all voting-power strategy errors."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.component = component
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.component:
            parts.append(f"[component={self.component}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class ConfigurationError(StrategyError):
    """A required strategy option was missing when a stage needed it."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, component, original_error, context)
        self.config_key = config_key

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["config_key"] = self.config_key
        return data


class InvalidSnapshotError(StrategyError):
    """Snapshot is neither "latest" nor a non-negative block height."""

    def __init__(
        self,
        message: str,
        snapshot: Any = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, "snapshot", None, context)
        self.snapshot = snapshot

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["snapshot"] = repr(self.snapshot)
        return data


class FetchError(StrategyError):
    """HTTP or connection failure talking to a remote service."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, component, original_error, context)
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "response_body": self.response_body,
            "request_url": self.request_url,
        })
        return data


class SubgraphQueryError(StrategyError):
    """The subgraph answered, but with GraphQL errors or without data."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        errors: Optional[list[Any]] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, "subgraph", original_error, context)
        self.endpoint = endpoint
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "endpoint": self.endpoint,
            "errors": [str(e)[:500] for e in self.errors],
        })
        return data


class ContractCallError(StrategyError):
    """A contract read reverted, or could not be encoded/decoded."""

    def __init__(
        self,
        message: str,
        call_key: Optional[str] = None,
        contract_address: Optional[str] = None,
        rpc_error: Optional[dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, "multicall", original_error, context)
        self.call_key = call_key
        self.contract_address = contract_address
        self.rpc_error = rpc_error

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "call_key": self.call_key,
            "contract_address": self.contract_address,
            "rpc_error": self.rpc_error,
        })
        return data


class SchemaError(StrategyError):
    """A query record is missing a field or carries a malformed value."""

    def __init__(
        self,
        message: str,
        raw_data: Optional[Any] = None,
        field_name: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, "positions", original_error, context)
        self.raw_data = raw_data
        self.field_name = field_name

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "raw_data": str(self.raw_data)[:500] if self.raw_data else None,
            "field_name": self.field_name,
        })
        return data
