"""
Strategy Configuration - Options record and HTTP client settings.

Strategy options come from the host per invocation. They are NOT
validated up front: a missing value surfaces as ConfigurationError from
whichever stage first reads it.
"""

import os
from dataclasses import dataclass
from typing import Any, Optional

from dodi_lock.exceptions import ConfigurationError


# Subgraph page size; also the address batch size per query.
SUBGRAPH_LIMIT = 1000

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "dodi-lock-strategy/0.1.0"

TIMEOUT_ENV_VAR = "DODI_LOCK_HTTP_TIMEOUT"


@dataclass
class ClientConfig:
    """HTTP settings shared by the subgraph client and JSON-RPC provider."""
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build from environment, falling back to defaults."""
        raw = os.environ.get(TIMEOUT_ENV_VAR)
        if not raw:
            return cls()
        try:
            timeout = float(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"{TIMEOUT_ENV_VAR} must be a number, got {raw!r}",
                config_key=TIMEOUT_ENV_VAR,
                original_error=e,
            ) from e
        return cls(timeout=timeout)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeout": self.timeout,
            "user_agent": self.user_agent,
        }


@dataclass
class StrategyOptions:
    """Typed view of the host's strategy options."""
    voting_power_contract_address: Optional[str] = None
    subgraph_endpoint: Optional[str] = None
    decimals: Optional[int] = None

    # host key -> attribute
    FIELD_NAMES = {
        "votingPowerContractAddress": "voting_power_contract_address",
        "subgraphEndpoint": "subgraph_endpoint",
        "decimals": "decimals",
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StrategyOptions":
        """Create from the host's camelCase option record."""
        return cls(
            voting_power_contract_address=data.get("votingPowerContractAddress"),
            subgraph_endpoint=data.get("subgraphEndpoint"),
            decimals=data.get("decimals"),
        )

    def require(self, key: str, component: Optional[str] = None) -> Any:
        """
        Get an option by its host key.

        Raises:
            ConfigurationError: If the option is missing
        """
        value = getattr(self, self.FIELD_NAMES[key])
        if value is None or value == "":
            raise ConfigurationError(
                f"Missing strategy option '{key}'",
                component=component,
                config_key=key,
            )
        return value

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the host's option record."""
        return {
            "votingPowerContractAddress": self.voting_power_contract_address,
            "subgraphEndpoint": self.subgraph_endpoint,
            "decimals": self.decimals,
        }
