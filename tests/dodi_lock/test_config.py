"""
Configuration Tests.
"""

import pytest

from dodi_lock.config import ClientConfig, StrategyOptions
from dodi_lock.exceptions import ConfigurationError


class TestStrategyOptions:
    """Tests for StrategyOptions."""

    def test_from_dict_round_trip(self, options):
        typed = StrategyOptions.from_dict(options)

        assert typed.voting_power_contract_address == options["votingPowerContractAddress"]
        assert typed.subgraph_endpoint == options["subgraphEndpoint"]
        assert typed.decimals == 6
        assert typed.to_dict() == options

    def test_missing_fields_are_none(self):
        typed = StrategyOptions.from_dict({})

        assert typed.voting_power_contract_address is None
        assert typed.subgraph_endpoint is None
        assert typed.decimals is None

    def test_require_missing_raises(self):
        typed = StrategyOptions.from_dict({"subgraphEndpoint": ""})

        with pytest.raises(ConfigurationError) as exc_info:
            typed.require("subgraphEndpoint", "positions")
        assert exc_info.value.config_key == "subgraphEndpoint"
        assert exc_info.value.component == "positions"
        assert exc_info.value.to_dict()["config_key"] == "subgraphEndpoint"

    def test_require_zero_decimals_is_present(self):
        assert StrategyOptions(decimals=0).require("decimals") == 0


class TestClientConfigEnv:
    """Tests for ClientConfig environment parsing."""

    def test_invalid_timeout_raises(self, monkeypatch):
        monkeypatch.setenv("DODI_LOCK_HTTP_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError, match="DODI_LOCK_HTTP_TIMEOUT"):
            ClientConfig.from_env()

    def test_to_dict(self):
        assert ClientConfig(timeout=2.0).to_dict() == {
            "timeout": 2.0,
            "user_agent": "dodi-lock-strategy/0.1.0",
        }
