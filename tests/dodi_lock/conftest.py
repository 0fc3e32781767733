"""
Shared fixtures for dodi-lock tests.
"""

import pytest

from tests.dodi_lock.fakes import FakeProvider


@pytest.fixture
def provider():
    """Provider with room multiplier 3 and lazy multiplier 2."""
    return FakeProvider({0: 3, 1: 2})


@pytest.fixture
def options():
    """Host option record."""
    return {
        "votingPowerContractAddress": "0x00000000000000000000000000000000000000d1",
        "subgraphEndpoint": "https://subgraph.example/dodi",
        "decimals": 6,
    }
