"""
Clients package - Remote read clients used by the strategy.
"""

from dodi_lock.clients.base import BaseJsonClient
from dodi_lock.clients.multicall import JsonRpcProvider, Multicaller, to_rpc_block_tag
from dodi_lock.clients.subgraph import SubgraphClient, render_graphql


__all__ = [
    "BaseJsonClient",
    "JsonRpcProvider",
    "Multicaller",
    "SubgraphClient",
    "render_graphql",
    "to_rpc_block_tag",
]
