"""
Subgraph Client - GraphQL reads against an indexed query service.

Queries are written as nested dicts, one key per collection:

    {
        "lockEntities": {
            "__args": {"first": 1000, "where": {"claimed": False}},
            "beneficiary": True,
            "amount": True,
        }
    }

and rendered to GraphQL text before being POSTed.
"""

import json
import logging
from decimal import Decimal
from typing import Any, Optional

import aiohttp

from dodi_lock.clients.base import BaseJsonClient
from dodi_lock.config import ClientConfig
from dodi_lock.exceptions import SubgraphQueryError


logger = logging.getLogger(__name__)


ARGS_KEY = "__args"


def render_graphql(query: dict[str, Any]) -> str:
    """Render a nested query dict to a GraphQL query document."""
    return "query " + _render_selection(query, 0)


def _render_selection(fields: dict[str, Any], depth: int) -> str:
    pad = "  " * (depth + 1)
    lines = ["{"]
    for name, value in fields.items():
        if name == ARGS_KEY:
            continue
        if isinstance(value, dict):
            args = value.get(ARGS_KEY)
            head = f"{name}({_render_args(args)})" if args else name
            lines.append(f"{pad}{head} {_render_selection(value, depth + 1)}")
        elif value:
            lines.append(f"{pad}{name}")
    lines.append("  " * depth + "}")
    return "\n".join(lines)


def _render_args(args: dict[str, Any]) -> str:
    return ", ".join(f"{key}: {_render_value(value)}" for key, value in args.items())


def _render_value(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_render_value(v) for v in value) + "]"
    if isinstance(value, dict):
        return "{" + _render_args(value) + "}"
    raise TypeError(f"Cannot render {type(value).__name__} as a GraphQL value")


class SubgraphClient(BaseJsonClient):
    """
    Client for a single subgraph endpoint.

    Usage:
        async with SubgraphClient(endpoint) as client:
            data = await client.request(query)
    """

    def __init__(
        self,
        endpoint: str,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(config, session)
        self._endpoint = endpoint

    @property
    def name(self) -> str:
        return "subgraph"

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def request(self, query: dict[str, Any]) -> dict[str, Any]:
        """
        Run a query and return its data object.

        Raises:
            FetchError: On HTTP or connection failure
            SubgraphQueryError: If the response has errors or no data
        """
        text = render_graphql(query)
        logger.debug(f"[{self.name}] Query {list(query)} -> {self._endpoint}")

        response = await self._post_json(self._endpoint, {"query": text})

        if not isinstance(response, dict):
            raise SubgraphQueryError(
                f"Unexpected response type {type(response).__name__}",
                endpoint=self._endpoint,
            )

        errors = response.get("errors")
        if errors:
            logger.warning(f"[{self.name}] Query returned {len(errors)} error(s)")
            raise SubgraphQueryError(
                f"Subgraph error: {_first_message(errors)}",
                endpoint=self._endpoint,
                errors=errors,
            )

        data = response.get("data")
        if data is None:
            raise SubgraphQueryError("Response has no data", endpoint=self._endpoint)

        return data


def _first_message(errors: list[Any]) -> str:
    first = errors[0]
    if isinstance(first, dict):
        return str(first.get("message", first))
    return str(first)
