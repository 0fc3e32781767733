"""
Contract Reads - JSON-RPC provider and batched eth_call.

A Multicaller queues read-only contract calls and sends them to the
provider as a single JSON-RPC batch, so N calls cost one round trip.
All calls in a batch are pinned to the same block tag.

Usage:
    provider = JsonRpcProvider("https://rpc.example.org")
    multi = Multicaller("1", provider, ABI, block_tag=19_000_000)
    multi.call("room", contract, "getVotingPowerMultiplier", [0])
    multi.call("lazy", contract, "getVotingPowerMultiplier", [1])
    result = await multi.execute()   # {"room": ..., "lazy": ...}
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

import aiohttp
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector

from dodi_lock.clients.base import BaseJsonClient
from dodi_lock.config import ClientConfig
from dodi_lock.exceptions import ContractCallError, FetchError
from dodi_lock.models import LATEST


logger = logging.getLogger(__name__)


BlockTag = Union[int, str]


def to_rpc_block_tag(block_tag: BlockTag) -> str:
    """Format a block tag for JSON-RPC: hex height or a named tag."""
    if isinstance(block_tag, int) and not isinstance(block_tag, bool):
        return hex(block_tag)
    return str(block_tag)


class JsonRpcProvider(BaseJsonClient):
    """
    Minimal read-only Ethereum JSON-RPC provider.

    Only batch requests are supported; a single call is a batch of one.
    """

    def __init__(
        self,
        rpc_url: str,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(config, session)
        self._rpc_url = rpc_url

    @property
    def name(self) -> str:
        return "jsonrpc"

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def batch(
        self,
        requests: Sequence[tuple[str, list[Any]]],
    ) -> list[dict[str, Any]]:
        """
        Send (method, params) pairs as one JSON-RPC batch.

        Returns:
            Response objects in request order, each holding "result" or "error"

        Raises:
            FetchError: On HTTP failure or a malformed batch response
        """
        payload = [
            {"jsonrpc": "2.0", "id": i, "method": method, "params": params}
            for i, (method, params) in enumerate(requests)
        ]
        response = await self._post_json(self._rpc_url, payload)

        if not isinstance(response, list):
            # some nodes answer a rejected batch with a single error object
            raise FetchError(
                message=f"Expected a batch response, got {type(response).__name__}",
                component=self.name,
                response_body=str(response)[:500],
                request_url=self._rpc_url,
            )

        by_id = {
            item.get("id"): item for item in response if isinstance(item, dict)
        }
        missing = [i for i in range(len(payload)) if i not in by_id]
        if missing:
            raise FetchError(
                message=f"Batch response is missing ids {missing}",
                component=self.name,
                request_url=self._rpc_url,
            )
        return [by_id[i] for i in range(len(payload))]


@dataclass(frozen=True)
class _QueuedCall:
    key: str
    address: str
    function_name: str
    input_types: tuple[str, ...]
    output_types: tuple[str, ...]
    params: tuple[Any, ...]

    @property
    def signature(self) -> str:
        return f"{self.function_name}({','.join(self.input_types)})"

    def calldata(self) -> str:
        selector = function_signature_to_4byte_selector(self.signature)
        try:
            args = encode(list(self.input_types), list(self.params))
        except EncodingError as e:
            raise ContractCallError(
                f"Cannot encode arguments for {self.signature}: {e}",
                call_key=self.key,
                contract_address=self.address,
                original_error=e,
            ) from e
        return "0x" + (selector + args).hex()

    def decode_result(self, result: str) -> Any:
        try:
            raw = bytes.fromhex(result[2:] if result.startswith("0x") else result)
        except ValueError as e:
            raise ContractCallError(
                f"Return data of {self.signature} is not hex",
                call_key=self.key,
                contract_address=self.address,
                original_error=e,
            ) from e
        if not raw and self.output_types:
            raise ContractCallError(
                f"Empty return data from {self.signature}",
                call_key=self.key,
                contract_address=self.address,
            )
        try:
            values = decode(list(self.output_types), raw)
        except DecodingError as e:
            raise ContractCallError(
                f"Cannot decode return data of {self.signature}: {e}",
                call_key=self.key,
                contract_address=self.address,
                original_error=e,
            ) from e
        if len(values) == 1:
            return values[0]
        return values


class Multicaller:
    """Queue contract reads and execute them as one JSON-RPC batch."""

    def __init__(
        self,
        network: str,
        provider: JsonRpcProvider,
        abi: list[dict[str, Any]],
        block_tag: BlockTag = LATEST,
    ) -> None:
        self.network = network
        self.provider = provider
        self.block_tag = block_tag
        self._functions = {
            item["name"]: item
            for item in abi
            if item.get("type", "function") == "function"
        }
        self._calls: list[_QueuedCall] = []

    def call(
        self,
        key: str,
        address: str,
        function_name: str,
        params: Sequence[Any] = (),
    ) -> "Multicaller":
        """
        Queue a read call whose decoded result will be stored under key.

        Raises:
            ContractCallError: If function_name is not in the ABI
        """
        fn = self._functions.get(function_name)
        if fn is None:
            raise ContractCallError(
                f"Function '{function_name}' not found in ABI",
                call_key=key,
                contract_address=address,
            )
        self._calls.append(_QueuedCall(
            key=key,
            address=address,
            function_name=function_name,
            input_types=tuple(i["type"] for i in fn.get("inputs", [])),
            output_types=tuple(o["type"] for o in fn.get("outputs", [])),
            params=tuple(params),
        ))
        return self

    async def execute(self) -> dict[str, Any]:
        """
        Send all queued calls and decode their results.

        The queue is emptied even if execution fails.

        Raises:
            ContractCallError: If any call reverts or returns undecodable data
            FetchError: If the provider is unreachable
        """
        calls, self._calls = self._calls, []
        if not calls:
            return {}

        block = to_rpc_block_tag(self.block_tag)
        requests = [
            ("eth_call", [{"to": c.address, "data": c.calldata()}, block])
            for c in calls
        ]
        logger.debug(
            f"[multicall] network={self.network} block={block} "
            f"sending {len(requests)} call(s)"
        )

        responses = await self.provider.batch(requests)

        results: dict[str, Any] = {}
        for call, response in zip(calls, responses):
            error = response.get("error")
            if error is not None:
                message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
                logger.warning(f"[multicall] {call.signature} failed: {message}")
                raise ContractCallError(
                    f"{call.signature} failed: {message}",
                    call_key=call.key,
                    contract_address=call.address,
                    rpc_error=error if isinstance(error, dict) else {"message": message},
                )
            result = response.get("result")
            if not isinstance(result, str):
                raise ContractCallError(
                    f"{call.signature} returned no result",
                    call_key=call.key,
                    contract_address=call.address,
                )
            results[call.key] = call.decode_result(result)

        return results
