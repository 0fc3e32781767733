"""
Base JSON Client - Shared aiohttp plumbing for remote reads.

Clients here make exactly one attempt per request. Retries, if any, are
the host's business.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp

from dodi_lock.config import ClientConfig
from dodi_lock.exceptions import FetchError


logger = logging.getLogger(__name__)


class BaseJsonClient(ABC):
    """
    Abstract base for clients that POST JSON and read JSON back.

    Owns its aiohttp session unless one is injected; an injected session
    is left open on close().
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config or ClientConfig.from_env()
        self._session = session
        self._owns_session = session is None
        self._last_latency_ms: Optional[float] = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in log lines and errors."""
        pass

    @property
    def last_latency_ms(self) -> Optional[float]:
        return self._last_latency_ms

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": self._config.user_agent,
        }

    async def _post_json(self, url: str, payload: Any) -> Any:
        """POST a JSON payload and decode the JSON response."""
        session = await self._get_session()

        start_time = time.time()
        try:
            async with session.post(url, json=payload) as response:
                self._last_latency_ms = (time.time() - start_time) * 1000

                if response.status >= 400:
                    body = await response.text()
                    logger.warning(f"[{self.name}] HTTP {response.status} from {url}")
                    raise FetchError(
                        message=f"HTTP {response.status}",
                        component=self.name,
                        status_code=response.status,
                        response_body=body[:500],
                        request_url=url,
                    )

                logger.debug(
                    f"[{self.name}] POST {url} ok, latency={self._last_latency_ms:.1f}ms"
                )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise FetchError(
                        message="Response is not valid JSON",
                        component=self.name,
                        status_code=response.status,
                        request_url=url,
                        original_error=e,
                    ) from e

        except aiohttp.ClientError as e:
            logger.warning(f"[{self.name}] Connection error to {url}: {e}")
            raise FetchError(
                message=f"Connection error: {e}",
                component=self.name,
                request_url=url,
                original_error=e,
            ) from e

        except asyncio.TimeoutError as e:
            logger.warning(f"[{self.name}] Request to {url} timed out")
            raise FetchError(
                message=f"Request timed out after {self._config.timeout}s",
                component=self.name,
                request_url=url,
                original_error=e,
            ) from e

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BaseJsonClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name})>"
