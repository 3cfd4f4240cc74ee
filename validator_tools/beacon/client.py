"""Beacon API client for the few read-only endpoints validator-tools needs."""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from ..exceptions import BeaconAPIError, NetworkError

logger = logging.getLogger(__name__)

# Full validator lists on mainnet are large; give the node time to serialize them.
DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=600)


class BeaconClient:
    """Client for a conformant Beacon API.

    Every call is a single request: no retries, no pooling guarantees. A
    non-200 status raises ``BeaconAPIError`` carrying the response body;
    transport failures raise ``NetworkError``.
    """

    def __init__(self, base_url: str, timeout: aiohttp.ClientTimeout = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "BeaconClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def _get_data(self, path: str) -> Any:
        """GET ``path`` and unwrap the ``{"data": ...}`` envelope."""
        session = await self._ensure_session()
        url = f"{self.base_url}{path}"
        logger.debug(f"Fetching {url}")

        try:
            async with session.get(url, headers={"Accept": "application/json"}) as response:
                if response.status != 200:
                    text = await response.text()
                    raise BeaconAPIError(response.status, text, url)
                body = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"request to {url} failed: {e}") from e
        except ValueError as e:
            raise NetworkError(f"invalid JSON from {url}: {e}") from e

        if not isinstance(body, dict) or "data" not in body:
            raise NetworkError(f"response from {url} has no 'data' field")
        return body["data"]

    async def get_genesis(self) -> dict:
        """Get genesis information."""
        return await self._get_data("/eth/v1/beacon/genesis")

    async def get_fork(self, state_id: str = "head") -> dict:
        """Get fork information for a state."""
        return await self._get_data(f"/eth/v1/beacon/states/{state_id}/fork")

    async def get_spec(self) -> dict:
        """Get the chain spec/config."""
        return await self._get_data("/eth/v1/config/spec")

    async def get_validators(self, state_id: str = "head") -> list[dict]:
        """Get the validator registry for a state."""
        data = await self._get_data(f"/eth/v1/beacon/states/{state_id}/validators")
        if not isinstance(data, list):
            raise NetworkError(f"validators response for state {state_id} is not a list")
        return data

    async def get_latest_validator_index(self, state_id: str = "head") -> int:
        """Highest validator index in the registry.

        Entries whose index does not parse are skipped.
        """
        validators = await self.get_validators(state_id)

        max_index = -1
        for validator in validators:
            try:
                index = int(validator["index"])
            except (KeyError, TypeError, ValueError):
                logger.debug(f"Skipping validator entry with invalid index: {validator!r}")
                continue
            max_index = max(max_index, index)

        if max_index == -1:
            raise NetworkError("no valid validator indices found")

        logger.debug(f"Latest validator index at {state_id}: {max_index}")
        return max_index

    async def close(self) -> None:
        """Close the client and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
