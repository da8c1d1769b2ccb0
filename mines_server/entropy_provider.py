import asyncio
import logging
import time

import httpx

FALLBACK_PREFIX = "fallback-"


def fallback_seed(now: float | None = None) -> str:
    """Seed used when the public source is unavailable.

    The prefix can never appear in a hex block id, so fallback games are
    recognisable, and the value is still a valid HMAC key.
    """
    if now is None:
        now = time.time()
    return f"{FALLBACK_PREFIX}{int(now * 1000)}"


def is_fallback_seed(seed: str) -> bool:
    return seed.startswith(FALLBACK_PREFIX)


class EntropyProvider:
    """Source of a public, externally verifiable server seed."""

    async def fetch_public_seed(self, timeout: float) -> str:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class StaticEntropyProvider(EntropyProvider):
    """Always returns the same seed. Used offline and in tests."""

    def __init__(self, seed: str):
        self.seed = seed

    async def fetch_public_seed(self, timeout: float) -> str:
        return self.seed


class TronBlockEntropyProvider(EntropyProvider):
    """Uses the id of the latest TRON block as the server seed."""

    def __init__(
        self,
        url: str,
        seed_suffix: str = "2",
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.seed_suffix = seed_suffix
        self.client = client

    def get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient()
        return self.client

    async def _request_block_id(self, timeout: float) -> str | None:
        response = await self.get_client().post(self.url, json={}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
        if isinstance(data, dict) and data.get("blockID"):
            return str(data["blockID"])
        return None

    async def fetch_block_id(self, timeout: float) -> str | None:
        """Fetch the latest block id, or None on any failure within timeout seconds."""
        try:
            return await asyncio.wait_for(self._request_block_id(timeout), timeout=timeout)
        except asyncio.TimeoutError:
            logging.warning(f"fetch_block_id timed out after {timeout}s")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logging.warning(f"fetch_block_id failed: {e}")
        except ValueError as e:
            logging.warning(f"fetch_block_id returned invalid JSON: {e}")
        return None

    async def fetch_public_seed(self, timeout: float) -> str:
        block_id = await self.fetch_block_id(timeout)
        if block_id is None:
            seed = fallback_seed()
            logging.warning(f"Using fallback server seed {seed}")
            return seed
        return f"{block_id}{self.seed_suffix}"

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
