"""
Async client for the Indonesian Quran API (https://quran-api-id.vercel.app).

Usage:
    async with QuranClient() as client:
        surah = await client.fetch_surah(1)
"""

from __future__ import annotations

import asyncio
import logging
import os
import random
from typing import Any, List, Optional

import aiohttp

from .utils.loaders import parse_surah_list, parse_surah_payload
from .utils.types import JsonDict, Surah

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://quran-api-id.vercel.app"
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class QuranAPIError(RuntimeError):
    """The verse API returned an error status or an unexpected payload."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


async def _sleep_backoff(attempt: int) -> None:
    # Exponential backoff with jitter.
    base = min(2 ** attempt, 30) * 0.5
    jitter = random.random() * 0.5
    await asyncio.sleep(base + jitter)


def _is_retryable_error(err: Exception) -> bool:
    if isinstance(err, QuranAPIError):
        return err.status in RETRYABLE_STATUS
    return isinstance(err, (aiohttp.ClientConnectionError, asyncio.TimeoutError))


class QuranClient:
    """HTTP client for surah and verse data."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: int = 3,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            base_url: API root (default: QURAN_API_BASE_URL or the public API)
            timeout: Total request timeout in seconds (default: QURAN_API_TIMEOUT or 30)
            max_retries: Attempts per request for transient failures
            session: Externally managed session; not closed by this client
        """
        self.base_url = (base_url or os.getenv("QURAN_API_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = float(timeout if timeout is not None else os.getenv("QURAN_API_TIMEOUT", "30"))
        self.max_retries = max(1, max_retries)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "QuranClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, path: str) -> JsonDict:
        url = f"{self.base_url}{path}"
        for attempt in range(self.max_retries):
            try:
                session = await self._get_session()
                async with session.get(url) as response:
                    if response.status != 200:
                        raise QuranAPIError(f"HTTP Error {response.status} for {url}", status=response.status)
                    return await response.json(content_type=None)
            except Exception as e:
                if attempt >= self.max_retries - 1 or not _is_retryable_error(e):
                    raise
                logger.debug("Retrying %s after %s (attempt %d)", url, e, attempt + 1)
                await _sleep_backoff(attempt)
        raise RuntimeError("unreachable")

    async def fetch_surah(self, surah_number: int) -> Surah:
        """Fetch one surah with all of its verses."""
        payload = await self._get_json(f"/surah/{surah_number}")
        try:
            return parse_surah_payload(payload)
        except ValueError as e:
            raise QuranAPIError(f"Surah {surah_number}: {e}") from e

    async def fetch_surah_list(self) -> List[JsonDict]:
        """Fetch the summary list of all surahs."""
        payload = await self._get_json("/surah")
        return parse_surah_list(payload)
