"""Client for downloading the services registry."""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from layerhub.core.config import MAX_RETRIES, REQUEST_TIMEOUT, RETRY_DELAY
from layerhub.core.errors import ServicesFetchError

logger = logging.getLogger(__name__)


class ServicesClient:
    """Client for fetching raw layer descriptors from a services URL."""

    def __init__(self, max_retries: int = MAX_RETRIES, retry_delay: float = RETRY_DELAY):
        """
        Initialize services client.

        Args:
            max_retries: Number of attempts before giving up on a URL
            retry_delay: Base delay between attempts (multiplied by attempt number)
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session:
            await self.session.close()

    async def fetch_services(self, url: str) -> list[dict[str, Any]]:
        """
        Download the services registry.

        Args:
            url: URL returning a JSON array of raw layer descriptors

        Returns:
            List of raw descriptor dictionaries

        Raises:
            ServicesFetchError: If the registry could not be downloaded or is not a JSON array
        """
        last_error = "no attempt made"

        for attempt in range(self.max_retries):
            try:
                async with self.session.get(url) as response:
                    if response.status == 200:
                        # Registries are often served as text/plain
                        payload = await response.json(content_type=None)
                        if not isinstance(payload, list):
                            raise ServicesFetchError(url, "response is not a JSON array")
                        logger.debug(f"Loaded {len(payload)} services from {url}")
                        return payload
                    elif response.status == 404:
                        raise ServicesFetchError(url, "not found (404)")
                    else:
                        last_error = f"HTTP {response.status}"
                        logger.warning(
                            f"HTTP {response.status} for {url} (attempt {attempt + 1}/{self.max_retries})"
                        )
            except ServicesFetchError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                last_error = str(e) or type(e).__name__
                logger.warning(
                    f"Error downloading {url}: {last_error} (attempt {attempt + 1}/{self.max_retries})"
                )

            if attempt < self.max_retries - 1:
                await asyncio.sleep(self.retry_delay * (attempt + 1))

        raise ServicesFetchError(url, last_error)


async def fetch_services(url: str) -> list[dict[str, Any]]:
    """Fetch a services registry with a short-lived client session."""
    async with ServicesClient() as client:
        return await client.fetch_services(url)
