"""SWAPI Client for canonical Star Wars attributes.

This module fetches records from the Star Wars API (https://swapi.dev):
- Name search per resource collection (people, vehicles, starships, ...)
- Single records by id (films and planets for reference resolution)
- Arbitrary resource paths (availability probes)

Every request has a bounded timeout and returns a ``FetchResult``; nothing
here raises on network trouble and nothing retries. Deciding what a failure
means for availability is the caller's job.

Usage:
------
async with SwapiClient() as swapi:
    result = await swapi.search(SwapiEndpoint.PEOPLE, "Leia Organa")
    if result.ok:
        records = result.data
"""

from typing import Any, Dict, Optional

import httpx

from swbrowser.enrichment.models import FetchResult, FetchStatus, SwapiEndpoint
from swbrowser.utils.logger import LoggerManager


# =============================================================================
# Constants
# =============================================================================

SWAPI_BASE_URL = "https://swapi.dev/api"
DEFAULT_TIMEOUT = 5.0
USER_AGENT = "StarWarsBrowser/1.0"

logger = LoggerManager.get_logger(__name__)


class SwapiClient:
    """Async SWAPI client with per-request timeouts."""

    def __init__(
        self,
        base_url: str = SWAPI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            base_url: SWAPI root
            timeout: Timeout in seconds applied to every request
            user_agent: User-Agent header value
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )

    async def __aenter__(self) -> "SwapiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def url_for(self, path: str) -> str:
        """Absolute URL for a resource path such as ``people/1/``."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(self, path: str, params: Optional[Dict[str, str]] = None) -> FetchResult:
        url = self.url_for(path)
        log_extra = {"extra_data": {"url": url, "params": params}}

        try:
            response = await self._client.get(url, params=params, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.warning("swapi.request.timeout", extra=log_extra)
            return FetchResult(FetchStatus.TIMEOUT, error=f"timeout after {self.timeout}s: {e}")
        except httpx.RequestError as e:
            logger.warning(f"swapi.request.network_error: {e}", extra=log_extra)
            return FetchResult(FetchStatus.ERROR, error=str(e))

        if response.status_code == 404:
            logger.debug("swapi.request.not_found", extra=log_extra)
            return FetchResult(FetchStatus.NOT_FOUND)

        if response.is_error:
            logger.warning(
                f"swapi.request.http_error: {response.status_code} {response.reason_phrase}",
                extra=log_extra,
            )
            return FetchResult(FetchStatus.ERROR, error=f"HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"swapi.response.invalid_json: {e}", extra=log_extra)
            return FetchResult(FetchStatus.MALFORMED, error="invalid JSON")

        return FetchResult(FetchStatus.OK, data=payload)

    async def search(self, endpoint: SwapiEndpoint, name: str) -> FetchResult:
        """Search a collection by name.

        Args:
            endpoint: SWAPI collection
            name: Search term

        Returns:
            FetchResult whose data is the list of matching records
            (empty for every non-OK status)
        """
        endpoint = SwapiEndpoint(endpoint)
        result = await self._request(f"{endpoint.value}/", params={"search": name})
        if not result.ok:
            return FetchResult(result.status, data=[], error=result.error)

        records = result.data.get("results") if isinstance(result.data, dict) else None
        if not isinstance(records, list):
            logger.warning(
                "swapi.search.unexpected_shape",
                extra={"extra_data": {"endpoint": endpoint.value, "name": name}},
            )
            return FetchResult(FetchStatus.MALFORMED, data=[], error="missing results list")

        records = [r for r in records if isinstance(r, dict)]
        logger.debug(
            f"Found {len(records)} SWAPI {endpoint.value} results for: {name}",
            extra={"extra_data": {"endpoint": endpoint.value, "count": len(records)}},
        )
        return FetchResult(FetchStatus.OK, data=records)

    async def get_by_id(self, endpoint: SwapiEndpoint, resource_id: Any) -> FetchResult:
        """Fetch one record by id.

        Args:
            endpoint: SWAPI collection
            resource_id: Numeric id as int or str

        Returns:
            FetchResult whose data is the record (None for non-OK statuses)
        """
        endpoint = SwapiEndpoint(endpoint)
        return await self.get_resource(f"{endpoint.value}/{resource_id}/")

    async def get_resource(self, path: str) -> FetchResult:
        """Fetch a single JSON object by path or absolute URL."""
        result = await self._request(path)
        if result.ok and not isinstance(result.data, dict):
            logger.warning("swapi.record.unexpected_shape", extra={"extra_data": {"path": path}})
            return FetchResult(FetchStatus.MALFORMED, error="expected a JSON object")
        return result
