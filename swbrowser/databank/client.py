"""Databank Client for the primary Star Wars content API.

Fetches paginated/searchable entity lists and single entities. The Databank
is authoritative: it defines which entities exist. Failures never raise; they
come back as ``ServiceResponse(success=False, error=...)`` with a message fit
for display.

Usage:
------
async with DatabankClient() as databank:
    page = await databank.get_entities(EntityCategory.CHARACTERS, page=1, limit=9)
    if page.success:
        for entity in page.data.data:
            print(entity.name)
"""

from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from swbrowser.databank.models import (
    CATEGORY_MODELS,
    BaseEntity,
    EntityCategory,
    EntityPage,
    PageInfo,
    ServiceResponse,
)
from swbrowser.utils.logger import LoggerManager


# =============================================================================
# Constants
# =============================================================================

DATABANK_BASE_URL = "https://starwars-databank-server.vercel.app/api/v1"
DEFAULT_TIMEOUT = 10.0
DEFAULT_PAGE_SIZE = 9

SERVER_ERROR_MESSAGE = "Server error. Please try again later."
NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
MALFORMED_MESSAGE = "Unexpected response from databank"

logger = LoggerManager.get_logger(__name__)


def error_message_for(category: EntityCategory, error: Exception) -> tuple[str, Optional[int]]:
    """Map a transport error to a display message and upstream status.

    Args:
        category: Category being fetched
        error: httpx exception

    Returns:
        Tuple of (message, status_code or None)
    """
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 404:
            return f"{category.value} not found", status
        if status >= 500:
            return SERVER_ERROR_MESSAGE, status
        return f"Failed to fetch {category.value}", status
    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError)):
        return NETWORK_ERROR_MESSAGE, None
    return f"Failed to fetch {category.value}", None


class DatabankClient:
    """Async client for the Databank REST API."""

    def __init__(
        self,
        base_url: str = DATABANK_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        default_limit: int = DEFAULT_PAGE_SIZE,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Databank API root
            timeout: Per-request timeout in seconds
            default_limit: Page size used when the caller passes none
            client: Pre-built httpx client (tests inject a MockTransport here)
        """
        self.base_url = base_url.rstrip("/")
        self.default_limit = default_limit
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "DatabankClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("databank.request", extra={"extra_data": {"path": path, "params": params}})
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def get_entities(
        self,
        category: EntityCategory,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> ServiceResponse[EntityPage]:
        """Get a page of entities, optionally filtered by name search.

        Args:
            category: Entity category
            page: 1-based page number
            limit: Page size (defaults to the configured size)
            search: Optional name search

        Returns:
            ServiceResponse wrapping an EntityPage
        """
        category = EntityCategory(category)
        params: Dict[str, Any] = {"page": page, "limit": limit or self.default_limit}
        if search:
            params["search"] = search

        try:
            payload = await self._get_json(f"/{category.value}", params=params)
        except httpx.HTTPError as e:
            message, status = error_message_for(category, e)
            logger.error(
                f"Error fetching {category.value}: {e}",
                extra={"extra_data": {"category": category.value, "params": params}},
            )
            return ServiceResponse.fail(message, status)
        except ValueError as e:
            logger.error(
                f"Non-JSON {category.value} list response: {e}",
                extra={"extra_data": {"category": category.value, "params": params}},
            )
            return ServiceResponse.fail(MALFORMED_MESSAGE)

        try:
            entity_model = CATEGORY_MODELS[category]
            info = PageInfo.model_validate(payload.get("info") or {})
            items = [entity_model.model_validate(item) for item in payload.get("data") or []]
        except (AttributeError, ValidationError) as e:
            logger.error(
                f"Malformed {category.value} list response: {e}",
                extra={"extra_data": {"category": category.value}},
            )
            return ServiceResponse.fail(MALFORMED_MESSAGE)

        return ServiceResponse.ok(EntityPage(info=info, data=items))

    async def get_entity_by_id(
        self,
        category: EntityCategory,
        entity_id: str,
    ) -> ServiceResponse[BaseEntity]:
        """Get a single entity.

        Args:
            category: Entity category
            entity_id: Databank identifier

        Returns:
            ServiceResponse wrapping the category-specific entity
        """
        category = EntityCategory(category)
        try:
            payload = await self._get_json(f"/{category.value}/{entity_id}")
        except httpx.HTTPError as e:
            message, status = error_message_for(category, e)
            logger.error(
                f"Error fetching {category.value}/{entity_id}: {e}",
                extra={"extra_data": {"category": category.value, "id": entity_id}},
            )
            return ServiceResponse.fail(message, status)
        except ValueError as e:
            logger.error(
                f"Non-JSON {category.value}/{entity_id} response: {e}",
                extra={"extra_data": {"category": category.value, "id": entity_id}},
            )
            return ServiceResponse.fail(MALFORMED_MESSAGE)

        try:
            entity = CATEGORY_MODELS[category].model_validate(payload)
        except ValidationError as e:
            logger.error(
                f"Malformed {category.value}/{entity_id} response: {e}",
                extra={"extra_data": {"category": category.value, "id": entity_id}},
            )
            return ServiceResponse.fail(MALFORMED_MESSAGE)

        return ServiceResponse.ok(entity)

    async def search_entities(
        self,
        category: EntityCategory,
        query: str,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> ServiceResponse[EntityPage]:
        """Search entities by name (shorthand for get_entities with search)."""
        return await self.get_entities(category, page=page, limit=limit, search=query)
