"""Request and response models for FastAPI endpoints.

These Pydantic models define the API contract between clients and the server.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from swbrowser.enrichment.models import AvailabilityStatus, EnhancedPage, EnrichedEntity


class EnhancedPageResponse(BaseModel):
    """Response from GET /entities/{category}.

    Attributes:
        success: Whether the request was successful
        data: Enriched page (entities, pagination, enrichment summary)
        error: Optional error message if success=False
    """

    success: bool = Field(..., description="Whether the request succeeded")
    data: Optional[EnhancedPage] = Field(None, description="Enriched page")
    error: Optional[str] = Field(None, description="Error message if failed")


class EnrichedEntityResponse(BaseModel):
    """Response from GET /entities/{category}/{entity_id}."""

    success: bool = Field(..., description="Whether the request succeeded")
    data: Optional[EnrichedEntity] = Field(None, description="Enriched entity")
    error: Optional[str] = Field(None, description="Error message if failed")


class CategoryInfo(BaseModel):
    """One Databank category and the SWAPI collections it maps to."""

    category: str
    label: str
    swapi_endpoints: List[str] = Field(default_factory=list)
    enrichable: bool


class AdminActionResponse(BaseModel):
    """Response from operator actions (cache clear, forced retry).

    Attributes:
        success: Always True unless the service is not initialized
        removed: Number of cached entities dropped
        availability: Tracker state after the action
    """

    success: bool = True
    removed: int = Field(0, description="Cached entities removed")
    availability: AvailabilityStatus


class StatusResponse(BaseModel):
    """Response from GET /admin/status."""

    availability: AvailabilityStatus
    cache: Dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Response from /health endpoint.

    Attributes:
        status: Health status (healthy, degraded)
        swapi_available: Whether SWAPI enrichment is currently possible
        cached_entities: Number of enriched entities in memory
    """

    status: str = Field(..., description="Overall health status")
    swapi_available: bool = Field(..., description="SWAPI reachability")
    cached_entities: int = Field(..., description="Enriched entities in cache")
