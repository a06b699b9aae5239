"""FastAPI application for the Star Wars databank browser.

This module provides the HTTP API layer that:
- Serves Databank entity pages enriched with SWAPI attributes
- Serves single enriched entities
- Exposes operator controls (clear cache, force SWAPI retry, status)
"""

from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.api.models import (
    AdminActionResponse,
    CategoryInfo,
    EnhancedPageResponse,
    EnrichedEntityResponse,
    HealthResponse,
    StatusResponse,
)
from swbrowser.config import load_settings
from swbrowser.databank.models import EntityCategory
from swbrowser.enrichment.context import build_context
from swbrowser.enrichment.enrichment_service import EnrichmentService
from swbrowser.enrichment.exceptions import PrimarySourceError
from swbrowser.enrichment.models import ENDPOINTS_BY_CATEGORY
from swbrowser.utils.logger import LoggerManager

# Initialize logger
logger = LoggerManager.get_logger(__name__)

# Initialize rate limiter (per client IP)
limiter = Limiter(key_func=get_remote_address, default_limits=["120/minute"])

# Initialize FastAPI app
app = FastAPI(
    title="Star Wars Databank Browser API",
    description="Databank entities enriched with canonical SWAPI attributes",
    version="0.1.0",
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware (allow all origins for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global state (initialized on startup unless injected beforehand)
service: Optional[EnrichmentService] = None


def get_service() -> EnrichmentService:
    """Get enrichment service instance.

    Raises:
        HTTPException: If the service is not initialized
    """
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Enrichment service not initialized",
        )
    return service


@app.on_event("startup")
async def startup_event():
    """Build the enrichment context once per process."""
    global service

    if service is None:
        settings = load_settings()
        LoggerManager.configure(
            level=settings.logging.level,
            log_dir=settings.logging.dir,
            use_json=settings.logging.json_files,
        )
        service = EnrichmentService(build_context(settings))

    logger.info(
        "API started",
        extra={"extra_data": {
            "databank": service.databank.base_url,
            "swapi": service.swapi.base_url,
        }},
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Close HTTP clients on shutdown."""
    if service is not None:
        await service.context.aclose()
    logger.info("API shutdown")


@app.exception_handler(PrimarySourceError)
async def primary_source_error_handler(request: Request, exc: PrimarySourceError):
    """Databank failures are the only user-visible errors."""
    code = status.HTTP_404_NOT_FOUND if exc.not_found else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(
        status_code=code,
        content={"success": False, "data": None, "error": exc.message},
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint.

    The API is "degraded" while SWAPI is unreachable: data is still served,
    just without enrichment.
    """
    svc = get_service()
    swapi_available = await svc.tracker.is_available()
    return HealthResponse(
        status="healthy" if swapi_available else "degraded",
        swapi_available=swapi_available,
        cached_entities=len(svc.cache),
    )


@app.get("/categories", response_model=list[CategoryInfo])
async def list_categories():
    """List Databank categories and their SWAPI collections."""
    return [
        CategoryInfo(
            category=category.value,
            label=category.label,
            swapi_endpoints=[e.value for e in ENDPOINTS_BY_CATEGORY[category]],
            enrichable=bool(ENDPOINTS_BY_CATEGORY[category]),
        )
        for category in EntityCategory
    ]


@app.get("/entities/{category}", response_model=EnhancedPageResponse)
@limiter.limit("60/minute")
async def get_entities(
    request: Request,
    category: EntityCategory,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = Query(None, min_length=1),
):
    """Get an enriched page of entities.

    Args:
        request: FastAPI Request object (for rate limiting)
        category: Databank category
        page: 1-based page number
        limit: Page size
        search: Optional name filter

    Raises:
        PrimarySourceError: If the Databank request failed
    """
    svc = get_service()
    response = await svc.get_enhanced_entities(category, page=page, limit=limit, search=search)
    if not response.success:
        raise PrimarySourceError.from_response(category, response)
    return EnhancedPageResponse(success=True, data=response.data)


@app.get("/entities/{category}/{entity_id}", response_model=EnrichedEntityResponse)
@limiter.limit("60/minute")
async def get_entity(request: Request, category: EntityCategory, entity_id: str):
    """Get one enriched entity.

    Raises:
        PrimarySourceError: If the Databank request failed
    """
    svc = get_service()
    response = await svc.get_enhanced_entity_by_id(category, entity_id)
    if not response.success:
        raise PrimarySourceError.from_response(category, response)
    return EnrichedEntityResponse(success=True, data=response.data)


@app.post("/admin/cache/clear", response_model=AdminActionResponse)
async def clear_cache():
    """Drop all enriched entities and resolved references."""
    svc = get_service()
    removed = svc.clear_cache()
    return AdminActionResponse(removed=removed, availability=svc.tracker.status())


@app.post("/admin/retry", response_model=AdminActionResponse)
async def force_retry():
    """Assume SWAPI recovered: clear the cache and re-probe on next use."""
    svc = get_service()
    removed = svc.force_retry()
    logger.info("Forced SWAPI retry", extra={"extra_data": {"removed": removed}})
    return AdminActionResponse(removed=removed, availability=svc.tracker.status())


@app.get("/admin/status", response_model=StatusResponse)
async def admin_status():
    """Availability tracker state and cache statistics."""
    svc = get_service()
    return StatusResponse(availability=svc.tracker.status(), cache=svc.get_cache_stats())
