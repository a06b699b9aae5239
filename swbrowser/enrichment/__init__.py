"""SWAPI Enrichment for Databank entities.

This package merges canonical attributes from SWAPI (https://swapi.dev) into
entities fetched from the Star Wars Databank:
- Name search per SWAPI collection with fuzzy name matching
- Field subsets per category (physical stats, vehicle specs, species, planets)
- Film and homeworld reference resolution
- In-memory caching and SWAPI availability tracking

Architecture:
-----------

1. Each Databank category maps to zero or more SWAPI collections:
   characters/droids -> people, vehicles -> vehicles then starships,
   species/creatures -> species, locations -> planets, organizations -> none

2. For every entity the service searches the collections in order, picks a
   record by name (exact, then substring, then optionally the first hit)
   and copies the category's fields, skipping "unknown"/"n/a" values.

3. Film and homeworld URLs in the record are resolved to titles and names;
   the six prequel and original trilogy films are known without a request.

4. SWAPI is often slow or down. A time-windowed availability check keeps
   the service from issuing requests while it is known to be unreachable,
   and every failure degrades to an unenriched entity.

Modules:
-------
- models: endpoint table, field subsets, tagged results, enriched entity
- matcher: name matching
- swapi_client: SWAPI HTTP client with timeouts
- availability: reachability tracking
- references: film/planet URL resolution
- cache: in-memory enriched entity cache
- context: process-wide state container
- enrichment_service: main service
"""

from swbrowser.enrichment.models import (
    ENDPOINTS_BY_CATEGORY,
    AvailabilityStatus,
    EnhancedPage,
    EnrichedEntity,
    EnrichmentOutcome,
    EnrichmentSummary,
    FetchResult,
    FetchStatus,
    SwapiEndpoint,
)
from swbrowser.enrichment.matcher import match_name
from swbrowser.enrichment.context import EnrichmentContext, build_context
from swbrowser.enrichment.enrichment_service import EnrichmentService

__all__ = [
    "ENDPOINTS_BY_CATEGORY",
    "AvailabilityStatus",
    "EnhancedPage",
    "EnrichedEntity",
    "EnrichmentOutcome",
    "EnrichmentSummary",
    "FetchResult",
    "FetchStatus",
    "SwapiEndpoint",
    "match_name",
    "EnrichmentContext",
    "build_context",
    "EnrichmentService",
]
