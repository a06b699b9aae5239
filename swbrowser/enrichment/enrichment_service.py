"""Enrichment Service - merges SWAPI attributes into Databank entities.

For each Databank entity this service looks for the matching SWAPI record,
copies the category's field subset, resolves film and homeworld references
and caches the result for the life of the process.

Features:
- Cache-first lookups keyed by (category, databank id)
- Availability gate: no SWAPI requests while SWAPI is known to be down
- Endpoint fallback per category (vehicles -> starships)
- Concurrent, order-preserving batch enrichment
- Never raises: any SWAPI trouble degrades to an unenriched entity

Usage:
------
from swbrowser.enrichment.context import build_context
from swbrowser.enrichment.enrichment_service import EnrichmentService

service = EnrichmentService(build_context(settings))

# Single entity
enriched = await service.enrich_entity(entity, EntityCategory.CHARACTERS)

# A Databank page, enriched
response = await service.get_enhanced_entities(EntityCategory.VEHICLES, page=2)
"""

import asyncio
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from swbrowser.databank.models import (
    BaseEntity,
    EntityCategory,
    ServiceResponse,
)
from swbrowser.enrichment.context import EnrichmentContext
from swbrowser.enrichment.matcher import find_match
from swbrowser.enrichment.models import (
    ENDPOINTS_BY_CATEGORY,
    FIELD_MAP,
    HOMEWORLD_ENDPOINTS,
    EnhancedPage,
    EnrichedEntity,
    EnrichmentOutcome,
    EnrichmentSummary,
    SwapiEndpoint,
    is_absent,
)
from swbrowser.enrichment.references import UNKNOWN_PLANET
from swbrowser.utils.logger import LoggerManager


logger = LoggerManager.get_logger(__name__)

# Match lookup result: (record, endpoint it came from, outcome)
LookupResult = Tuple[Optional[Dict[str, Any]], Optional[SwapiEndpoint], EnrichmentOutcome]


# =============================================================================
# Field extraction
# =============================================================================


def base_fields(entity: BaseEntity) -> Dict[str, Any]:
    """Every populated field of a Databank entity, keyed by attribute name."""
    return entity.model_dump(by_alias=False, exclude_none=True)


def unenriched(entity: BaseEntity) -> EnrichedEntity:
    """Wrap a Databank entity without SWAPI data."""
    return EnrichedEntity(**base_fields(entity), films=[], matched=False)


def extract_fields(record: Dict[str, Any], endpoint: SwapiEndpoint) -> Dict[str, str]:
    """Copy the endpoint's field subset from a SWAPI record.

    Sentinel values ("unknown", "n/a"), empty strings and non-scalar values
    are skipped, so the field stays unset on the merged entity.

    Args:
        record: SWAPI record
        endpoint: Collection the record came from

    Returns:
        Mapping of target field -> value
    """
    fields: Dict[str, str] = {}
    for target, sources in FIELD_MAP.get(endpoint, {}).items():
        for source in sources:
            value = record.get(source)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                value = str(value)
            if isinstance(value, str) and not is_absent(value):
                fields[target] = value.strip()
                break
    return fields


# =============================================================================
# Enrichment Service
# =============================================================================


class EnrichmentService:
    """Main service for Databank entity enrichment with caching."""

    def __init__(self, context: EnrichmentContext):
        """Initialize enrichment service.

        Args:
            context: Process-wide clients, cache and availability state
        """
        self.context = context
        self.databank = context.databank
        self.swapi = context.swapi
        self.tracker = context.tracker
        self.resolver = context.resolver
        self.cache = context.cache
        self.matching = context.settings.matching

    # -------------------------------------------------------------------------
    # Single entity
    # -------------------------------------------------------------------------

    async def enrich_entity(self, entity: BaseEntity, category: EntityCategory) -> EnrichedEntity:
        """Enrich one entity; always returns a usable entity.

        Args:
            entity: Databank entity
            category: Its category

        Returns:
            EnrichedEntity (``matched=False`` when no SWAPI data was merged)
        """
        try:
            enriched, _ = await self.enrich_entity_with_outcome(entity, category)
        except Exception:
            logger.exception(
                f"Error enhancing entity {entity.name}",
                extra={"extra_data": {"id": entity.id, "category": str(category)}},
            )
            return unenriched(entity)
        return enriched

    async def enrich_entity_with_outcome(
        self, entity: BaseEntity, category: EntityCategory
    ) -> Tuple[EnrichedEntity, EnrichmentOutcome]:
        """Enrich one entity and report how it went.

        Lookup strategy:
        1. Cache hit -> return it
        2. Category without SWAPI endpoints -> unenriched
        3. SWAPI known down -> unenriched, no request
        4. Search endpoints in order, match by name, merge fields and references

        Every non-cached outcome is cached.
        """
        category = EntityCategory(category)

        cached = self.cache.get(category, entity.id)
        if cached is not None:
            return cached, EnrichmentOutcome.CACHED

        endpoints = ENDPOINTS_BY_CATEGORY.get(category, ())
        fields: Dict[str, Any] = {}

        if not endpoints:
            outcome = EnrichmentOutcome.NO_ENDPOINT
        elif not await self.tracker.is_available():
            outcome = EnrichmentOutcome.UNAVAILABLE
        else:
            try:
                fields, outcome = await self._lookup_and_merge(entity, category, endpoints)
            except Exception:
                logger.exception(
                    f"Error enhancing entity {entity.name}",
                    extra={"extra_data": {"id": entity.id, "category": category.value}},
                )
                fields, outcome = {}, EnrichmentOutcome.FAILED

        merged = {**base_fields(entity), "films": [], **fields}
        enriched = EnrichedEntity(**merged, matched=outcome == EnrichmentOutcome.MATCHED)

        self.cache.put(category, entity.id, enriched)
        logger.debug(
            "enrichment.entity",
            extra={"extra_data": {
                "category": category.value,
                "id": entity.id,
                "name": entity.name,
                "outcome": outcome.value,
            }},
        )
        return enriched, outcome

    async def _find_record(
        self,
        name: str,
        category: EntityCategory,
        endpoints: Sequence[SwapiEndpoint],
    ) -> LookupResult:
        """Search endpoints in priority order and pick a record by name.

        The first endpoint returning a non-empty list decides; later endpoints
        are not searched. A timeout or network error ends the search and is
        reported to the availability tracker.
        """
        for endpoint in endpoints:
            result = await self.swapi.search(endpoint, name)

            if result.transient:
                self.tracker.record_failure()
                return None, None, EnrichmentOutcome.FAILED
            if not result.ok:
                continue

            self.tracker.record_success()
            if not result.data:
                continue

            record, kind = find_match(
                name, result.data, fallback_to_first=self.matching.fallback_for(category.value)
            )
            if record is None:
                logger.info(
                    f"No SWAPI match for {name} among {len(result.data)} {endpoint.value} results"
                )
                return None, endpoint, EnrichmentOutcome.NO_MATCH

            logger.info(
                f"{kind.value.capitalize()} SWAPI {endpoint.value} match found: "
                f"{record.get('name')} for search: {name}"
            )
            return record, endpoint, EnrichmentOutcome.MATCHED

        logger.info(f"No SWAPI results found for {category.value}: {name}")
        return None, None, EnrichmentOutcome.NO_MATCH

    async def _lookup_and_merge(
        self,
        entity: BaseEntity,
        category: EntityCategory,
        endpoints: Sequence[SwapiEndpoint],
    ) -> Tuple[Dict[str, Any], EnrichmentOutcome]:
        record, endpoint, outcome = await self._find_record(entity.name, category, endpoints)
        if record is None or endpoint is None:
            return {}, outcome

        fields: Dict[str, Any] = extract_fields(record, endpoint)

        film_urls = record.get("films")
        if not isinstance(film_urls, list):
            film_urls = []
        homeworld_url = record.get("homeworld") if endpoint in HOMEWORLD_ENDPOINTS else None

        if isinstance(homeworld_url, str) and not is_absent(homeworld_url):
            films, homeworld = await asyncio.gather(
                self.resolver.resolve_film_titles(film_urls),
                self.resolver.resolve_planet_name(homeworld_url),
            )
            # Keep the Databank's homeworld rather than a placeholder
            if homeworld != UNKNOWN_PLANET or not getattr(entity, "homeworld", None):
                fields["homeworld"] = homeworld
        else:
            films = await self.resolver.resolve_film_titles(film_urls)

        fields["films"] = films
        return fields, EnrichmentOutcome.MATCHED

    # -------------------------------------------------------------------------
    # Batches
    # -------------------------------------------------------------------------

    async def enrich_batch_with_summary(
        self,
        entities: Sequence[BaseEntity],
        category: EntityCategory,
    ) -> Tuple[List[EnrichedEntity], EnrichmentSummary]:
        """Enrich entities concurrently and summarize the outcomes.

        Args:
            entities: Databank entities
            category: Their category

        Returns:
            Tuple of (enriched entities in input order, summary)
        """
        results = await asyncio.gather(
            *(self.enrich_entity_with_outcome(entity, category) for entity in entities),
            return_exceptions=True,
        )

        enriched: List[EnrichedEntity] = []
        outcomes: Counter = Counter()
        for entity, result in zip(entities, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Error enhancing entity {entity.name}: {result}",
                    extra={"extra_data": {"id": entity.id}},
                )
                enriched.append(unenriched(entity))
                outcomes[EnrichmentOutcome.FAILED] += 1
            else:
                item, outcome = result
                enriched.append(item)
                outcomes[outcome] += 1

        summary = EnrichmentSummary(
            total=len(entities),
            matched=outcomes[EnrichmentOutcome.MATCHED],
            unmatched=outcomes[EnrichmentOutcome.NO_MATCH],
            failed=outcomes[EnrichmentOutcome.FAILED],
            skipped=outcomes[EnrichmentOutcome.NO_ENDPOINT] + outcomes[EnrichmentOutcome.UNAVAILABLE],
            cached=outcomes[EnrichmentOutcome.CACHED],
            secondary_available=self.tracker.reachable,
        )
        return enriched, summary

    async def enrich_batch(
        self,
        entities: Sequence[BaseEntity],
        category: EntityCategory,
    ) -> List[EnrichedEntity]:
        """Enrich entities concurrently; result[i] corresponds to entities[i]."""
        enriched, _ = await self.enrich_batch_with_summary(entities, category)
        return enriched

    # -------------------------------------------------------------------------
    # Presentation-facing operations
    # -------------------------------------------------------------------------

    async def get_enhanced_entities(
        self,
        category: EntityCategory,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
    ) -> ServiceResponse[EnhancedPage]:
        """Fetch a Databank page and enrich it.

        Databank failures are returned as ``success=False``; SWAPI failures
        only show up in the page's enrichment summary.
        """
        category = EntityCategory(category)
        response = await self.databank.get_entities(category, page=page, limit=limit, search=search)
        if not response.success:
            return ServiceResponse[EnhancedPage].fail(response.error, response.status_code)

        try:
            entities, summary = await self.enrich_batch_with_summary(response.data.data, category)
        except Exception:
            logger.exception(f"Error getting enhanced entities for {category.value}")
            return ServiceResponse[EnhancedPage].fail(f"Failed to enhance {category.value} data")

        if summary.partial:
            logger.warning(
                "enrichment.partial",
                extra={"extra_data": {"category": category.value, **summary.model_dump()}},
            )
        return ServiceResponse[EnhancedPage].ok(
            EnhancedPage(info=response.data.info, data=entities, enrichment=summary)
        )

    async def get_enhanced_entity_by_id(
        self,
        category: EntityCategory,
        entity_id: str,
    ) -> ServiceResponse[EnrichedEntity]:
        """Fetch one Databank entity and enrich it."""
        category = EntityCategory(category)
        response = await self.databank.get_entity_by_id(category, entity_id)
        if not response.success:
            return ServiceResponse[EnrichedEntity].fail(response.error, response.status_code)

        enriched = await self.enrich_entity(response.data, category)
        return ServiceResponse[EnrichedEntity].ok(enriched)

    # -------------------------------------------------------------------------
    # Operator controls
    # -------------------------------------------------------------------------

    def clear_cache(self) -> int:
        """Forget every enriched entity and resolved reference.

        Returns:
            Number of enriched entities removed
        """
        removed = self.cache.clear()
        self.resolver.clear()
        logger.info("enrichment.cache.cleared", extra={"extra_data": {"removed": removed}})
        return removed

    def force_retry(self) -> int:
        """Re-probe SWAPI on next use and re-enrich everything.

        Returns:
            Number of enriched entities removed from the cache
        """
        self.tracker.reset()
        return self.clear_cache()

    def get_cache_stats(self) -> Dict[str, Any]:
        stats = self.cache.stats()
        stats["films_resolved"] = len(self.resolver.film_cache)
        stats["planets_resolved"] = len(self.resolver.planet_cache)
        return stats
