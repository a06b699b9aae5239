"""Process-wide enrichment state.

Everything that must exist once per process (HTTP clients, the entity cache,
the availability tracker and the reference caches) is held by a single
``EnrichmentContext``. Build it once at startup with ``build_context()`` and
hand it to ``EnrichmentService``; close it on shutdown.
"""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from swbrowser.config import Settings
from swbrowser.databank.client import DatabankClient
from swbrowser.enrichment.availability import AvailabilityTracker
from swbrowser.enrichment.cache import EnrichmentCache
from swbrowser.enrichment.references import ReferenceResolver
from swbrowser.enrichment.swapi_client import SwapiClient


@dataclass
class EnrichmentContext:
    databank: DatabankClient
    swapi: SwapiClient
    tracker: AvailabilityTracker
    resolver: ReferenceResolver
    cache: EnrichmentCache = field(default_factory=EnrichmentCache)
    settings: Settings = field(default_factory=Settings)

    async def aclose(self) -> None:
        await self.databank.aclose()
        await self.swapi.aclose()


def build_context(
    settings: Optional[Settings] = None,
    databank: Optional[DatabankClient] = None,
    swapi: Optional[SwapiClient] = None,
    clock: Callable[[], float] = time.time,
) -> EnrichmentContext:
    """Wire clients, tracker, resolver and cache from settings.

    Args:
        settings: Runtime settings (defaults apply when omitted)
        databank: Pre-built Databank client
        swapi: Pre-built SWAPI client
        clock: Time source for the availability tracker

    Returns:
        A fresh EnrichmentContext
    """
    settings = settings or Settings()

    databank = databank or DatabankClient(
        base_url=settings.databank.base_url,
        timeout=settings.databank.timeout,
        default_limit=settings.databank.default_limit,
    )
    swapi = swapi or SwapiClient(
        base_url=settings.swapi.base_url,
        timeout=settings.swapi.timeout,
        user_agent=settings.swapi.user_agent,
    )
    tracker = AvailabilityTracker(
        swapi,
        check_interval=settings.availability.check_interval,
        probe_path=settings.swapi.probe_path,
        failure_threshold=settings.availability.failure_threshold,
        clock=clock,
    )

    return EnrichmentContext(
        databank=databank,
        swapi=swapi,
        tracker=tracker,
        resolver=ReferenceResolver(swapi, tracker=tracker),
        cache=EnrichmentCache(),
        settings=settings,
    )
