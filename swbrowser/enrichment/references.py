"""Resolution of SWAPI cross-reference URLs to display names.

SWAPI records point at films and planets by URL
(e.g. ``https://swapi.dev/api/films/1/``). This module turns those URLs into
titles and names, caching every successful lookup. The six prequel and
original trilogy films are known up front and never fetched.
"""

import asyncio
from typing import Dict, List, Optional, Sequence

from swbrowser.enrichment.availability import AvailabilityTracker
from swbrowser.enrichment.models import FetchResult, SwapiEndpoint
from swbrowser.enrichment.swapi_client import SwapiClient
from swbrowser.utils.logger import LoggerManager


UNKNOWN_FILM = "Unknown Film"
UNKNOWN_PLANET = "Unknown Planet"

FILM_TITLES: Dict[str, str] = {
    "https://swapi.dev/api/films/1/": "A New Hope",
    "https://swapi.dev/api/films/2/": "The Empire Strikes Back",
    "https://swapi.dev/api/films/3/": "Return of the Jedi",
    "https://swapi.dev/api/films/4/": "The Phantom Menace",
    "https://swapi.dev/api/films/5/": "Attack of the Clones",
    "https://swapi.dev/api/films/6/": "Revenge of the Sith",
}

logger = LoggerManager.get_logger(__name__)


def extract_resource_id(reference: Optional[str]) -> Optional[str]:
    """Extract the trailing id from a SWAPI resource URL.

    Examples:
        >>> extract_resource_id("https://swapi.dev/api/planets/1/")
        '1'
        >>> extract_resource_id("https://swapi.dev/api/planets/")
        None
    """
    if not reference or not isinstance(reference, str):
        return None
    last = reference.rstrip("/").rsplit("/", 1)[-1]
    return last if last.isdigit() else None


class ReferenceResolver:
    """Cached film/planet URL resolution."""

    def __init__(
        self,
        client: SwapiClient,
        known_films: Optional[Dict[str, str]] = None,
        tracker: Optional[AvailabilityTracker] = None,
    ):
        """Initialize the resolver.

        Args:
            client: SWAPI client used for lookups
            known_films: Film URL -> title seed (defaults to FILM_TITLES)
            tracker: Availability tracker told about lookup timeouts and network errors
        """
        self.client = client
        self.tracker = tracker
        self._film_seed = dict(FILM_TITLES if known_films is None else known_films)
        self.film_cache: Dict[str, str] = dict(self._film_seed)
        self.planet_cache: Dict[str, str] = {}

    async def _lookup(
        self,
        reference: Optional[str],
        endpoint: SwapiEndpoint,
        field: str,
        cache: Dict[str, str],
        placeholder: str,
    ) -> str:
        if reference in cache:
            return cache[reference]

        resource_id = extract_resource_id(reference)
        if resource_id is None:
            logger.warning(
                f"Invalid {endpoint.value} reference: {reference}",
                extra={"extra_data": {"reference": reference}},
            )
            return placeholder

        result: FetchResult = await self.client.get_by_id(endpoint, resource_id)
        if self.tracker is not None:
            if result.transient:
                self.tracker.record_failure()
            elif result.ok:
                self.tracker.record_success()
        value = result.data.get(field) if result.ok else None
        if not isinstance(value, str) or not value:
            logger.info(
                f"Could not resolve {endpoint.value} reference {reference}",
                extra={"extra_data": {"status": result.status.value, "error": result.error}},
            )
            return placeholder

        cache[reference] = value
        return value

    async def get_film_title(self, film_url: str) -> str:
        return await self._lookup(film_url, SwapiEndpoint.FILMS, "title", self.film_cache, UNKNOWN_FILM)

    async def resolve_planet_name(self, planet_url: Optional[str]) -> str:
        """Resolve a planet URL to its name, or ``"Unknown Planet"``."""
        if not planet_url:
            return UNKNOWN_PLANET
        try:
            return await self._lookup(
                planet_url, SwapiEndpoint.PLANETS, "name", self.planet_cache, UNKNOWN_PLANET
            )
        except Exception:
            logger.exception(f"Error resolving planet {planet_url}")
            return UNKNOWN_PLANET

    async def resolve_film_titles(self, film_urls: Optional[Sequence[str]]) -> List[str]:
        """Resolve film URLs concurrently, keeping input order.

        A failed lookup yields ``"Unknown Film"`` in its slot; the other
        lookups are unaffected.
        """
        if not film_urls:
            return []

        results = await asyncio.gather(
            *(self.get_film_title(url) for url in film_urls),
            return_exceptions=True,
        )

        titles: List[str] = []
        for url, result in zip(film_urls, results):
            if isinstance(result, BaseException):
                logger.error(f"Error resolving film {url}: {result}")
                titles.append(UNKNOWN_FILM)
            else:
                titles.append(result)
        return titles

    def clear(self) -> None:
        """Drop resolved values, keeping the well-known film titles."""
        self.film_cache = dict(self._film_seed)
        self.planet_cache.clear()
