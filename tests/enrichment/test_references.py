"""Tests for film and planet reference resolution."""

import asyncio

import httpx
import pytest

from conftest import FakeClock, make_swapi_client
from swbrowser.enrichment.availability import AvailabilityTracker
from swbrowser.enrichment.references import (
    UNKNOWN_FILM,
    UNKNOWN_PLANET,
    ReferenceResolver,
    extract_resource_id,
)


FILM_7 = "https://swapi.dev/api/films/7/"
FILM_8 = "https://swapi.dev/api/films/8/"


def test_extract_resource_id():
    assert extract_resource_id("https://swapi.dev/api/films/3/") == "3"
    assert extract_resource_id("https://swapi.dev/api/films/3") == "3"
    assert extract_resource_id("https://swapi.dev/api/films/") is None
    assert extract_resource_id("") is None
    assert extract_resource_id(None) is None


@pytest.mark.asyncio
async def test_known_films_need_no_requests(swapi_fake):
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))

    titles = await resolver.resolve_film_titles([
        "https://swapi.dev/api/films/2/",
        "https://swapi.dev/api/films/1/",
    ])

    assert titles == ["The Empire Strikes Back", "A New Hope"]
    assert swapi_fake.requests == []


@pytest.mark.asyncio
async def test_unknown_film_is_fetched_and_cached(swapi_fake):
    swapi_fake.records["films/7/"] = {"title": "The Force Awakens"}
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))

    assert await resolver.resolve_film_titles([FILM_7]) == ["The Force Awakens"]
    assert await resolver.resolve_film_titles([FILM_7]) == ["The Force Awakens"]

    assert swapi_fake.paths() == ["films/7/"]
    assert resolver.film_cache[FILM_7] == "The Force Awakens"


@pytest.mark.asyncio
async def test_order_preserved_with_partial_failure(swapi_fake):
    swapi_fake.records["films/8/"] = {"title": "The Last Jedi"}
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))

    titles = await resolver.resolve_film_titles([
        FILM_8,
        FILM_7,  # 404
        "https://swapi.dev/api/films/1/",
        "not-a-url",
    ])

    assert titles == ["The Last Jedi", UNKNOWN_FILM, "A New Hope", UNKNOWN_FILM]
    assert FILM_7 not in resolver.film_cache


@pytest.mark.asyncio
async def test_order_preserved_regardless_of_completion_order():
    async def handler(request):
        film_id = request.url.path.rstrip("/").rsplit("/", 1)[-1]
        # Later films answer first
        await asyncio.sleep(0.05 / int(film_id))
        return httpx.Response(200, json={"title": f"Episode {film_id}"})

    resolver = ReferenceResolver(make_swapi_client(handler), known_films={})
    urls = [f"https://swapi.dev/api/films/{i}/" for i in range(1, 6)]

    titles = await resolver.resolve_film_titles(urls)

    assert titles == [f"Episode {i}" for i in range(1, 6)]


@pytest.mark.asyncio
async def test_timeouts_yield_placeholders(swapi_fake):
    swapi_fake.error = httpx.ReadTimeout
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))

    titles = await resolver.resolve_film_titles([FILM_7, FILM_8])

    assert titles == [UNKNOWN_FILM, UNKNOWN_FILM]


@pytest.mark.asyncio
async def test_raising_lookup_keeps_its_slot(swapi_fake, monkeypatch):
    swapi_fake.records["films/8/"] = {"title": "The Last Jedi"}
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))
    lookup = resolver.get_film_title

    async def get_film_title(url):
        if url == FILM_7:
            raise RuntimeError("lookup crashed")
        return await lookup(url)

    monkeypatch.setattr(resolver, "get_film_title", get_film_title)

    titles = await resolver.resolve_film_titles([FILM_8, FILM_7, "https://swapi.dev/api/films/1/"])

    assert titles == ["The Last Jedi", UNKNOWN_FILM, "A New Hope"]


@pytest.mark.asyncio
async def test_lookup_timeouts_mark_swapi_down(swapi_fake):
    client = make_swapi_client(swapi_fake)
    tracker = AvailabilityTracker(client, clock=FakeClock())
    resolver = ReferenceResolver(client, tracker=tracker)
    swapi_fake.error = httpx.ReadTimeout

    await resolver.resolve_planet_name("https://swapi.dev/api/planets/1/")

    assert tracker.reachable is False
    assert tracker.consecutive_failures == 1


@pytest.mark.asyncio
async def test_missing_references_do_not_mark_swapi_down(swapi_fake):
    client = make_swapi_client(swapi_fake)
    tracker = AvailabilityTracker(client, failure_threshold=2, clock=FakeClock())
    resolver = ReferenceResolver(client, tracker=tracker)
    tracker.record_failure()

    assert await resolver.resolve_planet_name("https://swapi.dev/api/planets/99/") == UNKNOWN_PLANET
    assert tracker.consecutive_failures == 1

    await resolver.resolve_planet_name("https://swapi.dev/api/planets/1/")

    assert tracker.reachable is True
    assert tracker.consecutive_failures == 0


@pytest.mark.asyncio
async def test_empty_input(swapi_fake):
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))
    assert await resolver.resolve_film_titles([]) == []
    assert await resolver.resolve_film_titles(None) == []


@pytest.mark.asyncio
async def test_planet_name_resolution_and_cache(swapi_fake):
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))
    url = "https://swapi.dev/api/planets/1/"

    assert await resolver.resolve_planet_name(url) == "Tatooine"
    assert await resolver.resolve_planet_name(url) == "Tatooine"
    assert swapi_fake.paths() == ["planets/1/"]


@pytest.mark.asyncio
async def test_planet_failure_yields_placeholder(swapi_fake):
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))

    assert await resolver.resolve_planet_name("https://swapi.dev/api/planets/99/") == UNKNOWN_PLANET
    assert await resolver.resolve_planet_name(None) == UNKNOWN_PLANET
    assert resolver.planet_cache == {}


@pytest.mark.asyncio
async def test_clear_keeps_seeded_films(swapi_fake):
    resolver = ReferenceResolver(make_swapi_client(swapi_fake))
    await resolver.resolve_planet_name("https://swapi.dev/api/planets/2/")

    resolver.clear()

    assert resolver.planet_cache == {}
    assert resolver.film_cache["https://swapi.dev/api/films/4/"] == "The Phantom Menace"
