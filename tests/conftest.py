"""Shared fakes for the Databank and SWAPI HTTP APIs.

Both fakes plug into ``httpx.MockTransport`` so the real clients run
unchanged against canned responses, and both record every request so tests
can assert how many network calls were made.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx
import pytest

from swbrowser.config import Settings
from swbrowser.databank.client import DATABANK_BASE_URL, DatabankClient
from swbrowser.enrichment.context import build_context
from swbrowser.enrichment.enrichment_service import EnrichmentService
from swbrowser.enrichment.swapi_client import SwapiClient


LUKE = {
    "name": "Luke Skywalker",
    "height": "172",
    "mass": "77",
    "gender": "male",
    "homeworld": "https://swapi.dev/api/planets/1/",
    "films": ["https://swapi.dev/api/films/1/"],
    "url": "https://swapi.dev/api/people/1/",
}

LEIA = {
    "name": "Leia Organa",
    "height": "150",
    "mass": "49",
    "hair_color": "brown",
    "skin_color": "light",
    "eye_color": "brown",
    "birth_year": "19BBY",
    "gender": "female",
    "homeworld": "https://swapi.dev/api/planets/2/",
    "films": ["https://swapi.dev/api/films/1/"],
    "url": "https://swapi.dev/api/people/5/",
}

TATOOINE = {"name": "Tatooine", "url": "https://swapi.dev/api/planets/1/"}
ALDERAAN = {"name": "Alderaan", "url": "https://swapi.dev/api/planets/2/"}


class FakeClock:
    """Manually advanced epoch clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSwapi:
    """Routes SWAPI requests to canned data.

    Attributes:
        searches: (endpoint, search term lowercased) -> list of records
        records: resource path such as "films/7/" -> record
        error: httpx exception class raised for every request when set
        status_codes: resource path -> forced HTTP status
        delays: search term lowercased -> seconds to sleep before answering
        requests: every request received
    """

    def __init__(self):
        self.searches: Dict[tuple, List[Dict[str, Any]]] = {}
        self.records: Dict[str, Dict[str, Any]] = {
            "people/1/": LUKE,
            "planets/1/": TATOOINE,
            "planets/2/": ALDERAAN,
        }
        self.error: Optional[type] = None
        self.status_codes: Dict[str, int] = {}
        self.delays: Dict[str, float] = {}
        self.requests: List[httpx.Request] = []

    def add_search(self, endpoint: str, term: str, results: List[Dict[str, Any]]) -> None:
        self.searches[(endpoint, term.lower())] = results

    def paths(self) -> List[str]:
        return [self._path(r) for r in self.requests]

    def search_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if "search" in r.url.params]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        if path.startswith("/api/"):
            path = path[len("/api/"):]
        return path

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error("simulated failure", request=request)

        path = self._path(request)
        if path in self.status_codes:
            return httpx.Response(self.status_codes[path], json={"detail": "forced"})

        term = request.url.params.get("search")
        if term is not None:
            delay = self.delays.get(term.lower())
            if delay:
                await asyncio.sleep(delay)
            endpoint = path.strip("/")
            results = self.searches.get((endpoint, term.lower()), [])
            return httpx.Response(
                200, json={"count": len(results), "next": None, "previous": None, "results": results}
            )

        if path in self.records:
            return httpx.Response(200, json=self.records[path])
        return httpx.Response(404, json={"detail": "Not found"})


class FakeDatabank:
    """Serves Databank list and detail responses from in-memory entities."""

    def __init__(self):
        self.entities: Dict[str, List[Dict[str, Any]]] = {}
        self.status_code: Optional[int] = None
        self.error: Optional[type] = None
        self.requests: List[httpx.Request] = []

    def add(self, category: str, *entities: Dict[str, Any]) -> None:
        self.entities.setdefault(category, []).extend(entities)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error("simulated failure", request=request)
        if self.status_code is not None:
            return httpx.Response(self.status_code, json={"message": "forced"})

        parts = request.url.path.split("/api/v1/", 1)[-1].strip("/").split("/")
        items = self.entities.get(parts[0], [])

        if len(parts) == 2:
            for item in items:
                if item["_id"] == parts[1]:
                    return httpx.Response(200, json=item)
            return httpx.Response(404, json={"message": "not found"})

        search = request.url.params.get("search")
        if search:
            items = [i for i in items if search.lower() in i["name"].lower()]
        page = int(request.url.params.get("page", 1))
        limit = int(request.url.params.get("limit", 9))
        start = (page - 1) * limit
        return httpx.Response(
            200,
            json={
                "info": {"total": len(items), "page": page, "limit": limit, "next": None, "prev": None},
                "data": items[start:start + limit],
            },
        )


def make_swapi_client(fake: FakeSwapi, timeout: float = 5.0) -> SwapiClient:
    return SwapiClient(
        timeout=timeout,
        client=httpx.AsyncClient(transport=httpx.MockTransport(fake)),
    )


def make_databank_client(fake: FakeDatabank) -> DatabankClient:
    return DatabankClient(
        client=httpx.AsyncClient(base_url=DATABANK_BASE_URL, transport=httpx.MockTransport(fake)),
    )


def make_service(
    swapi_fake: FakeSwapi,
    databank_fake: Optional[FakeDatabank] = None,
    settings: Optional[Settings] = None,
    clock: Optional[FakeClock] = None,
) -> EnrichmentService:
    context = build_context(
        settings or Settings(),
        databank=make_databank_client(databank_fake or FakeDatabank()),
        swapi=make_swapi_client(swapi_fake),
        clock=clock or FakeClock(),
    )
    return EnrichmentService(context)


@pytest.fixture
def swapi_fake():
    return FakeSwapi()


@pytest.fixture
def databank_fake():
    return FakeDatabank()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(swapi_fake, databank_fake, clock):
    return make_service(swapi_fake, databank_fake, clock=clock)
