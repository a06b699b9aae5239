"""Models for the SWAPI enrichment pipeline.

Defines data structures for:
- SWAPI endpoints and the category -> endpoint table
- Per-endpoint field subsets merged into Databank entities
- Tagged results of SWAPI requests and of per-entity enrichment
- Enriched entities, enriched pages and batch summaries
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from swbrowser.databank.models import EntityCategory, PageInfo


class SwapiEndpoint(str, Enum):
    """SWAPI resource collections."""
    PEOPLE = "people"
    VEHICLES = "vehicles"
    STARSHIPS = "starships"
    SPECIES = "species"
    PLANETS = "planets"
    FILMS = "films"


# Search order matters: vehicles are tried before starships.
ENDPOINTS_BY_CATEGORY: Dict[EntityCategory, Tuple[SwapiEndpoint, ...]] = {
    EntityCategory.CHARACTERS: (SwapiEndpoint.PEOPLE,),
    EntityCategory.DROIDS: (SwapiEndpoint.PEOPLE,),  # droids live under people
    EntityCategory.VEHICLES: (SwapiEndpoint.VEHICLES, SwapiEndpoint.STARSHIPS),
    EntityCategory.SPECIES: (SwapiEndpoint.SPECIES,),
    EntityCategory.CREATURES: (SwapiEndpoint.SPECIES,),
    EntityCategory.LOCATIONS: (SwapiEndpoint.PLANETS,),
    EntityCategory.ORGANIZATIONS: (),
}

_CRAFT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "model": ("model",),
    "manufacturer": ("manufacturer",),
    "vehicle_class": ("vehicle_class", "starship_class"),
    "starship_class": ("starship_class",),
    "length": ("length",),
    "crew": ("crew",),
    "passengers": ("passengers",),
    "cargo_capacity": ("cargo_capacity",),
}

# target field -> SWAPI source fields, first non-absent value wins
FIELD_MAP: Dict[SwapiEndpoint, Dict[str, Tuple[str, ...]]] = {
    SwapiEndpoint.PEOPLE: {
        name: (name,)
        for name in (
            "height", "mass", "gender", "birth_year",
            "eye_color", "hair_color", "skin_color",
        )
    },
    SwapiEndpoint.VEHICLES: _CRAFT_FIELDS,
    SwapiEndpoint.STARSHIPS: _CRAFT_FIELDS,
    SwapiEndpoint.SPECIES: {
        name: (name,)
        for name in (
            "classification", "designation", "average_height", "average_lifespan",
            "language", "skin_colors", "hair_colors", "eye_colors",
        )
    },
    SwapiEndpoint.PLANETS: {
        name: (name,)
        for name in (
            "climate", "terrain", "population", "diameter",
            "rotation_period", "orbital_period", "gravity",
        )
    },
}

# Endpoints whose records carry a homeworld reference
HOMEWORLD_ENDPOINTS = frozenset({SwapiEndpoint.PEOPLE, SwapiEndpoint.SPECIES})

SENTINEL_VALUES = frozenset({"unknown", "n/a"})


def is_absent(value: Any) -> bool:
    """True for None, empty strings and SWAPI's "not recorded" sentinels."""
    if value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return not stripped or stripped.lower() in SENTINEL_VALUES
    return False


class FetchStatus(str, Enum):
    """Outcome of a single SWAPI request."""
    OK = "ok"
    NOT_FOUND = "not_found"   # 404, not an error
    TIMEOUT = "timeout"
    ERROR = "error"           # network error, 5xx, other HTTP errors
    MALFORMED = "malformed"   # body was not the expected JSON shape


@dataclass(frozen=True)
class FetchResult:
    """Tagged result of a SWAPI request.

    ``data`` holds the payload for OK results: a list of records for searches,
    a single record for lookups. Non-OK results carry an empty payload.
    """
    status: FetchStatus
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.OK

    @property
    def transient(self) -> bool:
        """Failures that suggest SWAPI itself is unreachable."""
        return self.status in (FetchStatus.TIMEOUT, FetchStatus.ERROR)


class EnrichmentOutcome(str, Enum):
    """How a single entity left the enrichment pipeline."""
    CACHED = "cached"
    MATCHED = "matched"
    NO_MATCH = "no_match"
    NO_ENDPOINT = "no_endpoint"     # category has no SWAPI analogue
    UNAVAILABLE = "unavailable"     # SWAPI marked down, no request made
    FAILED = "failed"               # request or merge failed


class EnrichedEntity(BaseModel):
    """Databank entity merged with SWAPI attributes.

    Carries every field of the source entity (category-specific ones as
    extras) plus the category's SWAPI subset. SWAPI fields that were not
    recorded are left unset rather than holding a sentinel string.
    """
    model_config = ConfigDict(extra='allow', frozen=True)

    id: str
    name: str
    description: str = ""
    image: str = ""

    # People
    height: Optional[str] = None
    mass: Optional[str] = None
    gender: Optional[str] = None
    birth_year: Optional[str] = None
    eye_color: Optional[str] = None
    hair_color: Optional[str] = None
    skin_color: Optional[str] = None
    homeworld: Optional[str] = None

    # Vehicles & starships
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    vehicle_class: Optional[str] = None
    starship_class: Optional[str] = None
    length: Optional[str] = None
    crew: Optional[str] = None
    passengers: Optional[str] = None
    cargo_capacity: Optional[str] = None

    # Species
    classification: Optional[str] = None
    designation: Optional[str] = None
    average_height: Optional[str] = None
    average_lifespan: Optional[str] = None
    language: Optional[str] = None
    skin_colors: Optional[str] = None
    hair_colors: Optional[str] = None
    eye_colors: Optional[str] = None

    # Planets
    climate: Optional[str] = None
    terrain: Optional[str] = None
    population: Optional[str] = None
    diameter: Optional[str] = None
    rotation_period: Optional[str] = None
    orbital_period: Optional[str] = None
    gravity: Optional[str] = None

    # Metadata
    films: List[str] = Field(default_factory=list)
    matched: bool = False
    enriched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EnrichmentSummary(BaseModel):
    """Aggregate outcome of a batch, used to flag partial enrichment."""

    total: int = 0
    matched: int = 0
    unmatched: int = 0
    failed: int = 0
    skipped: int = 0
    cached: int = 0
    secondary_available: bool = True

    @property
    def partial(self) -> bool:
        return self.failed > 0 or not self.secondary_available


class EnhancedPage(BaseModel):
    """Enriched page returned to the presentation layer."""

    info: PageInfo
    data: List[EnrichedEntity] = Field(default_factory=list)
    enrichment: EnrichmentSummary = Field(default_factory=EnrichmentSummary)


class AvailabilityStatus(BaseModel):
    """Snapshot of the availability tracker."""

    reachable: bool
    last_checked_at: Optional[datetime] = None
    consecutive_failures: int = 0
    check_interval: float
    fresh: bool
