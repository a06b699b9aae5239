"""Pydantic models for the Star Wars Databank (primary source).

Defines:
- Entity categories exposed by the Databank
- Base entity and the closed per-category attribute sets
- Paginated list responses
- The success/error envelope returned by every client call
"""

from enum import Enum
from typing import Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class EntityCategory(str, Enum):
    """Entity categories served by the Databank."""
    CHARACTERS = "characters"
    CREATURES = "creatures"
    DROIDS = "droids"
    LOCATIONS = "locations"
    ORGANIZATIONS = "organizations"
    SPECIES = "species"
    VEHICLES = "vehicles"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class BaseEntity(BaseModel):
    """Fields every Databank entity carries.

    The wire format names the identifier ``_id``; it is exposed as ``id``.
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: str = Field(..., alias="_id")
    name: str
    description: str = ""
    image: str = ""


class Character(BaseEntity):
    affiliations: Optional[List[str]] = None
    species: Optional[str] = None
    gender: Optional[str] = None
    height: Optional[str] = None
    mass: Optional[str] = None
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    skin_color: Optional[str] = None
    birth_year: Optional[str] = None
    homeworld: Optional[str] = None


class Creature(BaseEntity):
    classification: Optional[str] = None
    designation: Optional[str] = None
    average_height: Optional[str] = None
    skin_colors: Optional[str] = None
    hair_colors: Optional[str] = None
    eye_colors: Optional[str] = None
    average_lifespan: Optional[str] = None
    homeworld: Optional[str] = None
    language: Optional[str] = None


class Droid(BaseEntity):
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    droid_class: Optional[str] = Field(default=None, alias="class")
    height: Optional[str] = None
    mass: Optional[str] = None
    sensor_color: Optional[str] = None
    plating_color: Optional[str] = None
    equipment: Optional[List[str]] = None


class Location(BaseEntity):
    region: Optional[str] = None
    sector: Optional[str] = None
    system: Optional[str] = None
    planet: Optional[str] = None
    terrain: Optional[str] = None
    climate: Optional[str] = None
    points_of_interest: Optional[List[str]] = None


class Organization(BaseEntity):
    type: Optional[str] = None
    founding_date: Optional[str] = None
    dissolution_date: Optional[str] = None
    headquarters: Optional[str] = None
    leaders: Optional[List[str]] = None
    notable_members: Optional[List[str]] = None


class Species(Creature):
    pass


class Vehicle(BaseEntity):
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    vehicle_class: Optional[str] = Field(default=None, alias="class")
    length: Optional[str] = None
    width: Optional[str] = None
    height: Optional[str] = None
    max_speed: Optional[str] = None
    crew: Optional[str] = None
    passengers: Optional[str] = None
    cargo_capacity: Optional[str] = None
    armament: Optional[List[str]] = None


CATEGORY_MODELS: Dict[EntityCategory, Type[BaseEntity]] = {
    EntityCategory.CHARACTERS: Character,
    EntityCategory.CREATURES: Creature,
    EntityCategory.DROIDS: Droid,
    EntityCategory.LOCATIONS: Location,
    EntityCategory.ORGANIZATIONS: Organization,
    EntityCategory.SPECIES: Species,
    EntityCategory.VEHICLES: Vehicle,
}


class PageInfo(BaseModel):
    """Pagination block of a Databank list response."""
    model_config = ConfigDict(extra='ignore')

    total: int = 0
    page: int = 1
    limit: int = 0
    next: Optional[str] = None
    prev: Optional[str] = None


class EntityPage(BaseModel):
    """One page of Databank entities."""

    info: PageInfo
    data: List[BaseEntity] = Field(default_factory=list)


T = TypeVar("T")


class ServiceResponse(BaseModel, Generic[T]):
    """Tagged result of a service call.

    Attributes:
        success: Whether the call succeeded
        data: Payload (None on failure)
        error: Human-readable error message if success=False
        status_code: Upstream HTTP status when the failure came from one
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def ok(cls, data: T) -> "ServiceResponse[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, status_code: Optional[int] = None) -> "ServiceResponse[T]":
        return cls(success=False, error=error, status_code=status_code)
