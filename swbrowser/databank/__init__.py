"""Primary source: the Star Wars Databank content API."""

from swbrowser.databank.models import (
    BaseEntity,
    EntityCategory,
    EntityPage,
    PageInfo,
    ServiceResponse,
)
from swbrowser.databank.client import DatabankClient

__all__ = [
    "BaseEntity",
    "EntityCategory",
    "EntityPage",
    "PageInfo",
    "ServiceResponse",
    "DatabankClient",
]
