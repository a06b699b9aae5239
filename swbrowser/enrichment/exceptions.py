"""Custom exceptions for the enrichment package."""

from typing import Optional

from swbrowser.databank.models import EntityCategory, ServiceResponse


class SourceError(Exception):
    """Base class for upstream data source errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize SourceError.

        Args:
            message: Human-readable error message
            status_code: Upstream HTTP status, if the failure had one
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PrimarySourceError(SourceError):
    """Raised when the Databank cannot supply the requested entities.

    Secondary-source trouble is absorbed by the enrichment pipeline; only
    primary failures reach the user, since the Databank defines the entity set.
    """

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @classmethod
    def from_response(
        cls, category: EntityCategory, response: ServiceResponse
    ) -> "PrimarySourceError":
        """Create error from a failed ServiceResponse."""
        message = response.error or f"Failed to fetch {EntityCategory(category).value}"
        return cls(message, status_code=response.status_code)
