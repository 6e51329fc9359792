# discovery/services/collaborators.py
"""
Interfaces of the external collaborators the discovery core depends on.

Every call is async; adapters over blocking SDKs push the blocking work to
a thread. Failures are reported with the exceptions from discovery.errors.
"""

from enum import Enum
from typing import List, Optional, Protocol, runtime_checkable

from discovery.models import ContentItem, Coordinates, GeocodedPlace, PersistedLocation


class PermissionStatus(Enum):
    GRANTED = "granted"
    DENIED = "denied"


@runtime_checkable
class PermissionGateway(Protocol):
    async def request_foreground_permission(self) -> PermissionStatus:
        ...


@runtime_checkable
class GpsProvider(Protocol):
    async def get_current_position(self) -> Coordinates:
        """Raises PositionUnavailable."""
        ...


@runtime_checkable
class ReverseGeocoder(Protocol):
    async def reverse_geocode(self, coordinates: Coordinates) -> GeocodedPlace:
        """Raises GeocodeFailure."""
        ...


@runtime_checkable
class ForwardGeocoder(Protocol):
    async def geocode(self, text: str) -> Coordinates:
        """Raises GeocodeFailure."""
        ...


@runtime_checkable
class LocationStore(Protocol):
    async def save(self, location: PersistedLocation) -> None:
        ...

    async def load(self) -> Optional[PersistedLocation]:
        """Raises PersistenceReadFailure."""
        ...

    async def load_history(self) -> List[PersistedLocation]:
        ...

    async def save_history(self, history: List[PersistedLocation]) -> None:
        ...


@runtime_checkable
class ContentStore(Protocol):
    async def fetch_all(self) -> List[ContentItem]:
        """Raises ContentFetchFailure."""
        ...
