"""
Pytest fixtures for discovery tests.

Provides:
- In-memory fakes for every external collaborator (permission, GPS,
  geocoders, location/content stores)
- Helpers to place content items at an exact distance from an origin
"""

import math

import pytest

from discovery.errors import (
    ContentFetchFailure,
    GeocodeFailure,
    PermissionDenied,
    PersistenceReadFailure,
    PositionUnavailable,
)
from discovery.models import ContentItem, Coordinates, GeocodedPlace
from discovery.services.collaborators import PermissionStatus
from discovery.services.firestore_stores import InMemoryLocationStore
from discovery.services.geo_math import EARTH_RADIUS_KM, KM_TO_MILES

AUSTIN = Coordinates(lat=30.2672, lon=-97.7431)


def point_north_of(origin: Coordinates, miles: float) -> Coordinates:
    """A point due north of ``origin`` at ``miles`` haversine distance."""
    d_lat = math.degrees(miles / (EARTH_RADIUS_KM * KM_TO_MILES))
    return Coordinates(lat=origin.lat + d_lat, lon=origin.lon)


def item_at(item_id: str, origin: Coordinates, miles: float, label=None) -> ContentItem:
    return ContentItem(id=item_id, coordinates=point_north_of(origin, miles), location_label=label)


# -----------------------------
# Fakes
# -----------------------------
class FakePermissionGateway:
    def __init__(self, status=PermissionStatus.GRANTED, error=None):
        self.status = status
        self.error = error
        self.calls = 0

    async def request_foreground_permission(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.status


class FakeGps:
    def __init__(self, coordinates=AUSTIN, error=None):
        self.coordinates = coordinates
        self.error = error
        self.calls = 0

    async def get_current_position(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.coordinates


class FakeReverseGeocoder:
    def __init__(self, place=None, error=None):
        self.place = place or GeocodedPlace(city="Austin", region="TX", country="United States")
        self.error = error
        self.calls = 0

    async def reverse_geocode(self, coordinates):
        self.calls += 1
        if self.error:
            raise self.error
        return self.place


class FakeForwardGeocoder:
    def __init__(self, coordinates=None, error=None):
        self.coordinates = coordinates
        self.error = error
        self.queries = []

    async def geocode(self, text):
        self.queries.append(text)
        if self.error:
            raise self.error
        return self.coordinates


class FakeContentStore:
    def __init__(self, items=None, error=None):
        self.items = list(items or [])
        self.error = error
        self.calls = 0

    async def fetch_all(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.items)


class BrokenLocationStore(InMemoryLocationStore):
    """Reads fail; writes fail too when ``fail_writes`` is set."""

    def __init__(self, fail_writes=False):
        super().__init__()
        self.fail_writes = fail_writes

    async def load(self):
        raise PersistenceReadFailure("storage unavailable")

    async def save(self, location):
        if self.fail_writes:
            raise OSError("disk full")
        await super().save(location)


# -----------------------------
# Fixtures
# -----------------------------
@pytest.fixture
def origin():
    return AUSTIN


@pytest.fixture
def granted():
    return FakePermissionGateway(PermissionStatus.GRANTED)


@pytest.fixture
def denied():
    return FakePermissionGateway(PermissionStatus.DENIED)


@pytest.fixture
def gps():
    return FakeGps()


@pytest.fixture
def broken_gps():
    return FakeGps(error=PositionUnavailable("no fix"))


@pytest.fixture
def geocoder():
    return FakeReverseGeocoder()


@pytest.fixture
def broken_geocoder():
    return FakeReverseGeocoder(error=GeocodeFailure("geocoder down"))


@pytest.fixture
def location_store():
    return InMemoryLocationStore()


@pytest.fixture
def nearby_items(origin):
    """Items at 5, 9.9, 10.1 and 50 miles from the origin."""
    return [
        item_at("five", origin, 5, "Austin, TX"),
        item_at("nine_nine", origin, 9.9, "Round Rock, TX"),
        item_at("ten_one", origin, 10.1, "Georgetown, TX"),
        item_at("fifty", origin, 50, "Killeen, TX"),
    ]


@pytest.fixture
def content_store(nearby_items):
    return FakeContentStore(nearby_items)


@pytest.fixture
def failing_content_store():
    return FakeContentStore(error=ContentFetchFailure("firestore unavailable"))


@pytest.fixture
def permission_error_gateway():
    return FakePermissionGateway(error=PermissionDenied("prompt dismissed"))
