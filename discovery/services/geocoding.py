# discovery/services/geocoding.py
import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import googlemaps
from googlemaps.exceptions import ApiError, Timeout, TransportError
from geopy.exc import GeopyError
from geopy.geocoders import Nominatim

from discovery.errors import GeocodeFailure
from discovery.models import Coordinates, GeocodedPlace

logger = logging.getLogger(__name__)

GOOGLE_ERRORS = (
    ApiError,
    TransportError,
    Timeout,
)


def extract_components_from_google(result: Dict[str, Any]) -> Dict[str, str]:
    """
    Flatten a Google Maps geocoding result into {component_type: short_name}.
    Also returns the full formatted address.
    """
    address_components = {}
    for component in result.get("address_components", []):
        for component_type in component.get("types", []):
            # first component of a given type wins
            address_components.setdefault(
                component_type, component.get("short_name") or component.get("long_name", ""))
        if "locality" in component.get("types", []):
            address_components["locality_long"] = component.get("long_name", "")
    address_components["full_address"] = result.get("formatted_address", "")
    return address_components


def place_from_google(address_components: Dict[str, str]) -> GeocodedPlace:
    city = address_components.get("locality_long") or address_components.get("locality") or ""
    return GeocodedPlace(
        city=city,
        subregion=address_components.get("administrative_area_level_2", ""),
        region=address_components.get("administrative_area_level_1", ""),
        country=address_components.get("country", ""),
    )


def place_from_nominatim(raw: Dict[str, Any]) -> GeocodedPlace:
    address = raw.get("address", {}) if raw else {}
    city = (address.get("city") or address.get("town")
            or address.get("village") or address.get("hamlet") or "")
    return GeocodedPlace(
        city=city,
        subregion=address.get("county", ""),
        region=address.get("state", ""),
        country=address.get("country", ""),
    )


def _require_locality(place: GeocodedPlace, coordinates: Coordinates, source: str) -> GeocodedPlace:
    if not (place.city or place.subregion or place.region):
        raise GeocodeFailure(f"{source} returned no place name for {coordinates.lat},{coordinates.lon}")
    return place


class GoogleReverseGeocoder:
    """Reverse geocoding through the Google Maps Geocoding API."""

    def __init__(self, api_key: Optional[str] = None, client: Optional[googlemaps.Client] = None):
        if client is None:
            client = googlemaps.Client(key=api_key)
        self.client = client

    def _reverse_sync(self, coordinates: Coordinates) -> GeocodedPlace:
        try:
            geocode_result = self.client.reverse_geocode((coordinates.lat, coordinates.lon))
        except GOOGLE_ERRORS as e:
            raise GeocodeFailure(f"Google reverse geocoding failed: {e}") from e
        if not geocode_result:
            raise GeocodeFailure(f"Google returned no results for {coordinates.lat},{coordinates.lon}")
        place = place_from_google(extract_components_from_google(geocode_result[0]))
        return _require_locality(place, coordinates, "Google")

    async def reverse_geocode(self, coordinates: Coordinates) -> GeocodedPlace:
        return await asyncio.to_thread(self._reverse_sync, coordinates)


class NominatimReverseGeocoder:
    def __init__(self, user_agent: str = "discovery_app", geolocator: Optional[Nominatim] = None):
        self.geolocator = geolocator or Nominatim(user_agent=user_agent)

    def _reverse_sync(self, coordinates: Coordinates) -> GeocodedPlace:
        try:
            location = self.geolocator.reverse((coordinates.lat, coordinates.lon), exactly_one=True)
        except GeopyError as e:
            raise GeocodeFailure(f"Nominatim reverse geocoding failed: {e}") from e
        if not location:
            raise GeocodeFailure(f"Nominatim returned no results for {coordinates.lat},{coordinates.lon}")
        return _require_locality(place_from_nominatim(location.raw), coordinates, "Nominatim")

    async def reverse_geocode(self, coordinates: Coordinates) -> GeocodedPlace:
        return await asyncio.to_thread(self._reverse_sync, coordinates)


class NominatimForwardGeocoder:
    """Turns manually typed "City, State" text into coordinates."""

    def __init__(self, user_agent: str = "discovery_app", geolocator: Optional[Nominatim] = None):
        self.geolocator = geolocator or Nominatim(user_agent=user_agent)

    def _geocode_sync(self, text: str) -> Coordinates:
        try:
            location = self.geolocator.geocode(text, exactly_one=True)
        except GeopyError as e:
            raise GeocodeFailure(f"Nominatim geocoding failed for '{text}': {e}") from e
        if not location:
            raise GeocodeFailure(f"No match for '{text}'")
        coords = Coordinates.parse({"lat": location.latitude, "lon": location.longitude})
        if coords is None:
            raise GeocodeFailure(f"Invalid coordinates for '{text}'")
        return coords

    async def geocode(self, text: str) -> Coordinates:
        return await asyncio.to_thread(self._geocode_sync, text)


class FallbackReverseGeocoder:
    """Try each geocoder in order (e.g. Google first, Nominatim if Google fails)."""

    def __init__(self, geocoders: Sequence):
        self.geocoders = list(geocoders)

    async def reverse_geocode(self, coordinates: Coordinates) -> GeocodedPlace:
        errors = []
        for geocoder in self.geocoders:
            try:
                return await geocoder.reverse_geocode(coordinates)
            except GeocodeFailure as e:
                logger.warning(f"{type(geocoder).__name__} failed, trying next: {e}")
                errors.append(str(e))
        raise GeocodeFailure("; ".join(errors) or "No geocoders configured")
