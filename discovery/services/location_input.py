# discovery/services/location_input.py
from typing import List, Optional, Sequence

from discovery.errors import InvalidLocationInput
from discovery.models import Coordinates, PersistedLocation

RADIUS_OPTIONS = (5, 10, 15, 25, 50, 100)  # miles

POPULAR_LOCATIONS = [
    PersistedLocation(id="popular-sf", display_name="San Francisco, CA", city="San Francisco",
                      region="California", country="United States",
                      coordinates=Coordinates(lat=37.7749, lon=-122.4194), saved_at=0),
    PersistedLocation(id="popular-ny", display_name="New York, NY", city="New York",
                      region="New York", country="United States",
                      coordinates=Coordinates(lat=40.7128, lon=-74.0060), saved_at=0),
    PersistedLocation(id="popular-la", display_name="Los Angeles, CA", city="Los Angeles",
                      region="California", country="United States",
                      coordinates=Coordinates(lat=34.0522, lon=-118.2437), saved_at=0),
]

SEARCHABLE_LOCATIONS = POPULAR_LOCATIONS + [
    PersistedLocation(id="chicago-1", display_name="Chicago, IL", city="Chicago",
                      region="Illinois", country="United States",
                      coordinates=Coordinates(lat=41.8781, lon=-87.6298), saved_at=0),
    PersistedLocation(id="miami-1", display_name="Miami, FL", city="Miami",
                      region="Florida", country="United States",
                      coordinates=Coordinates(lat=25.7617, lon=-80.1918), saved_at=0),
]


def parse_manual_location(text: Optional[str],
                          coordinates: Optional[Coordinates] = None) -> PersistedLocation:
    """
    Parse a manually typed "City, State" string.

    Anything after the second part (e.g. a country) is kept as the country.
    Raises InvalidLocationInput when the text does not have at least a city
    and a state.
    """
    parts = [part.strip() for part in (text or "").split(",")]
    parts = [part for part in parts if part]
    if len(parts) < 2:
        raise InvalidLocationInput('Please enter location as "City, State"')

    city, state = parts[0], parts[1]
    country = ", ".join(parts[2:])
    return PersistedLocation(
        display_name=f"{city}, {state}",
        city=city,
        region=state,
        country=country,
        coordinates=coordinates,
    )


def search_locations(query: Optional[str],
                     candidates: Sequence[PersistedLocation] = SEARCHABLE_LOCATIONS,
                     limit: int = 10) -> List[PersistedLocation]:
    if not query or len(query.strip()) < 2:
        return []
    needle = query.strip().lower()
    matches = [loc for loc in candidates
               if needle in loc.display_name.lower() or needle in loc.city.lower()]
    return matches[:limit]
