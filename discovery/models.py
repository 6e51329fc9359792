# discovery/models.py
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


def _to_float(value) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# -----------------------------
# Coordinates
# -----------------------------
@dataclass(frozen=True)
class Coordinates:
    """Decimal degrees, WGS84. Ranges are checked by ``parse`` only."""

    lat: float
    lon: float

    @classmethod
    def parse(cls, value: Any) -> Optional["Coordinates"]:
        """
        Build coordinates from untrusted input.

        Accepts a mapping with lat/lon, lat/lng or latitude/longitude keys,
        or a ``[lon, lat]`` pair. Returns None for anything missing,
        non-numeric or out of range.
        """
        if value is None:
            return None
        if isinstance(value, Coordinates):
            return value

        if isinstance(value, dict):
            lat = _to_float(value.get("lat", value.get("latitude")))
            lon = _to_float(value.get("lon", value.get("lng", value.get("longitude"))))
        elif isinstance(value, (list, tuple)) and len(value) == 2:
            lon, lat = _to_float(value[0]), _to_float(value[1])
        else:
            return None

        if lat is None or lon is None:
            return None
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
            return None
        return cls(lat=lat, lon=lon)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lon}


# -----------------------------
# Location selection (tagged union)
# -----------------------------
@dataclass(frozen=True)
class Current:
    """Live device fix plus its reverse-geocoded place name."""

    coordinates: Coordinates
    display_name: str
    city: str = ""
    region: str = ""

    kind = "current"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "display_name": self.display_name,
            "city": self.city,
            "region": self.region,
            "coordinates": self.coordinates.to_dict(),
        }


@dataclass(frozen=True)
class Selected:
    """A user-chosen location; manual entries may lack coordinates."""

    display_name: str
    coordinates: Optional[Coordinates] = None
    city: str = ""
    region: str = ""

    kind = "selected"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "display_name": self.display_name,
            "city": self.city,
            "region": self.region,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
        }


@dataclass(frozen=True)
class Global:
    """No geographic restriction."""

    kind = "global"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind, "display_name": "Everywhere"}


LocationSelection = Union[Current, Selected, Global]


def origin_of(selection: LocationSelection) -> Optional[Coordinates]:
    if isinstance(selection, Global):
        return None
    return selection.coordinates


# -----------------------------
# Persisted / geocoded places
# -----------------------------
@dataclass(frozen=True)
class GeocodedPlace:
    city: str = ""
    region: str = ""
    country: str = ""
    subregion: str = ""

    @property
    def display_name(self) -> str:
        head = self.city or self.subregion or self.region
        tail = self.region or self.country
        return f"{head}, {tail}"

    @property
    def locality(self) -> str:
        return self.city or self.subregion or ""


@dataclass(frozen=True)
class PersistedLocation:
    display_name: str
    city: str = ""
    region: str = ""
    country: str = ""
    coordinates: Optional[Coordinates] = None
    id: Optional[str] = None
    saved_at: int = field(default_factory=lambda: int(time.time() * 1000))

    @classmethod
    def from_place(cls, place: GeocodedPlace, coordinates: Coordinates) -> "PersistedLocation":
        return cls(
            display_name=place.display_name,
            city=place.locality,
            region=place.region,
            country=place.country,
            coordinates=coordinates,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["PersistedLocation"]:
        if not data or not isinstance(data, dict):
            return None
        display_name = data.get("display_name") or data.get("name") or data.get("formatted")
        if not display_name:
            city, region = data.get("city"), data.get("region") or data.get("state")
            if not city:
                return None
            display_name = f"{city}, {region}" if region else city
        saved_at = data.get("saved_at", data.get("savedAt"))
        return cls(
            display_name=display_name,
            city=data.get("city") or "",
            region=data.get("region") or data.get("state") or "",
            country=data.get("country") or "",
            coordinates=Coordinates.parse(data.get("coordinates")),
            id=data.get("id"),
            saved_at=int(saved_at) if isinstance(saved_at, (int, float)) else int(time.time() * 1000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "city": self.city,
            "region": self.region,
            "country": self.country,
            "coordinates": self.coordinates.to_dict() if self.coordinates else None,
            "saved_at": self.saved_at,
        }

    def to_selection(self) -> Selected:
        return Selected(
            display_name=self.display_name,
            coordinates=self.coordinates,
            city=self.city,
            region=self.region,
        )


# -----------------------------
# Content
# -----------------------------
@dataclass(frozen=True)
class ContentItem:
    id: str
    coordinates: Optional[Coordinates] = None
    location_label: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_document(cls, doc_id: str, data: Optional[Dict[str, Any]]) -> "ContentItem":
        data = data or {}
        location = data.get("location")

        coords = Coordinates.parse(data.get("coordinates"))
        if coords is None and isinstance(location, dict):
            coords = Coordinates.parse(location.get("coordinates") or location)
        if coords is None and ("lat" in data or "latitude" in data):
            coords = Coordinates.parse(data)

        label = data.get("locationLabel") or data.get("location_label")
        if not label and isinstance(location, str):
            label = location
        if not label and isinstance(location, dict):
            label = location.get("name") or location.get("display_name")
        if not label and data.get("city"):
            region = data.get("state") or data.get("region")
            label = f"{data['city']}, {region}" if region else data["city"]

        return cls(id=doc_id, coordinates=coords, location_label=label or None, data=data)

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.data)
        out["id"] = self.id
        return out


# -----------------------------
# Filtering
# -----------------------------
@dataclass
class FilterState:
    radius_miles: float = 50.0
    radius_filter_enabled: bool = True
    no_results_alert_shown: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius_miles": self.radius_miles,
            "radius_filter_enabled": self.radius_filter_enabled,
            "no_results_alert_shown": self.no_results_alert_shown,
        }


@dataclass(frozen=True)
class MatchResult:
    items: List[ContentItem]
    empty_after_radius_filter: bool = False
    distances: Dict[str, float] = field(default_factory=dict)
    strategy: str = "global"


class NoticeKind(Enum):
    NO_RESULTS = "no_results"
    FETCH_FAILED = "fetch_failed"


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class FeedSnapshot:
    selection: Optional[LocationSelection]
    items: List[ContentItem]
    total_items: int = 0
    widened_to_all: bool = False
    fetch_failed: bool = False
    notices: List[Notice] = field(default_factory=list)
    filter_state: Optional[FilterState] = None
    distances: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        items = []
        for item in self.items:
            entry = item.to_dict()
            if item.id in self.distances:
                entry["distance_miles"] = round(self.distances[item.id], 2)
            items.append(entry)
        return {
            "selection": self.selection.to_dict() if self.selection else None,
            "items": items,
            "count": len(self.items),
            "total_items": self.total_items,
            "widened_to_all": self.widened_to_all,
            "fetch_failed": self.fetch_failed,
            "notices": [n.to_dict() for n in self.notices],
            "filter": self.filter_state.to_dict() if self.filter_state else None,
        }
