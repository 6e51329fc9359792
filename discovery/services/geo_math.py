# discovery/services/geo_math.py
import math

from discovery.models import Coordinates

EARTH_RADIUS_KM = 6371.0
KM_TO_MILES = 0.621371


# -----------------------------
# Distance utilities
# -----------------------------
def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """
    Great-circle distance in kilometres.

    Precondition: both points are in range (-90..90, -180..180). Out of range
    input is not rejected; the result is just meaningless.
    """
    d_lat = math.radians(b.lat - a.lat)
    d_lon = math.radians(b.lon - a.lon)
    la1 = math.radians(a.lat)
    la2 = math.radians(b.lat)

    h = (math.sin(d_lat / 2) ** 2
         + math.cos(la1) * math.cos(la2) * math.sin(d_lon / 2) ** 2)
    # rounding can push h a hair above 1 for antipodal points
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def distance_miles(a: Coordinates, b: Coordinates) -> float:
    return haversine_km(a, b) * KM_TO_MILES
