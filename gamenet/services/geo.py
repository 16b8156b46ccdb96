"""
Nearby-venue lookup: a bounding box narrows candidates in SQL, haversine
distance decides membership and ordering.
"""
import math
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from gamenet.models.venue import Venue

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, lat: float, lon: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lon <= lon <= self.max_lon


def bounding_box(lat: float, lon: float, radius_km: float) -> BoundingBox:
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    cos_lat = math.cos(math.radians(lat))
    # At the poles every longitude is within range
    lon_delta = 180.0 if cos_lat < 1e-12 else radius_km / (KM_PER_DEGREE_LAT * cos_lat)
    return BoundingBox(lat - lat_delta, lat + lat_delta, lon - lon_delta, lon + lon_delta)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def find_nearby_venues(
    db: Session,
    lat: float,
    lon: float,
    radius_km: float,
    province: str | None = None,
    city: str | None = None,
    limit: int | None = None,
) -> list[tuple[Venue, float]]:
    """Venues within `radius_km` of (lat, lon) as (venue, distance_km), nearest first."""
    box = bounding_box(lat, lon, radius_km)
    stmt = select(Venue).where(
        Venue.latitude.is_not(None),
        Venue.longitude.is_not(None),
        Venue.latitude.between(box.min_lat, box.max_lat),
        Venue.longitude.between(box.min_lon, box.max_lon),
    )
    if province:
        stmt = stmt.where(Venue.province == province)
    if city:
        stmt = stmt.where(Venue.city == city)

    found = []
    for venue in db.execute(stmt).scalars():
        distance = haversine_km(lat, lon, venue.latitude, venue.longitude)
        if distance <= radius_km:
            found.append((venue, distance))
    found.sort(key=lambda pair: pair[1])
    if limit is not None:
        found = found[:limit]
    return found
