from __future__ import annotations

import math

from sqlalchemy.orm import Session

from devcamper.models.bootcamp import Bootcamp

EARTH_RADIUS_MILES = 3963.0


def radius_in_radians(distance_miles: float) -> float:
    return float(distance_miles) / EARTH_RADIUS_MILES


def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle angle between two points in radians (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def bootcamps_within(db: Session, *, latitude: float, longitude: float, radius: float) -> list[Bootcamp]:
    """Bootcamps whose location lies inside a spherical cap of ``radius`` radians."""
    q = db.query(Bootcamp).filter(Bootcamp.latitude.is_not(None), Bootcamp.longitude.is_not(None))

    # Bounding box prefilter; the longitude bound is skipped when the cap
    # reaches a pole or crosses the antimeridian.
    lat_delta = math.degrees(radius)
    q = q.filter(Bootcamp.latitude >= latitude - lat_delta, Bootcamp.latitude <= latitude + lat_delta)
    sin_ratio = math.sin(min(radius, math.pi / 2)) / max(math.cos(math.radians(latitude)), 1e-12)
    if radius < math.pi / 2 and sin_ratio < 1:
        lng_delta = math.degrees(math.asin(sin_ratio))
        low, high = longitude - lng_delta, longitude + lng_delta
        if low >= -180 and high <= 180:
            q = q.filter(Bootcamp.longitude >= low, Bootcamp.longitude <= high)

    rows = q.order_by(Bootcamp.created_at.desc(), Bootcamp.id.asc()).all()
    return [r for r in rows if central_angle(latitude, longitude, r.latitude, r.longitude) <= radius]
