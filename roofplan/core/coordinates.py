"""
Coordinate projection utilities.

Maps WGS84 points to a local metric tangent plane anchored at an origin:
- x: metres east of the origin
- z: metres north of the origin

Uses an equirectangular approximation at the origin latitude. This is only
valid for building-scale spans (a few hundred metres); it is not a general
geodesy routine. Height is handled separately by the panel placement code.
"""

from __future__ import annotations

import math
from typing import Sequence

from .models import GeoPoint, SolarViewData


METERS_PER_DEG_LAT = 111_132.0
METERS_PER_DEG_LON_EQUATOR = 111_320.0


def meters_per_degree_longitude(latitude: float) -> float:
    """Length of one degree of longitude at the given latitude."""
    return METERS_PER_DEG_LON_EQUATOR * math.cos(math.radians(latitude))


def to_local_meters(point: GeoPoint, origin: GeoPoint) -> tuple[float, float]:
    """
    Project a point into the origin's local frame.

    Returns:
        (x, z) in metres, x eastward and z northward
    """
    x = (point.longitude - origin.longitude) * meters_per_degree_longitude(origin.latitude)
    z = (point.latitude - origin.latitude) * METERS_PER_DEG_LAT
    return x, z


def to_geo(x: float, z: float, origin: GeoPoint) -> GeoPoint:
    """Inverse of to_local_meters."""
    lon_scale = meters_per_degree_longitude(origin.latitude)
    if abs(lon_scale) < 1e-9:
        raise ValueError("Origin too close to a pole for the local projection")
    return GeoPoint(
        latitude=origin.latitude + z / METERS_PER_DEG_LAT,
        longitude=origin.longitude + x / lon_scale,
    )


def offset_geo(point: GeoPoint, east_m: float, north_m: float) -> GeoPoint:
    """Shift a point by metric offsets, scaled at the point's own latitude."""
    return to_geo(east_m, north_m, point)


def centroid(points: Sequence[GeoPoint]) -> GeoPoint:
    """Arithmetic mean of points; (0, 0) for an empty sequence."""
    count = max(len(points), 1)
    return GeoPoint(
        latitude=sum(p.latitude for p in points) / count,
        longitude=sum(p.longitude for p in points) / count,
    )


def compute_origin(view: SolarViewData) -> GeoPoint:
    """
    Anchor of all local-plane math for one rendering pass.

    The fixed origin wins; otherwise the mean of the segment centers.
    Compute once per pass and pass it explicitly to every projection.
    """
    if view.origin is not None:
        return view.origin
    return centroid([segment.center for segment in view.segments])
