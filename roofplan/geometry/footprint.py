"""
Segment Footprint Resolver

Fits a rectangle (and, when the survey has one, a polygon) to a roof segment
in the segment's own plane coordinates (u, v), centered at the segment
center. The fit tightens to the panel-covered region:

1. Project boundary vertices and panel centers into (u, v)
2. Bounding rectangle over all projected points
3. Safety margin derived from panel dimensions
4. Optional rescale towards an area hint (clamped)
5. Boundary polygon expanded slightly around the point centroid

Segments without a boundary get a square sized from their area.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from shapely import affinity
from shapely.geometry import MultiPoint, Polygon

from ..core.config import VisibilityThresholds, settings
from ..core.coordinates import to_local_meters
from ..core.models import GeoPoint, PanelDimensions, Segment
from .plane_basis import PlaneBasis

logger = logging.getLogger(__name__)

MIN_RECT_SIDE_M = 0.5
MIN_MARGIN_M = 0.2
MARGIN_PANEL_FRACTION = 0.3
AREA_SCALE_LIMITS = (0.5, 2.0)
SEAM_EXPANSION_M = 0.04
DEFAULT_SEGMENT_AREA_M2 = 16.0


@dataclass(frozen=True)
class SegmentFootprint:
    """Fitted footprint in plane coordinates (metres)."""

    center_uv: tuple[float, float]
    width_u: float
    height_v: float
    polygon_uv: Optional[tuple[tuple[float, float], ...]] = None
    centroid_uv: Optional[tuple[float, float]] = None

    @property
    def area_m2(self) -> float:
        return self.width_u * self.height_v

    @property
    def min_side(self) -> float:
        return min(self.width_u, self.height_v)

    @property
    def aspect_ratio(self) -> float:
        return max(self.width_u, self.height_v) / max(self.min_side, 1e-3)

    def polygon(self) -> Optional[Polygon]:
        if not self.polygon_uv:
            return None
        return Polygon(self.polygon_uv)


def project_to_plane(
    point: GeoPoint,
    segment_center: GeoPoint,
    basis: PlaneBasis,
    origin: GeoPoint,
) -> tuple[float, float]:
    """(u, v) of a geographic point relative to the segment center."""
    px, pz = to_local_meters(point, origin)
    cx, cz = to_local_meters(segment_center, origin)
    u, v, _ = basis.project(px - cx, pz - cz)
    return u, v


def resolve_footprint(
    segment: Segment,
    basis: PlaneBasis,
    origin: GeoPoint,
    panel_centers: Sequence[GeoPoint] = (),
    area_hint: Optional[float] = None,
    panel_dims: Optional[PanelDimensions] = None,
) -> SegmentFootprint:
    """
    Resolve a segment's footprint in its plane coordinates.

    Args:
        segment: Roof segment
        basis: Plane basis built from the segment's tilt and azimuth
        origin: Shared origin of the rendering pass
        panel_centers: Centers of panels that belong to this segment
        area_hint: Authoritative area (m²) to scale the rectangle towards
        panel_dims: Panel size, used for edge margins

    Returns:
        SegmentFootprint
    """
    if not segment.boundary or len(segment.boundary) < 3:
        side = math.sqrt(max(segment.area_m2 or DEFAULT_SEGMENT_AREA_M2, 1.0))
        return SegmentFootprint(
            center_uv=(0.0, 0.0),
            width_u=side,
            height_v=side,
            centroid_uv=(0.0, 0.0),
        )

    boundary_uv = [project_to_plane(p, segment.center, basis, origin) for p in segment.boundary]
    panel_uv = [project_to_plane(p, segment.center, basis, origin) for p in panel_centers]
    all_uv = boundary_uv + panel_uv

    u_min, v_min, u_max, v_max = MultiPoint(all_uv).bounds
    width_u = max(MIN_RECT_SIDE_M, u_max - u_min)
    height_v = max(MIN_RECT_SIDE_M, v_max - v_min)

    if panel_dims is not None:
        margin_u = max(MIN_MARGIN_M, panel_dims.width_m * MARGIN_PANEL_FRACTION)
        margin_v = max(MIN_MARGIN_M, panel_dims.height_m * MARGIN_PANEL_FRACTION)
        width_u += 2 * margin_u
        height_v += 2 * margin_v

    if area_hint:
        scale = math.sqrt(area_hint / (width_u * height_v))
        scale = min(max(scale, AREA_SCALE_LIMITS[0]), AREA_SCALE_LIMITS[1])
        width_u *= scale
        height_v *= scale

    centroid = (
        sum(u for u, _ in all_uv) / len(all_uv),
        sum(v for _, v in all_uv) / len(all_uv),
    )
    expanded = affinity.scale(
        Polygon(boundary_uv),
        xfact=1 + SEAM_EXPANSION_M / max(width_u, 1e-3),
        yfact=1 + SEAM_EXPANSION_M / max(height_v, 1e-3),
        origin=(centroid[0], centroid[1]),
    )
    # Drop the closing vertex shapely appends
    polygon_uv = tuple((float(u), float(v)) for u, v in list(expanded.exterior.coords)[:-1])

    return SegmentFootprint(
        center_uv=((u_min + u_max) / 2, (v_min + v_max) / 2),
        width_u=width_u,
        height_v=height_v,
        polygon_uv=polygon_uv,
        centroid_uv=centroid,
    )


def is_negligible(
    segment: Segment,
    footprint: SegmentFootprint,
    thresholds: Optional[VisibilityThresholds] = None,
    hide_steep: bool = True,
) -> bool:
    """
    Whether a segment should be hidden from rendering.

    Near-vertical facets (facades misread as roof), tiny facets and thin
    slivers are suppressed. They stay in the data model.
    """
    thresholds = thresholds or settings.visibility_thresholds()

    steep = hide_steep and abs(segment.tilt_deg) >= thresholds.hide_tilt_deg
    area = segment.area_m2 if segment.area_m2 is not None else footprint.area_m2
    too_small = area < thresholds.min_visible_area_m2
    sliver = (
        footprint.aspect_ratio > thresholds.sliver_aspect_ratio
        and footprint.min_side < thresholds.sliver_min_side_m
    )

    if steep or too_small or sliver:
        logger.debug(
            f"Hiding segment: steep={steep} small={too_small} sliver={sliver}",
            extra={"segment_id": segment.id},
        )
        return True
    return False
