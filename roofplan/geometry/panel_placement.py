"""
Panel Placement Projector

Places a rectangular panel on its segment's plane:
- (u, v) from the horizontal displacement to the segment center
- height from the slope (panels further downslope sit lower)
- orientation decides which physical edge runs across the slope

Also derives the ground-plane footprint (four lat/lon corners) for map
overlays and the thin solid used by 3D renderers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..core.coordinates import offset_geo, to_local_meters
from ..core.models import GeoPoint, PanelDimensions, PanelOrientation, SolarPanelPlacement
from .plane_basis import PlaneBasis

# Gap between roof plane and panel underside (m)
PANEL_STANDOFF_M = 0.012
DEFAULT_PANEL_THICKNESS_M = 0.035


@dataclass(frozen=True)
class PanelPose:
    """Panel position in its segment's frame."""

    u: float
    v: float
    height: float  # Elevation of the panel center on the roof plane
    width_u: float
    height_v: float


@dataclass(frozen=True)
class PanelSolid:
    """Thin box in the segment's basis-oriented frame."""

    center: tuple[float, float, float]  # (u, v, w), w along the plane normal
    size: tuple[float, float, float]  # (width_u, height_v, thickness)


def panel_edges(panel: SolarPanelPlacement, dims: PanelDimensions) -> tuple[float, float]:
    """(across-slope edge, along-slope edge) for the panel's orientation."""
    if panel.orientation == PanelOrientation.LANDSCAPE:
        return dims.height_m, dims.width_m
    return dims.width_m, dims.height_m


def place_panel(
    panel: SolarPanelPlacement,
    dims: PanelDimensions,
    basis: PlaneBasis,
    segment_center: GeoPoint,
    origin: GeoPoint,
    height_at_center: float = 0.0,
) -> PanelPose:
    """
    Project a panel into its segment's plane coordinates.

    Args:
        panel: Panel placement with geographic center
        dims: Shared panel dimensions
        basis: Owning segment's plane basis
        segment_center: Owning segment's center
        origin: Shared origin of the rendering pass
        height_at_center: Elevation of the segment center

    Returns:
        PanelPose
    """
    px, pz = to_local_meters(panel.center, origin)
    cx, cz = to_local_meters(segment_center, origin)
    u, v, v_h = basis.project(px - cx, pz - cz)

    width_u, height_v = panel_edges(panel, dims)

    return PanelPose(
        u=u,
        v=v,
        height=height_at_center - v_h * basis.tan_tilt,
        width_u=width_u,
        height_v=height_v,
    )


def panel_solid(pose: PanelPose, dims: PanelDimensions) -> PanelSolid:
    """Raise the panel by half its thickness plus the standoff gap."""
    thickness = dims.thickness_m if dims.thickness_m is not None else DEFAULT_PANEL_THICKNESS_M
    w = thickness / 2 + PANEL_STANDOFF_M
    return PanelSolid(
        center=(pose.u, pose.v, w),
        size=(pose.width_u, pose.height_v, thickness),
    )


def panel_ground_corners(
    panel: SolarPanelPlacement,
    dims: PanelDimensions,
    basis: PlaneBasis,
) -> List[GeoPoint]:
    """
    Panel rectangle projected to the ground, for map rendering.

    The along-slope edge shrinks by cos(tilt) once flattened. Corners are
    returned in order (-u,-v), (+u,-v), (+u,+v), (-u,+v).
    """
    width_u, height_v = panel_edges(panel, dims)
    half_u = width_u / 2
    half_v = height_v * basis.cos_tilt / 2

    across_e, across_n = basis.across[0], basis.across[2]
    slope_e, slope_n = basis.downslope[0], basis.downslope[2]

    corners = []
    for su, sv in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
        east = su * half_u * across_e + sv * half_v * slope_e
        north = su * half_u * across_n + sv * half_v * slope_n
        corners.append(offset_geo(panel.center, float(east), float(north)))
    return corners
