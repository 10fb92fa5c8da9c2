"""
Geometry Module - Roof planes, segment footprints and panel placement.

Turns survey segments (center, tilt, azimuth, optional boundary) into a
consistent local 3D frame:
- Plane basis per segment
- Fitted footprint rectangle/polygon in plane coordinates
- Panel poses, 3D solids and ground-plane corners
- Scene assembly with a single shared origin
"""

from .plane_basis import PlaneBasis, build_plane_basis
from .footprint import SegmentFootprint, is_negligible, project_to_plane, resolve_footprint
from .panel_placement import (
    PanelPose,
    PanelSolid,
    panel_ground_corners,
    panel_solid,
    place_panel,
)
from .scene import (
    PlacedPanel,
    RoofScene,
    SegmentFrame,
    build_roof_scene,
    build_segment_frames,
    select_panels,
)

__all__ = [
    'PlaneBasis',
    'build_plane_basis',
    'SegmentFootprint',
    'is_negligible',
    'project_to_plane',
    'resolve_footprint',
    'PanelPose',
    'PanelSolid',
    'panel_ground_corners',
    'panel_solid',
    'place_panel',
    'PlacedPanel',
    'RoofScene',
    'SegmentFrame',
    'build_roof_scene',
    'build_segment_frames',
    'select_panels',
]
