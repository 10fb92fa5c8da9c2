"""
Roof scene assembly.

One rendering pass over a SolarViewData:
- resolve the origin once and pass it to every projection
- build a frame (basis, transform, footprint, visibility) per segment
- select and place panels on their segments

The result is renderer-agnostic; see roofplan.export.scene_json.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence

import numpy as np

from ..core.config import VisibilityThresholds, settings
from ..core.coordinates import compute_origin, to_local_meters
from ..core.models import GeoPoint, PanelDimensions, SolarPanelPlacement, SolarViewData, Segment
from .footprint import SegmentFootprint, is_negligible, resolve_footprint
from .panel_placement import PanelPose, PanelSolid, panel_solid, place_panel
from .plane_basis import PlaneBasis, build_plane_basis

logger = logging.getLogger(__name__)

PanelOrder = Literal["yield", "as-is"]


@dataclass(frozen=True)
class SegmentFrame:
    """A segment positioned in the scene."""

    segment: Segment
    basis: PlaneBasis
    center_local: tuple[float, float]  # (x, z) of the segment center
    height_at_center: float
    footprint: SegmentFootprint
    hidden: bool = False

    @property
    def id(self) -> int:
        return self.segment.id

    def transform(self) -> np.ndarray:
        """4x4 matrix from plane coordinates (u, v, w) to scene (x, y, z)."""
        matrix = np.eye(4)
        matrix[:3, :3] = self.basis.rotation_matrix()
        matrix[:3, 3] = [self.center_local[0], self.height_at_center, self.center_local[1]]
        return matrix


@dataclass(frozen=True)
class PlacedPanel:
    panel: SolarPanelPlacement
    segment_id: int
    pose: PanelPose
    solid: PanelSolid


@dataclass
class RoofScene:
    origin: GeoPoint
    panel_dimensions: PanelDimensions = field(default_factory=PanelDimensions)
    segments: List[SegmentFrame] = field(default_factory=list)
    panels: List[PlacedPanel] = field(default_factory=list)
    total_panels: int = 0

    @property
    def visible_segments(self) -> List[SegmentFrame]:
        return [frame for frame in self.segments if not frame.hidden]

    def segment(self, segment_id: int) -> Optional[SegmentFrame]:
        for frame in self.segments:
            if frame.id == segment_id:
                return frame
        return None


def select_panels(
    panels: Sequence[SolarPanelPlacement],
    order: PanelOrder = "yield",
    count: Optional[int] = None,
) -> List[SolarPanelPlacement]:
    """
    Pick the panels to show.

    "yield" puts the highest yearly energy first (missing counts as 0);
    "as-is" keeps the survey order. The count is clamped to [0, len].
    """
    selected = list(panels)
    if order == "yield":
        selected.sort(key=lambda p: p.yearly_energy_dc_kwh or 0.0, reverse=True)
    if count is None:
        return selected
    return selected[: max(0, min(int(round(count)), len(selected)))]


def build_segment_frames(
    view: SolarViewData,
    origin: GeoPoint,
    vertical_exaggeration: float = 1.0,
    hide_steep: bool = True,
    thresholds: Optional[VisibilityThresholds] = None,
) -> List[SegmentFrame]:
    """
    Frames for every segment of the view.

    Heights are normalised against the lowest segment so the model sits
    near zero, then scaled by the vertical exaggeration.
    """
    thresholds = thresholds or settings.visibility_thresholds()

    heights = [s.plane_height_at_center_m for s in view.segments]
    min_height = min(heights) if heights else 0.0

    panel_centers: Dict[int, List[GeoPoint]] = defaultdict(list)
    for panel in view.panels:
        panel_centers[panel.segment_index].append(panel.center)

    frames = []
    for segment in view.segments:
        basis = build_plane_basis(segment.tilt_deg, segment.azimuth_deg)
        footprint = resolve_footprint(
            segment,
            basis,
            origin,
            panel_centers=panel_centers.get(segment.id, ()),
            area_hint=segment.area_m2,
            panel_dims=view.panel_dimensions,
        )
        frames.append(SegmentFrame(
            segment=segment,
            basis=basis,
            center_local=to_local_meters(segment.center, origin),
            height_at_center=(segment.plane_height_at_center_m - min_height) * vertical_exaggeration,
            footprint=footprint,
            hidden=is_negligible(segment, footprint, thresholds, hide_steep=hide_steep),
        ))
    return frames


def build_roof_scene(
    view: SolarViewData,
    *,
    vertical_exaggeration: float = 1.0,
    hide_steep: bool = True,
    panel_count: Optional[int] = None,
    panel_order: PanelOrder = "yield",
    thresholds: Optional[VisibilityThresholds] = None,
) -> RoofScene:
    """
    Run one rendering pass.

    Args:
        view: Normalised survey view model
        vertical_exaggeration: Multiplier for segment heights
        hide_steep: Hide near-vertical segments
        panel_count: Number of panels to show (default: all)
        panel_order: "yield" or "as-is"
        thresholds: Visibility filter overrides

    Returns:
        RoofScene with segment frames and placed panels
    """
    origin = compute_origin(view)
    frames = build_segment_frames(
        view,
        origin,
        vertical_exaggeration=vertical_exaggeration,
        hide_steep=hide_steep,
        thresholds=thresholds,
    )
    by_id = {frame.id: frame for frame in frames}

    dims = view.panel_dimensions
    scene = RoofScene(
        origin=origin,
        panel_dimensions=dims,
        segments=frames,
        total_panels=len(view.panels),
    )

    for panel in select_panels(view.panels, panel_order, panel_count):
        frame = by_id.get(panel.segment_index)
        if frame is None:
            logger.debug(
                f"Dropping panel on unknown segment {panel.segment_index}",
                extra={"panel_id": panel.id},
            )
            continue
        if frame.hidden:
            continue
        pose = place_panel(
            panel,
            dims,
            frame.basis,
            frame.segment.center,
            origin,
            height_at_center=frame.height_at_center,
        )
        scene.panels.append(PlacedPanel(
            panel=panel,
            segment_id=frame.id,
            pose=pose,
            solid=panel_solid(pose, dims),
        ))

    logger.info(
        f"Roof scene: {len(scene.visible_segments)}/{len(frames)} segments visible, "
        f"{len(scene.panels)}/{scene.total_panels} panels placed"
    )
    return scene
