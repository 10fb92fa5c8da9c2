"""
Scene JSON exporter.

Serialises a RoofScene for an external renderer: the shared origin, one
frame per segment (4x4 transform, footprint, visibility, flux colour) and
one solid per placed panel with its ground-plane corners.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from rich.console import Console

from ..flux.energy import flux_color_scale
from ..geometry.panel_placement import panel_ground_corners
from ..geometry.scene import PlacedPanel, RoofScene, SegmentFrame

console = Console(stderr=True)


class SceneJSONExporter:
    """
    Export a roof scene to JSON.

    Coordinates are local metres: x east, y up, z north. Footprints and
    panel solids are in each segment's plane frame; apply the segment
    transform to bring them into the scene.
    """

    def __init__(self, pretty: bool = True, include_hidden: bool = True):
        """
        Initialize exporter.

        Args:
            pretty: Whether to format JSON with indentation
            include_hidden: Whether to keep segments hidden by the visibility filter
        """
        self.pretty = pretty
        self.include_hidden = include_hidden

    def to_dict(self, scene: RoofScene) -> Dict[str, Any]:
        frames = scene.segments if self.include_hidden else scene.visible_segments
        colors = flux_color_scale([frame.segment for frame in scene.segments])

        return {
            "origin": scene.origin.model_dump(),
            "segments": [self._segment(frame, colors.get(frame.id)) for frame in frames],
            "panels": [self._panel(placed, scene) for placed in scene.panels],
            "summary": {
                "segments": len(scene.segments),
                "visible_segments": len(scene.visible_segments),
                "panels_placed": len(scene.panels),
                "panels_total": scene.total_panels,
            },
        }

    def export(self, scene: RoofScene, output_path: Path | str) -> Path:
        """
        Write the scene to a JSON file.

        Returns:
            Path to exported file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.to_dict(scene)
        with open(output_path, "w", encoding="utf-8") as f:
            if self.pretty:
                json.dump(data, f, indent=2, ensure_ascii=False)
            else:
                json.dump(data, f, ensure_ascii=False)

        console.print(f"[green]Exported scene JSON: {output_path}[/green]")
        return output_path

    def _segment(self, frame: SegmentFrame, color: str | None) -> Dict[str, Any]:
        segment = frame.segment
        footprint = frame.footprint
        return {
            "id": segment.id,
            "tilt_deg": segment.tilt_deg,
            "azimuth_deg": segment.azimuth_deg,
            "hidden": frame.hidden,
            "avg_flux": segment.avg_flux,
            "color": color,
            "transform": frame.transform().tolist(),
            "footprint": {
                "center_uv": list(footprint.center_uv),
                "width_u": footprint.width_u,
                "height_v": footprint.height_v,
                "polygon_uv": [list(p) for p in footprint.polygon_uv] if footprint.polygon_uv else None,
            },
        }

    def _panel(self, placed: PlacedPanel, scene: RoofScene) -> Dict[str, Any]:
        frame = scene.segment(placed.segment_id)
        corners = panel_ground_corners(placed.panel, scene.panel_dimensions, frame.basis)
        return {
            "id": placed.panel.id,
            "segment_id": placed.segment_id,
            "orientation": placed.panel.orientation.value,
            "yearly_energy_dc_kwh": placed.panel.yearly_energy_dc_kwh,
            "height_m": placed.pose.height,
            "center_uvw": list(placed.solid.center),
            "size": list(placed.solid.size),
            "ground_corners": [[c.latitude, c.longitude] for c in corners],
        }
