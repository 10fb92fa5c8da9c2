"""
Irradiance-to-energy estimation and view enrichment.

If the flux raster is annual kWh/m², energy ≈ flux × area × efficiency × PR.
If it is W/m², the result is only a relative score; the unit is carried
implicitly from the raster.

Estimates only backfill panels that have no upstream yearly energy;
upstream values are never overwritten.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..core.config import EnergyAssumptions, settings
from ..core.models import PanelDimensions, Segment, SolarPanelPlacement, SolarViewData
from .raster import RasterReadError, sample_raster_at_points

logger = logging.getLogger(__name__)

# Segment colour ramp: low flux blue, high flux yellow
HUE_LOW = 210.0
HUE_HIGH = 50.0


def estimate_panel_energy(
    flux: float,
    dims: PanelDimensions,
    efficiency: float = 0.19,
    performance_ratio: float = 0.85,
) -> float:
    """Estimated yearly energy (kWh) of one panel, never negative."""
    return max(0.0, flux * dims.area_m2 * efficiency * performance_ratio)


def average_flux_by_segment(
    panels: Sequence[SolarPanelPlacement],
    values: Sequence[Optional[float]],
) -> Dict[int, float]:
    """
    Mean sampled flux per segment id.

    Missing samples are ignored. Segments without any sample are absent
    from the result rather than averaged to zero.
    """
    grouped: Dict[int, List[float]] = defaultdict(list)
    for panel, value in zip(panels, values):
        if value is None:
            continue
        grouped[panel.segment_index].append(value)
    return {segment_id: sum(vals) / len(vals) for segment_id, vals in grouped.items()}


def enrich_view_with_flux(
    view: SolarViewData,
    values: Sequence[Optional[float]],
    assumptions: Optional[EnergyAssumptions] = None,
) -> SolarViewData:
    """
    Apply per-panel flux samples to a view.

    Args:
        view: View model whose panels were sampled, in order
        values: One sample per panel (None when missing)
        assumptions: Efficiency and performance ratio

    Returns:
        New SolarViewData with backfilled panel energy and segment averages
    """
    assumptions = assumptions or settings.energy_assumptions()
    dims = view.panel_dimensions

    panels = []
    backfilled = 0
    for panel, value in zip(view.panels, values):
        if panel.yearly_energy_dc_kwh is None and value is not None:
            estimate = estimate_panel_energy(
                value,
                dims,
                efficiency=assumptions.efficiency,
                performance_ratio=assumptions.performance_ratio,
            )
            panel = panel.model_copy(update={"yearly_energy_dc_kwh": estimate})
            backfilled += 1
        panels.append(panel)
    # Panels beyond the sampled range keep their values
    panels.extend(view.panels[len(panels):])

    averages = average_flux_by_segment(view.panels, values)
    segments = [
        segment.model_copy(update={"avg_flux": averages.get(segment.id)})
        for segment in view.segments
    ]

    logger.info(
        f"Flux enrichment: {backfilled} panel estimates backfilled, "
        f"{len(averages)}/{len(segments)} segments with average flux"
    )
    return view.model_copy(update={"panels": tuple(panels), "segments": tuple(segments)})


def enrich_view_from_raster(
    view: SolarViewData,
    flux_path: Path | str,
    assumptions: Optional[EnergyAssumptions] = None,
) -> SolarViewData:
    """
    Sample the annual flux raster at every panel center and enrich the view.

    A raster that cannot be read leaves the view unenriched.
    """
    if not view.panels:
        return view
    try:
        values = sample_raster_at_points(flux_path, [p.center for p in view.panels])
    except RasterReadError as e:
        logger.warning(
            f"Flux enrichment skipped: {e}",
            extra={"raster": str(flux_path), "error_type": type(e).__name__},
        )
        return view
    return enrich_view_with_flux(view, values, assumptions)


def flux_color_scale(segments: Sequence[Segment]) -> Dict[int, str]:
    """
    HSL colour per segment with an average flux.

    Hue runs from 210 (lowest flux) to 50 (highest). Segments without an
    average are left out.
    """
    known = [s.avg_flux for s in segments if s.avg_flux is not None]
    if not known:
        return {}
    low, high = min(known), max(known)

    colors = {}
    for segment in segments:
        if segment.avg_flux is None:
            continue
        t = (segment.avg_flux - low) / (high - low) if high > low else 0.5
        hue = HUE_LOW + (HUE_HIGH - HUE_LOW) * t
        colors[segment.id] = f"hsl({hue:g}, 70%, 55%)"
    return colors
