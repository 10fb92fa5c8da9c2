"""
Flux Module - Raster sampling and irradiance-to-energy estimates.

Features:
- Nearest-pixel sampling of geo-referenced rasters
- Parallel, failure-isolated sampling of several data layers
- Per-panel energy estimates and per-segment flux averages
"""

from .raster import (
    GeoRaster,
    LayerSample,
    RasterReadError,
    load_raster,
    pixel_index,
    sample,
    sample_layers,
    sample_raster_at_points,
)
from .energy import (
    average_flux_by_segment,
    enrich_view_from_raster,
    enrich_view_with_flux,
    estimate_panel_energy,
    flux_color_scale,
)

__all__ = [
    'GeoRaster',
    'LayerSample',
    'RasterReadError',
    'load_raster',
    'pixel_index',
    'sample',
    'sample_layers',
    'sample_raster_at_points',
    'average_flux_by_segment',
    'enrich_view_from_raster',
    'enrich_view_with_flux',
    'estimate_panel_energy',
    'flux_color_scale',
]
