"""
Pytest configuration and fixtures for roofplan tests.

Provides reusable test fixtures for:
- Metric offsets around a reference location
- Building survey payloads
- Mapped view models
- Small GeoTIFF flux rasters
"""

import math
import json
import pytest
from pathlib import Path

import numpy as np

# Add project root to path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from roofplan.core.coordinates import METERS_PER_DEG_LAT, meters_per_degree_longitude
from roofplan.core.models import GeoPoint, Segment
from roofplan.ingest.survey_mapper import map_building_survey


LAT0 = 52.0
LON0 = 21.0


def offset(east_m: float, north_m: float, lat: float = LAT0, lon: float = LON0) -> dict:
    """Survey-style {latitude, longitude} shifted by metres from (lat, lon)."""
    return {
        "latitude": lat + north_m / METERS_PER_DEG_LAT,
        "longitude": lon + east_m / meters_per_degree_longitude(lat),
    }


def geo(east_m: float, north_m: float) -> GeoPoint:
    return GeoPoint(**offset(east_m, north_m))


def square_boundary(half_side_m: float, east_m: float = 0.0, north_m: float = 0.0) -> tuple:
    """Axis-aligned square of boundary points around a center offset."""
    return (
        geo(east_m - half_side_m, north_m - half_side_m),
        geo(east_m + half_side_m, north_m - half_side_m),
        geo(east_m + half_side_m, north_m + half_side_m),
        geo(east_m - half_side_m, north_m + half_side_m),
    )


# =============================================================================
# PATH FIXTURES
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Project root directory."""
    return Path(__file__).parent.parent


# =============================================================================
# GEOMETRY FIXTURES
# =============================================================================

@pytest.fixture
def origin() -> GeoPoint:
    return GeoPoint(latitude=LAT0, longitude=LON0)


@pytest.fixture
def flat_square_segment() -> Segment:
    """Flat 10 m x 10 m segment centered on the reference point."""
    return Segment(
        id=0,
        center=geo(0, 0),
        tilt_deg=0.0,
        azimuth_deg=180.0,
        boundary=square_boundary(5.0),
    )


# =============================================================================
# SURVEY FIXTURES
# =============================================================================

@pytest.fixture
def survey_payload() -> dict:
    """
    Building insights payload with:
    - segment 0: south-facing 30° roof, 100 m², 8 m high
    - segment 1: 80° facet (facade misread as roof), 6 m high
    - three panels on segment 0 (one without energy), one on segment 1
    - one panel on a segment that does not exist
    """
    return {
        "name": "buildings/test",
        "center": offset(0, 0),
        "boundingBox": {"sw": offset(-12, -12), "ne": offset(12, 12)},
        "solarPotential": {
            "panelWidthMeters": 1.05,
            "panelHeightMeters": 1.75,
            "roofSegmentStats": [
                {
                    "segmentIndex": 0,
                    "center": offset(0, 0),
                    "pitchDegrees": 30.0,
                    "azimuthDegrees": 180.0,
                    "planeHeightAtCenterMeters": 8.0,
                    "boundingBox": {"sw": offset(-5, -5), "ne": offset(5, 5)},
                    "stats": {"areaMeters2": 100.0},
                },
                {
                    "segmentIndex": 1,
                    "center": offset(9, 0),
                    "pitchDegrees": 80.0,
                    "azimuthDegrees": 90.0,
                    "planeHeightAtCenterMeters": 6.0,
                    "boundingBox": {"sw": offset(8.5, -3), "ne": offset(9.5, 3)},
                    "stats": {"areaMeters2": 12.0},
                },
            ],
            "solarPanels": [
                {"center": offset(-2, 1), "orientation": "PORTRAIT", "segmentIndex": 0, "yearlyEnergyDcKwh": 400.0},
                {"center": offset(2, 1), "orientation": "LANDSCAPE", "segmentIndex": 0, "yearlyEnergyDcKwh": 450.0},
                {"center": offset(0, -2), "orientation": "PORTRAIT", "segmentIndex": 0},
                {"center": offset(9, 0), "orientation": "PORTRAIT", "segmentIndex": 1, "yearlyEnergyDcKwh": 500.0},
                {"center": offset(30, 30), "orientation": "PORTRAIT", "segmentIndex": 7, "yearlyEnergyDcKwh": 900.0},
            ],
        },
    }


@pytest.fixture
def survey_view(survey_payload):
    return map_building_survey(survey_payload)


@pytest.fixture
def survey_file(tmp_path, survey_payload) -> Path:
    path = tmp_path / "survey.json"
    path.write_text(json.dumps(survey_payload), encoding="utf-8")
    return path


# =============================================================================
# RASTER FIXTURES
# =============================================================================

RASTER_BOUNDS = (20.999, 51.999, 21.001, 52.001)  # (west, south, east, north)
RASTER_NODATA = -9999.0


def write_geotiff(path: Path, values: np.ndarray, bounds, crs="EPSG:4326", nodata=None) -> Path:
    """Write a single-band float32 GeoTIFF."""
    import rasterio
    from rasterio.transform import from_bounds

    height, width = values.shape
    with rasterio.open(
        path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=1,
        dtype="float32",
        crs=crs,
        transform=from_bounds(*bounds, width, height),
        nodata=nodata,
    ) as dst:
        dst.write(values.astype("float32"), 1)
    return path


@pytest.fixture
def flux_values() -> np.ndarray:
    """4x4 grid 0..15 row-major, north row first; NW pixel is nodata."""
    values = np.arange(16, dtype="float32").reshape(4, 4) * 100.0
    values[0, 0] = RASTER_NODATA
    return values


@pytest.fixture
def flux_tif(tmp_path, flux_values) -> Path:
    return write_geotiff(tmp_path / "annual_flux.tif", flux_values, RASTER_BOUNDS, nodata=RASTER_NODATA)


def pixel_center(col: int, row: int, bounds=RASTER_BOUNDS, width: int = 4, height: int = 4) -> GeoPoint:
    """Geographic center of a pixel of a north-up raster."""
    west, south, east, north = bounds
    return GeoPoint(
        latitude=north - (row + 0.5) * (north - south) / height,
        longitude=west + (col + 0.5) * (east - west) / width,
    )


def assert_unit(vector):
    assert math.isclose(float(np.linalg.norm(vector)), 1.0, abs_tol=1e-9)
