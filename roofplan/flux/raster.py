"""
Raster sampling for geo-referenced data layers.

Loads single-band rasters (annual flux, mask, DSM) and samples the nearest
pixel at arbitrary WGS84 points. No interpolation.

Pixel lookup:
    col = floor((lon - min_x) / (max_x - min_x) * width)
    row = floor((max_y - lat) / (max_y - min_y) * height)   # row 0 = north edge
both clamped to the raster.

Usage:
    raster = load_raster("annual_flux.tif")
    values = sample(raster, [GeoPoint(latitude=52.23, longitude=21.01)])

Rasters that cannot be read raise RasterReadError; callers decide how to
degrade. sample_layers() samples several rasters in parallel and keeps their
failures apart.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
import rasterio
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError
from rasterio.errors import RasterioError

from ..core.config import settings
from ..core.models import GeoPoint

logger = logging.getLogger(__name__)


class RasterReadError(OSError):
    """Raised when a raster cannot be opened or decoded."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class GeoRaster:
    """Single-band raster with its bounding box in native coordinates."""

    values: np.ndarray  # shape (height, width)
    bounds: tuple[float, float, float, float]  # (min_x, min_y, max_x, max_y)
    crs_wkt: Optional[str] = None
    nodata: Optional[float] = None
    path: str = ""

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def is_geographic(self) -> bool:
        if not self.crs_wkt:
            return True
        return CRS.from_user_input(self.crs_wkt).is_geographic


@dataclass(frozen=True)
class LayerSample:
    """Outcome of sampling one named layer."""

    name: str
    values: Optional[List[Optional[float]]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_raster(path: Path | str) -> GeoRaster:
    """
    Read band 1 of a geo-referenced raster.

    Raises:
        RasterReadError: If the file is missing, unreadable or has an empty extent
    """
    path = str(path)
    try:
        with rasterio.open(path) as dataset:
            values = dataset.read(1)
            bounds = tuple(float(b) for b in dataset.bounds)
            crs_wkt = dataset.crs.to_wkt() if dataset.crs else None
            nodata = dataset.nodata
    except (RasterioError, OSError) as e:
        raise RasterReadError(f"Cannot read raster {path}: {e}", path=path) from e

    min_x, min_y, max_x, max_y = bounds
    if values.size == 0 or max_x <= min_x or max_y <= min_y:
        raise RasterReadError(f"Raster {path} has an empty extent", path=path)

    logger.debug(
        f"Loaded raster {values.shape[1]}x{values.shape[0]} bounds={bounds}",
        extra={"raster": path},
    )
    return GeoRaster(values=values, bounds=bounds, crs_wkt=crs_wkt, nodata=nodata, path=path)


def pixel_index(raster: GeoRaster, x: float, y: float) -> tuple[int, int]:
    """(col, row) of the nearest pixel for native coordinates, clamped."""
    min_x, min_y, max_x, max_y = raster.bounds
    col = math.floor((x - min_x) / (max_x - min_x) * raster.width)
    row = math.floor((max_y - y) / (max_y - min_y) * raster.height)
    col = max(0, min(raster.width - 1, col))
    row = max(0, min(raster.height - 1, row))
    return col, row


def sample(raster: GeoRaster, points: Sequence[GeoPoint]) -> List[Optional[float]]:
    """
    Nearest-pixel values at the given points, in input order.

    Missing samples (nodata, non-finite values, non-finite coordinates) are
    returned as None instead of raising. A CRS that points cannot be
    reprojected into raises RasterReadError.
    """
    if not points:
        return []

    xs = [p.longitude for p in points]
    ys = [p.latitude for p in points]
    try:
        if not raster.is_geographic:
            transformer = Transformer.from_crs("EPSG:4326", raster.crs_wkt, always_xy=True)
            xs, ys = transformer.transform(xs, ys)
    except (CRSError, ProjError) as e:
        raise RasterReadError(
            f"Cannot reproject points to the CRS of {raster.path or 'raster'}: {e}",
            path=raster.path,
        ) from e

    results: List[Optional[float]] = []
    for x, y in zip(xs, ys):
        if not (math.isfinite(x) and math.isfinite(y)):
            results.append(None)
            continue
        col, row = pixel_index(raster, x, y)
        results.append(_coerce(raster.values[row, col], raster.nodata))
    return results


def sample_raster_at_points(path: Path | str, points: Sequence[GeoPoint]) -> List[Optional[float]]:
    """Load a raster and sample it. Raises RasterReadError on load failure."""
    return sample(load_raster(path), points)


def sample_layers(
    layer_paths: Mapping[str, Path | str | None],
    points: Sequence[GeoPoint],
    max_workers: Optional[int] = None,
) -> Dict[str, LayerSample]:
    """
    Sample several independent rasters in parallel.

    A layer that fails to load or sample is reported on its own
    LayerSample; the other layers are unaffected. Layers with no path are
    skipped.
    """
    jobs = {name: path for name, path in layer_paths.items() if path}
    if not jobs:
        return {}

    workers = max_workers or settings.raster_workers
    results: Dict[str, LayerSample] = {}

    with ThreadPoolExecutor(max_workers=min(workers, len(jobs))) as executor:
        futures = {
            name: executor.submit(sample_raster_at_points, path, points)
            for name, path in jobs.items()
        }
        for name, future in futures.items():
            try:
                results[name] = LayerSample(name=name, values=future.result())
            except RasterReadError as e:
                logger.warning(
                    f"Layer '{name}' unavailable: {e}",
                    extra={"raster": e.path, "error_type": type(e).__name__},
                )
                results[name] = LayerSample(name=name, error=str(e))
            except Exception as e:
                logger.error(
                    f"Layer '{name}' failed: {e}",
                    exc_info=True,
                    extra={"raster": str(jobs[name]), "error_type": type(e).__name__},
                )
                results[name] = LayerSample(name=name, error=f"{type(e).__name__}: {e}")

    return results


def _coerce(raw, nodata: Optional[float]) -> Optional[float]:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    if nodata is not None and math.isfinite(nodata) and value == nodata:
        return None
    return value
