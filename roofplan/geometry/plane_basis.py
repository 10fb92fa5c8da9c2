"""
Plane basis for a sloped roof segment.

Vectors use (east, up, north) component order, matching the local frame of
roofplan.core.coordinates with the height axis inserted in the middle.

Conventions:
- azimuth 0/360 = downslope faces north, measured clockwise
- tilt 0 = flat roof (normal points straight up)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


UP = np.array([0.0, 1.0, 0.0])

# Floor for cos(tilt) when dividing by it near vertical planes
MIN_COS_TILT = 1e-6


@dataclass(frozen=True)
class PlaneBasis:
    """Orthonormal frame of a roof plane."""

    across: np.ndarray      # c: horizontal, perpendicular to downslope
    downslope: np.ndarray   # s: horizontal projection of the downslope direction
    down: np.ndarray        # d: in-plane downslope axis
    normal: np.ndarray      # n: plane normal
    tilt_rad: float

    @property
    def cos_tilt(self) -> float:
        return max(math.cos(self.tilt_rad), MIN_COS_TILT)

    @property
    def tan_tilt(self) -> float:
        return math.sin(self.tilt_rad) / self.cos_tilt

    def project(self, dx: float, dz: float) -> tuple[float, float, float]:
        """
        Project a horizontal displacement onto the plane.

        Args:
            dx: Eastward displacement (m)
            dz: Northward displacement (m)

        Returns:
            (u, v, v_h): across-slope distance, in-plane downslope distance,
            and horizontal downslope distance
        """
        r = np.array([dx, 0.0, dz])
        u = float(r @ self.across)
        v_h = float(r @ self.downslope)
        return u, v_h / self.cos_tilt, v_h

    def rotation_matrix(self) -> np.ndarray:
        """3x3 matrix with columns (across, down, normal)."""
        return np.column_stack([self.across, self.down, self.normal])


def build_plane_basis(tilt_deg: float, azimuth_deg: float) -> PlaneBasis:
    """
    Build the plane basis for a segment.

    Args:
        tilt_deg: Degrees from horizontal, 0..90
        azimuth_deg: Downslope direction in degrees, clockwise from north

    Returns:
        PlaneBasis with unit vectors
    """
    t = math.radians(tilt_deg)
    a = math.radians(azimuth_deg)

    slope_h = _unit(np.array([math.sin(a), 0.0, math.cos(a)]))
    normal = _unit(math.sin(t) * slope_h + math.cos(t) * UP)
    down = _unit(math.cos(t) * slope_h - math.sin(t) * UP)
    across = _unit(np.cross(down, normal))

    return PlaneBasis(
        across=across,
        downslope=slope_h,
        down=down,
        normal=normal,
        tilt_rad=t,
    )


def _unit(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm
