"""Tests for segment footprint resolution and the visibility filter."""
import math

import pytest

import roofplan.geometry.footprint as footprint_module
from roofplan.core.config import Settings, VisibilityThresholds
from roofplan.core.models import PanelDimensions, Segment
from roofplan.geometry.footprint import (
    SegmentFootprint,
    is_negligible,
    project_to_plane,
    resolve_footprint,
)
from roofplan.geometry.plane_basis import build_plane_basis

from conftest import geo, square_boundary


DIMS = PanelDimensions(width_m=1.1, height_m=1.8)


class TestBoundaryRectangle:
    """Test rectangle fitting from projected boundary points."""

    def test_flat_square_with_margins(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(flat_square_segment, basis, origin, panel_dims=DIMS)

        # 10 m + 2 x 0.33 across, 10 m + 2 x 0.54 along the slope
        assert footprint.width_u == pytest.approx(10.66, abs=1e-6)
        assert footprint.height_v == pytest.approx(11.08, abs=1e-6)
        assert footprint.center_uv == pytest.approx((0.0, 0.0), abs=1e-6)

    def test_no_margins_without_panel_dims(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(flat_square_segment, basis, origin)
        assert footprint.width_u == pytest.approx(10.0, abs=1e-6)
        assert footprint.height_v == pytest.approx(10.0, abs=1e-6)

    def test_small_panels_use_minimum_margin(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        tiny = PanelDimensions(width_m=0.3, height_m=0.4)
        footprint = resolve_footprint(flat_square_segment, basis, origin, panel_dims=tiny)
        assert footprint.width_u == pytest.approx(10.4, abs=1e-6)
        assert footprint.height_v == pytest.approx(10.4, abs=1e-6)

    def test_tilted_roof_stretches_along_slope(self, origin):
        segment = Segment(
            id=0, center=geo(0, 0), tilt_deg=30, azimuth_deg=180, boundary=square_boundary(5.0)
        )
        footprint = resolve_footprint(segment, build_plane_basis(30, 180), origin)
        assert footprint.width_u == pytest.approx(10.0, abs=1e-6)
        assert footprint.height_v == pytest.approx(10.0 / math.cos(math.radians(30)), abs=1e-6)

    def test_panels_outside_boundary_extend_rectangle(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(
            flat_square_segment, basis, origin, panel_centers=[geo(8.0, 0.0)]
        )
        assert footprint.width_u == pytest.approx(13.0, abs=1e-6)
        assert footprint.height_v == pytest.approx(10.0, abs=1e-6)

    def test_degenerate_boundary_has_minimum_side(self, origin):
        segment = Segment(
            id=0,
            center=geo(0, 0),
            boundary=(geo(-3, 0), geo(0, 0), geo(3, 0)),
        )
        footprint = resolve_footprint(segment, build_plane_basis(0, 180), origin)
        assert footprint.height_v == pytest.approx(0.5)


class TestAreaHint:
    """Test scaling towards an authoritative area."""

    def test_scales_towards_area(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(flat_square_segment, basis, origin, area_hint=144.0)
        assert footprint.width_u == pytest.approx(12.0, abs=1e-6)
        assert footprint.height_v == pytest.approx(12.0, abs=1e-6)

    def test_scale_clamped_high(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(flat_square_segment, basis, origin, area_hint=10_000.0)
        assert footprint.width_u == pytest.approx(20.0, abs=1e-6)

    def test_scale_clamped_low(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(flat_square_segment, basis, origin, area_hint=1.0)
        assert footprint.width_u == pytest.approx(5.0, abs=1e-6)


class TestPolygon:
    """Test the seam-expanded boundary polygon."""

    def test_polygon_slightly_larger_than_boundary(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        footprint = resolve_footprint(flat_square_segment, basis, origin)
        polygon = footprint.polygon()

        assert len(footprint.polygon_uv) == 4
        assert polygon.area > 100.0
        assert polygon.area < 101.0

    def test_boundary_points_project_relative_to_center(self, flat_square_segment, origin):
        basis = build_plane_basis(0, 180)
        u, v = project_to_plane(geo(5.0, -5.0), flat_square_segment.center, basis, origin)
        assert abs(u) == pytest.approx(5.0, abs=1e-6)
        assert v == pytest.approx(5.0, abs=1e-6)


class TestFallbackFootprint:
    """Segments without a usable boundary get a centered square."""

    def test_square_from_area(self, origin):
        segment = Segment(id=0, center=geo(0, 0), area_m2=25.0)
        footprint = resolve_footprint(segment, build_plane_basis(0, 180), origin)
        assert footprint.width_u == pytest.approx(5.0)
        assert footprint.height_v == pytest.approx(5.0)
        assert footprint.polygon() is None

    def test_default_square(self, origin):
        segment = Segment(id=0, center=geo(0, 0))
        footprint = resolve_footprint(segment, build_plane_basis(0, 180), origin)
        assert footprint.width_u == pytest.approx(4.0)

    def test_two_point_boundary_falls_back(self, origin):
        segment = Segment(id=0, center=geo(0, 0), boundary=(geo(-1, -1), geo(1, 1)), area_m2=9.0)
        footprint = resolve_footprint(segment, build_plane_basis(0, 180), origin)
        assert footprint.width_u == pytest.approx(3.0)


class TestVisibilityFilter:
    """Test which segments are hidden from rendering."""

    def footprint(self, width=10.0, height=10.0):
        return SegmentFootprint(center_uv=(0.0, 0.0), width_u=width, height_v=height)

    def test_regular_segment_visible(self):
        segment = Segment(id=0, center=geo(0, 0), tilt_deg=30, area_m2=50.0)
        assert not is_negligible(segment, self.footprint())

    def test_steep_segment_hidden(self):
        segment = Segment(id=0, center=geo(0, 0), tilt_deg=70, area_m2=50.0)
        assert is_negligible(segment, self.footprint())

    def test_steep_segment_kept_when_not_hiding(self):
        segment = Segment(id=0, center=geo(0, 0), tilt_deg=70, area_m2=50.0)
        assert not is_negligible(segment, self.footprint(), hide_steep=False)

    def test_tiny_segment_hidden(self):
        segment = Segment(id=0, center=geo(0, 0), area_m2=3.0)
        assert is_negligible(segment, self.footprint())

    def test_footprint_area_used_when_area_missing(self):
        segment = Segment(id=0, center=geo(0, 0))
        assert is_negligible(segment, self.footprint(1.5, 1.5))
        assert not is_negligible(segment, self.footprint(3.0, 3.0))

    def test_sliver_hidden(self):
        segment = Segment(id=0, center=geo(0, 0), area_m2=6.0)
        assert is_negligible(segment, self.footprint(12.0, 0.5))

    def test_long_but_wide_enough_is_visible(self):
        segment = Segment(id=0, center=geo(0, 0), area_m2=8.0)
        assert not is_negligible(segment, self.footprint(12.0, 0.7))

    def test_custom_thresholds(self):
        segment = Segment(id=0, center=geo(0, 0), tilt_deg=50, area_m2=50.0)
        thresholds = VisibilityThresholds(hide_tilt_deg=45.0)
        assert is_negligible(segment, self.footprint(), thresholds)

    def test_default_thresholds_follow_settings(self, monkeypatch):
        monkeypatch.setattr(footprint_module, "settings", Settings(hide_tilt_deg=75.0))
        segment = Segment(id=0, center=geo(0, 0), tilt_deg=70, area_m2=50.0)
        assert not is_negligible(segment, self.footprint())


class TestSegmentCenter:
    """The segment's own center sits at the plane origin."""

    @pytest.mark.parametrize("tilt,azimuth", [(0, 180), (30, 90), (45, 300)])
    def test_center_projects_to_zero(self, flat_square_segment, origin, tilt, azimuth):
        basis = build_plane_basis(tilt, azimuth)
        u, v = project_to_plane(flat_square_segment.center, flat_square_segment.center, basis, origin)
        assert (u, v) == pytest.approx((0.0, 0.0))
