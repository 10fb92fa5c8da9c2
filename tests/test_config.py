"""Tests for settings and model constraints."""
import pytest
from pydantic import ValidationError as PydanticValidationError

from roofplan.core.config import ScenarioTuning, Settings, VisibilityThresholds
from roofplan.core.models import PanelDimensions, RoofAnalysis, Segment, SolarViewData

from conftest import geo


class TestSettings:
    """Test environment-driven configuration."""

    def test_defaults(self):
        config = Settings()
        assert config.scenario_tuning() == ScenarioTuning()
        assert config.visibility_thresholds() == VisibilityThresholds()
        assert config.energy_assumptions().efficiency == 0.19

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ROOFPLAN_FALLBACK_SPECIFIC_YIELD", "1000")
        monkeypatch.setenv("ROOFPLAN_HIDE_TILT_DEG", "70")
        config = Settings()
        assert config.scenario_tuning().fallback_specific_yield == 1000.0
        assert config.visibility_thresholds().hide_tilt_deg == 70.0

    def test_invalid_env_rejected(self, monkeypatch):
        monkeypatch.setenv("ROOFPLAN_RASTER_WORKERS", "0")
        with pytest.raises(PydanticValidationError):
            Settings()


class TestModels:
    """Test model constraints."""

    def test_panel_area(self):
        assert PanelDimensions(width_m=1.0, height_m=2.0).area_m2 == 2.0

    def test_tilt_bounds(self):
        with pytest.raises(PydanticValidationError):
            Segment(id=0, center=geo(0, 0), tilt_deg=91)

    def test_models_frozen(self):
        segment = Segment(id=0, center=geo(0, 0))
        with pytest.raises(PydanticValidationError):
            segment.tilt_deg = 10

    def test_roof_analysis_yield_alias(self):
        analysis = RoofAnalysis.model_validate({
            "location": {"latitude": 52.0, "longitude": 21.0},
            "yield": {"specific_yield_kwh_per_kwp": 990},
        })
        assert analysis.specific_yield == 990
        assert analysis.max_panel_count is None

    def test_roof_analysis_camel_case_keys(self):
        analysis = RoofAnalysis.model_validate({
            "location": {"latitude": 52.0, "longitude": 21.0},
            "roof": {"maxPanelCount": 12, "totalUsableAreaMeters2": 40.0, "recommendedTiltDegrees": 35},
            "yield": {"specificYieldKWhPerKWp": 1010, "confidence": "high"},
        })
        assert analysis.max_panel_count == 12
        assert analysis.roof.total_usable_area_m2 == 40.0
        assert analysis.roof.recommended_tilt_deg == 35
        assert analysis.specific_yield == 1010

    def test_roof_analysis_rejects_unknown_fields(self):
        with pytest.raises(PydanticValidationError):
            RoofAnalysis.model_validate({
                "location": {"latitude": 52.0, "longitude": 21.0},
                "roofType": "gable",
            })

    def test_duplicate_segment_ids_rejected(self):
        with pytest.raises(PydanticValidationError):
            SolarViewData(segments=(Segment(id=1, center=geo(0, 0)), Segment(id=1, center=geo(5, 0))))

    def test_segment_lookup(self, survey_view):
        assert survey_view.segment_by_id(1).tilt_deg == 80.0
        assert survey_view.segment_by_id(9) is None
