"""
Configuration management for roofplan.

Heuristic constants used by the geometry and scenario engines are tuning
knobs, not algorithm details. They live here with their defaults and can be
overridden through ROOFPLAN_* environment variables or a .env file.
"""

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ScenarioTuning:
    """Knobs of the proposal scenario engine."""

    fallback_specific_yield: float = 950.0  # kWh/kWp/yr, Poland
    smart_match_coverage: float = 0.9
    roi_candidate_factors: tuple[float, ...] = (0.8, 1.0, 1.2)
    max_roof_fallback_panels: int = 10
    small_roof_panel_threshold: int = 4


@dataclass(frozen=True)
class VisibilityThresholds:
    """Filters that hide segments which are most likely survey artifacts."""

    hide_tilt_deg: float = 65.0
    min_visible_area_m2: float = 4.0
    sliver_aspect_ratio: float = 10.0
    sliver_min_side_m: float = 0.6


@dataclass(frozen=True)
class EnergyAssumptions:
    efficiency: float = 0.19
    performance_ratio: float = 0.85


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOFPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Scenario engine
    fallback_specific_yield: float = Field(default=950.0, gt=0, description="kWh/kWp/yr when no yield estimate")
    smart_match_coverage: float = Field(default=0.9, gt=0, description="Share of annual usage to cover")
    roi_candidate_factors: tuple[float, ...] = Field(
        default=(0.8, 1.0, 1.2), description="Multipliers of the smart-match count tried by MAX_ROI"
    )
    max_roof_fallback_panels: int = Field(default=10, ge=1)
    small_roof_panel_threshold: int = Field(default=4, ge=0)

    # Segment visibility filter
    hide_tilt_deg: float = Field(default=65.0)
    min_visible_area_m2: float = Field(default=4.0)
    sliver_aspect_ratio: float = Field(default=10.0)
    sliver_min_side_m: float = Field(default=0.6)

    # Panel defaults when the survey omits them
    default_panel_width_m: float = Field(default=1.1, gt=0)
    default_panel_height_m: float = Field(default=1.8, gt=0)
    default_panel_thickness_m: float = Field(default=0.035, ge=0)

    # Irradiance-to-energy
    module_efficiency: float = Field(default=0.19, gt=0, le=1)
    performance_ratio: float = Field(default=0.85, gt=0, le=1)

    # Raster sampling
    raster_workers: int = Field(default=3, ge=1, description="Threads used to sample data layers")

    def scenario_tuning(self) -> ScenarioTuning:
        return ScenarioTuning(
            fallback_specific_yield=self.fallback_specific_yield,
            smart_match_coverage=self.smart_match_coverage,
            roi_candidate_factors=tuple(self.roi_candidate_factors),
            max_roof_fallback_panels=self.max_roof_fallback_panels,
            small_roof_panel_threshold=self.small_roof_panel_threshold,
        )

    def visibility_thresholds(self) -> VisibilityThresholds:
        return VisibilityThresholds(
            hide_tilt_deg=self.hide_tilt_deg,
            min_visible_area_m2=self.min_visible_area_m2,
            sliver_aspect_ratio=self.sliver_aspect_ratio,
            sliver_min_side_m=self.sliver_min_side_m,
        )

    def energy_assumptions(self) -> EnergyAssumptions:
        return EnergyAssumptions(
            efficiency=self.module_efficiency,
            performance_ratio=self.performance_ratio,
        )


# Global settings instance
settings = Settings()
