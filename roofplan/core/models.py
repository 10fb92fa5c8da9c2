"""
Pydantic models for roof survey data and solar proposals.

Covers the canonical view model consumed by the geometry stack (segments,
panel placements, panel dimensions) and the proposal schema used by the
scenario engine (roof analysis, net-billing tariff, scenario metrics).

All models are frozen: they are value objects rebuilt for every request or
rendering pass.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class _Strict(_Frozen):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid", allow_inf_nan=False)


# =============================================================================
# ENUMS
# =============================================================================


class PanelOrientation(str, Enum):
    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"


class ScenarioStrategy(str, Enum):
    SMART_MATCH = "SMART_MATCH"
    MAX_ROI = "MAX_ROI"
    MAX_ROOF = "MAX_ROOF"


# =============================================================================
# VIEW MODEL (roof geometry + panel layout)
# =============================================================================


class GeoPoint(_Frozen):
    """WGS84 point in degrees. No altitude."""

    latitude: float
    longitude: float


class Segment(_Frozen):
    """A planar roof facet."""

    id: int
    center: GeoPoint
    plane_height_at_center_m: float = 0.0
    tilt_deg: float = Field(default=0.0, ge=0.0, le=90.0)
    azimuth_deg: float = Field(
        default=180.0, description="Downslope direction, 0 = north, clockwise"
    )
    boundary: tuple[GeoPoint, ...] | None = None
    area_m2: float | None = None
    avg_flux: float | None = Field(
        default=None, description="Mean sampled flux, same unit as the flux raster"
    )


class PanelDimensions(_Frozen):
    """Physical size of one panel. Width runs across the slope in portrait."""

    width_m: float = Field(default=1.1, gt=0)
    height_m: float = Field(default=1.8, gt=0)
    thickness_m: float | None = Field(default=0.035, ge=0)

    @property
    def area_m2(self) -> float:
        return self.width_m * self.height_m


class SolarPanelPlacement(_Frozen):
    id: int | str
    segment_index: int
    center: GeoPoint
    orientation: PanelOrientation = PanelOrientation.PORTRAIT
    yearly_energy_dc_kwh: float | None = None


class SolarViewData(_Frozen):
    """Aggregate root for one rendering pass."""

    segments: tuple[Segment, ...] = ()
    panels: tuple[SolarPanelPlacement, ...] = ()
    panel_dimensions: PanelDimensions = Field(default_factory=PanelDimensions)
    origin: GeoPoint | None = None

    @model_validator(mode="after")
    def _unique_segment_ids(self) -> SolarViewData:
        seen = set()
        for segment in self.segments:
            if segment.id in seen:
                raise ValueError(f"Duplicate segment id {segment.id}")
            seen.add(segment.id)
        return self

    def segment_by_id(self, segment_id: int) -> Segment | None:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None


# =============================================================================
# PROPOSAL SCHEMA
# =============================================================================


class RoofConstraints(_Strict):
    """Roof capacity. Accepts snake_case or the camelCase keys of the analysis JSON."""

    total_usable_area_m2: float | None = Field(default=None, alias="totalUsableAreaMeters2")
    max_panel_count: int | None = Field(default=None, ge=0, alias="maxPanelCount")
    recommended_tilt_deg: float | None = Field(default=None, alias="recommendedTiltDegrees")
    recommended_azimuth_deg: float | None = Field(default=None, alias="recommendedAzimuthDegrees")
    shading_score: float | None = Field(
        default=None, ge=0.0, le=1.0, alias="shadingScore",
        description="0..1, higher means more shading",
    )


class YieldEstimate(_Strict):
    specific_yield_kwh_per_kwp: float | None = Field(default=None, alias="specificYieldKWhPerKWp")
    confidence: Literal["low", "medium", "high"] | None = None


class RoofAnalysis(_Strict):
    """Externally supplied roof capacity and yield estimate. Every part is optional."""

    location: GeoPoint
    roof: RoofConstraints | None = None
    yield_estimate: YieldEstimate | None = Field(default=None, alias="yield")

    @property
    def max_panel_count(self) -> int | None:
        return self.roof.max_panel_count if self.roof else None

    @property
    def specific_yield(self) -> float | None:
        return self.yield_estimate.specific_yield_kwh_per_kwp if self.yield_estimate else None


class NetBillingParams(_Strict):
    """Tariff and financial assumptions. Prices in PLN."""

    buy_price_per_kwh: float = Field(gt=0)
    sell_price_per_kwh: float = Field(ge=0)
    capex_per_kwp: float = Field(gt=0)
    om_rate_pct_per_year: float = Field(ge=0, le=100)
    degradation_pct_per_year: float = Field(ge=0, le=5)
    discount_rate_pct: float = Field(ge=0, le=20)
    lifetime_years: int = Field(ge=10, le=35)
    self_consumption_ratio: float = Field(ge=0, le=1)
    module_wattage_w: int = Field(ge=300, le=600)


class PricingOverrides(_Strict):
    """Partial NetBillingParams supplied by a caller."""

    buy_price_per_kwh: float | None = Field(default=None, gt=0)
    sell_price_per_kwh: float | None = Field(default=None, ge=0)
    capex_per_kwp: float | None = Field(default=None, gt=0)
    om_rate_pct_per_year: float | None = Field(default=None, ge=0, le=100)
    degradation_pct_per_year: float | None = Field(default=None, ge=0, le=5)
    discount_rate_pct: float | None = Field(default=None, ge=0, le=20)
    lifetime_years: int | None = Field(default=None, ge=10, le=35)
    self_consumption_ratio: float | None = Field(default=None, ge=0, le=1)
    module_wattage_w: int | None = Field(default=None, ge=300, le=600)


class ProposalInput(_Frozen):
    monthly_usage_kwh: float = Field(ge=10, le=5000)
    pricing: NetBillingParams
    roof_analysis: RoofAnalysis | None = None


class ScenarioMetrics(_Frozen):
    strategy: ScenarioStrategy
    panels: int
    size_kwp: float
    annual_production_kwh: int
    self_consumed_kwh: int
    exported_kwh: int
    capex: float
    annual_savings: int
    payback_years: float | None
    roi_pct: float
    lcoe_per_kwh: float | None


class ProposalResult(_Frozen):
    input: ProposalInput
    annual_usage_kwh: int
    scenarios: tuple[ScenarioMetrics, ScenarioMetrics, ScenarioMetrics]
    warnings: tuple[str, ...] = ()

    def scenario(self, strategy: ScenarioStrategy | str) -> ScenarioMetrics:
        strategy = ScenarioStrategy(strategy)
        for metrics in self.scenarios:
            if metrics.strategy is strategy:
                return metrics
        raise KeyError(strategy.value)
