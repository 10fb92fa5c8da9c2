"""Core models, configuration and coordinate utilities."""

from .models import (
    GeoPoint,
    NetBillingParams,
    PanelDimensions,
    PanelOrientation,
    PricingOverrides,
    ProposalInput,
    ProposalResult,
    RoofAnalysis,
    RoofConstraints,
    ScenarioMetrics,
    ScenarioStrategy,
    Segment,
    SolarPanelPlacement,
    SolarViewData,
    YieldEstimate,
)
from .config import (
    EnergyAssumptions,
    ScenarioTuning,
    Settings,
    VisibilityThresholds,
    settings,
)
from .coordinates import compute_origin, to_geo, to_local_meters

__all__ = [
    "GeoPoint",
    "NetBillingParams",
    "PanelDimensions",
    "PanelOrientation",
    "PricingOverrides",
    "ProposalInput",
    "ProposalResult",
    "RoofAnalysis",
    "RoofConstraints",
    "ScenarioMetrics",
    "ScenarioStrategy",
    "Segment",
    "SolarPanelPlacement",
    "SolarViewData",
    "YieldEstimate",
    "EnergyAssumptions",
    "ScenarioTuning",
    "Settings",
    "VisibilityThresholds",
    "settings",
    "compute_origin",
    "to_geo",
    "to_local_meters",
]
