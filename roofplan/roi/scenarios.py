"""
Scenario Engine - Size a PV system three ways under net-billing.

Strategies:
- SMART_MATCH: cover ~90% of annual usage
- MAX_ROI: shortest payback among a fixed candidate set around SMART_MATCH
- MAX_ROOF: as many panels as the roof takes

Financial model (per year, no escalation):
- self-consumed = min(production × self-consumption ratio, usage)
- savings = self-consumed × buy + exported × sell − capex × O&M%
- payback = capex / savings, ROI = savings / capex
- LCOE = capex / (production × PV factor), degradation ignored

Rounding follows Math.round semantics (half up): panel counts and energy to
integers, savings to whole PLN, payback and ROI to 0.1, LCOE to 0.01.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from ..core.config import ScenarioTuning, settings
from ..core.models import (
    NetBillingParams,
    ProposalInput,
    ProposalResult,
    RoofAnalysis,
    ScenarioMetrics,
    ScenarioStrategy,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SavingsSplit:
    self_consumed_kwh: int
    exported_kwh: int
    annual_savings: int


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript's Math.round / toFixed for positive values."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def annual_usage_from_monthly(monthly_kwh: float) -> int:
    return max(0, int(round_half_up(monthly_kwh * 12)))


def estimate_specific_yield(
    analysis: Optional[RoofAnalysis],
    tuning: Optional[ScenarioTuning] = None,
) -> float:
    """Specific yield from the roof analysis, or the fallback heuristic."""
    tuning = tuning or settings.scenario_tuning()
    supplied = analysis.specific_yield if analysis else None
    if supplied is not None and supplied > 0:
        return supplied
    return tuning.fallback_specific_yield


def panels_to_kwp(panels: int, module_wattage_w: float) -> float:
    return panels * module_wattage_w / 1000


def kwp_to_panels(kwp: float, module_wattage_w: float) -> int:
    return max(1, int(round_half_up(kwp * 1000 / module_wattage_w)))


def production_from_kwp(kwp: float, specific_yield: float) -> int:
    return max(0, int(round_half_up(kwp * specific_yield)))


def capex_from_kwp(kwp: float, params: NetBillingParams) -> float:
    return kwp * params.capex_per_kwp


def annual_savings(
    production_kwh: float,
    usage_kwh: float,
    capex: float,
    params: NetBillingParams,
) -> SavingsSplit:
    """Bill offset plus export credit minus O&M."""
    self_consumed = min(production_kwh * params.self_consumption_ratio, usage_kwh)
    exported = max(production_kwh - self_consumed, 0.0)
    om_cost = capex * params.om_rate_pct_per_year / 100
    savings = (
        self_consumed * params.buy_price_per_kwh
        + exported * params.sell_price_per_kwh
        - om_cost
    )
    return SavingsSplit(
        self_consumed_kwh=int(round_half_up(self_consumed)),
        exported_kwh=int(round_half_up(exported)),
        annual_savings=int(round_half_up(savings)),
    )


def payback_years(capex: float, savings: float) -> Optional[float]:
    """Simple payback; None when the investment is never recovered."""
    if savings <= 0:
        return None
    return round_half_up(capex / savings, 1)


def roi_percent(capex: float, savings: float) -> float:
    if capex <= 0:
        return 0.0
    return round_half_up(savings / capex * 100, 1)


def present_value_factor(discount_rate_pct: float, lifetime_years: int) -> float:
    r = discount_rate_pct / 100
    n = lifetime_years
    if r == 0:
        return float(n)
    return (1 - (1 + r) ** -n) / r


def lcoe(capex: float, production_kwh: float, params: NetBillingParams) -> Optional[float]:
    """
    Simplified LCOE.

    Yearly degradation is not applied even though the tariff carries it.
    """
    if production_kwh <= 0:
        return None
    discounted_kwh = production_kwh * present_value_factor(
        params.discount_rate_pct, params.lifetime_years
    )
    return round_half_up(capex / discounted_kwh, 2)


def clamp_panels_to_roof(panels: float, max_panel_count: Optional[int]) -> int:
    """At least one panel, at most what the roof takes (unbounded if unknown)."""
    count = int(round_half_up(panels))
    if max_panel_count is not None:
        count = min(count, max_panel_count)
    return max(1, count)


def smart_match_panels(
    annual_usage_kwh: float,
    specific_yield: float,
    module_wattage_w: float,
    max_panel_count: Optional[int] = None,
    tuning: Optional[ScenarioTuning] = None,
) -> int:
    tuning = tuning or settings.scenario_tuning()
    required_kwp = annual_usage_kwh * tuning.smart_match_coverage / specific_yield
    panels = kwp_to_panels(required_kwp, module_wattage_w)
    return clamp_panels_to_roof(panels, max_panel_count)


def max_roof_panels(
    max_panel_count: Optional[int] = None,
    tuning: Optional[ScenarioTuning] = None,
) -> int:
    tuning = tuning or settings.scenario_tuning()
    panels = max_panel_count if max_panel_count is not None else tuning.max_roof_fallback_panels
    return clamp_panels_to_roof(panels, max_panel_count)


def max_roi_panels(
    annual_usage_kwh: float,
    specific_yield: float,
    params: NetBillingParams,
    max_panel_count: Optional[int] = None,
    tuning: Optional[ScenarioTuning] = None,
) -> int:
    """
    Shortest-payback count among a fixed candidate set.

    Candidates are the smart-match count scaled by each tuning factor plus
    the max-roof count, each clamped to the roof. The first candidate with
    the smallest finite payback wins; with none finite, the smart-match
    count is kept. Only these candidates are evaluated.
    """
    tuning = tuning or settings.scenario_tuning()
    start = smart_match_panels(
        annual_usage_kwh, specific_yield, params.module_wattage_w, max_panel_count, tuning
    )
    candidates = [start * factor for factor in tuning.roi_candidate_factors]
    candidates.append(max_roof_panels(max_panel_count, tuning))

    best, best_payback = start, math.inf
    for candidate in candidates:
        panels = clamp_panels_to_roof(candidate, max_panel_count)
        kwp = panels_to_kwp(panels, params.module_wattage_w)
        capex = capex_from_kwp(kwp, params)
        split = annual_savings(
            production_from_kwp(kwp, specific_yield), annual_usage_kwh, capex, params
        )
        payback = payback_years(capex, split.annual_savings)
        if payback is not None and payback < best_payback:
            best, best_payback = panels, payback
    return best


def build_scenario(
    strategy: ScenarioStrategy,
    panels: int,
    annual_usage_kwh: float,
    specific_yield: float,
    params: NetBillingParams,
) -> ScenarioMetrics:
    size_kwp = panels_to_kwp(panels, params.module_wattage_w)
    production = production_from_kwp(size_kwp, specific_yield)
    capex = capex_from_kwp(size_kwp, params)
    split = annual_savings(production, annual_usage_kwh, capex, params)

    return ScenarioMetrics(
        strategy=strategy,
        panels=panels,
        size_kwp=round_half_up(size_kwp, 2),
        annual_production_kwh=production,
        self_consumed_kwh=split.self_consumed_kwh,
        exported_kwh=split.exported_kwh,
        capex=round_half_up(capex, 2),
        annual_savings=split.annual_savings,
        payback_years=payback_years(capex, split.annual_savings),
        roi_pct=roi_percent(capex, split.annual_savings),
        lcoe_per_kwh=lcoe(capex, production, params),
    )


def proposal_warnings(
    analysis: Optional[RoofAnalysis],
    tuning: Optional[ScenarioTuning] = None,
) -> List[str]:
    """Advisories about degraded input data. Not errors."""
    tuning = tuning or settings.scenario_tuning()
    warnings = []

    supplied_yield = analysis.specific_yield if analysis else None
    if supplied_yield is None or supplied_yield <= 0:
        warnings.append(
            f"No yield estimate available; assumed {tuning.fallback_specific_yield:g} kWh/kWp per year."
        )

    max_panels = analysis.max_panel_count if analysis else None
    if max_panels is not None and max_panels <= tuning.small_roof_panel_threshold:
        warnings.append(
            f"Severely constrained roof: room for only {max_panels} panels, savings will be limited."
        )
    return warnings


def propose_scenarios(
    proposal: ProposalInput,
    tuning: Optional[ScenarioTuning] = None,
) -> ProposalResult:
    """
    Compute all three sizing scenarios.

    Args:
        proposal: Validated usage, tariff and optional roof analysis
        tuning: Heuristic knobs (default: global settings)

    Returns:
        ProposalResult with SMART_MATCH, MAX_ROI and MAX_ROOF in that order
    """
    tuning = tuning or settings.scenario_tuning()
    params = proposal.pricing
    analysis = proposal.roof_analysis
    max_panel_count = analysis.max_panel_count if analysis else None

    usage = annual_usage_from_monthly(proposal.monthly_usage_kwh)
    specific_yield = estimate_specific_yield(analysis, tuning)

    counts = {
        ScenarioStrategy.SMART_MATCH: smart_match_panels(
            usage, specific_yield, params.module_wattage_w, max_panel_count, tuning
        ),
        ScenarioStrategy.MAX_ROI: max_roi_panels(
            usage, specific_yield, params, max_panel_count, tuning
        ),
        ScenarioStrategy.MAX_ROOF: max_roof_panels(max_panel_count, tuning),
    }

    scenarios = tuple(
        build_scenario(strategy, panels, usage, specific_yield, params)
        for strategy, panels in counts.items()
    )
    warnings = proposal_warnings(analysis, tuning)

    for metrics in scenarios:
        logger.debug(
            f"{metrics.panels} panels, {metrics.size_kwp} kWp, payback={metrics.payback_years}",
            extra={"strategy": metrics.strategy.value},
        )
    if warnings:
        logger.info(f"Proposal computed with {len(warnings)} warning(s)")

    return ProposalResult(
        input=proposal,
        annual_usage_kwh=usage,
        scenarios=scenarios,
        warnings=tuple(warnings),
    )
