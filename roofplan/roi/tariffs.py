"""
Polish net-billing tariff defaults.

Prices in PLN, 2024 levels. Callers override individual fields; anything
not overridden falls back to these values.
"""

from typing import Optional

from ..core.models import NetBillingParams, PricingOverrides


POLAND_DEFAULTS = NetBillingParams(
    buy_price_per_kwh=0.95,       # Retail price incl. distribution
    sell_price_per_kwh=0.40,      # Net-billing export credit
    capex_per_kwp=5000.0,
    om_rate_pct_per_year=1.0,
    degradation_pct_per_year=0.5,
    discount_rate_pct=5.0,
    lifetime_years=25,
    self_consumption_ratio=0.35,
    module_wattage_w=420,
)


def with_poland_defaults(overrides: Optional[PricingOverrides] = None) -> NetBillingParams:
    """Merge caller overrides onto the Polish defaults."""
    if overrides is None:
        return POLAND_DEFAULTS
    return POLAND_DEFAULTS.model_copy(update=overrides.model_dump(exclude_none=True))
