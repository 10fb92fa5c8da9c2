"""
Proposal boundary.

Validates caller input before it reaches the scenario engine and turns
every outcome into ProposalOutcome(data, error):
- invalid input      -> data=None, error="Invalid input: ..."
- engine failure     -> data=None, error="Computation failed"
- success            -> data=ProposalResult (warnings attached), error=None

Usage:
    outcome = compute_proposal(300, {"buy_price_per_kwh": 1.1})
    if outcome.ok:
        print(outcome.data.scenario("SMART_MATCH"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..core.config import ScenarioTuning
from ..core.models import PricingOverrides, ProposalInput, ProposalResult, RoofAnalysis
from ..utils.validation import ValidationError
from .scenarios import propose_scenarios
from .tariffs import with_poland_defaults

logger = logging.getLogger(__name__)

MIN_MONTHLY_USAGE_KWH = 10
MAX_MONTHLY_USAGE_KWH = 5000


class ProposalRequest(BaseModel):
    """Raw caller input, checked field by field."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    monthly_usage_kwh: float = Field(ge=MIN_MONTHLY_USAGE_KWH, le=MAX_MONTHLY_USAGE_KWH)
    pricing_overrides: Optional[PricingOverrides] = None
    roof_analysis: Optional[RoofAnalysis] = None


@dataclass(frozen=True)
class ProposalOutcome:
    data: Optional[ProposalResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


def validate_proposal_request(
    monthly_usage_kwh: Any,
    pricing_overrides: Union[PricingOverrides, Mapping[str, Any], None] = None,
    roof_analysis: Union[RoofAnalysis, Mapping[str, Any], None] = None,
) -> ProposalRequest:
    """
    Check caller input against the proposal bounds.

    Raises:
        ValidationError: With the first offending field
    """
    try:
        return ProposalRequest.model_validate({
            "monthly_usage_kwh": monthly_usage_kwh,
            "pricing_overrides": pricing_overrides,
            "roof_analysis": roof_analysis,
        })
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(
            f"{field}: {first['msg']}",
            field=field,
            suggestions=[f"monthly_usage_kwh must be between {MIN_MONTHLY_USAGE_KWH} and {MAX_MONTHLY_USAGE_KWH}"]
            if field == "monthly_usage_kwh" else [],
        ) from e


def compute_proposal(
    monthly_usage_kwh: Any,
    pricing_overrides: Union[PricingOverrides, Mapping[str, Any], None] = None,
    roof_analysis: Union[RoofAnalysis, Mapping[str, Any], None] = None,
    tuning: Optional[ScenarioTuning] = None,
) -> ProposalOutcome:
    """
    Validate input, apply tariff defaults and compute the three scenarios.

    Never raises; failures are reported on the outcome.
    """
    try:
        request = validate_proposal_request(monthly_usage_kwh, pricing_overrides, roof_analysis)
    except ValidationError as e:
        logger.info(f"Rejected proposal input: {e}")
        return ProposalOutcome(error=f"Invalid input: {e}")

    try:
        proposal = ProposalInput(
            monthly_usage_kwh=request.monthly_usage_kwh,
            pricing=with_poland_defaults(request.pricing_overrides),
            roof_analysis=request.roof_analysis,
        )
        return ProposalOutcome(data=propose_scenarios(proposal, tuning))
    except Exception as e:
        logger.error(
            f"Proposal computation failed: {e}",
            exc_info=True,
            extra={"error_type": type(e).__name__},
        )
        return ProposalOutcome(error="Computation failed")
