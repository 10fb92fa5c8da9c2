"""
ROI Module - Sizing scenarios and financial metrics for PV proposals.

Features:
- Polish net-billing tariff defaults
- SMART_MATCH / MAX_ROI / MAX_ROOF sizing
- Payback, ROI and simplified LCOE
- Validated proposal boundary
"""

from .tariffs import POLAND_DEFAULTS, with_poland_defaults
from .scenarios import (
    build_scenario,
    lcoe,
    max_roi_panels,
    max_roof_panels,
    payback_years,
    propose_scenarios,
    roi_percent,
    smart_match_panels,
)
from .proposals import ProposalOutcome, ProposalRequest, compute_proposal, validate_proposal_request

__all__ = [
    'POLAND_DEFAULTS',
    'with_poland_defaults',
    'build_scenario',
    'lcoe',
    'max_roi_panels',
    'max_roof_panels',
    'payback_years',
    'propose_scenarios',
    'roi_percent',
    'smart_match_panels',
    'ProposalOutcome',
    'ProposalRequest',
    'compute_proposal',
    'validate_proposal_request',
]
