"""
Risk/Route Resolver.

Maps a density score plus psychological-load signals into a routing
zone and a final action for the interactive front end.

Zone bands (density h, clamped):

    | h             | Zone        |
    |---------------|-------------|
    | h < 0.2       | CONTROL     |
    | 0.2 <= h < 0.5| MONITORED   |
    | 0.5 <= h < 0.8| RESTRICTED  |
    | h >= 0.8      | CONTAINMENT |

Route resolution, first match wins:
1. soul_modeling_forbidden AND non_interference_required -> OBSERVE_ONLY
2. risk band HIGH                                         -> TERMINATE_SAFE
3. zone mapping (CONTROL -> FULL_INTERACTION, ...)

Author: Spectral Vision Team
"""

from __future__ import annotations

import logging

from typing import Final

from ..analysis.numeric import clamp01
from ..types import (
    GovernanceAudit,
    RiskBand,
    RiskIndex,
    RouteAction,
    RouteDecision,
    RouteState,
    XRZone,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Upper (exclusive) density bound of each zone, in ascending order
ZONE_UPPER_BOUNDS: Final[tuple[tuple[float, XRZone], ...]] = (
    (0.2, XRZone.CONTROL),
    (0.5, XRZone.MONITORED),
    (0.8, XRZone.RESTRICTED),
)

RISK_MODERATE_MIN: Final[float] = 0.4
RISK_HIGH_MIN: Final[float] = 0.7

ZONE_ACTIONS: Final[dict[XRZone, RouteAction]] = {
    XRZone.CONTROL: RouteAction.FULL_INTERACTION,
    XRZone.MONITORED: RouteAction.GUARDED_INTERACTION,
    XRZone.RESTRICTED: RouteAction.MITIGATION_ONLY,
    XRZone.CONTAINMENT: RouteAction.OBSERVE_ONLY,
}

REASON_GOVERNANCE_OBSERVE_ONLY: Final[str] = "governance_observe_only"
REASON_RISK_HIGH: Final[str] = "risk_high_terminate"
REASON_ZONE_MAPPING: Final[str] = "zone_mapping"


# =============================================================================
# RESOLVER STEPS
# =============================================================================

def compute_xr_zone(density: float | None) -> XRZone:
    """
    Classify a density score into a routing zone.

    Args:
        density: Normalized density score; None is treated as 0

    Returns:
        XRZone for the clamped density
    """
    h = clamp01(density)
    for upper, zone in ZONE_UPPER_BOUNDS:
        if h < upper:
            return zone
    return XRZone.CONTAINMENT


def classify_risk(x: float) -> RiskBand:
    """Band label for a composite risk value."""
    if x < RISK_MODERATE_MIN:
        return RiskBand.NORMAL
    if x < RISK_HIGH_MIN:
        return RiskBand.MODERATE
    return RiskBand.HIGH


def compute_risk_index(
    density: float | None,
    fear_level: float | None,
    psych_load: float | None,
) -> RiskIndex:
    """
    Composite risk index from density, fear and psychological load.

    x is the equal-weight average of the three clamped channels.

    Returns:
        RiskIndex with x in [0, 1] and its band
    """
    h = clamp01(density)
    f = clamp01(fear_level)
    p = clamp01(psych_load)

    x = clamp01((h + f + p) / 3.0)
    return RiskIndex(x=x, band=classify_risk(x))


def resolve_route_action(
    zone: XRZone,
    governance: GovernanceAudit,
    risk: RiskIndex,
) -> tuple[RouteAction, str]:
    """
    Resolve the route action along with the rule that decided it.

    Args:
        zone: Zone derived from density
        governance: Governance latches for the window
        risk: Composite risk index

    Returns:
        Tuple of (action, reason code)
    """
    # Hard governance override, independent of zone and risk
    if governance.forces_observe_only:
        return RouteAction.OBSERVE_ONLY, REASON_GOVERNANCE_OBSERVE_ONLY

    if risk.band == RiskBand.HIGH:
        logger.warning(
            f"Risk index {risk.x:.3f} is HIGH in zone {zone.value}; terminating safely"
        )
        return RouteAction.TERMINATE_SAFE, REASON_RISK_HIGH

    return ZONE_ACTIONS[zone], REASON_ZONE_MAPPING


# =============================================================================
# PIPELINE
# =============================================================================

def decide_route(
    density: float | None,
    fear_level: float | None,
    psych_load: float | None,
    governance: GovernanceAudit,
    audit_token: str | None = None,
) -> RouteDecision:
    """
    Run zone classification, risk indexing and route resolution.

    The audit token is attached verbatim for traceability. It is never
    read here, and callers must not use it to steer when
    non-interference is required.

    Args:
        density: Normalized density score, None if absent
        fear_level: Fear channel
        psych_load: Psychological load channel
        governance: Governance latches for the window
        audit_token: Optional opaque audit token

    Returns:
        RouteDecision for the window
    """
    zone = compute_xr_zone(density)
    risk = compute_risk_index(density, fear_level, psych_load)
    action, reason = resolve_route_action(zone, governance, risk)

    logger.info(
        f"Route: zone={zone.value}, risk={risk.x:.3f} ({risk.band.value}), "
        f"action={action.value}"
    )

    return RouteDecision(
        zone=zone,
        risk=risk,
        action=action,
        reasons=(reason,),
        audit_token=audit_token,
    )


def decide_route_for_state(
    state: RouteState,
    audit_token: str | None = None,
) -> RouteDecision:
    """Route decision for a region/session window snapshot."""
    return decide_route(
        density=state.density,
        fear_level=state.fear_level,
        psych_load=state.psych_load,
        governance=state.governance,
        audit_token=audit_token,
    )
