"""
Excavation Depth Resolver.

Governance-aware, one-shot classification of how deep downstream
processing may go. Rules are evaluated top-down, first match wins:

    | Condition                                          | Depth     |
    |----------------------------------------------------|-----------|
    | quantification inactive OR soul-modeling allowed   | SNIFF     |
    | mode == ACTIVE_FREE (roaming, non-interference)    | SNIFF     |
    | safety_min <  safety_slow                          | SNIFF     |
    | safety_min <  safety_shigh                         | DIG_LIGHT |
    | otherwise                                          | DIG_FULL  |

The first row is a hard stop: the caller should abort and flush
upstream. The resolver itself only reports the depth.
"""

from __future__ import annotations

import logging

from typing import Final

from ..types import (
    BandSafetyProfile,
    ExcavationDepth,
    GovernanceMode,
    GovernanceSnapshot,
    VisionParameters,
)

logger = logging.getLogger(__name__)


REASON_GOVERNANCE_LATCH_OPEN: Final[str] = "governance_latch_open"
REASON_ROAMING_OBSERVE_ONLY: Final[str] = "roaming_observe_only"
REASON_SAFETY_BELOW_LOW: Final[str] = "safety_below_low"
REASON_SAFETY_BELOW_HIGH: Final[str] = "safety_below_high"
REASON_SAFETY_CLEAR: Final[str] = "safety_clear"

# Modes in which band safety decides the depth
SAFETY_DRIVEN_MODES: Final[frozenset[GovernanceMode]] = frozenset({
    GovernanceMode.DORMANT,
    GovernanceMode.ACTIVE_GOVERNED,
    GovernanceMode.TECHNICAL_ONLY,
})


def resolve_excavation(
    profile: BandSafetyProfile,
    governance: GovernanceSnapshot,
    params: VisionParameters,
) -> tuple[ExcavationDepth, str]:
    """
    Resolve the excavation depth along with the rule that decided it.

    Args:
        profile: Band safety profile of the object
        governance: Governance snapshot for this call
        params: Parameters holding safety_slow and safety_shigh

    Returns:
        Tuple of (depth, reason code)
    """
    # === Governance latches ===
    if not governance.latches_closed:
        logger.warning(
            f"Governance latches open (quantification_active="
            f"{governance.quantification_active}, soul_modeling_forbidden="
            f"{governance.soul_modeling_forbidden}); forcing sniff"
        )
        return ExcavationDepth.SNIFF, REASON_GOVERNANCE_LATCH_OPEN

    # === Roaming with mandatory non-interference ===
    if governance.mode not in SAFETY_DRIVEN_MODES:
        return ExcavationDepth.SNIFF, REASON_ROAMING_OBSERVE_ONLY

    # === Safety-driven depth ===
    safety_min = profile.safety_min

    if safety_min < params.safety_slow:
        return ExcavationDepth.SNIFF, REASON_SAFETY_BELOW_LOW

    if safety_min < params.safety_shigh:
        return ExcavationDepth.DIG_LIGHT, REASON_SAFETY_BELOW_HIGH

    return ExcavationDepth.DIG_FULL, REASON_SAFETY_CLEAR


def compute_excavation_depth(
    profile: BandSafetyProfile,
    governance: GovernanceSnapshot,
    params: VisionParameters,
) -> ExcavationDepth:
    """Excavation depth for one object (see resolve_excavation)."""
    depth, _reason = resolve_excavation(profile, governance, params)
    return depth
