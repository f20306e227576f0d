"""
Vision Engine - The brain of Spectral Vision.

This module turns raw per-band power statistics, stability/confidence
scores and a governance snapshot into a single immutable decision:
band safety profile, hygiene, promotion verdict and excavation depth.

Pipeline:
    1. Band Safety Evaluator
    2. Hygiene Aggregator and Promotion Gate (independent of each other)
    3. Excavation Depth Resolver

Design Principles:
1. Pure: no I/O, no shared mutable state, safe on any thread
2. Never raises on malformed numbers - they are clamped
3. Policy overrides are ordinary return values, not exceptions
4. Every decision carries machine-readable reasons

Author: Spectral Vision Team
"""

from __future__ import annotations

import logging

from collections.abc import Iterable
from typing import Any

from ..analysis import (
    compute_band_safety,
    compute_promotion_score,
    compute_spectral_hygiene,
    passes_promotion_gate,
)
from ..types import (
    BandSample,
    GovernanceSnapshot,
    HazardClass,
    VisionDecision,
    VisionParameters,
)
from .excavation import resolve_excavation

logger = logging.getLogger(__name__)


class VisionEngine:
    """
    Evaluates spectral objects and produces vision decisions.

    The engine holds only its (immutable) parameters, so one instance
    can serve concurrent callers.

    Usage:
        >>> engine = VisionEngine(VisionParameters())
        >>> decision = engine.evaluate(
        ...     bands=[(0, 0.1, 0.05)],
        ...     stability_score=0.9,
        ...     confidence_score=0.9,
        ...     artifact_fraction=0.0,
        ...     governance=governance,
        ... )
        >>> print(decision.excavation_depth)
        dig_full
    """

    def __init__(self, params: VisionParameters | None = None) -> None:
        """
        Initialize the vision engine.

        Args:
            params: Thresholds and weights (defaults if not provided)
        """
        self._params = params or VisionParameters()
        logger.debug(
            f"VisionEngine initialized with thresholds: "
            f"safety_slow={self._params.safety_slow}, "
            f"safety_shigh={self._params.safety_shigh}, "
            f"promotion_threshold={self._params.promotion_threshold}"
        )

    @property
    def params(self) -> VisionParameters:
        """Read-only access to parameters."""
        return self._params

    def evaluate(
        self,
        bands: Iterable[BandSample | tuple[int, float, float] | dict[str, Any]],
        stability_score: float | None,
        confidence_score: float | None,
        artifact_fraction: float | None,
        governance: GovernanceSnapshot,
        object_id: str | None = None,
    ) -> VisionDecision:
        """
        Evaluate one spectral object.

        Args:
            bands: Raw band samples
            stability_score: Raw stability score
            confidence_score: Raw confidence score
            artifact_fraction: Raw artifact epoch fraction
            governance: Governance snapshot for this call
            object_id: Optional identifier carried into the decision

        Returns:
            VisionDecision with profile, hygiene, promotion and depth
        """
        params = self._params

        profile = compute_band_safety(bands, params)

        hygiene = compute_spectral_hygiene(
            profile,
            artifact_fraction,
            params.safety_shigh,
        )

        promotion_score = compute_promotion_score(
            stability_score,
            confidence_score,
            profile.safety_min,
            params,
        )
        promotion_passed = passes_promotion_gate(promotion_score, params)

        depth, depth_reason = resolve_excavation(profile, governance, params)

        reasons = [depth_reason]
        reasons.append("promotion_passed" if promotion_passed else "promotion_below_threshold")
        if profile.hazard_counts()[HazardClass.HIGH] > 0:
            reasons.append("high_hazard_band")

        decision = VisionDecision(
            band_profile=profile,
            hygiene=hygiene,
            excavation_depth=depth,
            promotion_score=promotion_score,
            promotion_passed=promotion_passed,
            reasons=tuple(reasons),
            object_id=object_id,
        )

        logger.info(
            f"Decision: object={object_id}, depth={depth.value}, "
            f"promotion={promotion_score:.2f} ({'pass' if promotion_passed else 'fail'}), "
            f"band_quality={hygiene.band_quality:.2f}"
        )

        return decision

    def explain_decision(self, decision: VisionDecision) -> str:
        """
        Generate a human-readable explanation of a decision.

        Useful for logging, alerting, and debugging.

        Args:
            decision: The vision decision to explain

        Returns:
            Multi-line string explanation
        """
        profile = decision.band_profile
        hygiene = decision.hygiene

        lines = [
            "=" * 40,
            "SPECTRAL VISION DECISION",
            "=" * 40,
            f"Object:        {decision.object_id or '-'}",
            f"Depth:         {decision.excavation_depth.value.upper()}",
            f"Promotion:     {decision.promotion_score:.0%} "
            f"({'PASS' if decision.promotion_passed else 'FAIL'}, "
            f"threshold {self._params.promotion_threshold:.0%})",
            "",
            "REASONS:",
        ]

        for reason in decision.reasons:
            lines.append(f"  • {reason}")

        lines.append("")
        lines.append("BANDS:")
        if profile.bands:
            for entry in profile.bands:
                lines.append(
                    f"  [{entry.band_index}] safety={entry.safety_score:.4f} "
                    f"hazard={entry.hazard_class.value}"
                )
        else:
            lines.append("  • No bands evaluated")

        lines.append("")
        lines.append("KEY METRICS:")
        lines.append(f"  safety_min: {profile.safety_min:.4f}")
        lines.append(f"  safety_mean: {profile.safety_mean:.4f}")
        lines.append(f"  band_quality: {hygiene.band_quality:.4f}")
        lines.append(f"  artifact_level: {hygiene.artifact_level:.4f}")
        lines.append(f"  safe_band_fraction: {hygiene.safe_band_fraction:.4f}")

        if decision.requires_abort:
            lines.append("")
            lines.append("GOVERNANCE: abort and flush further processing")

        lines.append("=" * 40)

        return "\n".join(lines)
