"""
Promotion Gate.

Combines stability, confidence and worst-band safety into a single
promotion score, and gates catalog promotion on it.

    promotion_score = w1 * stability + w2 * confidence + w3 * safety_min

where (w1, w2, w3) are renormalized to sum to 1. A non-positive weight
sum yields a score of 0.0: the object cannot promote on this call.
"""

from __future__ import annotations

import logging

from collections.abc import Sequence

from ..types import VisionParameters
from .numeric import clamp01

logger = logging.getLogger(__name__)


def weighted_promotion_score(
    scores: Sequence[float | None],
    weights: Sequence[float],
) -> float:
    """
    Renormalize-or-zero weighted sum of clamped scores.

    Args:
        scores: Raw scores, each clamped into [0, 1]
        weights: One weight per score

    Returns:
        Weighted score in [0, 1], or 0.0 when the weight sum is <= 0

    Raises:
        ValueError: If scores and weights differ in length.
    """
    if len(scores) != len(weights):
        raise ValueError(
            f"Expected one weight per score, got {len(scores)} scores "
            f"and {len(weights)} weights"
        )

    weight_sum = float(sum(weights))
    if not weight_sum > 0.0:
        logger.debug(f"Promotion weight sum {weight_sum} is not positive; score is 0")
        return 0.0

    total = sum(
        (weight / weight_sum) * clamp01(score)
        for score, weight in zip(scores, weights)
    )
    return clamp01(total)


def compute_promotion_score(
    stability_score: float | None,
    confidence_score: float | None,
    safety_min: float | None,
    params: VisionParameters,
) -> float:
    """
    Compute the promotion score for one spectral object.

    Args:
        stability_score: Raw stability score
        confidence_score: Raw confidence score
        safety_min: Worst band safety score
        params: Parameters holding the promotion weights

    Returns:
        Promotion score in [0, 1]
    """
    return weighted_promotion_score(
        (stability_score, confidence_score, safety_min),
        params.promotion_weights,
    )


def passes_promotion_gate(promotion_score: float, params: VisionParameters) -> bool:
    """True if the score reaches the (inclusive) promotion threshold."""
    return promotion_score >= params.promotion_threshold
