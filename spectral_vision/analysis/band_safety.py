"""
Band Safety Evaluator.

Converts raw per-band mean/stddev power readings into normalized
safety scores and hazard classes.

For each band B:
    mu_B    = clamp01(mean_power_raw)
    sigma_B = clamp01(stddev_power_raw)
    s_B     = clamp01(1 - mu_B - sigma_B)

Hazard class:
    s_B <  hazard_elevated_max  -> HIGH
    s_B <  hazard_safe_min      -> ELEVATED
    otherwise                   -> SAFE

Aggregates: safety_min (1.0 for no bands) and safety_mean (0.0 for no
bands). Malformed numbers are normalized, never rejected.
"""

from __future__ import annotations

import logging

from collections.abc import Iterable
from typing import Any

from ..types import (
    BandSafetyEntry,
    BandSafetyProfile,
    BandSample,
    HazardClass,
    VisionParameters,
)
from .numeric import clamp01, mean_or_default, min_or_default

logger = logging.getLogger(__name__)


def classify_hazard(safety_score: float, params: VisionParameters) -> HazardClass:
    """
    Bucket a band safety score into a hazard class.

    Args:
        safety_score: Normalized band safety score
        params: Parameters holding the hazard thresholds

    Returns:
        HazardClass for the score
    """
    if safety_score < params.hazard_elevated_max:
        return HazardClass.HIGH
    if safety_score < params.hazard_safe_min:
        return HazardClass.ELEVATED
    return HazardClass.SAFE


def evaluate_band(sample: BandSample, params: VisionParameters) -> BandSafetyEntry:
    """Normalize one band sample and score it."""
    mean_power = clamp01(sample.mean_power_raw)
    stddev_power = clamp01(sample.stddev_power_raw)
    safety_score = clamp01(1.0 - mean_power - stddev_power)

    return BandSafetyEntry(
        band_index=sample.band_index,
        mean_power=mean_power,
        stddev_power=stddev_power,
        safety_score=safety_score,
        hazard_class=classify_hazard(safety_score, params),
    )


def compute_band_safety(
    samples: Iterable[BandSample | tuple[int, float, float] | dict[str, Any]],
    params: VisionParameters,
) -> BandSafetyProfile:
    """
    Compute the band safety profile for one spectral object.

    Args:
        samples: Raw band samples, as BandSample or (index, mean, stddev)
        params: Parameters holding the hazard thresholds

    Returns:
        BandSafetyProfile with per-band entries and aggregates
    """
    entries = tuple(
        evaluate_band(BandSample.coerce(sample), params) for sample in samples
    )
    scores = [entry.safety_score for entry in entries]

    profile = BandSafetyProfile(
        bands=entries,
        safety_min=clamp01(min_or_default(scores, default=1.0)),
        safety_mean=clamp01(mean_or_default(scores, default=0.0)),
    )

    logger.debug(
        f"Band safety: bands={profile.band_count}, "
        f"safety_min={profile.safety_min:.4f}, safety_mean={profile.safety_mean:.4f}"
    )

    return profile
