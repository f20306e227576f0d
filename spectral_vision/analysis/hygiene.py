"""
Hygiene Aggregator.

Combines the band safety summary with an artifact contamination
fraction into an overall cleanliness verdict.
"""

from __future__ import annotations

from ..types import BandSafetyProfile, SpectralHygiene
from .numeric import clamp01


def compute_spectral_hygiene(
    profile: BandSafetyProfile,
    artifact_fraction: float | None,
    safety_threshold: float,
) -> SpectralHygiene:
    """
    Compute hygiene metrics from band safety and artifact contamination.

    band_quality   = clamp01(safety_mean * (1 - artifact_fraction))
    artifact_level = 1 - band_quality

    Args:
        profile: Band safety profile of the object
        artifact_fraction: Raw fraction of artifact-contaminated epochs
        safety_threshold: Band score counted as safe (callers pass safety_shigh)

    Returns:
        SpectralHygiene for the object
    """
    artifact = clamp01(artifact_fraction)

    band_quality = clamp01(profile.safety_mean * (1.0 - artifact))
    artifact_level = 1.0 - band_quality

    if profile.bands:
        safe_count = sum(
            1 for entry in profile.bands if entry.safety_score >= safety_threshold
        )
        safe_band_fraction = safe_count / len(profile.bands)
    else:
        safe_band_fraction = 0.0

    return SpectralHygiene(
        band_quality=band_quality,
        artifact_level=artifact_level,
        safe_band_fraction=clamp01(safe_band_fraction),
    )
