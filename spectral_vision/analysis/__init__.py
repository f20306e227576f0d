"""
Band safety, hygiene and promotion scoring for Spectral Vision.

Pure functions over immutable inputs. Nothing here raises on malformed
numbers: every scalar is clamped into [0, 1].
"""

from .band_safety import classify_hazard, compute_band_safety, evaluate_band
from .hygiene import compute_spectral_hygiene
from .numeric import clamp01
from .promotion import (
    compute_promotion_score,
    passes_promotion_gate,
    weighted_promotion_score,
)

__all__ = [
    "clamp01",
    "classify_hazard",
    "compute_band_safety",
    "compute_promotion_score",
    "compute_spectral_hygiene",
    "evaluate_band",
    "passes_promotion_gate",
    "weighted_promotion_score",
]
