"""
Spectral object catalog for Spectral Vision.

In-memory catalog plus the excavation/NDJSON boundary.
"""

from .excavator import (
    GovernanceAbortError,
    excavate_spectral_object,
    read_ndjson,
    write_ndjson,
)
from .model import (
    HIGH_STABILITY_THRESHOLD,
    Origin,
    SpectralCatalog,
    SpectralKind,
    SpectralObject,
)

__all__ = [
    "GovernanceAbortError",
    "HIGH_STABILITY_THRESHOLD",
    "Origin",
    "SpectralCatalog",
    "SpectralKind",
    "SpectralObject",
    "excavate_spectral_object",
    "read_ndjson",
    "write_ndjson",
]
