"""
Decision layer for Spectral Vision.

Turns band safety and governance into excavation depths, and density
plus psychological load into route actions.
"""

from .engine import VisionEngine
from .excavation import compute_excavation_depth, resolve_excavation
from .route import (
    compute_risk_index,
    compute_xr_zone,
    decide_route,
    decide_route_for_state,
    resolve_route_action,
)

__all__ = [
    "VisionEngine",
    "compute_excavation_depth",
    "compute_risk_index",
    "compute_xr_zone",
    "decide_route",
    "decide_route_for_state",
    "resolve_excavation",
    "resolve_route_action",
]
