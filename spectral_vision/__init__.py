"""
Spectral Vision - Safety, hygiene and routing decisions for spectral objects.

A small decision engine that turns per-band power statistics,
stability/confidence scores and a governance snapshot into explicit,
auditable decisions. This is a decision system, not a signal pipeline.

Quick Start:
    >>> from spectral_vision import VisionEngine, GovernanceSnapshot, GovernanceMode
    >>> engine = VisionEngine()
    >>> gov = GovernanceSnapshot(GovernanceMode.ACTIVE_GOVERNED, True, True)
    >>> decision = engine.evaluate([(0, 0.1, 0.05)], 0.9, 0.9, 0.0, gov)
    >>> print(decision.excavation_depth)

For routing an interactive front end:
    >>> from spectral_vision import decide_route, GovernanceAudit
    >>> route = decide_route(0.3, 0.1, 0.2, GovernanceAudit(False, False))
    >>> print(route.action)

Key Components:
    - VisionEngine: band safety, hygiene, promotion and excavation depth
    - decide_route: zone, risk index and route action
    - SpectralVision: orchestrator with catalog and decision log
    - VisionParameters: all thresholds and weights

Design Principles:
    - Pure: no I/O or shared state inside the engine
    - Normalize, never reject: every score is clamped into [0, 1]
    - Governance overrides are decisions, not errors

Author: Spectral Vision Team
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Spectral Vision Team"
__license__ = "MIT"

# Configuration
from spectral_vision.config import load_config, save_config

# Engines
from spectral_vision.decision import VisionEngine, decide_route, decide_route_for_state

# Core types (public API)
from spectral_vision.types import (
    BandSafetyEntry,
    BandSafetyProfile,
    BandSample,
    EvaluationRequest,
    ExcavationDepth,
    GovernanceAudit,
    GovernanceMode,
    GovernanceSnapshot,
    HazardClass,
    RiskBand,
    RiskIndex,
    RouteAction,
    RouteDecision,
    RouteState,
    SpectralHygiene,
    VisionDecision,
    VisionParameters,
    XRZone,
)

# Main orchestrator
from spectral_vision.vision import SpectralVision

__all__ = [
    "BandSafetyEntry",
    "BandSafetyProfile",
    # Types - Data classes
    "BandSample",
    "EvaluationRequest",
    # Types - Enums
    "ExcavationDepth",
    "GovernanceAudit",
    "GovernanceMode",
    "GovernanceSnapshot",
    "HazardClass",
    "RiskBand",
    "RiskIndex",
    "RouteAction",
    "RouteDecision",
    "RouteState",
    # Main class
    "SpectralVision",
    "SpectralHygiene",
    "VisionDecision",
    "VisionEngine",
    # Configuration
    "VisionParameters",
    "XRZone",
    "__author__",
    "__license__",
    # Version info
    "__version__",
    "decide_route",
    "decide_route_for_state",
    "load_config",
    "save_config",
]
