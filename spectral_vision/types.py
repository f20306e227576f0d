"""
Core type definitions for Spectral Vision.

This module defines all data structures used throughout the system.
Design principles:
- Immutable value types (frozen dataclasses), created fresh per evaluation
- Explicit validation only where the caller owns the value (parameters)
- Engine outputs never raise: scores are normalized, not rejected
- Serialization/deserialization with explicit methods
- No magic strings - all states are enums

Author: Spectral Vision Team
"""

from __future__ import annotations

import logging
import math

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Final

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MIN_SCORE: Final[float] = 0.0
MAX_SCORE: Final[float] = 1.0


def _latch(data: dict[str, Any], name: str, default: bool | None = None) -> bool:
    """
    Read a governance latch, accepting only real booleans.

    Raises:
        KeyError: If the latch is missing and has no default.
        ValueError: If the value is not a bool (e.g. the string "false").
    """
    if name not in data and default is not None:
        return default
    value = data[name]
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false, got {value!r}")
    return value


# =============================================================================
# ENUMS - Closed variant sets for every policy table
# =============================================================================

class HazardClass(str, Enum):
    """
    Coarse three-level hazard bucket for a single band.

    Derived from the band's safety score against the hazard thresholds
    in VisionParameters.
    """

    SAFE = "safe"
    """Safety score at or above hazard_safe_min."""

    ELEVATED = "elevated"
    """Safety score between hazard_elevated_max and hazard_safe_min."""

    HIGH = "high"
    """Safety score below hazard_elevated_max."""

    def __str__(self) -> str:
        return self.value


class GovernanceMode(str, Enum):
    """
    Operating mode reported by the governance subsystem.

    ACTIVE_FREE means roaming with mandatory non-interference: the
    engine may observe but never dig.
    """

    DORMANT = "dormant"
    ACTIVE_GOVERNED = "active_governed"
    ACTIVE_FREE = "active_free"
    TECHNICAL_ONLY = "technical_only"

    def __str__(self) -> str:
        return self.value


class ExcavationDepth(str, Enum):
    """
    How much further processing is authorized for an object.

    Totally ordered: SNIFF < DIG_LIGHT < DIG_FULL. The ordering is by
    rank, not by the string value, so batches can be sorted directly.
    """

    SNIFF = "sniff"
    """Surface read only. Also reported when governance forbids digging."""

    DIG_LIGHT = "dig_light"
    """Shallow excavation."""

    DIG_FULL = "dig_full"
    """Full excavation."""

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Position in the total order (0 = shallowest)."""
        return _DEPTH_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ExcavationDepth):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ExcavationDepth):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ExcavationDepth):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ExcavationDepth):
            return NotImplemented
        return self.rank >= other.rank


_DEPTH_RANK: Final[dict[ExcavationDepth, int]] = {
    ExcavationDepth.SNIFF: 0,
    ExcavationDepth.DIG_LIGHT: 1,
    ExcavationDepth.DIG_FULL: 2,
}


class XRZone(str, Enum):
    """
    Routing zone derived from the normalized density score.

    Four contiguous bands: CONTROL < 0.2 <= MONITORED < 0.5 <=
    RESTRICTED < 0.8 <= CONTAINMENT.
    """

    CONTROL = "control"
    MONITORED = "monitored"
    RESTRICTED = "restricted"
    CONTAINMENT = "containment"

    def __str__(self) -> str:
        return self.value


class RiskBand(str, Enum):
    """Label of the composite risk index."""

    NORMAL = "NORMAL"
    MODERATE = "MODERATE"
    HIGH = "HIGH"

    def __str__(self) -> str:
        return self.value


class RouteAction(str, Enum):
    """
    Terminal routing decision for one evaluation window.

    Unordered. The interactive front end must honor
    OBSERVE_ONLY and TERMINATE_SAFE as hard constraints.
    """

    FULL_INTERACTION = "full_interaction"
    """Full, rich interaction."""

    GUARDED_INTERACTION = "guarded_interaction"
    """Normal content with extra safeguards."""

    MITIGATION_ONLY = "mitigation_only"
    """De-escalation focused content only."""

    OBSERVE_ONLY = "observe_only"
    """Render only. No steering or optimization."""

    TERMINATE_SAFE = "terminate_safe"
    """Hard stop and safe exit of the scene."""

    def __str__(self) -> str:
        return self.value

    @property
    def is_restrictive(self) -> bool:
        """True if the front end may not steer the session."""
        return self in (RouteAction.OBSERVE_ONLY, RouteAction.TERMINATE_SAFE)


# =============================================================================
# INPUTS
# =============================================================================

@dataclass(frozen=True, slots=True)
class BandSample:
    """
    One raw per-band power measurement.

    Values are taken as-is; normalization happens in the band safety
    evaluator, never here.

    Attributes:
        band_index: Band index or label (e.g., 0=delta, 1=theta, ...)
        mean_power_raw: Raw mean power, nominally in [0, 1]
        stddev_power_raw: Raw power standard deviation, nominally in [0, 1]
    """

    band_index: int
    mean_power_raw: float
    stddev_power_raw: float

    @classmethod
    def coerce(
        cls,
        sample: BandSample | tuple[int, float, float] | dict[str, Any],
    ) -> BandSample:
        """
        Accept a BandSample, a plain (index, mean, stddev) sequence, or a
        dictionary as produced by to_dict().
        """
        if isinstance(sample, BandSample):
            return sample
        if isinstance(sample, dict):
            return cls(
                band_index=int(sample["band_index"]),
                mean_power_raw=sample["mean_power_raw"],
                stddev_power_raw=sample["stddev_power_raw"],
            )
        band_index, mean_power_raw, stddev_power_raw = sample
        return cls(
            band_index=int(band_index),
            mean_power_raw=mean_power_raw,
            stddev_power_raw=stddev_power_raw,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "band_index": self.band_index,
            "mean_power_raw": self.mean_power_raw,
            "stddev_power_raw": self.stddev_power_raw,
        }


@dataclass(frozen=True, slots=True)
class GovernanceAudit:
    """
    The two governance latches consulted by the route resolver.

    When both are set, routing is forced to observe-only.
    """

    soul_modeling_forbidden: bool
    non_interference_required: bool

    @property
    def forces_observe_only(self) -> bool:
        """True if the hard observe-only override applies."""
        return self.soul_modeling_forbidden and self.non_interference_required

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "soul_modeling_forbidden": self.soul_modeling_forbidden,
            "non_interference_required": self.non_interference_required,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GovernanceAudit:
        """Deserialize from dictionary."""
        return cls(
            soul_modeling_forbidden=_latch(data, "soul_modeling_forbidden"),
            non_interference_required=_latch(data, "non_interference_required"),
        )


@dataclass(frozen=True, slots=True)
class GovernanceSnapshot:
    """
    Read-only policy state supplied per evaluation call.

    The lifecycle of this record is owned by the governance subsystem;
    the engine only reads it.

    Attributes:
        mode: Current governance operating mode
        quantification_active: Spectral quantification latch
        soul_modeling_forbidden: Soul-modeling prohibition latch
        non_interference_required: Non-interference latch (routing only)
    """

    mode: GovernanceMode
    quantification_active: bool
    soul_modeling_forbidden: bool
    non_interference_required: bool = False

    @property
    def latches_closed(self) -> bool:
        """True if both excavation latches permit quantification."""
        return self.quantification_active and self.soul_modeling_forbidden

    @property
    def audit(self) -> GovernanceAudit:
        """Project onto the two latches used by the route resolver."""
        return GovernanceAudit(
            soul_modeling_forbidden=self.soul_modeling_forbidden,
            non_interference_required=self.non_interference_required,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "mode": self.mode.value,
            "quantification_active": self.quantification_active,
            "soul_modeling_forbidden": self.soul_modeling_forbidden,
            "non_interference_required": self.non_interference_required,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GovernanceSnapshot:
        """
        Deserialize from dictionary.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If mode is not a known GovernanceMode or a latch
                is not a bool.
        """
        return cls(
            mode=GovernanceMode(data["mode"]),
            quantification_active=_latch(data, "quantification_active"),
            soul_modeling_forbidden=_latch(data, "soul_modeling_forbidden"),
            non_interference_required=_latch(data, "non_interference_required", default=False),
        )


@dataclass(frozen=True, slots=True)
class RouteState:
    """
    Non-soul snapshot for routing, per region/session window.

    Attributes:
        region_session: Coarse region / time / session key
        density: Normalized density score, None if not measured
        fear_level: Fear channel in [0, 1]
        fear_rate_norm: Normalized fear rate (carried, not used for routing)
        psych_load: Psychological load channel in [0, 1]
        governance: Governance latches for this window
    """

    region_session: str
    density: float | None
    fear_level: float
    fear_rate_norm: float
    psych_load: float
    governance: GovernanceAudit

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouteState:
        """Deserialize from dictionary."""
        return cls(
            region_session=str(data.get("region_session", "")),
            density=data.get("density"),
            fear_level=data.get("fear_level", 0.0),
            fear_rate_norm=data.get("fear_rate_norm", 0.0),
            psych_load=data.get("psych_load", 0.0),
            governance=GovernanceAudit.from_dict(data["governance"]),
        )


# =============================================================================
# DERIVED VALUES
# =============================================================================

@dataclass(frozen=True, slots=True)
class BandSafetyEntry:
    """
    Normalized safety of a single band.

    Attributes:
        band_index: Band index copied from the sample
        mean_power: Clamped mean power in [0, 1]
        stddev_power: Clamped stddev in [0, 1]
        safety_score: clamp01(1 - mean_power - stddev_power)
        hazard_class: Bucket derived from safety_score
    """

    band_index: int
    mean_power: float
    stddev_power: float
    safety_score: float
    hazard_class: HazardClass

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "band_index": self.band_index,
            "mean_power": self.mean_power,
            "stddev_power": self.stddev_power,
            "safety_score": self.safety_score,
            "hazard_class": self.hazard_class.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BandSafetyEntry:
        """Deserialize from dictionary."""
        return cls(
            band_index=int(data["band_index"]),
            mean_power=float(data["mean_power"]),
            stddev_power=float(data["stddev_power"]),
            safety_score=float(data["safety_score"]),
            hazard_class=HazardClass(data["hazard_class"]),
        )


@dataclass(frozen=True, slots=True)
class BandSafetyProfile:
    """
    Band-level safety for one spectral object.

    By convention an empty profile has safety_min = 1.0 (nothing unsafe
    was observed) and safety_mean = 0.0 (nothing safe was observed).

    Attributes:
        bands: Per-band entries in input order
        safety_min: Worst band safety score
        safety_mean: Arithmetic mean of band safety scores
    """

    bands: tuple[BandSafetyEntry, ...]
    safety_min: float
    safety_mean: float

    @property
    def band_count(self) -> int:
        """Number of evaluated bands."""
        return len(self.bands)

    def hazard_counts(self) -> dict[HazardClass, int]:
        """Number of bands in each hazard class."""
        counts = {hazard: 0 for hazard in HazardClass}
        for entry in self.bands:
            counts[entry.hazard_class] += 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "bands": [b.to_dict() for b in self.bands],
            "safety_min": self.safety_min,
            "safety_mean": self.safety_mean,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BandSafetyProfile:
        """Deserialize from dictionary."""
        return cls(
            bands=tuple(BandSafetyEntry.from_dict(b) for b in data["bands"]),
            safety_min=float(data["safety_min"]),
            safety_mean=float(data["safety_mean"]),
        )


@dataclass(frozen=True, slots=True)
class SpectralHygiene:
    """
    Aggregate cleanliness of one spectral object.

    Invariant: artifact_level == 1 - band_quality.

    Attributes:
        band_quality: Higher is cleaner and safer
        artifact_level: Higher is more contaminated
        safe_band_fraction: Fraction of bands at or above the safety threshold
    """

    band_quality: float
    artifact_level: float
    safe_band_fraction: float

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "band_quality": self.band_quality,
            "artifact_level": self.artifact_level,
            "safe_band_fraction": self.safe_band_fraction,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpectralHygiene:
        """Deserialize from dictionary."""
        return cls(
            band_quality=float(data["band_quality"]),
            artifact_level=float(data["artifact_level"]),
            safe_band_fraction=float(data["safe_band_fraction"]),
        )


@dataclass(frozen=True, slots=True)
class RiskIndex:
    """Composite risk index x in [0, 1] with its band label."""

    x: float
    band: RiskBand

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"x": self.x, "band": self.band.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RiskIndex:
        """Deserialize from dictionary."""
        return cls(x=float(data["x"]), band=RiskBand(data["band"]))


# =============================================================================
# DECISIONS - Output aggregates, safe to cache or log verbatim
# =============================================================================

@dataclass(frozen=True, slots=True)
class VisionDecision:
    """
    The output of the vision engine for one spectral object.

    Attributes:
        band_profile: Band-level safety profile
        hygiene: Aggregate hygiene metrics
        excavation_depth: Authorized processing depth
        promotion_score: Weighted promotion score in [0, 1]
        promotion_passed: True if the score met the promotion threshold
        reasons: Machine-readable reason codes behind the decision
        object_id: Identifier of the evaluated object, if known
    """

    band_profile: BandSafetyProfile
    hygiene: SpectralHygiene
    excavation_depth: ExcavationDepth
    promotion_score: float
    promotion_passed: bool
    reasons: tuple[str, ...] = ()
    object_id: str | None = None

    @property
    def requires_abort(self) -> bool:
        """
        True if governance latches forced SNIFF.

        The caller is expected to abort and flush further processing.
        """
        return "governance_latch_open" in self.reasons

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize for logging and API responses.

        Returns:
            Dictionary with all decision fields.
        """
        return {
            "object_id": self.object_id,
            "band_profile": self.band_profile.to_dict(),
            "hygiene": self.hygiene.to_dict(),
            "excavation_depth": self.excavation_depth.value,
            "promotion_score": self.promotion_score,
            "promotion_passed": self.promotion_passed,
            "reasons": list(self.reasons),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VisionDecision:
        """Deserialize from dictionary."""
        return cls(
            band_profile=BandSafetyProfile.from_dict(data["band_profile"]),
            hygiene=SpectralHygiene.from_dict(data["hygiene"]),
            excavation_depth=ExcavationDepth(data["excavation_depth"]),
            promotion_score=float(data["promotion_score"]),
            promotion_passed=bool(data["promotion_passed"]),
            reasons=tuple(data.get("reasons", ())),
            object_id=data.get("object_id"),
        )


@dataclass(frozen=True, slots=True)
class RouteDecision:
    """
    Routing decision for one region/session window.

    The audit token is opaque and carried for traceability only. It
    never influences the action.

    Attributes:
        zone: Zone derived from density
        risk: Composite risk index
        action: Final route action
        reasons: Machine-readable reason codes behind the action
        audit_token: Optional opaque token for audit trails
    """

    zone: XRZone
    risk: RiskIndex
    action: RouteAction
    reasons: tuple[str, ...] = ()
    audit_token: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "zone": self.zone.value,
            "risk": self.risk.to_dict(),
            "action": self.action.value,
            "reasons": list(self.reasons),
            "audit_token": self.audit_token,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouteDecision:
        """Deserialize from dictionary."""
        return cls(
            zone=XRZone(data["zone"]),
            risk=RiskIndex.from_dict(data["risk"]),
            action=RouteAction(data["action"]),
            reasons=tuple(data.get("reasons", ())),
            audit_token=data.get("audit_token"),
        )


# =============================================================================
# PARAMETERS
# =============================================================================

@dataclass(frozen=True)
class VisionParameters:
    """
    Thresholds and weights for the vision engine.

    Caller-constructed and passed into every call, so alternate policy
    sets can be evaluated side by side. The engine never mutates it;
    use with_overrides() to derive a variant.

    Configuration can be loaded from:
    - Python code (direct instantiation)
    - JSON file (via config.load_config)
    - Environment variable pointing to JSON file

    Attributes:
        safety_slow: safety_min below this => SNIFF
        safety_shigh: safety_min below this => DIG_LIGHT, else DIG_FULL
        hazard_elevated_max: band score below this => HIGH hazard
        hazard_safe_min: band score at or above this => SAFE
        w_stability: Promotion weight for stability
        w_confidence: Promotion weight for confidence
        w_safety_min: Promotion weight for worst-band safety
        promotion_threshold: Inclusive promotion gate threshold
    """

    MIN_THRESHOLD: ClassVar[float] = 0.0
    MAX_THRESHOLD: ClassVar[float] = 1.0

    # Excavation thresholds
    safety_slow: float = 0.4
    safety_shigh: float = 0.7

    # Hazard thresholds (per band)
    hazard_elevated_max: float = 0.4
    hazard_safe_min: float = 0.7

    # Promotion weights (renormalized internally)
    w_stability: float = 0.4
    w_confidence: float = 0.4
    w_safety_min: float = 0.2

    # Promotion gate
    promotion_threshold: float = 0.8

    def __post_init__(self) -> None:
        """Validate parameters after initialization."""
        self._validate_thresholds()
        self._validate_ordering()
        self._validate_weights()

    def _validate_thresholds(self) -> None:
        """Validate threshold values are inside the score range."""
        thresholds = [
            ("safety_slow", self.safety_slow),
            ("safety_shigh", self.safety_shigh),
            ("hazard_elevated_max", self.hazard_elevated_max),
            ("hazard_safe_min", self.hazard_safe_min),
            ("promotion_threshold", self.promotion_threshold),
        ]

        for name, value in thresholds:
            if not (self.MIN_THRESHOLD <= value <= self.MAX_THRESHOLD):
                raise ValueError(
                    f"{name} must be between {self.MIN_THRESHOLD} and "
                    f"{self.MAX_THRESHOLD}, got {value}"
                )

    def _validate_ordering(self) -> None:
        """Validate that paired thresholds describe non-overlapping bands."""
        if self.hazard_elevated_max > self.hazard_safe_min:
            raise ValueError(
                f"hazard_elevated_max ({self.hazard_elevated_max}) must not exceed "
                f"hazard_safe_min ({self.hazard_safe_min})"
            )

        if self.safety_slow > self.safety_shigh:
            raise ValueError(
                f"safety_slow ({self.safety_slow}) must not exceed "
                f"safety_shigh ({self.safety_shigh})"
            )

    def _validate_weights(self) -> None:
        """Validate promotion weights are finite and non-negative."""
        weights = [
            ("w_stability", self.w_stability),
            ("w_confidence", self.w_confidence),
            ("w_safety_min", self.w_safety_min),
        ]

        for name, value in weights:
            if not (math.isfinite(value) and value >= 0.0):
                raise ValueError(f"{name} must be finite and non-negative, got {value}")

        if self.weight_sum == 0.0:
            logger.warning(
                "All promotion weights are zero. No object can be promoted."
            )

    @property
    def weight_sum(self) -> float:
        """Sum of the three promotion weights."""
        return self.w_stability + self.w_confidence + self.w_safety_min

    @property
    def promotion_weights(self) -> tuple[float, float, float]:
        """Raw (stability, confidence, safety_min) weights."""
        return (self.w_stability, self.w_confidence, self.w_safety_min)

    def with_overrides(self, **changes: float) -> VisionParameters:
        """Return a validated copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialize parameters to dictionary."""
        return {
            "safety_slow": self.safety_slow,
            "safety_shigh": self.safety_shigh,
            "hazard_elevated_max": self.hazard_elevated_max,
            "hazard_safe_min": self.hazard_safe_min,
            "w_stability": self.w_stability,
            "w_confidence": self.w_confidence,
            "w_safety_min": self.w_safety_min,
            "promotion_threshold": self.promotion_threshold,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VisionParameters:
        """
        Create parameters from dictionary.

        Args:
            data: Dictionary with parameter fields.

        Returns:
            VisionParameters instance.

        Raises:
            ValueError: If a field is unknown or a value is invalid.
        """
        known = set(cls().to_dict())
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown parameter fields: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in data.items()})


@dataclass(frozen=True, slots=True)
class EvaluationRequest:
    """
    One object's inputs for batch evaluation.

    Attributes:
        object_id: Identifier of the spectral object
        bands: Raw band samples
        stability_score: Raw stability score
        confidence_score: Raw confidence score
        artifact_fraction: Raw artifact epoch fraction
    """

    object_id: str
    bands: tuple[BandSample, ...] = field(default_factory=tuple)
    stability_score: float = 0.0
    confidence_score: float = 0.0
    artifact_fraction: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvaluationRequest:
        """Deserialize from dictionary (bands as [index, mean, stddev] lists or dicts)."""
        return cls(
            object_id=str(data["object_id"]),
            bands=tuple(BandSample.coerce(b) for b in data.get("bands", ())),
            stability_score=data.get("stability_score", 0.0),
            confidence_score=data.get("confidence_score", 0.0),
            artifact_fraction=data.get("artifact_fraction", 0.0),
        )
