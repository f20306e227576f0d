"""
Spectral object catalog.

In-memory map of spectral objects keyed by identifier. The catalog owns
its objects; engine decisions are attached to them as metadata but the
engine itself never reads or writes the catalog.
"""

from __future__ import annotations

import logging
import uuid

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Final

from ..analysis.numeric import clamp01

logger = logging.getLogger(__name__)

# Default cutoff for list_high_stability (stability >= t, drift <= 1 - t)
HIGH_STABILITY_THRESHOLD: Final[float] = 0.8


class SpectralKind(str, Enum):
    """Kinds of spectral objects that can be excavated."""

    DOM_SHEET = "dom_sheet"
    JSON_SCHEMA = "json_schema"
    STATE_MACHINE = "state_machine"
    API_SHAPE = "api_shape"
    TRACE_PATTERN = "trace_pattern"
    VM_REGION = "vm_region"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str | SpectralKind) -> SpectralKind:
        """Parse a kind label, accepting dashes; unknown labels map to OTHER."""
        if isinstance(value, SpectralKind):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_"))
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, slots=True)
class Origin:
    """
    Where a spectral object was excavated from.

    Attributes:
        domain: Host or logical domain (e.g., "shop.example.com")
        system: Service or subsystem name
        run_id: Identifier of the excavation run
        modality: Capture modality (e.g., "har+trace")
    """

    domain: str
    system: str = ""
    run_id: str = ""
    modality: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "domain": self.domain,
            "system": self.system,
            "run_id": self.run_id,
            "modality": self.modality,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Origin:
        """Deserialize from dictionary (runId accepted as an alias)."""
        return cls(
            domain=str(data["domain"]),
            system=str(data.get("system", "")),
            run_id=str(data.get("run_id", data.get("runId", ""))),
            modality=str(data.get("modality", "")),
        )


@dataclass(slots=True)
class SpectralObject:
    """
    Catalog entry for one excavated runtime shape.

    Mutable because scores, relationships and metadata are refreshed
    through touch() as new evidence arrives.

    Attributes:
        id: Stable identifier within the catalog
        kind: What kind of shape this is
        origin: Where it was excavated from
        signature: Shape-defining fields (selectors, fields, spans, ...)
        stability: Stability score in [0, 1]
        drift: Drift score in [0, 1]
        confidence: Confidence score in [0, 1]
        relationships: Relation strings (e.g., "refines:checkout_flow#base")
        metadata: Free-form tags, impact, notes and attached decisions
        created_at: When the object was first created
        updated_at: When the object was last touched
    """

    id: str
    kind: SpectralKind
    origin: Origin
    signature: dict[str, Any] = field(default_factory=dict)
    stability: float = 0.0
    drift: float = 0.0
    confidence: float = 0.0
    relationships: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate identity and normalize scores."""
        if not self.id:
            raise ValueError("SpectralObject requires a non-empty id")
        self.kind = SpectralKind.parse(self.kind)
        self.stability = clamp01(self.stability)
        self.drift = clamp01(self.drift)
        self.confidence = clamp01(self.confidence)
        if self.updated_at is None:
            self.updated_at = self.created_at

    @classmethod
    def new(
        cls,
        kind: SpectralKind | str,
        origin: Origin,
        signature: dict[str, Any] | None = None,
    ) -> SpectralObject:
        """Create a fresh object with a generated identifier and zero scores."""
        return cls(
            id=str(uuid.uuid4()),
            kind=SpectralKind.parse(kind),
            origin=origin,
            signature=signature or {},
        )

    def touch(
        self,
        stability: float | None = None,
        drift: float | None = None,
        confidence: float | None = None,
        relationships: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SpectralObject:
        """
        Update the given fields and refresh updated_at.

        Scores are clamped into [0, 1]; relationships are replaced;
        metadata is merged.

        Returns:
            self, for chaining
        """
        if stability is not None:
            self.stability = clamp01(stability)
        if drift is not None:
            self.drift = clamp01(drift)
        if confidence is not None:
            self.confidence = clamp01(confidence)
        if relationships is not None:
            self.relationships = list(relationships)
        if metadata:
            self.metadata.update(metadata)
        self.updated_at = datetime.now()
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "origin": self.origin.to_dict(),
            "signature": self.signature,
            "stability": self.stability,
            "drift": self.drift,
            "confidence": self.confidence,
            "relationships": list(self.relationships),
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpectralObject:
        """
        Deserialize from dictionary.

        Raises:
            KeyError: If id, kind or origin is missing.
        """
        created_at = data.get("created_at")
        updated_at = data.get("updated_at")
        return cls(
            id=str(data["id"]),
            kind=SpectralKind.parse(data["kind"]),
            origin=Origin.from_dict(data["origin"]),
            signature=dict(data.get("signature") or {}),
            stability=data.get("stability", 0.0),
            drift=data.get("drift", 0.0),
            confidence=data.get("confidence", 0.0),
            relationships=list(data.get("relationships") or []),
            metadata=dict(data.get("metadata") or {}),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )


class SpectralCatalog:
    """
    In-memory catalog of spectral objects.

    Usage:
        catalog = SpectralCatalog()
        obj = catalog.upsert(SpectralObject.new("trace_pattern", origin))
        stable = catalog.list_high_stability(0.8)
    """

    def __init__(self) -> None:
        self._objects: dict[str, SpectralObject] = {}

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, object_id: object) -> bool:
        return object_id in self._objects

    def upsert(self, obj: SpectralObject) -> SpectralObject:
        """
        Insert a new object, or refresh the existing one with the same id.

        An existing entry keeps its identity and creation time; its
        scores, relationships and metadata are taken from obj.

        Returns:
            The catalog's copy of the object
        """
        existing = self._objects.get(obj.id)
        if existing is None:
            self._objects[obj.id] = obj
            logger.debug(f"Catalog insert: {obj.id} ({obj.kind.value})")
            return obj

        existing.touch(
            stability=obj.stability,
            drift=obj.drift,
            confidence=obj.confidence,
            relationships=obj.relationships,
            metadata=obj.metadata,
        )
        logger.debug(f"Catalog update: {obj.id}")
        return existing

    def get_by_id(self, object_id: str) -> SpectralObject | None:
        """Look up an object by identifier."""
        return self._objects.get(object_id)

    def list_by_kind(self, kind: SpectralKind | str) -> list[SpectralObject]:
        """All objects of the given kind."""
        wanted = SpectralKind.parse(kind)
        return [o for o in self._objects.values() if o.kind == wanted]

    def list_high_stability(self, threshold: float = HIGH_STABILITY_THRESHOLD) -> list[SpectralObject]:
        """Objects with stability >= threshold and drift <= 1 - threshold."""
        return [
            o for o in self._objects.values()
            if o.stability >= threshold and o.drift <= 1.0 - threshold
        ]

    def list_by_domain(self, domain: str) -> list[SpectralObject]:
        """All objects excavated from the given origin domain."""
        return [o for o in self._objects.values() if o.origin.domain == domain]

    def snapshot(self) -> list[dict[str, Any]]:
        """Export every object as a serializable dictionary."""
        return [o.to_dict() for o in self._objects.values()]
