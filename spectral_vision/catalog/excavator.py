"""
Spectral object excavation - ingestion boundary of the catalog.

Parses spectral objects from JSON, refuses to run when governance
forbids it, and exports objects as NDJSON for the sniffing view.

Unlike the engine, this boundary validates instead of clamping: a score
outside [0, 1] in an ingested document is a data error.
"""

from __future__ import annotations

import json
import logging

from collections.abc import Iterable
from pathlib import Path
from typing import Any, Final

from ..types import GovernanceSnapshot
from .model import SpectralObject

logger = logging.getLogger(__name__)


# Alternate field names accepted from excavated documents
FIELD_ALIASES: Final[dict[str, str]] = {
    "spectral_id": "id",
    "stability_score": "stability",
    "drift_score": "drift",
    "confidence_score": "confidence",
    "relations": "relationships",
}

SCORE_FIELDS: Final[tuple[str, ...]] = ("stability", "drift", "confidence")

REQUIRED_FIELDS: Final[tuple[str, ...]] = ("id", "kind", "origin")

KNOWN_FIELDS: Final[frozenset[str]] = frozenset({
    "id", "kind", "origin", "signature", "stability", "drift", "confidence",
    "relationships", "metadata", "created_at", "updated_at",
})


class GovernanceAbortError(PermissionError):
    """Raised when governance forbids excavation. Callers must abort and flush."""


def _normalize_document(data: dict[str, Any]) -> dict[str, Any]:
    """Map field aliases and fold unknown top-level fields into metadata."""
    normalized: dict[str, Any] = {}
    for key, value in data.items():
        normalized[FIELD_ALIASES.get(key, key)] = value

    metadata = dict(normalized.get("metadata") or {})
    for key in list(normalized):
        if key not in KNOWN_FIELDS:
            metadata[key] = normalized.pop(key)
    normalized["metadata"] = metadata

    return normalized


def _validate_document(data: dict[str, Any]) -> None:
    """Check required fields and score bounds."""
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    if missing:
        raise ValueError(f"Spectral object is missing required fields: {missing}")

    if not isinstance(data["origin"], dict) or "domain" not in data["origin"]:
        raise ValueError("Spectral object origin must be an object with a domain")

    for name in SCORE_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{name} must be a number, got {value!r}")
        if not (0.0 <= value <= 1.0):
            raise ValueError(f"{name} out of [0,1] bounds: {value}")


def excavate_spectral_object(
    document: str | dict[str, Any],
    governance: GovernanceSnapshot,
) -> SpectralObject:
    """
    Validate and excavate one spectral object.

    Args:
        document: JSON text or already-parsed dictionary
        governance: Governance snapshot for this excavation

    Returns:
        Parsed SpectralObject

    Raises:
        GovernanceAbortError: If soul-modeling is not forbidden.
        ValueError: If the document is malformed or a score is out of bounds.
    """
    if not governance.soul_modeling_forbidden:
        raise GovernanceAbortError(
            "Governance abort-flush: soul-modeling prohibition is not in force"
        )

    if isinstance(document, str):
        try:
            data = json.loads(document)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid spectral object JSON: {e}") from e
    else:
        data = document

    if not isinstance(data, dict):
        raise ValueError(f"Spectral object must be a JSON object, got {type(data).__name__}")

    normalized = _normalize_document(data)
    _validate_document(normalized)

    obj = SpectralObject.from_dict(normalized)
    logger.debug(f"Excavated spectral object {obj.id} ({obj.kind.value})")
    return obj


def write_ndjson(objects: Iterable[SpectralObject], path: str | Path) -> int:
    """
    Write objects as NDJSON, one compact JSON object per line.

    Returns:
        Number of objects written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for obj in objects:
            f.write(json.dumps(obj.to_dict(), separators=(",", ":")) + "\n")
            count += 1

    logger.info(f"Wrote {count} spectral objects to {path}")
    return count


def read_ndjson(path: str | Path) -> list[SpectralObject]:
    """
    Read objects back from an NDJSON file.

    Raises:
        ValueError: If a line is not a valid spectral object.
    """
    objects: list[SpectralObject] = []
    with open(path, encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                objects.append(SpectralObject.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError) as e:
                raise ValueError(f"{path}:{line_number}: invalid spectral object: {e}") from e
    return objects
