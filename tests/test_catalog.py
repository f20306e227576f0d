"""
Tests for the spectral object catalog and the excavation boundary.
"""

import json

import pytest

from spectral_vision.catalog import (
    GovernanceAbortError,
    Origin,
    SpectralCatalog,
    SpectralKind,
    SpectralObject,
    excavate_spectral_object,
    read_ndjson,
    write_ndjson,
)
from spectral_vision.types import GovernanceMode, GovernanceSnapshot

SHOP = Origin(domain="shop.example.com", system="checkout_service", run_id="run-1", modality="har+trace")


def make_object(object_id="checkout_flow#1", kind=SpectralKind.TRACE_PATTERN, origin=SHOP, **scores):
    """Helper to build a catalog object."""
    return SpectralObject(id=object_id, kind=kind, origin=origin, **scores)


@pytest.fixture
def governance():
    """Soul-modeling prohibition in force."""
    return GovernanceSnapshot(
        mode=GovernanceMode.ACTIVE_GOVERNED,
        quantification_active=True,
        soul_modeling_forbidden=True,
    )


@pytest.fixture
def document():
    """A minimal excavated document."""
    return {
        "spectral_id": "checkout_latency_spike#1",
        "kind": "trace-pattern",
        "origin": {"domain": "shop.example.com", "system": "checkout_service", "runId": "r-9"},
        "signature": {"span": "POST /checkout"},
        "stability_score": 0.8,
        "drift_score": 0.1,
        "confidence_score": 0.93,
        "relations": ["refines:checkout_flow#base"],
        "impact": "high",
    }


class TestSpectralObject:
    """Tests for the catalog entry."""

    def test_scores_are_clamped(self):
        """Out-of-range scores are normalized on construction."""
        obj = make_object(stability=1.4, drift=-0.2, confidence=float("nan"))

        assert obj.stability == 1.0
        assert obj.drift == 0.0
        assert obj.confidence == 0.0

    def test_empty_id_rejected(self):
        """Every object needs an identifier."""
        with pytest.raises(ValueError):
            make_object(object_id="")

    def test_kind_parsing(self):
        """Kind labels accept dashes and fall back to OTHER."""
        assert make_object(kind="json-schema").kind == SpectralKind.JSON_SCHEMA
        assert make_object(kind="hologram").kind == SpectralKind.OTHER

    def test_new_generates_id(self):
        """new() assigns a fresh identifier and zero scores."""
        a = SpectralObject.new("vm_region", SHOP)
        b = SpectralObject.new("vm_region", SHOP)

        assert a.id != b.id
        assert a.kind == SpectralKind.VM_REGION
        assert a.stability == 0.0

    def test_touch(self):
        """touch clamps scores, replaces relationships and merges metadata."""
        obj = make_object(metadata={"tags": ["checkout"]}, relationships=["a"])
        before = obj.updated_at

        returned = obj.touch(stability=2.0, drift=0.3, relationships=["b", "c"], metadata={"impact": "low"})

        assert returned is obj
        assert obj.stability == 1.0
        assert obj.drift == 0.3
        assert obj.relationships == ["b", "c"]
        assert obj.metadata == {"tags": ["checkout"], "impact": "low"}
        assert obj.updated_at >= before

    def test_touch_leaves_unspecified_fields(self):
        """Fields not passed to touch keep their values."""
        obj = make_object(stability=0.5, confidence=0.6)
        obj.touch(drift=0.2)

        assert obj.stability == 0.5
        assert obj.confidence == 0.6

    def test_dict_round_trip(self):
        """to_dict/from_dict preserve identity, scores and timestamps."""
        obj = make_object(stability=0.7, signature={"fields": ["sku"]}, metadata={"n": 1})
        restored = SpectralObject.from_dict(obj.to_dict())

        assert restored == obj


class TestSpectralCatalog:
    """Tests for catalog queries."""

    def test_upsert_inserts(self):
        """New ids are stored as given."""
        catalog = SpectralCatalog()
        obj = make_object()

        assert catalog.upsert(obj) is obj
        assert len(catalog) == 1
        assert "checkout_flow#1" in catalog
        assert catalog.get_by_id("checkout_flow#1") is obj

    def test_upsert_refreshes_existing(self):
        """A known id keeps its entry and creation time; scores are updated."""
        catalog = SpectralCatalog()
        original = catalog.upsert(make_object(stability=0.2, metadata={"a": 1}))
        created = original.created_at

        stored = catalog.upsert(make_object(stability=0.9, metadata={"b": 2}))

        assert stored is original
        assert len(catalog) == 1
        assert stored.stability == 0.9
        assert stored.created_at == created
        assert stored.metadata == {"a": 1, "b": 2}

    def test_get_unknown(self):
        """Unknown ids return None."""
        assert SpectralCatalog().get_by_id("nope") is None

    def test_list_by_kind(self):
        """Filtering by kind accepts enum or label."""
        catalog = SpectralCatalog()
        catalog.upsert(make_object("a", kind=SpectralKind.DOM_SHEET))
        catalog.upsert(make_object("b", kind=SpectralKind.API_SHAPE))
        catalog.upsert(make_object("c", kind=SpectralKind.DOM_SHEET))

        assert [o.id for o in catalog.list_by_kind("dom-sheet")] == ["a", "c"]
        assert [o.id for o in catalog.list_by_kind(SpectralKind.API_SHAPE)] == ["b"]

    def test_list_high_stability(self):
        """High stability requires stability >= t and drift <= 1 - t."""
        catalog = SpectralCatalog()
        catalog.upsert(make_object("stable", stability=0.9, drift=0.1))
        catalog.upsert(make_object("drifting", stability=0.9, drift=0.5))
        catalog.upsert(make_object("weak", stability=0.5, drift=0.0))

        assert [o.id for o in catalog.list_high_stability()] == ["stable"]
        assert {o.id for o in catalog.list_high_stability(0.5)} == {"stable", "drifting", "weak"}

    def test_list_by_domain(self):
        """Filtering by origin domain."""
        catalog = SpectralCatalog()
        catalog.upsert(make_object("a"))
        catalog.upsert(make_object("b", origin=Origin(domain="admin.example.com")))

        assert [o.id for o in catalog.list_by_domain("admin.example.com")] == ["b"]

    def test_snapshot_is_serializable(self):
        """snapshot() produces plain JSON-ready dictionaries."""
        catalog = SpectralCatalog()
        catalog.upsert(make_object("a", stability=0.4))

        snapshot = catalog.snapshot()
        assert json.loads(json.dumps(snapshot)) == snapshot
        assert snapshot[0]["kind"] == "trace_pattern"


class TestExcavation:
    """Tests for the ingestion boundary."""

    def test_refuses_without_soul_prohibition(self, document):
        """Excavation aborts when soul-modeling is not forbidden."""
        governance = GovernanceSnapshot(GovernanceMode.ACTIVE_GOVERNED, True, False)

        with pytest.raises(GovernanceAbortError):
            excavate_spectral_object(document, governance)

    def test_aliases_and_extras(self, document, governance):
        """Alias fields are mapped; unknown fields land in metadata."""
        obj = excavate_spectral_object(document, governance)

        assert obj.id == "checkout_latency_spike#1"
        assert obj.kind == SpectralKind.TRACE_PATTERN
        assert obj.origin.run_id == "r-9"
        assert obj.stability == 0.8
        assert obj.confidence == 0.93
        assert obj.relationships == ["refines:checkout_flow#base"]
        assert obj.metadata == {"impact": "high"}

    def test_accepts_json_text(self, document, governance):
        """Documents may be passed as JSON strings."""
        obj = excavate_spectral_object(json.dumps(document), governance)
        assert obj.id == "checkout_latency_spike#1"

    @pytest.mark.parametrize("score", [1.2, -0.1, float("nan"), "high", True])
    def test_rejects_bad_scores(self, document, governance, score):
        """Ingested scores are validated, not clamped."""
        document["stability_score"] = score

        with pytest.raises(ValueError):
            excavate_spectral_object(document, governance)

    @pytest.mark.parametrize("missing", ["spectral_id", "kind", "origin"])
    def test_rejects_missing_fields(self, document, governance, missing):
        """id, kind and origin are required."""
        del document[missing]

        with pytest.raises(ValueError, match="missing required fields"):
            excavate_spectral_object(document, governance)

    @pytest.mark.parametrize("text", ["{broken", "[1, 2, 3]"])
    def test_rejects_non_objects(self, governance, text):
        """Invalid JSON or non-object documents are data errors."""
        with pytest.raises(ValueError):
            excavate_spectral_object(text, governance)

    def test_origin_needs_domain(self, document, governance):
        """Origins without a domain are rejected."""
        document["origin"] = {"system": "checkout_service"}

        with pytest.raises(ValueError, match="domain"):
            excavate_spectral_object(document, governance)


class TestNdjson:
    """Tests for the NDJSON sniffing view."""

    def test_write_and_read(self, tmp_path):
        """Objects are written one per line and read back intact."""
        objects = [make_object("a", stability=0.3), make_object("b", kind="api_shape")]
        path = tmp_path / "out" / "spectral_sniffing.ndjson"

        assert write_ndjson(objects, path) == 2
        assert len(path.read_text().splitlines()) == 2
        assert read_ndjson(path) == objects

    def test_bad_line_reports_position(self, tmp_path):
        """A corrupt line raises with its line number."""
        path = tmp_path / "bad.ndjson"
        path.write_text(json.dumps(make_object("a").to_dict()) + "\n\n{oops\n")

        with pytest.raises(ValueError, match=":3:"):
            read_ndjson(path)
