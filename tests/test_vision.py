"""
Tests for the SpectralVision orchestrator.
"""

import pytest

from spectral_vision import (
    EvaluationRequest,
    ExcavationDepth,
    GovernanceAudit,
    GovernanceMode,
    GovernanceSnapshot,
    RouteAction,
    RouteState,
    SpectralVision,
    VisionParameters,
)
from spectral_vision.catalog import HIGH_STABILITY_THRESHOLD, Origin, SpectralCatalog, SpectralObject
from spectral_vision.logging import KIND_ROUTE, KIND_VISION, DecisionLogger, DecisionLogReader
from spectral_vision.vision import METADATA_KEY, deepest, prioritize


@pytest.fixture
def governance():
    """Closed latches in governed mode."""
    return GovernanceSnapshot(
        mode=GovernanceMode.ACTIVE_GOVERNED,
        quantification_active=True,
        soul_modeling_forbidden=True,
    )


@pytest.fixture
def vision():
    """Orchestrator with explicit default parameters."""
    return SpectralVision(params=VisionParameters())


def request(object_id, worst_mean):
    """Helper: one request whose worst band has the given mean power."""
    return EvaluationRequest.from_dict({
        "object_id": object_id,
        "bands": [[0, 0.05, 0.0], [1, worst_mean, 0.0]],
        "stability_score": 0.9,
        "confidence_score": 0.9,
        "artifact_fraction": 0.0,
    })


class TestEvaluateObject:
    """Tests for evaluating catalog objects."""

    def test_decision_attached_to_catalog(self, vision, governance):
        """The object is upserted and carries its latest decision."""
        obj = SpectralObject(
            id="checkout_latency_spike#1",
            kind="trace_pattern",
            origin=Origin(domain="shop.example.com"),
            stability=0.8,
            confidence=0.93,
        )

        decision = vision.evaluate_object(obj, [(0, 0.1, 0.05)], 0.05, governance)

        stored = vision.catalog.get_by_id("checkout_latency_spike#1")
        assert stored is not None
        assert decision.object_id == obj.id
        assert stored.metadata[METADATA_KEY] == decision.to_dict()

    def test_uses_object_scores(self, vision, governance):
        """Stability and confidence come from the object itself."""
        obj = SpectralObject(id="weak", kind="other", origin=Origin(domain="d"), stability=0.1, confidence=0.1)
        decision = vision.evaluate_object(obj, [(0, 0.0, 0.0)], 0.0, governance)

        assert decision.promotion_score == pytest.approx(0.28)
        assert decision.promotion_passed is False

    def test_shared_catalog(self, governance):
        """A caller-supplied catalog is used as-is."""
        catalog = SpectralCatalog()
        vision = SpectralVision(params=VisionParameters(), catalog=catalog)
        vision.evaluate_object(SpectralObject.new("dom_sheet", Origin(domain="d")), [], 0.0, governance)

        assert len(catalog) == 1


class TestEvaluateBatch:
    """Tests for concurrent batch evaluation."""

    def test_sorted_deepest_first(self, vision, governance):
        """Results are ordered by depth, then by object id."""
        requests = [
            request("c-sniff", 0.9),
            request("b-full", 0.1),
            request("a-light", 0.5),
            request("a-full", 0.0),
        ]

        decisions = vision.evaluate_batch(requests, governance, max_workers=3)

        assert [d.object_id for d in decisions] == ["a-full", "b-full", "a-light", "c-sniff"]
        assert [d.excavation_depth for d in decisions] == [
            ExcavationDepth.DIG_FULL,
            ExcavationDepth.DIG_FULL,
            ExcavationDepth.DIG_LIGHT,
            ExcavationDepth.SNIFF,
        ]

    def test_matches_sequential(self, vision, governance):
        """Concurrency does not change any decision."""
        requests = [request(f"obj-{i}", i / 10) for i in range(10)]

        batch = {d.object_id: d for d in vision.evaluate_batch(requests, governance, max_workers=4)}
        for r in requests:
            single = vision.engine.evaluate(
                r.bands, r.stability_score, r.confidence_score, r.artifact_fraction, governance, r.object_id
            )
            assert batch[r.object_id] == single

    def test_empty_batch(self, vision, governance):
        """No requests, no decisions."""
        assert vision.evaluate_batch([], governance) == []

    def test_batch_is_logged(self, tmp_path, governance):
        """Every batch decision reaches the decision log."""
        log = DecisionLogger(tmp_path)
        vision = SpectralVision(params=VisionParameters(), decision_log=log)
        vision.evaluate_batch([request("a", 0.1), request("b", 0.2)], governance)
        log.close()

        assert DecisionLogReader(tmp_path).count_records(hours=1, kind=KIND_VISION) == 2


class TestHelpers:
    """Tests for prioritize and deepest."""

    def test_deepest(self, vision, governance):
        """Deepest depth of a batch, SNIFF when empty."""
        decisions = [vision.engine.evaluate([(0, m, 0.0)], 0.5, 0.5, 0.0, governance) for m in (0.9, 0.5)]

        assert deepest(decisions) == ExcavationDepth.DIG_LIGHT
        assert deepest([]) == ExcavationDepth.SNIFF

    def test_prioritize_is_stable_for_ties(self, vision, governance):
        """Equal depths fall back to identifier order."""
        decisions = [
            vision.engine.evaluate([], 0.5, 0.5, 0.0, governance, object_id=name)
            for name in ("zeta", "alpha", "mu")
        ]
        assert [d.object_id for d in prioritize(decisions)] == ["alpha", "mu", "zeta"]


class TestRouteAndStatus:
    """Tests for routing through the orchestrator and status reporting."""

    def test_route_is_logged_by_session(self, tmp_path):
        """Route decisions are keyed by region/session in the log."""
        log = DecisionLogger(tmp_path)
        vision = SpectralVision(params=VisionParameters(), decision_log=log)
        state = RouteState(
            region_session="eu-west/session-7",
            density=0.85,
            fear_level=0.1,
            fear_rate_norm=0.0,
            psych_load=0.1,
            governance=GovernanceAudit(soul_modeling_forbidden=False, non_interference_required=False),
        )

        decision = vision.route(state, audit_token="hex-token")
        log.close()

        assert decision.action == RouteAction.OBSERVE_ONLY
        record = DecisionLogReader(tmp_path).get_latest("eu-west/session-7", kind=KIND_ROUTE)
        assert record.as_route_decision() == decision

    def test_status(self, tmp_path, governance):
        """Status reports parameters, catalog contents and log location."""
        log = DecisionLogger(tmp_path)
        vision = SpectralVision(params=VisionParameters(), decision_log=log)
        vision.catalog.upsert(SpectralObject(
            id="stable", kind="api_shape", origin=Origin(domain="d"), stability=0.95, drift=0.0,
        ))

        status = vision.get_status()
        log.close()

        assert status["parameters"] == VisionParameters().to_dict()
        assert status["catalog_size"] == 1
        assert status["high_stability_objects"] == ["stable"]
        assert status["decision_log"] == str(tmp_path)

    def test_status_stability_cutoff_ignores_promotion_threshold(self):
        """The high-stability listing uses the catalog cutoff, not the promotion gate."""
        vision = SpectralVision(params=VisionParameters(promotion_threshold=0.5))
        vision.catalog.upsert(SpectralObject(
            id="middling", kind="api_shape", origin=Origin(domain="d"), stability=0.6, drift=0.1,
        ))
        vision.catalog.upsert(SpectralObject(
            id="stable", kind="api_shape", origin=Origin(domain="d"), stability=0.85, drift=0.1,
        ))

        status = vision.get_status()

        assert HIGH_STABILITY_THRESHOLD == 0.8
        assert status["high_stability_objects"] == ["stable"]
