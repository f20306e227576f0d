"""
Example: Evaluating spectral objects and routing a session.

This example demonstrates:
1. Building parameters and a governance snapshot
2. Evaluating a catalog object
3. Evaluating a batch and prioritizing by depth
4. Routing an interactive session window
5. Replaying the decision log
"""

import random
import tempfile

from spectral_vision import (
    EvaluationRequest,
    GovernanceAudit,
    GovernanceMode,
    GovernanceSnapshot,
    RouteState,
    SpectralVision,
    VisionParameters,
)
from spectral_vision.catalog import Origin, SpectralObject
from spectral_vision.logging import DecisionLogger, DecisionLogReader


def random_bands(n: int = 5) -> list[tuple[int, float, float]]:
    """Simulates per-band power statistics from an upstream sensor."""
    return [(i, random.uniform(0.0, 0.5), random.uniform(0.0, 0.2)) for i in range(n)]


def main():
    print("=" * 60)
    print("Spectral Vision - Basic Usage Example")
    print("=" * 60)

    log_dir = tempfile.mkdtemp(prefix="spectral_vision_")
    decision_log = DecisionLogger(log_dir, buffer_size=1)

    vision = SpectralVision(
        params=VisionParameters(promotion_threshold=0.75),
        decision_log=decision_log,
    )
    governance = GovernanceSnapshot(
        mode=GovernanceMode.ACTIVE_GOVERNED,
        quantification_active=True,
        soul_modeling_forbidden=True,
    )

    # 1. Evaluate a catalog object
    print("\n1. Evaluating a catalog object...")
    obj = SpectralObject(
        id="checkout_latency_spike#1",
        kind="trace_pattern",
        origin=Origin(domain="shop.example.com", system="checkout_service"),
        stability=0.8,
        drift=0.4,
        confidence=0.93,
    )
    decision = vision.evaluate_object(obj, random_bands(), 0.05, governance)
    print(vision.engine.explain_decision(decision))

    # 2. Evaluate a batch
    print("\n2. Evaluating a batch of 10 objects...")
    requests = [
        EvaluationRequest(
            object_id=f"object-{i}",
            bands=tuple(random_bands()),
            stability_score=random.random(),
            confidence_score=random.random(),
            artifact_fraction=random.uniform(0.0, 0.3),
        )
        for i in range(10)
    ]
    for d in vision.evaluate_batch(requests, governance, max_workers=4):
        print(f"   {d.object_id:10} depth={d.excavation_depth.value:9} promotion={d.promotion_score:.2f}")

    # 3. Route a session window
    print("\n3. Routing a session window...")
    state = RouteState(
        region_session="eu-west/2026-01-22T22:00/session-7",
        density=0.85,
        fear_level=0.1,
        fear_rate_norm=0.0,
        psych_load=0.1,
        governance=GovernanceAudit(soul_modeling_forbidden=False, non_interference_required=False),
    )
    route = vision.route(state)
    print(f"   zone={route.zone.value} risk={route.risk.x:.2f} ({route.risk.band.value}) "
          f"action={route.action.value}")

    # 4. Replay the log
    decision_log.close()
    reader = DecisionLogReader(log_dir)
    print(f"\n4. Decision log holds {reader.count_records(hours=1)} records in {log_dir}")


if __name__ == "__main__":
    main()
