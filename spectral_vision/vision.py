"""
Spectral Vision - Main orchestration module.

This is the primary entry point for using Spectral Vision.
Brings the engine, the catalog and the decision log together.
"""

from __future__ import annotations

import logging

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .catalog import HIGH_STABILITY_THRESHOLD, SpectralCatalog, SpectralObject
from .config import load_config
from .decision import VisionEngine, decide_route_for_state
from .logging import DecisionLogger
from .types import (
    BandSample,
    EvaluationRequest,
    ExcavationDepth,
    GovernanceSnapshot,
    RouteDecision,
    RouteState,
    VisionDecision,
    VisionParameters,
)

logger = logging.getLogger(__name__)

METADATA_KEY = "spectral_vision"


class SpectralVision:
    """
    Main orchestration class for Spectral Vision.

    Usage:
        vision = SpectralVision()

        # Evaluate one object
        decision = vision.evaluate(bands, 0.9, 0.9, 0.05, governance)

        # Stop work if governance says so
        if decision.requires_abort:
            flush_pending_work()
    """

    def __init__(
        self,
        params: VisionParameters | None = None,
        catalog: SpectralCatalog | None = None,
        decision_log: DecisionLogger | None = None,
    ):
        """
        Initialize Spectral Vision.

        Args:
            params: Thresholds and weights (loads from file if not provided)
            catalog: Catalog to attach decisions to (new empty one if not provided)
            decision_log: Optional append-only log receiving every decision
        """
        self.params = params or load_config()
        self.catalog = catalog if catalog is not None else SpectralCatalog()
        self.decision_log = decision_log

        self.engine = VisionEngine(self.params)

    def evaluate(
        self,
        bands: Iterable[BandSample | tuple[int, float, float]],
        stability_score: float | None,
        confidence_score: float | None,
        artifact_fraction: float | None,
        governance: GovernanceSnapshot,
        object_id: str | None = None,
    ) -> VisionDecision:
        """
        Evaluate one object and record the decision.

        Returns:
            VisionDecision
        """
        decision = self.engine.evaluate(
            bands=bands,
            stability_score=stability_score,
            confidence_score=confidence_score,
            artifact_fraction=artifact_fraction,
            governance=governance,
            object_id=object_id,
        )
        self._record(decision)
        return decision

    def evaluate_object(
        self,
        obj: SpectralObject,
        bands: Iterable[BandSample | tuple[int, float, float]],
        artifact_fraction: float | None,
        governance: GovernanceSnapshot,
    ) -> VisionDecision:
        """
        Evaluate a catalog object using its own stability and confidence.

        The decision is attached to the object's metadata and the object
        is upserted into the catalog.

        Returns:
            VisionDecision
        """
        decision = self.evaluate(
            bands=bands,
            stability_score=obj.stability,
            confidence_score=obj.confidence,
            artifact_fraction=artifact_fraction,
            governance=governance,
            object_id=obj.id,
        )

        stored = self.catalog.upsert(obj)
        stored.touch(metadata={METADATA_KEY: decision.to_dict()})

        return decision

    def evaluate_batch(
        self,
        requests: Iterable[EvaluationRequest],
        governance: GovernanceSnapshot,
        max_workers: int | None = None,
    ) -> list[VisionDecision]:
        """
        Evaluate many objects concurrently under one governance snapshot.

        Objects are independent, so work is spread over a thread pool
        with no ordering between them.

        Args:
            requests: Per-object inputs
            governance: Governance snapshot shared by the batch
            max_workers: Thread pool size (executor default if None)

        Returns:
            Decisions sorted deepest first, then by object id
        """
        requests = list(requests)
        if not requests:
            return []

        def run(request: EvaluationRequest) -> VisionDecision:
            return self.engine.evaluate(
                bands=request.bands,
                stability_score=request.stability_score,
                confidence_score=request.confidence_score,
                artifact_fraction=request.artifact_fraction,
                governance=governance,
                object_id=request.object_id,
            )

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            decisions = list(executor.map(run, requests))

        for decision in decisions:
            self._record(decision)

        logger.info(f"Batch evaluated: {len(decisions)} objects")
        return prioritize(decisions)

    def route(
        self,
        state: RouteState,
        audit_token: str | None = None,
    ) -> RouteDecision:
        """
        Resolve the route action for one region/session window.

        Returns:
            RouteDecision
        """
        decision = decide_route_for_state(state, audit_token=audit_token)
        if self.decision_log is not None:
            self.decision_log.log_route(decision, region_session=state.region_session)
        return decision

    def _record(self, decision: VisionDecision) -> None:
        if self.decision_log is not None:
            self.decision_log.log_vision(decision)

    def get_status(self) -> dict[str, Any]:
        """
        Get current system status.

        Returns information about:
        - Parameters
        - Catalog size and promotable objects
        - Decision log location
        """
        promotable = [
            o.id for o in self.catalog.list_high_stability(HIGH_STABILITY_THRESHOLD)
        ]
        return {
            "parameters": self.params.to_dict(),
            "catalog_size": len(self.catalog),
            "high_stability_objects": promotable,
            "decision_log": (
                str(self.decision_log.log_directory) if self.decision_log else None
            ),
        }


def prioritize(decisions: Iterable[VisionDecision]) -> list[VisionDecision]:
    """Sort decisions deepest excavation first, ties broken by object id."""
    by_id = sorted(decisions, key=lambda d: d.object_id or "")
    return sorted(by_id, key=lambda d: d.excavation_depth, reverse=True)


def deepest(decisions: Iterable[VisionDecision]) -> ExcavationDepth:
    """Deepest depth among decisions (SNIFF if there are none)."""
    return max((d.excavation_depth for d in decisions), default=ExcavationDepth.SNIFF)
