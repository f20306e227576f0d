"""
Command-line interface for Spectral Vision.

Evaluate spectral objects, resolve routes, excavate objects to NDJSON
and inspect the decision log.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pathlib import Path
from typing import Any

from .catalog import GovernanceAbortError, excavate_spectral_object, write_ndjson
from .config import create_default_config_file, load_config
from .logging import DecisionLogger, DecisionLogReader
from .types import EvaluationRequest, GovernanceSnapshot, RouteState
from .vision import SpectralVision, deepest

DEFAULT_LOG_DIRECTORY = "./decisions"


def _read_json(path: str) -> Any:
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{path} is not valid JSON: {e}") from e


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spectral-vision",
        description="Spectral Vision - band safety, excavation and routing decisions",
    )
    parser.add_argument("--config", "-c", help="Path to parameters JSON file")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIRECTORY, help="Decision log directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # evaluate command
    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate one object or a batch")
    evaluate_parser.add_argument("input", help="JSON file with governance and object(s)")
    evaluate_parser.add_argument("--workers", type=int, help="Thread pool size for batches")
    evaluate_parser.add_argument("--record", action="store_true", help="Append decisions to the log")
    evaluate_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # route command
    route_parser = subparsers.add_parser("route", help="Resolve the route for a session window")
    route_parser.add_argument("input", help="JSON file with the route state")
    route_parser.add_argument("--record", action="store_true", help="Append the decision to the log")
    route_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # excavate command
    excavate_parser = subparsers.add_parser("excavate", help="Validate objects and export NDJSON")
    excavate_parser.add_argument("input", help="JSON file with governance and objects")
    excavate_parser.add_argument("--out", "-o", default="spectral_sniffing.ndjson", help="Output NDJSON path")

    # history command
    history_parser = subparsers.add_parser("history", help="Show logged decisions")
    history_parser.add_argument("--key", "-k", help="Object id or region/session key")
    history_parser.add_argument("--kind", choices=["vision", "route"], help="Record kind")
    history_parser.add_argument("--hours", type=int, default=24, help="Window in hours")

    # status command
    subparsers.add_parser("status", help="Show parameters and log location")

    # init command
    subparsers.add_parser("init", help="Create default configuration file")

    return parser


def _run_evaluate(vision: SpectralVision, args: argparse.Namespace) -> int:
    data = _read_json(args.input)
    governance = GovernanceSnapshot.from_dict(data["governance"])

    if "objects" in data:
        requests = [EvaluationRequest.from_dict(o) for o in data["objects"]]
        decisions = vision.evaluate_batch(requests, governance, max_workers=args.workers)
    else:
        request = EvaluationRequest.from_dict(data)
        decisions = [vision.evaluate(
            bands=request.bands,
            stability_score=request.stability_score,
            confidence_score=request.confidence_score,
            artifact_fraction=request.artifact_fraction,
            governance=governance,
            object_id=request.object_id,
        )]

    if args.json:
        print(json.dumps([d.to_dict() for d in decisions], indent=2))
    else:
        for decision in decisions:
            print(vision.engine.explain_decision(decision))
        if len(decisions) > 1:
            print(f"Deepest authorized depth: {deepest(decisions).value}")

    return 0


def _run_route(vision: SpectralVision, args: argparse.Namespace) -> int:
    data = _read_json(args.input)
    state = RouteState.from_dict(data)
    decision = vision.route(state, audit_token=data.get("audit_token"))

    if args.json:
        print(json.dumps(decision.to_dict(), indent=2))
    else:
        print(f"Session: {state.region_session or '-'}")
        print(f"Zone:    {decision.zone.value}")
        print(f"Risk:    {decision.risk.x:.3f} ({decision.risk.band.value})")
        print(f"Action:  {decision.action.value}")
    return 0


def _run_excavate(args: argparse.Namespace) -> int:
    data = _read_json(args.input)
    governance = GovernanceSnapshot.from_dict(data["governance"])
    documents = data.get("objects", [])

    objects = [excavate_spectral_object(doc, governance) for doc in documents]
    count = write_ndjson(objects, args.out)
    print(f"Excavated {count} objects to {args.out}")
    return 0


def _run_history(args: argparse.Namespace) -> int:
    reader = DecisionLogReader(args.log_dir)
    records = reader.read_window(hours=args.hours, kind=args.kind, key=args.key)
    for record in records:
        decision = record.decision
        outcome = decision.get("excavation_depth") or decision.get("action")
        print(f"  {record.recorded_at.isoformat(timespec='seconds')} | {record.kind:6} | "
              f"{record.key or '-'} | {outcome}")
    if not records:
        print("No decisions in window")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "init":
        create_default_config_file(args.config or "./spectral_vision_config.json")
        return 0

    try:
        if args.command == "excavate":
            return _run_excavate(args)

        if args.command == "history":
            return _run_history(args)

        params = load_config(args.config)
        record = getattr(args, "record", False)
        decision_log = DecisionLogger(Path(args.log_dir)) if record else None

        vision = SpectralVision(params=params, decision_log=decision_log)
        try:
            if args.command == "evaluate":
                return _run_evaluate(vision, args)
            if args.command == "route":
                return _run_route(vision, args)
            if args.command == "status":
                print(json.dumps(vision.get_status(), indent=2))
                return 0
        finally:
            if decision_log is not None:
                decision_log.close()

    except GovernanceAbortError as e:
        print(f"Aborted: {e}", file=sys.stderr)
        return 2
    except (OSError, KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
