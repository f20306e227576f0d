"""
Tests for the append-only decision log and its reader.
"""

import json

from datetime import datetime, timedelta

import pytest

from spectral_vision.decision import VisionEngine, decide_route
from spectral_vision.logging import (
    KIND_ROUTE,
    KIND_VISION,
    DecisionLogger,
    DecisionLogReader,
    DecisionRecord,
)
from spectral_vision.types import (
    GovernanceAudit,
    GovernanceMode,
    GovernanceSnapshot,
    RouteAction,
)

GOVERNANCE = GovernanceSnapshot(
    mode=GovernanceMode.ACTIVE_GOVERNED,
    quantification_active=True,
    soul_modeling_forbidden=True,
)


def vision_decision(object_id):
    """Helper to produce a real vision decision."""
    return VisionEngine().evaluate([(0, 0.1, 0.05)], 0.9, 0.9, 0.0, GOVERNANCE, object_id=object_id)


class TestDecisionLogger:
    """Tests for DecisionLogger."""

    def test_buffered_until_flush(self, tmp_path):
        """Records stay in memory until the buffer fills or flush is called."""
        log = DecisionLogger(tmp_path, buffer_size=10)
        log.log_vision(vision_decision("a"))

        assert not log.current_log_path.exists()

        log.flush()
        assert len(log.current_log_path.read_text().splitlines()) == 1
        log.close()

    def test_buffer_size_triggers_flush(self, tmp_path):
        """Reaching buffer_size writes to disk."""
        log = DecisionLogger(tmp_path, buffer_size=2)
        log.log_vision(vision_decision("a"))
        log.log_vision(vision_decision("b"))

        assert len(log.current_log_path.read_text().splitlines()) == 2
        log.close()

    def test_daily_file_name(self, tmp_path):
        """Rotating logs are named by date; non-rotating logs are not."""
        today = datetime.now().strftime("%Y-%m-%d")

        assert DecisionLogger(tmp_path).current_log_path.name == f"decisions_{today}.jsonl"
        assert DecisionLogger(tmp_path, rotate_daily=False).current_log_path.name == "decisions.jsonl"

    def test_records_are_json_lines(self, tmp_path):
        """Each line is a standalone JSON object with kind and key."""
        with DecisionLogger(tmp_path, rotate_daily=False) as log:
            log.log_vision(vision_decision("obj-1"))
            log.log_route(decide_route(0.1, 0.1, 0.1, GovernanceAudit(False, False)), region_session="eu/s1")

        lines = (tmp_path / "decisions.jsonl").read_text().splitlines()
        first, second = (json.loads(line) for line in lines)

        assert first["kind"] == KIND_VISION
        assert first["key"] == "obj-1"
        assert first["decision"]["excavation_depth"] == "dig_full"
        assert second["kind"] == KIND_ROUTE
        assert second["key"] == "eu/s1"
        assert second["decision"]["action"] == "full_interaction"

    def test_record_rebuilds_decision(self, tmp_path):
        """Logged records convert back into decision objects."""
        decision = vision_decision("obj-1")
        with DecisionLogger(tmp_path) as log:
            record = log.log_vision(decision)

        assert record.as_vision_decision() == decision
        with pytest.raises(ValueError):
            record.as_route_decision()

    def test_close_appends(self, tmp_path):
        """A reopened logger appends instead of truncating."""
        with DecisionLogger(tmp_path) as log:
            log.log_vision(vision_decision("a"))
        with DecisionLogger(tmp_path) as log:
            log.log_vision(vision_decision("b"))
            path = log.current_log_path

        assert len(path.read_text().splitlines()) == 2


class TestDecisionLogReader:
    """Tests for DecisionLogReader."""

    @pytest.fixture
    def populated(self, tmp_path):
        """Log directory with two vision and one route record."""
        with DecisionLogger(tmp_path) as log:
            log.log_vision(vision_decision("a"))
            log.log_vision(vision_decision("b"))
            log.log_route(decide_route(0.9, 0.9, 0.9, GovernanceAudit(False, False)), region_session="eu/s1")
        return tmp_path

    def test_read_window(self, populated):
        """All records fall inside the default window."""
        records = DecisionLogReader(populated).read_window(hours=1)
        assert [r.kind for r in records] == [KIND_VISION, KIND_VISION, KIND_ROUTE]

    def test_filters(self, populated):
        """Filtering by kind and key."""
        reader = DecisionLogReader(populated)

        assert reader.count_records(hours=1, kind=KIND_VISION) == 2
        assert [r.key for r in reader.read_window(hours=1, key="b")] == ["b"]

    def test_window_excludes_old_records(self, populated):
        """Records before start_time are skipped."""
        reader = DecisionLogReader(populated)
        future = datetime.now() + timedelta(minutes=5)

        assert reader.read_window(start_time=future, end_time=future + timedelta(minutes=1)) == []

    def test_get_latest(self, populated):
        """Latest record for a key, rebuilt as a decision."""
        record = DecisionLogReader(populated).get_latest("eu/s1", kind=KIND_ROUTE)

        assert record is not None
        assert record.as_route_decision().action == RouteAction.TERMINATE_SAFE
        assert DecisionLogReader(populated).get_latest("unknown") is None

    def test_skips_corrupt_lines(self, tmp_path, caplog):
        """Corrupt lines are skipped with a warning."""
        good = DecisionRecord(
            recorded_at=datetime.now(),
            kind=KIND_VISION,
            key="a",
            decision=vision_decision("a").to_dict(),
        )
        (tmp_path / "decisions.jsonl").write_text(
            "{not json\n" + json.dumps({"kind": "vision"}) + "\n" + json.dumps(good.to_dict()) + "\n"
        )

        records = DecisionLogReader(tmp_path).read_window(hours=1)

        assert [r.key for r in records] == ["a"]
        assert "Skipping corrupt record" in caplog.text

    def test_missing_directory(self, tmp_path):
        """A directory that does not exist yields nothing."""
        assert DecisionLogReader(tmp_path / "nope").read_window(hours=1) == []
