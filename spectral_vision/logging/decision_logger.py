"""
Decision Logger - Append-only JSONL log of engine decisions.

Design principles:
- Never lose data (append-only, fsync on flush)
- Decisions are logged verbatim, keyed by object id
- Always replayable (structured JSONL)
- Minimal overhead (buffered writes)
"""

from __future__ import annotations

import json
import os
import threading

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

from ..types import RouteDecision, VisionDecision

KIND_VISION = "vision"
KIND_ROUTE = "route"


@dataclass(frozen=True, slots=True)
class DecisionRecord:
    """
    One logged decision.

    Attributes:
        recorded_at: When the decision was logged
        kind: "vision" or "route"
        key: Object id (vision) or region/session key (route)
        decision: Serialized decision
    """

    recorded_at: datetime
    kind: str
    key: str | None
    decision: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSONL logging."""
        return {
            "recorded_at": self.recorded_at.isoformat(),
            "kind": self.kind,
            "key": self.key,
            "decision": self.decision,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DecisionRecord:
        """
        Deserialize from dictionary.

        Raises:
            KeyError: If a required field is missing.
        """
        return cls(
            recorded_at=datetime.fromisoformat(data["recorded_at"]),
            kind=data["kind"],
            key=data.get("key"),
            decision=data["decision"],
        )

    def as_vision_decision(self) -> VisionDecision:
        """Rebuild the VisionDecision from a vision record."""
        if self.kind != KIND_VISION:
            raise ValueError(f"Record kind is {self.kind!r}, not {KIND_VISION!r}")
        return VisionDecision.from_dict(self.decision)

    def as_route_decision(self) -> RouteDecision:
        """Rebuild the RouteDecision from a route record."""
        if self.kind != KIND_ROUTE:
            raise ValueError(f"Record kind is {self.kind!r}, not {KIND_ROUTE!r}")
        return RouteDecision.from_dict(self.decision)


class DecisionLogger:
    """
    Thread-safe, append-only JSONL logger for decisions.

    Usage:
        log = DecisionLogger("./decisions")
        log.log_vision(decision)
        log.flush()
    """

    def __init__(
        self,
        log_directory: str | Path,
        buffer_size: int = 10,
        rotate_daily: bool = True,
    ):
        """
        Initialize the decision logger.

        Args:
            log_directory: Directory for log files
            buffer_size: Number of records to buffer before flush
            rotate_daily: If True, creates new file each day
        """
        self.log_directory = Path(log_directory)
        self.log_directory.mkdir(parents=True, exist_ok=True)

        self.buffer_size = buffer_size
        self.rotate_daily = rotate_daily

        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._current_date: str | None = None
        self._file_handle: TextIO | None = None

    def log_vision(self, decision: VisionDecision) -> DecisionRecord:
        """Log a vision decision keyed by its object id."""
        return self._append(KIND_VISION, decision.object_id, decision.to_dict())

    def log_route(self, decision: RouteDecision, region_session: str | None = None) -> DecisionRecord:
        """Log a route decision keyed by its region/session window."""
        return self._append(KIND_ROUTE, region_session, decision.to_dict())

    def _append(self, kind: str, key: str | None, decision: dict[str, Any]) -> DecisionRecord:
        record = DecisionRecord(
            recorded_at=datetime.now(),
            kind=kind,
            key=key,
            decision=decision,
        )
        with self._lock:
            self._buffer.append(record.to_dict())

            if len(self._buffer) >= self.buffer_size:
                self._flush()
        return record

    def flush(self) -> None:
        """Force flush the buffer to disk."""
        with self._lock:
            self._flush()

    def _flush(self) -> None:
        """Internal flush - must hold lock."""
        if not self._buffer:
            return

        handle = self._get_file_handle()

        for record in self._buffer:
            line = json.dumps(record, separators=(",", ":"))
            handle.write(line + "\n")

        handle.flush()
        os.fsync(handle.fileno())

        self._buffer.clear()

    def _get_file_handle(self) -> TextIO:
        """Get current file handle, rotating if necessary."""
        today = datetime.now().strftime("%Y-%m-%d")

        if self.rotate_daily and self._current_date != today:
            if self._file_handle:
                self._file_handle.close()
            self._current_date = today
            self._file_handle = None

        if self._file_handle is None:
            self._file_handle = open(self.current_log_path, "a", encoding="utf-8")

        return self._file_handle

    def close(self) -> None:
        """Flush and close the logger."""
        with self._lock:
            self._flush()
            if self._file_handle:
                self._file_handle.close()
                self._file_handle = None

    def __enter__(self) -> DecisionLogger:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    @property
    def current_log_path(self) -> Path:
        """Get the current log file path."""
        if self.rotate_daily:
            today = datetime.now().strftime("%Y-%m-%d")
            return self.log_directory / f"decisions_{today}.jsonl"
        return self.log_directory / "decisions.jsonl"
