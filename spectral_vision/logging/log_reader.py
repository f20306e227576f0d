"""
Decision Log Reader - Reading and filtering of JSONL decision logs.

Supports:
- Time-windowed reads
- Filtering by kind and key (object id or region/session)
- Memory-efficient streaming
"""

from __future__ import annotations

import json
import logging

from collections.abc import Generator
from datetime import datetime, timedelta
from pathlib import Path

from .decision_logger import DecisionRecord

logger = logging.getLogger(__name__)


class DecisionLogReader:
    """
    Reads and filters decision records from JSONL logs.

    Usage:
        reader = DecisionLogReader("./decisions")
        records = reader.read_window(hours=1, key="checkout#1")
    """

    def __init__(self, log_directory: str | Path):
        """
        Initialize the log reader.

        Args:
            log_directory: Directory containing log files
        """
        self.log_directory = Path(log_directory)

    def read_window(
        self,
        hours: int | None = None,
        minutes: int | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        kind: str | None = None,
        key: str | None = None,
    ) -> list[DecisionRecord]:
        """
        Read records within a time window.

        Args:
            hours: Window size in hours (alternative to start/end)
            minutes: Window size in minutes (alternative to start/end)
            start_time: Explicit start time
            end_time: Explicit end time (defaults to now)
            kind: Filter by record kind ("vision" or "route")
            key: Filter by object id or region/session key

        Returns:
            List of DecisionRecord objects
        """
        return list(self.stream_window(
            hours=hours,
            minutes=minutes,
            start_time=start_time,
            end_time=end_time,
            kind=kind,
            key=key,
        ))

    def stream_window(
        self,
        hours: int | None = None,
        minutes: int | None = None,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
        kind: str | None = None,
        key: str | None = None,
    ) -> Generator[DecisionRecord, None, None]:
        """
        Stream records within a time window (memory efficient).

        Same arguments as read_window, but yields records one by one.
        """
        if end_time is None:
            end_time = datetime.now()

        if start_time is None:
            if hours is not None:
                start_time = end_time - timedelta(hours=hours)
            elif minutes is not None:
                start_time = end_time - timedelta(minutes=minutes)
            else:
                start_time = end_time - timedelta(hours=1)

        for log_file in self._get_files_for_window(start_time, end_time):
            yield from self._stream_file(log_file, start_time, end_time, kind, key)

    def _get_files_for_window(
        self,
        start_time: datetime,
        end_time: datetime,
    ) -> list[Path]:
        """Get log files that might contain records in the window."""
        if not self.log_directory.exists():
            return []

        relevant_files = []
        for f in sorted(self.log_directory.glob("decisions*.jsonl")):
            # Format: decisions_YYYY-MM-DD.jsonl
            try:
                date_str = f.stem.replace("decisions_", "")
                file_date = datetime.strptime(date_str, "%Y-%m-%d")

                file_end = file_date.replace(hour=23, minute=59, second=59, microsecond=999999)
                if file_date <= end_time and file_end >= start_time:
                    relevant_files.append(f)
            except ValueError:
                # Non-dated file, always include
                relevant_files.append(f)

        return relevant_files

    def _stream_file(
        self,
        log_file: Path,
        start_time: datetime,
        end_time: datetime,
        kind: str | None,
        key: str | None,
    ) -> Generator[DecisionRecord, None, None]:
        """Stream records from a single log file."""
        with open(log_file, encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    record = DecisionRecord.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, ValueError):
                    logger.warning(f"Skipping corrupt record at {log_file.name}:{line_number}")
                    continue

                if record.recorded_at < start_time or record.recorded_at > end_time:
                    continue
                if kind and record.kind != kind:
                    continue
                if key and record.key != key:
                    continue

                yield record

    def count_records(
        self,
        hours: int | None = None,
        minutes: int | None = None,
        kind: str | None = None,
    ) -> int:
        """Count records in a window without loading all into memory."""
        count = 0
        for _ in self.stream_window(hours=hours, minutes=minutes, kind=kind):
            count += 1
        return count

    def get_latest(self, key: str, kind: str | None = None, hours: int = 24) -> DecisionRecord | None:
        """Most recent record for an object id or region/session key."""
        latest = None
        for record in self.stream_window(hours=hours, kind=kind, key=key):
            if latest is None or record.recorded_at >= latest.recorded_at:
                latest = record
        return latest
