"""
Decision logging subsystem for Spectral Vision.

Append-only JSONL logs that are replayable and auditable.
"""

from .decision_logger import KIND_ROUTE, KIND_VISION, DecisionLogger, DecisionRecord
from .log_reader import DecisionLogReader

__all__ = [
    "KIND_ROUTE",
    "KIND_VISION",
    "DecisionLogReader",
    "DecisionLogger",
    "DecisionRecord",
]
