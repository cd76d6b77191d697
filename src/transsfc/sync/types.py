"""
Core types, enums, and data classes for the synchronization engine.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum


class PathState(Enum):
    """Scheduling state of a template path."""

    IDLE = "idle"
    PENDING_DEBOUNCE = "pending_debounce"
    QUEUED = "queued"
    PROCESSING = "processing"


class CatalogUpdate(Enum):
    """Outcome of applying entries to one language catalog."""

    UNCHANGED = "unchanged"  # Merged result equals the catalog on disk
    WRITTEN = "written"
    FAILED = "failed"  # Malformed catalog or I/O error, nothing written


@dataclass
class SchedulerMetrics:
    """Counters for the debounced scheduler."""

    events_received: int = 0
    runs_started: int = 0
    runs_succeeded: int = 0
    runs_failed: int = 0
    in_flight: int = 0
    peak_in_flight: int = 0

    last_failure: datetime | None = None

    def record_start(self) -> None:
        """Record a processing run entering its slot."""
        self.runs_started += 1
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)

    def record_finish(self, succeeded: bool) -> None:
        """Record a processing run leaving its slot."""
        self.in_flight -= 1
        if succeeded:
            self.runs_succeeded += 1
        else:
            self.runs_failed += 1
            self.last_failure = datetime.now()

    def to_dict(self) -> dict[str, int | str | None]:
        """Convert metrics to dictionary for logging."""
        data = asdict(self)
        data["last_failure"] = (
            self.last_failure.isoformat() if self.last_failure else None
        )
        return data  # pyright: ignore[reportReturnType]
