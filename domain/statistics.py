"""
Statistics-related domain models.

Counters tracking how many events reach each selection stage.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Optional


class EventOutcome(Enum):
    """Last stage an event reached in the reconstructed-event selection."""

    REJECTED_VERTEX_Z = "rejected_vertex_z"
    REJECTED_NO_MC_COLLISION = "rejected_no_mc_collision"
    REJECTED_GAP = "rejected_gap"
    REJECTED_CONTRIBUTORS = "rejected_contributors"
    REJECTED_TRACK_COUNT = "rejected_track_count"
    SIGNAL = "signal"
    BACKGROUND = "background"

    @property
    def is_emitted(self) -> bool:
        return self in (EventOutcome.SIGNAL, EventOutcome.BACKGROUND)


@dataclass
class SelectionStatistics:
    """
    Mutable per-run selection counters.

    Owned by one analysis instance; instances from parallel workers are
    combined with merge().
    """

    events_seen: int = 0
    rejected_vertex_z: int = 0
    rejected_no_mc_collision: int = 0
    rejected_gap: int = 0
    rejected_contributors: int = 0
    rejected_track_count: int = 0
    signal: int = 0
    background: int = 0
    generated_events: int = 0
    generated_candidates: int = 0
    tracks_seen: int = 0
    tracks_selected: int = 0
    tracks_identified: int = 0
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    def record(self, outcome: EventOutcome) -> None:
        """Count one processed event by its outcome."""
        self.events_seen += 1
        counter = outcome.value
        setattr(self, counter, getattr(self, counter) + 1)

    def merge(self, other: 'SelectionStatistics') -> 'SelectionStatistics':
        """Add the counters of another instance into this one."""
        for f in fields(self):
            if f.name in ("start_time", "end_time"):
                continue
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))
        self.start_time = min(self.start_time, other.start_time)
        if other.end_time is not None:
            self.end_time = other.end_time if self.end_time is None else max(self.end_time, other.end_time)
        return self

    def finish(self) -> None:
        self.end_time = datetime.now()

    @property
    def emitted(self) -> int:
        return self.signal + self.background

    @property
    def acceptance(self) -> float:
        """Fraction of seen events that were emitted, in percent."""
        if self.events_seen == 0:
            return 0.0
        return (self.emitted / self.events_seen) * 100

    @property
    def total_time_sec(self) -> float:
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        counters = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in ("start_time", "end_time")
        }
        return {
            **counters,
            "emitted": self.emitted,
            "acceptance": f"{self.acceptance:.3f}%",
            "total_time_sec": f"{self.total_time_sec:.1f}",
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }
