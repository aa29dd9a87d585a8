"""
Fixed-capacity rolling window of telemetry and scores.

A window is never mutated: ``append`` returns a new window holding the newest
entry and dropping the oldest once capacity is reached. Readers that still
hold the previous window keep a complete, consistent view of it.
"""

from typing import Iterable, Optional, Sequence, Tuple

from ..schemas.telemetry import ScorePoint, TelemetryRecord


class TelemetryWindow:
    """Immutable ring buffer of (TelemetryRecord, ScorePoint) pairs."""

    __slots__ = ("_capacity", "_records", "_scores")

    def __init__(
        self,
        capacity: int,
        records: Iterable[TelemetryRecord] = (),
        scores: Iterable[ScorePoint] = (),
    ):
        """
        Build a window from existing series, keeping only the newest entries.

        Args:
            capacity: Maximum number of entries retained
            records: Telemetry records, oldest first
            scores: Score points matching ``records`` one to one

        Raises:
            ValueError: If capacity is not positive or the series lengths differ
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        records = tuple(records)
        scores = tuple(scores)
        if len(records) != len(scores):
            raise ValueError(
                f"records and scores must pair up, got {len(records)} and {len(scores)}"
            )
        self._capacity = capacity
        self._records: Tuple[TelemetryRecord, ...] = records[-capacity:]
        self._scores: Tuple[ScorePoint, ...] = scores[-capacity:]

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def records(self) -> Tuple[TelemetryRecord, ...]:
        return self._records

    @property
    def scores(self) -> Tuple[ScorePoint, ...]:
        return self._scores

    @property
    def latest(self) -> Optional[TelemetryRecord]:
        return self._records[-1] if self._records else None

    @property
    def latest_score(self) -> Optional[ScorePoint]:
        return self._scores[-1] if self._scores else None

    def __len__(self) -> int:
        return len(self._records)

    def append(self, record: TelemetryRecord, score_point: ScorePoint) -> "TelemetryWindow":
        """Return a new window with the pair appended."""
        if record.timestamp != score_point.timestamp:
            raise ValueError(
                f"score timestamp {score_point.timestamp} does not match record {record.timestamp}"
            )
        # The constructor trims the oldest entry once capacity is exceeded.
        return TelemetryWindow(
            self._capacity,
            self._records + (record,),
            self._scores + (score_point,),
        )

    def tail(self, n: int) -> Sequence[TelemetryRecord]:
        """The newest ``n`` records, oldest first."""
        if n <= 0:
            return ()
        return self._records[-n:]
