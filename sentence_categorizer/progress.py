"""
Progress reporting boundary.

The pipeline pushes ``ProgressEvent`` objects into a caller-supplied sink and
never reads anything back from it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """Percent complete (0-100) and a human-readable status line."""

    percent: float
    status: str
    is_error: bool = False


ProgressSink = Callable[[ProgressEvent], None]


class ProgressReporter:
    """Clamps, logs and forwards progress events for one run."""

    def __init__(self, sink: Optional[ProgressSink] = None) -> None:
        self.sink = sink
        self.last_event: Optional[ProgressEvent] = None

    @property
    def percent(self) -> float:
        return self.last_event.percent if self.last_event else 0.0

    def update(self, percent: float, status: str) -> None:
        percent = min(max(float(percent), 0.0), 100.0)
        self._emit(ProgressEvent(percent=percent, status=status))
        logger.info(f"[{percent:5.1f}%] {status}")

    def fail(self, message: str) -> None:
        """Overwrite the last status with an error-flagged one."""
        self._emit(
            ProgressEvent(percent=self.percent, status=f"Error: {message}", is_error=True)
        )
        logger.error(f"[{self.percent:5.1f}%] Error: {message}")

    def _emit(self, event: ProgressEvent) -> None:
        self.last_event = event
        if self.sink is not None:
            self.sink(event)


class ProgressRecorder:
    """Sink that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    @property
    def percents(self) -> List[float]:
        return [event.percent for event in self.events]

    @property
    def statuses(self) -> List[str]:
        return [event.status for event in self.events]


# Percent milestones of a run. Batch progress is spread over the
# CLASSIFICATION_SPAN that follows DISCOVERY_DONE.
RUN_START = 0.0
SEGMENTED = 3.0
DISCOVERY_START = 5.0
DISCOVERY_DONE = 10.0
CLASSIFICATION_SPAN = 80.0
COMPLETE = 100.0


def batch_percent(batch_index: int, total_batches: int) -> float:
    """Percent reported before starting batch ``batch_index`` (0-based)."""
    if total_batches <= 0:
        return DISCOVERY_DONE
    return DISCOVERY_DONE + (batch_index / total_batches) * CLASSIFICATION_SPAN
