"""
Inter-batch pacing and cooperative cancellation.

Delay policies decide how long to pause after a batch completes and before
the next one starts, so the orchestration loop never hard-codes a strategy.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..exceptions import RunCancelledError, ValidationError

logger = logging.getLogger(__name__)


class DelayPolicy(Protocol):
    def delay_for(self, completed_batches: int) -> float:
        """Seconds to wait after ``completed_batches`` batches have finished."""
        ...


@dataclass(frozen=True)
class NoDelay:
    def delay_for(self, completed_batches: int) -> float:
        return 0.0


@dataclass(frozen=True)
class FixedDelay:
    seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValidationError(
                "seconds cannot be negative", field="seconds", value=self.seconds
            )

    def delay_for(self, completed_batches: int) -> float:
        return self.seconds


@dataclass(frozen=True)
class ExponentialBackoff:
    """Delay that grows by ``factor`` per completed batch, capped at ``max_seconds``."""

    initial_seconds: float = 0.5
    factor: float = 2.0
    max_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.initial_seconds < 0:
            raise ValidationError(
                "initial_seconds cannot be negative",
                field="initial_seconds",
                value=self.initial_seconds,
            )
        if self.factor < 1.0:
            raise ValidationError(
                "factor must be at least 1.0", field="factor", value=self.factor
            )

    def delay_for(self, completed_batches: int) -> float:
        exponent = max(completed_batches - 1, 0)
        return min(self.initial_seconds * (self.factor**exponent), self.max_seconds)


class CancellationToken:
    """Flag checked between units of work; setting it never interrupts a request."""

    def __init__(self) -> None:
        self._cancelled = False
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Cancelled by caller") -> None:
        self._cancelled = True
        self.reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self, batches_completed: int = 0) -> None:
        if self._cancelled:
            raise RunCancelledError(
                self.reason or "Cancelled by caller", batches_completed=batches_completed
            )


async def pause(policy: DelayPolicy, completed_batches: int) -> None:
    seconds = policy.delay_for(completed_batches)
    if seconds > 0:
        logger.debug(f"Pausing {seconds:.2f}s after batch {completed_batches}")
        await asyncio.sleep(seconds)
