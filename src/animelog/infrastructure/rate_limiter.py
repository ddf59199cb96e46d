"""
Centralized Request Throttle for the Jikan API.

Hey future me – das ist der ZENTRALE Throttle für alle Jikan-Calls!
Jikan erlaubt ungefähr 1 request/second PRO CLIENT. Das Limit gilt global,
nicht pro Aufrufer – deshalb gibt es genau EINE Instanz pro Prozess.

ALGORITHMUS: serialized queue + watermark
- Jeder submit() stellt sich in eine FIFO-Schlange (asyncio.Lock weckt Waiter
  in Ankunfts-Reihenfolge, Neuankömmlinge überholen nie)
- Wer dran ist: Zeit seit dem ENDE des letzten Calls messen, Rest von
  min_interval schlafen, Operation ausführen, Watermark setzen
- "wait, call, update watermark" ist eine atomare Einheit unter dem Lock

FEHLER:
- Operation wirft → Watermark wird TROTZDEM gesetzt (keine fast-retry storms)
- Exception geht NUR an den eigenen Aufrufer, die Schlange läuft weiter
- Keine automatischen Retries, kein Dequeue, kein Timeout hier

USAGE:
    throttle = get_jikan_throttle()
    data = await throttle.submit(lambda: client.get("/anime", params=...))
"""

import asyncio
import itertools
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RequestThrottleConfig:
    """Configuration for the request throttle.

    Hey future me – 1.0s ist Jikans eigene Empfehlung. Tests nutzen kürzere
    Intervalle über eine eigene Instanz, NICHT über den Singleton!
    """

    min_interval_seconds: float = 1.0


@dataclass
class ThrottleTicket:
    """One queued unit of work. Lives only until its operation has settled."""

    sequence: int
    enqueued_at: float
    operation: Callable[[], Awaitable[Any]]


@dataclass
class RequestThrottle:
    """FIFO request throttle with a minimum spacing between calls.

    Attributes:
        config: Throttle configuration
        name: Name used in log lines
        clock: Monotonic clock (seconds), same clock asyncio.sleep uses
        _lock: Serializes "wait, call, update watermark"
        _last_completed_at: Watermark - when the previous operation settled
    """

    config: RequestThrottleConfig = field(default_factory=RequestThrottleConfig)
    name: str = "default"
    clock: Callable[[], float] = time.monotonic

    # Internal state (not in __init__ signature)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _last_completed_at: float | None = field(default=None, init=False)
    _sequence: itertools.count = field(default_factory=itertools.count, init=False)
    _queued: int = field(default=0, init=False)
    _submitted: int = field(default=0, init=False)
    _completed: int = field(default=0, init=False)
    _failed: int = field(default=0, init=False)

    @classmethod
    def for_jikan(cls, min_interval_seconds: float = 1.0) -> "RequestThrottle":
        """Create throttle for the Jikan API (1 req/sec, no bursts)."""
        return cls(
            config=RequestThrottleConfig(min_interval_seconds=min_interval_seconds),
            name="jikan",
        )

    async def submit(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Queue an operation and wait for its outcome.

        Args:
            operation: Zero-argument coroutine function (NOT a coroutine object -
                it must only start once it's our turn)

        Returns:
            Whatever the operation returns

        Raises:
            Whatever the operation raises - only to this caller
        """
        ticket = ThrottleTicket(
            sequence=next(self._sequence),
            enqueued_at=self.clock(),
            operation=operation,
        )
        self._submitted += 1
        self._queued += 1
        try:
            async with self._lock:
                return await self._execute(ticket)
        finally:
            self._queued -= 1

    async def _execute(self, ticket: ThrottleTicket) -> Any:
        """Run one ticket. Caller MUST hold the lock."""
        await self._wait_for_watermark(ticket)

        try:
            result = await ticket.operation()
        except Exception as e:
            self._failed += 1
            logger.warning(
                "RequestThrottle[%s]: operation #%d failed: %s",
                self.name,
                ticket.sequence,
                e,
            )
            raise
        finally:
            # Yo future me, this MUST happen even on failure (and on cancellation mid-call).
            # Otherwise a failing call would let the next one fire immediately.
            self._last_completed_at = self.clock()
            self._completed += 1

        logger.debug(
            "RequestThrottle[%s]: operation #%d done (waited %.3fs in queue)",
            self.name,
            ticket.sequence,
            self._last_completed_at - ticket.enqueued_at,
        )
        return result

    async def _wait_for_watermark(self, ticket: ThrottleTicket) -> None:
        if self._last_completed_at is None:
            return

        elapsed = self.clock() - self._last_completed_at
        delay = self.config.min_interval_seconds - elapsed
        if delay > 0:
            logger.debug(
                "RequestThrottle[%s]: delaying operation #%d by %.3fs",
                self.name,
                ticket.sequence,
                delay,
            )
            await asyncio.sleep(delay)

    @property
    def queue_depth(self) -> int:
        """Operations submitted but not yet settled (including the running one)."""
        return self._queued

    @property
    def last_completed_at(self) -> float | None:
        return self._last_completed_at

    def get_status(self) -> dict[str, Any]:
        """Get throttle status for monitoring/health endpoint."""
        return {
            "name": self.name,
            "min_interval_seconds": self.config.min_interval_seconds,
            "queue_depth": self._queued,
            "submitted": self._submitted,
            "completed": self._completed,
            "failed": self._failed,
            "last_completed_at": self._last_completed_at,
        }


# Module-level throttle (singleton pattern)
# Hey future me – der wird im lifespan einmal erzeugt und dann per Constructor
# in JikanClient injiziert. Zwei Instanzen = doppelte Rate = 429!
_jikan_throttle: RequestThrottle | None = None


def get_jikan_throttle(min_interval_seconds: float | None = None) -> RequestThrottle:
    """Get singleton Jikan throttle.

    The interval only applies on the FIRST call (creation); later calls return
    the existing instance unchanged.
    """
    global _jikan_throttle
    if _jikan_throttle is None:
        _jikan_throttle = RequestThrottle.for_jikan(
            min_interval_seconds if min_interval_seconds is not None else 1.0
        )
    return _jikan_throttle


__all__ = [
    "RequestThrottle",
    "RequestThrottleConfig",
    "ThrottleTicket",
    "get_jikan_throttle",
]
