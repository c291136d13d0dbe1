"""Cancelable silence and max-duration timers for a recording session."""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Protocol

logger = logging.getLogger(__name__)


class TimerKind(Enum):
    """The two timers that can end a recording."""
    SILENCE = "silence"
    MAX_DURATION = "max_duration"


class Scheduler(Protocol):
    """Anything with ``call_later`` semantics, e.g. an asyncio event loop."""

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Any:
        ...


class TimerCoordinator:
    """Owns at most one pending timer per kind.

    Every ``arm`` bumps the kind's generation; a fired callback runs only if
    its generation is still current, so a superseded or canceled timer can
    never invoke its callback even if the scheduler delivers it late.
    """

    def __init__(self, scheduler: Scheduler):
        self.scheduler = scheduler
        self._handles: Dict[TimerKind, Any] = {}
        self._generations: Dict[TimerKind, int] = {kind: 0 for kind in TimerKind}

    def arm(self, kind: TimerKind, delay_ms: int, callback: Callable[[], None]) -> Any:
        """Schedule ``callback`` after ``delay_ms``, replacing any timer of the same kind.

        Args:
            kind: Which timer to (re)arm
            delay_ms: Delay in milliseconds
            callback: Zero-argument callable invoked on expiry

        Returns:
            The scheduler's handle for the new timer
        """
        self.cancel(kind)
        generation = self._generations[kind]
        handle = self.scheduler.call_later(delay_ms / 1000.0, self._fire, kind, generation, callback)
        self._handles[kind] = handle
        logger.debug(f"Armed {kind.value} timer for {delay_ms}ms (generation {generation})")
        return handle

    def cancel(self, kind: TimerKind) -> None:
        """Cancel one timer; safe when it is not armed or already fired."""
        self._generations[kind] += 1
        handle = self._handles.pop(kind, None)
        if handle is not None:
            handle.cancel()
            logger.debug(f"Canceled {kind.value} timer")

    def cancel_all(self) -> None:
        """Cancel both timers. Idempotent."""
        for kind in TimerKind:
            self.cancel(kind)

    def is_armed(self, kind: TimerKind) -> bool:
        return kind in self._handles

    def _fire(self, kind: TimerKind, generation: int, callback: Callable[[], None]) -> None:
        if generation != self._generations[kind]:
            logger.debug(f"Ignoring stale {kind.value} timer (generation {generation})")
            return

        # Clear before invoking so the callback may re-arm this kind
        self._handles.pop(kind, None)
        self._generations[kind] += 1
        logger.debug(f"{kind.value} timer fired")
        callback()

    def get_armed_kinds(self) -> List[str]:
        """Kinds with a pending timer, for logging."""
        return [kind.value for kind in self._handles]
