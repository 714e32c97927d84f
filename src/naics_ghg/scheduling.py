# resize debouncing and the pan/zoom transition timeline
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from naics_ghg.layout import ZoomTransform

_EPSILON_MS = 1e-6


class Debouncer:
    """
    Coalesce bursts of calls into one call after `delay_ms` of quiet.

    Only the arguments of the latest `schedule` call are delivered. The timer
    thread never runs the callback: it only marks the pending call as due.
    The owner delivers it on its own thread with `poll` (once due) or `flush`
    (right away); `cancel` drops it. The timer factory is injectable so
    callers without a real clock (tests) can drive it.
    """

    def __init__(self, callback: Callable[..., Any], delay_ms: int = 100,
                 timer_factory: Callable[..., Any] = threading.Timer):
        self._callback = callback
        self._delay = delay_ms / 1000.0
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending = None
        self._due = False
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def due(self) -> bool:
        return self._due

    def schedule(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._due = False
            self._generation += 1
            generation = self._generation
            self._timer = self._timer_factory(self._delay, lambda: self._mark_due(generation))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
            self._due = False

    def poll(self) -> bool:
        """Deliver the pending call if its quiet window has passed."""
        if not self._due:
            return False
        return self._deliver()

    def flush(self) -> bool:
        """Deliver a pending call now. Returns False if nothing was pending."""
        return self._deliver()

    def _mark_due(self, generation: int) -> None:
        # runs on the timer thread; a timer superseded by a later schedule is ignored
        with self._lock:
            if generation != self._generation:
                return
            if self._pending is not None:
                self._due = True
            self._timer = None

    def _deliver(self) -> bool:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            pending, self._pending = self._pending, None
            self._timer = None
            self._due = False
        if pending is None:
            return False
        args, kwargs = pending
        self._callback(*args, **kwargs)
        return True


@dataclass(frozen=True)
class Transition:
    seq: int
    start: ZoomTransform
    target: ZoomTransform
    started_at: float
    duration_ms: int

    def progress(self, now: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        elapsed_ms = (now - self.started_at) * 1000.0
        # clock arithmetic lands a hair short of the full duration
        if elapsed_ms >= self.duration_ms - _EPSILON_MS:
            return 1.0
        return max(0.0, elapsed_ms / self.duration_ms)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


class TransitionTimeline:
    """
    Presentation timeline for pan/zoom. Starting a transition supersedes the
    running one outright; the new one starts from wherever the view is now.
    """

    def __init__(self, duration_ms: int = 350, clock: Callable[[], float] = time.monotonic):
        self.duration_ms = duration_ms
        self._clock = clock
        self._seq = 0
        self._current: Optional[Transition] = None
        self._resting: Optional[ZoomTransform] = None

    @property
    def current(self) -> Optional[Transition]:
        return self._current

    def start(self, target: ZoomTransform, duration_ms: Optional[int] = None) -> Transition:
        now = self._clock()
        origin = self.view_at(now) or target
        if self._current is not None and self._current.progress(now) < 1.0:
            logging.debug("transition %d superseded", self._current.seq)
        self._seq += 1
        self._current = Transition(
            seq=self._seq,
            start=origin,
            target=target,
            started_at=now,
            duration_ms=self.duration_ms if duration_ms is None else duration_ms,
        )
        return self._current

    def jump(self, target: ZoomTransform) -> None:
        """Move without animating, dropping any running transition."""
        self._current = None
        self._resting = target

    def view_at(self, now: Optional[float] = None) -> Optional[ZoomTransform]:
        transition = self._current
        if transition is None:
            return self._resting
        if now is None:
            now = self._clock()
        t = transition.progress(now)
        if t >= 1.0:
            return transition.target
        a, b = transition.start, transition.target
        return ZoomTransform(
            scale=_lerp(a.scale, b.scale, t),
            translate_x=_lerp(a.translate_x, b.translate_x, t),
            translate_y=_lerp(a.translate_y, b.translate_y, t),
        )

    def is_running(self, now: Optional[float] = None) -> bool:
        if self._current is None:
            return False
        return self._current.progress(self._clock() if now is None else now) < 1.0
