"""
Cancellable countdowns.

A TimerSlot holds at most one outstanding Countdown. Arming cancels the previous instance, and
every fire re-checks, under the owner's lock, that it is still the slot's current generation,
so a timer racing a later event does nothing.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

log = logging.getLogger("timers")


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def thread_timer(seconds: float, fn: Callable[[], None]) -> TimerHandle:
    t = threading.Timer(seconds, fn)
    t.daemon = True
    return t


@dataclass
class Countdown:
    kind: str
    generation: int
    seconds: float
    handle: TimerHandle


class TimerSlot:
    def __init__(self, kind: str, factory: TimerFactory | None = None, lock: threading.RLock | None = None):
        self.kind = kind
        self._factory = factory or thread_timer
        self._lock = lock or threading.RLock()
        self._generation = 0
        self._current: Countdown | None = None

    @property
    def armed(self) -> bool:
        return self._current is not None

    def arm(self, seconds: float, callback: Callable[[], None]) -> Countdown:
        with self._lock:
            self.cancel()
            self._generation += 1
            generation = self._generation

            def fire() -> None:
                with self._lock:
                    if self._current is None or self._current.generation != generation:
                        log.debug("Ignoring stale %s timer generation=%d", self.kind, generation)
                        return
                    self._current = None
                    callback()

            handle = self._factory(seconds, fire)
            countdown = Countdown(self.kind, generation, seconds, handle)
            self._current = countdown
            log.debug("Armed %s timer %.2fs generation=%d", countdown.kind, countdown.seconds, countdown.generation)
            handle.start()
            return countdown

    def cancel(self) -> None:
        with self._lock:
            if self._current is None:
                return
            self._current.handle.cancel()
            self._current = None
