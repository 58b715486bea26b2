"""Deferred-action schedulers for the battle resolution delay.

The session never sleeps itself; it hands a callback to a scheduler.
:class:`BlockingScheduler` runs it inline after waiting (terminal UI), while
:class:`ManualScheduler` holds it until the host advances a virtual clock
(tests, or any host with its own event loop).
"""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Callable, ContextManager, List, Optional, Protocol

Callback = Callable[[], None]

class Scheduler(Protocol):
    def call_later(self, delay_ms: int, fn: Callback) -> None: ...

class BlockingScheduler:
    """Waits ``delay_ms`` then runs the callback before returning.

    ``waiting`` optionally wraps the wait, e.g. a rich status spinner.
    """

    def __init__(self, waiting: Optional[Callable[[], ContextManager[object]]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.waiting = waiting
        self.sleep = sleep

    def call_later(self, delay_ms: int, fn: Callback) -> None:
        seconds = max(0, delay_ms) / 1000.0
        if self.waiting is not None:
            with self.waiting():
                self.sleep(seconds)
        else:
            self.sleep(seconds)
        fn()

@dataclass(order=True)
class _Pending:
    due_ms: int
    seq: int
    fn: Callback = field(compare=False)

class ManualScheduler:
    def __init__(self):
        self.now_ms = 0
        self._seq = 0
        self._pending: List[_Pending] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def call_later(self, delay_ms: int, fn: Callback) -> None:
        self._seq += 1
        self._pending.append(_Pending(self.now_ms + max(0, delay_ms), self._seq, fn))
        self._pending.sort()

    def advance(self, ms: int) -> int:
        """Move the clock forward and run everything now due. Returns the count run."""
        self.now_ms += ms
        ran = 0
        while self._pending and self._pending[0].due_ms <= self.now_ms:
            item = self._pending.pop(0)
            item.fn()
            ran += 1
        return ran

    def run_all(self) -> int:
        if not self._pending:
            return 0
        return self.advance(self._pending[-1].due_ms - self.now_ms)

__all__ = ["Scheduler", "BlockingScheduler", "ManualScheduler"]
