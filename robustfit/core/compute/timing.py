"""
Wall-clock timing for backends.

A backend starts a Timer, wraps each phase of its solve in a named
section, and returns Timer.result() as Result.timing. Sections inside a
loop accumulate, so the IRLS backend reports the total time spent
computing weights and solving weighted systems across all iterations.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Overall timer plus named, accumulating sections.

    Usage:
        timer = Timer()
        timer.start()
        for _ in range(max_iter):
            with timer.section('weights'):
                w = loss.weight(r / s)
            with timer.section('solve'):
                beta = wls(XA, y, w)
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'weights': ..., 'solve': ...}
        timer.calls('solve')   # number of times the section was entered
    """

    def __init__(self):
        self._t0: float | None = None
        self._total: float | None = None
        self._seconds: dict[str, float] = {}
        self._calls: dict[str, int] = {}

    def start(self) -> None:
        self._t0 = time.perf_counter()
        self._total = None

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Add the time spent in the block to section `name`."""
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._seconds[name] = self._seconds.get(name, 0.0) + time.perf_counter() - t0
            self._calls[name] = self._calls.get(name, 0) + 1

    def calls(self, name: str) -> int:
        """How many times section `name` was entered (0 if never)."""
        return self._calls.get(name, 0)

    def result(self) -> dict[str, float]:
        """
        Timing breakdown: 'total_seconds' plus one entry per section.

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._seconds}


@contextmanager
def timed() -> Iterator[Timer]:
    """
    Time a block as a whole.

    Usage:
        with timed() as timer:
            solution = robust_fit(X, y)
        timer.result()['total_seconds']
    """
    timer = Timer()
    timer.start()
    try:
        yield timer
    finally:
        timer.stop()
