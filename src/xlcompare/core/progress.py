"""
Progress notifications and cooperative cancellation.

The comparison runs as one unit of background work. Callers observe it through
a progress sink receiving (percent, message) pairs and stop it through a
CancellationToken that the engine checks at fixed points.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from xlcompare.core.errors import CancelledError

logger = logging.getLogger(__name__)

ProgressSink = Callable[[int, str], None]


@dataclass(frozen=True)
class ProgressInfo:
    """One progress notification."""
    percent: int
    message: str


class CancellationToken:
    """
    Thread-safe cancellation flag.

    The owner calls cancel() from any thread; the engine calls
    raise_if_cancelled() at its check points.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError()


class ProgressReporter:
    """
    Forwards progress to an optional sink.

    Percent values are clamped to 0..100 and never go backwards.
    """

    def __init__(self, sink: Optional[ProgressSink] = None):
        self._sink = sink
        self._last = 0

    @property
    def last_percent(self) -> int:
        return self._last

    def report(self, percent: int, message: str) -> None:
        percent = max(0, min(100, int(percent)))
        percent = max(percent, self._last)
        self._last = percent

        logger.debug(f"Progress {percent}%: {message}")

        if self._sink is not None:
            self._sink(percent, message)
