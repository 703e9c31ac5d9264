"""
Periodic timer abstraction used for playback progress polling.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

logger = logging.getLogger(__name__)

class TickerHandle(ABC):
    """A running periodic timer."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        pass

class Ticker(ABC):
    """Factory for periodic timers."""

    @abstractmethod
    def start(self, interval: float, callback: Callable[[], None]) -> TickerHandle:
        """Invoke `callback` every `interval` seconds until cancelled."""
        pass

class _AsyncioTickerHandle(TickerHandle):

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._timer: Optional[asyncio.TimerHandle] = None
        self._active = True
        self._schedule()

    def _schedule(self):
        self._timer = self._loop.call_later(self._interval, self._fire)

    def _fire(self):
        if not self._active:
            return
        try:
            self._callback()
        except Exception:
            logger.exception("Ticker callback failed")
        if self._active:
            self._schedule()

    def cancel(self) -> None:
        self._active = False
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def active(self) -> bool:
        return self._active

class AsyncioTicker(Ticker):
    """Ticker driven by the running asyncio event loop."""

    def start(self, interval: float, callback: Callable[[], None]) -> TickerHandle:
        return _AsyncioTickerHandle(asyncio.get_running_loop(), interval, callback)
