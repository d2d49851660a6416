"""Timer scheduling for drill playback.

The playback scheduler only needs "call this after N seconds" and a
handle it can cancel. The Clock protocol hides where timers come from:
the asyncio event loop at runtime, a manual clock in tests.
"""

import asyncio
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    """A scheduled callback that can be cancelled."""

    def cancel(self) -> None:
        """Prevent the callback from running."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Source of deferred callbacks."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback after delay seconds."""
        ...


class AsyncioClock:
    """Clock backed by an asyncio event loop.

    The loop is looked up lazily so the clock can be created outside a
    running loop and used once one is running.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay, callback)


class TimerPair:
    """The midpoint and end-of-interval timers for one command.

    Both timers are cancelled together so a reset can never leave one of
    them behind.
    """

    def __init__(self, midpoint: TimerHandle, end: TimerHandle) -> None:
        self.midpoint = midpoint
        self.end = end
        self.cancelled = False

    @classmethod
    def schedule(
        cls,
        clock: Clock,
        interval: float,
        on_midpoint: Callable[[], None],
        on_end: Callable[[], None],
    ) -> "TimerPair":
        """Schedule both timers for a command of the given interval."""
        midpoint = clock.call_later(interval / 2, on_midpoint)
        end = clock.call_later(interval, on_end)
        return cls(midpoint, end)

    def cancel(self) -> None:
        """Cancel both timers. Safe to call more than once."""
        if self.cancelled:
            return
        self.cancelled = True
        self.midpoint.cancel()
        self.end.cancel()
