"""Real-time drill playback.

Each command occupies one interval. At the start of the interval the cue
is spoken, halfway through the sight moves, and at the end the next
command begins. The two timers of the current command are held in one
TimerPair so stopping a drill cancels them together.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from src.drill.clock import AsyncioClock, Clock, TimerPair
from src.drill.exceptions import DrillConfigError, DrillStateError
from src.drill.speech import NullSpeechCues, SpeechCueService
from src.drill.types import DrillCommand, Position
from src.drill.validator import apply_command, clamp_position
from src.observability.events import (
    CommandEndEvent,
    CommandStartEvent,
    DrillCancelledEvent,
    DrillFinishedEvent,
    DrillStartedEvent,
    PositionUpdateEvent,
)
from src.observability.hooks import DrillHook, NullHook

logger = logging.getLogger(__name__)


# Below this interval a cue could never finish, so none is dispatched
MIN_SPEECH_INTERVAL = 0.1


class PlaybackPhase(str, Enum):
    """Where the scheduler is within the current command."""

    IDLE = "idle"
    AWAITING_MIDPOINT = "awaiting_midpoint"
    AWAITING_ADVANCE = "awaiting_advance"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class CueSettings:
    """Speech cue options, fixed for the whole run.

    Attributes:
        enabled: Dispatch spoken cues at all.
        manual_speed: Use speed instead of the automatic rate.
        speed: Manual speech rate multiplier.
    """

    enabled: bool = True
    manual_speed: bool = False
    speed: float = 2.0


class PlaybackScheduler:
    """Plays a drill sequence against a simulated sight.

    The scheduler owns the simulated position while it runs. The final
    position is reported exactly once, through on_finish and the hook.
    """

    def __init__(
        self,
        commands: Sequence[DrillCommand],
        interval: float,
        max_t_and_e: int,
        *,
        clock: Clock | None = None,
        speech: SpeechCueService | None = None,
        cues: CueSettings | None = None,
        hook: DrillHook | None = None,
        on_finish: Callable[[Position], None] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            commands: Sequence to play. Read only; may be cleared by the owner.
            interval: Seconds per command.
            max_t_and_e: Bound used to clamp the simulated position.
            clock: Timer source. Defaults to the running asyncio loop.
            speech: Cue service. Defaults to silent cues.
            cues: Cue options. Defaults to enabled with automatic rate.
            hook: Observability hook.
            on_finish: Called with the final position when playback ends.

        Raises:
            DrillConfigError: If interval is not positive.
        """
        if interval <= 0:
            raise DrillConfigError(["Command interval must be a positive number."])

        self._commands = commands
        self._interval = interval
        self._max_t_and_e = max_t_and_e
        self._clock = clock or AsyncioClock()
        self._speech = speech or NullSpeechCues()
        self._cues = cues or CueSettings()
        self._hook = hook or NullHook()
        self._on_finish = on_finish

        self._phase = PlaybackPhase.IDLE
        self._index = 0
        self._current: DrillCommand | None = None
        self._position = Position()
        self._timers: TimerPair | None = None

    @property
    def phase(self) -> PlaybackPhase:
        return self._phase

    @property
    def index(self) -> int:
        """Index of the current command."""
        return self._index

    @property
    def current_command(self) -> DrillCommand | None:
        return self._current

    @property
    def position(self) -> Position:
        """Current simulated position."""
        return self._position

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._phase in (PlaybackPhase.AWAITING_MIDPOINT, PlaybackPhase.AWAITING_ADVANCE)

    def start(self, position: Position | None = None) -> None:
        """Begin playback from the first command.

        Args:
            position: Starting position, (0, 0) if not given.

        Raises:
            DrillStateError: If the scheduler was already started.
        """
        if self._phase != PlaybackPhase.IDLE:
            raise DrillStateError(f"Cannot start playback in phase '{self._phase.value}'")

        self._position = position or Position()
        logger.info(
            f"Playback started: {len(self._commands)} commands, "
            f"interval={self._interval}s, max_t_and_e={self._max_t_and_e}"
        )
        self._hook.on_drill_started(
            DrillStartedEvent(
                command_count=len(self._commands),
                interval=self._interval,
                max_t_and_e=self._max_t_and_e,
            )
        )
        self._enter(0)

    def stop(self) -> None:
        """Stop playback immediately.

        Cancels both pending timers and any in-flight cue. No position
        change or completion happens afterwards. Safe to call in any phase.
        """
        if self._timers is not None:
            self._timers.cancel()
            self._timers = None
        self._speech.stop()

        if self._phase in (PlaybackPhase.DONE, PlaybackPhase.CANCELLED):
            return

        was_running = self.is_running
        self._phase = PlaybackPhase.CANCELLED
        if was_running:
            logger.info(f"Playback stopped at command {self._index + 1}")
            self._hook.on_drill_cancelled(
                DrillCancelledEvent(index=self._index, position=self._position)
            )

    def _enter(self, index: int) -> None:
        if index >= len(self._commands):
            # Empty sequence, or cleared while running
            self._finish()
            return

        self._index = index
        self._current = self._commands[index]
        self._phase = PlaybackPhase.AWAITING_MIDPOINT

        cue_dispatched = self._dispatch_cue(self._current)
        self._hook.on_command_start(
            CommandStartEvent(
                index=index,
                total=len(self._commands),
                command=self._current,
                cue_dispatched=cue_dispatched,
            )
        )

        self._timers = TimerPair.schedule(
            self._clock,
            self._interval,
            on_midpoint=lambda: self._on_midpoint(index),
            on_end=lambda: self._on_end(index),
        )

    def _dispatch_cue(self, command: DrillCommand) -> bool:
        if not self._cues.enabled:
            return False
        if self._interval < MIN_SPEECH_INTERVAL:
            self._speech.stop()
            return False
        self._speech.play(command, self._interval, self._cues.manual_speed, self._cues.speed)
        return True

    def _on_midpoint(self, index: int) -> None:
        if self._phase != PlaybackPhase.AWAITING_MIDPOINT or index != self._index:
            return

        moved = apply_command(self._position, self._current)
        self._position = clamp_position(moved, self._max_t_and_e)
        clamped = moved != self._position
        if clamped:
            logger.warning(f"Position {moved} clamped to {self._position}")

        self._phase = PlaybackPhase.AWAITING_ADVANCE
        logger.debug(f"Command {index + 1} applied: {self._current.text} -> {self._position}")
        self._hook.on_position_update(
            PositionUpdateEvent(
                index=index,
                command=self._current,
                position=self._position,
                clamped=clamped,
            )
        )

    def _on_end(self, index: int) -> None:
        if not self.is_running or index != self._index:
            return

        self._timers = None
        self._hook.on_command_end(
            CommandEndEvent(index=index, total=len(self._commands), command=self._current)
        )

        if index >= len(self._commands) - 1:
            self._finish()
        else:
            self._enter(index + 1)

    def _finish(self) -> None:
        self._phase = PlaybackPhase.DONE
        self._timers = None
        logger.info(f"Playback finished at {self._position}")
        self._hook.on_drill_finished(
            DrillFinishedEvent(final_position=self._position, command_count=len(self._commands))
        )
        if self._on_finish is not None:
            self._on_finish(self._position)
