"""Drill session lifecycle.

A session moves through CONFIGURING -> RUNNING -> FINISHED and back to
CONFIGURING on reset. Starting a drill validates the options, preloads
speech cues, generates the sequence and hands it to a PlaybackScheduler.
Only one drill runs per session at a time.
"""

import asyncio
import logging
import random

from src.drill.clock import Clock
from src.drill.exceptions import DrillConfigError, DrillStateError
from src.drill.generator import generate
from src.drill.options import DrillOptions, validate_options
from src.drill.scheduler import PlaybackScheduler
from src.drill.speech import NullSpeechCues, SpeechCueService
from src.drill.types import DrillCommand, DrillResult, DrillState, GenerationResult, Position
from src.observability.events import GenerationEvent
from src.observability.hooks import DrillHook, NullHook

logger = logging.getLogger(__name__)


class DrillSession:
    """Runs drills one at a time and keeps the latest result."""

    def __init__(
        self,
        *,
        speech: SpeechCueService | None = None,
        clock: Clock | None = None,
        hook: DrillHook | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            speech: Cue service shared by every drill in the session.
            clock: Timer source passed to each scheduler.
            hook: Observability hook for generation and playback events.
            rng: Random source for generation.
        """
        self._speech = speech or NullSpeechCues()
        self._clock = clock
        self._hook = hook or NullHook()
        self._rng = rng or random.Random()

        self._state = DrillState.CONFIGURING
        self._commands: list[DrillCommand] = []
        self._scheduler: PlaybackScheduler | None = None
        self._result: DrillResult | None = None
        self._done = asyncio.Event()

    @property
    def state(self) -> DrillState:
        return self._state

    @property
    def commands(self) -> list[DrillCommand]:
        """Sequence of the current drill (empty when configuring)."""
        return list(self._commands)

    @property
    def scheduler(self) -> PlaybackScheduler | None:
        return self._scheduler

    @property
    def result(self) -> DrillResult | None:
        """Outcome of the finished drill, None until FINISHED."""
        return self._result

    def warm_up(self) -> None:
        """Prime the speech engine ahead of the first drill."""
        self._speech.warm_up()

    def start(self, options: DrillOptions) -> GenerationResult:
        """Generate and start a drill.

        If generation fails the session stays in CONFIGURING and the
        returned result carries the diagnostic.

        Args:
            options: Drill options.

        Returns:
            The generation outcome.

        Raises:
            DrillStateError: If a drill is already running or finished.
            DrillConfigError: If the options fail validation.
        """
        if self._state != DrillState.CONFIGURING:
            raise DrillStateError(f"Cannot start a drill while {self._state.value}")

        errors = validate_options(options)
        if errors:
            raise DrillConfigError(errors)

        if options.voice_enabled:
            self._speech.preload(options.parsed_click_values)

        generation = generate(options.generation_config(), self._rng)
        self._hook.on_generation(
            GenerationEvent(
                requested_count=generation.requested_count,
                total_count=generation.total_count,
                attempts=generation.attempts,
                success=generation.success,
                used_fallback=generation.used_fallback,
                diagnostic=generation.diagnostic,
            )
        )
        if not generation.success:
            logger.warning(f"Drill not started: {generation.diagnostic}")
            return generation

        self._commands = list(generation.commands)
        self._result = None
        self._done = asyncio.Event()
        self._scheduler = PlaybackScheduler(
            self._commands,
            options.command_interval,
            options.max_t_and_e,
            clock=self._clock,
            speech=self._speech,
            cues=options.cue_settings(),
            hook=self._hook,
            on_finish=self._handle_finish,
        )
        self._state = DrillState.RUNNING
        logger.info(f"Drill started with {len(self._commands)} commands")
        self._scheduler.start()
        return generation

    def reset(self) -> None:
        """Stop any running drill and return to CONFIGURING.

        Safe to call in any state.
        """
        if self._scheduler is not None:
            self._scheduler.stop()
            self._scheduler = None
        self._speech.stop()
        self._commands = []
        self._result = None
        self._state = DrillState.CONFIGURING
        self._done.set()

    async def wait(self) -> DrillResult | None:
        """Wait for the running drill to finish.

        Returns immediately when no drill is running.

        Returns:
            The drill result, or None if the drill was reset first or
            never started.
        """
        if self._state == DrillState.RUNNING:
            await self._done.wait()
        return self._result

    def _handle_finish(self, final_position: Position) -> None:
        self._result = DrillResult(
            final_position=final_position,
            command_count=len(self._commands),
            commands=tuple(self._commands),
        )
        self._state = DrillState.FINISHED
        logger.info(
            f"Drill finished at {final_position}: "
            f"{'success' if self._result.success else 'failure'}"
        )
        self._done.set()
