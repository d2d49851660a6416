"""Tests for real-time drill playback."""

import asyncio
import logging

import pytest

from src.drill.clock import AsyncioClock, TimerPair
from src.drill.exceptions import DrillConfigError, DrillStateError
from src.drill.scheduler import CueSettings, PlaybackPhase, PlaybackScheduler
from src.drill.types import Position
from tests.factories import make_commands


@pytest.fixture
def commands():
    return make_commands("UP 5, RIGHT 10, DOWN 5")


@pytest.fixture
def finished():
    """Collects positions passed to on_finish."""
    return []


@pytest.fixture
def scheduler(commands, clock, speech, hook, finished):
    return PlaybackScheduler(
        commands,
        1.0,
        25,
        clock=clock,
        speech=speech,
        hook=hook,
        on_finish=finished.append,
    )


class TestPlaybackCompletion:
    """A drill plays every command in order and reports once."""

    def test_three_commands_full_run(self, scheduler, clock, hook, finished):
        """Three midpoints and three advances fire in order before the result."""
        scheduler.start()
        clock.advance(3.0)

        assert hook.names() == [
            "started",
            "command_start", "position", "command_end",
            "command_start", "position", "command_end",
            "command_start", "position", "command_end",
            "finished",
        ]
        assert finished == [Position(traverse=10, elevation=0)]
        assert scheduler.phase == PlaybackPhase.DONE

    def test_position_moves_at_midpoint(self, scheduler, clock):
        """The sight moves halfway through the interval, not before."""
        scheduler.start()

        clock.advance(0.4)
        assert scheduler.position == Position()
        assert scheduler.phase == PlaybackPhase.AWAITING_MIDPOINT

        clock.advance(0.1)
        assert scheduler.position == Position(elevation=5)
        assert scheduler.phase == PlaybackPhase.AWAITING_ADVANCE

    def test_advances_at_end_of_interval(self, scheduler, clock):
        """The next command starts at the end of the interval."""
        scheduler.start()
        clock.advance(0.9)
        assert scheduler.index == 0
        clock.advance(0.1)
        assert scheduler.index == 1
        assert scheduler.current_command == make_commands("RIGHT 10")[0]

    def test_result_reported_exactly_once(self, scheduler, clock, hook, finished):
        """Extra time after the end changes nothing."""
        scheduler.start()
        clock.advance(3.0)
        clock.advance(10.0)
        assert len(finished) == 1
        assert len(hook.of("finished")) == 1
        assert clock.pending == []

    def test_empty_sequence_finishes_immediately(self, clock, hook, finished):
        """No commands means the start position is the result."""
        scheduler = PlaybackScheduler([], 1.0, 25, clock=clock, hook=hook, on_finish=finished.append)
        scheduler.start(Position(traverse=5))
        assert finished == [Position(traverse=5)]
        assert scheduler.phase == PlaybackPhase.DONE
        assert clock.pending == []

    def test_cleared_sequence_finishes_with_last_position(self, commands, scheduler, clock, finished):
        """Clearing the sequence mid-run finishes instead of stalling."""
        scheduler.start()
        clock.advance(0.5)
        commands.clear()
        clock.advance(0.5)
        assert finished == [Position(elevation=5)]
        assert scheduler.phase == PlaybackPhase.DONE

    def test_position_is_clamped(self, clock, hook, finished, caplog):
        """A move past the bound is clamped and flagged."""
        scheduler = PlaybackScheduler(
            make_commands("UP 10, UP 10"), 1.0, 15, clock=clock, hook=hook, on_finish=finished.append
        )
        with caplog.at_level(logging.WARNING, logger="src.drill.scheduler"):
            scheduler.start()
            clock.advance(2.0)

        updates = hook.of("position")
        assert updates[0].clamped is False
        assert updates[1].clamped is True
        assert finished == [Position(elevation=15)]
        assert "clamped" in caplog.text


class TestPlaybackCancellation:
    """Stopping a drill cancels everything in flight."""

    def test_stop_after_second_midpoint(self, scheduler, clock, hook, speech, finished):
        """No mutation or completion after stop."""
        scheduler.start()
        clock.advance(1.5)
        assert scheduler.position == Position(traverse=10, elevation=5)

        scheduler.stop()
        clock.advance(10.0)

        assert scheduler.position == Position(traverse=10, elevation=5)
        assert scheduler.phase == PlaybackPhase.CANCELLED
        assert len(hook.of("position")) == 2
        assert len(hook.of("command_end")) == 1
        assert hook.names()[-1] == "cancelled"
        assert finished == []
        assert clock.pending == []
        assert speech.names()[-1] == "stop"

    def test_stop_before_midpoint(self, scheduler, clock, finished):
        """Stopping before the midpoint prevents the move."""
        scheduler.start()
        clock.advance(0.25)
        scheduler.stop()
        clock.advance(5.0)
        assert scheduler.position == Position()
        assert finished == []

    def test_stop_is_idempotent(self, scheduler, clock, hook):
        """Stopping twice emits one cancellation."""
        scheduler.start()
        scheduler.stop()
        scheduler.stop()
        assert len(hook.of("cancelled")) == 1

    def test_stop_after_done_keeps_done(self, scheduler, clock):
        """Stopping a finished drill leaves it finished."""
        scheduler.start()
        clock.advance(3.0)
        scheduler.stop()
        assert scheduler.phase == PlaybackPhase.DONE

    def test_stop_before_start(self, scheduler, hook):
        """Stopping an idle scheduler cancels it silently."""
        scheduler.stop()
        assert scheduler.phase == PlaybackPhase.CANCELLED
        assert hook.of("cancelled") == []


class TestPlaybackCues:
    """Speech cues are dispatched at the start of each command."""

    def test_cue_per_command(self, scheduler, clock, speech, commands):
        """Each command is spoken with the interval and rate settings."""
        expected = list(commands)
        scheduler.start()
        clock.advance(3.0)
        assert speech.played() == expected
        assert speech.calls[0] == ("play", expected[0], 1.0, False, 2.0)

    def test_manual_speed_passed_through(self, commands, clock, speech):
        """Manual speed settings reach the cue service."""
        scheduler = PlaybackScheduler(
            commands, 1.0, 25, clock=clock, speech=speech,
            cues=CueSettings(enabled=True, manual_speed=True, speed=4.0),
        )
        scheduler.start()
        assert speech.calls[0] == ("play", commands[0], 1.0, True, 4.0)

    def test_disabled_cues_are_not_dispatched(self, commands, clock, speech, hook):
        """With cues off the speech service is never asked to play."""
        scheduler = PlaybackScheduler(
            commands, 1.0, 25, clock=clock, speech=speech, hook=hook,
            cues=CueSettings(enabled=False),
        )
        scheduler.start()
        clock.advance(3.0)
        assert speech.played() == []
        assert all(not e.cue_dispatched for e in hook.of("command_start"))

    def test_interval_below_threshold_stops_speech(self, commands, clock, speech, hook):
        """Very short intervals silence cues instead of playing them."""
        scheduler = PlaybackScheduler(commands, 0.05, 25, clock=clock, speech=speech, hook=hook)
        scheduler.start()
        clock.advance(0.05)
        assert speech.played() == []
        assert "stop" in speech.names()
        assert hook.of("command_start")[0].cue_dispatched is False


class TestPlaybackErrors:
    """Misuse is rejected."""

    def test_start_twice(self, scheduler):
        """A scheduler runs once."""
        scheduler.start()
        with pytest.raises(DrillStateError):
            scheduler.start()

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_interval_must_be_positive(self, commands, clock, interval):
        """Non-positive intervals are a configuration error."""
        with pytest.raises(DrillConfigError):
            PlaybackScheduler(commands, interval, 25, clock=clock)


class TestTimerPair:
    """Tests for the paired midpoint/end timers."""

    def test_schedules_midpoint_and_end(self, clock):
        """Midpoint fires at half the interval, end at the full interval."""
        fired = []
        TimerPair.schedule(clock, 2.0, lambda: fired.append("mid"), lambda: fired.append("end"))
        clock.advance(1.0)
        assert fired == ["mid"]
        clock.advance(1.0)
        assert fired == ["mid", "end"]

    def test_cancel_cancels_both(self, clock):
        """One cancel call stops both timers."""
        fired = []
        pair = TimerPair.schedule(clock, 2.0, lambda: fired.append("mid"), lambda: fired.append("end"))
        pair.cancel()
        pair.cancel()
        clock.advance(5.0)
        assert fired == []
        assert pair.cancelled


class TestAsyncioPlayback:
    """Playback on a real event loop."""

    @pytest.mark.asyncio
    async def test_runs_to_completion(self, commands, hook):
        """Timers on the running loop drive the drill to the end."""
        loop = asyncio.get_running_loop()
        done: asyncio.Future = loop.create_future()
        scheduler = PlaybackScheduler(
            commands, 0.02, 25, clock=AsyncioClock(), hook=hook, on_finish=done.set_result
        )

        scheduler.start()
        final = await asyncio.wait_for(done, timeout=2.0)

        assert final == Position(traverse=10, elevation=0)
        assert len(hook.of("position")) == 3

    @pytest.mark.asyncio
    async def test_stop_cancels_loop_timers(self, commands, hook):
        """Stopped drills leave nothing running on the loop."""
        scheduler = PlaybackScheduler(commands, 0.02, 25, clock=AsyncioClock(), hook=hook)
        scheduler.start()
        scheduler.stop()
        await asyncio.sleep(0.1)
        assert hook.of("position") == []
        assert scheduler.position == Position()
