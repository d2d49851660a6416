"""Drill system type definitions.

Immutable dataclasses for commands, positions, generation results and
drill outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum


class Direction(str, Enum):
    """Direction of a single T&E adjustment.

    UP/DOWN move elevation, LEFT/RIGHT move traverse.
    """

    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @property
    def opposite(self) -> "Direction":
        """The direction that exactly undoes this one."""
        return _OPPOSITES[self]

    @property
    def is_elevation(self) -> bool:
        """Whether this direction moves the elevation axis."""
        return self in (Direction.UP, Direction.DOWN)


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class DrillState(str, Enum):
    """Lifecycle of a drill session.

    CONFIGURING -> RUNNING -> FINISHED -> (reset) -> CONFIGURING
    """

    CONFIGURING = "configuring"
    RUNNING = "running"
    FINISHED = "finished"


class GenerationFailure(str, Enum):
    """Why the generator returned an empty sequence."""

    INFEASIBLE = "infeasible"  # bad click values, no attempt made
    EXHAUSTED = "exhausted"  # every attempt got stuck


@dataclass(frozen=True)
class DrillCommand:
    """A single directional adjustment.

    Attributes:
        direction: Which way to move.
        value: Click value (magnitude) of the move, always positive.
    """

    direction: Direction
    value: int

    @property
    def key(self) -> str:
        """Unique key for this direction/value combination."""
        return f"{self.direction.value}_{self.value}"

    @property
    def text(self) -> str:
        """Phrase spoken and displayed for this command."""
        return f"{self.direction.value} {self.value}"

    def mirrored(self) -> "DrillCommand":
        """Return the command that undoes this one."""
        return DrillCommand(direction=self.direction.opposite, value=self.value)


@dataclass(frozen=True)
class Position:
    """Simulated traverse/elevation state.

    Attributes:
        traverse: Horizontal axis, LEFT decreases and RIGHT increases.
        elevation: Vertical axis, DOWN decreases and UP increases.
    """

    traverse: int = 0
    elevation: int = 0

    @property
    def is_zero(self) -> bool:
        """Check if the sight is back at the zeroed position."""
        return self.traverse == 0 and self.elevation == 0


# Randomized construction attempts before the generator gives up
MAX_GENERATION_ATTEMPTS = 10


@dataclass(frozen=True)
class GenerationConfig:
    """Input to the command sequence generator.

    Attributes:
        num_commands: Requested number of commands (rounded up to even).
        click_values: Pool of click values to draw from.
        max_t_and_e: Symmetric bound on both axes.
        max_attempts: Randomized construction attempts before giving up.
        constructive_fallback: Emit a zig-zag ordering when every attempt fails.
    """

    num_commands: int
    click_values: tuple[int, ...]
    max_t_and_e: int
    max_attempts: int = MAX_GENERATION_ATTEMPTS
    constructive_fallback: bool = False


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of generating a drill.

    Attributes:
        commands: The generated sequence (empty on failure).
        requested_count: num_commands as requested.
        total_count: num_commands rounded up to the next even number.
        attempts: Randomized attempts made (0 when infeasible).
        failure: Why generation failed, or None on success.
        used_fallback: True if the zig-zag ordering produced the sequence.
    """

    commands: tuple[DrillCommand, ...]
    requested_count: int
    total_count: int
    attempts: int
    failure: GenerationFailure | None = None
    used_fallback: bool = False

    @property
    def success(self) -> bool:
        """Whether a sequence was produced."""
        return self.failure is None

    @property
    def was_adjusted(self) -> bool:
        """Whether the command count was rounded up."""
        return self.total_count != self.requested_count

    @property
    def diagnostic(self) -> str | None:
        """Human-readable reason for a failed generation."""
        if self.failure == GenerationFailure.INFEASIBLE:
            return (
                "Click values must be non-empty and no larger than the Max T&E."
            )
        if self.failure == GenerationFailure.EXHAUSTED:
            return (
                f"Failed to generate a valid drill after {self.attempts} attempts. "
                "Please try different settings."
            )
        return None


@dataclass(frozen=True)
class DrillResult:
    """Final outcome of a drill.

    Attributes:
        final_position: Position reported when playback finished.
        command_count: Number of commands in the drill.
        commands: The sequence that was played.
    """

    final_position: Position
    command_count: int
    commands: tuple[DrillCommand, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        """Drill succeeds when the sight ends at zero."""
        return self.final_position.is_zero
