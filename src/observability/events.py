"""Event dataclasses for drill observability hooks.

These events are emitted by the drill session and playback scheduler at
key points so views and tracers can follow a run.
"""

from dataclasses import dataclass, field
from datetime import datetime

from src.drill.types import DrillCommand, Position


@dataclass
class GenerationEvent:
    """Emitted once a drill sequence has been generated (or not)."""

    requested_count: int
    total_count: int
    attempts: int
    success: bool
    used_fallback: bool = False
    diagnostic: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class DrillStartedEvent:
    """Emitted when playback of a drill begins."""

    command_count: int
    interval: float
    max_t_and_e: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CommandStartEvent:
    """Emitted when a command becomes the current one."""

    index: int
    total: int
    command: DrillCommand
    cue_dispatched: bool = False
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class PositionUpdateEvent:
    """Emitted at the midpoint of a command, after the sight moved."""

    index: int
    command: DrillCommand
    position: Position
    clamped: bool = False  # True if the move had to be clamped into bounds
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class CommandEndEvent:
    """Emitted at the end of a command's interval."""

    index: int
    total: int
    command: DrillCommand
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class DrillFinishedEvent:
    """Emitted exactly once when playback completes."""

    final_position: Position
    command_count: int
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.final_position.is_zero


@dataclass
class DrillCancelledEvent:
    """Emitted when a running drill is stopped early."""

    index: int
    position: Position
    timestamp: datetime = field(default_factory=datetime.now)
