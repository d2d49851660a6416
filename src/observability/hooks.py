"""Observability hook protocol and implementations.

The DrillHook protocol defines the interface for receiving events from a
drill run. Implementations can render to the console, trace to logs, or
record events in tests.
"""

from typing import Protocol, runtime_checkable

from src.observability.events import (
    CommandEndEvent,
    CommandStartEvent,
    DrillCancelledEvent,
    DrillFinishedEvent,
    DrillStartedEvent,
    GenerationEvent,
    PositionUpdateEvent,
)


@runtime_checkable
class DrillHook(Protocol):
    """Protocol for drill observability hooks.

    Implement this protocol to receive events from a drill run.
    """

    def on_generation(self, event: GenerationEvent) -> None:
        """Called after a sequence is generated."""
        ...

    def on_drill_started(self, event: DrillStartedEvent) -> None:
        """Called when playback begins."""
        ...

    def on_command_start(self, event: CommandStartEvent) -> None:
        """Called when a command becomes current."""
        ...

    def on_position_update(self, event: PositionUpdateEvent) -> None:
        """Called at each command's midpoint."""
        ...

    def on_command_end(self, event: CommandEndEvent) -> None:
        """Called at the end of each command's interval."""
        ...

    def on_drill_finished(self, event: DrillFinishedEvent) -> None:
        """Called once when playback completes."""
        ...

    def on_drill_cancelled(self, event: DrillCancelledEvent) -> None:
        """Called when a running drill is stopped."""
        ...


class NullHook:
    """No-op hook for when nobody is watching.

    This is the default hook - it does nothing but satisfies the protocol.
    Using this avoids null checks throughout the code.
    """

    def on_generation(self, event: GenerationEvent) -> None:
        pass

    def on_drill_started(self, event: DrillStartedEvent) -> None:
        pass

    def on_command_start(self, event: CommandStartEvent) -> None:
        pass

    def on_position_update(self, event: PositionUpdateEvent) -> None:
        pass

    def on_command_end(self, event: CommandEndEvent) -> None:
        pass

    def on_drill_finished(self, event: DrillFinishedEvent) -> None:
        pass

    def on_drill_cancelled(self, event: DrillCancelledEvent) -> None:
        pass


class CompositeHook:
    """Combines multiple hooks into one.

    Events are dispatched to all hooks in order.
    Useful for driving the live view and a tracer from the same run.
    """

    def __init__(self, hooks: list[DrillHook]) -> None:
        """Initialize with a list of hooks.

        Args:
            hooks: List of hooks to dispatch events to.
        """
        self.hooks = hooks

    def on_generation(self, event: GenerationEvent) -> None:
        for hook in self.hooks:
            hook.on_generation(event)

    def on_drill_started(self, event: DrillStartedEvent) -> None:
        for hook in self.hooks:
            hook.on_drill_started(event)

    def on_command_start(self, event: CommandStartEvent) -> None:
        for hook in self.hooks:
            hook.on_command_start(event)

    def on_position_update(self, event: PositionUpdateEvent) -> None:
        for hook in self.hooks:
            hook.on_position_update(event)

    def on_command_end(self, event: CommandEndEvent) -> None:
        for hook in self.hooks:
            hook.on_command_end(event)

    def on_drill_finished(self, event: DrillFinishedEvent) -> None:
        for hook in self.hooks:
            hook.on_drill_finished(event)

    def on_drill_cancelled(self, event: DrillCancelledEvent) -> None:
        for hook in self.hooks:
            hook.on_drill_cancelled(event)
