"""Observability module for drill runs.

Provides hooks and observers for real-time visibility into generation,
command playback, position updates and completion.
"""

from src.observability.events import (
    GenerationEvent,
    DrillStartedEvent,
    CommandStartEvent,
    PositionUpdateEvent,
    CommandEndEvent,
    DrillFinishedEvent,
    DrillCancelledEvent,
)
from src.observability.hooks import (
    DrillHook,
    NullHook,
    CompositeHook,
)
from src.observability.console_observer import RichConsoleObserver

__all__ = [
    # Events
    "GenerationEvent",
    "DrillStartedEvent",
    "CommandStartEvent",
    "PositionUpdateEvent",
    "CommandEndEvent",
    "DrillFinishedEvent",
    "DrillCancelledEvent",
    # Hooks
    "DrillHook",
    "NullHook",
    "CompositeHook",
    # Observers
    "RichConsoleObserver",
]
