"""Rich console observer for tracing drill runs.

Uses the Rich library to print one line per drill event, with timing
relative to the start of playback.
"""

from datetime import datetime

from rich.console import Console

from src.observability.events import (
    CommandEndEvent,
    CommandStartEvent,
    DrillCancelledEvent,
    DrillFinishedEvent,
    DrillStartedEvent,
    GenerationEvent,
    PositionUpdateEvent,
)


class RichConsoleObserver:
    """Event trace output using Rich.

    Renders drill events to the console with colors and elapsed time.
    """

    DIRECTION_STYLES = {
        "UP": "green",
        "DOWN": "red",
        "LEFT": "blue",
        "RIGHT": "yellow",
    }

    def __init__(
        self,
        console: Console | None = None,
        show_midpoints: bool = True,
        indent: str = "  ",
    ) -> None:
        """Initialize the console observer.

        Args:
            console: Rich Console instance. Creates new one if not provided.
            show_midpoints: Print a line for every position update.
            indent: Indentation string for nested output.
        """
        self.console = console or Console()
        self.show_midpoints = show_midpoints
        self.indent = indent
        self._started_at: datetime | None = None

    def _elapsed(self, timestamp: datetime) -> str:
        if self._started_at is None:
            return "   -   "
        seconds = (timestamp - self._started_at).total_seconds()
        return f"{seconds:6.2f}s"

    def on_generation(self, event: GenerationEvent) -> None:
        """Render generation outcome."""
        if not event.success:
            self.console.print(f"[red]generation failed[/] ({event.diagnostic})")
            return
        fallback = " [yellow]zig-zag[/]" if event.used_fallback else ""
        adjusted = ""
        if event.total_count != event.requested_count:
            adjusted = f" [dim](rounded up from {event.requested_count})[/]"
        self.console.print(
            f"[cyan]generated[/] {event.total_count} commands "
            f"in {event.attempts} attempt(s){fallback}{adjusted}"
        )

    def on_drill_started(self, event: DrillStartedEvent) -> None:
        """Render playback start."""
        self._started_at = event.timestamp
        self.console.print(
            f"[bold]drill started[/] {event.command_count} commands, "
            f"{event.interval}s interval, max T&E {event.max_t_and_e}"
        )

    def on_command_start(self, event: CommandStartEvent) -> None:
        """Render the new current command."""
        style = self.DIRECTION_STYLES.get(event.command.direction.value, "white")
        cue = " [dim](cue)[/]" if event.cue_dispatched else ""
        self.console.print(
            f"{self._elapsed(event.timestamp)} {self.indent}"
            f"{event.index + 1}/{event.total} [{style}]{event.command.text}[/]{cue}"
        )

    def on_position_update(self, event: PositionUpdateEvent) -> None:
        """Render the simulated position after the move."""
        if not self.show_midpoints:
            return
        clamped = " [red]clamped[/]" if event.clamped else ""
        self.console.print(
            f"{self._elapsed(event.timestamp)} {self.indent}{self.indent}"
            f"T {event.position.traverse:+d} E {event.position.elevation:+d}{clamped}",
            style="dim",
        )

    def on_command_end(self, event: CommandEndEvent) -> None:
        pass

    def on_drill_finished(self, event: DrillFinishedEvent) -> None:
        """Render the final position."""
        status = "[green]zeroed[/]" if event.success else "[red]not zeroed[/]"
        pos = event.final_position
        self.console.print(
            f"{self._elapsed(event.timestamp)} [bold]drill finished[/] "
            f"T {pos.traverse:+d} E {pos.elevation:+d} {status}"
        )

    def on_drill_cancelled(self, event: DrillCancelledEvent) -> None:
        """Render early stop."""
        self.console.print(
            f"{self._elapsed(event.timestamp)} [yellow]drill stopped[/] "
            f"at command {event.index + 1}"
        )
