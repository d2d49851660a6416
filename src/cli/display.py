"""Rich display helpers for CLI output."""

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from src.drill.options import DrillOptions
from src.drill.speech import calculate_auto_speed
from src.drill.types import Direction, DrillCommand, DrillResult, Position
from src.drill.validator import apply_command
from src.observability.events import (
    CommandEndEvent,
    CommandStartEvent,
    DrillCancelledEvent,
    DrillFinishedEvent,
    DrillStartedEvent,
    GenerationEvent,
    PositionUpdateEvent,
)


# Shared console instance
console = Console()

DIRECTION_STYLES = {
    Direction.UP: "green",
    Direction.DOWN: "red",
    Direction.LEFT: "blue",
    Direction.RIGHT: "yellow",
}

DIRECTION_ARROWS = {
    Direction.UP: "^",
    Direction.DOWN: "v",
    Direction.LEFT: "<",
    Direction.RIGHT: ">",
}


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_info(message: str) -> None:
    """Display info message.

    Args:
        message: Info message.
    """
    console.print(f"[dim]{message}[/dim]")


def display_welcome() -> None:
    """Display the trainer banner."""
    console.print()
    console.print(Panel("[bold yellow]Snake Drill Trainer[/bold yellow]", style="yellow"))
    console.print()


def format_traverse(traverse: int) -> str:
    """Format traverse as R n / L n.

    Examples:
        >>> format_traverse(-5)
        'L 5'
        >>> format_traverse(0)
        'R 0'
    """
    return f"R {traverse}" if traverse >= 0 else f"L {abs(traverse)}"


def format_elevation(elevation: int) -> str:
    """Format elevation as U n / D n."""
    return f"U {elevation}" if elevation >= 0 else f"D {abs(elevation)}"


def render_grid(position: Position, max_t_and_e: int, size: int = 21) -> Text:
    """Render the T&E grid with the reticle at the current position.

    Args:
        position: Simulated position.
        max_t_and_e: Bound shown at the grid edges.
        size: Grid width and height in cells (odd, so zero is centered).

    Returns:
        Rich Text object, one line per grid row.
    """
    half = size // 2
    traverse = max(-max_t_and_e, min(max_t_and_e, position.traverse))
    elevation = max(-max_t_and_e, min(max_t_and_e, position.elevation))
    # Elevation is inverted for screen rows
    col = half + round(traverse / max_t_and_e * half)
    row = half - round(elevation / max_t_and_e * half)

    grid = Text()
    for y in range(size):
        for x in range(size):
            if x == col and y == row:
                grid.append("@", style="bold yellow")
            elif x == half and y == half:
                grid.append("+", style="dim")
            elif y == half:
                grid.append("-", style="dim")
            elif x == half:
                grid.append("|", style="dim")
            else:
                grid.append(".", style="bright_black")
            if x < size - 1:
                grid.append(" ")
        if y < size - 1:
            grid.append("\n")
    return grid


def _create_progress_bar(value: int, max_value: int, width: int = 20) -> Text:
    """Create a Rich Text progress bar.

    Args:
        value: Current value.
        max_value: Maximum value.
        width: Bar width in characters.

    Returns:
        Rich Text object with styled progress bar.
    """
    filled = int((value / max_value) * width) if max_value > 0 else 0
    empty = width - filled

    bar_text = Text()
    bar_text.append("[", style="dim")
    bar_text.append("=" * filled, style="yellow")
    bar_text.append(" " * empty, style="dim")
    bar_text.append("]", style="dim")

    return bar_text


def render_command(command: DrillCommand) -> Text:
    """Render a command as an arrow plus its spoken phrase."""
    style = DIRECTION_STYLES[command.direction]
    text = Text()
    text.append(f"{DIRECTION_ARROWS[command.direction]} ", style=f"bold {style}")
    text.append(command.text, style="bold white")
    return text


def render_drill_panel(
    position: Position,
    max_t_and_e: int,
    command: DrillCommand | None,
    index: int,
    total: int,
) -> Panel:
    """Render the running drill view.

    Args:
        position: Simulated position.
        max_t_and_e: Bound for the grid.
        command: Current command, None before the first command.
        index: Index of the current command.
        total: Number of commands in the drill.

    Returns:
        Panel with grid, T&E readouts, current command and progress.
    """
    readouts = Table.grid(expand=True)
    readouts.add_column(justify="center")
    readouts.add_column(justify="center")
    readouts.add_row("[dim]TRAVERSE (L/R)[/dim]", "[dim]ELEVATION (U/D)[/dim]")
    readouts.add_row(
        f"[bold]{format_traverse(position.traverse)}[/bold]",
        f"[bold]{format_elevation(position.elevation)}[/bold]",
    )

    if command is None:
        current = Text("Loading drill...", style="dim")
    else:
        current = Text(f"COMMAND {index + 1} / {total}  ", style="dim")
        current.append_text(render_command(command))

    progress = _create_progress_bar(index, total, width=40)

    return Panel(
        Group(render_grid(position, max_t_and_e), Text(), readouts, Text(), current, progress),
        title="[bold yellow]Snake Drill[/bold yellow]",
        border_style="yellow",
        box=box.ROUNDED,
    )


def display_result(result: DrillResult) -> None:
    """Display the outcome of a drill.

    Args:
        result: Finished drill result.
    """
    pos = result.final_position
    if result.success:
        title = "[bold green]MISSION SUCCESS[/bold green]"
        message = "Your T&E settings have returned to zero. Well done."
        style = "green"
    else:
        title = "[bold red]MISSION FAILURE[/bold red]"
        message = "Your final T&E settings were not zero. Practice makes perfect."
        style = "red"

    traverse_style = "green" if pos.traverse == 0 else "red"
    elevation_style = "green" if pos.elevation == 0 else "red"
    body = (
        f"{message}\n\n"
        f"Traverse: [{traverse_style}]{pos.traverse}[/{traverse_style}]    "
        f"Elevation: [{elevation_style}]{pos.elevation}[/{elevation_style}]"
    )
    console.print(Panel(body, title=title, border_style=style, padding=(1, 2)))


def display_command_table(commands: list[DrillCommand], max_t_and_e: int) -> None:
    """Display a generated sequence with the running position.

    Args:
        commands: Sequence to show.
        max_t_and_e: Bound, shown in the title.
    """
    table = Table(title=f"Drill ({len(commands)} commands, max T&E {max_t_and_e})")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Command")
    table.add_column("Traverse", justify="right")
    table.add_column("Elevation", justify="right")

    position = Position()
    for i, command in enumerate(commands, start=1):
        position = apply_command(position, command)
        table.add_row(
            str(i),
            render_command(command),
            format_traverse(position.traverse),
            format_elevation(position.elevation),
        )

    console.print(table)


def display_options(options: DrillOptions) -> None:
    """Display the options a drill will run with.

    Args:
        options: Drill options.
    """
    table = Table(title="Drill Setup", box=box.SIMPLE)
    table.add_column("Option", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Number of Commands", str(options.num_commands))
    table.add_row("Max Traverse/Elevation", str(options.max_t_and_e))
    table.add_row("Click Values", ", ".join(str(v) for v in options.parsed_click_values))
    table.add_row("Command Interval", f"{options.command_interval}s")
    table.add_row("Voice Commands", "on" if options.voice_enabled else "off")
    if options.voice_enabled:
        if options.tts_manual_speed:
            speed = f"{options.tts_speed_multiplier:.1f} (manual)"
        else:
            speed = f"{calculate_auto_speed(options.command_interval):.1f} (auto)"
        table.add_row("TTS Speed", speed)

    console.print(table)


class LiveDrillView:
    """Drill hook that redraws a Rich Live panel on every event."""

    def __init__(self, live: Live, max_t_and_e: int) -> None:
        """Initialize the view.

        Args:
            live: Live display to update.
            max_t_and_e: Bound for the grid.
        """
        self.live = live
        self.max_t_and_e = max_t_and_e
        self.position = Position()
        self.command: DrillCommand | None = None
        self.index = 0
        self.total = 0

    def _refresh(self) -> None:
        self.live.update(
            render_drill_panel(self.position, self.max_t_and_e, self.command, self.index, self.total)
        )

    def on_generation(self, event: GenerationEvent) -> None:
        pass

    def on_drill_started(self, event: DrillStartedEvent) -> None:
        self.total = event.command_count
        self.max_t_and_e = event.max_t_and_e
        self._refresh()

    def on_command_start(self, event: CommandStartEvent) -> None:
        self.command = event.command
        self.index = event.index
        self._refresh()

    def on_position_update(self, event: PositionUpdateEvent) -> None:
        self.position = event.position
        self._refresh()

    def on_command_end(self, event: CommandEndEvent) -> None:
        pass

    def on_drill_finished(self, event: DrillFinishedEvent) -> None:
        self.index = self.total
        self._refresh()

    def on_drill_cancelled(self, event: DrillCancelledEvent) -> None:
        pass
