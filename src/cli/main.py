"""Main CLI application for the snake drill trainer."""

import logging

import typer
from rich.logging import RichHandler

from src.cli.commands import drill
from src.config import get_settings

# Create main app
app = typer.Typer(
    name="snake-drill",
    help="Traverse and elevation snake drill trainer",
    add_completion=True,
)

# Add sub-commands
app.add_typer(drill.app, name="drill")


@app.command()
def play(
    seed: int = typer.Option(None, "--seed", help="Random seed for a repeatable drill"),
) -> None:
    """Quick start - run a drill with the configured defaults.

    This is a shortcut for 'snake-drill drill run'.
    """
    # Pass explicit defaults since Typer Option objects aren't resolved
    # when calling function directly (not via CLI)
    drill.run(
        num_commands=None,
        click_values=None,
        max_t_and_e=None,
        interval=None,
        voice=None,
        speed=None,
        seed=seed,
        fallback=None,
        trace=False,
    )


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Snake Drill Trainer - return the sight to zero.

    Use 'snake-drill play' to run a drill with the configured defaults.
    """
    settings = get_settings()
    level = "DEBUG" if debug else settings.effective_log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
