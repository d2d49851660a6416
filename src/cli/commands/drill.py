"""Drill commands: run a drill, preview a sequence, check speech rate."""

import asyncio
import logging
import random
from typing import Optional

import typer
from rich.live import Live

from src.cli.display import (
    LiveDrillView,
    console,
    display_command_table,
    display_error,
    display_info,
    display_options,
    display_result,
    display_welcome,
    render_drill_panel,
)
from src.config import get_settings
from src.drill.generator import generate
from src.drill.options import DrillOptions, validate_options
from src.drill.session import DrillSession
from src.drill.speech import (
    NullSpeechCues,
    calculate_auto_speed,
    clamp_speech_rate,
    create_speech_cues,
    resolve_speech_rate,
)
from src.drill.types import DrillResult, DrillState, GenerationResult, Position
from src.observability import CompositeHook, RichConsoleObserver

logger = logging.getLogger(__name__)

app = typer.Typer(help="Run and inspect snake drills")


def _build_options(
    num_commands: int | None = None,
    click_values: str | None = None,
    max_t_and_e: int | None = None,
    interval: float | None = None,
    voice: bool | None = None,
    speed: float | None = None,
    fallback: bool | None = None,
) -> DrillOptions:
    """Merge command-line overrides onto the configured defaults."""
    options = get_settings().drill_options()
    overrides = {
        "num_commands": num_commands,
        "click_values": click_values,
        "max_t_and_e": max_t_and_e,
        "command_interval": interval,
        "voice_enabled": voice,
        "constructive_fallback": fallback,
    }
    if speed is not None:
        overrides["tts_manual_speed"] = True
        overrides["tts_speed_multiplier"] = speed
    return options.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _check_options(options: DrillOptions) -> None:
    errors = validate_options(options)
    if errors:
        for error in errors:
            display_error(error)
        raise typer.Exit(1)


def _report_generation(generation: GenerationResult) -> None:
    if not generation.success:
        display_error(generation.diagnostic or "Drill generation failed")
        raise typer.Exit(1)
    if generation.was_adjusted:
        display_info(
            f"Number of commands rounded up from {generation.requested_count} "
            f"to {generation.total_count}"
        )
    if generation.used_fallback:
        display_info("Random ordering kept getting stuck; using zig-zag ordering")


async def _run_drill(
    options: DrillOptions,
    rng: random.Random | None,
    trace: bool,
) -> tuple[GenerationResult, DrillResult | None]:
    """Run one drill under a Live view until it finishes or is interrupted."""
    settings = get_settings()
    speech = create_speech_cues(settings.tts_backend) if options.voice_enabled else NullSpeechCues()

    initial = render_drill_panel(Position(), options.max_t_and_e, None, 0, 0)
    with Live(initial, console=console, refresh_per_second=20) as live:
        hooks = [LiveDrillView(live, options.max_t_and_e)]
        if trace:
            hooks.append(RichConsoleObserver(console=console))
        session = DrillSession(speech=speech, hook=CompositeHook(hooks), rng=rng)
        session.warm_up()

        try:
            generation = session.start(options)
            if not generation.success:
                return generation, None
            result = await session.wait()
        finally:
            if session.state == DrillState.RUNNING:
                session.reset()

    return generation, result


@app.command()
def run(
    num_commands: Optional[int] = typer.Option(None, "--commands", "-n", help="Number of commands"),
    click_values: Optional[str] = typer.Option(None, "--values", "-v", help='Click values, e.g. "5, 10"'),
    max_t_and_e: Optional[int] = typer.Option(None, "--max", "-m", help="Max traverse/elevation"),
    interval: Optional[float] = typer.Option(None, "--interval", "-i", help="Seconds per command"),
    voice: Optional[bool] = typer.Option(None, "--voice/--no-voice", help="Speak each command"),
    speed: Optional[float] = typer.Option(None, "--speed", help="Manual speech rate (0.5-10)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a repeatable drill"),
    fallback: Optional[bool] = typer.Option(None, "--fallback/--no-fallback", help="Allow zig-zag ordering"),
    trace: bool = typer.Option(False, "--trace", help="Print every drill event"),
) -> None:
    """Run a drill and report whether the sight returned to zero."""
    options = _build_options(num_commands, click_values, max_t_and_e, interval, voice, speed, fallback)
    _check_options(options)

    display_welcome()
    display_options(options)

    logger.debug(f"Running drill with {options.model_dump()}, seed={seed}")
    rng = random.Random(seed) if seed is not None else None
    try:
        generation, result = asyncio.run(_run_drill(options, rng, trace))
    except KeyboardInterrupt:
        display_info("\nDrill stopped.")
        raise typer.Exit(130)

    _report_generation(generation)
    if result is not None:
        display_result(result)


@app.command("generate")
def generate_command(
    num_commands: Optional[int] = typer.Option(None, "--commands", "-n", help="Number of commands"),
    click_values: Optional[str] = typer.Option(None, "--values", "-v", help='Click values, e.g. "5, 10"'),
    max_t_and_e: Optional[int] = typer.Option(None, "--max", "-m", help="Max traverse/elevation"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for a repeatable drill"),
    fallback: Optional[bool] = typer.Option(None, "--fallback/--no-fallback", help="Allow zig-zag ordering"),
) -> None:
    """Generate a drill sequence and print it without playing it."""
    options = _build_options(num_commands, click_values, max_t_and_e, fallback=fallback)
    _check_options(options)

    rng = random.Random(seed) if seed is not None else None
    generation = generate(options.generation_config(), rng)
    _report_generation(generation)
    display_command_table(list(generation.commands), options.max_t_and_e)


@app.command()
def speed(
    interval: float = typer.Argument(..., help="Command interval in seconds"),
    manual: Optional[float] = typer.Option(None, "--manual", help="Manual rate to clamp instead"),
) -> None:
    """Show the speech rate used for a command interval."""
    if manual is not None:
        rate = resolve_speech_rate(interval, True, manual)
        console.print(f"Manual speech rate: [bold]{rate:.1f}[/bold]")
        return

    rate = clamp_speech_rate(calculate_auto_speed(interval))
    console.print(f"Automatic speech rate for {interval}s: [bold]{rate:.1f}[/bold]")
