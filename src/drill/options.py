"""Drill options parsing and validation.

DrillOptions mirrors the drill setup form: everything the operator can
choose before a run. Values are kept close to how they are entered
(click values as a comma-separated string) and checked together by
validate_options() so every problem can be reported at once.
"""

import re

from pydantic import BaseModel, Field

from src.drill.scheduler import CueSettings
from src.drill.types import GenerationConfig


MIN_COMMANDS = 2
MIN_MAX_T_AND_E = 5

LEADING_INTEGER = re.compile(r"[+-]?\d+")


class DrillOptions(BaseModel):
    """Options for a single drill run."""

    num_commands: int = Field(default=10, description="Total commands (rounded up to even)")
    click_values: str = Field(default="5, 10", description="Comma-separated click values")
    max_t_and_e: int = Field(default=25, description="Max traverse/elevation on either side")
    command_interval: float = Field(default=1.0, description="Seconds per command")
    voice_enabled: bool = Field(default=True, description="Speak each command")
    tts_manual_speed: bool = Field(default=False, description="Use tts_speed_multiplier as-is")
    tts_speed_multiplier: float = Field(default=2.0, description="Manual speech rate")
    constructive_fallback: bool = Field(
        default=False,
        description="Fall back to zig-zag ordering if random ordering keeps getting stuck",
    )

    @property
    def parsed_click_values(self) -> list[int]:
        return parse_click_values(self.click_values)

    def generation_config(self) -> GenerationConfig:
        """Build the generator input from these options."""
        return GenerationConfig(
            num_commands=self.num_commands,
            click_values=tuple(self.parsed_click_values),
            max_t_and_e=self.max_t_and_e,
            constructive_fallback=self.constructive_fallback,
        )

    def cue_settings(self) -> CueSettings:
        """Build the scheduler cue options from these options."""
        return CueSettings(
            enabled=self.voice_enabled,
            manual_speed=self.tts_manual_speed,
            speed=self.tts_speed_multiplier,
        )


def parse_click_values(text: str) -> list[int]:
    """Parse a comma-separated list of click values.

    Each entry is read up to its first non-digit, so "5.5" gives 5 and
    "5 10" gives 5. Entries without a leading integer, and values that
    are not positive, are dropped. Order and repeats are kept.

    Examples:
        >>> parse_click_values("5, 10")
        [5, 10]
        >>> parse_click_values("5, abc, -2, 0, 15")
        [5, 15]
        >>> parse_click_values("5.5, 10 15")
        [5, 10]
        >>> parse_click_values("")
        []
    """
    values: list[int] = []
    for part in text.split(","):
        match = LEADING_INTEGER.match(part.strip())
        if match is None:
            continue
        value = int(match.group())
        if value > 0:
            values.append(value)
    return values


def validate_options(options: DrillOptions) -> list[str]:
    """Check drill options before a run.

    Args:
        options: Options to check.

    Returns:
        Validation messages, empty if the options are usable.
    """
    errors: list[str] = []
    values = options.parsed_click_values

    if not values:
        errors.append("Please enter at least one valid, positive number for click values.")
    if options.num_commands < MIN_COMMANDS:
        errors.append(f"Number of commands must be at least {MIN_COMMANDS}.")
    if options.max_t_and_e < MIN_MAX_T_AND_E:
        errors.append(f"Max T&E must be at least {MIN_MAX_T_AND_E}.")
    if any(value > options.max_t_and_e for value in values):
        errors.append("Click values cannot be greater than the Max T&E.")
    if options.command_interval <= 0:
        errors.append("Command interval must be a positive number.")

    return errors
