"""Randomized drill command generation.

A drill is built in two halves: random "positive" moves (UP/RIGHT) and
their exact mirrors (DOWN/LEFT). The combined pool always sums to zero on
both axes, so only the ordering needs to be chosen. Ordering is built by
repeatedly picking a random move that keeps the sight within bounds. An
ordering can get stuck before a compensating move is reachable; such
attempts are abandoned and retried up to a fixed cap.
"""

import logging
import random
from typing import Sequence

from src.drill.types import (
    Direction,
    DrillCommand,
    GenerationConfig,
    GenerationFailure,
    GenerationResult,
    MAX_GENERATION_ATTEMPTS,
    Position,
)
from src.drill.validator import apply_command, is_move_valid

logger = logging.getLogger(__name__)

POSITIVE_DIRECTIONS = (Direction.UP, Direction.RIGHT)


class _CommandPool:
    """Remaining commands for one attempt.

    Stored as an arena plus a live count; taking an entry swaps it past
    the live boundary instead of splicing the list.
    """

    def __init__(self, commands: Sequence[DrillCommand]) -> None:
        self._arena = list(commands)
        self._live = len(self._arena)

    def __len__(self) -> int:
        return self._live

    def valid_indices(self, position: Position, max_t_and_e: int) -> list[int]:
        return [
            i
            for i in range(self._live)
            if is_move_valid(position, self._arena[i], max_t_and_e)
        ]

    def take(self, index: int) -> DrillCommand:
        chosen = self._arena[index]
        last = self._live - 1
        self._arena[index], self._arena[last] = self._arena[last], self._arena[index]
        self._live = last
        return chosen


def round_up_to_even(num_commands: int) -> int:
    """Round a command count up to the nearest even number.

    Examples:
        >>> round_up_to_even(5)
        6
        >>> round_up_to_even(4)
        4
    """
    return num_commands if num_commands % 2 == 0 else num_commands + 1


def is_feasible(click_values: Sequence[int], max_t_and_e: int) -> bool:
    """Check that click values can be used at all within the bound."""
    if not click_values:
        return False
    return all(0 < value <= max_t_and_e for value in click_values)


def _positive_half(half: int, click_values: Sequence[int], rng: random.Random) -> list[DrillCommand]:
    return [
        DrillCommand(
            direction=rng.choice(POSITIVE_DIRECTIONS),
            value=rng.choice(click_values),
        )
        for _ in range(half)
    ]


def _order_randomly(
    pool_commands: Sequence[DrillCommand],
    max_t_and_e: int,
    rng: random.Random,
) -> list[DrillCommand] | None:
    """Order a balanced pool by random valid picks.

    Returns:
        The ordered sequence, or None if the attempt got stuck.
    """
    pool = _CommandPool(pool_commands)
    position = Position()
    ordered: list[DrillCommand] = []

    while len(pool):
        valid = pool.valid_indices(position, max_t_and_e)
        if not valid:
            logger.debug(
                f"Stuck at {position} with {len(pool)} commands remaining"
            )
            return None

        chosen = pool.take(rng.choice(valid))
        ordered.append(chosen)
        position = apply_command(position, chosen)

    return ordered


def _order_zigzag(positives: Sequence[DrillCommand], rng: random.Random) -> list[DrillCommand]:
    """Pair every positive move with its mirror right after it.

    Never leaves (0, 0) by more than one click value, so it is valid for
    any click value within the bound.
    """
    pairs = list(positives)
    rng.shuffle(pairs)
    ordered: list[DrillCommand] = []
    for command in pairs:
        ordered.append(command)
        ordered.append(command.mirrored())
    return ordered


def generate(config: GenerationConfig, rng: random.Random | None = None) -> GenerationResult:
    """Generate a balanced, bounds-respecting drill.

    Args:
        config: Generation parameters.
        rng: Random source. A fresh unseeded Random is used if not given.

    Returns:
        GenerationResult. On failure, commands is empty and failure says why.

    Examples:
        >>> config = GenerationConfig(num_commands=4, click_values=(5,), max_t_and_e=25)
        >>> result = generate(config, random.Random(1))
        >>> len(result.commands)
        4
    """
    rng = rng or random.Random()
    total = round_up_to_even(config.num_commands)
    half = total // 2

    if not is_feasible(config.click_values, config.max_t_and_e):
        logger.warning(
            f"Infeasible drill configuration: click values {list(config.click_values)} "
            f"with max T&E {config.max_t_and_e}"
        )
        return GenerationResult(
            commands=(),
            requested_count=config.num_commands,
            total_count=total,
            attempts=0,
            failure=GenerationFailure.INFEASIBLE,
        )

    positives: list[DrillCommand] = []
    for attempt in range(1, config.max_attempts + 1):
        positives = _positive_half(half, config.click_values, rng)
        pool = positives + [command.mirrored() for command in positives]

        ordered = _order_randomly(pool, config.max_t_and_e, rng)
        if ordered is not None:
            logger.debug(f"Generated {total} commands on attempt {attempt}")
            return GenerationResult(
                commands=tuple(ordered),
                requested_count=config.num_commands,
                total_count=total,
                attempts=attempt,
            )

        logger.debug(f"Generation attempt {attempt}/{config.max_attempts} got stuck")

    if config.constructive_fallback:
        logger.warning(
            f"Random ordering failed after {config.max_attempts} attempts, "
            "using zig-zag ordering"
        )
        return GenerationResult(
            commands=tuple(_order_zigzag(positives, rng)),
            requested_count=config.num_commands,
            total_count=total,
            attempts=config.max_attempts,
            used_fallback=True,
        )

    logger.error(
        f"Failed to generate a valid drill after {config.max_attempts} attempts. "
        "Please try different settings."
    )
    return GenerationResult(
        commands=(),
        requested_count=config.num_commands,
        total_count=total,
        attempts=config.max_attempts,
        failure=GenerationFailure.EXHAUSTED,
    )


def generate_drill(
    num_commands: int,
    click_values: Sequence[int],
    max_t_and_e: int,
    rng: random.Random | None = None,
) -> list[DrillCommand]:
    """Generate a drill and return just the command list.

    Convenience wrapper around generate(); returns an empty list on failure.
    """
    config = GenerationConfig(
        num_commands=num_commands,
        click_values=tuple(click_values),
        max_t_and_e=max_t_and_e,
    )
    return list(generate(config, rng).commands)
