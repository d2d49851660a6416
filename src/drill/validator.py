"""Position bounds checking and movement.

Pure functions shared by the generator (to pick legal moves) and the
playback scheduler (to advance the simulated sight).
"""

from src.drill.types import Direction, DrillCommand, Position


def is_move_valid(position: Position, command: DrillCommand, max_t_and_e: int) -> bool:
    """Check whether a command keeps the sight within bounds.

    Args:
        position: Current simulated position.
        command: Candidate move.
        max_t_and_e: Symmetric bound applied to both axes.

    Returns:
        True if the position after the move stays within bounds.

    Examples:
        >>> is_move_valid(Position(traverse=20), DrillCommand(Direction.RIGHT, 10), 25)
        False
        >>> is_move_valid(Position(traverse=20), DrillCommand(Direction.RIGHT, 5), 25)
        True
    """
    direction, value = command.direction, command.value
    if direction == Direction.UP:
        return position.elevation + value <= max_t_and_e
    if direction == Direction.DOWN:
        return position.elevation - value >= -max_t_and_e
    if direction == Direction.LEFT:
        return position.traverse - value >= -max_t_and_e
    if direction == Direction.RIGHT:
        return position.traverse + value <= max_t_and_e
    return False


def apply_command(position: Position, command: DrillCommand) -> Position:
    """Return the position after applying a command (no clamping)."""
    traverse, elevation = position.traverse, position.elevation
    if command.direction == Direction.UP:
        elevation += command.value
    elif command.direction == Direction.DOWN:
        elevation -= command.value
    elif command.direction == Direction.LEFT:
        traverse -= command.value
    elif command.direction == Direction.RIGHT:
        traverse += command.value
    return Position(traverse=traverse, elevation=elevation)


def clamp_position(position: Position, max_t_and_e: int) -> Position:
    """Clamp both axes into [-max_t_and_e, max_t_and_e]."""
    return Position(
        traverse=max(-max_t_and_e, min(max_t_and_e, position.traverse)),
        elevation=max(-max_t_and_e, min(max_t_and_e, position.elevation)),
    )
