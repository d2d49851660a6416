"""Drill core: command generation, bounds checking and speech cues.

Usage:
    >>> from src.drill import generate_drill, is_move_valid
    >>> commands = generate_drill(num_commands=10, click_values=[5], max_t_and_e=25)
    >>> len(commands)
    10

Playback lives in src.drill.scheduler and the run lifecycle in
src.drill.session; import those modules directly.
"""

# Types
from src.drill.types import (
    Direction,
    DrillCommand,
    DrillResult,
    DrillState,
    GenerationConfig,
    GenerationFailure,
    GenerationResult,
    Position,
)

# Exceptions
from src.drill.exceptions import DrillError, DrillConfigError, DrillStateError

# Validator
from src.drill.validator import is_move_valid, apply_command, clamp_position

# Generator
from src.drill.generator import (
    MAX_GENERATION_ATTEMPTS,
    generate,
    generate_drill,
    round_up_to_even,
)

# Speech
from src.drill.speech import (
    NullSpeechCues,
    SpeechCueService,
    SubprocessSpeechCues,
    calculate_auto_speed,
    create_speech_cues,
    resolve_speech_rate,
)

__all__ = [
    # Types
    "Direction",
    "DrillCommand",
    "DrillResult",
    "DrillState",
    "GenerationConfig",
    "GenerationFailure",
    "GenerationResult",
    "Position",
    # Exceptions
    "DrillError",
    "DrillConfigError",
    "DrillStateError",
    # Validator
    "is_move_valid",
    "apply_command",
    "clamp_position",
    # Generator
    "MAX_GENERATION_ATTEMPTS",
    "generate",
    "generate_drill",
    "round_up_to_even",
    # Speech
    "NullSpeechCues",
    "SpeechCueService",
    "SubprocessSpeechCues",
    "calculate_auto_speed",
    "create_speech_cues",
    "resolve_speech_rate",
]
