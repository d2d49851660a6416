"""Spoken command cues.

Every (direction, value) phrase for a drill is cached before the run so
playing a cue never has construction latency. Cues run out-of-process:
stopping a cue terminates its process, which is the only reliable way to
cut a TTS engine off mid-word.

When no speech backend is available the drill runs silently through
NullSpeechCues; the scheduler never knows the difference.
"""

import importlib.util
import logging
import shutil
import subprocess
import sys
from typing import Callable, Iterable, Protocol, runtime_checkable

from src.drill.clock import AsyncioClock, Clock
from src.drill.types import Direction, DrillCommand

logger = logging.getLogger(__name__)


BASE_SPEECH_RATE = 2.0
STEPS_PER_SECOND = 10  # 0.1s steps
SPEED_INCREASE_PER_STEP = 0.3
MIN_SPEECH_RATE = 0.5
MAX_SPEECH_RATE = 10.0

# Words per minute for a rate multiplier of 1.0
BASE_WORDS_PER_MINUTE = 176

SUPPORTED_BACKENDS = ("pyttsx3", "say", "espeak")

# Seconds a terminated cue gets to exit before it is killed
KILL_GRACE_SECONDS = 0.5


def calculate_auto_speed(interval: float) -> float:
    """Speech rate that lets a phrase fit in the command interval.

    Adds 0.3 to the base rate of 2.0 for every 0.1s the interval falls
    below 1.0s, counted to the nearest step.

    Examples:
        >>> calculate_auto_speed(1.0)
        2.0
        >>> round(calculate_auto_speed(0.7), 1)
        2.9
        >>> calculate_auto_speed(1.5)
        2.0
    """
    if interval >= 1.0:
        return BASE_SPEECH_RATE
    # Nearest step, halves rounded up
    steps = int((1.0 - interval) * STEPS_PER_SECOND + 0.5)
    return BASE_SPEECH_RATE + steps * SPEED_INCREASE_PER_STEP


def clamp_speech_rate(rate: float) -> float:
    """Clamp a rate into the supported engine range."""
    return min(MAX_SPEECH_RATE, max(MIN_SPEECH_RATE, rate))


def resolve_speech_rate(interval: float, manual_speed: bool, speed: float) -> float:
    """Pick the playback rate for a cue.

    Args:
        interval: Command interval in seconds.
        manual_speed: Use speed as-is instead of the automatic rate.
        speed: Manual rate multiplier.

    Returns:
        Rate clamped into [MIN_SPEECH_RATE, MAX_SPEECH_RATE].
    """
    rate = speed if manual_speed else calculate_auto_speed(interval)
    return clamp_speech_rate(rate)


@runtime_checkable
class SpeechCueService(Protocol):
    """Capability interface for spoken cues."""

    @property
    def is_supported(self) -> bool:
        """Whether cues will actually be heard."""
        ...

    def warm_up(self) -> None:
        """Prime the engine so the first real cue starts quickly."""
        ...

    def preload(self, values: Iterable[int]) -> None:
        """Cache a cue for every direction with each click value."""
        ...

    def play(
        self,
        command: DrillCommand,
        interval: float,
        manual_speed: bool,
        speed: float,
    ) -> None:
        """Cancel any in-flight cue and speak the command."""
        ...

    def stop(self) -> None:
        """Cancel any in-flight cue. Always safe."""
        ...


class NullSpeechCues:
    """Silent cues for environments without audio."""

    @property
    def is_supported(self) -> bool:
        return False

    def warm_up(self) -> None:
        pass

    def preload(self, values: Iterable[int]) -> None:
        pass

    def play(
        self,
        command: DrillCommand,
        interval: float,
        manual_speed: bool,
        speed: float,
    ) -> None:
        pass

    def stop(self) -> None:
        pass


def _backend_available(name: str) -> bool:
    if name == "pyttsx3":
        return importlib.util.find_spec("pyttsx3") is not None
    if name == "say":
        return shutil.which("say") is not None
    if name == "espeak":
        return shutil.which("espeak") is not None
    return False


def resolve_backend(preferred: str = "auto") -> str | None:
    """Find a usable speech backend.

    Args:
        preferred: A backend name, or "auto" to search in platform order.

    Returns:
        The backend name, or None if nothing is available.
    """
    if preferred in SUPPORTED_BACKENDS:
        return preferred if _backend_available(preferred) else None

    candidates: list[str] = []
    if sys.platform == "darwin":
        candidates.append("say")
    candidates.extend(("pyttsx3", "espeak"))

    for name in candidates:
        if _backend_available(name):
            return name
    return None


_PYTTSX3_SCRIPT = (
    "import sys\n"
    "import pyttsx3\n"
    "e = pyttsx3.init()\n"
    "e.setProperty('rate', int(sys.argv[1]))\n"
    "e.setProperty('volume', float(sys.argv[2]))\n"
    "e.say(' '.join(sys.argv[3:]))\n"
    "e.runAndWait()\n"
)


def _kill_if_running(proc: subprocess.Popen) -> None:
    if proc.poll() is None:
        logger.debug(f"Speech process {proc.pid} ignored terminate, killing")
        proc.kill()


class SubprocessSpeechCues:
    """Speech cues spoken by a short-lived TTS process per command.

    Nothing here waits on a process. A cue is cut off with terminate()
    and, if it is still alive after KILL_GRACE_SECONDS, killed from a
    timer on the clock.
    """

    def __init__(
        self,
        backend: str | None,
        launcher: Callable[..., subprocess.Popen] = subprocess.Popen,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the cue player.

        Args:
            backend: Backend name from resolve_backend(), None disables speech.
            launcher: Process factory, subprocess.Popen outside tests.
            clock: Timer source for the kill fallback. Defaults to the
                running asyncio loop.
        """
        self._backend = backend
        self._launcher = launcher
        self._clock = clock or AsyncioClock()
        self._cache: dict[str, str] = {}
        self._active: subprocess.Popen | None = None
        self._warming: subprocess.Popen | None = None

    @property
    def is_supported(self) -> bool:
        return self._backend is not None

    @property
    def backend(self) -> str | None:
        return self._backend

    @property
    def cached_keys(self) -> set[str]:
        return set(self._cache)

    def warm_up(self) -> None:
        """Best-effort warm-up: speak one silent phrase.

        Each cue is a fresh process, so this only gets the engine and its
        voice data into the OS cache. The process is left to finish on its
        own and is never cut off by stop().
        """
        if self._backend not in ("pyttsx3", "espeak"):
            return
        self._warming = self._launch(" ", rate=1.0, volume=0.0)

    def preload(self, values: Iterable[int]) -> None:
        if not self.is_supported:
            return
        self._cache.clear()
        for value in values:
            for direction in Direction:
                command = DrillCommand(direction=direction, value=value)
                self._cache[command.key] = command.text
        logger.debug(f"Preloaded {len(self._cache)} speech cues")

    def play(
        self,
        command: DrillCommand,
        interval: float,
        manual_speed: bool,
        speed: float,
    ) -> None:
        if not self.is_supported:
            return

        phrase = self._cache.get(command.key)
        if phrase is None:
            logger.warning(f"Command not preloaded: {command.text}")
            return

        self.stop()
        rate = resolve_speech_rate(interval, manual_speed, speed)
        self._active = self._launch(phrase, rate=rate)

    def stop(self) -> None:
        proc = self._active
        self._active = None
        if proc is None or proc.poll() is not None:
            return
        proc.terminate()
        self._clock.call_later(KILL_GRACE_SECONDS, lambda: _kill_if_running(proc))

    def _argv(self, text: str, rate: float, volume: float) -> list[str]:
        words_per_minute = str(int(BASE_WORDS_PER_MINUTE * rate))
        if self._backend == "pyttsx3":
            return [sys.executable, "-c", _PYTTSX3_SCRIPT, words_per_minute, str(volume), text]
        if self._backend == "say":
            return [shutil.which("say") or "say", "-r", words_per_minute, text]
        # espeak amplitude is 0-200, 100 is the default
        return ["espeak", "-s", words_per_minute, "-a", str(int(volume * 100)), text]

    def _launch(self, text: str, rate: float, volume: float = 1.0) -> subprocess.Popen | None:
        try:
            return self._launcher(
                self._argv(text, rate, volume),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning(f"Speech backend {self._backend} failed, continuing silently: {e}")
            self._backend = None
            return None


def create_speech_cues(backend: str = "auto", clock: Clock | None = None) -> SpeechCueService:
    """Build the speech cue service for the configured backend.

    Args:
        backend: "none", "auto" or a name from SUPPORTED_BACKENDS.
        clock: Timer source for stopping cues.

    Returns:
        SubprocessSpeechCues when a backend is available, else NullSpeechCues.
    """
    if backend == "none":
        return NullSpeechCues()

    resolved = resolve_backend(backend)
    if resolved is None:
        logger.info(f"No speech backend available (requested '{backend}'), cues disabled")
        return NullSpeechCues()

    logger.info(f"Using speech backend: {resolved}")
    return SubprocessSpeechCues(resolved, clock=clock)
