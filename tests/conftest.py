"""Core test fixtures for drill tests."""

import pytest

from src.config import get_settings
from tests.factories import ManualClock, RecordingHook, RecordingSpeechCues, seeded_rng


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at t=0."""
    return ManualClock()


@pytest.fixture
def speech() -> RecordingSpeechCues:
    """Speech cue service that records calls."""
    return RecordingSpeechCues()


@pytest.fixture
def hook() -> RecordingHook:
    """Drill hook that records events."""
    return RecordingHook()


@pytest.fixture
def rng():
    """Seeded random source for repeatable generation."""
    return seeded_rng()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings fresh."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
