"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.drill.options import DrillOptions


SpeechBackend = Literal["auto", "pyttsx3", "say", "espeak", "none"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ==========================================================================
    # Drill Defaults
    # ==========================================================================
    # Used when the CLI is run without overrides. Examples:
    #   NUM_COMMANDS=20
    #   CLICK_VALUES="5, 10, 15"
    #   MAX_T_AND_E=30

    num_commands: int = 10
    click_values: str = "5, 10"  # Comma-separated
    max_t_and_e: int = 25
    command_interval: float = 1.0  # Seconds per command

    # Zig-zag ordering when random ordering keeps getting stuck
    constructive_fallback: bool = False

    # ==========================================================================
    # Voice Settings
    # ==========================================================================
    voice_enabled: bool = True
    tts_manual_speed: bool = False
    tts_speed_multiplier: float = 2.0  # Only used with tts_manual_speed
    tts_backend: SpeechBackend = "auto"

    # Debug
    debug: bool = False
    log_level: LogLevel = "WARNING"

    def drill_options(self) -> DrillOptions:
        """Build drill options from the configured defaults."""
        return DrillOptions(
            num_commands=self.num_commands,
            click_values=self.click_values,
            max_t_and_e=self.max_t_and_e,
            command_interval=self.command_interval,
            voice_enabled=self.voice_enabled,
            tts_manual_speed=self.tts_manual_speed,
            tts_speed_multiplier=self.tts_speed_multiplier,
            constructive_fallback=self.constructive_fallback,
        )

    @property
    def effective_log_level(self) -> str:
        """Log level, forced to DEBUG in debug mode."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
