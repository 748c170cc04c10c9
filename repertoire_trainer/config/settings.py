# repertoire_trainer/config/settings.py
"""
Configuration settings for the Repertoire Trainer, powered by Pydantic.

This module centralizes the tunable parameters of a practice session (pacing
delays, depth presets, default mode) and of the opening store. Settings can
be overridden from environment variables, e.g.
`REPERTOIRE_TRAINER_PRACTICE__REPLY_DELAY_S=0.3`.
"""
from typing import List

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from repertoire_trainer.types import PracticeMode

# --- Nested Models for Configuration Schemas ---

class DepthPreset(BaseModel):
    """A named maximum-depth choice offered to the user; 0 means the full line."""
    label: str
    value: int = Field(ge=0)


def _default_depth_presets() -> List[DepthPreset]:
    return [
        DepthPreset(label="6 moves", value=6),
        DepthPreset(label="10 moves", value=10),
        DepthPreset(label="14 moves", value=14),
        DepthPreset(label="Full line", value=0),
    ]


class PracticeSettings(BaseModel):
    """Groups all settings related to pacing and shaping a practice session."""
    reply_delay_s: float = Field(0.15, ge=0, description="Delay before the opponent's scripted reply is played.")
    first_move_delay_factor: int = Field(3, ge=1, description="Multiplier on `reply_delay_s` before White's first move when practicing Black.")
    completion_delay_s: float = Field(1.0, ge=0, description="How long a completed line stays visible before the next one starts.")
    default_max_depth: int = Field(10, ge=0, description="Initial depth cap in plies; 0 disables truncation.")
    default_mode: PracticeMode = Field(PracticeMode.RANDOM, description="Initial line selection policy.")
    depth_presets: List[DepthPreset] = Field(default_factory=_default_depth_presets)

    @field_validator("depth_presets")
    @classmethod
    def validate_presets_are_unique(cls, presets: List[DepthPreset]) -> List[DepthPreset]:
        values = [preset.value for preset in presets]
        if len(values) != len(set(values)):
            raise ValueError("Configuration error: depth preset values must be unique.")
        return presets

    @property
    def first_move_delay_s(self) -> float:
        return self.reply_delay_s * self.first_move_delay_factor


class StoreSettings(BaseModel):
    """Configuration for the JSON-backed opening store."""
    json_filepath: str = Field("data/openings.json", description="The file holding the opening collection.")
    seed_when_missing: bool = Field(True, description="Populate the built-in repertoires when the file does not exist yet.")


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_console: bool = False
    log_file: str = ""

    @model_validator(mode="after")
    def validate_level(self) -> "LoggingSettings":
        if self.level.upper() not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Configuration error: unknown log level '{self.level}'.")
        return self

# --- Main Application Settings Class ---

class Settings(BaseSettings):
    """
    Main configuration class for the application.

    It loads settings from environment variables with the prefix
    'REPERTOIRE_TRAINER_'. Nested models use a double underscore delimiter.
    """
    model_config = SettingsConfigDict(env_prefix="REPERTOIRE_TRAINER_", env_nested_delimiter="__")

    practice: PracticeSettings = Field(default_factory=PracticeSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

# A singleton instance of the settings, accessible throughout the application.
settings = Settings()
