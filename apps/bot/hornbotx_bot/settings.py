# apps/bot/hornbotx_bot/settings.py
from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    """Startup configuration is missing or invalid. Fatal."""


class BotSettings(BaseSettings):
    """
    Bot configuration loaded from environment variables and (in local dev) a .env file.

    Required:
      - DISCORD_TOKEN (or the -t/--token command-line flag, which wins)

    Tuning:
      - MAX_QUEUE_SIZE: pending plays per guild before new ones are dropped
      - CHANNEL_SWITCH_SETTLE_MS: wait after moving to another voice channel
      - LEAD_IN_MS: wait before streaming each play
    """

    discord_token: str | None = Field(default=None, alias="DISCORD_TOKEN")

    audio_dir: Path = Field(default=Path("audio"), alias="AUDIO_DIR")
    max_queue_size: int = Field(default=6, ge=1, alias="MAX_QUEUE_SIZE")
    channel_switch_settle_ms: int = Field(default=125, ge=0, alias="CHANNEL_SWITCH_SETTLE_MS")
    lead_in_ms: int = Field(default=32, ge=0, alias="LEAD_IN_MS")

    status_text: str = Field(default="!okbuddy", alias="STATUS_TEXT")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", alias="LOG_LEVEL")

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def active_discord_token(self) -> str:
        token = (self.discord_token or "").strip()
        if not token:
            raise ConfigError("No Discord token: pass -t/--token or set DISCORD_TOKEN")
        return token


def load_bot_settings(*, token: str | None = None) -> BotSettings:
    """
    Load and validate bot settings. A token given on the command line overrides
    DISCORD_TOKEN. Raises ConfigError with a readable message on failure.
    """
    overrides = {"DISCORD_TOKEN": token} if token else {}
    try:
        settings = BotSettings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid bot configuration: {exc}") from exc

    if not (settings.discord_token or "").strip():
        raise ConfigError("No Discord token: pass -t/--token or set DISCORD_TOKEN")
    return settings
