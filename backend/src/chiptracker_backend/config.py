"""Service settings.

Values come from the environment (``CHIPTRACKER_`` prefix) or a ``.env``
file. The engine never reads them directly; the service and API layers pass
them in as arguments.
"""
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "ChipTracker Backend"

    # Seating limits enforced when a game is created
    min_players: int = 3
    max_players: int = 10

    default_small_blind: int = 1
    default_big_blind: int = 2
    default_buy_in: int = 50

    invite_code_length: int = 6

    # Table automation defaults for new games
    auto_post_blinds: bool = False
    auto_advance: bool = False

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CHIPTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
