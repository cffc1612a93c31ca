"""
Configuration settings using Pydantic Settings.

Every option can be overridden through environment variables or a local
`.env` file. Nothing here is required, so the CLI runs with defaults.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Order: init kwargs > .env (dotenv) > env vars > file secrets
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    # AoE4 World API Configuration
    aoe4world_api_base_url: str = Field(
        "https://aoe4world.com/api/v0",
        validation_alias=AliasChoices("AOE4WORLD_API_BASE_URL", "aoe4world_api_base_url"),
    )
    aoe4world_site_url: str = Field(
        "https://aoe4world.com",
        validation_alias=AliasChoices("AOE4WORLD_SITE_URL", "aoe4world_site_url"),
    )
    aoe4world_http_timeout_seconds: float = Field(
        15.0,
        gt=0,
        validation_alias=AliasChoices(
            "AOE4WORLD_HTTP_TIMEOUT_SECONDS", "aoe4world_http_timeout_seconds"
        ),
    )

    # Live game search
    live_game_recency_window_seconds: float = Field(
        3.0,
        ge=0,
        validation_alias=AliasChoices(
            "LIVE_GAME_RECENCY_WINDOW_SECONDS", "live_game_recency_window_seconds"
        ),
        description="How long before the search started a live game may have begun",
    )
    live_game_deadline_seconds: float = Field(
        10.0,
        gt=0,
        validation_alias=AliasChoices("LIVE_GAME_DEADLINE_SECONDS", "live_game_deadline_seconds"),
    )
    live_game_retry_interval_seconds: float = Field(
        3.0,
        gt=0,
        validation_alias=AliasChoices(
            "LIVE_GAME_RETRY_INTERVAL_SECONDS", "live_game_retry_interval_seconds"
        ),
    )

    # Match-up aggregation (unset = full shared history per opponent)
    matchup_history_limit: int | None = Field(
        None,
        gt=0,
        validation_alias=AliasChoices("MATCHUP_HISTORY_LIMIT", "matchup_history_limit"),
    )

    # Application Configuration
    app_debug: bool = Field(False, validation_alias=AliasChoices("APP_DEBUG", "app_debug"))
    app_log_level: str = Field(
        "INFO", validation_alias=AliasChoices("APP_LOG_LEVEL", "app_log_level")
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
