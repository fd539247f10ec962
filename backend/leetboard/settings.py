"""Settings for the leetboard backend with observability configuration."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
    if env_names:
        alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
        return Field(default=default, validation_alias=alias)
    return Field(default=default)


class Settings(BaseSettings):
    redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")
    # Namespace for every key the tracker writes (baselines + custom directory)
    storage_prefix: str = _env_field("leetboard", "STORAGE_PREFIX")

    # Upstream sources
    stats_api_base_url: str = _env_field("https://leetcode-backend-ge9p.onrender.com", "STATS_API_BASE_URL")
    directory_usernames_url: str = _env_field(
        "https://raw.githubusercontent.com/College-Notes/leetcode-data/refs/heads/main/usernames.json",
        "DIRECTORY_USERNAMES_URL",
    )
    directory_mappings_url: str = _env_field(
        "https://raw.githubusercontent.com/College-Notes/leetcode-data/refs/heads/main/usernameMappings.json",
        "DIRECTORY_MAPPINGS_URL",
    )
    # A fetch that exceeds this is treated as a failed fetch for that user
    fetch_timeout_seconds: float = _env_field(10.0, "FETCH_TIMEOUT_SECONDS")
    # 0 means every user is fetched at once
    max_concurrency: int = _env_field(0, "MAX_CONCURRENCY")
    refresh_on_startup: bool = _env_field(True, "REFRESH_ON_STARTUP")

    environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
    obs_enabled: bool = _env_field(True, "OBS_ENABLED")
    obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
    obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
    service_name: str = _env_field("leetboard-api", "SERVICE_NAME")
    git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
    cors_allow_origins: Any = _env_field((), "CORS_ALLOW_ORIGINS")

    # Environment helpers
    def is_prod(self) -> bool:
        return self.environment.lower() in ("prod", "production", "live")

    def is_dev(self) -> bool:
        return self.environment.lower() in ("dev", "development")

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("cors_allow_origins", mode="before")
    def _split_cors(cls, value):  # type: ignore[override]
        if value in (None, ""):
            return ()
        if isinstance(value, str):
            return tuple(part.strip() for part in value.split(",") if part.strip())
        if isinstance(value, (list, tuple, set)):
            return tuple(str(item).strip() for item in value if str(item).strip())
        return ()

    @field_validator("stats_api_base_url", mode="after")
    def _strip_trailing_slash(cls, value: str) -> str:  # type: ignore[override]
        return value.rstrip("/")

    @field_validator("max_concurrency", mode="after")
    def _non_negative(cls, value: int) -> int:  # type: ignore[override]
        return max(0, value)


def _normalise_level(level: str) -> str:
    return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)

