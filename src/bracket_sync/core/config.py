from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bracket_sync import __version__


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", populate_by_name=True
    )

    # Local override: path to a pre-fetched snapshot in the live provider's schema.
    bracket_json: str | None = Field(default=None, validation_alias="BRACKET_JSON")
    tournament_year: int | None = Field(default=None, validation_alias="TOURNAMENT_YEAR")

    # topology provider
    ncaa_api_base_url: str = "https://ncaa-api.henrygd.me"

    # live provider
    espn_site_base_url: str = (
        "https://site.api.espn.com/apis/site/v2/sports/basketball/mens-college-basketball"
    )
    espn_v2_base_url: str = (
        "https://site.api.espn.com/apis/v2/sports/basketball/mens-college-basketball"
    )

    request_timeout_s: float = 10.0
    connect_timeout_s: float = 5.0
    source_timeout_s: float = 20.0
    user_agent: str = f"bracket-sync/{__version__} (terminal bracket viewer)"

    refresh_interval_s: float = 30.0
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("bracket_json")
    @classmethod
    def _blank_is_unset(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    def http_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent, "Accept": "application/json"}


settings = Settings()
