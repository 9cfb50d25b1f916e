"""Configuration management for Holiday Calendars application."""

from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.exceptions import ConfigurationError

load_dotenv()

DEFAULT_FEEDS_FILE = Path(__file__).parent / "holiday_feeds.yaml"


class AppConfig(BaseSettings):
    """Application configuration."""

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    # Feed fetching
    feed_fetch_timeout: float = Field(default=10.0, validation_alias="FEED_FETCH_TIMEOUT")
    feed_user_agent: str = Field(
        default="holiday-calendars/0.1", validation_alias="FEED_USER_AGENT"
    )
    holiday_feeds_file: Path = Field(
        default=DEFAULT_FEEDS_FILE, validation_alias="HOLIDAY_FEEDS_FILE"
    )

    # Sync settings
    sync_cache_ttl_seconds: int = Field(
        default=5 * 24 * 60 * 60, validation_alias="SYNC_CACHE_TTL_SECONDS"
    )
    sync_max_workers: int = Field(default=4, validation_alias="SYNC_MAX_WORKERS")

    # First-run bootstrap
    init_setup_ttl_seconds: int = Field(
        default=60 * 60, validation_alias="INIT_SETUP_TTL_SECONDS"
    )
    geo_calendar_url: Optional[str] = Field(
        default="https://geo.zammad.com/calendar", validation_alias="GEO_CALENDAR_URL"
    )

    # Storage used by the CLI
    calendar_store_path: Path = Field(
        default=Path("calendars.json"), validation_alias="CALENDAR_STORE_PATH"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )


class HolidayFeedCatalog:
    """Read-only catalog of public holiday feeds loaded from YAML.

    The file holds a ``url`` template containing ``{domain}`` and a
    ``countries`` map of country name to the domain inserted into it.
    """

    def __init__(self, config_path: Path = DEFAULT_FEEDS_FILE):
        self.url_template: str = ""
        self.countries: dict[str, str] = {}

        if not config_path.exists():
            raise ConfigurationError(f"Holiday feed catalog not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data: dict[str, Any] = yaml.safe_load(f) or {}

        self.url_template = data.get("url", "")
        self.countries = dict(data.get("countries") or {})
        if self.countries and "{domain}" not in self.url_template:
            raise ConfigurationError(
                f"Holiday feed url template in {config_path} has no {{domain}} placeholder"
            )

    def feeds(self) -> dict[str, str]:
        """Return ``{feed_url: country}`` for every configured country."""
        return {
            self.url_template.format(domain=domain): country
            for country, domain in self.countries.items()
        }


# Global config instance
config = AppConfig()
