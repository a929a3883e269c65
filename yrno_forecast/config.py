"""Library configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from yrno_forecast.utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

DEFAULT_VERSION = "1.9"


class Settings(BaseSettings):
    """Environment-driven configuration for the yr.no forecast client."""
    model_config = SettingsConfigDict(env_prefix="YRNO_", extra="ignore")

    version: str = DEFAULT_VERSION  # locationforecast API version
    request_timeout_ms: int | None = None  # None waits forever
    base_url: str = "https://api.met.no/weatherapi"
    user_agent: str = "yrno-forecast/0.3.0 (+https://github.com/yrno-forecast/yrno-forecast)"
    forecast_source: str = "met_no"
    log_level: str = "INFO"

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v) -> str:
        """Accept numeric versions such as 1.9 as well as strings."""
        return str(v)

    @field_validator("base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @property
    def request_timeout_seconds(self) -> float | None:
        """Timeout in the unit requests expects."""
        if self.request_timeout_ms is None:
            return None
        return self.request_timeout_ms / 1000.0


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
