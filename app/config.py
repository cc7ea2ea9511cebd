"""Application configuration pulled from environment variables via pydantic."""
import datetime as dt

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the ride planner service."""
    model_config = SettingsConfigDict(env_prefix="RIDEPLAN_", extra="ignore")

    # weather source
    weather_api_url: str = "https://api.open-meteo.com/v1/forecast"
    timezone: str = "Europe/Moscow"  # one zone for every city so hour offsets line up
    request_timeout_seconds: float = 8.0
    request_retries: int = Field(default=3, ge=1)
    retry_delay_seconds: float = Field(default=1.0, ge=0.0)

    # orchestration
    batch_size: int = Field(default=10, ge=1)
    batch_delay_seconds: float = Field(default=0.05, ge=0.0)
    extra_dates: list[dt.date] = Field(default_factory=list)  # public holidays analyzed beyond the weekends

    # routes
    route_source: str = "http"  # options: http, local
    routes_base_url: str = "http://localhost:8000/routes"
    routes_dir: str = "./routes"

    # riding model
    default_target_speed_kmh: float = 27.0
    planning_speed_kmh: float = 30.0
    min_target_speed_kmh: float = 23.0
    max_target_speed_kmh: float = 38.0
    min_sun_hours: float = 6.0

    @field_validator("weather_api_url", "routes_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @model_validator(mode="after")
    def check_pace_range(self) -> "Settings":
        """Reject an inverted pace clamp."""
        if self.min_target_speed_kmh > self.max_target_speed_kmh:
            raise ValueError("min_target_speed_kmh must not exceed max_target_speed_kmh")
        return self

    def clamp_target_speed(self, speed_kmh: float) -> float:
        """Clamp a requested pace into the configured range."""
        return max(self.min_target_speed_kmh, min(self.max_target_speed_kmh, speed_kmh))


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
