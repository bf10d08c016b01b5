"""
Application configuration.
Tracker defaults and backend settings loaded from environment variables.
"""
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console

    # Remote workout API
    API_BASE_URL: str = "http://localhost:5000"
    API_TOKEN: Optional[str] = None
    API_TIMEOUT: float = 30.0

    # Session clock (seconds)
    TICK_INTERVAL_SECONDS: float = 1.0
    AUTOSAVE_INTERVAL_SECONDS: float = 30.0

    # GPS pipeline
    AUTO_PAUSE_SPEED_KMH: float = 1.0
    CYCLING_AUTO_PAUSE_SPEED_KMH: float = 2.0
    AUTO_LAP_DISTANCE_M: float = 1000.0
    MIN_SEGMENT_DISTANCE_M: float = 2.0
    GPS_ACCURACY_THRESHOLD_M: float = 20.0
    ROUTE_MAX_POINTS: int = 500

    # Calorie estimation
    BODY_WEIGHT_KG: float = 70.0

    # Swimming
    DEFAULT_POOL_LENGTH_M: float = 25.0
    DEFAULT_REST_SECONDS: int = 30

    # Sync queue
    SYNC_MAX_ATTEMPTS: int = 3

    # Workout defaults
    DEFAULT_PRIVACY: str = "public"

    def get_api_url(self, path: str) -> str:
        """Join a backend path onto the configured base URL."""
        return f"{self.API_BASE_URL.rstrip('/')}/{path.lstrip('/')}"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
