# app/config/settings.py
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    DEBUG: bool = False

    # External source credentials / endpoints
    TMDB_API_KEY: str = ""
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL: str = "https://image.tmdb.org/t/p/w500"
    IMDB_BASE_URL: str = "https://www.imdb.com"
    SOURCES_FILE: Optional[str] = None

    # Cache Configuration
    REDIS_URL: str = "redis://localhost:6379"
    CACHE_TTL_SEARCH_RESULTS: int = 1800
    MEMORY_CACHE_SIZE: int = 1000

    # Security
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Orchestration
    FANOUT_TIMEOUT: float = 5.0
    SOURCE_REQUEST_TIMEOUT: int = 10
    MAX_RESULTS: int = 20

    # Health monitoring
    HEALTH_CHECK_INTERVAL: int = 60
    PROBE_TIMEOUT: float = 5.0
    RELIABILITY_FLOOR: int = 40
    RESPONSE_TIME_SMOOTHING: float = 0.3
    DAILY_USAGE_RESET_SECONDS: int = 86400

    # Fusion ranking weights
    FUSION_WEIGHT_POPULARITY: float = 0.30
    FUSION_WEIGHT_RATING: float = 0.25
    FUSION_WEIGHT_CONFIDENCE: float = 0.20
    FUSION_WEIGHT_CULTURAL: float = 0.15
    FUSION_WEIGHT_TRENDING: float = 0.10
    SOURCE_BONUS_PER_SOURCE: float = 5.0
    SOURCE_BONUS_CAP: float = 20.0
    RECENCY_BONUS_MAX: float = 5.0
    RECENCY_DECAY_PER_YEAR: float = 0.5

    # Monitoring
    LOG_LEVEL: str = "INFO"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("DEBUG", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return v

    @field_validator("RELIABILITY_FLOOR")
    @classmethod
    def validate_floor(cls, v):
        if not 0 <= v <= 100:
            raise ValueError("RELIABILITY_FLOOR must be between 0 and 100")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore unknown env vars
    }

settings = Settings()
