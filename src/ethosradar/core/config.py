"""Configuration management for EthosRadar."""

from typing import List

from pydantic_settings import BaseSettings
from pydantic import Field

from .constants import CacheConstants, ErrorConstants, FileConstants, NetworkConstants, R4RConstants


class Settings(BaseSettings):
    """Application settings."""

    # Ethos API
    ethos_api_base_url: str = Field("https://api.ethos.network", description="Ethos API base URL")
    ethos_reviews_path: str = Field("/api/v1/reviews", description="Review listing endpoint")
    ethos_profile_path: str = Field("/api/v2/user/by/userkey", description="Profile lookup endpoint")
    ethos_user_agent: str = Field("EthosRadar/1.0", description="User agent sent upstream")
    request_timeout: float = Field(float(ErrorConstants.REQUEST_TIMEOUT), description="Per-request timeout in seconds")
    review_page_size: int = Field(100, description="Reviews requested per page")
    max_reviews: int = Field(500, description="Maximum reviews fetched per direction")

    # Retry policy
    max_retries: int = Field(ErrorConstants.MAX_RETRY_ATTEMPTS, description="Maximum retry attempts")
    retry_delay: float = Field(float(ErrorConstants.RETRY_BASE_DELAY), description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")

    # Cache
    cache_ttl_seconds: float = Field(float(CacheConstants.CACHE_TTL_SECONDS), description="Analysis cache time-to-live")
    cache_max_entries: int = Field(CacheConstants.CACHE_MAX_ENTRIES, description="Analysis cache capacity")

    # Analysis settings
    quick_reciprocal_minutes: float = Field(R4RConstants.QUICK_RECIPROCAL_MINUTES, description="Max gap for a quick reciprocal review")
    high_r4r_threshold: float = Field(R4RConstants.HIGH_R4R_REVIEWER_THRESHOLD, description="Score at which a counterpart is flagged")
    max_counterpart_lookups: int = Field(10, description="Counterparts scored per analysis")
    max_network_userkeys: int = Field(NetworkConstants.MAX_USERKEYS, description="Userkeys accepted by network analysis")
    weights_file: str = Field(FileConstants.WEIGHTS_FILE, description="R4R scoring weights file")

    # Server
    host: str = Field("0.0.0.0", description="API bind host")
    port: int = Field(8000, description="API bind port")
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["*"], description="CORS origins")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
