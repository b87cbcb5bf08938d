"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class ClassifierConfig(BaseSettings):
    """Classification engine configuration."""

    model_config = {"env_prefix": "MIDDLEHOUSING_CLASSIFIER_"}

    rules_path: str | None = None
    cache_size: int = 4096


class IngestConfig(BaseSettings):
    """Permit CSV ingestion configuration."""

    model_config = {"env_prefix": "MIDDLEHOUSING_INGEST_"}

    default_csv_path: str = "data/permits.csv"
    autoload_default: bool = False
    max_workers: int | None = None


class GeocodingConfig(BaseSettings):
    """Geocoding service configuration."""

    model_config = {"env_prefix": "MIDDLEHOUSING_GEOCODING_"}

    provider: str = "mock"
    base_url: str = "https://nominatim.openstreetmap.org"
    city_suffix: str = "Seattle, WA"
    timeout_seconds: int = 10
    user_agent: str = "middlehousing/0.1.0"
    concurrency: int = 4
    cache_size: int = 1024


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "MIDDLEHOUSING_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
