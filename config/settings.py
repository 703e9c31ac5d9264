"""
Application settings and configuration management.
Handles environment variables, catalog/database configuration, and player defaults.
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass
class CatalogConfig:
    """Configuration for the remote catalog HTTP service."""
    base_url: str
    timeout: int = 30
    max_retries: int = 3

@dataclass
class DatabaseConfig:
    """Configuration for the MongoDB track catalog."""
    mongo_url: Optional[str] = None
    db_name: str = "moodradio"
    tracks_collection: str = "tracks"

@dataclass
class CacheConfig:
    """Configuration for caching system."""
    redis_url: Optional[str] = None
    default_ttl: int = 3600     # 1 hour
    stats_ttl: int = 300        # 5 minutes
    moods_ttl: int = 86400      # 24 hours

@dataclass
class PlayerConfig:
    """Defaults for the playback queue controller."""
    default_volume: float = 0.7
    history_limit: int = 50
    restart_threshold: float = 3.0  # seconds before "previous" restarts the track
    progress_interval: float = 1.0  # seconds between elapsed-time polls
    auto_play: bool = False

@dataclass
class RadioConfig:
    """Defaults for mood radio generation."""
    default_limit: int = 50
    default_shuffle: bool = True
    discover_limit: int = 10
    discover_max_plays: int = 1000
    stats_top_n: int = 5

def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")

class Settings:
    """Main application settings."""

    def __init__(self):
        # Catalog HTTP service (used by the client-side player)
        self.catalog = CatalogConfig(
            base_url=os.getenv("CATALOG_API_URL", "http://localhost:5000/api")
        )

        # MongoDB catalog (used by the radio service)
        self.database = DatabaseConfig(
            mongo_url=os.getenv("MONGO_URL"),
            db_name=os.getenv("DB_NAME", "moodradio")
        )

        # Cache Configuration
        self.cache = CacheConfig(
            redis_url=os.getenv("REDIS_URL")
        )
        self.REDIS_URL = self.cache.redis_url

        self.player = PlayerConfig(
            auto_play=_env_bool("PLAYER_AUTO_PLAY", False)
        )
        self.radio = RadioConfig()

        # HTTP service
        self.app_host = os.getenv("APP_HOST", "0.0.0.0")
        self.app_port = int(os.getenv("APP_PORT", "8000"))
        self.debug = _env_bool("DEBUG", False)

        # Logging Configuration
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        self.log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def validate(self, require_database: bool = False) -> bool:
        """Validate that required configuration is present."""
        required_vars = []

        if require_database and not self.database.mongo_url:
            required_vars.append("MONGO_URL")
        if not self.catalog.base_url:
            required_vars.append("CATALOG_API_URL")

        if required_vars:
            raise ValueError(f"Missing required environment variables: {', '.join(required_vars)}")

        return True

def configure_logging(settings: Settings) -> None:
    """Apply the configured log level and format to the root logger."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format
    )
