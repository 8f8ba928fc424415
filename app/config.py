"""Configuration management using Pydantic BaseSettings with JSON file support."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

import pytz
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def flatten_json_config(config: dict[str, Any]) -> dict[str, Any]:
    """Flatten nested JSON config into flat key-value pairs.

    Supports nested structures like:
    {
        "redis": {"redis_host": "localhost", "redis_port": 6379},
        "cache": {"cache_ttl_seconds": 300}
    }

    Becomes:
    {"redis_host": "localhost", "redis_port": 6379, "cache_ttl_seconds": 300}

    Keys starting with "_" (like "_comment") are skipped.
    """
    result = {}

    for key, value in config.items():
        if key.startswith("_"):
            continue

        if isinstance(value, dict):
            result.update(flatten_json_config(value))
        else:
            result[key] = value

    return result


def load_json_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        config_file: Path to JSON config file. If None, checks CONFIG_FILE env var.

    Returns:
        Dictionary of configuration values (flattened), or empty dict if no file found.
    """
    file_path = config_file or os.getenv("CONFIG_FILE")

    if not file_path:
        return {}

    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
        logger.info(f"Loaded configuration from: {file_path}")
        return flatten_json_config(config)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {file_path}: {e}")
        return {}
    except OSError as e:
        logger.error(f"Error reading config file {file_path}: {e}")
        return {}


class Settings(BaseSettings):
    """Application configuration with JSON file and environment variable support.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. JSON config file (specified via CONFIG_FILE env var)
    3. Default values
    """

    # Redis Configuration
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    # Snapshot store (busy endpoints). Without it the /venues/{id}/busy
    # routes answer 503 and only the static JSON feed is served.
    snapshot_store_enabled: bool = True
    seed_snapshots_on_startup: bool = False

    # Live data cache: "memory" (per-process, single-flight) or "redis" (shared)
    live_cache_backend: str = "memory"
    cache_ttl_seconds: int = 300
    cache_check_period_seconds: int = 60

    # Synthetic curves
    synthetic_jitter: float = 5.0

    # Aggregation
    venue_timezone: str = "Australia/Brisbane"
    aggregation_window_days: int = 30
    busy_default_hours: int = 24
    busy_max_hours: int = 720  # 30 days
    aggregation_per_day_peak: bool = False

    # SerpAPI Configuration (popular times). Empty key = estimates only.
    serpapi_api_key: str = ""
    serpapi_endpoint: str = "https://serpapi.com/search"
    serpapi_timeout_seconds: float = 10.0
    popular_times_cache_ttl_seconds: int = 3600

    # Server Configuration
    server_port: int = 8080
    log_level: str = "INFO"
    allowed_origin: str = "*"

    # Project Paths
    project_root: str = ""
    data_path_prefix: str = "data"

    # Data Files
    venues_data_file: str = "venues.json"
    events_data_file: str = "events.json"
    posts_data_file: str = "posts.json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def __init__(self, **kwargs):
        """Initialize settings from JSON file and environment variables.

        Priority: env vars > JSON config > defaults
        """
        json_config = load_json_config()
        merged_kwargs = {**json_config, **kwargs}

        super().__init__(**merged_kwargs)

        if not self.project_root:
            self.project_root = os.getenv("PROJECT_ROOT", os.getcwd())

    @property
    def base_dir(self) -> Path:
        """Get the project root directory as a Path object."""
        return Path(self.project_root)

    def get_data_path(self, data_file: str) -> Path:
        """Get the full path to a data file."""
        return self.base_dir / self.data_path_prefix / data_file

    @property
    def redis_address(self) -> str:
        """Get Redis connection address in host:port format."""
        return f"{self.redis_host}:{self.redis_port}"

    @property
    def tz(self):
        """Venue timezone as a pytz timezone (UTC if the name is unknown)."""
        try:
            return pytz.timezone(self.venue_timezone)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown venue timezone '{self.venue_timezone}', using UTC")
            return pytz.UTC

    @property
    def allowed_origins(self) -> list[str]:
        """ALLOWED_ORIGIN split on commas."""
        return [o.strip() for o in self.allowed_origin.split(",") if o.strip()]


# Global settings instance
settings = Settings()
