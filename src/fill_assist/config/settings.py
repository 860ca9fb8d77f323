"""Configuration settings for the application."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class CacheSettings:
    ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", 3600))
    max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", 1000))
    # Period of the background sweep of expired entries
    sweep_interval_seconds: float = float(os.getenv("CACHE_SWEEP_INTERVAL_SECONDS", 60))


@dataclass
class HighlightSettings:
    highlight_class: str = "pb-highlight"
    tooltip_class: str = "pb-tooltip"
    tooltip_timeout_seconds: float = 5.0
    clear_after_fill_seconds: float = 1.0


@dataclass
class ApiSettings:
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", 7860))
    max_query_length: int = 1000


class Settings:
    cache = CacheSettings()
    highlight = HighlightSettings()
    api = ApiSettings()
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
