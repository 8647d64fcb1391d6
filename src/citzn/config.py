"""Centralized configuration and logging management."""
import os
import logging
import json
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


@dataclass
class GeocodingConfig:
    """Geocodio connection configuration."""
    api_key: Optional[str] = None
    base_url: str = "https://api.geocod.io/v1.7"
    timeout: int = 10
    max_retries: int = 3
    batch_size: int = 50
    rate_limit_requests: int = 1000
    rate_limit_window: int = 24 * 60 * 60
    max_retry_after: int = 60
    congress_number: int = 119

    def __post_init__(self):
        self.base_url = self.base_url.rstrip("/")
        if not self.base_url.startswith(("http://", "https://")):
            self.base_url = f"https://{self.base_url}"


@dataclass
class CacheConfig:
    """District cache configuration."""
    cache_db: str = "data/district_cache.db"
    ttl_seconds: int = 30 * 24 * 60 * 60
    jurisdiction_ttl_seconds: int = 24 * 60 * 60


@dataclass
class AppConfig:
    """Application configuration."""
    geocoding: GeocodingConfig
    cache: CacheConfig
    log_level: str = "INFO"
    debug: bool = False
    state: str = "CA"
    enrich_table_hits: bool = True
    overrides_path: str = "config/zip_overrides.json"
    roster_path: str = "config/representatives.json"


def load_config(config_file: str = "citzn.json") -> AppConfig:
    """Load configuration from citzn.json and environment variables."""
    geo_cfg = {}
    cache_cfg = {}
    app_cfg = {}
    if Path(config_file).exists():
        try:
            with open(config_file) as f:
                data = json.load(f)
            geo_cfg = data.get("geocoding", {})
            cache_cfg = data.get("cache", {})
            app_cfg = data.get("app", {})
        except (json.JSONDecodeError, IOError) as e:
            # Log warning but continue with defaults
            print(f"Warning: Could not load {config_file}: {e}")

    geocoding = GeocodingConfig(
        api_key=os.getenv("GEOCODIO_API_KEY", geo_cfg.get("api_key")) or None,
        base_url=os.getenv("GEOCODIO_BASE_URL", geo_cfg.get("base_url", "https://api.geocod.io/v1.7")),
        timeout=int(os.getenv("GEOCODIO_TIMEOUT", geo_cfg.get("timeout", 10))),
        max_retries=int(os.getenv("GEOCODIO_MAX_RETRIES", geo_cfg.get("max_retries", 3))),
        batch_size=int(os.getenv("GEOCODIO_BATCH_SIZE", geo_cfg.get("batch_size", 50))),
        rate_limit_requests=int(os.getenv("GEOCODIO_DAILY_LIMIT", geo_cfg.get("rate_limit_requests", 1000))),
        max_retry_after=int(geo_cfg.get("max_retry_after", 60)),
        congress_number=int(os.getenv("CONGRESS_NUMBER", geo_cfg.get("congress_number", 119))),
    )

    cache = CacheConfig(
        cache_db=os.getenv("CITZN_CACHE_DB", cache_cfg.get("cache_db", "data/district_cache.db")),
        ttl_seconds=int(os.getenv("CITZN_CACHE_TTL", cache_cfg.get("ttl_seconds", 30 * 24 * 60 * 60))),
        jurisdiction_ttl_seconds=int(cache_cfg.get("jurisdiction_ttl_seconds", 24 * 60 * 60)),
    )

    return AppConfig(
        geocoding=geocoding,
        cache=cache,
        log_level=os.getenv("LOG_LEVEL", app_cfg.get("log_level", "INFO")).upper(),
        debug=os.getenv("DEBUG", str(app_cfg.get("debug", "false"))).lower() == "true",
        state=app_cfg.get("state", "CA"),
        enrich_table_hits=os.getenv(
            "CITZN_ENRICH_TABLE_HITS", str(app_cfg.get("enrich_table_hits", "true"))
        ).lower() == "true",
        overrides_path=os.getenv("CITZN_OVERRIDES", app_cfg.get("overrides_path", "config/zip_overrides.json")),
        roster_path=os.getenv("CITZN_ROSTER", app_cfg.get("roster_path", "config/representatives.json")),
    )


def setup_logging(log_level: str = "INFO", debug: bool = False) -> logging.Logger:
    """Configure logging with appropriate handlers and formatters."""
    logger = logging.getLogger("citzn")
    logger.setLevel(getattr(logging, log_level, logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
            if not debug else
            "[%(asctime)s] %(levelname)s - %(name)s:%(funcName)s:%(lineno)d - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


# Global config and logger
_config: Optional[AppConfig] = None
_logger: Optional[logging.Logger] = None


def get_config() -> AppConfig:
    """Get or initialize global configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_logger() -> logging.Logger:
    """Get or initialize global logger."""
    global _logger
    if _logger is None:
        cfg = get_config()
        _logger = setup_logging(cfg.log_level, cfg.debug)
    return _logger


def reset_config() -> None:
    """Drop the memoized configuration (tests and reloads)."""
    global _config
    _config = None


# California district counts after the 2021 redistricting
CA_DISTRICT_LIMITS = {
    "congressional": 52,
    "senate": 40,
    "assembly": 80,
}


__all__ = [
    "GeocodingConfig",
    "CacheConfig",
    "AppConfig",
    "load_config",
    "setup_logging",
    "get_config",
    "get_logger",
    "reset_config",
    "CA_DISTRICT_LIMITS",
]
