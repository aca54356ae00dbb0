"""
Centralized configuration management with validation and type conversion.

Every tunable of the place-resolution pipeline (search radii, result
limits, geofences, score table cap) is read from the environment here so
that the ranking code never calls os.getenv() itself.
"""

import os
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum


class Environment(Enum):
    """Application environment types."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class TimeoutConfig:
    """Timeout configuration for different operations."""
    wikipedia: float = 10.0
    api: float = 30.0
    pipeline: float = 120.0

    def get(self, operation: str) -> float:
        """Get timeout for a specific operation.

        Args:
            operation: Operation name

        Returns:
            Timeout value in seconds
        """
        return getattr(self, operation, self.api)


@dataclass
class WikipediaConfig:
    """Remote encyclopedia endpoints and transport knobs."""
    lang: str = "en"
    api_url: str = "https://en.wikipedia.org/w/api.php"
    summary_url: str = "https://en.wikipedia.org/api/rest_v1/page/summary"
    user_agent: str = "PlaceWiki/1.0 (https://github.com/place-wiki/place-wiki)"
    # list=geosearch rejects gsradius above 10 km
    geosearch_max_radius_m: int = 10000
    max_retries: int = 0
    retry_delay: float = 0.5


@dataclass
class ResolverConfig:
    """Primary-article resolution settings."""
    max_distance_km: float = 150.0
    search_limit: int = 10
    geo_radius_m: int = 20000
    geo_limit: int = 20


@dataclass
class PoolConfig:
    """Candidate pool settings."""
    max_items: int = 51
    geo_radius_m: int = 35000
    geo_limit: int = 100
    geofence_km: float = 35.0
    max_scored: int = 60
    keyword_limit: int = 6
    keyword_geofence_km: float = 60.0
    min_before_admin_fallback: int = 2
    proximity_cap_km: float = 6.0
    lookup_concurrency: int = 4


@dataclass
class ClassifierConfig:
    """Classification policy switches."""
    accept_place_shaped_titles: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    max_bytes: int = 10485760  # 10MB
    backup_count: int = 5


class Config:
    """Centralized configuration with validation and type conversion."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.environment = self._get_environment()
        self.debug = self._get_bool("DEBUG", False)

        self.timeout_config = TimeoutConfig(
            wikipedia=self._get_float("TIMEOUT_WIKIPEDIA", 10.0),
            api=self._get_float("TIMEOUT_API", 30.0),
            pipeline=self._get_float("TIMEOUT_PIPELINE", 120.0),
        )

        lang = self._get_str("WIKIPEDIA_LANG", "en")
        self.wikipedia_config = WikipediaConfig(
            lang=lang,
            api_url=self._get_str("WIKIPEDIA_API_URL", f"https://{lang}.wikipedia.org/w/api.php"),
            summary_url=self._get_str(
                "WIKIPEDIA_SUMMARY_URL", f"https://{lang}.wikipedia.org/api/rest_v1/page/summary"
            ),
            user_agent=self._get_str("WIKIPEDIA_USER_AGENT", WikipediaConfig.user_agent),
            geosearch_max_radius_m=self._get_int("WIKIPEDIA_GEOSEARCH_MAX_RADIUS_M", 10000),
            max_retries=self._get_int("WIKIPEDIA_MAX_RETRIES", 0),
            retry_delay=self._get_float("WIKIPEDIA_RETRY_DELAY", 0.5),
        )

        self.resolver_config = ResolverConfig(
            max_distance_km=self._get_float("PRIMARY_MAX_DISTANCE_KM", 150.0),
            search_limit=self._get_int("PRIMARY_SEARCH_LIMIT", 10),
            geo_radius_m=self._get_int("PRIMARY_GEO_RADIUS_M", 20000),
            geo_limit=self._get_int("PRIMARY_GEO_LIMIT", 20),
        )

        self.pool_config = PoolConfig(
            max_items=self._get_int("POOL_MAX_ITEMS", 51),
            geo_radius_m=self._get_int("POOL_GEO_RADIUS_M", 35000),
            geo_limit=self._get_int("POOL_GEO_LIMIT", 100),
            geofence_km=self._get_float("POOL_GEOFENCE_KM", 35.0),
            max_scored=self._get_int("POOL_MAX_SCORED", 60),
            keyword_limit=self._get_int("POOL_KEYWORD_LIMIT", 6),
            keyword_geofence_km=self._get_float("POOL_KEYWORD_GEOFENCE_KM", 60.0),
            min_before_admin_fallback=self._get_int("POOL_MIN_BEFORE_ADMIN_FALLBACK", 2),
            proximity_cap_km=self._get_float("SCORE_PROXIMITY_CAP_KM", 6.0),
            lookup_concurrency=self._get_int("POOL_LOOKUP_CONCURRENCY", 4),
        )

        self.classifier_config = ClassifierConfig(
            accept_place_shaped_titles=self._get_bool("ACCEPT_PLACE_SHAPED_TITLES", False),
        )

        self.logging_config = LoggingConfig(
            level=self._get_str("LOG_LEVEL", "INFO"),
            format=self._get_str("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
            file=self._get_optional("LOG_FILE"),
            max_bytes=self._get_int("LOG_MAX_BYTES", 10485760),
            backup_count=self._get_int("LOG_BACKUP_COUNT", 5),
        )

        self.cors_origin = self._get_str("CORS_ALLOW_ORIGIN", "*")

        self._validate()

    def _get_environment(self) -> Environment:
        """Get application environment."""
        env_str = self._get_str("ENVIRONMENT", "development").lower()
        try:
            return Environment(env_str)
        except ValueError:
            raise ValueError(f"Invalid environment: {env_str}")

    def _get_optional(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get optional environment variable."""
        return os.getenv(key, default)

    def _get_str(self, key: str, default: str) -> str:
        """Get string environment variable with default."""
        return os.getenv(key, default)

    def _get_int(self, key: str, default: int) -> int:
        """Get integer environment variable with default.

        Raises:
            ValueError: If value cannot be converted to int
        """
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Invalid integer for {key}: {value}")

    def _get_float(self, key: str, default: float) -> float:
        """Get float environment variable with default.

        Raises:
            ValueError: If value cannot be converted to float
        """
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ValueError(f"Invalid float for {key}: {value}")

    def _get_bool(self, key: str, default: bool) -> bool:
        """Get boolean environment variable with default."""
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ('1', 'true', 'yes', 'on')

    def _validate(self):
        """Validate configuration values."""
        for attr_name in ['wikipedia', 'api', 'pipeline']:
            timeout = getattr(self.timeout_config, attr_name)
            if timeout <= 0:
                raise ValueError(f"Invalid timeout for {attr_name}: {timeout}")

        pool = self.pool_config
        if pool.max_items < 1:
            raise ValueError(f"Invalid pool size: {pool.max_items}")
        if pool.lookup_concurrency < 1:
            raise ValueError(f"Invalid lookup concurrency: {pool.lookup_concurrency}")
        for name in ('geofence_km', 'keyword_geofence_km', 'proximity_cap_km'):
            if getattr(pool, name) < 0:
                raise ValueError(f"Invalid {name}: {getattr(pool, name)}")

        if self.resolver_config.max_distance_km <= 0:
            raise ValueError(f"Invalid primary distance: {self.resolver_config.max_distance_km}")

        if self.wikipedia_config.max_retries < 0:
            raise ValueError(f"Invalid retry count: {self.wikipedia_config.max_retries}")

    def get_timeout(self, operation: str) -> float:
        """Get timeout for a specific operation."""
        return self.timeout_config.get(operation)

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == Environment.DEVELOPMENT

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == Environment.PRODUCTION

    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == Environment.TESTING

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for debugging."""
        return {
            'environment': self.environment.value,
            'debug': self.debug,
            'wikipedia_lang': self.wikipedia_config.lang,
            'timeout_config': {
                'wikipedia': self.timeout_config.wikipedia,
                'api': self.timeout_config.api,
                'pipeline': self.timeout_config.pipeline,
            },
            'resolver_config': {
                'max_distance_km': self.resolver_config.max_distance_km,
                'geo_radius_m': self.resolver_config.geo_radius_m,
            },
            'pool_config': {
                'max_items': self.pool_config.max_items,
                'geofence_km': self.pool_config.geofence_km,
                'keyword_geofence_km': self.pool_config.keyword_geofence_km,
                'lookup_concurrency': self.pool_config.lookup_concurrency,
            },
            'accept_place_shaped_titles': self.classifier_config.accept_place_shaped_titles,
        }


# Global configuration instance
config = Config()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config


def reload_config() -> Config:
    """Re-read the environment into a fresh global configuration."""
    global config
    config = Config()
    return config


def setup_logging():
    """Set up logging based on configuration."""
    from logging.handlers import RotatingFileHandler

    config = get_config()

    logging.basicConfig(
        level=getattr(logging, config.logging_config.level.upper()),
        format=config.logging_config.format,
    )

    if config.logging_config.file:
        file_handler = RotatingFileHandler(
            config.logging_config.file,
            maxBytes=config.logging_config.max_bytes,
            backupCount=config.logging_config.backup_count,
        )
        file_handler.setFormatter(logging.Formatter(config.logging_config.format))
        logging.getLogger().addHandler(file_handler)

    logging.getLogger('aiohttp').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    if config.is_development() and config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif config.is_production():
        logging.getLogger().setLevel(logging.INFO)
