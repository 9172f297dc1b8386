"""Configuration management with Pydantic settings."""

import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator
import yaml


class DatabaseConfig(BaseModel):
    """Database configuration."""
    url: str = "sqlite+aiosqlite:///./data/uptime_monitor.db"
    pool_size: int = 5
    max_overflow: int = 10
    pool_pre_ping: bool = True
    echo: bool = False

    @field_validator('url')
    @classmethod
    def driver_must_be_async(cls, v):
        supported = ('sqlite+aiosqlite', 'postgresql+asyncpg')
        if not v.startswith(supported):
            raise ValueError(f'database url must use one of the async drivers {list(supported)}')
        return v


class MonitoringConfig(BaseModel):
    """Probe scheduling settings."""
    interval: int = 60
    timeout: int = 10
    max_concurrent: int = 10
    success_threshold: int = 500
    shutdown_grace: float = 10.0

    @field_validator('interval')
    @classmethod
    def interval_must_be_whole_minutes(cls, v):
        # One log per website per minute
        if v < 60 or v % 60 != 0:
            raise ValueError('interval must be a positive multiple of 60 seconds')
        return v

    @field_validator('timeout')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('timeout must be at least 1 second')
        return v

    @field_validator('max_concurrent')
    @classmethod
    def max_concurrent_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('max_concurrent must be at least 1')
        return v

    @field_validator('success_threshold')
    @classmethod
    def threshold_must_be_status_code(cls, v):
        if not (100 <= v <= 599):
            raise ValueError('success_threshold must be between 100 and 599')
        return v

    @field_validator('shutdown_grace')
    @classmethod
    def grace_must_be_non_negative(cls, v):
        if v < 0:
            raise ValueError('shutdown_grace must be non-negative')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = "logs/uptime_monitor.log"
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v

    @field_validator('format')
    @classmethod
    def format_must_be_known(cls, v):
        if v not in ('json', 'text'):
            raise ValueError('log format must be "json" or "text"')
        return v


class PrometheusConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = True
    path: str = "/metrics"


class CORSConfig(BaseModel):
    """CORS configuration."""
    enabled: bool = False
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "DELETE"])
    allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class APIConfig(BaseModel):
    """API server configuration."""
    host: str = "0.0.0.0"
    port: int = 8000
    cors: CORSConfig = Field(default_factory=CORSConfig)

    @field_validator('port')
    @classmethod
    def port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('port must be between 1 and 65535')
        return v


class Config(BaseModel):
    """Main configuration class."""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    api: APIConfig = Field(default_factory=APIConfig)


# Environment variable -> (section, field)
ENV_OVERRIDES = {
    "DATABASE_URL": ("database", "url"),
    "LOG_LEVEL": ("logging", "level"),
    "PROBE_INTERVAL": ("monitoring", "interval"),
    "PROBE_TIMEOUT": ("monitoring", "timeout"),
    "MAX_CONCURRENT_PROBES": ("monitoring", "max_concurrent"),
}


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML file (defaults to ``CONFIG_PATH``
            or ``config/config.yaml``)

    Returns:
        Config: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist outside development
        ValueError: If config file is invalid or fails validation
    """
    app_env = os.getenv("APP_ENV", "development")
    config_path = config_path or os.getenv("CONFIG_PATH", "config/config.yaml")

    # Load from YAML file
    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}")
    elif app_env != "development":
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # Environment overrides are applied before validation so they are checked too
    for env_name, (section, field) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config_data.setdefault(section, {})[field] = value

    try:
        return Config(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")
