"""
Configuration Management Module

Provides environment-based configuration using pydantic-settings. A
configuration object is built once at startup and handed explicitly to the
components that need it.
"""

from pydantic_settings import BaseSettings
from typing import Any, Optional


class TransferSystemConfig(BaseSettings):
    """Transfer system configuration"""

    # Database configuration
    database_url: str = "sqlite:///transfer_system.db"  # memory://, sqlite:///..., postgresql://...
    database_pool_min_size: int = 1
    database_pool_max_size: int = 10
    lock_timeout_seconds: Optional[float] = None  # None blocks until the hold is granted
    auto_migrate: bool = True

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    environment: str = "production"  # production or development

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    class Config:
        env_prefix = "TRANSFER_SYSTEM_"
        env_file = ".env"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev")


def load_config(**overrides: Any) -> TransferSystemConfig:
    """Load configuration from the environment, applying explicit overrides"""
    return TransferSystemConfig(**overrides)
