"""Application settings and configuration management using Pydantic."""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    # Environment and deployment
    environment: str = "development"
    debug: bool = False

    # Revisit scan settings
    scan_interval_minutes: int = 5
    scan_batch_size: int = 5
    scan_max_concurrency: int = 5
    scan_tick_timeout_seconds: Optional[float] = 120.0
    alert_cooldown_minutes: int = 0
    alert_delivery: str = "event_bus"  # 'event_bus' or 'log'
    market_timezone: str = "America/New_York"

    # Consolidation / breakout analysis
    consolidation_min_days: int = 20
    consolidation_max_range_percent: float = 8.0
    breakout_volume_ratio: float = 1.5
    analysis_lookback_days: int = 100

    # API settings
    endpoint_host: str = "0.0.0.0"
    endpoint_port: int = 8000
    endpoint_auth_token: Optional[str] = None
    api_reload: bool = False
    api_log_level: str = "INFO"

    # Database settings
    database_url: Optional[str] = None
    data_directory: str = "data"
    database_echo_sql: bool = False
    database_pool_pre_ping: bool = True
    database_pool_recycle: int = 3600

    # Scheduler settings
    scheduler_max_workers: int = 3

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "structured"  # 'structured' or 'plain'
    log_file_enabled: bool = True
    log_file_path: str = "data/catalyst_watch.log"
    log_max_file_size: str = "10MB"
    log_backup_count: int = 5

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        valid_environments = ["development", "testing", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("scan_interval_minutes")
    @classmethod
    def validate_interval(cls, v):
        """Validate scan interval is reasonable."""
        if v < 1 or v > 1440:  # 1 minute to 24 hours
            raise ValueError("Scan interval must be between 1 and 1440 minutes")
        return v

    @field_validator("scan_batch_size", "scan_max_concurrency", "scheduler_max_workers")
    @classmethod
    def validate_positive_int(cls, v):
        """Validate worker and batch sizes."""
        if v < 1:
            raise ValueError("Batch and concurrency sizes must be at least 1")
        return v

    @field_validator("scan_tick_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        """Validate scan tick timeout."""
        if v is not None and v <= 0:
            raise ValueError("Scan tick timeout must be positive when set")
        return v

    @field_validator("alert_cooldown_minutes")
    @classmethod
    def validate_cooldown(cls, v):
        """Validate alert cooldown."""
        if v < 0:
            raise ValueError("Alert cooldown cannot be negative")
        return v

    @field_validator("alert_delivery")
    @classmethod
    def validate_alert_delivery(cls, v):
        """Validate alert delivery adapter."""
        valid_adapters = ["event_bus", "log"]
        if v.lower() not in valid_adapters:
            raise ValueError(f"Alert delivery must be one of: {valid_adapters}")
        return v.lower()

    @field_validator("consolidation_min_days")
    @classmethod
    def validate_min_days(cls, v):
        """Validate consolidation window length."""
        if v < 2:
            raise ValueError("Consolidation window must be at least 2 days")
        return v

    @field_validator("consolidation_max_range_percent", "breakout_volume_ratio")
    @classmethod
    def validate_positive_float(cls, v):
        """Validate analysis thresholds."""
        if v <= 0:
            raise ValueError("Analysis thresholds must be positive")
        return v

    @field_validator("analysis_lookback_days")
    @classmethod
    def validate_lookback(cls, v):
        """Validate history lookback."""
        if v < 1 or v > 3650:
            raise ValueError("Analysis lookback must be between 1 and 3650 days")
        return v

    @field_validator("endpoint_port")
    @classmethod
    def validate_port(cls, v):
        """Validate port number is in valid range."""
        if v < 1 or v > 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("log_level", "api_log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Validate log format."""
        valid_formats = ["structured", "plain"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    def get_database_url(self) -> str:
        """Get the complete database URL."""
        if self.database_url:
            return self.database_url

        # Default to SQLite in data directory
        from pathlib import Path

        db_dir = Path(self.data_directory)
        db_dir.mkdir(exist_ok=True)
        db_path = db_dir / "catalyst_watch.db"
        return f"sqlite:///{db_path}"

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()


def validate_required_settings() -> bool:
    """
    Validate that all required settings are properly configured.

    Returns:
        bool: True if all required settings are valid, False otherwise
    """
    try:
        settings = get_settings()
    except Exception as e:
        print(f"Configuration validation failed: {e}")
        return False

    return bool(settings.endpoint_auth_token)


def get_required_env_vars() -> list[str]:
    """
    Get list of required environment variables.

    Returns:
        list: List of required environment variable names
    """
    return ["ENDPOINT_AUTH_TOKEN"]
