"""Configuration module for Health Reminders.

This module provides configuration settings using Pydantic Settings.
Environment variables can be used to override default values.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings for Health Reminders.

    All settings can be overridden via environment variables.
    Example: export DATABASE_URL="sqlite:////data/health.db"
    """

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./health_reminders.db"
    """Database connection URL. Default: SQLite file in current directory"""

    # General Configuration
    TIMEZONE: str = "UTC"
    """Timezone used to resolve naive reminder times before scheduling"""

    # Notification Configuration
    NOTIFICATIONS_ENABLED: bool = True
    """Notification permission. When False every schedule call is refused"""

    NOTIFICATION_CHANNEL_ID: str = "reminder_channel"
    """Delivery channel identifier"""

    NOTIFICATION_CHANNEL_NAME: str = "Reminders"
    """Human readable delivery channel name"""

    NOTIFICATION_IMPORTANCE: str = "max"
    """Importance attached to every alert (min, low, default, high, max)"""

    NOTIFY_API_URL: Optional[str] = None
    """Push endpoint for HTTP delivery. When unset alerts are only logged"""

    NOTIFY_TIMEOUT: float = 30.0
    """Timeout in seconds for HTTP delivery"""

    # Logging Configuration
    LOG_DIR: Optional[str] = None
    """Directory for rotating log files. Default: ./logs next to the sources"""

    LOG_LEVEL: str = "INFO"
    """Level for every component logger (DEBUG, INFO, WARNING, ERROR)"""

    LOG_TO_CONSOLE: bool = True
    """Also echo component logs to stderr"""

    LOG_MAX_BYTES: int = 5 * 1024 * 1024
    """Size at which a component log file is rotated"""

    LOG_BACKUP_COUNT: int = 3
    """Rotated files kept per component"""

    class Config:
        """Pydantic config"""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


# Global settings instance
settings = Settings()
