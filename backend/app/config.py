"""Application configuration."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Settings
    APP_NAME: str = "Workflow Automation Engine"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development, staging, production

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./workflows.db"
    SQLALCHEMY_ECHO: bool = False
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10

    # Execution Settings
    ACTION_TIMEOUT_SECONDS: float = 30.0
    EXECUTION_HISTORY_LIMIT: int = 100
    RECENT_EXECUTIONS_LIMIT: int = 10

    # Webhook Settings
    WEBHOOK_TIMEOUT_SECONDS: float = 15.0
    WEBHOOK_ALLOW_PRIVATE_NETWORKS: bool = False

    # Email (SMTP); empty host means emails are logged, not sent
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "workflows@localhost"
    SMTP_USE_TLS: bool = True

    # Slack incoming webhook; empty means messages are logged, not posted
    SLACK_WEBHOOK_URL: str = ""

    # Seed the built-in template library on startup
    SEED_TEMPLATES: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    class Config:
        """Pydantic config."""

        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings.

    Uses caching to ensure settings are loaded only once.

    Returns:
        Settings object with all configuration values
    """
    return Settings()
