"""
Configuration management for Booklog backend
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BOOKLOG_",
        case_sensitive=False,
        extra="ignore",
    )

    # Entity store
    store_backend: str = "memory"  # 'memory', 'sql'
    database_url: str = "sqlite+aiosqlite:///./booklog.db"
    sql_echo: bool = False

    # Auth
    jwt_secret: str = "booklog-development-secret-change-me"
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "booklog"
    jwt_audience: str = "booklog-api"
    token_expiry_minutes: int = 60
    # Hashed per user when a user registers without a password
    initial_password: str = "secret"

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 4000
    api_reload: bool = False
    cors_origins: list[str] = ["http://localhost:5173"]
    graphiql: bool = True

    # Environment
    environment: str = "development"  # 'development', 'staging', 'production'
    debug: bool = True
    log_level: str = "INFO"


# Global settings instance
settings = Settings()


def get_database_url(config: Settings | None = None) -> str:
    """Get the async SQLAlchemy URL for the database named by ``config``."""
    url = (config or settings).database_url
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url
