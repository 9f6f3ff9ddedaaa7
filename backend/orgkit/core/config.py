"""Kit configuration"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    PROJECT_NAME: str = "Organization Repository Kit"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./orgkit.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Organization policy
    MAX_ORGANIZATIONS_PER_USER: int = 10
    SUSPENDED_SWEEP_LIMIT: int = 100  # rows returned by the suspended-window query

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        return async_url(self.DATABASE_URL)


def async_url(url: str) -> str:
    """Rewrite a plain driver URL to its asyncio driver."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


settings = Settings()
