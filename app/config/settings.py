# app/config/settings.py

from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True
    )

    # PostgreSQL Configuration
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "likes_db"

    # Application Configuration
    APP_NAME: str = "Likes Backend"
    DEBUG: bool = True

    # Password hashing (bcrypt work factor, shared by the whole process)
    BCRYPT_COST: int = 12

    # Upper bound for user listings
    USER_LIST_LIMIT: int = 100

    @property
    def DATABASE_URL(self) -> str:
        """Construct PostgreSQL connection URL for SQLAlchemy"""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"


settings = Settings()
