from functools import lru_cache

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


load_dotenv()


class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "resumecraft API"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./resumecraft.db"
    DB_ECHO: bool = False
    SEED_TEMPLATES: bool = True

    # Token Settings
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS512"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # Object storage for avatars
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    AVATAR_BUCKET: str = "avatars"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5 MB

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "https://localhost:3000",
        "http://localhost:5173",
        "https://localhost:5173",
    ]

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
