from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from datetime import date
from pydantic import field_validator
import json


class Settings(BaseSettings):
    # Общие настройки
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # HTTP сервер
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8080

    # База данных
    DATABASE_URL: str = "sqlite:///./filmorate.db"
    DATABASE_ECHO: bool = False

    # Хранилище: "db" (SQLAlchemy) или "memory" (в памяти процесса)
    STORAGE_BACKEND: str = "db"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def validate_storage_backend(cls, v):
        if v not in ("db", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'db' or 'memory'")
        return v

    # Бизнес-правила
    POPULAR_FILMS_DEFAULT_COUNT: int = 10
    FILM_RELEASE_DATE_MIN: date = date(1895, 12, 28)  # Первый киносеанс
    FILM_DESCRIPTION_MAX_LENGTH: int = 200

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
