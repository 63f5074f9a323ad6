# portal_chat/core/config.py
"""Application configuration using Pydantic."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    database_url: str
    jwt_secret_key: str

    jwt_algorithm: str = 'HS256'
    access_token_expire_minutes: int = 60

    app_version: str = '1.0.0'
    environment: str = 'development'
    log_level: str = 'info'
    allowed_origins: List[str] = ['*']

    # Create tables on startup instead of running alembic (local runs only)
    auto_create_tables: bool = False

    message_page_size: int = 50
    message_page_max: int = 100

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
