# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./almoxarifado.db"

    FRONTEND_URL: Optional[str] = None

    # Public CNPJ registry used to prefill supplier forms
    CNPJ_API_URL: str = "https://brasilapi.com.br/api/cnpj/v1/"

    # Timezone used for calendar-day buckets when the client does not send one
    DEFAULT_TIMEZONE: str = "UTC"

    LOG_LEVEL: str = "INFO"

    # Bootstrap administrator, created on startup when both are set
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
