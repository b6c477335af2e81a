# app/core/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    APP_NAME: str = "DDSL Server"
    API_PREFIX: str = "/api"
    DOCS_URL: str = "/docs"
    OPENAPI_URL: str = "/openapi.json"
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_RAW_ORIGINS: str = "http://localhost:4200"

    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 3000

    # Overrides the url of a data source: DATA_SOURCE_URLS='{"Main": "sqlite:///dev.db"}'
    DATA_SOURCE_URLS: dict[str, str] = {}

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.BACKEND_CORS_RAW_ORIGINS.split(",") if o.strip()]


settings = Settings()
