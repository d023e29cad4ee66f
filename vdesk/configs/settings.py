from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    APP_NAME: str = "vdesk"
    APP_ENV: Literal["dev", "prod"] = "dev"
    APP_DEBUG: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="APP_")


class CORSSettings(BaseSettings):
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000",
                               "http://localhost:4200", "http://127.0.0.1:4200"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: list[str] = ["*"]
    CORS_HEADERS: list[str] = ["*"]
    CORS_EXPOSE_HEADERS: list[str] = ["Content-Disposition"]

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CORS_")


class MongoSettings(BaseSettings):
    MONGO_HOST: str = ""
    MONGO_PORT: int = 27017
    MONGO_DB: str = "vdesk"
    MONGO_USER: str = ""
    MONGO_PWD: str = ""
    MONGO_COLLECTION: str = "items"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="MONGO_")

    @property
    def MONGO_URL(self) -> str:
        host = self.MONGO_HOST or "localhost"
        port = self.MONGO_PORT or 27017
        if self.MONGO_USER and self.MONGO_PWD:
            return f"mongodb://{self.MONGO_USER}:{self.MONGO_PWD}@{host}:{port}"
        return f"mongodb://{host}:{port}"


class StoreSettings(BaseSettings):
    STORE_BACKEND: Literal["mongo", "memory"] = "mongo"
    STORE_TIMEOUT_SECONDS: float = 15.0

    model_config = SettingsConfigDict(env_file=".env", env_prefix="STORE_")


class UploadSettings(BaseSettings):
    UPLOAD_MAX_BYTES: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", env_prefix="UPLOAD_")


class SentrySettings(BaseSettings):
    SENTRY_DSN: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_PROFILES_SAMPLE_RATE: float = 0.0
    SENTRY_SEND_DEFAULT_PII: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SENTRY_")


class Settings(AppSettings, CORSSettings, MongoSettings, StoreSettings, UploadSettings, SentrySettings):
    RELEASE: str | None = None
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
