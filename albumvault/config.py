from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List, Union

from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite://./albumvault.db"
    # Security
    JWT_SECRET: str = "dev-jwt-secret-change-me-very-long-32-chars-minimum"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRES_MIN: int = 60 * 24 * 7
    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:3000,http://127.0.0.1:3000"
    FRONTEND_URL: str = "http://localhost:3000"

    # Storage
    UPLOAD_DIR: str = "./uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024
    MAX_BATCH_FILES: int = 20
    ALLOWED_IMAGE_TYPES: Union[str, List[str]] = (
        "image/jpeg,image/png,image/gif,image/webp,image/bmp,image/tiff"
    )

    # Ingestion defaults
    DEFAULT_DOMINANT_COLOR: str = "#000000"
    COLOR_SAMPLE_STRIDE: int = 10
    COLOR_BUCKET_SIZE: int = 32

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "10/minute"

    # Observability
    METRICS_ENABLED: bool = False
    SENTRY_DSN: str = ""

    @field_validator("CORS_ORIGINS", "ALLOWED_IMAGE_TYPES", mode="before")
    @classmethod
    def parse_csv(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("DEFAULT_DOMINANT_COLOR")
    @classmethod
    def check_hex_color(cls, v: str) -> str:
        v = v.strip().lower()
        if len(v) != 7 or not v.startswith("#") or any(c not in "0123456789abcdef" for c in v[1:]):
            raise ValueError("DEFAULT_DOMINANT_COLOR must look like #rrggbb")
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

MODELS = [
    "albumvault.models.user",
    "albumvault.models.album",
    "albumvault.models.photo",
]
