from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "development"  # development | production
    APP_NAME: str = "devcamper-api"
    API_PREFIX: str = "/api/v1"

    DATABASE_URL: str
    REDIS_URL: str = ""

    JWT_SECRET: str = "change_me_jwt"
    JWT_EXPIRE_DAYS: int = 30
    JWT_COOKIE_NAME: str = "token"
    JWT_COOKIE_EXPIRE_DAYS: int = 30

    CORS_ORIGINS: str = "http://localhost:3000"

    RATE_LIMIT_WINDOW_SECONDS: int = 600
    RATE_LIMIT_MAX_REQUESTS: int = 100

    GEOCODER_PROVIDER: str = "dummy"  # dummy | mapquest
    GEOCODER_API_KEY: str = ""
    GEOCODER_TIMEOUT_SECONDS: float = 10.0

    FILE_STORAGE: str = "local"  # local | s3
    FILE_UPLOAD_PATH: str = "./public/uploads"
    MAX_FILE_UPLOAD: int = 1000000
    S3_ENDPOINT: str = ""
    S3_ACCESS_KEY: str = ""
    S3_SECRET_KEY: str = ""
    S3_BUCKET: str = "devcamper-uploads"
    S3_REGION: str = "us-east-1"
    S3_USE_SSL: bool = False

    EMAIL_PROVIDER: str = "dummy"  # dummy | smtp
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "noreply@devcamper.io"
    SMTP_USE_TLS: bool = True
    EMAIL_FROM_NAME: str = "DevCamper"
    RESET_TOKEN_TTL_MINUTES: int = 10

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"
