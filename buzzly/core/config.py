# buzzly/core/config.py
from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Buzzly API"
    API_V1_STR: str = "/api/v1"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 # 24 hours

    # Database
    DATABASE_URL_ASYNC: str
    DATABASE_ECHO: bool = False

    # CORS / hosts
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]
    ALLOWED_HOSTS: List[str] = ["localhost", "127.0.0.1", "0.0.0.0", "test"]

    # S3 Media Storage (profile pictures)
    S3_ENDPOINT_URL: Optional[str] = None
    S3_ACCESS_KEY_ID: Optional[str] = None
    S3_SECRET_ACCESS_KEY: Optional[str] = None
    S3_BUCKET_NAME: Optional[str] = None
    S3_PUBLIC_BASE_URL: Optional[str] = None
    S3_PROFILE_PREFIX: str = "profile_pictures"
    MAX_PROFILE_PICTURE_BYTES: int = 5 * 1024 * 1024

    LOG_FILE: str = "buzzly.log"

    # Moderation
    REPORT_LIST_LIMIT: int = 50
    REPORT_TRANSITION_MAX_RETRIES: int = 3
    EXCESSIVE_POSTS_PER_DAY: int = 5

    FEED_LIMIT: int = 20
    NOTIFICATIONS_LIMIT: int = 20

    # First moderator account, created by `python -m scripts.run_seeds`
    SEED_ADMIN_EMAIL: Optional[str] = None
    SEED_ADMIN_USERNAME: str = "admin"
    SEED_ADMIN_PASSWORD: Optional[str] = None

    model_config = ConfigDict(
        case_sensitive=True,
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
