# resume_insights/core/config.py
from typing import Optional
from pydantic import AnyUrl
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    SECRET_KEY: str = "change-me"  # override in .env / secrets
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Persistence: 'mongo' or 'memory'
    STORE_BACKEND: str = "mongo"
    MONGODB_URI: Optional[str] = "mongodb://localhost:27017/resume_insights"
    MONGODB_DB: Optional[str] = "resume_insights"

    # S3 / R2
    S3_PROVIDER: str = "cloudflare"
    S3_BUCKET: Optional[str] = None
    S3_ENDPOINT: Optional[AnyUrl] = None
    S3_REGION: Optional[str] = None
    S3_ACCESS_KEY: Optional[str] = None
    S3_SECRET_KEY: Optional[str] = None
    # when set, stored objects are addressed by <base>/<key> and fetched over http
    S3_PUBLIC_BASE_URL: Optional[str] = None

    # MinIO dev fallback
    MINIO_ENDPOINT: Optional[str] = None
    MINIO_ACCESS_KEY: Optional[str] = None
    MINIO_SECRET_KEY: Optional[str] = None

    # Local upload directory used when no S3 client is configured
    LOCAL_UPLOAD_DIR: str = "uploads"

    # Uploads
    MAX_FILE_SIZE: int = 2 * 1024 * 1024
    FETCH_TIMEOUT_SEC: float = 30.0

    # Analysis
    ANALYSIS_ENABLED: bool = True
    # Adapter selection: 'mock', 'http' or 'gemini'
    LLM_ADAPTER: str = "mock"
    LLM_HTTP_URL: Optional[AnyUrl] = None
    LLM_API_KEY: Optional[str] = None
    LLM_MODEL: str = "gemini-2.5-flash-lite"
    # None means the AI call is allowed to run for as long as the service takes
    LLM_TIMEOUT_SEC: Optional[float] = None
    INTERVIEW_QUESTION_COUNT: int = 10
    COMPANY_RECOMMENDATION_COUNT: int = 10

    # History / search
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Pydantic v2 settings: read from .env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

# single shared settings instance
settings = Settings()
