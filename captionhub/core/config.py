# captionhub/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional, Any, List
from ast import literal_eval


class Settings(BaseSettings):
    PROJECT_NAME: str = "Caption Dataset Hub"
    API_V1_STR: str = "/api/v1"

    # Database settings
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    # API Key settings
    API_KEY_LENGTH: int = 32
    API_KEY_PREFIX: str = "chub"

    # Upload / ingestion settings
    MAX_UPLOAD_SIZE: int = 100 * 1024 * 1024  # 100MB
    SNIFF_PREFIX_BYTES: int = 4096
    INGEST_INSERT_BATCH_SIZE: int = 500
    INGEST_SKIP_SAMPLE_SIZE: int = 10
    INGEST_LOCK_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True

    def __init__(self, **data: Any):
        super().__init__(**data)

        # Process CORS origins from string representation if needed
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                self.BACKEND_CORS_ORIGINS = literal_eval(self.BACKEND_CORS_ORIGINS)
            except (ValueError, SyntaxError):
                self.BACKEND_CORS_ORIGINS = []

        # Construct DB URI if not provided directly
        if not self.SQLALCHEMY_DATABASE_URI:
            if self.POSTGRES_SERVER and self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB:
                self.SQLALCHEMY_DATABASE_URI = (
                    f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                    f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
                )
            else:
                # Default to SQLite if PostgreSQL settings are not complete
                self.SQLALCHEMY_DATABASE_URI = "sqlite:///./captionhub.db"


settings = Settings()
