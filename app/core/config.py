from pydantic_settings import BaseSettings
from typing import List, Literal, Optional, Union
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Shortlist Sourcing API"

    # Database Settings
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "shortlist_db"
    DATABASE_URL_OVERRIDE: Optional[str] = None
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis Settings (Celery broker + rate limiting)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Auth provider JWT (tokens are issued externally, we only verify them)
    AUTH_JWT_SECRET: str = "change-me"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = "authenticated"

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Candidate intake pipeline
    MAX_BATCH_SIZE: int = 50
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    ACCEPTANCE_THRESHOLD: int = 60
    FALLBACK_MATCH_SCORE: int = 60
    SCRAPER_TIMEOUT_SECONDS: float = 20.0
    SCORER_TIMEOUT_SECONDS: float = 15.0
    INTAKE_CONCURRENCY: int = 5
    BATCH_SUBMISSIONS_PER_MINUTE: int = 10

    # Profile scraping providers
    SCRAPER_PROVIDER: Literal["scrapingdog", "apify"] = "scrapingdog"
    SCRAPINGDOG_API_KEY: str = ""
    APIFY_API_TOKEN: str = ""
    APIFY_ACTOR_ID: str = "dev_fusion~linkedin-profile-scraper"

    # Match scoring LLM providers
    LLM_PROVIDER: Literal["anthropic", "openai"] = "anthropic"
    ANTHROPIC_API_KEY: str = ""
    ANTHROPIC_MODEL: str = "claude-sonnet-4-20250514"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_TEMPERATURE: float = 0.2

    # Outbound webhooks (empty URL disables the notification)
    JOB_WEBHOOK_URL: str = ""
    GHL_WEBHOOK_URL: str = ""
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0

    # CORS Settings - can be set as JSON string in .env
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["http://localhost:5173", "http://localhost:8000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[List[str], str]) -> List[str]:
        """Parse CORS origins from JSON string or list"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not valid JSON, split by comma
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("SCRAPER_PROVIDER", "LLM_PROVIDER", mode="before")
    @classmethod
    def lowercase_provider(cls, v):
        """Accept "Apify", " OpenAI " and the like; unknown names fail at startup."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
