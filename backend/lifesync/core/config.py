from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache

class Settings(BaseSettings):
    PROJECT_NAME: str = "LifeSync Assistant API"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # MongoDB
    MONGO_URL: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "lifesync"

    # Redis (conversation sessions)
    REDIS_URL: str = "redis://localhost:6379/0"

    # LLM Keys
    GEMINI_API_KEY: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    GROQ_API_KEY: Optional[str] = None
    LLM_PROVIDER: Optional[str] = None  # gemini | openai | groq, first available key if unset
    LLM_MODEL: Optional[str] = None

    # Conversation
    GENERATION_TIMEOUT_SECONDS: float = 20.0
    SESSION_TTL_SECONDS: int = 7200  # 2 hours
    PENDING_CONFIRMATION_TTL_SECONDS: int = 3600
    MAX_HISTORY_TURNS: int = 50

    # Single-tenant demo identity used when a request carries no userId
    DEMO_USER_ID: str = "demo-user"

    # Frontend
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

@lru_cache()
def get_settings():
    return Settings()

settings = get_settings()
