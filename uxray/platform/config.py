from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "UX-ray"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./uxray.db"

    # ── JWT / Auth ──────────────────────────────
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ── Reasoning service ───────────────────────
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANALYSIS_MAX_TOKENS: int = 4000
    ANALYSIS_TEMPERATURE: float = 0.3

    # ── Browser ─────────────────────────────────
    CHROMEDRIVER_PATH: Optional[str] = None
    BROWSER_HEADLESS: bool = True

    # ── Cropping ────────────────────────────────
    CROP_MAX_WORKERS: int = 4

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
