import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv


load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables.

    Pagination defaults and decoder strictness are read once at import time.
    """

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "WARNING")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))

    DEFAULT_PAGE: int = int(os.getenv("DEFAULT_PAGE", "1"))
    DEFAULT_LIMIT: int = int(os.getenv("DEFAULT_LIMIT", "10"))
    MAX_LIMIT: int = int(os.getenv("MAX_LIMIT", "100"))

    DISALLOW_UNKNOWN_FIELDS: bool = _env_bool("DISALLOW_UNKNOWN_FIELDS", "true")

    CORS_ALLOWED_ORIGINS_ENV: str = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000")

    @staticmethod
    def allowed_origins(extra_origins: List[str] | None = None) -> List[str]:
        merged = [o.strip() for o in Config.CORS_ALLOWED_ORIGINS_ENV.split(",") if o.strip()]
        if extra_origins:
            merged.extend(extra_origins)
        # Deduplicate while preserving order
        seen = set()
        result: List[str] = []
        for origin in merged:
            if origin not in seen:
                seen.add(origin)
                result.append(origin)
        return result

    @classmethod
    def validate(cls) -> None:
        if cls.DEFAULT_PAGE < 1:
            raise ValueError("DEFAULT_PAGE must be at least 1")
        if cls.MAX_LIMIT < 1:
            raise ValueError("MAX_LIMIT must be at least 1")
        if not 1 <= cls.DEFAULT_LIMIT <= cls.MAX_LIMIT:
            raise ValueError("DEFAULT_LIMIT must be between 1 and MAX_LIMIT")
