import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./tasks.db"
DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def normalize_database_url(url: str) -> str:
    """Make sure the URL names an async driver"""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def _parse_origins(raw: str) -> List[str]:
    if raw.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    db_echo: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment (and .env, if present)"""
        return cls(
            database_url=normalize_database_url(
                os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
            ),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            allowed_origins=_parse_origins(os.getenv("ALLOWED_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            db_echo=_env_bool("DB_ECHO", False),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", 8000)),
            debug=_env_bool("DEBUG", False),
        )
