import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env once, globally
load_dotenv()

# Project root (independent of current working directory).
PROJECT_ROOT = Path(__file__).resolve().parents[3]


def resolve_dir(env_key: str, default: str) -> Path:
    """
    Resolve a directory path from ENV.
    Relative paths are resolved against PROJECT_ROOT. The directory is not
    created here.
    """
    path = Path(os.getenv(env_key, default))
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def _float_env(env_key: str, default: float) -> float:
    raw = os.getenv(env_key)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str]
    model: str
    assistant_timeout: float
    industry: str
    locale: str
    log_level: str
    logs_dir: Path


def load_settings() -> Settings:
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        model=os.getenv("TRADIE_MAIL_MODEL", "gpt-4.1-mini"),
        assistant_timeout=_float_env("TRADIE_MAIL_ASSISTANT_TIMEOUT", 10.0),
        industry=os.getenv("TRADIE_MAIL_INDUSTRY", "trade"),
        locale=os.getenv("TRADIE_MAIL_LOCALE", "en-AU"),
        log_level=os.getenv("TRADIE_MAIL_LOG_LEVEL", "INFO").upper(),
        logs_dir=resolve_dir("TRADIE_MAIL_LOGS_DIR", "logs"),
    )
