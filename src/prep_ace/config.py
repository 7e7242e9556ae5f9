"""Runtime settings, read from the environment (and a local .env file)."""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from prep_ace.db import DEFAULT_DB_PATH
from prep_ace.generator import DEFAULT_MODEL
from prep_ace.history import DEFAULT_HISTORY_LIMIT


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    model: str = DEFAULT_MODEL
    db_path: str = DEFAULT_DB_PATH
    history_limit: int = DEFAULT_HISTORY_LIMIT
    log_level: str = "WARNING"
    log_format: str = "text"  # "text" or "json"


def _int(value: str, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def load_settings(env_file: str = None) -> Settings:
    """Build Settings from environment variables, loading ``.env`` first."""
    load_dotenv(env_file)
    db_path = os.environ.get("PREP_ACE_DB_PATH") or DEFAULT_DB_PATH
    return Settings(
        gemini_api_key=os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY", ""),
        model=os.environ.get("PREP_ACE_MODEL") or DEFAULT_MODEL,
        db_path=str(Path(db_path).expanduser()),
        history_limit=max(0, _int(os.environ.get("PREP_ACE_HISTORY_LIMIT"), DEFAULT_HISTORY_LIMIT)),
        log_level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
        log_format=os.environ.get("LOG_FORMAT", "text").lower(),
    )
