"""Load settings from environment (.env and env vars)."""

from __future__ import annotations

import logging
import os
from pathlib import Path

# Load .env from backend root if present
_env_path = Path(__file__).resolve().parent.parent.parent / ".env"
if _env_path.exists():
    from dotenv import load_dotenv
    load_dotenv(_env_path)


def _str(key: str, default: str = "") -> str:
    return (os.environ.get(key) or "").strip() or default


def _int(key: str, default: int) -> int:
    try:
        return int(_str(key) or default)
    except ValueError:
        return default


# Walker step cap used by the API and CLI (the engine default is 10)
MAX_PATH_STEPS = max(1, _int("QUIZ_FLOW_MAX_PATH_STEPS", 10))

# HTTP
CORS_ORIGINS = [o.strip() for o in _str("QUIZ_FLOW_CORS_ORIGINS", "*").split(",") if o.strip()]

# Data dir for persisted quiz documents
QUIZ_FLOW_DATA_DIR = _str("QUIZ_FLOW_DATA_DIR")

LOG_LEVEL = _str("QUIZ_FLOW_LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
