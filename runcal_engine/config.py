import logging
import os
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---- Load .env from the repo root (does not override the real environment) ----
_root = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_root / ".env")

DB_PATH = os.getenv("RUNCAL_DB_PATH", str(_root / "data" / "runcal.db"))
TIMEZONE_NAME = os.getenv("RUNCAL_TIMEZONE", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_timezone(name: Optional[str] = None) -> tzinfo:
    """Zone used for date keys; the host's local zone when none is configured."""
    name = TIMEZONE_NAME if name is None else name
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone '%s'. Falling back to local time.", name)
    return datetime.now().astimezone().tzinfo
