"""Runtime settings for decksheet.

Values come from ``DECKSHEET_*`` environment variables, optionally seeded
from a ``.env`` file in the working directory or the project root.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in current dir, then the project root
env_path = Path.cwd() / ".env"
if env_path.exists():
    load_dotenv(env_path)
else:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if env_path.exists():
        load_dotenv(env_path)

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; decksheet/0.1)"


@dataclass(frozen=True)
class Settings:
    """Process settings resolved from the environment."""
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    font_dir: Optional[Path] = None
    ladder_path: Optional[Path] = None
    log_level: str = "INFO"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return default


def _env_path(name: str) -> Optional[Path]:
    raw = os.environ.get(name)
    if not raw:
        return None
    return Path(raw).expanduser()


def get_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings(
        fetch_timeout=_env_float("DECKSHEET_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
        user_agent=os.environ.get("DECKSHEET_USER_AGENT", DEFAULT_USER_AGENT),
        font_dir=_env_path("DECKSHEET_FONT_DIR"),
        ladder_path=_env_path("DECKSHEET_LADDER"),
        log_level=os.environ.get("DECKSHEET_LOG_LEVEL", "INFO").upper(),
    )
