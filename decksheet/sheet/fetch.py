"""Portrait loading for the sheet compositor.

Network fetches carry a fixed timeout and resolve to ``None`` on any
failure, so a missing portrait only ever leaves a region blank.
"""

import io
import logging
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from decksheet.config import get_settings

logger = logging.getLogger(__name__)


def fetch_bytes(url: str, timeout: Optional[float] = None) -> Optional[bytes]:
    """Download ``url``.

    Returns:
        Response body, or None on timeout, connection error or HTTP error
    """
    settings = get_settings()
    timeout = settings.fetch_timeout if timeout is None else timeout
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": settings.user_agent})
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Portrait fetch failed for {url}: {e}")
        return None
    return response.content


def load_portrait(ref: str) -> Optional[Image.Image]:
    """Load a portrait from an http(s) URL or a local file path."""
    if not ref:
        return None

    if ref.startswith(("http://", "https://")):
        data = fetch_bytes(ref)
        if data is None:
            return None
        source = io.BytesIO(data)
    else:
        path = Path(ref).expanduser()
        if not path.exists():
            logger.warning(f"Portrait not found: {path}")
            return None
        source = path

    try:
        with Image.open(source) as img:
            img.load()
            return img.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Could not read portrait {ref}: {e}")
        return None
