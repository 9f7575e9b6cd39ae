"""Export a deck session to a deck sheet PNG."""

import logging
from pathlib import Path
from typing import Optional

from PIL import Image

from decksheet.deck.session import DeckSession
from decksheet.sheet.compose import PortraitLoader, compose_sheet
from decksheet.sheet.fetch import load_portrait

logger = logging.getLogger(__name__)


def build_sheet(
    session: DeckSession,
    theme: Optional[list[str]] = None,
    caption: Optional[str] = None,
    loader: PortraitLoader = load_portrait,
) -> Image.Image:
    """Compose the sheet for a session.

    The caption defaults to the deck name and the theme to the leader's
    colours.
    """
    leader = session.leader_card
    if leader is None and session.leader:
        logger.warning(f"Leader {session.leader} not in catalog; drawing without it")

    if theme is None:
        theme = leader.ordered_colors() if leader is not None else []
    if caption is None:
        caption = session.name

    ok, message = session.validate()
    if not ok:
        logger.warning(f"Exporting incomplete deck: {message}")

    return compose_sheet(
        leader_portrait=leader.portrait if leader is not None else None,
        main_payload=session.sheet_payload(),
        caption=caption,
        cards=session.sheet_cards(),
        theme_colors=theme,
        leader_card=leader,
        loader=loader,
    )


def export_sheet(
    session: DeckSession,
    output_path: Path,
    theme: Optional[list[str]] = None,
    caption: Optional[str] = None,
    loader: PortraitLoader = load_portrait,
) -> Path:
    """Compose and save the sheet as PNG.

    Returns:
        Path to the written file
    """
    img = build_sheet(session, theme=theme, caption=caption, loader=loader)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(output_path, "PNG")
    logger.info(f"Saved deck sheet: {output_path}")
    return output_path
