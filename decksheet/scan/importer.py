"""Turn a scanned deck sheet back into a deck."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from PIL import Image

from decksheet.cards.catalog import Catalog
from decksheet.cards.ids import BlankIdSequence
from decksheet.cards.models import CardRecord
from decksheet.deck.models import DeckComposition
from decksheet.deck.session import DeckSession
from decksheet.deck.side_channel import merge_side_channel, strip_side_channel
from decksheet.deck.text import import_text
from decksheet.scan.ladder import DecodeLadder
from decksheet.scan.recover import scan_sheet

logger = logging.getLogger(__name__)


@dataclass
class SheetImport:
    """Everything recovered from one sheet.

    ``deck`` is None when the main QR could not be read ("no deck
    detected"); blank cards recovered from the grid are kept regardless.
    """
    deck: Optional[DeckComposition] = None
    blank_cards: list[CardRecord] = field(default_factory=list)
    leader_card: Optional[CardRecord] = None

    @property
    def deck_detected(self) -> bool:
        return self.deck is not None


def import_sheet(
    image: Image.Image,
    ladder: Optional[DecodeLadder] = None,
    cancel: Optional[threading.Event] = None,
    parallel: int = 1,
) -> SheetImport:
    """Scan a sheet image and rebuild its deck.

    Raises:
        DeckTextError: If the main QR decodes but its leader line is malformed
        ScanCancelled: If the scan was cancelled
    """
    result = scan_sheet(image, ladder=ladder, cancel=cancel, parallel=parallel)

    leader_card = None
    blank_cards = []
    for card in result.blank_cards:
        if card.is_leader and leader_card is None:
            leader_card = card
        else:
            blank_cards.append(card)

    if result.deck_text is None:
        logger.warning(f"No deck detected; keeping {len(blank_cards)} recovered blank card(s)")
        return SheetImport(deck=None, blank_cards=blank_cards, leader_card=leader_card)

    remainder, side = strip_side_channel(result.deck_text)
    deck = merge_side_channel(import_text(remainder), side)
    if leader_card is None and side.blank_leader is not None:
        leader_card = side.blank_leader

    missing = [cid for cid in side.blank_counts if cid not in {c.card_id for c in blank_cards}]
    if missing:
        logger.warning(f"Blank card(s) counted but not recovered from the grid: {', '.join(missing)}")

    logger.info(f"Imported deck {deck.name or deck.leader!r}: {deck.total} cards, {len(blank_cards)} blank")
    return SheetImport(deck=deck, blank_cards=blank_cards, leader_card=leader_card)


def session_from_import(imported: SheetImport, catalog: Catalog) -> DeckSession:
    """Open an editing session on an imported deck.

    Recovered blank ids are reserved so cards created afterwards never
    collide with them.
    """
    if imported.deck is None:
        raise ValueError("No deck detected in the sheet")

    deck = imported.deck
    session = DeckSession(catalog, leader=deck.leader, name=deck.name, id_factory=BlankIdSequence())
    for card in imported.blank_cards:
        session.register_blank_card(card)
    if imported.leader_card is not None:
        session.register_blank_card(imported.leader_card)
    session.don = deck.don
    session.cards.update(deck.cards)
    return session
