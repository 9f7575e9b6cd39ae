"""Deck editing session.

Holds one deck being built plus the user's blank cards. Blank cards live
only here until the deck is exported to a sheet.
"""

import logging
from dataclasses import replace
from typing import Optional

from decksheet.cards.catalog import Catalog
from decksheet.cards.ids import BlankIdSequence, IdFactory
from decksheet.cards.models import CardRecord, CardType
from decksheet.deck.models import DeckComposition
from decksheet.deck.side_channel import build_side_channel
from decksheet.deck.text import export_text

logger = logging.getLogger(__name__)

DECK_SIZE = 50
MAX_COPIES = 4
UNLIMITED_CARDS = frozenset({"OP01-075", "OP08-072"})


class DeckSession:
    """Mutable deck state, changed one card at a time."""

    def __init__(
        self,
        catalog: Catalog,
        leader: str = "",
        name: str = "",
        id_factory: Optional[IdFactory] = None,
    ):
        self.catalog = catalog
        self.leader = leader
        self.name = name
        self.don: Optional[str] = None
        self.cards: dict[str, int] = {}
        self.blank_cards: dict[str, CardRecord] = {}
        self._next_id = id_factory or BlankIdSequence()

    # -- card lookup -----------------------------------------------------

    def find_card(self, card_id: str) -> Optional[CardRecord]:
        return self.blank_cards.get(card_id) or self.catalog.find_card(card_id)

    def lookup_catalog(self) -> Catalog:
        """Catalog view that also knows this session's blank cards."""
        return self.catalog.with_records(self.blank_cards.values())

    @property
    def leader_card(self) -> Optional[CardRecord]:
        return self.find_card(self.leader) if self.leader else None

    # -- editing ---------------------------------------------------------

    def set_leader(self, card_id: str) -> None:
        self.leader = card_id

    def can_add(self, card_id: str) -> bool:
        if card_id in UNLIMITED_CARDS:
            return True
        return self.cards.get(card_id, 0) < MAX_COPIES

    def add_card(self, card_id: str) -> bool:
        """Add one copy. Returns False when the copy limit is reached."""
        if not self.can_add(card_id):
            return False
        self.cards[card_id] = self.cards.get(card_id, 0) + 1
        return True

    def remove_card(self, card_id: str) -> bool:
        """Remove one copy. Returns False if the card is not in the deck."""
        count = self.cards.get(card_id, 0)
        if count <= 0:
            return False
        if count == 1:
            del self.cards[card_id]
        else:
            self.cards[card_id] = count - 1
        return True

    def reset(self) -> None:
        self.cards.clear()
        self.don = None

    def create_blank_card(self, **fields) -> CardRecord:
        """Create a blank card with a fresh session id and register it."""
        fields.pop("portrait", None)
        card = CardRecord(card_id=self._next_id(), **fields)
        self.blank_cards[card.card_id] = card
        logger.debug(f"Created blank card {card.card_id} ({card.name})")
        return card

    def update_blank_card(self, card: CardRecord) -> None:
        self.blank_cards[card.card_id] = card.without_portrait()

    def register_blank_card(self, card: CardRecord) -> None:
        """Adopt a blank card recovered elsewhere (e.g. from a scanned sheet)."""
        self.blank_cards[card.card_id] = card.without_portrait()
        reserve = getattr(self._next_id, "reserve", None)
        if reserve is not None:
            reserve(card.card_id)

    # -- views -----------------------------------------------------------

    @property
    def total(self) -> int:
        return sum(self.cards.values())

    def validate(self) -> tuple[bool, str]:
        """Check the deck is complete: a leader and exactly 50 cards."""
        if not self.leader:
            return False, "No leader selected"
        total = self.total
        if total < DECK_SIZE:
            return False, f"{DECK_SIZE - total} card(s) short"
        if total > DECK_SIZE:
            return False, f"{total - DECK_SIZE} card(s) over"
        return True, "Deck complete"

    def composition(self) -> DeckComposition:
        return DeckComposition(leader=self.leader, cards=dict(self.cards), don=self.don, name=self.name)

    def sorted_entries(self) -> list[tuple[CardRecord, int]]:
        """Deck cards (catalog and blank) in canonical order with counts."""
        catalog = self.lookup_catalog()
        entries = []
        for card_id in catalog.sort_deck_entries(self.cards):
            card = catalog.find_card(card_id)
            if card is None:
                logger.warning(f"Card {card_id} not in catalog; left off the sheet")
                continue
            entries.append((card, self.cards[card_id]))
        return entries

    def sheet_cards(self) -> list[CardRecord]:
        """One record per copy, in canonical order (the grid's fill order)."""
        cards = []
        for card, count in self.sorted_entries():
            cards.extend([card] * count)
        return cards

    def export_text(self) -> str:
        """Canonical deck text for the catalog part of the deck."""
        return export_text(self.composition(), self.catalog)

    def sheet_payload(self) -> str:
        """Main QR payload: deck text for catalog cards plus side-channel lines."""
        deck = self.composition()
        blank_counts = {cid: n for cid, n in deck.cards.items() if cid in self.blank_cards}
        catalog_deck = replace(
            deck,
            cards={cid: n for cid, n in deck.cards.items() if cid not in self.blank_cards},
        )
        leader = self.leader_card
        blank_leader = leader if leader is not None and leader.is_blank and leader.type is CardType.LEADER else None

        lines = [export_text(catalog_deck, self.catalog)]
        lines.extend(build_side_channel(blank_counts, deck.don, blank_leader))
        return "\n".join(lines)
