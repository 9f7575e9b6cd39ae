"""In-memory card catalog.

Loading the official card list is someone else's job; this module only
answers the two questions the deck codec and the sheet need: look a card up,
and put deck entries into canonical order.
"""

import logging
from typing import Iterable, NamedTuple, Optional

from decksheet.cards.models import COLOR_ORDER, COLOR_PRIORITY, TYPE_PRIORITY, CardRecord

logger = logging.getLogger(__name__)

UNKNOWN_PRIORITY = 999


class SortKey(NamedTuple):
    type_rank: int
    cost: int
    base_priority: int
    card_id: str


def color_priority(card: CardRecord) -> int:
    """Priority of the first colour (in fixed colour order) the card carries."""
    for color in COLOR_ORDER:
        if color in card.color:
            return COLOR_PRIORITY[color]
    return UNKNOWN_PRIORITY


def compute_sort_key(card: CardRecord) -> SortKey:
    return SortKey(
        type_rank=TYPE_PRIORITY.get(card.type, 9),
        cost=card.cost,
        base_priority=color_priority(card),
        card_id=card.card_id,
    )


def unknown_sort_key(card_id: str) -> SortKey:
    """Cards the catalog does not know go after everything else."""
    return SortKey(UNKNOWN_PRIORITY, 0, UNKNOWN_PRIORITY, card_id)


class Catalog:
    """Lookup and canonical ordering over a fixed set of card records."""

    def __init__(self, records: Iterable[CardRecord] = ()):
        self._cards: dict[str, CardRecord] = {}
        for record in records:
            self.add(record)

    def add(self, record: CardRecord) -> None:
        if record.card_id in self._cards:
            logger.debug(f"Replacing catalog entry {record.card_id}")
        self._cards[record.card_id] = record

    def __contains__(self, card_id: str) -> bool:
        return card_id in self._cards

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self):
        return iter(self._cards.values())

    def find_card(self, card_id: str) -> Optional[CardRecord]:
        return self._cards.get(card_id)

    def sort_key(self, card_id: str) -> SortKey:
        card = self._cards.get(card_id)
        if card is None:
            return unknown_sort_key(card_id)
        return compute_sort_key(card)

    def sort_deck_entries(self, card_ids: Iterable[str]) -> list[str]:
        """Order deck entries by (type rank, cost, colour priority, id)."""
        return sorted(card_ids, key=self.sort_key)

    def with_records(self, records: Iterable[CardRecord]) -> "Catalog":
        """A new catalog holding this catalog's cards plus ``records``."""
        merged = Catalog(self._cards.values())
        for record in records:
            merged.add(record)
        return merged
