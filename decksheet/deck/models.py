"""Deck composition."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DeckComposition:
    """A leader, an optional don card, and card counts.

    Counts are always positive: entries with a count of zero or less are
    dropped when the deck is built.
    """
    leader: str
    cards: dict[str, int] = field(default_factory=dict)
    don: Optional[str] = None
    name: str = ""

    def __post_init__(self):
        self.cards = {card_id: int(count) for card_id, count in self.cards.items() if int(count) > 0}

    @property
    def total(self) -> int:
        return sum(self.cards.values())

    def multiset(self) -> set[tuple[str, int]]:
        return set(self.cards.items())
