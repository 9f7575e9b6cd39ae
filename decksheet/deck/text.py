"""Deck text import/export.

Format::

    # Deck name          (optional)
    1xOP01-001           (leader, always first)
    4xOP01-002
    2xOP01-003
    ...

Card lines follow the catalog's canonical order so exporting an unchanged
deck twice gives byte-identical text.
"""

import logging
from typing import Protocol

from decksheet.deck.models import DeckComposition

logger = logging.getLogger(__name__)


class DeckTextError(ValueError):
    """Deck text cannot be imported (no usable leader line)."""
    pass


class EntrySorter(Protocol):
    def sort_deck_entries(self, card_ids) -> list[str]: ...


def export_text(deck: DeckComposition, catalog: EntrySorter) -> str:
    """Render a deck as text.

    Args:
        deck: Deck to export
        catalog: Anything with ``sort_deck_entries`` (defines line order)

    Returns:
        Newline-joined deck text without a trailing newline
    """
    lines: list[str] = []

    if deck.name:
        # the name must stay on its own line
        name = " ".join(deck.name.splitlines())
        lines.append(f"# {name}")

    lines.append(f"1x{deck.leader}")

    for card_id in catalog.sort_deck_entries(deck.cards.keys()):
        count = deck.cards[card_id]
        if count > 0:
            lines.append(f"{count}x{card_id}")

    return "\n".join(lines)


def _parse_line(line: str) -> tuple[int, str] | None:
    count_str, _, card_id = line.partition("x")
    card_id = card_id.strip()
    try:
        count = int(count_str.strip())
    except ValueError:
        return None
    if not card_id:
        return None
    return count, card_id


def import_text(text: str) -> DeckComposition:
    """Parse deck text.

    Side-channel lines (``#BLANK:``, ``#DON:``, ``#LEADER:``) must already be
    stripped; see ``decksheet.deck.side_channel``.

    Raises:
        DeckTextError: If the text is empty or the leader line has no ``x``
    """
    lines = [line.strip() for line in text.strip().splitlines()]
    lines = [line for line in lines if line]

    if not lines:
        raise DeckTextError("Deck text is empty")

    name = ""
    start = 0
    if lines[0].startswith("#"):
        name = lines[0][1:].strip()
        start = 1

    if start >= len(lines):
        raise DeckTextError("No leader line in deck text")

    leader_line = lines[start]
    if "x" not in leader_line:
        raise DeckTextError(f"Leader line malformed (no 'x'): {leader_line!r}")
    leader = leader_line.partition("x")[2].strip()
    if not leader:
        raise DeckTextError(f"Leader line malformed (no card id): {leader_line!r}")

    cards: dict[str, int] = {}
    for line in lines[start + 1:]:
        if "x" not in line:
            continue
        parsed = _parse_line(line)
        if parsed is None:
            logger.debug(f"Skipping unparsable deck line: {line!r}")
            continue
        count, card_id = parsed
        if count <= 0:
            continue
        cards[card_id] = count

    return DeckComposition(leader=leader, cards=cards, name=name)
