"""Side-channel lines carried next to the deck text in the main QR.

The deck text grammar has no room for blank-card counts, the don card, or a
blank leader's definition, so they ride along as extra ``#`` lines::

    #BLANK:BLANK-0001=2,BLANK-0002=1
    #DON:DON-001
    #LEADER:B|BLANK-0003|...

They must be stripped (in the order BLANK, DON, LEADER) before the remainder
goes to ``import_text`` and merged back into the deck afterwards.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from decksheet.cards.codec import decode_card, encode_card
from decksheet.cards.models import CardRecord
from decksheet.deck.models import DeckComposition

logger = logging.getLogger(__name__)

BLANK_TAG = "#BLANK:"
DON_TAG = "#DON:"
LEADER_TAG = "#LEADER:"


@dataclass
class SideChannel:
    blank_counts: dict[str, int] = field(default_factory=dict)
    don: Optional[str] = None
    blank_leader: Optional[CardRecord] = None


def build_side_channel(
    blank_counts: dict[str, int],
    don: Optional[str] = None,
    blank_leader: Optional[CardRecord] = None,
) -> list[str]:
    """Marker lines for data the deck text cannot express."""
    lines = []
    entries = [f"{card_id}={count}" for card_id, count in sorted(blank_counts.items()) if count > 0]
    if entries:
        lines.append(BLANK_TAG + ",".join(entries))
    if don:
        lines.append(DON_TAG + don)
    if blank_leader is not None:
        lines.append(LEADER_TAG + encode_card(blank_leader))
    return lines


def _parse_blank_counts(body: str) -> dict[str, int]:
    counts = {}
    for entry in body.split(","):
        card_id, sep, count_str = entry.partition("=")
        if not sep or not card_id.strip():
            continue
        try:
            count = int(count_str)
        except ValueError:
            logger.debug(f"Skipping bad blank count entry: {entry!r}")
            continue
        if count > 0:
            counts[card_id.strip()] = count
    return counts


def strip_side_channel(text: str) -> tuple[str, SideChannel]:
    """Remove marker lines from deck text and interpret them.

    Returns:
        Tuple of (remaining deck text, parsed side channel)
    """
    lines = text.splitlines()
    side = SideChannel()

    # BLANK counts first
    kept = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(BLANK_TAG):
            side.blank_counts.update(_parse_blank_counts(stripped[len(BLANK_TAG):]))
        else:
            kept.append(line)
    lines = kept

    # then DON
    kept = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(DON_TAG):
            side.don = stripped[len(DON_TAG):].strip() or None
        else:
            kept.append(line)
    lines = kept

    # then the blank LEADER payload
    kept = []
    for line in lines:
        stripped = line.strip()
        if stripped.startswith(LEADER_TAG):
            record = decode_card(stripped[len(LEADER_TAG):])
            if record is None:
                logger.warning("Ignoring unreadable #LEADER: payload")
            else:
                side.blank_leader = record
        else:
            kept.append(line)

    return "\n".join(kept), side


def merge_side_channel(deck: DeckComposition, side: SideChannel) -> DeckComposition:
    """Fold side-channel data back into an imported deck."""
    cards = dict(deck.cards)
    cards.update(side.blank_counts)
    leader = deck.leader
    if side.blank_leader is not None and not leader:
        leader = side.blank_leader.card_id
    return replace(deck, leader=leader, cards=cards, don=side.don or deck.don)
