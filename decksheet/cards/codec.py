"""Compact QR payload for blank cards.

Format (positional, ``|``-delimited)::

    B|id|name|type|colors|cost|power|counter|attribute|features|text|trigger[|life]

Lists are comma-joined. In ``text`` and ``trigger`` a literal ``|`` becomes
``¦`` and a newline becomes ``⏎``; id and name are written as-is and must not
contain either. Leader records append their life value as a 13th field.

A grid cell carries at most 192 bytes of UTF-8 payload (about 50 kana or
kanji across the free-text fields) at a scannable module size; longer cards
are still drawn, with a warning, but are not expected to scan back.
"""

from enum import Enum
from typing import Optional

from decksheet.cards.models import CardRecord, CardType, NO_COST

BLANK_MARKER = "B"
BLANK_PREFIX = BLANK_MARKER + "|"
FIELD_SEP = "|"
LIST_SEP = ","
MIN_FIELDS = 12

PIPE_GLYPH = "¦"
NEWLINE_GLYPH = "⏎"

TYPE_CODES = {
    CardType.LEADER: "L",
    CardType.CHARACTER: "C",
    CardType.EVENT: "E",
    CardType.STAGE: "S",
}
CODE_TYPES = {code: card_type for card_type, code in TYPE_CODES.items()}


class PayloadKind(str, Enum):
    DECK = "deck"
    BLANK_CARD = "blank_card"
    UNRECOGNIZED = "unrecognized"


def classify_payload(payload: Optional[str]) -> PayloadKind:
    """Tag a decoded QR string before any structural decode is attempted."""
    if not payload:
        return PayloadKind.UNRECOGNIZED
    if payload.startswith(BLANK_PREFIX):
        return PayloadKind.BLANK_CARD
    for line in payload.splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "x" in line:
            return PayloadKind.DECK
    return PayloadKind.UNRECOGNIZED


def _escape(value: str) -> str:
    return value.replace("|", PIPE_GLYPH).replace("\n", NEWLINE_GLYPH)


def _unescape(value: str) -> str:
    return value.replace(NEWLINE_GLYPH, "\n").replace(PIPE_GLYPH, "|")


def _to_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except (ValueError, AttributeError):
        return default


def encode_card(card: CardRecord) -> str:
    """Serialize a card into its QR payload. The portrait is never included."""
    parts = [
        BLANK_MARKER,
        card.card_id,
        card.name,
        TYPE_CODES[card.type],
        LIST_SEP.join(card.color),
        str(card.cost),
        str(card.power),
        str(card.counter),
        card.attribute,
        LIST_SEP.join(card.features),
        _escape(card.text),
        _escape(card.trigger),
    ]
    if card.type is CardType.LEADER and card.life is not None:
        parts.append(str(card.life))
    return FIELD_SEP.join(parts)


def decode_card(payload: Optional[str]) -> Optional[CardRecord]:
    """Parse a QR payload back into a card.

    Returns None for anything that is not a blank-card payload, so callers
    scanning many regions can move on to the next candidate.
    """
    if classify_payload(payload) is not PayloadKind.BLANK_CARD:
        return None

    parts = payload.split(FIELD_SEP)
    if len(parts) < MIN_FIELDS:
        return None

    card_type = CODE_TYPES.get(parts[3], CardType.CHARACTER)
    life = None
    if card_type is CardType.LEADER and len(parts) > MIN_FIELDS:
        life = _to_int(parts[12], 0) if parts[12] else None

    return CardRecord(
        card_id=parts[1],
        name=parts[2],
        type=card_type,
        color=[c for c in parts[4].split(LIST_SEP) if c] if parts[4] else [],
        cost=_to_int(parts[5], NO_COST),
        power=_to_int(parts[6], 0),
        counter=_to_int(parts[7], 0),
        attribute=parts[8],
        features=[f for f in parts[9].split(LIST_SEP) if f] if parts[9] else [],
        text=_unescape(parts[10]),
        trigger=_unescape(parts[11]),
        life=life,
        portrait=None,
    )
