"""YAML deck manifests.

A manifest bundles everything needed to export a sheet from the command line:

    name: Red Rush
    leader: OP01-001
    don: DON-001            # optional
    theme: [赤]             # optional, defaults to the leader's colours
    cards:
      OP01-002: 4
      BLANK-0001: 2
    catalog:                # catalog cards used by the deck (portraits optional)
      - {id: OP01-001, name: ..., type: LEADER, color: [赤], portrait: https://...}
    blank_cards:            # user-authored cards, no portrait
      - {id: BLANK-0001, name: ..., type: EVENT, cost: 1, text: ...}
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from decksheet.cards.catalog import Catalog
from decksheet.cards.ids import BlankIdSequence
from decksheet.cards.models import CardRecord
from decksheet.deck.models import DeckComposition
from decksheet.deck.session import DeckSession

logger = logging.getLogger(__name__)


class ManifestError(ValueError):
    """Deck manifest is missing required fields or cannot be read."""
    pass


def load_manifest(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ManifestError(f"Failed to load {path}: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError(f"{path} does not contain a mapping")
    return data


def session_from_manifest(data: dict, catalog: Optional[Catalog] = None) -> DeckSession:
    """Build an editing session from manifest data."""
    if not data.get("leader"):
        raise ManifestError("Manifest has no leader")

    records = [CardRecord.from_dict(entry) for entry in data.get("catalog", []) or []]
    catalog = catalog.with_records(records) if catalog is not None else Catalog(records)

    session = DeckSession(
        catalog,
        leader=str(data["leader"]),
        name=str(data.get("name", "") or ""),
        id_factory=BlankIdSequence(),
    )
    for entry in data.get("blank_cards", []) or []:
        session.register_blank_card(CardRecord.from_dict(entry))

    session.don = data.get("don") or None
    for card_id, count in (data.get("cards", {}) or {}).items():
        if int(count) > 0:
            session.cards[str(card_id)] = int(count)

    return session


def load_session(path: Path, catalog: Optional[Catalog] = None) -> DeckSession:
    session = session_from_manifest(load_manifest(path), catalog)
    logger.info(f"Loaded deck {session.name or session.leader!r} from {path} ({session.total} cards)")
    return session


def manifest_data(
    deck: DeckComposition,
    blank_cards: list[CardRecord],
) -> dict:
    """Manifest mapping for an imported deck."""
    data: dict = {}
    if deck.name:
        data["name"] = deck.name
    data["leader"] = deck.leader
    if deck.don:
        data["don"] = deck.don
    data["cards"] = dict(deck.cards)
    if blank_cards:
        data["blank_cards"] = [card.to_dict() for card in blank_cards]
    return data


def save_manifest(data: dict, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    logger.info(f"Saved deck manifest: {output_path}")
