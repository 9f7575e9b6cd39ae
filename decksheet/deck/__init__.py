"""Deck composition, deck text and editing sessions."""

from decksheet.deck.models import DeckComposition
from decksheet.deck.text import DeckTextError, export_text, import_text
from decksheet.deck.side_channel import (
    SideChannel,
    build_side_channel,
    merge_side_channel,
    strip_side_channel,
)
from decksheet.deck.session import DeckSession
from decksheet.deck.manifest import (
    ManifestError,
    load_session,
    manifest_data,
    save_manifest,
)

__all__ = [
    # models.py
    "DeckComposition",
    # text.py
    "DeckTextError",
    "export_text",
    "import_text",
    # side_channel.py
    "SideChannel",
    "build_side_channel",
    "merge_side_channel",
    "strip_side_channel",
    # session.py
    "DeckSession",
    # manifest.py
    "ManifestError",
    "load_session",
    "manifest_data",
    "save_manifest",
]
