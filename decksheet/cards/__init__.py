"""Card records, the blank-card codec and the placeholder renderer.

Exports are lazily loaded so the renderer (and Pillow) is only imported
when something draws.
"""

__all__ = [
    # models.py
    "CardRecord",
    "CardType",
    "COLOR_HEX",
    "COLOR_ORDER",
    # codec.py
    "encode_card",
    "decode_card",
    "classify_payload",
    "PayloadKind",
    # catalog.py
    "Catalog",
    "SortKey",
    # ids.py
    "BlankIdSequence",
    "uuid_ids",
    # placeholder.py
    "render_placeholder",
    "render_leader_panel",
]


def __getattr__(name: str):
    """Lazy import for module exports."""
    if name in ("CardRecord", "CardType", "COLOR_HEX", "COLOR_ORDER"):
        from decksheet.cards import models
        return getattr(models, name)
    elif name in ("encode_card", "decode_card", "classify_payload", "PayloadKind"):
        from decksheet.cards import codec
        return getattr(codec, name)
    elif name in ("Catalog", "SortKey"):
        from decksheet.cards import catalog
        return getattr(catalog, name)
    elif name in ("BlankIdSequence", "uuid_ids"):
        from decksheet.cards import ids
        return getattr(ids, name)
    elif name in ("render_placeholder", "render_leader_panel"):
        from decksheet.cards import placeholder
        return getattr(placeholder, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
