"""Deck sheet composition: geometry, QR codes and the compositor."""


def __getattr__(name: str):
    """Lazy imports to keep Pillow and OpenCV out of plain codec use."""
    if name in ("compose_sheet", "layout_cells", "crop_to_fill"):
        from decksheet.sheet import compose
        return getattr(compose, name)

    if name in ("build_sheet", "export_sheet"):
        from decksheet.sheet import export
        return getattr(export, name)

    if name in ("encode_qr", "encode_card_qr", "module_pitch", "decode_qr"):
        from decksheet.sheet import qr
        return getattr(qr, name)

    if name in ("fetch_bytes", "load_portrait"):
        from decksheet.sheet import fetch
        return getattr(fetch, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # compose.py
    "compose_sheet",
    "layout_cells",
    "crop_to_fill",
    # export.py
    "build_sheet",
    "export_sheet",
    # qr.py
    "encode_qr",
    "encode_card_qr",
    "module_pitch",
    "decode_qr",
    # fetch.py
    "fetch_bytes",
    "load_portrait",
]
