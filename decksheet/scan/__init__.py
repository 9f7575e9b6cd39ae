"""Recovering decks and blank cards from deck sheet images."""


def __getattr__(name: str):
    """Lazy imports to keep OpenCV out of plain codec use."""
    if name in ("DecodeLadder", "load_ladder"):
        from decksheet.scan import ladder
        return getattr(ladder, name)

    if name in ("scan_sheet", "ScanResult", "ScanCancelled"):
        from decksheet.scan import recover
        return getattr(recover, name)

    if name in ("import_sheet", "SheetImport", "session_from_import"):
        from decksheet.scan import importer
        return getattr(importer, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # ladder.py
    "DecodeLadder",
    "load_ladder",
    # recover.py
    "scan_sheet",
    "ScanResult",
    "ScanCancelled",
    # importer.py
    "import_sheet",
    "SheetImport",
    "session_from_import",
]
