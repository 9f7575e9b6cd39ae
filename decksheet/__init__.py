"""Decksheet - deck sheet images that carry their own deck list.

A deck sheet is a single PNG with the leader, a caption, a 10x5 card grid and
QR codes that re-import the deck (and any blank cards) when scanned.
"""

__version__ = "0.1.0"
