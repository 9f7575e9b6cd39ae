"""Id generators for blank cards.

Each editing session owns its generator; nothing here is process-wide.
"""

import re
import uuid
from typing import Callable

IdFactory = Callable[[], str]


class BlankIdSequence:
    """Human-readable ids: BLANK-0001, BLANK-0002, ..."""

    def __init__(self, prefix: str = "BLANK", width: int = 4, start: int = 1):
        self.prefix = prefix
        self.width = width
        self._next = start
        self._pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")

    def __call__(self) -> str:
        card_id = f"{self.prefix}-{self._next:0{self.width}d}"
        self._next += 1
        return card_id

    def reserve(self, card_id: str) -> None:
        """Make sure future ids never collide with an id seen elsewhere (e.g. on import)."""
        m = self._pattern.match(card_id)
        if m:
            self._next = max(self._next, int(m.group(1)) + 1)


def uuid_ids(prefix: str = "BLANK") -> IdFactory:
    """Collision-free ids for sessions that merge blanks from many sources."""
    def factory() -> str:
        return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
    return factory
