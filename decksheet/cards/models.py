"""Card records and the colour tables shared by rendering and sorting."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional


class CardType(str, Enum):
    LEADER = "LEADER"
    CHARACTER = "CHARACTER"
    EVENT = "EVENT"
    STAGE = "STAGE"


# Colour priority order (red, green, blue, purple, black, yellow)
COLOR_ORDER = ("赤", "緑", "青", "紫", "黒", "黄")

COLOR_PRIORITY = {color: i for i, color in enumerate(COLOR_ORDER)}

COLOR_HEX = {
    "赤": "#AC1122",
    "緑": "#008866",
    "青": "#0084BD",
    "紫": "#93388B",
    "黒": "#211818",
    "黄": "#F7E731",
}

# Fill for colour tokens we do not recognise
DEFAULT_COLOR_HEX = "#888888"

TYPE_PRIORITY = {
    CardType.LEADER: 0,
    CardType.CHARACTER: 1,
    CardType.EVENT: 2,
    CardType.STAGE: 3,
}

# Cost value for cards where cost does not apply (leaders)
NO_COST = -1


@dataclass
class CardRecord:
    """One card, either from the catalog or authored by the user.

    A record without a portrait is a blank card: it is drawn by the
    placeholder renderer and carries its own QR on the deck sheet.
    """
    card_id: str
    name: str
    type: CardType = CardType.CHARACTER
    color: list[str] = field(default_factory=list)
    cost: int = NO_COST
    power: int = 0
    counter: int = 0
    attribute: str = ""
    features: list[str] = field(default_factory=list)
    text: str = ""
    trigger: str = ""
    life: Optional[int] = None
    portrait: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.type, CardType):
            self.type = CardType(self.type)

    @property
    def is_blank(self) -> bool:
        return not self.portrait

    @property
    def is_leader(self) -> bool:
        return self.type is CardType.LEADER

    def ordered_colors(self) -> list[str]:
        """Colours in priority order; unknown tokens keep their order at the end."""
        known = sorted((c for c in self.color if c in COLOR_PRIORITY), key=COLOR_PRIORITY.get)
        unknown = [c for c in self.color if c not in COLOR_PRIORITY]
        return known + unknown

    def color_hexes(self) -> list[str]:
        hexes = [COLOR_HEX.get(c, DEFAULT_COLOR_HEX) for c in self.ordered_colors()]
        return hexes or [DEFAULT_COLOR_HEX]

    def without_portrait(self) -> "CardRecord":
        return replace(self, portrait=None)

    @classmethod
    def from_dict(cls, data: dict) -> "CardRecord":
        """Build a record from a manifest mapping (YAML/JSON)."""
        cost = data.get("cost")
        life = data.get("life")
        return cls(
            card_id=str(data.get("id") or data.get("card_id") or ""),
            name=str(data.get("name", "")),
            type=CardType(str(data.get("type", "CHARACTER")).upper()),
            color=[str(c) for c in data.get("color", []) or []],
            cost=NO_COST if cost is None else int(cost),
            power=int(data.get("power", 0) or 0),
            counter=int(data.get("counter", 0) or 0),
            attribute=str(data.get("attribute", "") or ""),
            features=[str(f) for f in data.get("features", []) or []],
            text=str(data.get("text", "") or ""),
            trigger=str(data.get("trigger", "") or ""),
            life=None if life is None else int(life),
            portrait=data.get("portrait") or None,
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.card_id,
            "name": self.name,
            "type": self.type.value,
            "color": list(self.color),
            "cost": self.cost,
            "power": self.power,
            "counter": self.counter,
            "attribute": self.attribute,
            "features": list(self.features),
            "text": self.text,
            "trigger": self.trigger,
        }
        if self.life is not None:
            data["life"] = self.life
        if self.portrait:
            data["portrait"] = self.portrait
        return data
