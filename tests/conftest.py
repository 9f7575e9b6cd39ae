import pytest

from decksheet.cards.catalog import Catalog
from decksheet.cards.models import CardRecord, CardType
from decksheet.deck.session import DeckSession
from decksheet.scan.ladder import DecodeLadder


@pytest.fixture
def catalog() -> Catalog:
    """Small catalog: a leader, two characters, an event and a stage."""
    return Catalog([
        CardRecord("OP01-001", "Zoro", CardType.LEADER, ["赤"], power=5000, life=5),
        CardRecord("OP01-002", "Law", CardType.CHARACTER, ["赤", "緑"], cost=5, power=6000),
        CardRecord("OP01-003", "Luffy", CardType.CHARACTER, ["赤"], cost=2, power=3000, counter=1000),
        CardRecord("OP01-029", "Radical Beam", CardType.EVENT, ["赤"], cost=1),
        CardRecord("OP01-051", "Thousand Sunny", CardType.STAGE, ["緑"], cost=2),
        CardRecord("OP02-004", "Whitebeard", CardType.CHARACTER, ["青"], cost=5, power=7000),
    ])


@pytest.fixture
def blank_event() -> CardRecord:
    return CardRecord(
        card_id="BLANK-0001",
        name="Foo",
        type=CardType.EVENT,
        color=["赤"],
        cost=3,
        power=0,
        counter=0,
        attribute="",
        features=[],
        text="line1\nline2",
        trigger="",
    )


@pytest.fixture
def scannable_blank() -> CardRecord:
    """Colourless blank card with a short payload (3 px per module in its cell)."""
    return CardRecord(card_id="BLANK-0002", name="Scout", type=CardType.CHARACTER, cost=2, power=2000)


@pytest.fixture
def japanese_blank() -> CardRecord:
    """Fully populated blank card, about 145 bytes of payload."""
    return CardRecord(
        card_id="BLANK-0004",
        name="ナミ",
        type=CardType.CHARACTER,
        color=["赤", "緑"],
        cost=3,
        power=4000,
        counter=1000,
        attribute="特殊",
        features=["麦わらの一味"],
        text="【登場時】カード1枚を引く。",
        trigger="このカードを登場させる。",
    )


@pytest.fixture
def session(catalog: Catalog) -> DeckSession:
    return DeckSession(catalog, leader="OP01-001", name="Red Rush")


@pytest.fixture
def fast_ladder() -> DecodeLadder:
    """Short ladder so image tests stay quick."""
    return DecodeLadder(
        main_scales=(1.0, 1.5),
        main_widened_scales=(1.0,),
        leader_scales=(1.0,),
        leader_widened_scales=(1.0,),
        cell_scales=(3.0, 2.0),
        cell_widened_scales=(2.0,),
    )


@pytest.fixture
def no_portraits():
    """Portrait loader that never finds anything (no network in tests)."""
    return lambda ref: None
