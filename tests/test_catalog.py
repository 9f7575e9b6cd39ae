from decksheet.cards.catalog import Catalog, SortKey, color_priority
from decksheet.cards.ids import BlankIdSequence, uuid_ids
from decksheet.cards.models import DEFAULT_COLOR_HEX, CardRecord, CardType


class TestSortDeckEntries:
    def test_type_then_cost_then_colour_then_id(self, catalog: Catalog) -> None:
        ids = ["OP01-051", "OP01-029", "OP02-004", "OP01-002", "OP01-003"]

        assert catalog.sort_deck_entries(ids) == [
            "OP01-003",  # character, cost 2
            "OP01-002",  # character, cost 5, red
            "OP02-004",  # character, cost 5, blue
            "OP01-029",  # event
            "OP01-051",  # stage
        ]

    def test_unknown_cards_sort_last(self, catalog: Catalog) -> None:
        assert catalog.sort_deck_entries(["ZZ-999", "OP01-051", "AA-000"]) == ["OP01-051", "AA-000", "ZZ-999"]

    def test_sort_key(self, catalog: Catalog) -> None:
        assert catalog.sort_key("OP01-002") == SortKey(1, 5, 0, "OP01-002")

    def test_with_records_does_not_mutate(self, catalog: Catalog) -> None:
        blank = CardRecord("BLANK-0001", "Foo", CardType.EVENT, cost=0)
        merged = catalog.with_records([blank])

        assert "BLANK-0001" in merged
        assert "BLANK-0001" not in catalog
        assert len(merged) == len(catalog) + 1


class TestCardRecord:
    def test_colour_priority_uses_first_in_fixed_order(self) -> None:
        card = CardRecord("X", "x", color=["黄", "青"])
        assert color_priority(card) == 2

    def test_ordered_colours(self) -> None:
        card = CardRecord("X", "x", color=["黄", "mystery", "赤"])
        assert card.ordered_colors() == ["赤", "黄", "mystery"]

    def test_colour_hexes_default_grey(self) -> None:
        assert CardRecord("X", "x").color_hexes() == [DEFAULT_COLOR_HEX]
        assert CardRecord("X", "x", color=["??"]).color_hexes() == [DEFAULT_COLOR_HEX]

    def test_from_dict_round_trip(self) -> None:
        card = CardRecord("OP01-001", "Zoro", CardType.LEADER, ["赤"], power=5000, life=5, portrait="zoro.png")
        assert CardRecord.from_dict(card.to_dict()) == card

    def test_from_dict_type_string(self) -> None:
        card = CardRecord.from_dict({"id": "B1", "name": "n", "type": "event"})

        assert card.type is CardType.EVENT
        assert card.cost == -1
        assert card.is_blank


class TestBlankIds:
    def test_sequence(self) -> None:
        ids = BlankIdSequence()
        assert [ids(), ids(), ids()] == ["BLANK-0001", "BLANK-0002", "BLANK-0003"]

    def test_sequences_are_independent(self) -> None:
        first, second = BlankIdSequence(), BlankIdSequence()
        first()
        first()

        assert second() == "BLANK-0001"

    def test_reserve_skips_seen_ids(self) -> None:
        ids = BlankIdSequence()
        ids.reserve("BLANK-0007")
        ids.reserve("BLANK-0003")
        ids.reserve("OTHER-0100")

        assert ids() == "BLANK-0008"

    def test_uuid_ids_unique(self) -> None:
        factory = uuid_ids("CUSTOM")
        generated = {factory() for _ in range(50)}

        assert len(generated) == 50
        assert all(card_id.startswith("CUSTOM-") for card_id in generated)
