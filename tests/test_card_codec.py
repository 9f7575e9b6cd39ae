from decksheet.cards.codec import (
    NEWLINE_GLYPH,
    PIPE_GLYPH,
    PayloadKind,
    classify_payload,
    decode_card,
    encode_card,
)
from decksheet.cards.models import NO_COST, CardRecord, CardType


class TestEncodeCard:
    def test_literal_newline_is_escaped(self, blank_event: CardRecord) -> None:
        payload = encode_card(blank_event)

        assert payload == "B|BLANK-0001|Foo|E|赤|3|0|0|||line1⏎line2|"
        assert "\n" not in payload

    def test_twelve_fields(self, blank_event: CardRecord) -> None:
        assert len(encode_card(blank_event).split("|")) == 12

    def test_pipe_in_text_and_trigger_escaped(self) -> None:
        card = CardRecord("BLANK-0003", "Bar", CardType.CHARACTER, text="a|b", trigger="c|d\ne")
        payload = encode_card(card)

        assert len(payload.split("|")) == 12
        assert f"a{PIPE_GLYPH}b" in payload
        assert f"c{PIPE_GLYPH}d{NEWLINE_GLYPH}e" in payload

    def test_portrait_never_encoded(self) -> None:
        card = CardRecord("OP01-003", "Luffy", portrait="https://example.com/luffy.png")
        assert "example.com" not in encode_card(card)

    def test_leader_gets_own_code_and_life(self) -> None:
        leader = CardRecord("BLANK-0009", "Boss", CardType.LEADER, ["青", "赤"], power=5000, life=4)
        fields = encode_card(leader).split("|")

        assert fields[3] == "L"
        assert fields[12] == "4"

    def test_lists_comma_joined(self) -> None:
        card = CardRecord("BLANK-0004", "Baz", color=["赤", "緑"], features=["Straw Hat", "Supernova"])
        fields = encode_card(card).split("|")

        assert fields[4] == "赤,緑"
        assert fields[9] == "Straw Hat,Supernova"


class TestDecodeCard:
    def test_round_trip(self, blank_event: CardRecord) -> None:
        decoded = decode_card(encode_card(blank_event))

        assert decoded == blank_event
        assert decoded.text == "line1\nline2"

    def test_round_trip_every_field(self) -> None:
        card = CardRecord(
            card_id="BLANK-0005",
            name="Nami",
            type=CardType.STAGE,
            color=["紫", "黄"],
            cost=0,
            power=1000,
            counter=2000,
            attribute="特",
            features=["Navigator", "Straw Hat Crew"],
            text="On Play: draw 1.|Then trash 1.\n\nBlocker",
            trigger="Activate this card's Main effect.",
        )
        assert decode_card(encode_card(card)) == card

    def test_round_trip_leader(self) -> None:
        leader = CardRecord("BLANK-0010", "Boss", CardType.LEADER, ["黒"], power=5000, life=4)
        decoded = decode_card(encode_card(leader))

        assert decoded == leader
        assert decoded.is_leader

    def test_portrait_absent_after_round_trip(self) -> None:
        card = CardRecord("OP01-003", "Luffy", portrait="luffy.png")
        decoded = decode_card(encode_card(card))

        assert decoded.portrait is None
        assert decoded.is_blank

    def test_rejects_without_marker(self) -> None:
        assert decode_card("X|BLANK-0001|Foo|E|赤|3|0|0|||text|") is None
        assert decode_card("1xOP01-001") is None
        assert decode_card("") is None
        assert decode_card(None) is None

    def test_rejects_too_few_fields(self) -> None:
        assert decode_card("B|BLANK-0001|Foo|E|赤|3") is None

    def test_unknown_type_code_defaults_to_character(self) -> None:
        decoded = decode_card("B|BLANK-0001|Foo|Q||1|0|0||||")
        assert decoded.type is CardType.CHARACTER

    def test_unparsable_numbers_fall_back(self) -> None:
        decoded = decode_card("B|BLANK-0001|Foo|C||abc|?||||x|")

        assert decoded.cost == NO_COST
        assert decoded.power == 0
        assert decoded.counter == 0

    def test_empty_lists(self) -> None:
        decoded = decode_card("B|BLANK-0001|Foo|C||1|0|0||||")

        assert decoded.color == []
        assert decoded.features == []


class TestClassifyPayload:
    def test_blank_card(self, blank_event: CardRecord) -> None:
        assert classify_payload(encode_card(blank_event)) is PayloadKind.BLANK_CARD

    def test_deck(self) -> None:
        assert classify_payload("# Red\n1xOP01-001\n4xOP01-002") is PayloadKind.DECK

    def test_deck_with_side_channel(self) -> None:
        assert classify_payload("1xOP01-001\n#BLANK:BLANK-0001=2") is PayloadKind.DECK

    def test_unrecognized(self) -> None:
        assert classify_payload("hello world") is PayloadKind.UNRECOGNIZED
        assert classify_payload("# only a name") is PayloadKind.UNRECOGNIZED
        assert classify_payload("") is PayloadKind.UNRECOGNIZED
