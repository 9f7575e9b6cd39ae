import io
import threading

import pytest
from PIL import Image

from decksheet.cards.codec import decode_card, encode_card
from decksheet.cards.models import CardRecord, CardType
from decksheet.scan import recover
from decksheet.scan.ladder import DecodeLadder
from decksheet.scan.recover import (
    ScanCancelled,
    binarize,
    region_plans,
    resample,
    scan_region,
    scan_sheet,
)
from decksheet.sheet import geometry
from decksheet.sheet.compose import compose_sheet
from decksheet.sheet.geometry import Rect

DECK_PAYLOAD = "# Red Rush\n1xOP01-001\n4xOP01-002\n2xOP01-003\n#BLANK:BLANK-0002=2"


@pytest.fixture(scope="module")
def deck_only_sheet() -> Image.Image:
    return compose_sheet(None, DECK_PAYLOAD, "Red Rush", [], ["赤", "緑"])


def _rescaled(img: Image.Image, factor: float) -> Image.Image:
    size = (round(img.width * factor), round(img.height * factor))
    return img.resize(size, Image.Resampling.LANCZOS)


def _jpeg(img: Image.Image, quality: int = 85) -> Image.Image:
    buf = io.BytesIO()
    img.save(buf, "JPEG", quality=quality)
    buf.seek(0)
    return Image.open(buf).convert("RGB")


def _main_plan(img: Image.Image, ladder: DecodeLadder):
    return region_plans(img.size, ladder)[0]


class TestRegionPlans:
    def test_scan_order_and_count(self) -> None:
        plans = region_plans((geometry.SHEET_WIDTH, geometry.SHEET_HEIGHT), DecodeLadder())

        assert len(plans) == 52
        assert [p.name for p in plans[:3]] == ["main", "leader", "cell 1"]

    def test_scaled_to_candidate(self) -> None:
        full = region_plans((2150, 2048), DecodeLadder())[0].rect
        half = region_plans((1075, 1024), DecodeLadder())[0].rect

        assert half == pytest.approx(tuple(full.scale(0.5, 0.5)))

    def test_widened_contains_tight(self) -> None:
        for plan in region_plans((2150, 2048), DecodeLadder()):
            assert plan.widened.x < plan.rect.x
            assert plan.widened.right > plan.rect.right


class TestResample:
    def test_magnified_with_white_quiet_zone(self) -> None:
        img = Image.new("RGB", (100, 100), "black")
        scratch = resample(img, Rect(10, 10, 20, 20), 3.0, 0.1)

        assert scratch.size == (60 + 16, 60 + 16)
        assert scratch.getpixel((0, 0)) == (255, 255, 255)
        assert scratch.getpixel((38, 38)) == (0, 0, 0)

    def test_outside_image(self) -> None:
        assert resample(Image.new("RGB", (10, 10)), Rect(50, 50, 10, 10), 1.0, 0.1) is None

    def test_binarize(self) -> None:
        img = Image.new("RGB", (2, 1))
        img.putpixel((0, 0), (200, 100, 50))   # mean 116.7
        img.putpixel((1, 0), (200, 150, 100))  # mean 150
        out = binarize(img, 128)

        assert list(out.getdata()) == [0, 255]


class TestMainQrRecovery:
    @pytest.mark.parametrize("factor", [1.0, 0.75, 1.5])
    def test_rescaled(self, deck_only_sheet, fast_ladder, factor) -> None:
        img = _rescaled(deck_only_sheet, factor)
        assert scan_region(img, _main_plan(img, fast_ladder), fast_ladder) == DECK_PAYLOAD

    def test_rescaled_and_recompressed(self, deck_only_sheet, fast_ladder) -> None:
        img = _jpeg(_rescaled(deck_only_sheet, 0.75))
        assert scan_region(img, _main_plan(img, fast_ladder), fast_ladder) == DECK_PAYLOAD

    def test_full_scan(self, deck_only_sheet, fast_ladder) -> None:
        result = scan_sheet(deck_only_sheet, fast_ladder)

        assert result.deck_text == DECK_PAYLOAD
        assert result.blank_cards == []
        assert result.payloads == [DECK_PAYLOAD]


class TestCellRecovery:
    def test_blank_cards_recovered_and_deduplicated(self, scannable_blank, fast_ladder) -> None:
        cards = [scannable_blank, scannable_blank]
        img = compose_sheet(None, "", "", cards, [])
        result = scan_sheet(img, fast_ladder, parallel=4)

        assert result.deck_text is None
        assert result.blank_cards == [scannable_blank]
        assert result.payloads == [encode_card(scannable_blank)]

    def test_cell_survives_recompression(self, scannable_blank, fast_ladder) -> None:
        img = _jpeg(compose_sheet(None, "", "", [scannable_blank], []), quality=90)
        plan = region_plans(img.size, fast_ladder)[2]

        assert scan_region(img, plan, fast_ladder) == encode_card(scannable_blank)

    def test_japanese_card_round_trip(self, japanese_blank) -> None:
        ladder = DecodeLadder()
        img = compose_sheet(None, "", "", [japanese_blank], [])
        text = scan_region(img, region_plans(img.size, ladder)[2], ladder)

        assert decode_card(text) == japanese_blank


BOSS = CardRecord("BLANK-0003", "Boss", CardType.LEADER, ["青"], power=5000, life=4)


class TestLeaderRecovery:
    @pytest.mark.parametrize("factor", [1.0, 0.5])
    def test_blank_leader_from_leader_region(self, factor) -> None:
        ladder = DecodeLadder()
        img = _rescaled(compose_sheet(None, "", "", [], [], leader_card=BOSS), factor)
        text = scan_region(img, region_plans(img.size, ladder)[1], ladder)

        assert decode_card(text) == BOSS

    def test_full_scan_reports_leader(self) -> None:
        result = scan_sheet(compose_sheet(None, "", "", [], [], leader_card=BOSS), DecodeLadder(), parallel=4)

        assert result.blank_cards == [BOSS]


class TestHalfScale:
    def test_main_qr_after_recompression(self, deck_only_sheet) -> None:
        ladder = DecodeLadder()
        img = _jpeg(_rescaled(deck_only_sheet, 0.5))

        assert scan_region(img, _main_plan(img, ladder), ladder) == DECK_PAYLOAD

    def test_cells_may_be_missed_but_never_misread(self, blank_event) -> None:
        img = _jpeg(_rescaled(compose_sheet(None, DECK_PAYLOAD, "", [blank_event], []), 0.5))
        result = scan_sheet(img, DecodeLadder(), parallel=4)

        assert result.deck_text == DECK_PAYLOAD
        assert result.blank_cards in ([], [blank_event])


BLANK_PAYLOAD = "B|BLANK-0001|Foo|C||1|0|0||||"


class TestClassification:
    def test_main_rejects_blank_payloads(self, monkeypatch, fast_ladder) -> None:
        monkeypatch.setattr(recover, "decode_qr", lambda image, try_both_polarities=True: BLANK_PAYLOAD)
        result = scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder)

        assert result.deck_text is None
        assert result.payloads == [BLANK_PAYLOAD]
        assert [c.card_id for c in result.blank_cards] == ["BLANK-0001"]

    def test_cells_reject_deck_payloads(self, monkeypatch, fast_ladder) -> None:
        monkeypatch.setattr(recover, "decode_qr", lambda image, try_both_polarities=True: "1xOP01-001")
        result = scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder)

        assert result.deck_text == "1xOP01-001"
        assert result.blank_cards == []

    def test_unrecognized_everywhere(self, monkeypatch, fast_ladder) -> None:
        monkeypatch.setattr(recover, "decode_qr", lambda image, try_both_polarities=True: "hello")
        result = scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder)

        assert result.deck_text is None
        assert result.payloads == []

    def test_malformed_blank_payload_not_a_card(self, monkeypatch, fast_ladder) -> None:
        monkeypatch.setattr(recover, "decode_qr", lambda image, try_both_polarities=True: "B|short")
        result = scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder)

        assert result.blank_cards == []

    def test_decoder_errors_are_misses(self, monkeypatch, fast_ladder) -> None:
        def explode(image, try_both_polarities=True):
            raise RuntimeError("decoder crashed")

        monkeypatch.setattr(recover, "decode_qr", explode)
        result = scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder)

        assert result.deck_text is None
        assert result.blank_cards == []

    def test_parallel_matches_sequential(self, monkeypatch, fast_ladder) -> None:
        monkeypatch.setattr(recover, "decode_qr", lambda image, try_both_polarities=True: BLANK_PAYLOAD)
        img = Image.new("RGB", (2150, 2048), "white")

        assert scan_sheet(img, fast_ladder, parallel=8) == scan_sheet(img, fast_ladder)


class TestCancellation:
    def test_cancelled_before_start(self, fast_ladder) -> None:
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ScanCancelled):
            scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder, cancel=cancel)

    @pytest.mark.parametrize("parallel", [1, 4])
    def test_cancelled_mid_scan(self, monkeypatch, fast_ladder, parallel) -> None:
        cancel = threading.Event()
        calls = []

        def decode_then_cancel(image, try_both_polarities=True):
            calls.append(1)
            if len(calls) >= 3:
                cancel.set()
            return None

        monkeypatch.setattr(recover, "decode_qr", decode_then_cancel)

        with pytest.raises(ScanCancelled):
            scan_sheet(Image.new("RGB", (2150, 2048), "white"), fast_ladder, cancel=cancel, parallel=parallel)
