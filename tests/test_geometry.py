import pytest

from decksheet.sheet import geometry
from decksheet.sheet.geometry import Rect


def _overlaps(a: Rect, b: Rect) -> bool:
    return a.x < b.right and b.x < a.right and a.y < b.bottom and b.y < a.bottom


class TestSheetLayout:
    def test_constants(self) -> None:
        assert geometry.UPPER_HEIGHT == 548
        assert geometry.LEADER_WIDTH == 782
        assert geometry.MAX_CARDS == 50

    def test_main_qr_right_edge_vertically_centred(self) -> None:
        assert geometry.main_qr_rect() == Rect(1702, 74, 400, 400)

    def test_caption_between_leader_and_qr(self) -> None:
        caption = geometry.caption_rect()

        assert caption.x == geometry.leader_rect().right + geometry.GAP
        assert caption.right == geometry.main_qr_rect().x - geometry.GAP
        assert caption.h == geometry.CAPTION_HEIGHT

    def test_upper_regions_do_not_overlap(self) -> None:
        regions = [geometry.leader_rect(), geometry.caption_rect(), geometry.main_qr_rect()]
        for i, a in enumerate(regions):
            for b in regions[i + 1:]:
                assert not _overlaps(a, b)

    def test_grid_fills_lower_band(self) -> None:
        first, last = geometry.cell_rect(0), geometry.cell_rect(49)

        assert first == Rect(0, 548, 215, 300)
        assert last.right == geometry.SHEET_WIDTH
        assert last.bottom == geometry.SHEET_HEIGHT

    def test_row_major(self) -> None:
        assert geometry.cell_rect(10).x == geometry.cell_rect(0).x
        assert geometry.cell_rect(10).y == geometry.cell_rect(0).y + geometry.CELL_HEIGHT
        assert geometry.cell_rect(1).x == geometry.cell_rect(0).x + geometry.CELL_WIDTH

    def test_cell_index_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            geometry.cell_rect(50)
        with pytest.raises(IndexError):
            geometry.cell_rect(-1)


class TestQrSubRects:
    def test_cell_qr_inside_illustration_band(self) -> None:
        cell = geometry.cell_rect(0)
        qr = geometry.cell_qr_rect(cell)

        assert qr.w == qr.h
        assert qr.w == pytest.approx(min(215 * 0.70, 300 * 0.38 * 0.90))
        assert qr.y >= cell.y + cell.h * 0.14
        assert qr.bottom <= cell.y + cell.h * 0.52
        assert qr.x + qr.w / 2 == pytest.approx(cell.x + cell.w / 2)

    def test_cell_qr_proportional(self) -> None:
        cell = Rect(0, 0, 215, 300)
        assert geometry.cell_qr_rect(cell.scale(2, 2)) == pytest.approx(tuple(geometry.cell_qr_rect(cell).scale(2, 2)))

    def test_leader_qr_inside_region(self) -> None:
        region = geometry.leader_rect()
        qr = geometry.leader_qr_rect(region)

        assert qr.x >= region.x and qr.right <= region.right
        assert qr.y >= region.y and qr.bottom <= region.bottom


class TestRect:
    def test_inflate(self) -> None:
        assert Rect(10, 10, 100, 50).inflate(0.1) == pytest.approx((0, 5, 120, 60))

    def test_clamp(self) -> None:
        assert Rect(-10, -5, 50, 50).clamp(30, 100) == Rect(0, 0, 30, 45)

    def test_box(self) -> None:
        assert Rect(1.4, 2.6, 10, 10).box() == (1, 3, 11, 13)
