"""Deck sheet geometry in design space (2150x2048).

Every region of the sheet is defined here once. The compositor draws into
these rectangles and the scanner re-derives them for any copy of the sheet by
scaling, so neither side ever stores absolute pixel positions.

Layout::

  +-------+---------+----------------------------+---------+---+
  |  GAP  | LEADER  |  GAP   CAPTION   GAP       | MAIN QR |GAP|   <- upper band (548)
  +-------+---------+----------------------------+---------+---+
  |  10 x 5 card grid, cells 215x300, centred horizontally     |   <- grid (1500)
  +------------------------------------------------------------+
"""

import math
from typing import NamedTuple

SHEET_WIDTH = 2150
SHEET_HEIGHT = 2048
GRID_HEIGHT = 1500
UPPER_HEIGHT = SHEET_HEIGHT - GRID_HEIGHT  # 548

CELL_WIDTH = 215
CELL_HEIGHT = 300
GRID_COLS = 10
GRID_ROWS = 5
MAX_CARDS = GRID_COLS * GRID_ROWS

QR_SIZE = 400
GAP = 48

# Aspect of the cropped (upper-half) leader portrait
LEADER_ASPECT = 400 / 280
LEADER_WIDTH = math.floor(UPPER_HEIGHT * LEADER_ASPECT)  # 782

CAPTION_HEIGHT = 120

# Cell QR: centred in the illustration band (14%-52% of card height),
# side = min(70% of width, 90% of the band height)
CELL_QR_BAND_TOP = 0.14
CELL_QR_BAND_HEIGHT = 0.38
CELL_QR_MAX_WIDTH = 0.70
CELL_QR_BAND_FILL = 0.90

# Blank leader QR: square on the right of the leader region
LEADER_QR_LEFT = 0.56
LEADER_QR_MAX_WIDTH = 0.40
LEADER_QR_MAX_HEIGHT = 0.70


class Rect(NamedTuple):
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def scale(self, sx: float, sy: float) -> "Rect":
        return Rect(self.x * sx, self.y * sy, self.w * sx, self.h * sy)

    def inflate(self, frac: float) -> "Rect":
        """Grow each side by ``frac`` of the rectangle's size."""
        dx = self.w * frac
        dy = self.h * frac
        return Rect(self.x - dx, self.y - dy, self.w + 2 * dx, self.h + 2 * dy)

    def box(self) -> tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) for Pillow."""
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.x + self.w)),
            int(round(self.y + self.h)),
        )

    def clamp(self, width: int, height: int) -> "Rect":
        left = max(0.0, self.x)
        top = max(0.0, self.y)
        right = min(float(width), self.right)
        bottom = min(float(height), self.bottom)
        return Rect(left, top, max(0.0, right - left), max(0.0, bottom - top))


def leader_rect() -> Rect:
    return Rect(GAP, 0, LEADER_WIDTH, UPPER_HEIGHT)


def main_qr_rect() -> Rect:
    return Rect(SHEET_WIDTH - GAP - QR_SIZE, (UPPER_HEIGHT - QR_SIZE) // 2, QR_SIZE, QR_SIZE)


def caption_rect() -> Rect:
    start = GAP + LEADER_WIDTH + GAP
    width = SHEET_WIDTH - start - GAP - QR_SIZE - GAP
    top = UPPER_HEIGHT // 2 - CAPTION_HEIGHT / 2
    return Rect(start, top, width, CAPTION_HEIGHT)


def grid_origin() -> tuple[int, int]:
    return (SHEET_WIDTH - CELL_WIDTH * GRID_COLS) // 2, UPPER_HEIGHT


def cell_rect(index: int) -> Rect:
    """Rectangle of grid cell ``index`` (row-major, 0..49)."""
    if not 0 <= index < MAX_CARDS:
        raise IndexError(f"Cell index out of range: {index}")
    x0, y0 = grid_origin()
    row, col = divmod(index, GRID_COLS)
    return Rect(x0 + col * CELL_WIDTH, y0 + row * CELL_HEIGHT, CELL_WIDTH, CELL_HEIGHT)


def cell_rects() -> list[Rect]:
    return [cell_rect(i) for i in range(MAX_CARDS)]


def cell_qr_rect(cell: Rect) -> Rect:
    """Sub-rectangle of a card-shaped cell that holds its embedded QR."""
    band_top = cell.y + cell.h * CELL_QR_BAND_TOP
    band_h = cell.h * CELL_QR_BAND_HEIGHT
    size = min(cell.w * CELL_QR_MAX_WIDTH, band_h * CELL_QR_BAND_FILL)
    return Rect(cell.x + (cell.w - size) / 2, band_top + (band_h - size) / 2, size, size)


def leader_qr_rect(region: Rect) -> Rect:
    """Sub-rectangle of the leader region that holds a blank leader's QR."""
    size = min(region.w * LEADER_QR_MAX_WIDTH, region.h * LEADER_QR_MAX_HEIGHT)
    return Rect(region.x + region.w * LEADER_QR_LEFT, region.y + (region.h - size) / 2, size, size)
