#!/usr/bin/env python3
"""
Placeholder renderer for cards without a portrait.

Draws a card-shaped stand-in for a blank card straight onto the sheet
surface. Every element sits at a fixed fraction of the cell (w, h), so the
scanner can find the embedded QR again from proportions alone (see
``decksheet.sheet.geometry.cell_qr_rect``).

The surface is expected to be an RGB image; translucent panels are drawn
through an ``RGBA`` draw context so they blend with what is underneath.
"""

import logging
import math
from typing import Optional

from PIL import Image, ImageDraw

from decksheet.cards.models import CardRecord
from decksheet.sheet.geometry import Rect, cell_qr_rect, leader_qr_rect
from decksheet.sheet.paint import (
    draw_centered_text,
    fit_text,
    get_font,
    is_light_color,
    linear_gradient,
    text_width,
    wrap_chars,
)

logger = logging.getLogger(__name__)

GOLD = "#FFD700"
DARK_GOLD = "#B8860B"
QR_PAD = 2

# (max text length, font size as fraction of card height, line height ratio)
EFFECT_TEXT_TIERS = (
    (30, 0.024, 1.3),
    (60, 0.021, 1.25),
    (100, 0.018, 1.2),
    (150, 0.015, 1.15),
)
EFFECT_TEXT_FALLBACK = (0.013, 1.1)

TRIGGER_LABEL = "【トリガー】"
TRIGGER_CHARS = 14


def ink_colors(primary: str) -> tuple[str, str]:
    """Text and stroke colours that read on top of ``primary``."""
    if is_light_color(primary):
        return "#000000", "#333333"
    return "#FFFFFF", "#FFFFFF"


def effect_text_style(text: str, height: float) -> tuple[int, float]:
    """Font size (px) and line height ratio for effect text of this length."""
    for limit, size_frac, ratio in EFFECT_TEXT_TIERS:
        if len(text) <= limit:
            break
    else:
        size_frac, ratio = EFFECT_TEXT_FALLBACK
    return max(1, round(height * size_frac)), ratio


def _paint_gradient(surface: Image.Image, colors: list[str], x: float, y: float, w: float, h: float) -> None:
    left, top = int(round(x)), int(round(y))
    size = (max(1, int(round(x + w)) - left), max(1, int(round(y + h)) - top))
    surface.paste(linear_gradient(size, colors, diagonal=True), (left, top))


def _draw_rotated_text(surface: Image.Image, text: str, cx: float, cy: float, font, fill: str) -> None:
    """Draw text reading bottom-to-top, centred on (cx, cy)."""
    measure = ImageDraw.Draw(surface)
    left, top, right, bottom = measure.textbbox((0, 0), text, font=font)
    tile = Image.new("RGBA", (right - left + 4, bottom - top + 4), (0, 0, 0, 0))
    ImageDraw.Draw(tile).text((2 - left, 2 - top), text, font=font, fill=fill)
    tile = tile.rotate(90, expand=True)
    surface.paste(tile, (int(cx - tile.width / 2), int(cy - tile.height / 2)), tile)


def _draw_effect_text(draw, record: CardRecord, w: float, h: float, panel: Rect) -> None:
    font_size, line_ratio = effect_text_style(record.text, h)
    font = get_font(font_size)
    padding = w * 0.01
    line_height = font_size * line_ratio
    max_lines = max(1, math.floor((panel.h - h * 0.01) / line_height))

    lines = wrap_chars(draw, record.text, font, panel.w - padding * 2, max_lines=max_lines)
    text_y = panel.y + h * 0.005
    for i, line in enumerate(lines):
        draw.text((panel.x + padding, text_y + i * line_height), line, font=font, fill="white")


def _draw_features(draw, record: CardRecord, x: float, y: float, w: float, h: float, ink: str) -> None:
    font_size = max(1, round(h * 0.020))
    font = get_font(font_size)
    center_x = x + w / 2
    feature_y = y + h * 0.942
    joined = " / ".join(record.features)

    if text_width(draw, joined, font) <= w * 0.88:
        draw_centered_text(draw, joined, center_x, feature_y, font, ink)
        return

    mid = math.ceil(len(record.features) / 2)
    first = " / ".join(record.features[:mid])
    second = " / ".join(record.features[mid:])
    draw_centered_text(draw, first, center_x, feature_y - font_size * 0.55, font, ink)
    draw_centered_text(draw, second, center_x, feature_y + font_size * 0.55, font, ink)


def _render_card(surface: Image.Image, record: CardRecord, x: float, y: float, w: float, h: float) -> None:
    colors = record.color_hexes()
    primary = colors[0]
    light = is_light_color(primary)
    ink, stroke = ink_colors(primary)

    _paint_gradient(surface, colors, x, y, w, h)
    draw = ImageDraw.Draw(surface, "RGBA")

    # illustration band
    draw.rectangle([x, y + h * 0.12, x + w, y + h * 0.54], fill=(255, 255, 255, 31))

    panel = Rect(x + w * 0.02, y + h * 0.576, w * 0.96, h * 0.176)
    draw.rectangle([panel.x, panel.y, panel.right, panel.bottom], fill=(0, 0, 0, 115))

    bar_y = y + h * 0.83
    draw.rectangle([x, bar_y, x + w, y + h], fill=primary)
    draw.rectangle([x, bar_y, x + w, y + h], fill=(0, 0, 0, 13) if light else (255, 255, 255, 20))

    border = max(1, round(w * 0.015))
    draw.rectangle([x + 1, y + 1, x + w - 2, y + h - 2], outline=stroke, width=border)

    # cost badge
    cost_w, cost_h = w * 0.147, h * 0.103
    cx, cy = x + w * 0.02 + cost_w / 2, y + h * 0.014 + cost_h / 2
    radius = min(cost_w, cost_h) / 2
    draw.ellipse(
        [cx - radius, cy - radius, cx + radius, cy + radius],
        fill=primary,
        outline=stroke,
        width=max(1, round(w * 0.012)),
    )
    cost_text = str(record.cost) if record.cost >= 0 else "-"
    draw_centered_text(draw, cost_text, cx, cy, get_font(radius * 1.1, bold=True), ink)

    power_text = str(record.power) if record.power > 0 else "-"
    draw.text(
        (x + w * 0.86, y + h * 0.028), power_text,
        font=get_font(h * 0.042, bold=True), fill=ink, anchor="ra",
    )
    if record.attribute:
        draw.text(
            (x + w * 0.96, y + h * 0.022), record.attribute,
            font=get_font(h * 0.032, bold=True), fill=ink, anchor="ra",
        )

    if record.counter > 0:
        _draw_rotated_text(
            surface, f"+{record.counter}", x + w * 0.035, y + h * 0.38,
            get_font(h * 0.035, bold=True), ink,
        )

    if record.text:
        _draw_effect_text(draw, record, w, h, panel)

    if record.trigger:
        draw_centered_text(
            draw, TRIGGER_LABEL + record.trigger[:TRIGGER_CHARS],
            x + w / 2, y + h * 0.79, get_font(h * 0.022), (255, 255, 255, 230),
        )

    center_x = x + w / 2
    draw_centered_text(draw, record.type.value, center_x, y + h * 0.844, get_font(h * 0.020), ink)

    name_font = get_font(h * 0.036, bold=True)
    draw_centered_text(draw, fit_text(draw, record.name, name_font, w * 0.9), center_x, y + h * 0.902, name_font, ink)

    if record.features:
        _draw_features(draw, record, x, y, w, h, ink)

    draw.text((x + w * 0.02, y + h * 0.99), record.card_id, font=get_font(h * 0.016), fill=ink, anchor="ld")


def _render_leader_card(surface: Image.Image, record: CardRecord, x: float, y: float, w: float, h: float) -> None:
    colors = record.color_hexes()
    primary = colors[0]
    ink, _ = ink_colors(primary)

    _paint_gradient(surface, colors, x, y, w, h)
    draw = ImageDraw.Draw(surface, "RGBA")

    draw.rectangle([x + 2, y + 2, x + w - 3, y + h - 3], outline=GOLD, width=max(2, round(w * 0.02)))
    draw.rectangle([x, y + h * 0.12, x + w, y + h * 0.52], fill=(255, 255, 255, 38))
    draw.rectangle([x, y, x + w, y + h * 0.10], fill=(0, 0, 0, 153))
    draw_centered_text(draw, "LEADER", x + w / 2, y + h * 0.05, get_font(h * 0.05, bold=True), GOLD)

    life_x, life_y = x + w * 0.12, y + h * 0.18
    radius = min(w, h) * 0.08
    draw.ellipse(
        [life_x - radius, life_y - radius, life_x + radius, life_y + radius],
        fill=GOLD,
        outline=DARK_GOLD,
        width=max(1, round(w * 0.01)),
    )
    life = str(record.life) if record.life is not None else "5"
    draw_centered_text(draw, life, life_x, life_y, get_font(radius * 1.2, bold=True), "#000000")
    draw_centered_text(draw, "LIFE", life_x, life_y + radius + h * 0.02, get_font(h * 0.022, bold=True), ink)

    draw.text(
        (x + w * 0.92, y + h * 0.12), str(record.power or 5000),
        font=get_font(h * 0.045, bold=True), fill=ink, anchor="ra",
    )
    if record.attribute:
        draw.text(
            (x + w * 0.92, y + h * 0.17), record.attribute,
            font=get_font(h * 0.028, bold=True), fill=ink, anchor="ra",
        )

    panel = Rect(x + w * 0.02, y + h * 0.54, w * 0.96, h * 0.20)
    draw.rectangle([panel.x, panel.y, panel.right, panel.bottom], fill=(0, 0, 0, 128))
    if record.text:
        font_size = max(1, round(h * 0.022))
        padding = w * 0.02
        lines = wrap_chars(draw, record.text, get_font(font_size), panel.w - padding * 2, max_lines=4)
        for i, line in enumerate(lines):
            draw.text(
                (panel.x + padding, panel.y + padding + i * font_size * 1.2), line,
                font=get_font(font_size), fill="white",
            )

    bar_y = y + h * 0.76
    draw.rectangle([x, bar_y, x + w, y + h], fill=primary)
    draw.rectangle([x, bar_y, x + w, y + h], fill=(0, 0, 0, 51))

    name_font = get_font(h * 0.038, bold=True)
    draw_centered_text(draw, fit_text(draw, record.name, name_font, w * 0.9), x + w / 2, y + h * 0.82, name_font, ink)
    if record.features:
        feature_font = get_font(h * 0.022)
        features = fit_text(draw, " / ".join(record.features[:3]), feature_font, w * 0.9)
        draw_centered_text(draw, features, x + w / 2, y + h * 0.90, feature_font, ink)
    draw_centered_text(draw, record.card_id, x + w / 2, y + h * 0.96, get_font(h * 0.018), (255, 255, 255, 179))


def render_placeholder(surface: Image.Image, record: CardRecord, x: float, y: float, w: float, h: float) -> None:
    """Draw ``record`` as a card-shaped placeholder in the box (x, y, w, h).

    Pure drawing: no I/O, nothing outside the box is touched.
    """
    if record.is_leader:
        _render_leader_card(surface, record, x, y, w, h)
    else:
        _render_card(surface, record, x, y, w, h)


def paste_qr(surface: Image.Image, qr_image: Optional[Image.Image], rect: Rect) -> bool:
    """Paste a QR code into ``rect`` on a white pad.

    Returns:
        False if there was no QR image to paste
    """
    if qr_image is None:
        return False
    left, top, right, bottom = rect.box()
    size = (max(1, right - left), max(1, bottom - top))
    draw = ImageDraw.Draw(surface)
    draw.rectangle([left - QR_PAD, top - QR_PAD, right + QR_PAD - 1, bottom + QR_PAD - 1], fill="white")
    # a code that already fits keeps its module pitch
    if qr_image.width > size[0] or qr_image.height > size[1]:
        qr_image = qr_image.resize(size, Image.Resampling.NEAREST)
    offset = ((size[0] - qr_image.width) // 2, (size[1] - qr_image.height) // 2)
    surface.paste(qr_image.convert("RGB"), (left + offset[0], top + offset[1]))
    return True


def draw_cell_qr(surface: Image.Image, qr_image: Optional[Image.Image], cell: Rect) -> bool:
    """Embed a blank card's QR in the illustration band of its cell."""
    return paste_qr(surface, qr_image, cell_qr_rect(cell))


def render_leader_panel(
    surface: Image.Image,
    record: CardRecord,
    region: Rect,
    qr_image: Optional[Image.Image] = None,
) -> None:
    """Draw a blank leader into the landscape leader region.

    Card details go on the left; the leader's own QR sits in
    ``leader_qr_rect(region)`` on the right.
    """
    x, y, w, h = region
    _paint_gradient(surface, record.color_hexes(), x, y, w, h)
    draw = ImageDraw.Draw(surface, "RGBA")
    draw.rectangle([x, y, x + w, y + h], fill=(0, 0, 0, 102))
    draw.rectangle([x + 2, y + 2, x + w - 3, y + h - 3], outline=GOLD, width=4)

    qr_rect = leader_qr_rect(region)
    padding = 20
    text_right = qr_rect.x - padding
    text_w = text_right - x - padding * 2
    left = x + padding
    center_x = x + padding + text_w / 2
    y_pos = y + 40
    line_height = 36

    draw_centered_text(draw, "BLANK LEADER", center_x, y_pos + 16, get_font(32, bold=True), GOLD)
    y_pos += line_height + 20

    name_font = get_font(42, bold=True)
    draw_centered_text(draw, fit_text(draw, record.name, name_font, text_w), center_x, y_pos + 21, name_font, "#FFFFFF")
    y_pos += line_height + 30

    draw.line([(left, y_pos), (text_right, y_pos)], fill=GOLD, width=2)
    y_pos += 20

    label_font = get_font(28)
    stats = [("LIFE:", str(record.life) if record.life is not None else "5"), ("POWER:", str(record.power or 5000))]
    if record.attribute:
        stats.append(("属性:", record.attribute))
    stats.append(("色:", " / ".join(record.ordered_colors())))
    for label, value in stats:
        draw.text((left, y_pos), label, font=label_font, fill=GOLD)
        draw.text((left + text_width(draw, label, label_font) + 12, y_pos), value, font=label_font, fill="#FFFFFF")
        y_pos += line_height

    if record.features:
        feature_font = get_font(22)
        for line in wrap_chars(draw, " / ".join(record.features), feature_font, text_w, max_lines=2):
            draw.text((left, y_pos), line, font=feature_font, fill="#FFFFFF")
            y_pos += 28
    y_pos += 10

    if record.text:
        text_font = get_font(20)
        remaining = int((y + h - 50 - y_pos) // 24)
        for line in wrap_chars(draw, record.text, text_font, text_w, max_lines=max(1, min(6, remaining))):
            draw.text((left, y_pos), line, font=text_font, fill="#FFFFFF")
            y_pos += 24

    draw_centered_text(draw, record.card_id, center_x, y + h - 20, get_font(18), (255, 255, 255, 153))

    if not paste_qr(surface, qr_image, qr_rect):
        logger.warning(f"Blank leader {record.card_id} drawn without its QR")
