#!/usr/bin/env python3
"""
Deck sheet compositor.

Builds the 2150x2048 deck sheet: background gradient, leader portrait (or a
blank leader panel), caption, main QR and the 10x5 card grid. Cards without a
portrait are drawn by the placeholder renderer with their own embedded QR.

Composition never fails because of a single region: a portrait that cannot
be loaded or a payload that cannot be encoded leaves that region blank.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Union

from PIL import Image, ImageDraw

from decksheet.cards.codec import encode_card
from decksheet.cards.models import COLOR_HEX, CardRecord
from decksheet.cards.placeholder import draw_cell_qr, render_leader_panel, render_placeholder
from decksheet.sheet import geometry
from decksheet.sheet.fetch import load_portrait
from decksheet.sheet.geometry import Rect
from decksheet.sheet.paint import fit_text, get_font, linear_gradient
from decksheet.sheet.qr import MIN_MODULE_PX, encode_card_qr, encode_qr, module_pitch

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = "#cccccc"
CAPTION_FONT_SIZE = 48
CAPTION_RADIUS = 10
CAPTION_PADDING = 20

PortraitLoader = Callable[[str], Optional[Image.Image]]


def crop_to_fill(image: Image.Image, target_width: int, target_height: int) -> Image.Image:
    """Scale and center-crop image to fill target dimensions exactly.

    Scales up to cover the entire target area, then crops excess.
    """
    w, h = image.size
    scale = max(target_width / w, target_height / h)

    new_w = max(target_width, math.ceil(w * scale))
    new_h = max(target_height, math.ceil(h * scale))
    resized = image.resize((new_w, new_h), Image.Resampling.LANCZOS)

    left = (new_w - target_width) // 2
    top = (new_h - target_height) // 2
    return resized.crop((left, top, left + target_width, top + target_height))


def upper_half_crop(image: Image.Image, target_width: int, target_height: int) -> Image.Image:
    """Cover a (w, 2h) box with the portrait and keep only its top half."""
    filled = crop_to_fill(image, target_width, target_height * 2)
    return filled.crop((0, 0, target_width, target_height))


def theme_hexes(theme_colors: list[str]) -> list[str]:
    """Colour tokens or hex strings to hex, grey when empty."""
    if not theme_colors:
        return [DEFAULT_BACKGROUND]
    return [COLOR_HEX.get(c, c) for c in theme_colors]


def layout_cells(cards: list[CardRecord]) -> list[tuple[CardRecord, Rect]]:
    """Place cards row-major on the grid; anything past the 50th card is dropped."""
    if len(cards) > geometry.MAX_CARDS:
        logger.warning(f"{len(cards)} cards given, only the first {geometry.MAX_CARDS} fit on the sheet")
    placed = cards[:geometry.MAX_CARDS]
    return [(card, geometry.cell_rect(i)) for i, card in enumerate(placed)]


def _load_portraits(refs: set[str], loader: PortraitLoader, max_workers: int) -> dict[str, Optional[Image.Image]]:
    """Load each distinct portrait once, in parallel."""
    portraits: dict[str, Optional[Image.Image]] = {}
    if not refs:
        return portraits

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(loader, ref): ref for ref in refs}
        for future in as_completed(futures):
            ref = futures[future]
            try:
                portraits[ref] = future.result()
            except Exception as e:
                logger.warning(f"Portrait load raised for {ref}: {e}")
                portraits[ref] = None
    return portraits


def _draw_caption(img: Image.Image, caption: str) -> None:
    rect = geometry.caption_rect()
    draw = ImageDraw.Draw(img, "RGBA")
    draw.rounded_rectangle(
        [rect.x, rect.y, rect.right, rect.bottom],
        radius=CAPTION_RADIUS,
        fill=(0, 0, 0, 128),
    )
    font = get_font(CAPTION_FONT_SIZE, bold=True)
    text = fit_text(draw, caption, font, rect.w - CAPTION_PADDING * 2)
    draw.text((rect.x + rect.w / 2, rect.y + rect.h / 2), text, font=font, fill="white", anchor="mm")


def _box_side(rect: Rect) -> int:
    """Side of the largest square that fits the rect's pixel box."""
    left, top, right, bottom = rect.box()
    return max(1, min(right - left, bottom - top))


def _cell_qr(card: CardRecord, size: int) -> Optional[Image.Image]:
    payload = encode_card(card)
    pitch = module_pitch(payload, size)
    if pitch < MIN_MODULE_PX:
        logger.warning(
            f"Blank card {card.card_id}: {len(payload.encode('utf-8'))}-byte payload is too large "
            f"for a {size}px cell QR ({pitch}px per module); it may not scan back"
        )
    return encode_card_qr(payload, size)


def _draw_leader(
    img: Image.Image,
    leader_portrait: Union[str, Image.Image, None],
    leader_card: Optional[CardRecord],
    loader: PortraitLoader,
) -> None:
    region = geometry.leader_rect()
    left, top, right, bottom = region.box()

    if leader_card is not None and leader_card.is_blank and leader_portrait is None:
        qr_image = encode_card_qr(encode_card(leader_card), _box_side(geometry.leader_qr_rect(region)))
        render_leader_panel(img, leader_card, region, qr_image)
        return

    portrait = leader_portrait
    if isinstance(portrait, str):
        portrait = loader(portrait)
    if portrait is None:
        logger.info("No leader portrait; leader region left blank")
        return
    img.paste(upper_half_crop(portrait.convert("RGB"), right - left, bottom - top), (left, top))


def compose_sheet(
    leader_portrait: Union[str, Image.Image, None],
    main_payload: str,
    caption: str,
    cards: list[CardRecord],
    theme_colors: list[str],
    leader_card: Optional[CardRecord] = None,
    loader: PortraitLoader = load_portrait,
    max_workers: int = 8,
) -> Image.Image:
    """Compose a deck sheet.

    Args:
        leader_portrait: Leader image, or a URL/path for ``loader``, or None
        main_payload: Text for the main QR (deck text plus side-channel lines)
        caption: Caption text; empty for none
        cards: Grid cards, one per copy, already in display order
        theme_colors: Background colours (colour tokens or hex)
        leader_card: Leader record; a blank leader gets its own panel and QR
        loader: Portrait loader (URL or path to image, None on failure)
        max_workers: Parallel portrait downloads

    Returns:
        RGB image of exactly SHEET_WIDTH x SHEET_HEIGHT
    """
    size = (geometry.SHEET_WIDTH, geometry.SHEET_HEIGHT)
    img = linear_gradient(size, theme_hexes(theme_colors))

    placed = layout_cells(cards)
    refs = {card.portrait for card, _ in placed if card.portrait}
    portraits = _load_portraits(refs, loader, max_workers)

    _draw_leader(img, leader_portrait, leader_card, loader)

    qr_rect = geometry.main_qr_rect()
    main_qr = encode_qr(main_payload, geometry.QR_SIZE) if main_payload else None
    if main_qr is None:
        logger.warning("Main QR could not be drawn; region left blank")
    else:
        img.paste(main_qr, qr_rect.box()[:2])

    if caption:
        _draw_caption(img, caption)

    cell_qrs: dict[str, Optional[Image.Image]] = {}
    for card, cell in placed:
        left, top, right, bottom = cell.box()
        if card.portrait:
            portrait = portraits.get(card.portrait)
            if portrait is not None:
                img.paste(crop_to_fill(portrait, right - left, bottom - top), (left, top))
            continue

        render_placeholder(img, card, cell.x, cell.y, cell.w, cell.h)
        if card.card_id not in cell_qrs:
            cell_qrs[card.card_id] = _cell_qr(card, _box_side(geometry.cell_qr_rect(cell)))
        if not draw_cell_qr(img, cell_qrs[card.card_id], cell):
            logger.warning(f"Blank card {card.card_id} drawn without its QR")

    logger.info(f"Composed deck sheet: {len(placed)} cards, {len(cell_qrs)} blank card design(s)")
    return img
