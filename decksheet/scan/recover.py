#!/usr/bin/env python3
"""
Region recovery: find and decode the QR codes on a deck sheet.

The candidate image may be a rescaled or recompressed copy of the sheet.
Region rectangles are re-derived from the design-space geometry scaled to
the candidate's size; no pixel position from the original render is trusted.

Regions are scanned main QR -> leader -> 50 cells. The main region only
accepts a deck payload; the leader and cells only accept blank-card
payloads. A miss in one region never affects another.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from PIL import Image

from decksheet.cards.codec import PayloadKind, classify_payload, decode_card
from decksheet.cards.models import CardRecord
from decksheet.scan.ladder import DecodeLadder
from decksheet.sheet import geometry
from decksheet.sheet.geometry import Rect
from decksheet.sheet.qr import decode_qr

logger = logging.getLogger(__name__)

MIN_QUIET_ZONE = 8


class ScanCancelled(Exception):
    """The caller abandoned the scan; no partial result is returned."""
    pass


@dataclass
class ScanResult:
    deck_text: Optional[str] = None
    blank_cards: list[CardRecord] = field(default_factory=list)
    payloads: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RegionPlan:
    """Where and how to look for one QR code on the candidate image."""
    name: str
    rect: Rect
    widened: Rect
    scales: tuple[float, ...]
    widened_scales: tuple[float, ...]
    accept: PayloadKind


def region_plans(size: tuple[int, int], ladder: DecodeLadder) -> list[RegionPlan]:
    """Scan plans for every region, in scan order, for an image of ``size``."""
    sx = size[0] / geometry.SHEET_WIDTH
    sy = size[1] / geometry.SHEET_HEIGHT

    main = geometry.main_qr_rect().scale(sx, sy)
    leader = geometry.leader_qr_rect(geometry.leader_rect()).scale(sx, sy)
    plans = [
        RegionPlan(
            "main", main, main.inflate(ladder.main_widen),
            ladder.main_scales, ladder.main_widened_scales, PayloadKind.DECK,
        ),
        RegionPlan(
            "leader", leader, leader.inflate(ladder.leader_widen),
            ladder.leader_scales, ladder.leader_widened_scales, PayloadKind.BLANK_CARD,
        ),
    ]
    for i, cell in enumerate(geometry.cell_rects()):
        rect = geometry.cell_qr_rect(cell).scale(sx, sy)
        plans.append(RegionPlan(
            f"cell {i + 1}", rect, rect.inflate(ladder.cell_widen),
            ladder.cell_scales, ladder.cell_widened_scales, PayloadKind.BLANK_CARD,
        ))
    return plans


def resample(image: Image.Image, rect: Rect, magnification: float, quiet_zone: float) -> Optional[Image.Image]:
    """Crop ``rect``, scale it by ``magnification`` and surround it with white.

    Returns:
        Scratch image, or None if the rectangle falls outside the image
    """
    left, top, right, bottom = rect.clamp(*image.size).box()
    if right - left < 2 or bottom - top < 2:
        return None

    crop = image.crop((left, top, right, bottom))
    target = (max(1, round(crop.width * magnification)), max(1, round(crop.height * magnification)))
    if target != crop.size:
        crop = crop.resize(target, Image.Resampling.LANCZOS)

    pad = max(MIN_QUIET_ZONE, round(max(target) * quiet_zone))
    scratch = Image.new("RGB", (target[0] + 2 * pad, target[1] + 2 * pad), "white")
    scratch.paste(crop, (pad, pad))
    return scratch


def binarize(image: Image.Image, threshold: int) -> Image.Image:
    """Force every pixel to black or white by its mean R, G, B."""
    mean = np.asarray(image.convert("RGB"), dtype=np.float32).mean(axis=2)
    return Image.fromarray(np.where(mean < threshold, 0, 255).astype(np.uint8), "L")


def _attempt(image: Image.Image) -> Optional[str]:
    try:
        return decode_qr(image, try_both_polarities=True)
    except Exception as e:
        logger.debug(f"Decode attempt raised: {e}")
        return None


def _check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise ScanCancelled("Scan cancelled")


def _run_ladder(
    image: Image.Image,
    plan: RegionPlan,
    rect: Rect,
    scales: tuple[float, ...],
    ladder: DecodeLadder,
    cancel: Optional[threading.Event],
) -> Optional[str]:
    for magnification in scales:
        _check_cancel(cancel)
        if max(rect.w, rect.h) * magnification > ladder.max_scratch:
            continue
        try:
            scratch = resample(image, rect, magnification, ladder.quiet_zone)
        except (ValueError, OSError) as e:
            logger.debug(f"{plan.name}: resample at x{magnification} failed: {e}")
            continue
        if scratch is None:
            return None

        for binarized in (False, True):
            candidate = binarize(scratch, ladder.threshold) if binarized else scratch
            text = _attempt(candidate)
            if not text:
                continue
            kind = classify_payload(text)
            if kind is plan.accept:
                logger.debug(f"{plan.name}: decoded at x{magnification}{' (binarized)' if binarized else ''}")
                return text
            logger.debug(f"{plan.name}: rejected {kind.value} payload at x{magnification}")
    return None


def scan_region(
    image: Image.Image,
    plan: RegionPlan,
    ladder: DecodeLadder,
    cancel: Optional[threading.Event] = None,
) -> Optional[str]:
    """Run the tight ladder, then the widened one. Returns the accepted payload."""
    text = _run_ladder(image, plan, plan.rect, plan.scales, ladder, cancel)
    if text is None:
        text = _run_ladder(image, plan, plan.widened, plan.widened_scales, ladder, cancel)
    return text


def scan_sheet(
    image: Image.Image,
    ladder: Optional[DecodeLadder] = None,
    cancel: Optional[threading.Event] = None,
    parallel: int = 1,
) -> ScanResult:
    """Recover the deck text and blank cards embedded in a deck sheet image.

    Args:
        image: Candidate image (any size; compared against 2150x2048)
        ladder: Retry parameters, defaults to ``DecodeLadder()``
        cancel: Set from another thread to abandon the scan
        parallel: Number of regions to scan concurrently

    Returns:
        ScanResult; ``deck_text`` is None when no deck was detected

    Raises:
        ScanCancelled: If ``cancel`` was set before the scan finished
    """
    ladder = ladder or DecodeLadder()
    image = image.convert("RGB")
    plans = region_plans(image.size, ladder)
    found: dict[int, str] = {}

    if parallel > 1:
        # pending regions see the cancel flag on their first attempt and bail out
        with ThreadPoolExecutor(max_workers=parallel) as executor:
            futures = {
                executor.submit(scan_region, image, plan, ladder, cancel): i
                for i, plan in enumerate(plans)
            }
            for future in as_completed(futures):
                text = future.result()
                if text is not None:
                    found[futures[future]] = text
    else:
        for i, plan in enumerate(plans):
            text = scan_region(image, plan, ladder, cancel)
            if text is not None:
                found[i] = text

    _check_cancel(cancel)

    result = ScanResult()
    for i, plan in enumerate(plans):
        text = found.get(i)
        if text is None or text in result.payloads:
            continue
        result.payloads.append(text)
        if plan.accept is PayloadKind.DECK:
            result.deck_text = text
            continue
        card = decode_card(text)
        if card is None:
            logger.debug(f"{plan.name}: blank-card payload did not decode")
            continue
        result.blank_cards.append(card)

    if result.deck_text is None:
        logger.info("No deck detected in main QR region")
    logger.info(f"Scan recovered {len(result.blank_cards)} blank card(s) from {len(result.payloads)} payload(s)")
    return result
