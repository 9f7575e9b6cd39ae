"""Drawing helpers shared by the sheet compositor and the placeholder renderer."""

import logging
import os
from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from decksheet.config import get_settings

logger = logging.getLogger(__name__)

ELLIPSIS = "…"

# CJK-capable faces first: card names and colours are often Japanese
REGULAR_FONTS = (
    "NotoSansCJK-Regular.ttc",
    "NotoSansJP-Regular.otf",
    "NotoSansJP-Regular.ttf",
    "msgothic.ttc",
    "DejaVuSans.ttf",
    "arial.ttf",
)
BOLD_FONTS = (
    "NotoSansCJK-Bold.ttc",
    "NotoSansJP-Bold.otf",
    "NotoSansJP-Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "arialbd.ttf",
)

FONT_DIRS = (
    "/usr/share/fonts/opentype/noto",
    "/usr/share/fonts/noto-cjk",
    "/usr/share/fonts/truetype/dejavu",
    "/usr/share/fonts/truetype",
    "/usr/share/fonts",
    "/System/Library/Fonts",
    "C:/Windows/Fonts",
)


def _font_paths(name: str) -> list[str]:
    dirs = list(FONT_DIRS)
    font_dir = get_settings().font_dir
    if font_dir:
        dirs.insert(0, str(font_dir))
    return [str(Path(d) / name) for d in dirs]


def _load_font(name: str, size: int):
    """Try to load a font file by name, or return None."""
    for path in _font_paths(name):
        if os.path.exists(path):
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue

    # Try by name directly (system font)
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return None


@lru_cache(maxsize=256)
def get_font(size: int, bold: bool = False):
    """Best available font at ``size`` px, falling back to Pillow's built-in face."""
    size = max(1, int(round(size)))
    for name in (BOLD_FONTS if bold else ()) + REGULAR_FONTS:
        font = _load_font(name, size)
        if font is not None:
            return font
    logger.debug(f"No TrueType font found, using Pillow default at {size}px")
    return ImageFont.load_default(size=size)


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    return ImageColor.getrgb(color)[:3]


def luminance(color: str) -> float:
    """Perceptual luma in 0..1 (0.299 R + 0.587 G + 0.114 B)."""
    r, g, b = hex_to_rgb(color)
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def is_light_color(color: str) -> bool:
    return luminance(color) > 0.5


def linear_gradient(size: tuple[int, int], colors: list[str], diagonal: bool = False) -> Image.Image:
    """Evenly spaced colour stops, left to right (or top-left to bottom-right).

    One colour gives a flat fill.
    """
    width, height = max(1, size[0]), max(1, size[1])
    if not colors:
        colors = ["#cccccc"]
    if len(colors) == 1:
        return Image.new("RGB", (width, height), hex_to_rgb(colors[0]))

    xs = np.arange(width, dtype=np.float32)[None, :]
    ys = np.arange(height, dtype=np.float32)[:, None]
    if diagonal:
        # projection onto the (w, h) diagonal, as a canvas gradient from corner to corner
        t = (xs * width + ys * height) / float(width * width + height * height)
    else:
        t = np.broadcast_to(xs / max(1, width - 1), (height, width))

    stops = np.linspace(0.0, 1.0, len(colors))
    rgb = np.array([hex_to_rgb(c) for c in colors], dtype=np.float32)
    channels = [np.interp(t, stops, rgb[:, i]) for i in range(3)]
    pixels = np.clip(np.rint(np.stack(channels, axis=-1)), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels, "RGB")


def text_width(draw: ImageDraw.ImageDraw, text: str, font) -> float:
    return draw.textlength(text, font=font)


def fit_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> str:
    """Trim ``text`` from the end until it fits, marking the cut with an ellipsis."""
    if text_width(draw, text, font) <= max_width:
        return text
    trimmed = text
    while len(trimmed) > 1 and text_width(draw, trimmed + ELLIPSIS, font) > max_width:
        trimmed = trimmed[:-1]
    return trimmed + ELLIPSIS


def wrap_chars(
    draw: ImageDraw.ImageDraw,
    text: str,
    font,
    max_width: float,
    max_lines: int | None = None,
) -> list[str]:
    """Wrap by character (works for unspaced Japanese text), honouring newlines.

    When ``max_lines`` cuts the text short the last line ends in an ellipsis.
    """
    lines: list[str] = []
    truncated = False
    for paragraph in text.split("\n"):
        if max_lines is not None and len(lines) >= max_lines:
            truncated = True
            break
        line = ""
        for char in paragraph:
            candidate = line + char
            if line and text_width(draw, candidate, font) > max_width:
                lines.append(line)
                line = char
                if max_lines is not None and len(lines) >= max_lines:
                    truncated = True
                    line = ""
                    break
            else:
                line = candidate
        if line:
            if max_lines is not None and len(lines) >= max_lines:
                truncated = True
                break
            lines.append(line)
        if truncated:
            break

    if truncated and lines:
        last = lines[-1]
        lines[-1] = (last[:-1] if len(last) > 1 else last) + ELLIPSIS
    return lines


def draw_centered_text(draw, text: str, center_x: float, center_y: float, font, fill) -> None:
    """Draw text centred on a point."""
    draw.text((center_x, center_y), text, font=font, fill=fill, anchor="mm")
