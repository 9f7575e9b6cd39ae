"""QR encode/decode primitives.

Encoding uses ``qrcode``; decoding uses OpenCV's detector on a grayscale
numpy view of a Pillow image. Both return ``None`` instead of raising so the
compositor and the scanner can treat a failure as a blank region or a miss.

Blank-card QRs (grid cells and the blank leader panel) are small, so they use
low error correction, a one-module border and a whole number of pixels per
module; the white pad drawn around them supplies the rest of the quiet zone.
A cell QR is about 102 px at design size, which keeps 2 px per module up to
version 8 (192 bytes of UTF-8 payload) and 3 px per module up to version 3
(53 bytes).
"""

import logging
from typing import Optional

import cv2
import numpy as np
import qrcode
from PIL import Image, ImageOps
from qrcode.constants import ERROR_CORRECT_L, ERROR_CORRECT_M
from qrcode.exceptions import DataOverflowError

logger = logging.getLogger(__name__)

QR_BORDER = 2

CARD_QR_BORDER = 1
CARD_QR_ERROR_CORRECTION = ERROR_CORRECT_L

# Cell QRs drawn with fewer pixels per module than this rarely scan back
MIN_MODULE_PX = 2


def _build(text: str, border: int, error_correction: int) -> qrcode.QRCode:
    qr = qrcode.QRCode(version=None, error_correction=error_correction, box_size=1, border=border)
    qr.add_data(text)
    qr.make(fit=True)
    return qr


def module_pitch(
    text: str,
    size: int,
    border: int = CARD_QR_BORDER,
    error_correction: int = CARD_QR_ERROR_CORRECTION,
) -> int:
    """Whole pixels per module when ``text`` is drawn ``size`` px square.

    Returns:
        Pixels per module, 0 if the payload does not fit any QR version
    """
    try:
        qr = _build(text, border, error_correction)
    except (ValueError, DataOverflowError):
        return 0
    return size // (qr.modules_count + 2 * border)


def encode_qr(
    text: str,
    size: int,
    border: int = QR_BORDER,
    error_correction: int = ERROR_CORRECT_M,
    whole_modules: bool = False,
) -> Optional[Image.Image]:
    """Render ``text`` as a black-on-white QR code, ``size`` px square.

    Args:
        text: Payload
        size: Side of the returned image in px
        border: Quiet zone in modules
        error_correction: ``qrcode.constants`` level
        whole_modules: Keep an integer module pitch and centre the code on
            white instead of stretching it to ``size``

    Returns:
        RGB image, or None if the payload cannot be encoded
    """
    try:
        qr = _build(text, border, error_correction)
        modules = qr.modules_count + 2 * border
        qr.box_size = max(1, size // modules)
        img = qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")
    except (ValueError, DataOverflowError) as e:
        logger.warning(f"QR encode failed ({len(text)} chars): {e}")
        return None

    if img.size == (size, size):
        return img
    if whole_modules and img.width < size:
        canvas = Image.new("RGB", (size, size), "white")
        offset = (size - img.width) // 2
        canvas.paste(img, (offset, offset))
        return canvas
    return img.resize((size, size), Image.Resampling.NEAREST)


def encode_card_qr(text: str, size: int) -> Optional[Image.Image]:
    """Encode a blank-card payload for a cell or the blank leader panel."""
    return encode_qr(text, size, CARD_QR_BORDER, CARD_QR_ERROR_CORRECTION, whole_modules=True)


def _detect(gray: np.ndarray) -> Optional[str]:
    detector = cv2.QRCodeDetector()
    try:
        text, points, _ = detector.detectAndDecode(gray)
    except cv2.error as e:
        logger.debug(f"QR detector error: {e}")
        return None
    if points is None or not text:
        return None
    return text


def decode_qr(image: Image.Image, try_both_polarities: bool = True) -> Optional[str]:
    """Decode a single QR code from ``image``.

    Args:
        image: Any Pillow image; converted to grayscale
        try_both_polarities: Also try the inverted image (light-on-dark codes)

    Returns:
        Decoded text, or None
    """
    gray_img = image.convert("L")
    text = _detect(np.asarray(gray_img))
    if text is None and try_both_polarities:
        text = _detect(np.asarray(ImageOps.invert(gray_img)))
    return text
