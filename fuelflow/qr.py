from __future__ import annotations

import io
from typing import Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from .logging import get_logger

logger = get_logger(__name__)


def render_qr_png(
    text: str,
    width: int = 280,
    margin: int = 2,
    dark: str = "#000000",
    light: str = "#ffffff",
) -> Optional[bytes]:
    """
    Encode ``text`` as a PNG QR code about ``width`` pixels wide.

    Returns None when rendering fails; the page then goes without the image.
    """
    try:
        qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, border=margin)
        qr.add_data(text)
        qr.make(fit=True)
        # Largest whole-pixel module size that fits the requested width
        qr.box_size = max(1, width // (qr.modules_count + 2 * margin))
        image = qr.make_image(fill_color=dark, back_color=light)
        buffer = io.BytesIO()
        image.save(buffer)
        return buffer.getvalue()
    except Exception as e:
        logger.error(f"QR generation failed for {text}: {e!r}")
        return None
