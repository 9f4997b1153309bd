"""
qr_render.py — default QR collaborator for enrollment artifacts.

Turns an otpauth:// URI into an SVG document made of a single vector path,
so the result can be embedded inline in a page without any raster step.
"""

import io
import logging

import qrcode
import qrcode.constants
import qrcode.image.svg

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def render_qr_svg(text: str, error_correction: str = "H") -> str:
    """
    Encode `text` as a QR code and return it as SVG markup.

    Arguments:
        text: payload, encoded as UTF-8 by the QR library
        error_correction: one of "L", "M", "Q", "H"

    Returns:
        str: SVG document (qrcode's SvgPathImage output)

    Raises:
        ValueError: unknown error-correction level
        qrcode.exceptions.DataOverflowError: payload too large for any version
    """
    try:
        level = ERROR_CORRECTION_LEVELS[error_correction.upper()]
    except KeyError:
        raise ValueError(f"Unknown QR error correction level: {error_correction!r}") from None

    qr = qrcode.QRCode(
        error_correction=level,
        border=4,
        image_factory=qrcode.image.svg.SvgPathImage,
    )
    qr.add_data(text)
    qr.make(fit=True)
    logger.debug("QR version %d, error correction %s", qr.version, error_correction.upper())

    img = qr.make_image()
    buffer = io.BytesIO()
    img.save(buffer)
    return buffer.getvalue().decode("utf-8")
