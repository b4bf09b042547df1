"""
QR code rendering for payment links.

Wraps the `qrcode` library. Rendering is CPU-bound PIL work, so it runs in
the default executor instead of on the event loop.
"""
import asyncio
import io
from typing import Optional

import qrcode
import structlog

from crypto_payments.config import get_settings

logger = structlog.get_logger(__name__)


class QRCodeEncoder:
    """Encodes text into a PNG QR code image."""

    def __init__(self, box_size: Optional[int] = None, border: Optional[int] = None):
        """
        Initialize encoder.

        Args:
            box_size: Pixels per QR module (defaults to settings)
            border: Quiet zone width in modules (defaults to settings)
        """
        settings = get_settings()
        self.box_size = box_size if box_size is not None else settings.qr_box_size
        self.border = border if border is not None else settings.qr_border

    def _render(self, text: str) -> bytes:
        qr = qrcode.QRCode(box_size=self.box_size, border=self.border)
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, "PNG")
        return buffered.getvalue()

    async def encode(self, text: str) -> bytes:
        """
        Render text as a QR code.

        Args:
            text: Payload to encode, usually a URL

        Returns:
            bytes: PNG image
        """
        loop = asyncio.get_running_loop()
        image = await loop.run_in_executor(None, self._render, text)
        logger.debug("qr_code_rendered", payload_length=len(text), image_bytes=len(image))
        return image
