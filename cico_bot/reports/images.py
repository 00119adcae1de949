# cico_bot/reports/images.py
"""
Portal image download and vertical stretch.

The portal stores check-in photos squashed to half height; stretching by
2.0x restores the original aspect ratio.
"""

import asyncio
import io
import logging
import math

import httpx
from PIL import Image

logger = logging.getLogger(__name__)

# Formats re-encoded as themselves; anything else is written as JPEG
SAVE_FORMATS = frozenset({"JPEG", "PNG", "WEBP", "GIF", "BMP"})


def stretch_image(data: bytes, factor: float = 2.0) -> bytes:
    """
    Scale image height by `factor`, keeping width.

    Args:
        data: Encoded image bytes
        factor: Vertical scale

    Returns:
        Re-encoded image bytes
    """
    with Image.open(io.BytesIO(data)) as img:
        fmt = img.format if img.format in SAVE_FORMATS else "JPEG"
        width, height = img.size
        stretched = img.resize((width, max(1, math.floor(height * factor))))

    if fmt == "JPEG" and stretched.mode not in ("RGB", "L"):
        stretched = stretched.convert("RGB")

    out = io.BytesIO()
    stretched.save(out, format=fmt)
    return out.getvalue()


class ImageProcessor:
    """
    Downloads portal images and optionally stretches them.

    process() never raises: on any failure it returns the original reference
    so callers can still hand the URL to the transport.
    """

    def __init__(
        self,
        timeout: float = 15.0,
        stretch_factor: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.stretch_factor = stretch_factor
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def process(self, image_ref: str, stretch: bool = True) -> bytes | str:
        """
        Fetch an image and return processed bytes, or `image_ref` on failure.

        Args:
            image_ref: Image URL
            stretch: Apply the vertical stretch

        Returns:
            Image bytes, or the unchanged reference
        """
        try:
            response = await self._client.get(image_ref)
            response.raise_for_status()
            data = response.content
            if not stretch:
                return data
            # Pillow work is CPU-bound; keep the event loop responsive
            return await asyncio.to_thread(stretch_image, data, self.stretch_factor)
        except Exception as e:
            logger.error(f"Image processing failed for {image_ref}: {type(e).__name__}: {e}")
            return image_ref
