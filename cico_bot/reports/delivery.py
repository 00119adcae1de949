# cico_bot/reports/delivery.py
"""
Record delivery: images first, then the text block.

Delivery is best-effort per payload. Images already sent are not rolled back
when the text fails.
"""

import logging

from cico_bot.errors import DeliveryFailed, RateLimitExceeded
from cico_bot.messaging.sender import RateLimitedSender
from cico_bot.models.records import AttendanceRecord

from .formatter import RecordFormatter

logger = logging.getLogger(__name__)


class ReportDelivery:
    """Formats a record and sends its payloads to one destination."""

    def __init__(self, sender: RateLimitedSender, formatter: RecordFormatter) -> None:
        self._sender = sender
        self._formatter = formatter

    async def deliver(
        self,
        record: AttendanceRecord,
        destination: int | str,
        stretch_images: bool = True,
    ) -> int:
        """
        Send one record.

        Args:
            record: Record to deliver
            destination: Chat or channel id
            stretch_images: Apply the vertical stretch to images

        Returns:
            Number of payloads delivered

        Raises:
            TransportError: Non-retryable transport failure (fatal to callers)
        """
        report = await self._formatter.format(record, stretch_images)
        delivered = 0

        for photo in report.media:
            try:
                await self._sender.send(destination, photo)
                delivered += 1
            except (RateLimitExceeded, DeliveryFailed) as e:
                logger.error(f"Skipped {photo.caption} for {record.date} -> {destination}: {e}")

        try:
            await self._sender.send_text(destination, report.text)
            delivered += 1
        except (RateLimitExceeded, DeliveryFailed) as e:
            logger.error(f"Skipped report text for {record.date} -> {destination}: {e}")

        return delivered
