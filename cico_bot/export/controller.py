# cico_bot/export/controller.py
"""
Bulk export controller.

Runs one cancellable, throttled upload loop per user. Each loop suspends on
network calls, throttling back-off and the fixed inter-record delay, so many
users' exports interleave on one event loop.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from cico_bot.errors import AlreadyRunning, EmptyInput, ExportFailed
from cico_bot.models.jobs import CancelResult, ExportJob, ExportResult, ExportStatus
from cico_bot.models.records import AttendanceRecord
from cico_bot.reports.delivery import ReportDelivery

from .progress import render_progress, snapshot
from .registry import UserRegistry

logger = logging.getLogger(__name__)


class StatusSink(Protocol):
    """Receives rendered progress text (e.g. by editing a status message)."""

    async def update(self, text: str) -> None: ...


class ExportController:
    """
    Owns running exports and the per-user single-flight guarantee.

    Features:
        - At most one export per user (AlreadyRunning otherwise)
        - reserve() holds that slot while the caller is still fetching records
        - Cooperative cancellation, observed once per record
        - Progress pushed every `progress_every` records and on the last one
        - Registry entry removed on every exit path
    """

    def __init__(
        self,
        delivery: ReportDelivery,
        progress_every: int = 5,
        inter_record_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize export controller.

        Args:
            delivery: Formats and sends one record
            progress_every: Status update interval in completed records
            inter_record_delay: Seconds to wait between records
            sleep: Awaitable sleep (injected by tests)
            clock: Monotonic clock in seconds (injected by tests)
        """
        self._delivery = delivery
        self._progress_every = progress_every
        self._inter_record_delay = inter_record_delay
        self._sleep = sleep
        self._clock = clock
        self._jobs: UserRegistry[ExportJob] = UserRegistry("exports")

    def is_running(self, user_id: int) -> bool:
        return user_id in self._jobs

    def get_job(self, user_id: int) -> ExportJob | None:
        return self._jobs.get(user_id)

    def reserve(self, user_id: int) -> ExportJob | None:
        """
        Hold the user's export slot while records are still being fetched.

        Returns:
            Placeholder job to pass to start_export(), or None if the user
            already has an export (running or reserved)
        """
        job = ExportJob(user_id=user_id, records=(), destination="", started_at=self._clock())
        if not self._jobs.claim(user_id, job):
            return None
        return job

    def release(self, user_id: int, reservation: ExportJob) -> None:
        """Drop a reservation; a newer entry for the same user is left alone."""
        if self._jobs.get(user_id) is reservation:
            self._jobs.release(user_id)

    def cancel(self, user_id: int) -> CancelResult:
        """
        Request cancellation of a user's export.

        The loop stops at its next iteration boundary; an in-flight send is
        not interrupted.
        """
        job = self._jobs.get(user_id)
        if job is None:
            return CancelResult.NOT_FOUND
        job.cancelled = True
        logger.info(f"Cancellation requested for user {user_id} at {job.completed}/{job.total}")
        return CancelResult.CANCELLED

    async def start_export(
        self,
        user_id: int,
        records: Sequence[AttendanceRecord],
        destination: str,
        status_sink: StatusSink | None = None,
        stretch_images: bool = True,
        reservation: ExportJob | None = None,
    ) -> ExportResult:
        """
        Export records to a destination, in the given order.

        Args:
            user_id: Owner of the export
            records: Records to send (caller orders them)
            destination: Chat or channel id
            status_sink: Optional progress receiver
            stretch_images: Apply the vertical image stretch
            reservation: Slot previously taken with reserve()

        Returns:
            ExportResult with status COMPLETED or CANCELLED

        Raises:
            AlreadyRunning: User already has an active export
            EmptyInput: No records given (the reservation is released)
            ExportFailed: A fatal error aborted the loop
        """
        current = self._jobs.get(user_id)
        if current is not None and current is not reservation:
            raise AlreadyRunning(user_id)
        if not records:
            if reservation is not None:
                self.release(user_id, reservation)
            raise EmptyInput("No records to export")

        # A reservation keeps its cancel flag: a cancel pressed during the fetch still counts
        job = reservation or ExportJob(user_id=user_id, records=(), destination="")
        job.records = tuple(records)
        job.destination = destination
        job.started_at = self._clock()
        self._jobs.set(user_id, job)
        logger.info(f"Export started for user {user_id}: {job.total} record(s) -> {destination}")

        try:
            return await self._run(job, status_sink, stretch_images)
        finally:
            self._jobs.release(user_id)

    async def _run(
        self, job: ExportJob, status_sink: StatusSink | None, stretch_images: bool
    ) -> ExportResult:
        for record in job.records:
            if job.cancelled:
                logger.info(f"Export cancelled for user {job.user_id} at {job.completed}/{job.total}")
                return self._result(job, ExportStatus.CANCELLED)

            try:
                await self._delivery.deliver(record, job.destination, stretch_images)
            except Exception as e:
                logger.error(
                    f"Export aborted for user {job.user_id} at {job.completed}/{job.total}: "
                    f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise ExportFailed(job.completed, job.total, e) from e

            job.completed += 1

            if job.completed % self._progress_every == 0 or job.completed == job.total:
                await self._push_status(job, status_sink)

            if job.completed < job.total:
                await self._sleep(self._inter_record_delay)

        logger.info(f"Export completed for user {job.user_id}: {job.total} record(s)")
        return self._result(job, ExportStatus.COMPLETED)

    def _result(self, job: ExportJob, status: ExportStatus) -> ExportResult:
        return ExportResult(
            status=status,
            completed=job.completed,
            total=job.total,
            elapsed=self._clock() - job.started_at,
        )

    def progress_text(self, job: ExportJob) -> str:
        return render_progress(snapshot(job.completed, job.total, job.started_at, self._clock()))

    async def _push_status(self, job: ExportJob, status_sink: StatusSink | None) -> bool:
        """
        Push a progress update.

        Best-effort: returns False when the sink failed and the caller is
        free to ignore it. A failed update never affects the export.
        """
        if status_sink is None:
            return False
        try:
            await status_sink.update(self.progress_text(job))
        except Exception as e:
            logger.debug(f"Progress update failed for user {job.user_id}: {e}")
            return False
        return True
