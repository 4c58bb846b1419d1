"""
Privacy reminder job.

Every few hours, scan all mentees, ask Firebase whether each one has verified
their email, and either stamp the verification date or send a one-time
privacy reminder once the verification is old enough.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

from app.features.privacy_reminder.domain import (
    DEFAULT_REMINDER_DELAY,
    MenteeRecord,
    ReminderAction,
    decide_reminder_action,
)
from app.features.privacy_reminder.repository import MenteeRepository, MenteeRepositoryError
from app.features.privacy_reminder.services import (
    FirebaseVerificationService,
    NotificationError,
    SmtpNotificationService,
    VerificationLookupError,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

JOB_NAME = "privacy_reminder"
DEFAULT_INTERVAL_HOURS = 3
DEFAULT_MAX_CONCURRENCY = 10
DEFAULT_OPERATION_TIMEOUT_SECONDS = 30.0
MAX_CONSECUTIVE_FAILURES = 3


class PrivacyReminderJobError(Exception):
    """Raised when a whole cycle cannot run."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


def next_fire_time(now: datetime, interval_hours: int = DEFAULT_INTERVAL_HOURS) -> datetime:
    """
    Next schedule boundary strictly after `now`.

    Boundaries fall on second 0, minute 0 of every hour divisible by
    `interval_hours` (cron `0 0 */3 * * *` for the default interval).
    """
    hour_start = now.replace(minute=0, second=0, microsecond=0)
    next_hour = (hour_start.hour // interval_hours + 1) * interval_hours
    return hour_start.replace(hour=0) + timedelta(hours=next_hour)


class PrivacyReminderMetrics:
    """Counters for one reminder cycle."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all metrics for new job run."""
        self.start_time = datetime.now(UTC)
        self.records_scanned = 0
        self.marked_verified = 0
        self.reminders_sent = 0
        self.no_ops = 0
        self.lookup_failures = 0
        self.send_failures = 0
        self.save_failures = 0
        self.processing_errors = 0
        self.total_duration_seconds = 0.0
        self.errors: list[dict] = []

    def record_action(self, mentee_id: str, action: ReminderAction, duration_ms: float):
        self.records_scanned += 1
        if action is ReminderAction.MARK_VERIFIED:
            self.marked_verified += 1
        elif action is ReminderAction.SEND_REMINDER:
            self.reminders_sent += 1
        else:
            self.no_ops += 1

        logger.debug(
            "Mentee processed",
            mentee_id=mentee_id,
            action=action.value,
            duration_ms=round(duration_ms, 2),
            job_run=JOB_NAME,
        )

    def _record_error(self, mentee_id: str, error: str, error_type: str, retryable: bool):
        self.errors.append(
            {
                "mentee_id": mentee_id,
                "error": error,
                "error_type": error_type,
                "retryable": retryable,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

    def record_lookup_failure(self, mentee_id: str, error: str):
        self.records_scanned += 1
        self.lookup_failures += 1
        self._record_error(mentee_id, error, "verification_lookup", retryable=True)

        logger.warning(
            "Email verification lookup failed", mentee_id=mentee_id, error=error, job_run=JOB_NAME
        )

    def record_send_failure(self, mentee_id: str, error: str):
        self.records_scanned += 1
        self.send_failures += 1
        self._record_error(mentee_id, error, "notification", retryable=True)

        logger.error(
            "Privacy reminder send failed, will retry next cycle",
            mentee_id=mentee_id,
            error=error,
            job_run=JOB_NAME,
        )

    def record_save_failure(self, mentee_id: str, error: str, action: ReminderAction):
        self.records_scanned += 1
        self.save_failures += 1
        self._record_error(mentee_id, error, "store_save", retryable=True)

        logger.error(
            "Failed to save mentee",
            mentee_id=mentee_id,
            action=action.value,
            error=error,
            job_run=JOB_NAME,
        )

    def record_processing_error(self, mentee_id: str, error: str):
        self.records_scanned += 1
        self.processing_errors += 1
        self._record_error(mentee_id, error, "processing", retryable=True)

        logger.error(
            "Privacy reminder processing error", mentee_id=mentee_id, error=error, job_run=JOB_NAME
        )

    def finalize(self):
        self.total_duration_seconds = (datetime.now(UTC) - self.start_time).total_seconds()

    def to_dict(self) -> dict:
        """Convert metrics to dictionary for logging."""
        return {
            "job_run": JOB_NAME,
            "start_time": self.start_time.isoformat(),
            "total_duration_seconds": round(self.total_duration_seconds, 2),
            "records_scanned": self.records_scanned,
            "marked_verified": self.marked_verified,
            "reminders_sent": self.reminders_sent,
            "no_ops": self.no_ops,
            "lookup_failures": self.lookup_failures,
            "send_failures": self.send_failures,
            "save_failures": self.save_failures,
            "processing_errors": self.processing_errors,
            "errors_count": len(self.errors),
        }


class PrivacyReminderJob:
    """
    Scheduled scan-lookup-decide-act workflow over every mentee.

    Collaborators are passed in by the application context so the job holds
    no process-wide state of its own. Metrics are built per cycle and only
    published once the cycle completes.
    """

    def __init__(
        self,
        repository: MenteeRepository,
        verification_service: FirebaseVerificationService,
        notification_service: SmtpNotificationService,
        interval_hours: int = DEFAULT_INTERVAL_HOURS,
        reminder_delay: timedelta = DEFAULT_REMINDER_DELAY,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        operation_timeout_seconds: float = DEFAULT_OPERATION_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ):
        self._repository = repository
        self._verification = verification_service
        self._notifier = notification_service
        self.interval_hours = interval_hours
        self.reminder_delay = reminder_delay
        self.max_concurrency = max_concurrency
        self.operation_timeout_seconds = operation_timeout_seconds
        self._clock = clock or (lambda: datetime.now(UTC))

        self.started_at = self._clock()
        self.is_running = False
        self.last_run_time: datetime | None = None
        self.last_run_metrics: dict | None = None
        self.last_run_errors: list[dict] = []
        self.last_failure_time: datetime | None = None
        self.last_error: str | None = None
        self.consecutive_failures = 0

    async def run_once(self) -> dict:
        """
        Run a single reminder cycle over every mentee.

        Returns:
            Dict: Cycle metrics

        Raises:
            PrivacyReminderJobError: If the candidate list cannot be loaded
        """
        if self.is_running:
            logger.warning("Privacy reminder job already running, skipping this iteration")
            return {"skipped": True, "reason": "already_running"}

        try:
            self.is_running = True
            metrics = PrivacyReminderMetrics()
            now = self._clock()

            logger.info("Starting privacy reminder job", cycle_time=now.isoformat())

            try:
                mentees = await self._repository.list_all()
            except MenteeRepositoryError as e:
                raise PrivacyReminderJobError(
                    f"Failed to load mentees: {e}", operation="list_all"
                ) from e

            if mentees:
                semaphore = asyncio.Semaphore(self.max_concurrency)
                await asyncio.gather(
                    *(
                        self._process_with_semaphore(semaphore, mentee, now, metrics)
                        for mentee in mentees
                    )
                )

            metrics.finalize()
            summary = metrics.to_dict()

            self.last_run_time = now
            self.last_run_metrics = summary
            self.last_run_errors = metrics.errors
            self.consecutive_failures = 0

            logger.info("Privacy reminder job completed", **summary)
            return summary

        except PrivacyReminderJobError as e:
            self.last_failure_time = self._clock()
            self.last_error = str(e)
            self.consecutive_failures += 1
            logger.error(
                "Privacy reminder job failed",
                error=str(e),
                operation=e.operation,
                consecutive_failures=self.consecutive_failures,
            )
            raise

        finally:
            self.is_running = False

    async def _process_with_semaphore(
        self,
        semaphore: asyncio.Semaphore,
        mentee: MenteeRecord,
        now: datetime,
        metrics: PrivacyReminderMetrics,
    ) -> None:
        async with semaphore:
            try:
                await self._process_mentee(mentee, now, metrics)
            except Exception as e:
                metrics.record_processing_error(
                    mentee.id, f"Unexpected error: {type(e).__name__}: {e}"
                )

    async def _process_mentee(
        self, mentee: MenteeRecord, now: datetime, metrics: PrivacyReminderMetrics
    ) -> None:
        start_time = time.time()

        try:
            is_verified = await asyncio.wait_for(
                self._verification.is_email_verified(mentee.firebase_uid),
                timeout=self.operation_timeout_seconds,
            )
        except TimeoutError:
            metrics.record_lookup_failure(
                mentee.id, f"Lookup timed out after {self.operation_timeout_seconds}s"
            )
            return
        except VerificationLookupError as e:
            metrics.record_lookup_failure(mentee.id, str(e))
            return

        decision = decide_reminder_action(mentee, is_verified, now, self.reminder_delay)

        if not decision.requires_save:
            metrics.record_action(mentee.id, decision.action, (time.time() - start_time) * 1000)
            return

        if decision.action is ReminderAction.SEND_REMINDER:
            # reminder_sent is only persisted after a confirmed send
            try:
                await asyncio.wait_for(
                    self._notifier.send_privacy_reminder(mentee.email),
                    timeout=self.operation_timeout_seconds,
                )
            except TimeoutError:
                metrics.record_send_failure(
                    mentee.id, f"Send timed out after {self.operation_timeout_seconds}s"
                )
                return
            except NotificationError as e:
                metrics.record_send_failure(mentee.id, str(e))
                return

        try:
            saved = await self._repository.save(decision.record)
        except MenteeRepositoryError as e:
            metrics.record_save_failure(mentee.id, str(e), decision.action)
            return

        if not saved:
            metrics.record_save_failure(mentee.id, "Mentee no longer exists", decision.action)
            return

        metrics.record_action(mentee.id, decision.action, (time.time() - start_time) * 1000)

    async def run_forever(
        self,
        max_cycles: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Fire `run_once` on every schedule boundary.

        A failing cycle is logged and never stops later cycles.
        """
        logger.info("Starting privacy reminder scheduler", interval_hours=self.interval_hours)

        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            now = self._clock()
            fire_at = next_fire_time(now, self.interval_hours)
            await sleep((fire_at - now).total_seconds())

            try:
                await self.run_once()
            except Exception as e:
                logger.error(
                    "Error in privacy reminder scheduler", error=str(e), error_type=type(e).__name__
                )

            cycles += 1

    def get_job_status(self) -> dict:
        """Current job status, metrics of the last completed cycle and the last failure."""
        return {
            "job_name": JOB_NAME,
            "is_running": self.is_running,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "interval_hours": self.interval_hours,
            "reminder_delay_hours": self.reminder_delay.total_seconds() / 3600,
            "max_concurrency": self.max_concurrency,
            "last_run_metrics": self.last_run_metrics,
            "last_failure_time": (
                self.last_failure_time.isoformat() if self.last_failure_time else None
            ),
            "last_error": self.last_error,
            "consecutive_failures": self.consecutive_failures,
        }

    def health_check(self) -> dict:
        """
        Report the job as unhealthy once two scheduled runs have passed without
        a completed cycle, counting from start-up when none has completed yet,
        or after repeated failed cycles.
        """
        now = self._clock()
        overdue_threshold = timedelta(hours=self.interval_hours * 2)
        reference_time = self.last_run_time or self.started_at
        is_overdue = (now - reference_time) > overdue_threshold
        is_failing = self.consecutive_failures >= MAX_CONSECUTIVE_FAILURES

        health_status = {
            "healthy": not (is_overdue or is_failing),
            "service": "privacy_reminder_job",
            "is_running": self.is_running,
            "last_run_time": self.last_run_time.isoformat() if self.last_run_time else None,
            "is_overdue": is_overdue,
            "consecutive_failures": self.consecutive_failures,
        }

        if is_overdue:
            since = "last completed cycle" if self.last_run_time else "start-up"
            health_status["warning"] = (
                f"No completed cycle for {(now - reference_time).total_seconds() / 3600:.1f} "
                f"hours since {since}"
            )
        elif is_failing:
            health_status["warning"] = (
                f"{self.consecutive_failures} consecutive cycles failed: {self.last_error}"
            )

        return health_status
