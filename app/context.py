"""
Application context.

Built once at startup and handed to the HTTP layer and the scheduler, so the
Mongo client, Firebase app and reminder job are never module-level globals.
"""

from dataclasses import dataclass

from app.config import Settings
from app.db.mongo import MongoClientManager
from app.features.privacy_reminder.jobs import PrivacyReminderJob
from app.features.privacy_reminder.repository import MenteeRepository
from app.features.privacy_reminder.services import (
    FirebaseVerificationService,
    SmtpNotificationService,
)
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    mongo: MongoClientManager | None
    repository: MenteeRepository
    verification_service: FirebaseVerificationService
    notification_service: SmtpNotificationService
    reminder_job: PrivacyReminderJob

    async def close(self) -> None:
        """Release external resources in reverse start-up order."""
        shutdown_errors = []

        try:
            self.verification_service.close()
        except Exception as e:
            logger.error("Error closing Firebase app", error=str(e))
            shutdown_errors.append(f"Firebase: {e}")

        if self.mongo is not None:
            try:
                await self.mongo.close()
            except Exception as e:
                logger.error("Error closing MongoDB client", error=str(e))
                shutdown_errors.append(f"MongoDB: {e}")

        if shutdown_errors:
            logger.warning("Some services had shutdown errors", errors=shutdown_errors)


def build_reminder_job(
    settings: Settings,
    repository: MenteeRepository,
    verification_service: FirebaseVerificationService,
    notification_service: SmtpNotificationService,
) -> PrivacyReminderJob:
    config = settings.get_reminder_config()
    return PrivacyReminderJob(
        repository=repository,
        verification_service=verification_service,
        notification_service=notification_service,
        interval_hours=config["interval_hours"],
        reminder_delay=config["reminder_delay"],
        max_concurrency=config["max_concurrency"],
        operation_timeout_seconds=config["operation_timeout_seconds"],
    )


async def create_app_context(settings: Settings) -> AppContext:
    """Connect every external collaborator and wire the reminder job."""
    mongo = MongoClientManager(settings)
    await mongo.initialize()

    try:
        repository = MenteeRepository(mongo.database[settings.MONGO_MENTEE_COLLECTION])
        verification_service = FirebaseVerificationService.from_settings(settings)
    except Exception as e:
        logger.error("Failed to initialize services", error=str(e))
        await mongo.close()
        raise

    notification_service = SmtpNotificationService(settings)
    if not settings.smtp_configured():
        logger.warning("SMTP is not fully configured, reminder sends will fail")

    reminder_job = build_reminder_job(
        settings, repository, verification_service, notification_service
    )

    logger.info(
        "Application context ready",
        environment=settings.environment,
        database=settings.MONGO_DB_NAME,
        reminder_interval_hours=reminder_job.interval_hours,
    )

    return AppContext(
        settings=settings,
        mongo=mongo,
        repository=repository,
        verification_service=verification_service,
        notification_service=notification_service,
        reminder_job=reminder_job,
    )
