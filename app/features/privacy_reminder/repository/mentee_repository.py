"""
Persistence layer for the privacy reminder feature.

Reads mentee documents from MongoDB and writes back only the two fields the
reminder job owns (verified_date, reminder_sent).
"""

from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from app.features.privacy_reminder.domain import MenteeRecord
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class MenteeRepositoryError(Exception):
    """Raised when the mentee collection cannot be read or written."""

    def __init__(self, message: str, operation: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


def _coerce_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        # Legacy documents stored Date.now() milliseconds
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    raise ValueError(f"Unsupported verified_date value: {value!r}")


def _record_id_filter(record_id: str) -> dict:
    if ObjectId.is_valid(record_id):
        return {"_id": ObjectId(record_id)}
    return {"_id": record_id}


def document_to_record(document: dict) -> MenteeRecord | None:
    """Build a MenteeRecord from a raw document, None if it is unusable."""
    firebase_uid = document.get("firebase_uid")
    email = document.get("email")
    if not firebase_uid or not email:
        return None

    return MenteeRecord(
        id=str(document["_id"]),
        firebase_uid=firebase_uid,
        email=email,
        verified_date=_coerce_datetime(document.get("verified_date")),
        reminder_sent=bool(document.get("reminder_sent", False)),
    )


def record_to_update(record: MenteeRecord) -> dict:
    """$set payload for the fields owned by the reminder job."""
    fields: dict[str, Any] = {"reminder_sent": record.reminder_sent}
    if record.verified_date is not None:
        fields["verified_date"] = record.verified_date
    return {"$set": fields}


class MenteeRepository:
    """Candidate selector and record store backed by the mentees collection."""

    PROJECTION = {"email": 1, "firebase_uid": 1, "verified_date": 1, "reminder_sent": 1}

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    async def list_all(self) -> list[MenteeRecord]:
        """
        Load every mentee record.

        Raises:
            MenteeRepositoryError: If the collection cannot be read
        """
        try:
            documents = await self._collection.find({}, self.PROJECTION).to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to list mentees", error=str(e))
            raise MenteeRepositoryError(
                f"Failed to list mentees: {e}", operation="list_all"
            ) from e

        records = []
        for document in documents:
            try:
                record = document_to_record(document)
            except ValueError as e:
                logger.warning(
                    "Skipping mentee with malformed fields",
                    mentee_id=str(document.get("_id")),
                    error=str(e),
                )
                continue

            if record is None:
                logger.warning(
                    "Skipping mentee without firebase_uid or email",
                    mentee_id=str(document.get("_id")),
                )
                continue
            records.append(record)

        return records

    async def save(self, record: MenteeRecord) -> bool:
        """
        Persist verified_date and reminder_sent for one record.

        Returns:
            True if a document matched the record id

        Raises:
            MenteeRepositoryError: If the write fails
        """
        try:
            result = await self._collection.update_one(
                _record_id_filter(record.id), record_to_update(record)
            )
        except PyMongoError as e:
            raise MenteeRepositoryError(
                f"Failed to save mentee {record.id}: {e}", operation="save"
            ) from e

        if result.matched_count == 0:
            logger.warning("Mentee not found while saving", mentee_id=record.id)
            return False

        return True
