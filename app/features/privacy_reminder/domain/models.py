from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class MenteeRecord(BaseModel):
    """Working copy of one registered mentee as seen by the reminder job."""

    model_config = ConfigDict(frozen=True)

    id: str
    firebase_uid: str
    email: str
    verified_date: datetime | None = None
    reminder_sent: bool = False

    @property
    def is_verified(self) -> bool:
        # Verification only moves forward: a stamped date is never cleared.
        return self.verified_date is not None


class ReminderAction(str, Enum):
    NO_OP = "no_op"
    MARK_VERIFIED = "mark_verified"
    SEND_REMINDER = "send_reminder"


class ReminderDecision(BaseModel):
    """Outcome of the decision engine for one record."""

    model_config = ConfigDict(frozen=True)

    action: ReminderAction
    record: MenteeRecord

    @property
    def requires_save(self) -> bool:
        return self.action is not ReminderAction.NO_OP
