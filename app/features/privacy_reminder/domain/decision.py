"""
Reminder decision engine.

Maps (record state, oracle answer, current time) to exactly one action.
Pure: the input record is never mutated and no I/O happens here.
"""

from datetime import datetime, timedelta

from app.features.privacy_reminder.domain.models import (
    MenteeRecord,
    ReminderAction,
    ReminderDecision,
)

DEFAULT_REMINDER_DELAY = timedelta(days=3)


def decide_reminder_action(
    record: MenteeRecord,
    is_verified: bool,
    now: datetime,
    reminder_delay: timedelta = DEFAULT_REMINDER_DELAY,
) -> ReminderDecision:
    """
    Decide what the reminder job should do with one mentee.

    Args:
        record: Current stored state of the mentee
        is_verified: Fresh email verification answer from the identity provider
        now: Invocation time of the cycle (timezone-aware)
        reminder_delay: Time that must pass after verification before reminding

    Returns:
        ReminderDecision with the action and the resulting record copy
    """
    if record.reminder_sent:
        return ReminderDecision(action=ReminderAction.NO_OP, record=record)

    if not is_verified:
        # Covers both never-verified records and a later negative answer for
        # an already stamped record; the stamp is kept either way.
        return ReminderDecision(action=ReminderAction.NO_OP, record=record)

    if not record.is_verified:
        return ReminderDecision(
            action=ReminderAction.MARK_VERIFIED,
            record=record.model_copy(update={"verified_date": now}),
        )

    if now - record.verified_date >= reminder_delay:
        return ReminderDecision(
            action=ReminderAction.SEND_REMINDER,
            record=record.model_copy(update={"reminder_sent": True}),
        )

    return ReminderDecision(action=ReminderAction.NO_OP, record=record)
