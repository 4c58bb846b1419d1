"""
Domain subpackage for the privacy reminder feature.
"""

from .decision import DEFAULT_REMINDER_DELAY, decide_reminder_action
from .models import MenteeRecord, ReminderAction, ReminderDecision

__all__ = [
    "DEFAULT_REMINDER_DELAY",
    "MenteeRecord",
    "ReminderAction",
    "ReminderDecision",
    "decide_reminder_action",
]
