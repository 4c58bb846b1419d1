"""
Privacy reminder feature package.

Domain models and the decision engine, the mentee repository, the Firebase and
SMTP adapters, and the scheduled job live side by side in this slice.
"""

from .domain import MenteeRecord, ReminderAction, decide_reminder_action  # noqa: F401
from .jobs import PrivacyReminderJob, PrivacyReminderJobError  # noqa: F401
