"""
Job runners for the privacy reminder feature.
"""

from .reminder_job import PrivacyReminderJob, PrivacyReminderJobError, next_fire_time

__all__ = ["PrivacyReminderJob", "PrivacyReminderJobError", "next_fire_time"]
