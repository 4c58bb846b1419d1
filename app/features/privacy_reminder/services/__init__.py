"""
Service layer for the privacy reminder feature.
"""

from .notification_service import NotificationError, SmtpNotificationService
from .verification_service import FirebaseVerificationService, VerificationLookupError

__all__ = [
    "FirebaseVerificationService",
    "NotificationError",
    "SmtpNotificationService",
    "VerificationLookupError",
]
