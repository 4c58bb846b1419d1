"""
Email verification lookups against Firebase Auth.

The Firebase Admin SDK is synchronous, so each lookup runs in a worker
thread to keep the event loop free during a cycle's fan-out.
"""

import asyncio

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from app.config import Settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

FIREBASE_APP_NAME = "privacy-reminder"


class VerificationLookupError(Exception):
    """Raised when the identity provider cannot answer for a user."""

    def __init__(self, message: str, firebase_uid: str | None = None, recoverable: bool = True):
        super().__init__(message)
        self.firebase_uid = firebase_uid
        self.recoverable = recoverable


class FirebaseVerificationService:
    """Answers "is this account's email verified" for a Firebase uid."""

    def __init__(self, app: firebase_admin.App):
        self._app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseVerificationService":
        if not settings.FIREBASE_CREDENTIALS_PATH:
            raise ValueError("FIREBASE_CREDENTIALS_PATH is not set")

        options = {}
        if settings.FIREBASE_DATABASE_URL:
            options["databaseURL"] = settings.FIREBASE_DATABASE_URL

        app = firebase_admin.initialize_app(
            credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH),
            options,
            name=FIREBASE_APP_NAME,
        )
        logger.info("Firebase admin initialized", app_name=FIREBASE_APP_NAME)
        return cls(app)

    async def is_email_verified(self, firebase_uid: str) -> bool:
        """
        Look up the user and return its email verification flag.

        Raises:
            VerificationLookupError: If the user is missing or Firebase fails
        """
        try:
            user = await asyncio.to_thread(auth.get_user, firebase_uid, app=self._app)
        except auth.UserNotFoundError as e:
            raise VerificationLookupError(
                f"Firebase user not found: {firebase_uid}",
                firebase_uid=firebase_uid,
                recoverable=False,
            ) from e
        except FirebaseError as e:
            raise VerificationLookupError(
                f"Firebase lookup failed: {e}", firebase_uid=firebase_uid
            ) from e
        except ValueError as e:
            raise VerificationLookupError(
                f"Invalid firebase uid: {e}", firebase_uid=firebase_uid, recoverable=False
            ) from e

        return bool(user.email_verified)

    def close(self) -> None:
        firebase_admin.delete_app(self._app)
