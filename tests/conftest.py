import pytest

from app.config import Settings
from app.context import AppContext
from app.features.privacy_reminder.jobs import PrivacyReminderJob
from tests.fakes import FIXED_NOW, FakeMenteeStore, FakeMongo, RecordingNotifier, ScriptedOracle


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def store():
    return FakeMenteeStore()


@pytest.fixture
def oracle():
    return ScriptedOracle()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def reminder_job(store, oracle, notifier, now):
    return PrivacyReminderJob(
        repository=store,
        verification_service=oracle,
        notification_service=notifier,
        clock=lambda: now,
    )


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        FIREBASE_CREDENTIALS_PATH="/secrets/firebase.json",
        REMINDER_SCHEDULER_ENABLED=False,
    )


@pytest.fixture
def app_context(test_settings, store, oracle, notifier, reminder_job):
    return AppContext(
        settings=test_settings,
        mongo=FakeMongo(),
        repository=store,
        verification_service=oracle,
        notification_service=notifier,
        reminder_job=reminder_job,
    )
