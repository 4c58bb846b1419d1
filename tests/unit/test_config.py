from datetime import timedelta
from unittest.mock import patch

from app.config import Settings
from app.context import build_reminder_job
from tests.fakes import FakeMenteeStore, RecordingNotifier, ScriptedOracle


def test_reminder_defaults_match_three_hour_three_day_cadence():
    config = Settings(_env_file=None).get_reminder_config()

    assert config["interval_hours"] == 3
    assert config["reminder_delay"] == timedelta(days=3)
    assert config["reminder_delay"].total_seconds() * 1000 == 259_200_000


def test_interval_that_does_not_divide_a_day_falls_back():
    with patch("app.config.logger") as mock_logger:
        assert Settings(_env_file=None, REMINDER_INTERVAL_HOURS=5).get_reminder_config()[
            "interval_hours"
        ] == 3
        assert Settings(_env_file=None, REMINDER_INTERVAL_HOURS=0).get_reminder_config()[
            "interval_hours"
        ] == 3

    assert mock_logger.warning.call_count == 2
    assert mock_logger.warning.call_args_list[0].kwargs["configured_hours"] == 5


def test_valid_interval_is_kept_without_warning():
    with patch("app.config.logger") as mock_logger:
        config = Settings(_env_file=None, REMINDER_INTERVAL_HOURS=6).get_reminder_config()

    assert config["interval_hours"] == 6
    mock_logger.warning.assert_not_called()


def test_build_reminder_job_applies_settings():
    settings = Settings(
        _env_file=None,
        REMINDER_INTERVAL_HOURS=12,
        REMINDER_DELAY_DAYS=1.5,
        REMINDER_MAX_CONCURRENCY=0,
        REMINDER_OPERATION_TIMEOUT_SECONDS=5,
    )

    job = build_reminder_job(settings, FakeMenteeStore(), ScriptedOracle(), RecordingNotifier())

    assert job.interval_hours == 12
    assert job.reminder_delay == timedelta(hours=36)
    assert job.max_concurrency == 1
    assert job.operation_timeout_seconds == 5
