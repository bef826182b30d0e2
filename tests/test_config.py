import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings
from workers.schedules import get_beat_schedule


def test_test_environment_is_loaded():
    settings = get_settings()

    assert settings.env == "testing"
    assert not settings.is_production
    assert settings.github_sponsorable_login == "sponsors-portal"


def test_scopes_accept_spaces_and_commas():
    settings = Settings(GITHUB_SCOPE="read:user, read:org  user:email", _env_file=None)

    assert settings.github_scopes == ["read:user", "read:org", "user:email"]


def test_short_secrets_are_rejected_in_production(monkeypatch):
    monkeypatch.setenv("ENV", "production")

    with pytest.raises(ValidationError):
        Settings(JWT_SECRET_KEY="too-short", _env_file=None)


def test_default_secrets_are_rejected_in_production(monkeypatch):
    monkeypatch.setenv("ENV", "production")

    with pytest.raises(ValidationError):
        Settings(SESSION_SECRET_KEY="CHANGE_ME", _env_file=None)


def test_production_config_requires_the_sponsorable_account(monkeypatch):
    monkeypatch.setenv("ENV", "production")
    monkeypatch.setenv("GITHUB_SPONSORABLE_LOGIN", "")

    errors, _ = Settings(_env_file=None).validate_production_config()

    assert any("GITHUB_SPONSORABLE_LOGIN" in error for error in errors)


def test_sync_hour_must_be_a_valid_hour():
    with pytest.raises(ValidationError):
        Settings(SPONSOR_SYNC_HOUR=24, _env_file=None)


def test_daily_sync_is_routed_to_the_sponsors_queue():
    entry = get_beat_schedule()["synchronize-sponsors-daily"]

    assert entry["task"] == "workers.tasks.sponsor_tasks.synchronize_all_sponsors"
    assert entry["options"] == {"queue": "sponsors"}


def test_blacklist_cleanup_is_scheduled_hourly_on_the_default_queue():
    entry = get_beat_schedule()["cleanup-token-blacklist-hourly"]

    assert entry["task"] == "workers.tasks.maintenance_tasks.cleanup_token_blacklist"
    assert entry["options"] == {"queue": "default"}
    assert entry["schedule"].minute == {30}
