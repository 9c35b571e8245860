import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_defaults_match_school_rules():
    settings = Settings(_env_file=None)

    assert settings.booking_min_lead_minutes == 60
    assert settings.class_capacity == 10
    assert settings.operational_timezone == "America/Sao_Paulo"
    assert settings.default_class_duration_minutes == 60


def test_unknown_timezone_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, operational_timezone="Mars/Olympus_Mons")


def test_google_credentials_configured():
    assert not Settings(_env_file=None, google_client_id="").google_credentials_configured
    configured = Settings(
        _env_file=None, google_client_id="id", google_client_secret="secret"
    )
    assert configured.google_credentials_configured


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CLASS_CAPACITY", "12")
    monkeypatch.setenv("BOOKING_MIN_LEAD_MINUTES", "90")

    settings = Settings(_env_file=None)

    assert settings.class_capacity == 12
    assert settings.booking_min_lead_minutes == 90
