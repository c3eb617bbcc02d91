from datetime import time

import pytest
from pydantic import ValidationError

from clinicdesk.config import ClinicSettings, CollisionPolicy, load_settings


def test_defaults_match_clinic_policy():
    settings = ClinicSettings()

    assert settings.minimum_age == 13
    assert settings.opening_time == time(8, 0)
    assert settings.closing_time == time(19, 0)
    assert settings.slot_minutes == 15
    assert settings.collision_policy is CollisionPolicy.EXACT_START


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CLINIC_OPENING_TIME", "0730")
    monkeypatch.setenv("CLINIC_COLLISION_POLICY", "interval_overlap")
    monkeypatch.setenv("CLINIC_MINIMUM_AGE", "18")
    monkeypatch.setenv("CLINIC_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.opening_time == time(7, 30)
    assert settings.collision_policy is CollisionPolicy.INTERVAL_OVERLAP
    assert settings.minimum_age == 18
    assert settings.log_level == "DEBUG"


def test_closing_before_opening_rejected():
    with pytest.raises(ValidationError):
        ClinicSettings(opening_time="1900", closing_time="0800")


@pytest.mark.parametrize("minutes", [7, 25, 45])
def test_slot_length_must_divide_an_hour(minutes):
    with pytest.raises(ValidationError):
        ClinicSettings(slot_minutes=minutes)


@pytest.mark.parametrize("minutes", [10, 20, 30, 60])
def test_slot_lengths_dividing_an_hour_accepted(minutes):
    assert ClinicSettings(slot_minutes=minutes).slot_minutes == minutes


def test_unknown_policy_rejected(monkeypatch):
    monkeypatch.setenv("CLINIC_COLLISION_POLICY", "first_come")
    with pytest.raises(ValidationError):
        load_settings()
