"""
Configuration for the clinic desk.
Policy constants and surface settings are loaded from environment variables
(optionally via a .env file).
"""

import logging
import os
from datetime import time, datetime
from enum import Enum
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator


class CollisionPolicy(str, Enum):
    EXACT_START = "exact_start"
    INTERVAL_OVERLAP = "interval_overlap"


def _parse_clock(value: str) -> time:
    return datetime.strptime(value, "%H%M").time()


class ClinicSettings(BaseModel):
    minimum_age: int = Field(13, ge=0, description="Youngest age accepted at registration")
    minimum_name_length: int = Field(5, ge=1)
    opening_time: time = time(8, 0)
    closing_time: time = time(19, 0)
    slot_minutes: int = Field(15, gt=0, le=60, description="Booking grid in minutes")
    collision_policy: CollisionPolicy = CollisionPolicy.EXACT_START
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("opening_time", "closing_time", mode="before")
    @classmethod
    def parse_hhmm(cls, v):
        if isinstance(v, str):
            return _parse_clock(v)
        return v

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, v):
        if 60 % v != 0:
            raise ValueError(f"Slot length must divide an hour evenly, got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def check_business_hours(self):
        if self.closing_time <= self.opening_time:
            raise ValueError("Closing time must be after opening time")
        return self


_ENV_FIELDS = {
    "CLINIC_MINIMUM_AGE": "minimum_age",
    "CLINIC_MINIMUM_NAME_LENGTH": "minimum_name_length",
    "CLINIC_OPENING_TIME": "opening_time",
    "CLINIC_CLOSING_TIME": "closing_time",
    "CLINIC_SLOT_MINUTES": "slot_minutes",
    "CLINIC_COLLISION_POLICY": "collision_policy",
    "CLINIC_LOG_LEVEL": "log_level",
    "CLINIC_HOST": "host",
    "CLINIC_PORT": "port",
}


def load_settings(env_file: Optional[str] = None) -> ClinicSettings:
    """Build settings from the environment, after loading .env if present."""
    load_dotenv(env_file)

    values = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = os.getenv(env_name)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    return ClinicSettings(**values)


def configure_logging(settings: ClinicSettings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
