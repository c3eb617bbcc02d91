from datetime import datetime, timedelta

import pytest

from clinicdesk.config import ClinicSettings, CollisionPolicy
from clinicdesk.scheduling.logic import SchedulingLogic

# Tuesday morning
NOW = datetime(2026, 3, 10, 10, 0)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    """A fresh desk with empty registries for each test."""
    return SchedulingLogic(settings=ClinicSettings(), clock=clock)


@pytest.fixture
def overlap_scheduler(clock):
    settings = ClinicSettings(collision_policy=CollisionPolicy.INTERVAL_OVERLAP)
    return SchedulingLogic(settings=settings, clock=clock)


@pytest.fixture
def alice(scheduler):
    return scheduler.register_patient("11111111111", "Alice Brown", "15/06/1985").patient


@pytest.fixture
def bruno(scheduler):
    return scheduler.register_patient("22222222222", "Bruno Costa", "02/02/1990").patient
