"""
Collision predicates for candidate slots.

The desk uses exact start matching by default: two appointments collide only
when they start at the same (date, hour, minute). Back-to-back or partially
overlapping appointments with distinct starts are accepted. The stricter
half-open interval policy can be selected through CLINIC_COLLISION_POLICY.
"""

from datetime import datetime, date, time
from typing import Callable, Iterable

from ..config import CollisionPolicy
from .models import Appointment

CollisionCheck = Callable[[Appointment, datetime, datetime], bool]


def same_start(existing: Appointment, start: datetime, end: datetime) -> bool:
    return existing.starts_at.replace(second=0, microsecond=0) == start.replace(second=0, microsecond=0)


def intervals_overlap(existing: Appointment, start: datetime, end: datetime) -> bool:
    return start < existing.ends_at and end > existing.starts_at


_CHECKS = {
    CollisionPolicy.EXACT_START: same_start,
    CollisionPolicy.INTERVAL_OVERLAP: intervals_overlap,
}


def get_collision_check(policy: CollisionPolicy) -> CollisionCheck:
    return _CHECKS[CollisionPolicy(policy)]


def collides(appointments: Iterable[Appointment], candidate_date: date,
             candidate_start: time, candidate_end: time,
             check: CollisionCheck = same_start) -> bool:
    start = datetime.combine(candidate_date, candidate_start)
    end = datetime.combine(candidate_date, candidate_end)
    return any(check(appt, start, end) for appt in appointments)
