"""
Booking validation tests.

The pipeline short-circuits on the first failed check, so several tests
combine two faults to pin the order in which checks run.
"""

import pytest

from clinicdesk.config import ClinicSettings
from clinicdesk.scheduling.logic import SchedulingLogic
from clinicdesk.scheduling.models import DeskError

# Thursday after the fake clock's Tuesday
FUTURE = "12/03/2026"
ALICE = "11111111111"
BRUNO = "22222222222"


class TestSuccessfulBooking:
    def test_books_slot_inside_business_hours(self, scheduler, alice):
        result = scheduler.book_appointment(ALICE, FUTURE, "0800", "0830")

        assert result.ok
        assert result.duration == 30
        assert result.message == "Appointment booked successfully!"
        assert result.appointment.patient_id == "111.111.111-11"
        assert result.appointment.end_time.strftime("%H%M") == "0830"
        assert len(scheduler.appointment_repo) == 1

    def test_slot_ending_at_closing_time_accepted(self, scheduler, alice):
        assert scheduler.book_appointment(ALICE, FUTURE, "1845", "1900").ok

    def test_later_today_accepted(self, scheduler, alice):
        # clock reads 10/03/2026 10:00
        assert scheduler.book_appointment(ALICE, "10/03/2026", "1100", "1130").ok

    def test_punctuated_identifier_accepted(self, scheduler, alice):
        assert scheduler.book_appointment("111.111.111-11", FUTURE, "0900", "1000").ok


class TestRejectedBooking:
    @pytest.mark.parametrize("start, end", [("800", "0830"), ("0800", "08:30"), ("08h0", "0830"), ("", ""),
                                            ("0800\n", "0830"), ("0800", "0830\n")])
    def test_time_format(self, scheduler, alice, start, end):
        assert scheduler.book_appointment(ALICE, FUTURE, start, end).error is DeskError.INVALID_TIME_FORMAT

    def test_time_format_checked_before_patient(self, scheduler):
        assert scheduler.book_appointment("99999999999", FUTURE, "800", "0830").error is DeskError.INVALID_TIME_FORMAT

    def test_unknown_patient(self, scheduler, alice):
        assert scheduler.book_appointment("99999999999", FUTURE, "0800", "0830").error is DeskError.PATIENT_NOT_FOUND

    def test_second_future_booking_for_same_patient(self, scheduler, alice):
        assert scheduler.book_appointment(ALICE, FUTURE, "0800", "0830").ok

        result = scheduler.book_appointment(ALICE, "20/03/2026", "1000", "1030")

        assert result.error is DeskError.DUPLICATE_FUTURE_BOOKING
        assert len(scheduler.appointment_repo) == 1

    def test_future_booking_checked_before_date_format(self, scheduler, alice):
        scheduler.book_appointment(ALICE, FUTURE, "0800", "0830")
        assert scheduler.book_appointment(ALICE, "2026-03-20", "1000", "1030").error is DeskError.DUPLICATE_FUTURE_BOOKING

    @pytest.mark.parametrize("day", ["2026-03-12", "31/02/2026", "12/3/2026", "tomorrow"])
    def test_date_format(self, scheduler, alice, day):
        assert scheduler.book_appointment(ALICE, day, "0800", "0830").error is DeskError.INVALID_DATE_FORMAT

    def test_invalid_start_time(self, scheduler, alice):
        assert scheduler.book_appointment(ALICE, FUTURE, "2500", "0830").error is DeskError.INVALID_START_TIME

    def test_invalid_end_time(self, scheduler, alice):
        assert scheduler.book_appointment(ALICE, FUTURE, "0800", "0860").error is DeskError.INVALID_END_TIME

    @pytest.mark.parametrize("day, start", [("09/03/2026", "0900"), ("10/03/2026", "0900"), ("10/03/2026", "1000")])
    def test_appointment_in_past(self, scheduler, alice, day, start):
        assert scheduler.book_appointment(ALICE, day, start, "1130").error is DeskError.APPOINTMENT_IN_PAST

    @pytest.mark.parametrize("start, end", [("1000", "0900"), ("1000", "1000")])
    def test_end_must_follow_start(self, scheduler, alice, start, end):
        assert scheduler.book_appointment(ALICE, FUTURE, start, end).error is DeskError.END_BEFORE_START

    @pytest.mark.parametrize("start, end", [("0700", "0800"), ("0745", "0815"), ("1845", "1915"), ("1900", "1930")])
    def test_outside_business_hours(self, scheduler, alice, start, end):
        assert scheduler.book_appointment(ALICE, FUTURE, start, end).error is DeskError.OUTSIDE_BUSINESS_HOURS

    def test_early_start_reports_business_hours_before_granularity(self, scheduler, alice):
        assert scheduler.book_appointment(ALICE, FUTURE, "0700", "0710").error is DeskError.OUTSIDE_BUSINESS_HOURS

    @pytest.mark.parametrize("start, end", [("0810", "0825"), ("0800", "0820"), ("0805", "0815")])
    def test_time_granularity(self, scheduler, alice, start, end):
        assert scheduler.book_appointment(ALICE, FUTURE, start, end).error is DeskError.INVALID_TIME_GRANULARITY

    def test_failed_booking_does_not_touch_registry(self, scheduler, alice):
        scheduler.book_appointment(ALICE, FUTURE, "0810", "0825")
        assert len(scheduler.appointment_repo) == 0
        assert not scheduler.has_future_appointment(ALICE)


class TestCollisions:
    def test_same_start_for_other_patient_rejected(self, scheduler, alice, bruno):
        assert scheduler.book_appointment(ALICE, FUTURE, "0900", "1000").ok

        result = scheduler.book_appointment(BRUNO, FUTURE, "0900", "0930")

        assert result.error is DeskError.SLOT_ALREADY_BOOKED
        assert len(scheduler.appointment_repo) == 1

    def test_overlapping_slot_with_distinct_start_accepted_by_default(self, scheduler, alice, bruno):
        # exact start matching only: 09:15 inside 09:00-10:00 is not a collision
        assert scheduler.book_appointment(ALICE, FUTURE, "0900", "1000").ok
        assert scheduler.book_appointment(BRUNO, FUTURE, "0915", "0930").ok

    def test_same_start_on_other_day_accepted(self, scheduler, alice, bruno):
        assert scheduler.book_appointment(ALICE, FUTURE, "0900", "1000").ok
        assert scheduler.book_appointment(BRUNO, "13/03/2026", "0900", "1000").ok

    def test_interval_policy_rejects_partial_overlap(self, overlap_scheduler):
        overlap_scheduler.register_patient(ALICE, "Alice Brown", "15/06/1985")
        overlap_scheduler.register_patient(BRUNO, "Bruno Costa", "02/02/1990")
        assert overlap_scheduler.book_appointment(ALICE, FUTURE, "0900", "1000").ok

        result = overlap_scheduler.book_appointment(BRUNO, FUTURE, "0915", "0930")

        assert result.error is DeskError.SLOT_ALREADY_BOOKED

    def test_interval_policy_accepts_back_to_back(self, overlap_scheduler):
        overlap_scheduler.register_patient(ALICE, "Alice Brown", "15/06/1985")
        overlap_scheduler.register_patient(BRUNO, "Bruno Costa", "02/02/1990")
        assert overlap_scheduler.book_appointment(ALICE, FUTURE, "0900", "1000").ok
        assert overlap_scheduler.book_appointment(BRUNO, FUTURE, "1000", "1030").ok


class TestPolicySettings:
    def test_custom_business_hours(self, clock):
        settings = ClinicSettings(opening_time="0700", closing_time="1200")
        desk = SchedulingLogic(settings=settings, clock=clock)
        desk.register_patient(ALICE, "Alice Brown", "15/06/1985")

        assert desk.book_appointment(ALICE, FUTURE, "1300", "1330").error is DeskError.OUTSIDE_BUSINESS_HOURS
        assert desk.book_appointment(ALICE, FUTURE, "0700", "0730").ok

    def test_custom_slot_grid(self, clock):
        desk = SchedulingLogic(settings=ClinicSettings(slot_minutes=30), clock=clock)
        desk.register_patient(ALICE, "Alice Brown", "15/06/1985")

        assert desk.book_appointment(ALICE, FUTURE, "0800", "0845").error is DeskError.INVALID_TIME_GRANULARITY
        assert desk.book_appointment(ALICE, FUTURE, "0800", "0830").ok
