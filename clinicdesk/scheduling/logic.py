import logging
import threading
from datetime import datetime, date
from typing import Callable, List, Optional, Union

from ..config import ClinicSettings
from .appointment_repository import AppointmentRepository
from .conflicts import collides, get_collision_check
from .formats import is_clock_format, normalize_identifier, parse_clinic_date, parse_clock_time
from .models import (
    Appointment, AgendaResult, BookingResult, DeskError, Patient, PatientSortKey,
    RegistrationResult, RemovalResult
)
from .patient_repository import PatientRepository

logger = logging.getLogger(__name__)

DateInput = Union[date, str, None]


class SchedulingLogic:
    """
    Front desk service over the patient and appointment registries.

    Every operation reads the clock once and runs under a single lock spanning
    both registries, so the read-validate-write sequence of a booking or a
    removal is never interleaved with another request.
    """

    def __init__(self,
                 patient_repo: Optional[PatientRepository] = None,
                 appointment_repo: Optional[AppointmentRepository] = None,
                 settings: Optional[ClinicSettings] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.settings = settings or ClinicSettings()
        self.clock = clock
        if patient_repo is None:
            patient_repo = PatientRepository(self.settings, clock)
        if appointment_repo is None:
            appointment_repo = AppointmentRepository()
        self.patient_repo = patient_repo
        self.appointment_repo = appointment_repo
        self._collision_check = get_collision_check(self.settings.collision_policy)
        self._lock = threading.RLock()

    # Patients

    def register_patient(self, patient_id: str, name: str,
                         birth_date: Union[date, str]) -> RegistrationResult:
        with self._lock:
            result = self.patient_repo.register(patient_id, name, birth_date)
        if not result.ok:
            logger.info("Registration rejected for %s: %s", patient_id, result.error.value)
        return result

    def find_patient(self, patient_id: str) -> Optional[Patient]:
        with self._lock:
            return self.patient_repo.find(patient_id)

    def list_patients(self, sort_key: Union[PatientSortKey, str] = PatientSortKey.ID) -> List[Patient]:
        with self._lock:
            return self.patient_repo.list_sorted_by(sort_key)

    def remove_patient(self, patient_id: str) -> RemovalResult:
        """
        Delete a patient together with their remaining appointments.
        Blocked while the patient holds a future appointment; nothing is
        removed unless both deletions go through.
        """
        with self._lock:
            now = self.clock()
            patient = self.patient_repo.find(patient_id)
            if patient is None:
                return RemovalResult(error=DeskError.PATIENT_NOT_FOUND)

            if self.has_future_appointment(patient.id, now):
                logger.info("Removal of %s blocked by a future appointment", patient.id)
                return RemovalResult(patient=patient, error=DeskError.BLOCKED)

            cancelled = self.appointment_repo.remove_for_patient(patient.id)
            self.patient_repo.delete(patient.id)

        logger.info("Removed patient %s and %d appointment(s)", patient.id, len(cancelled))
        return RemovalResult(patient=patient, cancelled=cancelled)

    # Consistency guard

    def has_future_appointment(self, patient_id: str, now: Optional[datetime] = None) -> bool:
        """True if the patient has an appointment starting strictly after now."""
        now = now or self.clock()
        normalized_id = normalize_identifier(patient_id)
        return any(appt.starts_at > now
                   for appt in self.appointment_repo.get_appointments_for_patient(normalized_id))

    def has_past_appointment(self, patient_id: str, now: Optional[datetime] = None) -> bool:
        """True if the patient has an appointment starting strictly before now."""
        now = now or self.clock()
        normalized_id = normalize_identifier(patient_id)
        return any(appt.starts_at < now
                   for appt in self.appointment_repo.get_appointments_for_patient(normalized_id))

    def cancel_all(self, patient_id: str) -> bool:
        with self._lock:
            removed = self.appointment_repo.remove_for_patient(normalize_identifier(patient_id))
        if removed:
            logger.info("Cancelled %d appointment(s) for %s", len(removed), patient_id)
        return bool(removed)

    def cancel_appointment(self, patient_id: str) -> bool:
        """Cancel the patient's future appointment, if there is one."""
        with self._lock:
            now = self.clock()
            normalized_id = normalize_identifier(patient_id)
            upcoming = [appt for appt in self.appointment_repo.get_appointments_for_patient(normalized_id)
                        if appt.starts_at > now]
            if not upcoming:
                return False
            for appt in upcoming:
                self.appointment_repo.remove(appt.id)

        logger.info("Cancelled future appointment for %s", normalized_id)
        return True

    # Booking

    def book_appointment(self, patient_id: str, appointment_date: str,
                         start_time: str, end_time: str) -> BookingResult:
        with self._lock:
            result = self._validate_and_book(patient_id, appointment_date, start_time, end_time)
        if not result.ok:
            logger.info("Booking rejected for %s: %s", patient_id, result.error.value)
        return result

    def _validate_and_book(self, patient_id: str, appointment_date: str,
                           start_time: str, end_time: str) -> BookingResult:
        now = self.clock()

        if not (is_clock_format(start_time) and is_clock_format(end_time)):
            return BookingResult(error=DeskError.INVALID_TIME_FORMAT)

        patient = self.patient_repo.find(patient_id)
        if patient is None:
            return BookingResult(error=DeskError.PATIENT_NOT_FOUND)

        if self.has_future_appointment(patient.id, now):
            return BookingResult(error=DeskError.DUPLICATE_FUTURE_BOOKING)

        day = parse_clinic_date(appointment_date)
        if day is None:
            return BookingResult(error=DeskError.INVALID_DATE_FORMAT)

        start = parse_clock_time(start_time)
        if start is None:
            return BookingResult(error=DeskError.INVALID_START_TIME)

        end = parse_clock_time(end_time)
        if end is None:
            return BookingResult(error=DeskError.INVALID_END_TIME)

        starts_at = datetime.combine(day, start)
        ends_at = datetime.combine(day, end)
        if starts_at <= now:
            return BookingResult(error=DeskError.APPOINTMENT_IN_PAST)

        if ends_at <= starts_at:
            return BookingResult(error=DeskError.END_BEFORE_START)

        if start < self.settings.opening_time or end > self.settings.closing_time:
            return BookingResult(error=DeskError.OUTSIDE_BUSINESS_HOURS)

        slot = self.settings.slot_minutes
        if start.minute % slot != 0 or end.minute % slot != 0:
            return BookingResult(error=DeskError.INVALID_TIME_GRANULARITY)

        if collides(self.appointment_repo.get_all_appointments(), day, start, end,
                    check=self._collision_check):
            return BookingResult(error=DeskError.SLOT_ALREADY_BOOKED)

        duration = int((ends_at - starts_at).total_seconds() // 60)
        appointment = self.appointment_repo.add(patient.id, day, start, duration)
        return BookingResult(appointment=appointment)

    # Agenda

    def list_appointments(self, date_from: DateInput = None, date_to: DateInput = None) -> AgendaResult:
        """
        All appointments ordered by date when no range is given, otherwise those
        whose date falls inside the inclusive range. A missing bound is open.
        """
        if date_from is None and date_to is None:
            with self._lock:
                return AgendaResult(self.appointment_repo.get_all_appointments())

        bounds = []
        for value, default in ((date_from, date.min), (date_to, date.max)):
            if value is None:
                bounds.append(default)
            elif isinstance(value, date):
                bounds.append(value)
            else:
                parsed = parse_clinic_date(value)
                if parsed is None:
                    return AgendaResult(error=DeskError.INVALID_DATE_FORMAT)
                bounds.append(parsed)

        with self._lock:
            return AgendaResult(self.appointment_repo.get_appointments_between(*bounds))

    def get_appointments_for_patient(self, patient_id: str) -> List[Appointment]:
        with self._lock:
            return self.appointment_repo.get_appointments_for_patient(normalize_identifier(patient_id))
