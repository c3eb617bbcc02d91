from datetime import datetime, date, time, timedelta
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class ErrorCategory(str, Enum):
    INPUT = "input"
    ELIGIBILITY = "eligibility"
    SCHEDULING = "scheduling"
    CONSISTENCY = "consistency"


class DeskError(str, Enum):
    """Reasons a desk operation can be rejected."""

    INVALID_IDENTIFIER_FORMAT = "invalid_identifier_format"
    INVALID_TIME_FORMAT = "invalid_time_format"
    INVALID_DATE_FORMAT = "invalid_date_format"
    INVALID_START_TIME = "invalid_start_time"
    INVALID_END_TIME = "invalid_end_time"

    INVALID_NAME = "invalid_name"
    UNDERAGE_WITHOUT_GUARDIAN = "underage_without_guardian"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    PATIENT_NOT_FOUND = "patient_not_found"

    APPOINTMENT_IN_PAST = "appointment_in_past"
    END_BEFORE_START = "end_before_start"
    OUTSIDE_BUSINESS_HOURS = "outside_business_hours"
    INVALID_TIME_GRANULARITY = "invalid_time_granularity"
    SLOT_ALREADY_BOOKED = "slot_already_booked"
    DUPLICATE_FUTURE_BOOKING = "duplicate_future_booking"

    BLOCKED = "blocked"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_CATEGORIES = {
    DeskError.INVALID_IDENTIFIER_FORMAT: ErrorCategory.INPUT,
    DeskError.INVALID_TIME_FORMAT: ErrorCategory.INPUT,
    DeskError.INVALID_DATE_FORMAT: ErrorCategory.INPUT,
    DeskError.INVALID_START_TIME: ErrorCategory.INPUT,
    DeskError.INVALID_END_TIME: ErrorCategory.INPUT,
    DeskError.INVALID_NAME: ErrorCategory.ELIGIBILITY,
    DeskError.UNDERAGE_WITHOUT_GUARDIAN: ErrorCategory.ELIGIBILITY,
    DeskError.DUPLICATE_IDENTIFIER: ErrorCategory.ELIGIBILITY,
    DeskError.PATIENT_NOT_FOUND: ErrorCategory.ELIGIBILITY,
    DeskError.APPOINTMENT_IN_PAST: ErrorCategory.SCHEDULING,
    DeskError.END_BEFORE_START: ErrorCategory.SCHEDULING,
    DeskError.OUTSIDE_BUSINESS_HOURS: ErrorCategory.SCHEDULING,
    DeskError.INVALID_TIME_GRANULARITY: ErrorCategory.SCHEDULING,
    DeskError.SLOT_ALREADY_BOOKED: ErrorCategory.SCHEDULING,
    DeskError.DUPLICATE_FUTURE_BOOKING: ErrorCategory.SCHEDULING,
    DeskError.BLOCKED: ErrorCategory.CONSISTENCY,
}

_MESSAGES = {
    DeskError.INVALID_IDENTIFIER_FORMAT: "Identifier must have 11 digits (###.###.###-##).",
    DeskError.INVALID_TIME_FORMAT: "Invalid time format. Use HHMM.",
    DeskError.INVALID_DATE_FORMAT: "Invalid date. Use the DD/MM/YYYY format.",
    DeskError.INVALID_START_TIME: "Invalid start time. Use the HHMM format.",
    DeskError.INVALID_END_TIME: "Invalid end time. Use the HHMM format.",
    DeskError.INVALID_NAME: "Name is too short.",
    DeskError.UNDERAGE_WITHOUT_GUARDIAN: "Patient is below the minimum age for registration.",
    DeskError.DUPLICATE_IDENTIFIER: "A patient with this identifier is already registered.",
    DeskError.PATIENT_NOT_FOUND: "Identifier not found in the patient registry.",
    DeskError.APPOINTMENT_IN_PAST: "Appointment must be scheduled in the future.",
    DeskError.END_BEFORE_START: "End time must be after the start time.",
    DeskError.OUTSIDE_BUSINESS_HOURS: "Time is outside business hours.",
    DeskError.INVALID_TIME_GRANULARITY: "Times must fall on 15 minute slots.",
    DeskError.SLOT_ALREADY_BOOKED: "There is already an appointment at this time.",
    DeskError.DUPLICATE_FUTURE_BOOKING: "Patient already has a future appointment.",
    DeskError.BLOCKED: "Patient has a future appointment and cannot be removed.",
}


class PatientSortKey(str, Enum):
    ID = "id"
    NAME = "name"


class Patient(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^\d{3}\.\d{3}\.\d{3}-\d{2}$")
    name: str = Field(..., min_length=1)
    birth_date: date


class Appointment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    patient_id: str
    date: date
    start_time: time
    duration: int = Field(..., gt=0, description="Duration in minutes")

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration)

    @property
    def end_time(self) -> time:
        return self.ends_at.time()


class RegistrationResult:
    """Outcome of a patient registration."""
    def __init__(self, patient: Optional[Patient] = None, error: Optional[DeskError] = None):
        self.patient = patient
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None


class BookingResult:
    """Outcome of a booking request: the stored appointment or the first failed check."""
    def __init__(self, appointment: Optional[Appointment] = None, error: Optional[DeskError] = None):
        self.appointment = appointment
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def duration(self) -> Optional[int]:
        return self.appointment.duration if self.appointment else None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.message
        return "Appointment booked successfully!"


class RemovalResult:
    """Outcome of a patient removal."""
    def __init__(self, patient: Optional[Patient] = None, error: Optional[DeskError] = None,
                 cancelled: Optional[List[Appointment]] = None):
        self.patient = patient
        self.error = error
        self.cancelled = cancelled or []

    @property
    def removed(self) -> bool:
        return self.error is None

    def is_blocked(self) -> bool:
        return self.error is DeskError.BLOCKED


class AgendaResult:
    """Appointments matching an agenda query."""
    def __init__(self, appointments: Optional[List[Appointment]] = None, error: Optional[DeskError] = None):
        self.appointments = appointments or []
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None


class PatientRegistrationRequest(BaseModel):
    id: str
    name: str
    birth_date: str  # DD/MM/YYYY


class AppointmentCreateRequest(BaseModel):
    patient_id: str
    date: str  # DD/MM/YYYY
    start_time: str  # HHMM
    end_time: str  # HHMM
