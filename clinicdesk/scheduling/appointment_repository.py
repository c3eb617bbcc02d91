import logging
from datetime import date, time
from typing import Dict, List

from .models import Appointment

logger = logging.getLogger(__name__)


class AppointmentRepository:
    """In-memory registry of booked appointments."""

    def __init__(self):
        self._appointments: Dict[str, Appointment] = {}
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._appointments)

    def _next_id(self) -> str:
        self._sequence += 1
        return f"A{self._sequence:03d}"

    def add(self, patient_id: str, appointment_date: date, start_time: time,
            duration: int) -> Appointment:
        appointment = Appointment(
            id=self._next_id(),
            patient_id=patient_id,
            date=appointment_date,
            start_time=start_time,
            duration=duration,
        )
        self._appointments[appointment.id] = appointment
        logger.info("Stored appointment %s for patient %s at %s",
                    appointment.id, patient_id, appointment.starts_at.isoformat())
        return appointment

    def remove(self, appointment_id: str) -> Appointment:
        return self._appointments.pop(appointment_id)

    def remove_for_patient(self, patient_id: str) -> List[Appointment]:
        """Remove every appointment of a patient and return what was removed."""
        removed = self.get_appointments_for_patient(patient_id)
        for appt in removed:
            del self._appointments[appt.id]
        return removed

    def get_appointments_for_patient(self, patient_id: str) -> List[Appointment]:
        return [appt for appt in self._appointments.values() if appt.patient_id == patient_id]

    def get_all_appointments(self) -> List[Appointment]:
        """All appointments ordered by date, then start time."""
        return sorted(self._appointments.values(), key=lambda appt: appt.starts_at)

    def get_appointments_between(self, date_from: date, date_to: date) -> List[Appointment]:
        """Appointments whose date lies in the inclusive range [date_from, date_to]."""
        return [appt for appt in self.get_all_appointments()
                if date_from <= appt.date <= date_to]
