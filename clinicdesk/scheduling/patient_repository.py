import logging
from datetime import datetime, date
from typing import Callable, Dict, List, Optional, Union

from ..config import ClinicSettings
from .formats import is_valid_identifier, normalize_identifier, parse_clinic_date
from .models import DeskError, Patient, PatientSortKey, RegistrationResult

logger = logging.getLogger(__name__)


def age_on(birth_date: date, today: date) -> int:
    """Whole years between birth_date and today, by calendar comparison."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


class PatientRepository:
    """In-memory registry of patients keyed by normalized identifier."""

    def __init__(self, settings: Optional[ClinicSettings] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.settings = settings or ClinicSettings()
        self.clock = clock
        self._patients: Dict[str, Patient] = {}

    def __len__(self) -> int:
        return len(self._patients)

    def register(self, patient_id: str, name: str,
                 birth_date: Union[date, str]) -> RegistrationResult:
        """
        Validate and store a new patient.
        Checks run in order: identifier format, uniqueness, name length,
        birth date format and minimum age. The first failure is returned and
        the registry is left untouched.
        """
        normalized_id = normalize_identifier(patient_id)
        if not is_valid_identifier(normalized_id):
            return RegistrationResult(error=DeskError.INVALID_IDENTIFIER_FORMAT)

        if normalized_id in self._patients:
            return RegistrationResult(error=DeskError.DUPLICATE_IDENTIFIER)

        name = (name or "").strip()
        if len(name) < self.settings.minimum_name_length:
            return RegistrationResult(error=DeskError.INVALID_NAME)

        if isinstance(birth_date, str):
            birth_date = parse_clinic_date(birth_date)
            if birth_date is None:
                return RegistrationResult(error=DeskError.INVALID_DATE_FORMAT)

        if age_on(birth_date, self.clock().date()) < self.settings.minimum_age:
            return RegistrationResult(error=DeskError.UNDERAGE_WITHOUT_GUARDIAN)

        patient = Patient(id=normalized_id, name=name, birth_date=birth_date)
        self._patients[normalized_id] = patient
        logger.info("Registered patient %s", normalized_id)
        return RegistrationResult(patient=patient)

    def find(self, patient_id: str) -> Optional[Patient]:
        return self._patients.get(normalize_identifier(patient_id))

    def delete(self, patient_id: str) -> Patient:
        """Drop a patient record. Callers go through the consistency guard."""
        return self._patients.pop(normalize_identifier(patient_id))

    def list_sorted_by(self, key: Union[PatientSortKey, str]) -> List[Patient]:
        sort_key = PatientSortKey(key)
        if sort_key is PatientSortKey.ID:
            return sorted(self._patients.values(), key=lambda p: p.id)
        return sorted(self._patients.values(), key=lambda p: p.name)

    def get_all_patients(self) -> List[Patient]:
        """Patients in registration order."""
        return list(self._patients.values())
