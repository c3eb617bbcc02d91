import logging
from datetime import datetime
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException

from .config import configure_logging, load_settings
from .scheduling.formats import format_clinic_date
from .scheduling.logic import SchedulingLogic
from .scheduling.models import (
    Appointment, AppointmentCreateRequest, DeskError, ErrorCategory, Patient,
    PatientRegistrationRequest,
    PatientSortKey
)

logger = logging.getLogger(__name__)

settings = load_settings()

app = FastAPI(
    title="ClinicDesk API",
    description="Patient registry and appointment book for a single clinic",
    version="1.0.0"
)

# One desk per process; registries live as long as the server does.
desk = SchedulingLogic(settings=settings)

_STATUS_CODES = {
    DeskError.PATIENT_NOT_FOUND: 404,
    DeskError.DUPLICATE_IDENTIFIER: 409,
    DeskError.SLOT_ALREADY_BOOKED: 409,
    DeskError.DUPLICATE_FUTURE_BOOKING: 409,
    DeskError.BLOCKED: 409,
}


def get_desk() -> SchedulingLogic:
    return desk


def status_code_for(error: DeskError) -> int:
    if error in _STATUS_CODES:
        return _STATUS_CODES[error]
    if error.category is ErrorCategory.INPUT:
        return 422
    return 400


def desk_error(error: DeskError) -> HTTPException:
    return HTTPException(
        status_code=status_code_for(error),
        detail={"error": error.value, "message": error.message},
    )


def patient_payload(patient: Patient) -> Dict[str, Any]:
    return {
        "id": patient.id,
        "name": patient.name,
        "birth_date": format_clinic_date(patient.birth_date),
    }


def appointment_payload(appt: Appointment) -> Dict[str, Any]:
    return {
        "id": appt.id,
        "patient_id": appt.patient_id,
        "date": format_clinic_date(appt.date),
        "start_time": appt.start_time.strftime("%H:%M"),
        "end_time": appt.end_time.strftime("%H:%M"),
        "duration": appt.duration,
    }


@app.post("/patients", status_code=201)
def register_patient(patient_data: PatientRegistrationRequest,
                           scheduler: SchedulingLogic = Depends(get_desk)):
    """Register a new patient."""
    result = scheduler.register_patient(patient_data.id, patient_data.name, patient_data.birth_date)
    if not result.ok:
        raise desk_error(result.error)

    return {
        "message": "Patient registered successfully",
        "patient": patient_payload(result.patient),
    }


@app.get("/patients")
def get_patients(sort: PatientSortKey = PatientSortKey.ID,
                       scheduler: SchedulingLogic = Depends(get_desk)):
    """List registered patients ordered by identifier or name."""
    return {"patients": [patient_payload(p) for p in scheduler.list_patients(sort)]}


@app.delete("/patients/{patient_id}")
def remove_patient(patient_id: str, scheduler: SchedulingLogic = Depends(get_desk)):
    """Remove a patient with no pending future appointment."""
    result = scheduler.remove_patient(patient_id)
    if not result.removed:
        raise desk_error(result.error)

    return {
        "message": "Patient removed successfully",
        "patient": patient_payload(result.patient),
        "cancelled_appointments": [appointment_payload(a) for a in result.cancelled],
    }


@app.post("/appointments", status_code=201)
def create_appointment(appointment_data: AppointmentCreateRequest,
                             scheduler: SchedulingLogic = Depends(get_desk)):
    """Book an appointment for an existing patient."""
    result = scheduler.book_appointment(
        appointment_data.patient_id,
        appointment_data.date,
        appointment_data.start_time,
        appointment_data.end_time,
    )
    if not result.ok:
        raise desk_error(result.error)

    return {
        "message": result.message,
        "duration": result.duration,
        "appointment": appointment_payload(result.appointment),
    }


@app.delete("/appointments/{patient_id}")
def cancel_appointment(patient_id: str, scheduler: SchedulingLogic = Depends(get_desk)):
    """Cancel the future appointment of a patient."""
    if not scheduler.cancel_appointment(patient_id):
        raise HTTPException(status_code=404, detail={
            "error": "appointment_not_found",
            "message": "Patient has no future appointment to cancel.",
        })
    return {"message": "Appointment cancelled successfully"}


@app.get("/appointments")
def get_appointments(date_from: Optional[str] = None, date_to: Optional[str] = None,
                           scheduler: SchedulingLogic = Depends(get_desk)):
    """List appointments, optionally restricted to an inclusive DD/MM/YYYY date range."""
    result = scheduler.list_appointments(date_from, date_to)
    if not result.ok:
        raise desk_error(result.error)
    return {"appointments": [appointment_payload(a) for a in result.appointments]}


@app.get("/health")
def health_check(scheduler: SchedulingLogic = Depends(get_desk)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "patients": len(scheduler.patient_repo),
        "appointments": len(scheduler.appointment_repo),
        "collision_policy": scheduler.settings.collision_policy.value,
    }


def main() -> None:
    configure_logging(settings)
    logger.info("Starting ClinicDesk server on http://%s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
