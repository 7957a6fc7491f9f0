import logging
from datetime import date

from errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)


def weekday_index(day: date) -> int:
    """0=Sunday .. 6=Saturday, the numbering used for doctor working days."""
    return (day.weekday() + 1) % 7


class BookingService:
    def __init__(self, session_factory, credentials, appointments, enforce_doctor_days: bool = False):
        self.Session = session_factory
        self.credentials = credentials
        self.appointments = appointments
        self.enforce_doctor_days = enforce_doctor_days

    def book(self, patient_id: int, doctor_id: int, day: date):
        doctor = self.credentials.get_doctor(doctor_id)
        if doctor is None:
            raise NotFound("Doctor not found")

        if self.enforce_doctor_days and weekday_index(day) not in doctor.days:
            raise BadRequest(f"{doctor.full_name} is only available on {doctor.days_text}")

        # check and insert share one transaction; uq_active_booking settles races
        with self.Session() as db:
            if self.appointments.find_active_booking(doctor_id, day, db=db) is not None:
                raise Conflict("Appointment already booked")
            appt = self.appointments.insert_booked(patient_id, doctor_id, day, db=db)
        logger.info("Patient %s booked doctor %s on %s", patient_id, doctor_id, day.isoformat())
        return appt

    def cancel_for_patient(self, appointment_id: int, patient_id: int) -> None:
        self.appointments.cancel(appointment_id, patient_id, "patient")

    def cancel_for_doctor(self, appointment_id: int, doctor_id: int) -> None:
        self.appointments.cancel(appointment_id, doctor_id, "doctor")
