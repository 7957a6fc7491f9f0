import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from errors import Conflict, NotFound
from models import Appointment, Doctor, Patient, BOOKED, CANCELLED, MAX_ID

logger = logging.getLogger(__name__)

OWNER_COLUMNS = {"patient": Appointment.patient_id, "doctor": Appointment.doctor_id}


class AppointmentRepository:
    def __init__(self, session_factory):
        self.Session = session_factory

    def insert_booked(self, patient_id: int, doctor_id: int, day: date, db=None) -> Appointment:
        if db is None:
            with self.Session() as db:
                return self.insert_booked(patient_id, doctor_id, day, db=db)
        a = Appointment(patient_id=patient_id, doctor_id=doctor_id,
                        appointment_date=day, status=BOOKED)
        db.add(a)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            # only a clash on uq_active_booking is a conflict; FK failures propagate
            if self.find_active_booking(doctor_id, day, db=db) is not None:
                raise Conflict("Appointment already booked")
            raise
        db.refresh(a)
        return a

    def find_active_booking(self, doctor_id: int, day: date, db=None):
        if db is None:
            with self.Session() as db:
                return self.find_active_booking(doctor_id, day, db=db)
        return db.scalar(select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == day,
            Appointment.status == BOOKED,
        ))

    def list_for_patient(self, patient_id: int) -> list:
        with self.Session() as db:
            rows = db.execute(
                select(Appointment.id, Appointment.appointment_date, Appointment.status,
                       Doctor.full_name, Doctor.specialty)
                .join(Doctor, Appointment.doctor_id == Doctor.id)
                .where(Appointment.patient_id == patient_id)
                .order_by(Appointment.appointment_date.asc(), Appointment.id.asc())
            ).all()
        return [{
            "id": r.id, "appointment_date": r.appointment_date.isoformat(), "status": r.status,
            "doctor_name": r.full_name, "specialty": r.specialty,
        } for r in rows]

    def list_for_doctor(self, doctor_id: int) -> list:
        with self.Session() as db:
            rows = db.execute(
                select(Appointment.id, Appointment.appointment_date, Appointment.status,
                       Patient.full_name)
                .join(Patient, Appointment.patient_id == Patient.id)
                .where(Appointment.doctor_id == doctor_id)
                .order_by(Appointment.appointment_date.asc(), Appointment.id.asc())
            ).all()
        return [{
            "id": r.id, "appointment_date": r.appointment_date.isoformat(), "status": r.status,
            "patient_name": r.full_name,
        } for r in rows]

    def cancel(self, appointment_id: int, owner_id: int, owner_role: str) -> None:
        """Cancel an appointment owned by ``owner_id`` under ``owner_role``.

        Someone else's appointment is reported exactly like a missing one.
        """
        owner_col = OWNER_COLUMNS.get(owner_role)
        if owner_col is None:
            raise ValueError(f"Unknown role: {owner_role}")
        if not 0 < appointment_id <= MAX_ID:
            raise NotFound("Appointment not found")
        with self.Session() as db:
            found = db.scalar(select(Appointment.id).where(
                Appointment.id == appointment_id, owner_col == owner_id))
            if found is None:
                raise NotFound("Appointment not found")
            db.execute(update(Appointment)
                       .where(Appointment.id == appointment_id)
                       .values(status=CANCELLED))
            db.commit()
        logger.info("Appointment %s cancelled by %s %s", appointment_id, owner_role, owner_id)
