import json

from sqlalchemy import (Column, Integer, String, Date, DateTime, ForeignKey, Index,
                        CheckConstraint, func, text)
from db import Base

BOOKED = "booked"
CANCELLED = "cancelled"
# largest value a 64-bit signed INTEGER column can hold
MAX_ID = 2**63 - 1


class Patient(Base):
    __tablename__ = "patients"
    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)


class Doctor(Base):
    __tablename__ = "doctors"
    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    specialty = Column(String(200))
    days_json = Column(String(50), nullable=False, default="[]")
    days_text = Column(String(100))
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)

    @property
    def days(self) -> list:
        return [int(d) for d in json.loads(self.days_json or "[]")]

    def to_public(self) -> dict:
        return {
            "id": self.id, "name": self.full_name, "specialty": self.specialty,
            "days": self.days, "daysText": self.days_text, "email": self.email,
        }


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(f"status IN ('{BOOKED}', '{CANCELLED}')", name="ck_appointment_status"),
        # one active booking per doctor and day; cancelled rows are ignored
        Index("uq_active_booking", "doctor_id", "appointment_date", unique=True,
              sqlite_where=text(f"status = '{BOOKED}'"),
              postgresql_where=text(f"status = '{BOOKED}'")),
    )
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=BOOKED, server_default=BOOKED)
    created_at = Column(DateTime, server_default=func.now())


    def to_dict(self) -> dict:
        return {
            "id": self.id, "patient_id": self.patient_id, "doctor_id": self.doctor_id,
            "appointment_date": self.appointment_date.isoformat(),
            "status": self.status,
        }
