import json
import logging

import bcrypt
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError

from errors import Conflict, Unauthenticated
from models import Patient, Doctor

logger = logging.getLogger(__name__)

SEED_PASSWORD = "doc123"
SEED_DOCTORS = [
    {"full_name": "Dr. Omar Osama", "specialty": "Cardiologist", "days": [1, 3, 5],
     "days_text": "Mon, Wed, Fri", "email": "dr.omar@medicare.com"},
    {"full_name": "Dr. Youssef Mohamed", "specialty": "Dermatologist", "days": [2, 4],
     "days_text": "Tue, Thu", "email": "dr.youssef@medicare.com"},
    {"full_name": "Dr. Nour Mohamed", "specialty": "Pediatrician", "days": [0, 6],
     "days_text": "Sun, Sat", "email": "dr.nour@medicare.com"},
    {"full_name": "Dr. Mariam Mahmoud", "specialty": "General Doctor", "days": [0, 1, 2, 3, 4],
     "days_text": "Sun to Thu", "email": "dr.mariam@medicare.com"},
]


BCRYPT_MAX_BYTES = 72


def _secret_bytes(password: str) -> bytes:
    # bcrypt only ever looks at the first 72 bytes
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

class CredentialStore:
    """Patients and doctors with their bcrypt password hashes."""

    def __init__(self, session_factory, rounds: int = 10):
        self.Session = session_factory
        self.rounds = rounds

    # ---------------- Hashing ----------------
    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(_secret_bytes(password), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_secret_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False

    # ---------------- Patients ----------------
    def create_patient(self, full_name: str, email: str, password: str) -> int:
        with self.Session() as db:
            if db.scalar(select(Patient.id).where(Patient.email == email)) is not None:
                raise Conflict("Email already exists")
            p = Patient(full_name=full_name, email=email, password_hash=self.hash_password(password))
            db.add(p)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise Conflict("Email already exists")
            logger.info("Patient %s registered", p.id)
            return p.id

    def find_patient_by_email(self, email: str):
        with self.Session() as db:
            return db.scalar(select(Patient).where(Patient.email == email))

    # ---------------- Doctors ----------------
    def find_doctor_by_email(self, email: str):
        with self.Session() as db:
            return db.scalar(select(Doctor).where(Doctor.email == email))

    def get_doctor(self, doctor_id: int):
        with self.Session() as db:
            return db.get(Doctor, doctor_id)

    def list_doctors(self) -> list:
        with self.Session() as db:
            return list(db.scalars(select(Doctor).order_by(Doctor.id.asc())))

    def seed_doctors(self) -> int:
        with self.Session() as db:
            if db.scalar(select(func.count()).select_from(Doctor)):
                return 0
            db.add_all([
                Doctor(full_name=d["full_name"], specialty=d["specialty"],
                       days_json=json.dumps(d["days"]), days_text=d["days_text"],
                       email=d["email"], password_hash=self.hash_password(SEED_PASSWORD))
                for d in SEED_DOCTORS
            ])
            db.commit()
        logger.info("Seeded %d doctors", len(SEED_DOCTORS))
        return len(SEED_DOCTORS)

    # ---------------- Login ----------------
    def authenticate(self, role: str, email: str, password: str):
        finder = self.find_patient_by_email if role == "patient" else self.find_doctor_by_email
        user = finder(email)
        if user is None or not self.verify_password(password, user.password_hash):
            logger.warning("Failed %s login for %s", role, email)
            raise Unauthenticated("Invalid credentials")
        return user
