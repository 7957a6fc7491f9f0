import logging
import re
from datetime import date, timedelta
from types import SimpleNamespace

from flask import Flask, Response, current_app, jsonify, request
from flask_cors import CORS

from config import Settings
from db import make_engine, make_session_factory, init_db
from errors import BadRequest, register_error_handlers
from models import MAX_ID
from credentials import CredentialStore
from tokens import TokenService
from appointments import AppointmentRepository
from booking import BookingService
from auth import auth_required, require_role, current_user

logger = logging.getLogger(__name__)


# ---------------- Helpers ----------------
def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _required(data: dict, *names):
    values = []
    for name in names:
        val = data.get(name)
        if isinstance(val, str) and name != "password":
            val = val.strip()
        if val is None or val == "":
            raise BadRequest("Missing data")
        values.append(val)
    return values


def _strings(*values):
    if not all(isinstance(v, str) for v in values):
        raise BadRequest("Invalid data")
    return values


def _parse_id(value) -> int:
    if isinstance(value, bool):
        raise BadRequest("Invalid doctor_id")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str) and re.fullmatch(r"[0-9]+", value):
        n = int(value)
    else:
        raise BadRequest("Invalid doctor_id")
    if not 0 < n <= MAX_ID:
        raise BadRequest("Invalid doctor_id")
    return n


def _parse_date(value) -> date:
    if not isinstance(value, str) or not re.fullmatch(r"[0-9]{4}-[0-9]{2}-[0-9]{2}", value):
        raise BadRequest("Invalid appointment_date, expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise BadRequest("Invalid appointment_date, expected YYYY-MM-DD")


def _services():
    return current_app.extensions["clinic"]


def _login(role: str):
    email, password = _strings(*_required(_body(), "email", "password"))
    svc = _services()
    user = svc.credentials.authenticate(role, email, password)
    token = svc.tokens.issue(user.id, role, user.email)
    return jsonify({
        "token": token,
        "user": {"id": user.id, "name": user.full_name, "email": user.email, "role": role},
    })


# ---------------- App factory ----------------
def create_app(config=None) -> Flask:
    if isinstance(config, Settings):
        settings = config
    elif config is not None:
        # explicit overrides start from defaults, not from the environment
        settings = Settings().override(config)
    else:
        settings = Settings.from_env()

    logging.basicConfig(level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    CORS(app, resources={r"/api/*": {"origins": settings.cors_origins}})
    register_error_handlers(app)

    engine = make_engine(settings.database_url)
    init_db(engine)
    Session = make_session_factory(engine)

    credentials = CredentialStore(Session, rounds=settings.bcrypt_rounds)
    appointments = AppointmentRepository(Session)
    app.extensions["clinic"] = SimpleNamespace(
        engine=engine,
        credentials=credentials,
        appointments=appointments,
        tokens=TokenService(settings.jwt_secret, ttl=timedelta(days=settings.token_ttl_days)),
        booking=BookingService(Session, credentials, appointments,
                               enforce_doctor_days=settings.enforce_doctor_days),
    )
    credentials.seed_doctors()

    register_routes(app)
    logger.info("Clinic API ready (db=%s)", engine.url.render_as_string(hide_password=True))
    return app


def register_routes(app: Flask):
    # ---------------- Health ----------------
    @app.get("/")
    def root():
        return Response("Backend is running", mimetype="text/plain")

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    # ---------------- Doctors ----------------
    @app.get("/api/doctors")
    def doctors_list():
        items = _services().credentials.list_doctors()
        return jsonify({"doctors": [d.to_public() for d in items]})

    # ---------------- Auth ----------------
    @app.post("/api/auth/patient/signup")
    def patient_signup():
        full_name, email, password = _strings(
            *_required(_body(), "full_name", "email", "password"))
        pid = _services().credentials.create_patient(full_name, email, password)
        return jsonify({"message": "Patient created", "id": pid}), 201

    @app.post("/api/auth/patient/login")
    def patient_login():
        return _login("patient")

    @app.post("/api/auth/doctor/login")
    def doctor_login():
        return _login("doctor")

    @app.get("/api/auth/me")
    @auth_required
    def me():
        return jsonify({"user": current_user().to_dict()})

    # ---------------- Appointments (patient) ----------------
    @app.post("/api/appointments")
    @auth_required
    @require_role("patient")
    def appt_create():
        doctor_id, appointment_date = _required(_body(), "doctor_id", "appointment_date")
        appt = _services().booking.book(current_user().id, _parse_id(doctor_id),
                                        _parse_date(appointment_date))
        return jsonify({"message": "Appointment booked", "appointment": appt.to_dict()}), 201

    @app.get("/api/appointments/patient")
    @auth_required
    @require_role("patient")
    def appt_list_patient():
        return jsonify({"appointments": _services().appointments.list_for_patient(current_user().id)})

    @app.delete("/api/appointments/<int:appointment_id>")
    @auth_required
    @require_role("patient")
    def appt_cancel_patient(appointment_id):
        _services().booking.cancel_for_patient(appointment_id, current_user().id)
        return jsonify({"message": "Appointment cancelled"})

    # ---------------- Appointments (doctor) ----------------
    @app.get("/api/appointments/doctor")
    @auth_required
    @require_role("doctor")
    def appt_list_doctor():
        return jsonify({"appointments": _services().appointments.list_for_doctor(current_user().id)})

    @app.delete("/api/appointments/doctor/<int:appointment_id>")
    @auth_required
    @require_role("doctor")
    def appt_cancel_doctor(appointment_id):
        _services().booking.cancel_for_doctor(appointment_id, current_user().id)
        return jsonify({"message": "Appointment cancelled"})


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=application.config["SETTINGS"].port)
