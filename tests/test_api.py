from conftest import bearer, doctor_token, signup


def test_root_and_health(client):
    assert client.get("/").data == b"Backend is running"
    assert client.get("/health").get_json() == {"status": "ok"}


def test_doctors_returns_seed(client):
    r = client.get("/api/doctors")
    assert r.status_code == 200
    doctors = r.get_json()["doctors"]
    assert len(doctors) == 4
    omar = doctors[0]
    assert omar["name"] == "Dr. Omar Osama"
    assert omar["specialty"] == "Cardiologist"
    assert omar["days"] == [1, 3, 5]
    assert omar["daysText"] == "Mon, Wed, Fri"
    assert omar["email"] == "dr.omar@medicare.com"
    assert set(omar) == {"id", "name", "specialty", "days", "daysText", "email"}
    assert [d["daysText"] for d in doctors] == ["Mon, Wed, Fri", "Tue, Thu", "Sun, Sat", "Sun to Thu"]
    assert all(isinstance(x, int) for d in doctors for x in d["days"])


def test_signup_and_duplicate(client):
    assert signup(client).status_code == 201
    r = signup(client, name="Someone Else")
    assert r.status_code == 409
    assert r.get_json()["message"] == "Email already exists"


def test_signup_missing_fields(client):
    assert client.post("/api/auth/patient/signup", json={"email": "x@example.com"}).status_code == 400
    assert client.post("/api/auth/patient/signup", data="not json").status_code == 400
    r = client.post("/api/auth/patient/signup", json={"full_name": "  ", "email": "x@example.com", "password": "p"})
    assert r.status_code == 400


def test_patient_login(client):
    signup(client)
    r = client.post("/api/auth/patient/login", json={"email": "sara@example.com", "password": "secret1"})
    assert r.status_code == 200
    body = r.get_json()
    assert body["token"]
    assert body["user"]["name"] == "Sara Ali"
    assert body["user"]["role"] == "patient"


def test_bad_logins_issue_no_token(client):
    signup(client)
    for path, creds in [
        ("/api/auth/patient/login", {"email": "sara@example.com", "password": "wrong"}),
        ("/api/auth/patient/login", {"email": "ghost@example.com", "password": "secret1"}),
        ("/api/auth/doctor/login", {"email": "dr.omar@medicare.com", "password": "wrong"}),
    ]:
        r = client.post(path, json=creds)
        assert r.status_code == 401
        assert "token" not in r.get_json()


def test_doctor_login(client):
    r = client.post("/api/auth/doctor/login", json={"email": "dr.mariam@medicare.com", "password": "doc123"})
    assert r.status_code == 200
    assert r.get_json()["user"] == {
        "id": r.get_json()["user"]["id"], "name": "Dr. Mariam Mahmoud",
        "email": "dr.mariam@medicare.com", "role": "doctor",
    }


def test_omar_monday_booked_then_conflict(client, patient_token, doctor_ids):
    payload = {"doctor_id": doctor_ids["dr.omar@medicare.com"], "appointment_date": "2024-06-10"}
    first = client.post("/api/appointments", json=payload, headers=bearer(patient_token))
    assert first.status_code == 201
    assert first.get_json()["appointment"]["appointment_date"] == "2024-06-10"
    second = client.post("/api/appointments", json=payload, headers=bearer(patient_token))
    assert second.status_code == 409


def test_booking_validation(client, patient_token, doctor_ids):
    omar = doctor_ids["dr.omar@medicare.com"]
    h = bearer(patient_token)
    assert client.post("/api/appointments", json={"doctor_id": omar}, headers=h).status_code == 400
    assert client.post("/api/appointments", json={"doctor_id": "abc", "appointment_date": "2024-06-10"},
                       headers=h).status_code == 400
    assert client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": "10/06/2024"},
                       headers=h).status_code == 400
    assert client.post("/api/appointments", json={"doctor_id": 999, "appointment_date": "2024-06-10"},
                       headers=h).status_code == 404
    # string ids are accepted the way the web client sends them
    assert client.post("/api/appointments", json={"doctor_id": str(omar), "appointment_date": "2024-06-12"},
                       headers=h).status_code == 201


def test_doctor_cannot_book(client, doctor_ids):
    tok = doctor_token(client)
    r = client.post("/api/appointments", headers=bearer(tok),
                    json={"doctor_id": doctor_ids["dr.omar@medicare.com"], "appointment_date": "2024-06-10"})
    assert r.status_code == 403


def test_patient_flow_and_cancel(client, patient_token, other_patient_token, doctor_ids):
    omar = doctor_ids["dr.omar@medicare.com"]
    nour = doctor_ids["dr.nour@medicare.com"]
    h = bearer(patient_token)
    client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": "2024-06-14"}, headers=h)
    client.post("/api/appointments", json={"doctor_id": nour, "appointment_date": "2024-06-08"}, headers=h)
    client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": "2024-06-10"},
                headers=bearer(other_patient_token))

    appts = client.get("/api/appointments/patient", headers=h).get_json()["appointments"]
    assert [a["appointment_date"] for a in appts] == ["2024-06-08", "2024-06-14"]
    assert appts[1]["doctor_name"] == "Dr. Omar Osama"

    # someone else's appointment looks missing
    assert client.delete(f"/api/appointments/{appts[0]['id']}",
                         headers=bearer(other_patient_token)).status_code == 404
    r = client.delete(f"/api/appointments/{appts[1]['id']}", headers=h)
    assert r.status_code == 200
    assert r.get_json()["message"] == "Appointment cancelled"

    appts = client.get("/api/appointments/patient", headers=h).get_json()["appointments"]
    assert [a["status"] for a in appts] == ["booked", "cancelled"]

    # the freed slot can be booked again
    again = client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": "2024-06-14"},
                        headers=bearer(other_patient_token))
    assert again.status_code == 201


def test_doctor_flow(client, patient_token, doctor_ids):
    omar = doctor_ids["dr.omar@medicare.com"]
    h = bearer(patient_token)
    client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": "2024-06-12"}, headers=h)
    client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": "2024-06-10"}, headers=h)

    omar_h = bearer(doctor_token(client))
    nour_h = bearer(doctor_token(client, "dr.nour@medicare.com"))
    appts = client.get("/api/appointments/doctor", headers=omar_h).get_json()["appointments"]
    assert [a["appointment_date"] for a in appts] == ["2024-06-10", "2024-06-12"]
    assert appts[0]["patient_name"] == "Sara Ali"
    assert client.get("/api/appointments/doctor", headers=nour_h).get_json() == {"appointments": []}

    assert client.delete(f"/api/appointments/doctor/{appts[0]['id']}", headers=nour_h).status_code == 404
    assert client.delete(f"/api/appointments/doctor/{appts[0]['id']}", headers=omar_h).status_code == 200
    statuses = [a["status"] for a in client.get("/api/appointments/doctor", headers=omar_h).get_json()["appointments"]]
    assert statuses == ["cancelled", "booked"]


def test_unexpected_error_is_generic(client, services, monkeypatch):
    def boom():
        raise RuntimeError("database is on fire")
    monkeypatch.setattr(services.credentials, "list_doctors", boom)
    r = client.get("/api/doctors")
    assert r.status_code == 500
    assert r.get_json() == {"message": "Server error"}


def test_http_errors_are_json(client):
    assert client.get("/api/nope").status_code == 404
    r = client.put("/api/doctors")
    assert r.status_code == 405
    assert "message" in r.get_json()


def test_long_password_signup_and_login(client):
    long_pw = "p" * 80
    assert signup(client, password=long_pw).status_code == 201
    r = client.post("/api/auth/patient/login", json={"email": "sara@example.com", "password": long_pw})
    assert r.status_code == 200
    assert r.get_json()["token"]


def test_out_of_range_and_odd_doctor_ids(client, patient_token):
    h = bearer(patient_token)
    for doctor_id in (10**20, "100000000000000000000", "²", "٣", -1, 0, True):
        r = client.post("/api/appointments", json={"doctor_id": doctor_id, "appointment_date": "2024-06-10"},
                        headers=h)
        assert r.status_code == 400, doctor_id


def test_out_of_range_path_ids_are_missing(client, patient_token):
    huge = 10**20
    assert client.delete(f"/api/appointments/{huge}", headers=bearer(patient_token)).status_code == 404
    assert client.delete(f"/api/appointments/doctor/{huge}",
                         headers=bearer(doctor_token(client))).status_code == 404


def test_only_calendar_dates_accepted(client, patient_token, doctor_ids):
    omar = doctor_ids["dr.omar@medicare.com"]
    for value in ("2024-W24-1", "20240610", "2024-6-10", "2024-06-10T09:00", "２０２４-06-10", "2024-02-30"):
        r = client.post("/api/appointments", json={"doctor_id": omar, "appointment_date": value},
                        headers=bearer(patient_token))
        assert r.status_code == 400, value
    assert client.get("/api/appointments/patient", headers=bearer(patient_token)).get_json() == {"appointments": []}
