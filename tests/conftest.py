import pytest

from app import create_app


@pytest.fixture
def app(tmp_path):
    return create_app({
        "database_url": f"sqlite:///{tmp_path / 'clinic.sqlite3'}",
        "jwt_secret": "test-secret",
        "bcrypt_rounds": 4,
    })


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["clinic"]


@pytest.fixture
def doctor_ids(services):
    return {d.email: d.id for d in services.credentials.list_doctors()}


def signup(client, name="Sara Ali", email="sara@example.com", password="secret1"):
    return client.post("/api/auth/patient/signup",
                       json={"full_name": name, "email": email, "password": password})


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def patient_token(client):
    signup(client)
    r = client.post("/api/auth/patient/login", json={"email": "sara@example.com", "password": "secret1"})
    return r.get_json()["token"]


@pytest.fixture
def other_patient_token(client):
    signup(client, name="Ali Hassan", email="ali@example.com", password="secret2")
    r = client.post("/api/auth/patient/login", json={"email": "ali@example.com", "password": "secret2"})
    return r.get_json()["token"]


def doctor_token(client, email="dr.omar@medicare.com"):
    r = client.post("/api/auth/doctor/login", json={"email": email, "password": "doc123"})
    return r.get_json()["token"]
