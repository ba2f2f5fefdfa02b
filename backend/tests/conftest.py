from datetime import datetime, timedelta
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from consultorio.api import create_app
from consultorio.config import Settings

FRONTEND = "http://localhost:5173"


def make_settings(tmp_path, **overrides) -> Settings:
    return Settings(
        database_path=str(tmp_path / "consultorio_test.db"),
        jwt_seed="test-seed",
        frontend_url=FRONTEND,
        cors_extra_origins=["https://www.consultorio.cl"],
        **overrides,
    )


def future(days: int = 2, hour: int = 10, minute: int = 0) -> str:
    moment = (datetime.now() + timedelta(days=days)).replace(hour=hour, minute=minute, second=0, microsecond=0)
    return moment.isoformat(timespec="seconds")


PATIENT = {
    "rut": "17539138-k",
    "nombres": "Camila",
    "apellidos": "Rojas Soto",
    "fecha_nacimiento": "1990-05-12",
    "telefono": "+56911112222",
    "email": "Camila.Rojas@Example.com",
    "direccion": "Av. Providencia 1234",
    "ciudad": "Santiago",
}


@pytest.fixture
def app(tmp_path):
    return create_app(make_settings(tmp_path))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def services(app):
    return app.state.services


@pytest.fixture
def register_doctor(client, services):
    """Registra, confirma e inicia sesión; devuelve las cabeceras Bearer."""

    def _register(email: str = "doctora@example.com", password: str = "secreto1") -> Dict[str, str]:
        res = client.post(
            "/auth/register",
            json={"name": "Ana", "lastName": "Pérez", "email": email, "password": password},
        )
        assert res.status_code == 201, res.text
        token = services.db.fetch_one("SELECT token FROM users WHERE email = ?", (email,))["token"]
        assert client.get(f"/auth/validate-email/{token}").status_code == 200
        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['token']}"}

    return _register


@pytest.fixture
def headers(register_doctor):
    return register_doctor()


@pytest.fixture
def patient(client, headers):
    res = client.post("/patients", json=PATIENT, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["patient"]
