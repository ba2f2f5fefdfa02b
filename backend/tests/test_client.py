import asyncio
import json

import httpx
import pytest

from conftest import PATIENT, future
from consultorio.client import HttpAdapterError, HttpxAdapter, UseCaseError
from consultorio.client.use_cases import (
    check_availability_use_case,
    complete_budget_item_use_case,
    create_appointment_use_case,
    create_patient_use_case,
    get_budget_by_patient_use_case,
    get_patient_by_id_use_case,
    get_patients_use_case,
    login_use_case,
    mark_notifications_read_use_case,
    save_budget_use_case,
)


def mock_adapter(handler, token="jwt-token"):
    return HttpxAdapter("http://api.test", token=token, transport=httpx.MockTransport(handler))


def run(coro):
    return asyncio.run(coro)


def test_bearer_header_and_clean_params():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"patients": [], "total": 0, "searchTerm": None})

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            return await get_patients_use_case(fetcher)

    assert run(scenario())["total"] == 0
    assert seen == {"auth": "Bearer jwt-token", "params": {}}


def test_availability_params():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"available": True, "conflictingAppointments": []})

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            return await check_availability_use_case(fetcher, "2030-01-15T10:00:00", duration=30, exclude_id=7)

    assert run(scenario()) == {"available": True, "conflictingAppointments": []}
    assert seen["path"] == "/appointments/availability"
    assert seen["params"] == {"date": "2030-01-15T10:00:00", "duration": "30", "excludeId": "7"}


def test_budget_items_travel_as_json_string():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"message": "ok", "budget": {"id": 3}})

    items = [{"accion": "Limpieza", "valor": 25000}]

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            return await save_budget_use_case(fetcher, 5, "odontologico", items)

    assert run(scenario()) == {"id": 3}
    assert seen["path"] == "/budgets/patient/5"
    assert seen["body"]["budgetType"] == "odontologico"
    assert json.loads(seen["body"]["items"]) == items


def test_mark_all_notifications_when_no_id():
    paths = []

    def handler(request):
        paths.append((request.method, request.url.path))
        return httpx.Response(200, json={"message": "ok"})

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            await mark_notifications_read_use_case(fetcher)
            await mark_notifications_read_use_case(fetcher, 9)

    run(scenario())
    assert paths == [("PUT", "/notifications/read-all"), ("PUT", "/notifications/9/read")]


def test_server_error_is_wrapped():
    def handler(request):
        return httpx.Response(400, json={"message": "Usuario ya registrado"})

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            await login_use_case(fetcher, "a@b.cl", "secreto1")

    with pytest.raises(UseCaseError) as excinfo:
        run(scenario())
    err = excinfo.value
    assert err.message == "Error al iniciar sesión"
    assert err.detail == "Usuario ya registrado"
    assert err.status_code == 400
    assert str(err) == "Error al iniciar sesión: Usuario ya registrado"
    assert isinstance(err.__cause__, HttpAdapterError)


def test_transport_failure_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            await get_budget_by_patient_use_case(fetcher, 1)

    with pytest.raises(UseCaseError) as excinfo:
        run(scenario())
    assert excinfo.value.status_code is None
    assert excinfo.value.detail.startswith("Error de conexión")


def test_non_json_error_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            await fetcher.get("/patients")

    with pytest.raises(HttpAdapterError) as excinfo:
        run(scenario())
    assert excinfo.value.message == "Error HTTP 502"
    assert excinfo.value.body == "Bad Gateway"


def test_unexpected_response_shape_is_wrapped():
    def handler(request):
        return httpx.Response(200, json={"message": "ok"})

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            await get_patient_by_id_use_case(fetcher, 4)

    with pytest.raises(UseCaseError) as excinfo:
        run(scenario())
    assert excinfo.value.message == "Error al obtener el paciente"
    assert excinfo.value.detail == "Respuesta inesperada del servidor"
    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_complete_budget_item_path():
    seen = {}

    def handler(request):
        seen["call"] = (request.method, request.url.path)
        return httpx.Response(200, json={"message": "ok", "budget": {"id": 2, "status": "completed"}})

    async def scenario():
        async with mock_adapter(handler) as fetcher:
            return await complete_budget_item_use_case(fetcher, 11)

    assert run(scenario()) == {"id": 2, "status": "completed"}
    assert seen["call"] == ("PUT", "/budgets/items/11/complete")


def test_against_the_api(app, register_doctor):
    headers = register_doctor()
    token = headers["Authorization"].split()[1]
    transport = httpx.ASGITransport(app=app)

    async def scenario():
        async with HttpxAdapter("http://testserver", transport=transport) as anonymous:
            session = await login_use_case(anonymous, "doctora@example.com", "secreto1")
            assert session["user"]["email"] == "doctora@example.com"

        async with HttpxAdapter("http://testserver", token=token, transport=transport) as fetcher:
            patient = await create_patient_use_case(fetcher, PATIENT)
            budget = await save_budget_use_case(
                fetcher, patient["id"], "estetica", [{"accion": "Botox", "valor": 150000}]
            )
            appointment = await create_appointment_use_case(
                fetcher, {"appointmentDate": future(), "patientId": patient["id"]}
            )
            availability = await check_availability_use_case(fetcher, future(), duration=30)
            with pytest.raises(UseCaseError) as excinfo:
                await create_patient_use_case(fetcher, PATIENT)
            return budget, appointment, availability, excinfo.value

    budget, appointment, availability, duplicate = run(scenario())
    assert budget["total_amount"] == 150000
    assert appointment["patientName"] == "Camila Rojas Soto"
    assert availability["available"] is False
    assert [c["id"] for c in availability["conflictingAppointments"]] == [appointment["id"]]
    assert duplicate.detail == "Ya existe un paciente con este RUT"
