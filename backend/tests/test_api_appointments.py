import pytest

from conftest import future


@pytest.fixture
def book(client, headers, patient):
    def _book(date=None, duration=60, **extra):
        body = {"appointmentDate": date or future(), "duration": duration, "patientId": patient["id"]}
        body.update(extra)
        return client.post("/appointments", json=body, headers=headers)

    return _book


def _token(services, appointment_id):
    row = services.db.fetch_one("SELECT confirmation_token FROM appointments WHERE id = ?", (appointment_id,))
    return row["confirmation_token"]


def test_create_appointment(book, caplog):
    with caplog.at_level("INFO"):
        res = book(title="Evaluación inicial")
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Cita creada exitosamente"
    appointment = body["appointment"]
    assert appointment["status"] == "pending"
    assert appointment["patientName"] == "Camila Rojas Soto"
    assert appointment["patientEmail"] == "camila.rojas@example.com"
    assert appointment["appointment_date"] == future()
    assert "confirmation_token" not in appointment
    assert "/appointments/confirm/" in caplog.text


def test_guest_appointment(client, headers):
    res = client.post(
        "/appointments",
        json={"date": future(days=3), "guestName": "Jorge Invitado", "guestEmail": "Jorge@Example.com"},
        headers=headers,
    )
    appointment = res.json()["appointment"]
    assert appointment["patient_id"] is None
    assert appointment["patientName"] == "Jorge Invitado"
    assert appointment["patientEmail"] == "jorge@example.com"


def test_overlapping_appointment_is_rejected(book):
    assert book(future(hour=10)).status_code == 201
    res = book(future(hour=10, minute=30), duration=30)
    assert res.status_code == 400
    assert res.json() == {"message": "El horario seleccionado no está disponible"}
    # termina justo cuando empieza la otra
    assert book(future(hour=9), duration=60).status_code == 201
    assert book(future(hour=11), duration=60).status_code == 201


def test_availability(client, headers, book):
    booked = book(future(hour=10)).json()["appointment"]

    res = client.get(
        "/appointments/availability", params={"date": future(hour=10, minute=30), "duration": 30}, headers=headers
    )
    body = res.json()
    assert body["available"] is False
    assert body["conflictingAppointments"] == [
        {
            "id": booked["id"],
            "title": "Consulta",
            "appointmentDate": booked["appointment_date"],
            "duration": 60,
            "patientName": "Camila Rojas Soto",
            "status": "pending",
        }
    ]

    res = client.get(
        "/appointments/availability",
        params={"date": future(hour=10), "excludeId": booked["id"]},
        headers=headers,
    )
    assert res.json() == {"available": True, "conflictingAppointments": []}

    res = client.get("/appointments/availability", headers=headers)
    assert res.json()["message"] == "La fecha es obligatoria"


def test_cancelled_appointments_free_the_slot(client, headers, book):
    booked = book(future(hour=10)).json()["appointment"]
    res = client.put(
        f"/appointments/{booked['id']}/status",
        json={"status": "cancelled", "cancellationReason": "Viaje"},
        headers=headers,
    )
    assert res.json()["appointment"]["cancellation_reason"] == "Viaje"
    assert book(future(hour=10)).status_code == 201


def test_update_rechecks_availability(client, headers, book):
    first = book(future(hour=10)).json()["appointment"]
    second = book(future(hour=12)).json()["appointment"]

    res = client.put(f"/appointments/{second['id']}", json={"appointmentDate": future(hour=10, minute=30)}, headers=headers)
    assert res.json()["message"] == "El horario seleccionado no está disponible"

    # moverla dentro de su propio horario no choca consigo misma
    res = client.put(
        f"/appointments/{first['id']}",
        json={"appointmentDate": future(hour=10, minute=15), "title": "Control"},
        headers=headers,
    )
    assert res.status_code == 200
    updated = res.json()["appointment"]
    assert updated["appointment_date"] == future(hour=10, minute=15)
    assert updated["title"] == "Control"


def test_list_by_range(client, headers, book):
    book(future(days=1))
    book(future(days=5))
    res = client.get("/appointments", params={"start": future(days=0, hour=0), "end": future(days=2)}, headers=headers)
    assert len(res.json()["appointments"]) == 1
    assert len(client.get("/appointments", headers=headers).json()["appointments"]) == 2

    res = client.get("/appointments", params={"start": "ayer"}, headers=headers)
    assert res.json()["message"] == "start inválida"


def test_get_and_delete(client, headers, book):
    appointment_id = book().json()["appointment"]["id"]
    assert client.get(f"/appointments/{appointment_id}", headers=headers).status_code == 200
    res = client.delete(f"/appointments/{appointment_id}", headers=headers)
    assert res.json() == {"message": "Cita eliminada exitosamente"}
    res = client.get(f"/appointments/{appointment_id}", headers=headers)
    assert (res.status_code, res.json()["message"]) == (404, "Cita no encontrada")


def test_confirm_by_token_notifies_doctor(client, services, headers, book):
    appointment_id = book().json()["appointment"]["id"]
    token = _token(services, appointment_id)

    res = client.get(f"/appointments/confirm/{token}")
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Cita confirmada exitosamente"
    assert body["appointment"]["status"] == "confirmed"
    assert body["appointment"]["confirmedAt"] is not None

    res = client.get(f"/appointments/confirm/{token}")
    assert res.json()["message"] == "La cita ya estaba confirmada"

    res = client.get("/notifications", headers=headers)
    body = res.json()
    assert body["unreadCount"] == 1
    notification = body["notifications"][0]
    assert notification["type"] == "appointment_confirmed"
    assert notification["appointment_id"] == appointment_id
    assert notification["patient_name"] == "Camila Rojas Soto"
    assert notification["is_read"] is False


def test_confirm_rejections(client, services, book):
    res = client.get("/appointments/confirm/no-existe")
    assert (res.status_code, res.json()["message"]) == (404, "Cita no encontrada o token inválido")

    past_id = book(future(days=-2)).json()["appointment"]["id"]
    res = client.get(f"/appointments/confirm/{_token(services, past_id)}")
    assert res.json()["message"] == "No se puede confirmar una cita que ya pasó"

    cancelled_id = book(future(days=3)).json()["appointment"]["id"]
    token = _token(services, cancelled_id)
    client.get(f"/appointments/cancel/{token}")
    res = client.get(f"/appointments/confirm/{token}")
    assert (res.status_code, res.json()["message"]) == (400, "No se puede confirmar una cita cancelada")


def test_cancel_by_token(client, services, headers, book):
    appointment_id = book().json()["appointment"]["id"]
    token = _token(services, appointment_id)

    res = client.post(f"/appointments/cancel/{token}", json={"reason": "Me enfermé"})
    assert res.json()["message"] == "Cita cancelada exitosamente"
    assert res.json()["appointment"]["status"] == "cancelled"
    appointment = client.get(f"/appointments/{appointment_id}", headers=headers).json()["appointment"]
    assert appointment["cancellation_reason"] == "Me enfermé"

    res = client.get(f"/appointments/cancel/{token}")
    assert res.json()["message"] == "La cita ya estaba cancelada"

    notification = client.get("/notifications", headers=headers).json()["notifications"][0]
    assert notification["type"] == "appointment_cancelled"
    assert notification["message"].endswith(": Me enfermé")


def test_cancel_defaults_and_rejections(client, services, headers, book):
    appointment_id = book().json()["appointment"]["id"]
    client.get(f"/appointments/cancel/{_token(services, appointment_id)}")
    appointment = client.get(f"/appointments/{appointment_id}", headers=headers).json()["appointment"]
    assert appointment["cancellation_reason"] == "Cancelada por el paciente"

    completed_id = book(future(days=4)).json()["appointment"]["id"]
    client.put(f"/appointments/{completed_id}/status", json={"status": "completed"}, headers=headers)
    res = client.get(f"/appointments/cancel/{_token(services, completed_id)}")
    assert res.json()["message"] == "No se puede cancelar una cita que ya fue completada"

    past_id = book(future(days=-3)).json()["appointment"]["id"]
    res = client.get(f"/appointments/cancel/{_token(services, past_id)}", params={"reason": "tarde"})
    assert res.json()["message"] == "No se puede cancelar una cita que ya pasó"


def test_notifications_read_flow(client, services, headers, book):
    for days in (2, 3):
        appointment_id = book(future(days=days)).json()["appointment"]["id"]
        client.get(f"/appointments/confirm/{_token(services, appointment_id)}")

    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 2}
    first = client.get("/notifications", headers=headers).json()["notifications"][0]

    res = client.put(f"/notifications/{first['id']}/read", headers=headers)
    assert res.json() == {"message": "Notificación marcada como leída"}
    res = client.get("/notifications", params={"unread": "true"}, headers=headers)
    unread = res.json()["notifications"]
    assert len(unread) == 1 and unread[0]["id"] != first["id"]
    assert res.json()["unreadCount"] == 1

    res = client.put("/notifications/read-all", headers=headers)
    assert res.json() == {"message": "1 notificaciones marcadas como leídas"}
    assert client.get("/notifications/unread-count", headers=headers).json() == {"count": 0}

    res = client.put("/notifications/9999/read", headers=headers)
    assert (res.status_code, res.json()["message"]) == (404, "Notificación no encontrada")


def test_notifications_are_private(client, services, register_doctor, book):
    appointment_id = book().json()["appointment"]["id"]
    client.get(f"/appointments/confirm/{_token(services, appointment_id)}")
    other = register_doctor("otro@example.com")
    assert client.get("/notifications/unread-count", headers=other).json() == {"count": 0}


def test_cancelling_from_the_agenda_needs_a_reason(client, headers, book):
    appointment_id = book().json()["appointment"]["id"]
    res = client.put(f"/appointments/{appointment_id}/status", json={"status": "cancelled"}, headers=headers)
    assert (res.status_code, res.json()["message"]) == (400, "La razón de cancelación es obligatoria")
    appointment = client.get(f"/appointments/{appointment_id}", headers=headers).json()["appointment"]
    assert appointment["status"] == "pending"


def test_duration_and_date_range_limits(client, headers, book):
    res = book(duration="1e20")
    assert (res.status_code, res.json()["message"]) == (400, "La duración no puede superar 1440 minutos")

    res = book("9999-12-31T23:30:00", duration=60)
    assert (res.status_code, res.json()["message"]) == (400, "La cita termina fuera del rango de fechas permitido")

    res = client.get(
        "/appointments/availability", params={"date": "9999-12-31T23:30:00", "duration": "60"}, headers=headers
    )
    assert res.status_code == 400
