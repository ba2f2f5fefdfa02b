from datetime import date, timedelta

import pytest

TODAY = date.today().isoformat()


@pytest.fixture
def treatment_body(patient):
    return {
        "id_paciente": patient["id"],
        "fecha_control": TODAY,
        "hora_control": "10:30",
        "nombre_servicio": "Toxina botulínica",
        "producto": "Botox",
        "dilucion": "2.5 ml",
    }


@pytest.fixture
def treatment(client, headers, treatment_body):
    res = client.post("/treatments", json=treatment_body, headers=headers)
    assert res.status_code == 201, res.text
    return res.json()["treatment"]


def test_create_treatment(treatment):
    assert treatment["status"] == "pending"
    assert treatment["hora_control"] == "10:30"
    assert treatment["is_active"] is True
    assert treatment["budget_item_id"] is None


def test_create_for_unknown_patient(client, headers, treatment_body):
    res = client.post("/treatments", json=dict(treatment_body, id_paciente=9999), headers=headers)
    assert (res.status_code, res.json()["message"]) == (404, "Paciente no encontrado")


def test_control_date_cannot_be_future(client, headers, treatment_body):
    tomorrow = (date.today() + timedelta(days=1)).isoformat()
    res = client.post("/treatments", json=dict(treatment_body, fecha_control=tomorrow), headers=headers)
    assert res.json()["message"] == "La fecha de control no puede ser futura"


def test_list_and_get(client, headers, patient, treatment):
    res = client.get(f"/treatments/patient/{patient['id']}", headers=headers)
    assert [t["id_tratamiento"] for t in res.json()["treatments"]] == [treatment["id_tratamiento"]]
    res = client.get(f"/treatments/{treatment['id_tratamiento']}", headers=headers)
    assert res.json()["treatment"]["producto"] == "Botox"


def test_update_checks_next_control_against_stored_date(client, headers, treatment):
    url = f"/treatments/{treatment['id_tratamiento']}"
    res = client.put(url, json={"fecha_proximo_control": "2000-01-01"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["message"] == "La fecha próximo control debe ser posterior a la fecha de control"

    next_control = (date.today() + timedelta(days=30)).isoformat()
    res = client.put(
        url,
        json={"fecha_proximo_control": next_control, "hora_proximo_control": "09:00:00", "producto": ""},
        headers=headers,
    )
    updated = res.json()["treatment"]
    assert updated["fecha_proximo_control"] == next_control
    assert updated["hora_proximo_control"] == "09:00"
    assert updated["producto"] is None


def test_complete_marks_budget_item(client, headers, patient, treatment_body):
    budget = client.post(
        f"/budgets/patient/{patient['id']}",
        json={"budgetType": "estetica", "items": [{"accion": "Botox", "valor": 150000}]},
        headers=headers,
    ).json()["budget"]
    item_id = budget["items"][0]["id"]

    created = client.post("/treatments", json=dict(treatment_body, budget_item_id=item_id), headers=headers)
    treatment_id = created.json()["treatment"]["id_tratamiento"]

    res = client.put(f"/treatments/{treatment_id}/complete", headers=headers)
    assert res.json()["treatment"]["status"] == "completed"
    budget = client.get(f"/budgets/{budget['id']}", headers=headers).json()["budget"]
    assert budget["items"][0]["status"] == "completed"

    res = client.put(f"/treatments/{treatment_id}/complete", headers=headers)
    assert res.json() == {"message": "El tratamiento ya está completado"}


def test_unknown_budget_item(client, headers, treatment_body):
    res = client.post("/treatments", json=dict(treatment_body, budget_item_id=4242), headers=headers)
    assert res.json()["message"] == "Item de presupuesto no encontrado"


def test_delete_is_soft(client, services, headers, patient, treatment):
    treatment_id = treatment["id_tratamiento"]
    res = client.delete(f"/treatments/{treatment_id}", headers=headers)
    assert res.json() == {"message": "Tratamiento eliminado exitosamente"}
    assert client.get(f"/treatments/{treatment_id}", headers=headers).status_code == 404
    assert client.get(f"/treatments/patient/{patient['id']}", headers=headers).json() == {"treatments": []}
    row = services.db.fetch_one("SELECT is_active FROM treatments WHERE id_tratamiento = ?", (treatment_id,))
    assert row["is_active"] == 0


def test_prescriptions(client, headers, patient):
    res = client.post(
        "/prescriptions",
        json={"patientId": patient["id"], "medications": "Ibuprofeno 400mg cada 8 horas"},
        headers=headers,
    )
    assert res.status_code == 201
    prescription = res.json()["prescription"]
    assert prescription["medications"] == "Ibuprofeno 400mg cada 8 horas"

    res = client.get(f"/prescriptions/patient/{patient['id']}", headers=headers)
    assert [p["id"] for p in res.json()["prescriptions"]] == [prescription["id"]]

    res = client.delete(f"/prescriptions/{prescription['id']}", headers=headers)
    assert res.json() == {"message": "Receta eliminada exitosamente"}
    res = client.delete(f"/prescriptions/{prescription['id']}", headers=headers)
    assert (res.status_code, res.json()["message"]) == (404, "Receta no encontrada")


def test_prescription_for_unknown_patient(client, headers):
    res = client.post("/prescriptions", json={"patientId": 9999, "medications": "Paracetamol"}, headers=headers)
    assert res.json()["message"] == "Paciente no encontrado"
