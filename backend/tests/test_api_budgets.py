import json
from datetime import date

import pytest

ITEMS = [
    {"pieza": "16", "accion": "Obturación resina", "valor": 35000},
    {"pieza": "26", "accion": "Endodoncia", "valor": 120000},
]


@pytest.fixture
def save_budget(client, headers, patient):
    def _save(items=ITEMS, budget_type="odontologico"):
        res = client.post(
            f"/budgets/patient/{patient['id']}",
            json={"budgetType": budget_type, "items": items},
            headers=headers,
        )
        assert res.status_code == 200, res.text
        return res.json()["budget"]

    return _save


def _set_status(client, headers, budget_id, status):
    return client.put(f"/budgets/{budget_id}/status", json={"status": status}, headers=headers)


def test_no_budget_yet(client, headers, patient):
    res = client.get(f"/budgets/patient/{patient['id']}", headers=headers)
    assert res.json() == {"message": None, "budget": None}


def test_save_creates_pending_budget(client, headers, patient):
    res = client.post(
        f"/budgets/patient/{patient['id']}",
        json={"budgetType": "odontologico", "items": ITEMS},
        headers=headers,
    )
    body = res.json()
    assert body["message"] == "Presupuesto guardado exitosamente"
    budget = body["budget"]
    assert budget["status"] == "pendiente"
    assert budget["total_amount"] == 155000
    assert budget["patient_id"] == patient["id"]
    assert [(i["accion"], i["orden"], i["status"]) for i in budget["items"]] == [
        ("Obturación resina", 0, "pending"),
        ("Endodoncia", 1, "pending"),
    ]


def test_save_accepts_form_encoded_items(client, headers, patient):
    res = client.post(
        f"/budgets/patient/{patient['id']}",
        data={"budgetType": "estetica", "items": json.dumps([{"accion": "Botox", "valor": "90000"}])},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["budget"]["budget_type"] == "estetica"


def test_saving_again_replaces_items(save_budget):
    first = save_budget()
    kept = dict(first["items"][0], valor=40000)
    second = save_budget([kept, {"accion": "Limpieza", "valor": 25000}])

    assert second["id"] == first["id"]
    assert second["total_amount"] == 65000
    assert [i["accion"] for i in second["items"]] == ["Obturación resina", "Limpieza"]
    assert second["items"][0]["id"] == first["items"][0]["id"]
    assert second["items"][0]["valor"] == 40000


def test_saving_without_ids_drops_previous_items(save_budget):
    first = save_budget()
    second = save_budget([{"accion": "Limpieza", "valor": 25000}])
    assert second["id"] == first["id"]
    assert len(second["items"]) == 1


def test_invalid_items(client, headers, patient):
    res = client.post(
        f"/budgets/patient/{patient['id']}",
        json={"budgetType": "odontologico", "items": [{"accion": "Limpieza", "valor": 0}]},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Item 1: Valor debe ser mayor a 0"


def test_only_one_active_budget_per_patient(client, headers, save_budget):
    first = save_budget()
    res = _set_status(client, headers, first["id"], "activo")
    assert res.json()["budget"]["status"] == "activo"

    # con el activo fuera de edición, guardar crea un presupuesto nuevo
    second = save_budget([{"accion": "Limpieza", "valor": 25000}])
    assert second["id"] != first["id"]
    assert second["status"] == "pendiente"

    res = _set_status(client, headers, second["id"], "activo")
    assert res.status_code == 400
    assert res.json() == {"message": "El paciente ya tiene un presupuesto activo"}

    res = client.get(f"/budgets/patient/{second['patient_id']}", headers=headers)
    assert res.json()["budget"]["id"] == first["id"]


def test_completing_marks_every_item(client, headers, save_budget):
    budget = save_budget()
    res = _set_status(client, headers, budget["id"], "completed")
    assert {i["status"] for i in res.json()["budget"]["items"]} == {"completed"}


def test_invalid_status(client, headers, save_budget):
    budget = save_budget()
    res = _set_status(client, headers, budget["id"], "pendiente")
    assert res.json()["message"] == "Estado debe ser uno de: borrador, activo, completed"


def test_delete_only_editable(client, headers, save_budget):
    budget = save_budget()
    _set_status(client, headers, budget["id"], "activo")
    res = client.delete(f"/budgets/{budget['id']}", headers=headers)
    assert res.json() == {"message": "Solo se pueden eliminar presupuestos en estado pendiente o borrador"}

    _set_status(client, headers, budget["id"], "borrador")
    res = client.delete(f"/budgets/{budget['id']}", headers=headers)
    assert res.json() == {"message": "Presupuesto eliminado exitosamente"}
    assert client.get(f"/budgets/{budget['id']}", headers=headers).status_code == 404


def test_all_budgets_and_stats(client, headers, patient, save_budget):
    first = save_budget()
    _set_status(client, headers, first["id"], "activo")
    save_budget([{"accion": "Limpieza", "valor": 25000}])

    res = client.get(f"/budgets/patient/{patient['id']}/all", headers=headers)
    assert len(res.json()["budgets"]) == 2

    res = client.get("/budgets/stats", headers=headers)
    assert res.json()["stats"] == {
        "total_budgets": 2,
        "drafts": 1,
        "active": 1,
        "completed": 0,
        "total_amount": 180000.0,
    }


def test_budget_history_is_audited(client, headers, patient, save_budget):
    save_budget()
    res = client.get(
        f"/patients/{patient['id']}/history", params={"entityType": "presupuesto"}, headers=headers
    )
    log = res.json()["logs"][0]
    assert log["action"] == "created"
    assert log["notes"] == "Presupuesto odontologico guardado - Total: $155000"


def test_completing_items_one_by_one(client, headers, patient, save_budget):
    budget = save_budget()
    first, second = (item["id"] for item in budget["items"])
    res = client.post(
        "/treatments",
        json={
            "id_paciente": patient["id"],
            "fecha_control": date.today().isoformat(),
            "hora_control": "09:00",
            "nombre_servicio": "Obturación resina",
            "budget_item_id": first,
        },
        headers=headers,
    )
    assert res.status_code == 201, res.text
    treatment_id = res.json()["treatment"]["id_tratamiento"]

    res = client.put(f"/budgets/items/{first}/complete", headers=headers)
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Item completado exitosamente"
    assert body["budget"]["status"] == "pendiente"
    assert [i["status"] for i in body["budget"]["items"]] == ["completed", "pending"]
    res = client.get(f"/treatments/{treatment_id}", headers=headers)
    assert res.json()["treatment"]["status"] == "completed"

    res = client.put(f"/budgets/items/{second}/complete", headers=headers)
    assert res.json()["budget"]["status"] == "completed"


def test_complete_unknown_item(client, headers):
    res = client.put("/budgets/items/9999/complete", headers=headers)
    assert (res.status_code, res.json()) == (404, {"message": "Item de presupuesto no encontrado"})
