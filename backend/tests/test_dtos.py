from datetime import date, datetime

import pytest

from consultorio.domain.dtos import (
    AvailabilityQueryDto,
    CreateAppointmentDto,
    CreatePatientDto,
    CreateTreatmentDto,
    LocationDto,
    RegisterUserDto,
    SaveBudgetDto,
    SavePrescriptionDto,
    ServiceDto,
    UpdateAppointmentStatusDto,
    UpdateBudgetStatusDto,
    UpdatePasswordDto,
    UpdatePatientDto,
    UpdateTreatmentDto,
)
from consultorio.domain.exceptions import ValidationError
from consultorio.domain.result import Err, Ok, unwrap

TODAY = date(2024, 6, 1)

PATIENT = {
    "rut": " 17539138-k ",
    "nombres": "Camila",
    "apellidos": "Rojas",
    "fecha_nacimiento": "1990-05-12",
    "telefono": "+56911112222",
    "email": "Camila@Example.COM",
    "direccion": "Av. Siempre Viva 742",
    "ciudad": "Santiago",
    "alergias": "   ",
}


class TestCreatePatientDto:
    def test_valid_patient_is_normalized(self):
        result = CreatePatientDto.create(PATIENT, today=TODAY)
        assert isinstance(result, Ok)
        dto = result.value
        assert dto.rut == "17539138-k"
        assert dto.email == "camila@example.com"
        assert dto.alergias is None

    def test_future_birth_date(self):
        result = CreatePatientDto.create(dict(PATIENT, fecha_nacimiento="2099-01-01"), today=TODAY)
        assert isinstance(result, Err)
        assert result.message == "La fecha de nacimiento no puede ser futura"

    def test_reports_every_violation(self):
        result = CreatePatientDto.create(
            dict(PATIENT, rut="17539138k", email="bad-email", fecha_nacimiento="2023-02-30", ciudad=""),
            today=TODAY,
        )
        assert result.errors == (
            "Ciudad es requerida",
            "Formato de RUT inválido (ej: 12345678-9)",
            "Email no es válido",
            "Formato de fecha inválido (YYYY-MM-DD)",
        )

    def test_missing_fields(self):
        result = CreatePatientDto.create({}, today=TODAY)
        assert result.message == "RUT es requerido"
        assert len(result.errors) == 8

    def test_check_digit_only_when_enabled(self):
        bad_digit = dict(PATIENT, rut="17539138-1")
        assert CreatePatientDto.create(bad_digit, today=TODAY).ok
        result = CreatePatientDto.create(bad_digit, today=TODAY, verify_check_digit=True)
        assert result.message == "El dígito verificador del RUT no es válido"


class TestUpdatePatientDto:
    def test_empty_update_is_a_noop(self):
        result = UpdatePatientDto.create({})
        assert result.ok
        assert result.value.is_empty
        assert result.value.changes() == {}

    def test_bad_email(self):
        assert UpdatePatientDto.create({"email": "bad-email"}).message == "Email no es válido"

    def test_only_present_fields_change(self):
        dto = unwrap(UpdatePatientDto.create({"telefono": " 555 ", "notas_medicas": ""}))
        assert dto.changes() == {"notas_medicas": None, "telefono": "555"}

    def test_blank_required_field(self):
        assert UpdatePatientDto.create({"nombres": "  "}).message == "Nombres no puede estar vacío"


class TestSaveBudgetDto:
    def test_item_value_must_be_positive(self):
        result = SaveBudgetDto.create(
            {"patientId": 5, "budgetType": "odontologico", "items": [{"accion": "limpieza", "valor": 0}]}
        )
        assert result.message == "Item 1: Valor debe ser mayor a 0"

    def test_items_as_json_string(self):
        dto = unwrap(
            SaveBudgetDto.create(
                {
                    "patientId": "5",
                    "budgetType": "estetica",
                    "items": '[{"accion": "botox", "valor": "120000", "pieza": "frente"},'
                    ' {"accion": "control", "valor": 30000, "orden": 7, "id": -3}]',
                }
            )
        )
        assert dto.patientId == 5
        assert dto.total == 150000
        assert [item.orden for item in dto.items] == [0, 7]
        assert dto.items[1].id is None

    @pytest.mark.parametrize(
        "items, message",
        [
            ("not json", "Items debe ser un JSON válido"),
            ({"accion": "x"}, "Items debe ser un array"),
            ([], "Debe incluir al menos un item en el presupuesto"),
            ([{"valor": 10}], "Item 1: Acción/tratamiento es requerido"),
            ([{"accion": "a", "valor": 1}, {"accion": "b", "valor": "abc"}], "Item 2: Valor debe ser un número válido"),
            ([{"accion": "a", "valor": 1, "pieza": 12}], "Item 1: Pieza debe ser texto"),
            ([{"accion": "a", "valor": 1, "orden": "x"}], "Item 1: Orden debe ser un número"),
        ],
    )
    def test_item_errors(self, items, message):
        result = SaveBudgetDto.create({"patientId": 1, "budgetType": "odontologico", "items": items})
        assert message in result.errors

    def test_budget_type(self):
        result = SaveBudgetDto.create({"patientId": 1, "budgetType": "otro", "items": [{"accion": "a", "valor": 1}]})
        assert result.message == "Tipo de presupuesto debe ser 'odontologico' o 'estetica'"


def test_budget_status():
    assert unwrap(UpdateBudgetStatusDto.create({"status": "activo"})).status == "activo"
    assert UpdateBudgetStatusDto.create({}).message == "Estado es requerido"
    assert UpdateBudgetStatusDto.create({"status": "pendiente"}).message.startswith("Estado debe ser uno de")


def test_prescription():
    dto = unwrap(SavePrescriptionDto.create({"patientId": "3", "medications": " Paracetamol 500mg "}))
    assert dto.patientId == 3 and dto.medications == "Paracetamol 500mg"
    assert SavePrescriptionDto.create({"patientId": 3, "medications": "   "}).message == (
        "Las medicaciones no pueden estar vacías"
    )


class TestTreatmentDtos:
    BASE = {
        "id_paciente": 1,
        "fecha_control": "2024-05-30",
        "hora_control": "10:30",
        "nombre_servicio": "Limpieza",
    }

    def test_control_date_not_future(self):
        result = CreateTreatmentDto.create(dict(self.BASE, fecha_control="2024-06-02"), today=TODAY)
        assert result.message == "La fecha de control no puede ser futura"

    def test_next_control_after_control(self):
        result = CreateTreatmentDto.create(dict(self.BASE, fecha_proximo_control="2024-05-30"), today=TODAY)
        assert result.message == "La fecha próximo control debe ser posterior a la fecha de control"
        assert CreateTreatmentDto.create(dict(self.BASE, fecha_proximo_control="2024-07-01"), today=TODAY).ok

    def test_time_format(self):
        result = CreateTreatmentDto.create(dict(self.BASE, hora_control="10h30"), today=TODAY)
        assert result.message == "Formato de hora de control inválido (HH:MM)"

    def test_update_normalizes_seconds_and_clears_photos(self):
        dto = unwrap(UpdateTreatmentDto.create({"hora_control": "09:15:00", "foto1": ""}, today=TODAY))
        assert dto.changes() == {"foto1": None, "hora_control": "09:15"}


class TestAuthDtos:
    def test_register(self):
        dto = unwrap(
            RegisterUserDto.create({"name": "Ana", "lastName": "Pérez", "email": "ANA@x.cl", "password": "123456"})
        )
        assert dto.email == "ana@x.cl"
        result = RegisterUserDto.create({"name": "Ana", "lastName": "P", "email": "ana@x.cl", "password": "123"})
        assert result.message == "Password debe tener al menos 6 caracteres"

    def test_new_password_must_differ(self):
        result = UpdatePasswordDto.create({"currentPassword": "secreto1", "newPassword": "secreto1"})
        assert result.message == "El nuevo password debe ser distinto al actual"


class TestAppointmentDtos:
    def test_defaults(self):
        dto = unwrap(CreateAppointmentDto.create({"date": "2030-01-15 10:30", "guestName": "Invitado"}))
        assert dto.appointmentDate == datetime(2030, 1, 15, 10, 30)
        assert dto.title == "Consulta"
        assert dto.duration == 60
        assert dto.type == "consultation"

    def test_needs_patient_or_guest(self):
        result = CreateAppointmentDto.create({"appointmentDate": "2030-01-15T10:30:00"})
        assert result.message == "Debe indicar un paciente o el nombre del invitado"

    def test_invalid_date(self):
        result = CreateAppointmentDto.create({"appointmentDate": "mañana", "patientId": 1})
        assert result.message == "appointmentDate inválida"

    def test_status(self):
        dto = unwrap(UpdateAppointmentStatusDto.create({"status": "cancelled", "cancellationReason": "viaje"}))
        assert dto.cancellationReason == "viaje"
        assert UpdateAppointmentStatusDto.create({"status": "lost"}).message.startswith("Estado debe ser uno de")

    def test_cancelling_requires_a_reason(self):
        result = UpdateAppointmentStatusDto.create({"status": "cancelled", "cancellationReason": "  "})
        assert result.message == "La razón de cancelación es obligatoria"
        dto = unwrap(UpdateAppointmentStatusDto.create({"status": "cancelled", "reason": "viaje"}))
        assert dto.cancellationReason == "viaje"

    @pytest.mark.parametrize(
        "duration, message",
        [
            ("0", "La duración debe ser un número de minutos mayor a 0"),
            ("1e20", "La duración no puede superar 1440 minutos"),
            (2000, "La duración no puede superar 1440 minutos"),
        ],
    )
    def test_duration_bounds(self, duration, message):
        result = CreateAppointmentDto.create(
            {"appointmentDate": "2030-01-15T10:30:00", "patientId": 1, "duration": duration}
        )
        assert result.message == message
        assert unwrap(AvailabilityQueryDto.create({"date": "2030-01-15T10:00", "duration": "1440"})).duration == 1440

    def test_availability_query(self):
        assert AvailabilityQueryDto.create({}).message == "La fecha es obligatoria"
        assert AvailabilityQueryDto.create({"date": "nope"}).message == "Fecha inválida"
        query = unwrap(AvailabilityQueryDto.create({"date": "2030-01-15T10:00", "duration": "30", "excludeId": "4"}))
        assert (query.duration, query.excludeId) == (30, 4)


def test_catalog_dtos():
    assert LocationDto.create({"name": "Centro"}).errors == ("La dirección es requerida", "La ciudad es requerida")
    assert unwrap(LocationDto.create({"city": "Viña"}, partial=True)).changes() == {"city": "Viña"}
    assert ServiceDto.create({"nombre": "Limpieza", "tipo": "odontologico", "valor": -1}).message == (
        "Valor debe ser mayor a 0"
    )


def test_unwrap_raises_validation_error_with_all_messages():
    with pytest.raises(ValidationError) as excinfo:
        unwrap(Err(("uno", "dos")))
    assert excinfo.value.errors == ("uno", "dos")
    assert excinfo.value.message == "uno"
