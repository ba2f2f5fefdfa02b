import logging
from typing import Any, Dict, List

from ..db import Database, now_iso
from ..domain.dtos import CreateTreatmentDto, UpdateTreatmentDto
from ..domain.enums import AuditAction, AuditEntityType, TreatmentStatus
from ..domain.exceptions import ConflictError, NotFoundError, ValidationError
from ..domain.fields import normalize_time
from .audit import AuditService
from .base import wraps_db_errors

logger = logging.getLogger(__name__)


def _normalize(treatment: Dict[str, Any]) -> Dict[str, Any]:
    treatment["hora_control"] = normalize_time(treatment["hora_control"])
    if treatment.get("hora_proximo_control"):
        treatment["hora_proximo_control"] = normalize_time(treatment["hora_proximo_control"])
    return treatment


class TreatmentService:
    def __init__(self, db: Database, audit: AuditService) -> None:
        self.db = db
        self.audit = audit

    def _ensure_patient(self, patient_id: int, doctor_id: int) -> None:
        row = self.db.fetch_one(
            "SELECT id FROM patients WHERE id = ? AND id_doctor = ? AND isactive = 1",
            (patient_id, doctor_id),
        )
        if not row:
            raise NotFoundError("Paciente no encontrado")

    @wraps_db_errors("Error al obtener los tratamientos")
    def list_for_patient(self, patient_id: int, doctor_id: int) -> List[Dict[str, Any]]:
        rows = self.db.fetch_all(
            "SELECT * FROM treatments WHERE id_paciente = ? AND id_doctor = ? AND is_active = 1 "
            "ORDER BY fecha_control DESC, hora_control DESC",
            (patient_id, doctor_id),
        )
        return [_normalize(row) for row in rows]

    @wraps_db_errors("Error al obtener el tratamiento")
    def get(self, treatment_id: int, doctor_id: int) -> Dict[str, Any]:
        row = self.db.fetch_one(
            "SELECT * FROM treatments WHERE id_tratamiento = ? AND id_doctor = ? AND is_active = 1",
            (treatment_id, doctor_id),
        )
        if not row:
            raise NotFoundError("Tratamiento no encontrado")
        return _normalize(row)

    @wraps_db_errors("Error al crear el tratamiento")
    def create(self, dto: CreateTreatmentDto, doctor_id: int) -> Dict[str, Any]:
        self._ensure_patient(dto.id_paciente, doctor_id)
        if dto.budget_item_id is not None:
            item = self.db.fetch_one(
                "SELECT bi.id FROM budget_items bi JOIN budgets b ON b.id = bi.budget_id "
                "WHERE bi.id = ? AND b.patient_id = ? AND b.user_id = ?",
                (dto.budget_item_id, dto.id_paciente, doctor_id),
            )
            if not item:
                raise NotFoundError("Item de presupuesto no encontrado")

        record = dto.as_record()
        record.update({"id_doctor": doctor_id, "created_at": now_iso()})
        treatment_id = self.db.insert("treatments", record)

        self.audit.log_change(
            patient_id=dto.id_paciente,
            entity_type=AuditEntityType.TRATAMIENTO,
            entity_id=treatment_id,
            action=AuditAction.CREATED,
            changed_by=doctor_id,
            new_values={
                "nombre_servicio": dto.nombre_servicio,
                "fecha_control": dto.fecha_control,
                "hora_control": dto.hora_control,
            },
            notes=f"Tratamiento {dto.nombre_servicio} creado",
        )
        return self.get(treatment_id, doctor_id)

    @wraps_db_errors("Error al actualizar el tratamiento")
    def update(self, treatment_id: int, dto: UpdateTreatmentDto, doctor_id: int) -> Dict[str, Any]:
        current = self.get(treatment_id, doctor_id)
        changes = dto.changes()
        if not changes:
            return current

        merged = dict(current, **changes)
        if merged["fecha_proximo_control"] and merged["fecha_proximo_control"] <= merged["fecha_control"]:
            raise ValidationError(["La fecha próximo control debe ser posterior a la fecha de control"])

        self.db.update(
            "treatments", dict(changes, updated_at=now_iso()), "id_tratamiento = ?", (treatment_id,)
        )
        self.audit.log_change(
            patient_id=current["id_paciente"],
            entity_type=AuditEntityType.TRATAMIENTO,
            entity_id=treatment_id,
            action=AuditAction.UPDATED,
            changed_by=doctor_id,
            old_values={key: current[key] for key in changes},
            new_values=changes,
        )
        return self.get(treatment_id, doctor_id)

    @wraps_db_errors("Error al completar el tratamiento")
    def complete(self, treatment_id: int, doctor_id: int) -> Dict[str, Any]:
        current = self.get(treatment_id, doctor_id)
        if current["status"] == TreatmentStatus.COMPLETED.value:
            raise ConflictError("El tratamiento ya está completado")

        with self.db.connect() as conn:
            self.db.update(
                "treatments",
                {"status": TreatmentStatus.COMPLETED.value, "updated_at": now_iso()},
                "id_tratamiento = ?",
                (treatment_id,),
                conn=conn,
            )
            if current["budget_item_id"]:
                self.db.update(
                    "budget_items",
                    {"status": TreatmentStatus.COMPLETED.value},
                    "id = ?",
                    (current["budget_item_id"],),
                    conn=conn,
                )

        self.audit.log_change(
            patient_id=current["id_paciente"],
            entity_type=AuditEntityType.TRATAMIENTO,
            entity_id=treatment_id,
            action=AuditAction.STATUS_CHANGED,
            changed_by=doctor_id,
            old_values={"status": current["status"]},
            new_values={"status": TreatmentStatus.COMPLETED.value},
            notes="Tratamiento completado",
        )
        return self.get(treatment_id, doctor_id)

    @wraps_db_errors("Error al eliminar el tratamiento")
    def delete(self, treatment_id: int, doctor_id: int) -> None:
        current = self.get(treatment_id, doctor_id)
        self.db.update(
            "treatments", {"is_active": 0, "updated_at": now_iso()}, "id_tratamiento = ?", (treatment_id,)
        )
        self.audit.log_change(
            patient_id=current["id_paciente"],
            entity_type=AuditEntityType.TRATAMIENTO,
            entity_id=treatment_id,
            action=AuditAction.DELETED,
            changed_by=doctor_id,
            old_values={"nombre_servicio": current["nombre_servicio"]},
        )
