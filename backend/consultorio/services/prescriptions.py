from typing import Any, Dict, List

from ..db import Database, now_iso
from ..domain.dtos import SavePrescriptionDto
from ..domain.enums import AuditAction, AuditEntityType
from ..domain.exceptions import NotFoundError
from .audit import AuditService
from .base import wraps_db_errors


class PrescriptionService:
    def __init__(self, db: Database, audit: AuditService) -> None:
        self.db = db
        self.audit = audit

    @wraps_db_errors("Error al obtener las recetas")
    def list_for_patient(self, patient_id: int, doctor_id: int) -> List[Dict[str, Any]]:
        return self.db.fetch_all(
            "SELECT * FROM prescriptions WHERE patient_id = ? AND user_id = ? ORDER BY created_at DESC, id DESC",
            (patient_id, doctor_id),
        )

    @wraps_db_errors("Error al guardar la receta")
    def create(self, dto: SavePrescriptionDto, doctor_id: int) -> Dict[str, Any]:
        patient = self.db.fetch_one(
            "SELECT id FROM patients WHERE id = ? AND id_doctor = ? AND isactive = 1",
            (dto.patientId, doctor_id),
        )
        if not patient:
            raise NotFoundError("Paciente no encontrado")

        prescription_id = self.db.insert(
            "prescriptions",
            {
                "patient_id": dto.patientId,
                "user_id": doctor_id,
                "medications": dto.medications,
                "created_at": now_iso(),
            },
        )
        self.audit.log_change(
            patient_id=dto.patientId,
            entity_type=AuditEntityType.RECETA,
            entity_id=prescription_id,
            action=AuditAction.CREATED,
            changed_by=doctor_id,
            new_values={"medications": dto.medications},
        )
        return self.db.fetch_one("SELECT * FROM prescriptions WHERE id = ?", (prescription_id,))

    @wraps_db_errors("Error al eliminar la receta")
    def delete(self, prescription_id: int, doctor_id: int) -> None:
        prescription = self.db.fetch_one(
            "SELECT * FROM prescriptions WHERE id = ? AND user_id = ?", (prescription_id, doctor_id)
        )
        if not prescription:
            raise NotFoundError("Receta no encontrada")
        self.db.execute("DELETE FROM prescriptions WHERE id = ?", (prescription_id,))
        self.audit.log_change(
            patient_id=prescription["patient_id"],
            entity_type=AuditEntityType.RECETA,
            entity_id=prescription_id,
            action=AuditAction.DELETED,
            changed_by=doctor_id,
            old_values={"medications": prescription["medications"]},
        )
