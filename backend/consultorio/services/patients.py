import logging
from typing import Any, Dict, List, Optional

from ..db import Database, now_iso
from ..domain.dtos import CreatePatientDto, UpdatePatientDto
from ..domain.enums import AuditAction, AuditEntityType
from ..domain.exceptions import ConflictError, NotFoundError
from .audit import AuditService
from .base import wraps_db_errors

logger = logging.getLogger(__name__)

DUPLICATE_RUT = "Ya existe un paciente con este RUT"


class PatientService:
    """Fichas de pacientes. Cada paciente pertenece a un único doctor."""

    def __init__(self, db: Database, audit: AuditService) -> None:
        self.db = db
        self.audit = audit

    def _find(self, patient_id: int, doctor_id: int) -> Optional[Dict[str, Any]]:
        return self.db.fetch_one(
            "SELECT * FROM patients WHERE id = ? AND id_doctor = ? AND isactive = 1",
            (patient_id, doctor_id),
        )

    def _rut_taken(self, rut: str, doctor_id: int, exclude_id: Optional[int] = None) -> bool:
        row = self.db.fetch_one(
            "SELECT id FROM patients WHERE rut = ? AND id_doctor = ? AND isactive = 1 AND id != ?",
            (rut, doctor_id, exclude_id or 0),
        )
        return row is not None

    @wraps_db_errors("Error al obtener los pacientes")
    def list(self, doctor_id: int, search_term: Optional[str] = None) -> Dict[str, Any]:
        sql = "SELECT * FROM patients WHERE id_doctor = ? AND isactive = 1"
        params: List[Any] = [doctor_id]
        term = (search_term or "").strip()
        if term:
            sql += " AND (nombres LIKE ? OR apellidos LIKE ? OR rut LIKE ? OR (nombres || ' ' || apellidos) LIKE ?)"
            like = f"%{term}%"
            params.extend([like, like, like, like])
        sql += " ORDER BY apellidos, nombres"
        patients = self.db.fetch_all(sql, params)
        return {"patients": patients, "total": len(patients), "searchTerm": search_term or None}

    @wraps_db_errors("Error al obtener el paciente")
    def get(self, patient_id: int, doctor_id: int) -> Dict[str, Any]:
        patient = self._find(patient_id, doctor_id)
        if not patient:
            raise NotFoundError("Paciente no encontrado")
        return patient

    @wraps_db_errors("Error al crear el paciente")
    def create(self, dto: CreatePatientDto, doctor_id: int) -> Dict[str, Any]:
        if self._rut_taken(dto.rut, doctor_id):
            raise ConflictError(DUPLICATE_RUT)
        record = dto.as_record()
        record.update({"id_doctor": doctor_id, "createdat": now_iso()})
        patient_id = self.db.insert("patients", record)
        logger.info("Paciente %s creado por doctor %s", patient_id, doctor_id)

        self.audit.log_change(
            patient_id=patient_id,
            entity_type=AuditEntityType.PACIENTE,
            entity_id=patient_id,
            action=AuditAction.CREATED,
            changed_by=doctor_id,
            new_values=dto.as_record(),
            notes=f"Paciente {dto.nombres} {dto.apellidos} creado",
        )
        return self.get(patient_id, doctor_id)

    @wraps_db_errors("Error al actualizar el paciente")
    def update(self, patient_id: int, dto: UpdatePatientDto, doctor_id: int) -> Dict[str, Any]:
        current = self.get(patient_id, doctor_id)
        changes = dto.changes()
        if not changes:
            return current
        if changes.get("rut") and changes["rut"] != current["rut"]:
            if self._rut_taken(changes["rut"], doctor_id, exclude_id=patient_id):
                raise ConflictError(DUPLICATE_RUT)

        self.db.update("patients", dict(changes, updatedat=now_iso()), "id = ?", (patient_id,))
        self.audit.log_change(
            patient_id=patient_id,
            entity_type=AuditEntityType.PACIENTE,
            entity_id=patient_id,
            action=AuditAction.UPDATED,
            changed_by=doctor_id,
            old_values={key: current[key] for key in changes},
            new_values=changes,
        )
        return self.get(patient_id, doctor_id)

    @wraps_db_errors("Error al eliminar el paciente")
    def delete(self, patient_id: int, doctor_id: int) -> None:
        self.get(patient_id, doctor_id)
        self.db.update(
            "patients", {"isactive": 0, "updatedat": now_iso()}, "id = ?", (patient_id,)
        )
        self.audit.log_change(
            patient_id=patient_id,
            entity_type=AuditEntityType.PACIENTE,
            entity_id=patient_id,
            action=AuditAction.DELETED,
            changed_by=doctor_id,
        )
