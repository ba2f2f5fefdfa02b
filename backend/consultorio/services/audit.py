import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional

from ..db import Database, now_iso
from ..domain.enums import AuditAction, AuditEntityType
from ..domain.exceptions import NotFoundError
from .base import wraps_db_errors

logger = logging.getLogger(__name__)


def _dump(values: Optional[Dict[str, Any]]) -> Optional[str]:
    return json.dumps(values, default=str, ensure_ascii=False) if values else None


def _load(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    return json.loads(raw) if raw else None


class AuditService:
    """Historial de cambios clínicos por paciente."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def log_change(
        self,
        *,
        patient_id: int,
        entity_type: AuditEntityType,
        entity_id: int,
        action: AuditAction,
        changed_by: int,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        notes: Optional[str] = None,
    ) -> None:
        # un fallo de auditoría no debe bloquear la operación principal
        try:
            self.db.insert(
                "audit_logs",
                {
                    "patient_id": patient_id,
                    "entity_type": entity_type.value,
                    "entity_id": entity_id,
                    "action": action.value,
                    "old_values": _dump(old_values),
                    "new_values": _dump(new_values),
                    "changed_by": changed_by,
                    "notes": notes,
                    "created_at": now_iso(),
                },
            )
        except sqlite3.Error:
            logger.exception("Error al registrar cambio en auditoría (%s %s)", entity_type.value, entity_id)

    @wraps_db_errors("Error al obtener el historial del paciente")
    def patient_history(
        self,
        patient_id: int,
        doctor_id: int,
        entity_type: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        owner = self.db.fetch_one(
            "SELECT id FROM patients WHERE id = ? AND id_doctor = ?", (patient_id, doctor_id)
        )
        if not owner:
            raise NotFoundError("Paciente no encontrado")

        sql = "SELECT * FROM audit_logs WHERE patient_id = ?"
        params: List[Any] = [patient_id]
        if entity_type:
            sql += " AND entity_type = ?"
            params.append(entity_type)
        sql += " ORDER BY created_at DESC, id DESC LIMIT ?"
        params.append(limit)

        logs = self.db.fetch_all(sql, params)
        for log in logs:
            log["old_values"] = _load(log["old_values"])
            log["new_values"] = _load(log["new_values"])
        return logs
