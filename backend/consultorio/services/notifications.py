from typing import Any, Dict, List, Optional

from ..db import Database, now_iso
from ..domain.enums import NotificationType
from ..domain.exceptions import NotFoundError
from .base import wraps_db_errors


def _present(row: Dict[str, Any]) -> Dict[str, Any]:
    row["is_read"] = bool(row["is_read"])
    return row


class NotificationService:
    """Avisos internos para el doctor (confirmaciones y cancelaciones de citas)."""

    def __init__(self, db: Database) -> None:
        self.db = db

    @wraps_db_errors("Error al crear la notificación")
    def create(
        self,
        doctor_id: int,
        type: NotificationType,
        title: str,
        message: str,
        appointment_id: Optional[int] = None,
        patient_name: Optional[str] = None,
        appointment_date: Optional[str] = None,
    ) -> int:
        now = now_iso()
        return self.db.insert(
            "notifications",
            {
                "type": type.value,
                "doctor_id": doctor_id,
                "appointment_id": appointment_id,
                "title": title,
                "message": message,
                "patient_name": patient_name,
                "appointment_date": appointment_date,
                "created_at": now,
                "updated_at": now,
            },
        )

    @wraps_db_errors("Error al obtener las notificaciones")
    def list(self, doctor_id: int, unread_only: bool = False, limit: int = 50) -> List[Dict[str, Any]]:
        sql = "SELECT * FROM notifications WHERE doctor_id = ?"
        if unread_only:
            sql += " AND is_read = 0"
        sql += " ORDER BY created_at DESC, id DESC LIMIT ?"
        return [_present(row) for row in self.db.fetch_all(sql, (doctor_id, limit))]

    @wraps_db_errors("Error al contar las notificaciones")
    def unread_count(self, doctor_id: int) -> int:
        row = self.db.fetch_one(
            "SELECT COUNT(*) AS total FROM notifications WHERE doctor_id = ? AND is_read = 0", (doctor_id,)
        )
        return row["total"]

    @wraps_db_errors("Error al marcar la notificación")
    def mark_read(self, notification_id: int, doctor_id: int) -> None:
        now = now_iso()
        updated = self.db.update(
            "notifications",
            {"is_read": 1, "read_at": now, "updated_at": now},
            "id = ? AND doctor_id = ?",
            (notification_id, doctor_id),
        )
        if not updated:
            raise NotFoundError("Notificación no encontrada")

    @wraps_db_errors("Error al marcar las notificaciones")
    def mark_all_read(self, doctor_id: int) -> int:
        now = now_iso()
        return self.db.update(
            "notifications",
            {"is_read": 1, "read_at": now, "updated_at": now},
            "doctor_id = ? AND is_read = 0",
            (doctor_id,),
        )
