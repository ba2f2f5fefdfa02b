import logging
from typing import Any, Dict, List, Optional

from ..db import Database, now_iso
from ..domain.dtos import SaveBudgetDto
from ..domain.enums import (
    EDITABLE_BUDGET_STATUSES,
    AuditAction,
    AuditEntityType,
    BudgetStatus,
    TreatmentStatus,
)
from ..domain.exceptions import ConflictError, NotFoundError
from .audit import AuditService
from .base import wraps_db_errors

logger = logging.getLogger(__name__)

EDITABLE = tuple(s.value for s in EDITABLE_BUDGET_STATUSES)


class BudgetService:
    """Presupuestos por paciente.

    Un paciente tiene a lo sumo un presupuesto editable (pendiente o borrador)
    y a lo sumo uno activo. Guardar sobre el editable reemplaza sus ítems.
    """

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

    def _with_items(self, budget: Dict[str, Any]) -> Dict[str, Any]:
        budget["items"] = self.db.fetch_all(
            "SELECT * FROM budget_items WHERE budget_id = ? ORDER BY orden, id", (budget["id"],)
        )
        return budget

    def _find(self, budget_id: int, doctor_id: int) -> Dict[str, Any]:
        budget = self.db.fetch_one(
            "SELECT * FROM budgets WHERE id = ? AND user_id = ?", (budget_id, doctor_id)
        )
        if not budget:
            raise NotFoundError("Presupuesto no encontrado")
        return budget

    def _editable(self, patient_id: int, doctor_id: int) -> Optional[Dict[str, Any]]:
        return self.db.fetch_one(
            "SELECT * FROM budgets WHERE patient_id = ? AND user_id = ? AND status IN (?, ?) "
            "ORDER BY id DESC LIMIT 1",
            (patient_id, doctor_id, *EDITABLE),
        )

    @wraps_db_errors("Error al obtener el presupuesto")
    def current(self, patient_id: int, doctor_id: int) -> Optional[Dict[str, Any]]:
        """Presupuesto vigente: el activo si existe, si no el editable más reciente."""
        self._ensure_patient(patient_id, doctor_id)
        budget = self.db.fetch_one(
            "SELECT * FROM budgets WHERE patient_id = ? AND user_id = ? AND status = ?",
            (patient_id, doctor_id, BudgetStatus.ACTIVO.value),
        ) or self._editable(patient_id, doctor_id)
        return self._with_items(budget) if budget else None

    @wraps_db_errors("Error al obtener los presupuestos")
    def all_for_patient(self, patient_id: int, doctor_id: int) -> List[Dict[str, Any]]:
        self._ensure_patient(patient_id, doctor_id)
        budgets = self.db.fetch_all(
            "SELECT * FROM budgets WHERE patient_id = ? AND user_id = ? ORDER BY created_at DESC, id DESC",
            (patient_id, doctor_id),
        )
        return [self._with_items(budget) for budget in budgets]

    @wraps_db_errors("Error al obtener el presupuesto")
    def get(self, budget_id: int, doctor_id: int) -> Dict[str, Any]:
        return self._with_items(self._find(budget_id, doctor_id))

    @wraps_db_errors("Error al guardar el presupuesto")
    def save(self, dto: SaveBudgetDto, doctor_id: int) -> Dict[str, Any]:
        self._ensure_patient(dto.patientId, doctor_id)
        existing = self._editable(dto.patientId, doctor_id)
        now = now_iso()

        with self.db.connect() as conn:
            if existing:
                budget_id = existing["id"]
                self.db.update(
                    "budgets",
                    {"total_amount": dto.total, "budget_type": dto.budgetType, "updated_at": now},
                    "id = ?",
                    (budget_id,),
                    conn=conn,
                )
                kept = [item.id for item in dto.items if item.id is not None]
                sql = "DELETE FROM budget_items WHERE budget_id = ?"
                if kept:
                    sql += f" AND id NOT IN ({', '.join('?' for _ in kept)})"
                conn.execute(sql, (budget_id, *kept))
            else:
                budget_id = self.db.insert(
                    "budgets",
                    {
                        "patient_id": dto.patientId,
                        "user_id": doctor_id,
                        "total_amount": dto.total,
                        "status": BudgetStatus.PENDIENTE.value,
                        "budget_type": dto.budgetType,
                        "created_at": now,
                    },
                    conn=conn,
                )

            for item in dto.items:
                updated = 0
                if existing and item.id is not None:
                    updated = self.db.update(
                        "budget_items", item.as_record(), "id = ? AND budget_id = ?", (item.id, budget_id), conn=conn
                    )
                if not updated:
                    self.db.insert(
                        "budget_items", dict(item.as_record(), budget_id=budget_id, created_at=now), conn=conn
                    )

        budget = self.get(budget_id, doctor_id)
        self.audit.log_change(
            patient_id=dto.patientId,
            entity_type=AuditEntityType.PRESUPUESTO,
            entity_id=budget_id,
            action=AuditAction.UPDATED if existing else AuditAction.CREATED,
            changed_by=doctor_id,
            new_values={
                "total_amount": budget["total_amount"],
                "status": budget["status"],
                "budget_type": budget["budget_type"],
                "items_count": len(dto.items),
            },
            notes=f"Presupuesto {budget['budget_type']} guardado - Total: ${budget['total_amount']:.0f}",
        )
        return budget

    @wraps_db_errors("Error al actualizar el estado del presupuesto")
    def update_status(self, budget_id: int, status: str, doctor_id: int) -> Dict[str, Any]:
        budget = self._find(budget_id, doctor_id)
        if budget["status"] == status:
            return self.get(budget_id, doctor_id)

        now = now_iso()
        with self.db.connect() as conn:
            if status == BudgetStatus.ACTIVO.value:
                other = conn.execute(
                    "SELECT id FROM budgets WHERE patient_id = ? AND status = ? AND id != ?",
                    (budget["patient_id"], BudgetStatus.ACTIVO.value, budget_id),
                ).fetchone()
                if other:
                    raise ConflictError("El paciente ya tiene un presupuesto activo")
            self.db.update("budgets", {"status": status, "updated_at": now}, "id = ?", (budget_id,), conn=conn)
            if status == BudgetStatus.COMPLETED.value:
                self.db.update(
                    "budget_items",
                    {"status": TreatmentStatus.COMPLETED.value},
                    "budget_id = ?",
                    (budget_id,),
                    conn=conn,
                )

        self.audit.log_change(
            patient_id=budget["patient_id"],
            entity_type=AuditEntityType.PRESUPUESTO,
            entity_id=budget_id,
            action=AuditAction.STATUS_CHANGED,
            changed_by=doctor_id,
            old_values={"status": budget["status"]},
            new_values={"status": status},
        )
        return self.get(budget_id, doctor_id)

    @wraps_db_errors("Error al completar el item del presupuesto")
    def complete_item(self, item_id: int, doctor_id: int) -> Dict[str, Any]:
        """Completa el ítem y sus sesiones; si no quedan ítems pendientes, también el presupuesto."""
        item = self.db.fetch_one(
            "SELECT bi.id, bi.budget_id, bi.status, b.patient_id FROM budget_items bi "
            "JOIN budgets b ON b.id = bi.budget_id WHERE bi.id = ? AND b.user_id = ?",
            (item_id, doctor_id),
        )
        if not item:
            raise NotFoundError("Item de presupuesto no encontrado")

        completed = TreatmentStatus.COMPLETED.value
        now = now_iso()
        with self.db.connect() as conn:
            self.db.update(
                "treatments",
                {"status": completed, "updated_at": now},
                "budget_item_id = ? AND is_active = 1",
                (item_id,),
                conn=conn,
            )
            self.db.update("budget_items", {"status": completed}, "id = ?", (item_id,), conn=conn)
            pending = conn.execute(
                "SELECT COUNT(*) FROM budget_items WHERE budget_id = ? AND status != ?",
                (item["budget_id"], completed),
            ).fetchone()[0]
            if not pending:
                self.db.update(
                    "budgets",
                    {"status": BudgetStatus.COMPLETED.value, "updated_at": now},
                    "id = ?",
                    (item["budget_id"],),
                    conn=conn,
                )

        self.audit.log_change(
            patient_id=item["patient_id"],
            entity_type=AuditEntityType.PRESUPUESTO,
            entity_id=item["budget_id"],
            action=AuditAction.UPDATED,
            changed_by=doctor_id,
            old_values={"item_id": item_id, "status": item["status"]},
            new_values={"item_id": item_id, "status": completed},
            notes="Item de presupuesto completado",
        )
        return self.get(item["budget_id"], doctor_id)

    @wraps_db_errors("Error al eliminar el presupuesto")
    def delete(self, budget_id: int, doctor_id: int) -> None:
        budget = self._find(budget_id, doctor_id)
        if budget["status"] not in EDITABLE:
            raise ConflictError("Solo se pueden eliminar presupuestos en estado pendiente o borrador")
        self.db.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))
        self.audit.log_change(
            patient_id=budget["patient_id"],
            entity_type=AuditEntityType.PRESUPUESTO,
            entity_id=budget_id,
            action=AuditAction.DELETED,
            changed_by=doctor_id,
            old_values={"status": budget["status"], "total_amount": budget["total_amount"]},
        )

    @wraps_db_errors("Error al obtener estadísticas de presupuestos")
    def stats(self, doctor_id: int) -> Dict[str, Any]:
        rows = self.db.fetch_all(
            "SELECT status, COUNT(*) AS count, COALESCE(SUM(total_amount), 0) AS total "
            "FROM budgets WHERE user_id = ? GROUP BY status",
            (doctor_id,),
        )
        result = {"total_budgets": 0, "drafts": 0, "active": 0, "completed": 0, "total_amount": 0.0}
        for row in rows:
            result["total_budgets"] += row["count"]
            result["total_amount"] += row["total"]
            if row["status"] in EDITABLE:
                result["drafts"] += row["count"]
            elif row["status"] == BudgetStatus.ACTIVO.value:
                result["active"] = row["count"]
            elif row["status"] == BudgetStatus.COMPLETED.value:
                result["completed"] = row["count"]
        return result
