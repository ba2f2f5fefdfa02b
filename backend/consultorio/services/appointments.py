import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..db import Database, now_iso
from ..domain.dtos import (
    AvailabilityQueryDto,
    CreateAppointmentDto,
    UpdateAppointmentDto,
    UpdateAppointmentStatusDto,
)
from ..domain.enums import AppointmentStatus, AuditAction, AuditEntityType, NotificationType
from ..domain.exceptions import ConflictError, DomainError, NotFoundError, ServiceError, ValidationError
from ..security import new_token
from .audit import AuditService
from .base import wraps_db_errors
from .notifications import NotificationService

logger = logging.getLogger(__name__)

UNAVAILABLE = "El horario seleccionado no está disponible"
OUT_OF_RANGE = "La cita termina fuera del rango de fechas permitido"

SELECT_WITH_PATIENT = (
    "SELECT a.*, p.nombres AS patient_nombres, p.apellidos AS patient_apellidos, "
    "p.email AS patient_email, p.telefono AS patient_telefono "
    "FROM appointments a LEFT JOIN patients p ON p.id = a.patient_id"
)


def _stamp(value: datetime) -> str:
    return value.isoformat(timespec="seconds")


def _add_minutes(start: datetime, minutes: int) -> datetime:
    try:
        return start + timedelta(minutes=minutes)
    except OverflowError:
        raise ValidationError([OUT_OF_RANGE]) from None


def _end(appointment: Dict[str, Any]) -> datetime:
    return _add_minutes(datetime.fromisoformat(appointment["appointment_date"]), appointment["duration"] or 60)


def _present(row: Dict[str, Any]) -> Dict[str, Any]:
    nombres = row.pop("patient_nombres", None)
    apellidos = row.pop("patient_apellidos", None)
    if nombres:
        row["patientName"] = f"{nombres} {apellidos or ''}".strip()
    else:
        row["patientName"] = row.get("guest_name") or "Paciente sin nombre"
    row["patientEmail"] = row.pop("patient_email", None) or row.get("guest_email")
    row["patientPhone"] = row.pop("patient_telefono", None) or row.get("guest_phone")
    row["reminder_sent"] = bool(row["reminder_sent"])
    return row


class AppointmentService:
    """Agenda del doctor.

    Dos citas chocan cuando sus intervalos `[inicio, inicio + duración)` se
    superponen; las citas canceladas no ocupan horario.
    """

    def __init__(
        self,
        db: Database,
        audit: AuditService,
        notifications: NotificationService,
        frontend_url: str = "",
    ) -> None:
        self.db = db
        self.audit = audit
        self.notifications = notifications
        self.frontend_url = frontend_url.rstrip("/")

    def _find(self, appointment_id: int, doctor_id: int) -> Dict[str, Any]:
        row = self.db.fetch_one(
            SELECT_WITH_PATIENT + " WHERE a.id = ? AND a.doctor_id = ?", (appointment_id, doctor_id)
        )
        if not row:
            raise NotFoundError("Cita no encontrada")
        return _present(row)

    def _by_token(self, token: str) -> Dict[str, Any]:
        row = self.db.fetch_one(SELECT_WITH_PATIENT + " WHERE a.confirmation_token = ?", (token,)) if token else None
        if not row:
            raise NotFoundError("Cita no encontrada o token inválido")
        return _present(row)

    def _conflicts(
        self, doctor_id: int, start: datetime, duration: int, exclude_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        end = _add_minutes(start, duration)
        # solo citas que empiezan antes del fin pueden chocar
        candidates = self.db.fetch_all(
            SELECT_WITH_PATIENT + " WHERE a.doctor_id = ? AND a.status != ? AND a.appointment_date < ?",
            (doctor_id, AppointmentStatus.CANCELLED.value, _stamp(end)),
        )
        conflicts = []
        for c in candidates:
            if exclude_id is not None and c["id"] == exclude_id:
                continue
            c_start = datetime.fromisoformat(c["appointment_date"])
            if not (end <= c_start or _end(c) <= start):
                conflicts.append(_present(c))
        return conflicts

    @wraps_db_errors("Error al buscar las citas del doctor")
    def list(
        self, doctor_id: int, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        sql = SELECT_WITH_PATIENT + " WHERE a.doctor_id = ?"
        params: List[Any] = [doctor_id]
        if start is not None:
            sql += " AND a.appointment_date >= ?"
            params.append(_stamp(start))
        if end is not None:
            sql += " AND a.appointment_date <= ?"
            params.append(_stamp(end))
        sql += " ORDER BY a.appointment_date"
        return [_present(row) for row in self.db.fetch_all(sql, params)]

    @wraps_db_errors("Error al buscar la cita")
    def get(self, appointment_id: int, doctor_id: int) -> Dict[str, Any]:
        return self._find(appointment_id, doctor_id)

    @wraps_db_errors("Error al verificar disponibilidad")
    def check_availability(self, doctor_id: int, query: AvailabilityQueryDto) -> Dict[str, Any]:
        conflicts = self._conflicts(doctor_id, query.date, query.duration, query.excludeId)
        return {
            "available": not conflicts,
            "conflictingAppointments": [
                {
                    "id": c["id"],
                    "title": c["title"],
                    "appointmentDate": c["appointment_date"],
                    "duration": c["duration"] or 60,
                    "patientName": c["patientName"],
                    "status": c["status"] or AppointmentStatus.PENDING.value,
                }
                for c in conflicts
            ],
        }

    @wraps_db_errors("Error al crear la cita")
    def create(self, dto: CreateAppointmentDto, doctor_id: int) -> Dict[str, Any]:
        if dto.patientId is not None:
            patient = self.db.fetch_one(
                "SELECT id FROM patients WHERE id = ? AND id_doctor = ? AND isactive = 1",
                (dto.patientId, doctor_id),
            )
            if not patient:
                raise NotFoundError("Paciente no encontrado")
        if self._conflicts(doctor_id, dto.appointmentDate, dto.duration):
            raise ConflictError(UNAVAILABLE)

        token = new_token()
        appointment_id = self.db.insert(
            "appointments",
            {
                "doctor_id": doctor_id,
                "patient_id": dto.patientId,
                "guest_name": dto.guestName,
                "guest_email": dto.guestEmail,
                "guest_phone": dto.guestPhone,
                "guest_rut": dto.guestRut,
                "title": dto.title,
                "description": dto.description,
                "appointment_date": _stamp(dto.appointmentDate),
                "duration": dto.duration,
                "type": dto.type,
                "notes": dto.notes,
                "confirmation_token": token,
                "created_at": now_iso(),
            },
        )
        logger.info(
            "Cita %s creada; confirmar en %s/appointments/confirm/%s", appointment_id, self.frontend_url, token
        )
        if dto.patientId is not None:
            self.audit.log_change(
                patient_id=dto.patientId,
                entity_type=AuditEntityType.CITA,
                entity_id=appointment_id,
                action=AuditAction.CREATED,
                changed_by=doctor_id,
                new_values={"title": dto.title, "appointment_date": _stamp(dto.appointmentDate)},
            )
        return self._find(appointment_id, doctor_id)

    @wraps_db_errors("Error al actualizar la cita")
    def update(self, appointment_id: int, dto: UpdateAppointmentDto, doctor_id: int) -> Dict[str, Any]:
        current = self._find(appointment_id, doctor_id)
        changes = dto.changes()
        if not changes:
            return current

        if "appointmentDate" in changes or "duration" in changes:
            start = changes.pop("appointmentDate", None) or datetime.fromisoformat(current["appointment_date"])
            duration = changes.get("duration") or current["duration"]
            if current["status"] != AppointmentStatus.CANCELLED.value and self._conflicts(
                doctor_id, start, duration, exclude_id=appointment_id
            ):
                raise ConflictError(UNAVAILABLE)
            changes["appointment_date"] = _stamp(start)

        self.db.update("appointments", dict(changes, updated_at=now_iso()), "id = ?", (appointment_id,))
        if current["patient_id"]:
            self.audit.log_change(
                patient_id=current["patient_id"],
                entity_type=AuditEntityType.CITA,
                entity_id=appointment_id,
                action=AuditAction.UPDATED,
                changed_by=doctor_id,
                old_values={key: current.get(key) for key in changes},
                new_values=changes,
            )
        return self._find(appointment_id, doctor_id)

    @wraps_db_errors("Error al actualizar el estado de la cita")
    def update_status(
        self, appointment_id: int, dto: UpdateAppointmentStatusDto, doctor_id: int
    ) -> Dict[str, Any]:
        current = self._find(appointment_id, doctor_id)
        values: Dict[str, Any] = {"status": dto.status, "updated_at": now_iso()}
        if dto.status == AppointmentStatus.CONFIRMED.value:
            values["confirmed_at"] = now_iso()
        if dto.status == AppointmentStatus.CANCELLED.value:
            values["cancellation_reason"] = dto.cancellationReason
        self.db.update("appointments", values, "id = ?", (appointment_id,))

        if current["patient_id"]:
            self.audit.log_change(
                patient_id=current["patient_id"],
                entity_type=AuditEntityType.CITA,
                entity_id=appointment_id,
                action=AuditAction.STATUS_CHANGED,
                changed_by=doctor_id,
                old_values={"status": current["status"]},
                new_values={"status": dto.status},
                notes=dto.cancellationReason,
            )
        return self._find(appointment_id, doctor_id)

    @wraps_db_errors("Error al eliminar la cita")
    def delete(self, appointment_id: int, doctor_id: int) -> None:
        current = self._find(appointment_id, doctor_id)
        self.db.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))
        if current["patient_id"]:
            self.audit.log_change(
                patient_id=current["patient_id"],
                entity_type=AuditEntityType.CITA,
                entity_id=appointment_id,
                action=AuditAction.DELETED,
                changed_by=doctor_id,
                old_values={"title": current["title"], "appointment_date": current["appointment_date"]},
            )

    def _notify_doctor(self, appointment: Dict[str, Any], type: NotificationType, title: str, message: str) -> None:
        # la confirmación o cancelación del paciente no depende del aviso
        try:
            self.notifications.create(
                appointment["doctor_id"],
                type,
                title,
                message,
                appointment_id=appointment["id"],
                patient_name=appointment["patientName"],
                appointment_date=appointment["appointment_date"],
            )
        except ServiceError:
            logger.warning("No se pudo notificar al doctor sobre la cita %s", appointment["id"])

    @staticmethod
    def _public(appointment: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": appointment["id"],
            "title": appointment["title"],
            "appointmentDate": appointment["appointment_date"],
            "status": appointment["status"],
            "confirmedAt": appointment["confirmed_at"],
        }

    @wraps_db_errors("Error al confirmar la cita")
    def confirm_by_token(self, token: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        appointment = self._by_token(token)
        if appointment["status"] == AppointmentStatus.CONFIRMED.value:
            return {"message": "La cita ya estaba confirmada", "appointment": self._public(appointment)}
        if appointment["status"] == AppointmentStatus.CANCELLED.value:
            raise DomainError("No se puede confirmar una cita cancelada")
        if datetime.fromisoformat(appointment["appointment_date"]) < (now or datetime.now()):
            raise DomainError("No se puede confirmar una cita que ya pasó")

        stamp = now_iso()
        self.db.update(
            "appointments",
            {"status": AppointmentStatus.CONFIRMED.value, "confirmed_at": stamp, "updated_at": stamp},
            "id = ?",
            (appointment["id"],),
        )
        appointment.update(status=AppointmentStatus.CONFIRMED.value, confirmed_at=stamp)
        self._notify_doctor(
            appointment,
            NotificationType.APPOINTMENT_CONFIRMED,
            "Cita confirmada",
            f"{appointment['patientName']} confirmó su cita \"{appointment['title']}\"",
        )
        return {"message": "Cita confirmada exitosamente", "appointment": self._public(appointment)}

    @wraps_db_errors("Error al cancelar la cita")
    def cancel_by_token(
        self, token: str, reason: Optional[str] = None, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        appointment = self._by_token(token)
        if appointment["status"] == AppointmentStatus.CANCELLED.value:
            return {"message": "La cita ya estaba cancelada", "appointment": self._public(appointment)}
        if datetime.fromisoformat(appointment["appointment_date"]) < (now or datetime.now()):
            raise DomainError("No se puede cancelar una cita que ya pasó")
        if appointment["status"] == AppointmentStatus.COMPLETED.value:
            raise DomainError("No se puede cancelar una cita que ya fue completada")

        reason = reason or "Cancelada por el paciente"
        self.db.update(
            "appointments",
            {
                "status": AppointmentStatus.CANCELLED.value,
                "cancellation_reason": reason,
                "updated_at": now_iso(),
            },
            "id = ?",
            (appointment["id"],),
        )
        appointment["status"] = AppointmentStatus.CANCELLED.value
        self._notify_doctor(
            appointment,
            NotificationType.APPOINTMENT_CANCELLED,
            "Cita cancelada",
            f"{appointment['patientName']} canceló su cita \"{appointment['title']}\": {reason}",
        )
        return {"message": "Cita cancelada exitosamente", "appointment": self._public(appointment)}
