from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..enums import AppointmentStatus, AppointmentType
from ..fields import EMAIL_RE, FieldErrors, clean_text, parse_datetime, parse_int
from ..result import Err, Ok, Result
from ..rut import is_valid_rut_format

DEFAULT_DURATION = 60
MAX_DURATION = 1440
DEFAULT_TITLE = "Consulta"
APPOINTMENT_TYPES = tuple(t.value for t in AppointmentType)
APPOINTMENT_STATUSES = tuple(s.value for s in AppointmentStatus)
DATE_KEYS = ("appointmentDate", "date", "start", "startDate")


def _raw_date(data: Mapping[str, Any]) -> Any:
    for key in DATE_KEYS:
        if data.get(key) not in (None, ""):
            return data[key]
    return None


def _check_duration(raw: Any, errors: FieldErrors) -> Optional[int]:
    duration = parse_int(raw)
    if duration is None or duration <= 0:
        errors.add("duration", "La duración debe ser un número de minutos mayor a 0")
        return None
    if duration > MAX_DURATION:
        errors.add("duration", f"La duración no puede superar {MAX_DURATION} minutos")
        return None
    return duration


def _check_type(raw: Any, errors: FieldErrors) -> Optional[str]:
    value = clean_text(raw)
    if value not in APPOINTMENT_TYPES:
        errors.add("type", f"Tipo de cita debe ser uno de: {', '.join(APPOINTMENT_TYPES)}")
        return None
    return value


@dataclass(frozen=True)
class CreateAppointmentDto:
    appointmentDate: datetime
    title: str = DEFAULT_TITLE
    duration: int = DEFAULT_DURATION
    type: str = AppointmentType.CONSULTATION.value
    patientId: Optional[int] = None
    guestName: Optional[str] = None
    guestEmail: Optional[str] = None
    guestPhone: Optional[str] = None
    guestRut: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[CreateAppointmentDto]:
        errors = FieldErrors()

        appointment_date = parse_datetime(_raw_date(data))
        if appointment_date is None:
            errors.add("appointmentDate", "appointmentDate inválida")

        patient_id = None
        if data.get("patientId") not in (None, ""):
            patient_id = parse_int(data.get("patientId"))
            if patient_id is None:
                errors.add("patientId", "ID del paciente debe ser un número")

        guest_name = clean_text(data.get("guestName")) or None
        if patient_id is None and not guest_name and not errors.has("patientId"):
            errors.add("patientId", "Debe indicar un paciente o el nombre del invitado")

        guest_email = clean_text(data.get("guestEmail")) or None
        if guest_email and not EMAIL_RE.match(guest_email):
            errors.add("guestEmail", "Email no es válido")
        guest_rut = clean_text(data.get("guestRut")) or None
        if guest_rut and not is_valid_rut_format(guest_rut):
            errors.add("guestRut", "Formato de RUT inválido (ej: 12345678-9)")

        duration = DEFAULT_DURATION
        if data.get("duration") not in (None, ""):
            duration = _check_duration(data.get("duration"), errors)

        appointment_type = AppointmentType.CONSULTATION.value
        if data.get("type") not in (None, ""):
            appointment_type = _check_type(data.get("type"), errors)

        if errors:
            return Err(tuple(errors.messages))
        return Ok(
            cls(
                appointmentDate=appointment_date,
                title=clean_text(data.get("title")) or DEFAULT_TITLE,
                duration=duration,
                type=appointment_type,
                patientId=patient_id,
                guestName=guest_name,
                guestEmail=guest_email.lower() if guest_email else None,
                guestPhone=clean_text(data.get("guestPhone")) or None,
                guestRut=guest_rut,
                description=clean_text(data.get("description")) or None,
                notes=clean_text(data.get("notes")) or None,
            )
        )


@dataclass(frozen=True)
class UpdateAppointmentDto:
    title: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    duration: Optional[int] = None
    type: Optional[str] = None
    appointmentDate: Optional[datetime] = None
    present: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[UpdateAppointmentDto]:
        errors = FieldErrors()
        values: Dict[str, Any] = {}

        if "title" in data:
            values["title"] = clean_text(data["title"])
            if not values["title"]:
                errors.add("title", "El título no puede estar vacío")
        for name in ("description", "notes"):
            if name in data:
                values[name] = clean_text(data[name]) or None
        if "duration" in data:
            values["duration"] = _check_duration(data["duration"], errors)
        if "type" in data:
            values["type"] = _check_type(data["type"], errors)
        if any(key in data for key in DATE_KEYS):
            values["appointmentDate"] = parse_datetime(_raw_date(data))
            if values["appointmentDate"] is None:
                errors.add("appointmentDate", "appointmentDate inválida")

        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(**values, present=frozenset(values)))

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present)}


@dataclass(frozen=True)
class UpdateAppointmentStatusDto:
    status: str
    cancellationReason: Optional[str] = None

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[UpdateAppointmentStatusDto]:
        status = clean_text(data.get("status"))
        if not status:
            return Err(("Estado es requerido",))
        if status not in APPOINTMENT_STATUSES:
            return Err((f"Estado debe ser uno de: {', '.join(APPOINTMENT_STATUSES)}",))
        reason = clean_text(data.get("cancellationReason") or data.get("reason")) or None
        if status == AppointmentStatus.CANCELLED.value and not reason:
            return Err(("La razón de cancelación es obligatoria",))
        return Ok(cls(status=status, cancellationReason=reason))


@dataclass(frozen=True)
class AvailabilityQueryDto:
    date: datetime
    duration: int = DEFAULT_DURATION
    excludeId: Optional[int] = None

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[AvailabilityQueryDto]:
        errors = FieldErrors()
        if data.get("date") in (None, ""):
            return Err(("La fecha es obligatoria",))
        start = parse_datetime(data.get("date"))
        if start is None:
            errors.add("date", "Fecha inválida")
        duration = DEFAULT_DURATION
        if data.get("duration") not in (None, ""):
            duration = _check_duration(data.get("duration"), errors)
        exclude_id = None
        if data.get("excludeId") not in (None, ""):
            exclude_id = parse_int(data.get("excludeId"))
            if exclude_id is None:
                errors.add("excludeId", "excludeId debe ser un número")
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(date=start, duration=duration, excludeId=exclude_id))
