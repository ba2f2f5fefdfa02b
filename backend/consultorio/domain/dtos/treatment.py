from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..fields import TIME_RE, FieldErrors, clean_text, normalize_time, parse_int, parse_iso_date
from ..result import Err, Ok, Result

TEXT_FIELDS = ("producto", "lote_producto", "dilucion", "descripcion")
PHOTO_FIELDS = ("foto1", "foto2")


def _check_date(value: Optional[str], key: str, message: str, errors: FieldErrors) -> Optional[date]:
    if not value:
        return None
    parsed = parse_iso_date(value)
    if parsed is None:
        errors.add(key, message)
    return parsed


def _check_time(value: Optional[str], key: str, message: str, errors: FieldErrors) -> None:
    if value and not TIME_RE.match(value):
        errors.add(key, message)


def _check_control_date(parsed: Optional[date], today: date, errors: FieldErrors) -> None:
    if parsed is not None and parsed > today:
        errors.add("fecha_control", "La fecha de control no puede ser futura")


@dataclass(frozen=True)
class CreateTreatmentDto:
    id_paciente: int
    fecha_control: str
    hora_control: str
    nombre_servicio: str
    fecha_proximo_control: Optional[str] = None
    hora_proximo_control: Optional[str] = None
    producto: Optional[str] = None
    lote_producto: Optional[str] = None
    fecha_venc_producto: Optional[str] = None
    dilucion: Optional[str] = None
    foto1: Optional[str] = None
    foto2: Optional[str] = None
    descripcion: Optional[str] = None
    budget_item_id: Optional[int] = None

    @classmethod
    def create(cls, data: Mapping[str, Any], today: Optional[date] = None) -> Result[CreateTreatmentDto]:
        errors = FieldErrors()
        today = today or date.today()

        raw_patient = data.get("id_paciente")
        patient_id = None
        if raw_patient in (None, "", 0):
            errors.add("id_paciente", "ID del paciente es requerido")
        else:
            patient_id = parse_int(raw_patient)
            if patient_id is None:
                errors.add("id_paciente", "ID del paciente debe ser un número")

        fecha_control = clean_text(data.get("fecha_control"))
        hora_control = clean_text(data.get("hora_control"))
        nombre_servicio = clean_text(data.get("nombre_servicio"))
        if not fecha_control:
            errors.add("fecha_control", "Fecha de control es requerida")
        if not hora_control:
            errors.add("hora_control", "Hora de control es requerida")
        if not nombre_servicio:
            errors.add("nombre_servicio", "Nombre del servicio es requerido")

        control = _check_date(
            fecha_control, "fecha_control", "Formato de fecha de control inválido (YYYY-MM-DD)", errors
        )
        _check_time(hora_control, "hora_control", "Formato de hora de control inválido (HH:MM)", errors)

        fecha_proximo = clean_text(data.get("fecha_proximo_control")) or None
        hora_proximo = clean_text(data.get("hora_proximo_control")) or None
        fecha_venc = clean_text(data.get("fecha_venc_producto")) or None
        proximo = _check_date(
            fecha_proximo,
            "fecha_proximo_control",
            "Formato de fecha próximo control inválido (YYYY-MM-DD)",
            errors,
        )
        _check_time(
            hora_proximo, "hora_proximo_control", "Formato de hora próximo control inválido (HH:MM)", errors
        )
        _check_date(fecha_venc, "fecha_venc_producto", "Formato de fecha de vencimiento inválido (YYYY-MM-DD)", errors)

        _check_control_date(control, today, errors)
        if control is not None and proximo is not None and proximo <= control:
            errors.add(
                "fecha_proximo_control",
                "La fecha próximo control debe ser posterior a la fecha de control",
            )

        budget_item_id = None
        if data.get("budget_item_id") not in (None, ""):
            budget_item_id = parse_int(data.get("budget_item_id"))
            if budget_item_id is None:
                errors.add("budget_item_id", "ID del item de presupuesto debe ser un número")

        if errors:
            return Err(tuple(errors.messages))

        optional = {name: clean_text(data.get(name)) or None for name in TEXT_FIELDS + PHOTO_FIELDS}
        return Ok(
            cls(
                id_paciente=patient_id,
                fecha_control=fecha_control,
                hora_control=hora_control,
                nombre_servicio=nombre_servicio,
                fecha_proximo_control=fecha_proximo,
                hora_proximo_control=hora_proximo,
                fecha_venc_producto=fecha_venc,
                budget_item_id=budget_item_id,
                **optional,
            )
        )

    def as_record(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class UpdateTreatmentDto:
    fecha_control: Optional[str] = None
    hora_control: Optional[str] = None
    fecha_proximo_control: Optional[str] = None
    hora_proximo_control: Optional[str] = None
    nombre_servicio: Optional[str] = None
    producto: Optional[str] = None
    lote_producto: Optional[str] = None
    fecha_venc_producto: Optional[str] = None
    dilucion: Optional[str] = None
    foto1: Optional[str] = None
    foto2: Optional[str] = None
    descripcion: Optional[str] = None
    present: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, data: Mapping[str, Any], today: Optional[date] = None) -> Result[UpdateTreatmentDto]:
        errors = FieldErrors()
        values: Dict[str, Optional[str]] = {}

        if "fecha_control" in data:
            values["fecha_control"] = clean_text(data["fecha_control"])
            if not values["fecha_control"]:
                errors.add("fecha_control", "Fecha de control no puede estar vacía")
            control = _check_date(
                values["fecha_control"],
                "fecha_control",
                "Formato de fecha de control inválido (YYYY-MM-DD)",
                errors,
            )
            _check_control_date(control, today or date.today(), errors)

        if "hora_control" in data:
            hora = clean_text(data["hora_control"])
            if not hora:
                errors.add("hora_control", "Hora de control no puede estar vacía")
            else:
                hora = normalize_time(hora)
                _check_time(hora, "hora_control", "Formato de hora de control inválido (HH:MM)", errors)
            values["hora_control"] = hora

        if "nombre_servicio" in data:
            values["nombre_servicio"] = clean_text(data["nombre_servicio"])
            if not values["nombre_servicio"]:
                errors.add("nombre_servicio", "Nombre del servicio no puede estar vacío")

        if "fecha_proximo_control" in data:
            values["fecha_proximo_control"] = clean_text(data["fecha_proximo_control"]) or None
            _check_date(
                values["fecha_proximo_control"],
                "fecha_proximo_control",
                "Formato de fecha próximo control inválido (YYYY-MM-DD)",
                errors,
            )

        if "hora_proximo_control" in data:
            hora_proximo = clean_text(data["hora_proximo_control"]) or None
            if hora_proximo:
                hora_proximo = normalize_time(hora_proximo)
                _check_time(
                    hora_proximo,
                    "hora_proximo_control",
                    "Formato de hora próximo control inválido (HH:MM)",
                    errors,
                )
            values["hora_proximo_control"] = hora_proximo

        if "fecha_venc_producto" in data:
            values["fecha_venc_producto"] = clean_text(data["fecha_venc_producto"]) or None
            _check_date(
                values["fecha_venc_producto"],
                "fecha_venc_producto",
                "Formato de fecha de vencimiento inválido (YYYY-MM-DD)",
                errors,
            )

        if errors:
            return Err(tuple(errors.messages))

        # un string vacío en las fotos significa borrar la imagen
        for name in TEXT_FIELDS + PHOTO_FIELDS:
            if name in data:
                values[name] = clean_text(data[name]) or None
        return Ok(cls(**values, present=frozenset(values)))

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present)}
