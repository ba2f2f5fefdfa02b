from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..fields import DATE_RE, EMAIL_RE, FieldErrors, clean_text, parse_iso_date
from ..result import Err, Ok, Result
from ..rut import has_valid_check_digit, is_valid_rut_format

REQUIRED_FIELDS = (
    ("rut", "RUT es requerido", "RUT no puede estar vacío"),
    ("nombres", "Nombres es requerido", "Nombres no puede estar vacío"),
    ("apellidos", "Apellidos es requerido", "Apellidos no puede estar vacío"),
    ("fecha_nacimiento", "Fecha de nacimiento es requerida", "Fecha de nacimiento no puede estar vacía"),
    ("telefono", "Teléfono es requerido", "Teléfono no puede estar vacío"),
    ("email", "Email es requerido", "Email no puede estar vacío"),
    ("direccion", "Dirección es requerida", "Dirección no puede estar vacía"),
    ("ciudad", "Ciudad es requerida", "Ciudad no puede estar vacía"),
)

OPTIONAL_FIELDS = (
    "codigo_postal",
    "alergias",
    "medicamentos_actuales",
    "enfermedades_cronicas",
    "cirugias_previas",
    "hospitalizaciones_previas",
    "notas_medicas",
)


def _check_formats(
    values: Dict[str, Optional[str]],
    errors: FieldErrors,
    today: date,
    verify_check_digit: bool,
) -> None:
    rut = values.get("rut")
    if rut and not errors.has("rut"):
        if not is_valid_rut_format(rut):
            errors.add("rut", "Formato de RUT inválido (ej: 12345678-9)")
        elif verify_check_digit and not has_valid_check_digit(rut):
            errors.add("rut", "El dígito verificador del RUT no es válido")

    email = values.get("email")
    if email and not errors.has("email") and not EMAIL_RE.match(email):
        errors.add("email", "Email no es válido")

    birth = values.get("fecha_nacimiento")
    if birth and not errors.has("fecha_nacimiento"):
        parsed = parse_iso_date(birth) if DATE_RE.match(birth) else None
        if parsed is None:
            errors.add("fecha_nacimiento", "Formato de fecha inválido (YYYY-MM-DD)")
        elif parsed > today:
            errors.add("fecha_nacimiento", "La fecha de nacimiento no puede ser futura")


@dataclass(frozen=True)
class CreatePatientDto:
    rut: str
    nombres: str
    apellidos: str
    fecha_nacimiento: str
    telefono: str
    email: str
    direccion: str
    ciudad: str
    codigo_postal: Optional[str] = None
    alergias: Optional[str] = None
    medicamentos_actuales: Optional[str] = None
    enfermedades_cronicas: Optional[str] = None
    cirugias_previas: Optional[str] = None
    hospitalizaciones_previas: Optional[str] = None
    notas_medicas: Optional[str] = None

    @classmethod
    def create(
        cls,
        data: Mapping[str, Any],
        today: Optional[date] = None,
        verify_check_digit: bool = False,
    ) -> Result[CreatePatientDto]:
        errors = FieldErrors()
        values: Dict[str, Optional[str]] = {}
        for name, missing_message, _ in REQUIRED_FIELDS:
            values[name] = clean_text(data.get(name))
            if not values[name]:
                errors.add(name, missing_message)

        _check_formats(values, errors, today or date.today(), verify_check_digit)
        if errors:
            return Err(tuple(errors.messages))

        optional = {name: clean_text(data.get(name)) or None for name in OPTIONAL_FIELDS}
        values["email"] = values["email"].lower()
        return Ok(cls(**values, **optional))

    def as_record(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class UpdatePatientDto:
    """Actualización parcial: solo se validan y aplican los campos presentes."""

    rut: Optional[str] = None
    nombres: Optional[str] = None
    apellidos: Optional[str] = None
    fecha_nacimiento: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    direccion: Optional[str] = None
    ciudad: Optional[str] = None
    codigo_postal: Optional[str] = None
    alergias: Optional[str] = None
    medicamentos_actuales: Optional[str] = None
    enfermedades_cronicas: Optional[str] = None
    cirugias_previas: Optional[str] = None
    hospitalizaciones_previas: Optional[str] = None
    notas_medicas: Optional[str] = None
    present: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(
        cls,
        data: Mapping[str, Any],
        today: Optional[date] = None,
        verify_check_digit: bool = False,
    ) -> Result[UpdatePatientDto]:
        errors = FieldErrors()
        values: Dict[str, Optional[str]] = {}
        for name, _, blank_message in REQUIRED_FIELDS:
            if name not in data:
                continue
            values[name] = clean_text(data[name])
            if not values[name]:
                errors.add(name, blank_message)

        _check_formats(values, errors, today or date.today(), verify_check_digit)
        if errors:
            return Err(tuple(errors.messages))

        for name in OPTIONAL_FIELDS:
            if name in data:
                values[name] = clean_text(data[name]) or None
        if values.get("email"):
            values["email"] = values["email"].lower()
        return Ok(cls(**values, present=frozenset(values)))

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present)}

    @property
    def is_empty(self) -> bool:
        return not self.present
