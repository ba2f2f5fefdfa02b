from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..enums import BudgetType
from ..fields import FieldErrors, clean_text, parse_number
from ..result import Err, Ok, Result

SERVICE_TYPES = tuple(t.value for t in BudgetType)


@dataclass(frozen=True)
class LocationDto:
    """Sucursal o lugar de atención. Con `partial=True` ningún campo es obligatorio."""

    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    google_calendar_id: Optional[str] = None
    present: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, data: Mapping[str, Any], partial: bool = False) -> Result[LocationDto]:
        errors = FieldErrors()
        values: Dict[str, Optional[str]] = {}
        for name, message in (
            ("name", "El nombre es requerido"),
            ("address", "La dirección es requerida"),
            ("city", "La ciudad es requerida"),
        ):
            if partial and name not in data:
                continue
            values[name] = clean_text(data.get(name))
            if not values[name]:
                errors.add(name, message)
        if "google_calendar_id" in data:
            values["google_calendar_id"] = clean_text(data["google_calendar_id"]) or None
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(**values, present=frozenset(values)))

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present)}


@dataclass(frozen=True)
class ServiceDto:
    """Servicio ofrecido (prestación con su valor de lista)."""

    nombre: Optional[str] = None
    tipo: Optional[str] = None
    valor: Optional[float] = None
    present: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, data: Mapping[str, Any], partial: bool = False) -> Result[ServiceDto]:
        errors = FieldErrors()
        values: Dict[str, Any] = {}

        if not partial or "nombre" in data:
            values["nombre"] = clean_text(data.get("nombre"))
            if not values["nombre"]:
                errors.add("nombre", "El nombre del servicio es requerido")

        if not partial or "tipo" in data:
            values["tipo"] = clean_text(data.get("tipo"))
            if not values["tipo"]:
                errors.add("tipo", "El tipo de servicio es requerido")
            elif values["tipo"] not in SERVICE_TYPES:
                errors.add("tipo", "Tipo de servicio debe ser 'odontologico' o 'estetica'")

        if not partial or "valor" in data:
            values["valor"] = parse_number(data.get("valor"))
            if values["valor"] is None:
                errors.add("valor", "Valor debe ser un número válido")
            elif values["valor"] <= 0:
                errors.add("valor", "Valor debe ser mayor a 0")

        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(**values, present=frozenset(values)))

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present)}
