from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..enums import BudgetStatus, BudgetType
from ..fields import FieldErrors, clean_text, parse_int, parse_number
from ..result import Err, Ok, Result

logger = logging.getLogger(__name__)

BUDGET_TYPES = tuple(t.value for t in BudgetType)
STATUS_CHOICES = (BudgetStatus.BORRADOR.value, BudgetStatus.ACTIVO.value, BudgetStatus.COMPLETED.value)


@dataclass(frozen=True)
class BudgetItemDto:
    accion: str
    valor: float
    orden: int
    pieza: Optional[str] = None
    id: Optional[int] = None

    def as_record(self) -> Dict[str, Any]:
        return {"pieza": self.pieza, "accion": self.accion, "valor": self.valor, "orden": self.orden}


def _validate_item(position: int, item: Any, errors: FieldErrors) -> Optional[BudgetItemDto]:
    key = f"items[{position}]"
    prefix = f"Item {position + 1}"
    if not isinstance(item, Mapping):
        errors.add(key, f"{prefix}: debe ser un objeto")
        return None

    accion = clean_text(item.get("accion"))
    if not accion:
        errors.add(key, f"{prefix}: Acción/tratamiento es requerido")
        return None

    valor = parse_number(item.get("valor"))
    if valor is None:
        errors.add(key, f"{prefix}: Valor debe ser un número válido")
        return None
    if valor <= 0:
        errors.add(key, f"{prefix}: Valor debe ser mayor a 0")
        return None

    raw_id = item.get("id")
    if raw_id is not None and parse_number(raw_id) is None:
        errors.add(key, f"{prefix}: ID debe ser un número")
        return None

    pieza = item.get("pieza")
    if pieza not in (None, "") and not isinstance(pieza, str):
        errors.add(key, f"{prefix}: Pieza debe ser texto")
        return None

    raw_orden = item.get("orden")
    orden = position
    if raw_orden is not None:
        parsed_orden = parse_int(raw_orden)
        if parsed_orden is None:
            errors.add(key, f"{prefix}: Orden debe ser un número")
            return None
        orden = parsed_orden

    item_id = parse_int(raw_id) if raw_id is not None else None
    return BudgetItemDto(
        accion=accion,
        valor=valor,
        orden=orden,
        pieza=clean_text(pieza) or None,
        # ids <= 0 llegan desde el editor para filas nuevas
        id=item_id if item_id and item_id > 0 else None,
    )


def _parse_items(raw: Any) -> Tuple[Optional[List[Any]], Optional[str]]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None, "Items debe ser un JSON válido"
    if not isinstance(raw, list):
        return None, "Items debe ser un array"
    if not raw:
        return None, "Debe incluir al menos un item en el presupuesto"
    return raw, None


@dataclass(frozen=True)
class SaveBudgetDto:
    patientId: int
    budgetType: str
    items: Tuple[BudgetItemDto, ...]

    @property
    def total(self) -> float:
        return sum(item.valor for item in self.items)

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[SaveBudgetDto]:
        errors = FieldErrors()

        raw_patient = data.get("patientId")
        patient_id = None
        if raw_patient in (None, "", 0):
            errors.add("patientId", "ID del paciente es requerido")
        else:
            patient_id = parse_int(raw_patient)
            if patient_id is None:
                errors.add("patientId", "ID del paciente debe ser un número")

        budget_type = clean_text(data.get("budgetType"))
        if not budget_type:
            errors.add("budgetType", "Tipo de presupuesto es requerido")
        elif budget_type not in BUDGET_TYPES:
            errors.add("budgetType", "Tipo de presupuesto debe ser 'odontologico' o 'estetica'")

        items: List[BudgetItemDto] = []
        raw_items, items_error = _parse_items(data.get("items"))
        if items_error:
            errors.add("items", items_error)
        else:
            for position, raw_item in enumerate(raw_items):
                item = _validate_item(position, raw_item, errors)
                if item is not None:
                    items.append(item)

        if errors:
            return Err(tuple(errors.messages))
        logger.debug("Presupuesto validado con %d items", len(items))
        return Ok(cls(patientId=patient_id, budgetType=budget_type, items=tuple(items)))


@dataclass(frozen=True)
class UpdateBudgetStatusDto:
    status: str

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[UpdateBudgetStatusDto]:
        status = clean_text(data.get("status"))
        if not status:
            return Err(("Estado es requerido",))
        if status not in STATUS_CHOICES:
            return Err((f"Estado debe ser uno de: {', '.join(STATUS_CHOICES)}",))
        return Ok(cls(status=status))
