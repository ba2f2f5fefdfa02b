import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..adapter import HttpAdapter
from .base import use_case_errors


async def get_budget_by_patient_use_case(fetcher: HttpAdapter, patient_id: int) -> Optional[Dict[str, Any]]:
    with use_case_errors("Error al obtener el presupuesto"):
        response = await fetcher.get(f"/budgets/patient/{patient_id}")
        return response["budget"]


async def get_all_budgets_by_patient_use_case(fetcher: HttpAdapter, patient_id: int) -> List[Dict[str, Any]]:
    with use_case_errors("Error al obtener los presupuestos"):
        response = await fetcher.get(f"/budgets/patient/{patient_id}/all")
        return response["budgets"]


async def save_budget_use_case(
    fetcher: HttpAdapter,
    patient_id: int,
    budget_type: str,
    items: Sequence[Mapping[str, Any]],
) -> Dict[str, Any]:
    # los items viajan como string JSON, igual que desde el formulario web
    body = {"budgetType": budget_type, "items": json.dumps(list(items))}
    with use_case_errors("Error guardando presupuesto"):
        response = await fetcher.post(f"/budgets/patient/{patient_id}", body)
        return response["budget"]


async def update_budget_status_use_case(fetcher: HttpAdapter, budget_id: int, status: str) -> Dict[str, Any]:
    with use_case_errors("Error al actualizar el estado del presupuesto"):
        response = await fetcher.put(f"/budgets/{budget_id}/status", {"status": status})
        return response["budget"]


async def activate_budget_use_case(fetcher: HttpAdapter, budget_id: int) -> Dict[str, Any]:
    return await update_budget_status_use_case(fetcher, budget_id, "activo")


async def complete_budget_use_case(fetcher: HttpAdapter, budget_id: int) -> Dict[str, Any]:
    return await update_budget_status_use_case(fetcher, budget_id, "completed")


async def revert_budget_use_case(fetcher: HttpAdapter, budget_id: int) -> Dict[str, Any]:
    return await update_budget_status_use_case(fetcher, budget_id, "borrador")


async def complete_budget_item_use_case(fetcher: HttpAdapter, item_id: int) -> Dict[str, Any]:
    """Devuelve el presupuesto con el ítem (y sus sesiones) completado."""
    with use_case_errors("Error al completar el item del presupuesto"):
        response = await fetcher.put(f"/budgets/items/{item_id}/complete")
        return response["budget"]


async def delete_budget_use_case(fetcher: HttpAdapter, budget_id: int) -> str:
    with use_case_errors("Error al eliminar el presupuesto"):
        response = await fetcher.delete(f"/budgets/{budget_id}")
        return response["message"]


async def get_budget_stats_use_case(fetcher: HttpAdapter) -> Dict[str, Any]:
    with use_case_errors("Error al obtener estadísticas de presupuestos"):
        response = await fetcher.get("/budgets/stats")
        return response["stats"]
