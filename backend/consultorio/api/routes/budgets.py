from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...domain.dtos import SaveBudgetDto, UpdateBudgetStatusDto
from ...domain.result import unwrap
from ...schemas import BudgetEnvelope, BudgetList, BudgetStatsEnvelope, MessageOut
from ..dependencies import Services, get_current_user, get_services, read_body

router = APIRouter(prefix="/budgets", tags=["budgets"])


@router.get("/stats", response_model=BudgetStatsEnvelope)
def budget_stats(user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"stats": services.budgets.stats(user["id"])}


@router.get("/patient/{patient_id}", response_model=BudgetEnvelope)
def current_budget(patient_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"budget": services.budgets.current(patient_id, user["id"])}


@router.get("/patient/{patient_id}/all", response_model=BudgetList)
def all_budgets(patient_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"budgets": services.budgets.all_for_patient(patient_id, user["id"])}


@router.post("/patient/{patient_id}", response_model=BudgetEnvelope)
def save_budget(
    patient_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(SaveBudgetDto.create(dict(body, patientId=body.get("patientId") or patient_id)))
    return {"message": "Presupuesto guardado exitosamente", "budget": services.budgets.save(dto, user["id"])}


@router.put("/items/{item_id}/complete", response_model=BudgetEnvelope)
def complete_budget_item(item_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    budget = services.budgets.complete_item(item_id, user["id"])
    return {"message": "Item completado exitosamente", "budget": budget}


@router.get("/{budget_id}", response_model=BudgetEnvelope)
def get_budget(budget_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"budget": services.budgets.get(budget_id, user["id"])}


@router.put("/{budget_id}/status", response_model=BudgetEnvelope)
def update_budget_status(
    budget_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(UpdateBudgetStatusDto.create(body))
    budget = services.budgets.update_status(budget_id, dto.status, user["id"])
    return {"message": "Estado del presupuesto actualizado exitosamente", "budget": budget}


@router.delete("/{budget_id}", response_model=MessageOut)
def delete_budget(budget_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    services.budgets.delete(budget_id, user["id"])
    return {"message": "Presupuesto eliminado exitosamente"}
