from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ...domain.dtos import CreateTreatmentDto, SavePrescriptionDto, UpdateTreatmentDto
from ...domain.result import unwrap
from ...schemas import (
    MessageOut,
    PrescriptionEnvelope,
    PrescriptionList,
    TreatmentEnvelope,
    TreatmentList,
)
from ..dependencies import Services, get_current_user, get_services, read_body

router = APIRouter(prefix="/treatments", tags=["treatments"])
prescriptions_router = APIRouter(prefix="/prescriptions", tags=["prescriptions"])


@router.get("/patient/{patient_id}", response_model=TreatmentList)
def list_treatments(patient_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"treatments": services.treatments.list_for_patient(patient_id, user["id"])}


@router.post("", response_model=TreatmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_treatment(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    treatment = services.treatments.create(unwrap(CreateTreatmentDto.create(body)), user["id"])
    return {"message": "Tratamiento creado exitosamente", "treatment": treatment}


@router.get("/{treatment_id}", response_model=TreatmentEnvelope)
def get_treatment(treatment_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"treatment": services.treatments.get(treatment_id, user["id"])}


@router.put("/{treatment_id}", response_model=TreatmentEnvelope)
def update_treatment(
    treatment_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(UpdateTreatmentDto.create(body))
    treatment = services.treatments.update(treatment_id, dto, user["id"])
    return {"message": "Tratamiento actualizado exitosamente", "treatment": treatment}


@router.put("/{treatment_id}/complete", response_model=TreatmentEnvelope)
def complete_treatment(treatment_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    treatment = services.treatments.complete(treatment_id, user["id"])
    return {"message": "Tratamiento completado exitosamente", "treatment": treatment}


@router.delete("/{treatment_id}", response_model=MessageOut)
def delete_treatment(treatment_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    services.treatments.delete(treatment_id, user["id"])
    return {"message": "Tratamiento eliminado exitosamente"}


@prescriptions_router.get("/patient/{patient_id}", response_model=PrescriptionList)
def list_prescriptions(patient_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"prescriptions": services.prescriptions.list_for_patient(patient_id, user["id"])}


@prescriptions_router.post("", response_model=PrescriptionEnvelope, status_code=status.HTTP_201_CREATED)
def create_prescription(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    prescription = services.prescriptions.create(unwrap(SavePrescriptionDto.create(body)), user["id"])
    return {"message": "Receta guardada exitosamente", "prescription": prescription}


@prescriptions_router.delete("/{prescription_id}", response_model=MessageOut)
def delete_prescription(
    prescription_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)
):
    services.prescriptions.delete(prescription_id, user["id"])
    return {"message": "Receta eliminada exitosamente"}
