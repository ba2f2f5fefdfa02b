from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ...domain.dtos import CreatePatientDto, UpdatePatientDto
from ...domain.result import unwrap
from ...schemas import AuditHistory, MessageOut, PatientEnvelope, PatientList
from ..dependencies import Services, get_current_user, get_services, read_body

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=PatientList)
def list_patients(
    search: Optional[str] = Query(default=None),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    return services.patients.list(user["id"], search)


@router.post("", response_model=PatientEnvelope, status_code=status.HTTP_201_CREATED)
def create_patient(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(CreatePatientDto.create(body, verify_check_digit=services.settings.rut_verify_check_digit))
    return {"message": "Paciente creado exitosamente", "patient": services.patients.create(dto, user["id"])}


@router.get("/{patient_id}", response_model=PatientEnvelope)
def get_patient(patient_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"patient": services.patients.get(patient_id, user["id"])}


@router.put("/{patient_id}", response_model=PatientEnvelope)
def update_patient(
    patient_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(UpdatePatientDto.create(body, verify_check_digit=services.settings.rut_verify_check_digit))
    patient = services.patients.update(patient_id, dto, user["id"])
    return {"message": "Paciente actualizado exitosamente", "patient": patient}


@router.delete("/{patient_id}", response_model=MessageOut)
def delete_patient(patient_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    services.patients.delete(patient_id, user["id"])
    return {"message": "Paciente eliminado exitosamente"}


@router.get("/{patient_id}/history", response_model=AuditHistory)
def patient_history(
    patient_id: int,
    entity_type: Optional[str] = Query(default=None, alias="entityType"),
    limit: int = Query(default=100, ge=1, le=500),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    logs = services.audit.patient_history(patient_id, user["id"], entity_type, limit)
    return {"logs": logs, "total": len(logs)}
