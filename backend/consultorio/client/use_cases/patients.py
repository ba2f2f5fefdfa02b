from typing import Any, Dict, Mapping, Optional

from ..adapter import HttpAdapter
from .base import use_case_errors


async def get_patients_use_case(fetcher: HttpAdapter, search: Optional[str] = None) -> Dict[str, Any]:
    with use_case_errors("Error al obtener los pacientes"):
        return await fetcher.get("/patients", {"search": search})


async def get_patient_by_id_use_case(fetcher: HttpAdapter, patient_id: int) -> Dict[str, Any]:
    with use_case_errors("Error al obtener el paciente"):
        response = await fetcher.get(f"/patients/{patient_id}")
        return response["patient"]


async def create_patient_use_case(fetcher: HttpAdapter, data: Mapping[str, Any]) -> Dict[str, Any]:
    with use_case_errors("Error al crear el paciente"):
        response = await fetcher.post("/patients", data)
        return response["patient"]


async def update_patient_use_case(
    fetcher: HttpAdapter, patient_id: int, changes: Mapping[str, Any]
) -> Dict[str, Any]:
    with use_case_errors("Error al actualizar el paciente"):
        response = await fetcher.put(f"/patients/{patient_id}", changes)
        return response["patient"]


async def delete_patient_use_case(fetcher: HttpAdapter, patient_id: int) -> str:
    with use_case_errors("Error al eliminar el paciente"):
        response = await fetcher.delete(f"/patients/{patient_id}")
        return response["message"]


async def get_patient_history_use_case(
    fetcher: HttpAdapter, patient_id: int, entity_type: Optional[str] = None
) -> Dict[str, Any]:
    with use_case_errors("Error al obtener el historial del paciente"):
        return await fetcher.get(f"/patients/{patient_id}/history", {"entityType": entity_type})
