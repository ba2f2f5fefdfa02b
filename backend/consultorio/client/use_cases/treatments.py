from typing import Any, Dict, List, Mapping

from ..adapter import HttpAdapter
from .base import use_case_errors


async def get_treatments_use_case(fetcher: HttpAdapter, patient_id: int) -> List[Dict[str, Any]]:
    with use_case_errors("Error al obtener los tratamientos"):
        response = await fetcher.get(f"/treatments/patient/{patient_id}")
        return response["treatments"]


async def get_treatment_by_id_use_case(fetcher: HttpAdapter, treatment_id: int) -> Dict[str, Any]:
    with use_case_errors("Error al obtener el tratamiento"):
        response = await fetcher.get(f"/treatments/{treatment_id}")
        return response["treatment"]


async def create_treatment_use_case(fetcher: HttpAdapter, data: Mapping[str, Any]) -> Dict[str, Any]:
    with use_case_errors("Error al crear el tratamiento"):
        response = await fetcher.post("/treatments", data)
        return response["treatment"]


async def update_treatment_use_case(
    fetcher: HttpAdapter, treatment_id: int, changes: Mapping[str, Any]
) -> Dict[str, Any]:
    with use_case_errors("Error al actualizar el tratamiento"):
        response = await fetcher.put(f"/treatments/{treatment_id}", changes)
        return response["treatment"]


async def complete_treatment_use_case(fetcher: HttpAdapter, treatment_id: int) -> Dict[str, Any]:
    with use_case_errors("Error al completar el tratamiento"):
        response = await fetcher.put(f"/treatments/{treatment_id}/complete")
        return response["treatment"]


async def delete_treatment_use_case(fetcher: HttpAdapter, treatment_id: int) -> str:
    with use_case_errors("Error al eliminar el tratamiento"):
        response = await fetcher.delete(f"/treatments/{treatment_id}")
        return response["message"]
