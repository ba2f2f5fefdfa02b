from typing import Any, Dict, List

from ..adapter import HttpAdapter
from .base import use_case_errors


async def get_prescriptions_by_patient_use_case(fetcher: HttpAdapter, patient_id: int) -> List[Dict[str, Any]]:
    with use_case_errors("Error al obtener las recetas"):
        response = await fetcher.get(f"/prescriptions/patient/{patient_id}")
        return response["prescriptions"]


async def save_prescription_use_case(fetcher: HttpAdapter, patient_id: int, medications: str) -> Dict[str, Any]:
    with use_case_errors("Error al guardar la receta"):
        response = await fetcher.post("/prescriptions", {"patientId": patient_id, "medications": medications})
        return response["prescription"]


async def delete_prescription_use_case(fetcher: HttpAdapter, prescription_id: int) -> str:
    with use_case_errors("Error al eliminar la receta"):
        response = await fetcher.delete(f"/prescriptions/{prescription_id}")
        return response["message"]
