from typing import Any, Dict, List, Mapping, Optional

from ..adapter import HttpAdapter
from .base import use_case_errors


async def get_appointments_use_case(
    fetcher: HttpAdapter, start: Optional[str] = None, end: Optional[str] = None
) -> List[Dict[str, Any]]:
    with use_case_errors("Error al obtener las citas"):
        response = await fetcher.get("/appointments", {"start": start, "end": end})
        return response["appointments"]


async def get_appointment_by_id_use_case(fetcher: HttpAdapter, appointment_id: int) -> Dict[str, Any]:
    with use_case_errors("Error al obtener la cita"):
        response = await fetcher.get(f"/appointments/{appointment_id}")
        return response["appointment"]


async def create_appointment_use_case(fetcher: HttpAdapter, data: Mapping[str, Any]) -> Dict[str, Any]:
    with use_case_errors("Error al crear la cita"):
        response = await fetcher.post("/appointments", data)
        return response["appointment"]


async def update_appointment_use_case(
    fetcher: HttpAdapter, appointment_id: int, changes: Mapping[str, Any]
) -> Dict[str, Any]:
    with use_case_errors("Error al actualizar la cita"):
        response = await fetcher.put(f"/appointments/{appointment_id}", changes)
        return response["appointment"]


async def update_appointment_status_use_case(
    fetcher: HttpAdapter,
    appointment_id: int,
    status: str,
    cancellation_reason: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": status}
    if cancellation_reason:
        body["cancellationReason"] = cancellation_reason
    with use_case_errors("Error al actualizar el estado de la cita"):
        response = await fetcher.put(f"/appointments/{appointment_id}/status", body)
        return response["appointment"]


async def delete_appointment_use_case(fetcher: HttpAdapter, appointment_id: int) -> str:
    with use_case_errors("Error al eliminar la cita"):
        response = await fetcher.delete(f"/appointments/{appointment_id}")
        return response["message"]


async def check_availability_use_case(
    fetcher: HttpAdapter,
    date: str,
    duration: Optional[int] = None,
    exclude_id: Optional[int] = None,
) -> Dict[str, Any]:
    """`{"available": bool, "conflictingAppointments": [...]}` para el intervalo pedido."""
    params = {"date": date, "duration": duration or None, "excludeId": exclude_id or None}
    with use_case_errors("Error al verificar disponibilidad"):
        return await fetcher.get("/appointments/availability", params)
