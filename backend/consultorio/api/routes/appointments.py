from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status

from ...domain.dtos import (
    AvailabilityQueryDto,
    CreateAppointmentDto,
    UpdateAppointmentDto,
    UpdateAppointmentStatusDto,
)
from ...domain.exceptions import ValidationError
from ...domain.fields import parse_datetime
from ...domain.result import unwrap
from ...schemas import (
    AppointmentEnvelope,
    AppointmentList,
    AvailabilityOut,
    MessageOut,
    PublicAppointmentEnvelope,
)
from ..dependencies import Services, get_current_user, get_services, read_body

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _range_bound(value: Optional[str], name: str):
    if value in (None, ""):
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValidationError([f"{name} inválida"])
    return parsed


@router.get("", response_model=AppointmentList)
def list_appointments(
    start: Optional[str] = Query(default=None),
    end: Optional[str] = Query(default=None),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    appointments = services.appointments.list(
        user["id"], _range_bound(start, "start"), _range_bound(end, "end")
    )
    return {"appointments": appointments}


@router.get("/availability", response_model=AvailabilityOut)
def check_availability(
    date: Optional[str] = Query(default=None),
    duration: Optional[str] = Query(default=None),
    exclude_id: Optional[str] = Query(default=None, alias="excludeId"),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    query = unwrap(AvailabilityQueryDto.create({"date": date, "duration": duration, "excludeId": exclude_id}))
    return services.appointments.check_availability(user["id"], query)


@router.get("/confirm/{token}", response_model=PublicAppointmentEnvelope)
def confirm_appointment(token: str, services: Services = Depends(get_services)):
    return services.appointments.confirm_by_token(token)


@router.api_route("/cancel/{token}", methods=["GET", "POST"], response_model=PublicAppointmentEnvelope)
def cancel_appointment(
    token: str,
    body: Dict[str, Any] = Depends(read_body),
    reason: Optional[str] = Query(default=None),
    services: Services = Depends(get_services),
):
    return services.appointments.cancel_by_token(token, body.get("reason") or reason)


@router.post("", response_model=AppointmentEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    appointment = services.appointments.create(unwrap(CreateAppointmentDto.create(body)), user["id"])
    return {"message": "Cita creada exitosamente", "appointment": appointment}


@router.get("/{appointment_id}", response_model=AppointmentEnvelope)
def get_appointment(appointment_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"appointment": services.appointments.get(appointment_id, user["id"])}


@router.put("/{appointment_id}", response_model=AppointmentEnvelope)
def update_appointment(
    appointment_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(UpdateAppointmentDto.create(body))
    appointment = services.appointments.update(appointment_id, dto, user["id"])
    return {"message": "Cita actualizada exitosamente", "appointment": appointment}


@router.put("/{appointment_id}/status", response_model=AppointmentEnvelope)
def update_appointment_status(
    appointment_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    dto = unwrap(UpdateAppointmentStatusDto.create(body))
    appointment = services.appointments.update_status(appointment_id, dto, user["id"])
    return {"message": "Estado de la cita actualizado exitosamente", "appointment": appointment}


@router.delete("/{appointment_id}", response_model=MessageOut)
def delete_appointment(
    appointment_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)
):
    services.appointments.delete(appointment_id, user["id"])
    return {"message": "Cita eliminada exitosamente"}
