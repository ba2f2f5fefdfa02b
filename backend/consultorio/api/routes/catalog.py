from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ...domain.dtos import LocationDto, ServiceDto
from ...domain.result import unwrap
from ...schemas import LocationEnvelope, LocationList, MessageOut, ServiceEnvelope, ServiceList
from ..dependencies import Services, get_current_user, get_services, read_body

locations_router = APIRouter(prefix="/locations", tags=["locations"])
services_router = APIRouter(prefix="/services", tags=["services"])


@locations_router.get("", response_model=LocationList)
def list_locations(user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"locations": services.locations.list(user["id"])}


@locations_router.post("", response_model=LocationEnvelope, status_code=status.HTTP_201_CREATED)
def create_location(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    location = services.locations.create(unwrap(LocationDto.create(body)), user["id"])
    return {"message": "Ubicación creada exitosamente", "location": location}


@locations_router.get("/{location_id}", response_model=LocationEnvelope)
def get_location(location_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"location": services.locations.get(location_id, user["id"])}


@locations_router.put("/{location_id}", response_model=LocationEnvelope)
def update_location(
    location_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    location = services.locations.update(location_id, unwrap(LocationDto.create(body, partial=True)), user["id"])
    return {"message": "Ubicación actualizada exitosamente", "location": location}


@locations_router.delete("/{location_id}", response_model=MessageOut)
def delete_location(location_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    services.locations.delete(location_id, user["id"])
    return {"message": "Ubicación eliminada exitosamente"}


@services_router.get("", response_model=ServiceList)
def list_services(user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"services": services.catalog.list(user["id"])}


@services_router.post("", response_model=ServiceEnvelope, status_code=status.HTTP_201_CREATED)
def create_service(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    service = services.catalog.create(unwrap(ServiceDto.create(body)), user["id"])
    return {"message": "Servicio creado exitosamente", "service": service}


@services_router.get("/{service_id}", response_model=ServiceEnvelope)
def get_service(service_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    return {"service": services.catalog.get(service_id, user["id"])}


@services_router.put("/{service_id}", response_model=ServiceEnvelope)
def update_service(
    service_id: int,
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    service = services.catalog.update(service_id, unwrap(ServiceDto.create(body, partial=True)), user["id"])
    return {"message": "Servicio actualizado exitosamente", "service": service}


@services_router.delete("/{service_id}", response_model=MessageOut)
def delete_service(service_id: int, user=Depends(get_current_user), services: Services = Depends(get_services)):
    services.catalog.delete(service_id, user["id"])
    return {"message": "Servicio eliminado exitosamente"}
