from typing import Any, Dict, List

from ..db import Database, now_iso
from ..domain.dtos import LocationDto, ServiceDto
from ..domain.exceptions import NotFoundError
from .base import wraps_db_errors


class _OwnedCatalog:
    """CRUD con borrado lógico para tablas que pertenecen a un usuario."""

    table = ""
    order_by = "id"
    not_found = "Registro no encontrado"

    def __init__(self, db: Database) -> None:
        self.db = db

    def _list(self, user_id: int) -> List[Dict[str, Any]]:
        return self.db.fetch_all(
            f"SELECT * FROM {self.table} WHERE user_id = ? AND is_active = 1 ORDER BY {self.order_by}",
            (user_id,),
        )

    def _get(self, row_id: int, user_id: int) -> Dict[str, Any]:
        row = self.db.fetch_one(
            f"SELECT * FROM {self.table} WHERE id = ? AND user_id = ? AND is_active = 1", (row_id, user_id)
        )
        if not row:
            raise NotFoundError(self.not_found)
        return row

    def _create(self, values: Dict[str, Any], user_id: int) -> Dict[str, Any]:
        row_id = self.db.insert(self.table, dict(values, user_id=user_id, created_at=now_iso()))
        return self._get(row_id, user_id)

    def _update(self, row_id: int, values: Dict[str, Any], user_id: int) -> Dict[str, Any]:
        self._get(row_id, user_id)
        if values:
            self.db.update(self.table, dict(values, updated_at=now_iso()), "id = ?", (row_id,))
        return self._get(row_id, user_id)

    def _delete(self, row_id: int, user_id: int) -> None:
        self._get(row_id, user_id)
        self.db.update(self.table, {"is_active": 0, "updated_at": now_iso()}, "id = ?", (row_id,))


class LocationService(_OwnedCatalog):
    table = "locations"
    order_by = "name"
    not_found = "Ubicación no encontrada"

    @wraps_db_errors("Error al obtener las ubicaciones")
    def list(self, user_id: int) -> List[Dict[str, Any]]:
        return self._list(user_id)

    @wraps_db_errors("Error al obtener la ubicación")
    def get(self, location_id: int, user_id: int) -> Dict[str, Any]:
        return self._get(location_id, user_id)

    @wraps_db_errors("Error al crear la ubicación")
    def create(self, dto: LocationDto, user_id: int) -> Dict[str, Any]:
        return self._create(dto.changes(), user_id)

    @wraps_db_errors("Error al actualizar la ubicación")
    def update(self, location_id: int, dto: LocationDto, user_id: int) -> Dict[str, Any]:
        return self._update(location_id, dto.changes(), user_id)

    @wraps_db_errors("Error al eliminar la ubicación")
    def delete(self, location_id: int, user_id: int) -> None:
        self._delete(location_id, user_id)


class CatalogService(_OwnedCatalog):
    """Servicios ofrecidos por el profesional, con su valor de lista."""

    table = "services"
    order_by = "tipo, nombre"
    not_found = "Servicio no encontrado"

    @wraps_db_errors("Error al obtener los servicios")
    def list(self, user_id: int) -> List[Dict[str, Any]]:
        return self._list(user_id)

    @wraps_db_errors("Error al obtener el servicio")
    def get(self, service_id: int, user_id: int) -> Dict[str, Any]:
        return self._get(service_id, user_id)

    @wraps_db_errors("Error al crear el servicio")
    def create(self, dto: ServiceDto, user_id: int) -> Dict[str, Any]:
        return self._create(dto.changes(), user_id)

    @wraps_db_errors("Error al actualizar el servicio")
    def update(self, service_id: int, dto: ServiceDto, user_id: int) -> Dict[str, Any]:
        return self._update(service_id, dto.changes(), user_id)

    @wraps_db_errors("Error al eliminar el servicio")
    def delete(self, service_id: int, user_id: int) -> None:
        self._delete(service_id, user_id)
