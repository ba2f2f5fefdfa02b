import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl

from fastapi import Depends, Header, Request

from ..config import Settings
from ..db import Database
from ..domain.exceptions import AuthenticationError, ValidationError
from ..security import JwtAdapter
from ..services import (
    AppointmentService,
    AuditService,
    BudgetService,
    CatalogService,
    LocationService,
    NotificationService,
    PatientService,
    PrescriptionService,
    TreatmentService,
    UserService,
)

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Colaboradores de la aplicación, construidos una vez por `create_app`."""

    settings: Settings
    db: Database
    jwt: JwtAdapter
    audit: AuditService
    users: UserService
    patients: PatientService
    budgets: BudgetService
    treatments: TreatmentService
    prescriptions: PrescriptionService
    notifications: NotificationService
    appointments: AppointmentService
    locations: LocationService
    catalog: CatalogService

    @classmethod
    def build(cls, settings: Settings) -> "Services":
        db = Database(settings.database_path)
        jwt = JwtAdapter(settings.jwt_seed, settings.jwt_expires_hours)
        audit = AuditService(db)
        notifications = NotificationService(db)
        return cls(
            settings=settings,
            db=db,
            jwt=jwt,
            audit=audit,
            users=UserService(db, jwt, settings.frontend_url, settings.demo_trial_days),
            patients=PatientService(db, audit),
            budgets=BudgetService(db, audit),
            treatments=TreatmentService(db, audit),
            prescriptions=PrescriptionService(db, audit),
            notifications=notifications,
            appointments=AppointmentService(db, audit, notifications, settings.frontend_url),
            locations=LocationService(db),
            catalog=CatalogService(db),
        )


def get_services(request: Request) -> Services:
    return request.app.state.services


async def read_body(request: Request) -> Dict[str, Any]:
    """JSON primero, formulario URL-encoded como respaldo, `{}` si no hay cuerpo."""
    raw = await request.body()
    if not raw or not raw.strip():
        return {}
    text = raw.decode("utf-8", errors="replace")
    try:
        data = json.loads(text)
    except ValueError:
        return dict(parse_qsl(text, keep_blank_values=True))
    if not isinstance(data, dict):
        raise ValidationError(["El cuerpo de la petición debe ser un objeto JSON"])
    return data


def get_current_user(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    if not authorization:
        raise AuthenticationError("No token provided")
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid Bearer token")

    payload = services.jwt.validate_token(authorization.split(" ", 1)[1].strip())
    if not payload or "id" not in payload:
        raise AuthenticationError("Invalid token")

    user = services.users.find_by_id(payload["id"])
    if not user:
        logger.warning("Token válido para usuario inexistente %s", payload["id"])
        raise AuthenticationError("Invalid token - User not found")
    return user
