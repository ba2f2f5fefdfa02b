"""Capa de dominio del consultorio: enums, errores, reglas de campo y DTOs."""

from .enums import (
    AppointmentStatus,
    AppointmentType,
    AuditAction,
    AuditEntityType,
    BudgetStatus,
    BudgetType,
    NotificationType,
    TreatmentStatus,
)
from .exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ValidationError,
)
from .result import Err, Ok, Result, unwrap
from .rut import format_rut, has_valid_check_digit, is_valid_rut_format, rut_check_digit

__all__ = [
    "AppointmentStatus",
    "AppointmentType",
    "AuditAction",
    "AuditEntityType",
    "BudgetStatus",
    "BudgetType",
    "NotificationType",
    "TreatmentStatus",
    "AuthenticationError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "PermissionDeniedError",
    "ServiceError",
    "ValidationError",
    "Err",
    "Ok",
    "Result",
    "unwrap",
    "format_rut",
    "has_valid_check_digit",
    "is_valid_rut_format",
    "rut_check_digit",
]
