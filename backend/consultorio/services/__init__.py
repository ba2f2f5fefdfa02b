from .appointments import AppointmentService
from .audit import AuditService
from .budgets import BudgetService
from .catalog import CatalogService, LocationService
from .notifications import NotificationService
from .patients import PatientService
from .prescriptions import PrescriptionService
from .treatments import TreatmentService
from .users import UserService

__all__ = [
    "AppointmentService",
    "AuditService",
    "BudgetService",
    "CatalogService",
    "LocationService",
    "NotificationService",
    "PatientService",
    "PrescriptionService",
    "TreatmentService",
    "UserService",
]
