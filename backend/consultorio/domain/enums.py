from enum import Enum


class BudgetType(str, Enum):
    ODONTOLOGICO = "odontologico"
    ESTETICA = "estetica"


class BudgetStatus(str, Enum):
    PENDIENTE = "pendiente"
    BORRADOR = "borrador"
    ACTIVO = "activo"
    COMPLETED = "completed"


class TreatmentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"
    COMPLETED = "completed"


class AppointmentType(str, Enum):
    CONSULTATION = "consultation"
    TREATMENT = "treatment"
    FOLLOW_UP = "follow-up"
    EMERGENCY = "emergency"


class NotificationType(str, Enum):
    APPOINTMENT_CONFIRMED = "appointment_confirmed"
    APPOINTMENT_CANCELLED = "appointment_cancelled"


class AuditEntityType(str, Enum):
    PACIENTE = "paciente"
    PRESUPUESTO = "presupuesto"
    TRATAMIENTO = "tratamiento"
    CITA = "cita"
    RECETA = "receta"


class AuditAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"


# Presupuestos que todavía admiten cambios de ítems.
EDITABLE_BUDGET_STATUSES = (BudgetStatus.PENDIENTE, BudgetStatus.BORRADOR)
