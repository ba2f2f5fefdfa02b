from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .domain.enums import (
    AppointmentStatus,
    AppointmentType,
    BudgetStatus,
    BudgetType,
    NotificationType,
    TreatmentStatus,
)


class MessageOut(BaseModel):
    message: str


class UserOut(BaseModel):
    id: int
    rut: Optional[str] = None
    name: str
    lastName: str
    username: str
    email: str
    emailValidated: bool
    phone: Optional[str] = None
    address: Optional[str] = None
    zipCode: Optional[str] = None
    city: Optional[str] = None
    img: Optional[str] = None
    signature: Optional[str] = None
    expirationDate: Optional[str] = None
    createdAt: str
    updatedAt: Optional[str] = None
    isActive: bool

    model_config = ConfigDict(from_attributes=True)


class UserEnvelope(BaseModel):
    message: Optional[str] = None
    user: UserOut


class LoginResponse(BaseModel):
    user: UserOut
    token: str


class DemoUserOut(BaseModel):
    message: str
    user: UserOut
    trialDays: int
    password: Optional[str] = None


class PatientOut(BaseModel):
    id: int
    rut: str
    nombres: str
    apellidos: str
    fecha_nacimiento: str
    telefono: str
    email: str
    direccion: str
    ciudad: str
    codigo_postal: Optional[str] = None
    alergias: Optional[str] = None
    medicamentos_actuales: Optional[str] = None
    enfermedades_cronicas: Optional[str] = None
    cirugias_previas: Optional[str] = None
    hospitalizaciones_previas: Optional[str] = None
    notas_medicas: Optional[str] = None
    id_doctor: int
    createdat: str
    updatedat: Optional[str] = None
    isactive: bool


class PatientEnvelope(BaseModel):
    message: Optional[str] = None
    patient: PatientOut


class PatientList(BaseModel):
    patients: List[PatientOut]
    total: int
    searchTerm: Optional[str] = None


class BudgetItemOut(BaseModel):
    id: int
    budget_id: int
    pieza: Optional[str] = None
    accion: str
    valor: float
    orden: int
    status: TreatmentStatus
    created_at: str


class BudgetOut(BaseModel):
    id: int
    patient_id: int
    user_id: int
    total_amount: float
    status: BudgetStatus
    budget_type: BudgetType
    created_at: str
    updated_at: Optional[str] = None
    items: List[BudgetItemOut] = []


class BudgetEnvelope(BaseModel):
    message: Optional[str] = None
    budget: Optional[BudgetOut] = None


class BudgetList(BaseModel):
    budgets: List[BudgetOut]


class BudgetStats(BaseModel):
    total_budgets: int
    drafts: int
    active: int
    completed: int
    total_amount: float


class BudgetStatsEnvelope(BaseModel):
    stats: BudgetStats


class TreatmentOut(BaseModel):
    id_tratamiento: int
    id_paciente: int
    id_doctor: int
    fecha_control: str
    hora_control: str
    fecha_proximo_control: Optional[str] = None
    hora_proximo_control: Optional[str] = None
    nombre_servicio: str
    producto: Optional[str] = None
    lote_producto: Optional[str] = None
    fecha_venc_producto: Optional[str] = None
    dilucion: Optional[str] = None
    foto1: Optional[str] = None
    foto2: Optional[str] = None
    descripcion: Optional[str] = None
    budget_item_id: Optional[int] = None
    status: TreatmentStatus
    created_at: str
    updated_at: Optional[str] = None
    is_active: bool


class TreatmentEnvelope(BaseModel):
    message: Optional[str] = None
    treatment: TreatmentOut


class TreatmentList(BaseModel):
    treatments: List[TreatmentOut]


class PrescriptionOut(BaseModel):
    id: int
    patient_id: int
    user_id: int
    medications: str
    created_at: str
    updated_at: Optional[str] = None


class PrescriptionEnvelope(BaseModel):
    message: Optional[str] = None
    prescription: PrescriptionOut


class PrescriptionList(BaseModel):
    prescriptions: List[PrescriptionOut]


class AppointmentOut(BaseModel):
    id: int
    doctor_id: int
    patient_id: Optional[int] = None
    patientName: str
    patientEmail: Optional[str] = None
    patientPhone: Optional[str] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    guest_rut: Optional[str] = None
    title: str
    description: Optional[str] = None
    appointment_date: str
    duration: int
    status: AppointmentStatus
    type: AppointmentType
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    confirmed_at: Optional[str] = None
    reminder_sent: bool
    created_at: str
    updated_at: Optional[str] = None


class AppointmentEnvelope(BaseModel):
    message: Optional[str] = None
    appointment: AppointmentOut


class AppointmentList(BaseModel):
    appointments: List[AppointmentOut]


class ConflictingAppointment(BaseModel):
    id: int
    title: str
    appointmentDate: str
    duration: int
    patientName: str
    status: str


class AvailabilityOut(BaseModel):
    available: bool
    conflictingAppointments: List[ConflictingAppointment]


class PublicAppointment(BaseModel):
    id: int
    title: str
    appointmentDate: str
    status: AppointmentStatus
    confirmedAt: Optional[str] = None


class PublicAppointmentEnvelope(BaseModel):
    message: str
    appointment: PublicAppointment


class NotificationOut(BaseModel):
    id: int
    type: NotificationType
    doctor_id: int
    appointment_id: Optional[int] = None
    title: str
    message: str
    patient_name: Optional[str] = None
    appointment_date: Optional[str] = None
    is_read: bool
    read_at: Optional[str] = None
    created_at: str
    updated_at: str


class NotificationList(BaseModel):
    notifications: List[NotificationOut]
    unreadCount: int


class UnreadCount(BaseModel):
    count: int


class LocationOut(BaseModel):
    id: int
    user_id: int
    name: str
    address: str
    city: str
    google_calendar_id: Optional[str] = None
    is_active: bool
    created_at: str
    updated_at: Optional[str] = None


class LocationEnvelope(BaseModel):
    message: Optional[str] = None
    location: LocationOut


class LocationList(BaseModel):
    locations: List[LocationOut]


class ServiceOut(BaseModel):
    id: int
    user_id: int
    nombre: str
    tipo: BudgetType
    valor: float
    is_active: bool
    created_at: str
    updated_at: Optional[str] = None


class ServiceEnvelope(BaseModel):
    message: Optional[str] = None
    service: ServiceOut


class ServiceList(BaseModel):
    services: List[ServiceOut]


class AuditLogOut(BaseModel):
    id: int
    patient_id: int
    entity_type: str
    entity_id: int
    action: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    changed_by: int
    notes: Optional[str] = None
    created_at: str


class AuditHistory(BaseModel):
    logs: List[AuditLogOut]
    total: int
