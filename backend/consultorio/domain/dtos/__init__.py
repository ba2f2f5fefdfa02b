from .appointment import (
    AvailabilityQueryDto,
    CreateAppointmentDto,
    UpdateAppointmentDto,
    UpdateAppointmentStatusDto,
)
from .auth import (
    ChangePasswordDto,
    DemoUserDto,
    LoginUserDto,
    RegisterUserDto,
    ResetPasswordDto,
    UpdatePasswordDto,
    UpdateProfileDto,
)
from .budget import BudgetItemDto, SaveBudgetDto, UpdateBudgetStatusDto
from .catalog import LocationDto, ServiceDto
from .patient import CreatePatientDto, UpdatePatientDto
from .prescription import SavePrescriptionDto
from .treatment import CreateTreatmentDto, UpdateTreatmentDto

__all__ = [
    "AvailabilityQueryDto",
    "BudgetItemDto",
    "ChangePasswordDto",
    "CreateAppointmentDto",
    "CreatePatientDto",
    "CreateTreatmentDto",
    "DemoUserDto",
    "LocationDto",
    "LoginUserDto",
    "RegisterUserDto",
    "ResetPasswordDto",
    "SaveBudgetDto",
    "SavePrescriptionDto",
    "ServiceDto",
    "UpdateAppointmentDto",
    "UpdateAppointmentStatusDto",
    "UpdateBudgetStatusDto",
    "UpdatePasswordDto",
    "UpdatePatientDto",
    "UpdateProfileDto",
    "UpdateTreatmentDto",
]
