from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ..fields import EMAIL_RE, FieldErrors, clean_text, parse_int
from ..result import Err, Ok, Result
from ..rut import is_valid_rut_format

MIN_PASSWORD_LENGTH = 6


def _check_email(value: Optional[str], errors: FieldErrors) -> None:
    if not value:
        errors.add("email", "Email es requerido")
    elif not EMAIL_RE.match(value):
        errors.add("email", "Email no es válido")


def _check_new_password(value: Any, key: str, errors: FieldErrors) -> Optional[str]:
    if not isinstance(value, str) or not value:
        errors.add(key, "Password es requerido")
        return None
    if len(value) < MIN_PASSWORD_LENGTH:
        errors.add(key, f"Password debe tener al menos {MIN_PASSWORD_LENGTH} caracteres")
        return None
    return value


@dataclass(frozen=True)
class RegisterUserDto:
    name: str
    lastName: str
    email: str
    password: str
    rut: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[RegisterUserDto]:
        errors = FieldErrors()
        name = clean_text(data.get("name"))
        last_name = clean_text(data.get("lastName"))
        email = clean_text(data.get("email"))
        rut = clean_text(data.get("rut")) or None
        if not name:
            errors.add("name", "Nombre es requerido")
        if not last_name:
            errors.add("lastName", "Apellido es requerido")
        _check_email(email, errors)
        password = _check_new_password(data.get("password"), "password", errors)
        if rut and not is_valid_rut_format(rut):
            errors.add("rut", "Formato de RUT inválido (ej: 12345678-9)")
        if errors:
            return Err(tuple(errors.messages))
        return Ok(
            cls(
                name=name,
                lastName=last_name,
                email=email.lower(),
                password=password,
                rut=rut,
                phone=clean_text(data.get("phone")) or None,
            )
        )


@dataclass(frozen=True)
class DemoUserDto:
    name: str
    lastName: str
    email: str
    password: Optional[str] = None
    trialDays: Optional[int] = None

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[DemoUserDto]:
        errors = FieldErrors()
        email = clean_text(data.get("email"))
        name = clean_text(data.get("name"))
        last_name = clean_text(data.get("lastName"))
        _check_email(email, errors)
        if not name:
            errors.add("name", "Nombre es requerido")
        if not last_name:
            errors.add("lastName", "Apellido es requerido")
        password = None
        if data.get("password") not in (None, ""):
            password = _check_new_password(data.get("password"), "password", errors)
        trial_days = None
        if data.get("trialDays") not in (None, ""):
            trial_days = parse_int(data.get("trialDays"))
            if trial_days is None or trial_days <= 0:
                errors.add("trialDays", "Días de prueba debe ser un número mayor a 0")
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(name=name, lastName=last_name, email=email.lower(), password=password, trialDays=trial_days))


@dataclass(frozen=True)
class LoginUserDto:
    email: str
    password: str

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[LoginUserDto]:
        errors = FieldErrors()
        email = clean_text(data.get("email"))
        password = data.get("password")
        _check_email(email, errors)
        if not isinstance(password, str) or not password:
            errors.add("password", "Password es requerido")
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(email=email.lower(), password=password))


@dataclass(frozen=True)
class ResetPasswordDto:
    email: str

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[ResetPasswordDto]:
        errors = FieldErrors()
        email = clean_text(data.get("email"))
        _check_email(email, errors)
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(email=email.lower()))


@dataclass(frozen=True)
class ChangePasswordDto:
    newPassword: str

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[ChangePasswordDto]:
        errors = FieldErrors()
        password = _check_new_password(data.get("newPassword"), "newPassword", errors)
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(newPassword=password))


@dataclass(frozen=True)
class UpdatePasswordDto:
    currentPassword: str
    newPassword: str

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[UpdatePasswordDto]:
        errors = FieldErrors()
        current = data.get("currentPassword")
        if not isinstance(current, str) or not current:
            errors.add("currentPassword", "Password actual es requerido")
        new = _check_new_password(data.get("newPassword"), "newPassword", errors)
        if new is not None and new == current:
            errors.add("newPassword", "El nuevo password debe ser distinto al actual")
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(currentPassword=current, newPassword=new))


@dataclass(frozen=True)
class UpdateProfileDto:
    name: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    rut: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    zipCode: Optional[str] = None
    city: Optional[str] = None
    present: FrozenSet[str] = field(default_factory=frozenset, repr=False)

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> Result[UpdateProfileDto]:
        errors = FieldErrors()
        values: Dict[str, Optional[str]] = {}
        for name, message in (("name", "Nombre no puede estar vacío"), ("lastName", "Apellido no puede estar vacío")):
            if name in data:
                values[name] = clean_text(data[name])
                if not values[name]:
                    errors.add(name, message)
        if "email" in data:
            values["email"] = clean_text(data["email"])
            _check_email(values["email"], errors)
            if values["email"]:
                values["email"] = values["email"].lower()
        if "rut" in data:
            values["rut"] = clean_text(data["rut"]) or None
            if values["rut"] and not is_valid_rut_format(values["rut"]):
                errors.add("rut", "Formato de RUT inválido (ej: 12345678-9)")
        for name in ("phone", "address", "zipCode", "city"):
            if name in data:
                values[name] = clean_text(data[name]) or None
        if errors:
            return Err(tuple(errors.messages))
        return Ok(cls(**values, present=frozenset(values)))

    def changes(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in sorted(self.present)}
