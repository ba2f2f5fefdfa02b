import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..db import Database, now_iso
from ..domain.dtos import (
    DemoUserDto,
    LoginUserDto,
    RegisterUserDto,
    ResetPasswordDto,
    UpdatePasswordDto,
    UpdateProfileDto,
)
from ..domain.exceptions import ConflictError, DomainError, NotFoundError, PermissionDeniedError
from ..security import JwtAdapter, hash_password, new_token, verify_password
from .base import wraps_db_errors

logger = logging.getLogger(__name__)

PRIVATE_FIELDS = ("password", "token")


def public_user(row: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in row.items() if k not in PRIVATE_FIELDS}


class UserService:
    """Registro, autenticación y perfil del profesional."""

    def __init__(self, db: Database, jwt: JwtAdapter, frontend_url: str, demo_trial_days: int = 15) -> None:
        self.db = db
        self.jwt = jwt
        self.frontend_url = frontend_url.rstrip("/")
        self.demo_trial_days = demo_trial_days

    def _by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.db.fetch_one("SELECT * FROM users WHERE email = ?", (email.lower().strip(),))

    def _by_token(self, token: str) -> Dict[str, Any]:
        user = self.db.fetch_one("SELECT * FROM users WHERE token = ?", (token,)) if token else None
        if not user:
            raise NotFoundError("Token no válido")
        return user

    def find_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        user = self.db.fetch_one("SELECT * FROM users WHERE id = ? AND isActive = 1", (user_id,))
        return public_user(user) if user else None

    @wraps_db_errors("Error al registrar el usuario")
    def register(self, dto: RegisterUserDto) -> Dict[str, Any]:
        if self._by_email(dto.email):
            raise ConflictError("Usuario ya registrado")
        token = new_token()
        user_id = self.db.insert(
            "users",
            {
                "rut": dto.rut,
                "name": dto.name,
                "lastName": dto.lastName,
                "username": dto.email,
                "email": dto.email,
                "password": hash_password(dto.password),
                "token": token,
                "phone": dto.phone,
                "createdAt": now_iso(),
            },
        )
        # sin proveedor de correo: el enlace queda en el log
        logger.info("Enlace de confirmación para %s: %s/auth/confirmar/%s", dto.email, self.frontend_url, token)
        return self.find_by_id(user_id)

    @wraps_db_errors("Error al crear el usuario demo")
    def create_demo(self, dto: DemoUserDto) -> Dict[str, Any]:
        if self._by_email(dto.email):
            raise ConflictError("Usuario ya registrado")
        password = dto.password or new_token()[:10]
        trial_days = dto.trialDays or self.demo_trial_days
        expiration = (datetime.now() + timedelta(days=trial_days)).isoformat(timespec="seconds")
        user_id = self.db.insert(
            "users",
            {
                "name": dto.name,
                "lastName": dto.lastName,
                "username": dto.email,
                "email": dto.email,
                "emailValidated": 1,
                "password": hash_password(password),
                "expirationDate": expiration,
                "createdAt": now_iso(),
            },
        )
        result = {"user": self.find_by_id(user_id), "trialDays": trial_days}
        if not dto.password:
            result["password"] = password
        return result

    @wraps_db_errors("Error al iniciar sesión")
    def login(self, dto: LoginUserDto) -> Dict[str, Any]:
        user = self._by_email(dto.email)
        if not user or not user["isActive"]:
            raise DomainError("El usuario no existe")
        if not user["emailValidated"]:
            raise PermissionDeniedError("Tu cuenta no ha sido confirmada")
        if user["expirationDate"] and datetime.now() > datetime.fromisoformat(user["expirationDate"]):
            raise PermissionDeniedError("Tu cuenta de prueba ha expirado", code="ACCOUNT_EXPIRED")
        if not verify_password(dto.password, user["password"]):
            raise DomainError("El password es incorrecto")

        token = self.jwt.generate_token(
            {
                "id": user["id"],
                "email": user["email"],
                "name": user["name"] or "Dr./Dra.",
                "rut": user["rut"] or "",
            }
        )
        return {"user": public_user(user), "token": token}

    @wraps_db_errors("Error al confirmar la cuenta")
    def validate_email(self, token: str) -> None:
        user = self._by_token(token)
        self.db.update(
            "users",
            {"emailValidated": 1, "token": None, "updatedAt": now_iso()},
            "id = ?",
            (user["id"],),
        )

    @wraps_db_errors("Error al solicitar el cambio de password")
    def reset_password(self, dto: ResetPasswordDto) -> None:
        user = self._by_email(dto.email)
        if not user:
            raise NotFoundError("El usuario no existe")
        token = new_token()
        self.db.update("users", {"token": token, "updatedAt": now_iso()}, "id = ?", (user["id"],))
        logger.info("Enlace de cambio de password para %s: %s/auth/olvide-password/%s", dto.email, self.frontend_url, token)

    @wraps_db_errors("Error al verificar el token")
    def check_token(self, token: str) -> None:
        self._by_token(token)

    @wraps_db_errors("Error al cambiar el password")
    def change_password(self, token: str, new_password: str) -> None:
        user = self._by_token(token)
        self.db.update(
            "users",
            {"password": hash_password(new_password), "token": None, "updatedAt": now_iso()},
            "id = ?",
            (user["id"],),
        )

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = self.find_by_id(user_id)
        if not user:
            raise NotFoundError("Usuario no encontrado")
        return user

    @wraps_db_errors("Error al actualizar el perfil")
    def update_profile(self, user_id: int, dto: UpdateProfileDto) -> Dict[str, Any]:
        changes = dto.changes()
        if changes.get("email"):
            other = self._by_email(changes["email"])
            if other and other["id"] != user_id:
                raise ConflictError("El email ya está en uso")
            changes["username"] = changes["email"]
        if changes:
            changes["updatedAt"] = now_iso()
            self.db.update("users", changes, "id = ?", (user_id,))
        return self.get_profile(user_id)

    @wraps_db_errors("Error al actualizar el password")
    def update_password(self, user_id: int, dto: UpdatePasswordDto) -> None:
        user = self.db.fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        if not user:
            raise NotFoundError("Usuario no encontrado")
        if not verify_password(dto.currentPassword, user["password"]):
            raise DomainError("El password actual es incorrecto")
        self.db.update(
            "users",
            {"password": hash_password(dto.newPassword), "updatedAt": now_iso()},
            "id = ?",
            (user_id,),
        )
