from typing import Iterable, Optional, Tuple


class DomainError(Exception):
    """Error genérico de dominio; se responde como 400 salvo que la subclase indique otro código."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Datos de entrada inválidos. Conserva todas las violaciones encontradas."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: Tuple[str, ...] = tuple(errors) or ("Datos inválidos",)
        super().__init__(self.errors[0])


class ConflictError(DomainError):
    """La operación choca con el estado actual (duplicados, horario ocupado, estado no editable)."""


class NotFoundError(DomainError):
    status_code = 404


class AuthenticationError(DomainError):
    status_code = 401


class PermissionDeniedError(DomainError):
    status_code = 403

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code


class ServiceError(DomainError):
    """Fallo inesperado (base de datos, transporte) envuelto con un mensaje de dominio."""

    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause

    @property
    def detail(self) -> Optional[str]:
        return str(self.cause) if self.cause else None
