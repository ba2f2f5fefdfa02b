from contextlib import contextmanager
from typing import Iterator, Optional

from ..adapter import HttpAdapterError


class UseCaseError(Exception):
    """Falla de un caso de uso: mensaje de dominio más el detalle que devolvió el servidor."""

    def __init__(
        self, message: str, cause: Optional[HttpAdapterError] = None, detail: Optional[str] = None
    ) -> None:
        self.message = message
        self.detail = cause.message if cause else detail
        self.status_code = cause.status_code if cause else None
        super().__init__(f"{message}: {self.detail}" if self.detail else message)


@contextmanager
def use_case_errors(message: str) -> Iterator[None]:
    try:
        yield
    except HttpAdapterError as err:
        raise UseCaseError(message, err) from err
    except (KeyError, TypeError) as err:
        raise UseCaseError(message, detail="Respuesta inesperada del servidor") from err
