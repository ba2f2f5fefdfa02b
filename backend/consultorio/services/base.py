import functools
import logging
import sqlite3
from typing import Any, Callable, TypeVar

from ..domain.exceptions import ServiceError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def wraps_db_errors(message: str) -> Callable[[F], F]:
    """Convierte fallas de SQLite en `ServiceError(message)`; los errores de dominio pasan intactos."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except sqlite3.Error as err:
                logger.exception("%s (%s)", message, func.__qualname__)
                raise ServiceError(message, err) from err

        return wrapper  # type: ignore[return-value]

    return decorator
