import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.exceptions import DomainError, PermissionDeniedError, ServiceError, ValidationError
from .cors import cors_headers, request_origin

logger = logging.getLogger(__name__)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Traduce la jerarquía de errores de dominio a respuestas `{"message", ...}`."""
    content: Dict[str, Any] = {"message": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = list(exc.errors)
    elif isinstance(exc, PermissionDeniedError) and exc.code:
        content["code"] = exc.code
    elif isinstance(exc, ServiceError):
        content["error"] = exc.detail
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=content)


def _field_message(error: Dict[str, Any]) -> str:
    name = error["loc"][-1] if error.get("loc") else "request"
    return f"Parámetro '{name}' inválido"


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Parámetros de ruta o query mal formados: 400 con la misma forma que los errores de dominio."""
    errors = []
    for error in exc.errors():
        message = _field_message(error)
        if message not in errors:
            errors.append(message)
    logger.info("%s %s -> 400: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=400, content={"message": errors[0], "errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # corre fuera del middleware CORS, así que agrega las cabeceras aquí
    logger.exception("Error no controlado en %s %s", request.method, request.url.path)
    headers = cors_headers(request_origin(request), request.app.state.services.settings.allowed_origins)
    return JSONResponse(
        status_code=500,
        content={"message": "Error interno del servidor", "error": str(exc)},
        headers=headers,
    )
